"""Wiring of one scoring screen: gateway, session store, reconciler and totals.

The API serves a single screen. ``get_scoring_runtime`` hands every caller the
same runtime, so opening a session replaces the one any other client had open
and all clients see the same cells. Serving several scorecards at once would
need one runtime per scorecard id.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from slpscoring.config import Settings, get_settings
from slpscoring.context import ScoringContext
from slpscoring.gateway import ScoringGateway
from slpscoring.scorecard import (
    LiveTotals,
    ScoreEditReconciler,
    Session,
    SessionStore,
)

_logger = logging.getLogger(__name__)


class ScoringRuntime:
    def __init__(
        self,
        gateway: Optional[ScoringGateway] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.gateway = gateway or ScoringGateway(self.settings)
        self.store = SessionStore(self.gateway)
        self.reconciler = ScoreEditReconciler(self.store, self.gateway)
        self.totals = LiveTotals(self.store)
        self.context: Optional[ScoringContext] = None

    async def open(self, context: ScoringContext) -> Session:
        """Mount the scoring screen for ``context``; replaces any open session."""

        self.context = context
        _logger.info(
            "opening scorecard=%s for group=%s", context.scorecard_id, context.group_id
        )
        return await self.store.load(
            context.scorecard_id, context.game_id, context.course_id
        )

    def close(self) -> None:
        self.store.close()
        self.context = None


@lru_cache(maxsize=1)
def get_scoring_runtime() -> ScoringRuntime:
    return ScoringRuntime()


__all__ = ["ScoringRuntime", "get_scoring_runtime"]
