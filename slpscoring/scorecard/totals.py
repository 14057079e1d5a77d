from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

from slpscoring.models import Player, Score

from .store import SessionStore

FRONT_NINE_LAST_HOLE = 9


@dataclass(frozen=True)
class PlayerTotals:
    player_id: str
    front_gross: int = 0
    back_gross: int = 0
    front_net: int = 0
    back_net: int = 0
    holes_played: int = 0

    @property
    def total_gross(self) -> int:
        return self.front_gross + self.back_gross

    @property
    def total_net(self) -> int:
        return self.front_net + self.back_net

    def as_dict(self) -> Dict[str, int | str]:
        return {
            "playerId": self.player_id,
            "frontGross": self.front_gross,
            "backGross": self.back_gross,
            "totalGross": self.total_gross,
            "frontNet": self.front_net,
            "backNet": self.back_net,
            "totalNet": self.total_net,
            "holesPlayed": self.holes_played,
        }


def project_scores(player_id: str, scores: Iterable[Score]) -> PlayerTotals:
    """Front/back sums of gross and net; missing values add nothing."""

    front_gross = back_gross = front_net = back_net = played = 0
    for score in scores:
        if not score.is_entered:
            continue
        gross = score.gross_score or 0
        net = score.net_score or 0
        if score.hole_number <= FRONT_NINE_LAST_HOLE:
            front_gross += gross
            front_net += net
        else:
            back_gross += gross
            back_net += net
        if score.gross_score is not None:
            played += 1
    return PlayerTotals(
        player_id=player_id,
        front_gross=front_gross,
        back_gross=back_gross,
        front_net=front_net,
        back_net=back_net,
        holes_played=played,
    )


def project_player(player: Player) -> PlayerTotals:
    return project_scores(player.player_id, player.scores)


def project_totals(store: SessionStore) -> List[PlayerTotals]:
    """Totals per roster player in roster order; empty unless the session is ready."""

    session = store.session
    if session is None:
        return []
    return [project_player(player) for player in session.players]


class LiveTotals:
    """Keeps a projection of ``store`` current by recomputing on every change."""

    def __init__(self, store: SessionStore):
        self._store = store
        self._totals: Dict[str, PlayerTotals] = {}
        self.recomputed = 0
        store.events.subscribe(self._on_change)
        self._recompute()

    def _on_change(self, _event: Dict[str, Any]) -> None:
        self._recompute()

    def _recompute(self) -> None:
        self._totals = {t.player_id: t for t in project_totals(self._store)}
        self.recomputed += 1

    @property
    def current(self) -> Dict[str, PlayerTotals]:
        return dict(self._totals)

    def for_player(self, player_id: str) -> PlayerTotals | None:
        return self._totals.get(player_id)

    def close(self) -> None:
        self._store.events.unsubscribe(self._on_change)


__all__ = [
    "LiveTotals",
    "PlayerTotals",
    "project_player",
    "project_scores",
    "project_totals",
]
