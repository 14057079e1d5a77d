"""Optimistic score edits reconciled against the scoring backend.

Each (player, hole) cell moves ``COMMITTED -> PENDING -> COMMITTED`` on success
or ``PENDING -> ROLLED_BACK -> COMMITTED`` on failure. Edits to different cells
run concurrently with no locking. Edits to the same cell are ordered by
submission: every edit gets a sequence number and a response is applied only
if no newer edit of that cell has already been applied, so a slow early
request can never overwrite a faster later one.

Net scores are never computed here. A pending cell shows no net score until the
server answers with a fresh one.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set, Union

from slpscoring.gateway import GatewayError, NotFound, ScoringGateway
from slpscoring.models import Junk, Score

from .errors import DeleteFailure, InvalidScoreInput, SubmitFailure
from .store import CellKey, CellState, CellView, SessionStore

_logger = logging.getLogger(__name__)

GrossInput = Union[str, int, None]


def parse_gross(value: GrossInput) -> Optional[int]:
    """Turn raw cell input into a gross score; ``None`` means the cell was cleared."""

    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidScoreInput(f"not a score: {value!r}")
    if isinstance(value, int):
        gross = value
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            gross = int(text)
        except ValueError:
            raise InvalidScoreInput(f"not a score: {value!r}") from None
    if gross < 1:
        raise InvalidScoreInput(f"gross score must be positive, got {gross}")
    return gross


@dataclass
class _Ledger:
    generation: int
    issued: int = 0
    settled: int = 0
    open: Dict[int, asyncio.Event] = field(default_factory=dict)
    deletes: Set[int] = field(default_factory=set)
    # What the newest edit shows until it settles; None for a clear.
    latest: Optional[Score] = None


class ScoreEditReconciler:
    def __init__(self, store: SessionStore, gateway: ScoringGateway):
        self._store = store
        self._gateway = gateway
        self._ledgers: Dict[CellKey, _Ledger] = {}
        self._generation = store.generation
        store.events.subscribe(self._on_session_event)

    async def enter_gross(
        self, player_id: str, hole_number: int, value: GrossInput
    ) -> Optional[CellView]:
        gross = parse_gross(value)
        current = self._store.cell(player_id, hole_number)
        key = (player_id, hole_number)
        ledger = self._ledger(key)
        if gross is None:
            return await self._clear(key, ledger)
        junks = list(current.score.junks) if current.score else []
        return await self._submit(key, ledger, gross, junks)

    async def set_junks(
        self, player_id: str, hole_number: int, junk_ids: Iterable[str]
    ) -> Optional[CellView]:
        session = self._store.require_session()
        current = self._store.cell(player_id, hole_number)
        junks: List[Junk] = []
        for junk_id in dict.fromkeys(str(j) for j in junk_ids):
            junk = session.junk(junk_id)
            if junk is None:
                raise InvalidScoreInput(f"unknown junk {junk_id!r}")
            junks.append(junk)
        if current.gross_score is None:
            raise InvalidScoreInput(
                f"hole {hole_number} needs a gross score before junks can be saved"
            )
        key = (player_id, hole_number)
        return await self._submit(key, self._ledger(key), current.gross_score, junks)

    def _ledger(self, key: CellKey) -> _Ledger:
        if self._generation != self._store.generation:
            self._ledgers = {}
            self._generation = self._store.generation
        ledger = self._ledgers.get(key)
        if ledger is None:
            ledger = self._ledgers[key] = _Ledger(generation=self._generation)
        return ledger

    def _issue(self, ledger: _Ledger, *, delete: bool = False) -> int:
        ledger.issued += 1
        seq = ledger.issued
        ledger.open[seq] = asyncio.Event()
        if delete:
            ledger.deletes.add(seq)
        return seq

    def _is_current(self, key: CellKey, ledger: _Ledger) -> bool:
        if ledger.generation != self._store.generation:
            return False
        return self._store.has_player(key[0])

    def _on_session_event(self, event: Dict[str, Any]) -> None:
        # A refetched roster resets every mark to the server's copy.
        if event.get("type") != "roster":
            return
        for key, ledger in self._ledgers.items():
            if ledger.open and self._is_current(key, ledger):
                self._reapply(key, ledger)

    def _reapply(self, key: CellKey, ledger: _Ledger) -> None:
        """Put a cell's in-flight edit back on top of a freshly fetched roster."""

        player_id, hole_number = key
        if ledger.issued in ledger.open:
            if ledger.latest is not None:
                self._store.apply_cell_edit(player_id, hole_number, ledger.latest)
            elif self._store.cell(player_id, hole_number).score is not None:
                self._store.remove_cell(player_id, hole_number)
        self._project(key, ledger, None)

    async def _wait_for(self, ledger: _Ledger, seqs: Iterable[int]) -> None:
        for event in [ledger.open[s] for s in sorted(seqs) if s in ledger.open]:
            await event.wait()

    async def _submit(
        self, key: CellKey, ledger: _Ledger, gross: int, junks: List[Junk]
    ) -> Optional[CellView]:
        player_id, hole_number = key
        session = self._store.require_session()
        baseline = self._store.committed_value(player_id, hole_number)
        seq = self._issue(ledger)
        ledger.latest = Score(
            score_id=baseline.score_id if baseline else None,
            hole_number=hole_number,
            gross_score=gross,
            net_score=None,
            junks=junks,
        )
        self._store.apply_cell_edit(player_id, hole_number, ledger.latest)
        self._store.mark_cell(player_id, hole_number, CellState.PENDING)
        try:
            # A submit racing an older delete of the same row could be undone by it.
            await self._wait_for(ledger, [s for s in ledger.deletes if s < seq])
            if ledger.issued == seq and self._is_current(key, ledger):
                await self._send_submit(
                    key, ledger, seq, session.game_id, gross, junks
                )
        finally:
            if seq in ledger.open:
                self._settle(key, ledger, seq)
        return self._view(key)

    async def _send_submit(
        self,
        key: CellKey,
        ledger: _Ledger,
        seq: int,
        game_id: str,
        gross: int,
        junks: List[Junk],
    ) -> None:
        player_id, hole_number = key
        _logger.debug(
            "submit seq=%d player=%s hole=%d gross=%d",
            seq,
            player_id,
            hole_number,
            gross,
        )
        try:
            result = await self._gateway.submit_score(
                game_id=game_id,
                player_id=player_id,
                hole_number=hole_number,
                gross_score=gross,
                junk_ids=[junk.junk_id for junk in junks],
            )
        except (GatewayError, ValueError) as exc:
            failure = SubmitFailure(f"hole {hole_number} was not saved: {exc}")
            self._settle(key, ledger, seq, error=failure)
            return
        committed = Score(
            score_id=result.score_id,
            hole_number=hole_number,
            gross_score=result.gross_score,
            net_score=result.net_score,
            junks=junks,
        )
        self._settle(key, ledger, seq, committed=committed, applied=True)

    async def _clear(self, key: CellKey, ledger: _Ledger) -> Optional[CellView]:
        player_id, hole_number = key
        committed = self._store.committed_value(player_id, hole_number)
        if not ledger.open and (committed is None or committed.score_id is None):
            _logger.debug(
                "clear ignored for player=%s hole=%d: nothing saved",
                player_id,
                hole_number,
            )
            return self._store.cell(player_id, hole_number)

        seq = self._issue(ledger, delete=True)
        ledger.latest = None
        self._store.remove_cell(player_id, hole_number)
        self._store.mark_cell(player_id, hole_number, CellState.PENDING)
        try:
            # Older submits may still be creating the row this delete must target.
            await self._wait_for(ledger, [s for s in ledger.open if s < seq])
            if ledger.issued == seq and self._is_current(key, ledger):
                await self._send_delete(key, ledger, seq)
        finally:
            if seq in ledger.open:
                self._settle(key, ledger, seq)
        return self._view(key)

    async def _send_delete(self, key: CellKey, ledger: _Ledger, seq: int) -> None:
        player_id, hole_number = key
        committed = self._store.committed_value(player_id, hole_number)
        if committed is None or committed.score_id is None:
            self._settle(key, ledger, seq, committed=None, applied=True)
            return
        _logger.debug(
            "delete seq=%d player=%s hole=%d score=%s",
            seq,
            player_id,
            hole_number,
            committed.score_id,
        )
        try:
            await self._gateway.delete_score(committed.score_id)
        except NotFound as exc:
            late = DeleteFailure(f"score {committed.score_id} already removed: {exc}")
            _logger.info("treating delete as done: %s", late)
        except GatewayError as exc:
            failure = SubmitFailure(f"hole {hole_number} was not cleared: {exc}")
            self._settle(key, ledger, seq, error=failure)
            return
        self._settle(key, ledger, seq, committed=None, applied=True)

    def _settle(
        self,
        key: CellKey,
        ledger: _Ledger,
        seq: int,
        *,
        committed: Optional[Score] = None,
        applied: bool = False,
        error: Optional[Exception] = None,
    ) -> None:
        """Close request ``seq`` and fold its outcome into the cell."""

        ledger.open.pop(seq).set()
        ledger.deletes.discard(seq)
        player_id, hole_number = key
        if not self._is_current(key, ledger):
            _logger.info(
                "dropping result seq=%d for player=%s hole=%d: session changed",
                seq,
                player_id,
                hole_number,
            )
            return

        rollback: Optional[str] = None
        if applied:
            if seq <= ledger.settled:
                _logger.warning(
                    "discarding stale result seq=%d for player=%s hole=%d",
                    seq,
                    player_id,
                    hole_number,
                )
            else:
                ledger.settled = seq
                self._store.record_committed(player_id, hole_number, committed)
        elif error is not None:
            if seq == ledger.issued:
                rollback = str(error)
                _logger.warning("rolling back player=%s: %s", player_id, error)
            else:
                _logger.warning("superseded edit seq=%d failed: %s", seq, error)
        self._project(key, ledger, rollback)

    def _project(
        self, key: CellKey, ledger: _Ledger, rollback: Optional[str]
    ) -> None:
        player_id, hole_number = key
        error = rollback or self._store.cell(player_id, hole_number).error
        if ledger.issued in ledger.open:
            self._store.mark_cell(player_id, hole_number, CellState.PENDING, error)
            return

        committed = self._store.committed_value(player_id, hole_number)
        if committed is None:
            if self._store.cell(player_id, hole_number).score is not None:
                self._store.remove_cell(player_id, hole_number)
        else:
            self._store.apply_cell_edit(player_id, hole_number, committed)
        if rollback is not None:
            self._store.mark_cell(
                player_id, hole_number, CellState.ROLLED_BACK, rollback
            )
        still_open = any(s > ledger.settled for s in ledger.open)
        state = CellState.PENDING if still_open else CellState.COMMITTED
        self._store.mark_cell(player_id, hole_number, state, error)

    def _view(self, key: CellKey) -> Optional[CellView]:
        """The cell after an edit settles; ``None`` if it left the session meanwhile."""

        if not self._store.has_player(key[0]):
            return None
        return self._store.cell(*key)


__all__ = ["GrossInput", "ScoreEditReconciler", "parse_gross"]
