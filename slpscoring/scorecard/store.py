"""In-memory scoring session for one scorecard.

The store is a projection of server state: it is populated from the roster
query, mutated cell by cell by the reconciler, swapped wholesale on refresh and
discarded on teardown. Nothing here is persisted.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from slpscoring.gateway import GatewayError, ScoringGateway
from slpscoring.models import Hole, Junk, Player, Score

from .errors import LoadFailure, LoadSuperseded, SessionNotReady, UnknownCell
from .events import SessionEvents

_logger = logging.getLogger(__name__)

CellKey = Tuple[str, int]


class SessionState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    LOAD_ERROR = "load_error"


class CellState(str, Enum):
    COMMITTED = "committed"
    PENDING = "pending"
    ROLLED_BACK = "rolled_back"


@dataclass(frozen=True)
class CellView:
    player_id: str
    hole_number: int
    score: Optional[Score]
    state: CellState
    error: Optional[str] = None

    @property
    def gross_score(self) -> Optional[int]:
        return self.score.gross_score if self.score else None

    @property
    def net_score(self) -> Optional[int]:
        return self.score.net_score if self.score else None


@dataclass
class _CellMark:
    state: CellState = CellState.COMMITTED
    error: Optional[str] = None
    committed: Optional[Score] = None


@dataclass
class Session:
    scorecard_id: str
    game_id: str
    course_id: str
    holes: Tuple[Hole, ...]
    junk_catalog: Tuple[Junk, ...]
    players: List[Player] = field(default_factory=list)
    generation: int = 0

    def player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    def hole(self, hole_number: int) -> Optional[Hole]:
        for hole in self.holes:
            if hole.number == hole_number:
                return hole
        return None

    def junk(self, junk_id: str) -> Optional[Junk]:
        for junk in self.junk_catalog:
            if junk.junk_id == junk_id:
                return junk
        return None


class SessionStore:
    def __init__(
        self, gateway: ScoringGateway, events: Optional[SessionEvents] = None
    ):
        self._gateway = gateway
        self.events = events or SessionEvents()
        self._state = SessionState.IDLE
        self._session: Optional[Session] = None
        self._load_error: Optional[str] = None
        self._marks: Dict[CellKey, _CellMark] = {}
        self._generation = 0
        self._last_ids: Optional[Tuple[str, str, str]] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def load_error(self) -> Optional[str]:
        return self._load_error

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def session(self) -> Optional[Session]:
        """The session, exposed only once every initial fetch has succeeded."""

        if self._state is not SessionState.READY:
            return None
        return self._session

    def require_session(self) -> Session:
        session = self.session
        if session is None:
            raise SessionNotReady(f"session is {self._state.value}")
        return session

    # Lifecycle
    async def load(self, scorecard_id: str, game_id: str, course_id: str) -> Session:
        self._teardown(SessionState.LOADING)
        generation = self._generation
        self._last_ids = (scorecard_id, game_id, course_id)
        _logger.info(
            "loading scorecard=%s game=%s course=%s", scorecard_id, game_id, course_id
        )
        try:
            holes, catalog, players = await asyncio.gather(
                self._gateway.fetch_holes(course_id),
                self._gateway.fetch_junk_catalog(),
                self._gateway.fetch_roster(game_id, scorecard_id),
            )
        except Exception as exc:
            if generation != self._generation:
                raise LoadSuperseded("load superseded by a newer load") from exc
            self._fail_load(exc)
            if isinstance(exc, GatewayError):
                raise LoadFailure(self._load_error) from exc
            raise
        if generation != self._generation:
            raise LoadSuperseded("load superseded by a newer load")

        self._session = Session(
            scorecard_id=scorecard_id,
            game_id=game_id,
            course_id=course_id,
            holes=tuple(holes),
            junk_catalog=tuple(catalog),
            players=list(players),
            generation=generation,
        )
        self._reset_marks(self._session.players)
        self._set_state(SessionState.READY)
        _logger.info(
            "scorecard=%s ready with %d players", scorecard_id, len(players)
        )
        return self._session

    async def refresh(self) -> Session:
        """Re-fetch the roster, or reload everything when the session is not ready."""

        if self._last_ids is None:
            raise SessionNotReady("no session has been loaded")
        session = self.session
        if session is None:
            return await self.load(*self._last_ids)

        generation = self._generation
        try:
            players = await self._gateway.fetch_roster(
                session.game_id, session.scorecard_id
            )
        except Exception as exc:
            if generation != self._generation:
                raise LoadSuperseded("refresh superseded") from exc
            self._fail_load(exc)
            if isinstance(exc, GatewayError):
                raise LoadFailure(self._load_error) from exc
            raise
        if generation != self._generation:
            raise LoadSuperseded("refresh superseded")
        self.replace_roster(players)
        return session

    def close(self) -> None:
        """Discard the session; the server stays the only durable copy."""

        self._teardown(SessionState.IDLE)
        self._last_ids = None

    def _teardown(self, state: SessionState, error: Optional[str] = None) -> None:
        self._generation += 1
        self._session = None
        self._marks = {}
        self._load_error = error
        self._set_state(state)

    def _fail_load(self, exc: Exception) -> None:
        _logger.warning("session load failed: %s", exc)
        self._teardown(SessionState.LOAD_ERROR, str(exc) or exc.__class__.__name__)

    def _set_state(self, state: SessionState) -> None:
        self._state = state
        self.events.publish({"type": "state", "state": state.value})

    # Membership
    async def add_player(self, player_id: str) -> Session:
        session = self.require_session()
        await self._gateway.add_scorecard_player(
            game_id=session.game_id,
            scorecard_id=session.scorecard_id,
            player_id=player_id,
        )
        return await self.refresh()

    async def remove_player(self, player_id: str) -> Session:
        session = self.require_session()
        await self._gateway.remove_scorecard_player(
            game_id=session.game_id,
            scorecard_id=session.scorecard_id,
            player_id=player_id,
        )
        return await self.refresh()

    def replace_roster(self, players: Iterable[Player]) -> None:
        session = self.require_session()
        session.players = list(players)
        self._reset_marks(session.players)
        self.events.publish(
            {"type": "roster", "players": [p.player_id for p in session.players]}
        )

    def _reset_marks(self, players: Iterable[Player]) -> None:
        self._marks = {
            (player.player_id, score.hole_number): _CellMark(committed=score)
            for player in players
            for score in player.scores
            if score.is_entered
        }

    # Cells
    def has_player(self, player_id: str) -> bool:
        session = self.session
        return session is not None and session.player(player_id) is not None

    def _locate(self, player_id: str, hole_number: int) -> Tuple[Session, int]:
        session = self.require_session()
        if session.hole(hole_number) is None:
            raise UnknownCell(player_id, hole_number)
        for index, player in enumerate(session.players):
            if player.player_id == player_id:
                return session, index
        raise UnknownCell(player_id, hole_number)

    def cell(self, player_id: str, hole_number: int) -> CellView:
        session, index = self._locate(player_id, hole_number)
        mark = self._marks.get((player_id, hole_number)) or _CellMark()
        return CellView(
            player_id=player_id,
            hole_number=hole_number,
            score=session.players[index].score_for(hole_number),
            state=mark.state,
            error=mark.error,
        )

    def committed_value(self, player_id: str, hole_number: int) -> Optional[Score]:
        self._locate(player_id, hole_number)
        mark = self._marks.get((player_id, hole_number))
        return mark.committed if mark else None

    def apply_cell_edit(self, player_id: str, hole_number: int, score: Score) -> None:
        if score.hole_number != hole_number:
            raise ValueError(
                f"score for hole {score.hole_number} applied to hole {hole_number}"
            )
        self._replace_scores(player_id, hole_number, score)

    def remove_cell(self, player_id: str, hole_number: int) -> None:
        self._replace_scores(player_id, hole_number, None)

    def _replace_scores(
        self, player_id: str, hole_number: int, score: Optional[Score]
    ) -> None:
        session, index = self._locate(player_id, hole_number)
        player = session.players[index]
        scores = [s for s in player.scores if s.hole_number != hole_number]
        if score is not None:
            scores.append(score)
            scores.sort(key=lambda s: s.hole_number)
        session.players[index] = player.model_copy(update={"scores": scores})
        self.events.publish(
            {"type": "cell", "player_id": player_id, "hole_number": hole_number}
        )

    def record_committed(
        self, player_id: str, hole_number: int, score: Optional[Score]
    ) -> None:
        self._locate(player_id, hole_number)
        self._marks.setdefault((player_id, hole_number), _CellMark()).committed = score

    def mark_cell(
        self,
        player_id: str,
        hole_number: int,
        state: CellState,
        error: Optional[str] = None,
    ) -> None:
        self._locate(player_id, hole_number)
        mark = self._marks.setdefault((player_id, hole_number), _CellMark())
        mark.state = state
        mark.error = error
        self.events.publish(
            {
                "type": "cell_state",
                "player_id": player_id,
                "hole_number": hole_number,
                "state": state.value,
                "error": error,
            }
        )


__all__ = [
    "CellState",
    "CellView",
    "Session",
    "SessionState",
    "SessionStore",
]
