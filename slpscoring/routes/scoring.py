from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from slpscoring.context import ScoringContext
from slpscoring.gateway import GatewayError
from slpscoring.models import Hole, Junk, ScorecardSummary, wire_field
from slpscoring.runtime import ScoringRuntime, get_scoring_runtime
from slpscoring.scorecard import (
    CellView,
    InvalidScoreInput,
    LoadFailure,
    LoadSuperseded,
    PlayerTotals,
    SessionNotReady,
    UnknownCell,
)
from slpscoring.security import require_api_key

router = APIRouter(
    prefix="/api/scoring",
    tags=["scoring"],
    dependencies=[Depends(require_api_key)],
)


class CellOut(BaseModel):
    hole_number: int = wire_field("hole_number", "holeNumber")
    score_id: Optional[str] = wire_field("score_id", "scoreID", default=None)
    gross_score: Optional[int] = wire_field("gross_score", "grossScore", default=None)
    net_score: Optional[int] = wire_field("net_score", "netScore", default=None)
    junk_ids: List[str] = wire_field("junk_ids", "junkIDs", default_factory=list)
    state: str
    error: Optional[str] = None

    @classmethod
    def from_view(cls, view: CellView) -> "CellOut":
        score = view.score
        return cls(
            hole_number=view.hole_number,
            score_id=score.score_id if score else None,
            gross_score=view.gross_score,
            net_score=view.net_score,
            junk_ids=[junk.junk_id for junk in score.junks] if score else [],
            state=view.state.value,
            error=view.error,
        )


class TotalsOut(BaseModel):
    front_gross: int = wire_field("front_gross", "frontGross")
    back_gross: int = wire_field("back_gross", "backGross")
    total_gross: int = wire_field("total_gross", "totalGross")
    front_net: int = wire_field("front_net", "frontNet")
    back_net: int = wire_field("back_net", "backNet")
    total_net: int = wire_field("total_net", "totalNet")
    holes_played: int = wire_field("holes_played", "holesPlayed")

    @classmethod
    def from_totals(cls, totals: PlayerTotals) -> "TotalsOut":
        return cls(
            front_gross=totals.front_gross,
            back_gross=totals.back_gross,
            total_gross=totals.total_gross,
            front_net=totals.front_net,
            back_net=totals.back_net,
            total_net=totals.total_net,
            holes_played=totals.holes_played,
        )


class PlayerRowOut(BaseModel):
    player_id: str = wire_field("player_id", "playerID")
    first_name: str = wire_field("first_name", "firstName")
    last_name: str = wire_field("last_name", "lastName")
    handicap: Optional[str] = None
    cells: List[CellOut]
    totals: TotalsOut


class SessionOut(BaseModel):
    state: str
    load_error: Optional[str] = wire_field("load_error", "loadError", default=None)
    scorecard_id: Optional[str] = wire_field(
        "scorecard_id", "scorecardID", default=None
    )
    game_id: Optional[str] = wire_field("game_id", "gameID", default=None)
    course_id: Optional[str] = wire_field("course_id", "courseID", default=None)
    holes: List[Hole] = Field(default_factory=list)
    junk_catalog: List[Junk] = wire_field(
        "junk_catalog", "junkCatalog", default_factory=list
    )
    players: List[PlayerRowOut] = Field(default_factory=list)


class CellEditIn(BaseModel):
    gross: Union[int, str, None] = None


class JunkEditIn(BaseModel):
    junk_ids: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("junk_ids", "junkIds", "junkIDs"),
    )

    model_config = ConfigDict(coerce_numbers_to_str=True)


class PlayerIn(BaseModel):
    player_id: str = Field(validation_alias=AliasChoices("player_id", "playerId"))

    model_config = ConfigDict(coerce_numbers_to_str=True)


def _snapshot(runtime: ScoringRuntime) -> SessionOut:
    store = runtime.store
    session = store.session
    if session is None:
        return SessionOut(state=store.state.value, load_error=store.load_error)

    rows: List[PlayerRowOut] = []
    for player in session.players:
        totals = runtime.totals.for_player(player.player_id) or PlayerTotals(
            player_id=player.player_id
        )
        rows.append(
            PlayerRowOut(
                player_id=player.player_id,
                first_name=player.first_name,
                last_name=player.last_name,
                handicap=player.handicap,
                cells=[
                    CellOut.from_view(store.cell(player.player_id, hole.number))
                    for hole in session.holes
                ],
                totals=TotalsOut.from_totals(totals),
            )
        )
    return SessionOut(
        state=store.state.value,
        scorecard_id=session.scorecard_id,
        game_id=session.game_id,
        course_id=session.course_id,
        holes=list(session.holes),
        junk_catalog=list(session.junk_catalog),
        players=rows,
    )


@contextmanager
def _session_errors() -> Iterator[None]:
    try:
        yield
    except InvalidScoreInput as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except UnknownCell as exc:
        raise HTTPException(status_code=404, detail="cell_not_found") from exc
    except SessionNotReady as exc:
        raise HTTPException(status_code=409, detail="session_not_ready") from exc
    except LoadSuperseded as exc:
        raise HTTPException(
            status_code=409, detail={"code": "load_superseded", "message": str(exc)}
        ) from exc
    except LoadFailure as exc:
        raise HTTPException(
            status_code=502, detail={"code": "load_failed", "message": str(exc)}
        ) from exc
    except GatewayError as exc:
        raise HTTPException(
            status_code=502, detail={"code": "backend_error", "message": str(exc)}
        ) from exc


def _cell_out(view: Optional[CellView]) -> CellOut:
    if view is None:
        raise HTTPException(status_code=409, detail="session_changed")
    return CellOut.from_view(view)


@router.post("/session", response_model=SessionOut)
async def open_session(
    payload: ScoringContext,
    runtime: ScoringRuntime = Depends(get_scoring_runtime),
):
    with _session_errors():
        await runtime.open(payload)
    return _snapshot(runtime)


@router.get("/session", response_model=SessionOut)
def get_session(runtime: ScoringRuntime = Depends(get_scoring_runtime)):
    return _snapshot(runtime)


@router.post("/session/refresh", response_model=SessionOut)
async def refresh_session(runtime: ScoringRuntime = Depends(get_scoring_runtime)):
    with _session_errors():
        await runtime.store.refresh()
    return _snapshot(runtime)


@router.delete("/session", response_model=SessionOut)
def close_session(runtime: ScoringRuntime = Depends(get_scoring_runtime)):
    runtime.close()
    return _snapshot(runtime)


@router.put("/cells/{player_id}/{hole_number}", response_model=CellOut)
async def edit_cell(
    player_id: str,
    hole_number: int,
    payload: CellEditIn,
    runtime: ScoringRuntime = Depends(get_scoring_runtime),
):
    with _session_errors():
        view = await runtime.reconciler.enter_gross(
            player_id, hole_number, payload.gross
        )
    return _cell_out(view)


@router.put("/cells/{player_id}/{hole_number}/junks", response_model=CellOut)
async def edit_cell_junks(
    player_id: str,
    hole_number: int,
    payload: JunkEditIn,
    runtime: ScoringRuntime = Depends(get_scoring_runtime),
):
    with _session_errors():
        view = await runtime.reconciler.set_junks(
            player_id, hole_number, payload.junk_ids
        )
    return _cell_out(view)


@router.post("/players", response_model=SessionOut)
async def add_player(
    payload: PlayerIn, runtime: ScoringRuntime = Depends(get_scoring_runtime)
):
    with _session_errors():
        await runtime.store.add_player(payload.player_id)
    return _snapshot(runtime)


@router.delete("/players/{player_id}", response_model=SessionOut)
async def remove_player(
    player_id: str, runtime: ScoringRuntime = Depends(get_scoring_runtime)
):
    with _session_errors():
        await runtime.store.remove_player(player_id)
    return _snapshot(runtime)


@router.get("/scorecards", response_model=List[ScorecardSummary])
async def list_scorecards(
    game_id: str = Query(..., alias="gameId"),
    runtime: ScoringRuntime = Depends(get_scoring_runtime),
):
    with _session_errors():
        return await runtime.gateway.fetch_scorecard_list(game_id)
