"""Async client for the SLP golf JSON backend.

Every operation is a single POST with no internal retry: the score mutation
endpoints are at-most-once by intent, so any retry is left to the user.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from slpscoring.config import Settings, get_settings
from slpscoring.models import Hole, Junk, Player, ScorecardSummary

from .errors import MalformedResponse, NotFound, StatusError, TransportError
from .wire import (
    CourseResponse,
    JunkListResponse,
    RosterResponse,
    ScorecardListResponse,
    Status,
    SubmittedScore,
)

_logger = logging.getLogger(__name__)

HOLES_PER_ROUND = 18

_ModelT = TypeVar("_ModelT", bound=BaseModel)


def _http_client_factory(**kwargs: Any) -> httpx.AsyncClient:
    timeout = kwargs.pop("timeout", None)
    return httpx.AsyncClient(timeout=timeout, **kwargs)


def _parse(model: Type[_ModelT], data: Dict[str, Any], endpoint: str) -> _ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise MalformedResponse(
            f"{endpoint}: {exc.error_count()} invalid field(s)"
        ) from exc


def _junk_ids_for_wire(junk_ids: Iterable[str]) -> List[int]:
    ids = list(junk_ids)
    try:
        return [int(junk_id) for junk_id in ids]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"junk ids must be numeric: {ids!r}") from exc


class ScoringGateway:
    def __init__(self, settings: Settings | None = None):
        self._settings = settings or get_settings()

    async def _post(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        body = {**payload, **self._settings.identity()}
        url = f"{self._settings.api_base.rstrip('/')}/{endpoint}"
        _logger.debug("POST %s", endpoint)
        try:
            async with _http_client_factory(
                timeout=self._settings.request_timeout_s
            ) as client:
                response = await client.post(url, json=body)
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            raise TransportError(f"{endpoint} request failed: {exc}") from exc

        if response.status_code == 404:
            raise NotFound(404, f"{endpoint} not found")
        if response.status_code >= 400:
            raise TransportError(
                f"{endpoint} failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise MalformedResponse(f"{endpoint}: response is not JSON") from exc
        if not isinstance(data, dict) or not isinstance(data.get("status"), dict):
            raise MalformedResponse(f"{endpoint}: missing status envelope")
        status = _parse(Status, data["status"], endpoint)
        if status.code != 0:
            if status.code == self._settings.not_found_code:
                raise NotFound(status.code, status.message)
            raise StatusError(status.code, status.message)
        return data

    # Score mutation
    async def submit_score(
        self,
        *,
        game_id: str,
        player_id: str,
        hole_number: int,
        gross_score: int,
        junk_ids: Iterable[str] = (),
    ) -> SubmittedScore:
        data = await self._post(
            "updateScore",
            {
                "playerID": player_id,
                "gameID": game_id,
                "gameHole": hole_number,
                "score": gross_score,
                "junkIDs": _junk_ids_for_wire(junk_ids),
            },
        )
        result = _parse(SubmittedScore, data, "updateScore")
        if result.player_id != player_id or result.hole_number != hole_number:
            raise MalformedResponse(
                f"updateScore answered for player={result.player_id} "
                f"hole={result.hole_number}, "
                f"expected player={player_id} hole={hole_number}"
            )
        return result

    async def delete_score(self, score_id: str) -> None:
        await self._post("deleteScore", {"scoreID": score_id})

    # Roster and lookups
    async def fetch_roster(self, game_id: str, scorecard_id: str) -> List[Player]:
        data = await self._post(
            "getScorecardPlayerList",
            {"gameID": game_id, "scorecardID": scorecard_id},
        )
        return _parse(RosterResponse, data, "getScorecardPlayerList").players

    async def fetch_junk_catalog(self) -> List[Junk]:
        data = await self._post("getJunkList", {})
        return _parse(JunkListResponse, data, "getJunkList").junks

    async def fetch_holes(self, course_id: str) -> List[Hole]:
        data = await self._post("getCourse", {"courseID": course_id})
        course = _parse(CourseResponse, data, "getCourse").course
        if not course.tees:
            raise MalformedResponse(f"getCourse: course {course_id} has no tees")
        holes = sorted(course.tees[0].holes, key=lambda hole: hole.number)
        if [hole.number for hole in holes] != list(range(1, HOLES_PER_ROUND + 1)):
            raise MalformedResponse(
                f"getCourse: course {course_id} does not list holes 1-{HOLES_PER_ROUND}"
            )
        return holes

    async def fetch_scorecard_list(self, game_id: str) -> List[ScorecardSummary]:
        data = await self._post("getScorecardList", {"gameID": game_id})
        return _parse(ScorecardListResponse, data, "getScorecardList").scorecards

    # Membership
    async def add_scorecard_player(
        self, *, game_id: str, scorecard_id: str, player_id: str
    ) -> None:
        await self._post(
            "addScorecardPlayerByID",
            {"gameID": game_id, "scorecardID": scorecard_id, "playerID": player_id},
        )

    async def remove_scorecard_player(
        self, *, game_id: str, scorecard_id: str, player_id: str
    ) -> None:
        await self._post(
            "removeScorecardPlayerByID",
            {"gameID": game_id, "scorecardID": scorecard_id, "playerID": player_id},
        )


__all__ = ["HOLES_PER_ROUND", "ScoringGateway"]
