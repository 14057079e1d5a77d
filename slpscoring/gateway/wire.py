"""Request/response shapes of the SLP JSON endpoints."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from slpscoring.models import (
    Course,
    Junk,
    Player,
    ScorecardSummary,
    wire_field,
)

_WIRE = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)


class Status(BaseModel):
    code: int
    message: str = ""

    model_config = _WIRE


class SubmittedScore(BaseModel):
    score_id: str = wire_field("score_id", "scoreID")
    player_id: str = wire_field("player_id", "playerID")
    game_id: str = wire_field("game_id", "gameID")
    hole_number: int = wire_field("hole_number", "gameHole", ge=1, le=18)
    gross_score: int = wire_field("gross_score", "score")
    net_score: int = wire_field("net_score", "net")

    model_config = _WIRE


class RosterResponse(BaseModel):
    players: List[Player]


class JunkListResponse(BaseModel):
    junks: List[Junk]


class CourseResponse(BaseModel):
    course: Course


class ScorecardListResponse(BaseModel):
    scorecards: List[ScorecardSummary] = Field(default_factory=list)


__all__ = [
    "CourseResponse",
    "JunkListResponse",
    "RosterResponse",
    "ScorecardListResponse",
    "Status",
    "SubmittedScore",
]
