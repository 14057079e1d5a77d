"""Typed entities exchanged with the SLP scoring backend."""

from __future__ import annotations

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

_WIRE = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)


def wire_field(snake: str, camel: str, **kwargs):
    return Field(
        validation_alias=AliasChoices(snake, camel),
        serialization_alias=camel,
        **kwargs,
    )


class Hole(BaseModel):
    number: int = Field(ge=1, le=18)
    par: int = Field(gt=0)
    match_play_handicap: int = wire_field("match_play_handicap", "matchPlayHandicap")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Junk(BaseModel):
    junk_id: str = wire_field("junk_id", "junkID")
    junk_name: str = wire_field("junk_name", "junkName")
    description: Optional[str] = None
    value: Optional[str] = None

    model_config = ConfigDict(
        populate_by_name=True, coerce_numbers_to_str=True, frozen=True
    )


class Score(BaseModel):
    score_id: Optional[str] = wire_field("score_id", "scoreID", default=None)
    hole_number: int = wire_field("hole_number", "holeNumber", ge=1, le=18)
    gross_score: Optional[int] = wire_field("gross_score", "grossScore", default=None)
    net_score: Optional[int] = wire_field("net_score", "netScore", default=None)
    junks: List[Junk] = Field(default_factory=list)

    model_config = _WIRE

    @model_validator(mode="before")
    @classmethod
    def _drop_null_junks(cls, data):
        if isinstance(data, dict) and data.get("junks", []) is None:
            data = {k: v for k, v in data.items() if k != "junks"}
        return data

    @property
    def is_entered(self) -> bool:
        return self.score_id is not None or self.gross_score is not None


class Tee(BaseModel):
    tee_id: str = wire_field("tee_id", "teeID")
    name: str
    slope: Optional[float] = None
    rating: Optional[float] = None

    model_config = _WIRE


class Player(BaseModel):
    player_id: str = wire_field("player_id", "playerID")
    first_name: str = wire_field("first_name", "firstName")
    last_name: str = wire_field("last_name", "lastName")
    handicap: Optional[str] = None
    venmo_name: Optional[str] = wire_field("venmo_name", "venmoName", default=None)
    tee: Optional[Tee] = None
    scores: List[Score] = Field(default_factory=list)

    model_config = _WIRE

    @model_validator(mode="after")
    def _one_score_per_hole(self) -> "Player":
        seen: set[int] = set()
        for score in self.scores:
            if score.hole_number in seen:
                raise ValueError(
                    f"duplicate score for player={self.player_id} "
                    f"hole={score.hole_number}"
                )
            seen.add(score.hole_number)
        return self

    def score_for(self, hole_number: int) -> Score | None:
        for score in self.scores:
            if score.hole_number == hole_number:
                return score
        return None


class ScorecardSummary(BaseModel):
    scorecard_id: str = wire_field("scorecard_id", "scorecardID")
    name: str

    model_config = _WIRE


class Game(BaseModel):
    game_id: str = wire_field("game_id", "gameID")
    game_key: Optional[str] = wire_field("game_key", "gameKey", default=None)
    game_type: Optional[str] = wire_field("game_type", "gameType", default=None)
    skin_type: Optional[str] = wire_field("skin_type", "skinType", default=None)
    course_id: Optional[str] = wire_field("course_id", "courseID", default=None)
    course_name: Optional[str] = wire_field("course_name", "courseName", default=None)
    tee_name: Optional[str] = wire_field("tee_name", "teeName", default=None)
    round: Optional[str] = None

    model_config = _WIRE


class CourseTee(BaseModel):
    tee_id: str = wire_field("tee_id", "teeID")
    name: str
    slope: Optional[float] = None
    rating: Optional[float] = None
    holes: List[Hole] = Field(default_factory=list)

    model_config = _WIRE


class Course(BaseModel):
    course_id: str = wire_field("course_id", "courseID")
    name: str
    city: Optional[str] = None
    state: Optional[str] = None
    tees: List[CourseTee] = Field(default_factory=list)

    model_config = _WIRE


__all__ = [
    "Course",
    "CourseTee",
    "Game",
    "Hole",
    "Junk",
    "Player",
    "Score",
    "ScorecardSummary",
    "Tee",
    "wire_field",
]
