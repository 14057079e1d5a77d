from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from slpscoring.models import wire_field


class ScoringContext(BaseModel):
    """The selected group, game and scorecard, passed explicitly down the call chain."""

    group_id: Optional[str] = wire_field("group_id", "groupId", default=None)
    game_id: str = wire_field("game_id", "gameId")
    course_id: str = wire_field("course_id", "courseId")
    scorecard_id: str = wire_field("scorecard_id", "scorecardId")

    model_config = ConfigDict(populate_by_name=True, frozen=True)
