"""UI preferences kept between launches.

Loaded once at startup, saved whenever they change and handed to whoever needs
them. There is no module-level preference state.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from slpscoring.config import get_settings
from slpscoring.models import wire_field

_logger = logging.getLogger(__name__)

MAX_RECENT_COURSE_TEES = 5


class RecentCourseTee(BaseModel):
    course_id: str = wire_field("course_id", "courseId")
    tee_id: str = wire_field("tee_id", "teeId")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class UiPreferences(BaseModel):
    active_tab: str = wire_field("active_tab", "activeTab", default="games")
    last_group_id: Optional[str] = wire_field(
        "last_group_id", "lastGroupId", default=None
    )
    last_game_id: Optional[str] = wire_field("last_game_id", "lastGameId", default=None)
    last_scorecard_id: Optional[str] = wire_field(
        "last_scorecard_id", "lastScorecardId", default=None
    )
    recent_course_tees: List[RecentCourseTee] = wire_field(
        "recent_course_tees", "recentCourseTees", default_factory=list
    )

    model_config = ConfigDict(populate_by_name=True)

    def remember_course_tee(self, course_id: str, tee_id: str) -> "UiPreferences":
        """Most recent first, without duplicates, capped."""

        entry = RecentCourseTee(course_id=course_id, tee_id=tee_id)
        recent = [entry] + [e for e in self.recent_course_tees if e != entry]
        return self.model_copy(
            update={"recent_course_tees": recent[:MAX_RECENT_COURSE_TEES]}
        )


class PreferencesStore:
    def __init__(self, path: Path | str):
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> UiPreferences:
        if not self._path.exists():
            return UiPreferences()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            return UiPreferences.model_validate(data)
        except (OSError, ValueError, ValidationError) as exc:
            _logger.warning("ignoring unreadable preferences %s: %s", self._path, exc)
            return UiPreferences()

    def save(self, prefs: UiPreferences) -> UiPreferences:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = prefs.model_dump(by_alias=True, mode="json")
        self._path.write_text(json.dumps(payload, indent=2, sort_keys=True))
        return prefs


@lru_cache(maxsize=1)
def get_preferences_store() -> PreferencesStore:
    return PreferencesStore(get_settings().preferences_path)


__all__ = [
    "PreferencesStore",
    "RecentCourseTee",
    "UiPreferences",
    "get_preferences_store",
]
