from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, Field

from slpscoring.preferences import (
    PreferencesStore,
    UiPreferences,
    get_preferences_store,
)
from slpscoring.security import require_api_key

router = APIRouter(
    prefix="/api/preferences",
    tags=["preferences"],
    dependencies=[Depends(require_api_key)],
)


class CourseTeeIn(BaseModel):
    course_id: str = Field(validation_alias=AliasChoices("course_id", "courseId"))
    tee_id: str = Field(validation_alias=AliasChoices("tee_id", "teeId"))


def _dump(prefs: UiPreferences) -> dict:
    return prefs.model_dump(by_alias=True, mode="json")


@router.get("")
def get_preferences(store: PreferencesStore = Depends(get_preferences_store)):
    return _dump(store.load())


@router.put("")
def put_preferences(
    payload: UiPreferences,
    store: PreferencesStore = Depends(get_preferences_store),
):
    return _dump(store.save(payload))


@router.post("/recent-course-tees")
def remember_course_tee(
    payload: CourseTeeIn,
    store: PreferencesStore = Depends(get_preferences_store),
):
    prefs = store.load().remember_course_tee(payload.course_id, payload.tee_id)
    return _dump(store.save(prefs))
