"""
Pydantic models for the engine's JSON input contract.

Raw dictionaries (from the caller's storage or a JSON document) are
validated here before being turned into the dataclasses in ``schemas``.
"""
from datetime import datetime
from typing import Optional, List, Union

from pydantic import BaseModel, ConfigDict, Field, AliasChoices


class MoodRecordPayload(BaseModel):
    """One logged mood as stored by the caller."""
    emotion: str = Field(description="Emotion label, e.g. 'happy' or 'anxious'")
    intensity: int = Field(ge=1, le=10, description="Intensity on a 1-10 scale")
    timestamp: datetime = Field(description="When the mood was logged")


class WellnessSessionPayload(BaseModel):
    """One completed wellness session. Mood readings may be numbers or emotion names."""
    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(description="Activity type: meditation, yoga or music")
    category: str = Field(default="general", description="Content category")
    name: str = Field(default="", description="Session or content name")
    mood_before: Optional[Union[float, str]] = Field(
        default=None,
        validation_alias=AliasChoices("mood_before", "moodBefore"),
    )
    mood_after: Optional[Union[float, str]] = Field(
        default=None,
        validation_alias=AliasChoices("mood_after", "moodAfter"),
    )
    duration_minutes: Optional[float] = Field(
        default=None,
        ge=0.0,
        validation_alias=AliasChoices("duration_minutes", "duration"),
    )
    completed_at: datetime = Field(
        validation_alias=AliasChoices("completed_at", "completedAt"),
    )


class MeditationPayload(BaseModel):
    id: str
    name: str
    category: str = "general"
    level: str = "beginner"


class YogaPayload(BaseModel):
    id: str
    name: str
    category: str = "standing"
    level: str = "beginner"


class MusicPayload(BaseModel):
    id: str
    name: str
    mood: str = "all"
    genre: str = ""


class CatalogPayload(BaseModel):
    meditation: List[MeditationPayload] = Field(default_factory=list)
    yoga: List[YogaPayload] = Field(default_factory=list)
    music: List[MusicPayload] = Field(default_factory=list)


class HistoryDocument(BaseModel):
    """A complete input document: mood history, sessions and catalogs."""
    moods: List[MoodRecordPayload] = Field(default_factory=list)
    sessions: List[WellnessSessionPayload] = Field(default_factory=list)
    catalog: CatalogPayload = Field(default_factory=CatalogPayload)
