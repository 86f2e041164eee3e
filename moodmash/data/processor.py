"""
Input processing for the MoodMash engine.
"""
import json
import os
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import pandas as pd
from pydantic import ValidationError

from .payloads import (
    CatalogPayload,
    HistoryDocument,
    MoodRecordPayload,
    WellnessSessionPayload,
)
from .schemas import (
    ContentCatalog,
    EmotionLabel,
    Intensity,
    MeditationItem,
    MoodRecord,
    MoodScore,
    MusicItem,
    WellnessSessionRecord,
    YogaItem,
)
from ..utils.helpers import day_of_week, is_weekend, naive_utc

MoodInput = Union[MoodRecord, Dict[str, Any]]
SessionInput = Union[WellnessSessionRecord, Dict[str, Any]]

MOOD_COLUMNS = ['emotion', 'intensity', 'timestamp', 'hour', 'day_of_week', 'is_weekend']
SESSION_COLUMNS = ['type', 'category', 'name', 'completed_at', 'hour', 'mood_change']


def parse_mood_score(value: Union[None, int, float, str]) -> Optional[MoodScore]:
    """Tag a raw before/after reading as an Intensity or an EmotionLabel."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        return EmotionLabel(value) if value else None
    return Intensity(float(value))


class HistoryProcessor:
    """Turns raw caller data into domain records and analysis frames."""

    def parse_moods(self, items: Iterable[MoodInput]) -> List[MoodRecord]:
        """Validate mood entries; MoodRecord instances are accepted as well.

        Offset-aware timestamps are converted to naive UTC so that histories
        mixing both forms stay comparable.

        Raises:
            ValueError: If an entry violates the input contract
        """
        records = []
        for index, item in enumerate(items):
            if isinstance(item, MoodRecord):
                records.append(replace(item, timestamp=naive_utc(item.timestamp)))
                continue
            try:
                payload = MoodRecordPayload.model_validate(item)
            except ValidationError as e:
                raise ValueError(f"Invalid mood entry at index {index}: {e}") from e
            records.append(MoodRecord(
                emotion=payload.emotion,
                intensity=payload.intensity,
                timestamp=naive_utc(payload.timestamp),
            ))
        return records

    def parse_sessions(self, items: Optional[Iterable[SessionInput]]) -> List[WellnessSessionRecord]:
        """Validate wellness sessions; completion times are normalized like mood timestamps."""
        records = []
        for index, item in enumerate(items or []):
            if isinstance(item, WellnessSessionRecord):
                records.append(replace(item, completed_at=naive_utc(item.completed_at)))
                continue
            try:
                payload = WellnessSessionPayload.model_validate(item)
            except ValidationError as e:
                raise ValueError(f"Invalid wellness session at index {index}: {e}") from e
            records.append(WellnessSessionRecord(
                type=payload.type,
                category=payload.category,
                completed_at=naive_utc(payload.completed_at),
                name=payload.name,
                mood_before=parse_mood_score(payload.mood_before),
                mood_after=parse_mood_score(payload.mood_after),
                duration_minutes=payload.duration_minutes,
            ))
        return records

    def parse_catalog(self, data: Union[None, ContentCatalog, Dict[str, Any]]) -> ContentCatalog:
        if data is None:
            return ContentCatalog()
        if isinstance(data, ContentCatalog):
            return data
        try:
            payload = CatalogPayload.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Invalid content catalog: {e}") from e
        return ContentCatalog(
            meditation=[MeditationItem(**m.model_dump()) for m in payload.meditation],
            yoga=[YogaItem(**y.model_dump()) for y in payload.yoga],
            music=[MusicItem(**m.model_dump()) for m in payload.music],
        )

    def load_document(self, path: str) -> Tuple[List[MoodRecord], List[WellnessSessionRecord], ContentCatalog]:
        """Load a JSON history document ``{moods, sessions, catalog}``.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file is not valid JSON or breaks the input contract
        """
        if not os.path.exists(path):
            raise FileNotFoundError(f"History file not found: {path}")
        with open(path, 'r', encoding='utf-8') as f:
            try:
                raw = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Failed to parse history file {path}: {e}") from e
        try:
            document = HistoryDocument.model_validate(raw)
        except ValidationError as e:
            raise ValueError(f"History file {path} does not match the input contract: {e}") from e

        moods = self.parse_moods(m.model_dump() for m in document.moods)
        sessions = self.parse_sessions(s.model_dump() for s in document.sessions)
        catalog = self.parse_catalog(document.catalog.model_dump())
        return moods, sessions, catalog

    @staticmethod
    def moods_frame(moods: List[MoodRecord]) -> pd.DataFrame:
        """One row per mood record with derived hour / weekday columns, in input order."""
        rows = [
            {
                'emotion': m.emotion,
                'intensity': m.intensity,
                'timestamp': m.timestamp,
                'hour': m.timestamp.hour,
                'day_of_week': day_of_week(m.timestamp),
                'is_weekend': is_weekend(m.timestamp),
            }
            for m in moods
        ]
        return pd.DataFrame(rows, columns=MOOD_COLUMNS)

    @staticmethod
    def sessions_frame(sessions: List[WellnessSessionRecord]) -> pd.DataFrame:
        """One row per session; ``mood_change`` is NaN when a reading is missing."""
        rows = [
            {
                'type': s.type,
                'category': s.category,
                'name': s.name,
                'completed_at': s.completed_at,
                'hour': s.completed_at.hour,
                'mood_change': s.mood_change(),
            }
            for s in sessions
        ]
        frame = pd.DataFrame(rows, columns=SESSION_COLUMNS)
        frame['mood_change'] = frame['mood_change'].astype(float)
        return frame
