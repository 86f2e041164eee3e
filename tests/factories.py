"""
Builders for mood and session histories used across the tests.
"""
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from moodmash.data.schemas import (
    ContentCatalog,
    EMOTION_LABELS,
    Intensity,
    MeditationItem,
    MoodRecord,
    MusicItem,
    WellnessSessionRecord,
    YogaItem,
)

START = datetime(2024, 1, 1, 9, 0)  # a Monday


def mood_history(intensities: Sequence[int],
                 emotions: Optional[Sequence[str]] = None,
                 start: datetime = START,
                 step: timedelta = timedelta(hours=12)) -> List[MoodRecord]:
    """One record per intensity, ``step`` apart; emotions cycle through the vocabulary by default."""
    records = []
    for i, intensity in enumerate(intensities):
        emotion = emotions[i % len(emotions)] if emotions else EMOTION_LABELS[i % len(EMOTION_LABELS)]
        records.append(MoodRecord(emotion=emotion, intensity=intensity, timestamp=start + i * step))
    return records


def session(session_type: str, hour: int, day: int = 0, before=None, after=None,
            name: str = "", category: str = "general") -> WellnessSessionRecord:
    return WellnessSessionRecord(
        type=session_type,
        category=category,
        completed_at=START.replace(hour=hour) + timedelta(days=day),
        name=name,
        mood_before=before,
        mood_after=after,
    )


def rated_session(session_type: str, before: float, after: float, day: int = 0) -> WellnessSessionRecord:
    return session(session_type, hour=10, day=day, before=Intensity(before), after=Intensity(after))


def sample_catalog() -> ContentCatalog:
    return ContentCatalog(
        meditation=[
            MeditationItem(id="m1", name="Calm the Storm", category="anxiety"),
            MeditationItem(id="m2", name="Box Breathing", category="breathing"),
            MeditationItem(id="m3", name="Worry Release", category="anxiety"),
            MeditationItem(id="m4", name="Anxiety Reset", category="anxiety"),
            MeditationItem(id="m5", name="Deep Sleep", category="sleep"),
        ],
        yoga=[
            YogaItem(id="y1", name="Easy Pose", category="seated", level="beginner"),
            YogaItem(id="y2", name="Warrior III", category="standing", level="advanced"),
            YogaItem(id="y3", name="Tree Pose", category="balance", level="beginner"),
        ],
        music=[
            MusicItem(id="mu1", name="Still Waters", mood="calm", genre="ambient"),
            MusicItem(id="mu2", name="Everyday Mix", mood="all", genre="pop"),
            MusicItem(id="mu3", name="Sunshine", mood="happy", genre="pop"),
        ],
    )
