"""
Data module for the MoodMash engine.

Domain records, the JSON input contract, parsing and validation.
"""

from .schemas import (
    EMOTION_LABELS,
    POSITIVE_EMOTIONS,
    NEGATIVE_EMOTIONS,
    Intensity,
    EmotionLabel,
    MoodScore,
    to_intensity,
    MoodRecord,
    WellnessSessionRecord,
    MeditationItem,
    YogaItem,
    MusicItem,
    ContentCatalog,
    ValidationResult,
)
from .processor import HistoryProcessor, parse_mood_score
from .validator import HistoryValidator

__all__ = [
    'EMOTION_LABELS',
    'POSITIVE_EMOTIONS',
    'NEGATIVE_EMOTIONS',
    'Intensity',
    'EmotionLabel',
    'MoodScore',
    'to_intensity',
    'MoodRecord',
    'WellnessSessionRecord',
    'MeditationItem',
    'YogaItem',
    'MusicItem',
    'ContentCatalog',
    'ValidationResult',
    'HistoryProcessor',
    'parse_mood_score',
    'HistoryValidator',
]
