"""
Data schemas for the MoodMash engine.

This module contains the dataclasses that describe the engine's inputs:
logged moods, completed wellness sessions and the content catalogs the
recommendation engine scores.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, Optional, List, Union


# Fixed emotion vocabulary; list position is the network's class index.
EMOTION_LABELS: List[str] = [
    'happy', 'calm', 'energetic', 'grateful', 'motivated',
    'sad', 'anxious', 'stressed', 'tired', 'frustrated',
]
POSITIVE_EMOTIONS = frozenset(EMOTION_LABELS[:5])
NEGATIVE_EMOTIONS = frozenset(EMOTION_LABELS[5:])

MIN_INTENSITY = 1
MAX_INTENSITY = 10


@dataclass(frozen=True)
class Intensity:
    """A mood reading given directly as a 1-10 intensity."""
    value: float


@dataclass(frozen=True)
class EmotionLabel:
    """A mood reading given as an emotion name."""
    label: str


MoodScore = Union[Intensity, EmotionLabel]


def to_intensity(score: MoodScore) -> float:
    """Convert a mood reading to an intensity.

    Emotion names map to a fixed proxy: 7 for positive emotions, 3 for
    negative ones and 5 for anything else.
    """
    if isinstance(score, Intensity):
        return float(score.value)
    label = score.label.lower()
    if label in POSITIVE_EMOTIONS:
        return 7.0
    if label in NEGATIVE_EMOTIONS:
        return 3.0
    return 5.0


@dataclass(frozen=True)
class MoodRecord:
    """One logged emotional state."""
    emotion: str
    intensity: int
    timestamp: datetime

    def __post_init__(self):
        if not (MIN_INTENSITY <= self.intensity <= MAX_INTENSITY):
            raise ValueError(
                f"Intensity must be between {MIN_INTENSITY} and {MAX_INTENSITY}, got {self.intensity}"
            )


@dataclass(frozen=True)
class WellnessSessionRecord:
    """One completed wellness activity."""
    type: str                     # meditation / yoga / music
    category: str
    completed_at: datetime
    name: str = ""
    mood_before: Optional[MoodScore] = None
    mood_after: Optional[MoodScore] = None
    duration_minutes: Optional[float] = None

    @property
    def has_mood_change(self) -> bool:
        return self.mood_before is not None and self.mood_after is not None

    def mood_change(self) -> Optional[float]:
        """Intensity gained over the session, or None when either reading is missing."""
        if not self.has_mood_change:
            return None
        return to_intensity(self.mood_after) - to_intensity(self.mood_before)


@dataclass(frozen=True)
class MeditationItem:
    id: str
    name: str
    category: str
    level: str = "beginner"


@dataclass(frozen=True)
class YogaItem:
    id: str
    name: str
    category: str
    level: str = "beginner"


@dataclass(frozen=True)
class MusicItem:
    id: str
    name: str
    mood: str
    genre: str = ""


@dataclass
class ContentCatalog:
    """Caller-supplied wellness content the recommendation engine scores."""
    meditation: List[MeditationItem] = field(default_factory=list)
    yoga: List[YogaItem] = field(default_factory=list)
    music: List[MusicItem] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.meditation) + len(self.yoga) + len(self.music)


@dataclass
class ValidationResult:
    """Non-fatal findings from history validation"""
    warnings: List[str] = field(default_factory=list)
    metadata: Optional[Dict[str, Any]] = None

    def add_warning(self, warning: str) -> None:
        """Add a warning to the validation result"""
        self.warnings.append(warning)

    def has_warnings(self) -> bool:
        return len(self.warnings) > 0
