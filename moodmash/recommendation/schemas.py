"""
Recommendation schemas for the MoodMash engine.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List

SESSION_TYPES = ('meditation', 'yoga', 'music')
URGENCY_LEVELS = ('low', 'medium', 'high')


@dataclass
class CurrentMood:
    """The latest logged emotion, or neutral/5 when there is no history."""
    emotion: str = "neutral"
    intensity: int = 5


@dataclass
class TrendSummary:
    """Direction and spread of the last seven intensities."""
    trend: str = "stable"       # improving / stable / declining
    mean: float = 0.0
    volatility: float = 0.0

    @property
    def is_declining(self) -> bool:
        return self.trend == "declining"


@dataclass
class SessionRecommendation:
    """One scored wellness content item."""
    session_id: str
    session_type: str
    name: str
    score: float
    predicted_effect: str
    reasoning: List[str] = field(default_factory=list)
    urgency: str = "medium"

    def __post_init__(self):
        if self.session_type not in SESSION_TYPES:
            raise ValueError(f"Unknown session type: {self.session_type}")
        if not (0.0 <= self.score <= 1.0):
            raise ValueError("Score must be between 0.0 and 1.0")
        if self.urgency not in URGENCY_LEVELS:
            raise ValueError(f"Urgency must be one of {URGENCY_LEVELS}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'session_id': self.session_id,
            'session_type': self.session_type,
            'name': self.name,
            'score': self.score,
            'predicted_effect': self.predicted_effect,
            'reasoning': list(self.reasoning),
            'urgency': self.urgency,
        }


@dataclass
class OptimalSchedule:
    """A suggested practice time drawn from the user's session history."""
    time_slot: str
    activity: str
    confidence: float
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'time_slot': self.time_slot,
            'activity': self.activity,
            'confidence': self.confidence,
            'reason': self.reason,
        }


@dataclass
class RecommendationResult:
    """Ranked recommendations plus tips and a practice schedule."""
    recommendations: List[SessionRecommendation] = field(default_factory=list)
    personalized_tips: List[str] = field(default_factory=list)
    optimal_schedule: List[OptimalSchedule] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'recommendations': [r.to_dict() for r in self.recommendations],
            'personalized_tips': list(self.personalized_tips),
            'optimal_schedule': [s.to_dict() for s in self.optimal_schedule],
        }
