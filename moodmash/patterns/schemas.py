"""
Pattern detection schemas for the MoodMash engine.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List

PATTERN_TYPES = ('circadian', 'weekly', 'trigger', 'response', 'correlation')


@dataclass
class DetectedPattern:
    """One statistical finding in the user's history."""
    id: str
    type: str
    strength: float
    description: str
    evidence: List[str] = field(default_factory=list)

    def __post_init__(self):
        if self.type not in PATTERN_TYPES:
            raise ValueError(f"Unknown pattern type: {self.type}")
        if not (0.0 <= self.strength <= 1.0):
            raise ValueError("Pattern strength must be between 0.0 and 1.0")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'type': self.type,
            'strength': self.strength,
            'description': self.description,
            'evidence': list(self.evidence),
        }


@dataclass
class PatternInsight:
    """Human-readable interpretation of a pattern."""
    title: str
    description: str
    confidence: float
    actionable: bool
    recommendation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'description': self.description,
            'confidence': self.confidence,
            'actionable': self.actionable,
            'recommendation': self.recommendation,
        }


@dataclass
class DetectorFinding:
    """What a single detector contributes when it fires."""
    patterns: List[DetectedPattern] = field(default_factory=list)
    insights: List[PatternInsight] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)


@dataclass
class PatternResult:
    """Merged output of every detector, capped for display."""
    patterns: List[DetectedPattern] = field(default_factory=list)
    insights: List[PatternInsight] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'patterns': [p.to_dict() for p in self.patterns],
            'insights': [i.to_dict() for i in self.insights],
            'recommendations': list(self.recommendations),
        }
