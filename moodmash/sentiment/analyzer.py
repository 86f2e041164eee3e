"""
Lexicon-based sentiment analysis for journal entries.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..config.settings import SentimentConfig
from ..utils.logging import StructuredLogger
from .lexicon import (
    EMOTION_KEYWORDS,
    EMOTION_SUGGESTIONS,
    NEGATIVE_STATE_SUGGESTIONS,
    NEGATIVE_WORDS,
    POSITIVE_STATE_SUGGESTIONS,
    POSITIVE_WORDS,
)

_NON_LETTERS = re.compile(r'[^a-z]')


@dataclass
class DetectedEmotion:
    name: str
    score: float
    intensity: str              # high / medium / low

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'score': self.score, 'intensity': self.intensity}


@dataclass
class SentimentResult:
    """Sentiment of one piece of text."""
    overall_score: float = 0.0
    emotions: List[DetectedEmotion] = field(default_factory=list)
    themes: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'overall_score': self.overall_score,
            'emotions': [e.to_dict() for e in self.emotions],
            'themes': list(self.themes),
            'keywords': list(self.keywords),
            'suggestions': list(self.suggestions),
        }


def tokenize(text: str) -> List[str]:
    """Lowercase, split on whitespace and drop non-letters from each token."""
    tokens = (_NON_LETTERS.sub('', word) for word in text.lower().split())
    return [token for token in tokens if token]


def intensity_label(count: int) -> str:
    if count > 2:
        return 'high'
    if count > 1:
        return 'medium'
    return 'low'


class SentimentAnalysisEngine:
    """Scores text with fixed positive/negative word lists and emotion keywords."""

    def __init__(self, config: Optional[SentimentConfig] = None, logger: Optional[StructuredLogger] = None):
        self.config = config or SentimentConfig()
        self.logger = logger or StructuredLogger(__name__)

    def analyze(self, text: str) -> SentimentResult:
        """Analyze the sentiment of ``text``.

        Empty or word-free text gives a neutral result with a score of 0.

        Args:
            text: Free text such as a journal entry

        Returns:
            SentimentResult with a score in [-1, 1], emotions sorted by score,
            themes, matched keywords and up to three suggestions
        """
        tokens = tokenize(text or '')

        positive = [t for t in tokens if t in POSITIVE_WORDS]
        negative = [t for t in tokens if t in NEGATIVE_WORDS]
        total = len(positive) + len(negative)
        score = (len(positive) - len(negative)) / max(total, 1)

        emotions = []
        for name, triggers in EMOTION_KEYWORDS.items():
            matches = sum(1 for t in tokens if any(trigger in t for trigger in triggers))
            if matches:
                emotions.append(DetectedEmotion(
                    name=name,
                    score=min(matches / 3, 1.0),
                    intensity=intensity_label(matches),
                ))
        emotions.sort(key=lambda e: e.score, reverse=True)

        keywords = list(dict.fromkeys(t for t in tokens if t in POSITIVE_WORDS or t in NEGATIVE_WORDS))

        result = SentimentResult(
            overall_score=score,
            emotions=emotions,
            themes=self._themes(score, emotions),
            keywords=keywords,
            suggestions=self._suggestions(score, emotions),
        )
        self.logger.debug(
            "Sentiment analyzed",
            tokens=len(tokens),
            overall_score=score,
            emotions=[e.name for e in emotions],
        )
        return result

    def _themes(self, score: float, emotions: List[DetectedEmotion]) -> List[str]:
        themes = []
        if score > self.config.theme_threshold:
            themes.append("Positive outlook")
        elif score < -self.config.theme_threshold:
            themes.append("Challenging emotional state")
        if emotions:
            top = emotions[0].name
            themes.append(f"{top[:1].upper()}{top[1:]} focus")
        return themes

    def _suggestions(self, score: float, emotions: List[DetectedEmotion]) -> List[str]:
        suggestions: List[str] = []
        if score < -self.config.theme_threshold:
            suggestions.extend(NEGATIVE_STATE_SUGGESTIONS)
        for emotion in emotions:
            suggestions.extend(EMOTION_SUGGESTIONS.get(emotion.name, ()))
        if score > self.config.theme_threshold:
            suggestions.extend(POSITIVE_STATE_SUGGESTIONS)
        return suggestions[:self.config.max_suggestions]
