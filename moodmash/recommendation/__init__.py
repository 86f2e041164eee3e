"""
Recommendation module for the MoodMash engine.

This module scores meditation, yoga and music content against the user's
current mood and recent trend, and derives tips and a practice schedule.
"""

from .engine import RecommendationEngine
from .schemas import (
    CurrentMood,
    TrendSummary,
    SessionRecommendation,
    OptimalSchedule,
    RecommendationResult,
)

__all__ = [
    'RecommendationEngine',
    'CurrentMood',
    'TrendSummary',
    'SessionRecommendation',
    'OptimalSchedule',
    'RecommendationResult',
]
