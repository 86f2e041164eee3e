"""
Pattern detection module for the MoodMash engine.

Circadian, weekly, trigger, response and timing-correlation detectors
over mood and wellness-session histories.
"""

from .detector import PatternDetectionEngine
from .schemas import DetectedPattern, PatternInsight, PatternResult, DetectorFinding

__all__ = [
    'PatternDetectionEngine',
    'DetectedPattern',
    'PatternInsight',
    'PatternResult',
    'DetectorFinding',
]
