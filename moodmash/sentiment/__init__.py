"""
Sentiment analysis module for the MoodMash engine.
"""

from .analyzer import SentimentAnalysisEngine, SentimentResult, DetectedEmotion, tokenize

__all__ = [
    'SentimentAnalysisEngine',
    'SentimentResult',
    'DetectedEmotion',
    'tokenize',
]
