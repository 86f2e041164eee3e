"""
Mood prediction models for the MoodMash engine.

Handles feature extraction, training, forecasting, evaluation, and export.
"""

from .mood_predictor import (
    EmotionEncoder,
    ModelState,
    PredictedMood,
    PredictionFactor,
    MoodPredictionResult,
    MoodPredictionModel,
)
from .trainer import EvaluationMetrics, ModelEvaluator, ModelExporter

__all__ = [
    'EmotionEncoder',
    'ModelState',
    'PredictedMood',
    'PredictionFactor',
    'MoodPredictionResult',
    'MoodPredictionModel',
    'EvaluationMetrics',
    'ModelEvaluator',
    'ModelExporter',
]
