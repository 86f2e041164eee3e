"""
Configuration module for the MoodMash engine.
"""

from .settings import (
    AppConfig,
    NetworkConfig,
    PredictionConfig,
    PatternConfig,
    RecommendationConfig,
    SentimentConfig,
    LoggingConfig,
    VersioningConfig,
    ConfigManager,
    ConfigValidationError,
    DEFAULT_CONFIG_PATH,
)

__all__ = [
    'AppConfig',
    'NetworkConfig',
    'PredictionConfig',
    'PatternConfig',
    'RecommendationConfig',
    'SentimentConfig',
    'LoggingConfig',
    'VersioningConfig',
    'ConfigManager',
    'ConfigValidationError',
    'DEFAULT_CONFIG_PATH',
]
