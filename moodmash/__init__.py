"""
MoodMash ML engine.

On-device analytics over a user's mood and wellness history: mood
forecasting with a small feed-forward network, behavioral pattern
detection, wellness-content recommendations and lexical sentiment
analysis of journal entries.
"""

__version__ = "1.0.0"

from .errors import MoodMashError, ModelImportError
from .service import MLService

__all__ = ['MLService', 'MoodMashError', 'ModelImportError', '__version__']
