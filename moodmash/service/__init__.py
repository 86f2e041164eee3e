"""
Facade over the MoodMash engines.
"""

from .ml_service import MLService

__all__ = ['MLService']
