"""
Utility modules for the MoodMash engine.

Provides logging and small time/text helpers.
"""

from .logging import StructuredLogger, LogContext, get_logger
from .helpers import day_of_week, is_weekend, cyclical, format_hour, round_half_up

__all__ = [
    'StructuredLogger',
    'LogContext',
    'get_logger',
    'day_of_week',
    'is_weekend',
    'cyclical',
    'format_hour',
    'round_half_up',
]
