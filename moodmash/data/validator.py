"""
History validation for the MoodMash engine.
"""
from collections import Counter
from typing import List

from .schemas import EMOTION_LABELS, MoodRecord, ValidationResult, WellnessSessionRecord


class HistoryValidator:
    """Checks mood and session histories for conditions the engine degrades on.

    Nothing found here is fatal: unknown emotion labels are mapped to class 0,
    out-of-order timestamps only weaken the sliding-window features. The
    result lets callers surface these issues.
    """

    KNOWN_EMOTIONS = frozenset(EMOTION_LABELS)
    KNOWN_SESSION_TYPES = frozenset({'meditation', 'yoga', 'music'})

    def validate_moods(self, moods: List[MoodRecord]) -> ValidationResult:
        result = ValidationResult()
        if not moods:
            result.add_warning("Mood history is empty")

        unknown = Counter(
            m.emotion for m in moods if m.emotion.lower() not in self.KNOWN_EMOTIONS
        )
        for emotion, count in unknown.items():
            result.add_warning(
                f"Unrecognized emotion '{emotion}' ({count} entries) will be treated as '{EMOTION_LABELS[0]}'"
            )

        out_of_order = sum(
            1 for prev, curr in zip(moods, moods[1:]) if curr.timestamp < prev.timestamp
        )
        if out_of_order:
            result.add_warning(
                f"{out_of_order} mood entries are older than the entry before them; history should be oldest first"
            )

        result.metadata = {
            'total_entries': len(moods),
            'unknown_emotions': sum(unknown.values()),
            'out_of_order': out_of_order,
        }
        return result

    def validate_sessions(self, sessions: List[WellnessSessionRecord]) -> ValidationResult:
        result = ValidationResult()
        unknown_types = Counter(
            s.type for s in sessions if s.type not in self.KNOWN_SESSION_TYPES
        )
        for session_type, count in unknown_types.items():
            result.add_warning(f"Unexpected session type '{session_type}' ({count} sessions)")

        with_change = sum(1 for s in sessions if s.has_mood_change)
        result.metadata = {
            'total_sessions': len(sessions),
            'sessions_with_mood_change': with_change,
        }
        return result

    def validate_all(self, moods: List[MoodRecord], sessions: List[WellnessSessionRecord]) -> ValidationResult:
        mood_result = self.validate_moods(moods)
        session_result = self.validate_sessions(sessions)
        return ValidationResult(
            warnings=mood_result.warnings + session_result.warnings,
            metadata={
                'moods': mood_result.metadata,
                'sessions': session_result.metadata,
            },
        )
