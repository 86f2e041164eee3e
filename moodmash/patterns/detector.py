"""
Pattern detection engine for the MoodMash engine.

Statistical analysis over mood and wellness-session histories. Every
detector has a minimum sample gate and a significance threshold and
returns None when either is not met.
"""
from collections import Counter
from datetime import datetime
from typing import List, Optional, Sequence

import pandas as pd

from ..config.settings import PatternConfig
from ..data.processor import HistoryProcessor
from ..data.schemas import MoodRecord, WellnessSessionRecord
from ..utils.helpers import format_hour
from ..utils.logging import StructuredLogger
from .schemas import DetectedPattern, DetectorFinding, PatternInsight, PatternResult

MORNING_HOURS = (5, 11)
EVENING_HOURS = (17, 21)


def dominant_emotion(emotions: pd.Series) -> str:
    """Most frequent label, first seen wins ties; 'neutral' for an empty series."""
    counts = Counter(emotions)
    if not counts:
        return 'neutral'
    return counts.most_common(1)[0][0]


def peak_hour(hours: pd.Series) -> Optional[tuple]:
    """(hour, count) of the busiest hour, earliest hour wins ties."""
    if hours.empty:
        return None
    counts = hours.value_counts().sort_index().sort_values(ascending=False, kind='stable')
    return int(counts.index[0]), int(counts.iloc[0])


class PatternDetectionEngine:
    """Detects circadian, weekly, trigger, response and timing patterns."""

    def __init__(self, config: Optional[PatternConfig] = None, logger: Optional[StructuredLogger] = None):
        """
        Args:
            config: Sample gates, thresholds and output caps
            logger: Structured logger instance
        """
        self.config = config or PatternConfig()
        self.logger = logger or StructuredLogger(__name__)

    def detect_all(self,
                   mood_history: Sequence[MoodRecord],
                   wellness_history: Optional[Sequence[WellnessSessionRecord]] = None,
                   now: Optional[datetime] = None) -> PatternResult:
        """Run every detector and merge what fires.

        Args:
            mood_history: Mood records, oldest first
            wellness_history: Completed wellness sessions
            now: Time used to stamp pattern ids (defaults to now)

        Returns:
            PatternResult capped to the configured number of patterns,
            insights and de-duplicated recommendations
        """
        stamp = int((now or datetime.now()).timestamp() * 1000)
        moods = HistoryProcessor.moods_frame(list(mood_history))
        sessions = HistoryProcessor.sessions_frame(list(wellness_history or []))

        detectors = [
            ('circadian', lambda: self.detect_circadian(moods, stamp)),
            ('weekly', lambda: self.detect_weekly(moods, stamp)),
            ('trigger', lambda: self.detect_triggers(moods, stamp)),
            ('response', lambda: self.detect_responses(sessions, stamp)),
            ('correlation', lambda: self.detect_correlations(sessions, stamp)),
        ]

        patterns: List[DetectedPattern] = []
        insights: List[PatternInsight] = []
        recommendations: List[str] = []
        fired = []
        for name, detect in detectors:
            finding = detect()
            if finding is None:
                continue
            fired.append(name)
            patterns.extend(finding.patterns)
            insights.extend(finding.insights)
            recommendations.extend(finding.recommendations)

        self.logger.debug(
            "Pattern detection finished",
            mood_entries=len(moods),
            sessions=len(sessions),
            detectors_fired=fired,
        )
        return PatternResult(
            patterns=patterns[:self.config.max_patterns],
            insights=insights[:self.config.max_insights],
            recommendations=list(dict.fromkeys(recommendations))[:self.config.max_recommendations],
        )

    def detect_circadian(self, moods: pd.DataFrame, stamp: int = 0) -> Optional[DetectorFinding]:
        """Compare average intensity in the morning (5-11) and evening (17-21)."""
        cfg = self.config
        if len(moods) < cfg.circadian_min_entries:
            return None

        morning = moods[moods['hour'].between(*MORNING_HOURS)]
        evening = moods[moods['hour'].between(*EVENING_HOURS)]
        if len(morning) < cfg.circadian_min_per_bucket or len(evening) < cfg.circadian_min_per_bucket:
            return None

        morning_avg = float(morning['intensity'].mean())
        evening_avg = float(evening['intensity'].mean())
        strength = abs(morning_avg - evening_avg) / 10
        if strength < cfg.circadian_threshold:
            return None

        morning_mood = dominant_emotion(morning['emotion'])
        evening_mood = dominant_emotion(evening['emotion'])
        morning_focus = 'challenging tasks' if morning_mood in ('energetic', 'motivated') else 'gentle activities'
        evening_practice = 'meditation' if evening_mood in ('calm', 'relaxed') else 'energizing exercises'

        return DetectorFinding(
            patterns=[DetectedPattern(
                id=f"circadian_{stamp}",
                type='circadian',
                strength=min(strength, 1.0),
                description=f"Mood varies throughout the day: {morning_mood} in mornings, {evening_mood} in evenings",
                evidence=[
                    f"Morning average intensity: {morning_avg:.1f} ({len(morning)} entries)",
                    f"Evening average intensity: {evening_avg:.1f} ({len(evening)} entries)",
                    f"Morning dominant mood: {morning_mood}",
                    f"Evening dominant mood: {evening_mood}",
                ],
            )],
            insights=[PatternInsight(
                title="Your Daily Rhythm",
                description=f"You tend to feel {morning_mood} in the mornings and {evening_mood} in the evenings.",
                confidence=min(strength, 1.0),
                actionable=True,
                recommendation=(
                    "Schedule important tasks in the morning when your mood is typically higher."
                    if morning_avg > evening_avg else
                    "Reserve evenings for self-care activities when your mood is typically better."
                ),
            )],
            recommendations=[
                f"Morning: Focus on {morning_focus}",
                f"Evening: Practice {evening_practice}",
                "Maintain consistent sleep times to stabilize your circadian rhythm",
            ],
        )

    def detect_weekly(self, moods: pd.DataFrame, stamp: int = 0) -> Optional[DetectorFinding]:
        """Compare average intensity on weekdays and weekends (Saturday, Sunday)."""
        cfg = self.config
        if len(moods) < cfg.weekly_min_entries:
            return None

        weekend = moods[moods['is_weekend']]
        weekday = moods[~moods['is_weekend']]
        if len(weekday) < cfg.weekly_min_weekday or len(weekend) < cfg.weekly_min_weekend:
            return None

        weekday_avg = float(weekday['intensity'].mean())
        weekend_avg = float(weekend['intensity'].mean())
        strength = abs(weekday_avg - weekend_avg) / 10
        if strength < cfg.weekly_threshold:
            return None

        weekday_mood = dominant_emotion(weekday['emotion'])
        weekend_mood = dominant_emotion(weekend['emotion'])
        weekends_better = weekday_avg < weekend_avg

        return DetectorFinding(
            patterns=[DetectedPattern(
                id=f"weekly_{stamp}",
                type='weekly',
                strength=min(strength, 1.0),
                description=f"Mood differs between weekdays ({weekday_mood}) and weekends ({weekend_mood})",
                evidence=[
                    f"Weekday average: {weekday_avg:.1f} ({len(weekday)} entries)",
                    f"Weekend average: {weekend_avg:.1f} ({len(weekend)} entries)",
                    f"Weekday dominant: {weekday_mood}",
                    f"Weekend dominant: {weekend_mood}",
                ],
            )],
            insights=[PatternInsight(
                title="Weekday vs Weekend Patterns",
                description=f"Your mood tends to be {weekday_mood} on weekdays and {weekend_mood} on weekends.",
                confidence=min(strength, 1.0),
                actionable=True,
                recommendation=(
                    "Use weekends to recharge. Consider shorter workweeks if possible."
                    if weekends_better else
                    "You thrive during the week. Maintain work-life balance to preserve this energy."
                ),
            )],
            recommendations=[
                "Plan enjoyable activities during weekends to maintain momentum"
                if weekends_better else
                "Continue weekday routines that contribute to your positive mood",
                "Consider what aspects of weekends improve your mood and incorporate them into weekdays",
                "Track specific activities to identify what makes weekends different",
            ],
        )

    def detect_triggers(self, moods: pd.DataFrame, stamp: int = 0) -> Optional[DetectorFinding]:
        """Find an hour of day where sharp drops between consecutive entries cluster."""
        cfg = self.config
        if len(moods) < cfg.trigger_min_entries:
            return None

        drop_size = moods['intensity'].shift(1) - moods['intensity']
        drops = moods[drop_size > cfg.trigger_drop_points]
        if len(drops) < cfg.trigger_min_drops:
            return None

        hour, count = peak_hour(drops['hour'])
        if count < cfg.trigger_min_cluster:
            return None

        when = format_hour(hour)
        strength = count / len(drops)
        return DetectorFinding(
            patterns=[DetectedPattern(
                id=f"trigger_time_{stamp}",
                type='trigger',
                strength=strength,
                description=f"Mood tends to drop around {when}",
                evidence=[
                    f"{len(drops)} mood drops detected",
                    f"{count} drops occurred around {when}",
                    "Pattern suggests a time-based trigger",
                ],
            )],
            insights=[PatternInsight(
                title="Potential Mood Triggers",
                description=(
                    f"Your mood tends to drop around {when}. "
                    "This could be related to work stress, fatigue, or daily routines."
                ),
                confidence=strength,
                actionable=True,
                recommendation=f"Plan calming activities around {when} to prevent mood drops.",
            )],
            recommendations=[
                f"Schedule relaxation time around {when}",
                "Keep a detailed journal during high-risk times to identify specific triggers",
                "Consider preemptive wellness sessions 30 minutes before typical drop times",
            ],
        )

    def detect_responses(self, sessions: pd.DataFrame, stamp: int = 0) -> Optional[DetectorFinding]:
        """Measure how each activity type changes mood between before and after readings."""
        cfg = self.config
        rated = sessions.dropna(subset=['mood_change'])
        if len(rated) < cfg.response_min_sessions:
            return None

        finding = DetectorFinding()
        for activity, group in rated.groupby('type', sort=False):
            changes = group['mood_change']
            if len(changes) < cfg.response_min_per_activity:
                continue
            avg_improvement = float(changes.mean())
            positive_rate = float((changes > 0).mean())
            if not (avg_improvement > cfg.response_min_improvement or positive_rate > cfg.response_min_positive_rate):
                continue

            label = activity[:1].upper() + activity[1:]
            finding.patterns.append(DetectedPattern(
                id=f"response_{activity}_{stamp}",
                type='response',
                strength=min(abs(avg_improvement) / 3, 1.0),
                description=f"{activity} sessions tend to improve mood by {avg_improvement:.1f} points",
                evidence=[
                    f"Analyzed {len(changes)} {activity} sessions",
                    f"Average improvement: {avg_improvement:.1f}",
                    f"Positive response rate: {positive_rate * 100:.0f}%",
                ],
            ))
            finding.insights.append(PatternInsight(
                title=f"{label} Works for You",
                description=f"{label} sessions have a {positive_rate * 100:.0f}% positive response rate.",
                confidence=positive_rate,
                actionable=True,
                recommendation=f"Incorporate more {activity} sessions into your routine, especially during low mood periods.",
            ))
            finding.recommendations.extend([
                f"Schedule {activity} sessions 2-3 times per week",
                f"Use {activity} as a preventive measure during known low-mood periods",
            ])

        return finding if finding.patterns else None

    def detect_correlations(self, sessions: pd.DataFrame, stamp: int = 0) -> Optional[DetectorFinding]:
        """Find a preferred hour of day for wellness sessions."""
        cfg = self.config
        if len(sessions) < cfg.correlation_min_sessions:
            return None

        hour, count = peak_hour(sessions['hour'])
        if count < cfg.correlation_min_hour_count:
            return None

        when = format_hour(hour)
        strength = count / len(sessions)
        return DetectorFinding(
            patterns=[DetectedPattern(
                id=f"correlation_timing_{stamp}",
                type='correlation',
                strength=strength,
                description=f"You tend to do wellness activities around {when}",
                evidence=[
                    f"{count} of {len(sessions)} activities at {when}",
                    "Strong timing preference detected",
                ],
            )],
            insights=[PatternInsight(
                title="Optimal Activity Time",
                description=(
                    f"You consistently practice wellness activities around {when}. "
                    "This routine helps build lasting habits."
                ),
                confidence=strength,
                actionable=True,
                recommendation="Maintain this consistent practice time to maximize benefits.",
            )],
            recommendations=[
                f"Continue your {when} wellness routine",
                "Consider gradually adding new activities during this time slot",
            ],
        )
