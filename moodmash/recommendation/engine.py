"""
Recommendation engine for the MoodMash engine.
"""
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..config.settings import RecommendationConfig
from ..data.schemas import ContentCatalog, MoodRecord, WellnessSessionRecord
from ..utils.helpers import format_hour
from ..utils.logging import StructuredLogger
from .schemas import CurrentMood, OptimalSchedule, RecommendationResult, SessionRecommendation, TrendSummary

TREND_WINDOW = 7
TREND_MIN_RECORDS = 3
TREND_THRESHOLD = 0.2

MEDITATION_CATEGORIES = {
    'anxious': 'anxiety',
    'stressed': 'stress',
    'sad': 'sleep',
    'tired': 'energy',
    'calm': 'focus',
    'happy': 'gratitude',
}
MEDITATION_FALLBACK = 'breathing'

YOGA_CATEGORIES = {
    'anxious': ('seated', 'beginner'),
    'stressed': ('restorative', 'beginner'),
    'tired': ('energizing', 'beginner'),
    'sad': ('backbend', 'intermediate'),
    'calm': ('balance', 'intermediate'),
    'energetic': ('standing', 'advanced'),
}
ADVANCED_YOGA_KEYWORDS = ('advanced', 'intermediate', 'challenge')

MUSIC_MOODS = {
    'anxious': 'calm',
    'stressed': 'calm',
    'sad': 'comfort',
    'tired': 'energetic',
    'calm': 'focus',
    'happy': 'happy',
    'energetic': 'energetic',
    'motivated': 'energetic',
}
MUSIC_FALLBACK = 'all'

MEDITATION_EFFECTS = {
    'anxiety': 'Reduce anxiety by 40-60% within 15 minutes',
    'stress': 'Lower stress hormones and promote relaxation',
    'sleep': 'Prepare mind for restful sleep',
    'energy': 'Increase alertness and mental clarity',
    'focus': 'Enhance concentration and present-moment awareness',
    'gratitude': 'Cultivate appreciation and positive outlook',
    'breathing': 'Activate calm response and reduce tension',
}
YOGA_EFFECTS = {
    'seated': 'Ground emotions and reduce mental chatter',
    'restorative': 'Deep relaxation and stress release',
    'energizing': 'Boost energy and vitality',
    'backbend': 'Open heart and uplift mood',
    'balance': 'Enhance mental equilibrium and focus',
    'standing': 'Build strength and confidence',
}
MUSIC_EFFECTS = {
    'calm': 'Reduce stress and create peaceful atmosphere',
    'comfort': 'Provide emotional support and validation',
    'energetic': 'Boost mood and motivation',
    'focus': 'Enhance concentration and productivity',
    'happy': 'Elevate mood and spread positivity',
}

# (first hour, last hour, activity, reason)
SCHEDULE_SLOTS: List[Tuple[int, int, str, str]] = [
    (5, 9, 'morning meditation or yoga', 'Morning practice sets a positive tone for the day'),
    (12, 14, 'midday mindfulness break', 'Afternoon practice combats post-lunch fatigue'),
    (17, 19, 'evening wind-down routine', 'Evening practice helps transition to rest'),
    (20, 22, 'relaxation or sleep meditation', 'Late practice prepares mind for restful sleep'),
]
DEFAULT_SLOT = ('wellness session', 'Consistent practice time')
SCHEDULE_SIZE = 3


class RecommendationEngine:
    """Scores catalog content against the user's current mood and recent trend."""

    def __init__(self, config: Optional[RecommendationConfig] = None, logger: Optional[StructuredLogger] = None):
        """Initialize the recommendation engine.

        Args:
            config: Limits, base scores and thresholds
            logger: Structured logger instance
        """
        self.config = config or RecommendationConfig()
        self.logger = logger or StructuredLogger(__name__)

    def generate(self,
                 mood_history: Sequence[MoodRecord],
                 wellness_history: Optional[Sequence[WellnessSessionRecord]] = None,
                 catalog: Optional[ContentCatalog] = None,
                 count: Optional[int] = None) -> RecommendationResult:
        """Generate ranked recommendations, tips and a practice schedule.

        Args:
            mood_history: Mood records, oldest first
            wellness_history: Completed wellness sessions
            catalog: Meditation, yoga and music content to choose from
            count: Maximum number of recommendations (defaults to config)

        Returns:
            RecommendationResult with recommendations sorted by descending score

        Raises:
            ValueError: If count is not positive
        """
        count = self.config.default_count if count is None else count
        if count <= 0:
            raise ValueError(f"count must be positive, got {count}")
        sessions = list(wellness_history or [])
        catalog = catalog or ContentCatalog()

        current = self.current_mood(mood_history)
        trends = self.analyze_trends(mood_history)

        candidates = (
            self.recommend_meditations(catalog, current, trends)
            + self.recommend_yoga(catalog, current, trends, self.user_yoga_level(sessions))
            + self.recommend_music(catalog, current, trends)
        )
        ranked = sorted(candidates, key=lambda r: r.score, reverse=True)[:count]

        if not catalog:
            self.logger.info("Content catalog is empty; no sessions to recommend")
        self.logger.debug(
            "Recommendations generated",
            emotion=current.emotion,
            trend=trends.trend,
            volatility=trends.volatility,
            candidates=len(candidates),
            returned=len(ranked),
        )
        return RecommendationResult(
            recommendations=ranked,
            personalized_tips=self.generate_tips(current, trends),
            optimal_schedule=self.optimal_schedule(sessions),
        )

    @staticmethod
    def current_mood(mood_history: Sequence[MoodRecord]) -> CurrentMood:
        if not mood_history:
            return CurrentMood()
        latest = mood_history[-1]
        return CurrentMood(emotion=latest.emotion.lower(), intensity=latest.intensity)

    @staticmethod
    def analyze_trends(mood_history: Sequence[MoodRecord]) -> TrendSummary:
        """Trend, mean and population standard deviation of the last seven intensities."""
        if len(mood_history) < TREND_MIN_RECORDS:
            return TrendSummary()
        intensities = np.array([m.intensity for m in mood_history[-TREND_WINDOW:]], dtype=float)
        slope = (intensities[-1] - intensities[0]) / len(intensities)
        if slope > TREND_THRESHOLD:
            trend = "improving"
        elif slope < -TREND_THRESHOLD:
            trend = "declining"
        else:
            trend = "stable"
        return TrendSummary(trend=trend, mean=float(intensities.mean()), volatility=float(intensities.std()))

    def _score(self, base: float, rank: int) -> float:
        return base - rank * self.config.rank_step

    def recommend_meditations(self,
                              catalog: ContentCatalog,
                              current: CurrentMood,
                              trends: TrendSummary) -> List[SessionRecommendation]:
        target = MEDITATION_CATEGORIES.get(current.emotion, 'general')
        matches = [m for m in catalog.meditation if m.category in (target, MEDITATION_FALLBACK)]

        recommendations = []
        for rank, item in enumerate(matches[:self.config.meditation_limit]):
            score = self._score(self.config.meditation_base_score, rank)
            urgency = "medium"
            reasoning = []
            if trends.is_declining and target in ('anxiety', 'stress'):
                score += 0.15
                urgency = "high"
            if trends.volatility > self.config.volatility_threshold:
                score += 0.1
                reasoning.append("Helps stabilize mood fluctuations")
            reasoning.append(f"Targets {target} mood patterns")
            reasoning.append("Recommended based on current emotional state")

            recommendations.append(SessionRecommendation(
                session_id=item.id,
                session_type='meditation',
                name=item.name,
                score=min(max(score, 0.0), 1.0),
                predicted_effect=MEDITATION_EFFECTS.get(target, 'Promote overall emotional well-being'),
                reasoning=reasoning,
                urgency=urgency,
            ))
        return recommendations

    def recommend_yoga(self,
                       catalog: ContentCatalog,
                       current: CurrentMood,
                       trends: TrendSummary,
                       user_level: str) -> List[SessionRecommendation]:
        category, _ = YOGA_CATEGORIES.get(current.emotion, ('standing', 'beginner'))
        matches = [y for y in catalog.yoga if y.category == category or y.level == user_level]

        recommendations = []
        for rank, item in enumerate(matches[:self.config.yoga_limit]):
            score = self._score(self.config.yoga_base_score, rank)
            urgency = "medium"
            if trends.is_declining:
                score += 0.1
                urgency = "high"

            recommendations.append(SessionRecommendation(
                session_id=item.id,
                session_type='yoga',
                name=item.name,
                score=min(max(score, 0.0), 1.0),
                predicted_effect=YOGA_EFFECTS.get(category, 'Improve overall physical and mental well-being'),
                reasoning=[
                    f"Matches your {category} needs",
                    f"Appropriate for your {user_level} level",
                ],
                urgency=urgency,
            ))
        return recommendations

    def recommend_music(self,
                        catalog: ContentCatalog,
                        current: CurrentMood,
                        trends: TrendSummary) -> List[SessionRecommendation]:
        target = MUSIC_MOODS.get(current.emotion, MUSIC_FALLBACK)
        matches = [m for m in catalog.music if m.mood in (target, MUSIC_FALLBACK)]

        recommendations = []
        for rank, item in enumerate(matches[:self.config.music_limit]):
            score = self._score(self.config.music_base_score, rank)
            urgency = "medium"
            if trends.is_declining and target in ('calm', 'comfort'):
                score += 0.15
                urgency = "high"

            recommendations.append(SessionRecommendation(
                session_id=item.id,
                session_type='music',
                name=item.name,
                score=min(max(score, 0.0), 1.0),
                predicted_effect=MUSIC_EFFECTS.get(target, 'Support emotional well-being through sound'),
                reasoning=[
                    f"Matches your {target} mood state",
                    "Curated for emotional resonance",
                ],
                urgency=urgency,
            ))
        return recommendations

    @staticmethod
    def user_yoga_level(sessions: Sequence[WellnessSessionRecord]) -> str:
        """'intermediate' once three yoga sessions exist and one names a harder practice."""
        yoga = [s for s in sessions if s.type == 'yoga']
        if len(yoga) < 3:
            return 'beginner'
        advanced = any(
            keyword in s.name.lower() for s in yoga for keyword in ADVANCED_YOGA_KEYWORDS
        )
        return 'intermediate' if advanced else 'beginner'

    def generate_tips(self, current: CurrentMood, trends: TrendSummary) -> List[str]:
        tips = []
        if trends.is_declining:
            tips.append("Consider adding a short 5-minute meditation to your morning routine")
            tips.append("Your body might need more rest - prioritize sleep tonight")
        if trends.volatility > self.config.volatility_threshold:
            tips.append("Try consistent daily wellness activities to stabilize mood")
            tips.append("Journaling before bed can help process daily emotions")
        if current.intensity < self.config.low_intensity_threshold:
            tips.append("Start with gentle activities - avoid demanding workouts today")
            tips.append("Reach out to a friend or support person if needed")
        if current.emotion in ('anxious', 'stressed'):
            tips.append("Practice 4-7-8 breathing: inhale 4s, hold 7s, exhale 8s")
            tips.append("Limit caffeine intake for the next few hours")
        return tips

    @staticmethod
    def optimal_schedule(sessions: Sequence[WellnessSessionRecord]) -> List[OptimalSchedule]:
        """The three most frequent session hours, earliest hour first among ties."""
        if not sessions:
            return []
        hour_counts: Dict[int, int] = {}
        for session in sessions:
            hour = session.completed_at.hour
            hour_counts[hour] = hour_counts.get(hour, 0) + 1
        peaks = sorted(sorted(hour_counts.items()), key=lambda item: item[1], reverse=True)[:SCHEDULE_SIZE]

        schedule = []
        for hour, count in peaks:
            activity, reason = next(
                ((a, r) for first, last, a, r in SCHEDULE_SLOTS if first <= hour <= last),
                DEFAULT_SLOT,
            )
            schedule.append(OptimalSchedule(
                time_slot=format_hour(hour, clock=True),
                activity=activity,
                confidence=count / len(sessions),
                reason=reason,
            ))
        return schedule
