"""
Tests for the pattern detection engine.
"""
import unittest
from datetime import datetime, timedelta

import pandas as pd

from moodmash.config.settings import PatternConfig
from moodmash.data.processor import HistoryProcessor
from moodmash.data.schemas import EmotionLabel, MoodRecord
from moodmash.patterns.detector import PatternDetectionEngine, dominant_emotion, peak_hour
from moodmash.patterns.schemas import DetectedPattern

from tests.factories import START, mood_history, session

NOW = datetime(2024, 2, 1, 12, 0)


def daily_moods(days, entries):
    """``entries`` is a list of (hour, intensity, emotion) logged every day."""
    records = []
    for day in range(days):
        for hour, intensity, emotion in entries:
            records.append(MoodRecord(
                emotion=emotion,
                intensity=intensity,
                timestamp=START.replace(hour=hour) + timedelta(days=day),
            ))
    return records


def meditation_sessions(count):
    return [
        session('meditation', hour=10, day=day, before=EmotionLabel('sad'), after=EmotionLabel('happy'))
        for day in range(count)
    ]


def timing_sessions():
    hours = [7, 7, 7, 7, 8, 9, 10, 11, 12, 13]
    return [session('yoga', hour=hour, day=day) for day, hour in enumerate(hours)]


class TestHelpers(unittest.TestCase):

    def test_dominant_emotion_prefers_first_seen_on_ties(self):
        self.assertEqual(dominant_emotion(pd.Series(['calm', 'sad', 'sad', 'calm'])), 'calm')
        self.assertEqual(dominant_emotion(pd.Series(['calm', 'sad', 'sad'])), 'sad')

    def test_dominant_emotion_of_nothing_is_neutral(self):
        self.assertEqual(dominant_emotion(pd.Series([], dtype=object)), 'neutral')

    def test_peak_hour_prefers_earliest_hour_on_ties(self):
        self.assertEqual(peak_hour(pd.Series([15, 9, 15, 9, 20])), (9, 2))

    def test_peak_hour_of_nothing(self):
        self.assertIsNone(peak_hour(pd.Series([], dtype=int)))


class TestPatternSchemas(unittest.TestCase):

    def test_strength_out_of_range_is_rejected(self):
        with self.assertRaises(ValueError):
            DetectedPattern(id='x', type='weekly', strength=1.5, description='')

    def test_unknown_type_is_rejected(self):
        with self.assertRaises(ValueError):
            DetectedPattern(id='x', type='seasonal', strength=0.5, description='')


class TestCircadianDetection(unittest.TestCase):

    def setUp(self):
        self.engine = PatternDetectionEngine()

    def test_morning_person(self):
        moods = daily_moods(10, [(8, 8, 'energetic'), (19, 6, 'tired')])
        result = self.engine.detect_all(moods, now=NOW)
        self.assertEqual(len(result.patterns), 1)
        pattern = result.patterns[0]
        self.assertEqual(pattern.type, 'circadian')
        self.assertAlmostEqual(pattern.strength, 0.2)
        self.assertEqual(pattern.id, f"circadian_{int(NOW.timestamp() * 1000)}")
        self.assertIn("energetic in mornings", pattern.description)
        self.assertIn("Morning: Focus on challenging tasks", result.recommendations)
        self.assertIn("Evening: Practice energizing exercises", result.recommendations)
        self.assertEqual(result.insights[0].title, "Your Daily Rhythm")
        self.assertTrue(result.insights[0].recommendation.startswith("Schedule important tasks"))

    def test_small_difference_is_not_reported(self):
        moods = daily_moods(10, [(8, 7, 'calm'), (19, 6, 'calm')])
        self.assertIsNone(self.engine.detect_circadian(HistoryProcessor.moods_frame(moods)))

    def test_needs_enough_entries(self):
        moods = daily_moods(9, [(8, 9, 'happy'), (19, 2, 'sad')])
        self.assertIsNone(self.engine.detect_circadian(HistoryProcessor.moods_frame(moods)))


class TestWeeklyDetection(unittest.TestCase):

    def setUp(self):
        self.engine = PatternDetectionEngine()

    def test_better_weekends(self):
        intensities = [8 if (START + timedelta(days=i)).weekday() >= 5 else 4 for i in range(35)]
        moods = mood_history(intensities, emotions=['calm'], step=timedelta(days=1))
        finding = self.engine.detect_weekly(HistoryProcessor.moods_frame(moods), stamp=7)
        self.assertIsNotNone(finding)
        self.assertEqual(finding.patterns[0].id, "weekly_7")
        self.assertAlmostEqual(finding.patterns[0].strength, 0.4)
        self.assertIn("Weekday average: 4.0 (25 entries)", finding.patterns[0].evidence)
        self.assertEqual(finding.recommendations[0], "Plan enjoyable activities during weekends to maintain momentum")

    def test_needs_weekend_entries(self):
        moods = mood_history([5] * 30, step=timedelta(hours=1))  # all on one Monday and Tuesday
        self.assertIsNone(self.engine.detect_weekly(HistoryProcessor.moods_frame(moods)))


class TestTriggerDetection(unittest.TestCase):

    def test_afternoon_drops(self):
        moods = daily_moods(8, [(9, 8, 'happy'), (15, 4, 'stressed')])
        result = PatternDetectionEngine().detect_all(moods, now=NOW)
        triggers = [p for p in result.patterns if p.type == 'trigger']
        self.assertEqual(len(triggers), 1)
        self.assertEqual(triggers[0].description, "Mood tends to drop around 3 PM")
        self.assertEqual(triggers[0].strength, 1.0)
        self.assertIn("8 mood drops detected", triggers[0].evidence)
        self.assertIn("Schedule relaxation time around 3 PM", result.recommendations)

    def test_small_drops_are_ignored(self):
        moods = daily_moods(8, [(9, 6, 'happy'), (15, 4, 'calm')])
        finding = PatternDetectionEngine().detect_triggers(HistoryProcessor.moods_frame(moods))
        self.assertIsNone(finding)

    def test_scattered_drops_do_not_cluster(self):
        intensities = [9, 5, 9, 5, 9, 5, 9, 5, 9, 5, 9, 5, 9, 5, 9]
        moods = mood_history(intensities, step=timedelta(hours=5))
        finding = PatternDetectionEngine().detect_triggers(HistoryProcessor.moods_frame(moods))
        self.assertIsNone(finding)


class TestResponseDetection(unittest.TestCase):

    def test_meditation_lifts_mood(self):
        result = PatternDetectionEngine().detect_all([], meditation_sessions(6), now=NOW)
        self.assertEqual(len(result.patterns), 1)
        pattern = result.patterns[0]
        self.assertEqual(pattern.type, 'response')
        self.assertEqual(pattern.strength, 1.0)
        self.assertEqual(pattern.description, "meditation sessions tend to improve mood by 4.0 points")
        self.assertEqual(result.insights[0].title, "Meditation Works for You")
        self.assertEqual(result.insights[0].confidence, 1.0)
        self.assertIn("Schedule meditation sessions 2-3 times per week", result.recommendations)

    def test_sessions_without_readings_are_not_counted(self):
        sessions = meditation_sessions(4) + [session('meditation', hour=10, day=9)]
        frame = HistoryProcessor.sessions_frame(sessions)
        self.assertIsNone(PatternDetectionEngine().detect_responses(frame))

    def test_unhelpful_activity_is_not_reported(self):
        sessions = [
            session('music', hour=10, day=day, before=EmotionLabel('happy'), after=EmotionLabel('sad'))
            for day in range(6)
        ]
        frame = HistoryProcessor.sessions_frame(sessions)
        self.assertIsNone(PatternDetectionEngine().detect_responses(frame))


class TestCorrelationDetection(unittest.TestCase):

    def test_preferred_practice_time(self):
        result = PatternDetectionEngine().detect_all([], timing_sessions(), now=NOW)
        self.assertEqual(len(result.patterns), 1)
        pattern = result.patterns[0]
        self.assertEqual(pattern.type, 'correlation')
        self.assertAlmostEqual(pattern.strength, 0.4)
        self.assertEqual(pattern.description, "You tend to do wellness activities around 7 AM")
        self.assertIn("4 of 10 activities at 7 AM", pattern.evidence)
        self.assertEqual(result.insights[0].title, "Optimal Activity Time")

    def test_needs_ten_sessions(self):
        frame = HistoryProcessor.sessions_frame(timing_sessions()[:9])
        self.assertIsNone(PatternDetectionEngine().detect_correlations(frame))


class TestDetectAll(unittest.TestCase):

    def test_empty_history(self):
        result = PatternDetectionEngine().detect_all([], [], now=NOW)
        self.assertEqual(result.to_dict(), {'patterns': [], 'insights': [], 'recommendations': []})

    def test_short_history_finds_nothing(self):
        result = PatternDetectionEngine().detect_all(mood_history([5, 2, 8, 1]), now=NOW)
        self.assertEqual(result.patterns, [])

    def test_outputs_are_capped(self):
        config = PatternConfig(max_patterns=1, max_insights=1, max_recommendations=3)
        moods = daily_moods(8, [(9, 8, 'happy'), (15, 4, 'stressed')])
        sessions = meditation_sessions(6) + timing_sessions()
        result = PatternDetectionEngine(config).detect_all(moods, sessions, now=NOW)
        self.assertEqual(len(result.patterns), 1)
        self.assertEqual(result.patterns[0].type, 'trigger')
        self.assertEqual(len(result.insights), 1)
        self.assertEqual(len(result.recommendations), 3)

    def test_recommendations_are_unique(self):
        moods = daily_moods(8, [(9, 8, 'happy'), (15, 4, 'stressed')])
        sessions = meditation_sessions(6) + timing_sessions()
        result = PatternDetectionEngine().detect_all(moods, sessions, now=NOW)
        self.assertEqual(len(result.recommendations), len(set(result.recommendations)))
        self.assertLessEqual(len(result.recommendations), 5)
        self.assertLessEqual(len(result.insights), 5)


if __name__ == '__main__':
    unittest.main()
