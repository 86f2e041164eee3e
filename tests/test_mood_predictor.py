"""
Tests for feature extraction, training and forecasting.
"""
import json
import math
import unittest
from datetime import datetime, timedelta

import numpy as np

from moodmash.config.settings import PredictionConfig
from moodmash.data.schemas import MoodRecord
from moodmash.errors import ModelImportError
from moodmash.models.mood_predictor import EmotionEncoder, ModelState, MoodPredictionModel

from tests.factories import mood_history

SATURDAY_MIDNIGHT = datetime(2024, 1, 6, 0, 0)


def make_model(seed: int = 0, epochs: int = 3) -> MoodPredictionModel:
    return MoodPredictionModel(
        prediction_config=PredictionConfig(training_epochs=epochs),
        rng=np.random.default_rng(seed),
    )


class TestEmotionEncoder(unittest.TestCase):

    def test_known_labels_are_case_insensitive(self):
        encoder = EmotionEncoder()
        self.assertEqual(encoder.encode('Sad'), 5)
        self.assertEqual(encoder.decode(9), 'frustrated')

    def test_unknown_label_maps_to_class_zero(self):
        self.assertEqual(EmotionEncoder().encode('bewildered'), 0)

    def test_from_pairs_requires_every_index(self):
        pairs = EmotionEncoder().to_pairs()[:-1]
        with self.assertRaises(ModelImportError):
            EmotionEncoder.from_pairs(pairs, 10)

    def test_from_pairs_rejects_repeated_index(self):
        pairs = EmotionEncoder().to_pairs()
        pairs[1] = ['calm', 0]
        with self.assertRaises(ModelImportError):
            EmotionEncoder.from_pairs(pairs, 10)


class TestFeatureExtraction(unittest.TestCase):

    def setUp(self):
        self.model = make_model()

    def test_empty_history_uses_placeholders(self):
        features = self.model.extract_features([], SATURDAY_MIDNIGHT)
        self.assertEqual(features.shape, (48,))
        self.assertAlmostEqual(features[0], 0.0)
        self.assertAlmostEqual(features[1], 1.0)
        self.assertAlmostEqual(features[2], math.sin(2 * math.pi * 6 / 7))
        self.assertEqual(features[4], 1.0)
        for slot in range(7):
            base = 5 + slot * 6
            self.assertEqual(features[base], 0.5)
            self.assertEqual(features[base + 1], 0.5)
            self.assertEqual(list(features[base + 2:base + 6]), [0.0, 0.0, 0.0, 0.0])
        self.assertEqual(features[47], 0.0)

    def test_weekday_flag_is_zero_on_monday(self):
        features = self.model.extract_features([], datetime(2024, 1, 1, 15, 0))
        self.assertEqual(features[4], 0.0)

    def test_record_slot_encoding(self):
        record = MoodRecord(emotion='sad', intensity=8, timestamp=datetime(2024, 1, 3, 6, 0))  # Wednesday
        features = self.model.extract_features([record], SATURDAY_MIDNIGHT)
        self.assertAlmostEqual(features[5], 0.5)
        self.assertAlmostEqual(features[6], 0.8)
        self.assertAlmostEqual(features[7], 1.0)
        self.assertAlmostEqual(features[8], 0.0, places=12)
        self.assertAlmostEqual(features[9], 3 / 7)
        self.assertEqual(features[10], 1.0)

    def test_unknown_emotion_encodes_as_zero(self):
        record = MoodRecord(emotion='meh', intensity=3, timestamp=SATURDAY_MIDNIGHT)
        features = self.model.extract_features([record], SATURDAY_MIDNIGHT)
        self.assertEqual(features[5], 0.0)
        self.assertEqual(features[10], 0.0)

    def test_only_last_seven_records_are_used(self):
        history = mood_history([1, 1, 1, 2, 3, 4, 5, 6, 7, 8])
        features = self.model.extract_features(history, SATURDAY_MIDNIGHT)
        self.assertAlmostEqual(features[6], 0.2)
        self.assertAlmostEqual(features[5 + 6 * 6 + 1], 0.8)

    def test_trend_feature_uses_last_three_records(self):
        history = mood_history([5, 2, 4, 8])
        features = self.model.extract_features(history, SATURDAY_MIDNIGHT)
        self.assertAlmostEqual(features[47], math.tanh(3.0))

    def test_trend_feature_needs_three_records(self):
        features = self.model.extract_features(mood_history([1, 9]), SATURDAY_MIDNIGHT)
        self.assertEqual(features[47], 0.0)


class TestTrainingData(unittest.TestCase):

    def test_one_pair_per_record_after_the_window(self):
        model = make_model()
        history = mood_history([5] * 20)
        inputs, targets = model.prepare_training_data(history)
        self.assertEqual(inputs.shape, (13, 48))
        self.assertEqual(targets.shape, (13, 10))
        np.testing.assert_array_equal(targets.sum(axis=1), np.ones(13))
        self.assertEqual(int(np.argmax(targets[0])), EmotionEncoder().encode(history[7].emotion))

    def test_short_history_gives_no_pairs(self):
        inputs, targets = make_model().prepare_training_data(mood_history([5] * 7))
        self.assertEqual(len(inputs), 0)
        self.assertEqual(len(targets), 0)


class TestTrainingGate(unittest.TestCase):

    def test_too_few_samples_leaves_model_untrained(self):
        model = make_model()
        history = model.train(mood_history([5] * 16))
        self.assertEqual(history.losses, [1.0])
        self.assertEqual(history.accuracies, [0.0])
        state = model.get_state()
        self.assertFalse(state.is_trained)
        self.assertIsNone(state.last_trained)

    def test_enough_samples_trains_the_model(self):
        model = make_model(epochs=4)
        records = mood_history([3, 5, 7, 6, 4, 8, 2, 9, 5, 6, 7, 4, 3, 8, 6, 5, 7, 4, 6, 5])
        history = model.train(records)
        state = model.get_state()
        self.assertTrue(state.is_trained)
        self.assertEqual(state.data_points_processed, len(records) - 7)
        self.assertEqual(len(history.losses), 4)
        self.assertEqual(state.loss, history.losses[-1])
        self.assertEqual(state.accuracy, history.accuracies[-1])
        self.assertIsInstance(state.last_trained, datetime)

    def test_get_state_returns_a_copy(self):
        model = make_model()
        state = model.get_state()
        state.is_trained = True
        self.assertFalse(model.get_state().is_trained)


class TestPrediction(unittest.TestCase):

    def setUp(self):
        self.now = datetime(2024, 3, 4, 8, 30)

    def test_returns_requested_days_in_order(self):
        model = make_model()
        result = model.predict(mood_history([5, 6, 7]), days_ahead=5, now=self.now)
        self.assertEqual(len(result.predictions), 5)
        dates = [p.date for p in result.predictions]
        self.assertTrue(all(a < b for a, b in zip(dates, dates[1:])))
        self.assertEqual(dates[0], self.now + timedelta(days=1))

    def test_intensity_and_confidence_ranges(self):
        model = make_model()
        result = model.predict(mood_history([4, 6, 5, 7]), days_ahead=3, now=self.now)
        for p in result.predictions:
            self.assertTrue(3 <= p.intensity <= 10)
            self.assertTrue(0.0 <= p.confidence <= 1.0)
        self.assertAlmostEqual(result.confidence, np.mean([p.confidence for p in result.predictions]))

    def test_improving_history_without_training(self):
        model = make_model()
        history = mood_history([2, 3, 4, 5, 6, 7, 8], emotions=['happy'])
        result = model.predict(history, days_ahead=2, now=self.now)
        self.assertEqual(result.trend, 'improving')
        self.assertEqual(result.predictions[0].emotion, 'happy')
        names = [f.name for f in result.factors]
        self.assertEqual(names, ['Upward Trend', 'Morning Energy'])
        self.assertAlmostEqual(result.factors[0].impact, 6 / 7)
        self.assertEqual(result.factors[1].impact, 0.3)

    def test_declining_history_without_training(self):
        model = make_model()
        history = mood_history([9, 8, 7, 6, 5, 4, 3], emotions=['sad'])
        result = model.predict(history, days_ahead=1, now=self.now.replace(hour=20))
        self.assertEqual(result.trend, 'declining')
        self.assertEqual(result.predictions[0].emotion, 'sad')
        self.assertEqual([f.name for f in result.factors], ['Downward Trend'])
        self.assertEqual(result.factors[0].direction, 'negative')

    def test_rule_based_distribution_sums_to_one(self):
        model = make_model()
        history = mood_history([1, 1, 10], emotions=['calm'])
        distribution = model._rule_based_prediction(history, model.trend_score(history))
        self.assertAlmostEqual(float(distribution.sum()), 1.0)
        self.assertTrue(np.all(distribution >= 0))

    def test_empty_history_still_predicts(self):
        result = make_model().predict([], days_ahead=2, now=self.now)
        self.assertEqual(len(result.predictions), 2)
        self.assertEqual(result.trend, 'stable')
        self.assertEqual(result.predictions[0].intensity, 4)

    def test_trained_model_uses_network(self):
        model = make_model()
        model.train(mood_history([3, 5, 7, 6, 4, 8, 2, 9, 5, 6, 7, 4, 3, 8, 6, 5, 7]))
        result = model.predict(mood_history([5, 6, 7]), days_ahead=7, now=self.now)
        self.assertEqual(len(result.predictions), 7)

    def test_days_ahead_must_be_positive(self):
        with self.assertRaises(ValueError):
            make_model().predict(mood_history([5]), days_ahead=0)


class TestExportImport(unittest.TestCase):

    def setUp(self):
        self.trained = make_model(seed=1)
        self.trained.train(mood_history([3, 5, 7, 6, 4, 8, 2, 9, 5, 6, 7, 4, 3, 8, 6, 5, 7, 4]))
        self.sample_input = self.trained.extract_features(mood_history([4, 6, 8]), SATURDAY_MIDNIGHT)

    def test_round_trip_restores_outputs_and_state(self):
        fresh = make_model(seed=2)
        fresh.import_model(self.trained.export_model())
        np.testing.assert_allclose(fresh.network.forward(self.sample_input), self.trained.network.forward(self.sample_input))
        self.assertEqual(fresh.get_state(), self.trained.get_state())

    def test_export_layout(self):
        data = json.loads(self.trained.export_model())
        self.assertEqual(set(data), {'parameters', 'state', 'emotionEncoder'})
        self.assertEqual(set(data['parameters']), {'weights1', 'weights2', 'bias1', 'bias2', 'config'})
        self.assertEqual(data['emotionEncoder'][0], ['happy', 0])
        self.assertTrue(data['state']['isTrained'])

    def test_shape_mismatch_leaves_model_untouched(self):
        fresh = make_model(seed=2)
        before = fresh.network.forward(self.sample_input)
        data = json.loads(self.trained.export_model())
        data['parameters']['weights2'] = [row[:-1] for row in data['parameters']['weights2']]
        with self.assertRaises(ModelImportError):
            fresh.import_model(json.dumps(data))
        np.testing.assert_array_equal(fresh.network.forward(self.sample_input), before)
        self.assertEqual(fresh.get_state(), ModelState())

    def test_invalid_json_is_rejected(self):
        with self.assertRaises(ModelImportError):
            make_model().import_model("{not json")

    def test_missing_section_is_rejected(self):
        data = json.loads(self.trained.export_model())
        del data['emotionEncoder']
        with self.assertRaises(ModelImportError):
            make_model().import_model(json.dumps(data))

    def test_import_error_is_a_value_error(self):
        with self.assertRaises(ValueError):
            make_model().import_model("[]")


if __name__ == '__main__':
    unittest.main()
