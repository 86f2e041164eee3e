"""
Mood prediction model for the MoodMash engine.

Turns an ordered mood history into the network's 48-value feature space,
trains the network on sliding windows and produces multi-day forecasts
with confidence scores and explanatory factors.
"""
import json
import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..config.settings import NetworkConfig, PredictionConfig
from ..data.schemas import EMOTION_LABELS, MoodRecord
from ..errors import ModelImportError
from ..network.core import NetworkParameters, NeuralNetwork, TrainingHistory
from ..utils.helpers import cyclical, day_of_week, is_weekend, round_half_up
from ..utils.logging import StructuredLogger

FEATURE_SIZE = 48
TIME_FEATURES = 5
FEATURES_PER_RECORD = 6
TREND_INDEX = 47
NEUTRAL_SLOT = 0.5
HIGH_INTENSITY_CUTOFF = 5
TREND_RECORDS = 3


class EmotionEncoder:
    """Fixed label <-> class-index mapping for the ten emotion classes.

    Unknown labels encode to class 0.
    """

    def __init__(self, labels: Sequence[str] = EMOTION_LABELS):
        self.labels: List[str] = list(labels)
        self._index = {label: i for i, label in enumerate(self.labels)}

    def __len__(self) -> int:
        return len(self.labels)

    def encode(self, emotion: str) -> int:
        return self._index.get(emotion.lower(), 0)

    def decode(self, index: int) -> str:
        return self.labels[index]

    def one_hot(self, emotion: str) -> np.ndarray:
        target = np.zeros(len(self.labels))
        target[self.encode(emotion)] = 1.0
        return target

    def to_pairs(self) -> List[List[Any]]:
        return [[label, i] for i, label in enumerate(self.labels)]

    @classmethod
    def from_pairs(cls, pairs: Any, size: int) -> 'EmotionEncoder':
        """Rebuild an encoder from exported ``[label, index]`` pairs.

        Raises:
            ModelImportError: If the pairs don't cover indices 0..size-1 exactly once
        """
        if not isinstance(pairs, list):
            raise ModelImportError("emotionEncoder must be a list of [label, index] pairs")
        labels: List[Optional[str]] = [None] * size
        for pair in pairs:
            if not (isinstance(pair, (list, tuple)) and len(pair) == 2):
                raise ModelImportError(f"Malformed emotionEncoder entry: {pair!r}")
            label, index = pair
            if not isinstance(label, str) or not isinstance(index, int) or isinstance(index, bool):
                raise ModelImportError(f"Malformed emotionEncoder entry: {pair!r}")
            if not 0 <= index < size or labels[index] is not None:
                raise ModelImportError(f"emotionEncoder index {index} is out of range or repeated")
            labels[index] = label.lower()
        if any(label is None for label in labels) or len(set(labels)) != size:
            raise ModelImportError(f"emotionEncoder must map {size} distinct labels")
        return cls(labels)


@dataclass
class ModelState:
    """Training metadata for one model instance."""
    version: str = "1.0.0"
    is_trained: bool = False
    last_trained: Optional[datetime] = None
    accuracy: float = 0.0
    loss: float = 0.0
    data_points_processed: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'version': self.version,
            'isTrained': self.is_trained,
            'lastTrained': self.last_trained.isoformat() if self.last_trained else None,
            'accuracy': self.accuracy,
            'loss': self.loss,
            'dataPointsProcessed': self.data_points_processed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ModelState':
        try:
            last_trained = data.get('lastTrained')
            return cls(
                version=str(data['version']),
                is_trained=bool(data['isTrained']),
                last_trained=datetime.fromisoformat(last_trained) if last_trained else None,
                accuracy=float(data['accuracy']),
                loss=float(data['loss']),
                data_points_processed=int(data['dataPointsProcessed']),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ModelImportError(f"Malformed model state: {e}") from e


@dataclass
class PredictedMood:
    date: datetime
    emotion: str
    intensity: int
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'date': self.date.isoformat(),
            'emotion': self.emotion,
            'intensity': self.intensity,
            'confidence': self.confidence,
        }


@dataclass
class PredictionFactor:
    name: str
    impact: float
    direction: str              # positive / negative
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'impact': self.impact,
            'direction': self.direction,
            'description': self.description,
        }


@dataclass
class MoodPredictionResult:
    """Forecast for the requested number of days."""
    predictions: List[PredictedMood] = field(default_factory=list)
    confidence: float = 0.0
    factors: List[PredictionFactor] = field(default_factory=list)
    trend: str = "stable"       # improving / stable / declining

    def to_dict(self) -> Dict[str, Any]:
        return {
            'predictions': [p.to_dict() for p in self.predictions],
            'confidence': self.confidence,
            'factors': [f.to_dict() for f in self.factors],
            'trend': self.trend,
        }


class MoodPredictionModel:
    """Owns one network and turns mood history into forecasts."""

    def __init__(self,
                 network_config: Optional[NetworkConfig] = None,
                 prediction_config: Optional[PredictionConfig] = None,
                 version: str = "1.0.0",
                 rng: Optional[np.random.Generator] = None,
                 logger: Optional[StructuredLogger] = None):
        """Initialize the prediction model.

        Args:
            network_config: Network shape and hyperparameters
            prediction_config: Window size, training gate and trend thresholds
            version: Version string recorded in the model state
            rng: Random source for weight initialization
            logger: Structured logger instance
        """
        self.logger = logger or StructuredLogger(__name__)
        self.config = prediction_config or PredictionConfig()
        self.network = NeuralNetwork(network_config, rng=rng, logger=self.logger)
        self.encoder = EmotionEncoder()
        self.state = ModelState(version=version)

    def extract_features(self,
                         history: Sequence[MoodRecord],
                         reference_time: Optional[datetime] = None) -> np.ndarray:
        """Build the 48-value feature vector.

        Layout: [0:5] time encoding of ``reference_time`` (hour sin/cos,
        weekday sin/cos, weekend flag); [5:47] six values for each of the
        last seven records, with 0.5/0.5 placeholders for missing slots;
        [47] tanh of the intensity change over the last three records.

        Args:
            history: Mood records, oldest first
            reference_time: Moment the features describe (defaults to now)

        Returns:
            Feature vector of length 48
        """
        reference_time = reference_time or datetime.now()
        features = np.zeros(FEATURE_SIZE)

        features[0], features[1] = cyclical(reference_time.hour, 24)
        features[2], features[3] = cyclical(day_of_week(reference_time), 7)
        features[4] = 1.0 if is_weekend(reference_time) else 0.0

        recent = list(history[-self.config.window_size:])
        for slot in range(self.config.window_size):
            base = TIME_FEATURES + slot * FEATURES_PER_RECORD
            if slot < len(recent):
                mood = recent[slot]
                hour_sin, hour_cos = cyclical(mood.timestamp.hour, 24)
                features[base] = self.encoder.encode(mood.emotion) / 10
                features[base + 1] = mood.intensity / 10
                features[base + 2] = hour_sin
                features[base + 3] = hour_cos
                features[base + 4] = day_of_week(mood.timestamp) / 7
                features[base + 5] = 1.0 if mood.intensity > HIGH_INTENSITY_CUTOFF else 0.0
            else:
                features[base] = NEUTRAL_SLOT
                features[base + 1] = NEUTRAL_SLOT

        if len(recent) >= TREND_RECORDS:
            last_three = recent[-TREND_RECORDS:]
            features[TREND_INDEX] = math.tanh((last_three[-1].intensity - last_three[0].intensity) / 2)

        return features

    def prepare_training_data(self, history: Sequence[MoodRecord]) -> Tuple[np.ndarray, np.ndarray]:
        """Sliding-window pairs: records [i-7, i) predict record i's emotion.

        Each window is described at the timestamp of the record it predicts.
        """
        window = self.config.window_size
        inputs, targets = [], []
        for i in range(window, len(history)):
            inputs.append(self.extract_features(history[i - window:i], history[i].timestamp))
            targets.append(self.encoder.one_hot(history[i].emotion))
        if not inputs:
            return (np.zeros((0, self.network.config.input_size)),
                    np.zeros((0, self.network.config.output_size)))
        return np.array(inputs), np.array(targets)

    def train(self, history: Sequence[MoodRecord]) -> TrainingHistory:
        """Train on the history's sliding windows.

        Fewer than ``min_training_samples`` pairs leaves the network and the
        trained flag alone and returns a single-epoch placeholder history.
        """
        inputs, targets = self.prepare_training_data(history)
        self.state.data_points_processed = len(inputs)

        if len(inputs) < self.config.min_training_samples:
            self.logger.info(
                "Not enough history to train; predictions stay rule-based",
                samples=len(inputs),
                required=self.config.min_training_samples,
            )
            return TrainingHistory(losses=[1.0], accuracies=[0.0])

        history_result = self.network.train(inputs, targets, self.config.training_epochs)

        self.state.is_trained = True
        self.state.last_trained = datetime.now()
        self.state.accuracy = history_result.final_accuracy
        self.state.loss = history_result.final_loss

        self.logger.metric("training_loss", self.state.loss, {'version': self.state.version})
        self.logger.metric("training_accuracy", self.state.accuracy, {'version': self.state.version})
        return history_result

    def trend_score(self, history: Sequence[MoodRecord]) -> float:
        """Intensity change across the last seven records divided by their count."""
        recent = history[-self.config.window_size:]
        if len(recent) < TREND_RECORDS:
            return 0.0
        return (recent[-1].intensity - recent[0].intensity) / len(recent)

    def predict(self,
                history: Sequence[MoodRecord],
                days_ahead: int = 7,
                now: Optional[datetime] = None) -> MoodPredictionResult:
        """Forecast one mood per day for the next ``days_ahead`` days.

        Uses the network once trained and a rule-based distribution before.

        Args:
            history: Mood records, oldest first
            days_ahead: Number of days to forecast
            now: Current time (defaults to the system clock)

        Returns:
            MoodPredictionResult ordered by date

        Raises:
            ValueError: If days_ahead is less than 1
        """
        if days_ahead < 1:
            raise ValueError(f"days_ahead must be at least 1, got {days_ahead}")
        now = now or datetime.now()
        trend_score = self.trend_score(history)
        is_trained = self.state.is_trained

        predictions = []
        for day in range(days_ahead):
            target_date = now + timedelta(days=day + 1)
            if is_trained:
                distribution = self.network.forward(self.extract_features(history, target_date))
            else:
                distribution = self._rule_based_prediction(history, trend_score)

            best = int(np.argmax(distribution))
            p_max = float(distribution[best])
            predictions.append(PredictedMood(
                date=target_date,
                emotion=self.encoder.decode(best),
                intensity=round_half_up(3 + p_max * 7),
                confidence=p_max,
            ))

        return MoodPredictionResult(
            predictions=predictions,
            confidence=float(np.mean([p.confidence for p in predictions])),
            factors=self._factors(trend_score, now),
            trend=self._classify_trend(trend_score),
        )

    def _classify_trend(self, trend_score: float) -> str:
        if trend_score > self.config.trend_threshold:
            return "improving"
        if trend_score < -self.config.trend_threshold:
            return "declining"
        return "stable"

    def _factors(self, trend_score: float, now: datetime) -> List[PredictionFactor]:
        factors = []
        if trend_score > self.config.factor_threshold:
            factors.append(PredictionFactor(
                name="Upward Trend",
                impact=trend_score,
                direction="positive",
                description="Your mood has been improving recently",
            ))
        elif trend_score < -self.config.factor_threshold:
            factors.append(PredictionFactor(
                name="Downward Trend",
                impact=abs(trend_score),
                direction="negative",
                description="Your mood has been declining recently",
            ))

        start, end = self.config.morning_hours
        if start <= now.hour <= end:
            factors.append(PredictionFactor(
                name="Morning Energy",
                impact=0.3,
                direction="positive",
                description="Mornings tend to be your peak energy time",
            ))
        return factors

    def _rule_based_prediction(self, history: Sequence[MoodRecord], trend_score: float) -> np.ndarray:
        """Recent-emotion histogram shifted by the trend, normalized to sum to 1."""
        happy, sad, anxious = (self.encoder.encode(e) for e in ('happy', 'sad', 'anxious'))
        distribution = np.full(len(self.encoder), 0.1)

        for mood in history[-self.config.window_size:]:
            if mood.emotion.lower() in self.encoder.labels:
                distribution[self.encoder.encode(mood.emotion)] += 0.15 * (mood.intensity / 10)

        if trend_score > 0:
            distribution[happy] += trend_score * 0.3
            distribution[sad] -= trend_score * 0.2
        elif trend_score < 0:
            distribution[sad] += abs(trend_score) * 0.3
            distribution[anxious] += abs(trend_score) * 0.2

        # A steep upward trend can push 'sad' below zero.
        distribution = np.maximum(distribution, 0.0)
        return distribution / distribution.sum()

    def get_state(self) -> ModelState:
        return replace(self.state)

    def export_model(self) -> str:
        """Serialize parameters, state and label map to a JSON string."""
        return json.dumps({
            'parameters': self.network.get_parameters().to_dict(),
            'state': self.state.to_dict(),
            'emotionEncoder': self.encoder.to_pairs(),
        })

    def import_model(self, payload: str) -> None:
        """Replace parameters, state and label map from an exported JSON string.

        Everything is validated before anything is replaced, so a failed
        import leaves the model as it was.

        Raises:
            ModelImportError: If the payload is not valid JSON, is missing
                fields, or its arrays don't match this model's network
        """
        try:
            data = json.loads(payload)
        except (TypeError, ValueError) as e:
            raise ModelImportError(f"Model payload is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ModelImportError("Model payload must be a JSON object")
        missing = {'parameters', 'state', 'emotionEncoder'} - set(data)
        if missing:
            raise ModelImportError(f"Model payload is missing: {', '.join(sorted(missing))}")
        if not isinstance(data['parameters'], dict) or not isinstance(data['state'], dict):
            raise ModelImportError("Model parameters and state must be JSON objects")

        params = NetworkParameters.from_dict(data['parameters'])
        state = ModelState.from_dict(data['state'])
        encoder = EmotionEncoder.from_pairs(data['emotionEncoder'], self.network.config.output_size)

        self.network.load_parameters(params)
        self.encoder = encoder
        self.state = state
        self.logger.info(
            "Model imported",
            version=state.version,
            is_trained=state.is_trained,
            data_points=state.data_points_processed,
        )
