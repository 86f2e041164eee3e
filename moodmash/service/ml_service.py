"""
Single entry point to the MoodMash engine.

MLService owns one mood prediction model and its state and delegates to
the pattern, recommendation and sentiment engines. Inputs may be domain
records or raw dictionaries following the JSON input contract.
"""
import threading
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Union

import numpy as np

from ..config.settings import AppConfig, ConfigManager
from ..data.processor import HistoryProcessor, MoodInput, SessionInput
from ..data.schemas import ContentCatalog, MoodRecord, WellnessSessionRecord
from ..data.validator import HistoryValidator
from ..models.mood_predictor import ModelState, MoodPredictionModel, MoodPredictionResult
from ..models.trainer import EvaluationMetrics, ModelEvaluator
from ..network.core import TrainingHistory
from ..patterns.detector import PatternDetectionEngine
from ..patterns.schemas import PatternResult
from ..recommendation.engine import RecommendationEngine
from ..recommendation.schemas import RecommendationResult
from ..sentiment.analyzer import SentimentAnalysisEngine, SentimentResult
from ..utils.logging import StructuredLogger

CatalogInput = Union[None, ContentCatalog, Dict[str, Any]]


class MLService:
    """Stateful facade over the prediction, pattern, recommendation and sentiment engines.

    ``train_models`` and ``import_model`` are serialized by an internal lock.
    Every other operation only reads shared state and can run concurrently.
    """

    def __init__(self,
                 config: Optional[AppConfig] = None,
                 model: Optional[MoodPredictionModel] = None,
                 rng: Optional[np.random.Generator] = None,
                 logger: Optional[StructuredLogger] = None):
        """
        Args:
            config: Application configuration (defaults plus environment overrides if omitted)
            model: Prediction model to own (built from config if omitted)
            rng: Random source for network initialization
            logger: Structured logger instance
        """
        self.config = config or ConfigManager().defaults()
        self.logger = logger or StructuredLogger(
            "moodmash.service",
            level=self.config.logging.level,
            fmt=self.config.logging.format,
        )
        self.model = model or MoodPredictionModel(
            network_config=self.config.network,
            prediction_config=self.config.prediction,
            version=self.config.versioning.model_version,
            rng=rng,
            logger=self.logger,
        )
        self.processor = HistoryProcessor()
        self.validator = HistoryValidator()
        self.pattern_engine = PatternDetectionEngine(self.config.patterns, logger=self.logger)
        self.recommendation_engine = RecommendationEngine(self.config.recommendation, logger=self.logger)
        self.sentiment_engine = SentimentAnalysisEngine(self.config.sentiment, logger=self.logger)
        self.evaluator = ModelEvaluator(logger=self.logger)
        self._train_lock = threading.Lock()

    def train_models(self,
                     mood_history: Iterable[MoodInput],
                     wellness_history: Optional[Iterable[SessionInput]] = None,
                     catalog: CatalogInput = None) -> TrainingHistory:
        """Train the prediction model on the mood history.

        Sessions and catalog are accepted for interface symmetry with
        ``generate_recommendations``; only the mood history trains the network.

        Returns:
            Per-epoch losses and accuracies (a single placeholder entry when
            there were too few samples)
        """
        moods = self._moods(mood_history)
        with self._train_lock:
            with self.logger.operation_context("MLService", "train_models", records=len(moods)) as log:
                history = self.model.train(moods)
                state = self.model.get_state()
                log.info(
                    "Training pass finished",
                    is_trained=state.is_trained,
                    data_points=state.data_points_processed,
                    accuracy=state.accuracy,
                    loss=state.loss,
                )
                return history

    def predict_moods(self,
                      mood_history: Iterable[MoodInput],
                      days_ahead: int = 7,
                      now: Optional[datetime] = None) -> MoodPredictionResult:
        moods = self._moods(mood_history)
        with self.logger.operation_context("MLService", "predict_moods", days_ahead=days_ahead):
            return self.model.predict(moods, days_ahead=days_ahead, now=now)

    def detect_patterns(self,
                        mood_history: Iterable[MoodInput],
                        wellness_history: Optional[Iterable[SessionInput]] = None,
                        now: Optional[datetime] = None) -> PatternResult:
        moods = self._moods(mood_history)
        sessions = self._sessions(wellness_history)
        with self.logger.operation_context("MLService", "detect_patterns") as log:
            result = self.pattern_engine.detect_all(moods, sessions, now=now)
            log.info("Patterns detected", patterns=len(result.patterns), insights=len(result.insights))
            return result

    def generate_recommendations(self,
                                 mood_history: Iterable[MoodInput],
                                 wellness_history: Optional[Iterable[SessionInput]] = None,
                                 catalog: CatalogInput = None,
                                 count: Optional[int] = None) -> RecommendationResult:
        moods = self._moods(mood_history)
        sessions = self._sessions(wellness_history)
        content = self.processor.parse_catalog(catalog)
        with self.logger.operation_context("MLService", "generate_recommendations", catalog_size=len(content)):
            return self.recommendation_engine.generate(moods, sessions, content, count=count)

    def analyze_sentiment(self, text: str) -> SentimentResult:
        return self.sentiment_engine.analyze(text)

    def get_model_state(self) -> ModelState:
        return self.model.get_state()

    def export_model(self) -> str:
        """Serialize the owned model to a JSON string the caller can store."""
        with self.logger.operation_context("MLService", "export_model"):
            return self.model.export_model()

    def import_model(self, payload: str) -> ModelState:
        """Replace the owned model from an exported JSON string.

        Raises:
            ModelImportError: If the payload is invalid; the current model is kept
        """
        with self._train_lock:
            with self.logger.operation_context("MLService", "import_model"):
                self.model.import_model(payload)
                return self.model.get_state()

    def evaluate_model(self, mood_history: Iterable[MoodInput]) -> EvaluationMetrics:
        """Score the owned model against a held-out mood history."""
        return self.evaluator.evaluate(self.model, self._moods(mood_history))

    def _moods(self, mood_history: Iterable[MoodInput]) -> List[MoodRecord]:
        moods = self.processor.parse_moods(mood_history or [])
        for warning in self.validator.validate_moods(moods).warnings:
            self.logger.warning(warning)
        return moods

    def _sessions(self, wellness_history: Optional[Iterable[SessionInput]]) -> List[WellnessSessionRecord]:
        sessions = self.processor.parse_sessions(wellness_history)
        if sessions:
            for warning in self.validator.validate_sessions(sessions).warnings:
                self.logger.warning(warning)
        return sessions
