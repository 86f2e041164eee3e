"""
Model evaluation and persistence components for MoodMash.
"""
import os
import tempfile
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
from sklearn.metrics import classification_report, log_loss, precision_recall_fscore_support

from ..data.schemas import MoodRecord
from ..utils.logging import StructuredLogger
from .mood_predictor import MoodPredictionModel


@dataclass
class EvaluationMetrics:
    """Metrics from model evaluation."""
    samples: int = 0
    loss: float = 0.0
    precision: Dict[str, float] = field(default_factory=dict)
    recall: Dict[str, float] = field(default_factory=dict)
    f1_score: Dict[str, float] = field(default_factory=dict)
    accuracy: Optional[float] = None
    classification_report: Optional[str] = None

    def get_macro_avg_f1(self) -> float:
        if 'macro avg' in self.f1_score:
            return self.f1_score['macro avg']
        if not self.f1_score:
            return 0.0
        return float(np.mean(list(self.f1_score.values())))

    def get_weighted_avg_f1(self) -> float:
        if 'weighted avg' in self.f1_score:
            return self.f1_score['weighted avg']
        return self.get_macro_avg_f1()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'samples': self.samples,
            'loss': self.loss,
            'accuracy': self.accuracy,
            'precision': self.precision,
            'recall': self.recall,
            'f1_score': self.f1_score,
            'classification_report': self.classification_report,
        }


class ModelEvaluator:
    """Scores a mood model against held-out history."""

    def __init__(self, logger: Optional[StructuredLogger] = None):
        """Initialize the model evaluator.

        Args:
            logger: Structured logger instance
        """
        self.logger = logger or StructuredLogger(__name__)

    def evaluate(self, model: MoodPredictionModel, history: Sequence[MoodRecord]) -> EvaluationMetrics:
        """Evaluate the model's network on the sliding-window pairs of ``history``.

        Args:
            model: Mood prediction model to score
            history: Held-out mood records, oldest first

        Returns:
            EvaluationMetrics; empty when the history yields no pairs
        """
        with self.logger.operation_context("ModelEvaluator", "evaluate") as log:
            inputs, targets = model.prepare_training_data(history)
            if len(inputs) == 0:
                log.warning("No evaluation pairs in history", records=len(history))
                return EvaluationMetrics()

            log.info("Starting model evaluation", test_samples=len(inputs), is_trained=model.state.is_trained)
            probabilities = np.array([model.network.forward(x) for x in inputs])
            y_true = np.argmax(targets, axis=1)
            y_pred = np.argmax(probabilities, axis=1)

            metrics = EvaluationMetrics(
                samples=len(inputs),
                loss=float(log_loss(y_true, probabilities, labels=list(range(targets.shape[1])))),
            )
            classification_metrics = self.compute_classification_metrics(y_true, y_pred, model.encoder.labels)
            metrics.precision = classification_metrics['precision']
            metrics.recall = classification_metrics['recall']
            metrics.f1_score = classification_metrics['f1_score']
            metrics.accuracy = classification_metrics['accuracy']
            metrics.classification_report = classification_metrics['report']

            log.info("Evaluation completed",
                     loss=metrics.loss,
                     accuracy=metrics.accuracy,
                     macro_f1=metrics.get_macro_avg_f1())
            return metrics

    def compute_classification_metrics(self,
                                       y_true: np.ndarray,
                                       y_pred: np.ndarray,
                                       labels: List[str]) -> Dict[str, Any]:
        """Compute per-emotion and averaged classification metrics.

        Args:
            y_true: True class indices
            y_pred: Predicted class indices
            labels: Emotion name for each class index

        Returns:
            Dictionary containing precision, recall, f1, accuracy and a text report
        """
        classes = [int(c) for c in np.unique(np.concatenate([y_true, y_pred]))]
        names = [labels[c] for c in classes]
        precision, recall, f1, support = precision_recall_fscore_support(
            y_true, y_pred, labels=classes, average=None, zero_division=0
        )
        precision_dict = {name: float(v) for name, v in zip(names, precision)}
        recall_dict = {name: float(v) for name, v in zip(names, recall)}
        f1_dict = {name: float(v) for name, v in zip(names, f1)}

        precision_dict['macro avg'] = float(np.mean(precision))
        recall_dict['macro avg'] = float(np.mean(recall))
        f1_dict['macro avg'] = float(np.mean(f1))

        # Classes that only appear in predictions have zero support.
        if support.sum() > 0:
            precision_dict['weighted avg'] = float(np.average(precision, weights=support))
            recall_dict['weighted avg'] = float(np.average(recall, weights=support))
            f1_dict['weighted avg'] = float(np.average(f1, weights=support))

        report = classification_report(
            y_true, y_pred, labels=classes, target_names=names, zero_division=0
        )
        return {
            'precision': precision_dict,
            'recall': recall_dict,
            'f1_score': f1_dict,
            'accuracy': float(np.mean(y_true == y_pred)),
            'report': report,
        }


class ModelExporter:
    """Writes exported models to disk and reads them back."""

    def __init__(self, logger: Optional[StructuredLogger] = None):
        """Initialize the model exporter.

        Args:
            logger: Structured logger instance
        """
        self.logger = logger or StructuredLogger(__name__)

    def save(self, model: MoodPredictionModel, path: str) -> None:
        """Atomically write the model's JSON export to ``path``.

        The export goes to a temporary file in the target directory that is
        then renamed over ``path``, so readers never see a partial file.

        Raises:
            OSError: If writing or renaming fails
        """
        with self.logger.operation_context("ModelExporter", "save", path=path) as log:
            payload = model.export_model()
            target_dir = os.path.dirname(os.path.abspath(path))
            os.makedirs(target_dir, exist_ok=True)

            temp_path = None
            try:
                with tempfile.NamedTemporaryFile(
                    mode='w',
                    dir=target_dir,
                    delete=False,
                    suffix='.tmp',
                    encoding='utf-8'
                ) as temp_file:
                    temp_path = temp_file.name
                    temp_file.write(payload)
                os.replace(temp_path, path)
                temp_path = None
            finally:
                if temp_path and os.path.exists(temp_path):
                    os.remove(temp_path)

            log.info("Model saved", path=path, bytes=len(payload), version=model.state.version)

    def load(self, model: MoodPredictionModel, path: str) -> None:
        """Import a model file written by ``save`` into ``model``.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ModelImportError: If the file content is not a valid export
        """
        with self.logger.operation_context("ModelExporter", "load", path=path) as log:
            if not os.path.exists(path):
                raise FileNotFoundError(f"Model file not found: {path}")
            with open(path, 'r', encoding='utf-8') as f:
                payload = f.read()
            model.import_model(payload)
            log.info("Model loaded", path=path, version=model.state.version)
