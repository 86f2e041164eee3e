"""
Two-layer feed-forward network for the MoodMash engine.

input (48) -> ReLU hidden (32) -> softmax output (10), trained one sample
at a time with backpropagation of the cross-entropy loss and a learning
rate that decays linearly to zero over the epoch range.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from ..config.settings import NetworkConfig
from ..errors import ModelImportError
from ..utils.logging import StructuredLogger

LOG_CLAMP = 1e-10


def relu(x: np.ndarray) -> np.ndarray:
    return np.maximum(x, 0.0)


def softmax(z: np.ndarray) -> np.ndarray:
    """Softmax along the last axis; the row max is subtracted first for stability."""
    shifted = z - np.max(z, axis=-1, keepdims=True)
    exp = np.exp(shifted)
    return exp / np.sum(exp, axis=-1, keepdims=True)


def cross_entropy(output: np.ndarray, target: np.ndarray) -> float:
    return float(-np.sum(target * np.log(np.maximum(output, LOG_CLAMP))))


@dataclass
class TrainingHistory:
    """Per-epoch mean loss and accuracy from one training run."""
    losses: List[float] = field(default_factory=list)
    accuracies: List[float] = field(default_factory=list)

    @property
    def final_loss(self) -> float:
        return self.losses[-1] if self.losses else 0.0

    @property
    def final_accuracy(self) -> float:
        return self.accuracies[-1] if self.accuracies else 0.0

    def to_dict(self) -> Dict[str, List[float]]:
        return {'losses': list(self.losses), 'accuracies': list(self.accuracies)}


@dataclass
class NetworkParameters:
    """Trainable state: two weight matrices and two bias vectors."""
    weights1: np.ndarray        # (input_size, hidden_size)
    weights2: np.ndarray        # (hidden_size, output_size)
    bias1: np.ndarray           # (hidden_size,)
    bias2: np.ndarray           # (output_size,)
    config: NetworkConfig

    def copy(self) -> 'NetworkParameters':
        return NetworkParameters(
            weights1=self.weights1.copy(),
            weights2=self.weights2.copy(),
            bias1=self.bias1.copy(),
            bias2=self.bias2.copy(),
            config=self.config,
        )

    def check_shapes(self) -> None:
        """Raise ModelImportError unless every array matches ``config``."""
        c = self.config
        expected = {
            'weights1': (c.input_size, c.hidden_size),
            'weights2': (c.hidden_size, c.output_size),
            'bias1': (c.hidden_size,),
            'bias2': (c.output_size,),
        }
        for name, shape in expected.items():
            actual = getattr(self, name).shape
            if actual != shape:
                raise ModelImportError(f"{name} has shape {actual}, expected {shape}")
            if not np.all(np.isfinite(getattr(self, name))):
                raise ModelImportError(f"{name} contains non-finite values")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'weights1': self.weights1.tolist(),
            'weights2': self.weights2.tolist(),
            'bias1': self.bias1.tolist(),
            'bias2': self.bias2.tolist(),
            'config': self.config.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NetworkParameters':
        """Build parameters from exported data, checking every shape.

        Raises:
            ModelImportError: If keys are missing or arrays are ragged or mis-shaped
        """
        try:
            config = NetworkConfig.from_dict(data['config'])
            params = cls(
                weights1=np.asarray(data['weights1'], dtype=float),
                weights2=np.asarray(data['weights2'], dtype=float),
                bias1=np.asarray(data['bias1'], dtype=float),
                bias2=np.asarray(data['bias2'], dtype=float),
                config=config,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ModelImportError(f"Malformed network parameters: {e}") from e
        params.check_shapes()
        return params


class NeuralNetwork:
    """Feed-forward network with manual forward pass and backpropagation.

    Training works on a private copy of the parameters and publishes it with
    one reference swap when the run finishes, so a concurrent ``forward``
    sees either the old or the new parameters.
    """

    def __init__(self,
                 config: Optional[NetworkConfig] = None,
                 rng: Optional[np.random.Generator] = None,
                 logger: Optional[StructuredLogger] = None):
        """
        Args:
            config: Network shape and hyperparameters
            rng: Random source for weight initialization (seeded from config if omitted)
            logger: Structured logger instance
        """
        self.config = config or NetworkConfig()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)
        self.logger = logger or StructuredLogger(__name__)
        self._params: Optional[NetworkParameters] = None

    @property
    def is_initialized(self) -> bool:
        return self._params is not None

    def initialize(self, force: bool = False) -> None:
        """Xavier/Glorot-initialize the weights and zero the biases.

        Does nothing if already initialized unless ``force`` is set.
        """
        if self._params is not None and not force:
            return
        c = self.config
        scale1 = np.sqrt(2.0 / (c.input_size + c.hidden_size))
        scale2 = np.sqrt(2.0 / (c.hidden_size + c.output_size))
        self._params = NetworkParameters(
            weights1=self.rng.normal(0.0, scale1, size=(c.input_size, c.hidden_size)),
            weights2=self.rng.normal(0.0, scale2, size=(c.hidden_size, c.output_size)),
            bias1=np.zeros(c.hidden_size),
            bias2=np.zeros(c.output_size),
            config=c,
        )

    def forward(self, inputs: Sequence[float]) -> np.ndarray:
        """Class probabilities for one input vector.

        Raises:
            ValueError: If the input length doesn't match ``input_size``
        """
        self.initialize()
        params = self._params
        x = self._as_input(inputs)
        hidden = relu(x @ params.weights1 + params.bias1)
        return softmax(hidden @ params.weights2 + params.bias2)

    def train(self,
              inputs: Sequence[Sequence[float]],
              targets: Sequence[Sequence[float]],
              epochs: Optional[int] = None) -> TrainingHistory:
        """Train with per-sample gradient descent.

        Args:
            inputs: Feature vectors, one per sample
            targets: One-hot class vectors, one per sample
            epochs: Number of full passes (defaults to ``config.epochs``)

        Returns:
            TrainingHistory with per-epoch mean loss and accuracy
        """
        self.initialize()
        num_epochs = epochs or self.config.epochs
        history = TrainingHistory()

        if len(inputs) == 0:
            self.logger.warning("Training called with no samples; parameters unchanged")
            return history
        if len(inputs) != len(targets):
            raise ValueError(f"Got {len(inputs)} inputs but {len(targets)} targets")

        X = np.asarray(inputs, dtype=float)
        T = np.asarray(targets, dtype=float)
        if X.shape[1:] != (self.config.input_size,) or T.shape[1:] != (self.config.output_size,):
            raise ValueError(
                f"Expected inputs (n, {self.config.input_size}) and targets (n, {self.config.output_size}), "
                f"got {X.shape} and {T.shape}"
            )

        params = self._params.copy()
        w1, w2, b1, b2 = params.weights1, params.weights2, params.bias1, params.bias2
        n_samples = len(X)

        for epoch in range(num_epochs):
            learning_rate = self.config.learning_rate * (1 - epoch / num_epochs)
            total_loss = 0.0
            correct = 0

            for x, target in zip(X, T):
                pre_activation = x @ w1 + b1
                hidden = relu(pre_activation)
                output = softmax(hidden @ w2 + b2)

                total_loss += cross_entropy(output, target)
                if np.argmax(output) == np.argmax(target):
                    correct += 1

                output_error = output - target
                hidden_error = (w2 @ output_error) * (pre_activation > 0)

                w2 -= learning_rate * np.outer(hidden, output_error)
                b2 -= learning_rate * output_error
                w1 -= learning_rate * np.outer(x, hidden_error)
                b1 -= learning_rate * hidden_error

            history.losses.append(total_loss / n_samples)
            history.accuracies.append(correct / n_samples)

        self._params = params
        self.logger.debug(
            "Network training finished",
            samples=n_samples,
            epochs=num_epochs,
            final_loss=history.final_loss,
            final_accuracy=history.final_accuracy,
        )
        return history

    def get_parameters(self) -> NetworkParameters:
        """Copy of the full trainable state, initializing first if needed."""
        self.initialize()
        return self._params.copy()

    def load_parameters(self, params: NetworkParameters) -> None:
        """Replace weights, biases and config in one step.

        Raises:
            ModelImportError: If the parameters don't fit this network's layer sizes
        """
        c = self.config
        incoming = params.config
        if (incoming.input_size, incoming.hidden_size, incoming.output_size) != \
                (c.input_size, c.hidden_size, c.output_size):
            raise ModelImportError(
                f"Layer sizes {incoming.input_size}/{incoming.hidden_size}/{incoming.output_size} "
                f"do not match network {c.input_size}/{c.hidden_size}/{c.output_size}"
            )
        params.check_shapes()
        loaded = params.copy()
        self._params = loaded
        self.config = loaded.config

    def _as_input(self, inputs: Sequence[float]) -> np.ndarray:
        x = np.asarray(inputs, dtype=float)
        if x.shape != (self.config.input_size,):
            raise ValueError(f"Expected input of shape ({self.config.input_size},), got {x.shape}")
        return x
