"""
Configuration management for the MoodMash engine.

Provides centralized configuration loading, validation, and environment variable overrides.
"""

import os
import yaml
from dataclasses import dataclass, field, fields
from typing import Dict, Any, List, Optional, Tuple
from pathlib import Path

from ..errors import MoodMashError


DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "default_config.yaml"


@dataclass(frozen=True)
class NetworkConfig:
    """Shape and hyperparameters of the mood network. Immutable once built."""
    input_size: int = 48
    hidden_size: int = 32
    output_size: int = 10
    learning_rate: float = 0.01
    epochs: int = 100
    seed: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'inputSize': self.input_size,
            'hiddenSize': self.hidden_size,
            'outputSize': self.output_size,
            'learningRate': self.learning_rate,
            'epochs': self.epochs,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NetworkConfig':
        return cls(
            input_size=int(data['inputSize']),
            hidden_size=int(data['hiddenSize']),
            output_size=int(data['outputSize']),
            learning_rate=float(data['learningRate']),
            epochs=int(data['epochs']),
        )


@dataclass
class PredictionConfig:
    """Configuration for feature extraction, training gates and forecasting."""
    window_size: int = 7
    min_training_samples: int = 10
    training_epochs: int = 50
    trend_threshold: float = 0.2
    factor_threshold: float = 0.1
    morning_hours: Tuple[int, int] = (5, 11)


@dataclass
class PatternConfig:
    """Minimum sample gates and significance thresholds for pattern detectors."""
    circadian_min_entries: int = 20
    circadian_min_per_bucket: int = 5
    circadian_threshold: float = 0.2
    weekly_min_entries: int = 30
    weekly_min_weekday: int = 10
    weekly_min_weekend: int = 5
    weekly_threshold: float = 0.15
    trigger_min_entries: int = 15
    trigger_min_drops: int = 3
    trigger_drop_points: int = 2
    trigger_min_cluster: int = 3
    response_min_sessions: int = 5
    response_min_per_activity: int = 2
    response_min_improvement: float = 0.5
    response_min_positive_rate: float = 0.6
    correlation_min_sessions: int = 10
    correlation_min_hour_count: int = 3
    max_patterns: int = 10
    max_insights: int = 5
    max_recommendations: int = 5


@dataclass
class RecommendationConfig:
    """Configuration for recommendation engine parameters."""
    default_count: int = 5
    volatility_threshold: float = 2.0
    meditation_limit: int = 3
    yoga_limit: int = 2
    music_limit: int = 2
    meditation_base_score: float = 0.8
    yoga_base_score: float = 0.7
    music_base_score: float = 0.75
    rank_step: float = 0.1
    low_intensity_threshold: int = 4


@dataclass
class SentimentConfig:
    """Configuration for lexical sentiment analysis."""
    max_suggestions: int = 3
    theme_threshold: float = 0.3


@dataclass
class LoggingConfig:
    """Configuration for logging parameters."""
    level: str = "INFO"
    format: str = "json"


@dataclass
class VersioningConfig:
    """Configuration for model versioning."""
    model_version: str = "1.0.0"


@dataclass
class AppConfig:
    """Main application configuration containing all sub-configurations."""
    network: NetworkConfig = field(default_factory=NetworkConfig)
    prediction: PredictionConfig = field(default_factory=PredictionConfig)
    patterns: PatternConfig = field(default_factory=PatternConfig)
    recommendation: RecommendationConfig = field(default_factory=RecommendationConfig)
    sentiment: SentimentConfig = field(default_factory=SentimentConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    versioning: VersioningConfig = field(default_factory=VersioningConfig)


class ConfigValidationError(MoodMashError):
    """Raised when configuration validation fails."""
    pass


class ConfigManager:
    """Manages application configuration loading, validation, and environment overrides."""

    ENV_MAPPINGS = {
        'MOODMASH_LOG_LEVEL': ['logging', 'level'],
        'MOODMASH_MODEL_VERSION': ['versioning', 'model_version'],
        'MOODMASH_EPOCHS': ['network', 'epochs'],
        'MOODMASH_LEARNING_RATE': ['network', 'learning_rate'],
        'MOODMASH_SEED': ['network', 'seed'],
        'MOODMASH_TRAINING_EPOCHS': ['prediction', 'training_epochs'],
        'MOODMASH_RECOMMENDATION_COUNT': ['recommendation', 'default_count'],
    }
    INT_KEYS = {'epochs', 'seed', 'training_epochs', 'default_count'}
    FLOAT_KEYS = {'learning_rate'}

    def __init__(self):
        self._config: Optional[AppConfig] = None

    def load(self, config_path: str) -> AppConfig:
        """
        Load configuration from YAML file with environment variable overrides.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            AppConfig: Loaded and validated configuration

        Raises:
            ConfigValidationError: If configuration is invalid
            FileNotFoundError: If config file doesn't exist
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}
        if not isinstance(config_data, dict):
            raise ConfigValidationError(f"Configuration root must be a mapping: {config_path}")

        return self._finish(config_data)

    def defaults(self) -> AppConfig:
        """Build the default configuration, still honoring environment overrides."""
        return self._finish({})

    def _finish(self, config_data: Dict[str, Any]) -> AppConfig:
        config_data = self._apply_env_overrides(config_data)
        config = self._create_config_from_dict(config_data)
        self.validate(config)
        self._config = config
        return config

    def _create_config_from_dict(self, config_data: Dict[str, Any]) -> AppConfig:
        """Create AppConfig from dictionary data; unknown keys inside a section raise ConfigValidationError."""
        network_data = dict(config_data.get('network') or {})
        prediction_data = dict(config_data.get('prediction') or {})
        if 'morning_hours' in prediction_data:
            prediction_data['morning_hours'] = tuple(prediction_data['morning_hours'])

        return AppConfig(
            network=self._build(NetworkConfig, network_data),
            prediction=self._build(PredictionConfig, prediction_data),
            patterns=self._build(PatternConfig, config_data.get('patterns') or {}),
            recommendation=self._build(RecommendationConfig, config_data.get('recommendation') or {}),
            sentiment=self._build(SentimentConfig, config_data.get('sentiment') or {}),
            logging=self._build(LoggingConfig, config_data.get('logging') or {}),
            versioning=self._build(VersioningConfig, config_data.get('versioning') or {}),
        )

    @staticmethod
    def _build(cls, data: Dict[str, Any]):
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigValidationError(
                f"Unknown keys for {cls.__name__}: {', '.join(sorted(unknown))}"
            )
        return cls(**data)

    def _apply_env_overrides(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration data."""
        for env_var, config_path in self.ENV_MAPPINGS.items():
            env_value = os.getenv(env_var)
            if env_value is None:
                continue
            current = config_data
            for key in config_path[:-1]:
                if not isinstance(current.get(key), dict):
                    current[key] = {}
                current = current[key]

            final_key = config_path[-1]
            try:
                if final_key in self.INT_KEYS:
                    current[final_key] = int(env_value)
                elif final_key in self.FLOAT_KEYS:
                    current[final_key] = float(env_value)
                else:
                    current[final_key] = env_value
            except ValueError as e:
                raise ConfigValidationError(f"Invalid value for {env_var}: {env_value!r}") from e
        return config_data

    def validate(self, config: AppConfig) -> bool:
        """
        Validate configuration values.

        Args:
            config: Configuration to validate

        Returns:
            bool: True if valid

        Raises:
            ConfigValidationError: If validation fails
        """
        errors: List[str] = []

        net = config.network
        if net.input_size != 48:
            errors.append("Network input_size must be 48 to match the feature extractor")
        if net.output_size != 10:
            errors.append("Network output_size must be 10 (one unit per emotion class)")
        if net.hidden_size <= 0:
            errors.append("Network hidden_size must be positive")
        if net.learning_rate <= 0:
            errors.append("Network learning_rate must be positive")
        if net.epochs <= 0:
            errors.append("Network epochs must be positive")

        pred = config.prediction
        if pred.window_size != 7:
            errors.append("Prediction window_size must be 7 to match the feature layout")
        if pred.min_training_samples <= 0:
            errors.append("Prediction min_training_samples must be positive")
        if pred.training_epochs <= 0:
            errors.append("Prediction training_epochs must be positive")
        if len(pred.morning_hours) != 2 or not (0 <= pred.morning_hours[0] <= pred.morning_hours[1] <= 23):
            errors.append("Prediction morning_hours must be an ascending [start, end] hour pair")

        pat = config.patterns
        for name in ('circadian_threshold', 'weekly_threshold'):
            if not (0.0 < getattr(pat, name) <= 1.0):
                errors.append(f"Patterns {name} must be in (0, 1]")
        for name in ('max_patterns', 'max_insights', 'max_recommendations'):
            if getattr(pat, name) <= 0:
                errors.append(f"Patterns {name} must be positive")

        rec = config.recommendation
        if rec.default_count <= 0:
            errors.append("Recommendation default_count must be positive")
        for name in ('meditation_limit', 'yoga_limit', 'music_limit'):
            if getattr(rec, name) < 0:
                errors.append(f"Recommendation {name} cannot be negative")

        if config.sentiment.max_suggestions <= 0:
            errors.append("Sentiment max_suggestions must be positive")

        valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if config.logging.level not in valid_log_levels:
            errors.append(f"Logging level must be one of: {valid_log_levels}")
        if config.logging.format not in ['json', 'text']:
            errors.append("Logging format must be 'json' or 'text'")

        if not config.versioning.model_version:
            errors.append("Model version cannot be empty")

        if errors:
            raise ConfigValidationError(f"Configuration validation failed: {'; '.join(errors)}")
        return True

    def get(self, key: str) -> Any:
        """
        Get a loaded configuration value by dotted key (e.g. 'network.epochs').
        """
        if self._config is None:
            raise RuntimeError("Configuration not loaded. Call load() first.")
        current: Any = self._config
        for k in key.split('.'):
            if not hasattr(current, k):
                raise KeyError(f"Configuration key not found: {key}")
            current = getattr(current, k)
        return current
