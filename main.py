import argparse
import json
import os
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from moodmash.config.settings import ConfigManager, AppConfig, DEFAULT_CONFIG_PATH
from moodmash.data.processor import HistoryProcessor
from moodmash.models.trainer import ModelExporter
from moodmash.service.ml_service import MLService
from moodmash.utils.logging import StructuredLogger


class MoodMashApp:
    def __init__(self, config_path: str = str(DEFAULT_CONFIG_PATH), model_path: Optional[str] = None):
        self.config_manager = ConfigManager()
        self.config: Optional[AppConfig] = None
        self.logger: Optional[StructuredLogger] = None
        self.service: Optional[MLService] = None
        self.exporter: Optional[ModelExporter] = None
        self.config_path = config_path
        self.model_path = model_path
        self.processor = HistoryProcessor()

    def initialize(self) -> None:
        self.config = self.config_manager.load(self.config_path)
        self.logger = StructuredLogger(
            "moodmash.main",
            level=self.config.logging.level,
            fmt=self.config.logging.format,
        )
        self.logger.log_config(asdict(self.config))
        self.service = MLService(self.config, logger=self.logger)
        self.exporter = ModelExporter(self.logger)
        self.logger.info("MoodMash initialized")

    def load_model(self, required: bool = False) -> None:
        if self.model_path and os.path.exists(self.model_path):
            self.exporter.load(self.service.model, self.model_path)
        elif required:
            raise FileNotFoundError(f"Model file not found: {self.model_path}")
        elif self.model_path:
            self.logger.warning("Model file not found; using an untrained model", path=self.model_path)

    def train(self, history_path: str) -> Dict[str, Any]:
        with self.logger.operation_context("MoodMashApp", "train", history=history_path) as log:
            moods, sessions, catalog = self.processor.load_document(history_path)
            self.load_model()
            history = self.service.train_models(moods, sessions, catalog)
            state = self.service.get_model_state()
            if self.model_path and state.is_trained:
                self.exporter.save(self.service.model, self.model_path)
            elif not state.is_trained:
                log.warning("Model not trained; nothing saved", data_points=state.data_points_processed)
            return {'history': history.to_dict(), 'state': state.to_dict()}

    def predict(self, history_path: str, days: int) -> Dict[str, Any]:
        moods, _, _ = self.processor.load_document(history_path)
        self.load_model()
        return self.service.predict_moods(moods, days_ahead=days).to_dict()

    def patterns(self, history_path: str) -> Dict[str, Any]:
        moods, sessions, _ = self.processor.load_document(history_path)
        return self.service.detect_patterns(moods, sessions).to_dict()

    def recommend(self, history_path: str, count: Optional[int]) -> Dict[str, Any]:
        moods, sessions, catalog = self.processor.load_document(history_path)
        return self.service.generate_recommendations(moods, sessions, catalog, count=count).to_dict()

    def sentiment(self, text: str) -> Dict[str, Any]:
        return self.service.analyze_sentiment(text).to_dict()

    def evaluate(self, history_path: str) -> Dict[str, Any]:
        moods, _, _ = self.processor.load_document(history_path)
        self.load_model(required=True)
        return self.service.evaluate_model(moods).to_dict()

    def state(self) -> Dict[str, Any]:
        self.load_model(required=True)
        return self.service.get_model_state().to_dict()


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="MoodMash - mood forecasting, pattern detection and wellness recommendations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        default=str(DEFAULT_CONFIG_PATH),
        help="Path to configuration file"
    )
    parser.add_argument(
        "--model",
        help="Path to an exported model file (read if present, written by 'train')"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    train_parser = subparsers.add_parser("train", help="Train the mood prediction model")
    train_parser.add_argument("history", help="JSON document with moods, sessions and catalog")

    predict_parser = subparsers.add_parser("predict", help="Forecast moods for the coming days")
    predict_parser.add_argument("history", help="JSON document with moods")
    predict_parser.add_argument(
        "--days",
        type=int,
        default=7,
        help="Number of days to forecast"
    )

    patterns_parser = subparsers.add_parser("patterns", help="Detect behavioral patterns")
    patterns_parser.add_argument("history", help="JSON document with moods and sessions")

    recommend_parser = subparsers.add_parser("recommend", help="Recommend wellness content")
    recommend_parser.add_argument("history", help="JSON document with moods, sessions and catalog")
    recommend_parser.add_argument(
        "--count",
        type=int,
        help="Number of recommendations to return (defaults to config)"
    )

    sentiment_parser = subparsers.add_parser("sentiment", help="Analyze the sentiment of a journal entry")
    source = sentiment_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--text", help="Text to analyze")
    source.add_argument("--file", help="Path to a text file to analyze")

    evaluate_parser = subparsers.add_parser("evaluate", help="Evaluate a saved model on held-out history")
    evaluate_parser.add_argument("history", help="JSON document with moods")

    subparsers.add_parser("state", help="Show the state of a saved model")
    return parser


def run(app: MoodMashApp, args: argparse.Namespace) -> Dict[str, Any]:
    if args.command == "train":
        return app.train(args.history)
    if args.command == "predict":
        return app.predict(args.history, args.days)
    if args.command == "patterns":
        return app.patterns(args.history)
    if args.command == "recommend":
        return app.recommend(args.history, args.count)
    if args.command == "sentiment":
        if args.file:
            with open(args.file, 'r', encoding='utf-8') as f:
                return app.sentiment(f.read())
        return app.sentiment(args.text)
    if args.command == "evaluate":
        return app.evaluate(args.history)
    if args.command == "state":
        return app.state()
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1
    app = MoodMashApp(args.config, args.model)
    try:
        app.initialize()
        result = run(app, args)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(json.dumps(result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
