"""Command line what-if tool for the quiz analysis engine.

Analyzes a single response against an engine loaded from JSON files, with
optional scoring overrides, so engine authors can tune a configuration
before publishing a new engine version. Nothing is persisted.

Examples:
    quiz-analysis analyze --engine engine.json --quiz quiz.json \\
        --response response.json --override beta=2 --override primaryDistanceFalloff=0.3
    quiz-analysis resolve-config --engine engine.json --override maxEndingResults=3

Exit Codes:
    0 - Success
    1 - Input error (missing file, invalid JSON, invalid payload)
    2 - Configuration error (invalid override or scoring config)
    3 - Analysis error (mismatched ids, engine without endings)
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

from quiz_analysis.core.analysis.config_resolution import resolve_config
from quiz_analysis.core.analysis.errors import AnalysisError, ScoringConfigError
from quiz_analysis.core.analysis.normalizer import (
    SEPARATION_STRATEGIES,
    get_separation_strategy,
)
from quiz_analysis.core.analysis.orchestrator import analyze, format_distribution
from quiz_analysis.core.config import default_scoring_config
from quiz_analysis.core.logging_config import get_logger, setup_logging
from quiz_analysis.schemas.engine import AnalysisEngine
from quiz_analysis.schemas.quiz import Quiz
from quiz_analysis.schemas.responses import QuizResponse

logger = get_logger(__name__)

# Exit codes
EXIT_SUCCESS = 0
EXIT_INPUT_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_ANALYSIS_ERROR = 3

ModelT = TypeVar("ModelT", bound=BaseModel)


class InputError(Exception):
    """An input file could not be loaded."""


def parse_override_args(pairs: Optional[Sequence[str]]) -> Dict[str, Any]:
    """
    Parse ``key=value`` override arguments into a mapping.

    Values are decoded as JSON where possible (``2``, ``0.5``, ``true``) and
    kept as strings otherwise, leaving type checks to the override model.
    Dashes in keys are accepted in place of underscores.

    Raises:
        InputError: If an argument has no ``=``.
    """
    overrides: Dict[str, Any] = {}
    for pair in pairs or []:
        key, sep, raw_value = pair.partition("=")
        key = key.strip().replace("-", "_")
        if not sep or not key:
            raise InputError(f"Override must look like key=value, got '{pair}'")
        try:
            overrides[key] = json.loads(raw_value)
        except json.JSONDecodeError:
            overrides[key] = raw_value
    return overrides


def load_json(path: Path) -> Any:
    try:
        with path.open(encoding="utf-8") as f:
            return json.load(f)
    except OSError as e:
        raise InputError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise InputError(f"Invalid JSON in {path}: {e}") from e


def load_model(path: Path, model: Type[ModelT]) -> ModelT:
    """Load and validate a JSON file as ``model``."""
    try:
        return model.model_validate(load_json(path))
    except ValidationError as e:
        raise InputError(f"Invalid {model.__name__} in {path}:\n{e}") from e


def load_engine(path: Path) -> AnalysisEngine:
    """
    Load an engine, filling in the configured default scoring config when
    the payload has none.
    """
    payload = load_json(path)
    if isinstance(payload, dict) and not (
        "scoringConfig" in payload or "scoring_config" in payload
    ):
        payload["scoring_config"] = default_scoring_config().model_dump()
    try:
        return AnalysisEngine.model_validate(payload)
    except ValidationError as e:
        config_errors = {
            ".".join(str(part) for part in error["loc"]): error["msg"]
            for error in e.errors()
            if error["loc"] and error["loc"][0] in ("scoringConfig", "scoring_config")
        }
        if config_errors:
            raise ScoringConfigError(config_errors) from e
        raise InputError(f"Invalid AnalysisEngine in {path}:\n{e}") from e


def render_json(model: BaseModel) -> str:
    return model.model_dump_json(by_alias=True, indent=2)


def run_analyze(args: argparse.Namespace) -> int:
    engine = load_engine(args.engine)
    quiz = load_model(args.quiz, Quiz)
    response = load_model(args.response, QuizResponse)
    overrides = parse_override_args(args.override)

    result = analyze(
        engine,
        quiz,
        response,
        overrides or None,
        separation=get_separation_strategy(args.separation),
    )

    if args.json:
        print(render_json(result))
        return EXIT_SUCCESS

    print(f"Engine:   {engine.name} ({engine.id} v{engine.version.semver})")
    print(f"Response: {response.id}")
    if "config_override" in result.metadata:
        print(f"Overrides: {result.metadata['config_override']}")
    print(
        f"Scored {result.metadata['scored_questions']} of "
        f"{result.metadata['total_questions']} questions"
    )
    print()
    if not result.ending_results:
        print("No endings above the percentage threshold")
    for rank, ending in enumerate(result.ending_results, start=1):
        marker = "*" if ending.is_winner else " "
        print(
            f"{rank:>3}. {marker} {ending.ending_id:<40} "
            f"{ending.display_percentage:>5.1f}%  ({ending.points:.2f} pts)"
        )
    logger.debug("Distribution: %s", format_distribution(result.ending_results))
    return EXIT_SUCCESS


def run_resolve_config(args: argparse.Namespace) -> int:
    engine = load_engine(args.engine)
    overrides = parse_override_args(args.override)
    config = resolve_config(engine.scoring_config, overrides or None)
    print(render_json(config))
    return EXIT_SUCCESS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quiz-analysis",
        description="Analyze quiz responses against an analysis engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze", help="Analyze one response and print the ranked endings"
    )
    analyze_parser.add_argument("--engine", type=Path, required=True, help="Engine JSON file")
    analyze_parser.add_argument("--quiz", type=Path, required=True, help="Quiz JSON file")
    analyze_parser.add_argument(
        "--response", type=Path, required=True, help="Quiz response JSON file"
    )
    analyze_parser.add_argument(
        "--override",
        action="append",
        metavar="KEY=VALUE",
        help="Scoring config override (repeatable), e.g. beta=2",
    )
    analyze_parser.add_argument(
        "--separation",
        choices=sorted(SEPARATION_STRATEGIES),
        default="power",
        help="Separation strategy applied before normalization (default: power)",
    )
    analyze_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full analysis result as JSON",
    )
    analyze_parser.set_defaults(handler=run_analyze)

    resolve_parser = subparsers.add_parser(
        "resolve-config", help="Print the engine's scoring config after overrides"
    )
    resolve_parser.add_argument("--engine", type=Path, required=True, help="Engine JSON file")
    resolve_parser.add_argument(
        "--override",
        action="append",
        metavar="KEY=VALUE",
        help="Scoring config override (repeatable)",
    )
    resolve_parser.set_defaults(handler=run_resolve_config)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the quiz-analysis command."""
    args = build_parser().parse_args(argv)

    setup_logging("DEBUG" if args.verbose else None)

    try:
        return args.handler(args)
    except InputError as e:
        logger.error("%s", e)
        return EXIT_INPUT_ERROR
    except ScoringConfigError as e:
        logger.error("%s", e)
        return EXIT_CONFIG_ERROR
    except AnalysisError as e:
        logger.error("%s", e)
        return EXIT_ANALYSIS_ERROR


if __name__ == "__main__":
    sys.exit(main())
