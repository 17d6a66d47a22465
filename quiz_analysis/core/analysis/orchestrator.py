"""
Analysis orchestrator.

``analyze`` validates that a response, quiz and engine belong together,
resolves the scoring configuration, runs the score accumulator and the
percentage normalizer, and stamps the result with the engine identity and
version. It performs no I/O and touches no shared state; apart from reading
the clock for ``analyzed_at`` (pass ``now`` to pin it) it is deterministic.
Persisting the result is the caller's responsibility.
"""
import logging
import time
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from quiz_analysis.core.analysis.accumulator import scoreable_answers, score_endings
from quiz_analysis.core.analysis.config_resolution import (
    OverrideInput,
    parse_override,
    resolve_config,
)
from quiz_analysis.core.analysis.errors import AnalysisFailedError, AnalysisMismatchError
from quiz_analysis.core.analysis.normalizer import (
    POWER_LAW,
    SeparationStrategy,
    normalize_scores,
)
from quiz_analysis.core.datetime_utils import ensure_timezone_aware, utc_now
from quiz_analysis.schemas.analysis import AnalysisResult, EndingResult
from quiz_analysis.schemas.engine import AnalysisEngine
from quiz_analysis.schemas.quiz import Quiz
from quiz_analysis.schemas.responses import QuizResponse

logger = logging.getLogger(__name__)


def validate_analysis_inputs(
    engine: AnalysisEngine, quiz: Quiz, response: QuizResponse
) -> None:
    """
    Check that the inputs can be analyzed together.

    Raises:
        AnalysisMismatchError: If the response or the engine targets a
            different quiz.
        AnalysisFailedError: If the engine defines no endings or repeats an
            ending id.
    """
    if response.quiz_id != quiz.id:
        raise AnalysisMismatchError(
            response_id=response.id,
            engine_id=engine.id,
            quiz_id=quiz.id,
            reason=f"response belongs to quiz {response.quiz_id}",
        )
    if engine.quiz_id != quiz.id:
        raise AnalysisMismatchError(
            response_id=response.id,
            engine_id=engine.id,
            quiz_id=quiz.id,
            reason=f"engine targets quiz {engine.quiz_id}",
        )
    if not engine.endings:
        raise AnalysisFailedError(
            response_id=response.id,
            engine_id=engine.id,
            reason="Analysis engine has no endings defined",
        )
    duplicates = sorted(
        ending_id
        for ending_id, count in Counter(e.ending_id for e in engine.endings).items()
        if count > 1
    )
    if duplicates:
        raise AnalysisFailedError(
            response_id=response.id,
            engine_id=engine.id,
            reason=f"Duplicate ending ids: {duplicates}",
        )


def find_ill_formed_rules(engine: AnalysisEngine) -> List[Tuple[str, str]]:
    """Return (ending_id, question_id) for every rule without ideal answers."""
    return [
        (ending.ending_id, rule.question_id)
        for ending in engine.endings
        for rule in ending.question_rules
        if not rule.ideal_answers
    ]


def format_distribution(ending_results: Sequence[EndingResult]) -> str:
    """Human readable distribution, e.g. ``a: 71.8%, b: 28.2%``."""
    return ", ".join(
        f"{result.ending_id}: {result.display_percentage:.1f}%"
        for result in ending_results
    )


def analyze(
    engine: AnalysisEngine,
    quiz: Quiz,
    response: QuizResponse,
    config_override: OverrideInput = None,
    *,
    now: Optional[datetime] = None,
    separation: SeparationStrategy = POWER_LAW,
) -> AnalysisResult:
    """
    Analyze one quiz response with one analysis engine.

    Args:
        engine: Engine snapshot (endings, scoring config, version).
        quiz: The quiz the response and the engine belong to.
        response: The respondent's answers.
        config_override: Optional partial scoring override for what-if
            tuning. The result still records ``engine.version``.
        now: Timestamp for ``analyzed_at``; defaults to the current UTC time.
        separation: Separation strategy for the normalizer.

    Returns:
        A new, unpersisted AnalysisResult (``id`` is None).

    Raises:
        ScoringConfigError: If the override is out of range.
        AnalysisMismatchError: If the ids do not line up.
        AnalysisFailedError: If the engine cannot produce a distribution.
    """
    start_time = time.perf_counter()

    validate_analysis_inputs(engine, quiz, response)
    parsed_override = parse_override(config_override)
    config = resolve_config(engine.scoring_config, parsed_override)

    ill_formed = find_ill_formed_rules(engine)
    if ill_formed:
        logger.warning(
            "Engine %s has %d rule(s) without ideal answers, skipping: %s",
            engine.id,
            len(ill_formed),
            ill_formed,
        )

    answers = scoreable_answers(quiz, response)
    scores = score_endings(engine.endings, answers, config)
    normalization = normalize_scores(
        [score.ending_id for score in scores],
        [score.raw_score for score in scores],
        config,
        separation,
    )

    breakdowns = {score.ending_id: score.breakdown for score in scores}
    ending_results = [
        EndingResult(
            ending_id=ending.ending_id,
            points=ending.points,
            percentage=ending.percentage,
            is_winner=ending.is_winner,
            question_breakdown=(
                breakdowns[ending.ending_id] if config.enable_question_breakdown else None
            ),
        )
        for ending in normalization.ranked
    ]

    analyzed_at = ensure_timezone_aware(now) if now is not None else utc_now()
    metadata: Dict[str, Any] = {
        "total_questions": len(quiz.questions),
        "answered_questions": len(response.answers),
        "scored_questions": len(answers),
        "analysis_timestamp": analyzed_at.isoformat(),
        "separation": separation.name,
    }
    if parsed_override is not None and not parsed_override.is_empty:
        metadata["config_override"] = parsed_override.applied_fields()

    result = AnalysisResult(
        engine_id=engine.id,
        engine_version=engine.version,
        response_id=response.id,
        ending_results=ending_results,
        metadata=metadata,
        analyzed_at=analyzed_at,
    )

    duration_ms = (time.perf_counter() - start_time) * 1000
    top = result.winner
    logger.info(
        "Analyzed response %s with engine %s v%s: top=%s (%d/%d endings shown)",
        response.id,
        engine.id,
        engine.version.semver,
        f"{top.ending_id} {top.display_percentage:.1f}%" if top else "none",
        len(ending_results),
        len(engine.endings),
        extra={
            "engine_id": engine.id,
            "engine_version": engine.version.semver,
            "response_id": response.id,
            "duration_ms": round(duration_ms, 3),
        },
    )
    logger.debug("Distribution: %s", format_distribution(ending_results))

    return result
