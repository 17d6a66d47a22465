"""
Batch runner.

Applies an analysis to many responses with bounded concurrency. Each item
runs independently: one item's failure (a dangling quiz reference, a
mismatched engine) is recorded against its response id and never aborts the
batch. The concurrency limit exists to protect whatever storage layer
supplies entities to the workers; the analysis itself is pure.

Cancellation stops scheduling: items that have not started when
``cancel()`` is called are reported as skipped, in-flight items finish.
"""
import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, TypeVar

from quiz_analysis.core.analysis.config_resolution import OverrideInput, parse_override
from quiz_analysis.core.analysis.normalizer import POWER_LAW, SeparationStrategy
from quiz_analysis.core.analysis.orchestrator import analyze
from quiz_analysis.core.config import settings
from quiz_analysis.core.logging_config import analysis_id_context
from quiz_analysis.schemas.analysis import AnalysisResult
from quiz_analysis.schemas.engine import AnalysisEngine
from quiz_analysis.schemas.quiz import Quiz
from quiz_analysis.schemas.responses import QuizResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Sentinel returned by items that were never started
_SKIPPED = object()


@dataclass(frozen=True)
class BatchItemFailure:
    """A single failed item, traceable to its response id."""

    response_id: str
    error_type: str
    message: str
    error: Exception = field(repr=False, compare=False)


@dataclass
class BatchAnalysisResult:
    """Successes, failures and skipped items of one batch."""

    results: List[AnalysisResult] = field(default_factory=list)
    failures: List[BatchItemFailure] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results) + len(self.failures) + len(self.skipped)

    @property
    def succeeded(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return len(self.failures)

    def results_by_response(self) -> Dict[str, AnalysisResult]:
        """Map response id to its analysis result."""
        return {result.response_id: result for result in self.results}


class BatchRunner:
    """
    Bounded-concurrency fan-out over analysis work items.

    A runner that has been cancelled stays cancelled; create a new runner
    for the next batch.
    """

    def __init__(self, max_concurrency: Optional[int] = None):
        if max_concurrency is None:
            max_concurrency = settings.ANALYSIS_BATCH_CONCURRENCY
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
        self.max_concurrency = max_concurrency
        self._cancelled = False
        self._in_flight = 0
        self.peak_concurrency = 0

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Stop scheduling new items. In-flight items are allowed to finish."""
        if not self._cancelled:
            logger.info("Batch cancellation requested")
        self._cancelled = True

    async def run(
        self,
        items: Sequence[T],
        worker: Callable[[T], Awaitable[AnalysisResult]],
        key: Callable[[T], str],
    ) -> BatchAnalysisResult:
        """
        Run ``worker`` over every item, at most ``max_concurrency`` at once.

        Args:
            items: Work items (responses or response ids).
            worker: Coroutine function producing one AnalysisResult.
            key: Maps an item to the response id used to report it.

        Returns:
            BatchAnalysisResult with one entry per item.
        """
        semaphore = asyncio.Semaphore(self.max_concurrency)
        batch_id = uuid.uuid4().hex[:12]
        start_time = time.perf_counter()

        # Tasks copy the current context, so every item logs under the batch id
        token = analysis_id_context.set(batch_id)
        try:
            outcomes = await asyncio.gather(
                *(self._run_item(semaphore, item, worker) for item in items),
                return_exceptions=True,
            )
        finally:
            analysis_id_context.reset(token)

        batch = BatchAnalysisResult()
        for item, outcome in zip(items, outcomes):
            item_key = key(item)
            if outcome is _SKIPPED:
                batch.skipped.append(item_key)
            elif isinstance(outcome, Exception):
                logger.warning(
                    "Batch item %s failed: %s: %s",
                    item_key,
                    type(outcome).__name__,
                    outcome,
                    extra={"response_id": item_key},
                )
                batch.failures.append(
                    BatchItemFailure(
                        response_id=item_key,
                        error_type=type(outcome).__name__,
                        message=str(outcome),
                        error=outcome,
                    )
                )
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                batch.results.append(outcome)

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "Batch %s complete: %d/%d succeeded, %d failed, %d skipped",
            batch_id,
            batch.succeeded,
            len(items),
            batch.failed,
            len(batch.skipped),
            extra={
                "batch_size": len(items),
                "failed_count": batch.failed,
                "duration_ms": round(duration_ms, 3),
            },
        )
        return batch

    async def _run_item(
        self,
        semaphore: asyncio.Semaphore,
        item: T,
        worker: Callable[[T], Awaitable[AnalysisResult]],
    ) -> object:
        async with semaphore:
            if self._cancelled:
                return _SKIPPED
            self._in_flight += 1
            self.peak_concurrency = max(self.peak_concurrency, self._in_flight)
            try:
                return await worker(item)
            finally:
                self._in_flight -= 1


async def batch_analyze(
    engine: AnalysisEngine,
    quiz: Quiz,
    responses: Sequence[QuizResponse],
    config_override: OverrideInput = None,
    *,
    runner: Optional[BatchRunner] = None,
    now: Optional[datetime] = None,
    separation: SeparationStrategy = POWER_LAW,
) -> BatchAnalysisResult:
    """
    Analyze many responses against one engine/quiz pair.

    The override is validated once, before any item runs, so an invalid
    override fails the call instead of failing every item.

    Raises:
        ScoringConfigError: If the override is out of range.
    """
    parsed_override = parse_override(config_override)
    runner = runner or BatchRunner()

    async def analyze_one(response: QuizResponse) -> AnalysisResult:
        return analyze(
            engine,
            quiz,
            response,
            parsed_override,
            now=now,
            separation=separation,
        )

    return await runner.run(responses, analyze_one, key=lambda response: response.id)
