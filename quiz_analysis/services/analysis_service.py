"""
Analysis service over the storage collaborators.

Looks up responses, engines and quizzes by id, runs the analysis core and
persists results through a result store. The lookups are protocols: any
repository exposing these coroutines can be plugged in. Not-found errors
raised by a lookup propagate unchanged.
"""
import uuid
from typing import Optional, Protocol, Sequence

from quiz_analysis.core.analysis.batch import BatchAnalysisResult, BatchRunner
from quiz_analysis.core.analysis.config_resolution import OverrideInput, parse_override
from quiz_analysis.core.analysis.errors import AnalysisFailedError
from quiz_analysis.core.analysis.orchestrator import analyze
from quiz_analysis.core.logging_config import analysis_id_context, get_logger
from quiz_analysis.schemas.analysis import AnalysisResult
from quiz_analysis.schemas.engine import AnalysisEngine
from quiz_analysis.schemas.quiz import Quiz
from quiz_analysis.schemas.responses import QuizResponse

logger = get_logger(__name__)


class QuizLookup(Protocol):
    async def find_by_id(self, quiz_id: str) -> Quiz:
        """Return the quiz or raise QuizNotFoundError."""
        ...


class EngineLookup(Protocol):
    async def find_by_id(self, engine_id: str) -> AnalysisEngine:
        """Return the engine or raise AnalysisEngineNotFoundError."""
        ...


class ResponseLookup(Protocol):
    async def find_by_id(self, response_id: str) -> QuizResponse:
        """Return the response or raise ResponseNotFoundError."""
        ...


class ResultStore(Protocol):
    async def create(self, result: AnalysisResult) -> AnalysisResult:
        """Persist a result and return it with its assigned id."""
        ...


class AnalysisService:
    """
    Runs and persists analyses for stored responses.

    Handles:
    - Lookups for the response, the engine, and the response's quiz
    - Rejecting inactive engines
    - Analysis via the pure orchestrator
    - Persistence via the result store
    """

    def __init__(
        self,
        quizzes: QuizLookup,
        engines: EngineLookup,
        responses: ResponseLookup,
        results: ResultStore,
        max_concurrency: Optional[int] = None,
    ):
        self.quizzes = quizzes
        self.engines = engines
        self.responses = responses
        self.results = results
        self.max_concurrency = max_concurrency

    async def analyze(
        self,
        response_id: str,
        engine_id: str,
        config_override: OverrideInput = None,
    ) -> AnalysisResult:
        """
        Analyze one stored response with one stored engine and persist it.

        Raises:
            ResponseNotFoundError, AnalysisEngineNotFoundError,
            QuizNotFoundError: From the lookups.
            AnalysisFailedError: If the engine is inactive or has no endings.
            AnalysisMismatchError: If the engine targets another quiz.
            ScoringConfigError: If the override is out of range.
        """
        token = analysis_id_context.set(uuid.uuid4().hex[:12])
        try:
            response = await self.responses.find_by_id(response_id)
            engine = await self.engines.find_by_id(engine_id)
            return await self._analyze_and_store(engine, response, config_override)
        finally:
            analysis_id_context.reset(token)

    async def batch_analyze(
        self,
        engine_id: str,
        response_ids: Sequence[str],
        config_override: OverrideInput = None,
        runner: Optional[BatchRunner] = None,
    ) -> BatchAnalysisResult:
        """
        Analyze and persist many stored responses with one engine.

        The engine is looked up and the override validated once, up front;
        both failures abort the call. Every per-response failure (missing
        response, dangling quiz reference, mismatch) is collected in the
        returned BatchAnalysisResult instead.
        """
        parsed_override = parse_override(config_override)
        engine = await self.engines.find_by_id(engine_id)
        runner = runner or BatchRunner(self.max_concurrency)

        logger.info(
            "Starting batch analysis of %d responses with engine %s v%s",
            len(response_ids),
            engine.id,
            engine.version.semver,
            extra={"engine_id": engine.id, "batch_size": len(response_ids)},
        )

        async def analyze_one(response_id: str) -> AnalysisResult:
            response = await self.responses.find_by_id(response_id)
            return await self._analyze_and_store(engine, response, parsed_override)

        return await runner.run(response_ids, analyze_one, key=lambda rid: rid)

    async def _analyze_and_store(
        self,
        engine: AnalysisEngine,
        response: QuizResponse,
        config_override: OverrideInput,
    ) -> AnalysisResult:
        if not engine.is_active:
            raise AnalysisFailedError(
                response_id=response.id,
                engine_id=engine.id,
                reason="Analysis engine is not active",
            )
        quiz = await self.quizzes.find_by_id(response.quiz_id)
        result = analyze(engine, quiz, response, config_override)
        stored = await self.results.create(result)
        logger.debug(
            "Stored analysis result %s for response %s",
            stored.id,
            response.id,
            extra={"response_id": response.id, "engine_id": engine.id},
        )
        return stored
