"""
Exception hierarchy for the analysis engine.

Configuration and mismatch errors are raised before any scoring runs.
Not-found errors are raised by lookup collaborators and propagate through
the orchestrator unchanged. Degenerate inputs (no numeric answers, all-zero
scores) are never errors.
"""
from typing import Dict, Optional


class AnalysisError(Exception):
    """Base class for every error raised by the analysis engine."""


class ScoringConfigError(AnalysisError, ValueError):
    """A scoring configuration or override is out of its valid range."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        details = "; ".join(f"{field}: {message}" for field, message in self.errors.items())
        super().__init__(f"Invalid scoring configuration: {details}")


class AnalysisMismatchError(AnalysisError):
    """The response, quiz and engine identifiers do not line up."""

    def __init__(
        self,
        *,
        response_id: str,
        engine_id: str,
        quiz_id: str,
        reason: str,
    ):
        self.response_id = response_id
        self.engine_id = engine_id
        self.quiz_id = quiz_id
        self.reason = reason
        super().__init__(
            f"Mismatched engine/quiz for response {response_id} "
            f"(engine {engine_id}, quiz {quiz_id}): {reason}"
        )


class AnalysisFailedError(AnalysisError):
    """The engine cannot analyze the response (no endings, inactive engine)."""

    def __init__(self, *, response_id: str, engine_id: str, reason: str):
        self.response_id = response_id
        self.engine_id = engine_id
        self.reason = reason
        super().__init__(
            f"Analysis failed for response {response_id} with engine {engine_id}: {reason}"
        )


class NotFoundError(AnalysisError, LookupError):
    """An upstream entity could not be found."""

    entity = "Entity"

    def __init__(self, entity_id: str, message: Optional[str] = None):
        self.id = entity_id
        super().__init__(message or f"{self.entity} with id {entity_id} not found")


class QuizNotFoundError(NotFoundError):
    entity = "Quiz"


class AnalysisEngineNotFoundError(NotFoundError):
    entity = "Analysis engine"


class ResponseNotFoundError(NotFoundError):
    entity = "Response"


class AnalysisSummaryError(AnalysisError):
    """Results cannot be summarized (e.g. none were given)."""


class MixedEngineVersionError(AnalysisSummaryError):
    """Results computed under different engines or engine versions were mixed."""
