"""
Pydantic schemas for quizzes, analysis engines, responses and results.
"""
from .analysis import (
    AnalysisResult,
    AnalysisSummary,
    EndingDistribution,
    EndingResult,
    QuestionContribution,
)
from .common import CamelModel, Version
from .engine import (
    AnalysisEngine,
    EndingDefinition,
    QuestionRule,
    ScoringConfig,
    ScoringConfigOverride,
)
from .quiz import (
    EmailQuestionData,
    MultipleChoiceQuestionData,
    Question,
    Quiz,
    RatingQuestionData,
    TextQuestionData,
)
from .responses import QuestionResponse, QuizResponse, SessionMetadata

__all__ = [
    "AnalysisEngine",
    "AnalysisResult",
    "AnalysisSummary",
    "CamelModel",
    "EmailQuestionData",
    "EndingDefinition",
    "EndingDistribution",
    "EndingResult",
    "MultipleChoiceQuestionData",
    "Question",
    "QuestionContribution",
    "QuestionResponse",
    "QuestionRule",
    "Quiz",
    "QuizResponse",
    "RatingQuestionData",
    "ScoringConfig",
    "ScoringConfigOverride",
    "SessionMetadata",
    "TextQuestionData",
    "Version",
]
