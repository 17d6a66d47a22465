"""
Service layer wiring the analysis core to storage collaborators.
"""
from .analysis_service import (
    AnalysisService,
    EngineLookup,
    QuizLookup,
    ResponseLookup,
    ResultStore,
)

__all__ = [
    "AnalysisService",
    "EngineLookup",
    "QuizLookup",
    "ResponseLookup",
    "ResultStore",
]
