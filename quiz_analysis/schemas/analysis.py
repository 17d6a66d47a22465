"""
Pydantic schemas for analysis results.

Percentages are stored unrounded; ``display_percentage`` rounds to one
decimal for presentation only.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field

from quiz_analysis.schemas.common import CamelModel, Version


class QuestionContribution(CamelModel):
    """Trace of how one rule scored for one ending."""

    model_config = ConfigDict(frozen=True)

    question_id: str
    is_primary: bool
    ideal_answers: List[float]
    user_answer: float
    distance: float = Field(..., ge=0.0)
    decay: float = Field(..., ge=0.0, le=1.0)
    weight: float = Field(..., description="Class weight times the rule multiplier")
    points: float


class EndingResult(CamelModel):
    """Score of a single ending within an analysis."""

    model_config = ConfigDict(frozen=True)

    ending_id: str
    points: float = Field(..., description="Raw accumulated score")
    percentage: float = Field(..., ge=0.0, le=100.0, description="Normalized share (0-100)")
    is_winner: bool = False
    question_breakdown: Optional[List[QuestionContribution]] = None

    @property
    def display_percentage(self) -> float:
        """Percentage rounded to one decimal place for presentation."""
        return round(self.percentage, 1)


class AnalysisResult(CamelModel):
    """
    Outcome of analyzing one response with one engine version.

    The ``id`` is assigned by the result store; the analysis core never
    assigns one. Re-running an analysis produces a new result.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    engine_id: str
    engine_version: Version
    response_id: str
    ending_results: List[EndingResult] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    analyzed_at: datetime

    @property
    def winner(self) -> Optional[EndingResult]:
        """The top ranked ending, if any ending cleared the threshold."""
        return self.ending_results[0] if self.ending_results else None


class EndingDistribution(CamelModel):
    """Aggregate statistics for one ending across many results."""

    ending_id: str
    count: int = Field(..., ge=0, description="Results in which the ending appeared")
    win_count: int = Field(..., ge=0, description="Results in which the ending won")
    percentage: float = Field(..., description="Share of results containing the ending")
    average_points: float
    average_percentage: float


class AnalysisSummary(CamelModel):
    """Summary of analysis results for a single engine version."""

    engine_id: str
    engine_version: Version
    total_responses: int = Field(..., ge=1)
    ending_distribution: List[EndingDistribution]
    generated_at: datetime
