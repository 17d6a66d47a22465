"""
Pydantic schemas for quiz responses.

A response is immutable once created and may be analyzed any number of
times. Timing metadata is carried for collaborators and ignored by scoring.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import ConfigDict, Field

from quiz_analysis.schemas.common import CamelModel


class QuestionResponse(CamelModel):
    """A single answer to a single question."""

    model_config = ConfigDict(frozen=True)

    question_id: str = Field(..., min_length=1)
    value: Union[float, str, None] = Field(
        None, description="Numeric rating, free text, or null when unanswered"
    )
    answered_at: Optional[datetime] = None
    time_spent_ms: Optional[int] = Field(None, ge=0)


class SessionMetadata(CamelModel):
    """Timing and client details captured while the quiz was taken."""

    model_config = ConfigDict(frozen=True)

    started_at: datetime
    completed_at: Optional[datetime] = None
    total_duration_ms: Optional[int] = Field(None, ge=0)
    user_agent: Optional[str] = None
    referrer: Optional[str] = None
    custom_fields: Optional[Dict[str, Any]] = None


class QuizResponse(CamelModel):
    """All answers one respondent gave to one quiz."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    quiz_id: str = Field(..., min_length=1)
    answers: List[QuestionResponse] = Field(default_factory=list)
    session_metadata: Optional[SessionMetadata] = None
