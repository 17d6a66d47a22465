"""
Pydantic schemas for quizzes and their questions.

Question data is a tagged union on ``type``. Only the ``rating`` variant is
scored by the analysis engine; the other variants are carried so a full quiz
validates, and are ignored during scoring.
"""
from typing import Annotated, Dict, List, Literal, Optional, Self, Union

from pydantic import Field, model_validator

from quiz_analysis.domain_types import QuestionDataType
from quiz_analysis.schemas.common import CamelModel, Version


class RatingQuestionData(CamelModel):
    """A question answered on a numeric rating scale."""

    type: Literal["rating"] = "rating"
    min_rating: float = Field(..., description="Lowest selectable rating")
    max_rating: float = Field(..., description="Highest selectable rating")
    min_label: str = ""
    max_label: str = ""

    @model_validator(mode="after")
    def validate_rating_bounds(self) -> Self:
        """Ensure the scale is not inverted."""
        if self.min_rating > self.max_rating:
            raise ValueError(
                f"minimum rating ({self.min_rating}) cannot be greater than "
                f"maximum rating ({self.max_rating})"
            )
        return self


class MultipleChoiceQuestionData(CamelModel):
    """A question with a fixed list of choices."""

    type: Literal["multiple-choice"] = "multiple-choice"
    choices: List[str] = Field(default_factory=list)


class TextQuestionData(CamelModel):
    """A free text question."""

    type: Literal["text"] = "text"
    placeholder: Optional[str] = None


class EmailQuestionData(CamelModel):
    """An email address question."""

    type: Literal["email"] = "email"


QuestionData = Annotated[
    Union[
        RatingQuestionData,
        MultipleChoiceQuestionData,
        TextQuestionData,
        EmailQuestionData,
    ],
    Field(discriminator="type"),
]


class Question(CamelModel):
    """A single question on a quiz."""

    id: str = Field(..., min_length=1, description="Stable question identifier")
    order: int = Field(0, ge=0)
    title: str = ""
    data: QuestionData

    @property
    def data_type(self) -> QuestionDataType:
        return QuestionDataType(self.data.type)

    @property
    def is_rating(self) -> bool:
        return self.data_type is QuestionDataType.RATING


class Quiz(CamelModel):
    """A published quiz snapshot: ordered questions plus identity."""

    id: str = Field(..., min_length=1)
    version: Version
    title: str = ""
    questions: List[Question] = Field(default_factory=list)

    def questions_by_id(self) -> Dict[str, Question]:
        """Map question id to question."""
        return {question.id: question for question in self.questions}

    def rating_question_ids(self) -> List[str]:
        """Ids of the questions that participate in scoring, in quiz order."""
        return [
            question.id
            for question in sorted(self.questions, key=lambda q: q.order)
            if question.is_rating
        ]
