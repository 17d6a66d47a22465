"""
Pytest configuration and shared fixtures for testing.

The reference scenario used throughout: a quiz with two rating questions
(q1, q2 on a 0-5 scale) and an engine with two endings. Ending ``a`` has a
primary rule on q1 (ideal 5) and a secondary rule on q2 (ideal 5); ending
``b`` has a primary rule on q1 (ideal 0). A respondent answering 5 and 5
scores a = 15 and b = 10 * 0.9 ** 5.
"""
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import pytest

from quiz_analysis.core.analysis.errors import (
    AnalysisEngineNotFoundError,
    QuizNotFoundError,
    ResponseNotFoundError,
)
from quiz_analysis.schemas import (
    AnalysisEngine,
    AnalysisResult,
    EndingDefinition,
    Question,
    QuestionResponse,
    QuestionRule,
    Quiz,
    QuizResponse,
    RatingQuestionData,
    ScoringConfig,
    TextQuestionData,
    Version,
)

FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def rating_question(question_id: str, order: int = 0) -> Question:
    return Question(
        id=question_id,
        order=order,
        title=f"Question {question_id}",
        data=RatingQuestionData(min_rating=0, max_rating=5),
    )


class InMemoryQuizzes:
    def __init__(self, quizzes: List[Quiz]):
        self._items = {quiz.id: quiz for quiz in quizzes}

    async def find_by_id(self, quiz_id: str) -> Quiz:
        try:
            return self._items[quiz_id]
        except KeyError:
            raise QuizNotFoundError(quiz_id) from None


class InMemoryEngines:
    def __init__(self, engines: List[AnalysisEngine]):
        self._items = {engine.id: engine for engine in engines}

    async def find_by_id(self, engine_id: str) -> AnalysisEngine:
        try:
            return self._items[engine_id]
        except KeyError:
            raise AnalysisEngineNotFoundError(engine_id) from None


class InMemoryResponses:
    def __init__(self, responses: List[QuizResponse]):
        self._items = {response.id: response for response in responses}
        self.lookups: List[str] = []

    async def find_by_id(self, response_id: str) -> QuizResponse:
        self.lookups.append(response_id)
        try:
            return self._items[response_id]
        except KeyError:
            raise ResponseNotFoundError(response_id) from None


class InMemoryResultStore:
    def __init__(self):
        self.created: List[AnalysisResult] = []

    async def create(self, result: AnalysisResult) -> AnalysisResult:
        stored = result.model_copy(update={"id": f"result-{len(self.created) + 1}"})
        self.created.append(stored)
        return stored


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def quiz() -> Quiz:
    """Two rating questions plus one free text question."""
    return Quiz(
        id="quiz-1",
        version=Version(semver="1.0.0"),
        title="Which artist are you?",
        questions=[
            rating_question("q1", order=0),
            rating_question("q2", order=1),
            Question(
                id="notes",
                order=2,
                title="Anything else?",
                data=TextQuestionData(placeholder="Tell us more"),
            ),
        ],
    )


@pytest.fixture
def engine() -> AnalysisEngine:
    return AnalysisEngine(
        id="engine-1",
        quiz_id="quiz-1",
        version=Version(semver="1.0.0", comment="Initial endings"),
        name="Artist archetypes",
        scoring_config=ScoringConfig(),
        endings=[
            EndingDefinition(
                ending_id="a",
                name="Ending A",
                question_rules=[
                    QuestionRule(question_id="q1", ideal_answers=[5], is_primary=True),
                    QuestionRule(question_id="q2", ideal_answers=[5], is_primary=False),
                ],
            ),
            EndingDefinition(
                ending_id="b",
                name="Ending B",
                question_rules=[
                    QuestionRule(question_id="q1", ideal_answers=[0], is_primary=True),
                ],
            ),
        ],
    )


@pytest.fixture
def make_response() -> Callable[..., QuizResponse]:
    """Factory building a response from ``{question_id: value}``."""

    def _make(
        answers: Dict[str, Any],
        response_id: str = "response-1",
        quiz_id: str = "quiz-1",
    ) -> QuizResponse:
        return QuizResponse(
            id=response_id,
            quiz_id=quiz_id,
            answers=[
                QuestionResponse(question_id=question_id, value=value)
                for question_id, value in answers.items()
            ],
        )

    return _make


@pytest.fixture
def response(make_response) -> QuizResponse:
    return make_response({"q1": 5, "q2": 5, "notes": "I paint at night"})


@pytest.fixture
def make_engine(engine) -> Callable[..., AnalysisEngine]:
    """Factory deriving an engine from the reference engine."""

    def _make(
        endings: Optional[List[EndingDefinition]] = None,
        scoring_config: Optional[ScoringConfig] = None,
        **updates: Any,
    ) -> AnalysisEngine:
        if endings is not None:
            updates["endings"] = endings
        if scoring_config is not None:
            updates["scoring_config"] = scoring_config
        return engine.model_copy(update=updates)

    return _make


@pytest.fixture
def quizzes(quiz) -> InMemoryQuizzes:
    return InMemoryQuizzes([quiz])


@pytest.fixture
def engines(engine) -> InMemoryEngines:
    inactive = engine.model_copy(update={"id": "engine-inactive", "is_active": False})
    return InMemoryEngines([engine, inactive])


@pytest.fixture
def responses(make_response) -> InMemoryResponses:
    return InMemoryResponses(
        [
            make_response({"q1": 5, "q2": 5}, response_id="r1"),
            make_response({"q1": 0, "q2": 1}, response_id="r2"),
            make_response({"q1": 3}, response_id="r3"),
            make_response({"q1": 4}, response_id="orphan", quiz_id="quiz-deleted"),
        ]
    )


@pytest.fixture
def result_store() -> InMemoryResultStore:
    return InMemoryResultStore()
