"""
Score accumulator.

Folds per-question rule contributions into one raw score per ending:

    decay        = clamp(1 - falloff, 0, 1) ** distance
    contribution = point_value * point_weight * weight_multiplier * decay

Point value, weight and falloff are selected by the rule's weight class.
Primary and secondary contributions are summed separately so each class can
be floored by its ``*_min_points`` before the final sum.

Ordering contract: rules are visited in ascending ``question_id`` and then
in declaration order, and sums are accumulated in exactly that order, so
identical inputs always produce bit-identical scores.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from quiz_analysis.core.analysis.distance import (
    decay_factor,
    rule_distance,
    scoreable_value,
)
from quiz_analysis.domain_types import WeightClass
from quiz_analysis.schemas.analysis import QuestionContribution
from quiz_analysis.schemas.engine import EndingDefinition, QuestionRule, ScoringConfig
from quiz_analysis.schemas.quiz import Quiz
from quiz_analysis.schemas.responses import QuizResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassParameters:
    """Scoring parameters for one weight class."""

    point_value: float
    point_weight: float
    falloff: float
    min_points: float


@dataclass
class EndingScore:
    """Raw score of one ending for one response."""

    ending_id: str
    primary_points: float
    secondary_points: float
    primary_floored: bool = False
    secondary_floored: bool = False
    breakdown: List[QuestionContribution] = field(default_factory=list)

    @property
    def raw_score(self) -> float:
        return self.primary_points + self.secondary_points


def class_parameters(config: ScoringConfig, weight_class: WeightClass) -> ClassParameters:
    """Select the config values that apply to a weight class."""
    if weight_class is WeightClass.PRIMARY:
        return ClassParameters(
            point_value=config.primary_point_value,
            point_weight=config.primary_point_weight,
            falloff=config.primary_distance_falloff,
            min_points=config.primary_min_points,
        )
    return ClassParameters(
        point_value=config.secondary_point_value,
        point_weight=config.secondary_point_weight,
        falloff=config.secondary_distance_falloff,
        min_points=config.secondary_min_points,
    )


def scoreable_answers(quiz: Quiz, response: QuizResponse) -> Dict[str, float]:
    """
    Extract the numeric answers that participate in scoring.

    Only answers to rating questions present on the quiz are kept. Answers
    to unknown question ids are dropped. When a question was answered more
    than once the last answer wins, even if it is not numeric.

    Returns:
        Mapping of question id to numeric answer.
    """
    rating_ids = set(quiz.rating_question_ids())
    answers: Dict[str, float] = {}
    for answer in response.answers:
        if answer.question_id not in rating_ids:
            continue
        value = scoreable_value(answer.value)
        if value is None:
            answers.pop(answer.question_id, None)
        else:
            answers[answer.question_id] = value
    return answers


def ordered_rules(rules: Sequence[QuestionRule]) -> List[QuestionRule]:
    """Rules in ascending question id, then declaration order (stable sort)."""
    return sorted(rules, key=lambda rule: rule.question_id)


def score_ending(
    ending: EndingDefinition,
    answers: Dict[str, float],
    config: ScoringConfig,
) -> EndingScore:
    """
    Compute the raw score of one ending.

    Args:
        ending: Ending definition with its question rules.
        answers: Scoreable answers keyed by question id (see
            ``scoreable_answers``).
        config: Fully resolved scoring configuration.

    Returns:
        EndingScore with per-class totals after flooring and, when
        ``config.enable_question_breakdown`` is set, one trace entry per
        evaluated rule.
    """
    primary_total = 0.0
    secondary_total = 0.0
    breakdown: List[QuestionContribution] = []

    for rule in ordered_rules(ending.question_rules):
        value = answers.get(rule.question_id)
        if value is None:
            continue

        distance = rule_distance(value, rule)
        if distance is None:
            # Ill-formed rule; reported once per analysis by the orchestrator
            continue

        weight_class = WeightClass.for_rule(rule.is_primary)
        params = class_parameters(config, weight_class)
        weight = params.point_weight * rule.multiplier
        decay = decay_factor(distance, params.falloff)

        if weight_class is WeightClass.SECONDARY and config.disable_secondary_points:
            points = 0.0
        else:
            points = params.point_value * weight * decay

        if weight_class is WeightClass.PRIMARY:
            primary_total += points
        else:
            secondary_total += points

        if config.enable_question_breakdown:
            breakdown.append(
                QuestionContribution(
                    question_id=rule.question_id,
                    is_primary=rule.is_primary,
                    ideal_answers=list(rule.ideal_answers),
                    user_answer=value,
                    distance=distance,
                    decay=decay,
                    weight=weight,
                    points=points,
                )
            )

    primary_floored = primary_total < config.primary_min_points
    secondary_floored = secondary_total < config.secondary_min_points

    # A floored class contributes zero points in the trace as well
    if primary_floored or secondary_floored:
        breakdown = [
            contribution.model_copy(update={"points": 0.0})
            if (primary_floored if contribution.is_primary else secondary_floored)
            else contribution
            for contribution in breakdown
        ]

    return EndingScore(
        ending_id=ending.ending_id,
        primary_points=0.0 if primary_floored else primary_total,
        secondary_points=0.0 if secondary_floored else secondary_total,
        primary_floored=primary_floored,
        secondary_floored=secondary_floored,
        breakdown=breakdown,
    )


def score_endings(
    endings: Sequence[EndingDefinition],
    answers: Dict[str, float],
    config: ScoringConfig,
) -> List[EndingScore]:
    """Score every ending, preserving the engine's declaration order."""
    scores = [score_ending(ending, answers, config) for ending in endings]
    logger.debug(
        "Accumulated raw scores for %d endings from %d answers",
        len(scores),
        len(answers),
    )
    return scores
