"""
Distance & match model.

Measures how far one numeric answer is from a rule's ideal answers. Answers
that are not finite numbers are not scoreable and never raise.
"""
import math
from typing import Any, Optional

from quiz_analysis.schemas.engine import QuestionRule


def scoreable_value(raw: Any) -> Optional[float]:
    """
    Return the numeric value of an answer, or None if it cannot be scored.

    Free text, unanswered (None), booleans and non-finite numbers are not
    scoreable.

    Example:
        >>> scoreable_value(4)
        4.0
        >>> scoreable_value("four") is None
        True
    """
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    value = float(raw)
    if not math.isfinite(value):
        return None
    return value


def rule_distance(value: float, rule: QuestionRule) -> Optional[float]:
    """
    Distance from ``value`` to the nearest of the rule's ideal answers.

    Args:
        value: The respondent's numeric answer.
        rule: The rule holding the ideal answers.

    Returns:
        ``min(|value - ideal|)`` over the ideal answers, or None when the
        rule has no ideal answers (an authoring error; the rule is skipped).
    """
    if not rule.ideal_answers:
        return None
    return min(abs(value - ideal) for ideal in rule.ideal_answers)


def decay_factor(distance: float, falloff: float) -> float:
    """
    Exponential decay for a given distance.

    ``clamp(1 - falloff, 0, 1) ** distance``: an exact match (distance 0)
    always yields 1.0, and with falloff 1.0 only exact matches score.
    """
    base = min(1.0, max(0.0, 1.0 - falloff))
    return base**distance
