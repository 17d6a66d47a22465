"""Shared domain types for the quiz analysis engine.

This module is the single source of truth for the enums used by the schemas,
the scoring core and the command line tool.

Usage:
    from quiz_analysis.domain_types import QuestionDataType, WeightClass
"""

import enum


class QuestionDataType(str, enum.Enum):
    """Question data variants a quiz can carry."""

    RATING = "rating"
    MULTIPLE_CHOICE = "multiple-choice"
    TEXT = "text"
    EMAIL = "email"


class WeightClass(str, enum.Enum):
    """Weight class of a question rule within an ending."""

    PRIMARY = "primary"
    SECONDARY = "secondary"

    @classmethod
    def for_rule(cls, is_primary: bool) -> "WeightClass":
        return cls.PRIMARY if is_primary else cls.SECONDARY
