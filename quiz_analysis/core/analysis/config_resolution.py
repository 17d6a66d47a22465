"""
Config resolution.

Merges an engine's stored ScoringConfig with an optional partial override
(the interactive "what-if" tuning surface). Resolution is an explicit
field-by-field coalesce: a field present in the override replaces the stored
value, an absent field falls back to it. Out-of-range overrides raise
``ScoringConfigError``; values are never clamped.
"""
import logging
from typing import Any, Dict, Mapping, Optional, TypeVar, Union

from pydantic import ValidationError

from quiz_analysis.core.analysis.errors import ScoringConfigError
from quiz_analysis.schemas.engine import ScoringConfig, ScoringConfigOverride

logger = logging.getLogger(__name__)

T = TypeVar("T")

OverrideInput = Union[ScoringConfigOverride, Mapping[str, Any], None]


def _validation_errors(exc: ValidationError) -> Dict[str, str]:
    """Flatten a pydantic ValidationError into field -> message."""
    errors: Dict[str, str] = {}
    for error in exc.errors():
        field_path = ".".join(str(part) for part in error["loc"]) or "config"
        errors[field_path] = error["msg"]
    return errors


def _coalesce(value: Optional[T], fallback: T) -> T:
    return fallback if value is None else value


def parse_override(override: OverrideInput) -> Optional[ScoringConfigOverride]:
    """
    Validate a raw override.

    Accepts a ScoringConfigOverride, a mapping with snake_case or camelCase
    keys, or None.

    Raises:
        ScoringConfigError: If a value is out of range or a key is unknown.
    """
    if override is None or isinstance(override, ScoringConfigOverride):
        return override
    try:
        return ScoringConfigOverride.model_validate(dict(override))
    except ValidationError as exc:
        raise ScoringConfigError(_validation_errors(exc)) from exc


def resolve_config(base: ScoringConfig, override: OverrideInput = None) -> ScoringConfig:
    """
    Produce one fully resolved scoring configuration.

    Args:
        base: The engine's stored configuration.
        override: Optional partial override.

    Returns:
        A new ScoringConfig. ``base`` is returned unchanged when there is
        nothing to override.

    Raises:
        ScoringConfigError: If the override (or the merged result) is out of
            range.

    Example:
        >>> resolve_config(ScoringConfig(), {"beta": 2.0}).beta
        2.0
    """
    parsed = parse_override(override)
    if parsed is None or parsed.is_empty:
        return base

    try:
        resolved = ScoringConfig(
            primary_point_value=_coalesce(
                parsed.primary_point_value, base.primary_point_value
            ),
            secondary_point_value=_coalesce(
                parsed.secondary_point_value, base.secondary_point_value
            ),
            primary_point_weight=_coalesce(
                parsed.primary_point_weight, base.primary_point_weight
            ),
            secondary_point_weight=_coalesce(
                parsed.secondary_point_weight, base.secondary_point_weight
            ),
            primary_distance_falloff=_coalesce(
                parsed.primary_distance_falloff, base.primary_distance_falloff
            ),
            secondary_distance_falloff=_coalesce(
                parsed.secondary_distance_falloff, base.secondary_distance_falloff
            ),
            beta=_coalesce(parsed.beta, base.beta),
            disable_secondary_points=_coalesce(
                parsed.disable_secondary_points, base.disable_secondary_points
            ),
            primary_min_points=_coalesce(
                parsed.primary_min_points, base.primary_min_points
            ),
            secondary_min_points=_coalesce(
                parsed.secondary_min_points, base.secondary_min_points
            ),
            min_percentage_threshold=_coalesce(
                parsed.min_percentage_threshold, base.min_percentage_threshold
            ),
            enable_question_breakdown=_coalesce(
                parsed.enable_question_breakdown, base.enable_question_breakdown
            ),
            max_ending_results=_coalesce(
                parsed.max_ending_results, base.max_ending_results
            ),
        )
    except ValidationError as exc:
        raise ScoringConfigError(_validation_errors(exc)) from exc

    logger.debug("Resolved scoring config with overrides: %s", parsed.applied_fields())
    return resolved
