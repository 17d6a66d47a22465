"""
Pydantic schemas for analysis engines.

An analysis engine pairs a quiz with a set of endings (classification
outcomes) and the scoring configuration used to rank them. Engines are
versioned: an ``AnalysisResult`` records the engine version it was computed
under, which pins both the rules and the configuration below.
"""
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field

from quiz_analysis.schemas.common import CamelModel, Version


class ScoringConfig(CamelModel):
    """Fully resolved scoring parameters for one analysis."""

    model_config = ConfigDict(frozen=True, extra="ignore", allow_inf_nan=False)

    primary_point_value: float = Field(
        10.0, ge=0.0, description="Base points for a matched primary rule"
    )
    secondary_point_value: float = Field(
        5.0, ge=0.0, description="Base points for a matched secondary rule"
    )
    primary_point_weight: float = Field(
        1.0, ge=0.0, description="Multiplier applied to primary base points"
    )
    secondary_point_weight: float = Field(
        1.0, ge=0.0, description="Multiplier applied to secondary base points"
    )
    primary_distance_falloff: float = Field(
        0.1,
        ge=0.0,
        le=1.0,
        description="Per-step decay rate for primary rules (0 = no decay, 1 = exact match only)",
    )
    secondary_distance_falloff: float = Field(
        0.5,
        ge=0.0,
        le=1.0,
        description="Per-step decay rate for secondary rules",
    )
    beta: float = Field(
        1.0,
        gt=0.0,
        description="Separation exponent applied to raw scores before normalization",
    )
    disable_secondary_points: bool = Field(
        False, description="Secondary rules contribute zero when set"
    )
    primary_min_points: float = Field(
        0.0, description="Floor below which an ending's primary total is discarded"
    )
    secondary_min_points: float = Field(
        0.0, description="Floor below which an ending's secondary total is discarded"
    )
    min_percentage_threshold: float = Field(
        0.0,
        ge=0.0,
        le=100.0,
        description="Endings below this percentage are dropped from the output",
    )
    enable_question_breakdown: bool = Field(
        True, description="Keep the per-question contribution trace on results"
    )
    max_ending_results: int = Field(
        10, ge=1, description="Maximum number of endings returned"
    )


class ScoringConfigOverride(CamelModel):
    """
    Partial scoring configuration used for interactive what-if tuning.

    Every field is optional; absent (None) fields fall back to the engine's
    stored configuration. Ranges match ``ScoringConfig`` and unknown keys are
    rejected so typos surface immediately.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, allow_inf_nan=False)

    primary_point_value: Optional[float] = Field(None, ge=0.0)
    secondary_point_value: Optional[float] = Field(None, ge=0.0)
    primary_point_weight: Optional[float] = Field(None, ge=0.0)
    secondary_point_weight: Optional[float] = Field(None, ge=0.0)
    primary_distance_falloff: Optional[float] = Field(None, ge=0.0, le=1.0)
    secondary_distance_falloff: Optional[float] = Field(None, ge=0.0, le=1.0)
    beta: Optional[float] = Field(None, gt=0.0)
    disable_secondary_points: Optional[bool] = None
    primary_min_points: Optional[float] = None
    secondary_min_points: Optional[float] = None
    min_percentage_threshold: Optional[float] = Field(None, ge=0.0, le=100.0)
    enable_question_breakdown: Optional[bool] = None
    max_ending_results: Optional[int] = Field(None, ge=1)

    def applied_fields(self) -> Dict[str, Any]:
        """Return only the fields that were actually overridden."""
        return self.model_dump(exclude_none=True)

    @property
    def is_empty(self) -> bool:
        return not self.applied_fields()


class QuestionRule(CamelModel):
    """How one question counts toward one ending."""

    question_id: str = Field(..., min_length=1)
    ideal_answers: List[float] = Field(
        default_factory=list,
        description="Answer values considered a match for this ending",
    )
    is_primary: bool = Field(..., description="Primary (decisive) or secondary rule")
    weight_multiplier: Optional[float] = Field(
        None, gt=0.0, description="Per-rule multiplier folded into the class weight"
    )

    @property
    def multiplier(self) -> float:
        return 1.0 if self.weight_multiplier is None else self.weight_multiplier


class EndingDefinition(CamelModel):
    """One classification outcome and the rules that score it."""

    ending_id: str = Field(..., min_length=1, description="Stable key, e.g. the-visionary-artist")
    name: str
    short_name: Optional[str] = None
    full_name: Optional[str] = None
    category: Optional[str] = None
    question_rules: List[QuestionRule] = Field(default_factory=list)


class AnalysisEngine(CamelModel):
    """A versioned snapshot of endings plus scoring configuration for a quiz."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    quiz_id: str = Field(..., min_length=1)
    version: Version
    name: str
    description: Optional[str] = None
    scoring_config: ScoringConfig = Field(default_factory=ScoringConfig)
    endings: List[EndingDefinition] = Field(default_factory=list)
    metadata: Optional[Dict[str, Any]] = None
    is_active: bool = True
    is_published: bool = False
