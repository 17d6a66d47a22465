"""
Quiz response analysis engine.

Scores a respondent's rating answers against the endings of an analysis
engine and produces a ranked, percentage-weighted classification.
"""

from .accumulator import (
    ClassParameters,
    EndingScore,
    class_parameters,
    scoreable_answers,
    score_ending,
    score_endings,
)
from .batch import (
    BatchAnalysisResult,
    BatchItemFailure,
    BatchRunner,
    batch_analyze,
)
from .config_resolution import parse_override, resolve_config
from .distance import decay_factor, rule_distance, scoreable_value
from .errors import (
    AnalysisEngineNotFoundError,
    AnalysisError,
    AnalysisFailedError,
    AnalysisMismatchError,
    AnalysisSummaryError,
    MixedEngineVersionError,
    NotFoundError,
    QuizNotFoundError,
    ResponseNotFoundError,
    ScoringConfigError,
)
from .normalizer import (
    POWER_LAW,
    SOFTMAX,
    Normalization,
    NormalizedEnding,
    PowerLawSeparation,
    SeparationStrategy,
    SoftmaxSeparation,
    compute_percentages,
    get_separation_strategy,
    normalize_scores,
    rank_endings,
)
from .orchestrator import (
    analyze,
    find_ill_formed_rules,
    format_distribution,
    validate_analysis_inputs,
)
from .summary import summarize_results

__all__ = [
    "analyze",
    "batch_analyze",
    "resolve_config",
    "parse_override",
    "summarize_results",
    "validate_analysis_inputs",
    "find_ill_formed_rules",
    "format_distribution",
    "BatchRunner",
    "BatchAnalysisResult",
    "BatchItemFailure",
    "scoreable_value",
    "rule_distance",
    "decay_factor",
    "ClassParameters",
    "EndingScore",
    "class_parameters",
    "scoreable_answers",
    "score_ending",
    "score_endings",
    "SeparationStrategy",
    "PowerLawSeparation",
    "SoftmaxSeparation",
    "POWER_LAW",
    "SOFTMAX",
    "Normalization",
    "NormalizedEnding",
    "compute_percentages",
    "get_separation_strategy",
    "normalize_scores",
    "rank_endings",
    "AnalysisError",
    "ScoringConfigError",
    "AnalysisMismatchError",
    "AnalysisFailedError",
    "NotFoundError",
    "QuizNotFoundError",
    "AnalysisEngineNotFoundError",
    "ResponseNotFoundError",
    "AnalysisSummaryError",
    "MixedEngineVersionError",
]
