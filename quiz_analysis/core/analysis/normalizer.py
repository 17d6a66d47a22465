"""
Percentage normalizer.

Turns the raw score of every ending into a percentage distribution, then
filters and ranks it for display:

1. Separation: each raw score is weighted by a ``SeparationStrategy``. The
   reference strategy is a power law (``raw ** beta``): beta = 1 is linear
   proportional scoring, higher beta makes the leading ending more dominant.
2. Normalization: ``percentage_i = 100 * w_i / sum(w)``. If every raw score
   is zero the weights are uniform, so a degenerate response is a tie across
   all endings rather than NaN.
3. Display: drop endings below ``min_percentage_threshold``, sort by
   percentage descending (ties by ascending ending id) and truncate to
   ``max_ending_results``. Percentages are not re-normalized after
   filtering and are never rounded here.
"""
import math
from dataclasses import dataclass
from typing import List, Protocol, Sequence

from quiz_analysis.schemas.engine import ScoringConfig


class SeparationStrategy(Protocol):
    """
    Protocol for the separation step applied before normalization.

    Implementations map non-negative raw scores to non-negative weights.
    Swapping the strategy does not affect thresholding or ranking.
    """

    name: str

    def weigh(self, raw_scores: Sequence[float], beta: float) -> List[float]:
        ...


class PowerLawSeparation:
    """
    Reference separation: ``weight = raw ** beta``.

    Scores are divided by their maximum before exponentiation, which leaves
    the normalized percentages unchanged and keeps every weight in [0, 1],
    so large betas neither overflow nor underflow the leader.
    """

    name = "power"

    def weigh(self, raw_scores: Sequence[float], beta: float) -> List[float]:
        top = max(raw_scores, default=0.0)
        if top <= 0:
            return [1.0] * len(raw_scores)
        return [(score / top) ** beta for score in raw_scores]


class SoftmaxSeparation:
    """
    Alternative separation: ``weight = exp(beta * raw)``.

    Scores are shifted by their maximum before exponentiation, which leaves
    the normalized percentages unchanged and avoids overflow.
    """

    name = "softmax"

    def weigh(self, raw_scores: Sequence[float], beta: float) -> List[float]:
        if not raw_scores:
            return []
        shift = max(raw_scores)
        return [math.exp(beta * (score - shift)) for score in raw_scores]


POWER_LAW = PowerLawSeparation()
SOFTMAX = SoftmaxSeparation()

SEPARATION_STRATEGIES = {
    POWER_LAW.name: POWER_LAW,
    SOFTMAX.name: SOFTMAX,
}


def get_separation_strategy(name: str) -> SeparationStrategy:
    """Look up a separation strategy by name ("power" or "softmax")."""
    try:
        return SEPARATION_STRATEGIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown separation strategy '{name}'. "
            f"Available: {sorted(SEPARATION_STRATEGIES)}"
        ) from None


@dataclass(frozen=True)
class NormalizedEnding:
    """An ending with its raw points and normalized percentage."""

    ending_id: str
    points: float
    percentage: float
    is_winner: bool = False


@dataclass(frozen=True)
class Normalization:
    """
    Output of the normalizer.

    Attributes:
        population: Every ending in declaration order, unfiltered. Its
            percentages sum to 100.
        ranked: Endings kept for display, filtered, sorted and truncated.
    """

    population: List[NormalizedEnding]
    ranked: List[NormalizedEnding]


def compute_percentages(
    raw_scores: Sequence[float],
    beta: float,
    strategy: SeparationStrategy = POWER_LAW,
) -> List[float]:
    """
    Normalize raw scores to percentages summing to 100.

    Args:
        raw_scores: Non-negative raw score per ending.
        beta: Separation exponent (> 0).
        strategy: Separation strategy, power law by default.

    Returns:
        One percentage per input score, in input order. Uniform when every
        score is zero.

    Example:
        >>> compute_percentages([15.0, 5.0], beta=1.0)
        [75.0, 25.0]
    """
    if not raw_scores:
        return []

    weights = strategy.weigh(raw_scores, beta)
    total = math.fsum(weights)
    if total <= 0:
        uniform = 100.0 / len(raw_scores)
        return [uniform] * len(raw_scores)

    return [100.0 * weight / total for weight in weights]


def rank_endings(
    endings: Sequence[NormalizedEnding],
    min_percentage_threshold: float,
    max_ending_results: int,
) -> List[NormalizedEnding]:
    """Filter by threshold, sort by (-percentage, ending_id), truncate."""
    kept = [e for e in endings if e.percentage >= min_percentage_threshold]
    kept.sort(key=lambda e: (-e.percentage, e.ending_id))
    return kept[:max_ending_results]


def normalize_scores(
    ending_ids: Sequence[str],
    raw_scores: Sequence[float],
    config: ScoringConfig,
    strategy: SeparationStrategy = POWER_LAW,
) -> Normalization:
    """
    Normalize, mark winners, and rank the endings of one analysis.

    Winners are the endings holding the maximum percentage of the full
    population, provided that maximum is above the threshold. Ties all win.

    Raises:
        ValueError: If ``ending_ids`` and ``raw_scores`` differ in length.
    """
    if len(ending_ids) != len(raw_scores):
        raise ValueError(
            f"ending_ids length ({len(ending_ids)}) must match "
            f"raw_scores length ({len(raw_scores)})"
        )

    percentages = compute_percentages(raw_scores, config.beta, strategy)
    top = max(percentages, default=0.0)

    population = [
        NormalizedEnding(
            ending_id=ending_id,
            points=points,
            percentage=percentage,
            is_winner=percentage == top and percentage > config.min_percentage_threshold,
        )
        for ending_id, points, percentage in zip(ending_ids, raw_scores, percentages)
    ]

    ranked = rank_endings(
        population,
        config.min_percentage_threshold,
        config.max_ending_results,
    )
    return Normalization(population=population, ranked=ranked)
