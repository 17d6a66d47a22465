"""
Aggregate analysis results of one engine version.

Percentages from different engine versions are not comparable, so the
summary refuses to mix them.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional, Sequence

from quiz_analysis.core.analysis.errors import (
    AnalysisSummaryError,
    MixedEngineVersionError,
)
from quiz_analysis.core.datetime_utils import utc_now
from quiz_analysis.schemas.analysis import (
    AnalysisResult,
    AnalysisSummary,
    EndingDistribution,
)

logger = logging.getLogger(__name__)


@dataclass
class _EndingTally:
    count: int = 0
    win_count: int = 0
    total_points: float = 0.0
    total_percentage: float = 0.0


def summarize_results(
    results: Sequence[AnalysisResult],
    *,
    now: Optional[datetime] = None,
) -> AnalysisSummary:
    """
    Summarize how endings are distributed across many analysis results.

    For every ending that appears in at least one result: how many results
    it appears in, how many it won, the share of results it appears in, and
    its average raw points and average percentage where it appears.
    Distribution entries are ordered by win count, then appearance count
    (both descending), then ending id.

    Raises:
        AnalysisSummaryError: If ``results`` is empty.
        MixedEngineVersionError: If results come from more than one engine
            or engine version.
    """
    if not results:
        raise AnalysisSummaryError("No analysis results to summarize")

    first = results[0]
    for result in results[1:]:
        if (
            result.engine_id != first.engine_id
            or result.engine_version.semver != first.engine_version.semver
        ):
            raise MixedEngineVersionError(
                f"Cannot summarize results from engine {result.engine_id} "
                f"v{result.engine_version.semver} together with engine "
                f"{first.engine_id} v{first.engine_version.semver}"
            )

    tallies: Dict[str, _EndingTally] = {}
    for result in results:
        for ending in result.ending_results:
            tally = tallies.setdefault(ending.ending_id, _EndingTally())
            tally.count += 1
            tally.win_count += int(ending.is_winner)
            tally.total_points += ending.points
            tally.total_percentage += ending.percentage

    total = len(results)
    distribution = [
        EndingDistribution(
            ending_id=ending_id,
            count=tally.count,
            win_count=tally.win_count,
            percentage=100.0 * tally.count / total,
            average_points=tally.total_points / tally.count,
            average_percentage=tally.total_percentage / tally.count,
        )
        for ending_id, tally in tallies.items()
    ]
    distribution.sort(key=lambda d: (-d.win_count, -d.count, d.ending_id))

    logger.info(
        "Summarized %d results for engine %s v%s across %d endings",
        total,
        first.engine_id,
        first.engine_version.semver,
        len(distribution),
    )

    return AnalysisSummary(
        engine_id=first.engine_id,
        engine_version=first.engine_version,
        total_responses=total,
        ending_distribution=distribution,
        generated_at=now or utc_now(),
    )
