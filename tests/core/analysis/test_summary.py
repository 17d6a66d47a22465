"""
Tests for summarizing analysis results.
"""
import pytest

from quiz_analysis.core.analysis.errors import AnalysisSummaryError, MixedEngineVersionError
from quiz_analysis.core.analysis.orchestrator import analyze
from quiz_analysis.core.analysis.summary import summarize_results
from quiz_analysis.schemas import Version


@pytest.fixture
def results(engine, quiz, make_response, fixed_now):
    answers = [{"q1": 5, "q2": 5}, {"q1": 4, "q2": 5}, {"q1": 0}]
    return [
        analyze(engine, quiz, make_response(a, response_id=f"r{i}"), now=fixed_now)
        for i, a in enumerate(answers)
    ]


class TestSummarizeResults:
    def test_counts_and_wins(self, results, fixed_now):
        summary = summarize_results(results, now=fixed_now)

        assert summary.engine_id == "engine-1"
        assert summary.engine_version.semver == "1.0.0"
        assert summary.total_responses == 3
        assert summary.generated_at == fixed_now
        assert [d.ending_id for d in summary.ending_distribution] == ["a", "b"]

        a, b = summary.ending_distribution
        assert (a.count, a.win_count) == (3, 2)
        assert (b.count, b.win_count) == (3, 1)
        assert a.percentage == pytest.approx(100.0)

    def test_averages(self, results):
        summary = summarize_results(results)
        a = summary.ending_distribution[0]
        a_results = [
            e for r in results for e in r.ending_results if e.ending_id == "a"
        ]
        assert a.average_points == pytest.approx(sum(e.points for e in a_results) / 3)
        assert a.average_percentage == pytest.approx(
            sum(e.percentage for e in a_results) / 3
        )

    def test_endings_filtered_out_are_not_counted(self, engine, quiz, make_response):
        results = [
            analyze(
                engine,
                quiz,
                make_response({"q1": 5, "q2": 5}, response_id="r1"),
                {"maxEndingResults": 1},
            ),
            analyze(engine, quiz, make_response({"q1": 5, "q2": 5}, response_id="r2")),
        ]
        summary = summarize_results(results)
        by_id = {d.ending_id: d for d in summary.ending_distribution}
        assert by_id["a"].count == 2
        assert by_id["b"].count == 1
        assert by_id["b"].percentage == pytest.approx(50.0)

    def test_empty_results(self):
        with pytest.raises(AnalysisSummaryError, match="No analysis results"):
            summarize_results([])

    def test_mixed_versions_are_rejected(self, results):
        other = results[0].model_copy(update={"engine_version": Version(semver="1.1.0")})
        with pytest.raises(MixedEngineVersionError):
            summarize_results(results + [other])

    def test_mixed_engines_are_rejected(self, results):
        other = results[0].model_copy(update={"engine_id": "engine-2"})
        with pytest.raises(AnalysisSummaryError):
            summarize_results([other] + results)
