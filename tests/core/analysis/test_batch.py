"""
Tests for the bounded-concurrency batch runner.
"""
import asyncio

import pytest

from quiz_analysis.core.analysis.batch import BatchRunner, batch_analyze
from quiz_analysis.core.analysis.errors import AnalysisMismatchError, ScoringConfigError
from quiz_analysis.core.config import settings


class TestBatchRunner:
    def test_default_concurrency_comes_from_settings(self):
        assert BatchRunner().max_concurrency == settings.ANALYSIS_BATCH_CONCURRENCY

    def test_rejects_non_positive_concurrency(self):
        with pytest.raises(ValueError, match="max_concurrency"):
            BatchRunner(0)

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self):
        runner = BatchRunner(max_concurrency=3)

        async def slow_worker(item: int):
            await asyncio.sleep(0.01)
            return item

        batch = await runner.run(list(range(12)), slow_worker, key=str)
        assert runner.peak_concurrency == 3
        assert batch.succeeded == 12

    @pytest.mark.asyncio
    async def test_failures_are_isolated(self):
        runner = BatchRunner(max_concurrency=2)

        async def worker(item: str):
            if item == "bad":
                raise KeyError(item)
            return item

        batch = await runner.run(["ok-1", "bad", "ok-2"], worker, key=lambda item: item)
        assert batch.results == ["ok-1", "ok-2"]
        assert batch.failed == 1
        failure = batch.failures[0]
        assert failure.response_id == "bad"
        assert failure.error_type == "KeyError"
        assert isinstance(failure.error, KeyError)
        assert batch.total == 3

    @pytest.mark.asyncio
    async def test_cancellation_skips_unstarted_items(self):
        runner = BatchRunner(max_concurrency=1)
        started = []

        async def worker(item: int):
            started.append(item)
            if item == 1:
                runner.cancel()
            await asyncio.sleep(0)
            return item

        batch = await runner.run([0, 1, 2, 3], worker, key=str)
        assert started == [0, 1]
        assert batch.results == [0, 1]
        assert batch.skipped == ["2", "3"]
        assert runner.cancelled is True

    @pytest.mark.asyncio
    async def test_cancelled_runner_stays_cancelled(self):
        runner = BatchRunner()
        runner.cancel()

        async def worker(item: int):
            return item

        batch = await runner.run([1, 2], worker, key=str)
        assert batch.succeeded == 0
        assert batch.skipped == ["1", "2"]

    @pytest.mark.asyncio
    async def test_empty_batch(self):
        async def worker(item):
            return item

        batch = await BatchRunner().run([], worker, key=str)
        assert batch.total == 0


class TestBatchAnalyze:
    @pytest.mark.asyncio
    async def test_analyzes_every_response(self, engine, quiz, make_response, fixed_now):
        responses = [
            make_response({"q1": 5, "q2": 5}, response_id="r1"),
            make_response({"q1": 0}, response_id="r2"),
        ]
        batch = await batch_analyze(engine, quiz, responses, now=fixed_now)

        by_response = batch.results_by_response()
        assert set(by_response) == {"r1", "r2"}
        assert by_response["r1"].winner.ending_id == "a"
        assert by_response["r2"].winner.ending_id == "b"
        assert all(r.analyzed_at == fixed_now for r in batch.results)

    @pytest.mark.asyncio
    async def test_mismatched_response_does_not_abort_batch(self, engine, quiz, make_response):
        responses = [
            make_response({"q1": 5}, response_id="r1"),
            make_response({"q1": 5}, response_id="stray", quiz_id="quiz-2"),
            make_response({"q1": 1}, response_id="r3"),
        ]
        batch = await batch_analyze(engine, quiz, responses)

        assert batch.succeeded == 2
        assert [f.response_id for f in batch.failures] == ["stray"]
        assert isinstance(batch.failures[0].error, AnalysisMismatchError)

    @pytest.mark.asyncio
    async def test_invalid_override_fails_up_front(self, engine, quiz, response):
        with pytest.raises(ScoringConfigError):
            await batch_analyze(engine, quiz, [response], {"beta": -1})

    @pytest.mark.asyncio
    async def test_override_applies_to_every_item(self, engine, quiz, make_response):
        responses = [make_response({"q1": 5}, response_id=f"r{i}") for i in range(4)]
        batch = await batch_analyze(
            engine, quiz, responses, {"maxEndingResults": 1}, runner=BatchRunner(2)
        )
        assert all(len(r.ending_results) == 1 for r in batch.results)
        assert all(r.engine_version == engine.version for r in batch.results)
