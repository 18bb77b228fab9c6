"""
Sampling Loop Tests

Tests verify:
- IDLE -> RUNNING -> IDLE transitions (start/stop are idempotent)
- One cycle per interval while running
- No history appends after stop, even from a cycle in flight
- Overlapping ticks are skipped
- A failing cycle is counted and the loop keeps running
"""

import asyncio
import random

import pytest

from windsight.dispatch import PredictionDispatcher
from windsight.history import HistoryStore
from windsight.realtime import LoopState, SamplingLoop
from windsight.rules import FaultScorer
from windsight.telemetry import InvalidRecord, TelemetryRecord, default_record


def make_loop(interval: float = 0.05, dispatcher=None, **kwargs) -> SamplingLoop:
    dispatcher = dispatcher or PredictionDispatcher(scorer=FaultScorer(rng=random.Random(1)), fallback_delay=0)
    return SamplingLoop(dispatcher, HistoryStore(), interval=interval, seed=1, **kwargs)


class SlowDispatcher:
    """Dispatcher stand-in whose predictions take a fixed time."""

    last_source = "local"

    def __init__(self, delay: float):
        self.delay = delay
        self.scorer = FaultScorer(rng=random.Random(2))
        self.calls = 0

    async def predict(self, record):
        self.calls += 1
        await asyncio.sleep(self.delay)
        return self.scorer.score(record)


class FlakyDispatcher:
    """Fails the first prediction, then succeeds."""

    last_source = "local"

    def __init__(self):
        self.scorer = FaultScorer(rng=random.Random(3))
        self.calls = 0

    async def predict(self, record):
        self.calls += 1
        if self.calls == 1:
            raise RuntimeError("scoring backend exploded")
        return self.scorer.score(record)


class TestLifecycle:
    """State transitions."""

    def test_initial_state(self):
        loop = make_loop()
        assert loop.state == LoopState.IDLE
        assert not loop.is_running
        assert loop.record == default_record()

    def test_invalid_interval(self):
        with pytest.raises(ValueError):
            make_loop(interval=0)

    def test_start_stop(self):
        async def scenario():
            loop = make_loop()
            assert loop.start() is True
            assert loop.state == LoopState.RUNNING
            assert loop.start() is False
            assert await loop.stop() is True
            assert loop.state == LoopState.IDLE
            assert await loop.stop() is False

        asyncio.run(scenario())

    def test_start_requires_running_event_loop(self):
        with pytest.raises(RuntimeError):
            make_loop().start()


class TestCycles:
    """Periodic perturb-and-score."""

    def test_cycles_append_to_history(self):
        async def scenario():
            loop = make_loop(interval=0.05)
            loop.start()
            await asyncio.sleep(0.28)
            await loop.stop()
            return loop

        loop = asyncio.run(scenario())

        assert 3 <= len(loop.history) <= 6
        assert loop.cycles_completed == len(loop.history)
        assert loop.last_verdict.label == loop.history.latest().label

    def test_no_appends_after_stop(self):
        async def scenario():
            loop = make_loop(interval=0.02)
            loop.start()
            await asyncio.sleep(0.1)
            await loop.stop()
            count = len(loop.history)
            await asyncio.sleep(0.1)
            return count, len(loop.history)

        before, after = asyncio.run(scenario())
        assert before == after

    def test_cycle_in_flight_at_stop_is_discarded(self):
        async def scenario():
            loop = make_loop(interval=0.02, dispatcher=SlowDispatcher(delay=0.1))
            loop.start()
            await asyncio.sleep(0.05)
            assert loop.cycle_in_flight
            await loop.stop()
            await asyncio.sleep(0.15)
            return loop

        loop = asyncio.run(scenario())
        assert len(loop.history) == 0

    def test_overlapping_ticks_skipped(self):
        async def scenario():
            dispatcher = SlowDispatcher(delay=0.12)
            loop = make_loop(interval=0.03, dispatcher=dispatcher)
            loop.start()
            await asyncio.sleep(0.2)
            await loop.shutdown()
            return loop, dispatcher

        loop, dispatcher = asyncio.run(scenario())
        assert loop.cycles_skipped > 0
        assert dispatcher.calls < 6

    def test_failed_cycle_does_not_stop_loop(self):
        async def scenario():
            loop = make_loop(interval=0.03, dispatcher=FlakyDispatcher())
            loop.start()
            await asyncio.sleep(0.16)
            running = loop.is_running
            await loop.stop()
            return loop, running

        loop, running = asyncio.run(scenario())
        assert running
        assert loop.cycles_failed == 1
        assert loop.cycles_completed >= 1

    def test_raising_verdict_callback_counts_as_failure(self):
        def explode(verdict):
            raise RuntimeError("dashboard push failed")

        async def scenario():
            loop = make_loop(interval=0.03, on_verdict=explode)
            loop.start()
            await asyncio.sleep(0.2)
            running = loop.is_running
            await loop.shutdown()
            return loop, running

        loop, running = asyncio.run(scenario())
        assert running
        assert loop.cycles_failed >= 3
        assert loop.cycles_completed == 0

    def test_raising_record_callback_counts_as_failure(self):
        def explode(record):
            raise RuntimeError("feed subscriber gone")

        async def scenario():
            loop = make_loop(on_record=explode)
            verdict = await loop.run_cycle()
            return loop, verdict

        loop, verdict = asyncio.run(scenario())
        assert verdict is None
        assert loop.cycles_failed == 1
        assert len(loop.history) == 0

    def test_failed_cycle_task_result_is_retrieved(self):
        errors = []

        def on_error(loop, context):
            errors.append(context)

        def explode(verdict):
            raise RuntimeError("dashboard push failed")

        async def scenario():
            asyncio.get_running_loop().set_exception_handler(on_error)
            loop = make_loop(interval=0.03, on_verdict=explode)
            loop.start()
            await asyncio.sleep(0.12)
            await loop.shutdown()

        asyncio.run(scenario())
        assert errors == []


class TestManualCycle:
    """run_cycle / set_record."""

    def test_run_cycle_perturbs_and_records(self):
        published = []
        verdicts = []

        async def scenario():
            loop = make_loop(on_record=published.append, on_verdict=verdicts.append)
            verdict = await loop.run_cycle()
            return loop, verdict

        loop, verdict = asyncio.run(scenario())

        assert verdict is not None
        assert len(loop.history) == 1
        assert loop.history.latest().record == loop.record
        assert published == [loop.record]
        assert verdicts == [verdict]
        assert loop.record != default_record()

    def test_set_record_rejects_unvalidated_nan(self):
        values = dict(default_record())
        values["wind_speed"] = float("nan")
        with pytest.raises(InvalidRecord):
            make_loop().set_record(TelemetryRecord.model_construct(**values))

    def test_snapshot(self):
        snapshot = make_loop(interval=3.0).snapshot()
        assert snapshot["state"] == "IDLE"
        assert snapshot["interval_s"] == 3.0
        assert snapshot["cycles_completed"] == 0
