"""
Real-Time Sampling Loop — Simulated Live Telemetry Feed

Every interval: perturb the current telemetry, publish it, score it through
the dispatcher and append the verdict to the history.

Lifecycle: IDLE -> RUNNING -> IDLE
- start() while RUNNING is a no-op; stop() while IDLE is a no-op
- A tick that fires while the previous cycle is still in flight is skipped
- A failed cycle is logged and counted; the loop keeps running
- After stop() no new cycle starts, and a cycle still in flight when stop()
  was requested does not append to history
"""

import asyncio
import logging
import random
from contextlib import suppress
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional

from windsight.dispatch.dispatcher import PredictionDispatcher
from windsight.history.store import HistoryStore
from windsight.rules.scorer import Verdict, ensure_valid_record
from windsight.telemetry.config import DEFAULT_SAMPLE_INTERVAL_S
from windsight.telemetry.schemas import TelemetryRecord
from windsight.telemetry.simulator import default_record, perturb_record


logger = logging.getLogger(__name__)


class LoopState(str, Enum):
    """Sampling loop states."""
    IDLE = "IDLE"
    RUNNING = "RUNNING"


class SamplingLoop:
    """
    Periodic perturb-and-score driver.

    Owns the current telemetry record while running; the history store is
    injected so the caller decides who else can read it.

    Usage:
        loop = SamplingLoop(dispatcher, HistoryStore())
        loop.start()          # inside a running event loop
        ...
        await loop.stop()
    """

    def __init__(
        self,
        dispatcher: PredictionDispatcher,
        history: HistoryStore,
        record: Optional[TelemetryRecord] = None,
        interval: float = DEFAULT_SAMPLE_INTERVAL_S,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        on_record: Optional[Callable[[TelemetryRecord], None]] = None,
        on_verdict: Optional[Callable[[Verdict], None]] = None,
    ):
        """
        Initialize the loop (IDLE).

        Args:
            dispatcher: Scoring entry point
            history: Store receiving one entry per successful cycle
            record: Starting telemetry (defaults to the dashboard operating point)
            interval: Seconds between cycles
            rng: Random source for perturbations; takes precedence over seed
            seed: Random seed for deterministic feeds
            on_record: Called with each newly published record
            on_verdict: Called with each verdict appended to history
        """
        if interval <= 0:
            raise ValueError("Sampling interval must be positive")
        self.dispatcher = dispatcher
        self.history = history
        self.interval = interval
        self._rng = rng or random.Random(seed)
        self._record = record or default_record()
        self._on_record = on_record
        self._on_verdict = on_verdict

        self._state = LoopState.IDLE
        self._generation = 0
        self._scheduler: Optional[asyncio.Task] = None
        self._cycle: Optional[asyncio.Task] = None
        self._started_at: Optional[datetime] = None
        self._last_verdict: Optional[Verdict] = None

        self.cycles_completed = 0
        self.cycles_failed = 0
        self.cycles_skipped = 0

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is LoopState.RUNNING

    @property
    def record(self) -> TelemetryRecord:
        """Current telemetry snapshot."""
        return self._record

    @property
    def last_verdict(self) -> Optional[Verdict]:
        """Most recent verdict published by this loop."""
        return self._last_verdict

    @property
    def cycle_in_flight(self) -> bool:
        return self._cycle is not None and not self._cycle.done()

    def set_record(self, record: TelemetryRecord) -> None:
        """Replace the current telemetry (operator edits)."""
        self._publish_record(ensure_valid_record(record))

    def set_last_verdict(self, verdict: Verdict) -> None:
        """Publish a verdict produced outside the loop (manual analysis)."""
        self._last_verdict = verdict

    def snapshot(self) -> Dict[str, Any]:
        return {
            "state": self._state.value,
            "interval_s": self.interval,
            "started_at": self._started_at,
            "cycles_completed": self.cycles_completed,
            "cycles_failed": self.cycles_failed,
            "cycles_skipped": self.cycles_skipped,
            "cycle_in_flight": self.cycle_in_flight,
            "last_source": self.dispatcher.last_source,
        }

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """
        Transition IDLE -> RUNNING and schedule cycles.

        Must be called from inside a running event loop.

        Returns:
            True if the loop was started, False if it was already running
        """
        if self._state is LoopState.RUNNING:
            return False
        self._generation += 1
        self._scheduler = asyncio.get_running_loop().create_task(self._schedule(self._generation))
        self._state = LoopState.RUNNING
        self._started_at = datetime.now(timezone.utc)
        logger.info(f"Real-time sampling started (every {self.interval}s)")
        return True

    async def stop(self) -> bool:
        """
        Transition RUNNING -> IDLE and cancel the schedule.

        Returns:
            True if the loop was stopped, False if it was already idle
        """
        if self._state is LoopState.IDLE:
            return False
        self._state = LoopState.IDLE
        self._generation += 1
        scheduler, self._scheduler = self._scheduler, None
        if scheduler is not None:
            scheduler.cancel()
            with suppress(asyncio.CancelledError):
                await scheduler
        self._started_at = None
        logger.info("Real-time sampling stopped")
        return True

    async def shutdown(self) -> None:
        """Stop the loop and cancel any cycle still in flight."""
        await self.stop()
        cycle, self._cycle = self._cycle, None
        if cycle is not None and not cycle.done():
            cycle.cancel()
            with suppress(asyncio.CancelledError):
                await cycle

    # ------------------------------------------------------------------
    # Cycles
    # ------------------------------------------------------------------

    async def run_cycle(self) -> Optional[Verdict]:
        """
        Run one perturb-and-score cycle now.

        Returns:
            The appended verdict, or None if skipped, failed or discarded
        """
        if self.cycle_in_flight:
            self.cycles_skipped += 1
            logger.debug("Previous sampling cycle still in flight; skipping")
            return None
        self._cycle = asyncio.get_running_loop().create_task(self._run_cycle(self._generation))
        return await self._cycle

    async def _schedule(self, generation: int) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self.interval
        while generation == self._generation:
            await asyncio.sleep(max(0.0, next_tick - loop.time()))
            next_tick += self.interval
            if generation != self._generation:
                return
            if self.cycle_in_flight:
                self.cycles_skipped += 1
                logger.debug("Previous sampling cycle still in flight; skipping tick")
                continue
            self._cycle = loop.create_task(self._run_cycle(generation))
            self._cycle.add_done_callback(self._collect_cycle)

    async def _run_cycle(self, generation: int) -> Optional[Verdict]:
        try:
            return await self._cycle_body(generation)
        except Exception:
            self.cycles_failed += 1
            logger.exception("Sampling cycle failed; waiting for the next tick")
            return None

    async def _cycle_body(self, generation: int) -> Optional[Verdict]:
        record = perturb_record(self._record, self._rng)
        self._publish_record(record)

        verdict = await self.dispatcher.predict(record)
        if generation != self._generation:
            logger.info("Discarding verdict from a cycle that finished after stop")
            return None

        self.history.record(verdict, record)
        self._last_verdict = verdict
        if self._on_verdict is not None:
            self._on_verdict(verdict)
        self.cycles_completed += 1
        logger.debug(f"Sampling cycle: {verdict.label.value} (p={verdict.probability:.3f})")
        return verdict

    @staticmethod
    def _collect_cycle(task: asyncio.Task) -> None:
        # Scheduled cycles are never awaited; retrieve their outcome here
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Sampling cycle task ended with an error: {error!r}")

    def _publish_record(self, record: TelemetryRecord) -> None:
        self._record = record
        if self._on_record is not None:
            self._on_record(record)
