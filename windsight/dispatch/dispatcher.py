"""
Prediction Dispatcher — Remote First, Local Fallback

Two explicit paths:
1. try_remote: ask the remote scoring service, producing a RemoteResult
2. score_locally: after an artificial delay, run the local FaultScorer

Any error variant from (1) falls through to (2), so `predict` always
settles within remote_timeout + fallback_delay. The delay keeps loading
states consistent whichever path answered.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union

from windsight.rules.scorer import FaultScorer, Verdict, ensure_valid_record
from windsight.telemetry.schemas import TelemetryRecord

from .client import ExplanationUnavailable, RemoteUnavailable


logger = logging.getLogger(__name__)


SOURCE_REMOTE = "remote"
SOURCE_LOCAL = "local"


@dataclass(frozen=True)
class RemoteResult:
    """Outcome of a remote attempt: exactly one of verdict / error is set."""
    verdict: Optional[Verdict] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.verdict is not None


class PredictionDispatcher:
    """
    Remote-first, local-fallback scoring entry point.

    Usage:
        dispatcher = PredictionDispatcher(client=RemoteScoringClient(url))
        verdict = await dispatcher.predict(record)
    """

    def __init__(
        self,
        client: Optional[Any] = None,
        scorer: Optional[FaultScorer] = None,
        fallback_delay: float = 1.5,
        remote_timeout: float = 10.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize dispatcher.

        Args:
            client: Remote client (RemoteScoringClient or compatible); None = local only
            scorer: Local scorer used on fallback
            fallback_delay: Seconds to wait before answering locally
            remote_timeout: Hard bound on the remote attempt, in seconds
            sleep: Awaitable sleep (injectable for tests)
        """
        self.client = client
        self.scorer = scorer or FaultScorer()
        self.fallback_delay = fallback_delay
        self.remote_timeout = remote_timeout
        self._sleep = sleep
        self.last_source: Optional[str] = None

    async def _call_remote(self, method: Callable[..., Any], *args: Any) -> Any:
        """Run a blocking client call off the event loop, bounded by remote_timeout."""
        try:
            return await asyncio.wait_for(asyncio.to_thread(method, *args), timeout=self.remote_timeout)
        except asyncio.TimeoutError as e:
            raise RemoteUnavailable(f"Remote call exceeded {self.remote_timeout}s") from e

    async def try_remote(self, record: TelemetryRecord) -> RemoteResult:
        """Attempt remote scoring; never raises."""
        if self.client is None:
            return RemoteResult(error=RemoteUnavailable("No remote scoring service configured"))
        try:
            verdict = await self._call_remote(self.client.predict, record)
        except RemoteUnavailable as e:
            return RemoteResult(error=e)
        except Exception as e:
            # Any other client failure is treated as the service being unavailable
            return RemoteResult(error=RemoteUnavailable(f"Remote scoring failed: {e!r}"))
        if not isinstance(verdict, Verdict):
            return RemoteResult(error=RemoteUnavailable("Remote scoring returned no verdict"))
        return RemoteResult(verdict=verdict)

    async def score_locally(self, record: TelemetryRecord) -> Verdict:
        """Score with the local engine after the artificial delay."""
        await self._sleep(self.fallback_delay)
        return self.scorer.score(record)

    async def predict(self, record: Union[TelemetryRecord, Mapping[str, Any]]) -> Verdict:
        """
        Score a record, remotely if possible.

        Raises:
            InvalidRecord: If the record is incomplete or non-finite
        """
        record = ensure_valid_record(record)

        result = await self.try_remote(record)
        if result.ok:
            self.last_source = SOURCE_REMOTE
            return result.verdict

        logger.warning(f"Remote scoring unavailable, using local scoring: {result.error}")
        verdict = await self.score_locally(record)
        self.last_source = SOURCE_LOCAL
        return verdict

    async def explain(self, record: Union[TelemetryRecord, Mapping[str, Any]]) -> Dict[str, Any]:
        """
        Remote-only explanation.

        Raises:
            ExplanationUnavailable: If the remote service cannot explain
        """
        record = ensure_valid_record(record)
        if self.client is None:
            raise ExplanationUnavailable("Explanation service unavailable")
        try:
            return await self._call_remote(self.client.explain, record)
        except Exception as e:
            logger.warning(f"Remote explanation failed: {e}")
            raise ExplanationUnavailable("Explanation service unavailable") from e

    async def fault_locations(self, record: Union[TelemetryRecord, Mapping[str, Any]]) -> List[Dict[str, Any]]:
        """Remote fault locations; an empty list when the service is unavailable."""
        record = ensure_valid_record(record)
        if self.client is None:
            return []
        try:
            return await self._call_remote(self.client.fault_locations, record)
        except Exception as e:
            logger.warning(f"Remote fault location failed: {e}")
            return []

    async def health_check(self) -> bool:
        if self.client is None:
            return False
        try:
            return bool(await self._call_remote(self.client.health_check))
        except RemoteUnavailable:
            return False
