"""
Monitoring Session — Process-Wide Owner of the Live State

One object owns the scorer, dispatcher, history and sampling loop, so the
routes share state through an explicit dependency instead of module globals.
"""

import logging
import random
from dataclasses import dataclass, field

from fastapi import Request

from windsight.config import Settings, settings as default_settings
from windsight.dispatch import PredictionDispatcher, RemoteScoringClient
from windsight.history import HistoryStore
from windsight.realtime import SamplingLoop
from windsight.rules import ExplanationGenerator, FaultScorer


logger = logging.getLogger(__name__)


@dataclass
class MonitorSession:
    """Everything the dashboard talks to during one server process."""
    scorer: FaultScorer
    dispatcher: PredictionDispatcher
    history: HistoryStore
    loop: SamplingLoop
    explainer: ExplanationGenerator = field(default_factory=ExplanationGenerator)

    async def close(self) -> None:
        await self.loop.shutdown()
        client = self.dispatcher.client
        if isinstance(client, RemoteScoringClient):
            client.close()


def build_session(config: Settings = default_settings) -> MonitorSession:
    """
    Wire a session from settings.
    
    An empty REMOTE_SCORING_URL gives a local-only dispatcher.
    """
    seed = config.RANDOM_SEED
    scorer = FaultScorer(rng=random.Random(seed))

    client = None
    if config.REMOTE_SCORING_URL:
        client = RemoteScoringClient(
            config.REMOTE_SCORING_URL,
            timeout=config.REMOTE_TIMEOUT_S,
            explain_timeout=config.EXPLAIN_TIMEOUT_S,
            health_timeout=config.HEALTH_TIMEOUT_S,
        )
    else:
        logger.info("REMOTE_SCORING_URL not set; scoring locally only")

    dispatcher = PredictionDispatcher(
        client=client,
        scorer=scorer,
        fallback_delay=config.FALLBACK_DELAY_S,
        remote_timeout=config.REMOTE_TIMEOUT_S,
    )
    history = HistoryStore(capacity=config.HISTORY_CAPACITY)
    loop = SamplingLoop(
        dispatcher,
        history,
        interval=config.SAMPLING_INTERVAL_S,
        seed=seed,
    )
    return MonitorSession(scorer=scorer, dispatcher=dispatcher, history=history, loop=loop)


def get_session(request: Request) -> MonitorSession:
    """Dependency that provides the app's monitoring session."""
    return request.app.state.session
