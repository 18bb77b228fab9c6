"""
Configuration Tests

Tests verify:
- Defaults match the documented timing contract
- Environment variables override defaults
- An empty REMOTE_SCORING_URL yields a local-only session
"""

from windsight.api.state import build_session
from windsight.config import Settings
from windsight.dispatch import RemoteScoringClient


class TestSettings:

    def test_defaults(self):
        settings = Settings()

        assert settings.REMOTE_TIMEOUT_S == 10.0
        assert settings.FALLBACK_DELAY_S == 1.5
        assert settings.SAMPLING_INTERVAL_S == 3.0
        assert settings.HISTORY_CAPACITY == 50

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("SAMPLING_INTERVAL_S", "0.5")
        monkeypatch.setenv("REMOTE_SCORING_URL", "http://scoring.internal:5000")

        settings = Settings()

        assert settings.SAMPLING_INTERVAL_S == 0.5
        assert settings.REMOTE_SCORING_URL == "http://scoring.internal:5000"


class TestBuildSession:

    def test_local_only_session(self):
        session = build_session(Settings(REMOTE_SCORING_URL="", HISTORY_CAPACITY=5))

        assert session.dispatcher.client is None
        assert session.history.capacity == 5
        assert session.loop.history is session.history

    def test_remote_session(self):
        session = build_session(Settings(REMOTE_SCORING_URL="http://localhost:5000", REMOTE_TIMEOUT_S=2))

        assert isinstance(session.dispatcher.client, RemoteScoringClient)
        assert session.dispatcher.remote_timeout == 2
        assert session.dispatcher.client.base_url == "http://localhost:5000"
