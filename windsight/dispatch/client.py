"""
Remote Scoring Client — HTTP Access to the Scoring Service

Blocking `requests` client for the remote endpoints:
- POST /predict          TelemetryRecord -> Verdict
- POST /explain          TelemetryRecord -> explanation payload
- POST /fault-location   TelemetryRecord -> {"locations": [...]}
- GET  /health           success status only

Every transport error, timeout, non-2xx status or unparsable body is
raised as RemoteUnavailable.
"""

import logging
from typing import Any, Dict, List

import requests
from pydantic import ValidationError

from windsight.rules.scorer import Verdict
from windsight.telemetry.schemas import TelemetryRecord


logger = logging.getLogger(__name__)


class RemoteUnavailable(Exception):
    """Raised when the remote scoring service cannot produce a usable answer."""


class ExplanationUnavailable(Exception):
    """Raised when the remote-only explanation service fails."""


class RemoteScoringClient:
    """
    Thin HTTP client for the remote scoring service.

    Usage:
        client = RemoteScoringClient("http://localhost:5000")
        verdict = client.predict(record)
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        explain_timeout: float = 15.0,
        health_timeout: float = 5.0,
        session: requests.Session = None,
    ):
        """
        Initialize client.

        Args:
            base_url: Service root, e.g. http://localhost:5000
            timeout: Seconds for /predict and /fault-location
            explain_timeout: Seconds for /explain
            health_timeout: Seconds for /health
            session: Optional shared requests.Session
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.explain_timeout = explain_timeout
        self.health_timeout = health_timeout
        self._session = session or requests.Session()

    def _post(self, path: str, record: TelemetryRecord, timeout: float) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self._session.post(url, json=record.to_wire(), timeout=timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.Timeout as e:
            raise RemoteUnavailable(f"Timed out after {timeout}s calling {url}") from e
        except requests.exceptions.ConnectionError as e:
            raise RemoteUnavailable(f"Cannot connect to {url}") from e
        except requests.exceptions.HTTPError as e:
            raise RemoteUnavailable(f"HTTP {e.response.status_code} from {url}") from e
        except (requests.exceptions.RequestException, ValueError) as e:
            raise RemoteUnavailable(f"Bad response from {url}: {e}") from e

    def predict(self, record: TelemetryRecord) -> Verdict:
        """POST /predict and parse the Verdict."""
        payload = self._post("/predict", record, self.timeout)
        try:
            return Verdict.model_validate(payload)
        except ValidationError as e:
            raise RemoteUnavailable(f"Unparsable verdict from {self.base_url}/predict") from e

    def explain(self, record: TelemetryRecord) -> Dict[str, Any]:
        """POST /explain."""
        payload = self._post("/explain", record, self.explain_timeout)
        if not isinstance(payload, dict):
            raise RemoteUnavailable(f"Unparsable explanation from {self.base_url}/explain")
        return payload

    def fault_locations(self, record: TelemetryRecord) -> List[Dict[str, Any]]:
        """POST /fault-location and return the location list."""
        payload = self._post("/fault-location", record, self.timeout)
        if not isinstance(payload, dict) or not isinstance(payload.get("locations", []), list):
            raise RemoteUnavailable(f"Unparsable fault locations from {self.base_url}/fault-location")
        return payload.get("locations", [])

    def health_check(self) -> bool:
        """GET /health; True only on a 200."""
        try:
            response = self._session.get(f"{self.base_url}/health", timeout=self.health_timeout)
            return response.status_code == 200
        except requests.exceptions.RequestException:
            return False

    def close(self) -> None:
        self._session.close()
