"""
Dispatch Module — Remote/Local Scoring Entry Point

Public API:
- PredictionDispatcher: Remote first, local fallback after a delay
- RemoteScoringClient: requests-based client for the scoring service
- RemoteUnavailable / ExplanationUnavailable: remote failure modes
"""

from .client import ExplanationUnavailable, RemoteScoringClient, RemoteUnavailable
from .dispatcher import (
    SOURCE_LOCAL,
    SOURCE_REMOTE,
    PredictionDispatcher,
    RemoteResult,
)

__all__ = [
    "ExplanationUnavailable",
    "RemoteScoringClient",
    "RemoteUnavailable",
    "SOURCE_LOCAL",
    "SOURCE_REMOTE",
    "PredictionDispatcher",
    "RemoteResult",
]
