"""
Pydantic Schemas — API Request/Response Models

Request bodies for scoring are TelemetryRecord itself (camelCase on the
wire); these are the envelopes around it.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from windsight.history.store import HistoryEntry
from windsight.rules.scorer import Verdict
from windsight.telemetry.schemas import TelemetryRecord


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    remote: Optional[bool] = None
    message: str = ""


class ContributionOutput(BaseModel):
    """One ranked parameter contribution."""
    parameter: str
    displayName: str
    description: str
    value: Any = None
    formattedValue: str
    attribution: float
    impact: str
    direction: str
    recommendation: str


class ExplanationResponse(BaseModel):
    """Response for POST /explain."""
    label: str
    probability: float
    confidence: float
    summary: str
    featureImportance: Dict[str, float]
    contributions: List[ContributionOutput]


class FaultLocationOutput(BaseModel):
    component: str
    parameter: str
    severity: float


class FaultLocationResponse(BaseModel):
    """Response for POST /fault-location."""
    locations: List[FaultLocationOutput] = Field(default_factory=list)


class AnalysisResponse(BaseModel):
    """Response for POST /analyze."""
    verdict: Verdict
    source: Optional[str] = Field(None, description="remote or local")


class ParameterOutput(BaseModel):
    """Catalog entry for one telemetry parameter."""
    name: str
    label: str
    group: str
    unit: str
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    options: List[str] = Field(default_factory=list)


class ScenarioOutput(BaseModel):
    index: int
    name: str
    record: TelemetryRecord


class UploadResponse(BaseModel):
    """Response for POST /telemetry/upload."""
    count: int
    records: List[TelemetryRecord]


class LoopStateResponse(BaseModel):
    """Response for GET /realtime/state."""
    state: str
    interval_s: float
    started_at: Optional[datetime] = None
    cycles_completed: int = 0
    cycles_failed: int = 0
    cycles_skipped: int = 0
    cycle_in_flight: bool = False
    last_source: Optional[str] = None


class ActionResponse(BaseModel):
    """Response for action endpoints."""
    status: str
    message: str
    state: str


class HistoryResponse(BaseModel):
    """Response for GET /history (newest first)."""
    capacity: int
    summary: Dict[str, int]
    entries: List[HistoryEntry]
