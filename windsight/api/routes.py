"""
Scoring Service Routes — The Remote Scoring Contract

- POST /predict          TelemetryRecord -> Verdict
- POST /explain          TelemetryRecord -> ranked explanation
- POST /fault-location   TelemetryRecord -> components to highlight
- GET  /health           liveness only

These run the local engine; a dashboard pointed at this service gets the
same answers its own fallback would give.
"""

from fastapi import APIRouter, Depends, status

from windsight.rules.scorer import Verdict
from windsight.telemetry.schemas import TelemetryRecord

from .schemas import ExplanationResponse, FaultLocationResponse, FaultLocationOutput, HealthResponse
from .state import MonitorSession, get_session


router = APIRouter()


@router.post(
    "/predict",
    response_model=Verdict,
    status_code=status.HTTP_200_OK,
    responses={422: {"description": "Missing or non-finite telemetry field"}},
    summary="Score a telemetry record",
)
async def predict(
    record: TelemetryRecord,
    session: MonitorSession = Depends(get_session),
) -> Verdict:
    """Classify the record and return probability, confidence and attribution."""
    return session.scorer.score(record)


@router.post(
    "/explain",
    response_model=ExplanationResponse,
    responses={422: {"description": "Missing or non-finite telemetry field"}},
    summary="Explain the verdict for a telemetry record",
)
async def explain(
    record: TelemetryRecord,
    session: MonitorSession = Depends(get_session),
) -> ExplanationResponse:
    """Score the record, then rank its attribution with recommendations."""
    verdict = session.scorer.score(record)
    return ExplanationResponse(**session.explainer.explain(verdict, record))


@router.post(
    "/fault-location",
    response_model=FaultLocationResponse,
    summary="Locate implicated components",
)
async def fault_location(
    record: TelemetryRecord,
    session: MonitorSession = Depends(get_session),
) -> FaultLocationResponse:
    """Components implicated by the verdict, with a severity for highlighting."""
    verdict = session.scorer.score(record)
    return FaultLocationResponse(locations=[
        FaultLocationOutput(
            component=location.component,
            parameter=location.parameter,
            severity=location.severity,
        )
        for location in session.explainer.fault_locations(verdict)
    ])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
)
async def health_check() -> HealthResponse:
    """Liveness only; no remote calls."""
    return HealthResponse(status="ok", message="Scoring service operational")
