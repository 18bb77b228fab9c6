"""
Monitoring Routes — Dashboard-driven session control

Provides the endpoints the dashboard drives:
- /telemetry/*  — current record, edits, catalog, presets, CSV upload
- /analyze      — score the current record through the dispatcher
- /remote/health — reachability of the remote scoring service
- /realtime/*   — start/stop/step the sampling loop
- /history/*    — list, clear and export past verdicts
"""

import logging
from io import BytesIO
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import StreamingResponse

from windsight.dispatch import ExplanationUnavailable
from windsight.history import export_filename
from windsight.telemetry import (
    PARAMETER_CATALOG,
    SCENARIOS,
    CsvFormatError,
    InvalidRecord,
    TelemetryRecord,
    load_records_from_csv,
    records_to_csv,
    scenario_records,
)

from .schemas import (
    ActionResponse,
    AnalysisResponse,
    HealthResponse,
    HistoryResponse,
    LoopStateResponse,
    ParameterOutput,
    ScenarioOutput,
    UploadResponse,
)
from .state import MonitorSession, get_session


logger = logging.getLogger(__name__)


router = APIRouter(tags=["Monitoring"])


# Presets are jittered once per process with a fixed seed so the list is stable
SCENARIO_SEED = 7


def _csv_download(content: str, filename: str) -> StreamingResponse:
    return StreamingResponse(
        BytesIO(content.encode("utf-8")),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


# =============================================================================
# TELEMETRY
# =============================================================================

@router.get("/telemetry", response_model=TelemetryRecord)
async def get_telemetry(session: MonitorSession = Depends(get_session)):
    """Current telemetry record."""
    return session.loop.record


@router.put("/telemetry", response_model=TelemetryRecord)
async def replace_telemetry(
    record: TelemetryRecord,
    session: MonitorSession = Depends(get_session),
):
    """Replace the whole telemetry record."""
    session.loop.set_record(record)
    return session.loop.record


@router.patch(
    "/telemetry",
    response_model=TelemetryRecord,
    responses={422: {"description": "Unknown field or invalid value"}},
)
async def update_telemetry(
    changes: Dict[str, Any],
    session: MonitorSession = Depends(get_session),
):
    """Update individual parameters (slider moves)."""
    try:
        session.loop.set_record(session.loop.record.with_updates(changes))
    except InvalidRecord as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": str(e), "fields": e.fields},
        )
    return session.loop.record


@router.get("/telemetry/parameters", response_model=List[ParameterOutput])
async def list_parameters():
    """Slider catalog: label, group, unit and range for every parameter."""
    return [
        ParameterOutput(
            name=spec.name,
            label=spec.label,
            group=spec.group,
            unit=spec.unit,
            min=spec.minimum,
            max=spec.maximum,
            step=spec.step,
            options=list(spec.options),
        )
        for spec in PARAMETER_CATALOG
    ]


@router.get("/telemetry/scenarios", response_model=List[ScenarioOutput])
async def list_scenarios():
    """Preset operating conditions."""
    records = scenario_records(seed=SCENARIO_SEED)
    return [
        ScenarioOutput(index=index, name=scenario.name, record=record)
        for index, (scenario, record) in enumerate(zip(SCENARIOS, records))
    ]


@router.post(
    "/telemetry/scenarios/{index}",
    response_model=TelemetryRecord,
    responses={404: {"description": "No scenario at this index"}},
)
async def load_scenario(index: int, session: MonitorSession = Depends(get_session)):
    """Load a preset as the current telemetry."""
    records = scenario_records(seed=SCENARIO_SEED)
    if not 0 <= index < len(records):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No scenario at index {index}",
        )
    session.loop.set_record(records[index])
    logger.info(f"Loaded scenario '{SCENARIOS[index].name}'")
    return session.loop.record


@router.post(
    "/telemetry/upload",
    response_model=UploadResponse,
    responses={400: {"description": "Not a usable telemetry CSV"}},
)
async def upload_telemetry(request: Request, session: MonitorSession = Depends(get_session)):
    """
    Upload telemetry as CSV (raw text/csv body).

    The first valid row becomes the current telemetry.
    """
    text = (await request.body()).decode("utf-8", errors="replace")
    try:
        records = load_records_from_csv(text)
    except CsvFormatError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not records:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No valid telemetry rows found",
        )
    session.loop.set_record(records[0])
    logger.info(f"Loaded {len(records)} telemetry parameter sets from CSV")
    return UploadResponse(count=len(records), records=records)


@router.get("/telemetry/sample.csv")
async def download_sample_csv():
    """CSV template filled with the preset scenarios."""
    content = records_to_csv(scenario_records(seed=SCENARIO_SEED))
    return _csv_download(content, "turbine_sample_data.csv")


# =============================================================================
# ANALYSIS
# =============================================================================

@router.post(
    "/analyze",
    response_model=AnalysisResponse,
    responses={422: {"description": "Current telemetry is invalid"}},
)
async def analyze(session: MonitorSession = Depends(get_session)):
    """Score the current telemetry (remote first, local fallback)."""
    try:
        verdict = await session.dispatcher.predict(session.loop.record)
    except InvalidRecord as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    session.loop.set_last_verdict(verdict)
    return AnalysisResponse(verdict=verdict, source=session.dispatcher.last_source)


@router.get(
    "/analyze/latest",
    response_model=AnalysisResponse,
    responses={404: {"description": "Nothing analyzed yet"}},
)
async def latest_analysis(session: MonitorSession = Depends(get_session)):
    """Most recent verdict (manual or real-time)."""
    verdict = session.loop.last_verdict
    if verdict is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No prediction available")
    return AnalysisResponse(verdict=verdict, source=session.dispatcher.last_source)


@router.post(
    "/analyze/explain",
    responses={503: {"description": "Explanation service unavailable"}},
)
async def explain_current(session: MonitorSession = Depends(get_session)):
    """Ask the remote service to explain the current telemetry (no local fallback)."""
    try:
        return await session.dispatcher.explain(session.loop.record)
    except ExplanationUnavailable as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


@router.get("/remote/health", response_model=HealthResponse)
async def remote_health(session: MonitorSession = Depends(get_session)):
    """Whether the remote scoring service answers its health check."""
    remote = await session.dispatcher.health_check()
    if remote:
        message = "Remote scoring service reachable"
    elif session.dispatcher.client is None:
        message = "No remote scoring service configured; scoring locally"
    else:
        message = "Remote scoring service unreachable; scoring locally"
    return HealthResponse(status="ok", remote=remote, message=message)


# =============================================================================
# REAL-TIME LOOP
# =============================================================================

@router.get("/realtime/state", response_model=LoopStateResponse)
async def get_loop_state(session: MonitorSession = Depends(get_session)):
    """Sampling loop state and counters."""
    return LoopStateResponse(**session.loop.snapshot())


@router.post("/realtime/start", response_model=ActionResponse)
async def start_loop(session: MonitorSession = Depends(get_session)):
    """
    Start continuous monitoring.

    State transitions: IDLE → RUNNING (no-op when already RUNNING)
    """
    if not session.loop.start():
        return ActionResponse(
            status="unchanged",
            message="Real-time mode is already active.",
            state=session.loop.state.value,
        )
    return ActionResponse(
        status="started",
        message=f"Continuous monitoring and prediction started (every {session.loop.interval}s).",
        state=session.loop.state.value,
    )


@router.post("/realtime/stop", response_model=ActionResponse)
async def stop_loop(session: MonitorSession = Depends(get_session)):
    """
    Stop continuous monitoring.

    State transitions: RUNNING → IDLE (no-op when already IDLE)
    """
    if not await session.loop.stop():
        return ActionResponse(
            status="unchanged",
            message="Real-time mode is not active.",
            state=session.loop.state.value,
        )
    return ActionResponse(
        status="stopped",
        message="Continuous monitoring stopped.",
        state=session.loop.state.value,
    )


@router.post(
    "/realtime/step",
    response_model=AnalysisResponse,
    responses={409: {"description": "A cycle is already in flight"}, 502: {"description": "Cycle failed"}},
)
async def step_loop(session: MonitorSession = Depends(get_session)):
    """Run a single perturb-and-score cycle now."""
    if session.loop.cycle_in_flight:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A sampling cycle is already in flight")
    verdict = await session.loop.run_cycle()
    if verdict is None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Sampling cycle failed")
    return AnalysisResponse(verdict=verdict, source=session.dispatcher.last_source)


# =============================================================================
# HISTORY
# =============================================================================

@router.get("/history", response_model=HistoryResponse)
async def get_history(session: MonitorSession = Depends(get_session)):
    """Past verdicts, newest first."""
    return HistoryResponse(
        capacity=session.history.capacity,
        summary=session.history.summary(),
        entries=list(reversed(session.history.entries())),
    )


@router.delete("/history", response_model=ActionResponse)
async def clear_history(session: MonitorSession = Depends(get_session)):
    """Clear all prediction history."""
    session.history.clear()
    return ActionResponse(
        status="cleared",
        message="All prediction history has been cleared.",
        state=session.loop.state.value,
    )


@router.get("/history/export")
async def export_history(session: MonitorSession = Depends(get_session)):
    """Download the history as CSV."""
    return _csv_download(session.history.export(), export_filename())
