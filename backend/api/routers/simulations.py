"""
Simulations router - Start, inspect, cancel and stream degradation runs.
"""

import json
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from api.schemas import RunSimulationRequest, RunStartedResponse
from core.errors import raise_validation_error
from core.logging import get_logger
from realtime.broadcaster import QueueSubscriber
from simulation.service import SimulationService, get_simulation_service

logger = get_logger(__name__)
router = APIRouter()


def _resolve_asset(req: RunSimulationRequest):
    if req.asset is not None:
        return req.asset.to_domain()
    if req.asset_ref:
        return req.asset_ref
    raise_validation_error("asset", "either 'asset' or 'assetRef' is required")


@router.post("/simulations/run", response_model=RunStartedResponse, status_code=202)
async def start_simulation(
    req: RunSimulationRequest,
    service: SimulationService = Depends(get_simulation_service),
):
    """
    Start a simulation in the background. Progress is available from the
    run's event stream.
    """
    run_id = service.start_run(
        _resolve_asset(req),
        req.config.to_domain(),
        tenant_id=req.tenant_id,
        run_id=req.run_id,
    )
    state = service.get_state(run_id)
    return RunStartedResponse(runId=run_id, status=state.status)


@router.post("/simulations/preview")
async def preview_simulation(
    req: RunSimulationRequest,
    service: SimulationService = Depends(get_simulation_service),
):
    """Run a simulation to completion and return the trajectory and summary."""
    outcome = await service.run(
        _resolve_asset(req),
        req.config.to_domain(),
        tenant_id=req.tenant_id,
        run_id=req.run_id,
    )
    return outcome.to_dict()


@router.get("/simulations")
def list_simulations(
    tenant_id: Optional[str] = None,
    service: SimulationService = Depends(get_simulation_service),
):
    """List held runs, newest last."""
    runs = service.list_runs(tenant_id)
    return {
        "simulations": [s.to_dict(include_results=False) for s in runs],
        "total": len(runs),
    }


@router.get("/simulations/{run_id}")
def get_simulation(
    run_id: str,
    service: SimulationService = Depends(get_simulation_service),
):
    return service.get_state(run_id).to_dict()


@router.post("/simulations/{run_id}/cancel")
def cancel_simulation(
    run_id: str,
    service: SimulationService = Depends(get_simulation_service),
):
    """Request cancellation; the run stops at its next month boundary."""
    state = service.cancel(run_id)
    return {"runId": run_id, "status": state.status, "cancelRequested": state.cancel_requested}


@router.delete("/simulations/{run_id}")
def delete_simulation(
    run_id: str,
    service: SimulationService = Depends(get_simulation_service),
):
    service.evict(run_id)
    return {"success": True, "message": "Simulation evicted"}


@router.get("/simulations/{run_id}/events")
async def stream_simulation_events(
    run_id: str,
    service: SimulationService = Depends(get_simulation_service),
):
    """
    Stream a run's events as NDJSON.

    The first line is the run's current state; the stream ends after the
    run reaches a terminal status.
    """
    service.get_state(run_id)
    subscriber = QueueSubscriber()
    service.broadcaster.subscribe_run(run_id, subscriber)

    async def event_generator():
        try:
            async for event in subscriber:
                yield json.dumps(event.to_dict()) + "\n"
                if event.ends_stream:
                    break
        finally:
            service.broadcaster.unsubscribe_run(run_id, subscriber)
            subscriber.close()
            logger.debug(f"Closed event stream for run {run_id}")

    return StreamingResponse(event_generator(), media_type="application/x-ndjson")


@router.get("/tenants/{tenant_id}/events")
async def stream_tenant_events(
    tenant_id: str,
    alerts: bool = False,
    service: SimulationService = Depends(get_simulation_service),
):
    """
    Stream tenant notifications as NDJSON until the client disconnects.
    Pass alerts=true to also receive the tenant's asset alerts.
    """
    subscriber = QueueSubscriber()
    service.broadcaster.join_tenant(tenant_id, subscriber)
    if alerts:
        service.broadcaster.subscribe_alerts(tenant_id, subscriber)

    async def event_generator():
        try:
            async for event in subscriber:
                yield json.dumps(event.to_dict()) + "\n"
        finally:
            service.broadcaster.leave_tenant(tenant_id, subscriber)
            service.broadcaster.unsubscribe_alerts(tenant_id, subscriber)
            subscriber.close()
            logger.debug(f"Closed event stream for tenant {tenant_id}")

    return StreamingResponse(event_generator(), media_type="application/x-ndjson")
