"""
Run lifecycle events delivered to subscribers.

Payload field names are the contract external layers rely on.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional

from core.constants import TERMINAL_RUN_STATUSES
from core.errors import raise_validation_error
from simulation.models import RunState, SimulationConfig


class EventKind(str, Enum):
    RUN_STARTED = "run-started"
    RUN_PROGRESS = "run-progress"
    RUN_COMPLETED = "run-completed"
    RUN_CANCELLED = "run-cancelled"
    RUN_FAILED = "run-failed"
    RUN_STATE = "run-state"
    TENANT_NOTIFICATION = "tenant-notification"
    ASSET_ALERT = "asset-alert"


TERMINAL_EVENT_KINDS = frozenset({
    EventKind.RUN_COMPLETED,
    EventKind.RUN_CANCELLED,
    EventKind.RUN_FAILED,
})

ALERT_TYPES = ("warning", "critical", "info")

# Terminal event -> tenant notification (type, message)
TENANT_NOTICES = {
    EventKind.RUN_COMPLETED: ("completed", "Simulation completed successfully"),
    EventKind.RUN_CANCELLED: ("cancelled", "Simulation cancelled"),
    EventKind.RUN_FAILED: ("failed", "Simulation failed"),
}


@dataclass(frozen=True)
class RunEvent:
    kind: EventKind
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return self.kind in TERMINAL_EVENT_KINDS

    @property
    def ends_stream(self) -> bool:
        """True for terminal events and for snapshots of finished runs."""
        if self.is_terminal:
            return True
        return (
            self.kind == EventKind.RUN_STATE
            and self.payload.get("status") in TERMINAL_RUN_STATUSES
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"event": self.kind.value, "data": self.payload}


def run_started(run_id: str, config: Optional[SimulationConfig]) -> RunEvent:
    return RunEvent(EventKind.RUN_STARTED, {
        "runId": run_id,
        "config": config.to_dict() if config else None,
    })


def run_progress(run_id: str, month: int, progress: int) -> RunEvent:
    return RunEvent(EventKind.RUN_PROGRESS, {
        "runId": run_id,
        "month": month,
        "progressPercent": progress,
    })


def run_completed(run_id: str, completed_at: datetime) -> RunEvent:
    return RunEvent(EventKind.RUN_COMPLETED, {
        "runId": run_id,
        "completedAt": completed_at.isoformat(),
    })


def run_cancelled(run_id: str, reason: str) -> RunEvent:
    return RunEvent(EventKind.RUN_CANCELLED, {"runId": run_id, "reason": reason})


def run_failed(run_id: str, error: str) -> RunEvent:
    return RunEvent(EventKind.RUN_FAILED, {"runId": run_id, "error": error})


def run_state(state: RunState) -> RunEvent:
    """Catch-up snapshot for a newly joined subscriber."""
    return RunEvent(EventKind.RUN_STATE, {
        "runId": state.run_id,
        "status": state.status,
        "progress": state.progress,
        "results": [r.to_dict() for r in state.results],
        "error": state.error,
    })


def tenant_notification(notice_type: str, run_id: str, message: str) -> RunEvent:
    return RunEvent(EventKind.TENANT_NOTIFICATION, {
        "type": notice_type,
        "runId": run_id,
        "message": message,
    })


def asset_alert(
    alert_type: str,
    asset_id: str,
    asset_name: str,
    message: str,
    data: Optional[Dict[str, Any]] = None
) -> RunEvent:
    if alert_type not in ALERT_TYPES:
        raise_validation_error("alert_type", f"must be one of {', '.join(ALERT_TYPES)}", alert_type)
    return RunEvent(EventKind.ASSET_ALERT, {
        "type": alert_type,
        "assetId": asset_id,
        "assetName": asset_name,
        "message": message,
        "data": data,
    })
