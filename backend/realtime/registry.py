"""
Run Lifecycle Registry
======================
Holds the live status, progress and results of active and recently
finished runs until the caller evicts them.

RunRegistry is the interface the runner and broadcaster depend on;
InMemoryRunRegistry is the in-process implementation. A distributed store
can implement the same interface without changes to either consumer.
"""

import copy
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from core.constants import RUN_STATUSES, TERMINAL_RUN_STATUSES
from core.errors import RunNotFoundError, RunStateError, ErrorCode
from simulation.models import MonthResult, RunState, SimulationConfig

logger = logging.getLogger(__name__)

# Legal status transitions; terminal statuses have none
TRANSITIONS = {
    "pending": (TERMINAL_RUN_STATUSES - {"completed"}) | {"running"},
    "running": TERMINAL_RUN_STATUSES,
    **{terminal: frozenset() for terminal in TERMINAL_RUN_STATUSES},
}


class RunRegistry(ABC):
    """Keyed store of RunState with per-run serialized mutation."""

    @abstractmethod
    def create(
        self,
        run_id: str,
        tenant_id: Optional[str] = None,
        config: Optional[SimulationConfig] = None
    ) -> RunState:
        """Register a new run in 'pending' status."""

    @abstractmethod
    def get(self, run_id: str) -> Optional[RunState]:
        """Snapshot copy of a run's state, or None if unknown."""

    @abstractmethod
    def append_result(self, run_id: str, result: MonthResult) -> None:
        """Append one month to a running run's trajectory."""

    @abstractmethod
    def update(
        self,
        run_id: str,
        status: Optional[str] = None,
        progress: Optional[int] = None,
        error: Optional[str] = None
    ) -> RunState:
        """Change status and/or progress; returns the new snapshot."""

    @abstractmethod
    def request_cancel(self, run_id: str) -> RunState:
        """Flag a run for cancellation. Idempotent; does not change status."""

    @abstractmethod
    def is_cancel_requested(self, run_id: str) -> bool:
        """Whether cancellation has been requested for a run."""

    @abstractmethod
    def evict(self, run_id: str) -> bool:
        """Drop a run's state. Returns False if it was not held."""

    @abstractmethod
    def list_runs(self, tenant_id: Optional[str] = None) -> List[RunState]:
        """Snapshots of all held runs, optionally for one tenant."""


@dataclass
class _Entry:
    state: RunState
    lock: threading.Lock = field(default_factory=threading.Lock)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _snapshot(state: RunState) -> RunState:
    # MonthResult is frozen, so a shallow list copy is enough
    snap = copy.copy(state)
    snap.results = list(state.results)
    return snap


class InMemoryRunRegistry(RunRegistry):
    """Thread-safe in-process registry with one lock per run."""

    def __init__(self):
        self._entries: Dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def _entry(self, run_id: str) -> _Entry:
        with self._lock:
            entry = self._entries.get(run_id)
        if entry is None:
            raise RunNotFoundError(run_id)
        return entry

    def create(
        self,
        run_id: str,
        tenant_id: Optional[str] = None,
        config: Optional[SimulationConfig] = None
    ) -> RunState:
        state = RunState(
            run_id=run_id,
            tenant_id=tenant_id,
            config=config,
            created_at=_utc_now(),
        )
        with self._lock:
            if run_id in self._entries:
                raise RunStateError(
                    message=f"Simulation run already exists: {run_id}",
                    code=ErrorCode.RUN_ALREADY_EXISTS,
                    details={"run_id": run_id},
                )
            self._entries[run_id] = _Entry(state=state)
        logger.debug(f"Registered run {run_id} for tenant {tenant_id}")
        return _snapshot(state)

    def get(self, run_id: str) -> Optional[RunState]:
        with self._lock:
            entry = self._entries.get(run_id)
        if entry is None:
            return None
        with entry.lock:
            return _snapshot(entry.state)

    def append_result(self, run_id: str, result: MonthResult) -> None:
        entry = self._entry(run_id)
        with entry.lock:
            state = entry.state
            if state.status != "running":
                raise RunStateError(
                    message=f"Cannot append results to run {run_id} in status '{state.status}'",
                    details={"run_id": run_id, "status": state.status},
                )
            if state.results and result.month <= state.results[-1].month:
                raise RunStateError(
                    message=f"Month {result.month} does not follow month {state.results[-1].month}",
                    details={"run_id": run_id},
                )
            state.results.append(result)

    def update(
        self,
        run_id: str,
        status: Optional[str] = None,
        progress: Optional[int] = None,
        error: Optional[str] = None
    ) -> RunState:
        entry = self._entry(run_id)
        with entry.lock:
            state = entry.state
            if state.is_terminal:
                raise RunStateError(
                    message=f"Run {run_id} already finished with status '{state.status}'",
                    details={"run_id": run_id, "status": state.status},
                )

            if status is not None and status not in RUN_STATUSES:
                raise RunStateError(
                    message=f"Unknown run status '{status}' for run {run_id}",
                    details={"run_id": run_id, "status": state.status},
                )
            if status is not None and status != state.status:
                if status not in TRANSITIONS[state.status]:
                    raise RunStateError(
                        message=f"Illegal transition {state.status} -> {status} for run {run_id}",
                        details={"run_id": run_id, "status": state.status},
                    )
                state.status = status
                now = _utc_now()
                if status == "running":
                    state.started_at = now
                elif state.is_terminal:
                    state.completed_at = now

            if progress is not None:
                # Progress never moves backwards
                state.progress = max(state.progress, min(100, int(progress)))

            if error is not None:
                state.error = error

            return _snapshot(state)

    def request_cancel(self, run_id: str) -> RunState:
        entry = self._entry(run_id)
        with entry.lock:
            if not entry.state.is_terminal:
                entry.state.cancel_requested = True
            return _snapshot(entry.state)

    def is_cancel_requested(self, run_id: str) -> bool:
        entry = self._entry(run_id)
        with entry.lock:
            return entry.state.cancel_requested

    def evict(self, run_id: str) -> bool:
        with self._lock:
            return self._entries.pop(run_id, None) is not None

    def list_runs(self, tenant_id: Optional[str] = None) -> List[RunState]:
        with self._lock:
            entries = list(self._entries.values())
        runs = []
        for entry in entries:
            with entry.lock:
                if tenant_id is None or entry.state.tenant_id == tenant_id:
                    runs.append(_snapshot(entry.state))
        return sorted(runs, key=lambda s: s.created_at)
