"""
Tests for the in-memory run lifecycle registry.
"""

import threading

import pytest

from core.errors import ErrorCode, RunNotFoundError, RunStateError
from simulation.models import MonthResult, SimulationConfig


def month(n: int) -> MonthResult:
    return MonthResult(
        month=n,
        year=(n - 1) // 12 + 1,
        condition_score=90 - n,
        degradation_score=n,
        failure_probability=0.001,
        risk_level="low",
        maintenance_cost=0.0,
    )


class TestCreate:

    def test_new_run_is_pending(self, registry):
        config = SimulationConfig(years_to_simulate=2)
        state = registry.create("r1", tenant_id="t1", config=config)

        assert state.status == "pending"
        assert state.progress == 0
        assert state.results == []
        assert state.tenant_id == "t1"
        assert state.config == config
        assert state.created_at is not None

    def test_duplicate_id_rejected(self, registry):
        registry.create("r1")
        with pytest.raises(RunStateError) as exc_info:
            registry.create("r1")
        assert exc_info.value.code == ErrorCode.RUN_ALREADY_EXISTS

    def test_get_unknown(self, registry):
        assert registry.get("missing") is None

    def test_get_returns_copy(self, registry):
        registry.create("r1")
        registry.update("r1", status="running")
        registry.append_result("r1", month(1))

        snapshot = registry.get("r1")
        snapshot.results.append(month(2))
        snapshot.status = "completed"

        assert len(registry.get("r1").results) == 1
        assert registry.get("r1").status == "running"


class TestTransitions:

    def test_lifecycle_timestamps(self, registry):
        registry.create("r1")
        running = registry.update("r1", status="running")
        assert running.started_at is not None
        assert running.completed_at is None

        done = registry.update("r1", status="completed", progress=100)
        assert done.status == "completed"
        assert done.completed_at is not None

    def test_illegal_transition(self, registry):
        registry.create("r1")
        with pytest.raises(RunStateError):
            registry.update("r1", status="completed")

    def test_unknown_status(self, registry):
        registry.create("r1")
        with pytest.raises(RunStateError):
            registry.update("r1", status="paused")
        assert registry.get("r1").status == "pending"

    def test_pending_can_fail(self, registry):
        registry.create("r1")
        state = registry.update("r1", status="failed", error="bad input")
        assert state.status == "failed"
        assert state.error == "bad input"

    @pytest.mark.parametrize("terminal", ["completed", "cancelled", "failed"])
    def test_terminal_is_final(self, registry, terminal):
        registry.create("r1")
        registry.update("r1", status="running")
        registry.update("r1", status=terminal)

        with pytest.raises(RunStateError):
            registry.update("r1", status="running")
        with pytest.raises(RunStateError):
            registry.update("r1", progress=50)

    def test_unknown_run(self, registry):
        with pytest.raises(RunNotFoundError):
            registry.update("missing", status="running")


class TestProgressAndResults:

    def test_progress_is_monotone_and_capped(self, registry):
        registry.create("r1")
        registry.update("r1", status="running")

        assert registry.update("r1", progress=50).progress == 50
        assert registry.update("r1", progress=30).progress == 50
        assert registry.update("r1", progress=150).progress == 100

    def test_append_requires_running(self, registry):
        registry.create("r1")
        with pytest.raises(RunStateError):
            registry.append_result("r1", month(1))

    def test_months_strictly_increase(self, registry):
        registry.create("r1")
        registry.update("r1", status="running")
        registry.append_result("r1", month(1))
        registry.append_result("r1", month(2))

        with pytest.raises(RunStateError):
            registry.append_result("r1", month(2))
        assert [r.month for r in registry.get("r1").results] == [1, 2]

    def test_concurrent_progress_updates(self, registry):
        registry.create("r1")
        registry.update("r1", status="running")

        threads = [
            threading.Thread(target=registry.update, args=("r1",), kwargs={"progress": p})
            for p in range(0, 101, 5)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert registry.get("r1").progress == 100


class TestCancellation:

    def test_request_cancel_is_idempotent(self, registry):
        registry.create("r1")
        registry.request_cancel("r1")
        state = registry.request_cancel("r1")

        assert state.cancel_requested is True
        assert state.status == "pending"
        assert registry.is_cancel_requested("r1")

    def test_cancel_after_finish_is_noop(self, registry):
        registry.create("r1")
        registry.update("r1", status="running")
        registry.update("r1", status="completed")

        state = registry.request_cancel("r1")
        assert state.cancel_requested is False
        assert state.status == "completed"

    def test_cancel_unknown_run(self, registry):
        with pytest.raises(RunNotFoundError):
            registry.request_cancel("missing")


class TestEvictAndList:

    def test_evict(self, registry):
        registry.create("r1")
        assert registry.evict("r1") is True
        assert registry.get("r1") is None
        assert registry.evict("r1") is False

    def test_list_runs_by_tenant(self, registry):
        registry.create("a", tenant_id="t1")
        registry.create("b", tenant_id="t2")
        registry.create("c", tenant_id="t1")

        assert [s.run_id for s in registry.list_runs()] == ["a", "b", "c"]
        assert [s.run_id for s in registry.list_runs("t1")] == ["a", "c"]
        assert registry.list_runs("nobody") == []
