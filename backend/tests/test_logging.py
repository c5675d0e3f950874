"""
Tests for structured logging helpers.
"""

import logging

import pytest
from pythonjsonlogger import jsonlogger

from core.logging import (
    SERVICE_NAME,
    RunContextFilter,
    bind_run,
    current_run,
    get_logger,
    log_audit,
    log_error,
    log_timing,
    setup_logging,
)


class TestSetup:

    def test_json_format(self):
        logger = setup_logging("DEBUG", json_format=True, service_name="infrasim-test")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, jsonlogger.JsonFormatter)

    def test_setup_replaces_handlers(self):
        setup_logging("INFO", service_name="infrasim-test")
        logger = setup_logging("INFO", service_name="infrasim-test")
        assert len(logger.handlers) == 1
        assert not isinstance(logger.handlers[0].formatter, jsonlogger.JsonFormatter)

    def test_module_loggers_are_namespaced(self):
        assert get_logger("simulation.runner").name == f"{SERVICE_NAME}.simulation.runner"


class TestHelpers:

    def test_log_timing(self, caplog):
        logger = get_logger("tests.timing")
        caplog.set_level(logging.INFO, logger=logger.name)
        with log_timing("degradation pass", logger):
            pass
        assert "degradation pass completed in" in caplog.text

    def test_log_audit(self, caplog):
        caplog.set_level(logging.INFO, logger=f"{SERVICE_NAME}.audit")
        log_audit("cancel", "r1", "t1", {"months": 3})

        record = caplog.records[-1]
        assert record.action == "cancel"
        assert record.run_id == "r1"
        assert record.tenant_id == "t1"
        assert record.months == 3

    def test_log_audit_uses_bound_run(self, caplog):
        caplog.set_level(logging.INFO, logger=f"{SERVICE_NAME}.audit")
        with bind_run("r7", "t2"):
            assert current_run() == ("r7", "t2")
            log_audit("start")
        assert current_run() == (None, None)

        record = caplog.records[-1]
        assert record.run_id == "r7"
        assert record.tenant_id == "t2"

    def test_run_context_filter(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        with bind_run("r9"):
            RunContextFilter().filter(record)
        assert record.run_id == "r9"
        assert record.tenant_id is None

    @pytest.mark.asyncio
    async def test_runner_binds_run_ids(self, runner, asphalt_snapshot, caplog):
        from simulation.models import SimulationConfig

        caplog.set_level(logging.INFO, logger=f"{SERVICE_NAME}.audit")
        await runner.run("r1", asphalt_snapshot, SimulationConfig(years_to_simulate=1), tenant_id="t1")

        actions = [(r.action, r.run_id, r.tenant_id) for r in caplog.records if getattr(r, "audit", False)]
        assert actions == [("start", "r1", "t1"), ("completed", "r1", "t1")]

    def test_log_error_context(self, caplog):
        caplog.set_level(logging.ERROR, logger=SERVICE_NAME)
        try:
            raise RuntimeError("sensor feed lost")
        except RuntimeError as e:
            log_error("Run failed", e, {"run_id": "r1"})

        record = caplog.records[-1]
        assert record.error_type == "RuntimeError"
        assert record.run_id == "r1"
