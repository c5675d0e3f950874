"""
Structured logging for the InfraSim backend.

Every record emitted while a run executes carries that run's id and tenant,
so JSON logs from the runner, registry and broadcaster can be correlated
without threading ids through each call.
"""

import logging
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Optional, Any, Dict, Tuple

from pythonjsonlogger import jsonlogger

from .config import LOG_LEVEL, LOG_FORMAT
from .constants import LOG_FORMAT_JSON

SERVICE_NAME = "infrasim-backend"

# (run_id, tenant_id) of the run executing in the current task
_run_context: ContextVar[Tuple[Optional[str], Optional[str]]] = ContextVar(
    "infrasim_run_context", default=(None, None)
)


class RunContextFilter(logging.Filter):
    """Stamps run_id and tenant_id from the active run onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        run_id, tenant_id = _run_context.get()
        if not hasattr(record, "run_id"):
            record.run_id = run_id
        if not hasattr(record, "tenant_id"):
            record.tenant_id = tenant_id
        return True


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    service_name: str = SERVICE_NAME,
) -> logging.Logger:
    """
    Configure the service logger.

    Args:
        level: Log level name
        json_format: Emit one JSON object per line instead of plain text
        service_name: Root logger name for the service

    Returns:
        The configured logger
    """
    logger = logging.getLogger(service_name)
    logger.setLevel(getattr(logging, level.upper()))
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RunContextFilter())

    if json_format:
        formatter = jsonlogger.JsonFormatter(
            '%(asctime)s %(levelname)s %(name)s %(run_id)s %(tenant_id)s %(message)s',
            rename_fields={
                'asctime': '@timestamp',
                'levelname': 'log_level',
            }
        )
    else:
        formatter = logging.Formatter(
            '[%(asctime)s] %(levelname)s %(name)s [run=%(run_id)s]: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger


logger = setup_logging(LOG_LEVEL, json_format=LOG_FORMAT == LOG_FORMAT_JSON)


def get_logger(name: str) -> logging.Logger:
    """Logger namespaced under the service logger."""
    return logging.getLogger(f"{SERVICE_NAME}.{name}")


@contextmanager
def bind_run(run_id: str, tenant_id: Optional[str] = None):
    """Attach a run's ids to every record logged inside the block."""
    token = _run_context.set((run_id, tenant_id))
    try:
        yield
    finally:
        _run_context.reset(token)


def current_run() -> Tuple[Optional[str], Optional[str]]:
    return _run_context.get()


@contextmanager
def log_timing(operation: str, logger: Optional[logging.Logger] = None):
    """
    Log how long a block took, in milliseconds.

    Usage:
        with log_timing(f"simulation run {run_id}", logger):
            status = await self._loop(...)
    """
    log = logger or logging.getLogger(SERVICE_NAME)
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = (time.perf_counter() - start) * 1000
        log.info(f"{operation} completed in {elapsed:.2f}ms")


def log_error(
    message: str,
    error: Optional[Exception] = None,
    context: Optional[Dict[str, Any]] = None,
) -> None:
    """Log an error with the exception type and any extra context fields."""
    extra = dict(context or {})
    if error:
        extra["error_type"] = type(error).__name__
        extra["error_detail"] = str(error)

    logger.error(message, extra=extra, exc_info=error is not None)


def log_audit(
    action: str,
    run_id: Optional[str] = None,
    tenant_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Record a run lifecycle action on the audit logger.

    Ids default to the run bound with bind_run().

    Args:
        action: start, completed, cancelled, fail, cancel or evict
        run_id: Affected run
        tenant_id: Tenant owning the run
        details: Extra fields such as month counts or final condition
    """
    bound_run, bound_tenant = _run_context.get()
    audit_logger = logging.getLogger(f"{SERVICE_NAME}.audit")
    audit_logger.info(
        f"AUDIT: {action} simulation_run",
        extra={
            "audit": True,
            "action": action,
            "run_id": run_id or bound_run,
            "tenant_id": tenant_id or bound_tenant,
            **(details or {}),
        }
    )
