"""
InfraSim Core Module.

Provides core utilities used across the backend:
- Configuration management
- Error handling
- Logging utilities
- Constants
"""

# Error handling
from .errors import (
    ErrorCode,
    InfraSimError,
    ValidationError,
    NotFoundError,
    AssetNotFoundError,
    RunNotFoundError,
    RunStateError,
    BroadcastError,
    handle_exception,
    raise_validation_error,
)

# Logging
from .logging import (
    setup_logging,
    get_logger,
    log_timing,
    log_error,
    log_audit,
    bind_run,
)

# Constants
from .constants import (
    RISK_LEVELS,
    SCENARIO_TYPES,
    RUN_STATUSES,
    TERMINAL_RUN_STATUSES,
    FAILURE_PROBABILITY_CAP,
)

__all__ = [
    # Errors
    "ErrorCode",
    "InfraSimError",
    "ValidationError",
    "NotFoundError",
    "AssetNotFoundError",
    "RunNotFoundError",
    "RunStateError",
    "BroadcastError",
    "handle_exception",
    "raise_validation_error",
    # Logging
    "setup_logging",
    "get_logger",
    "log_timing",
    "log_error",
    "log_audit",
    "bind_run",
    # Constants
    "RISK_LEVELS",
    "SCENARIO_TYPES",
    "RUN_STATUSES",
    "TERMINAL_RUN_STATUSES",
    "FAILURE_PROBABILITY_CAP",
]
