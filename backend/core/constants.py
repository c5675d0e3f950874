"""
Centralized constants for the InfraSim backend.

All model coefficients, thresholds, and shared configuration should be defined here.
"""

from typing import Dict, FrozenSet

# =============================================================================
# Server Configuration
# =============================================================================

DEFAULT_PORT = 8000
DEFAULT_HOST = "0.0.0.0"

# =============================================================================
# Condition Scale
# =============================================================================

MIN_CONDITION = 0.0
MAX_CONDITION = 100.0
MAX_TRAFFIC_LOAD = 100.0

# =============================================================================
# Wear Model
# =============================================================================

DEFAULT_ANNUAL_WEAR_RATE = 2.0
MONTHS_PER_YEAR = 12

# Traffic amplification breakpoints (load -> multiplier)
TRAFFIC_LOW_LOAD = 30
TRAFFIC_MEDIUM_LOAD = 70

# Environmental sub-factors and cap
HUMIDITY_BASE, HUMIDITY_WEIGHT = 0.9, 0.6
SALINITY_BASE, SALINITY_WEIGHT = 1.0, 0.8
TEMPERATURE_BASE, TEMPERATURE_WEIGHT = 0.9, 0.5
ENVIRONMENTAL_MULTIPLIER_CAP = 2.5

# Maintenance factor caps
MAINTENANCE_OVERDUE_EXTRA_CAP = 0.7

# Age factor cap (above the 1.6 end-of-life floor)
AGE_PAST_LIFESPAN_EXTRA_CAP = 0.4

# =============================================================================
# Failure Probability
# =============================================================================

FAILURE_PROBABILITY_CAP = 0.99
MAINTENANCE_OVERDUE_MONTHS = 24
MAINTENANCE_SEVERELY_OVERDUE_MONTHS = 36
MAINTENANCE_OVERDUE_MULTIPLIER = 1.3
MAINTENANCE_SEVERELY_OVERDUE_MULTIPLIER = 1.6

# =============================================================================
# Risk Classification
# =============================================================================

RISK_LEVELS = ("low", "medium", "high", "critical")

# (condition below, probability above) per band, most severe first
RISK_BANDS = (
    ("critical", 20, 0.4),
    ("high", 40, 0.2),
    ("medium", 60, 0.1),
)

# =============================================================================
# Scenarios
# =============================================================================

SCENARIO_TYPES: FrozenSet[str] = frozenset({
    'standard', 'optimistic', 'pessimistic', 'custom'
})
DEFAULT_SCENARIO_TYPE = 'standard'

SCENARIO_MULTIPLIERS: Dict[str, float] = {
    "standard": 1.0,
    "optimistic": 0.8,
    "pessimistic": 1.3,
}

# =============================================================================
# Cost Model (fractions of replacement cost)
# =============================================================================

# Monthly maintenance cost by condition band, most severe first
MAINTENANCE_COST_BANDS = (
    (40, 0.30),  # Major repair
    (60, 0.10),  # Moderate repair
    (80, 0.02),  # Routine maintenance
)

REPAIR_COST_FRACTION = 0.30
REPAIR_CONDITION_THRESHOLD = 40

# =============================================================================
# Summary
# =============================================================================

DAYS_PER_SIMULATED_MONTH = 30
NEXT_INSPECTION_DAYS = 30

RECOMMENDED_ACTIONS = (
    "Schedule immediate inspection",
    "Prepare maintenance budget allocation",
    "Consider asset replacement planning",
)

# =============================================================================
# Run Lifecycle
# =============================================================================

RUN_STATUSES: FrozenSet[str] = frozenset({
    'pending', 'running', 'completed', 'cancelled', 'failed'
})
TERMINAL_RUN_STATUSES: FrozenSet[str] = frozenset({
    'completed', 'cancelled', 'failed'
})

DEFAULT_YEARS_TO_SIMULATE = 5
CANCEL_REASON_USER = "User cancelled"

# =============================================================================
# Logging
# =============================================================================

LOG_FORMAT_JSON = "json"
LOG_FORMAT_TEXT = "text"
DEFAULT_LOG_LEVEL = "INFO"
