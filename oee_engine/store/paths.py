"""Layout de paths bajo un metrics root.

Inputs/ y Configuration/ se leen; Outputs/ se escriben.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

RUNTIME_SECONDS = "Inputs/Data/TotalRuntimeSeconds"
GOOD_PART_COUNT = "Inputs/Data/GoodPartCount"
BAD_PART_COUNT = "Inputs/Data/BadPartCount"

IDEAL_CYCLE_TIME_SECONDS = "Inputs/Production/IdealCycleTimeSeconds"
PLANNED_PRODUCTION_TIME_HOURS = "Inputs/Production/PlannedProductionTimeHours"
NUMBER_OF_SHIFTS = "Inputs/Production/NumberOfShifts"
SHIFT_START_TIME = "Inputs/Production/ShiftStartTime"
PRODUCTION_TARGET = "Inputs/Production/ProductionTarget"
SHIFT_CHANGE_LEAD_SECONDS = "Inputs/Production/ShiftChangeLeadSeconds"

UPDATE_RATE_MS = "Inputs/System/UpdateRateMs"
LOGGING_VERBOSITY = "Inputs/System/LoggingVerbosity"

QUALITY_TARGET = "Inputs/Targets/QualityTarget"
PERFORMANCE_TARGET = "Inputs/Targets/PerformanceTarget"
AVAILABILITY_TARGET = "Inputs/Targets/AvailabilityTarget"
OEE_TARGET = "Inputs/Targets/OEETarget"

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

ENABLE_REAL_TIME_CALC = "Configuration/EnableRealTimeCalc"
MINIMUM_RUN_TIME = "Configuration/MinimumRunTime"
GOOD_OEE_THRESHOLD = "Configuration/GoodOEE_Threshold"
POOR_OEE_THRESHOLD = "Configuration/PoorOEE_Threshold"
ENABLE_LOGGING = "Configuration/EnableLogging"
ENABLE_ALARMS = "Configuration/EnableAlarms"
SYSTEM_HEALTHY = "Configuration/SystemHealthy"

# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------

OUT_TOTAL_COUNT = "Outputs/Core/TotalCount"
OUT_QUALITY = "Outputs/Core/Quality"
OUT_PERFORMANCE = "Outputs/Core/Performance"
OUT_AVAILABILITY = "Outputs/Core/Availability"
OUT_OEE = "Outputs/Core/OEE"
OUT_AVG_CYCLE_TIME = "Outputs/Core/AvgCycleTime"
OUT_PARTS_PER_HOUR = "Outputs/Core/PartsPerHour"
OUT_EXPECTED_PART_COUNT = "Outputs/Core/ExpectedPartCount"
OUT_DOWNTIME_SECONDS = "Outputs/Core/DowntimeSeconds"

OUT_HOURS_PER_SHIFT = "Outputs/Shift/HoursPerShift"
OUT_CURRENT_SHIFT_NUMBER = "Outputs/Shift/CurrentShiftNumber"
OUT_SHIFT_START_TIME = "Outputs/Shift/ShiftStartTimeOutput"
OUT_SHIFT_END_TIME = "Outputs/Shift/ShiftEndTime"
OUT_TIME_INTO_SHIFT = "Outputs/Shift/TimeIntoShift"
OUT_TIME_REMAINING_IN_SHIFT = "Outputs/Shift/TimeRemainingInShift"
OUT_SHIFT_CHANGE_OCCURRED = "Outputs/Shift/ShiftChangeOccurred"
OUT_SHIFT_CHANGE_IMMINENT = "Outputs/Shift/ShiftChangeImminent"
OUT_SHIFT_PROGRESS = "Outputs/Shift/ShiftProgress"

OUT_PROJECTED_TOTAL_COUNT = "Outputs/Production/ProjectedTotalCount"
OUT_REMAINING_TIME_AT_CURRENT_RATE = "Outputs/Production/RemainingTimeAtCurrentRate"
OUT_PRODUCTION_BEHIND_SCHEDULE = "Outputs/Production/ProductionBehindSchedule"
OUT_REQUIRED_RATE_TO_TARGET = "Outputs/Production/RequiredRateToTarget"
OUT_TARGET_VS_ACTUAL_PARTS = "Outputs/Production/TargetVsActualParts"
OUT_PRODUCTION_PROGRESS = "Outputs/Production/ProductionProgress"

OUT_SYSTEM_STATUS = "Outputs/System/SystemStatus"
OUT_IS_RUNNING = "Outputs/System/IsRunning"
OUT_CALCULATION_VALID = "Outputs/System/CalculationValid"
OUT_DATA_QUALITY_SCORE = "Outputs/System/DataQualityScore"
OUT_LAST_UPDATE_TIME = "Outputs/System/LastUpdateTime"
OUT_DOWNTIME_FORMATTED = "Outputs/System/DowntimeFormatted"
OUT_TOTAL_RUNTIME_FORMATTED = "Outputs/System/TotalRuntimeFormatted"

TRACKED_METRICS = ("Quality", "Performance", "Availability", "OEE")


def trend_path(metric: str) -> str:
    return f"Outputs/Trends/{metric}Trend"


def statistic_path(kind: str, metric: str) -> str:
    """kind: Min | Max | Avg"""
    return f"Outputs/Statistics/{kind}{metric}"


def target_delta_path(metric: str) -> str:
    return f"Outputs/Targets/{metric}VsTarget"


INPUT_PATHS = (
    RUNTIME_SECONDS,
    GOOD_PART_COUNT,
    BAD_PART_COUNT,
    IDEAL_CYCLE_TIME_SECONDS,
    PLANNED_PRODUCTION_TIME_HOURS,
    NUMBER_OF_SHIFTS,
    SHIFT_START_TIME,
    PRODUCTION_TARGET,
    SHIFT_CHANGE_LEAD_SECONDS,
    UPDATE_RATE_MS,
    LOGGING_VERBOSITY,
    QUALITY_TARGET,
    PERFORMANCE_TARGET,
    AVAILABILITY_TARGET,
    OEE_TARGET,
)

CONFIGURATION_PATHS = (
    ENABLE_REAL_TIME_CALC,
    MINIMUM_RUN_TIME,
    GOOD_OEE_THRESHOLD,
    POOR_OEE_THRESHOLD,
    ENABLE_LOGGING,
    ENABLE_ALARMS,
    SYSTEM_HEALTHY,
)

OUTPUT_PATHS = (
    OUT_TOTAL_COUNT,
    OUT_QUALITY,
    OUT_PERFORMANCE,
    OUT_AVAILABILITY,
    OUT_OEE,
    OUT_AVG_CYCLE_TIME,
    OUT_PARTS_PER_HOUR,
    OUT_EXPECTED_PART_COUNT,
    OUT_DOWNTIME_SECONDS,
    OUT_HOURS_PER_SHIFT,
    OUT_CURRENT_SHIFT_NUMBER,
    OUT_SHIFT_START_TIME,
    OUT_SHIFT_END_TIME,
    OUT_TIME_INTO_SHIFT,
    OUT_TIME_REMAINING_IN_SHIFT,
    OUT_SHIFT_CHANGE_OCCURRED,
    OUT_SHIFT_CHANGE_IMMINENT,
    OUT_SHIFT_PROGRESS,
    OUT_PROJECTED_TOTAL_COUNT,
    OUT_REMAINING_TIME_AT_CURRENT_RATE,
    OUT_PRODUCTION_BEHIND_SCHEDULE,
    OUT_REQUIRED_RATE_TO_TARGET,
    OUT_TARGET_VS_ACTUAL_PARTS,
    OUT_PRODUCTION_PROGRESS,
    OUT_SYSTEM_STATUS,
    OUT_IS_RUNNING,
    OUT_CALCULATION_VALID,
    OUT_DATA_QUALITY_SCORE,
    OUT_LAST_UPDATE_TIME,
    OUT_DOWNTIME_FORMATTED,
    OUT_TOTAL_RUNTIME_FORMATTED,
    *(trend_path(m) for m in TRACKED_METRICS),
    *(statistic_path(k, m) for m in TRACKED_METRICS for k in ("Min", "Max", "Avg")),
    *(target_delta_path(m) for m in TRACKED_METRICS),
)

ALL_PATHS = INPUT_PATHS + CONFIGURATION_PATHS + OUTPUT_PATHS
