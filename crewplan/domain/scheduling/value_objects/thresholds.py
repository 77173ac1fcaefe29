"""Scheduling thresholds and rates used by detection and resolution rules."""

from pydantic import Field

from ...shared.base import ValueObject

# Hours
MAX_DAILY_HOURS = 16.0
STANDARD_HOURS_PER_DAY = 8.0
STANDARD_WEEKLY_HOURS = 40.0
WEEKLY_HOURS_WARNING_RATIO = 0.9

# Utilization bands (percent)
CRITICAL_UTILIZATION_PCT = 90.0
OVER_CAPACITY_PCT = 100.0

# Rates (USD per hour)
CONTRACTOR_HOURLY_RATE = 75.0
OVERTIME_BASE_RATE = 60.0
OVERTIME_MULTIPLIER = 1.5
MAX_OVERTIME_HOURS = 10.0

# Windows
CONFLICT_CACHE_TTL_SECONDS = 300
CAPACITY_SCAN_WINDOW_DAYS = 7
RESCHEDULE_WINDOW_DAYS = 7
PHASE_DELAY_DAYS = 7


class SchedulingThresholds(ValueObject):
    """Bundle of the limits applied by the conflict and resolution rules."""

    max_daily_hours: float = Field(default=MAX_DAILY_HOURS, gt=0)
    standard_hours_per_day: float = Field(default=STANDARD_HOURS_PER_DAY, gt=0)
    standard_weekly_hours: float = Field(default=STANDARD_WEEKLY_HOURS, gt=0)
    weekly_hours_warning_ratio: float = Field(
        default=WEEKLY_HOURS_WARNING_RATIO, gt=0, le=1
    )
    critical_utilization_pct: float = Field(default=CRITICAL_UTILIZATION_PCT, ge=0)
    over_capacity_pct: float = Field(default=OVER_CAPACITY_PCT, ge=0)
    contractor_hourly_rate: float = Field(default=CONTRACTOR_HOURLY_RATE, ge=0)
    overtime_base_rate: float = Field(default=OVERTIME_BASE_RATE, ge=0)
    overtime_multiplier: float = Field(default=OVERTIME_MULTIPLIER, ge=1)
    max_overtime_hours: float = Field(default=MAX_OVERTIME_HOURS, ge=0)
    capacity_scan_window_days: int = Field(default=CAPACITY_SCAN_WINDOW_DAYS, ge=0)
    reschedule_window_days: int = Field(default=RESCHEDULE_WINDOW_DAYS, ge=0)
    phase_delay_days: int = Field(default=PHASE_DELAY_DAYS, ge=1)

    @property
    def overtime_hourly_rate(self) -> float:
        """Hourly cost of an overtime hour."""
        return self.overtime_base_rate * self.overtime_multiplier


DEFAULT_THRESHOLDS = SchedulingThresholds()
