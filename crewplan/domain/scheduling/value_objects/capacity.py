"""
Capacity Value Objects

Snapshots of labor supply and demand for a division over a window.
"""

from datetime import date

from pydantic import Field, computed_field

from ...shared.base import ValueObject
from .enums import Division, EmployeeType, UtilizationStatus
from .thresholds import CRITICAL_UTILIZATION_PCT, OVER_CAPACITY_PCT


def utilization_status(
    utilization_pct: float,
    warning_pct: float = CRITICAL_UTILIZATION_PCT,
    critical_pct: float = OVER_CAPACITY_PCT,
) -> UtilizationStatus:
    """Band a utilization percentage."""
    if utilization_pct > critical_pct:
        return UtilizationStatus.CRITICAL
    if utilization_pct >= warning_pct:
        return UtilizationStatus.WARNING
    return UtilizationStatus.OK


class EmployeeCounts(ValueObject):
    """Headcount by employee type."""

    foreman: int = 0
    journeyman: int = 0
    apprentice: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total(self) -> int:
        return self.foreman + self.journeyman + self.apprentice

    @classmethod
    def from_types(cls, types: list[EmployeeType]) -> "EmployeeCounts":
        return cls(
            foreman=types.count(EmployeeType.FOREMAN),
            journeyman=types.count(EmployeeType.JOURNEYMAN),
            apprentice=types.count(EmployeeType.APPRENTICE),
        )


class DivisionCapacity(ValueObject):
    """Capacity of one division over an inclusive date window."""

    division: Division
    start_date: date
    end_date: date
    available_hours: float = Field(ge=0)
    required_hours: float = Field(ge=0)
    assigned_hours: float = Field(ge=0)
    employee_counts: EmployeeCounts = Field(default_factory=EmployeeCounts)
    project_count: int = 0
    phase_count: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def utilization_pct(self) -> float:
        if self.available_hours <= 0:
            return 0.0
        return self.required_hours / self.available_hours * 100

    @computed_field  # type: ignore[prop-decorator]
    @property
    def deficit(self) -> float:
        return max(0.0, self.required_hours - self.available_hours)

    @property
    def status(self) -> UtilizationStatus:
        return utilization_status(self.utilization_pct)

    def is_critical(self, threshold_pct: float = CRITICAL_UTILIZATION_PCT) -> bool:
        return self.utilization_pct >= threshold_pct

    def is_over_capacity(self, threshold_pct: float = OVER_CAPACITY_PCT) -> bool:
        return self.utilization_pct > threshold_pct


class CapacityForecast(ValueObject):
    """Per-period capacity of a division across a range."""

    division: Division
    start_date: date
    end_date: date
    periods: list[DivisionCapacity] = Field(default_factory=list)

    @property
    def peak_utilization_pct(self) -> float:
        return max((period.utilization_pct for period in self.periods), default=0.0)

    @property
    def total_deficit(self) -> float:
        return sum(period.deficit for period in self.periods)

    @property
    def deficit_periods(self) -> list[DivisionCapacity]:
        return [period for period in self.periods if period.deficit > 0]


class DailyCapacityCheck(ValueObject):
    """Capacity of a division on a single day, with advisory recommendations."""

    division: Division
    day: date
    available_hours: float
    scheduled_hours: float
    available_employees: int
    recommendations: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def utilization_pct(self) -> float:
        if self.available_hours <= 0:
            return 0.0
        return self.scheduled_hours / self.available_hours * 100

    @computed_field  # type: ignore[prop-decorator]
    @property
    def remaining_hours(self) -> float:
        return max(0.0, self.available_hours - self.scheduled_hours)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_capacity(self) -> bool:
        return self.scheduled_hours <= self.available_hours

    @property
    def deficit(self) -> float:
        return max(0.0, self.scheduled_hours - self.available_hours)

    @property
    def status(self) -> UtilizationStatus:
        return utilization_status(self.utilization_pct)
