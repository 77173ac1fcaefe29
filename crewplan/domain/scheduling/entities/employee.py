"""Employee entity."""

from datetime import date

from pydantic import Field, model_validator

from ...shared.base import Entity
from ..value_objects.enums import Division, EmployeeType
from ..value_objects.thresholds import STANDARD_WEEKLY_HOURS


class Employee(Entity):
    """
    Employee entity representing a schedulable field worker.

    Availability is an inclusive window; an open end means available
    indefinitely.
    """

    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    division: Division
    employee_type: EmployeeType
    max_hours_per_week: float = Field(default=STANDARD_WEEKLY_HOURS, gt=0, le=168)
    availability_start: date
    availability_end: date | None = None
    is_active: bool = Field(default=True)
    skills: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_availability_window(self) -> "Employee":
        if self.availability_end and self.availability_end < self.availability_start:
            raise ValueError("Availability end must not precede availability start")
        return self

    def is_valid(self) -> bool:
        return bool(self.first_name) and bool(self.last_name)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def is_available_on(self, day: date) -> bool:
        """Whether the availability window covers ``day``."""
        if day < self.availability_start:
            return False
        return self.availability_end is None or day <= self.availability_end

    def is_available_between(self, start: date, end: date) -> bool:
        """Whether the availability window overlaps ``[start, end]``."""
        if self.availability_start > end:
            return False
        return self.availability_end is None or self.availability_end >= start

    def is_schedulable_on(self, day: date) -> bool:
        return self.is_active and self.is_available_on(day)
