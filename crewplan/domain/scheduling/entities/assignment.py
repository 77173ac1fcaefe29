"""Assignment entity linking an employee to a phase on one date."""

from datetime import date
from uuid import UUID

from pydantic import Field

from ...shared.base import Entity
from ..value_objects.enums import EmployeeType


class Assignment(Entity):
    """One employee's allocated hours on one phase for one day."""

    phase_id: UUID
    employee_id: UUID
    day: date
    hours_allocated: float = Field(gt=0, le=24)
    actual_hours_worked: float | None = Field(default=None, ge=0, le=24)
    role: EmployeeType
    is_lead: bool = False

    def is_valid(self) -> bool:
        return 0 < self.hours_allocated <= 24

    def is_within(self, start: date, end: date) -> bool:
        return start <= self.day <= end
