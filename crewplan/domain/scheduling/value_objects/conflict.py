"""
Conflict Value Objects

A conflict is the result of a detection rule. Each conflict type carries its
own strongly typed payload; the payloads form a discriminated union keyed by
``kind`` and the conflict type is read from the payload.
"""

from datetime import date, datetime
from typing import Annotated, Literal, Union
from uuid import UUID, uuid4

from pydantic import Field, computed_field

from ...shared.base import ValueObject, utc_now
from .enums import (
    ConflictSeverity,
    ConflictType,
    Division,
    EmployeeType,
    EntityType,
)


class DoubleBookingDetails(ValueObject):
    kind: Literal[ConflictType.DOUBLE_BOOKING] = ConflictType.DOUBLE_BOOKING
    employee_id: UUID
    day: date
    existing_hours: float
    proposed_hours: float = 0.0
    total_hours: float
    max_hours: float
    phase_id: UUID | None = None
    assignment_ids: list[UUID] = Field(default_factory=list)


class HoursExceededDetails(ValueObject):
    kind: Literal[ConflictType.HOURS_EXCEEDED] = ConflictType.HOURS_EXCEEDED
    employee_id: UUID
    week_start: date
    week_end: date
    current_hours: float
    proposed_hours: float = 0.0
    total_hours: float
    max_hours: float
    phase_id: UUID | None = None

    @property
    def excess_hours(self) -> float:
        return max(0.0, self.total_hours - self.max_hours)


class OvertimeDetails(ValueObject):
    kind: Literal[ConflictType.OVERTIME] = ConflictType.OVERTIME
    employee_id: UUID
    week_start: date
    total_hours: float
    standard_hours: float

    @property
    def overtime_hours(self) -> float:
        return max(0.0, self.total_hours - self.standard_hours)


class DivisionMismatchDetails(ValueObject):
    kind: Literal[ConflictType.DIVISION_MISMATCH] = ConflictType.DIVISION_MISMATCH
    employee_id: UUID
    phase_id: UUID
    employee_division: Division
    phase_division: Division
    day: date | None = None


class UnavailableDetails(ValueObject):
    kind: Literal[ConflictType.UNAVAILABLE] = ConflictType.UNAVAILABLE
    employee_id: UUID
    day: date
    availability_start: date
    availability_end: date | None = None
    phase_id: UUID | None = None


class MissingForemanDetails(ValueObject):
    kind: Literal[ConflictType.MISSING_FOREMAN] = ConflictType.MISSING_FOREMAN
    phase_id: UUID
    division: Division
    start_date: date
    end_date: date


class InsufficientCrewDetails(ValueObject):
    kind: Literal[ConflictType.INSUFFICIENT_CREW] = ConflictType.INSUFFICIENT_CREW
    phase_id: UUID
    division: Division
    required_crew_size: int
    assigned_crew_size: int

    @property
    def shortfall(self) -> int:
        return max(0, self.required_crew_size - self.assigned_crew_size)


class MultipleLeadsDetails(ValueObject):
    kind: Literal[ConflictType.MULTIPLE_LEADS] = ConflictType.MULTIPLE_LEADS
    phase_id: UUID
    day: date
    lead_assignment_ids: list[UUID]


class OverCapacityDetails(ValueObject):
    kind: Literal[ConflictType.OVER_CAPACITY] = ConflictType.OVER_CAPACITY
    division: Division
    start_date: date
    end_date: date
    available_hours: float
    required_hours: float
    utilization_pct: float

    @property
    def deficit(self) -> float:
        return max(0.0, self.required_hours - self.available_hours)


class SkillMismatchDetails(ValueObject):
    kind: Literal[ConflictType.SKILL_MISMATCH] = ConflictType.SKILL_MISMATCH
    assignment_id: UUID
    employee_id: UUID
    phase_id: UUID
    employee_type: EmployeeType
    assigned_role: EmployeeType


class OverlappingPhasesDetails(ValueObject):
    kind: Literal[ConflictType.OVERLAPPING_PHASES] = ConflictType.OVERLAPPING_PHASES
    phase_id: UUID
    dependency_id: UUID
    phase_start: date
    dependency_end: date

    @property
    def overlap_days(self) -> int:
        """Days the phase must move to start after its dependency."""
        return (self.dependency_end - self.phase_start).days + 1


ConflictDetails = Annotated[
    Union[
        DoubleBookingDetails,
        HoursExceededDetails,
        OvertimeDetails,
        DivisionMismatchDetails,
        UnavailableDetails,
        MissingForemanDetails,
        InsufficientCrewDetails,
        MultipleLeadsDetails,
        OverCapacityDetails,
        SkillMismatchDetails,
        OverlappingPhasesDetails,
    ],
    Field(discriminator="kind"),
]


class Conflict(ValueObject):
    """A detected scheduling conflict."""

    id: UUID = Field(default_factory=uuid4)
    severity: ConflictSeverity
    description: str
    entity_type: EntityType
    entity_id: UUID | Division
    related_entity_ids: list[UUID] = Field(default_factory=list)
    details: ConflictDetails
    detected_at: datetime = Field(default_factory=utc_now)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def type(self) -> ConflictType:
        return self.details.kind

    @property
    def is_blocking(self) -> bool:
        return self.severity.is_blocking


class ValidationResult(ValueObject):
    """Outcome of validating a single proposed assignment."""

    conflicts: list[Conflict] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_valid(self) -> bool:
        return not any(conflict.is_blocking for conflict in self.conflicts)

    def of_type(self, conflict_type: ConflictType) -> list[Conflict]:
        return [c for c in self.conflicts if c.type == conflict_type]
