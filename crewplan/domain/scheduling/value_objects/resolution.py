"""
Resolution Value Objects

Suggestions produced for a conflict and the outcome of applying one. The
machine-readable part of a suggestion is a discriminated union keyed by
``action``; every variant lists the prerequisites and side effects a
planner should review before applying it.
"""

from datetime import date
from typing import Annotated, Literal, Union
from uuid import UUID, uuid4

from pydantic import Field

from ...shared.base import ValueObject
from .enums import Division, ImpactLevel, ResolutionAction, ResolutionType


class ResolutionImplementationBase(ValueObject):
    prerequisites: list[str] = Field(default_factory=list)
    side_effects: list[str] = Field(default_factory=list)


class ReassignEmployee(ResolutionImplementationBase):
    action: Literal[ResolutionAction.REASSIGN_EMPLOYEE] = (
        ResolutionAction.REASSIGN_EMPLOYEE
    )
    assignment_id: UUID | None = None
    from_employee_id: UUID
    to_employee_id: UUID
    day: date


class RescheduleAssignment(ResolutionImplementationBase):
    action: Literal[ResolutionAction.RESCHEDULE_ASSIGNMENT] = (
        ResolutionAction.RESCHEDULE_ASSIGNMENT
    )
    employee_id: UUID
    from_date: date
    to_date: date
    phase_id: UUID | None = None


class SplitAssignment(ResolutionImplementationBase):
    action: Literal[ResolutionAction.SPLIT_ASSIGNMENT] = (
        ResolutionAction.SPLIT_ASSIGNMENT
    )
    employee_id: UUID
    day: date
    total_hours: float
    days_needed: int
    hours_per_day: float


class HireContractor(ResolutionImplementationBase):
    action: Literal[ResolutionAction.HIRE_CONTRACTOR] = ResolutionAction.HIRE_CONTRACTOR
    division: Division
    hours: float
    hourly_rate: float
    start_date: date
    end_date: date


class ReschedulePhase(ResolutionImplementationBase):
    action: Literal[ResolutionAction.RESCHEDULE_PHASE] = (
        ResolutionAction.RESCHEDULE_PHASE
    )
    phase_id: UUID
    current_start: date
    new_start: date


class ApproveOvertime(ResolutionImplementationBase):
    action: Literal[ResolutionAction.APPROVE_OVERTIME] = (
        ResolutionAction.APPROVE_OVERTIME
    )
    hours: float
    hourly_rate: float
    employee_id: UUID | None = None
    division: Division | None = None


class AssignForeman(ResolutionImplementationBase):
    action: Literal[ResolutionAction.ASSIGN_FOREMAN] = ResolutionAction.ASSIGN_FOREMAN
    phase_id: UUID
    employee_id: UUID
    start_date: date
    end_date: date


class PromoteToLead(ResolutionImplementationBase):
    action: Literal[ResolutionAction.PROMOTE_TO_LEAD] = ResolutionAction.PROMOTE_TO_LEAD
    phase_id: UUID
    employee_id: UUID | None = None


class DelayPhase(ResolutionImplementationBase):
    action: Literal[ResolutionAction.DELAY_PHASE] = ResolutionAction.DELAY_PHASE
    phase_id: UUID
    delay_days: int
    new_start: date


class IncreaseCrew(ResolutionImplementationBase):
    action: Literal[ResolutionAction.INCREASE_CREW] = ResolutionAction.INCREASE_CREW
    phase_id: UUID
    additional_crew: int
    employee_ids: list[UUID] = Field(default_factory=list)


class AdjustRequirements(ResolutionImplementationBase):
    action: Literal[ResolutionAction.ADJUST_REQUIREMENTS] = (
        ResolutionAction.ADJUST_REQUIREMENTS
    )
    phase_id: UUID
    current_crew_size: int
    suggested_crew_size: int


class ReduceHours(ResolutionImplementationBase):
    action: Literal[ResolutionAction.REDUCE_HOURS] = ResolutionAction.REDUCE_HOURS
    employee_id: UUID
    week_start: date
    week_end: date
    reduce_by: float


class SwapEmployees(ResolutionImplementationBase):
    action: Literal[ResolutionAction.SWAP_EMPLOYEES] = ResolutionAction.SWAP_EMPLOYEES
    employee_id: UUID
    replacement_id: UUID
    week_start: date
    week_end: date
    hours: float


class ReplaceEmployee(ResolutionImplementationBase):
    action: Literal[ResolutionAction.REPLACE_EMPLOYEE] = (
        ResolutionAction.REPLACE_EMPLOYEE
    )
    employee_id: UUID
    replacement_id: UUID
    phase_id: UUID
    day: date | None = None
    assignment_id: UUID | None = None


class DesignateSingleLead(ResolutionImplementationBase):
    action: Literal[ResolutionAction.DESIGNATE_SINGLE_LEAD] = (
        ResolutionAction.DESIGNATE_SINGLE_LEAD
    )
    phase_id: UUID
    day: date
    keep_assignment_id: UUID
    demote_assignment_ids: list[UUID]


class AdjustPhaseTimeline(ResolutionImplementationBase):
    action: Literal[ResolutionAction.ADJUST_PHASE_TIMELINE] = (
        ResolutionAction.ADJUST_PHASE_TIMELINE
    )
    phase_id: UUID
    dependency_id: UUID
    shift_days: int


ResolutionImplementation = Annotated[
    Union[
        ReassignEmployee,
        RescheduleAssignment,
        SplitAssignment,
        HireContractor,
        ReschedulePhase,
        ApproveOvertime,
        AssignForeman,
        PromoteToLead,
        DelayPhase,
        IncreaseCrew,
        AdjustRequirements,
        ReduceHours,
        SwapEmployees,
        ReplaceEmployee,
        DesignateSingleLead,
        AdjustPhaseTimeline,
    ],
    Field(discriminator="action"),
]


class ResolutionSuggestion(ValueObject):
    """A candidate fix for a conflict."""

    id: UUID = Field(default_factory=uuid4)
    conflict_id: UUID
    type: ResolutionType
    description: str
    impact: ImpactLevel
    confidence: int = Field(ge=0, le=100)
    auto_applicable: bool = False
    estimated_cost: float | None = Field(default=None, ge=0)
    implementation: ResolutionImplementation | None = None

    @property
    def action(self) -> ResolutionAction | None:
        return self.implementation.action if self.implementation else None

    def sort_key(self) -> tuple[int, int, bool, bool, float, str, str]:
        """Total ordering key: best suggestion first."""
        return (
            -self.confidence,
            self.impact.rank,
            not self.auto_applicable,
            self.estimated_cost is None,
            self.estimated_cost or 0.0,
            self.type.value,
            str(self.id),
        )


class ResolutionOutcome(ValueObject):
    """Result of applying a suggestion."""

    suggestion_id: UUID
    action: ResolutionAction | None = None
    success: bool
    error: str | None = None
    records_changed: int = 0
