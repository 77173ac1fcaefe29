"""
Resolution Engine

Generates rule-based resolution suggestions for conflicts, ranks them
deterministically and applies the auto-applicable ones inside a unit of work.
"""

import math
from collections.abc import Awaitable, Callable
from datetime import date, timedelta
from uuid import UUID

from crewplan.core.observability import (
    RESOLUTIONS_APPLIED,
    get_logger,
    monitor_performance,
)

from ...shared.base import DomainService
from ...shared.exceptions import (
    AssignmentNotFoundError,
    EmployeeNotFoundError,
    NoCandidateError,
    PhaseNotFoundError,
    ResolutionError,
)
from ..entities.assignment import Assignment
from ..entities.employee import Employee
from ..entities.phase import Phase
from ..repositories.assignment_repository import AssignmentRepository
from ..repositories.employee_repository import EmployeeRepository
from ..repositories.phase_repository import PhaseRepository
from ..repositories.unit_of_work import UnitOfWork
from ..value_objects.calendar import DateWindow, business_days, week_window
from ..value_objects.conflict import (
    Conflict,
    DivisionMismatchDetails,
    DoubleBookingDetails,
    HoursExceededDetails,
    InsufficientCrewDetails,
    MissingForemanDetails,
    MultipleLeadsDetails,
    OverCapacityDetails,
    OverlappingPhasesDetails,
    SkillMismatchDetails,
    UnavailableDetails,
)
from ..value_objects.enums import (
    ConflictType,
    EmployeeType,
    ImpactLevel,
    PhaseStatus,
    ResolutionAction,
    ResolutionType,
)
from ..value_objects.resolution import (
    AdjustPhaseTimeline,
    AdjustRequirements,
    ApproveOvertime,
    AssignForeman,
    DelayPhase,
    DesignateSingleLead,
    HireContractor,
    IncreaseCrew,
    PromoteToLead,
    ReassignEmployee,
    ReduceHours,
    ReplaceEmployee,
    RescheduleAssignment,
    ReschedulePhase,
    ResolutionImplementation,
    ResolutionOutcome,
    ResolutionSuggestion,
    SplitAssignment,
    SwapEmployees,
)
from ..value_objects.thresholds import DEFAULT_THRESHOLDS, SchedulingThresholds
from .crew_availability import CrewAvailabilityService

logger = get_logger(__name__)


def rank_suggestions(
    suggestions: list[ResolutionSuggestion],
) -> list[ResolutionSuggestion]:
    """
    Order suggestions best first.

    Confidence descending, then impact ascending, auto-applicable first,
    cheaper costed suggestions before uncosted ones, then type and id. The
    key is total so the order never depends on input order.
    """
    return sorted(suggestions, key=lambda s: s.sort_key())


class ResolutionEngine(DomainService):
    """
    Service turning conflicts into ranked, optionally applicable fixes.

    Suggestion rules dispatch on the conflict type; application dispatches
    on the implementation's action through an explicit handler table.
    """

    def __init__(
        self,
        phase_repository: PhaseRepository,
        employee_repository: EmployeeRepository,
        assignment_repository: AssignmentRepository,
        availability: CrewAvailabilityService,
        unit_of_work: UnitOfWork,
        thresholds: SchedulingThresholds = DEFAULT_THRESHOLDS,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._phase_repository = phase_repository
        self._employee_repository = employee_repository
        self._assignment_repository = assignment_repository
        self._availability = availability
        self._unit_of_work = unit_of_work
        self._thresholds = thresholds
        self._today = today

        self._rules: dict[
            ConflictType, Callable[[Conflict], Awaitable[list[ResolutionSuggestion]]]
        ] = {
            ConflictType.DOUBLE_BOOKING: self._resolve_double_booking,
            ConflictType.OVER_CAPACITY: self._resolve_over_capacity,
            ConflictType.MISSING_FOREMAN: self._resolve_missing_foreman,
            ConflictType.INSUFFICIENT_CREW: self._resolve_insufficient_crew,
            ConflictType.HOURS_EXCEEDED: self._resolve_hours_exceeded,
            ConflictType.DIVISION_MISMATCH: self._resolve_division_mismatch,
            ConflictType.UNAVAILABLE: self._resolve_unavailable,
            ConflictType.SKILL_MISMATCH: self._resolve_skill_mismatch,
            ConflictType.MULTIPLE_LEADS: self._resolve_multiple_leads,
            ConflictType.OVERLAPPING_PHASES: self._resolve_overlapping_phases,
        }
        self._handlers: dict[
            ResolutionAction, Callable[[ResolutionImplementation], Awaitable[int]]
        ] = {
            ResolutionAction.REASSIGN_EMPLOYEE: self._apply_reassign_employee,
            ResolutionAction.ASSIGN_FOREMAN: self._apply_assign_foreman,
            ResolutionAction.INCREASE_CREW: self._apply_increase_crew,
            ResolutionAction.REDUCE_HOURS: self._apply_reduce_hours,
            ResolutionAction.SWAP_EMPLOYEES: self._apply_swap_employees,
            ResolutionAction.REPLACE_EMPLOYEE: self._apply_replace_employee,
            ResolutionAction.DESIGNATE_SINGLE_LEAD: self._apply_designate_single_lead,
        }

    @property
    def supported_actions(self) -> frozenset[ResolutionAction]:
        return frozenset(self._handlers)

    @monitor_performance("resolution_suggestions")
    async def get_resolution_suggestions(
        self, conflict: Conflict
    ) -> list[ResolutionSuggestion]:
        """
        Generate ranked suggestions for a conflict.

        Informational conflicts (OVERTIME) have no suggestions.
        """
        rule = self._rules.get(conflict.type)
        if rule is None:
            return []
        return rank_suggestions(await rule(conflict))

    rank_suggestions = staticmethod(rank_suggestions)

    async def apply_resolution(
        self, suggestion: ResolutionSuggestion
    ) -> ResolutionOutcome:
        """
        Apply an auto-applicable suggestion atomically.

        Every change a handler makes commits together; any failure rolls the
        unit of work back and is reported in the outcome instead of raised.
        """
        implementation = suggestion.implementation
        if not suggestion.auto_applicable or implementation is None:
            return ResolutionOutcome(
                suggestion_id=suggestion.id,
                action=suggestion.action,
                success=False,
                error="Suggestion is not auto-applicable",
            )

        action = implementation.action
        handler = self._handlers.get(action)
        if handler is None:
            logger.info("Unsupported auto-apply action", action=action.value)
            RESOLUTIONS_APPLIED.labels(action=action.value, status="unsupported").inc()
            return ResolutionOutcome(
                suggestion_id=suggestion.id,
                action=action,
                success=False,
                error=f"Unsupported auto-apply action: {action.value}",
            )

        try:
            async with self._unit_of_work:
                changed = await handler(implementation)
        except Exception as e:
            logger.error(
                "Failed to apply resolution",
                suggestion_id=str(suggestion.id),
                action=action.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            RESOLUTIONS_APPLIED.labels(action=action.value, status="error").inc()
            return ResolutionOutcome(
                suggestion_id=suggestion.id, action=action, success=False, error=str(e)
            )

        RESOLUTIONS_APPLIED.labels(action=action.value, status="success").inc()
        logger.info(
            "Resolution applied",
            suggestion_id=str(suggestion.id),
            action=action.value,
            records_changed=changed,
        )
        return ResolutionOutcome(
            suggestion_id=suggestion.id,
            action=action,
            success=True,
            records_changed=changed,
        )

    # Suggestion rules

    async def _resolve_double_booking(
        self, conflict: Conflict
    ) -> list[ResolutionSuggestion]:
        details: DoubleBookingDetails = conflict.details
        employee = await self._employee_repository.get_by_id(details.employee_id)
        if employee is None:
            return []

        assignment, phase, hours = await self._double_booking_target(details)
        suggestions: list[ResolutionSuggestion] = []

        if phase is not None:
            alternates = await self._availability.find_alternate_employees(
                phase, details.day, employee.employee_type, hours, exclude={employee.id}
            )
            if alternates:
                alternate, spare = alternates[0]
                suggestions.append(
                    ResolutionSuggestion(
                        conflict_id=conflict.id,
                        type=ResolutionType.ALTERNATE_EMPLOYEE,
                        description=(
                            f"Assign {alternate.full_name} instead "
                            f"({spare:g} hours free on {details.day.isoformat()})"
                        ),
                        impact=ImpactLevel.LOW,
                        confidence=90,
                        auto_applicable=assignment is not None,
                        implementation=ReassignEmployee(
                            assignment_id=assignment.id if assignment else None,
                            from_employee_id=employee.id,
                            to_employee_id=alternate.id,
                            day=details.day,
                            prerequisites=[f"Confirm {alternate.full_name} is on site"],
                            side_effects=[
                                f"{employee.full_name} loses {hours:g} hours "
                                f"on {details.day.isoformat()}"
                            ],
                        ),
                    )
                )

            dates = await self._availability.find_alternate_dates(
                employee, phase, hours, exclude_day=details.day
            )
            if dates:
                suggestions.append(
                    ResolutionSuggestion(
                        conflict_id=conflict.id,
                        type=ResolutionType.ALTERNATE_DATE,
                        description=(
                            f"Move {hours:g} hours of {phase.name} to "
                            f"{dates[0].isoformat()}"
                        ),
                        impact=ImpactLevel.MEDIUM,
                        confidence=75,
                        implementation=RescheduleAssignment(
                            employee_id=employee.id,
                            from_date=details.day,
                            to_date=dates[0],
                            phase_id=phase.id,
                            side_effects=["Phase daily staffing changes"],
                        ),
                    )
                )

        if details.total_hours > self._thresholds.standard_hours_per_day:
            days_needed = math.ceil(
                details.total_hours / self._thresholds.standard_hours_per_day
            )
            suggestions.append(
                ResolutionSuggestion(
                    conflict_id=conflict.id,
                    type=ResolutionType.SPLIT_ASSIGNMENT,
                    description=(
                        f"Split {details.total_hours:g} hours across {days_needed} days"
                    ),
                    impact=ImpactLevel.LOW,
                    confidence=85,
                    implementation=SplitAssignment(
                        employee_id=employee.id,
                        day=details.day,
                        total_hours=details.total_hours,
                        days_needed=days_needed,
                        hours_per_day=details.total_hours / days_needed,
                        prerequisites=["Work can be performed on consecutive days"],
                    ),
                )
            )

        return suggestions

    async def _double_booking_target(
        self, details: DoubleBookingDetails
    ) -> tuple[Assignment | None, Phase | None, float]:
        """Assignment, phase and hours that a fix would move off the day."""
        if details.phase_id is not None:
            phase = await self._phase_repository.get_by_id(details.phase_id)
            hours = details.proposed_hours or self._thresholds.standard_hours_per_day
            return None, phase, hours

        assignment = None
        for assignment_id in reversed(details.assignment_ids):
            assignment = await self._assignment_repository.get_by_id(assignment_id)
            if assignment is not None:
                break
        if assignment is None:
            return None, None, self._thresholds.standard_hours_per_day
        phase = await self._phase_repository.get_by_id(assignment.phase_id)
        return assignment, phase, assignment.hours_allocated

    async def _resolve_over_capacity(
        self, conflict: Conflict
    ) -> list[ResolutionSuggestion]:
        details: OverCapacityDetails = conflict.details
        deficit = details.deficit
        suggestions = [
            ResolutionSuggestion(
                conflict_id=conflict.id,
                type=ResolutionType.HIRE_CONTRACTOR,
                description=(
                    f"Hire contractors for {deficit:.0f} hours in "
                    f"{details.division.value}"
                ),
                impact=ImpactLevel.MEDIUM,
                confidence=80,
                estimated_cost=deficit * self._thresholds.contractor_hourly_rate,
                implementation=HireContractor(
                    division=details.division,
                    hours=deficit,
                    hourly_rate=self._thresholds.contractor_hourly_rate,
                    start_date=details.start_date,
                    end_date=details.end_date,
                    prerequisites=["Contractor budget approval"],
                ),
            )
        ]

        phase = await self._reschedulable_phase(details)
        if phase is not None:
            new_start = phase.start_date + timedelta(
                days=self._thresholds.reschedule_window_days
            )
            suggestions.append(
                ResolutionSuggestion(
                    conflict_id=conflict.id,
                    type=ResolutionType.RESCHEDULE_PHASE,
                    description=(
                        f"Reschedule {phase.name} to start {new_start.isoformat()}"
                    ),
                    impact=ImpactLevel.HIGH,
                    confidence=70,
                    implementation=ReschedulePhase(
                        phase_id=phase.id,
                        current_start=phase.start_date,
                        new_start=new_start,
                        side_effects=["Dependent phases may shift"],
                    ),
                )
            )

        overtime_hours = min(deficit, self._thresholds.max_overtime_hours)
        suggestions.append(
            ResolutionSuggestion(
                conflict_id=conflict.id,
                type=ResolutionType.APPROVE_OVERTIME,
                description=f"Approve {overtime_hours:g} overtime hours",
                impact=ImpactLevel.LOW,
                confidence=85,
                estimated_cost=overtime_hours * self._thresholds.overtime_hourly_rate,
                implementation=ApproveOvertime(
                    hours=overtime_hours,
                    hourly_rate=self._thresholds.overtime_hourly_rate,
                    division=details.division,
                    prerequisites=["Manager approval"],
                ),
            )
        )
        return suggestions

    async def _reschedulable_phase(self, details: OverCapacityDetails) -> Phase | None:
        """Lowest-progress phase of the division not started and starting soon."""
        today = self._today()
        horizon = today + timedelta(days=self._thresholds.reschedule_window_days)
        phases = await self._phase_repository.get_by_division_in_range(
            details.division, today, horizon
        )
        candidates = [
            phase
            for phase in phases
            if phase.status == PhaseStatus.NOT_STARTED
            and today <= phase.start_date <= horizon
        ]
        if not candidates:
            return None
        return min(
            candidates,
            key=lambda p: (p.progress_pct, p.start_date, p.phase_number, str(p.id)),
        )

    async def _resolve_missing_foreman(
        self, conflict: Conflict
    ) -> list[ResolutionSuggestion]:
        details: MissingForemanDetails = conflict.details
        phase = await self._phase_repository.get_by_id(details.phase_id)
        if phase is None:
            return []

        suggestions: list[ResolutionSuggestion] = []
        foremen = await self._availability.rank_foremen(phase)
        if foremen:
            foreman, score = foremen[0]
            suggestions.append(
                ResolutionSuggestion(
                    conflict_id=conflict.id,
                    type=ResolutionType.ASSIGN_FOREMAN,
                    description=(
                        f"Assign {foreman.full_name} as foreman "
                        f"({score:.0%} of the phase window free)"
                    ),
                    impact=ImpactLevel.LOW,
                    confidence=95,
                    auto_applicable=True,
                    implementation=AssignForeman(
                        phase_id=phase.id,
                        employee_id=foreman.id,
                        start_date=phase.start_date,
                        end_date=phase.end_date,
                    ),
                )
            )

        journeymen = await self._availability.lead_candidates(phase)
        suggestions.append(
            ResolutionSuggestion(
                conflict_id=conflict.id,
                type=ResolutionType.DESIGNATE_LEAD,
                description=(
                    f"Promote {journeymen[0].full_name} to lead"
                    if journeymen
                    else "Promote a journeyman to lead"
                ),
                impact=ImpactLevel.MEDIUM,
                confidence=70,
                implementation=PromoteToLead(
                    phase_id=phase.id,
                    employee_id=journeymen[0].id if journeymen else None,
                    prerequisites=["Journeyman holds lead qualification"],
                ),
            )
        )

        delay = self._thresholds.phase_delay_days
        suggestions.append(
            ResolutionSuggestion(
                conflict_id=conflict.id,
                type=ResolutionType.DELAY_START,
                description=f"Delay {phase.name} by {delay} days until a foreman is free",
                impact=ImpactLevel.HIGH,
                confidence=60,
                implementation=DelayPhase(
                    phase_id=phase.id,
                    delay_days=delay,
                    new_start=phase.start_date + timedelta(days=delay),
                    side_effects=["Dependent phases may shift"],
                ),
            )
        )
        return suggestions

    async def _resolve_insufficient_crew(
        self, conflict: Conflict
    ) -> list[ResolutionSuggestion]:
        details: InsufficientCrewDetails = conflict.details
        phase = await self._phase_repository.get_by_id(details.phase_id)
        if phase is None:
            return []

        assigned = {a.employee_id for a in await self._assignment_repository.get_by_phase(phase.id)}
        candidates = await self._availability.crew_candidates(
            phase, details.shortfall, exclude=assigned
        )
        return [
            ResolutionSuggestion(
                conflict_id=conflict.id,
                type=ResolutionType.INCREASE_CREW,
                description=f"Add {details.shortfall} crew members to {phase.name}",
                impact=ImpactLevel.LOW,
                confidence=90,
                auto_applicable=True,
                implementation=IncreaseCrew(
                    phase_id=phase.id,
                    additional_crew=details.shortfall,
                    employee_ids=[employee.id for employee in candidates],
                ),
            ),
            ResolutionSuggestion(
                conflict_id=conflict.id,
                type=ResolutionType.ADJUST_REQUIREMENTS,
                description=(
                    f"Lower the crew requirement of {phase.name} to "
                    f"{details.assigned_crew_size}"
                ),
                impact=ImpactLevel.MEDIUM,
                confidence=65,
                implementation=AdjustRequirements(
                    phase_id=phase.id,
                    current_crew_size=details.required_crew_size,
                    suggested_crew_size=details.assigned_crew_size,
                    side_effects=["Phase may take longer to complete"],
                ),
            ),
        ]

    async def _resolve_hours_exceeded(
        self, conflict: Conflict
    ) -> list[ResolutionSuggestion]:
        details: HoursExceededDetails = conflict.details
        excess = details.excess_hours
        suggestions = [
            ResolutionSuggestion(
                conflict_id=conflict.id,
                type=ResolutionType.ADJUST_HOURS,
                description=f"Reduce the week's hours by {excess:g}",
                impact=ImpactLevel.LOW,
                confidence=85,
                auto_applicable=True,
                implementation=ReduceHours(
                    employee_id=details.employee_id,
                    week_start=details.week_start,
                    week_end=details.week_end,
                    reduce_by=excess,
                ),
            )
        ]

        employee = await self._employee_repository.get_by_id(details.employee_id)
        if employee is not None:
            week = DateWindow(details.week_start, details.week_end)
            replacement = await self._availability.find_swap_candidate(
                employee, week, excess
            )
            if replacement is not None:
                suggestions.append(
                    ResolutionSuggestion(
                        conflict_id=conflict.id,
                        type=ResolutionType.SWAP_EMPLOYEES,
                        description=(
                            f"Move {excess:g} hours to {replacement.full_name}"
                        ),
                        impact=ImpactLevel.LOW,
                        confidence=80,
                        auto_applicable=True,
                        implementation=SwapEmployees(
                            employee_id=employee.id,
                            replacement_id=replacement.id,
                            week_start=details.week_start,
                            week_end=details.week_end,
                            hours=excess,
                        ),
                    )
                )

        suggestions.append(
            ResolutionSuggestion(
                conflict_id=conflict.id,
                type=ResolutionType.APPROVE_OVERTIME,
                description=f"Approve {excess:g} overtime hours",
                impact=ImpactLevel.MEDIUM,
                confidence=75,
                estimated_cost=excess * self._thresholds.overtime_hourly_rate,
                implementation=ApproveOvertime(
                    hours=excess,
                    hourly_rate=self._thresholds.overtime_hourly_rate,
                    employee_id=details.employee_id,
                    prerequisites=["Manager approval"],
                ),
            )
        )
        return suggestions

    async def _resolve_division_mismatch(
        self, conflict: Conflict
    ) -> list[ResolutionSuggestion]:
        details: DivisionMismatchDetails = conflict.details
        return await self._replacement_suggestions(
            conflict, details.employee_id, details.phase_id, details.day, confidence=95
        )

    async def _resolve_unavailable(
        self, conflict: Conflict
    ) -> list[ResolutionSuggestion]:
        details: UnavailableDetails = conflict.details
        if details.phase_id is None:
            return []
        return await self._replacement_suggestions(
            conflict, details.employee_id, details.phase_id, details.day, confidence=90
        )

    async def _resolve_skill_mismatch(
        self, conflict: Conflict
    ) -> list[ResolutionSuggestion]:
        details: SkillMismatchDetails = conflict.details
        assignment = await self._assignment_repository.get_by_id(details.assignment_id)
        return await self._replacement_suggestions(
            conflict,
            details.employee_id,
            details.phase_id,
            assignment.day if assignment else None,
            confidence=90,
            employee_type=details.assigned_role,
            assignment_id=details.assignment_id,
        )

    async def _replacement_suggestions(
        self,
        conflict: Conflict,
        employee_id: UUID,
        phase_id: UUID,
        day: date | None,
        confidence: int,
        employee_type: EmployeeType | None = None,
        assignment_id: UUID | None = None,
    ) -> list[ResolutionSuggestion]:
        employee = await self._employee_repository.get_by_id(employee_id)
        phase = await self._phase_repository.get_by_id(phase_id)
        if employee is None or phase is None:
            return []

        replacement = await self._availability.find_replacement(
            employee, phase, day, employee_type
        )
        if replacement is None:
            return []
        return [
            ResolutionSuggestion(
                conflict_id=conflict.id,
                type=ResolutionType.ALTERNATE_EMPLOYEE,
                description=(
                    f"Replace {employee.full_name} with {replacement.full_name} "
                    f"on {phase.name}"
                ),
                impact=ImpactLevel.LOW,
                confidence=confidence,
                auto_applicable=True,
                implementation=ReplaceEmployee(
                    employee_id=employee.id,
                    replacement_id=replacement.id,
                    phase_id=phase.id,
                    day=day,
                    assignment_id=assignment_id,
                ),
            )
        ]

    async def _resolve_multiple_leads(
        self, conflict: Conflict
    ) -> list[ResolutionSuggestion]:
        details: MultipleLeadsDetails = conflict.details
        leads = [
            assignment
            for assignment_id in details.lead_assignment_ids
            if (assignment := await self._assignment_repository.get_by_id(assignment_id))
        ]
        if len(leads) < 2:
            return []

        keep = min(
            leads,
            key=lambda a: (a.role != EmployeeType.FOREMAN, a.created_at, str(a.id)),
        )
        return [
            ResolutionSuggestion(
                conflict_id=conflict.id,
                type=ResolutionType.DESIGNATE_LEAD,
                description=f"Keep a single lead on {details.day.isoformat()}",
                impact=ImpactLevel.LOW,
                confidence=95,
                auto_applicable=True,
                implementation=DesignateSingleLead(
                    phase_id=details.phase_id,
                    day=details.day,
                    keep_assignment_id=keep.id,
                    demote_assignment_ids=[a.id for a in leads if a.id != keep.id],
                ),
            )
        ]

    async def _resolve_overlapping_phases(
        self, conflict: Conflict
    ) -> list[ResolutionSuggestion]:
        details: OverlappingPhasesDetails = conflict.details
        return [
            ResolutionSuggestion(
                conflict_id=conflict.id,
                type=ResolutionType.EXTEND_TIMELINE,
                description=(
                    f"Shift the phase {details.overlap_days} days to start after "
                    f"its dependency ends"
                ),
                impact=ImpactLevel.HIGH,
                confidence=70,
                implementation=AdjustPhaseTimeline(
                    phase_id=details.phase_id,
                    dependency_id=details.dependency_id,
                    shift_days=details.overlap_days,
                    side_effects=["Dependent phases may shift"],
                ),
            )
        ]

    # Handlers

    async def _apply_reassign_employee(self, implementation: ReassignEmployee) -> int:
        if implementation.assignment_id is None:
            raise ResolutionError("No saved assignment to reassign")
        assignment = await self._require_assignment(implementation.assignment_id)
        employee = await self._require_employee(implementation.to_employee_id)
        assignment.employee_id = employee.id
        assignment.role = employee.employee_type
        assignment.mark_updated()
        await self._assignment_repository.save(assignment)
        return 1

    async def _apply_assign_foreman(self, implementation: AssignForeman) -> int:
        phase = await self._require_phase(implementation.phase_id)
        foreman = await self._require_employee(implementation.employee_id)
        existing = await self._assignment_repository.get_by_phase(phase.id)
        staffed = {a.day for a in existing if a.employee_id == foreman.id}

        changed = 0
        for day in business_days(implementation.start_date, implementation.end_date):
            if day in staffed or not foreman.is_schedulable_on(day):
                continue
            hours = self._thresholds.standard_hours_per_day
            if not await self._has_room(foreman, day, hours):
                continue
            for other in existing:
                if other.day == day and other.is_lead:
                    other.is_lead = False
                    await self._assignment_repository.save(other)
                    changed += 1
            await self._assignment_repository.save(
                Assignment(
                    phase_id=phase.id,
                    employee_id=foreman.id,
                    day=day,
                    hours_allocated=hours,
                    role=EmployeeType.FOREMAN,
                    is_lead=True,
                )
            )
            changed += 1

        if changed == 0:
            raise NoCandidateError("assign as foreman", phase.id)
        return changed

    async def _apply_increase_crew(self, implementation: IncreaseCrew) -> int:
        phase = await self._require_phase(implementation.phase_id)
        if not implementation.employee_ids:
            raise NoCandidateError("increase the crew", phase.id)

        changed = 0
        for employee_id in implementation.employee_ids[: implementation.additional_crew]:
            employee = await self._require_employee(employee_id)
            for day in business_days(phase.start_date, phase.end_date):
                if not employee.is_schedulable_on(day):
                    continue
                hours = self._thresholds.standard_hours_per_day
                if not await self._has_room(employee, day, hours):
                    continue
                await self._assignment_repository.save(
                    Assignment(
                        phase_id=phase.id,
                        employee_id=employee.id,
                        day=day,
                        hours_allocated=hours,
                        role=employee.employee_type,
                    )
                )
                changed += 1
        return changed

    async def _apply_reduce_hours(self, implementation: ReduceHours) -> int:
        assignments = await self._assignment_repository.get_by_employee_in_range(
            implementation.employee_id, implementation.week_start, implementation.week_end
        )
        if not assignments:
            raise ResolutionError("No assignments to reduce in the week")

        remaining = implementation.reduce_by
        changed = 0
        for assignment in sorted(assignments, key=lambda a: (a.day, str(a.id)), reverse=True):
            if remaining <= 0:
                break
            if assignment.hours_allocated <= remaining:
                remaining -= assignment.hours_allocated
                await self._assignment_repository.delete(assignment.id)
            else:
                assignment.hours_allocated -= remaining
                assignment.mark_updated()
                remaining = 0
                await self._assignment_repository.save(assignment)
            changed += 1
        return changed

    async def _apply_swap_employees(self, implementation: SwapEmployees) -> int:
        replacement = await self._require_employee(implementation.replacement_id)
        assignments = await self._assignment_repository.get_by_employee_in_range(
            implementation.employee_id, implementation.week_start, implementation.week_end
        )
        if not assignments:
            raise ResolutionError("No assignments to swap in the week")

        weekly_spare = replacement.max_hours_per_week - await self._availability.hours_between(
            replacement.id, implementation.week_start, implementation.week_end
        )
        if weekly_spare < implementation.hours:
            raise ResolutionError(
                f"{replacement.full_name} has {weekly_spare:g} spare hours that week, "
                f"{implementation.hours:g} needed"
            )

        remaining = implementation.hours
        changed = 0
        for assignment in sorted(assignments, key=lambda a: (a.day, str(a.id)), reverse=True):
            if remaining <= 0:
                break
            if not replacement.is_schedulable_on(assignment.day):
                continue
            daily_spare = self._thresholds.max_daily_hours - await self._availability.hours_on(
                replacement.id, assignment.day
            )
            moved = min(assignment.hours_allocated, remaining, daily_spare)
            if moved <= 0:
                continue

            if moved < assignment.hours_allocated:
                assignment.hours_allocated -= moved
                assignment.mark_updated()
                await self._assignment_repository.save(assignment)
                await self._assignment_repository.save(
                    Assignment(
                        phase_id=assignment.phase_id,
                        employee_id=replacement.id,
                        day=assignment.day,
                        hours_allocated=moved,
                        role=replacement.employee_type,
                    )
                )
                changed += 2
            else:
                assignment.employee_id = replacement.id
                assignment.role = replacement.employee_type
                assignment.mark_updated()
                await self._assignment_repository.save(assignment)
                changed += 1
            remaining -= moved

        if remaining > 0:
            raise ResolutionError(
                f"Only {implementation.hours - remaining:g} of "
                f"{implementation.hours:g} hours fit {replacement.full_name}'s days"
            )
        return changed

    async def _apply_replace_employee(self, implementation: ReplaceEmployee) -> int:
        replacement = await self._require_employee(implementation.replacement_id)
        if implementation.assignment_id is not None:
            targets = [await self._require_assignment(implementation.assignment_id)]
        else:
            targets = [
                a
                for a in await self._assignment_repository.get_by_phase(implementation.phase_id)
                if a.employee_id == implementation.employee_id
                and (implementation.day is None or a.day == implementation.day)
            ]
        if not targets:
            raise ResolutionError("No saved assignment to replace")

        for assignment in targets:
            assignment.employee_id = replacement.id
            assignment.mark_updated()
            await self._assignment_repository.save(assignment)
        return len(targets)

    async def _apply_designate_single_lead(
        self, implementation: DesignateSingleLead
    ) -> int:
        keep = await self._require_assignment(implementation.keep_assignment_id)
        changed = 0
        if not keep.is_lead:
            keep.is_lead = True
            await self._assignment_repository.save(keep)
            changed += 1
        for assignment_id in implementation.demote_assignment_ids:
            assignment = await self._require_assignment(assignment_id)
            if assignment.is_lead:
                assignment.is_lead = False
                assignment.mark_updated()
                await self._assignment_repository.save(assignment)
                changed += 1
        return changed

    async def _has_room(self, employee: Employee, day: date, hours: float) -> bool:
        """Whether ``hours`` more keep the employee within the daily and weekly limits."""
        booked = await self._availability.hours_on(employee.id, day)
        if booked + hours > self._thresholds.max_daily_hours:
            return False
        week = week_window(day)
        weekly = await self._availability.hours_between(employee.id, week.start, week.end)
        return weekly + hours <= employee.max_hours_per_week

    async def _require_phase(self, phase_id: UUID) -> Phase:
        phase = await self._phase_repository.get_by_id(phase_id)
        if phase is None:
            raise PhaseNotFoundError(phase_id)
        return phase

    async def _require_employee(self, employee_id: UUID) -> Employee:
        employee = await self._employee_repository.get_by_id(employee_id)
        if employee is None:
            raise EmployeeNotFoundError(employee_id)
        return employee

    async def _require_assignment(self, assignment_id: UUID) -> Assignment:
        assignment = await self._assignment_repository.get_by_id(assignment_id)
        if assignment is None:
            raise AssignmentNotFoundError(assignment_id)
        return assignment
