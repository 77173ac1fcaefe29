"""
Conflict Detection Service

Rule methods that turn schedule data into conflicts. The same rules serve
the validation of a single proposed assignment and the full sweep run by the
conflict aggregator.
"""

from collections import defaultdict
from collections.abc import Iterable, Mapping
from datetime import date
from uuid import UUID

from crewplan.core.observability import get_logger, monitor_performance

from ...shared.base import DomainService
from ...shared.exceptions import (
    EmployeeNotFoundError,
    PhaseNotFoundError,
    ValidationError,
)
from ..entities.assignment import Assignment
from ..entities.employee import Employee
from ..entities.phase import Phase
from ..repositories.assignment_repository import AssignmentRepository
from ..repositories.employee_repository import EmployeeRepository
from ..repositories.phase_repository import PhaseRepository
from ..value_objects.calendar import iter_days, week_window
from ..value_objects.capacity import DailyCapacityCheck, DivisionCapacity
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
    OvertimeDetails,
    SkillMismatchDetails,
    UnavailableDetails,
    ValidationResult,
)
from ..value_objects.enums import (
    ConflictSeverity,
    ConflictType,
    Division,
    EmployeeType,
    EntityType,
)
from ..value_objects.thresholds import DEFAULT_THRESHOLDS, SchedulingThresholds
from .capacity_model import CapacityModel

logger = get_logger(__name__)

MAX_ASSIGNMENT_HOURS = 24.0


class ConflictDetector(DomainService):
    """
    Service detecting scheduling conflicts.

    Rule methods are pure functions of the records passed in; the async
    methods load those records from the repositories.
    """

    def __init__(
        self,
        phase_repository: PhaseRepository,
        employee_repository: EmployeeRepository,
        assignment_repository: AssignmentRepository,
        capacity_model: CapacityModel,
        thresholds: SchedulingThresholds = DEFAULT_THRESHOLDS,
    ) -> None:
        self._phase_repository = phase_repository
        self._employee_repository = employee_repository
        self._assignment_repository = assignment_repository
        self._capacity_model = capacity_model
        self._thresholds = thresholds

    # Employee rules

    def check_double_booking(
        self,
        employee: Employee,
        day: date,
        existing: list[Assignment],
        proposed_hours: float = 0.0,
        phase_id: UUID | None = None,
    ) -> Conflict | None:
        """Flag a day whose total allocated hours exceed the daily limit."""
        existing_hours = sum(a.hours_allocated for a in existing if a.day == day)
        total = existing_hours + proposed_hours
        if total <= self._thresholds.max_daily_hours:
            return None

        assignment_ids = [a.id for a in existing if a.day == day]
        return Conflict(
            severity=ConflictSeverity.CRITICAL,
            description=(
                f"{employee.full_name} would work {total:g} hours on "
                f"{day.isoformat()} (limit {self._thresholds.max_daily_hours:g})"
            ),
            entity_type=EntityType.EMPLOYEE,
            entity_id=employee.id,
            related_entity_ids=assignment_ids,
            details=DoubleBookingDetails(
                employee_id=employee.id,
                day=day,
                existing_hours=existing_hours,
                proposed_hours=proposed_hours,
                total_hours=total,
                max_hours=self._thresholds.max_daily_hours,
                phase_id=phase_id,
                assignment_ids=assignment_ids,
            ),
        )

    def check_weekly_hours(
        self,
        employee: Employee,
        day: date,
        week_assignments: list[Assignment],
        proposed_hours: float = 0.0,
        phase_id: UUID | None = None,
    ) -> list[Conflict]:
        """
        Compare the hours of the Sunday-to-Saturday week containing ``day``
        with the employee's weekly maximum and the standard week.
        """
        week = week_window(day)
        current = sum(a.hours_allocated for a in week_assignments if week.contains(a.day))
        total = current + proposed_hours

        if total > employee.max_hours_per_week:
            return [
                Conflict(
                    severity=ConflictSeverity.MEDIUM,
                    description=(
                        f"{employee.full_name} would work {total:g} hours in the week "
                        f"of {week.start.isoformat()} "
                        f"(max {employee.max_hours_per_week:g})"
                    ),
                    entity_type=EntityType.EMPLOYEE,
                    entity_id=employee.id,
                    related_entity_ids=[phase_id] if phase_id else [],
                    details=HoursExceededDetails(
                        employee_id=employee.id,
                        week_start=week.start,
                        week_end=week.end,
                        current_hours=current,
                        proposed_hours=proposed_hours,
                        total_hours=total,
                        max_hours=employee.max_hours_per_week,
                        phase_id=phase_id,
                    ),
                )
            ]

        if total > self._thresholds.standard_weekly_hours:
            return [
                Conflict(
                    severity=ConflictSeverity.LOW,
                    description=(
                        f"{employee.full_name} accrues "
                        f"{total - self._thresholds.standard_weekly_hours:g} overtime "
                        f"hours in the week of {week.start.isoformat()}"
                    ),
                    entity_type=EntityType.EMPLOYEE,
                    entity_id=employee.id,
                    details=OvertimeDetails(
                        employee_id=employee.id,
                        week_start=week.start,
                        total_hours=total,
                        standard_hours=self._thresholds.standard_weekly_hours,
                    ),
                )
            ]

        return []

    def check_division(
        self, employee: Employee, phase: Phase, day: date | None = None
    ) -> Conflict | None:
        """Flag an employee whose division's base category differs from the phase's."""
        if employee.division.is_compatible_with(phase.division):
            return None
        return Conflict(
            severity=ConflictSeverity.LOW,
            description=(
                f"{employee.full_name} ({employee.division.value}) is outside the "
                f"{phase.division.base_category.value} trade of phase {phase.name}"
            ),
            entity_type=EntityType.EMPLOYEE,
            entity_id=employee.id,
            related_entity_ids=[phase.id],
            details=DivisionMismatchDetails(
                employee_id=employee.id,
                phase_id=phase.id,
                employee_division=employee.division,
                phase_division=phase.division,
                day=day,
            ),
        )

    def check_availability(
        self, employee: Employee, day: date, phase_id: UUID | None = None
    ) -> Conflict | None:
        if employee.is_available_on(day):
            return None
        return Conflict(
            severity=ConflictSeverity.CRITICAL,
            description=f"{employee.full_name} is not available on {day.isoformat()}",
            entity_type=EntityType.EMPLOYEE,
            entity_id=employee.id,
            related_entity_ids=[phase_id] if phase_id else [],
            details=UnavailableDetails(
                employee_id=employee.id,
                day=day,
                availability_start=employee.availability_start,
                availability_end=employee.availability_end,
                phase_id=phase_id,
            ),
        )

    # Phase rules

    def check_foreman(self, phase: Phase, assignments: list[Assignment]) -> Conflict | None:
        """Flag a phase requiring a foreman that has no foreman lead assigned."""
        if not phase.crew.required_foreman:
            return None
        has_lead = any(
            a.role == EmployeeType.FOREMAN
            and a.is_lead
            and a.is_within(phase.start_date, phase.end_date)
            for a in assignments
        )
        if has_lead:
            return None
        return Conflict(
            severity=ConflictSeverity.HIGH,
            description=f"Phase {phase.name} requires a foreman lead but has none",
            entity_type=EntityType.PHASE,
            entity_id=phase.id,
            details=MissingForemanDetails(
                phase_id=phase.id,
                division=phase.division,
                start_date=phase.start_date,
                end_date=phase.end_date,
            ),
        )

    def check_crew_size(
        self, phase: Phase, assignments: list[Assignment]
    ) -> Conflict | None:
        required = phase.required_crew_size
        assigned = len({a.employee_id for a in assignments})
        if assigned >= required:
            return None
        return Conflict(
            severity=ConflictSeverity.MEDIUM,
            description=(
                f"Phase {phase.name} has {assigned} of {required} required crew members"
            ),
            entity_type=EntityType.PHASE,
            entity_id=phase.id,
            details=InsufficientCrewDetails(
                phase_id=phase.id,
                division=phase.division,
                required_crew_size=required,
                assigned_crew_size=assigned,
            ),
        )

    def check_multiple_leads(
        self, phase: Phase, assignments: list[Assignment]
    ) -> list[Conflict]:
        leads: dict[date, list[UUID]] = defaultdict(list)
        for assignment in assignments:
            if assignment.is_lead:
                leads[assignment.day].append(assignment.id)

        return [
            Conflict(
                severity=ConflictSeverity.MEDIUM,
                description=(
                    f"Phase {phase.name} has {len(ids)} leads on {day.isoformat()}"
                ),
                entity_type=EntityType.PHASE,
                entity_id=phase.id,
                related_entity_ids=ids,
                details=MultipleLeadsDetails(
                    phase_id=phase.id, day=day, lead_assignment_ids=ids
                ),
            )
            for day, ids in sorted(leads.items())
            if len(ids) > 1
        ]

    def check_skill_mismatch(
        self,
        phase: Phase,
        assignments: list[Assignment],
        employees: Mapping[UUID, Employee],
    ) -> list[Conflict]:
        """Flag assignments whose role differs from the employee's type."""
        conflicts = []
        for assignment in assignments:
            employee = employees.get(assignment.employee_id)
            if employee is None or employee.employee_type == assignment.role:
                continue
            conflicts.append(
                Conflict(
                    severity=ConflictSeverity.MEDIUM,
                    description=(
                        f"{employee.full_name} is a {employee.employee_type.value} "
                        f"assigned as {assignment.role.value} on phase {phase.name}"
                    ),
                    entity_type=EntityType.ASSIGNMENT,
                    entity_id=assignment.id,
                    related_entity_ids=[employee.id, phase.id],
                    details=SkillMismatchDetails(
                        assignment_id=assignment.id,
                        employee_id=employee.id,
                        phase_id=phase.id,
                        employee_type=employee.employee_type,
                        assigned_role=assignment.role,
                    ),
                )
            )
        return conflicts

    def check_overlapping_phases(
        self, phase: Phase, dependencies: Iterable[Phase]
    ) -> list[Conflict]:
        """Flag dependencies that have not finished before the phase starts."""
        return [
            Conflict(
                severity=ConflictSeverity.MEDIUM,
                description=(
                    f"Phase {phase.name} starts {phase.start_date.isoformat()} before "
                    f"dependency {dependency.name} ends {dependency.end_date.isoformat()}"
                ),
                entity_type=EntityType.PHASE,
                entity_id=phase.id,
                related_entity_ids=[dependency.id],
                details=OverlappingPhasesDetails(
                    phase_id=phase.id,
                    dependency_id=dependency.id,
                    phase_start=phase.start_date,
                    dependency_end=dependency.end_date,
                ),
            )
            for dependency in dependencies
            if phase.start_date <= dependency.end_date
        ]

    # Division rules

    def check_capacity(
        self, capacity: DivisionCapacity | DailyCapacityCheck
    ) -> Conflict | None:
        """Flag a division whose utilization exceeds the over-capacity threshold."""
        if capacity.utilization_pct <= self._thresholds.over_capacity_pct:
            return None

        if isinstance(capacity, DailyCapacityCheck):
            start = end = capacity.day
            required = capacity.scheduled_hours
        else:
            start, end = capacity.start_date, capacity.end_date
            required = capacity.required_hours

        return Conflict(
            severity=ConflictSeverity.HIGH,
            description=(
                f"{capacity.division.value} is at {capacity.utilization_pct:.1f}% "
                f"capacity for {start.isoformat()}..{end.isoformat()}"
            ),
            entity_type=EntityType.DIVISION,
            entity_id=capacity.division,
            details=OverCapacityDetails(
                division=capacity.division,
                start_date=start,
                end_date=end,
                available_hours=capacity.available_hours,
                required_hours=required,
                utilization_pct=capacity.utilization_pct,
            ),
        )

    # Repository-backed checks

    @monitor_performance("validate_assignment")
    async def validate_assignment(
        self, phase_id: UUID, employee_id: UUID, day: date, hours: float
    ) -> ValidationResult:
        """
        Validate a proposed assignment before it is saved.

        Args:
            phase_id: Phase to staff
            employee_id: Employee to assign
            day: Work date
            hours: Proposed hours

        Returns:
            Conflicts and advisory warnings; invalid iff a conflict is
            HIGH or CRITICAL

        Raises:
            ValidationError: If hours are not within (0, 24]
            PhaseNotFoundError: If the phase does not exist
            EmployeeNotFoundError: If the employee does not exist
        """
        if hours <= 0 or hours > MAX_ASSIGNMENT_HOURS:
            raise ValidationError(
                "hours", hours, "Hours must be greater than 0 and at most 24"
            )

        phase = await self._phase_repository.get_by_id(phase_id)
        if phase is None:
            raise PhaseNotFoundError(phase_id)
        employee = await self._employee_repository.get_by_id(employee_id)
        if employee is None:
            raise EmployeeNotFoundError(employee_id)

        week = week_window(day)
        week_assignments = await self._assignment_repository.get_by_employee_in_range(
            employee.id, week.start, week.end
        )

        conflicts: list[Conflict] = []
        warnings: list[str] = []

        double_booking = self.check_double_booking(
            employee, day, week_assignments, hours, phase.id
        )
        if double_booking:
            conflicts.append(double_booking)

        weekly = self.check_weekly_hours(
            employee, day, week_assignments, hours, phase.id
        )
        conflicts.extend(weekly)
        weekly_total = hours + sum(a.hours_allocated for a in week_assignments)
        limit = employee.max_hours_per_week
        if weekly_total > limit * self._thresholds.weekly_hours_warning_ratio:
            warnings.append(
                f"Employee approaching weekly hour limit ({weekly_total:g}/{limit:g})"
            )
        for conflict in weekly:
            if conflict.type == ConflictType.OVERTIME:
                warnings.append(
                    f"Assignment results in {conflict.details.overtime_hours:g} "
                    f"overtime hours this week"
                )

        mismatch = self.check_division(employee, phase, day)
        if mismatch:
            conflicts.append(mismatch)
            warnings.append(
                f"Employee division {employee.division.value} differs from phase "
                f"division {phase.division.value}"
            )

        unavailable = self.check_availability(employee, day, phase.id)
        if unavailable:
            conflicts.append(unavailable)

        daily = await self._capacity_model.check_daily_capacity(
            phase.division, day, additional_hours=hours
        )
        over_capacity = self.check_capacity(daily)
        if over_capacity:
            conflicts.append(over_capacity)
        elif daily.utilization_pct >= self._thresholds.critical_utilization_pct:
            warnings.append(
                f"Division {phase.division.value} at "
                f"{daily.utilization_pct:.1f}% capacity on {day.isoformat()}"
            )

        result = ValidationResult(conflicts=conflicts, warnings=warnings)
        logger.debug(
            "Assignment validated",
            phase_id=str(phase_id),
            employee_id=str(employee_id),
            day=day.isoformat(),
            conflicts=len(conflicts),
            is_valid=result.is_valid,
        )
        return result

    async def phase_conflicts(self, phase: Phase) -> list[Conflict]:
        """Staffing and sequencing conflicts of one phase."""
        assignments = await self._assignment_repository.get_by_phase(phase.id)

        conflicts: list[Conflict] = []
        for conflict in (
            self.check_foreman(phase, assignments),
            self.check_crew_size(phase, assignments),
        ):
            if conflict:
                conflicts.append(conflict)
        conflicts.extend(self.check_multiple_leads(phase, assignments))

        employees: dict[UUID, Employee] = {}
        for employee_id in dict.fromkeys(a.employee_id for a in assignments):
            employee = await self._employee_repository.get_by_id(employee_id)
            if employee is not None:
                employees[employee_id] = employee
        conflicts.extend(self.check_skill_mismatch(phase, assignments, employees))

        if phase.dependency_ids:
            dependencies = await self._phase_repository.get_by_ids(phase.dependency_ids)
            conflicts.extend(self.check_overlapping_phases(phase, dependencies))

        return conflicts

    async def employee_conflicts(
        self, employee: Employee, start: date, end: date
    ) -> list[Conflict]:
        """Daily and weekly hour conflicts of one employee within a window."""
        first_week = week_window(start)
        last_week = week_window(end)
        assignments = await self._assignment_repository.get_by_employee_in_range(
            employee.id, first_week.start, last_week.end
        )

        conflicts: list[Conflict] = []
        for day in sorted({a.day for a in assignments if start <= a.day <= end}):
            conflict = self.check_double_booking(employee, day, assignments)
            if conflict:
                conflicts.append(conflict)

        seen_weeks: set[date] = set()
        for assignment in sorted(assignments, key=lambda a: a.day):
            week = week_window(assignment.day)
            if week.start in seen_weeks:
                continue
            seen_weeks.add(week.start)
            conflicts.extend(
                self.check_weekly_hours(employee, assignment.day, assignments)
            )

        return conflicts

    async def division_conflicts(
        self, division: Division, start: date, end: date
    ) -> list[Conflict]:
        """Daily over-capacity conflicts of a division within a window."""
        conflicts: list[Conflict] = []
        for day in iter_days(start, end):
            daily = await self._capacity_model.check_daily_capacity(division, day)
            conflict = self.check_capacity(daily)
            if conflict:
                conflicts.append(conflict)
        return conflicts
