"""
Crew Availability Service

Searches for staff and dates that can absorb work moved off a conflict:
alternate employees with spare hours, conflict-free dates, foremen ranked by
free days and employees with spare weekly capacity.
"""

from datetime import date
from uuid import UUID

from ...shared.base import DomainService
from ..entities.employee import Employee
from ..entities.phase import Phase
from ..repositories.assignment_repository import AssignmentRepository
from ..repositories.employee_repository import EmployeeRepository
from ..value_objects.calendar import DateWindow, business_days
from ..value_objects.enums import EmployeeType
from ..value_objects.thresholds import DEFAULT_THRESHOLDS, SchedulingThresholds


def _name_key(employee: Employee) -> tuple[str, str, str]:
    return (employee.last_name, employee.first_name, str(employee.id))


class CrewAvailabilityService(DomainService):
    """Finds substitute employees and dates for resolution suggestions."""

    def __init__(
        self,
        employee_repository: EmployeeRepository,
        assignment_repository: AssignmentRepository,
        thresholds: SchedulingThresholds = DEFAULT_THRESHOLDS,
    ) -> None:
        self._employee_repository = employee_repository
        self._assignment_repository = assignment_repository
        self._thresholds = thresholds

    async def hours_on(self, employee_id: UUID, day: date) -> float:
        assignments = await self._assignment_repository.get_by_employee_in_range(
            employee_id, day, day
        )
        return sum(a.hours_allocated for a in assignments)

    async def hours_between(self, employee_id: UUID, start: date, end: date) -> float:
        assignments = await self._assignment_repository.get_by_employee_in_range(
            employee_id, start, end
        )
        return sum(a.hours_allocated for a in assignments)

    async def find_alternate_employees(
        self,
        phase: Phase,
        day: date,
        employee_type: EmployeeType,
        hours_needed: float,
        exclude: set[UUID] | None = None,
    ) -> list[tuple[Employee, float]]:
        """
        Employees of the phase's division and the given type with spare hours.

        Spare hours are the standard day minus hours already assigned that
        day; a candidate needs at least ``hours_needed`` spare.

        Returns:
            ``(employee, spare_hours)`` pairs, most spare hours first
        """
        exclude = exclude or set()
        candidates = await self._employee_repository.get_by_division(
            phase.division, employee_type
        )
        ranked: list[tuple[Employee, float]] = []
        for employee in candidates:
            if employee.id in exclude or not employee.is_schedulable_on(day):
                continue
            spare = self._thresholds.standard_hours_per_day - await self.hours_on(
                employee.id, day
            )
            if spare > 0 and spare >= hours_needed:
                ranked.append((employee, spare))

        ranked.sort(key=lambda pair: (-pair[1], _name_key(pair[0])))
        return ranked

    async def find_alternate_dates(
        self,
        employee: Employee,
        phase: Phase,
        hours: float,
        exclude_day: date | None = None,
    ) -> list[date]:
        """Business days in the phase range where ``hours`` fit the daily limit."""
        dates = []
        for day in business_days(phase.start_date, phase.end_date):
            if day == exclude_day or not employee.is_schedulable_on(day):
                continue
            if await self.hours_on(employee.id, day) + hours <= self._thresholds.max_daily_hours:
                dates.append(day)
        return dates

    async def rank_foremen(self, phase: Phase) -> list[tuple[Employee, float]]:
        """
        Foremen of the phase's division ranked by availability over its window.

        Availability is ``(window_days - assigned_days) / window_days`` where
        assigned days are distinct days with any assignment.
        """
        window = DateWindow(phase.start_date, phase.end_date)
        foremen = await self._employee_repository.get_by_division(
            phase.division, EmployeeType.FOREMAN
        )
        ranked: list[tuple[Employee, float]] = []
        for foreman in foremen:
            if not foreman.is_available_between(window.start, window.end):
                continue
            assignments = await self._assignment_repository.get_by_employee_in_range(
                foreman.id, window.start, window.end
            )
            busy_days = len({a.day for a in assignments})
            score = (window.days - busy_days) / window.days
            if score > 0:
                ranked.append((foreman, score))

        ranked.sort(key=lambda pair: (-pair[1], _name_key(pair[0])))
        return ranked

    async def lead_candidates(self, phase: Phase) -> list[Employee]:
        """Journeymen of the phase's division who could act as lead."""
        journeymen = await self._employee_repository.get_by_division(
            phase.division, EmployeeType.JOURNEYMAN
        )
        return sorted(
            (
                j
                for j in journeymen
                if j.is_available_between(phase.start_date, phase.end_date)
            ),
            key=_name_key,
        )

    async def crew_candidates(
        self, phase: Phase, count: int, exclude: set[UUID]
    ) -> list[Employee]:
        """Up to ``count`` division employees not yet on the phase, least busy first."""
        employees = await self._employee_repository.get_by_division(phase.division)
        scored: list[tuple[float, Employee]] = []
        for employee in employees:
            if employee.id in exclude:
                continue
            if not employee.is_available_between(phase.start_date, phase.end_date):
                continue
            busy = await self.hours_between(employee.id, phase.start_date, phase.end_date)
            scored.append((busy, employee))

        scored.sort(key=lambda pair: (pair[0], _name_key(pair[1])))
        return [employee for _, employee in scored[:count]]

    async def find_swap_candidate(
        self, employee: Employee, window: DateWindow, hours_needed: float
    ) -> Employee | None:
        """Same division and type employee able to absorb ``hours_needed`` that week."""
        candidates = await self._employee_repository.get_by_division(
            employee.division, employee.employee_type
        )
        eligible: list[tuple[float, Employee]] = []
        for candidate in candidates:
            if candidate.id == employee.id:
                continue
            if not candidate.is_available_between(window.start, window.end):
                continue
            spare = candidate.max_hours_per_week - await self.hours_between(
                candidate.id, window.start, window.end
            )
            if spare >= hours_needed:
                eligible.append((spare, candidate))

        if not eligible:
            return None
        eligible.sort(key=lambda pair: (-pair[0], _name_key(pair[1])))
        return eligible[0][1]

    async def find_replacement(
        self,
        employee: Employee,
        phase: Phase,
        day: date | None,
        employee_type: EmployeeType | None = None,
    ) -> Employee | None:
        """
        Employee of the phase's division matching the required type who is
        available on ``day`` (or across the phase when no day is given).
        """
        wanted = employee_type or employee.employee_type
        candidates = await self._employee_repository.get_by_division(
            phase.division, wanted
        )
        for candidate in sorted(candidates, key=_name_key):
            if candidate.id == employee.id:
                continue
            if day is None:
                if candidate.is_available_between(phase.start_date, phase.end_date):
                    return candidate
                continue
            if not candidate.is_schedulable_on(day):
                continue
            if await self.hours_on(candidate.id, day) < self._thresholds.standard_hours_per_day:
                return candidate
        return None
