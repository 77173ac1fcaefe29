"""
Capacity Model Service

Compares labor supply (employee weekly limits) with demand (phase labor
hours prorated by overlap) for a division over a window.
"""

from datetime import date
from uuid import UUID

from crewplan.core.observability import get_logger, monitor_performance

from ...shared.base import DomainService
from ...shared.exceptions import ValidationError
from ..entities.assignment import Assignment
from ..entities.phase import Phase
from ..repositories.assignment_repository import AssignmentRepository
from ..repositories.employee_repository import EmployeeRepository
from ..repositories.phase_repository import PhaseRepository
from ..repositories.project_repository import ProjectRepository
from ..value_objects.calendar import DateWindow, month_windows, week_windows
from ..value_objects.capacity import (
    CapacityForecast,
    DailyCapacityCheck,
    DivisionCapacity,
    EmployeeCounts,
    utilization_status,
)
from ..value_objects.enums import (
    Division,
    EmployeeType,
    PhaseStatus,
    UtilizationStatus,
)
from ..value_objects.thresholds import DEFAULT_THRESHOLDS, SchedulingThresholds

logger = get_logger(__name__)

_NON_DEMAND_STATUSES = {PhaseStatus.COMPLETED, PhaseStatus.BLOCKED}


class CapacityModel(DomainService):
    """
    Service computing division capacity, forecasts and daily headroom.

    Missing data yields zero metrics rather than errors.
    """

    def __init__(
        self,
        employee_repository: EmployeeRepository,
        phase_repository: PhaseRepository,
        project_repository: ProjectRepository,
        assignment_repository: AssignmentRepository,
        thresholds: SchedulingThresholds = DEFAULT_THRESHOLDS,
    ) -> None:
        self._employee_repository = employee_repository
        self._phase_repository = phase_repository
        self._project_repository = project_repository
        self._assignment_repository = assignment_repository
        self._thresholds = thresholds

    @monitor_performance("division_capacity")
    async def compute_division_capacity(
        self, start: date, end: date, division: Division
    ) -> DivisionCapacity:
        """
        Compute capacity of ``division`` over the inclusive window.

        Args:
            start: First day of the window
            end: Last day of the window
            division: Division to evaluate

        Returns:
            Available, required and assigned hours with headcount

        Raises:
            ValidationError: If ``end`` precedes ``start``
        """
        window = self._window(start, end)

        employees = [
            employee
            for employee in await self._employee_repository.get_by_division(division)
            if employee.is_available_between(start, end)
        ]
        available = sum(employee.max_hours_per_week * window.weeks for employee in employees)

        phases = [
            phase
            for phase in await self._phase_repository.get_by_division_in_range(
                division, start, end
            )
            if phase.status not in _NON_DEMAND_STATUSES
        ]
        required = sum(self._prorated_hours(phase, window) for phase in phases)

        assigned = sum(
            assignment.hours_allocated
            for assignment in await self._division_assignments(division, window)
        )

        return DivisionCapacity(
            division=division,
            start_date=start,
            end_date=end,
            available_hours=available,
            required_hours=required,
            assigned_hours=assigned,
            employee_counts=EmployeeCounts.from_types(
                [employee.employee_type for employee in employees]
            ),
            project_count=len({phase.project_id for phase in phases}),
            phase_count=len(phases),
        )

    async def forecast_capacity(
        self, division: Division, start: date, end: date
    ) -> CapacityForecast:
        """Monthly capacity of a division for every month touched by the range."""
        self._window(start, end)
        periods = [
            await self.compute_division_capacity(window.start, window.end, division)
            for window in month_windows(start, end)
        ]
        return CapacityForecast(
            division=division, start_date=start, end_date=end, periods=periods
        )

    async def weekly_capacity(
        self, division: Division, start: date, end: date
    ) -> list[DivisionCapacity]:
        """Capacity per Sunday-started week touched by the range."""
        self._window(start, end)
        return [
            await self.compute_division_capacity(window.start, window.end, division)
            for window in week_windows(start, end)
        ]

    async def get_critical_periods(
        self,
        start: date,
        end: date,
        threshold_pct: float | None = None,
    ) -> list[DivisionCapacity]:
        """Monthly windows of any division at or above the utilization threshold."""
        threshold = (
            self._thresholds.critical_utilization_pct
            if threshold_pct is None
            else threshold_pct
        )
        critical: list[DivisionCapacity] = []
        for division in Division:
            forecast = await self.forecast_capacity(division, start, end)
            critical.extend(p for p in forecast.periods if p.is_critical(threshold))

        if critical:
            logger.info(
                "Critical capacity periods found",
                count=len(critical),
                threshold_pct=threshold,
            )
        return critical

    async def check_daily_capacity(
        self, division: Division, day: date, additional_hours: float = 0.0
    ) -> DailyCapacityCheck:
        """
        Compare a division's staffed hours with its scheduled hours on one day.

        Args:
            division: Division to check
            day: Day to check
            additional_hours: Hours of a proposed, not yet saved assignment
        """
        employees = await self._employee_repository.get_by_division(division)
        by_id = {employee.id: employee for employee in employees}
        present = [employee for employee in employees if employee.is_available_on(day)]
        hours_per_day = self._thresholds.standard_hours_per_day

        assignments = [
            assignment
            for assignment in await self._assignment_repository.get_in_range(day, day)
            if assignment.employee_id in by_id
        ]
        available = len(present) * hours_per_day
        scheduled = sum(a.hours_allocated for a in assignments) + additional_hours

        foremen_available = (
            sum(1 for e in present if e.employee_type == EmployeeType.FOREMAN)
            * hours_per_day
        )
        foremen_scheduled = sum(
            a.hours_allocated
            for a in assignments
            if by_id[a.employee_id].employee_type == EmployeeType.FOREMAN
        )

        return DailyCapacityCheck(
            division=division,
            day=day,
            available_hours=available,
            scheduled_hours=scheduled,
            available_employees=len(present),
            recommendations=self._recommendations(
                available,
                scheduled,
                foremen_available,
                foremen_scheduled,
            ),
        )

    def utilization_status(self, utilization_pct: float) -> UtilizationStatus:
        return utilization_status(
            utilization_pct,
            self._thresholds.critical_utilization_pct,
            self._thresholds.over_capacity_pct,
        )

    def _window(self, start: date, end: date) -> DateWindow:
        if end < start:
            raise ValidationError(
                "end_date", end.isoformat(), "End date must not precede start date"
            )
        return DateWindow(start, end)

    @staticmethod
    def _prorated_hours(phase: Phase, window: DateWindow) -> float:
        overlap = window.overlap_days(phase.start_date, phase.end_date)
        return phase.labor_hours * overlap / phase.calendar_days

    async def _division_assignments(
        self, division: Division, window: DateWindow
    ) -> list[Assignment]:
        assignments = await self._assignment_repository.get_in_range(
            window.start, window.end
        )
        if not assignments:
            return []

        phase_ids = list({assignment.phase_id for assignment in assignments})
        phases = {
            phase.id: phase
            for phase in await self._phase_repository.get_by_ids(phase_ids)
            if phase.division == division
        }
        project_ids = list({phase.project_id for phase in phases.values()})
        active_projects: set[UUID] = {
            project.id
            for project in await self._project_repository.get_by_ids(project_ids)
            if project.is_active
        }
        return [
            assignment
            for assignment in assignments
            if assignment.phase_id in phases
            and phases[assignment.phase_id].project_id in active_projects
        ]

    def _recommendations(
        self,
        available: float,
        scheduled: float,
        foremen_available: float,
        foremen_scheduled: float,
    ) -> list[str]:
        recommendations: list[str] = []
        utilization = scheduled / available * 100 if available > 0 else 0.0
        remaining = available - scheduled

        if utilization > self._thresholds.over_capacity_pct:
            recommendations.append("Division is over capacity; immediate action required")
            recommendations.append(
                "Consider hiring contractors or rescheduling non-critical work"
            )
        elif utilization >= self._thresholds.critical_utilization_pct:
            recommendations.append("Division approaching capacity limit")
            recommendations.append("Plan for overtime or additional resources")

        if foremen_available > 0 and foremen_scheduled >= foremen_available:
            recommendations.append(
                "Foreman capacity exhausted; assign a journeyman as lead "
                "or hire an additional foreman"
            )

        if remaining < 2 * self._thresholds.standard_hours_per_day:
            recommendations.append("Less than 2 person-days of capacity remaining")

        return recommendations
