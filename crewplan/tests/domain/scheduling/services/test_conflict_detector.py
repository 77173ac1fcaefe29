"""Tests for conflict detection rules and assignment validation."""

from datetime import date, timedelta
from uuid import uuid4

import pytest

from crewplan.domain.scheduling.value_objects.capacity import DailyCapacityCheck
from crewplan.domain.scheduling.value_objects.crew import CrewRequirement
from crewplan.domain.scheduling.value_objects.enums import (
    ConflictSeverity,
    ConflictType,
    Division,
    EmployeeType,
    EntityType,
)
from crewplan.domain.shared.exceptions import (
    EmployeeNotFoundError,
    PhaseNotFoundError,
    ValidationError,
)

from ..fixtures import (
    MONDAY,
    AssignmentFactory,
    EmployeeFactory,
    PhaseFactory,
    ProjectFactory,
    seed,
)

FRIDAY = MONDAY + timedelta(days=4)


@pytest.fixture
def project(store):
    project = ProjectFactory.create()
    seed(store, project)
    return project


@pytest.fixture
def phase(store, project):
    phase = PhaseFactory.create(project)
    seed(store, phase)
    return phase


@pytest.fixture
def employee(store):
    employee = EmployeeFactory.create()
    # spare division staff keep daily capacity well below its limit
    seed(store, employee, *EmployeeFactory.create_crew(4))
    return employee


def book_week(store, phase, employee, hours_per_day=8.0, days=4):
    """Book Monday onwards for ``days`` days."""
    seed(
        store,
        *(
            AssignmentFactory.create(phase, employee, MONDAY + timedelta(days=i), hours_per_day)
            for i in range(days)
        ),
    )


class TestValidateAssignmentDailyLimit:
    @pytest.mark.asyncio
    async def test_sixteen_hours_is_allowed(self, detector, store, phase, employee):
        seed(store, AssignmentFactory.create(phase, employee, MONDAY, 8))

        result = await detector.validate_assignment(phase.id, employee.id, MONDAY, 8)

        assert result.is_valid
        assert result.of_type(ConflictType.DOUBLE_BOOKING) == []

    @pytest.mark.asyncio
    async def test_seventeen_hours_is_double_booking(self, detector, store, phase, employee):
        existing = AssignmentFactory.create(phase, employee, MONDAY, 8)
        seed(store, existing)

        result = await detector.validate_assignment(phase.id, employee.id, MONDAY, 9)

        assert not result.is_valid
        [conflict] = result.of_type(ConflictType.DOUBLE_BOOKING)
        assert conflict.severity == ConflictSeverity.CRITICAL
        assert conflict.details.total_hours == 17
        assert conflict.details.existing_hours == 8
        assert conflict.details.assignment_ids == [existing.id]

    @pytest.mark.asyncio
    async def test_other_days_do_not_count(self, detector, store, phase, employee):
        seed(store, AssignmentFactory.create(phase, employee, MONDAY, 12))

        result = await detector.validate_assignment(
            phase.id, employee.id, MONDAY + timedelta(days=1), 12
        )

        assert result.of_type(ConflictType.DOUBLE_BOOKING) == []


class TestValidateAssignmentWeeklyHours:
    @pytest.mark.asyncio
    async def test_forty_hours_is_allowed_with_warning(self, detector, store, phase, employee):
        book_week(store, phase, employee)

        result = await detector.validate_assignment(phase.id, employee.id, FRIDAY, 8)

        assert result.is_valid
        assert result.conflicts == []
        assert any("approaching weekly hour limit" in w for w in result.warnings)

    @pytest.mark.asyncio
    async def test_forty_eight_hours_exceeds_limit(self, detector, store, phase, employee):
        book_week(store, phase, employee)

        result = await detector.validate_assignment(phase.id, employee.id, FRIDAY, 16)

        [conflict] = result.of_type(ConflictType.HOURS_EXCEEDED)
        assert conflict.severity == ConflictSeverity.MEDIUM
        assert conflict.details.total_hours == 48
        assert conflict.details.current_hours == 32
        assert conflict.details.week_start == date(2024, 3, 3)
        assert conflict.details.week_end == date(2024, 3, 9)
        assert result.is_valid

    @pytest.mark.asyncio
    async def test_overtime_under_personal_limit(self, detector, store, phase):
        employee = EmployeeFactory.create(max_hours_per_week=50)
        seed(store, employee, *EmployeeFactory.create_crew(4))
        book_week(store, phase, employee)

        result = await detector.validate_assignment(phase.id, employee.id, FRIDAY, 16)

        [conflict] = result.of_type(ConflictType.OVERTIME)
        assert conflict.severity == ConflictSeverity.LOW
        assert conflict.details.overtime_hours == 8
        assert any("8 overtime hours" in w for w in result.warnings)
        assert result.of_type(ConflictType.HOURS_EXCEEDED) == []

    @pytest.mark.asyncio
    async def test_previous_week_is_ignored(self, detector, store, phase, employee):
        seed(
            store,
            *(
                AssignmentFactory.create(phase, employee, MONDAY - timedelta(days=d), 10)
                for d in (2, 3, 4, 5)
            ),
        )

        result = await detector.validate_assignment(phase.id, employee.id, MONDAY, 8)

        assert result.conflicts == []


class TestValidateAssignmentEligibility:
    @pytest.mark.asyncio
    async def test_same_trade_different_segment_is_compatible(self, detector, store, project):
        phase = PhaseFactory.create(project, division=Division.PLUMBING_CUSTOM)
        employee = EmployeeFactory.create(division=Division.PLUMBING_COMMERCIAL)
        seed(store, phase, employee, *EmployeeFactory.create_crew(2, division=Division.PLUMBING_CUSTOM))

        result = await detector.validate_assignment(phase.id, employee.id, MONDAY, 8)

        assert result.of_type(ConflictType.DIVISION_MISMATCH) == []

    @pytest.mark.asyncio
    async def test_other_trade_is_a_mismatch(self, detector, store, phase):
        employee = EmployeeFactory.create(division=Division.HVAC_MULTIFAMILY)
        seed(store, employee, *EmployeeFactory.create_crew(2))

        result = await detector.validate_assignment(phase.id, employee.id, MONDAY, 8)

        [conflict] = result.of_type(ConflictType.DIVISION_MISMATCH)
        assert conflict.severity == ConflictSeverity.LOW
        assert conflict.details.phase_division == Division.PLUMBING_MULTIFAMILY
        assert result.is_valid
        assert any("differs from phase division" in w for w in result.warnings)

    @pytest.mark.asyncio
    async def test_unavailable_employee(self, detector, store, phase):
        employee = EmployeeFactory.create(availability_start=date(2024, 4, 1))
        seed(store, employee, *EmployeeFactory.create_crew(2))

        result = await detector.validate_assignment(phase.id, employee.id, MONDAY, 8)

        [conflict] = result.of_type(ConflictType.UNAVAILABLE)
        assert conflict.severity == ConflictSeverity.CRITICAL
        assert not result.is_valid

    @pytest.mark.asyncio
    async def test_availability_ended(self, detector, store, phase):
        employee = EmployeeFactory.create(availability_end=date(2024, 3, 1))
        seed(store, employee, *EmployeeFactory.create_crew(2))

        result = await detector.validate_assignment(phase.id, employee.id, MONDAY, 8)

        assert result.of_type(ConflictType.UNAVAILABLE)

    @pytest.mark.asyncio
    async def test_over_daily_division_capacity(self, detector, store, phase):
        employee = EmployeeFactory.create()
        seed(store, employee)

        result = await detector.validate_assignment(phase.id, employee.id, MONDAY, 10)

        [conflict] = result.of_type(ConflictType.OVER_CAPACITY)
        assert conflict.entity_type == EntityType.DIVISION
        assert conflict.entity_id == Division.PLUMBING_MULTIFAMILY
        assert not result.is_valid


class TestValidateAssignmentErrors:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("hours", [0, -1, 24.5])
    async def test_hours_out_of_range(self, detector, phase, employee, hours):
        with pytest.raises(ValidationError):
            await detector.validate_assignment(phase.id, employee.id, MONDAY, hours)

    @pytest.mark.asyncio
    async def test_unknown_phase(self, detector, employee):
        with pytest.raises(PhaseNotFoundError):
            await detector.validate_assignment(uuid4(), employee.id, MONDAY, 8)

    @pytest.mark.asyncio
    async def test_unknown_employee(self, detector, phase):
        with pytest.raises(EmployeeNotFoundError):
            await detector.validate_assignment(phase.id, uuid4(), MONDAY, 8)


class TestPhaseConflicts:
    @pytest.mark.asyncio
    async def test_missing_foreman_and_short_crew(self, detector, store, project, employee):
        phase = PhaseFactory.create(
            project,
            crew=CrewRequirement(required_foreman=True, required_journeymen=2),
        )
        seed(store, phase, AssignmentFactory.create(phase, employee))

        conflicts = await detector.phase_conflicts(phase)

        types = {c.type: c for c in conflicts}
        assert types[ConflictType.MISSING_FOREMAN].severity == ConflictSeverity.HIGH
        short = types[ConflictType.INSUFFICIENT_CREW]
        assert short.details.required_crew_size == 3
        assert short.details.assigned_crew_size == 1
        assert short.details.shortfall == 2

    @pytest.mark.asyncio
    async def test_foreman_lead_satisfies_requirement(self, detector, store, project):
        foreman = EmployeeFactory.create(EmployeeType.FOREMAN)
        phase = PhaseFactory.create(project, crew=CrewRequirement(required_foreman=True))
        seed(store, foreman, phase, AssignmentFactory.create(phase, foreman, is_lead=True))

        assert await detector.phase_conflicts(phase) == []

    @pytest.mark.asyncio
    async def test_multiple_leads_on_one_day(self, detector, store, project):
        crew = EmployeeFactory.create_crew(2)
        phase = PhaseFactory.create(project)
        leads = [AssignmentFactory.create(phase, e, is_lead=True) for e in crew]
        seed(store, phase, *crew, *leads)

        [conflict] = await detector.phase_conflicts(phase)

        assert conflict.type == ConflictType.MULTIPLE_LEADS
        assert set(conflict.details.lead_assignment_ids) == {a.id for a in leads}

    @pytest.mark.asyncio
    async def test_skill_mismatch(self, detector, store, project):
        apprentice = EmployeeFactory.create(EmployeeType.APPRENTICE)
        phase = PhaseFactory.create(project)
        assignment = AssignmentFactory.create(phase, apprentice, role=EmployeeType.FOREMAN)
        seed(store, apprentice, phase, assignment)

        [conflict] = await detector.phase_conflicts(phase)

        assert conflict.type == ConflictType.SKILL_MISMATCH
        assert conflict.entity_id == assignment.id
        assert conflict.details.assigned_role == EmployeeType.FOREMAN

    @pytest.mark.asyncio
    async def test_phase_starting_before_dependency_ends(self, detector, store, project):
        first = PhaseFactory.create(project, end_date=date(2024, 3, 8))
        second = PhaseFactory.create(
            project,
            phase_number=2,
            start_date=date(2024, 3, 6),
            end_date=date(2024, 3, 12),
            dependency_ids=[first.id],
        )
        seed(store, first, second)

        [conflict] = await detector.phase_conflicts(second)

        assert conflict.type == ConflictType.OVERLAPPING_PHASES
        assert conflict.details.overlap_days == 3


class TestSweeps:
    @pytest.mark.asyncio
    async def test_employee_conflicts_over_window(self, detector, store, phase, employee):
        other_phase = PhaseFactory.create(ProjectFactory.create(), phase_number=2)
        seed(
            store,
            other_phase,
            AssignmentFactory.create(phase, employee, MONDAY, 10),
            AssignmentFactory.create(other_phase, employee, MONDAY, 8),
        )
        book_week(store, phase, employee, hours_per_day=10, days=3)

        conflicts = await detector.employee_conflicts(employee, MONDAY, FRIDAY)

        assert [c.type for c in conflicts] == [
            ConflictType.DOUBLE_BOOKING,
            ConflictType.HOURS_EXCEEDED,
        ]
        assert conflicts[1].details.total_hours == 48

    @pytest.mark.asyncio
    async def test_division_conflicts_are_daily(self, detector, store, phase):
        employee = EmployeeFactory.create()
        seed(
            store,
            employee,
            AssignmentFactory.create(phase, employee, MONDAY, 6),
            AssignmentFactory.create(phase, employee, MONDAY, 6),
        )

        conflicts = await detector.division_conflicts(
            Division.PLUMBING_MULTIFAMILY, MONDAY, MONDAY + timedelta(days=2)
        )

        [conflict] = conflicts
        assert conflict.type == ConflictType.OVER_CAPACITY
        assert conflict.details.start_date == MONDAY
        assert conflict.details.utilization_pct == pytest.approx(150)

    def test_capacity_at_limit_is_not_a_conflict(self, detector):
        check = DailyCapacityCheck(
            division=Division.HVAC_CUSTOM,
            day=MONDAY,
            available_hours=16,
            scheduled_hours=16,
            available_employees=2,
        )
        assert detector.check_capacity(check) is None
