"""
Test fixtures and factories for crew scheduling entities.

Factories build valid entities with sensible defaults; ``seed`` writes them
straight into an in-memory store so tests can arrange data without awaiting.
"""

from datetime import date
from itertools import count
from uuid import UUID

from crewplan.domain.scheduling.entities import Assignment, Employee, Phase, Project
from crewplan.domain.scheduling.value_objects.crew import CrewRequirement
from crewplan.domain.scheduling.value_objects.enums import (
    Division,
    EmployeeType,
    PhaseStatus,
    ProjectStatus,
)
from crewplan.infrastructure.memory import InMemoryStore

# Monday; its week runs Sunday 2024-03-03 to Saturday 2024-03-09
MONDAY = date(2024, 3, 4)

_sequence = count(1)


class ProjectFactory:
    """Factory for creating test projects."""

    @staticmethod
    def create(
        name: str = "Riverside Apartments",
        status: ProjectStatus = ProjectStatus.ACTIVE,
        start_date: date = date(2024, 1, 1),
        end_date: date = date(2024, 12, 31),
    ) -> Project:
        return Project(name=name, status=status, start_date=start_date, end_date=end_date)


class PhaseFactory:
    """Factory for creating test phases with derived duration and labor hours."""

    @staticmethod
    def create(
        project: Project,
        phase_number: int = 1,
        name: str | None = None,
        division: Division = Division.PLUMBING_MULTIFAMILY,
        start_date: date = MONDAY,
        end_date: date = date(2024, 3, 15),
        crew: CrewRequirement | None = None,
        status: PhaseStatus = PhaseStatus.NOT_STARTED,
        dependency_ids: list[UUID] | None = None,
        progress_pct: float = 0.0,
    ) -> Phase:
        return Phase.plan(
            project_id=project.id,
            phase_number=phase_number,
            name=name or f"Phase {phase_number}",
            division=division,
            start_date=start_date,
            end_date=end_date,
            crew=crew,
            status=status,
            dependency_ids=dependency_ids or [],
            progress_pct=progress_pct,
        )

    @staticmethod
    def create_chain(project: Project, durations: list[int]) -> list[Phase]:
        """Sequential phases, each depending on the previous one."""
        phases: list[Phase] = []
        start = MONDAY
        for number, days in enumerate(durations, start=1):
            end = date.fromordinal(start.toordinal() + days - 1)
            phases.append(
                PhaseFactory.create(
                    project,
                    phase_number=number,
                    start_date=start,
                    end_date=end,
                    dependency_ids=[phases[-1].id] if phases else [],
                )
            )
            start = date.fromordinal(end.toordinal() + 1)
        return phases


class EmployeeFactory:
    """Factory for creating test employees."""

    @staticmethod
    def create(
        employee_type: EmployeeType = EmployeeType.JOURNEYMAN,
        division: Division = Division.PLUMBING_MULTIFAMILY,
        first_name: str = "Sam",
        last_name: str | None = None,
        max_hours_per_week: float = 40.0,
        availability_start: date = date(2024, 1, 1),
        availability_end: date | None = None,
        is_active: bool = True,
    ) -> Employee:
        return Employee(
            first_name=first_name,
            last_name=last_name or f"Worker{next(_sequence):03d}",
            division=division,
            employee_type=employee_type,
            max_hours_per_week=max_hours_per_week,
            availability_start=availability_start,
            availability_end=availability_end,
            is_active=is_active,
        )

    @staticmethod
    def create_crew(
        count_: int,
        employee_type: EmployeeType = EmployeeType.JOURNEYMAN,
        division: Division = Division.PLUMBING_MULTIFAMILY,
    ) -> list[Employee]:
        return [
            EmployeeFactory.create(employee_type=employee_type, division=division)
            for _ in range(count_)
        ]


class AssignmentFactory:
    """Factory for creating test assignments."""

    @staticmethod
    def create(
        phase: Phase,
        employee: Employee,
        day: date = MONDAY,
        hours: float = 8.0,
        role: EmployeeType | None = None,
        is_lead: bool = False,
    ) -> Assignment:
        return Assignment(
            phase_id=phase.id,
            employee_id=employee.id,
            day=day,
            hours_allocated=hours,
            role=role or employee.employee_type,
            is_lead=is_lead,
        )


def seed(store: InMemoryStore, *entities: Project | Phase | Employee | Assignment) -> None:
    """Write entities directly into the store tables."""
    for entity in entities:
        if isinstance(entity, Project):
            store.projects[entity.id] = entity
        elif isinstance(entity, Phase):
            store.phases[entity.id] = entity
        elif isinstance(entity, Employee):
            store.employees[entity.id] = entity
        elif isinstance(entity, Assignment):
            store.assignments[entity.id] = entity
        else:
            raise TypeError(f"Cannot seed {type(entity).__name__}")
