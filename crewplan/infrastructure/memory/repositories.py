"""
In-memory repository implementations.

Records are copied on the way in and out, so callers must ``save`` to
persist a change, as with a database-backed repository.
"""

from datetime import date
from uuid import UUID

from crewplan.domain.scheduling.entities import Assignment, Employee, Phase, Project
from crewplan.domain.scheduling.repositories import (
    AssignmentRepository,
    EmployeeRepository,
    PhaseRepository,
    ProjectRepository,
)
from crewplan.domain.scheduling.value_objects.enums import Division, EmployeeType

from .store import InMemoryStore


class InMemoryProjectRepository(ProjectRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def save(self, project: Project) -> Project:
        self._store.projects[project.id] = project.model_copy(deep=True)
        return project

    async def get_by_id(self, project_id: UUID) -> Project | None:
        project = self._store.projects.get(project_id)
        return project.model_copy(deep=True) if project else None

    async def get_by_ids(self, project_ids: list[UUID]) -> list[Project]:
        return [
            self._store.projects[pid].model_copy(deep=True)
            for pid in project_ids
            if pid in self._store.projects
        ]

    async def get_active(self) -> list[Project]:
        return [
            p.model_copy(deep=True) for p in self._store.projects.values() if p.is_active
        ]


class InMemoryPhaseRepository(PhaseRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def _copies(self, phases) -> list[Phase]:
        ordered = sorted(phases, key=lambda p: (p.phase_number, p.start_date, str(p.id)))
        return [phase.model_copy(deep=True) for phase in ordered]

    async def save(self, phase: Phase) -> Phase:
        self._store.phases[phase.id] = phase.model_copy(deep=True)
        return phase

    async def get_by_id(self, phase_id: UUID) -> Phase | None:
        phase = self._store.phases.get(phase_id)
        return phase.model_copy(deep=True) if phase else None

    async def get_by_ids(self, phase_ids: list[UUID]) -> list[Phase]:
        return [
            self._store.phases[pid].model_copy(deep=True)
            for pid in phase_ids
            if pid in self._store.phases
        ]

    async def get_by_project(self, project_id: UUID) -> list[Phase]:
        return self._copies(
            p for p in self._store.phases.values() if p.project_id == project_id
        )

    async def get_dependents(self, phase_id: UUID) -> list[Phase]:
        return self._copies(
            p for p in self._store.phases.values() if p.depends_on(phase_id)
        )

    async def get_active(self) -> list[Phase]:
        return self._copies(p for p in self._store.phases.values() if p.is_active)

    async def get_by_division_in_range(
        self, division: Division, start: date, end: date
    ) -> list[Phase]:
        return self._copies(
            p
            for p in self._store.phases.values()
            if p.division == division and p.overlaps(start, end)
        )


class InMemoryEmployeeRepository(EmployeeRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def save(self, employee: Employee) -> Employee:
        self._store.employees[employee.id] = employee.model_copy(deep=True)
        return employee

    async def get_by_id(self, employee_id: UUID) -> Employee | None:
        employee = self._store.employees.get(employee_id)
        return employee.model_copy(deep=True) if employee else None

    async def get_active(self) -> list[Employee]:
        return sorted(
            (e.model_copy(deep=True) for e in self._store.employees.values() if e.is_active),
            key=lambda e: (e.last_name, e.first_name, str(e.id)),
        )

    async def get_by_division(
        self,
        division: Division,
        employee_type: EmployeeType | None = None,
        active_only: bool = True,
    ) -> list[Employee]:
        return sorted(
            (
                e.model_copy(deep=True)
                for e in self._store.employees.values()
                if e.division == division
                and (employee_type is None or e.employee_type == employee_type)
                and (e.is_active or not active_only)
            ),
            key=lambda e: (e.last_name, e.first_name, str(e.id)),
        )


class InMemoryAssignmentRepository(AssignmentRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def _copies(self, assignments) -> list[Assignment]:
        ordered = sorted(assignments, key=lambda a: (a.day, a.created_at, str(a.id)))
        return [assignment.model_copy(deep=True) for assignment in ordered]

    async def save(self, assignment: Assignment) -> Assignment:
        self._store.assignments[assignment.id] = assignment.model_copy(deep=True)
        return assignment

    async def delete(self, assignment_id: UUID) -> bool:
        return self._store.assignments.pop(assignment_id, None) is not None

    async def get_by_id(self, assignment_id: UUID) -> Assignment | None:
        assignment = self._store.assignments.get(assignment_id)
        return assignment.model_copy(deep=True) if assignment else None

    async def get_by_phase(self, phase_id: UUID) -> list[Assignment]:
        return self._copies(
            a for a in self._store.assignments.values() if a.phase_id == phase_id
        )

    async def get_by_employee_in_range(
        self, employee_id: UUID, start: date, end: date
    ) -> list[Assignment]:
        return self._copies(
            a
            for a in self._store.assignments.values()
            if a.employee_id == employee_id and a.is_within(start, end)
        )

    async def get_in_range(self, start: date, end: date) -> list[Assignment]:
        return self._copies(
            a for a in self._store.assignments.values() if a.is_within(start, end)
        )
