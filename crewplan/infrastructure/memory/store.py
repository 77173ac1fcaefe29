"""Shared in-memory record store."""

import copy
from dataclasses import dataclass, field
from uuid import UUID

from crewplan.domain.scheduling.entities import Assignment, Employee, Phase, Project


@dataclass
class InMemoryStore:
    """Tables of the in-memory persistence layer, keyed by entity id."""

    projects: dict[UUID, Project] = field(default_factory=dict)
    phases: dict[UUID, Phase] = field(default_factory=dict)
    employees: dict[UUID, Employee] = field(default_factory=dict)
    assignments: dict[UUID, Assignment] = field(default_factory=dict)

    def snapshot(self) -> "InMemoryStore":
        return copy.deepcopy(self)

    def restore(self, snapshot: "InMemoryStore") -> None:
        self.projects = snapshot.projects
        self.phases = snapshot.phases
        self.employees = snapshot.employees
        self.assignments = snapshot.assignments
