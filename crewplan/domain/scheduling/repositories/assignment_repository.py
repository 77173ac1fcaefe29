"""Assignment Repository Interface."""

from abc import ABC, abstractmethod
from datetime import date
from uuid import UUID

from ..entities.assignment import Assignment


class AssignmentRepository(ABC):
    """Abstract repository interface for Assignment entities."""

    @abstractmethod
    async def save(self, assignment: Assignment) -> Assignment:
        """Save an assignment to the repository."""

    @abstractmethod
    async def delete(self, assignment_id: UUID) -> bool:
        """
        Delete an assignment.

        Returns:
            True if the assignment existed
        """

    @abstractmethod
    async def get_by_id(self, assignment_id: UUID) -> Assignment | None:
        """Retrieve an assignment by ID."""

    @abstractmethod
    async def get_by_phase(self, phase_id: UUID) -> list[Assignment]:
        """Retrieve all assignments of a phase ordered by date."""

    @abstractmethod
    async def get_by_employee_in_range(
        self, employee_id: UUID, start: date, end: date
    ) -> list[Assignment]:
        """Retrieve an employee's assignments dated within ``[start, end]``."""

    @abstractmethod
    async def get_in_range(self, start: date, end: date) -> list[Assignment]:
        """Retrieve all assignments dated within ``[start, end]``."""
