"""Employee Repository Interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from ..entities.employee import Employee
from ..value_objects.enums import Division, EmployeeType


class EmployeeRepository(ABC):
    """Abstract repository interface for Employee entities."""

    @abstractmethod
    async def save(self, employee: Employee) -> Employee:
        """Save an employee to the repository."""

    @abstractmethod
    async def get_by_id(self, employee_id: UUID) -> Employee | None:
        """Retrieve an employee by ID."""

    @abstractmethod
    async def get_active(self) -> list[Employee]:
        """Retrieve all active employees."""

    @abstractmethod
    async def get_by_division(
        self,
        division: Division,
        employee_type: EmployeeType | None = None,
        active_only: bool = True,
    ) -> list[Employee]:
        """
        Retrieve employees of a division.

        Args:
            division: Division to filter by
            employee_type: Optional employee type filter
            active_only: Exclude inactive employees when True

        Returns:
            Matching employees ordered by last and first name
        """
