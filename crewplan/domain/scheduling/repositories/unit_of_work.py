"""
Unit of Work interface for mutations spanning several repositories.

Resolution handlers and dependent-date cascades run inside one unit of
work: all changes commit together, or none do.
"""

from abc import ABC, abstractmethod
from types import TracebackType

from .assignment_repository import AssignmentRepository
from .employee_repository import EmployeeRepository
from .phase_repository import PhaseRepository
from .project_repository import ProjectRepository


class UnitOfWork(ABC):
    """
    Abstract async Unit of Work.

    Leaving the context commits; an exception raised inside it rolls back and
    propagates.
    """

    projects: ProjectRepository
    phases: PhaseRepository
    employees: EmployeeRepository
    assignments: AssignmentRepository

    async def __aenter__(self) -> "UnitOfWork":
        await self.begin()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            await self.rollback()
            return
        try:
            await self.commit()
        except Exception:
            await self.rollback()
            raise

    @abstractmethod
    async def begin(self) -> None:
        """Start a transaction."""

    @abstractmethod
    async def commit(self) -> None:
        """Commit all changes in the current transaction."""

    @abstractmethod
    async def rollback(self) -> None:
        """Rollback all changes in the current transaction."""
