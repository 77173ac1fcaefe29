"""
Phase Repository Interface

Defines the contract for phase data access operations.
"""

from abc import ABC, abstractmethod
from datetime import date
from uuid import UUID

from ..entities.phase import Phase
from ..value_objects.enums import Division


class PhaseRepository(ABC):
    """
    Abstract repository interface for Phase entities.

    Defines the contract that the persistence collaborator must implement
    for phase storage and retrieval.
    """

    @abstractmethod
    async def save(self, phase: Phase) -> Phase:
        """
        Save a phase to the repository.

        Args:
            phase: Phase entity to save

        Returns:
            Saved phase entity

        Raises:
            RepositoryError: If save operation fails
        """

    @abstractmethod
    async def get_by_id(self, phase_id: UUID) -> Phase | None:
        """
        Retrieve a phase by its ID.

        Args:
            phase_id: Unique phase identifier

        Returns:
            Phase entity or None if not found
        """

    @abstractmethod
    async def get_by_ids(self, phase_ids: list[UUID]) -> list[Phase]:
        """
        Retrieve the phases that exist among ``phase_ids``.

        Missing ids are silently omitted; callers compare lengths to detect them.
        """

    @abstractmethod
    async def get_by_project(self, project_id: UUID) -> list[Phase]:
        """Retrieve all phases of a project ordered by phase number."""

    @abstractmethod
    async def get_dependents(self, phase_id: UUID) -> list[Phase]:
        """Retrieve phases whose dependency set contains ``phase_id``."""

    @abstractmethod
    async def get_active(self) -> list[Phase]:
        """Retrieve phases in an active status."""

    @abstractmethod
    async def get_by_division_in_range(
        self, division: Division, start: date, end: date
    ) -> list[Phase]:
        """Retrieve phases of a division whose dates overlap ``[start, end]``."""
