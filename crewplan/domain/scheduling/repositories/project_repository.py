"""Project Repository Interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from ..entities.project import Project


class ProjectRepository(ABC):
    """Abstract repository interface for Project entities."""

    @abstractmethod
    async def save(self, project: Project) -> Project:
        """Save a project to the repository."""

    @abstractmethod
    async def get_by_id(self, project_id: UUID) -> Project | None:
        """Retrieve a project by its ID."""

    @abstractmethod
    async def get_by_ids(self, project_ids: list[UUID]) -> list[Project]:
        """Retrieve the projects that exist among ``project_ids``."""

    @abstractmethod
    async def get_active(self) -> list[Project]:
        """Retrieve projects that are neither completed nor cancelled."""
