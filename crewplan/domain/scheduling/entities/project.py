"""Project entity."""

from datetime import date

from pydantic import Field, model_validator

from ...shared.base import Entity
from ..value_objects.enums import ProjectStatus


class Project(Entity):
    """
    Project entity grouping the phases of one job.

    Phases and capacity demand are only counted while the project is active.
    """

    name: str = Field(min_length=1, max_length=200)
    status: ProjectStatus = Field(default=ProjectStatus.PLANNED)
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def check_date_order(self) -> "Project":
        if self.end_date < self.start_date:
            raise ValueError("Project end date must not precede its start date")
        return self

    def is_valid(self) -> bool:
        return bool(self.name) and self.start_date <= self.end_date

    @property
    def is_active(self) -> bool:
        return self.status.is_active

    def contains(self, start: date, end: date) -> bool:
        """Whether ``[start, end]`` lies within the project's date range."""
        return self.start_date <= start and end <= self.end_date
