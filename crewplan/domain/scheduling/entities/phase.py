"""Phase entity: a dated work package within a project."""

from datetime import date, timedelta
from uuid import UUID

from pydantic import Field, field_validator, model_validator

from ...shared.base import Entity
from ...shared.exceptions import ValidationError
from ..value_objects.calendar import business_days_between
from ..value_objects.crew import CrewRequirement
from ..value_objects.enums import Division, PhaseStatus
from .project import Project


class Phase(Entity):
    """
    Phase entity representing one schedulable unit of project work.

    Duration is counted in business days, both ends included. Labor hours
    follow from the crew requirement and the duration. Dependencies are
    stored as phase ids of the same project.
    """

    project_id: UUID
    phase_number: int = Field(ge=1)
    name: str = Field(min_length=1, max_length=200)
    division: Division
    start_date: date
    end_date: date
    duration: int = Field(default=0, ge=0)
    labor_hours: float = Field(default=0.0, ge=0)
    crew: CrewRequirement = Field(default_factory=CrewRequirement)
    status: PhaseStatus = Field(default=PhaseStatus.NOT_STARTED)
    progress_pct: float = Field(default=0.0, ge=0, le=100)
    dependency_ids: list[UUID] = Field(default_factory=list)

    @field_validator("dependency_ids")
    @classmethod
    def dedupe_dependencies(cls, v: list[UUID]) -> list[UUID]:
        """Keep the first occurrence of each dependency id."""
        return list(dict.fromkeys(v))

    @model_validator(mode="after")
    def check_date_order(self) -> "Phase":
        if self.end_date < self.start_date:
            raise ValueError("Phase end date must not precede its start date")
        return self

    @classmethod
    def plan(
        cls,
        project_id: UUID,
        phase_number: int,
        name: str,
        division: Division,
        start_date: date,
        end_date: date,
        crew: CrewRequirement | None = None,
        **kwargs,
    ) -> "Phase":
        """Create a phase with duration and labor hours derived from its crew."""
        crew = crew or CrewRequirement()
        duration = business_days_between(start_date, end_date)
        return cls(
            project_id=project_id,
            phase_number=phase_number,
            name=name,
            division=division,
            start_date=start_date,
            end_date=end_date,
            duration=duration,
            labor_hours=crew.labor_hours(duration),
            crew=crew,
            **kwargs,
        )

    def is_valid(self) -> bool:
        return bool(self.name) and self.start_date <= self.end_date

    @property
    def calendar_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    @property
    def required_crew_size(self) -> int:
        return self.crew.crew_size

    @property
    def daily_labor_hours(self) -> float:
        """Labor hours needed per working day."""
        if self.duration <= 0:
            return 0.0
        return self.labor_hours / self.duration

    @property
    def is_active(self) -> bool:
        return self.status.is_active

    def overlaps(self, start: date, end: date) -> bool:
        return self.start_date <= end and self.end_date >= start

    def overlap_days(self, start: date, end: date) -> int:
        if not self.overlaps(start, end):
            return 0
        return (min(self.end_date, end) - max(self.start_date, start)).days + 1

    def depends_on(self, phase_id: UUID) -> bool:
        return phase_id in self.dependency_ids

    def ensure_within_project(self, project: Project) -> None:
        """
        Check the phase dates against its project.

        Raises:
            ValidationError: If the phase falls outside the project's date range
        """
        if not project.contains(self.start_date, self.end_date):
            raise ValidationError(
                "start_date",
                f"{self.start_date}..{self.end_date}",
                f"Phase dates must fall within project dates "
                f"{project.start_date}..{project.end_date}",
                "PHASE_OUTSIDE_PROJECT",
            )

    def reschedule(self, start_date: date, end_date: date) -> None:
        """Move the phase and recompute its duration and labor hours."""
        if end_date < start_date:
            raise ValidationError(
                "end_date", str(end_date), "End date must not precede start date"
            )
        # Assignment order keeps the model validator satisfied at each step.
        if start_date > self.end_date:
            self.end_date = end_date
            self.start_date = start_date
        else:
            self.start_date = start_date
            self.end_date = end_date
        self.duration = business_days_between(start_date, end_date)
        self.labor_hours = self.crew.labor_hours(self.duration)
        self.mark_updated()

    def shift(self, days: int) -> None:
        """Move both dates by ``days`` calendar days."""
        delta = timedelta(days=days)
        self.reschedule(self.start_date + delta, self.end_date + delta)
