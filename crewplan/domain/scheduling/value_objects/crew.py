"""
Crew Requirement Value Object

Describes the staffing a phase needs and derives its labor hours.
"""

from pydantic import Field

from ...shared.base import ValueObject
from .thresholds import STANDARD_HOURS_PER_DAY


class CrewRequirement(ValueObject):
    """
    Staffing required by a phase.

    The computed crew size counts one foreman when required plus the
    journeymen and apprentices. An explicit ``required_crew_size`` overrides
    the computed size for staffing checks but not for labor hours.
    """

    required_foreman: bool = False
    required_journeymen: int = Field(default=0, ge=0)
    required_apprentices: int = Field(default=0, ge=0)
    required_crew_size: int | None = Field(default=None, ge=0)

    @property
    def computed_crew_size(self) -> int:
        return (
            int(self.required_foreman)
            + self.required_journeymen
            + self.required_apprentices
        )

    @property
    def crew_size(self) -> int:
        """Crew size used for staffing checks."""
        if self.required_crew_size is not None:
            return self.required_crew_size
        return self.computed_crew_size

    def labor_hours(
        self, duration_days: int, hours_per_day: float = STANDARD_HOURS_PER_DAY
    ) -> float:
        """Labor hours for ``duration_days`` business days of full crew work."""
        return float(self.computed_crew_size * duration_days * hours_per_day)

    @classmethod
    def empty(cls) -> "CrewRequirement":
        return cls()
