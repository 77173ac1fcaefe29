"""Domain enums for crew scheduling."""

from enum import Enum


class BaseCategory(str, Enum):
    """Top-level trade grouping of a division."""

    PLUMBING = "PLUMBING"
    HVAC = "HVAC"


class Segment(str, Enum):
    """Project-type sub-segment of a division."""

    MULTIFAMILY = "MULTIFAMILY"
    COMMERCIAL = "COMMERCIAL"
    CUSTOM = "CUSTOM"


class Division(str, Enum):
    """Division enumeration composed of a base category and a segment."""

    PLUMBING_MULTIFAMILY = "PLUMBING_MULTIFAMILY"
    PLUMBING_COMMERCIAL = "PLUMBING_COMMERCIAL"
    PLUMBING_CUSTOM = "PLUMBING_CUSTOM"
    HVAC_MULTIFAMILY = "HVAC_MULTIFAMILY"
    HVAC_COMMERCIAL = "HVAC_COMMERCIAL"
    HVAC_CUSTOM = "HVAC_CUSTOM"

    @property
    def base_category(self) -> BaseCategory:
        """Trade grouping, ignoring the segment."""
        return BaseCategory(self.value.split("_", 1)[0])

    @property
    def segment(self) -> Segment:
        return Segment(self.value.split("_", 1)[1])

    def is_compatible_with(self, other: "Division") -> bool:
        """Divisions are compatible when their base categories match."""
        return self.base_category == other.base_category


class EmployeeType(str, Enum):
    """Employee type (also the role of an assignment)."""

    FOREMAN = "FOREMAN"
    JOURNEYMAN = "JOURNEYMAN"
    APPRENTICE = "APPRENTICE"


class ProjectStatus(str, Enum):
    """Project status enumeration."""

    PLANNED = "PLANNED"
    ACTIVE = "ACTIVE"
    ON_HOLD = "ON_HOLD"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @property
    def is_active(self) -> bool:
        """Projects count toward capacity unless they are closed."""
        return self not in {ProjectStatus.COMPLETED, ProjectStatus.CANCELLED}


class PhaseStatus(str, Enum):
    """Phase status enumeration."""

    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    DELAYED = "DELAYED"
    BLOCKED = "BLOCKED"

    @property
    def is_active(self) -> bool:
        """Active phases generate labor demand and are scanned for conflicts."""
        return self in {
            PhaseStatus.NOT_STARTED,
            PhaseStatus.IN_PROGRESS,
            PhaseStatus.DELAYED,
        }

    @property
    def is_terminal(self) -> bool:
        return self == PhaseStatus.COMPLETED


class ConflictType(str, Enum):
    """Kinds of scheduling conflicts."""

    DOUBLE_BOOKING = "DOUBLE_BOOKING"
    HOURS_EXCEEDED = "HOURS_EXCEEDED"
    OVERTIME = "OVERTIME"
    DIVISION_MISMATCH = "DIVISION_MISMATCH"
    UNAVAILABLE = "UNAVAILABLE"
    MISSING_FOREMAN = "MISSING_FOREMAN"
    INSUFFICIENT_CREW = "INSUFFICIENT_CREW"
    MULTIPLE_LEADS = "MULTIPLE_LEADS"
    OVER_CAPACITY = "OVER_CAPACITY"
    SKILL_MISMATCH = "SKILL_MISMATCH"
    OVERLAPPING_PHASES = "OVERLAPPING_PHASES"


class ConflictSeverity(str, Enum):
    """Conflict severity enumeration."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def is_blocking(self) -> bool:
        """HIGH and CRITICAL conflicts invalidate a proposed assignment."""
        return self in {ConflictSeverity.HIGH, ConflictSeverity.CRITICAL}


class EntityType(str, Enum):
    """Kind of record a conflict is attached to."""

    PROJECT = "PROJECT"
    PHASE = "PHASE"
    EMPLOYEE = "EMPLOYEE"
    ASSIGNMENT = "ASSIGNMENT"
    DIVISION = "DIVISION"


class ImpactLevel(str, Enum):
    """Impact of applying a resolution."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def rank(self) -> int:
        """Sort rank, lower impact first."""
        return {ImpactLevel.LOW: 0, ImpactLevel.MEDIUM: 1, ImpactLevel.HIGH: 2}[self]


class ResolutionType(str, Enum):
    """Closed set of resolution strategies."""

    ALTERNATE_EMPLOYEE = "ALTERNATE_EMPLOYEE"
    ALTERNATE_DATE = "ALTERNATE_DATE"
    ADJUST_HOURS = "ADJUST_HOURS"
    ADJUST_REQUIREMENTS = "ADJUST_REQUIREMENTS"
    SPLIT_ASSIGNMENT = "SPLIT_ASSIGNMENT"
    HIRE_CONTRACTOR = "HIRE_CONTRACTOR"
    RESCHEDULE_PHASE = "RESCHEDULE_PHASE"
    EXTEND_TIMELINE = "EXTEND_TIMELINE"
    APPROVE_OVERTIME = "APPROVE_OVERTIME"
    ASSIGN_FOREMAN = "ASSIGN_FOREMAN"
    INCREASE_CREW = "INCREASE_CREW"
    SWAP_EMPLOYEES = "SWAP_EMPLOYEES"
    DELAY_START = "DELAY_START"
    DESIGNATE_LEAD = "DESIGNATE_LEAD"


class ResolutionAction(str, Enum):
    """Closed set of actions a resolution implementation can request."""

    REASSIGN_EMPLOYEE = "REASSIGN_EMPLOYEE"
    RESCHEDULE_ASSIGNMENT = "RESCHEDULE_ASSIGNMENT"
    SPLIT_ASSIGNMENT = "SPLIT_ASSIGNMENT"
    HIRE_CONTRACTOR = "HIRE_CONTRACTOR"
    RESCHEDULE_PHASE = "RESCHEDULE_PHASE"
    APPROVE_OVERTIME = "APPROVE_OVERTIME"
    ASSIGN_FOREMAN = "ASSIGN_FOREMAN"
    PROMOTE_TO_LEAD = "PROMOTE_TO_LEAD"
    DELAY_PHASE = "DELAY_PHASE"
    INCREASE_CREW = "INCREASE_CREW"
    ADJUST_REQUIREMENTS = "ADJUST_REQUIREMENTS"
    REDUCE_HOURS = "REDUCE_HOURS"
    SWAP_EMPLOYEES = "SWAP_EMPLOYEES"
    REPLACE_EMPLOYEE = "REPLACE_EMPLOYEE"
    DESIGNATE_SINGLE_LEAD = "DESIGNATE_SINGLE_LEAD"
    ADJUST_PHASE_TIMELINE = "ADJUST_PHASE_TIMELINE"


class UtilizationStatus(str, Enum):
    """Utilization band of a division."""

    OK = "OK"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"
