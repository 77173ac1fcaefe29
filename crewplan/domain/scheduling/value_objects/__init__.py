"""Value objects for the crew scheduling domain."""

from .capacity import CapacityForecast, DailyCapacityCheck, DivisionCapacity, EmployeeCounts
from .conflict import Conflict, ConflictDetails, ValidationResult
from .crew import CrewRequirement
from .enums import (
    BaseCategory,
    ConflictSeverity,
    ConflictType,
    Division,
    EmployeeType,
    EntityType,
    ImpactLevel,
    PhaseStatus,
    ProjectStatus,
    ResolutionAction,
    ResolutionType,
    Segment,
    UtilizationStatus,
)
from .resolution import ResolutionImplementation, ResolutionOutcome, ResolutionSuggestion
from .thresholds import DEFAULT_THRESHOLDS, SchedulingThresholds

__all__ = [
    # Capacity
    "CapacityForecast",
    "DailyCapacityCheck",
    "DivisionCapacity",
    "EmployeeCounts",
    # Conflicts and resolutions
    "Conflict",
    "ConflictDetails",
    "ResolutionImplementation",
    "ResolutionOutcome",
    "ResolutionSuggestion",
    "ValidationResult",
    # Crew
    "CrewRequirement",
    # Enums
    "BaseCategory",
    "ConflictSeverity",
    "ConflictType",
    "Division",
    "EmployeeType",
    "EntityType",
    "ImpactLevel",
    "PhaseStatus",
    "ProjectStatus",
    "ResolutionAction",
    "ResolutionType",
    "Segment",
    "UtilizationStatus",
    # Thresholds
    "DEFAULT_THRESHOLDS",
    "SchedulingThresholds",
]
