"""Domain services for crew scheduling."""

from .capacity_model import CapacityModel
from .conflict_aggregator import ConflictAggregator
from .conflict_detector import ConflictDetector
from .crew_availability import CrewAvailabilityService
from .dependency_resolver import DependencyResolver
from .resolution_engine import ResolutionEngine, rank_suggestions

__all__ = [
    "CapacityModel",
    "ConflictAggregator",
    "ConflictDetector",
    "CrewAvailabilityService",
    "DependencyResolver",
    "ResolutionEngine",
    "rank_suggestions",
]
