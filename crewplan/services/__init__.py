"""Application services."""

from .crew_scheduling_service import (
    CrewSchedulingService,
    ResolutionReport,
    build_scan_cache,
    create_crew_scheduling_service,
)

__all__ = [
    "CrewSchedulingService",
    "ResolutionReport",
    "build_scan_cache",
    "create_crew_scheduling_service",
]
