"""Repository interfaces consumed by the scheduling services."""

from .alert_sink import AlertSink
from .assignment_repository import AssignmentRepository
from .employee_repository import EmployeeRepository
from .phase_repository import PhaseRepository
from .project_repository import ProjectRepository
from .scan_cache import ALL_CONFLICTS_KEY, ScanCache
from .unit_of_work import UnitOfWork

__all__ = [
    "ALL_CONFLICTS_KEY",
    "AlertSink",
    "AssignmentRepository",
    "EmployeeRepository",
    "PhaseRepository",
    "ProjectRepository",
    "ScanCache",
    "UnitOfWork",
]
