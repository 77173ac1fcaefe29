"""In-memory persistence for tests and embedded use."""

from .alert_sink import InMemoryAlertSink, LoggingAlertSink
from .repositories import (
    InMemoryAssignmentRepository,
    InMemoryEmployeeRepository,
    InMemoryPhaseRepository,
    InMemoryProjectRepository,
)
from .store import InMemoryStore
from .unit_of_work import InMemoryUnitOfWork

__all__ = [
    "InMemoryAlertSink",
    "InMemoryAssignmentRepository",
    "InMemoryEmployeeRepository",
    "InMemoryPhaseRepository",
    "InMemoryProjectRepository",
    "InMemoryStore",
    "InMemoryUnitOfWork",
    "LoggingAlertSink",
]
