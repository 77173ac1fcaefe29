"""Unit of work over the in-memory store."""

from crewplan.core.observability import get_logger
from crewplan.domain.scheduling.repositories.unit_of_work import UnitOfWork

from .repositories import (
    InMemoryAssignmentRepository,
    InMemoryEmployeeRepository,
    InMemoryPhaseRepository,
    InMemoryProjectRepository,
)
from .store import InMemoryStore

logger = get_logger(__name__)


class InMemoryUnitOfWork(UnitOfWork):
    """
    Unit of work over an ``InMemoryStore``.

    ``begin`` snapshots every table and ``rollback`` restores the snapshot.
    Nested use joins the outermost transaction.
    """

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self._snapshot: InMemoryStore | None = None
        self._depth = 0
        self.projects = InMemoryProjectRepository(store)
        self.phases = InMemoryPhaseRepository(store)
        self.employees = InMemoryEmployeeRepository(store)
        self.assignments = InMemoryAssignmentRepository(store)
        self.commits = 0
        self.rollbacks = 0

    async def begin(self) -> None:
        if self._depth == 0:
            self._snapshot = self._store.snapshot()
        self._depth += 1

    async def commit(self) -> None:
        self._depth = max(0, self._depth - 1)
        if self._depth == 0:
            self._snapshot = None
            self.commits += 1

    async def rollback(self) -> None:
        self._depth = max(0, self._depth - 1)
        if self._depth == 0 and self._snapshot is not None:
            self._store.restore(self._snapshot)
            self._snapshot = None
            self.rollbacks += 1
            logger.info("In-memory transaction rolled back")
