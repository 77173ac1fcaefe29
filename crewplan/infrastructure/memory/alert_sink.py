"""Alert sinks that keep or log published conflicts."""

from crewplan.core.observability import get_logger
from crewplan.domain.scheduling.repositories.alert_sink import AlertSink
from crewplan.domain.scheduling.value_objects.conflict import Conflict

logger = get_logger(__name__)


class InMemoryAlertSink(AlertSink):
    """Keeps every published batch, newest last."""

    def __init__(self) -> None:
        self.batches: list[list[Conflict]] = []

    async def publish(self, conflicts: list[Conflict]) -> None:
        self.batches.append(list(conflicts))

    @property
    def published(self) -> list[Conflict]:
        return [conflict for batch in self.batches for conflict in batch]


class LoggingAlertSink(AlertSink):
    """Logs blocking conflicts as warnings and a summary of the rest."""

    async def publish(self, conflicts: list[Conflict]) -> None:
        for conflict in conflicts:
            if conflict.is_blocking:
                logger.warning(
                    "Scheduling conflict",
                    conflict_type=conflict.type.value,
                    severity=conflict.severity.value,
                    entity_type=conflict.entity_type.value,
                    entity_id=str(conflict.entity_id),
                    description=conflict.description,
                )
        logger.info("Conflict alerts published", count=len(conflicts))
