"""Alert sink interface for publishing freshly detected conflicts."""

from abc import ABC, abstractmethod

from ..value_objects.conflict import Conflict


class AlertSink(ABC):
    """Receives the conflicts of every fresh scan."""

    @abstractmethod
    async def publish(self, conflicts: list[Conflict]) -> None:
        """
        Publish detected conflicts.

        Raises:
            Exception: Any delivery failure; scan callers log and continue
        """
