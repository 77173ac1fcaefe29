"""
Conflict Aggregator Service

Sweeps every active phase, division and employee for conflicts, caches the
combined result and publishes fresh scans to an alert sink.
"""

from collections import Counter
from collections.abc import Callable
from datetime import date, timedelta

from crewplan.core.observability import (
    CONFLICTS_DETECTED,
    get_logger,
    monitor_performance,
)

from ...shared.base import DomainService
from ..repositories.alert_sink import AlertSink
from ..repositories.employee_repository import EmployeeRepository
from ..repositories.phase_repository import PhaseRepository
from ..repositories.project_repository import ProjectRepository
from ..repositories.scan_cache import ALL_CONFLICTS_KEY, ScanCache
from ..value_objects.conflict import Conflict
from ..value_objects.enums import ConflictSeverity, ConflictType, Division
from ..value_objects.thresholds import DEFAULT_THRESHOLDS, SchedulingThresholds
from .conflict_detector import ConflictDetector

logger = get_logger(__name__)


class ConflictAggregator(DomainService):
    """
    Service producing the full conflict list.

    A failure while checking one phase, division or employee is logged and
    that item is skipped; the rest of the sweep still completes.
    """

    def __init__(
        self,
        detector: ConflictDetector,
        project_repository: ProjectRepository,
        phase_repository: PhaseRepository,
        employee_repository: EmployeeRepository,
        cache: ScanCache,
        alert_sink: AlertSink | None = None,
        thresholds: SchedulingThresholds = DEFAULT_THRESHOLDS,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._detector = detector
        self._project_repository = project_repository
        self._phase_repository = phase_repository
        self._employee_repository = employee_repository
        self._cache = cache
        self._alert_sink = alert_sink
        self._thresholds = thresholds
        self._today = today

    @monitor_performance("scan_all_conflicts")
    async def scan_all_conflicts(self, force_refresh: bool = False) -> list[Conflict]:
        """
        Return every current conflict, from cache unless ``force_refresh``.

        Args:
            force_refresh: Recompute even when a cached scan is fresh

        Returns:
            Phase conflicts, then division capacity conflicts, then employee
            conflicts
        """
        if not force_refresh:
            cached = await self._cache.get(ALL_CONFLICTS_KEY)
            if cached is not None:
                logger.debug("Conflict scan served from cache", count=len(cached))
                return cached

        start = self._today()
        end = start + timedelta(days=self._thresholds.capacity_scan_window_days)

        conflicts: list[Conflict] = []
        conflicts.extend(await self._scan_phases())
        conflicts.extend(await self._scan_divisions(start, end))
        conflicts.extend(await self._scan_employees(start, end))

        for conflict in conflicts:
            CONFLICTS_DETECTED.labels(
                conflict_type=conflict.type.value, severity=conflict.severity.value
            ).inc()

        await self._cache.set(ALL_CONFLICTS_KEY, conflicts)
        await self._publish(conflicts)

        logger.info(
            "Conflict scan completed",
            total=len(conflicts),
            window_start=start.isoformat(),
            window_end=end.isoformat(),
        )
        return conflicts

    async def invalidate(self) -> None:
        """Drop the cached scan so the next call recomputes it."""
        await self._cache.invalidate(ALL_CONFLICTS_KEY)

    @staticmethod
    def summarize(conflicts: list[Conflict]) -> dict[str, dict[str, int]]:
        """Count conflicts by type and by severity."""
        by_type = Counter(conflict.type for conflict in conflicts)
        by_severity = Counter(conflict.severity for conflict in conflicts)
        return {
            "by_type": {t.value: by_type[t] for t in ConflictType if t in by_type},
            "by_severity": {s.value: by_severity.get(s, 0) for s in ConflictSeverity},
        }

    async def _scan_phases(self) -> list[Conflict]:
        active_projects = {
            project.id for project in await self._project_repository.get_active()
        }
        conflicts: list[Conflict] = []
        for phase in await self._phase_repository.get_active():
            if phase.project_id not in active_projects:
                continue
            try:
                conflicts.extend(await self._detector.phase_conflicts(phase))
            except Exception as e:
                logger.error(
                    "Phase conflict check failed",
                    phase_id=str(phase.id),
                    error=str(e),
                    error_type=type(e).__name__,
                )
        return conflicts

    async def _scan_divisions(self, start: date, end: date) -> list[Conflict]:
        conflicts: list[Conflict] = []
        for division in Division:
            try:
                conflicts.extend(
                    await self._detector.division_conflicts(division, start, end)
                )
            except Exception as e:
                logger.error(
                    "Division capacity check failed",
                    division=division.value,
                    error=str(e),
                    error_type=type(e).__name__,
                )
        return conflicts

    async def _scan_employees(self, start: date, end: date) -> list[Conflict]:
        conflicts: list[Conflict] = []
        for employee in await self._employee_repository.get_active():
            try:
                conflicts.extend(
                    await self._detector.employee_conflicts(employee, start, end)
                )
            except Exception as e:
                logger.error(
                    "Employee conflict check failed",
                    employee_id=str(employee.id),
                    error=str(e),
                    error_type=type(e).__name__,
                )
        return conflicts

    async def _publish(self, conflicts: list[Conflict]) -> None:
        if self._alert_sink is None or not conflicts:
            return
        try:
            await self._alert_sink.publish(conflicts)
        except Exception as e:
            logger.warning(
                "Conflict alert publication failed",
                count=len(conflicts),
                error=str(e),
                error_type=type(e).__name__,
            )
