"""
Crew Scheduling Service

Public entry point of the scheduling engine. Wires the dependency resolver,
capacity model, conflict detector, aggregator and resolution engine over one
set of repositories and exposes their operations.
"""

from collections.abc import Callable
from datetime import date
from uuid import UUID

from pydantic import Field

from crewplan.core.config import Settings, settings as default_settings
from crewplan.core.observability import (
    get_logger,
    initialize_observability,
    monitor_performance,
)
from crewplan.domain.scheduling.entities import Phase
from crewplan.domain.scheduling.repositories import (
    AlertSink,
    AssignmentRepository,
    EmployeeRepository,
    PhaseRepository,
    ProjectRepository,
    ScanCache,
    UnitOfWork,
)
from crewplan.domain.scheduling.services import (
    CapacityModel,
    ConflictAggregator,
    ConflictDetector,
    CrewAvailabilityService,
    DependencyResolver,
    ResolutionEngine,
)
from crewplan.domain.scheduling.services.dependency_resolver import DependencyValidation
from crewplan.domain.scheduling.value_objects import (
    DEFAULT_THRESHOLDS,
    CapacityForecast,
    Conflict,
    DivisionCapacity,
    Division,
    ResolutionOutcome,
    ResolutionSuggestion,
    SchedulingThresholds,
    ValidationResult,
)
from crewplan.domain.shared.base import ValueObject
from crewplan.infrastructure.cache import InMemoryScanCache, RedisScanCache
from crewplan.infrastructure.memory import (
    InMemoryStore,
    InMemoryUnitOfWork,
    LoggingAlertSink,
)

logger = get_logger(__name__)


class ResolutionReport(ValueObject):
    """Conflicts of a scan with their ranked suggestions and applied fixes."""

    conflicts: list[Conflict] = Field(default_factory=list)
    suggestions: dict[UUID, list[ResolutionSuggestion]] = Field(default_factory=dict)
    outcomes: list[ResolutionOutcome] = Field(default_factory=list)

    @property
    def applied(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def unresolved(self) -> list[Conflict]:
        applied = {o.suggestion_id for o in self.outcomes if o.success}
        fixed = {
            conflict_id
            for conflict_id, ranked in self.suggestions.items()
            if any(suggestion.id in applied for suggestion in ranked)
        }
        return [c for c in self.conflicts if c.id not in fixed]


class CrewSchedulingService:
    """
    Facade over the crew scheduling engine.

    Mutating operations invalidate the cached conflict scan.
    """

    def __init__(
        self,
        project_repository: ProjectRepository,
        phase_repository: PhaseRepository,
        employee_repository: EmployeeRepository,
        assignment_repository: AssignmentRepository,
        unit_of_work: UnitOfWork,
        cache: ScanCache,
        alert_sink: AlertSink | None = None,
        thresholds: SchedulingThresholds = DEFAULT_THRESHOLDS,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.dependencies = DependencyResolver(
            phase_repository, project_repository, unit_of_work
        )
        self.capacity = CapacityModel(
            employee_repository,
            phase_repository,
            project_repository,
            assignment_repository,
            thresholds,
        )
        self.detector = ConflictDetector(
            phase_repository,
            employee_repository,
            assignment_repository,
            self.capacity,
            thresholds,
        )
        self.aggregator = ConflictAggregator(
            self.detector,
            project_repository,
            phase_repository,
            employee_repository,
            cache,
            alert_sink=alert_sink,
            thresholds=thresholds,
            today=today,
        )
        self.resolutions = ResolutionEngine(
            phase_repository,
            employee_repository,
            assignment_repository,
            CrewAvailabilityService(employee_repository, assignment_repository, thresholds),
            unit_of_work,
            thresholds=thresholds,
            today=today,
        )

    @classmethod
    def in_memory(
        cls,
        store: InMemoryStore | None = None,
        cache: ScanCache | None = None,
        alert_sink: AlertSink | None = None,
        thresholds: SchedulingThresholds = DEFAULT_THRESHOLDS,
        today: Callable[[], date] = date.today,
    ) -> "CrewSchedulingService":
        """Build a service over an in-memory store."""
        unit_of_work = InMemoryUnitOfWork(store or InMemoryStore())
        return cls(
            unit_of_work.projects,
            unit_of_work.phases,
            unit_of_work.employees,
            unit_of_work.assignments,
            unit_of_work,
            cache or InMemoryScanCache(),
            alert_sink=alert_sink,
            thresholds=thresholds,
            today=today,
        )

    async def validate_assignment(
        self, phase_id: UUID, employee_id: UUID, day: date, hours: float
    ) -> ValidationResult:
        return await self.detector.validate_assignment(phase_id, employee_id, day, hours)

    async def scan_all_conflicts(self, force_refresh: bool = False) -> list[Conflict]:
        return await self.aggregator.scan_all_conflicts(force_refresh=force_refresh)

    async def get_resolution_suggestions(
        self, conflict: Conflict
    ) -> list[ResolutionSuggestion]:
        return await self.resolutions.get_resolution_suggestions(conflict)

    async def apply_resolution(self, suggestion: ResolutionSuggestion) -> bool:
        """Apply a suggestion; True when every change committed."""
        outcome = await self.apply_resolution_outcome(suggestion)
        return outcome.success

    async def apply_resolution_outcome(
        self, suggestion: ResolutionSuggestion
    ) -> ResolutionOutcome:
        outcome = await self.resolutions.apply_resolution(suggestion)
        if outcome.success:
            await self.aggregator.invalidate()
        return outcome

    async def calculate_critical_path(self, project_id: UUID) -> list[Phase]:
        return await self.dependencies.calculate_critical_path(project_id)

    async def forecast_capacity(
        self, division: Division, start: date, end: date
    ) -> CapacityForecast:
        return await self.capacity.forecast_capacity(division, start, end)

    async def validate_dependencies(
        self,
        project_id: UUID,
        proposed: list[UUID],
        exclude_phase_id: UUID | None = None,
    ) -> DependencyValidation:
        return await self.dependencies.validate_dependencies(
            project_id, proposed, exclude_phase_id
        )

    async def adjust_dependent_dates(
        self, phase_id: UUID, new_end_date: date
    ) -> list[Phase]:
        adjusted = await self.dependencies.adjust_dependent_dates(phase_id, new_end_date)
        if adjusted:
            await self.aggregator.invalidate()
        return adjusted

    async def get_critical_periods(
        self, start: date, end: date, threshold_pct: float | None = None
    ) -> list[DivisionCapacity]:
        return await self.capacity.get_critical_periods(start, end, threshold_pct)

    @monitor_performance("resolve_all")
    async def resolve_all(
        self, auto_apply: bool = False, force_refresh: bool = False
    ) -> ResolutionReport:
        """
        Scan, suggest and optionally apply the best fix of each conflict.

        Only the top-ranked suggestion of a conflict is applied, and only
        when it is auto-applicable.
        """
        conflicts = await self.scan_all_conflicts(force_refresh=force_refresh)
        suggestions: dict[UUID, list[ResolutionSuggestion]] = {}
        outcomes: list[ResolutionOutcome] = []

        for conflict in conflicts:
            ranked = await self.get_resolution_suggestions(conflict)
            suggestions[conflict.id] = ranked
            if auto_apply and ranked and ranked[0].auto_applicable:
                outcomes.append(await self.resolutions.apply_resolution(ranked[0]))

        if any(outcome.success for outcome in outcomes):
            await self.aggregator.invalidate()

        report = ResolutionReport(
            conflicts=conflicts, suggestions=suggestions, outcomes=outcomes
        )
        logger.info(
            "Resolution pass completed",
            conflicts=len(conflicts),
            applied=report.applied,
            auto_apply=auto_apply,
        )
        return report


def build_scan_cache(config: Settings) -> ScanCache:
    """Scan cache selected by ``CACHE_BACKEND``."""
    if config.CACHE_BACKEND == "redis":
        return RedisScanCache.from_url(
            config.REDIS_URL,
            ttl_seconds=config.CONFLICT_CACHE_TTL_SECONDS,
            key_prefix=config.CACHE_KEY_PREFIX,
        )
    return InMemoryScanCache(ttl_seconds=config.CONFLICT_CACHE_TTL_SECONDS)


def create_crew_scheduling_service(
    config: Settings | None = None,
    store: InMemoryStore | None = None,
    alert_sink: AlertSink | None = None,
) -> CrewSchedulingService:
    """
    Build the service from settings over the in-memory persistence layer.

    Logging and metrics are configured from the same settings.
    """
    config = config or default_settings
    initialize_observability(config)
    return CrewSchedulingService.in_memory(
        store=store,
        cache=build_scan_cache(config),
        alert_sink=alert_sink or LoggingAlertSink(),
        thresholds=config.scheduling_thresholds(),
    )
