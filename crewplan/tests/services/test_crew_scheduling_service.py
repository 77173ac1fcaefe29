"""Tests for the crew scheduling facade."""

from datetime import date

import pytest
import structlog

from crewplan.core.config import Settings
from crewplan.domain.scheduling.value_objects.crew import CrewRequirement
from crewplan.domain.scheduling.value_objects.enums import (
    ConflictType,
    Division,
    EmployeeType,
)
from crewplan.infrastructure.cache import InMemoryScanCache, RedisScanCache
from crewplan.infrastructure.memory import InMemoryStore, LoggingAlertSink
from crewplan.services import (
    CrewSchedulingService,
    build_scan_cache,
    create_crew_scheduling_service,
)

from ..domain.scheduling.fixtures import (
    MONDAY,
    AssignmentFactory,
    EmployeeFactory,
    PhaseFactory,
    ProjectFactory,
    seed,
)


@pytest.fixture
def unled_phase(store):
    """A phase needing a foreman, with one journeyman assigned."""
    project = ProjectFactory.create()
    phase = PhaseFactory.create(project, crew=CrewRequirement(required_foreman=True))
    foreman = EmployeeFactory.create(EmployeeType.FOREMAN)
    worker = EmployeeFactory.create()
    seed(store, project, phase, foreman, worker, AssignmentFactory.create(phase, worker))
    return phase


@pytest.fixture
def overlapping(store):
    project = ProjectFactory.create()
    first = PhaseFactory.create(project, end_date=date(2024, 3, 8))
    second = PhaseFactory.create(
        project,
        phase_number=2,
        start_date=date(2024, 3, 6),
        end_date=date(2024, 3, 12),
        dependency_ids=[first.id],
    )
    seed(store, project, first, second)
    return project, first, second


class TestResolveAll:
    @pytest.mark.asyncio
    async def test_auto_apply_fixes_missing_foreman(self, service, alert_sink, unled_phase):
        report = await service.resolve_all(auto_apply=True)

        assert [c.type for c in report.conflicts] == [ConflictType.MISSING_FOREMAN]
        assert report.applied == 1
        assert report.unresolved == []
        assert await service.scan_all_conflicts() == []
        assert len(alert_sink.batches) == 1

    @pytest.mark.asyncio
    async def test_suggest_only(self, service, unled_phase):
        report = await service.resolve_all()

        assert report.outcomes == []
        [conflict] = report.conflicts
        assert report.suggestions[conflict.id][0].type.value == "ASSIGN_FOREMAN"
        assert report.unresolved == report.conflicts

    @pytest.mark.asyncio
    async def test_non_auto_suggestions_are_left_alone(self, service, overlapping):
        report = await service.resolve_all(auto_apply=True)

        assert [c.type for c in report.conflicts] == [ConflictType.OVERLAPPING_PHASES]
        assert report.outcomes == []


class TestOperations:
    @pytest.mark.asyncio
    async def test_apply_resolution_returns_success_flag(self, service, unled_phase):
        [conflict] = await service.scan_all_conflicts()
        [best, *rest] = await service.get_resolution_suggestions(conflict)

        assert await service.apply_resolution(best) is True
        assert await service.apply_resolution(rest[-1]) is False
        assert await service.scan_all_conflicts() == []

    @pytest.mark.asyncio
    async def test_adjusting_dates_refreshes_scan(self, service, overlapping):
        _, first, second = overlapping
        assert [c.type for c in await service.scan_all_conflicts()] == [
            ConflictType.OVERLAPPING_PHASES
        ]

        [moved] = await service.adjust_dependent_dates(first.id, first.end_date)

        assert moved.id == second.id
        assert moved.start_date == date(2024, 3, 9)
        assert await service.scan_all_conflicts() == []

    @pytest.mark.asyncio
    async def test_validate_assignment(self, service, unled_phase, store):
        worker = next(
            e for e in store.employees.values() if e.employee_type == EmployeeType.JOURNEYMAN
        )

        result = await service.validate_assignment(unled_phase.id, worker.id, MONDAY, 9)

        assert not result.is_valid
        assert result.of_type(ConflictType.DOUBLE_BOOKING)

    @pytest.mark.asyncio
    async def test_dependencies_and_critical_path(self, service, overlapping):
        project, first, second = overlapping

        validation = await service.validate_dependencies(
            project.id, [second.id], exclude_phase_id=first.id
        )
        critical = await service.calculate_critical_path(project.id)

        assert not validation.is_valid
        assert [phase.id for phase in critical] == [first.id, second.id]

    @pytest.mark.asyncio
    async def test_capacity_views(self, service, unled_phase):
        forecast = await service.forecast_capacity(
            Division.PLUMBING_MULTIFAMILY, date(2024, 3, 1), date(2024, 4, 30)
        )
        periods = await service.get_critical_periods(
            date(2024, 3, 1), date(2024, 3, 31), threshold_pct=0
        )

        assert len(forecast.periods) == 2
        assert len(periods) == len(Division)


class TestFactory:
    def test_memory_backend(self):
        config = Settings(CACHE_BACKEND="memory", CONFLICT_CACHE_TTL_SECONDS=60)

        cache = build_scan_cache(config)

        assert isinstance(cache, InMemoryScanCache)
        assert cache.ttl_seconds == 60

    def test_redis_backend(self):
        config = Settings(CACHE_BACKEND="redis", REDIS_HOST="cache.internal")

        cache = build_scan_cache(config)

        assert isinstance(cache, RedisScanCache)
        assert cache.ttl_seconds == config.CONFLICT_CACHE_TTL_SECONDS

    @pytest.mark.asyncio
    async def test_create_service_over_store(self, unled_phase, store):
        service = create_crew_scheduling_service(
            Settings(CACHE_BACKEND="memory"), store=store
        )

        assert isinstance(service, CrewSchedulingService)
        assert isinstance(service.aggregator._alert_sink, LoggingAlertSink)
        assert structlog.is_configured()
        assert len(await service.scan_all_conflicts(force_refresh=True)) >= 1

    def test_thresholds_follow_settings(self):
        service = create_crew_scheduling_service(
            Settings(MAX_DAILY_HOURS=12), store=InMemoryStore()
        )
        assert service.detector._thresholds.max_daily_hours == 12
