"""Service fixtures wired over the in-memory unit of work."""

import pytest

from crewplan.domain.scheduling.services import (
    CapacityModel,
    ConflictDetector,
    CrewAvailabilityService,
    ResolutionEngine,
)

from ..fixtures import MONDAY


@pytest.fixture
def capacity_model(unit_of_work) -> CapacityModel:
    return CapacityModel(
        unit_of_work.employees,
        unit_of_work.phases,
        unit_of_work.projects,
        unit_of_work.assignments,
    )


@pytest.fixture
def detector(unit_of_work, capacity_model) -> ConflictDetector:
    return ConflictDetector(
        unit_of_work.phases,
        unit_of_work.employees,
        unit_of_work.assignments,
        capacity_model,
    )


@pytest.fixture
def availability(unit_of_work) -> CrewAvailabilityService:
    return CrewAvailabilityService(unit_of_work.employees, unit_of_work.assignments)


@pytest.fixture
def engine(unit_of_work, availability) -> ResolutionEngine:
    return ResolutionEngine(
        unit_of_work.phases,
        unit_of_work.employees,
        unit_of_work.assignments,
        availability,
        unit_of_work,
        today=lambda: MONDAY,
    )
