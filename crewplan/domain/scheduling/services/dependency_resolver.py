"""
Dependency Resolver Service

Validates phase dependency sets against the stored project graph, computes
critical paths and cascades date changes onto dependent phases.
"""

from collections import deque
from datetime import date, timedelta
from enum import Enum
from uuid import UUID

from pydantic import Field

from crewplan.core.observability import get_logger, monitor_performance

from ...shared.base import DomainService, ValueObject
from ...shared.exceptions import (
    CircularDependencyError,
    CrossProjectDependencyError,
    DependencyNotFoundError,
    PhaseNotFoundError,
    ProjectNotFoundError,
    ValidationError,
)
from ..algorithms.dependency_graph import (
    CriticalPathResult,
    PhaseNode,
    compute_critical_path,
    detect_cycle,
)
from ..entities.phase import Phase
from ..repositories.phase_repository import PhaseRepository
from ..repositories.project_repository import ProjectRepository
from ..repositories.unit_of_work import UnitOfWork
from ..value_objects.enums import PhaseStatus

logger = get_logger(__name__)


class DependencyIssue(str, Enum):
    """Reason a dependency set was rejected."""

    NOT_FOUND = "NOT_FOUND"
    CROSS_PROJECT = "CROSS_PROJECT"
    CIRCULAR = "CIRCULAR"


class DependencyValidation(ValueObject):
    """Outcome of validating a proposed dependency set."""

    is_valid: bool
    issue: DependencyIssue | None = None
    message: str | None = None
    offending_ids: list[UUID] = Field(default_factory=list)


class GraphNode(ValueObject):
    id: UUID
    label: str
    status: PhaseStatus
    progress_pct: float
    start_date: date
    end_date: date


class GraphEdge(ValueObject):
    source: UUID
    target: UUID


class DependencyGraphView(ValueObject):
    """Nodes and dependency edges of a project, for display."""

    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)


def to_node(phase: Phase) -> PhaseNode:
    return PhaseNode(
        phase_id=phase.id,
        duration=float(phase.duration),
        dependencies=tuple(phase.dependency_ids),
        name=phase.name,
    )


class DependencyResolver(DomainService):
    """
    Service for phase dependency validation and critical path analysis.

    Dependencies must exist, belong to the same project and keep the
    project's graph acyclic.
    """

    def __init__(
        self,
        phase_repository: PhaseRepository,
        project_repository: ProjectRepository,
        unit_of_work: UnitOfWork,
    ) -> None:
        self._phase_repository = phase_repository
        self._project_repository = project_repository
        self._unit_of_work = unit_of_work

    @monitor_performance("validate_dependencies")
    async def validate_dependencies(
        self,
        project_id: UUID,
        proposed: list[UUID],
        exclude_phase_id: UUID | None = None,
    ) -> DependencyValidation:
        """
        Validate a proposed dependency set.

        Args:
            project_id: Project the dependent phase belongs to
            proposed: Proposed dependency phase ids
            exclude_phase_id: Phase being updated; enables cycle detection

        Returns:
            Validation outcome naming the first failing rule
        """
        if not proposed:
            return DependencyValidation(is_valid=True)

        unique = list(dict.fromkeys(proposed))
        found = await self._phase_repository.get_by_ids(unique)
        found_ids = {phase.id for phase in found}
        missing = [phase_id for phase_id in unique if phase_id not in found_ids]
        if missing:
            return DependencyValidation(
                is_valid=False,
                issue=DependencyIssue.NOT_FOUND,
                message="One or more dependency phases not found",
                offending_ids=missing,
            )

        foreign = [phase.id for phase in found if phase.project_id != project_id]
        if foreign:
            return DependencyValidation(
                is_valid=False,
                issue=DependencyIssue.CROSS_PROJECT,
                message="Dependencies must belong to the same project",
                offending_ids=foreign,
            )

        if exclude_phase_id is not None:
            project_phases = await self._phase_repository.get_by_project(project_id)
            dependency_map = {
                phase.id: phase.dependency_ids for phase in project_phases
            }
            if detect_cycle(exclude_phase_id, unique, dependency_map):
                logger.info(
                    "Circular dependency rejected",
                    phase_id=str(exclude_phase_id),
                    proposed=[str(phase_id) for phase_id in unique],
                )
                return DependencyValidation(
                    is_valid=False,
                    issue=DependencyIssue.CIRCULAR,
                    message="Circular dependency detected",
                    offending_ids=[exclude_phase_id],
                )

        return DependencyValidation(is_valid=True)

    async def ensure_valid_dependencies(
        self,
        project_id: UUID,
        proposed: list[UUID],
        exclude_phase_id: UUID | None = None,
    ) -> None:
        """
        Validate a dependency set, raising on the first failing rule.

        Raises:
            DependencyNotFoundError: If a dependency does not exist
            CrossProjectDependencyError: If a dependency is in another project
            CircularDependencyError: If the set would create a cycle
        """
        result = await self.validate_dependencies(project_id, proposed, exclude_phase_id)
        if result.is_valid:
            return
        if result.issue == DependencyIssue.NOT_FOUND:
            raise DependencyNotFoundError(result.offending_ids)
        if result.issue == DependencyIssue.CROSS_PROJECT:
            raise CrossProjectDependencyError(project_id, result.offending_ids)
        raise CircularDependencyError(exclude_phase_id)

    @monitor_performance("critical_path")
    async def analyze_critical_path(self, project_id: UUID) -> CriticalPathResult:
        """Run CPM over a project's phases, durations in business days."""
        await self._require_project(project_id)
        phases = await self._phase_repository.get_by_project(project_id)
        return compute_critical_path([to_node(phase) for phase in phases])

    async def calculate_critical_path(self, project_id: UUID) -> list[Phase]:
        """Critical phases of a project in topological order."""
        phases = {
            phase.id: phase
            for phase in await self._phase_repository.get_by_project(project_id)
        }
        result = await self.analyze_critical_path(project_id)
        return [phases[phase_id] for phase_id in result.critical_ids]

    async def get_dependency_graph(self, project_id: UUID) -> DependencyGraphView:
        await self._require_project(project_id)
        phases = await self._phase_repository.get_by_project(project_id)
        known = {phase.id for phase in phases}
        nodes = [
            GraphNode(
                id=phase.id,
                label=f"{phase.phase_number}. {phase.name}",
                status=phase.status,
                progress_pct=phase.progress_pct,
                start_date=phase.start_date,
                end_date=phase.end_date,
            )
            for phase in phases
        ]
        edges = [
            GraphEdge(source=dep, target=phase.id)
            for phase in phases
            for dep in phase.dependency_ids
            if dep in known
        ]
        return DependencyGraphView(nodes=nodes, edges=edges)

    @monitor_performance("adjust_dependent_dates")
    async def adjust_dependent_dates(
        self, phase_id: UUID, new_end_date: date
    ) -> list[Phase]:
        """
        Push dependents so each starts after its dependency's new end.

        A dependent starting on or before ``new_end_date`` moves forward,
        keeping its length, and the shift cascades onto its own dependents.
        Phases pushed outside their project's dates are moved anyway and
        logged as overruns.

        Returns:
            Phases that moved, in the order they were adjusted

        Raises:
            PhaseNotFoundError: If ``phase_id`` does not exist
        """
        if await self._phase_repository.get_by_id(phase_id) is None:
            raise PhaseNotFoundError(phase_id)

        adjusted: dict[UUID, Phase] = {}
        async with self._unit_of_work:
            pending: deque[tuple[UUID, date]] = deque([(phase_id, new_end_date)])
            while pending:
                current_id, end = pending.popleft()
                dependents = await self._phase_repository.get_dependents(current_id)
                for dependent in sorted(dependents, key=lambda p: p.phase_number):
                    earliest_start = end + timedelta(days=1)
                    if dependent.start_date >= earliest_start:
                        continue
                    shift = (earliest_start - dependent.start_date).days
                    dependent.shift(shift)
                    await self._phase_repository.save(dependent)
                    adjusted[dependent.id] = dependent
                    await self._check_project_bounds(dependent)
                    pending.append((dependent.id, dependent.end_date))

        logger.info(
            "Dependent phases adjusted",
            phase_id=str(phase_id),
            new_end_date=new_end_date.isoformat(),
            adjusted=len(adjusted),
        )
        return list(adjusted.values())

    async def _check_project_bounds(self, phase: Phase) -> None:
        project = await self._project_repository.get_by_id(phase.project_id)
        if project is None:
            return
        try:
            phase.ensure_within_project(project)
        except ValidationError as e:
            logger.warning(
                "Adjusted phase overruns its project",
                phase_id=str(phase.id),
                project_id=str(project.id),
                phase_end=phase.end_date.isoformat(),
                project_end=project.end_date.isoformat(),
                error=e.message,
            )

    async def _require_project(self, project_id: UUID) -> None:
        if await self._project_repository.get_by_id(project_id) is None:
            raise ProjectNotFoundError(project_id)
