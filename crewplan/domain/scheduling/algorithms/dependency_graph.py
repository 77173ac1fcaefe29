"""
Phase Dependency Graph Algorithms

Cycle detection, Kahn topological ordering and a Critical Path Method pass
over phases linked by id-based dependency edges. The functions are pure:
they take plain node data and never touch repositories.
"""

from collections import deque
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from uuid import UUID

from ...shared.exceptions import CircularDependencyError

CRITICAL_TOLERANCE = 0.001


@dataclass(frozen=True)
class PhaseNode:
    """Graph node: a phase id, its duration and its dependency ids."""

    phase_id: UUID
    duration: float
    dependencies: tuple[UUID, ...] = ()
    name: str = ""


@dataclass
class NodeSchedule:
    """CPM times of one node, in duration units from project start."""

    earliest_start: float = 0.0
    earliest_finish: float = 0.0
    latest_start: float = 0.0
    latest_finish: float = 0.0

    @property
    def slack(self) -> float:
        return self.latest_start - self.earliest_start

    @property
    def is_critical(self) -> bool:
        return abs(self.latest_start - self.earliest_start) < CRITICAL_TOLERANCE


@dataclass
class CriticalPathResult:
    """Result of critical path analysis."""

    ordered: list[PhaseNode]
    schedules: dict[UUID, NodeSchedule]
    project_duration: float
    critical_path: list[PhaseNode] = field(default_factory=list)

    @property
    def critical_ids(self) -> list[UUID]:
        return [node.phase_id for node in self.critical_path]

    def slack_of(self, phase_id: UUID) -> float:
        return self.schedules[phase_id].slack


def detect_cycle(
    phase_id: UUID,
    proposed_dependencies: Iterable[UUID],
    dependency_map: Mapping[UUID, Iterable[UUID]],
) -> bool:
    """
    Check whether giving ``phase_id`` the proposed dependencies creates a cycle.

    Args:
        phase_id: Phase whose dependency set is being replaced
        proposed_dependencies: New dependency ids for ``phase_id``
        dependency_map: Current dependency ids keyed by phase id

    Returns:
        True if a cycle is reachable from ``phase_id``
    """
    graph: dict[UUID, list[UUID]] = {
        node: list(deps) for node, deps in dependency_map.items()
    }
    graph[phase_id] = list(proposed_dependencies)

    visited: set[UUID] = set()
    on_stack: set[UUID] = set()
    stack: list[tuple[UUID, Iterable[UUID]]] = [(phase_id, iter(graph[phase_id]))]
    on_stack.add(phase_id)

    while stack:
        node, neighbours = stack[-1]
        advanced = False
        for neighbour in neighbours:
            if neighbour in on_stack:
                return True
            if neighbour not in visited:
                on_stack.add(neighbour)
                stack.append((neighbour, iter(graph.get(neighbour, ()))))
                advanced = True
                break
        if not advanced:
            stack.pop()
            on_stack.discard(node)
            visited.add(node)

    return False


def topological_sort(nodes: Sequence[PhaseNode]) -> list[PhaseNode]:
    """
    Order nodes so each follows all of its dependencies (Kahn's algorithm).

    Dependencies outside ``nodes`` are ignored. Ties keep input order.

    Raises:
        CircularDependencyError: If the nodes contain a cycle
    """
    by_id = {node.phase_id: node for node in nodes}
    in_degree = {node.phase_id: 0 for node in nodes}
    dependents: dict[UUID, list[UUID]] = {node.phase_id: [] for node in nodes}

    for node in nodes:
        for dep in node.dependencies:
            if dep in by_id:
                in_degree[node.phase_id] += 1
                dependents[dep].append(node.phase_id)

    queue = deque(node.phase_id for node in nodes if in_degree[node.phase_id] == 0)
    ordered: list[PhaseNode] = []

    while queue:
        current = queue.popleft()
        ordered.append(by_id[current])
        for dependent in dependents[current]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)

    if len(ordered) != len(by_id):
        raise CircularDependencyError()

    return ordered


def compute_critical_path(nodes: Sequence[PhaseNode]) -> CriticalPathResult:
    """
    Run the forward and backward CPM passes.

    Returns:
        Schedules for every node, the overall duration and the zero-slack
        nodes in topological order

    Raises:
        CircularDependencyError: If the nodes contain a cycle
    """
    ordered = topological_sort(nodes)
    schedules = {node.phase_id: NodeSchedule() for node in ordered}

    # Forward pass
    for node in ordered:
        schedule = schedules[node.phase_id]
        schedule.earliest_start = max(
            (
                schedules[dep].earliest_finish
                for dep in node.dependencies
                if dep in schedules
            ),
            default=0.0,
        )
        schedule.earliest_finish = schedule.earliest_start + node.duration

    project_duration = max(
        (schedule.earliest_finish for schedule in schedules.values()), default=0.0
    )

    dependents: dict[UUID, list[UUID]] = {node.phase_id: [] for node in ordered}
    for node in ordered:
        for dep in node.dependencies:
            if dep in dependents:
                dependents[dep].append(node.phase_id)

    # Backward pass
    for node in reversed(ordered):
        schedule = schedules[node.phase_id]
        schedule.latest_finish = min(
            (schedules[child].latest_start for child in dependents[node.phase_id]),
            default=project_duration,
        )
        schedule.latest_start = schedule.latest_finish - node.duration

    critical_path = [node for node in ordered if schedules[node.phase_id].is_critical]

    return CriticalPathResult(
        ordered=ordered,
        schedules=schedules,
        project_duration=project_duration,
        critical_path=critical_path,
    )
