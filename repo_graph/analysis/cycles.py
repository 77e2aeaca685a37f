"""Cycle detector — DFS with a recursion stack and path trace, severity by repository span."""

from __future__ import annotations

import logging
from typing import Iterator

from repo_graph.analysis.graph_models import DependencyCycle
from repo_graph.models import DependencyGraph, Severity

logger = logging.getLogger(__name__)

MEDIUM_CYCLE_THRESHOLD = 5


def classify_severity(
    repositories: set[str] | list[str],
    cycle_length: int,
    medium_threshold: int = MEDIUM_CYCLE_THRESHOLD,
) -> Severity:
    """Cross-repository cycles are always high; long single-repo cycles are medium."""
    if len(set(repositories)) > 1:
        return Severity.HIGH
    if cycle_length > medium_threshold:
        return Severity.MEDIUM
    return Severity.LOW


def _build_cycle(
    graph: DependencyGraph,
    cycle_nodes: list[str],
    medium_threshold: int,
) -> DependencyCycle:
    repositories: list[str] = []
    for node_id in cycle_nodes:
        node = graph.nodes.get(node_id)
        if node and node.repository not in repositories:
            repositories.append(node.repository)

    return DependencyCycle(
        nodes=cycle_nodes + [cycle_nodes[0]],
        length=len(cycle_nodes),
        repositories=repositories,
        severity=classify_severity(repositories, len(cycle_nodes), medium_threshold),
    )


def detect_cycles(
    graph: DependencyGraph,
    medium_threshold: int = MEDIUM_CYCLE_THRESHOLD,
) -> list[DependencyCycle]:
    """Detect cycles in the ``dependencies`` adjacency.

    Every back edge found during the DFS yields one cycle, so a strongly
    connected cluster can report several overlapping cycles. The walk uses an
    explicit stack so deep dependency chains do not hit the recursion limit.
    """
    cycles: list[DependencyCycle] = []
    visited: set[str] = set()
    recursion_stack: set[str] = set()
    current_path: list[str] = []

    for start_id, start_node in graph.nodes.items():
        if start_id in visited:
            continue

        visited.add(start_id)
        recursion_stack.add(start_id)
        current_path.append(start_id)
        stack: list[tuple[str, Iterator[str]]] = [(start_id, iter(start_node.dependencies))]

        while stack:
            node_id, pending = stack[-1]
            for dep_id in pending:
                if dep_id not in visited:
                    visited.add(dep_id)
                    dep_node = graph.nodes.get(dep_id)
                    if dep_node is None:
                        logger.debug("Skipping unknown dependency %s of %s", dep_id, node_id)
                        continue
                    recursion_stack.add(dep_id)
                    current_path.append(dep_id)
                    stack.append((dep_id, iter(dep_node.dependencies)))
                    break
                if dep_id in recursion_stack:
                    start = current_path.index(dep_id)
                    cycles.append(_build_cycle(graph, current_path[start:], medium_threshold))
            else:
                stack.pop()
                current_path.pop()
                recursion_stack.discard(node_id)

    if cycles:
        logger.debug("Detected %d dependency cycle(s)", len(cycles))
    return cycles
