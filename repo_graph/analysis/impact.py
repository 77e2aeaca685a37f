"""Impact analyzer — BFS along the dependents direction from a changed node."""

from __future__ import annotations

import logging
import math
from collections import deque

from repo_graph.analysis.graph_models import ImpactAnalysis
from repo_graph.models import DependencyGraph

logger = logging.getLogger(__name__)

CRITICAL_PATH_LIMIT = 10


def _is_critical(graph: DependencyGraph, path: list[str]) -> bool:
    """More than two hops' worth of nodes spanning more than one repository."""
    if len(path) <= 2:
        return False
    repos = {graph.nodes[n].repository if n in graph.nodes else "" for n in path}
    return len(repos) > 1


def analyze_impact(
    graph: DependencyGraph,
    node_id: str,
    critical_path_limit: int = CRITICAL_PATH_LIMIT,
) -> ImpactAnalysis | None:
    """Find every node that would be affected by a change to ``node_id``.

    Returns None when ``node_id`` is not in the graph.
    """
    target = graph.nodes.get(node_id)
    if target is None:
        return None

    direct: list[str] = []
    for dependent_id in target.dependents:
        if dependent_id not in graph.nodes:
            logger.debug("Skipping unknown dependent %s of %s", dependent_id, node_id)
            continue
        if dependent_id not in direct:
            direct.append(dependent_id)
    direct_set = set(direct)

    transitive: list[str] = []
    affected_repos: list[str] = []
    critical_paths: list[list[str]] = []

    visited: set[str] = {node_id}
    queue: deque[tuple[str, list[str]]] = deque((d, [node_id, d]) for d in direct)

    while queue:
        current_id, path = queue.popleft()
        if current_id in visited:
            continue
        visited.add(current_id)

        current = graph.nodes.get(current_id)
        if current is None:
            continue

        if current_id not in direct_set:
            transitive.append(current_id)
        if current.repository not in affected_repos:
            affected_repos.append(current.repository)

        if _is_critical(graph, path) and len(critical_paths) < critical_path_limit:
            critical_paths.append(path)

        for dependent_id in current.dependents:
            if dependent_id not in visited:
                queue.append((dependent_id, path + [dependent_id]))

    # Self-loop: the target is its own dependent but was pre-seeded as visited
    if node_id in direct_set and target.repository not in affected_repos:
        affected_repos.append(target.repository)

    total_nodes = len(graph.nodes)
    affected_count = len(direct) + len(transitive)
    # Half-up rounding, not banker's rounding
    impact_score = min(100, math.floor(affected_count / total_nodes * 100 + 0.5))

    return ImpactAnalysis(
        target_node=node_id,
        direct_impact=direct,
        transitive_impact=transitive,
        affected_repositories=affected_repos,
        impact_score=impact_score,
        critical_path=critical_paths,
    )
