"""Per-repository metrics — dependency counts, depth statistics, simplified complexity."""

from __future__ import annotations

from typing import Iterator

from repo_graph.analysis.duplicates import find_duplicate_dependencies
from repo_graph.analysis.graph_models import RepositoryMetrics
from repo_graph.models import DependencyGraph, EdgeType


def calculate_node_depth(graph: DependencyGraph, node_id: str) -> int:
    """Longest dependency chain below ``node_id``.

    A single visited set is shared across the whole walk, so a node reached
    a second time (including via a cycle) contributes depth 0 instead of
    looping. Leaves and unknown ids have depth 0.
    """
    node = graph.nodes.get(node_id)
    if node is None or not node.dependencies:
        return 0

    visited = {node_id}
    # Each frame: [pending dependency ids, deepest child depth so far]
    stack: list[list] = [[iter(node.dependencies), 0]]

    while True:
        frame = stack[-1]
        pending: Iterator[str] = frame[0]
        for dep_id in pending:
            if dep_id in visited:
                continue
            visited.add(dep_id)
            dep = graph.nodes.get(dep_id)
            if dep is None or not dep.dependencies:
                continue
            stack.append([iter(dep.dependencies), 0])
            break
        else:
            depth = frame[1] + 1
            stack.pop()
            if not stack:
                return depth
            stack[-1][1] = max(stack[-1][1], depth)


def calculate_complexity(graph: DependencyGraph, repository: str) -> int:
    """Simplified cyclomatic complexity E - N + 2 over intra-repository edges, floored at 1."""
    edges = 0
    nodes = 0
    for node in graph.nodes.values():
        if node.repository != repository:
            continue
        nodes += 1
        for dep_id in node.dependencies:
            dep = graph.nodes.get(dep_id)
            if dep is not None and dep.repository == repository:
                edges += 1
    return max(1, edges - nodes + 2)


def calculate_repository_metrics(graph: DependencyGraph) -> list[RepositoryMetrics]:
    """One metrics record per repository, in first-seen node order."""
    repo_map: dict[str, RepositoryMetrics] = {}

    # Pass 1: seed
    for node in graph.nodes.values():
        if node.repository not in repo_map:
            repo_map[node.repository] = RepositoryMetrics(
                repository=node.repository,
                package_manager=node.package_manager,
            )

    # Pass 2: adjacency counts
    for node in graph.nodes.values():
        metrics = repo_map[node.repository]
        metrics.dependency_count += len(node.dependencies)
        metrics.dependent_count += len(node.dependents)
        metrics.health.total_dependencies += 1

        for dep_id in node.dependencies:
            dep = graph.nodes.get(dep_id)
            if dep is not None and dep.repository != node.repository:
                metrics.cross_repo_dependencies += 1

    # Pass 3: depth and complexity
    depths: dict[str, list[int]] = {repo: [] for repo in repo_map}
    for node_id, node in graph.nodes.items():
        depths[node.repository].append(calculate_node_depth(graph, node_id))

    for repo, metrics in repo_map.items():
        repo_depths = depths[repo]
        if repo_depths:
            metrics.health.max_dependency_depth = max(repo_depths)
            metrics.health.average_dependency_depth = sum(repo_depths) / len(repo_depths)
        metrics.cyclomatic_complexity = calculate_complexity(graph, repo)

    # Edge typing, attributed to the source node's repository
    for edge in graph.edges:
        source = graph.nodes.get(edge.source)
        if source is None:
            continue
        health = repo_map[source.repository].health
        if edge.edge_type == EdgeType.DIRECT:
            health.direct_dependencies += 1
        elif edge.edge_type == EdgeType.DEV:
            health.dev_dependencies += 1

    duplicates = find_duplicate_dependencies(graph)
    for node in graph.nodes.values():
        if not node.is_root and node.name in duplicates:
            repo_map[node.repository].health.duplicate_count += 1

    return list(repo_map.values())
