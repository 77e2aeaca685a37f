"""Path queries over the dependencies direction — shortest path and bounded enumeration."""

from __future__ import annotations

from collections import deque
from typing import Iterator

from repo_graph.models import DependencyGraph

DEFAULT_MAX_DEPTH = 10


def find_shortest_path(graph: DependencyGraph, from_id: str, to_id: str) -> list[str] | None:
    """BFS by hop count. None if either id is unknown or ``to_id`` is unreachable."""
    if from_id not in graph.nodes or to_id not in graph.nodes:
        return None

    queue: deque[list[str]] = deque([[from_id]])
    visited: set[str] = {from_id}

    while queue:
        path = queue.popleft()
        current = path[-1]
        if current == to_id:
            return path

        node = graph.nodes.get(current)
        if node is None:
            continue

        for dep_id in node.dependencies:
            if dep_id not in visited:
                visited.add(dep_id)
                queue.append(path + [dep_id])

    return None


def get_all_paths(
    graph: DependencyGraph,
    from_id: str,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[list[str]]:
    """Enumerate dependency chains starting at ``from_id``.

    A chain ends at a leaf, at an unknown id, at ``max_depth`` hops, or where
    every remaining dependency is already on the chain (a cycle).
    """
    if from_id not in graph.nodes:
        return []

    paths: list[list[str]] = []
    current_path: list[str] = [from_id]
    on_path: set[str] = {from_id}

    def next_ids(node_id: str, depth: int) -> list[str]:
        node = graph.nodes.get(node_id)
        if node is None or depth >= max_depth:
            return []
        return [d for d in dict.fromkeys(node.dependencies) if d not in on_path]

    first = next_ids(from_id, 0)
    if not first:
        return [[from_id]]

    # One iterator per node on current_path; len(stack) is the depth of its children
    stack: list[Iterator[str]] = [iter(first)]

    while stack:
        for dep_id in stack[-1]:
            current_path.append(dep_id)
            on_path.add(dep_id)
            children = next_ids(dep_id, len(stack))
            if children:
                stack.append(iter(children))
                break
            paths.append(list(current_path))
            current_path.pop()
            on_path.discard(dep_id)
        else:
            stack.pop()
            on_path.discard(current_path.pop())

    return paths
