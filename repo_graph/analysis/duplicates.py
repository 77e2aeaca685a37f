"""Duplicate dependency finder — packages present with more than one version."""

from __future__ import annotations

from repo_graph.models import DependencyGraph


def find_duplicate_dependencies(graph: DependencyGraph) -> dict[str, list[dict[str, str]]]:
    """Map package name -> [{repository, version}, ...] for multi-version packages.

    Synthetic ``:root`` nodes are ignored. A package present in several
    repositories with the same version string is not a duplicate.
    """
    by_name: dict[str, list[dict[str, str]]] = {}

    for node in graph.nodes.values():
        if node.is_root:
            continue
        by_name.setdefault(node.name, []).append({
            "repository": node.repository,
            "version": node.version,
        })

    return {
        name: entries
        for name, entries in by_name.items()
        if len({e["version"] for e in entries}) > 1
    }
