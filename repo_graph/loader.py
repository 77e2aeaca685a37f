"""Graph ingestion — wire-format dicts to DependencyGraph, plus adjacency validation.

The wire format is the JSON shape produced by the graph-construction service:
``{"nodes": [...], "edges": [...], "metadata": {...}}`` with camelCase keys.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from repo_graph.models import (
    AnalysisConfig,
    DependencyEdge,
    DependencyGraph,
    DependencyNode,
    EdgeType,
    GraphMetadata,
    PackageManager,
)

logger = logging.getLogger(__name__)


class GraphFormatError(ValueError):
    """The input does not describe a dependency graph."""


class GraphConsistencyError(ValueError):
    """The dependencies/dependents adjacency disagrees with the edge list."""

    def __init__(self, issues: list[str]):
        self.issues = issues
        preview = "; ".join(issues[:5])
        more = f" (+{len(issues) - 5} more)" if len(issues) > 5 else ""
        super().__init__(f"{len(issues)} graph consistency issue(s): {preview}{more}")


# ── Wire format → model ───────────────────────────────────────

def _id_list(raw: dict[str, Any], key: str) -> list[str]:
    value = raw.get(key, [])
    if not isinstance(value, list):
        raise GraphFormatError(f"Node {raw.get('id')!r}: {key!r} must be a list, got {value!r}")
    return [str(d) for d in value]


def _parse_node(raw: dict[str, Any]) -> DependencyNode:
    if not isinstance(raw, dict):
        raise GraphFormatError(f"Node must be an object: {raw!r}")
    try:
        node_id = raw["id"]
        repository = raw["repository"]
    except KeyError as e:
        raise GraphFormatError(f"Node is missing required field {e.args[0]!r}: {raw!r}") from None

    metadata = raw.get("metadata") or {}
    if not isinstance(metadata, dict):
        raise GraphFormatError(f"Node {node_id!r}: 'metadata' must be an object, got {metadata!r}")

    return DependencyNode(
        id=str(node_id),
        name=str(raw.get("name", node_id)),
        version=str(raw.get("version", "")),
        repository=str(repository),
        package_manager=PackageManager.parse(raw.get("packageManager")),
        dependencies=_id_list(raw, "dependencies"),
        dependents=_id_list(raw, "dependents"),
        metadata=dict(metadata),
    )


def _parse_edge(raw: dict[str, Any]) -> DependencyEdge:
    if not isinstance(raw, dict):
        raise GraphFormatError(f"Edge must be an object: {raw!r}")
    try:
        source = raw["from"]
        target = raw["to"]
    except KeyError as e:
        raise GraphFormatError(f"Edge is missing required field {e.args[0]!r}: {raw!r}") from None

    edge_type = raw.get("type", EdgeType.DIRECT.value)
    try:
        parsed_type = EdgeType(edge_type)
    except ValueError:
        raise GraphFormatError(f"Unknown edge type {edge_type!r} on {source} -> {target}") from None

    return DependencyEdge(
        source=str(source),
        target=str(target),
        edge_type=parsed_type,
        version_constraint=raw.get("versionConstraint"),
    )


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if not value:
        return datetime.now()
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        raise GraphFormatError(f"Invalid generatedAt timestamp: {value!r}") from None


def _counter(raw_meta: dict[str, Any], key: str, default: int) -> int:
    value = raw_meta.get(key, default)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise GraphFormatError(f"Metadata {key!r} must be an integer, got {value!r}") from None


def count_cross_repo_links(nodes: dict[str, DependencyNode]) -> int:
    count = 0
    for node in nodes.values():
        for dep_id in node.dependencies:
            dep = nodes.get(dep_id)
            if dep and dep.repository != node.repository:
                count += 1
    return count


def graph_from_dict(data: dict[str, Any], config: AnalysisConfig | None = None) -> DependencyGraph:
    """Build a DependencyGraph from its wire-format dict and validate it."""
    if not isinstance(data, dict):
        raise GraphFormatError("Graph must be a JSON object with 'nodes' and 'edges'")

    raw_nodes = data.get("nodes") or []
    if isinstance(raw_nodes, dict):
        # Accept an id-keyed mapping as well as a list.
        raw_nodes = list(raw_nodes.values())
    raw_edges = data.get("edges") or []
    if not isinstance(raw_nodes, list) or not isinstance(raw_edges, list):
        raise GraphFormatError("Graph 'nodes' and 'edges' must be lists")

    nodes: dict[str, DependencyNode] = {}
    for raw in raw_nodes:
        node = _parse_node(raw)
        if node.id in nodes:
            raise GraphFormatError(f"Duplicate node id: {node.id}")
        nodes[node.id] = node

    edges = [_parse_edge(raw) for raw in raw_edges]

    raw_meta = data.get("metadata") or {}
    if not isinstance(raw_meta, dict):
        raise GraphFormatError(f"Graph metadata must be an object, got {raw_meta!r}")
    metadata = GraphMetadata(
        workspace_id=str(raw_meta.get("workspaceId", "")),
        generated_at=_parse_timestamp(raw_meta.get("generatedAt")),
        total_nodes=_counter(raw_meta, "totalNodes", len(nodes)),
        total_edges=_counter(raw_meta, "totalEdges", len(edges)),
        cross_repo_links=_counter(raw_meta, "crossRepoLinks", count_cross_repo_links(nodes)),
    )

    graph = DependencyGraph(nodes=nodes, edges=edges, metadata=metadata)
    logger.debug("Loaded graph with %d nodes and %d edges", len(nodes), len(edges))

    config = config or AnalysisConfig()
    return validate_graph(graph, mode=config.validate_on_load)


def graph_to_dict(graph: DependencyGraph) -> dict[str, Any]:
    """Inverse of graph_from_dict."""
    return {
        "nodes": [
            {
                "id": node.id,
                "name": node.name,
                "version": node.version,
                "repository": node.repository,
                "packageManager": node.package_manager.value,
                "dependencies": list(node.dependencies),
                "dependents": list(node.dependents),
                **({"metadata": dict(node.metadata)} if node.metadata else {}),
            }
            for node in graph.nodes.values()
        ],
        "edges": [
            {
                "from": edge.source,
                "to": edge.target,
                "type": edge.edge_type.value,
                **({"versionConstraint": edge.version_constraint} if edge.version_constraint else {}),
            }
            for edge in graph.edges
        ],
        "metadata": {
            "workspaceId": graph.metadata.workspace_id,
            "generatedAt": graph.metadata.generated_at.isoformat(),
            "totalNodes": graph.metadata.total_nodes,
            "totalEdges": graph.metadata.total_edges,
            "crossRepoLinks": graph.metadata.cross_repo_links,
        },
    }


def load_graph(path: Path | str, config: AnalysisConfig | None = None) -> DependencyGraph:
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise GraphFormatError(f"{path} is not valid JSON: {e}") from e
    return graph_from_dict(data, config)


# ── Adjacency validation ──────────────────────────────────────

def check_consistency(graph: DependencyGraph) -> list[str]:
    """List every violation of the dependencies/dependents invariant."""
    issues: list[str] = []

    for edge in graph.edges:
        source = graph.nodes.get(edge.source)
        target = graph.nodes.get(edge.target)
        if source is None:
            issues.append(f"edge {edge.source} -> {edge.target}: unknown source node")
        elif edge.target not in source.dependencies:
            issues.append(f"edge {edge.source} -> {edge.target}: missing from {edge.source}.dependencies")
        if target is None:
            issues.append(f"edge {edge.source} -> {edge.target}: unknown target node")
        elif edge.source not in target.dependents:
            issues.append(f"edge {edge.source} -> {edge.target}: missing from {edge.target}.dependents")

    for node in graph.nodes.values():
        for dep_id in node.dependencies:
            dep = graph.nodes.get(dep_id)
            if dep is not None and node.id not in dep.dependents:
                issues.append(f"{node.id} depends on {dep_id} but is not listed in its dependents")
        for dependent_id in node.dependents:
            dependent = graph.nodes.get(dependent_id)
            if dependent is not None and node.id not in dependent.dependencies:
                issues.append(f"{dependent_id} is listed as a dependent of {node.id} but does not depend on it")

    return issues


def repair_adjacency(graph: DependencyGraph) -> DependencyGraph:
    """Return a copy whose adjacency lists are completed from edges and each other."""
    nodes = {
        node_id: dataclasses.replace(
            node,
            dependencies=list(node.dependencies),
            dependents=list(node.dependents),
            metadata=dict(node.metadata),
        )
        for node_id, node in graph.nodes.items()
    }

    def link(source_id: str, target_id: str) -> None:
        source = nodes.get(source_id)
        target = nodes.get(target_id)
        if source is None or target is None:
            return
        if target_id not in source.dependencies:
            source.dependencies.append(target_id)
        if source_id not in target.dependents:
            target.dependents.append(source_id)

    for edge in graph.edges:
        link(edge.source, edge.target)
    for node in graph.nodes.values():
        for dep_id in node.dependencies:
            link(node.id, dep_id)
        for dependent_id in node.dependents:
            link(dependent_id, node.id)

    metadata = dataclasses.replace(
        graph.metadata,
        total_nodes=len(nodes),
        total_edges=len(graph.edges),
        cross_repo_links=count_cross_repo_links(nodes),
    )
    return DependencyGraph(nodes=nodes, edges=list(graph.edges), metadata=metadata)


def validate_graph(graph: DependencyGraph, mode: str = "warn") -> DependencyGraph:
    """Apply the ingestion validation policy and return the graph to analyse."""
    if mode == "off":
        return graph

    issues = check_consistency(graph)
    if not issues:
        return graph

    if mode == "strict":
        raise GraphConsistencyError(issues)
    if mode == "repair":
        logger.info("Repairing %d adjacency issue(s) in graph %s", len(issues), graph.metadata.workspace_id)
        return repair_adjacency(graph)

    for issue in issues:
        logger.warning("Graph consistency: %s", issue)
    return graph
