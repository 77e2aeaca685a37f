"""Summary and visualization projections — read-only reporting shapes over the graph."""

from __future__ import annotations

from repo_graph.analysis.cycles import detect_cycles
from repo_graph.models import DependencyGraph, EdgeType

DEFAULT_TOP_N = 10

# Fill colours for repository clusters, assigned in first-seen order
_REPO_COLORS = [
    "#a8d5ff", "#ffb3ba", "#c9ffb3", "#ffffb3",
    "#ffdfba", "#d4b5ff", "#bae1ff", "#e0e0e0",
]


def _top_counts(counts: dict[str, int], top_n: int) -> list[dict]:
    ranked = sorted(counts.items(), key=lambda kv: -kv[1])  # stable: ties keep node order
    return [{"node": node_id, "count": count} for node_id, count in ranked[:top_n]]


def generate_summary(graph: DependencyGraph, top_n: int = DEFAULT_TOP_N) -> dict:
    """Aggregate counts plus the most depended-on and most dependent nodes.

    Returns: {total_repositories, total_dependencies, cross_repo_links, cycles,
    average_dependencies_per_repo, most_depended_on, most_dependent}
    """
    repositories = graph.repositories()
    cycles = detect_cycles(graph)

    dependent_counts = {node_id: len(node.dependents) for node_id, node in graph.nodes.items()}
    dependency_counts = {node_id: len(node.dependencies) for node_id, node in graph.nodes.items()}

    return {
        "total_repositories": len(repositories),
        "total_dependencies": len(graph.nodes),
        "cross_repo_links": graph.metadata.cross_repo_links,
        "cycles": len(cycles),
        "average_dependencies_per_repo": (
            len(graph.nodes) / len(repositories) if repositories else 0
        ),
        "most_depended_on": _top_counts(dependent_counts, top_n),
        "most_dependent": _top_counts(dependency_counts, top_n),
    }


def generate_visualization_data(graph: DependencyGraph) -> dict:
    """Network-chart data: nodes grouped by repository, sized by dependents.

    Returns: {nodes: [{id, label, group, value}], edges: [{from, to, label, dashes}]}
    """
    nodes = [
        {
            "id": node.id,
            "label": f"{node.name}@{node.version}",
            "group": node.repository,
            "value": len(node.dependents) + 1,
        }
        for node in graph.nodes.values()
    ]

    edges = []
    for edge in graph.edges:
        is_dev = edge.edge_type == EdgeType.DEV
        edges.append({
            "from": edge.source,
            "to": edge.target,
            "label": "dev" if is_dev else None,
            "dashes": is_dev,
        })

    return {"nodes": nodes, "edges": edges}


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def to_dot(graph: DependencyGraph) -> str:
    """Graphviz DOT export: one cluster per repository, dashed dev edges, red cross-repo edges."""
    lines = [
        "digraph DependencyGraph {",
        "  rankdir=LR;",
        "  node [shape=box, style=filled];",
        "",
    ]

    by_repo: dict[str, list] = {}
    for node in graph.nodes.values():
        by_repo.setdefault(node.repository, []).append(node)

    for index, (repo, repo_nodes) in enumerate(by_repo.items()):
        color = _REPO_COLORS[index % len(_REPO_COLORS)]
        lines.append(f"  subgraph cluster_{index} {{")
        lines.append(f"    label={_quote(repo)};")
        for node in repo_nodes:
            label = _quote(f"{node.name}@{node.version}")
            lines.append(f'    {_quote(node.id)} [label={label}, fillcolor="{color}"];')
        lines.append("  }")

    lines.append("")
    for edge in graph.edges:
        attrs = []
        if edge.edge_type == EdgeType.DEV:
            attrs.append("style=dashed")
        elif edge.edge_type == EdgeType.PEER:
            attrs.append("style=dotted")
        source = graph.nodes.get(edge.source)
        target = graph.nodes.get(edge.target)
        if source and target and source.repository != target.repository:
            attrs.append("color=red")
        suffix = f" [{', '.join(attrs)}]" if attrs else ""
        lines.append(f"  {_quote(edge.source)} -> {_quote(edge.target)}{suffix};")

    lines.append("}")
    return "\n".join(lines) + "\n"
