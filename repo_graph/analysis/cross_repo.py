"""Cross-repository link extractor — groups repo-boundary-crossing edges by repository pair."""

from __future__ import annotations

from repo_graph.analysis.graph_models import CrossRepoLink, LinkedDependency
from repo_graph.models import DependencyGraph, EdgeType


def find_cross_repo_links(graph: DependencyGraph) -> list[CrossRepoLink]:
    """One link per (source repo -> target repo) pair, in first-seen edge order.

    Repeated package-level edges between the same pair are kept as-is. A link
    is ``transitive`` only if every edge contributing to it is transitive.
    """
    links: dict[str, CrossRepoLink] = {}
    all_transitive: dict[str, bool] = {}

    for edge in graph.edges:
        source = graph.nodes.get(edge.source)
        target = graph.nodes.get(edge.target)
        if source is None or target is None:
            continue
        if source.repository == target.repository:
            continue

        key = f"{source.repository}->{target.repository}"
        link = links.get(key)
        if link is None:
            link = CrossRepoLink(source_repo=source.repository, target_repo=target.repository)
            links[key] = link
            all_transitive[key] = True

        link.dependencies.append(LinkedDependency(
            source_name=source.name,
            target_name=target.name,
            version=target.version,
        ))
        if edge.edge_type != EdgeType.TRANSITIVE:
            all_transitive[key] = False

    for key, link in links.items():
        link.link_type = "transitive" if all_transitive[key] else "direct"

    return list(links.values())
