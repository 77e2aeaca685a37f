"""Read-only structural analyses over a DependencyGraph."""

from repo_graph.analysis.analyzer import GRAPH_ANALYSES, GraphAnalyzer
from repo_graph.analysis.cross_repo import find_cross_repo_links
from repo_graph.analysis.cycles import detect_cycles
from repo_graph.analysis.duplicates import find_duplicate_dependencies
from repo_graph.analysis.impact import analyze_impact
from repo_graph.analysis.metrics import calculate_repository_metrics
from repo_graph.analysis.paths import find_shortest_path, get_all_paths
from repo_graph.analysis.summary import generate_summary, generate_visualization_data, to_dot

__all__ = [
    "GRAPH_ANALYSES",
    "GraphAnalyzer",
    "analyze_impact",
    "calculate_repository_metrics",
    "detect_cycles",
    "find_cross_repo_links",
    "find_duplicate_dependencies",
    "find_shortest_path",
    "generate_summary",
    "generate_visualization_data",
    "get_all_paths",
    "to_dot",
]
