"""GraphAnalyzer — binds one graph snapshot to every analysis and runs them in parallel."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable

from repo_graph.analysis.cross_repo import find_cross_repo_links
from repo_graph.analysis.cycles import detect_cycles
from repo_graph.analysis.duplicates import find_duplicate_dependencies
from repo_graph.analysis.graph_models import (
    CrossRepoLink,
    DependencyCycle,
    ImpactAnalysis,
    RepositoryMetrics,
)
from repo_graph.analysis.impact import analyze_impact
from repo_graph.analysis.metrics import calculate_repository_metrics
from repo_graph.analysis.paths import find_shortest_path, get_all_paths
from repo_graph.analysis.summary import generate_summary, generate_visualization_data, to_dot
from repo_graph.models import AnalysisConfig, DependencyGraph

logger = logging.getLogger(__name__)

# Whole-graph analyses that need no extra arguments
GRAPH_ANALYSES = ("cycles", "cross-repo", "metrics", "duplicates", "summary", "visualization")


class GraphAnalyzer:
    """Read-only analyses over one immutable DependencyGraph.

    Every method is a pure query, so a single analyzer can be shared across
    threads without locking.
    """

    def __init__(self, graph: DependencyGraph, config: AnalysisConfig | None = None):
        self.graph = graph
        self.config = config or AnalysisConfig()

    def detect_cycles(self) -> list[DependencyCycle]:
        return detect_cycles(self.graph, self.config.medium_cycle_threshold)

    def find_cross_repo_links(self) -> list[CrossRepoLink]:
        return find_cross_repo_links(self.graph)

    def calculate_repository_metrics(self) -> list[RepositoryMetrics]:
        return calculate_repository_metrics(self.graph)

    def analyze_impact(self, node_id: str) -> ImpactAnalysis | None:
        return analyze_impact(self.graph, node_id, self.config.critical_path_limit)

    def find_duplicate_dependencies(self) -> dict[str, list[dict[str, str]]]:
        return find_duplicate_dependencies(self.graph)

    def find_shortest_path(self, from_id: str, to_id: str) -> list[str] | None:
        return find_shortest_path(self.graph, from_id, to_id)

    def get_all_paths(self, from_id: str, max_depth: int | None = None) -> list[list[str]]:
        if max_depth is None:
            max_depth = self.config.max_path_depth
        return get_all_paths(self.graph, from_id, max_depth)

    def generate_summary(self) -> dict:
        return generate_summary(self.graph, self.config.top_n)

    def generate_visualization_data(self) -> dict:
        return generate_visualization_data(self.graph)

    def to_dot(self) -> str:
        return to_dot(self.graph)

    # ── JSON-ready results ──────────────────────────────────

    def run(self, analysis: str) -> Any:
        """Run one whole-graph analysis and return plain, JSON-serialisable data."""
        jobs: dict[str, Callable[[], Any]] = {
            "cycles": lambda: [c.to_dict() for c in self.detect_cycles()],
            "cross-repo": lambda: [link.to_dict() for link in self.find_cross_repo_links()],
            "metrics": lambda: [m.to_dict() for m in self.calculate_repository_metrics()],
            "duplicates": lambda: [
                {"name": name, "versions": versions}
                for name, versions in self.find_duplicate_dependencies().items()
            ],
            "summary": self.generate_summary,
            "visualization": self.generate_visualization_data,
        }
        job = jobs.get(analysis)
        if job is None:
            raise ValueError(
                f"Unknown analysis {analysis!r}; expected one of {', '.join(GRAPH_ANALYSES)}"
            )
        return job()

    def run_all(self, analyses: list[str] | tuple[str, ...] | None = None) -> dict[str, Any]:
        """Run independent analyses concurrently.

        One failing analysis is logged and reported under ``errors``; the
        others still complete.
        """
        names = list(analyses) if analyses else list(GRAPH_ANALYSES)
        for name in names:
            if name not in GRAPH_ANALYSES:
                raise ValueError(f"Unknown analysis {name!r}")

        results: dict[str, Any] = {}
        errors: dict[str, str] = {}

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
            futures = {pool.submit(self.run, name): name for name in names}
            for future in as_completed(futures):
                name = futures[future]
                try:
                    results[name] = future.result()
                except Exception as e:
                    logger.exception("Analysis %s failed", name)
                    errors[name] = str(e)

        ordered = {name: results[name] for name in names if name in results}
        if errors:
            ordered["errors"] = errors
        return ordered
