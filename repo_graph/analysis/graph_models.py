"""Result models produced by the graph analyses."""

from __future__ import annotations

from dataclasses import dataclass, field

from repo_graph.models import PackageManager, Severity


@dataclass
class DependencyCycle:
    nodes: list[str]  # closed walk, first id repeated at the end
    length: int
    repositories: list[str]
    severity: Severity

    def to_dict(self) -> dict:
        return {
            "nodes": list(self.nodes),
            "length": self.length,
            "repositories": list(self.repositories),
            "severity": self.severity.value,
        }


@dataclass
class LinkedDependency:
    source_name: str
    target_name: str
    version: str

    def to_dict(self) -> dict:
        return {"from": self.source_name, "to": self.target_name, "version": self.version}


@dataclass
class CrossRepoLink:
    source_repo: str
    target_repo: str
    dependencies: list[LinkedDependency] = field(default_factory=list)
    link_type: str = "direct"  # "direct" | "transitive"

    def to_dict(self) -> dict:
        return {
            "sourceRepo": self.source_repo,
            "targetRepo": self.target_repo,
            "dependencies": [d.to_dict() for d in self.dependencies],
            "type": self.link_type,
        }


@dataclass
class DependencyHealth:
    total_dependencies: int = 0
    direct_dependencies: int = 0
    dev_dependencies: int = 0
    outdated_count: int = 0
    vulnerable_count: int = 0
    duplicate_count: int = 0
    average_dependency_depth: float = 0.0
    max_dependency_depth: int = 0

    def to_dict(self) -> dict:
        return {
            "totalDependencies": self.total_dependencies,
            "directDependencies": self.direct_dependencies,
            "devDependencies": self.dev_dependencies,
            "outdatedCount": self.outdated_count,
            "vulnerableCount": self.vulnerable_count,
            "duplicateCount": self.duplicate_count,
            "averageDependencyDepth": self.average_dependency_depth,
            "maxDependencyDepth": self.max_dependency_depth,
        }


@dataclass
class RepositoryMetrics:
    repository: str
    package_manager: PackageManager
    dependency_count: int = 0
    dependent_count: int = 0
    cross_repo_dependencies: int = 0
    cyclomatic_complexity: int = 0
    health: DependencyHealth = field(default_factory=DependencyHealth)

    def to_dict(self) -> dict:
        return {
            "repository": self.repository,
            "packageManager": self.package_manager.value,
            "dependencyCount": self.dependency_count,
            "dependentCount": self.dependent_count,
            "crossRepoDependencies": self.cross_repo_dependencies,
            "cyclomaticComplexity": self.cyclomatic_complexity,
            "health": self.health.to_dict(),
        }


@dataclass
class ImpactAnalysis:
    """Who breaks if ``target_node`` changes.

    ``impact_score`` is the plain fraction of graph nodes reached (0-100);
    it is not weighted by cross-repo span or criticality.
    """
    target_node: str
    direct_impact: list[str] = field(default_factory=list)
    transitive_impact: list[str] = field(default_factory=list)
    affected_repositories: list[str] = field(default_factory=list)
    impact_score: int = 0
    critical_path: list[list[str]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "targetNode": self.target_node,
            "directImpact": list(self.direct_impact),
            "transitiveImpact": list(self.transitive_impact),
            "affectedRepositories": list(self.affected_repositories),
            "impactScore": self.impact_score,
            "criticalPath": [list(p) for p in self.critical_path],
        }
