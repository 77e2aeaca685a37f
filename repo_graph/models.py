"""Data models for the multi-repository dependency graph."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field
from datetime import datetime


class PackageManager(enum.Enum):
    NPM = "npm"
    PIP = "pip"
    MAVEN = "maven"
    GRADLE = "gradle"
    CARGO = "cargo"
    GO = "go"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str | None) -> PackageManager:
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class EdgeType(enum.Enum):
    DIRECT = "direct"
    DEV = "dev"
    PEER = "peer"
    TRANSITIVE = "transitive"


class Severity(enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


ROOT_SUFFIX = ":root"


@dataclass
class DependencyNode:
    """One package instance inside one repository."""
    id: str
    name: str
    version: str
    repository: str  # "owner/repo"
    package_manager: PackageManager = PackageManager.UNKNOWN
    dependencies: list[str] = field(default_factory=list)  # node ids this node depends on
    dependents: list[str] = field(default_factory=list)    # node ids that depend on this node
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def is_root(self) -> bool:
        return self.id.endswith(ROOT_SUFFIX)


@dataclass
class DependencyEdge:
    source: str
    target: str
    edge_type: EdgeType = EdgeType.DIRECT
    version_constraint: str | None = None


@dataclass
class GraphMetadata:
    workspace_id: str = ""
    generated_at: datetime = field(default_factory=datetime.now)
    total_nodes: int = 0
    total_edges: int = 0
    cross_repo_links: int = 0


@dataclass
class DependencyGraph:
    """Immutable-per-analysis snapshot: id-keyed nodes plus the edge list.

    Nodes never hold references to each other; all linkage is by id lookup
    into ``nodes``.
    """
    nodes: dict[str, DependencyNode] = field(default_factory=dict)
    edges: list[DependencyEdge] = field(default_factory=list)
    metadata: GraphMetadata = field(default_factory=GraphMetadata)

    def get(self, node_id: str) -> DependencyNode | None:
        return self.nodes.get(node_id)

    def repositories(self) -> list[str]:
        """Distinct repositories in first-seen node order."""
        return list(dict.fromkeys(node.repository for node in self.nodes.values()))


VALIDATION_MODES = ("off", "warn", "strict", "repair")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass
class AnalysisConfig:
    """Tunables for the analyses and for graph ingestion."""
    max_path_depth: int = 0
    critical_path_limit: int = 0
    top_n: int = 0
    medium_cycle_threshold: int = 5
    validate_on_load: str = ""  # off | warn | strict | repair
    max_workers: int = 0

    def __post_init__(self):
        if not self.max_path_depth:
            self.max_path_depth = _env_int("REPO_GRAPH_MAX_PATH_DEPTH", 10)
        if not self.critical_path_limit:
            self.critical_path_limit = _env_int("REPO_GRAPH_CRITICAL_PATH_LIMIT", 10)
        if not self.top_n:
            self.top_n = _env_int("REPO_GRAPH_TOP_N", 10)
        if not self.max_workers:
            self.max_workers = _env_int("REPO_GRAPH_MAX_WORKERS", 4)
        if not self.validate_on_load:
            self.validate_on_load = os.getenv("REPO_GRAPH_VALIDATE", "warn")
        if self.validate_on_load not in VALIDATION_MODES:
            raise ValueError(
                f"Unknown validation mode {self.validate_on_load!r}; "
                f"expected one of {', '.join(VALIDATION_MODES)}"
            )
