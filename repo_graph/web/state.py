"""In-memory graph snapshots for the HTTP API — no database required."""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime

from repo_graph.analysis import GraphAnalyzer
from repo_graph.models import DependencyGraph


@dataclass
class GraphSession:
    graph: DependencyGraph
    analyzer: GraphAnalyzer
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())


class AppState:
    """Uploaded graphs, keyed by id. A stored graph is never mutated."""

    def __init__(self):
        self._graphs: dict[str, GraphSession] = {}
        self._lock = threading.Lock()

    def add_graph(self, graph: DependencyGraph, analyzer: GraphAnalyzer) -> GraphSession:
        session = GraphSession(graph=graph, analyzer=analyzer)
        with self._lock:
            self._graphs[session.id] = session
        return session

    def get_graph(self, graph_id: str) -> GraphSession | None:
        return self._graphs.get(graph_id)

    def delete_graph(self, graph_id: str) -> bool:
        with self._lock:
            return self._graphs.pop(graph_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._graphs.clear()


# Module-level singleton — all routers import this
state = AppState()
