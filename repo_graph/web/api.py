"""Graph API — upload a graph snapshot, then run analyses against it."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from repo_graph.analysis import GRAPH_ANALYSES, GraphAnalyzer
from repo_graph.loader import GraphConsistencyError, GraphFormatError, graph_from_dict, graph_to_dict
from repo_graph.models import AnalysisConfig
from repo_graph.web.state import GraphSession, state

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/graphs")

_QUERY_ANALYSES = ("impact", "shortest-path", "paths")


class GraphPayload(BaseModel):
    nodes: list[dict[str, Any]]
    edges: list[dict[str, Any]] = []
    metadata: dict[str, Any] = {}


class AnalyzeRequest(BaseModel):
    analysis_type: str
    target_node_id: str | None = None
    to_node_id: str | None = None
    max_depth: int | None = None


def _get_session(graph_id: str) -> GraphSession:
    session = state.get_graph(graph_id)
    if session is None:
        raise HTTPException(404, "Graph not found")
    return session


@router.post("")
async def upload_graph(payload: GraphPayload):
    config = AnalysisConfig()
    try:
        graph = await asyncio.to_thread(graph_from_dict, payload.model_dump(), config)
    except GraphConsistencyError as e:
        raise HTTPException(422, {"error": "Inconsistent graph adjacency", "issues": e.issues})
    except GraphFormatError as e:
        raise HTTPException(422, str(e))

    session = state.add_graph(graph, GraphAnalyzer(graph, config))
    logger.info("Stored graph %s (%d nodes, %d edges)", session.id, len(graph.nodes), len(graph.edges))
    return {
        "graph_id": session.id,
        "nodes": len(graph.nodes),
        "edges": len(graph.edges),
    }


@router.get("/{graph_id}")
async def get_graph(graph_id: str):
    return graph_to_dict(_get_session(graph_id).graph)


@router.delete("/{graph_id}")
async def delete_graph(graph_id: str):
    if not state.delete_graph(graph_id):
        raise HTTPException(404, "Graph not found")
    return {"deleted": graph_id}


@router.post("/{graph_id}/analyze")
async def analyze(graph_id: str, req: AnalyzeRequest):
    analyzer = _get_session(graph_id).analyzer
    kind = req.analysis_type

    if kind == "cycles":
        return {"cycles": await asyncio.to_thread(analyzer.run, "cycles")}
    if kind == "cross-repo":
        return {"crossRepoLinks": await asyncio.to_thread(analyzer.run, "cross-repo")}
    if kind in GRAPH_ANALYSES:
        return {kind: await asyncio.to_thread(analyzer.run, kind)}

    if kind not in _QUERY_ANALYSES:
        raise HTTPException(
            400,
            f"Unknown analysis_type {kind!r}; expected one of "
            f"{', '.join(GRAPH_ANALYSES + _QUERY_ANALYSES)}",
        )

    if not req.target_node_id:
        raise HTTPException(400, f"target_node_id required for {kind} analysis")

    if kind == "impact":
        result = await asyncio.to_thread(analyzer.analyze_impact, req.target_node_id)
        return {"impact": result.to_dict() if result else None}

    if kind == "shortest-path":
        if not req.to_node_id:
            raise HTTPException(400, "to_node_id required for shortest-path analysis")
        found = await asyncio.to_thread(analyzer.find_shortest_path, req.target_node_id, req.to_node_id)
        return {"path": found}

    found_paths = await asyncio.to_thread(analyzer.get_all_paths, req.target_node_id, req.max_depth)
    return {"paths": found_paths}
