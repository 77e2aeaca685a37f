"""Tests for graph ingestion, adjacency validation and configuration."""

import json
import logging
from pathlib import Path

import pytest

from repo_graph.loader import (
    GraphConsistencyError,
    GraphFormatError,
    check_consistency,
    graph_from_dict,
    graph_to_dict,
    load_graph,
    repair_adjacency,
    validate_graph,
)
from repo_graph.models import AnalysisConfig, EdgeType, PackageManager

FIXTURES = Path(__file__).parent / "fixtures"


def _wire(nodes, edges, metadata=None):
    return {"nodes": nodes, "edges": edges, "metadata": metadata or {}}


def _wire_node(node_id, repo="repo1", deps=(), dependents=(), **extra):
    node = {
        "id": node_id,
        "name": node_id,
        "version": "1.0.0",
        "repository": repo,
        "packageManager": "npm",
        "dependencies": list(deps),
        "dependents": list(dependents) if dependents is not None else None,
    }
    node.update(extra)
    return node


def _broken_graph():
    # Edge A -> B, but B does not list A as a dependent
    return graph_from_dict(
        _wire(
            [_wire_node("A", deps=["B"]), _wire_node("B")],
            [{"from": "A", "to": "B", "type": "direct"}],
        ),
        AnalysisConfig(validate_on_load="off"),
    )


class TestGraphFromDict:
    def test_load_fixture(self):
        graph = load_graph(FIXTURES / "cross_repo_graph.json")
        assert list(graph.nodes) == ["repoA:pkg1", "repoA:pkg2", "repoB:pkg1"]
        assert graph.nodes["repoB:pkg1"].package_manager == PackageManager.PIP
        assert graph.edges[2].edge_type == EdgeType.DEV
        assert graph.edges[1].version_constraint == "^2.0.0"
        assert graph.metadata.workspace_id == "ws-test"
        assert graph.metadata.cross_repo_links == 2
        assert graph.metadata.generated_at.year == 2025

    def test_unknown_package_manager(self):
        graph = graph_from_dict(_wire([_wire_node("A", packageManager="bazel")], []))
        assert graph.nodes["A"].package_manager == PackageManager.UNKNOWN

    def test_unknown_edge_type(self):
        data = _wire(
            [_wire_node("A", deps=["B"]), _wire_node("B", dependents=["A"])],
            [{"from": "A", "to": "B", "type": "optional"}],
        )
        with pytest.raises(GraphFormatError):
            graph_from_dict(data)

    def test_missing_node_id(self):
        with pytest.raises(GraphFormatError):
            graph_from_dict(_wire([{"name": "x", "repository": "r"}], []))

    def test_duplicate_node_id(self):
        with pytest.raises(GraphFormatError):
            graph_from_dict(_wire([_wire_node("A"), _wire_node("A")], []))

    def test_not_a_dict(self):
        with pytest.raises(GraphFormatError):
            graph_from_dict([1, 2, 3])

    @pytest.mark.parametrize("field", ["dependencies", "dependents"])
    def test_null_adjacency_list(self, field):
        with pytest.raises(GraphFormatError, match=field):
            graph_from_dict(_wire([_wire_node("A", **{field: None})], []))

    def test_node_metadata_not_an_object(self):
        with pytest.raises(GraphFormatError):
            graph_from_dict(_wire([_wire_node("A", metadata=["x"])], []))

    def test_non_integer_counter(self):
        with pytest.raises(GraphFormatError, match="totalNodes"):
            graph_from_dict(_wire([_wire_node("A")], [], {"totalNodes": "x"}))

    def test_non_list_edges(self):
        with pytest.raises(GraphFormatError):
            graph_from_dict({"nodes": [_wire_node("A")], "edges": "A->B"})

    def test_metadata_counters_computed(self):
        data = _wire(
            [_wire_node("A", repo="r1", deps=["B"]), _wire_node("B", repo="r2", dependents=["A"])],
            [{"from": "A", "to": "B"}],
        )
        graph = graph_from_dict(data)
        assert graph.metadata.total_nodes == 2
        assert graph.metadata.total_edges == 1
        assert graph.metadata.cross_repo_links == 1
        assert graph.edges[0].edge_type == EdgeType.DIRECT

    def test_invalid_json_file(self, tmp_path):
        bad = tmp_path / "graph.json"
        bad.write_text("{not json")
        with pytest.raises(GraphFormatError):
            load_graph(bad)

    def test_to_dict_matches_wire_format(self):
        raw = json.loads((FIXTURES / "cross_repo_graph.json").read_text())
        data = graph_to_dict(load_graph(FIXTURES / "cross_repo_graph.json"))
        assert data["nodes"] == raw["nodes"]
        assert data["edges"] == raw["edges"]
        assert data["metadata"]["crossRepoLinks"] == 2


class TestConsistency:
    def test_consistent_fixture(self):
        assert check_consistency(load_graph(FIXTURES / "cross_repo_graph.json")) == []

    def test_reports_missing_dependent(self):
        issues = check_consistency(_broken_graph())
        assert any("missing from B.dependents" in issue for issue in issues)

    def test_reports_dangling_edge(self):
        graph = graph_from_dict(
            _wire([_wire_node("A")], [{"from": "A", "to": "ghost"}]),
            AnalysisConfig(validate_on_load="off"),
        )
        assert any("unknown target node" in issue for issue in check_consistency(graph))

    def test_strict_raises(self):
        with pytest.raises(GraphConsistencyError) as exc:
            validate_graph(_broken_graph(), mode="strict")
        assert exc.value.issues

    def test_warn_logs(self, caplog):
        graph = _broken_graph()
        with caplog.at_level(logging.WARNING, logger="repo_graph.loader"):
            assert validate_graph(graph, mode="warn") is graph
        assert "Graph consistency" in caplog.text

    def test_repair_returns_new_graph(self):
        graph = _broken_graph()
        repaired = repair_adjacency(graph)
        assert check_consistency(repaired) == []
        assert repaired.nodes["B"].dependents == ["A"]
        # Input untouched
        assert graph.nodes["B"].dependents == []

    def test_repair_mode(self):
        repaired = validate_graph(_broken_graph(), mode="repair")
        assert check_consistency(repaired) == []

    def test_off_mode(self):
        graph = _broken_graph()
        assert validate_graph(graph, mode="off") is graph


class TestAnalysisConfig:
    def test_defaults(self, monkeypatch):
        for name in ("REPO_GRAPH_MAX_PATH_DEPTH", "REPO_GRAPH_TOP_N", "REPO_GRAPH_VALIDATE",
                     "REPO_GRAPH_CRITICAL_PATH_LIMIT", "REPO_GRAPH_MAX_WORKERS"):
            monkeypatch.delenv(name, raising=False)
        config = AnalysisConfig()
        assert config.max_path_depth == 10
        assert config.critical_path_limit == 10
        assert config.top_n == 10
        assert config.validate_on_load == "warn"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("REPO_GRAPH_TOP_N", "3")
        monkeypatch.setenv("REPO_GRAPH_VALIDATE", "strict")
        config = AnalysisConfig()
        assert config.top_n == 3
        assert config.validate_on_load == "strict"

    def test_explicit_values_win(self, monkeypatch):
        monkeypatch.setenv("REPO_GRAPH_TOP_N", "3")
        assert AnalysisConfig(top_n=7).top_n == 7

    def test_invalid_mode(self):
        with pytest.raises(ValueError):
            AnalysisConfig(validate_on_load="sometimes")
