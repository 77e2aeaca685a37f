"""Tests for the click CLI."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from repo_graph.cli import cli

FIXTURES = Path(__file__).parent / "fixtures"
GRAPH = str(FIXTURES / "cross_repo_graph.json")


@pytest.fixture
def runner():
    return CliRunner()


def test_summary(runner):
    result = runner.invoke(cli, ["summary", GRAPH])
    assert result.exit_code == 0, result.output
    assert "Repositories:      2" in result.output
    assert "Cycles:            1" in result.output


def test_cycles(runner):
    result = runner.invoke(cli, ["cycles", GRAPH])
    assert result.exit_code == 0
    assert "HIGH" in result.output
    assert "repoA:pkg1 -> repoA:pkg2 -> repoB:pkg1 -> repoA:pkg1" in result.output


def test_cycles_json(runner):
    result = runner.invoke(cli, ["cycles", GRAPH, "--json"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data[0]["severity"] == "high"
    assert data[0]["length"] == 3


def test_links(runner):
    result = runner.invoke(cli, ["links", GRAPH])
    assert result.exit_code == 0
    assert "repoA -> repoB" in result.output
    assert "repoB -> repoA" in result.output


def test_impact(runner):
    result = runner.invoke(cli, ["impact", GRAPH, "repoA:pkg1"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["directImpact"] == ["repoB:pkg1"]
    assert data["impactScore"] == 67


def test_impact_unknown_node(runner):
    result = runner.invoke(cli, ["impact", GRAPH, "nope"])
    assert result.exit_code != 0
    assert "Node not found" in result.output


def test_duplicates(runner):
    result = runner.invoke(cli, ["duplicates", GRAPH])
    assert result.exit_code == 0
    assert "pkg1" in result.output
    assert "2.0.0" in result.output


def test_path(runner):
    result = runner.invoke(cli, ["path", GRAPH, "repoA:pkg1", "repoB:pkg1"])
    assert result.exit_code == 0
    assert result.output.strip() == "repoA:pkg1 -> repoA:pkg2 -> repoB:pkg1"


def test_path_missing(runner):
    result = runner.invoke(cli, ["path", GRAPH, "repoA:pkg1", "nope"])
    assert result.exit_code == 1
    assert "No path." in result.output


def test_paths(runner):
    result = runner.invoke(cli, ["paths", GRAPH, "repoA:pkg1", "--max-depth", "1"])
    assert result.exit_code == 0
    assert result.output.strip() == "repoA:pkg1 -> repoA:pkg2"


def test_visualize_dot(runner):
    result = runner.invoke(cli, ["visualize", GRAPH, "--format", "dot"])
    assert result.exit_code == 0
    assert result.output.startswith("digraph DependencyGraph {")


def test_analyze(runner):
    result = runner.invoke(cli, ["analyze", GRAPH, "--only", "summary", "--only", "cycles"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert set(data) == {"summary", "cycles"}


def test_strict_validation_rejects_broken_graph(runner, tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text(json.dumps({
        "nodes": [
            {"id": "A", "name": "a", "version": "1", "repository": "r", "dependencies": ["B"]},
            {"id": "B", "name": "b", "version": "1", "repository": "r"},
        ],
        "edges": [{"from": "A", "to": "B", "type": "direct"}],
    }))
    result = runner.invoke(cli, ["--validate", "strict", "cycles", str(broken)])
    assert result.exit_code != 0
    assert "inconsistent" in result.output


def test_unknown_validation_mode(runner):
    result = runner.invoke(cli, ["--validate", "sometimes", "summary", GRAPH])
    assert result.exit_code == 2
    assert "repair" in result.output


def test_null_dependencies_reported(runner, tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({
        "nodes": [{"id": "A", "repository": "r", "dependencies": None}],
    }))
    result = runner.invoke(cli, ["summary", str(bad)])
    assert result.exit_code == 1
    assert "must be a list" in result.output


def test_malformed_graph(runner, tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("[]")
    result = runner.invoke(cli, ["summary", str(bad)])
    assert result.exit_code != 0
    assert "Error" in result.output
