"""Click CLI: run graph analyses against a dependency-graph JSON file."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from repo_graph import __version__
from repo_graph.analysis import GRAPH_ANALYSES, GraphAnalyzer
from repo_graph.loader import GraphConsistencyError, GraphFormatError, load_graph
from repo_graph.models import VALIDATION_MODES, AnalysisConfig

_SEVERITY_COLORS = {"high": "red", "medium": "yellow", "low": "green"}

graph_argument = click.argument(
    "graph_file", type=click.Path(exists=True, dir_okay=False, path_type=Path),
)


def _load_analyzer(ctx: click.Context, graph_file: Path) -> GraphAnalyzer:
    config: AnalysisConfig = ctx.obj["config"]
    try:
        graph = load_graph(graph_file, config)
    except GraphConsistencyError as e:
        raise click.ClickException(
            "Graph adjacency is inconsistent:\n  " + "\n  ".join(e.issues)
        )
    except GraphFormatError as e:
        raise click.ClickException(str(e))
    return GraphAnalyzer(graph, config)


def _echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


@click.group()
@click.version_option(version=__version__)
@click.option("--validate", type=click.Choice(VALIDATION_MODES), help="Adjacency validation on load")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.pass_context
def cli(ctx: click.Context, validate: str | None, verbose: bool):
    """repo-graph: analyse cross-repository dependency graphs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config"] = AnalysisConfig(validate_on_load=validate or "")


@cli.command()
@graph_argument
@click.pass_context
def summary(ctx: click.Context, graph_file: Path):
    """Print aggregate counts and the most connected packages."""
    result = _load_analyzer(ctx, graph_file).generate_summary()

    click.echo(f"Repositories:      {result['total_repositories']}")
    click.echo(f"Packages:          {result['total_dependencies']}")
    click.echo(f"Cross-repo links:  {result['cross_repo_links']}")
    click.echo(f"Cycles:            {result['cycles']}")
    click.echo(f"Packages per repo: {result['average_dependencies_per_repo']:.1f}")

    click.echo("\nMost depended on:")
    for entry in result["most_depended_on"]:
        click.echo(f"  {entry['count']:>4}  {entry['node']}")
    click.echo("\nMost dependencies:")
    for entry in result["most_dependent"]:
        click.echo(f"  {entry['count']:>4}  {entry['node']}")


@cli.command()
@graph_argument
@click.option("--json", "as_json", is_flag=True, help="Emit JSON")
@click.pass_context
def cycles(ctx: click.Context, graph_file: Path, as_json: bool):
    """List circular dependencies with their severity."""
    found = _load_analyzer(ctx, graph_file).detect_cycles()
    if as_json:
        _echo_json([c.to_dict() for c in found])
        return
    if not found:
        click.echo("No cycles found.")
        return

    click.echo(f"Found {len(found)} cycle(s):\n")
    for cycle in found:
        sev = cycle.severity.value
        click.echo(
            f"  {click.style(sev.upper(), fg=_SEVERITY_COLORS[sev]):>6}  "
            f"{' -> '.join(cycle.nodes)}  "
            f"{click.style(f'[{len(cycle.repositories)} repo(s)]', dim=True)}"
        )


@cli.command()
@graph_argument
@click.option("--json", "as_json", is_flag=True, help="Emit JSON")
@click.pass_context
def links(ctx: click.Context, graph_file: Path, as_json: bool):
    """List dependencies that cross repository boundaries."""
    found = _load_analyzer(ctx, graph_file).find_cross_repo_links()
    if as_json:
        _echo_json([link.to_dict() for link in found])
        return
    if not found:
        click.echo("No cross-repository links.")
        return

    for link in found:
        click.echo(click.style(f"{link.source_repo} -> {link.target_repo}", fg="cyan") + f"  ({link.link_type})")
        for dep in link.dependencies:
            click.echo(f"  {dep.source_name} -> {dep.target_name}@{dep.version}")
        click.echo()


@cli.command()
@graph_argument
@click.pass_context
def metrics(ctx: click.Context, graph_file: Path):
    """Per-repository dependency metrics as JSON."""
    _echo_json([m.to_dict() for m in _load_analyzer(ctx, graph_file).calculate_repository_metrics()])


@cli.command()
@graph_argument
@click.argument("node_id")
@click.pass_context
def impact(ctx: click.Context, graph_file: Path, node_id: str):
    """Show what would be affected by a change to NODE_ID."""
    result = _load_analyzer(ctx, graph_file).analyze_impact(node_id)
    if result is None:
        raise click.ClickException(f"Node not found: {node_id}")
    _echo_json(result.to_dict())


@cli.command()
@graph_argument
@click.pass_context
def duplicates(ctx: click.Context, graph_file: Path):
    """List packages present with more than one version."""
    found = _load_analyzer(ctx, graph_file).find_duplicate_dependencies()
    if not found:
        click.echo("No duplicate versions.")
        return
    for name, entries in sorted(found.items()):
        click.echo(click.style(name, fg="yellow"))
        for entry in entries:
            click.echo(f"  {entry['version']:<16} {entry['repository']}")


@cli.command()
@graph_argument
@click.argument("from_id")
@click.argument("to_id")
@click.pass_context
def path(ctx: click.Context, graph_file: Path, from_id: str, to_id: str):
    """Shortest dependency path from FROM_ID to TO_ID."""
    found = _load_analyzer(ctx, graph_file).find_shortest_path(from_id, to_id)
    if found is None:
        click.echo("No path.")
        ctx.exit(1)
    click.echo(" -> ".join(found))


@cli.command()
@graph_argument
@click.argument("from_id")
@click.option("--max-depth", type=int, help="Maximum hops per path")
@click.pass_context
def paths(ctx: click.Context, graph_file: Path, from_id: str, max_depth: int | None):
    """Enumerate dependency chains starting at FROM_ID."""
    for chain in _load_analyzer(ctx, graph_file).get_all_paths(from_id, max_depth):
        click.echo(" -> ".join(chain))


@cli.command()
@graph_argument
@click.option("--format", "fmt", type=click.Choice(["json", "dot"]), default="json", help="Output format")
@click.pass_context
def visualize(ctx: click.Context, graph_file: Path, fmt: str):
    """Emit renderable graph data (network-chart JSON or Graphviz DOT)."""
    analyzer = _load_analyzer(ctx, graph_file)
    if fmt == "dot":
        click.echo(analyzer.to_dot(), nl=False)
    else:
        _echo_json(analyzer.generate_visualization_data())


@cli.command()
@graph_argument
@click.option("--only", "-o", multiple=True, type=click.Choice(list(GRAPH_ANALYSES)), help="Restrict to these analyses")
@click.pass_context
def analyze(ctx: click.Context, graph_file: Path, only: tuple[str, ...]):
    """Run all whole-graph analyses in parallel and print JSON."""
    _echo_json(_load_analyzer(ctx, graph_file).run_all(only or None))


@cli.command()
@click.option("--port", "-p", default=8421, help="Port number")
@click.option("--host", default="127.0.0.1", help="Host address")
def serve(port: int, host: str):
    """Start the analysis HTTP API."""
    try:
        import uvicorn
    except ImportError:
        raise click.ClickException(
            "uvicorn is required for the HTTP API. "
            "Install with: pip install 'repo-graph[web]'"
        )

    from repo_graph.web import create_app

    click.echo(f"Starting repo-graph API at http://{host}:{port}")
    uvicorn.run(create_app(), host=host, port=port, log_level="info")


if __name__ == "__main__":
    cli()
