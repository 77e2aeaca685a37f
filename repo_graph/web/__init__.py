"""HTTP API for graph analyses."""

from repo_graph.web.app import create_app

__all__ = ["create_app"]
