"""repo-graph: structural analysis of cross-repository dependency graphs."""

__version__ = "0.1.0"
