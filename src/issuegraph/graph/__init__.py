"""Dependency graph engine: edge index, cycle detection, blocking state machine."""

from issuegraph.graph.edge_index import EdgeIndex
from issuegraph.graph.engine import DependencyEngine, EdgeChange, StatusChange

__all__ = ["DependencyEngine", "EdgeChange", "EdgeIndex", "StatusChange"]
