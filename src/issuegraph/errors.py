"""Typed failures raised by the dependency engine.

All of them derive from ``ValueError`` so callers that only care about
"bad input" can keep catching that.
"""

from __future__ import annotations

from typing import Iterable, Sequence


class GraphError(ValueError):
    """Base class for rejected graph operations."""


class SelfReference(GraphError):
    def __init__(self, issue_id: str) -> None:
        self.issue_id = issue_id
        super().__init__(f"an issue cannot reference itself: {issue_id}")


class NotFound(GraphError):
    def __init__(self, ids: Iterable[str]) -> None:
        self.ids = list(ids)
        super().__init__(f"issue not found: {', '.join(self.ids)}")


class InvalidRelation(GraphError):
    def __init__(self, relation: str) -> None:
        self.relation = relation
        super().__init__(
            f"invalid relation: {relation!r} "
            "(expected blocks, depends_on, parent_of or relates_to)"
        )


class CycleDetected(GraphError):
    def __init__(self, path: Sequence[str]) -> None:
        self.path = list(path)
        super().__init__(f"dependency cycle: {' -> '.join(self.path)}")


class EdgeNotFound(GraphError):
    def __init__(self, source: str, relation: str, target: str) -> None:
        self.source = source
        self.relation = relation
        self.target = target
        super().__init__(f"no such dependency: {source} {relation} {target}")
