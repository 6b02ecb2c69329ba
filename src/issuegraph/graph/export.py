"""Text, DOT and JSON renderings of the edge index."""

from __future__ import annotations

import json
from typing import Iterable

from issuegraph.graph.views import transitively_blocked
from issuegraph.models import Edge, Issue, Relation, Status

FORMATS = ("text", "dot", "json")

_STATUS_COLORS = {
    Status.OPEN: "black",
    Status.IN_PROGRESS: "blue",
    Status.REVIEW: "purple",
    Status.BLOCKED: "red",
    Status.DEFERRED: "gray",
    Status.CLOSED: "darkgreen",
}

_RELATION_STYLES = {
    Relation.BLOCKS: "solid",
    Relation.PARENT_OF: "bold",
    Relation.RELATES_TO: "dashed",
}


def filter_reachable(edges: Iterable[Edge], issue_id: str) -> list[Edge]:
    """Edges among issue_id and everything it transitively blocks."""
    edges = list(edges)
    keep = transitively_blocked(edges, issue_id) | {issue_id}
    return [e for e in edges if e.source in keep and e.target in keep]


def logical_edges(edges: Iterable[Edge]) -> list[Edge]:
    """Collapse mirrored pairs so each relationship appears once.

    ``(B, depends_on, A)`` is reported as ``(A, blocks, B)``.
    """
    result: set[Edge] = set()
    for edge in edges:
        if edge.relation == Relation.DEPENDS_ON:
            result.add(Edge(edge.target, Relation.BLOCKS, edge.source))
        else:
            result.add(edge)
    return sorted(result)


def format_text(edges: Iterable[Edge]) -> str:
    return "\n".join(str(e) for e in sorted(edges))


def format_json(edges: Iterable[Edge]) -> str:
    return json.dumps([e.to_dict() for e in sorted(edges)], indent=2)


def _quote(s: str) -> str:
    return '"' + s.replace("\\", "\\\\").replace('"', '\\"') + '"'


def format_dot(edges: Iterable[Edge], issues: Iterable[Issue] = (),
               name: str = "issues") -> str:
    """Graphviz digraph: one node per issue id, one arrow per relationship."""
    folded = logical_edges(edges)
    known = {i.id: i for i in issues}
    node_ids = sorted({e.source for e in folded} | {e.target for e in folded})

    lines = [f"digraph {name} {{", "  rankdir=LR;", "  node [shape=box];"]
    for node_id in node_ids:
        issue = known.get(node_id)
        if issue is None:
            lines.append(f"  {_quote(node_id)} [style=dotted];")
            continue
        # \n is a Graphviz line break, so join after quoting each part
        label = "\\n".join(
            _quote(part)[1:-1]
            for part in (node_id, issue.title[:30], f"[{issue.status}]")
        )
        color = _STATUS_COLORS.get(issue.status, "black")
        lines.append(f'  {_quote(node_id)} [label="{label}", color={color}];')
    for edge in folded:
        style = _RELATION_STYLES.get(edge.relation, "solid")
        lines.append(
            f"  {_quote(edge.source)} -> {_quote(edge.target)} "
            f"[label={_quote(edge.relation)}, style={style}];"
        )
    lines.append("}")
    return "\n".join(lines)


def render(edges: Iterable[Edge], fmt: str = "text",
           issues: Iterable[Issue] = ()) -> str:
    if fmt == "text":
        return format_text(edges)
    if fmt == "dot":
        return format_dot(edges, issues)
    if fmt == "json":
        return format_json(edges)
    raise ValueError(f"unknown export format: {fmt} (expected one of {', '.join(FORMATS)})")
