"""Read-only views over issues and the edge index."""

from __future__ import annotations

import heapq
from collections import deque
from typing import Iterable

from issuegraph.errors import CycleDetected
from issuegraph.graph.cycles import find_cycles
from issuegraph.graph.edge_index import blocking_adjacency
from issuegraph.models import Edge, Issue, Priority, Status

NOT_READY = (Status.BLOCKED, Status.CLOSED)


def priority_key(issue: Issue) -> tuple[int, str]:
    """Sort key: higher priority first, then ascending id."""
    return (-Priority.rank(issue.priority), issue.id)


def ready_list(issues: Iterable[Issue]) -> list[Issue]:
    """Issues someone could pick up now, most urgent first."""
    return sorted((i for i in issues if i.status not in NOT_READY), key=priority_key)


def topological_order(issues: Iterable[Issue], edges: Iterable[Edge]) -> list[Issue]:
    """Order non-closed issues so every blocker precedes what it blocks.

    Kahn's algorithm; among issues that are free at the same time the higher
    priority (then lower id) goes first. Closed issues are left out and no
    longer constrain anything. Raises CycleDetected if the stored graph has
    a cycle among open issues, which only out-of-band edits can produce.
    """
    nodes = {i.id: i for i in issues if i.status != Status.CLOSED}
    adjacency: dict[str, set[str]] = {}
    for blocker, blocked in blocking_adjacency(edges).items():
        if blocker not in nodes:
            continue
        kept = {b for b in blocked if b in nodes and b != blocker}
        if kept:
            adjacency[blocker] = kept

    indegree = {node_id: 0 for node_id in nodes}
    for blocked in adjacency.values():
        for b in blocked:
            indegree[b] += 1

    heap = [priority_key(nodes[n]) for n, d in indegree.items() if d == 0]
    heapq.heapify(heap)
    order: list[Issue] = []
    while heap:
        _, node_id = heapq.heappop(heap)
        order.append(nodes[node_id])
        for nxt in adjacency.get(node_id, ()):
            indegree[nxt] -= 1
            if indegree[nxt] == 0:
                heapq.heappush(heap, priority_key(nodes[nxt]))

    if len(order) != len(nodes):
        remaining = {n: adjacency.get(n, set()) for n, d in indegree.items() if d > 0}
        cycles = find_cycles(remaining)
        raise CycleDetected(cycles[0] if cycles else sorted(remaining))
    return order


def transitively_blocked(edges: Iterable[Edge], issue_id: str) -> set[str]:
    """Every issue reachable from issue_id along blocking edges."""
    adjacency = blocking_adjacency(edges)
    seen: set[str] = set()
    queue: deque[str] = deque([issue_id])
    while queue:
        current = queue.popleft()
        for nxt in adjacency.get(current, ()):
            if nxt not in seen and nxt != issue_id:
                seen.add(nxt)
                queue.append(nxt)
    return seen
