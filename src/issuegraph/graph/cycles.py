"""Cycle detection over the blocking subgraph.

All traversals are iterative so deep chains cannot hit the recursion limit.
"""

from __future__ import annotations

from collections import deque


def find_path(adjacency: dict[str, set[str]], start: str, goal: str) -> list[str] | None:
    """Shortest path ``start -> ... -> goal`` along adjacency, or None.

    A node reaches itself with a zero-length path.
    """
    if start == goal:
        return [start]
    parent: dict[str, str] = {start: start}
    queue: deque[str] = deque([start])
    while queue:
        current = queue.popleft()
        for nxt in sorted(adjacency.get(current, ())):
            if nxt in parent:
                continue
            parent[nxt] = current
            if nxt == goal:
                path = [goal]
                while path[-1] != start:
                    path.append(parent[path[-1]])
                path.reverse()
                return path
            queue.append(nxt)
    return None


def can_reach(adjacency: dict[str, set[str]], start: str, goal: str) -> bool:
    return find_path(adjacency, start, goal) is not None


def cycle_if_added(adjacency: dict[str, set[str]], blocker: str,
                   blocked: str) -> list[str] | None:
    """The cycle a new ``blocker blocks blocked`` edge would close, if any.

    Returned as ``[blocker, blocked, ..., blocker]``.
    """
    path = find_path(adjacency, blocked, blocker)
    if path is None:
        return None
    return [blocker] + path


def find_cycles(adjacency: dict[str, set[str]]) -> list[list[str]]:
    """One cycle per strongly tangled region, via three-colour DFS.

    Used by health checks; the engine itself never lets a cycle in.
    """
    WHITE, GRAY, BLACK = 0, 1, 2  # noqa: N806
    nodes = set(adjacency)
    for targets in adjacency.values():
        nodes |= targets
    color = {n: WHITE for n in nodes}
    cycles: list[list[str]] = []

    for root in sorted(nodes):
        if color[root] != WHITE:
            continue
        stack: list[tuple[str, list[str]]] = [(root, sorted(adjacency.get(root, ())))]
        path = [root]
        color[root] = GRAY
        while stack:
            node, pending = stack[-1]
            if not pending:
                color[node] = BLACK
                stack.pop()
                path.pop()
                continue
            nxt = pending.pop(0)
            if color[nxt] == GRAY:
                cycles.append(path[path.index(nxt):] + [nxt])
            elif color[nxt] == WHITE:
                color[nxt] = GRAY
                path.append(nxt)
                stack.append((nxt, sorted(adjacency.get(nxt, ()))))
    return cycles
