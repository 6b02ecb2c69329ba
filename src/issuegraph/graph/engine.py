"""Dependency engine: validated edge mutations and the blocking cascade.

Every mutation validates completely before it writes anything, then runs
its field updates, index rows, status cascade and audit events inside one
store transaction, so a rejected or failed operation leaves no trace.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Iterable

from issuegraph.errors import CycleDetected, EdgeNotFound, NotFound, SelfReference
from issuegraph.graph.cycles import cycle_if_added, find_cycles
from issuegraph.graph.edge_index import EdgeIndex
from issuegraph.graph.export import filter_reachable, render
from issuegraph.graph.state import is_resolved, recompute_status
from issuegraph.graph.views import ready_list, topological_order
from issuegraph.models import (
    Edge, EventType, Issue, Relation, Status, parse_id_list,
)
from issuegraph.storage.interface import IssueStore


@dataclass
class StatusChange:
    issue_id: str
    old: str
    new: str

    def to_dict(self) -> dict:
        return {"id": self.issue_id, "old": self.old, "new": self.new}


@dataclass
class EdgeChange:
    """Outcome of add_edge/remove_edge."""

    edge: Edge
    changed: bool = False
    status_changes: list[StatusChange] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "edge": self.edge.to_dict(),
            "changed": self.changed,
            "status_changes": [c.to_dict() for c in self.status_changes],
        }


@dataclass
class HealthReport:
    missing: set[Edge] = field(default_factory=set)
    extra: set[Edge] = field(default_factory=set)
    one_sided: list[Edge] = field(default_factory=list)
    dangling: list[Edge] = field(default_factory=list)
    cycles: list[list[str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not (self.missing or self.extra or self.one_sided
                    or self.dangling or self.cycles)

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "missing": [e.to_dict() for e in sorted(self.missing)],
            "extra": [e.to_dict() for e in sorted(self.extra)],
            "one_sided": [e.to_dict() for e in self.one_sided],
            "dangling": [e.to_dict() for e in self.dangling],
            "cycles": self.cycles,
        }


def blocking_pair(source: str, relation: str, target: str) -> tuple[str, str] | None:
    """(blocker, blocked) for a blocking relation, None otherwise."""
    if relation == Relation.BLOCKS:
        return source, target
    if relation == Relation.DEPENDS_ON:
        return target, source
    return None


class DependencyEngine:
    """Graph operations over an issue store and its edge index."""

    def __init__(self, store: IssueStore, actor: str = "", verbose: bool = False) -> None:
        self.store = store
        self.actor = actor
        self.verbose = verbose
        self.index = EdgeIndex(store, verbose=verbose)

    def _log(self, msg: str) -> None:
        if self.verbose:
            print(msg, file=sys.stderr)

    # --- Validation ---

    def _validate(self, source: str, relation: str, target: str) -> str:
        rel = Relation.parse(relation)
        if source == target:
            raise SelfReference(source)
        missing = [i for i in dict.fromkeys((source, target)) if not self.store.exists(i)]
        if missing:
            raise NotFound(missing)
        return rel

    def _require(self, issue_id: str) -> None:
        if not self.store.exists(issue_id):
            raise NotFound([issue_id])

    # --- Field helpers (run inside a transaction) ---

    def _append(self, store: IssueStore, edge: Edge) -> bool:
        current = parse_id_list(store.get_field(edge.source, edge.relation))
        if edge.target in current:
            return False
        store.set_fields(edge.source, {edge.relation: current + [edge.target]}, self.actor)
        return True

    def _discard(self, store: IssueStore, edge: Edge) -> bool:
        current = parse_id_list(store.get_field(edge.source, edge.relation))
        if edge.target not in current:
            return False
        current.remove(edge.target)
        store.set_fields(edge.source, {edge.relation: current}, self.actor)
        return True

    def _reevaluate(self, store: IssueStore, issue_ids: Iterable[str]) -> list[StatusChange]:
        """Run the direct-blocker check for each issue and apply the result."""
        changes: list[StatusChange] = []
        for issue_id in sorted(set(issue_ids)):
            if not store.exists(issue_id):
                continue
            current = store.get_field(issue_id, "status")
            blocker_statuses = [
                store.get_field(b, "status")
                for b in self.index.blockers_of(issue_id)
                if store.exists(b)
            ]
            new = recompute_status(current, blocker_statuses)
            if new != current:
                store.set_fields(issue_id, {"status": new}, self.actor)
                changes.append(StatusChange(issue_id, current, new))
                self._log(f"{issue_id}: {current} -> {new}")
        return changes

    def _unresolved_blockers(self, issue_id: str) -> list[str]:
        return sorted(
            b for b in self.index.blockers_of(issue_id)
            if self.store.exists(b) and not is_resolved(self.store.get_field(b, "status"))
        )

    # --- Mutations ---

    def add_edge(self, source: str, relation: str, target: str) -> EdgeChange:
        """Record ``source relation target`` on both issues and in the index.

        Adding an edge that already exists changes nothing (a missing
        mirror half is filled in).
        """
        rel = self._validate(source, relation, target)
        self.index.ensure_fresh()

        pair = blocking_pair(source, rel, target)
        if pair is not None:
            blocker, blocked = pair
            cycle = cycle_if_added(self.index.blocking_adjacency(), blocker, blocked)
            if cycle is not None:
                raise CycleDetected(cycle)

        edge = Edge(source, rel, target)
        rows = [edge] if edge.inverse() is None else [edge, edge.inverse()]

        def _apply(store: IssueStore) -> EdgeChange:
            result = EdgeChange(edge)
            written = [r for r in rows if self._append(store, r)]
            self.index.add(rows)
            if written:
                result.changed = True
                store.record_event(source, EventType.DEPENDENCY_ADDED, self.actor,
                                   new_value=f"{rel} {target}")
            if pair is not None:
                result.status_changes = self._reevaluate(store, [pair[1]])
            self.index.mark_synced()
            return result

        result = self.store.run_in_transaction(_apply)
        self._log(f"Added {edge}" if result.changed else f"Already present: {edge}")
        return result

    def remove_edge(self, source: str, relation: str, target: str) -> EdgeChange:
        """Remove ``source relation target`` and its mirror.

        Only the issue holding a recorded half has to exist, so a reference
        to a deleted issue can still be dropped. Raises EdgeNotFound if
        neither half is recorded.
        """
        rel = Relation.parse(relation)
        if source == target:
            raise SelfReference(source)
        self.index.ensure_fresh()

        edge = Edge(source, rel, target)
        rows = [edge] if edge.inverse() is None else [edge, edge.inverse()]
        present = set(self.index.outgoing(source)) | set(self.index.outgoing(target))
        if not any(r in present for r in rows):
            missing = [i for i in (source, target) if not self.store.exists(i)]
            if missing:
                raise NotFound(missing)
            raise EdgeNotFound(source, rel, target)
        owners = [r for r in rows if self.store.exists(r.source)]
        pair = blocking_pair(source, rel, target)

        def _apply(store: IssueStore) -> EdgeChange:
            result = EdgeChange(edge, changed=True)
            for r in owners:
                self._discard(store, r)
            self.index.remove(rows)
            store.record_event(owners[0].source, EventType.DEPENDENCY_REMOVED, self.actor,
                               old_value=f"{rel} {target}")
            if pair is not None:
                result.status_changes = self._reevaluate(store, [pair[1]])
            self.index.mark_synced()
            return result

        result = self.store.run_in_transaction(_apply)
        self._log(f"Removed {edge}")
        return result

    def set_status(self, issue_id: str, status: str) -> list[StatusChange]:
        """Change an issue's status and cascade to its direct dependents.

        Asking for any non-closed status while a blocker is unresolved
        lands on ``blocked`` instead. Closing an issue re-checks everything
        it blocks (and may unblock it); reopening re-blocks them.
        """
        if not Status.is_valid(status):
            raise ValueError(f"invalid status: {status}")
        self._require(issue_id)
        self.index.ensure_fresh()

        def _apply(store: IssueStore) -> list[StatusChange]:
            changes: list[StatusChange] = []
            old = store.get_field(issue_id, "status")
            new = status
            if new != Status.CLOSED and self._unresolved_blockers(issue_id):
                new = Status.BLOCKED
            if new != old:
                store.set_fields(issue_id, {"status": new}, self.actor)
                changes.append(StatusChange(issue_id, old, new))
            if is_resolved(old) != is_resolved(new):
                changes += self._reevaluate(store, self.index.blocked_by(issue_id))
            self.index.mark_synced()
            return changes

        changes = self.store.run_in_transaction(_apply)
        for c in changes[1:]:
            self._log(f"Cascade: {c.issue_id} {c.old} -> {c.new}")
        return changes

    def repair_one_sided(self) -> list[Edge]:
        """Write the missing half of every one-sided blocking pair.

        Returns the halves that were written.
        """
        self.index.ensure_fresh()
        halves = [
            e.inverse() for e in self._one_sided(set(self.index.edges()))
            if self.store.exists(e.target)
        ]

        def _apply(store: IssueStore) -> None:
            for half in halves:
                self._append(store, half)
            self.index.add(halves)
            affected = [blocking_pair(*h)[1] for h in halves]
            self._reevaluate(store, affected)
            self.index.mark_synced()

        if halves:
            self.store.run_in_transaction(_apply)
            self._log(f"Repaired {len(halves)} one-sided dependency half(s)")
        return halves

    def rebuild_index(self, from_scratch: bool = False) -> int:
        return self.index.rebuild_from(from_scratch=from_scratch)

    # --- Reads ---

    def list_edges(self, issue_id: str | None = None) -> list[Edge]:
        """Index rows, all of them or those owned by one issue."""
        self.index.ensure_fresh()
        if issue_id is None:
            return self.index.edges()
        self._require(issue_id)
        return self.index.outgoing(issue_id)

    def relations_of(self, issue_id: str) -> dict[str, list[str]]:
        grouped: dict[str, list[str]] = {rel: [] for rel in Relation.all()}
        for edge in self.list_edges(issue_id):
            grouped.setdefault(edge.relation, []).append(edge.target)
        return grouped

    def ready(self) -> list[Issue]:
        self.index.ensure_fresh()
        return ready_list(self.store.list_issues())

    def topo(self) -> list[Issue]:
        self.index.ensure_fresh()
        return topological_order(self.store.list_issues(), self.index.edges())

    def blocked(self) -> list[tuple[Issue, list[str]]]:
        """Blocked issues with their unresolved blockers."""
        self.index.ensure_fresh()
        return [
            (issue, self._unresolved_blockers(issue.id))
            for issue in self.store.list_issues(status=Status.BLOCKED)
        ]

    def export(self, issue_id: str | None = None, fmt: str = "text") -> str:
        self.index.ensure_fresh()
        edges = self.index.edges()
        if issue_id is not None:
            self._require(issue_id)
            edges = filter_reachable(edges, issue_id)
        return render(edges, fmt, issues=self.store.list_issues(include_closed=True))

    # --- Health ---

    @staticmethod
    def _one_sided(edges: set[Edge]) -> list[Edge]:
        return sorted(
            e for e in edges
            if Relation.is_blocking(e.relation) and e.inverse() not in edges
        )

    def check(self) -> HealthReport:
        self.index.ensure_fresh()
        edges = set(self.index.edges())
        ids = set(self.store.list_all_ids())
        missing, extra = self.index.diff_against_rebuild()
        return HealthReport(
            missing=missing,
            extra=extra,
            one_sided=self._one_sided(edges),
            dangling=sorted(e for e in edges if e.target not in ids),
            cycles=find_cycles(self.index.blocking_adjacency()),
        )
