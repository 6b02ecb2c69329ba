"""Persisted edge index derived from the issues' relationship fields.

Every edge is owned by the issue whose field lists it: ``A.blocks = [B]``
yields ``(A, blocks, B)`` and ``B.depends_on = [A]`` yields
``(B, depends_on, A)``. That makes a full rebuild a plain scan and lets the
staleness catch-up re-derive only the issues that changed.
"""

from __future__ import annotations

import sys
from typing import Iterable

from issuegraph.models import RELATION_FIELDS, Edge, Relation, parse_id_list
from issuegraph.storage.interface import IssueStore

SYNCED_VERSION_KEY = "edge_index_version"


def derive_for(store: IssueStore, issue_id: str) -> set[Edge]:
    """Edges implied by one issue's relationship fields."""
    edges: set[Edge] = set()
    for rel in RELATION_FIELDS:
        for target in parse_id_list(store.get_field(issue_id, rel)):
            edges.add(Edge(issue_id, rel, target))
    return edges


def derive(store: IssueStore) -> set[Edge]:
    """Edges implied by every issue in the store."""
    edges: set[Edge] = set()
    for issue_id in store.list_all_ids():
        edges |= derive_for(store, issue_id)
    return edges


class EdgeIndex:
    """Owned view over the store's edge table.

    Incremental ``add``/``remove`` and ``rebuild_from`` must always agree;
    ``diff_against_rebuild`` reports any drift between the two.
    """

    def __init__(self, store: IssueStore, verbose: bool = False) -> None:
        self.store = store
        self.verbose = verbose

    # --- State ---

    def exists(self) -> bool:
        return (self.store.edge_table_exists()
                and self.store.get_metadata(SYNCED_VERSION_KEY) is not None)

    def synced_version(self) -> int | None:
        value = self.store.get_metadata(SYNCED_VERSION_KEY)
        return int(value) if value is not None else None

    def mark_synced(self) -> None:
        self.store.set_metadata(SYNCED_VERSION_KEY, str(self.store.data_version()))

    def is_stale(self) -> bool:
        synced = self.synced_version()
        if synced is None or not self.store.edge_table_exists():
            return True
        return synced != self.store.data_version()

    # --- Reads ---

    def edges(self) -> list[Edge]:
        return self.store.load_edges()

    def outgoing(self, issue_id: str) -> list[Edge]:
        return self.store.load_edges(source=issue_id)

    def incoming(self, issue_id: str) -> list[Edge]:
        return self.store.load_edges(target=issue_id)

    def blockers_of(self, issue_id: str) -> set[str]:
        """Ids recorded as blocking this issue, from either side of the pair."""
        blockers = {e.target for e in self.outgoing(issue_id)
                    if e.relation == Relation.DEPENDS_ON}
        blockers |= {e.source for e in self.incoming(issue_id)
                     if e.relation == Relation.BLOCKS}
        return blockers

    def blocked_by(self, issue_id: str) -> set[str]:
        """Ids this issue blocks, from either side of the pair."""
        blocked = {e.target for e in self.outgoing(issue_id)
                   if e.relation == Relation.BLOCKS}
        blocked |= {e.source for e in self.incoming(issue_id)
                    if e.relation == Relation.DEPENDS_ON}
        return blocked

    def blocking_adjacency(self) -> dict[str, set[str]]:
        """blocker -> set of issues it blocks, over the whole index."""
        return blocking_adjacency(self.edges())

    # --- Incremental maintenance ---

    def add(self, edges: Iterable[Edge]) -> None:
        if not self.store.edge_table_exists():
            self.store.create_edge_table()
        self.store.insert_edges(edges)

    def remove(self, edges: Iterable[Edge]) -> None:
        if self.store.edge_table_exists():
            self.store.delete_edges(edges)

    # --- Reconciliation ---

    def rebuild_from(self, store: IssueStore | None = None,
                     from_scratch: bool = False) -> int:
        """Discard the index and regenerate it from every issue's fields.

        Returns the number of edges written.
        """
        source = store or self.store
        edges = derive(source)

        def _rebuild(s: IssueStore) -> None:
            if from_scratch:
                s.drop_edge_table()
            s.create_edge_table()
            s.delete_edges_from(None)
            s.insert_edges(sorted(edges))
            s.set_metadata(SYNCED_VERSION_KEY, str(s.data_version()))

        self.store.run_in_transaction(_rebuild)
        if self.verbose:
            print(f"Rebuilt edge index: {len(edges)} edge(s)", file=sys.stderr)
        return len(edges)

    def diff_against_rebuild(self, store: IssueStore | None = None) -> tuple[set[Edge], set[Edge]]:
        """Compare the index with a fresh derivation.

        Returns ``(missing, extra)``: edges the fields imply but the index
        lacks, and index rows no field supports.
        """
        expected = derive(store or self.store)
        actual = set(self.edges()) if self.store.edge_table_exists() else set()
        return expected - actual, actual - expected

    def catch_up(self) -> int:
        """Re-derive edges for issues written since the last sync.

        Returns the number of issues rescanned.
        """
        synced = self.synced_version() or 0
        changed = self.store.ids_changed_since(synced)
        live = set(self.store.list_all_ids())
        indexed_sources = {e.source for e in self.edges()}
        deleted = sorted(indexed_sources - live)

        def _catch_up(s: IssueStore) -> None:
            s.delete_edges_from(changed + deleted)
            fresh: set[Edge] = set()
            for issue_id in changed:
                fresh |= derive_for(s, issue_id)
            s.insert_edges(sorted(fresh))
            s.set_metadata(SYNCED_VERSION_KEY, str(s.data_version()))

        self.store.run_in_transaction(_catch_up)
        if self.verbose and (changed or deleted):
            print(f"Edge index caught up: {len(changed)} changed, "
                  f"{len(deleted)} deleted issue(s)", file=sys.stderr)
        return len(changed) + len(deleted)

    def ensure_fresh(self) -> bool:
        """Bring the index up to date before a graph read or mutation.

        A missing index is built in full; a stale one is caught up
        incrementally. Returns True if anything had to be done.
        """
        if not self.exists():
            self.rebuild_from()
            return True
        if not self.is_stale():
            return False
        self.catch_up()
        return True


def blocking_adjacency(edges: Iterable[Edge]) -> dict[str, set[str]]:
    """Fold ``blocks`` and ``depends_on`` rows into blocker -> blocked sets."""
    adjacency: dict[str, set[str]] = {}
    for edge in edges:
        if edge.relation == Relation.BLOCKS:
            adjacency.setdefault(edge.source, set()).add(edge.target)
        elif edge.relation == Relation.DEPENDS_ON:
            adjacency.setdefault(edge.target, set()).add(edge.source)
    return adjacency
