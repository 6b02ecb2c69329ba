"""Storage interface (abstract base) for issuegraph."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable

from issuegraph.models import Edge, Event, Issue


class IssueStore(ABC):
    """Abstract base class defining all storage operations."""

    @abstractmethod
    def path(self) -> str:
        """Return the database file path."""

    @abstractmethod
    def close(self) -> None:
        """Close the storage connection."""

    # --- Field-level contract used by the graph engine ---

    @abstractmethod
    def exists(self, issue_id: str) -> bool:
        """Whether an issue with this exact id exists."""

    @abstractmethod
    def get_field(self, issue_id: str, name: str) -> str:
        """Read one named field as a string.

        Relationship fields come back comma-separated. Raises KeyError for
        an unknown issue or field name.
        """

    @abstractmethod
    def set_fields(self, issue_id: str, fields: dict[str, Any], actor: str = "") -> None:
        """Atomically rewrite several named fields of one issue."""

    @abstractmethod
    def list_all_ids(self) -> list[str]:
        """All issue ids, sorted."""

    # --- Issue CRUD ---

    @abstractmethod
    def create_issue(self, issue: Issue, actor: str) -> None:
        """Create a new issue."""

    @abstractmethod
    def get_issue(self, issue_id: str) -> Issue | None:
        """Get an issue by ID. Returns None if not found."""

    @abstractmethod
    def list_issues(self, status: str | None = None,
                    include_closed: bool = False) -> list[Issue]:
        """List issues, optionally filtered by status."""

    @abstractmethod
    def delete_issue(self, issue_id: str, actor: str) -> None:
        """Hard-delete an issue."""

    @abstractmethod
    def resolve_id(self, partial: str) -> str | None:
        """Resolve a partial ID to a full ID. Returns None if ambiguous/not found."""

    # --- Change tracking ---

    @abstractmethod
    def data_version(self) -> int:
        """Counter bumped by every write to any issue."""

    @abstractmethod
    def ids_changed_since(self, version: int) -> list[str]:
        """Ids of issues written after the given data version."""

    # --- Edge table ---

    @abstractmethod
    def edge_table_exists(self) -> bool:
        """Whether the edge table has been created."""

    @abstractmethod
    def create_edge_table(self) -> None:
        """Create the edge table if missing."""

    @abstractmethod
    def drop_edge_table(self) -> None:
        """Drop the edge table and everything in it."""

    @abstractmethod
    def load_edges(self, source: str | None = None,
                   target: str | None = None) -> list[Edge]:
        """Read edge rows, optionally restricted by source and/or target."""

    @abstractmethod
    def insert_edges(self, edges: Iterable[Edge]) -> None:
        """Insert edge rows, ignoring ones already present."""

    @abstractmethod
    def delete_edges(self, edges: Iterable[Edge]) -> None:
        """Delete the given edge rows."""

    @abstractmethod
    def delete_edges_from(self, sources: Iterable[str] | None = None) -> None:
        """Delete every edge whose source is listed, or all edges when None."""

    # --- Events ---

    @abstractmethod
    def record_event(self, issue_id: str, event_type: str, actor: str,
                     old_value: str | None = None, new_value: str | None = None) -> None:
        """Append an audit trail event."""

    @abstractmethod
    def get_events(self, issue_id: str) -> list[Event]:
        """Get audit trail events for an issue."""

    # --- Config (DB-stored settings) ---

    @abstractmethod
    def get_config(self, key: str) -> str | None:
        """Get a config value from the DB."""

    @abstractmethod
    def set_config(self, key: str, value: str) -> None:
        """Set a config value in the DB."""

    @abstractmethod
    def list_config(self) -> dict[str, str]:
        """List all config key-value pairs."""

    # --- Metadata ---

    @abstractmethod
    def get_metadata(self, key: str) -> str | None:
        """Get a metadata value."""

    @abstractmethod
    def set_metadata(self, key: str, value: str) -> None:
        """Set a metadata value."""

    @abstractmethod
    def delete_metadata(self, key: str) -> None:
        """Remove a metadata key."""

    # --- Transactions ---

    @abstractmethod
    def run_in_transaction(self, fn: Callable[[IssueStore], Any]) -> Any:
        """Run fn(store) as one transaction; roll back if it raises."""
