"""SQLite storage implementation for issuegraph."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Any, Callable, Iterable

from issuegraph.models import (
    RELATION_FIELDS, Edge, Event, EventType, Issue, Priority, Status,
    format_id_list, format_timestamp, now_utc, parse_id_list, parse_timestamp,
)
from issuegraph.storage.interface import IssueStore
from issuegraph.storage.schema import EDGE_TABLE, EDGE_TARGET_INDEX, SCHEMA

# Columns that set_fields/get_field may touch
FIELD_NAMES = (
    "title", "description", "status", "priority",
    *RELATION_FIELDS,
    "created_at", "updated_at", "closed_at",
)


class SQLiteStorage(IssueStore):
    """SQLite-based storage backend."""

    def __init__(self, db_path: str):
        self._db_path = db_path
        self._conn = sqlite3.connect(db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA busy_timeout=5000")
        self._tx_depth = 0
        self._conn.executescript(SCHEMA)
        self._conn.commit()

    def path(self) -> str:
        return self._db_path

    def close(self) -> None:
        self._conn.close()

    # --- Helpers ---

    def _commit(self) -> None:
        """Commit unless an enclosing run_in_transaction owns the commit."""
        if self._tx_depth == 0:
            self._conn.commit()

    def _bump_version(self) -> int:
        self._conn.execute(
            "UPDATE metadata SET value = CAST(value AS INTEGER) + 1 WHERE key = 'data_version'"
        )
        return self.data_version()

    def _row_to_issue(self, row: sqlite3.Row) -> Issue:
        issue = Issue(
            id=row["id"],
            title=row["title"],
            description=row["description"] or "",
            status=row["status"] or Status.OPEN,
            priority=row["priority"] or Priority.DEFAULT,
            created_at=parse_timestamp(row["created_at"]) or now_utc(),
            updated_at=parse_timestamp(row["updated_at"]) or now_utc(),
            closed_at=parse_timestamp(row["closed_at"]),
            revision=row["revision"] or 0,
        )
        for rel in RELATION_FIELDS:
            setattr(issue, rel, parse_id_list(row[rel]))
        return issue

    def record_event(self, issue_id: str, event_type: str, actor: str,
                     old_value: str | None = None, new_value: str | None = None) -> None:
        """Record an audit trail event."""
        self._conn.execute(
            "INSERT INTO events (issue_id, event_type, actor, old_value, new_value, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (issue_id, event_type, actor, old_value, new_value,
             format_timestamp(now_utc()))
        )
        self._commit()

    # --- Field-level contract ---

    def exists(self, issue_id: str) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM issues WHERE id = ?", (issue_id,)
        ).fetchone()
        return row is not None

    def get_field(self, issue_id: str, name: str) -> str:
        if name not in FIELD_NAMES:
            raise KeyError(f"unknown field: {name}")
        row = self._conn.execute(
            f"SELECT {name} FROM issues WHERE id = ?", (issue_id,)
        ).fetchone()
        if row is None:
            raise KeyError(f"issue not found: {issue_id}")
        value = row[0]
        return "" if value is None else str(value)

    def set_fields(self, issue_id: str, fields: dict[str, Any], actor: str = "") -> None:
        unknown = [k for k in fields if k not in FIELD_NAMES]
        if unknown:
            raise KeyError(f"unknown field(s): {', '.join(unknown)}")
        row = self._conn.execute(
            "SELECT status FROM issues WHERE id = ?", (issue_id,)
        ).fetchone()
        if row is None:
            raise KeyError(f"issue not found: {issue_id}")
        old_status = row["status"]

        values = dict(fields)
        for rel in RELATION_FIELDS:
            if rel in values and not isinstance(values[rel], str):
                values[rel] = format_id_list(values[rel])
        new_status = values.get("status")
        if new_status is not None and not Status.is_valid(new_status):
            raise ValueError(f"invalid status: {new_status}")
        if "priority" in values and not Priority.is_valid(values["priority"]):
            raise ValueError(f"invalid priority: {values['priority']}")
        if new_status is not None and "closed_at" not in values:
            if new_status == Status.CLOSED and old_status != Status.CLOSED:
                values["closed_at"] = now_utc()
            elif new_status != Status.CLOSED:
                values["closed_at"] = None
        for col in ("created_at", "updated_at", "closed_at"):
            if isinstance(values.get(col), datetime):
                values[col] = format_timestamp(values[col])
        values.setdefault("updated_at", format_timestamp(now_utc()))
        values["revision"] = self._bump_version()

        set_clauses = ", ".join(f"{col} = ?" for col in values)
        self._conn.execute(
            f"UPDATE issues SET {set_clauses} WHERE id = ?",
            [*values.values(), issue_id],
        )

        if new_status is not None and new_status != old_status:
            self.record_event(issue_id, EventType.STATUS_CHANGED, actor,
                              old_status, new_status)
        else:
            self.record_event(issue_id, EventType.UPDATED, actor,
                              new_value=",".join(sorted(fields)))
        self._commit()

    def list_all_ids(self) -> list[str]:
        rows = self._conn.execute("SELECT id FROM issues ORDER BY id").fetchall()
        return [row["id"] for row in rows]

    # --- Issue CRUD ---

    def create_issue(self, issue: Issue, actor: str) -> None:
        err = issue.validate()
        if err:
            raise ValueError(err)
        if issue.status == Status.CLOSED and issue.closed_at is None:
            issue.closed_at = now_utc()
        issue.revision = self._bump_version()
        self._conn.execute(
            """INSERT INTO issues (
                id, title, description, status, priority,
                blocks, depends_on, parent_of, relates_to,
                created_at, updated_at, closed_at, revision
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                issue.id, issue.title, issue.description, issue.status,
                issue.priority,
                format_id_list(issue.blocks), format_id_list(issue.depends_on),
                format_id_list(issue.parent_of), format_id_list(issue.relates_to),
                format_timestamp(issue.created_at),
                format_timestamp(issue.updated_at),
                format_timestamp(issue.closed_at),
                issue.revision,
            )
        )
        self.record_event(issue.id, EventType.CREATED, actor)
        self._commit()

    def get_issue(self, issue_id: str) -> Issue | None:
        row = self._conn.execute(
            "SELECT * FROM issues WHERE id = ?", (issue_id,)
        ).fetchone()
        if row is None:
            return None
        return self._row_to_issue(row)

    def list_issues(self, status: str | None = None,
                    include_closed: bool = False) -> list[Issue]:
        sql = "SELECT * FROM issues"
        params: list[Any] = []
        if status:
            sql += " WHERE status = ?"
            params.append(status)
        elif not include_closed:
            sql += " WHERE status != 'closed'"
        sql += " ORDER BY created_at ASC, id ASC"
        rows = self._conn.execute(sql, params).fetchall()
        return [self._row_to_issue(row) for row in rows]

    def delete_issue(self, issue_id: str, actor: str) -> None:
        """Remove an issue row. Not exposed by the CLI; kept for store consumers.

        Relationship fields on other issues are left as they are, and the
        edge index drops the deleted issue's own rows on its next catch-up.
        """
        self._bump_version()
        self._conn.execute("DELETE FROM issues WHERE id = ?", (issue_id,))
        self.record_event(issue_id, EventType.DELETED, actor)
        self._commit()

    def resolve_id(self, partial: str) -> str | None:
        """Resolve a partial ID to a full ID."""
        if self.exists(partial):
            return partial
        rows = self._conn.execute(
            "SELECT id FROM issues WHERE id LIKE ? ESCAPE '\\'",
            (partial.replace("%", "\\%").replace("_", "\\_") + "%",)
        ).fetchall()
        if len(rows) == 1:
            return rows[0]["id"]
        return None

    # --- Change tracking ---

    def data_version(self) -> int:
        row = self._conn.execute(
            "SELECT value FROM metadata WHERE key = 'data_version'"
        ).fetchone()
        return int(row["value"]) if row else 0

    def ids_changed_since(self, version: int) -> list[str]:
        rows = self._conn.execute(
            "SELECT id FROM issues WHERE revision > ? ORDER BY id", (version,)
        ).fetchall()
        return [row["id"] for row in rows]

    # --- Edge table ---

    def edge_table_exists(self) -> bool:
        row = self._conn.execute(
            "SELECT count(*) FROM sqlite_master WHERE type='table' AND name='edges'"
        ).fetchone()
        return row[0] > 0

    def create_edge_table(self) -> None:
        self._conn.execute(EDGE_TABLE)
        self._conn.execute(EDGE_TARGET_INDEX)
        self._commit()

    def drop_edge_table(self) -> None:
        self._conn.execute("DROP TABLE IF EXISTS edges")
        self._commit()

    def load_edges(self, source: str | None = None,
                   target: str | None = None) -> list[Edge]:
        sql = "SELECT source, relation, target FROM edges"
        conditions = []
        params: list[str] = []
        if source is not None:
            conditions.append("source = ?")
            params.append(source)
        if target is not None:
            conditions.append("target = ?")
            params.append(target)
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)
        sql += " ORDER BY source, relation, target"
        rows = self._conn.execute(sql, params).fetchall()
        return [Edge(row["source"], row["relation"], row["target"]) for row in rows]

    def insert_edges(self, edges: Iterable[Edge]) -> None:
        self._conn.executemany(
            "INSERT OR IGNORE INTO edges (source, relation, target) VALUES (?, ?, ?)",
            [tuple(e) for e in edges]
        )
        self._commit()

    def delete_edges(self, edges: Iterable[Edge]) -> None:
        self._conn.executemany(
            "DELETE FROM edges WHERE source = ? AND relation = ? AND target = ?",
            [tuple(e) for e in edges]
        )
        self._commit()

    def delete_edges_from(self, sources: Iterable[str] | None = None) -> None:
        if sources is None:
            self._conn.execute("DELETE FROM edges")
        else:
            self._conn.executemany(
                "DELETE FROM edges WHERE source = ?", [(s,) for s in sources]
            )
        self._commit()

    # --- Events ---

    def get_events(self, issue_id: str) -> list[Event]:
        rows = self._conn.execute(
            "SELECT * FROM events WHERE issue_id = ? ORDER BY id ASC",
            (issue_id,)
        ).fetchall()
        return [
            Event(
                id=row["id"],
                issue_id=row["issue_id"],
                event_type=row["event_type"],
                actor=row["actor"],
                old_value=row["old_value"],
                new_value=row["new_value"],
                created_at=parse_timestamp(row["created_at"]) or now_utc(),
            )
            for row in rows
        ]

    # --- Config ---

    def get_config(self, key: str) -> str | None:
        row = self._conn.execute(
            "SELECT value FROM config WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else None

    def set_config(self, key: str, value: str) -> None:
        self._conn.execute(
            "INSERT INTO config (key, value) VALUES (?, ?) "
            "ON CONFLICT (key) DO UPDATE SET value = excluded.value",
            (key, value)
        )
        self._commit()

    def list_config(self) -> dict[str, str]:
        rows = self._conn.execute("SELECT key, value FROM config ORDER BY key").fetchall()
        return {row["key"]: row["value"] for row in rows}

    # --- Metadata ---

    def get_metadata(self, key: str) -> str | None:
        row = self._conn.execute(
            "SELECT value FROM metadata WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else None

    def set_metadata(self, key: str, value: str) -> None:
        self._conn.execute(
            "INSERT INTO metadata (key, value) VALUES (?, ?) "
            "ON CONFLICT (key) DO UPDATE SET value = excluded.value",
            (key, value)
        )
        self._commit()

    def delete_metadata(self, key: str) -> None:
        self._conn.execute("DELETE FROM metadata WHERE key = ?", (key,))
        self._commit()

    # --- Transactions ---

    def run_in_transaction(self, fn: Callable[[IssueStore], Any]) -> Any:
        self._tx_depth += 1
        try:
            result = fn(self)
        except Exception:
            self._tx_depth -= 1
            if self._tx_depth == 0:
                self._conn.rollback()
            raise
        self._tx_depth -= 1
        if self._tx_depth == 0:
            self._conn.commit()
        return result
