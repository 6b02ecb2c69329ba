"""Core data models: issues, relations and edges."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, NamedTuple

from issuegraph.errors import InvalidRelation


# --- Status constants ---

class Status:
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    BLOCKED = "blocked"
    DEFERRED = "deferred"
    CLOSED = "closed"

    _VALID = (OPEN, IN_PROGRESS, REVIEW, BLOCKED, DEFERRED, CLOSED)

    @classmethod
    def is_valid(cls, s: str) -> bool:
        return s in cls._VALID

    @classmethod
    def all(cls) -> tuple[str, ...]:
        return cls._VALID


# --- Priority constants ---

class Priority:
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    DEFAULT = MEDIUM

    _RANK = {LOW: 0, MEDIUM: 1, HIGH: 2, CRITICAL: 3}

    @classmethod
    def is_valid(cls, p: str) -> bool:
        return p in cls._RANK

    @classmethod
    def rank(cls, p: str) -> int:
        """Ordinal of a priority; unknown names sort with the default."""
        return cls._RANK.get(p, cls._RANK[cls.DEFAULT])

    @classmethod
    def all(cls) -> tuple[str, ...]:
        return tuple(cls._RANK)


# --- Relation kinds ---

class Relation:
    """The four relationship kinds and how they mirror onto the other issue.

    ``blocks`` and ``depends_on`` are each other's inverse: writing one side
    always writes the other. ``parent_of`` and ``relates_to`` live only on
    the source issue.
    """

    BLOCKS = "blocks"
    DEPENDS_ON = "depends_on"
    PARENT_OF = "parent_of"
    RELATES_TO = "relates_to"

    _INVERSE: dict[str, str | None] = {
        BLOCKS: DEPENDS_ON,
        DEPENDS_ON: BLOCKS,
        PARENT_OF: None,
        RELATES_TO: None,
    }

    @classmethod
    def all(cls) -> tuple[str, ...]:
        return tuple(cls._INVERSE)

    @classmethod
    def is_valid(cls, rel: str) -> bool:
        return rel in cls._INVERSE

    @classmethod
    def parse(cls, text: str) -> str:
        """Normalize user input (``depends-on``, ``Blocks``) to a relation name."""
        rel = text.strip().lower().replace("-", "_")
        if rel not in cls._INVERSE:
            raise InvalidRelation(text)
        return rel

    @classmethod
    def inverse(cls, rel: str) -> str | None:
        return cls._INVERSE[rel]

    @classmethod
    def is_blocking(cls, rel: str) -> bool:
        return rel in (cls.BLOCKS, cls.DEPENDS_ON)


RELATION_FIELDS = Relation.all()


# --- EventType constants ---

class EventType:
    CREATED = "created"
    UPDATED = "updated"
    STATUS_CHANGED = "status_changed"
    DEPENDENCY_ADDED = "dependency_added"
    DEPENDENCY_REMOVED = "dependency_removed"
    DELETED = "deleted"


# --- Helpers ---

def parse_timestamp(s: str | None) -> datetime | None:
    """Parse an RFC3339 timestamp string."""
    if not s:
        return None
    s = s.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    return datetime.fromisoformat(s)


def format_timestamp(dt: datetime | None) -> str | None:
    """Format a datetime as RFC3339 with a Z suffix for UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    s = dt.isoformat()
    if s.endswith("+00:00"):
        s = s[:-6] + "Z"
    return s


def now_utc() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


def parse_id_list(value: str | None) -> list[str]:
    """Split a stored comma-separated id list, dropping blanks and repeats."""
    if not value:
        return []
    ids: list[str] = []
    for part in value.split(","):
        part = part.strip()
        if part and part not in ids:
            ids.append(part)
    return ids


def format_id_list(ids: Iterable[str]) -> str:
    seen: list[str] = []
    for i in ids:
        if i and i not in seen:
            seen.append(i)
    return ",".join(seen)


# --- Value types ---

class Edge(NamedTuple):
    """One row of the edge index: ``source relation target``."""

    source: str
    relation: str
    target: str

    def __str__(self) -> str:
        return f"{self.source} {self.relation} {self.target}"

    def inverse(self) -> Edge | None:
        inv = Relation.inverse(self.relation)
        if inv is None:
            return None
        return Edge(self.target, inv, self.source)

    def to_dict(self) -> dict:
        return {"source": self.source, "relation": self.relation, "target": self.target}


@dataclass
class Event:
    id: int = 0
    issue_id: str = ""
    event_type: str = ""
    actor: str = ""
    old_value: str | None = None
    new_value: str | None = None
    created_at: datetime = field(default_factory=now_utc)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "event_type": self.event_type,
            "actor": self.actor,
            "created_at": format_timestamp(self.created_at),
        }
        if self.old_value is not None:
            d["old_value"] = self.old_value
        if self.new_value is not None:
            d["new_value"] = self.new_value
        return d


@dataclass
class Issue:
    """An issue record as held by the issue store."""

    id: str = ""
    title: str = ""
    description: str = ""
    status: str = Status.OPEN
    priority: str = Priority.DEFAULT

    # Relationship fields
    blocks: list[str] = field(default_factory=list)
    depends_on: list[str] = field(default_factory=list)
    parent_of: list[str] = field(default_factory=list)
    relates_to: list[str] = field(default_factory=list)

    created_at: datetime = field(default_factory=now_utc)
    updated_at: datetime = field(default_factory=now_utc)
    closed_at: datetime | None = None

    # Store-wide change counter value at the last write of this issue
    revision: int = 0

    def relation(self, rel: str) -> list[str]:
        return getattr(self, rel)

    def validate(self) -> str | None:
        """Validate issue fields. Returns error message or None if valid."""
        if not self.id:
            return "id is required"
        if "," in self.id or " " in self.id:
            return f"id must not contain commas or spaces: {self.id!r}"
        if not self.title:
            return "title is required"
        if len(self.title) > 500:
            return f"title must be 500 characters or less (got {len(self.title)})"
        if not Status.is_valid(self.status):
            return f"invalid status: {self.status}"
        if not Priority.is_valid(self.priority):
            return f"invalid priority: {self.priority}"
        for rel in RELATION_FIELDS:
            if self.id in self.relation(rel):
                return f"issue cannot reference itself in {rel}"
        return None

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "status": self.status,
            "priority": self.priority,
        }
        if self.description:
            d["description"] = self.description
        for rel in RELATION_FIELDS:
            if self.relation(rel):
                d[rel] = list(self.relation(rel))
        d["created_at"] = format_timestamp(self.created_at)
        d["updated_at"] = format_timestamp(self.updated_at)
        if self.closed_at:
            d["closed_at"] = format_timestamp(self.closed_at)
        return d
