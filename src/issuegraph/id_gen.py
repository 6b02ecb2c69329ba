"""Issue ID generation.

IDs are a prefix plus the leading hex digits of a SHA256 over the title,
description, creation time and actor, e.g. ``ig-3fa91c0``. Callers start at
seven digits and lengthen the suffix on collision.
"""

from __future__ import annotations

import hashlib
from datetime import datetime

DEFAULT_ID_LENGTH = 7
MAX_ID_LENGTH = 16


def generate_hash_id(title: str, description: str, created: datetime,
                     actor: str) -> str:
    """Full 64-char SHA256 hex digest for an issue about to be created."""
    h = hashlib.sha256()
    h.update(title.encode("utf-8"))
    h.update(description.encode("utf-8"))
    h.update(created.isoformat().encode("utf-8"))
    h.update(actor.encode("utf-8"))
    return h.hexdigest()


def make_issue_id(prefix: str, full_hash: str, length: int = DEFAULT_ID_LENGTH) -> str:
    """Create an issue ID from prefix and hash.

    Example: ig-a3f2dd0 (7 chars); a bare hash when prefix is empty.
    """
    if not prefix:
        return full_hash[:length]
    return f"{prefix}-{full_hash[:length]}"
