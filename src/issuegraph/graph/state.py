"""Auto-blocking state machine.

Kept free of storage so the transition rules can be tested on their own.
"""

from __future__ import annotations

from typing import Iterable

from issuegraph.models import Status


def is_resolved(status: str) -> bool:
    """A blocker only stops constraining its dependents once closed."""
    return status == Status.CLOSED


def recompute_status(current: str, blocker_statuses: Iterable[str]) -> str:
    """Status an issue should have given its direct blockers' statuses.

    Closed issues never move. Any unresolved blocker forces ``blocked``,
    whatever the owner had set. With every blocker resolved a ``blocked``
    issue reopens; other statuses are the owner's and stay as they are.
    """
    if current == Status.CLOSED:
        return current
    if any(not is_resolved(s) for s in blocker_statuses):
        return Status.BLOCKED
    if current == Status.BLOCKED:
        return Status.OPEN
    return current
