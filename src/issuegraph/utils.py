"""Utility functions for the issuegraph CLI."""

from __future__ import annotations

from datetime import datetime, timezone

from issuegraph.models import Issue, Priority, Status


def status_symbol(status: str) -> str:
    """Return a symbol for status display."""
    symbols = {
        Status.OPEN: " ",
        Status.IN_PROGRESS: ">",
        Status.REVIEW: "?",
        Status.BLOCKED: "!",
        Status.DEFERRED: "~",
        Status.CLOSED: "x",
    }
    return symbols.get(status, "?")


def priority_tag(priority: str) -> str:
    """Fixed-width priority column."""
    return f"{priority:<8}" if Priority.is_valid(priority) else f"{'?':<8}"


def sanitize_prefix(name: str) -> str:
    """Lowercase, keep alphanumerics and hyphens; fall back to 'ig'."""
    prefix = "".join(c if c.isalnum() or c == "-" else "-" for c in name.lower())
    return prefix.strip("-") or "ig"


def format_time_ago(dt: datetime) -> str:
    """Format a datetime as a relative time string."""
    now = datetime.now(timezone.utc)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    seconds = int((now - dt).total_seconds())
    if seconds < 60:
        return "just now"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    days = hours // 24
    if days < 30:
        return f"{days}d ago"
    if days < 365:
        return f"{days // 30}mo ago"
    return f"{days // 365}y ago"


def truncate(s: str, max_len: int = 60) -> str:
    """Truncate a string with ellipsis."""
    if len(s) <= max_len:
        return s
    return s[:max_len - 3] + "..."


def format_issue_row(issue: Issue, long_format: bool = False) -> str:
    """Format an issue as a single-line row for list display."""
    sym = status_symbol(issue.status)
    pri = priority_tag(issue.priority)
    title = truncate(issue.title, 50)
    if long_format:
        age = format_time_ago(issue.created_at)
        return f"[{sym}] {issue.id:<14} {pri} {issue.status:<11} {title}  ({age})"
    return f"[{sym}] {issue.id:<14} {pri} {title}"


def format_status_change(issue_id: str, old: str, new: str) -> str:
    """Indented cascade line, e.g. '  ig-3fa91c0: blocked -> open'."""
    return f"  {issue_id}: {old} -> {new}"
