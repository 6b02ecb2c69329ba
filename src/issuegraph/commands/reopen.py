"""ig reopen - reopen a closed issue."""

from __future__ import annotations

import click

from issuegraph.cli import ProjectContext, pass_ctx
from issuegraph.models import Status
from issuegraph.utils import format_status_change


@click.command("reopen")
@click.argument("issue_id")
@pass_ctx
def reopen(ctx: ProjectContext, issue_id: str) -> None:
    """Reopen a closed issue.

    The issue comes back as blocked if any of its blockers is still
    unresolved, and everything it blocks is blocked again.
    """
    ctx.ensure_initialized()
    assert ctx.store is not None and ctx.engine is not None

    full_id = ctx.resolve_issue_id(issue_id)
    issue = ctx.store.get_issue(full_id)
    if issue is None:
        ctx.fail(f"issue not found: {issue_id}")

    if issue.status != Status.CLOSED:
        ctx.fail(f"issue is not closed (status: {issue.status})")

    changes = ctx.engine.set_status(full_id, Status.OPEN)
    status = changes[0].new if changes else Status.OPEN

    if ctx.json_output:
        ctx.output({"id": full_id, "status": status,
                    "status_changes": [c.to_dict() for c in changes[1:]]})
    elif not ctx.quiet:
        click.echo(f"Reopened {full_id}: {issue.title} ({status})")
        for c in changes[1:]:
            click.echo(format_status_change(c.issue_id, c.old, c.new))
