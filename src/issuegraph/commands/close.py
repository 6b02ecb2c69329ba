"""ig close - close one or more issues."""

from __future__ import annotations

import click

from issuegraph.cli import ProjectContext, pass_ctx
from issuegraph.models import Status
from issuegraph.utils import format_issue_row, format_status_change


@click.command("close")
@click.argument("issue_ids", nargs=-1, required=True)
@click.option("--suggest-next", is_flag=True, help="Suggest next issue to work on")
@pass_ctx
def close(ctx: ProjectContext, issue_ids: tuple[str, ...], suggest_next: bool) -> None:
    """Close one or more issues, unblocking whatever they blocked."""
    ctx.ensure_initialized()
    assert ctx.store is not None and ctx.engine is not None

    closed_ids = []
    unblocked = []
    for partial_id in issue_ids:
        full_id = ctx.resolve_issue_id(partial_id)
        issue = ctx.store.get_issue(full_id)
        if issue is None:
            click.echo(f"Warning: issue not found: {partial_id}", err=True)
            continue
        if issue.status == Status.CLOSED:
            click.echo(f"Already closed: {full_id}", err=True)
            continue

        changes = ctx.engine.set_status(full_id, Status.CLOSED)
        closed_ids.append(full_id)
        cascade = [c for c in changes if c.issue_id != full_id]
        unblocked += [c.issue_id for c in cascade]

        if not ctx.quiet and not ctx.json_output:
            click.echo(f"Closed {full_id}: {issue.title}")
            for c in cascade:
                click.echo(format_status_change(c.issue_id, c.old, c.new))

    if ctx.json_output:
        ctx.output({"closed": closed_ids, "unblocked": unblocked})
        return

    if suggest_next and closed_ids:
        ready = ctx.engine.ready()[:3]
        if ready:
            click.echo("\nSuggested next:")
            for r in ready:
                click.echo(f"  {format_issue_row(r)}")
