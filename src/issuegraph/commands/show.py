"""ig show - display issue details."""

from __future__ import annotations

import click

from issuegraph.cli import ProjectContext, pass_ctx
from issuegraph.models import Relation
from issuegraph.utils import format_time_ago


@click.command("show")
@click.argument("issue_id")
@click.option("--events", is_flag=True, help="Include the audit trail")
@pass_ctx
def show(ctx: ProjectContext, issue_id: str, events: bool) -> None:
    """Show detailed view of an issue."""
    ctx.ensure_initialized()
    assert ctx.store is not None and ctx.engine is not None

    full_id = ctx.resolve_issue_id(issue_id)
    issue = ctx.store.get_issue(full_id)
    if issue is None:
        ctx.fail(f"issue not found: {issue_id}")

    ctx.engine.index.ensure_fresh()
    blockers = sorted(ctx.engine.index.blockers_of(full_id))
    blocked = sorted(ctx.engine.index.blocked_by(full_id))

    if ctx.json_output:
        data = issue.to_dict()
        data["_blocked_by"] = blockers
        data["_blocking"] = blocked
        if events:
            data["_events"] = [e.to_dict() for e in ctx.store.get_events(full_id)]
        ctx.output(data)
        return

    click.echo(f"{'─' * 60}")
    click.echo(f"  {issue.id}")
    click.echo(f"{'─' * 60}")
    click.echo(f"  Title:    {issue.title}")
    click.echo(f"  Status:   {issue.status}")
    click.echo(f"  Priority: {issue.priority}")
    click.echo(f"  Created:  {format_time_ago(issue.created_at)}")
    click.echo(f"  Updated:  {format_time_ago(issue.updated_at)}")
    if issue.closed_at:
        click.echo(f"  Closed:   {format_time_ago(issue.closed_at)}")

    if issue.description:
        click.echo("\n  Description:")
        for line in issue.description.split("\n"):
            click.echo(f"    {line}")

    fields = [(rel, issue.relation(rel)) for rel in Relation.all()]
    if any(ids for _, ids in fields):
        click.echo("\n  Relationships:")
        for rel, ids in fields:
            for other in ids:
                other_issue = ctx.store.get_issue(other)
                status = other_issue.status if other_issue else "missing"
                title = other_issue.title if other_issue else "(unknown)"
                click.echo(f"    {rel:<11} {other} ({status}) {title}")

    if blockers:
        click.echo(f"\n  Blocked by: {', '.join(blockers)}")
    if blocked:
        click.echo(f"  Blocking:   {', '.join(blocked)}")

    if events:
        history = ctx.store.get_events(full_id)
        click.echo(f"\n  Events ({len(history)}):")
        for e in history:
            detail = " -> ".join(v for v in (e.old_value, e.new_value) if v)
            click.echo(f"    [{format_time_ago(e.created_at)}] {e.actor or '-'}: "
                       f"{e.event_type} {detail}".rstrip())

    click.echo()
