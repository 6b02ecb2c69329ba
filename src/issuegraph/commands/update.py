"""ig update - update an issue."""

from __future__ import annotations

import click

from issuegraph.cli import ProjectContext, pass_ctx
from issuegraph.errors import SelfReference
from issuegraph.models import Priority, Relation, Status, parse_id_list
from issuegraph.utils import format_status_change


@click.command("update")
@click.argument("issue_id")
@click.option("--status", "-s", default=None,
              type=click.Choice(list(Status.all())), help="New status")
@click.option("--priority", "-p", default=None,
              type=click.Choice(list(Priority.all())), help="New priority")
@click.option("--title", "-t", default=None, help="New title")
@click.option("--description", "-d", default=None, help="New description")
@click.option("--blocks", default=None, help="Rewrite the blocks field (comma-separated, empty to clear)")
@click.option("--depends-on", "depends_on", default=None,
              help="Rewrite the depends_on field (comma-separated, empty to clear)")
@click.option("--parent-of", "parent_of", default=None,
              help="Rewrite the parent_of field (comma-separated, empty to clear)")
@click.option("--relates-to", "relates_to", default=None,
              help="Rewrite the relates_to field (comma-separated, empty to clear)")
@pass_ctx
def update(ctx: ProjectContext, issue_id: str, status: str | None,
           priority: str | None, title: str | None, description: str | None,
           blocks: str | None, depends_on: str | None, parent_of: str | None,
           relates_to: str | None) -> None:
    """Update an existing issue.

    The relationship options overwrite the stored field as-is, without
    touching the other side of a pair; the edge index picks the edit up
    on the next graph command. Use 'ig dep add/remove' to keep both sides
    in step.
    """
    ctx.ensure_initialized()
    assert ctx.store is not None and ctx.engine is not None

    full_id = ctx.resolve_issue_id(issue_id)

    updates: dict = {}
    if priority is not None:
        updates["priority"] = priority
    if title is not None:
        if not title:
            ctx.fail("title is required")
        updates["title"] = title
    if description is not None:
        updates["description"] = description

    raw = {
        Relation.BLOCKS: blocks,
        Relation.DEPENDS_ON: depends_on,
        Relation.PARENT_OF: parent_of,
        Relation.RELATES_TO: relates_to,
    }
    for rel, value in raw.items():
        if value is None:
            continue
        ids = parse_id_list(value)
        if full_id in ids:
            ctx.fail(SelfReference(full_id))
        updates[rel] = ids

    if not updates and status is None:
        ctx.fail("no updates specified")

    if updates:
        ctx.store.set_fields(full_id, updates, ctx.actor)

    changes = []
    if status is not None:
        try:
            changes = ctx.engine.set_status(full_id, status)
        except ValueError as e:
            ctx.fail(e)

    if ctx.json_output:
        updated = ctx.store.get_issue(full_id)
        if updated:
            data = updated.to_dict()
            data["_status_changes"] = [c.to_dict() for c in changes]
            ctx.output(data)
    elif not ctx.quiet:
        click.echo(f"Updated {full_id}")
        for c in changes:
            if c.issue_id == full_id and c.new != status:
                click.echo(f"  {full_id} has unresolved blockers; status set to {c.new}")
            elif c.issue_id != full_id:
                click.echo(format_status_change(c.issue_id, c.old, c.new))
