"""ig create - create a new issue."""

from __future__ import annotations

import click

from issuegraph.cli import ProjectContext, pass_ctx
from issuegraph.errors import GraphError
from issuegraph.id_gen import DEFAULT_ID_LENGTH, MAX_ID_LENGTH, generate_hash_id, make_issue_id
from issuegraph.models import Issue, Priority, Relation, Status, now_utc


@click.command("create")
@click.option("--title", "-t", required=True, help="Issue title")
@click.option("--priority", "-p", default=None,
              type=click.Choice(list(Priority.all())),
              help="Priority (default from config, normally medium)")
@click.option("--description", "-d", default="", help="Issue description")
@click.option("--blocks", multiple=True, help="Issue this one blocks (repeatable)")
@click.option("--depends-on", "depends_on", multiple=True,
              help="Issue this one depends on (repeatable)")
@click.option("--parent", default="", help="Parent issue ID")
@click.option("--id", "custom_id", default="", help="Custom issue ID")
@click.option("--silent", is_flag=True, help="Only output the issue ID")
@click.option("--dry-run", is_flag=True, help="Preview without creating")
@pass_ctx
def create(ctx: ProjectContext, title: str, priority: str | None, description: str,
           blocks: tuple[str, ...], depends_on: tuple[str, ...], parent: str,
           custom_id: str, silent: bool, dry_run: bool) -> None:
    """Create a new issue."""
    ctx.ensure_initialized()
    assert ctx.store is not None and ctx.engine is not None and ctx.config is not None

    now = now_utc()
    prefix = ctx.store.get_config("issue_prefix") or ""

    if custom_id:
        issue_id = custom_id
        if ctx.store.exists(issue_id):
            ctx.fail(f"issue already exists: {issue_id}")
    else:
        full_hash = generate_hash_id(title, description, now, ctx.actor)
        issue_id = make_issue_id(prefix, full_hash)
        # Progressive collision handling
        for length in range(DEFAULT_ID_LENGTH + 1, MAX_ID_LENGTH + 1):
            if not ctx.store.exists(issue_id):
                break
            issue_id = make_issue_id(prefix, full_hash, length=length)

    issue = Issue(
        id=issue_id,
        title=title,
        description=description,
        status=Status.OPEN,
        priority=priority or ctx.config.default_priority,
        created_at=now,
        updated_at=now,
    )
    err = issue.validate()
    if err:
        ctx.fail(err)

    if dry_run:
        if ctx.json_output:
            ctx.output(issue.to_dict())
        else:
            click.echo(f"Would create: {issue_id}")
            click.echo(f"  Title: {title}")
            click.echo(f"  Priority: {issue.priority}")
        return

    ctx.store.create_issue(issue, ctx.actor)

    links = [(ctx.resolve_or_keep(parent), Relation.PARENT_OF, issue_id)] if parent else []
    links += [(issue_id, Relation.BLOCKS, ctx.resolve_or_keep(b)) for b in blocks]
    links += [(issue_id, Relation.DEPENDS_ON, ctx.resolve_or_keep(d)) for d in depends_on]
    for source, rel, target in links:
        try:
            ctx.engine.add_edge(source, rel, target)
        except GraphError as e:
            click.echo(f"Warning: could not add {rel} link: {e}", err=True)

    if ctx.json_output:
        created = ctx.store.get_issue(issue_id)
        ctx.output(created.to_dict() if created else {"id": issue_id})
    elif silent:
        click.echo(issue_id)
    else:
        click.echo(f"Created {issue_id}: {title}")
