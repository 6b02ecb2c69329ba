"""ig dep - manage relationships between issues."""

from __future__ import annotations

import click

from issuegraph.cli import ProjectContext, pass_ctx
from issuegraph.errors import GraphError
from issuegraph.graph.engine import EdgeChange
from issuegraph.models import Relation
from issuegraph.utils import format_status_change


@click.group("dep")
def dep() -> None:
    """Manage issue relationships (blocks, depends_on, parent_of, relates_to)."""


def _report(ctx: ProjectContext, verb: str, result: EdgeChange) -> None:
    if ctx.json_output:
        ctx.output(result.to_dict())
        return
    if ctx.quiet:
        return
    if result.changed:
        click.echo(f"{verb}: {result.edge}")
    else:
        click.echo(f"Already present: {result.edge}")
    for c in result.status_changes:
        click.echo(format_status_change(c.issue_id, c.old, c.new))


@dep.command("add")
@click.argument("source")
@click.argument("relation")
@click.argument("target")
@pass_ctx
def dep_add(ctx: ProjectContext, source: str, relation: str, target: str) -> None:
    """Add a relationship: SOURCE RELATION TARGET.

    Example: ig dep add ig-a1b2c3d blocks ig-e4f5a6b
    """
    ctx.ensure_initialized()
    assert ctx.engine is not None

    try:
        result = ctx.engine.add_edge(ctx.resolve_or_keep(source), relation,
                                     ctx.resolve_or_keep(target))
    except GraphError as e:
        ctx.fail(e)

    _report(ctx, "Added", result)


@dep.command("remove")
@click.argument("source")
@click.argument("relation")
@click.argument("target")
@pass_ctx
def dep_remove(ctx: ProjectContext, source: str, relation: str, target: str) -> None:
    """Remove a relationship and its mirror."""
    ctx.ensure_initialized()
    assert ctx.engine is not None

    try:
        result = ctx.engine.remove_edge(ctx.resolve_or_keep(source), relation,
                                        ctx.resolve_or_keep(target))
    except GraphError as e:
        ctx.fail(e)

    _report(ctx, "Removed", result)


@dep.command("list")
@click.argument("issue_id", required=False)
@pass_ctx
def dep_list(ctx: ProjectContext, issue_id: str | None) -> None:
    """List relationships, of one issue or of the whole project."""
    ctx.ensure_initialized()
    assert ctx.store is not None and ctx.engine is not None

    full_id = ctx.resolve_issue_id(issue_id) if issue_id else None
    edges = ctx.engine.list_edges(full_id)

    if ctx.json_output:
        ctx.output([e.to_dict() for e in edges])
        return

    if not edges:
        click.echo(f"No relationships for {full_id}" if full_id else "No relationships.")
        return

    if full_id is None:
        for e in edges:
            click.echo(str(e))
        return

    click.echo(f"Relationships of {full_id}:")
    for rel in Relation.all():
        for e in edges:
            if e.relation != rel:
                continue
            other = ctx.store.get_issue(e.target)
            status = other.status if other else "missing"
            click.echo(f"  {rel:<11} {e.target} ({status})")


@dep.command("rebuild")
@click.option("--from-scratch", is_flag=True, help="Drop and recreate the edge table")
@pass_ctx
def dep_rebuild(ctx: ProjectContext, from_scratch: bool) -> None:
    """Regenerate the edge index from every issue's relationship fields."""
    ctx.ensure_initialized()
    assert ctx.engine is not None

    count = ctx.engine.rebuild_index(from_scratch=from_scratch)

    if ctx.json_output:
        ctx.output({"edges": count})
    elif not ctx.quiet:
        click.echo(f"Rebuilt edge index: {count} edge(s)")
