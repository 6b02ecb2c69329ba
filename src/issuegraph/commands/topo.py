"""ig topo - show open issues in dependency order."""

from __future__ import annotations

import click

from issuegraph.cli import ProjectContext, pass_ctx
from issuegraph.errors import CycleDetected
from issuegraph.utils import format_issue_row


@click.command("topo")
@pass_ctx
def topo(ctx: ProjectContext) -> None:
    """List non-closed issues so every blocker precedes what it blocks."""
    ctx.ensure_initialized()
    assert ctx.engine is not None

    try:
        issues = ctx.engine.topo()
    except CycleDetected as e:
        ctx.fail(e)

    if ctx.json_output:
        ctx.output([i.to_dict() for i in issues])
        return

    if not issues:
        click.echo("No open issues.")
        return

    for n, issue in enumerate(issues, 1):
        click.echo(f"{n:>3}. {format_issue_row(issue)}")
