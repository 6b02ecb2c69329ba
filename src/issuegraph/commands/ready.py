"""ig ready - show issues ready to work on."""

from __future__ import annotations

import click

from issuegraph.cli import ProjectContext, pass_ctx
from issuegraph.utils import format_issue_row


@click.command("ready")
@click.option("--limit", default=0, type=int, help="Max issues")
@click.option("--long", "-L", "long_format", is_flag=True, help="Long format")
@pass_ctx
def ready(ctx: ProjectContext, limit: int, long_format: bool) -> None:
    """Show issues that are neither blocked nor closed, highest priority first."""
    ctx.ensure_initialized()
    assert ctx.engine is not None

    issues = ctx.engine.ready()
    if limit:
        issues = issues[:limit]

    if ctx.json_output:
        ctx.output([i.to_dict() for i in issues])
        return

    if not issues:
        click.echo("No ready issues.")
        return

    for issue in issues:
        click.echo(format_issue_row(issue, long_format=long_format))

    if not ctx.quiet:
        click.echo(f"\n{len(issues)} ready issue(s)")
