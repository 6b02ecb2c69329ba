"""ig list - list issues."""

from __future__ import annotations

import click

from issuegraph.cli import ProjectContext, pass_ctx
from issuegraph.models import Status
from issuegraph.utils import format_issue_row


@click.command("list")
@click.option("--status", "-s", "status", default=None,
              type=click.Choice(list(Status.all())), help="Filter by status")
@click.option("--all", "show_all", is_flag=True, help="Include closed issues")
@click.option("--long", "-L", "long_format", is_flag=True, help="Long format with extra fields")
@pass_ctx
def list_cmd(ctx: ProjectContext, status: str | None, show_all: bool,
             long_format: bool) -> None:
    """List issues, oldest first."""
    ctx.ensure_initialized()
    assert ctx.store is not None

    issues = ctx.store.list_issues(status=status, include_closed=show_all)

    if ctx.json_output:
        ctx.output([i.to_dict() for i in issues])
        return

    if not issues:
        click.echo("No issues found.")
        return

    for issue in issues:
        click.echo(format_issue_row(issue, long_format=long_format))

    if not ctx.quiet:
        click.echo(f"\n{len(issues)} issue(s)")
