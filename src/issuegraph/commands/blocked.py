"""ig blocked - show blocked issues."""

from __future__ import annotations

import click

from issuegraph.cli import ProjectContext, pass_ctx
from issuegraph.utils import priority_tag, truncate


@click.command("blocked")
@pass_ctx
def blocked(ctx: ProjectContext) -> None:
    """Show blocked issues and what is blocking them."""
    ctx.ensure_initialized()
    assert ctx.engine is not None

    blocked_list = ctx.engine.blocked()

    if ctx.json_output:
        data = []
        for issue, blocker_ids in blocked_list:
            d = issue.to_dict()
            d["blocked_by"] = blocker_ids
            data.append(d)
        ctx.output(data)
        return

    if not blocked_list:
        click.echo("No blocked issues.")
        return

    for issue, blocker_ids in blocked_list:
        title = truncate(issue.title, 45)
        click.echo(f"  {issue.id:<20} {priority_tag(issue.priority)} {title}")
        click.echo(f"    blocked by: {', '.join(blocker_ids) or '(none)'}")

    if not ctx.quiet:
        click.echo(f"\n{len(blocked_list)} blocked issue(s)")
