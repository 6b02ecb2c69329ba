"""ig deps - export the dependency graph."""

from __future__ import annotations

import click

from issuegraph.cli import ProjectContext, pass_ctx
from issuegraph.graph.export import FORMATS


@click.command("deps")
@click.argument("issue_id", required=False)
@click.option("--format", "fmt", default="text", type=click.Choice(list(FORMATS)),
              help="Output format")
@click.option("--dot", is_flag=True, help="Shorthand for --format dot")
@pass_ctx
def deps(ctx: ProjectContext, issue_id: str | None, fmt: str, dot: bool) -> None:
    """Print the graph, or the part of it reachable from ISSUE_ID.

    Pipe DOT output to Graphviz: ig deps --dot | dot -Tsvg > graph.svg
    """
    ctx.ensure_initialized()
    assert ctx.engine is not None

    if dot:
        fmt = "dot"
    elif ctx.json_output:
        fmt = "json"

    full_id = ctx.resolve_issue_id(issue_id) if issue_id else None
    text = ctx.engine.export(full_id, fmt=fmt)
    if text:
        click.echo(text)
