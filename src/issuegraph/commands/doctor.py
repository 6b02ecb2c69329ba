"""ig doctor - health checks."""

from __future__ import annotations

import os

import click

from issuegraph.cli import ProjectContext, pass_ctx
from issuegraph.config import get_db_path


@click.command("doctor")
@click.option("--fix", is_flag=True, help="Repair one-sided pairs and rebuild the index")
@pass_ctx
def doctor(ctx: ProjectContext, fix: bool) -> None:
    """Run health checks on the issuegraph project."""
    ctx.ensure_initialized()
    assert ctx.store is not None and ctx.engine is not None
    assert ctx.project_dir is not None

    repaired = []
    if fix:
        repaired = ctx.engine.repair_one_sided()
        ctx.engine.rebuild_index()

    report = ctx.engine.check()

    if ctx.json_output:
        data = report.to_dict()
        data["repaired"] = [e.to_dict() for e in repaired]
        ctx.output(data)
        return

    click.echo("issuegraph doctor")
    click.echo("─" * 40)

    db_path = get_db_path(ctx.project_dir, ctx.config)
    click.echo(f"  Database: {db_path}")
    if os.path.exists(db_path):
        version = ctx.store.get_metadata("schema_version")
        click.echo(f"    [OK] exists (schema version {version or 'unknown'})")

    prefix = ctx.store.get_config("issue_prefix")
    click.echo(f"  Issue prefix: {prefix or '(not set)'}")

    for edge in repaired:
        click.echo(f"  [FIXED] wrote missing half {edge}")

    click.echo("\n  Edge index:")
    if report.missing or report.extra:
        for e in sorted(report.missing):
            click.echo(f"    [WARN] missing row: {e}")
        for e in sorted(report.extra):
            click.echo(f"    [WARN] unsupported row: {e}")
        click.echo("    Run 'ig dep rebuild' to regenerate it")
    else:
        click.echo("    [OK] matches issue fields")

    click.echo("\n  Relationship pairs:")
    for e in report.one_sided:
        click.echo(f"    [WARN] one-sided: {e} (mirror missing on {e.target})")
    for e in report.dangling:
        click.echo(f"    [WARN] dangling: {e} ({e.target} does not exist)")
    if not report.one_sided and not report.dangling:
        click.echo("    [OK] consistent")

    click.echo("\n  Blocking cycles:")
    for cycle in report.cycles:
        click.echo(f"    [WARN] {' -> '.join(cycle)}")
    if not report.cycles:
        click.echo("    [OK] no cycles")

    problems = (len(report.missing) + len(report.extra) + len(report.one_sided)
                + len(report.dangling) + len(report.cycles))
    click.echo()
    if problems:
        click.echo(f"Found {problems} issue(s)")
    else:
        click.echo("All checks passed!")
