"""ig config - manage configuration.

Keys that belong in .issuegraph/config.yaml (issue-prefix, actor, db, json,
default-priority) are written there; anything else is stored in the
database config table.
"""

from __future__ import annotations

import click

from issuegraph.cli import ProjectContext, pass_ctx
from issuegraph.config import YAML_KEYS, read_yaml, set_yaml_key


@click.group("config")
def config_cmd() -> None:
    """Manage project configuration."""


@config_cmd.command("get")
@click.argument("key")
@pass_ctx
def config_get(ctx: ProjectContext, key: str) -> None:
    """Get a config value."""
    ctx.ensure_initialized()
    assert ctx.store is not None and ctx.project_dir is not None

    if key in YAML_KEYS:
        value = read_yaml(ctx.project_dir).get(key)
    else:
        value = ctx.store.get_config(key)
    if value is None:
        ctx.fail(f"config key not found: {key}")

    if ctx.json_output:
        ctx.output({key: value})
    else:
        click.echo(str(value).lower() if isinstance(value, bool) else value)


@config_cmd.command("set")
@click.argument("key")
@click.argument("value")
@pass_ctx
def config_set(ctx: ProjectContext, key: str, value: str) -> None:
    """Set a config value."""
    ctx.ensure_initialized()
    assert ctx.store is not None and ctx.project_dir is not None

    if key in YAML_KEYS:
        try:
            set_yaml_key(ctx.project_dir, key, value)
        except ValueError as e:
            ctx.fail(e)
        if key == "issue-prefix":
            ctx.store.set_config("issue_prefix", value)
    else:
        ctx.store.set_config(key, value)

    if not ctx.quiet:
        click.echo(f"Set {key} = {value}")


@config_cmd.command("list")
@pass_ctx
def config_list(ctx: ProjectContext) -> None:
    """List config.yaml and database config values."""
    ctx.ensure_initialized()
    assert ctx.store is not None and ctx.project_dir is not None

    file_values = read_yaml(ctx.project_dir)
    db_values = ctx.store.list_config()

    if ctx.json_output:
        ctx.output({"config.yaml": file_values, "database": db_values})
        return

    if not file_values and not db_values:
        click.echo("No config values set.")
        return

    if file_values:
        click.echo("config.yaml:")
        for key, value in sorted(file_values.items()):
            click.echo(f"  {key} = {value}")
    if db_values:
        click.echo("database:")
        for key, value in sorted(db_values.items()):
            click.echo(f"  {key} = {value}")
