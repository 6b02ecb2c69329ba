"""Click CLI root and global flags for issuegraph (ig)."""

from __future__ import annotations

import json
import os
import sys
from typing import NoReturn

import click

from issuegraph import __version__
from issuegraph.config import ProjectConfig, find_project_dir, get_actor, get_db_path
from issuegraph.graph.engine import DependencyEngine
from issuegraph.storage.sqlite_store import SQLiteStorage


class ProjectContext:
    """Shared context for all commands."""

    def __init__(self) -> None:
        self.project_dir: str | None = None
        self.store: SQLiteStorage | None = None
        self.engine: DependencyEngine | None = None
        self.config: ProjectConfig | None = None
        self.actor: str = ""
        self.json_output: bool = False
        self.verbose: bool = False
        self.quiet: bool = False

    def ensure_initialized(self) -> None:
        """Ensure the project directory, storage and engine are available."""
        if self.store is not None:
            return
        self.project_dir = find_project_dir()
        if self.project_dir is None:
            click.echo("Error: not in an issuegraph project (no .issuegraph/ directory found)", err=True)
            click.echo("Run 'ig init' to create one", err=True)
            sys.exit(1)
        try:
            self.config = ProjectConfig.load(self.project_dir)
        except ValueError as e:
            self.fail(e)
        if not self.actor:
            self.actor = get_actor(self.config)
        if not self.json_output:
            self.json_output = self.config.json_output
        db_path = get_db_path(self.project_dir, self.config)
        self.store = SQLiteStorage(db_path)
        self.engine = DependencyEngine(self.store, actor=self.actor, verbose=self.verbose)

        if self.config.issue_prefix and not self.store.get_config("issue_prefix"):
            self.store.set_config("issue_prefix", self.config.issue_prefix)

    def resolve_issue_id(self, partial: str) -> str:
        """Resolve a partial issue ID or exit with error."""
        assert self.store is not None
        full_id = self.store.resolve_id(partial)
        if full_id is None:
            click.echo(f"Error: issue not found or ambiguous: {partial}", err=True)
            sys.exit(1)
        return full_id

    def resolve_or_keep(self, partial: str) -> str:
        """Resolve a partial ID, passing unknown ones through for the engine to reject."""
        assert self.store is not None
        return self.store.resolve_id(partial) or partial

    def fail(self, error: Exception | str) -> NoReturn:
        click.echo(f"Error: {error}", err=True)
        sys.exit(1)

    def output(self, data: dict | list) -> None:
        """Output data as JSON."""
        click.echo(json.dumps(data, indent=2, default=str))


pass_ctx = click.make_pass_decorator(ProjectContext, ensure=True)


@click.group(invoke_without_command=True)
@click.option("--db", envvar="IG_DB", help="Path to database file")
@click.option("--actor", envvar="IG_ACTOR", help="Actor name for audit trails")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.version_option(__version__, prog_name="ig")
@click.pass_context
def cli(ctx: click.Context, db: str | None, actor: str | None,
        json_output: bool, verbose: bool, quiet: bool) -> None:
    """ig - issue tracker with a dependency graph"""
    pctx = ctx.ensure_object(ProjectContext)
    pctx.verbose = verbose
    pctx.quiet = quiet
    if json_output:
        pctx.json_output = True
    if actor:
        pctx.actor = actor
    if db:
        os.environ["IG_DB"] = db

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# --- Register all command groups ---

from issuegraph.commands.init_cmd import init_cmd  # noqa: E402
from issuegraph.commands.create import create  # noqa: E402
from issuegraph.commands.list_cmd import list_cmd  # noqa: E402
from issuegraph.commands.show import show  # noqa: E402
from issuegraph.commands.update import update  # noqa: E402
from issuegraph.commands.close import close  # noqa: E402
from issuegraph.commands.reopen import reopen  # noqa: E402
from issuegraph.commands.dep import dep  # noqa: E402
from issuegraph.commands.ready import ready  # noqa: E402
from issuegraph.commands.topo import topo  # noqa: E402
from issuegraph.commands.blocked import blocked  # noqa: E402
from issuegraph.commands.deps import deps  # noqa: E402
from issuegraph.commands.doctor import doctor  # noqa: E402
from issuegraph.commands.config_cmd import config_cmd  # noqa: E402

cli.add_command(init_cmd, "init")
cli.add_command(create, "create")
cli.add_command(create, "new")  # Alias
cli.add_command(list_cmd, "list")
cli.add_command(show, "show")
cli.add_command(update, "update")
cli.add_command(close, "close")
cli.add_command(reopen, "reopen")
cli.add_command(dep, "dep")
cli.add_command(ready, "ready")
cli.add_command(topo, "topo")
cli.add_command(blocked, "blocked")
cli.add_command(deps, "deps")
cli.add_command(doctor, "doctor")
cli.add_command(config_cmd, "config")


def main() -> None:
    cli(auto_envvar_prefix="IG")
