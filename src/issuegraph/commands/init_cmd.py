"""ig init - initialize a new .issuegraph/ directory."""

from __future__ import annotations

import os

import click

from issuegraph.cli import ProjectContext, pass_ctx
from issuegraph.config import DEFAULT_DB_NAME, PROJECT_DIR, ProjectConfig
from issuegraph.storage.sqlite_store import SQLiteStorage
from issuegraph.utils import sanitize_prefix


@click.command("init")
@click.option("--prefix", help="Issue prefix (default: directory name)")
@pass_ctx
def init_cmd(ctx: ProjectContext, prefix: str | None) -> None:
    """Initialize a new issuegraph project in the current directory."""
    project_dir = os.path.join(os.getcwd(), PROJECT_DIR)

    if os.path.exists(project_dir):
        click.echo(f"issuegraph already initialized at {project_dir}")
        return

    prefix = sanitize_prefix(prefix or os.path.basename(os.getcwd()))

    os.makedirs(project_dir, exist_ok=True)

    config = ProjectConfig(issue_prefix=prefix)
    config.save(project_dir)

    gitignore_path = os.path.join(project_dir, ".gitignore")
    with open(gitignore_path, "w") as f:
        f.write("# Local database files\n")
        f.write("*.db\n")
        f.write("*.db-wal\n")
        f.write("*.db-shm\n")

    db_path = os.path.join(project_dir, DEFAULT_DB_NAME)
    store = SQLiteStorage(db_path)
    store.set_config("issue_prefix", prefix)
    store.close()

    click.echo(f"Initialized issuegraph in {project_dir}")
    click.echo(f"  Issue prefix: {prefix}")
    click.echo(f"  Database: {DEFAULT_DB_NAME}")
