"""Configuration management for issuegraph.

Handles:
- .issuegraph/config.yaml parsing (user-facing config)
- Environment variable overrides
- .issuegraph/ directory discovery
"""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from typing import Any

import yaml

from issuegraph.models import Priority


CONFIG_YAML = "config.yaml"
PROJECT_DIR = ".issuegraph"
DEFAULT_DB_NAME = "issues.db"


@dataclass
class ProjectConfig:
    """User-facing config from config.yaml."""
    issue_prefix: str = ""
    actor: str = ""
    db: str = ""
    json_output: bool = False
    default_priority: str = Priority.DEFAULT

    @classmethod
    def load(cls, project_dir: str) -> ProjectConfig:
        """Load config.yaml from the project directory."""
        data = read_yaml(project_dir)
        cfg = cls(
            issue_prefix=data.get("issue-prefix", ""),
            actor=data.get("actor", ""),
            db=data.get("db", ""),
            json_output=bool(data.get("json", False)),
        )
        priority = data.get("default-priority", Priority.DEFAULT)
        if not Priority.is_valid(priority):
            raise ValueError(f"{CONFIG_YAML}: invalid default-priority: {priority}")
        cfg.default_priority = priority

        # Environment variable overrides
        if os.environ.get("IG_ACTOR"):
            cfg.actor = os.environ["IG_ACTOR"]
        if os.environ.get("IG_DB"):
            cfg.db = os.environ["IG_DB"]
        if os.environ.get("IG_JSON"):
            cfg.json_output = os.environ["IG_JSON"].lower() in ("1", "true", "yes")

        return cfg

    def save(self, project_dir: str) -> None:
        """Save config to config.yaml."""
        config_path = os.path.join(project_dir, CONFIG_YAML)
        data: dict[str, Any] = {}
        if self.issue_prefix:
            data["issue-prefix"] = self.issue_prefix
        if self.actor:
            data["actor"] = self.actor
        if self.db:
            data["db"] = self.db
        if self.json_output:
            data["json"] = self.json_output
        if self.default_priority != Priority.DEFAULT:
            data["default-priority"] = self.default_priority

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False)


YAML_KEYS = ("issue-prefix", "actor", "db", "json", "default-priority")


def read_yaml(project_dir: str) -> dict[str, Any]:
    """Raw config.yaml contents, without environment overrides."""
    config_path = os.path.join(project_dir, CONFIG_YAML)
    if not os.path.exists(config_path):
        return {}
    with open(config_path) as f:
        return yaml.safe_load(f) or {}


def set_yaml_key(project_dir: str, key: str, value: str) -> Any:
    """Validate and write one config.yaml key. Returns the stored value."""
    if key not in YAML_KEYS:
        raise ValueError(f"unknown config.yaml key: {key}")
    stored: Any = value
    if key == "json":
        if value.lower() not in ("1", "0", "true", "false", "yes", "no"):
            raise ValueError(f"json must be true or false, got {value!r}")
        stored = value.lower() in ("1", "true", "yes")
    elif key == "default-priority" and not Priority.is_valid(value):
        raise ValueError(f"invalid default-priority: {value} "
                         f"(expected one of {', '.join(Priority.all())})")
    data = read_yaml(project_dir)
    data[key] = stored
    with open(os.path.join(project_dir, CONFIG_YAML), "w") as f:
        yaml.dump(data, f, default_flow_style=False)
    return stored


def find_project_dir(start: str | None = None) -> str | None:
    """Walk up from start directory to find .issuegraph/ directory.

    Returns absolute path to .issuegraph/ directory, or None if not found.
    """
    if start is None:
        start = os.getcwd()
    current = os.path.abspath(start)
    while True:
        candidate = os.path.join(current, PROJECT_DIR)
        if os.path.isdir(candidate):
            return candidate
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent


def get_db_path(project_dir: str, config: ProjectConfig | None = None) -> str:
    """Get the full path to the SQLite database."""
    env_db = os.environ.get("IG_DB")
    if env_db:
        return env_db
    if config and config.db:
        if os.path.isabs(config.db):
            return config.db
        return os.path.join(project_dir, config.db)
    return os.path.join(project_dir, DEFAULT_DB_NAME)


def get_actor(config: ProjectConfig | None = None) -> str:
    """Get the actor name for audit trails."""
    if os.environ.get("IG_ACTOR"):
        return os.environ["IG_ACTOR"]
    if config and config.actor:
        return config.actor
    try:
        result = subprocess.run(
            ["git", "config", "user.email"],
            capture_output=True, text=True, timeout=5
        )
        if result.returncode == 0 and result.stdout.strip():
            return result.stdout.strip()
    except (FileNotFoundError, subprocess.TimeoutExpired):
        pass
    return os.environ.get("USER", "unknown")
