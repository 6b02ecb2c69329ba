"""Tests for CLI commands using Click's test runner."""

import json
import os
import tempfile

import pytest
from click.testing import CliRunner

from issuegraph.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def project_dir():
    """Create a temporary directory with issuegraph initialized."""
    old_cwd = os.getcwd()
    with tempfile.TemporaryDirectory() as tmpdir:
        os.chdir(tmpdir)
        r = CliRunner()
        result = r.invoke(cli, ["init", "--prefix", "test"])
        assert result.exit_code == 0, result.output
        yield tmpdir
        os.chdir(old_cwd)


def _create(runner: CliRunner, issue_id: str, *extra: str) -> None:
    result = runner.invoke(cli, ["create", "--title", f"Issue {issue_id}",
                                 "--id", issue_id, *extra])
    assert result.exit_code == 0, result.output


def _show(runner: CliRunner, issue_id: str) -> dict:
    result = runner.invoke(cli, ["--json", "show", issue_id])
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


class TestInit:
    def test_init(self, runner: CliRunner):
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["init", "--prefix", "myproj"])
            assert result.exit_code == 0
            assert "Initialized issuegraph" in result.output
            assert os.path.exists(".issuegraph/config.yaml")
            assert os.path.exists(".issuegraph/issues.db")

    def test_not_initialized(self, runner: CliRunner):
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["list"])
            assert result.exit_code == 1
            assert "ig init" in result.output


class TestCreate:
    def test_create_basic(self, runner: CliRunner, project_dir: str):
        result = runner.invoke(cli, ["create", "--title", "Test Issue", "-p", "high"])
        assert result.exit_code == 0
        assert "Created test-" in result.output

    def test_create_silent(self, runner: CliRunner, project_dir: str):
        result = runner.invoke(cli, ["create", "--title", "Silent", "--silent"])
        assert result.exit_code == 0
        assert result.output.strip().startswith("test-")

    def test_create_with_dependency(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        _create(runner, "test-b", "--depends-on", "test-a")
        data = _show(runner, "test-b")
        assert data["depends_on"] == ["test-a"]
        assert data["status"] == "blocked"
        assert _show(runner, "test-a")["blocks"] == ["test-b"]

    def test_create_with_missing_dependency_warns(self, runner: CliRunner, project_dir: str):
        result = runner.invoke(cli, ["create", "--title", "X", "--id", "test-x",
                                     "--blocks", "test-nope"])
        assert result.exit_code == 0
        assert "Warning" in result.output
        assert "test-nope" in result.output

    def test_create_duplicate_id(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        result = runner.invoke(cli, ["create", "--title", "Again", "--id", "test-a"])
        assert result.exit_code == 1

    def test_dry_run(self, runner: CliRunner, project_dir: str):
        result = runner.invoke(cli, ["create", "--title", "Dry", "--dry-run"])
        assert result.exit_code == 0
        assert "Would create" in result.output
        assert "No issues found" in runner.invoke(cli, ["list"]).output


class TestList:
    def test_list_empty(self, runner: CliRunner, project_dir: str):
        result = runner.invoke(cli, ["list"])
        assert result.exit_code == 0
        assert "No issues found" in result.output

    def test_list_with_issues(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        _create(runner, "test-b")
        result = runner.invoke(cli, ["list"])
        assert result.exit_code == 0
        assert "2 issue(s)" in result.output

    def test_list_json(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        result = runner.invoke(cli, ["--json", "list"])
        assert [i["id"] for i in json.loads(result.output)] == ["test-a"]


class TestDep:
    def test_add_and_list(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        _create(runner, "test-b")
        result = runner.invoke(cli, ["dep", "add", "test-a", "blocks", "test-b"])
        assert result.exit_code == 0, result.output
        assert "Added: test-a blocks test-b" in result.output
        assert "test-b: open -> blocked" in result.output

        result = runner.invoke(cli, ["--json", "dep", "list"])
        edges = json.loads(result.output)
        assert {"source": "test-b", "relation": "depends_on", "target": "test-a"} in edges
        assert len(edges) == 2

    def test_add_accepts_short_ids(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-alpha")
        _create(runner, "test-beta")
        result = runner.invoke(cli, ["dep", "add", "test-al", "relates-to", "test-be"])
        assert result.exit_code == 0, result.output
        assert _show(runner, "test-alpha")["relates_to"] == ["test-beta"]

    def test_self_reference(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        result = runner.invoke(cli, ["dep", "add", "test-a", "blocks", "test-a"])
        assert result.exit_code == 1
        assert "cannot reference itself" in result.output

    def test_cycle(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        _create(runner, "test-b")
        runner.invoke(cli, ["dep", "add", "test-a", "blocks", "test-b"])
        result = runner.invoke(cli, ["dep", "add", "test-b", "blocks", "test-a"])
        assert result.exit_code == 1
        assert "dependency cycle: test-b -> test-a -> test-b" in result.output

    def test_invalid_relation(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        _create(runner, "test-b")
        result = runner.invoke(cli, ["dep", "add", "test-a", "duplicates", "test-b"])
        assert result.exit_code == 1
        assert "invalid relation" in result.output

    def test_not_found(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        result = runner.invoke(cli, ["dep", "add", "test-a", "blocks", "test-zzz"])
        assert result.exit_code == 1
        assert "issue not found: test-zzz" in result.output

    def test_remove(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        _create(runner, "test-b")
        runner.invoke(cli, ["dep", "add", "test-a", "blocks", "test-b"])
        result = runner.invoke(cli, ["dep", "remove", "test-a", "blocks", "test-b"])
        assert result.exit_code == 0, result.output
        assert _show(runner, "test-b")["status"] == "open"

    def test_remove_missing(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        _create(runner, "test-b")
        result = runner.invoke(cli, ["dep", "remove", "test-a", "blocks", "test-b"])
        assert result.exit_code == 1
        assert "no such dependency" in result.output

    def test_remove_dangling_reference(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        runner.invoke(cli, ["update", "test-a", "--blocks", "test-ghost"])
        result = runner.invoke(cli, ["dep", "remove", "test-a", "blocks", "test-ghost"])
        assert result.exit_code == 0, result.output
        assert "blocks" not in _show(runner, "test-a")

    def test_rebuild(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        _create(runner, "test-b", "--depends-on", "test-a")
        result = runner.invoke(cli, ["dep", "rebuild", "--from-scratch"])
        assert result.exit_code == 0
        assert "2 edge(s)" in result.output


class TestStatusFlow:
    def test_close_unblocks(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        _create(runner, "test-b", "--depends-on", "test-a")
        result = runner.invoke(cli, ["close", "test-a"])
        assert result.exit_code == 0
        assert "test-b: blocked -> open" in result.output
        assert _show(runner, "test-b")["status"] == "open"

    def test_reopen_reblocks(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        _create(runner, "test-b", "--depends-on", "test-a")
        runner.invoke(cli, ["close", "test-a"])
        result = runner.invoke(cli, ["reopen", "test-a"])
        assert result.exit_code == 0
        assert _show(runner, "test-b")["status"] == "blocked"

    def test_reopen_not_closed(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        result = runner.invoke(cli, ["reopen", "test-a"])
        assert result.exit_code == 1

    def test_update_open_while_blocked(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        _create(runner, "test-b", "--depends-on", "test-a")
        result = runner.invoke(cli, ["update", "test-b", "--status", "open"])
        assert result.exit_code == 0
        assert _show(runner, "test-b")["status"] == "blocked"

    def test_update_in_progress_while_blocked(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        _create(runner, "test-b", "--depends-on", "test-a")
        result = runner.invoke(cli, ["update", "test-b", "--status", "in_progress"])
        assert result.exit_code == 0
        assert _show(runner, "test-b")["status"] == "blocked"
        result = runner.invoke(cli, ["--json", "ready"])
        assert "test-b" not in [i["id"] for i in json.loads(result.output)]

    def test_update_title_and_priority(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        result = runner.invoke(cli, ["update", "test-a", "--title", "New", "-p", "critical"])
        assert result.exit_code == 0
        data = _show(runner, "test-a")
        assert data["title"] == "New"
        assert data["priority"] == "critical"

    def test_update_nothing(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        result = runner.invoke(cli, ["update", "test-a"])
        assert result.exit_code == 1


class TestManualEdits:
    def test_raw_field_edit_reaches_readers(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a", "-p", "low")
        _create(runner, "test-b", "-p", "critical")
        result = runner.invoke(cli, ["update", "test-b", "--depends-on", "test-a"])
        assert result.exit_code == 0, result.output
        # Only one side was written
        assert "blocks" not in _show(runner, "test-a")

        result = runner.invoke(cli, ["--json", "topo"])
        assert [i["id"] for i in json.loads(result.output)] == ["test-a", "test-b"]

        result = runner.invoke(cli, ["deps"])
        assert result.output.strip() == "test-b depends_on test-a"

    def test_raw_self_reference_rejected(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        result = runner.invoke(cli, ["update", "test-a", "--blocks", "test-a"])
        assert result.exit_code == 1

    def test_doctor_fix(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        _create(runner, "test-b")
        runner.invoke(cli, ["update", "test-b", "--depends-on", "test-a"])
        result = runner.invoke(cli, ["doctor"])
        assert "one-sided" in result.output
        result = runner.invoke(cli, ["doctor", "--fix"])
        assert result.exit_code == 0
        assert "All checks passed!" in result.output
        assert _show(runner, "test-a")["blocks"] == ["test-b"]
        assert _show(runner, "test-b")["status"] == "blocked"


class TestReaders:
    def test_ready(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        _create(runner, "test-b", "--depends-on", "test-a")
        _create(runner, "test-c", "-p", "high")
        result = runner.invoke(cli, ["--json", "ready"])
        assert [i["id"] for i in json.loads(result.output)] == ["test-c", "test-a"]

    def test_blocked(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        _create(runner, "test-b", "--depends-on", "test-a")
        result = runner.invoke(cli, ["blocked"])
        assert result.exit_code == 0
        assert "blocked by: test-a" in result.output

    def test_topo(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        _create(runner, "test-b", "--blocks", "test-a")
        result = runner.invoke(cli, ["--json", "topo"])
        assert [i["id"] for i in json.loads(result.output)] == ["test-b", "test-a"]

    def test_show_events(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        _create(runner, "test-b")
        runner.invoke(cli, ["dep", "add", "test-a", "blocks", "test-b"])
        result = runner.invoke(cli, ["--json", "show", "test-a", "--events"])
        data = json.loads(result.output)
        assert data["_blocking"] == ["test-b"]
        assert [e["event_type"] for e in data["_events"]][-1] == "dependency_added"

    def test_deps_dot(self, runner: CliRunner, project_dir: str):
        _create(runner, "test-a")
        _create(runner, "test-b", "--depends-on", "test-a")
        result = runner.invoke(cli, ["deps", "--dot"])
        assert result.exit_code == 0
        assert result.output.startswith("digraph issues {")
        assert '"test-a" -> "test-b" [label="blocks", style=solid];' in result.output

    def test_deps_filtered(self, runner: CliRunner, project_dir: str):
        for name in ("test-a", "test-b", "test-c"):
            _create(runner, name)
        runner.invoke(cli, ["dep", "add", "test-a", "blocks", "test-b"])
        runner.invoke(cli, ["dep", "add", "test-c", "relates-to", "test-a"])
        result = runner.invoke(cli, ["deps", "test-a", "--format", "json"])
        edges = json.loads(result.output)
        assert {e["source"] for e in edges} == {"test-a", "test-b"}


class TestConfig:
    def test_set_get(self, runner: CliRunner, project_dir: str):
        result = runner.invoke(cli, ["config", "set", "team", "core"])
        assert result.exit_code == 0
        result = runner.invoke(cli, ["config", "get", "team"])
        assert result.output.strip() == "core"

    def test_get_missing(self, runner: CliRunner, project_dir: str):
        result = runner.invoke(cli, ["config", "get", "nope"])
        assert result.exit_code == 1

    def test_list_has_prefix(self, runner: CliRunner, project_dir: str):
        result = runner.invoke(cli, ["config", "list"])
        assert "issue_prefix = test" in result.output

    def test_yaml_key_goes_to_config_file(self, runner: CliRunner, project_dir: str):
        result = runner.invoke(cli, ["config", "set", "default-priority", "high"])
        assert result.exit_code == 0, result.output
        with open(os.path.join(".issuegraph", "config.yaml")) as f:
            assert "default-priority: high" in f.read()
        _create(runner, "test-a")
        assert _show(runner, "test-a")["priority"] == "high"

    def test_yaml_key_validated(self, runner: CliRunner, project_dir: str):
        result = runner.invoke(cli, ["config", "set", "default-priority", "urgent"])
        assert result.exit_code == 1
        assert "invalid default-priority" in result.output
