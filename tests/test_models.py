"""Tests for data models."""

from datetime import datetime, timezone

import pytest

from issuegraph.errors import InvalidRelation
from issuegraph.models import (
    Edge, Issue, Priority, Relation, Status,
    format_id_list, format_timestamp, parse_id_list, parse_timestamp,
)


def test_issue_defaults():
    issue = Issue()
    assert issue.status == Status.OPEN
    assert issue.priority == Priority.MEDIUM
    assert issue.blocks == []
    assert issue.depends_on == []


def test_issue_validate_empty_title():
    issue = Issue(id="t-1", title="")
    assert "title is required" in issue.validate()


def test_issue_validate_long_title():
    issue = Issue(id="t-1", title="x" * 501)
    assert "500 characters" in issue.validate()


def test_issue_validate_priority():
    issue = Issue(id="t-1", title="test", priority="urgent")
    assert "invalid priority" in issue.validate()


def test_issue_validate_id_with_comma():
    issue = Issue(id="a,b", title="test")
    assert "commas" in issue.validate()


def test_issue_validate_self_reference():
    issue = Issue(id="t-1", title="test", blocks=["t-1"])
    assert "itself" in issue.validate()


def test_issue_validate_valid():
    issue = Issue(id="t-1", title="test", priority=Priority.HIGH)
    assert issue.validate() is None


def test_issue_to_dict_omits_empty_relations():
    issue = Issue(
        id="t-abc1234",
        title="Test Issue",
        created_at=datetime(2026, 1, 15, 10, 0, 0, tzinfo=timezone.utc),
        updated_at=datetime(2026, 1, 15, 10, 0, 0, tzinfo=timezone.utc),
        blocks=["t-2"],
    )
    d = issue.to_dict()
    assert d["id"] == "t-abc1234"
    assert d["priority"] == "medium"
    assert d["blocks"] == ["t-2"]
    assert "depends_on" not in d
    assert "description" not in d
    assert d["created_at"] == "2026-01-15T10:00:00Z"


def test_timestamp_roundtrip():
    dt = datetime(2026, 1, 15, 10, 30, 0, tzinfo=timezone.utc)
    s = format_timestamp(dt)
    assert s == "2026-01-15T10:30:00Z"
    assert parse_timestamp(s) == dt


def test_parse_timestamp_none():
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None


class TestIdLists:
    def test_parse_strips_and_dedupes(self):
        assert parse_id_list(" a, b ,a,, c") == ["a", "b", "c"]

    def test_parse_empty(self):
        assert parse_id_list("") == []
        assert parse_id_list(None) == []

    def test_format(self):
        assert format_id_list(["b", "a", "b", ""]) == "b,a"


class TestRelation:
    def test_inverse_table(self):
        assert Relation.inverse(Relation.BLOCKS) == Relation.DEPENDS_ON
        assert Relation.inverse(Relation.DEPENDS_ON) == Relation.BLOCKS
        assert Relation.inverse(Relation.PARENT_OF) is None
        assert Relation.inverse(Relation.RELATES_TO) is None

    def test_parse_normalizes(self):
        assert Relation.parse("Depends-On") == Relation.DEPENDS_ON
        assert Relation.parse(" blocks ") == Relation.BLOCKS

    def test_parse_rejects_unknown(self):
        with pytest.raises(InvalidRelation) as exc:
            Relation.parse("duplicates")
        assert exc.value.relation == "duplicates"

    def test_blocking(self):
        assert Relation.is_blocking("blocks")
        assert Relation.is_blocking("depends_on")
        assert not Relation.is_blocking("parent_of")


class TestEdge:
    def test_inverse(self):
        e = Edge("a", Relation.BLOCKS, "b")
        assert e.inverse() == Edge("b", Relation.DEPENDS_ON, "a")
        assert Edge("a", Relation.RELATES_TO, "b").inverse() is None

    def test_str(self):
        assert str(Edge("a", "blocks", "b")) == "a blocks b"


def test_priority_rank_order():
    ranks = [Priority.rank(p) for p in (Priority.LOW, Priority.MEDIUM,
                                        Priority.HIGH, Priority.CRITICAL)]
    assert ranks == sorted(ranks)
    assert Priority.rank("bogus") == Priority.rank(Priority.DEFAULT)
