"""Tests for cycle detection and the auto-blocking transitions."""

from issuegraph.graph.cycles import can_reach, cycle_if_added, find_cycles, find_path
from issuegraph.graph.state import is_resolved, recompute_status
from issuegraph.models import Status


class TestFindPath:
    def test_direct(self):
        assert find_path({"a": {"b"}}, "a", "b") == ["a", "b"]

    def test_transitive_shortest(self):
        adj = {"a": {"b", "x"}, "b": {"c"}, "x": {"y"}, "y": {"c"}}
        assert find_path(adj, "a", "c") == ["a", "b", "c"]

    def test_unreachable(self):
        assert find_path({"a": {"b"}}, "b", "a") is None
        assert not can_reach({"a": {"b"}}, "b", "a")

    def test_self(self):
        assert find_path({}, "a", "a") == ["a"]

    def test_long_chain_is_iterative(self):
        adj = {str(i): {str(i + 1)} for i in range(5000)}
        assert len(find_path(adj, "0", "5000")) == 5001


class TestCycleIfAdded:
    def test_direct_cycle(self):
        # a blocks b; adding b blocks a closes a loop
        assert cycle_if_added({"a": {"b"}}, "b", "a") == ["b", "a", "b"]

    def test_transitive_cycle(self):
        adj = {"a": {"b"}, "b": {"c"}}
        assert cycle_if_added(adj, "c", "a") == ["c", "a", "b", "c"]

    def test_no_cycle(self):
        assert cycle_if_added({"a": {"b"}}, "a", "c") is None


class TestFindCycles:
    def test_acyclic(self):
        assert find_cycles({"a": {"b"}, "b": {"c"}}) == []

    def test_reports_cycle(self):
        cycles = find_cycles({"a": {"b"}, "b": {"c"}, "c": {"a"}})
        assert cycles == [["a", "b", "c", "a"]]


class TestRecomputeStatus:
    def test_unresolved_blocker_blocks(self):
        assert recompute_status(Status.OPEN, [Status.OPEN]) == Status.BLOCKED
        assert recompute_status(Status.IN_PROGRESS, [Status.BLOCKED]) == Status.BLOCKED

    def test_resolved_blockers_unblock(self):
        assert recompute_status(Status.BLOCKED, [Status.CLOSED]) == Status.OPEN
        assert recompute_status(Status.BLOCKED, []) == Status.OPEN

    def test_partial_resolution_stays_blocked(self):
        assert recompute_status(Status.BLOCKED, [Status.CLOSED, Status.OPEN]) == Status.BLOCKED

    def test_closed_never_moves(self):
        assert recompute_status(Status.CLOSED, [Status.OPEN]) == Status.CLOSED

    def test_owner_status_kept(self):
        assert recompute_status(Status.IN_PROGRESS, [Status.CLOSED]) == Status.IN_PROGRESS
        assert recompute_status(Status.DEFERRED, []) == Status.DEFERRED

    def test_is_resolved(self):
        assert is_resolved(Status.CLOSED)
        assert not is_resolved(Status.REVIEW)
