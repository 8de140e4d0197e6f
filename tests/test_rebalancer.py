"""
Tests for the workload rebalancer.
"""

import math

import pytest

from sprint_engine.burnout import BurnoutProfile
from sprint_engine.integrations import Contributor
from sprint_engine.plans import Assignment, PlanState, SprintPlan
from sprint_engine.rebalancer import WorkloadRebalancer


def profile(contributor_id: str, risk: float, at_risk: bool = True) -> BurnoutProfile:
    return BurnoutProfile(
        contributor_id=contributor_id,
        name=contributor_id.title(),
        combined_risk=risk,
        load_ratio=0.0,
        external_score=0.0,
        at_risk=at_risk
    )


def assign(task_id: str, contributor_id: str, points: float) -> Assignment:
    return Assignment(task_id=task_id, contributor_id=contributor_id, points=points, task_name=f"Task {task_id}")


@pytest.fixture
def squad():
    return [
        Contributor(id="alice", name="Alice", velocity=5),
        Contributor(id="bob", name="Bob", velocity=6),
        Contributor(id="charlie", name="Charlie", velocity=4),
        Contributor(id="dave", name="Dave", velocity=7),
        Contributor(id="eve", name="Eve", velocity=5),
    ]


@pytest.fixture
def sprint():
    # Loads: alice 41/50, bob 30/60, charlie 13/40, dave 0/70, eve 30/50
    return [
        assign("T1", "alice", 20),
        assign("T2", "alice", 13),
        assign("T3", "alice", 8),
        assign("T4", "charlie", 13),
        assign("T5", "bob", 30),
        assign("T6", "eve", 30),
    ]


@pytest.fixture
def flagged():
    return [profile("alice", 72), profile("charlie", 55), profile("bob", 20, at_risk=False)]


class TestRebalance:
    """Tests for moving work off at-risk contributors."""

    def test_moves_go_to_least_utilized(self, engine, squad, sprint, flagged):
        result = engine.rebalance(sprint, flagged, squad)

        moves = [(r.task_id, r.from_contributor, r.to_contributor) for r in result.reassignments]
        assert moves == [
            ("T1", "alice", "dave"),
            ("T2", "alice", "dave"),
            ("T4", "charlie", "dave"),
        ]
        assert result.summary.total_moved == 3
        assert result.summary.from_contributors == ["alice", "charlie"]
        assert result.summary.to_contributors == ["dave"]

    def test_at_most_two_moves_per_contributor(self, engine, squad, sprint, flagged):
        result = engine.rebalance(sprint, flagged, squad)

        from_alice = [r for r in result.reassignments if r.from_contributor == "alice"]
        assert len(from_alice) == 2
        assert [a.contributor_id for a in result.assignments if a.task_id == "T3"] == ["alice"]

    def test_at_risk_never_receive(self, engine, squad, sprint, flagged):
        result = engine.rebalance(sprint, flagged, squad)
        assert {r.to_contributor for r in result.reassignments}.isdisjoint({"alice", "charlie"})

    def test_receivers_stay_within_capacity(self, engine, squad, sprint, flagged):
        result = engine.rebalance(sprint, flagged, squad)

        evaluation = engine.evaluate(result.assignments, squad)
        loads = {l.contributor_id: l for l in evaluation.loads}

        assert loads["dave"].load == 46
        for receiver in result.summary.to_contributors:
            assert not loads[receiver].overloaded

    def test_updated_assignment_fields(self, engine, squad, sprint, flagged):
        result = engine.rebalance(sprint, flagged, squad)

        moved = result.assignments[0]
        assert moved.contributor_id == "dave"
        assert moved.contributor_name == "Dave"
        assert moved.estimated_days == math.ceil(20 / 7)
        assert moved.task_name == "Task T1"

    def test_reason(self, engine, squad, sprint, flagged):
        result = engine.rebalance(sprint, flagged, squad)
        assert result.reassignments[0].reason == "alice is at burnout risk (combinedRisk=72)"

    def test_input_not_mutated(self, engine, squad, sprint, flagged):
        before = [(a.task_id, a.contributor_id) for a in sprint]

        result = engine.rebalance(sprint, flagged, squad)

        assert [(a.task_id, a.contributor_id) for a in sprint] == before
        assert result.assignments is not sprint
        assert result.assignments[5] is not sprint[5]

    def test_no_receiver_with_room(self, engine):
        """A task bigger than any receiver's headroom stays put."""
        roster = [Contributor(id="a", name="A", velocity=5), Contributor(id="b", name="B", velocity=1)]
        assignments = [assign("1", "a", 30)]

        result = engine.rebalance(assignments, [profile("a", 80)], roster)

        assert result.reassignments == []
        assert result.assignments[0].contributor_id == "a"

    def test_loaded_teammates_are_not_receivers(self, engine):
        """A teammate at 70% utilization or more takes nothing."""
        roster = [Contributor(id="a", name="A", velocity=5), Contributor(id="b", name="B", velocity=5)]
        assignments = [assign("1", "a", 5), assign("2", "b", 35)]

        result = engine.rebalance(assignments, [profile("a", 80)], roster)

        assert result.summary.total_moved == 0

    def test_equal_points_move_in_backlog_order(self, engine, squad):
        assignments = [assign("T1", "alice", 8), assign("T2", "alice", 8), assign("T3", "alice", 8)]

        result = engine.rebalance(assignments, [profile("alice", 60)], squad)

        assert [r.task_id for r in result.reassignments] == ["T1", "T2"]

    def test_unknown_profile_skipped(self, engine, squad, sprint):
        result = engine.rebalance(sprint, [profile("ghost", 99)], squad)

        assert result.reassignments == []
        assert len(result.assignments) == len(sprint)

    def test_duplicate_profiles_count_once(self, engine, squad, sprint):
        result = engine.rebalance(sprint, [profile("alice", 72), profile("alice", 72)], squad)
        assert result.summary.total_moved == 2

    def test_nobody_at_risk(self, engine, squad, sprint):
        result = engine.rebalance(sprint, [profile("alice", 10, at_risk=False)], squad)
        assert result.to_dict()["rebalance_summary"] == {"total_moved": 0, "from_devs": [], "to_devs": []}

    def test_propose_moves_does_not_apply(self, squad, sprint, flagged):
        moves = WorkloadRebalancer().propose_moves(sprint, flagged, squad)

        assert [index for index, _ in moves] == [0, 1, 3]
        assert sprint[0].contributor_id == "alice"

    def test_to_dict(self, engine, squad, sprint, flagged):
        data = engine.rebalance(sprint, flagged, squad).to_dict()

        assert data["reassignments"][0]["from"] == "alice"
        assert data["reassignments"][0]["to"] == "dave"
        assert data["updated_assignments"][0]["contributor_id"] == "dave"
        assert data["rebalance_summary"]["total_moved"] == 3


class TestRebalancePlan:

    def test_plan_becomes_rebalanced(self, engine, squad, sprint, flagged):
        plan = SprintPlan(id="p", name="Plan", description="", strategy="speed", assignments=sprint)
        evaluated = engine.evaluate_plan(plan, squad)

        rebalanced, result = engine.rebalance_plan(evaluated, flagged, squad)

        assert rebalanced.state == PlanState.REBALANCED
        assert rebalanced.evaluation is None
        assert rebalanced.assignments == result.assignments
        assert evaluated.assignments[0].contributor_id == "alice"

    def test_rebalanced_plan_can_be_evaluated_again(self, engine, squad, sprint, flagged):
        plan = SprintPlan(id="p", name="Plan", description="", strategy="speed", assignments=sprint)
        rebalanced, _ = engine.rebalance_plan(plan, flagged, squad)

        evaluated = engine.evaluate_plan(rebalanced, squad)

        assert evaluated.state == PlanState.EVALUATED
        assert evaluated.evaluation.overloaded_count == 0
