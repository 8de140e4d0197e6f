"""
Tests for plan evaluation.
"""

import pytest

from sprint_engine.errors import ValidationError
from sprint_engine.evaluator import PlanEvaluator, sum_loads
from sprint_engine.integrations import Contributor
from sprint_engine.plans import Assignment, PlanState, parse_assignments


def assign(task_id: str, contributor_id: str, points=None) -> Assignment:
    return Assignment(task_id=task_id, contributor_id=contributor_id, points=points)


class TestSumLoads:

    def test_missing_points_use_default(self):
        loads = sum_loads([assign("1", "a"), assign("2", "a", 3), assign("3", "b", 8)], default_points=5)
        assert loads == {"a": 8, "b": 8}


class TestParseAssignments:

    def test_malformed_estimated_days(self):
        with pytest.raises(ValidationError) as exc:
            parse_assignments([{"task_id": "1", "contributor_id": "a", "estimatedDays": "soon"}])
        assert exc.value.field == "assignments[0].estimated_days"

    def test_estimated_days_parsed(self):
        [assignment] = parse_assignments([{"taskId": "1", "assignedTo": "a", "estimated_days": "3"}])
        assert assignment.estimated_days == 3


class TestEvaluate:
    """Tests for overload scoring."""

    def test_one_overloaded(self, engine):
        """60 points on a velocity-5 contributor exceeds 50 points of capacity."""
        roster = [
            Contributor(id="a", name="A", velocity=5),
            Contributor(id="b", name="B", velocity=8),
        ]
        assignments = [assign("1", "a", 30), assign("2", "a", 30), assign("3", "b", 40)]

        result = engine.evaluate(assignments, roster)

        assert result.overloaded_count == 1
        assert result.probability == 80
        assert result.burnout_risk == "High"

    def test_nobody_overloaded(self, engine, team):
        result = engine.evaluate([assign("1", "alice", 50)], team)

        assert result.overloaded_count == 0
        assert result.probability == 100
        assert result.burnout_risk == "Low"

    def test_exactly_at_capacity_is_not_overloaded(self):
        result = PlanEvaluator().evaluate(
            [assign("1", "a", 50)],
            [Contributor(id="a", name="A", velocity=5)]
        )
        assert result.overloaded_count == 0

    def test_probability_floor(self):
        roster = [Contributor(id=str(i), name=str(i), velocity=1) for i in range(6)]
        assignments = [assign(f"t{i}", str(i), 11) for i in range(6)]

        result = PlanEvaluator().evaluate(assignments, roster)

        assert result.overloaded_count == 6
        assert result.probability == 10

    def test_default_points(self):
        """Eleven point-less tasks at 5 points each overload a velocity-5 contributor."""
        roster = [Contributor(id="a", name="A", velocity=5)]

        assert PlanEvaluator().evaluate([assign(str(i), "a") for i in range(10)], roster).overloaded_count == 0
        assert PlanEvaluator().evaluate([assign(str(i), "a") for i in range(11)], roster).overloaded_count == 1

    def test_uses_adjusted_velocity(self, engine):
        """PTO shrinks capacity before the overload check."""
        engine.register_pto("a", 5)
        roster = [Contributor(id="a", name="A", velocity=5)]

        result = engine.evaluate([assign("1", "a", 30)], roster)

        assert result.overloaded_count == 1

    def test_unknown_contributors_ignored(self):
        roster = [Contributor(id="a", name="A", velocity=5)]

        result = PlanEvaluator().evaluate([assign("1", "ghost", 500)], roster)

        assert result.overloaded_count == 0
        assert [l.contributor_id for l in result.loads] == ["a"]

    def test_assignments_not_mutated(self, engine, team):
        assignments = [assign("1", "alice", 3), assign("2", "bob")]

        engine.evaluate(assignments, team)

        assert assignments[1].points is None
        assert assignments[0].contributor_id == "alice"

    def test_to_dict(self, engine, team):
        data = engine.evaluate([assign("1", "alice", 60)], team).to_dict()

        assert data["overloaded_devs"] == 1
        assert data["loads"][0]["contributor_id"] == "alice"
        assert data["loads"][0]["overloaded"] is True


class TestEvaluatePlan:

    def test_plan_becomes_evaluated(self, engine, team, backlog):
        draft = engine.generate_plans(backlog, team)[1]

        evaluated = engine.evaluate_plan(draft, team)

        assert evaluated.state == PlanState.EVALUATED
        assert evaluated.evaluation is not None
        assert draft.state == PlanState.DRAFT
        assert evaluated.assignments == draft.assignments
