"""
Sprint Planning Engine

Composes calibration, capacity normalization, assignment, evaluation, burnout
detection and rebalancing behind a single entry point.
"""

from dataclasses import replace
from typing import Optional

from .burnout import BurnoutProfile, BurnoutRiskAnalyzer
from .calibration import CalibrationReportEntry, CalibrationTracker
from .capacity import AdjustedContributor, CapacityNormalizer, CapacityReportEntry
from .config import PlanningPolicy
from .evaluator import PlanEvaluator, sum_loads
from .integrations import Contributor
from .integrations.signals import SignalsInput
from .plans import Assignment, PlanEvaluation, PlanState, SprintPlan, Task
from .rebalancer import RebalanceResult, WorkloadRebalancer
from .solver import AssignmentSolver, Strategy
from .store import CalibrationRecord, PlanningStore


class SprintPlanningEngine:
    """
    Entry point for every planning operation.

    Each planning call adjusts the roster from a single store snapshot, so it
    never sees a half-applied calibration or PTO write.

    Usage:
        engine = SprintPlanningEngine()
        engine.record_outcome("alice", estimated=20, actual=17)
        engine.register_pto("bob", pto_days=3)
        plans = engine.generate_plans(tasks, roster)
    """

    def __init__(
        self,
        store: Optional[PlanningStore] = None,
        policy: Optional[PlanningPolicy] = None
    ):
        self.store = store or PlanningStore()
        self.policy = policy or PlanningPolicy()

        self.tracker = CalibrationTracker(self.store, self.policy)
        self.normalizer = CapacityNormalizer(self.store, self.policy)
        self.solver = AssignmentSolver()
        self.evaluator = PlanEvaluator(self.policy)
        self.analyzer = BurnoutRiskAnalyzer(self.policy)
        self.rebalancer = WorkloadRebalancer(self.policy)

    # Store writes

    def record_outcome(self, contributor_id: str, estimated: float, actual: float) -> CalibrationRecord:
        return self.tracker.record_outcome(contributor_id, estimated, actual)

    def register_pto(self, contributor_id: str, pto_days: float, sprint_days: Optional[float] = None) -> float:
        return self.normalizer.register_pto(contributor_id, pto_days, sprint_days)

    # Reports

    def calibration_report(self) -> list[CalibrationReportEntry]:
        return self.tracker.get_report()

    def capacity_report(self, roster: list[Contributor]) -> list[CapacityReportEntry]:
        return self.normalizer.get_capacity_report(roster)

    # Planning

    def adjust(self, roster: list[Contributor]) -> list[AdjustedContributor]:
        """Adjusted roster from one store snapshot. Already-adjusted records are re-derived."""
        return self.normalizer.apply_adjustments(roster)

    def solve(self, tasks: list[Task], roster: list[Contributor], strategy: Strategy) -> list[Assignment]:
        return self.solver.solve(tasks, self.adjust(roster), strategy)

    def generate_plans(self, tasks: list[Task], roster: list[Contributor]) -> list[SprintPlan]:
        return self.solver.generate_plans(tasks, self.adjust(roster))

    def evaluate(self, assignments: list[Assignment], roster: list[Contributor]) -> PlanEvaluation:
        return self.evaluator.evaluate(assignments, self.adjust(roster))

    def identify_at_risk(
        self,
        roster: list[Contributor],
        signals: SignalsInput = None,
        assignments: Optional[list[Assignment]] = None
    ) -> list[BurnoutProfile]:
        """
        Rank the roster by burnout risk.

        When an assignment set is given, each contributor's current load is
        taken from it instead of the roster record.
        """
        loads = None
        if assignments is not None:
            loads = sum_loads(assignments, self.policy.default_points)
        return self.analyzer.identify_at_risk(self.adjust(roster), signals, loads)

    def rebalance(
        self,
        assignments: list[Assignment],
        profiles: list[BurnoutProfile],
        roster: list[Contributor]
    ) -> RebalanceResult:
        return self.rebalancer.rebalance(assignments, profiles, self.adjust(roster))

    # Plan lifecycle

    def evaluate_plan(self, plan: SprintPlan, roster: list[Contributor]) -> SprintPlan:
        """DRAFT or REBALANCED -> EVALUATED."""
        evaluation = self.evaluate(plan.assignments, roster)
        return replace(plan, state=PlanState.EVALUATED, evaluation=evaluation)

    def rebalance_plan(
        self,
        plan: SprintPlan,
        profiles: list[BurnoutProfile],
        roster: list[Contributor]
    ) -> tuple[SprintPlan, RebalanceResult]:
        """Any state -> REBALANCED. The previous evaluation no longer applies and is cleared."""
        result = self.rebalance(plan.assignments, profiles, roster)
        rebalanced = replace(
            plan,
            assignments=result.assignments,
            state=PlanState.REBALANCED,
            evaluation=None
        )
        return rebalanced, result


def generate_sprint_plans(
    tasks: list[Task],
    roster: list[Contributor],
    store: Optional[PlanningStore] = None
) -> list[SprintPlan]:
    """
    Quick function to plan a backlog.

    Example:
        plans = generate_sprint_plans(tasks, roster)

        for plan in plans:
            print(f"{plan.name}: {plan.probability:.0%}")
    """
    engine = SprintPlanningEngine(store=store)
    return engine.generate_plans(tasks, roster)
