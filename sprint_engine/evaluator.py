"""
Plan Evaluator

Scores a (possibly hand-edited) assignment set for overload risk.
"""

from collections import defaultdict
from typing import Optional

from .config import PlanningPolicy
from .integrations import Contributor
from .logging import get_logger
from .plans import Assignment, ContributorLoad, PlanEvaluation

logger = get_logger(__name__)


def sum_loads(assignments: list[Assignment], default_points: float) -> dict[str, float]:
    """Total points per contributor id. Assignments without points count default_points."""
    loads: dict[str, float] = defaultdict(float)
    for assignment in assignments:
        points = assignment.points if assignment.points is not None else default_points
        loads[assignment.contributor_id] += points
    return dict(loads)


class PlanEvaluator:
    """
    Recalculates probability and burnout risk for an assignment set.

    Usage:
        evaluator = PlanEvaluator()
        result = evaluator.evaluate(assignments, adjusted_roster)
        result.burnout_risk  # "High" if anyone is over capacity
    """

    def __init__(self, policy: Optional[PlanningPolicy] = None):
        self.policy = policy or PlanningPolicy()

    def evaluate(self, assignments: list[Assignment], roster: list[Contributor]) -> PlanEvaluation:
        """
        Evaluate assignments against roster capacity.

        A contributor is overloaded when their summed points exceed
        velocity x sprint length. Assignments naming contributors outside the
        roster do not count toward anyone's load.
        """
        loads = sum_loads(assignments, self.policy.default_points)

        unknown = set(loads) - {dev.id for dev in roster}
        if unknown:
            logger.warning("evaluator.unknown_contributors", contributor_ids=sorted(unknown))

        contributor_loads = [
            ContributorLoad(
                contributor_id=dev.id,
                load=loads.get(dev.id, 0.0),
                capacity=dev.effective_velocity * self.policy.sprint_length_days
            )
            for dev in roster
        ]
        overloaded = len([l for l in contributor_loads if l.overloaded])

        return PlanEvaluation(
            probability=max(10, 100 - 20 * overloaded),
            burnout_risk="High" if overloaded > 0 else "Low",
            overloaded_count=overloaded,
            loads=contributor_loads
        )
