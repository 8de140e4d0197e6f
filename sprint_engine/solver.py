"""
Assignment Solver

Greedy task-to-contributor assignment under a small set of scoring strategies.
"""

import math
from enum import Enum

from .capacity import AdjustedContributor
from .errors import ValidationError
from .logging import get_logger
from .plans import Assignment, SprintPlan, Task

logger = get_logger(__name__)


class Strategy(Enum):
    """Plan scoring strategy."""
    SPEED = "speed"
    QUALITY = "quality"
    CALIBRATED = "calibrated"


def score_contributor(
    strategy: Strategy,
    skill_match: float,
    velocity: float,
    load: float,
    multiplier: float = 1.0
) -> float:
    """
    Score one contributor for one task. Higher is better.

    Args:
        strategy: Scoring strategy
        skill_match: Proficiency for the task's capability tag
        velocity: Adjusted velocity (points/day)
        load: Points already placed on the contributor in this solve
        multiplier: Calibration multiplier
    """
    if strategy is Strategy.SPEED:
        return 0.5 * skill_match + 0.5 * velocity - 0.1 * load
    elif strategy is Strategy.QUALITY:
        return 2 * skill_match - 0.5 * load
    elif strategy is Strategy.CALIBRATED:
        # Accurate estimators get a small bonus
        bonus = 0.2 if 0.9 < multiplier < 1.1 else 0.0
        return 0.4 * skill_match + 0.4 * velocity - 0.3 * load + bonus
    raise ValueError(f"Unknown strategy: {strategy}")


# Fixed metadata for the three candidate plans
PLAN_TEMPLATES = {
    Strategy.SPEED: {
        "id": "universe_speed",
        "name": "Speed Run",
        "description": "Optimized for fastest completion time.",
        "probability": 0.85,
        "burnout_risk": "High"
    },
    Strategy.QUALITY: {
        "id": "universe_quality",
        "name": "Quality Focused",
        "description": "Matches tasks to experts to reduce bugs.",
        "probability": 0.92,
        "burnout_risk": "Low"
    },
    Strategy.CALIBRATED: {
        "id": "universe_calibrated",
        "name": "Calibrated Plan",
        "description": "Balances load using historical accuracy & PTO-adjusted velocity.",
        "probability": None,
        "burnout_risk": "Low"
    },
}


def calibration_confidence(roster: list[AdjustedContributor]) -> float:
    """Confidence proxy: 1 minus mean absolute deviation of multipliers from 1, floored at 0.6."""
    if not roster:
        return 1.0
    deviation = sum(abs(1 - dev.calibration_multiplier) for dev in roster) / len(roster)
    return round(max(0.6, 1 - deviation), 2)


class AssignmentSolver:
    """
    Greedy assignment of backlog tasks to contributors.

    Tasks are taken in backlog order; each goes to the highest-scoring
    contributor, with ties resolved in favor of the earlier roster entry.

    Usage:
        solver = AssignmentSolver()
        plans = solver.generate_plans(tasks, adjusted_roster)
    """

    def solve(
        self,
        tasks: list[Task],
        roster: list[AdjustedContributor],
        strategy: Strategy
    ) -> list[Assignment]:
        """
        Assign every task to exactly one contributor.

        Running load is local to this call; roster records are not modified.

        Raises:
            ValidationError: if there are tasks but no contributors
        """
        if tasks and not roster:
            raise ValidationError("roster", "at least one contributor is required to plan a backlog")

        loads = [0.0] * len(roster)
        assignments = []

        for task in tasks:
            best_index = None
            best_score = -math.inf

            for index, dev in enumerate(roster):
                score = score_contributor(
                    strategy,
                    skill_match=dev.skill_match(task.type),
                    velocity=dev.adjusted_velocity,
                    load=loads[index],
                    multiplier=dev.calibration_multiplier
                )
                if score > best_score:
                    best_score = score
                    best_index = index

            best = roster[best_index]
            assignments.append(Assignment(
                task_id=task.id,
                task_name=task.name,
                contributor_id=best.id,
                contributor_name=best.name,
                points=task.points,
                estimated_days=math.ceil(task.points / best.adjusted_velocity)
            ))
            loads[best_index] += task.points

        logger.debug(
            "solver.solved",
            strategy=strategy.value,
            tasks=len(tasks),
            contributors=len(roster)
        )
        return assignments

    def generate_plans(
        self,
        tasks: list[Task],
        roster: list[AdjustedContributor]
    ) -> list[SprintPlan]:
        """Produce the speed, quality and calibrated candidate plans."""
        plans = []
        for strategy, template in PLAN_TEMPLATES.items():
            probability = template["probability"]
            if probability is None:
                probability = calibration_confidence(roster)

            plans.append(SprintPlan(
                id=template["id"],
                name=template["name"],
                description=template["description"],
                strategy=strategy.value,
                assignments=self.solve(tasks, roster, strategy),
                probability=probability,
                burnout_risk=template["burnout_risk"]
            ))

        logger.info("solver.plans_generated", plans=len(plans), tasks=len(tasks))
        return plans
