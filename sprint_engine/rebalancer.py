"""
Workload Rebalancer

Moves work away from at-risk contributors into teammates' slack capacity.
"""

import math
from copy import copy
from dataclasses import dataclass, field
from typing import Optional

from .burnout import BurnoutProfile
from .config import PlanningPolicy
from .evaluator import sum_loads
from .integrations import Contributor
from .logging import get_logger
from .plans import Assignment

logger = get_logger(__name__)


@dataclass
class Reassignment:
    """A single task moved between contributors."""
    task_id: str
    task_name: Optional[str]
    from_contributor: str
    to_contributor: str
    points: float
    reason: str

    def to_dict(self) -> dict:
        return {
            "task_id": self.task_id,
            "task_name": self.task_name,
            "from": self.from_contributor,
            "to": self.to_contributor,
            "points": self.points,
            "reason": self.reason
        }


@dataclass
class RebalanceSummary:
    total_moved: int = 0
    from_contributors: list[str] = field(default_factory=list)
    to_contributors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "total_moved": self.total_moved,
            "from_devs": self.from_contributors,
            "to_devs": self.to_contributors
        }


@dataclass
class RebalanceResult:
    """Proposed moves plus the assignment set with those moves applied."""
    reassignments: list[Reassignment] = field(default_factory=list)
    assignments: list[Assignment] = field(default_factory=list)
    summary: RebalanceSummary = field(default_factory=RebalanceSummary)

    def to_dict(self) -> dict:
        return {
            "reassignments": [r.to_dict() for r in self.reassignments],
            "updated_assignments": [a.to_dict() for a in self.assignments],
            "rebalance_summary": self.summary.to_dict()
        }


def _distinct(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


class WorkloadRebalancer:
    """
    Redistributes the heaviest tasks of at-risk contributors.

    At most max_moves_per_contributor tasks leave any one contributor per call;
    repeated calls converge gradually instead of reshuffling the whole sprint.
    A task is only moved to a receiver that can absorb it without exceeding
    capacity.

    Usage:
        rebalancer = WorkloadRebalancer()
        result = rebalancer.rebalance(assignments, profiles, adjusted_roster)
        for move in result.reassignments:
            print(move.reason)
    """

    def __init__(self, policy: Optional[PlanningPolicy] = None):
        self.policy = policy or PlanningPolicy()

    def _capacity(self, contributor: Optional[Contributor]) -> float:
        velocity = contributor.effective_velocity if contributor else self.policy.default_velocity
        return velocity * self.policy.sprint_length_days

    def _points(self, assignment: Assignment) -> float:
        return assignment.points if assignment.points is not None else self.policy.default_points

    def propose_moves(
        self,
        assignments: list[Assignment],
        profiles: list[BurnoutProfile],
        roster: list[Contributor]
    ) -> list[tuple[int, Reassignment]]:
        """
        Plan moves against a load snapshot without touching the assignments.

        Returns:
            (assignment index, reassignment) pairs in the order they were chosen
        """
        by_id = {dev.id: dev for dev in roster}
        loads = sum_loads(assignments, self.policy.default_points)
        for contributor_id in set(loads) | set(by_id):
            loads.setdefault(contributor_id, 0.0)
        capacity = {cid: self._capacity(by_id.get(cid)) for cid in loads}

        at_risk = []
        at_risk_ids = set()
        for profile in profiles:
            if not profile.at_risk or profile.contributor_id in at_risk_ids:
                continue
            if profile.contributor_id not in by_id:
                logger.warning("rebalance.unknown_contributor", contributor_id=profile.contributor_id)
                continue
            at_risk.append(profile)
            at_risk_ids.add(profile.contributor_id)

        def utilization(cid: str) -> float:
            return loads[cid] / capacity[cid] if capacity[cid] > 0 else math.inf

        receivers = [
            dev.id for dev in roster
            if dev.id not in at_risk_ids
            and loads[dev.id] < capacity[dev.id] * self.policy.underload_ratio
        ]
        receivers.sort(key=utilization)

        moves = []
        for profile in at_risk:
            source = profile.contributor_id
            owned = [(index, a) for index, a in enumerate(assignments) if a.contributor_id == source]
            # Heaviest first; sorted() keeps backlog order among equal points
            heaviest = sorted(owned, key=lambda pair: self._points(pair[1]), reverse=True)
            heaviest = heaviest[:self.policy.max_moves_per_contributor]

            for index, assignment in heaviest:
                points = self._points(assignment)
                target = next(
                    (cid for cid in receivers if capacity[cid] - loads[cid] >= points),
                    None
                )
                if target is None:
                    logger.info(
                        "rebalance.no_receiver",
                        task_id=assignment.task_id,
                        contributor_id=source,
                        points=points
                    )
                    continue

                loads[source] -= points
                loads[target] += points
                moves.append((index, Reassignment(
                    task_id=assignment.task_id,
                    task_name=assignment.task_name,
                    from_contributor=source,
                    to_contributor=target,
                    points=points,
                    reason=f"{source} is at burnout risk (combinedRisk={profile.combined_risk:g})"
                )))

        return moves

    def rebalance(
        self,
        assignments: list[Assignment],
        profiles: list[BurnoutProfile],
        roster: list[Contributor]
    ) -> RebalanceResult:
        """
        Move up to two of each at-risk contributor's heaviest tasks into slack capacity.

        The input assignment list is left untouched; the result carries an
        updated copy.
        """
        moves = self.propose_moves(assignments, profiles, roster)
        by_id = {dev.id: dev for dev in roster}

        updated = [copy(a) for a in assignments]
        for index, move in moves:
            receiver = by_id[move.to_contributor]
            updated[index] = assignments[index].reassigned(
                contributor_id=receiver.id,
                contributor_name=receiver.name,
                estimated_days=math.ceil(move.points / receiver.effective_velocity)
            )
            logger.info(
                "rebalance.task_moved",
                task_id=move.task_id,
                from_contributor=move.from_contributor,
                to_contributor=move.to_contributor,
                points=move.points
            )

        reassignments = [move for _, move in moves]
        return RebalanceResult(
            reassignments=reassignments,
            assignments=updated,
            summary=RebalanceSummary(
                total_moved=len(reassignments),
                from_contributors=_distinct([r.from_contributor for r in reassignments]),
                to_contributors=_distinct([r.to_contributor for r in reassignments])
            )
        )
