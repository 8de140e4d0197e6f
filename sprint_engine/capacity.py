"""
Capacity Normalizer

Combines calibration multipliers, PTO and context-switch cost into an
effective per-sprint velocity for each contributor.
"""

import math
from dataclasses import dataclass
from typing import Optional

from .config import PlanningPolicy
from .errors import require_id, require_number
from .integrations import Contributor
from .logging import get_logger
from .store import PlanningStore, StoreSnapshot

logger = get_logger(__name__)


def round_half_up(value: float) -> int:
    # round() is half-to-even; day counts round halves up
    return int(math.floor(round(value, 6) + 0.5))


@dataclass
class AdjustedContributor(Contributor):
    """A roster contributor with planning-time velocity adjustments applied."""
    calibration_multiplier: float = 1.0
    pto_fraction: float = 0.0
    context_switch_penalty: float = 1.0
    adjusted_velocity: float = 0.0

    @property
    def effective_velocity(self) -> float:
        return self.adjusted_velocity

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            "calibration_multiplier": self.calibration_multiplier,
            "pto_fraction": self.pto_fraction,
            "context_switch_penalty": self.context_switch_penalty,
            "adjusted_velocity": round(self.adjusted_velocity, 3)
        })
        return data


@dataclass
class CapacityReportEntry:
    """Normalized capacity for one contributor."""
    id: str
    name: str
    raw_velocity: float
    calibrated_velocity: float
    pto_days: int
    context_switch_penalty: float
    effective_capacity: float

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "raw_velocity": self.raw_velocity,
            "calibrated_velocity": self.calibrated_velocity,
            "pto_days": self.pto_days,
            "context_switch_penalty": self.context_switch_penalty,
            "effective_capacity": self.effective_capacity
        }


class CapacityNormalizer:
    """
    Normalizes contributor velocity for the current sprint.

    Usage:
        normalizer = CapacityNormalizer(store)
        normalizer.register_pto("bob", pto_days=3)
        adjusted = normalizer.apply_adjustments(roster)
    """

    def __init__(self, store: PlanningStore, policy: Optional[PlanningPolicy] = None):
        self.store = store
        self.policy = policy or PlanningPolicy()

    def register_pto(
        self,
        contributor_id: str,
        pto_days: float,
        sprint_days: Optional[float] = None
    ) -> float:
        """
        Register PTO for a contributor, replacing any earlier registration.

        Returns:
            The stored PTO fraction (0.0 = no PTO, 1.0 = whole sprint off)
        """
        contributor_id = require_id(contributor_id, "contributor_id")
        pto_days = require_number(pto_days, "pto_days", minimum=0)
        if sprint_days is None:
            sprint_days = self.policy.sprint_length_days
        sprint_days = require_number(sprint_days, "sprint_days", minimum=0, exclusive=True)

        fraction = min(1.0, pto_days / sprint_days)
        with self.store.locked():
            self.store.set_pto(contributor_id, fraction)

        logger.info(
            "capacity.pto_registered",
            contributor_id=contributor_id,
            pto_days=pto_days,
            sprint_days=sprint_days,
            pto_fraction=fraction
        )
        return fraction

    def context_switch_penalty(self, open_tickets: int) -> float:
        if open_tickets > self.policy.context_switch_ticket_threshold:
            return self.policy.context_switch_penalty
        return 1.0

    def adjust(self, contributor: Contributor, snapshot: StoreSnapshot) -> AdjustedContributor:
        """Apply calibration, PTO and context-switch cost to a single contributor."""
        multiplier = snapshot.multiplier_for(contributor.id)
        pto_fraction = snapshot.pto_for(contributor.id)
        penalty = self.context_switch_penalty(contributor.open_tickets)

        adjusted_velocity = contributor.velocity * multiplier * (1 - pto_fraction) * penalty

        return AdjustedContributor(
            id=contributor.id,
            name=contributor.name,
            skills=dict(contributor.skills),
            velocity=contributor.velocity,
            open_tickets=contributor.open_tickets,
            current_load=contributor.current_load,
            timezone=contributor.timezone,
            compatible_with=set(contributor.compatible_with),
            calibration_multiplier=multiplier,
            pto_fraction=pto_fraction,
            context_switch_penalty=penalty,
            adjusted_velocity=max(self.policy.velocity_floor, adjusted_velocity)
        )

    def apply_adjustments(
        self,
        roster: list[Contributor],
        snapshot: Optional[StoreSnapshot] = None
    ) -> list[AdjustedContributor]:
        """
        Adjust every contributor in roster order.

        Args:
            roster: Contributors from the roster provider
            snapshot: Store snapshot to read from; taken now if not supplied
        """
        snapshot = snapshot or self.store.snapshot()
        return [self.adjust(contributor, snapshot) for contributor in roster]

    def get_capacity_report(self, roster: list[Contributor]) -> list[CapacityReportEntry]:
        """Per-contributor raw, calibrated and effective sprint capacity."""
        sprint_days = self.policy.sprint_length_days
        report = []

        for dev in self.apply_adjustments(roster):
            multiplier = dev.calibration_multiplier or 1.0
            report.append(CapacityReportEntry(
                id=dev.id,
                name=dev.name,
                raw_velocity=dev.adjusted_velocity / multiplier,
                calibrated_velocity=dev.adjusted_velocity,
                pto_days=round_half_up(dev.pto_fraction * sprint_days),
                context_switch_penalty=dev.context_switch_penalty,
                effective_capacity=round(dev.adjusted_velocity * sprint_days, 1)
            ))

        return report
