"""
Velocity Calibration

Tracks each contributor's estimated vs delivered points over a trailing window
and derives the multiplier used to correct their nominal velocity.
"""

from copy import deepcopy
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .config import PlanningPolicy
from .errors import require_id, require_number
from .logging import get_logger
from .store import CalibrationOutcome, CalibrationRecord, PlanningStore

logger = get_logger(__name__)


class CalibrationStatus(Enum):
    """Estimation accuracy classification."""
    OVER_ESTIMATING = "OVER_ESTIMATING"    # delivers well under commitment
    UNDER_ESTIMATING = "UNDER_ESTIMATING"  # delivers well over commitment
    ACCURATE = "ACCURATE"


@dataclass
class CalibrationReportEntry:
    """Calibration state of a single contributor."""
    contributor_id: str
    multiplier: float
    status: CalibrationStatus
    history: list[CalibrationOutcome] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "contributor_id": self.contributor_id,
            "calibration_multiplier": self.multiplier,
            "status": self.status.value,
            "history": [h.to_dict() for h in self.history]
        }


class CalibrationTracker:
    """
    Records sprint outcomes and maintains per-contributor calibration multipliers.

    Usage:
        tracker = CalibrationTracker(store)
        record = tracker.record_outcome("alice", estimated=20, actual=17)
        record.multiplier  # 0.85
    """

    def __init__(self, store: PlanningStore, policy: Optional[PlanningPolicy] = None):
        self.store = store
        self.policy = policy or PlanningPolicy()

    def record_outcome(self, contributor_id: str, estimated: float, actual: float) -> CalibrationRecord:
        """
        Append an outcome and recompute the contributor's multiplier.

        Args:
            contributor_id: Contributor identifier
            estimated: Story points committed (must be > 0)
            actual: Story points delivered (must be >= 0)

        Returns:
            A copy of the updated CalibrationRecord

        Raises:
            ValidationError: before any mutation, if an argument is missing or invalid
        """
        contributor_id = require_id(contributor_id, "contributor_id")
        estimated = require_number(estimated, "estimated", minimum=0, exclusive=True)
        actual = require_number(actual, "actual", minimum=0)

        with self.store.locked():
            record = self.store.get_calibration(contributor_id)
            if record is None:
                record = CalibrationRecord(contributor_id=contributor_id)
            else:
                record = deepcopy(record)

            record.history.append(CalibrationOutcome(estimated=estimated, actual=actual))
            while len(record.history) > self.policy.calibration_window:
                record.history.pop(0)

            ratios = [outcome.ratio for outcome in record.history]
            record.multiplier = round(sum(ratios) / len(ratios), 3)
            self.store.put_calibration(record)

        logger.info(
            "calibration.outcome_recorded",
            contributor_id=contributor_id,
            estimated=estimated,
            actual=actual,
            multiplier=record.multiplier,
            window=len(record.history)
        )
        return deepcopy(record)

    def classify(self, multiplier: float) -> CalibrationStatus:
        if multiplier < self.policy.over_estimating_below:
            return CalibrationStatus.OVER_ESTIMATING
        elif multiplier > self.policy.under_estimating_above:
            return CalibrationStatus.UNDER_ESTIMATING
        return CalibrationStatus.ACCURATE

    def get_record(self, contributor_id: str) -> Optional[CalibrationRecord]:
        return self.store.snapshot().calibration.get(contributor_id)

    def get_report(self) -> list[CalibrationReportEntry]:
        """Calibration state for every tracked contributor, in first-recorded order."""
        snapshot = self.store.snapshot()
        return [
            CalibrationReportEntry(
                contributor_id=contributor_id,
                multiplier=record.multiplier,
                status=self.classify(record.multiplier),
                history=record.history
            )
            for contributor_id, record in snapshot.calibration.items()
        ]
