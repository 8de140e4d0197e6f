"""
Planning Store

In-memory calibration history and PTO registry shared by the planning components.
"""

import threading
from contextlib import contextmanager
from copy import deepcopy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterator, Optional


@dataclass
class CalibrationOutcome:
    """One sprint's estimated vs delivered points for a contributor."""
    estimated: float
    actual: float
    recorded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def ratio(self) -> float:
        return self.actual / self.estimated

    def to_dict(self) -> dict:
        return {
            "estimated": self.estimated,
            "actual": self.actual,
            "recorded_at": self.recorded_at.isoformat()
        }


@dataclass
class CalibrationRecord:
    """Trailing estimation history and the multiplier derived from it."""
    contributor_id: str
    history: list[CalibrationOutcome] = field(default_factory=list)
    multiplier: float = 1.0

    def to_dict(self) -> dict:
        return {
            "contributor_id": self.contributor_id,
            "multiplier": self.multiplier,
            "history": [h.to_dict() for h in self.history]
        }


@dataclass(frozen=True)
class StoreSnapshot:
    """Point-in-time copy of the store used by one planning call."""
    calibration: dict[str, CalibrationRecord]
    pto: dict[str, float]

    def multiplier_for(self, contributor_id: str) -> float:
        record = self.calibration.get(contributor_id)
        return record.multiplier if record else 1.0

    def pto_for(self, contributor_id: str) -> float:
        return self.pto.get(contributor_id, 0.0)


class PlanningStore:
    """
    Owns the calibration map and PTO registry, keyed by contributor id.

    Writers hold the lock for their whole read-modify-write; planning calls
    read through snapshot() so they never observe a partial update.

    Usage:
        store = PlanningStore()
        engine = SprintPlanningEngine(store=store)
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._calibration: dict[str, CalibrationRecord] = {}
        self._pto: dict[str, float] = {}

    @contextmanager
    def locked(self) -> Iterator["PlanningStore"]:
        """Hold the store lock for a read-modify-write sequence."""
        with self._lock:
            yield self

    def get_calibration(self, contributor_id: str) -> Optional[CalibrationRecord]:
        with self._lock:
            return self._calibration.get(contributor_id)

    def put_calibration(self, record: CalibrationRecord) -> None:
        with self._lock:
            self._calibration[record.contributor_id] = record

    def set_pto(self, contributor_id: str, fraction: float) -> None:
        with self._lock:
            self._pto[contributor_id] = fraction

    def snapshot(self) -> StoreSnapshot:
        with self._lock:
            return StoreSnapshot(
                calibration=deepcopy(self._calibration),
                pto=dict(self._pto)
            )
