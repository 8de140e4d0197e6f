"""
Burnout Risk Analyzer

Blends each contributor's internal load ratio with external wellbeing signals
into a ranked burnout risk list.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .config import PlanningPolicy
from .errors import optional_number
from .integrations import BurnoutSignal, Contributor, index_signals
from .integrations.signals import SignalsInput


class RiskLevel(Enum):
    """Burnout risk level."""
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


@dataclass
class BurnoutProfile:
    """Burnout risk assessment for one contributor."""
    contributor_id: str
    name: str
    combined_risk: float  # nominally 0-100, exceeds 100 when load ratio > 1
    load_ratio: float
    external_score: float
    at_risk: bool
    signal: Optional[BurnoutSignal] = None

    @property
    def risk_level(self) -> RiskLevel:
        if self.combined_risk >= 70:
            return RiskLevel.CRITICAL
        elif self.combined_risk >= 50:
            return RiskLevel.HIGH
        elif self.combined_risk >= 30:
            return RiskLevel.MODERATE
        return RiskLevel.LOW

    @classmethod
    def from_dict(cls, data: dict) -> "BurnoutProfile":
        """Rebuild a profile sent back by a caller (e.g. for rebalancing)."""
        contributor_id = str(data.get("contributor_id") or data.get("username") or "")
        combined_risk = optional_number(data.get("combined_risk", data.get("combinedRisk")), "combined_risk")
        at_risk = data.get("at_risk", data.get("atRisk"))
        return cls(
            contributor_id=contributor_id,
            name=str(data.get("name") or contributor_id),
            combined_risk=combined_risk,
            load_ratio=optional_number(data.get("load_ratio", data.get("loadRatio")), "load_ratio"),
            external_score=optional_number(data.get("external_score", data.get("externalScore")), "external_score"),
            at_risk=bool(at_risk) if at_risk is not None else combined_risk >= 50
        )

    def to_dict(self) -> dict:
        return {
            "contributor_id": self.contributor_id,
            "name": self.name,
            "combined_risk": self.combined_risk,
            "load_ratio": round(self.load_ratio, 3),
            "external_score": self.external_score,
            "at_risk": self.at_risk,
            "risk_level": self.risk_level.value,
            "signal": self.signal.to_dict() if self.signal else None
        }


@dataclass
class BurnoutSummary:
    """Team-level rollup of burnout profiles."""
    total: int = 0
    at_risk_count: int = 0
    critical_count: int = 0
    average_risk: float = 0.0
    at_risk_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "total_devs": self.total,
            "at_risk_count": self.at_risk_count,
            "critical_count": self.critical_count,
            "avg_risk_score": self.average_risk,
            "at_risk": self.at_risk_ids
        }


class BurnoutRiskAnalyzer:
    """
    Ranks contributors by burnout risk.

    Usage:
        analyzer = BurnoutRiskAnalyzer()
        profiles = analyzer.identify_at_risk(adjusted_roster, signals)
        flagged = [p for p in profiles if p.at_risk]
    """

    def __init__(self, policy: Optional[PlanningPolicy] = None):
        self.policy = policy or PlanningPolicy()

    def assess(
        self,
        contributor: Contributor,
        signal: BurnoutSignal,
        current_load: float
    ) -> BurnoutProfile:
        """Score a single contributor."""
        velocity = contributor.effective_velocity
        if velocity > 0:
            load_ratio = current_load / (velocity * self.policy.sprint_length_days)
        else:
            load_ratio = 0.0

        combined_risk = round(load_ratio * 40 + signal.risk_score * 0.6, 1)

        return BurnoutProfile(
            contributor_id=contributor.id,
            name=contributor.name,
            combined_risk=combined_risk,
            load_ratio=load_ratio,
            external_score=signal.risk_score,
            at_risk=combined_risk >= self.policy.at_risk_threshold,
            signal=signal
        )

    def identify_at_risk(
        self,
        roster: list[Contributor],
        signals: SignalsInput = None,
        loads: Optional[dict[str, float]] = None
    ) -> list[BurnoutProfile]:
        """
        Build burnout profiles for the whole roster, highest risk first.

        Args:
            roster: Contributors (adjusted or raw)
            signals: External signals, as a list or keyed by contributor id
            loads: Current points per contributor; overrides each contributor's current_load

        Returns:
            Profiles sorted by combined risk descending; equal risks keep roster order
        """
        by_id = index_signals(signals)

        profiles = []
        for contributor in roster:
            signal = by_id.get(contributor.id) or BurnoutSignal.neutral(contributor.id)
            if loads is not None:
                current_load = loads.get(contributor.id, 0.0)
            else:
                current_load = contributor.current_load
            profiles.append(self.assess(contributor, signal, current_load))

        profiles.sort(key=lambda p: p.combined_risk, reverse=True)
        return profiles

    def summarize(self, profiles: list[BurnoutProfile]) -> BurnoutSummary:
        if not profiles:
            return BurnoutSummary()

        return BurnoutSummary(
            total=len(profiles),
            at_risk_count=len([p for p in profiles if p.at_risk]),
            critical_count=len([p for p in profiles if p.risk_level == RiskLevel.CRITICAL]),
            average_risk=round(sum(p.combined_risk for p in profiles) / len(profiles), 1),
            at_risk_ids=[p.contributor_id for p in profiles if p.at_risk]
        )
