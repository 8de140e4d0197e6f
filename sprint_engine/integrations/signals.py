"""
Burnout Signal Provider Integration

Pulls external wellbeing signals (risk score, velocity decay, overload, mood) per contributor.
"""

import os
from dataclasses import dataclass
from typing import Optional, Union

import httpx

from ..errors import ValidationError, require_id, require_number
from ..logging import get_logger

logger = get_logger(__name__)


@dataclass
class BurnoutSignal:
    """External risk signal for one contributor. Defaults describe a neutral signal."""
    contributor_id: str
    risk_score: float = 0.0  # 0-100
    velocity_signal: str = "STABLE"
    overload_signal: str = "HEALTHY"
    mood_trend: str = "stable"

    @classmethod
    def neutral(cls, contributor_id: str) -> "BurnoutSignal":
        return cls(contributor_id=contributor_id)

    @classmethod
    def from_dict(cls, data: dict) -> "BurnoutSignal":
        contributor_id = require_id(
            data.get("contributor_id", data.get("username", data.get("id"))),
            "contributor_id"
        )
        risk_score = data.get("riskScore", data.get("risk_score"))
        return cls(
            contributor_id=contributor_id,
            risk_score=0.0 if risk_score is None else require_number(risk_score, "risk_score", minimum=0),
            velocity_signal=str(data.get("velocitySignal", data.get("velocity_signal")) or "STABLE"),
            overload_signal=str(data.get("overloadSignal", data.get("overload_signal")) or "HEALTHY"),
            mood_trend=str(data.get("moodTrend", data.get("mood_trend")) or "stable")
        )

    def to_dict(self) -> dict:
        return {
            "contributor_id": self.contributor_id,
            "risk_score": self.risk_score,
            "velocity_signal": self.velocity_signal,
            "overload_signal": self.overload_signal,
            "mood_trend": self.mood_trend
        }


SignalsInput = Union[list[BurnoutSignal], dict[str, BurnoutSignal], None]


def index_signals(signals: SignalsInput) -> dict[str, BurnoutSignal]:
    """Key signals by contributor id. The last signal for a contributor wins."""
    if not signals:
        return {}
    if isinstance(signals, dict):
        return dict(signals)
    return {signal.contributor_id: signal for signal in signals}


def parse_signals(records: list[dict]) -> dict[str, BurnoutSignal]:
    """Parse a provider payload into signals keyed by contributor id."""
    parsed = []
    for index, record in enumerate(records or []):
        if not isinstance(record, dict):
            raise ValidationError(f"signals[{index}]", "signal record must be an object")
        parsed.append(BurnoutSignal.from_dict(record))
    return index_signals(parsed)


class BurnoutSignalClient:
    """
    Burnout signal service client.

    Usage:
        client = BurnoutSignalClient(url="https://wellbeing.internal")
        signals = await client.get_signals(["alice", "bob"])
    """

    def __init__(
        self,
        url: Optional[str] = None,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.url = (url or os.getenv("SIGNALS_URL", "")).rstrip("/")
        self.token = token or os.getenv("SIGNALS_TOKEN")
        self.transport = transport

        if not self.url:
            raise ValueError("Signals URL required. Set SIGNALS_URL env var or pass url parameter.")

        self.headers = {"Accept": "application/json"}
        if self.token:
            self.headers["Authorization"] = f"Bearer {self.token}"

    async def get_signals(self, contributor_ids: list[str]) -> dict[str, BurnoutSignal]:
        """
        Fetch signals for the given contributors.

        Contributors the provider has no data for are absent from the result;
        callers fall back to a neutral signal.
        """
        async with httpx.AsyncClient(transport=self.transport) as client:
            response = await client.get(
                f"{self.url}/signals",
                headers=self.headers,
                params={"contributors": ",".join(contributor_ids)},
                timeout=30.0
            )
            response.raise_for_status()
            payload = response.json() if response.content else []

        records = payload.get("signals", []) if isinstance(payload, dict) else payload
        signals = parse_signals(records)
        logger.info(
            "signals.fetched",
            requested=len(contributor_ids),
            received=len(signals)
        )
        return signals
