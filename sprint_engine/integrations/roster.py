"""
Roster Provider Integration

Pulls contributor records (skills, velocity, open tickets) from a roster service.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

import httpx

from ..errors import ValidationError, optional_number, require_id, require_number
from ..logging import get_logger

logger = get_logger(__name__)

DEFAULT_VELOCITY = 5.0


@dataclass
class Contributor:
    """A team member as supplied by the roster provider."""
    id: str
    name: str
    skills: dict[str, float] = field(default_factory=dict)
    velocity: float = DEFAULT_VELOCITY  # points per working day
    open_tickets: int = 0
    current_load: float = 0.0
    timezone: Optional[str] = None
    compatible_with: set[str] = field(default_factory=set)

    @property
    def effective_velocity(self) -> float:
        """Velocity used for capacity checks. Raw roster velocity here."""
        return self.velocity

    def skill_match(self, capability: str) -> float:
        """Proficiency for a capability tag, 0.1 when unknown."""
        return self.skills.get(capability) or 0.1

    @classmethod
    def from_dict(cls, data: dict) -> "Contributor":
        """
        Parse a provider record, tolerating missing optional fields.

        Raises:
            ValidationError: if the id is missing or velocity is non-positive
        """
        contributor_id = require_id(data.get("id", data.get("username")), "id")

        velocity = data.get("velocity")
        velocity = DEFAULT_VELOCITY if velocity is None else require_number(
            velocity, "velocity", minimum=0, exclusive=True
        )

        skills = {}
        for capability, score in (data.get("skills") or {}).items():
            skills[str(capability)] = min(1.0, max(0.0, require_number(score, f"skills.{capability}")))

        return cls(
            id=contributor_id,
            name=str(data.get("name") or contributor_id),
            skills=skills,
            velocity=velocity,
            open_tickets=int(optional_number(
                data.get("openTickets", data.get("open_tickets")), "open_tickets", minimum=0
            )),
            current_load=optional_number(
                data.get("currentLoad", data.get("current_load")), "current_load", minimum=0
            ),
            timezone=data.get("timezone"),
            compatible_with=set(data.get("compatibleWith", data.get("compatible_with")) or [])
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "skills": dict(self.skills),
            "velocity": self.velocity,
            "open_tickets": self.open_tickets,
            "current_load": self.current_load,
            "timezone": self.timezone,
            "compatible_with": sorted(self.compatible_with)
        }


def parse_roster(records: list[dict]) -> list[Contributor]:
    """
    Parse a roster payload, preserving provider order.

    Duplicate ids keep the first record; later duplicates are dropped.
    """
    roster = []
    seen = set()
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise ValidationError(f"team[{index}]", "contributor record must be an object")
        contributor = Contributor.from_dict(record)
        if contributor.id in seen:
            logger.warning("roster.duplicate_contributor", contributor_id=contributor.id)
            continue
        seen.add(contributor.id)
        roster.append(contributor)
    return roster


class RosterClient:
    """
    Roster service client for fetching contributor records.

    Usage:
        client = RosterClient(url="https://roster.internal", token="xxx")
        roster = await client.get_roster(team="platform")
    """

    def __init__(
        self,
        url: Optional[str] = None,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.url = (url or os.getenv("ROSTER_URL", "")).rstrip("/")
        self.token = token or os.getenv("ROSTER_TOKEN")
        self.transport = transport

        if not self.url:
            raise ValueError("Roster URL required. Set ROSTER_URL env var or pass url parameter.")

        self.headers = {"Accept": "application/json"}
        if self.token:
            self.headers["Authorization"] = f"Bearer {self.token}"

    async def _request(self, endpoint: str, params: Optional[dict] = None) -> dict | list:
        """Make request to the roster API."""
        async with httpx.AsyncClient(transport=self.transport) as client:
            response = await client.get(
                f"{self.url}{endpoint}",
                headers=self.headers,
                params=params,
                timeout=30.0
            )
            response.raise_for_status()
            return response.json() if response.content else []

    async def get_roster(self, team: Optional[str] = None) -> list[Contributor]:
        """Fetch the current roster, optionally for a single team."""
        params = {"team": team} if team else None
        payload = await self._request("/contributors", params)

        records = payload.get("contributors", []) if isinstance(payload, dict) else payload
        roster = parse_roster(records)
        logger.info("roster.fetched", team=team, contributors=len(roster))
        return roster
