"""
Configuration for the Sprint Planning Engine

Policy constants plus provider/logging settings from config.yaml and environment.
"""

import os
from dataclasses import dataclass, fields
from typing import Optional

import yaml


@dataclass
class PlanningPolicy:
    """Tunable policy constants used across the planning core."""
    sprint_length_days: int = 10
    velocity_floor: float = 0.5
    default_velocity: float = 5.0
    default_points: float = 5.0

    # Context-switch cost
    context_switch_ticket_threshold: int = 3
    context_switch_penalty: float = 0.85

    # Calibration
    calibration_window: int = 3
    over_estimating_below: float = 0.8
    under_estimating_above: float = 1.2

    # Burnout and rebalancing
    at_risk_threshold: float = 50.0
    underload_ratio: float = 0.7
    max_moves_per_contributor: int = 2

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "PlanningPolicy":
        """Build a policy from a (partial) mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in (data or {}).items():
            if key in known and value is not None:
                values[key] = value
        return cls(**values)


class Config:
    """Load configuration from config.yaml and environment."""

    def __init__(self, config_path: Optional[str] = None):
        config_path = config_path or os.getenv("SPRINT_ENGINE_CONFIG", "config/config.yaml")
        self.config = {}

        if os.path.exists(config_path):
            with open(config_path) as f:
                self.config = yaml.safe_load(f) or {}

        # Override with environment variables
        self._load_env()

    def _load_env(self):
        """Load configuration from environment variables."""
        env_mapping = {
            "ROSTER_URL": ("roster", "url"),
            "ROSTER_TOKEN": ("roster", "token"),
            "SIGNALS_URL": ("signals", "url"),
            "SIGNALS_TOKEN": ("signals", "token"),
            "LOG_LEVEL": ("logging", "level"),
            "LOG_FORMAT": ("logging", "format"),
        }

        for env_var, (section, key) in env_mapping.items():
            value = os.getenv(env_var)
            if value:
                if section not in self.config:
                    self.config[section] = {}
                self.config[section][key] = value

    def get(self, section: str, key: str, default=None):
        """Get configuration value."""
        return (self.config.get(section) or {}).get(key, default)

    @property
    def roster_url(self) -> Optional[str]:
        return self.get("roster", "url")

    @property
    def roster_token(self) -> Optional[str]:
        return self.get("roster", "token")

    @property
    def signals_url(self) -> Optional[str]:
        return self.get("signals", "url")

    @property
    def signals_token(self) -> Optional[str]:
        return self.get("signals", "token")

    @property
    def log_level(self) -> str:
        return self.get("logging", "level", "info")

    @property
    def log_format(self) -> str:
        return self.get("logging", "format", "console")

    @property
    def policy(self) -> PlanningPolicy:
        return PlanningPolicy.from_dict(self.config.get("policy"))
