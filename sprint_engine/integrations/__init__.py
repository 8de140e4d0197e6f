"""
Sprint Planning Engine - Integrations

This module provides clients for the external collaborators:
- Roster: contributors, skills, base velocity
- Burnout signals: external risk score, velocity decay, mood trend
"""

from .roster import Contributor, RosterClient, parse_roster, DEFAULT_VELOCITY
from .signals import BurnoutSignal, BurnoutSignalClient, index_signals, parse_signals

__all__ = [
    # Roster
    "Contributor",
    "RosterClient",
    "parse_roster",
    "DEFAULT_VELOCITY",

    # Signals
    "BurnoutSignal",
    "BurnoutSignalClient",
    "index_signals",
    "parse_signals",
]
