"""
Shared fixtures for the sprint planning engine tests.
"""

import pytest

from sprint_engine.engine import SprintPlanningEngine
from sprint_engine.integrations import Contributor
from sprint_engine.plans import Task
from sprint_engine.store import PlanningStore


@pytest.fixture
def store():
    """An isolated, empty planning store."""
    return PlanningStore()


@pytest.fixture
def engine(store):
    """Engine bound to the isolated store."""
    return SprintPlanningEngine(store=store)


@pytest.fixture
def team():
    """Small roster with distinct strengths."""
    return [
        Contributor(id="alice", name="Alice", velocity=5, skills={"node": 0.9, "react": 0.6}),
        Contributor(id="bob", name="Bob", velocity=6, skills={"react": 0.9, "devops": 0.4}),
        Contributor(id="charlie", name="Charlie", velocity=4, skills={"python": 0.95}),
        Contributor(id="dave", name="Dave", velocity=7, skills={"devops": 0.85}),
    ]


@pytest.fixture
def backlog():
    return [
        Task(id="101", name="Setup DB Schema", type="node", points=5),
        Task(id="102", name="Create React Components", type="react", points=8),
        Task(id="103", name="AI Model Training", type="python", points=13),
        Task(id="104", name="CI/CD Pipeline", type="devops", points=5),
        Task(id="105", name="API Authentication", type="node", points=3),
        Task(id="106", name="Data Visualization", type="react", points=8),
    ]
