"""
Sprint Plan Models

Backlog tasks, assignments and candidate sprint plans.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from .errors import ValidationError, require_id, require_number


class PlanState(Enum):
    """Lifecycle of a plan's assignment set."""
    DRAFT = "draft"            # solver output
    EVALUATED = "evaluated"    # scored by PlanEvaluator
    REBALANCED = "rebalanced"  # mutated by WorkloadRebalancer


@dataclass
class Task:
    """A backlog item."""
    id: str
    name: str
    type: str  # capability tag
    points: float

    @classmethod
    def from_dict(cls, data: dict, index: int = 0) -> "Task":
        prefix = f"tasks[{index}]"
        task_id = require_id(data.get("id"), f"{prefix}.id")
        return cls(
            id=task_id,
            name=str(data.get("name") or task_id),
            type=str(data.get("type") or data.get("capability") or ""),
            points=require_number(data.get("points"), f"{prefix}.points", minimum=0, exclusive=True)
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "type": self.type, "points": self.points}


@dataclass
class Assignment:
    """A task placed on a contributor."""
    task_id: str
    contributor_id: str
    points: Optional[float] = None
    estimated_days: Optional[int] = None
    task_name: Optional[str] = None
    contributor_name: Optional[str] = None

    def reassigned(self, contributor_id: str, contributor_name: Optional[str] = None,
                   estimated_days: Optional[int] = None) -> "Assignment":
        """Copy of this assignment placed on another contributor."""
        return replace(
            self,
            contributor_id=contributor_id,
            contributor_name=contributor_name,
            estimated_days=estimated_days
        )

    @classmethod
    def from_dict(cls, data: dict, index: int = 0) -> "Assignment":
        prefix = f"assignments[{index}]"
        points = data.get("points")
        estimated_days = data.get("estimatedDays", data.get("estimated_days"))
        return cls(
            task_id=require_id(data.get("taskId", data.get("task_id")), f"{prefix}.task_id"),
            contributor_id=require_id(
                data.get("assignedTo", data.get("contributor_id")), f"{prefix}.contributor_id"
            ),
            points=None if points is None else require_number(
                points, f"{prefix}.points", minimum=0, exclusive=True
            ),
            estimated_days=None if estimated_days is None else int(require_number(
                estimated_days, f"{prefix}.estimated_days", minimum=0
            )),
            task_name=data.get("taskName", data.get("task_name")),
            contributor_name=data.get("devName", data.get("contributor_name"))
        )

    def to_dict(self) -> dict:
        return {
            "task_id": self.task_id,
            "task_name": self.task_name,
            "contributor_id": self.contributor_id,
            "contributor_name": self.contributor_name,
            "points": self.points,
            "estimated_days": self.estimated_days
        }


def parse_tasks(records: list[dict]) -> list[Task]:
    tasks = []
    for index, record in enumerate(records or []):
        if not isinstance(record, dict):
            raise ValidationError(f"tasks[{index}]", "task must be an object")
        tasks.append(Task.from_dict(record, index))
    return tasks


def parse_assignments(records: list[dict]) -> list[Assignment]:
    assignments = []
    for index, record in enumerate(records or []):
        if not isinstance(record, dict):
            raise ValidationError(f"assignments[{index}]", "assignment must be an object")
        assignments.append(Assignment.from_dict(record, index))
    return assignments


@dataclass
class ContributorLoad:
    """Summed load against capacity for one contributor."""
    contributor_id: str
    load: float
    capacity: float

    @property
    def overloaded(self) -> bool:
        return self.load > self.capacity

    @property
    def utilization(self) -> float:
        if self.capacity <= 0:
            return 0
        return self.load / self.capacity

    def to_dict(self) -> dict:
        return {
            "contributor_id": self.contributor_id,
            "load": self.load,
            "capacity": round(self.capacity, 1),
            "utilization": round(self.utilization * 100, 1),
            "overloaded": self.overloaded
        }


@dataclass
class PlanEvaluation:
    """Overload assessment of an assignment set."""
    probability: float  # 10-100
    burnout_risk: str   # "High" / "Low"
    overloaded_count: int
    loads: list[ContributorLoad] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "probability": self.probability,
            "burnout_risk": self.burnout_risk,
            "overloaded_devs": self.overloaded_count,
            "loads": [l.to_dict() for l in self.loads]
        }


@dataclass
class SprintPlan:
    """One candidate sprint plan."""
    id: str
    name: str
    description: str
    strategy: str
    assignments: list[Assignment] = field(default_factory=list)
    probability: float = 0.0  # 0-1
    burnout_risk: str = "Low"
    state: PlanState = PlanState.DRAFT
    evaluation: Optional[PlanEvaluation] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "strategy": self.strategy,
            "assignments": [a.to_dict() for a in self.assignments],
            "probability": self.probability,
            "burnout_risk": self.burnout_risk,
            "state": self.state.value,
            "evaluation": self.evaluation.to_dict() if self.evaluation else None
        }
