"""
Sprint Planning Engine

Turns a backlog and a team roster into sprint plans, calibrates capacity from
estimation history, and rebalances work away from contributors at burnout risk.
"""

__version__ = "1.0.0"

from .errors import PlanningError, ValidationError

from .config import Config, PlanningPolicy

from .store import PlanningStore, CalibrationRecord, CalibrationOutcome

from .integrations import Contributor, BurnoutSignal

from .calibration import CalibrationTracker, CalibrationStatus, CalibrationReportEntry

from .capacity import CapacityNormalizer, AdjustedContributor, CapacityReportEntry

from .plans import (
    Task,
    Assignment,
    SprintPlan,
    PlanState,
    PlanEvaluation
)

from .solver import AssignmentSolver, Strategy, score_contributor

from .evaluator import PlanEvaluator

from .burnout import BurnoutRiskAnalyzer, BurnoutProfile, BurnoutSummary, RiskLevel

from .rebalancer import WorkloadRebalancer, Reassignment, RebalanceResult

from .engine import SprintPlanningEngine, generate_sprint_plans

__all__ = [
    # Version
    "__version__",

    # Errors and configuration
    "PlanningError",
    "ValidationError",
    "Config",
    "PlanningPolicy",

    # Store
    "PlanningStore",
    "CalibrationRecord",
    "CalibrationOutcome",

    # Provider records
    "Contributor",
    "BurnoutSignal",

    # Calibration and capacity
    "CalibrationTracker",
    "CalibrationStatus",
    "CalibrationReportEntry",
    "CapacityNormalizer",
    "AdjustedContributor",
    "CapacityReportEntry",

    # Planning
    "Task",
    "Assignment",
    "SprintPlan",
    "PlanState",
    "PlanEvaluation",
    "AssignmentSolver",
    "Strategy",
    "score_contributor",
    "PlanEvaluator",

    # Burnout and rebalancing
    "BurnoutRiskAnalyzer",
    "BurnoutProfile",
    "BurnoutSummary",
    "RiskLevel",
    "WorkloadRebalancer",
    "Reassignment",
    "RebalanceResult",

    # Engine
    "SprintPlanningEngine",
    "generate_sprint_plans",
]
