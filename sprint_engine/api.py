"""
FastAPI Backend for the Sprint Planning Engine

Exposes plan generation, evaluation, calibration, capacity, burnout and
rebalancing operations over REST.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

import httpx
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .burnout import BurnoutProfile
from .config import Config
from .engine import SprintPlanningEngine
from .errors import PlanningError, ValidationError, require_id
from .integrations import (
    BurnoutSignal,
    BurnoutSignalClient,
    Contributor,
    RosterClient,
    parse_roster,
    parse_signals
)
from .logging import configure_logging, get_logger
from .plans import parse_assignments, parse_tasks

logger = get_logger(__name__)


# Global instances
config = Config()
default_engine = SprintPlanningEngine(policy=config.policy)


def get_engine() -> SprintPlanningEngine:
    return default_engine


def get_roster_client() -> Optional[RosterClient]:
    if not config.roster_url:
        return None
    return RosterClient(url=config.roster_url, token=config.roster_token)


def get_signal_client() -> Optional[BurnoutSignalClient]:
    if not config.signals_url:
        return None
    return BurnoutSignalClient(url=config.signals_url, token=config.signals_token)


# Pydantic models for API
class ContributorIn(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    skills: dict[str, float] = Field(default_factory=dict)
    velocity: Optional[float] = None
    open_tickets: int = 0
    current_load: float = 0.0
    timezone: Optional[str] = None
    compatible_with: list[str] = Field(default_factory=list)


class TaskIn(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    points: Optional[float] = None


class AssignmentIn(BaseModel):
    task_id: Optional[str] = None
    contributor_id: Optional[str] = None
    points: Optional[float] = None
    estimated_days: Optional[int] = None
    task_name: Optional[str] = None
    contributor_name: Optional[str] = None


class SignalIn(BaseModel):
    contributor_id: Optional[str] = None
    risk_score: Optional[float] = None
    velocity_signal: Optional[str] = None
    overload_signal: Optional[str] = None
    mood_trend: Optional[str] = None


class ProfileIn(BaseModel):
    contributor_id: str
    name: Optional[str] = None
    combined_risk: float = 0.0
    load_ratio: float = 0.0
    external_score: float = 0.0
    at_risk: Optional[bool] = None


class PlanRequest(BaseModel):
    tasks: Optional[list[TaskIn]] = None
    team: Optional[list[ContributorIn]] = None


class EvaluateRequest(BaseModel):
    assignments: Optional[list[AssignmentIn]] = None
    team: Optional[list[ContributorIn]] = None


class CalibrateRequest(BaseModel):
    contributor_id: Optional[str] = None
    estimated: Optional[float] = None
    actual: Optional[float] = None


class PTORequest(BaseModel):
    contributor_id: Optional[str] = None
    pto_days: Optional[float] = None
    sprint_days: Optional[float] = None


class TeamRequest(BaseModel):
    team: Optional[list[ContributorIn]] = None


class AtRiskRequest(BaseModel):
    team: Optional[list[ContributorIn]] = None
    signals: Optional[list[SignalIn]] = None
    assignments: Optional[list[AssignmentIn]] = None


class RebalanceRequest(BaseModel):
    assignments: Optional[list[AssignmentIn]] = None
    team: Optional[list[ContributorIn]] = None
    signals: Optional[list[SignalIn]] = None
    profiles: Optional[list[ProfileIn]] = None


async def resolve_roster(team: Optional[list[ContributorIn]]) -> list[Contributor]:
    """Roster from the request body, else from the roster provider."""
    if team is not None:
        return parse_roster([member.model_dump() for member in team])

    client = get_roster_client()
    if client is None:
        raise ValidationError("team", "team is required when no roster provider is configured")
    return await client.get_roster()


async def resolve_signals(
    signals: Optional[list[SignalIn]],
    roster: list[Contributor]
) -> dict[str, BurnoutSignal]:
    """Signals from the request body, else from the signal provider, else none."""
    if signals is not None:
        return parse_signals([s.model_dump() for s in signals])

    client = get_signal_client()
    if client is None:
        return {}
    return await client.get_signals([dev.id for dev in roster])


# Lifespan context manager
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    configure_logging(config.log_level, config.log_format)
    logger.info("api.startup", roster_provider=bool(config.roster_url), signal_provider=bool(config.signals_url))
    yield
    logger.info("api.shutdown")


# Create FastAPI app
app = FastAPI(
    title="Sprint Planning Engine",
    description="API for sprint planning, capacity calibration and burnout-aware rebalancing",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PlanningError)
async def planning_error_handler(request: Request, exc: PlanningError):
    logger.info("api.rejected", path=request.url.path, kind=exc.kind, field=exc.field)
    return JSONResponse(status_code=400, content={"detail": exc.to_dict()})


@app.exception_handler(httpx.HTTPError)
async def provider_error_handler(request: Request, exc: httpx.HTTPError):
    logger.error("api.provider_failed", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=502,
        content={"detail": {"kind": "provider_error", "field": None, "message": str(exc)}}
    )


# Health check
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "integrations": {
            "roster": config.roster_url is not None,
            "signals": config.signals_url is not None
        }
    }


# Planning endpoints
@app.post("/api/sprint/plans")
async def generate_plans(request: PlanRequest, engine: SprintPlanningEngine = Depends(get_engine)):
    """Generate speed, quality and calibrated candidate plans for a backlog."""
    if request.tasks is None:
        raise ValidationError("tasks")
    tasks = parse_tasks([t.model_dump() for t in request.tasks])
    roster = await resolve_roster(request.team)

    plans = engine.generate_plans(tasks, roster)
    return {
        "team": [dev.to_dict() for dev in engine.adjust(roster)],
        "plans": [plan.to_dict() for plan in plans]
    }


@app.post("/api/sprint/evaluate")
async def evaluate_plan(request: EvaluateRequest, engine: SprintPlanningEngine = Depends(get_engine)):
    """Recalculate probability and burnout risk for an edited assignment set."""
    if request.assignments is None:
        raise ValidationError("assignments")
    assignments = parse_assignments([a.model_dump() for a in request.assignments])
    roster = await resolve_roster(request.team)

    return engine.evaluate(assignments, roster).to_dict()


# Calibration and capacity endpoints
@app.post("/api/sprint/calibrate")
async def calibrate(request: CalibrateRequest, engine: SprintPlanningEngine = Depends(get_engine)):
    """Record a sprint outcome for a contributor."""
    record = engine.record_outcome(request.contributor_id, request.estimated, request.actual)
    return record.to_dict()


@app.post("/api/sprint/pto")
async def register_pto(request: PTORequest, engine: SprintPlanningEngine = Depends(get_engine)):
    """Register PTO for a contributor in the current sprint."""
    contributor_id = require_id(request.contributor_id, "contributor_id")
    fraction = engine.register_pto(contributor_id, request.pto_days, request.sprint_days)
    return {
        "contributor_id": contributor_id,
        "pto_fraction": fraction,
        "message": f"PTO registered for {contributor_id}: {request.pto_days:g} day(s)."
    }


@app.get("/api/sprint/calibration-report")
async def get_calibration_report(engine: SprintPlanningEngine = Depends(get_engine)):
    """Calibration multipliers for all tracked contributors."""
    return {"contributors": [entry.to_dict() for entry in engine.calibration_report()]}


@app.get("/api/sprint/calibration/{contributor_id}")
async def get_contributor_calibration(contributor_id: str, engine: SprintPlanningEngine = Depends(get_engine)):
    """Calibration record for a single contributor."""
    record = engine.tracker.get_record(contributor_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Contributor {contributor_id} has no calibration history")
    return record.to_dict()


@app.post("/api/sprint/capacity-report")
async def get_capacity_report(request: TeamRequest, engine: SprintPlanningEngine = Depends(get_engine)):
    """Per-contributor capacity adjusted for calibration, PTO and context-switch cost."""
    roster = await resolve_roster(request.team)
    return {"contributors": [entry.to_dict() for entry in engine.capacity_report(roster)]}


# Burnout endpoints
@app.post("/api/burnout/at-risk")
async def identify_at_risk(request: AtRiskRequest, engine: SprintPlanningEngine = Depends(get_engine)):
    """Rank contributors by combined burnout risk."""
    roster = await resolve_roster(request.team)
    signals = await resolve_signals(request.signals, roster)
    assignments = None
    if request.assignments is not None:
        assignments = parse_assignments([a.model_dump() for a in request.assignments])

    profiles = engine.identify_at_risk(roster, signals, assignments)
    return {
        "profiles": [p.to_dict() for p in profiles],
        "summary": engine.analyzer.summarize(profiles).to_dict(),
        "generated_at": datetime.now().isoformat()
    }


@app.post("/api/burnout/rebalance")
async def rebalance(request: RebalanceRequest, engine: SprintPlanningEngine = Depends(get_engine)):
    """Move work from at-risk contributors into slack capacity."""
    if request.assignments is None:
        raise ValidationError("assignments")
    assignments = parse_assignments([a.model_dump() for a in request.assignments])
    roster = await resolve_roster(request.team)

    if request.profiles is not None:
        profiles = [BurnoutProfile.from_dict(p.model_dump()) for p in request.profiles]
    else:
        signals = await resolve_signals(request.signals, roster)
        profiles = engine.identify_at_risk(roster, signals, assignments)

    result = engine.rebalance(assignments, profiles, roster)
    return {
        "at_risk_contributors": [p.to_dict() for p in profiles if p.at_risk],
        **result.to_dict()
    }


# Sample data endpoint (for testing)
SAMPLE_BACKLOG = [
    {"id": "101", "name": "Setup DB Schema", "type": "node", "points": 5},
    {"id": "102", "name": "Create React Components", "type": "react", "points": 8},
    {"id": "103", "name": "AI Model Training", "type": "python", "points": 13},
    {"id": "104", "name": "CI/CD Pipeline", "type": "devops", "points": 5},
    {"id": "105", "name": "API Authentication", "type": "node", "points": 3},
    {"id": "106", "name": "Data Visualization", "type": "react", "points": 8},
]

SAMPLE_TEAM = [
    {"id": "alice", "name": "Alice", "velocity": 5, "openTickets": 2, "skills": {"node": 0.9, "react": 0.6}},
    {"id": "bob", "name": "Bob", "velocity": 6, "openTickets": 5, "skills": {"react": 0.9, "devops": 0.4}},
    {"id": "charlie", "name": "Charlie", "velocity": 4, "openTickets": 1, "skills": {"python": 0.95, "node": 0.5}},
    {"id": "dave", "name": "Dave", "velocity": 7, "openTickets": 3, "skills": {"devops": 0.85, "python": 0.4}},
]


@app.get("/api/sample-data")
async def get_sample_data():
    """Plan the sample backlog against the sample team with an isolated engine."""
    sample_engine = SprintPlanningEngine(policy=config.policy)
    tasks = parse_tasks(SAMPLE_BACKLOG)
    roster = parse_roster(SAMPLE_TEAM)

    plans = sample_engine.generate_plans(tasks, roster)
    return {
        "tasks": [t.to_dict() for t in tasks],
        "team": [dev.to_dict() for dev in sample_engine.adjust(roster)],
        "plans": [plan.to_dict() for plan in plans]
    }


# Run with: uvicorn sprint_engine.api:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
