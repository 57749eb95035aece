"""
Location-First Shoot Scheduler
Turns a project's scenes into shooting days, day timelines and per-day
production breakdowns.
"""

import logging
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from shoot_scheduler import __version__
from shoot_scheduler.config import SchedulerSettings, get_settings
from shoot_scheduler.errors import NotFoundError
from shoot_scheduler.optimizer import ScheduleOptimizer
from shoot_scheduler.store import ScheduleRecord, ScheduleStore

settings = get_settings()
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("shoot_scheduler.api")

app = FastAPI(title="Location-First Shoot Scheduler", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_store = ScheduleStore(ScheduleOptimizer(settings, logging.getLogger("shoot_scheduler")))


def get_store() -> ScheduleStore:
    return _store


class PolicyOverrides(BaseModel):
    """Per-request overrides of the packing policy"""
    fixed_daily_cap: Optional[bool] = None
    shooting_ratio: Optional[int] = Field(default=None, ge=1)
    scene_break: Optional[int] = Field(default=None, ge=0)
    meeting_location: Optional[str] = None


class ScheduleRequest(BaseModel):
    """Scenes of the project as stored by the scene editor"""
    scenes: List[Dict[str, Any]] = Field(default_factory=list)
    title: str = ""
    memo: str = ""
    policy: Optional[PolicyOverrides] = None


class ScheduleUpdate(BaseModel):
    title: Optional[str] = None
    memo: Optional[str] = None


class ScheduleSummary(BaseModel):
    id: str
    project_id: str
    title: str
    memo: str
    created_at: datetime
    updated_at: datetime
    total_days: int
    total_scenes: int
    incomplete: bool


class ScheduleResponse(BaseModel):
    """Stored schedule with its days and everything the caller must surface"""
    id: str
    project_id: str
    title: str
    memo: str
    created_at: datetime
    updated_at: datetime
    days: List[Dict[str, Any]]
    total_days: int
    shooting_days: int
    rest_days: int
    total_scenes: int
    total_duration: int
    total_location_moves: int
    optimization: Dict[str, Any]
    incomplete: bool
    unplaced: List[Dict[str, Any]]
    pending: Dict[str, List[Dict[str, Any]]]
    messages: List[str]
    processing_time_seconds: Optional[float] = None


class BreakdownResponse(BaseModel):
    day_number: int
    locations: Dict[str, List[Dict[str, Any]]]
    actors: Dict[str, List[Dict[str, Any]]]
    time_slots: Dict[str, List[Dict[str, Any]]]
    equipment: Dict[str, Dict[str, List[Dict[str, Any]]]]
    crew: Dict[str, Dict[str, List[Dict[str, Any]]]]
    props: Dict[str, List[Dict[str, Any]]]
    costumes: Dict[str, List[Dict[str, Any]]]
    cameras: Dict[str, List[Dict[str, Any]]]
    meeting_points: List[Dict[str, Any]]
    time_table: Dict[str, Dict[str, Any]]


def _summary(record: ScheduleRecord) -> ScheduleSummary:
    return ScheduleSummary(
        id=record.id,
        project_id=record.project_id,
        title=record.title,
        memo=record.memo,
        created_at=record.created_at,
        updated_at=record.updated_at,
        total_days=len(record.schedule.days),
        total_scenes=record.schedule.total_scenes,
        incomplete=record.schedule.incomplete,
    )


def _response(record: ScheduleRecord, elapsed: Optional[float] = None) -> ScheduleResponse:
    data = record.to_dict()
    data["created_at"] = record.created_at
    data["updated_at"] = record.updated_at
    return ScheduleResponse(processing_time_seconds=elapsed, **data)


def _settings_for(policy: Optional[PolicyOverrides]) -> Optional[SchedulerSettings]:
    if policy is None:
        return None
    overrides = policy.model_dump(exclude_none=True)
    if not overrides:
        return None
    return settings.model_copy(update=overrides)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.post("/projects/{project_id}/schedules", response_model=ScheduleResponse, status_code=201)
def create_schedule(project_id: str, request: ScheduleRequest,
                    store: ScheduleStore = Depends(get_store)):
    """
    Regenerate the project's schedule from its current scenes
    Location-first greedy packing under the daily and weekly hour caps
    """
    start_time = time.perf_counter()
    try:
        record = store.create(project_id, request.scenes, title=request.title,
                              memo=request.memo, settings=_settings_for(request.policy))
    except Exception as e:
        logger.exception("Schedule generation failed for project %s", project_id)
        detail = "Schedule generation failed"
        if settings.env != "prod":
            detail = f"{detail}: {e}"
        raise HTTPException(status_code=500, detail=detail)
    return _response(record, time.perf_counter() - start_time)


@app.get("/projects/{project_id}/schedules", response_model=List[ScheduleSummary])
def list_schedules(project_id: str, store: ScheduleStore = Depends(get_store)):
    return [_summary(record) for record in store.list(project_id)]


@app.get("/projects/{project_id}/schedules/{schedule_id}", response_model=ScheduleResponse)
def get_schedule(project_id: str, schedule_id: str, store: ScheduleStore = Depends(get_store)):
    return _response(store.get(project_id, schedule_id))


@app.patch("/projects/{project_id}/schedules/{schedule_id}", response_model=ScheduleResponse)
def update_schedule(project_id: str, schedule_id: str, update: ScheduleUpdate,
                    store: ScheduleStore = Depends(get_store)):
    record = store.update(project_id, schedule_id, **update.model_dump(exclude_none=True))
    return _response(record)


@app.delete("/projects/{project_id}/schedules/{schedule_id}")
def delete_schedule(project_id: str, schedule_id: str, store: ScheduleStore = Depends(get_store)):
    store.delete(project_id, schedule_id)
    return {"id": schedule_id, "deleted": True}


@app.post("/projects/{project_id}/schedules/{schedule_id}/days/{day_number}/breakdown",
          response_model=BreakdownResponse)
def day_breakdown(project_id: str, schedule_id: str, day_number: int,
                  store: ScheduleStore = Depends(get_store)):
    """Production breakdown of one shooting day of a stored schedule"""
    return BreakdownResponse(**store.breakdown(project_id, schedule_id, day_number).to_dict())


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "version": __version__, "approach": "location-first"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
