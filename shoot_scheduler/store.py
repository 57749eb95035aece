"""
In-memory schedule store.

Holds one list of schedules per project. Regeneration for a project runs
under that project's lock so two concurrent create requests cannot
interleave their writes; the optimizer itself is lock-free.
"""

import logging
import threading
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from .breakdown import Breakdown, BreakdownGenerator
from .config import SchedulerSettings
from .errors import ScheduleNotFoundError
from .models import Schedule
from .optimizer import ScheduleOptimizer, find_day

UPDATABLE_FIELDS = ("title", "memo")


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ScheduleRecord:
    id: str
    project_id: str
    schedule: Schedule
    settings: Optional[SchedulerSettings] = None
    title: str = ""
    memo: str = ""
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)
    is_deleted: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "project_id": self.project_id,
            "title": self.title,
            "memo": self.memo,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
        data.update(self.schedule.to_dict())
        return data


class ScheduleStore:
    """Soft-deletable schedules keyed by project, single writer per project"""

    def __init__(self, optimizer: Optional[ScheduleOptimizer] = None,
                 logger: Optional[logging.Logger] = None):
        self.optimizer = optimizer or ScheduleOptimizer()
        self._logger = logger or logging.getLogger(__name__)
        self._records: Dict[str, Dict[str, ScheduleRecord]] = defaultdict(dict)
        self._project_locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._registry_lock = threading.Lock()

    def _lock_for(self, project_id: str) -> threading.Lock:
        with self._registry_lock:
            return self._project_locks[project_id]

    def create(self, project_id: str, scenes: Iterable[Dict[str, Any]],
               title: str = "", memo: str = "",
               settings: Optional[SchedulerSettings] = None) -> ScheduleRecord:
        """Run the optimizer over the project's current scenes and persist the result"""
        optimizer = ScheduleOptimizer(settings, self._logger) if settings else self.optimizer
        with self._lock_for(project_id):
            schedule = optimizer.optimize(scenes)
            record = ScheduleRecord(id=uuid.uuid4().hex, project_id=project_id,
                                    schedule=schedule, settings=settings,
                                    title=title, memo=memo)
            self._records[project_id][record.id] = record
        self._logger.info("Stored schedule %s for project %s (%d days)",
                          record.id, project_id, len(schedule.days))
        return record

    def list(self, project_id: str) -> List[ScheduleRecord]:
        records = self._records.get(project_id, {}).values()
        return sorted((r for r in records if not r.is_deleted), key=lambda r: r.created_at)

    def get(self, project_id: str, schedule_id: str) -> ScheduleRecord:
        record = self._records.get(project_id, {}).get(schedule_id)
        if record is None or record.is_deleted:
            raise ScheduleNotFoundError(project_id, schedule_id)
        return record

    def update(self, project_id: str, schedule_id: str, **changes: Any) -> ScheduleRecord:
        with self._lock_for(project_id):
            record = self.get(project_id, schedule_id)
            for name, value in changes.items():
                if name in UPDATABLE_FIELDS and value is not None:
                    setattr(record, name, value)
            record.updated_at = _now()
        return record

    def delete(self, project_id: str, schedule_id: str) -> ScheduleRecord:
        with self._lock_for(project_id):
            record = self.get(project_id, schedule_id)
            record.is_deleted = True
            record.updated_at = _now()
        self._logger.info("Soft-deleted schedule %s for project %s", schedule_id, project_id)
        return record

    def breakdown(self, project_id: str, schedule_id: str, day_number: int) -> Breakdown:
        record = self.get(project_id, schedule_id)
        day = find_day(record.schedule.days, day_number, schedule_id)
        if record.settings is None:
            return self.optimizer.breakdowns.generate(day)
        return BreakdownGenerator(record.settings, self._logger).generate(day)
