"""Exceptions raised by the scheduler and its schedule store"""

from typing import Optional


class SchedulerError(Exception):
    """Base class for scheduler failures"""


class NotFoundError(SchedulerError):
    """A requested resource does not exist (or was soft-deleted)"""


class ScheduleNotFoundError(NotFoundError):
    def __init__(self, project_id: str, schedule_id: str):
        self.project_id = project_id
        self.schedule_id = schedule_id
        super().__init__(f"Schedule {schedule_id} not found for project {project_id}")


class DayNotFoundError(NotFoundError):
    def __init__(self, schedule_id: Optional[str], day_number: int):
        self.schedule_id = schedule_id
        self.day_number = day_number
        where = f"schedule {schedule_id}" if schedule_id else "this schedule"
        super().__init__(f"Day {day_number} not found in {where}")
