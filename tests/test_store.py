"""Tests for the in-memory schedule store."""

import logging
import threading

import pytest

from shoot_scheduler.config import SchedulerSettings
from shoot_scheduler.errors import DayNotFoundError, ScheduleNotFoundError
from shoot_scheduler.optimizer import ScheduleOptimizer, find_day


class TestScheduleStore:
    """Test create, read, update and soft delete."""

    def test_create_and_get(self, store, scene_factory):
        record = store.create("p1", [scene_factory(1)], title="Draft")
        assert store.get("p1", record.id) is record
        assert record.title == "Draft"
        assert record.schedule.total_scenes == 1
        assert record.to_dict()["total_days"] == 1

    def test_projects_are_isolated(self, store, scene_factory):
        record = store.create("p1", [scene_factory(1)])
        with pytest.raises(ScheduleNotFoundError):
            store.get("p2", record.id)
        assert store.list("p2") == []

    def test_list_in_creation_order(self, store, scene_factory):
        first = store.create("p1", [scene_factory(1)])
        second = store.create("p1", [scene_factory(2)])
        assert [r.id for r in store.list("p1")] == [first.id, second.id]

    def test_update_only_touches_known_fields(self, store, scene_factory):
        record = store.create("p1", [scene_factory(1)])
        updated = store.update("p1", record.id, title="Final", memo="lock it", schedule=None)
        assert updated.title == "Final"
        assert updated.memo == "lock it"
        assert updated.schedule is not None
        assert updated.updated_at >= updated.created_at

    def test_soft_delete_hides_record(self, store, scene_factory):
        record = store.create("p1", [scene_factory(1)])
        store.delete("p1", record.id)
        assert record.is_deleted is True
        assert store.list("p1") == []
        with pytest.raises(ScheduleNotFoundError):
            store.get("p1", record.id)
        with pytest.raises(ScheduleNotFoundError):
            store.delete("p1", record.id)

    def test_breakdown(self, store, scene_factory):
        record = store.create("p1", [scene_factory(1, cast=["Kim"])])
        assert list(store.breakdown("p1", record.id, 1).actors) == ["Kim"]
        with pytest.raises(DayNotFoundError, match=f"Day 2 not found in schedule {record.id}$"):
            store.breakdown("p1", record.id, 2)

    def test_day_lookup_without_schedule_id(self, store, scene_factory):
        record = store.create("p1", [scene_factory(1)])
        for schedule_id in (None, ""):
            with pytest.raises(DayNotFoundError) as info:
                find_day(record.schedule.days, 3, schedule_id)
            assert str(info.value) == "Day 3 not found in this schedule"

    def test_policy_override_per_schedule(self, store, scene_factory):
        raw = [scene_factory(1), scene_factory(2),
               scene_factory(3, time_of_day="night"), scene_factory(4, time_of_day="night")]
        dynamic = store.create("p1", raw)
        fixed = store.create("p1", raw, settings=SchedulerSettings(_env_file=None, fixed_daily_cap=True))
        assert len(dynamic.schedule.days) == 1
        assert len(fixed.schedule.days) == 2
        assert store.breakdown("p1", fixed.id, 2).day_number == 2

    def test_concurrent_creates_all_land(self, store, scene_factory):
        raw = [scene_factory(n, location=("A", "B")[n % 2]) for n in range(1, 9)]
        threads = [threading.Thread(target=store.create, args=("p1", raw)) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        records = store.list("p1")
        assert len(records) == 5
        assert len({r.id for r in records}) == 5
        assert len({str(r.schedule.to_dict()) for r in records}) == 1

    def test_concurrent_creates_across_projects_keep_their_own_scenes(self, store, scene_factory):
        projects = {}
        for offset, project_id in enumerate(("pa", "pb", "pc", "pd")):
            projects[project_id] = [
                scene_factory(n, id=f"{project_id}-{n}", location=("A", "B", "C")[(n + offset) % 3],
                              time_of_day=("day", "night")[n % 2], duration=(3, 8, 25)[n % 3])
                for n in range(1, 10 + offset)
            ]

        def create_many(project_id):
            for _ in range(30):
                store.create(project_id, projects[project_id])

        threads = [threading.Thread(target=create_many, args=(p,)) for p in projects]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        for project_id, raw in projects.items():
            expected = sorted(s["id"] for s in raw)
            records = store.list(project_id)
            assert len(records) == 30
            for record in records:
                assert sorted(_scene_ids(record.schedule)) == expected
            assert len({str(r.schedule.to_dict()) for r in records}) == 1


class _OnceHandler(logging.Handler):
    """Runs ``action`` the first time a record starting with ``prefix`` is emitted"""

    def __init__(self, prefix, action):
        super().__init__()
        self.prefix = prefix
        self.action = action

    def emit(self, record):
        if self.action and record.getMessage().startswith(self.prefix):
            action, self.action = self.action, None
            action()


def _scene_ids(schedule):
    placed = [s.scene.id for day in schedule.days for s in day.scenes]
    return placed + [s["id"] for s in schedule.unplaced]


class TestSharedOptimizer:
    """Test one optimizer serving overlapping generations."""

    def test_generation_started_mid_run_does_not_leak(self, settings, scene_factory):
        logger = logging.getLogger("tests.shared_optimizer")
        logger.setLevel(logging.INFO)
        logger.propagate = False
        optimizer = ScheduleOptimizer(settings, logger)

        first_raw = [scene_factory(n, id=f"pa-{n}", duration=25) for n in range(1, 9)]
        second_raw = [scene_factory(n, id=f"pb-{n}", location="Harbor", duration=1) for n in range(1, 4)]
        nested = {}
        handler = _OnceHandler("Day 1 finalised",
                               lambda: nested.update(schedule=optimizer.optimize(second_raw)))
        logger.addHandler(handler)
        try:
            first = optimizer.optimize(first_raw)
        finally:
            logger.removeHandler(handler)

        assert "schedule" in nested
        assert sorted(_scene_ids(first)) == sorted(s["id"] for s in first_raw)
        assert sorted(_scene_ids(nested["schedule"])) == ["pb-1", "pb-2", "pb-3"]
        assert [len(d.scenes) for d in first.days] == [1, 1, 1, 1, 1, 1, 0, 1, 1]
        assert len(nested["schedule"].days) == 1
        assert first.to_dict()["days"] == optimizer.optimize(first_raw).to_dict()["days"]
