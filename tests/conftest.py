"""
Global test configuration for the shoot scheduler.

Provides settings isolated from the environment, a raw scene factory and
an API client bound to a fresh in-memory store.
"""

import pytest
from fastapi.testclient import TestClient

from shoot_scheduler.config import SchedulerSettings
from shoot_scheduler.optimizer import ScheduleOptimizer
from shoot_scheduler.scene_parser import SceneParser
from shoot_scheduler.store import ScheduleStore


def make_scene(number, location="Studio A", time_of_day="day", duration=5,
               group="Seoul", cast=None, **extra):
    """Raw scene record the way the scene editor stores it"""
    raw = {
        "id": f"s{number}",
        "scene_number": number,
        "title": f"Scene {number}",
        "location": {"name": location, "group_name": group},
        "time_of_day": time_of_day,
        "nominal_duration": duration,
        "cast": cast or [],
    }
    raw.update(extra)
    return raw


@pytest.fixture
def settings() -> SchedulerSettings:
    """Default dynamic policy, ignoring any .env file"""
    return SchedulerSettings(_env_file=None)


@pytest.fixture
def fixed_settings() -> SchedulerSettings:
    return SchedulerSettings(_env_file=None, fixed_daily_cap=True)


@pytest.fixture
def scene_factory():
    return make_scene


@pytest.fixture
def parse_scenes(settings):
    """Parse raw records into Scene objects with the default settings"""
    def _parse(raw_scenes):
        scenes, _ = SceneParser(settings).parse_all(raw_scenes)
        return scenes
    return _parse


@pytest.fixture
def optimizer(settings) -> ScheduleOptimizer:
    return ScheduleOptimizer(settings)


@pytest.fixture
def fixed_optimizer(fixed_settings) -> ScheduleOptimizer:
    return ScheduleOptimizer(fixed_settings)


@pytest.fixture
def store(optimizer) -> ScheduleStore:
    return ScheduleStore(optimizer)


@pytest.fixture
def client(store):
    """API client whose routes use the test store"""
    from main import app, get_store

    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
