"""
Tests for the HTTP endpoints.

Covers schedule regeneration, retrieval, update, soft delete and the
per-day breakdown, including the 404 paths.
"""

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def scenes(scene_factory):
    return [
        scene_factory(1, cast=[{"role": "Detective", "name": "Kim"}]),
        scene_factory(2),
        scene_factory(3, time_of_day="night"),
        scene_factory(4, time_of_day="night"),
    ]


@pytest.fixture
def created(client: TestClient, scenes):
    response = client.post("/projects/p1/schedules", json={"scenes": scenes, "title": "Week 1"})
    assert response.status_code == 201
    return response.json()


class TestScheduleEndpoints:
    """Test the schedule resource."""

    def test_create_schedule(self, created):
        assert created["project_id"] == "p1"
        assert created["title"] == "Week 1"
        assert created["total_days"] == 1
        assert created["total_scenes"] == 4
        assert created["incomplete"] is False
        assert created["processing_time_seconds"] >= 0
        day = created["days"][0]
        assert day["time_range"] == {"start": "06:00", "end": "14:10"}
        assert [s["start_time"] for s in day["scenes"]] == ["06:00", "08:10", "10:20", "12:30"]

    def test_create_with_fixed_policy(self, client: TestClient, scenes):
        response = client.post("/projects/p1/schedules",
                               json={"scenes": scenes, "policy": {"fixed_daily_cap": True}})
        assert response.status_code == 201
        assert response.json()["total_days"] == 2

    def test_create_with_no_scenes(self, client: TestClient):
        response = client.post("/projects/p1/schedules", json={})
        assert response.status_code == 201
        data = response.json()
        assert data["days"] == []
        assert data["messages"] == ["No scenes to schedule."]

    def test_invalid_policy_is_rejected(self, client: TestClient, scenes):
        response = client.post("/projects/p1/schedules",
                               json={"scenes": scenes, "policy": {"shooting_ratio": 0}})
        assert response.status_code == 422

    def test_get_and_list(self, client: TestClient, created):
        response = client.get(f"/projects/p1/schedules/{created['id']}")
        assert response.status_code == 200
        assert response.json()["days"] == created["days"]

        listing = client.get("/projects/p1/schedules").json()
        assert [s["id"] for s in listing] == [created["id"]]
        assert listing[0]["total_scenes"] == 4

    def test_patch(self, client: TestClient, created):
        response = client.patch(f"/projects/p1/schedules/{created['id']}", json={"memo": "approved"})
        assert response.status_code == 200
        assert response.json()["memo"] == "approved"
        assert response.json()["title"] == "Week 1"

    def test_delete_is_soft(self, client: TestClient, created, store):
        response = client.delete(f"/projects/p1/schedules/{created['id']}")
        assert response.status_code == 200
        assert response.json() == {"id": created["id"], "deleted": True}
        assert client.get(f"/projects/p1/schedules/{created['id']}").status_code == 404
        assert client.get("/projects/p1/schedules").json() == []
        assert store._records["p1"][created["id"]].is_deleted is True

    def test_unknown_schedule(self, client: TestClient):
        response = client.get("/projects/p1/schedules/missing")
        assert response.status_code == 404
        assert "missing" in response.json()["detail"]


class TestBreakdownEndpoint:
    """Test the per-day breakdown."""

    def test_breakdown(self, client: TestClient, created):
        response = client.post(f"/projects/p1/schedules/{created['id']}/days/1/breakdown")
        assert response.status_code == 200
        data = response.json()
        assert data["day_number"] == 1
        assert data["actors"]["Kim"][0]["role"] == "Detective"
        assert data["meeting_points"][0]["time"] == "06:00"
        assert set(data["time_table"]) == {"day", "night"}

    def test_unknown_day(self, client: TestClient, created):
        response = client.post(f"/projects/p1/schedules/{created['id']}/days/5/breakdown")
        assert response.status_code == 404


def test_health(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
