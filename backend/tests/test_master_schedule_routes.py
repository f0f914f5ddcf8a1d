"""
Endpoint tests for court assignment and master schedule routes

Structured results pass through unchanged; only missing records, rejected
block writes and refused publishes map to 404/400.
"""

from fastapi.testclient import TestClient
from sqlmodel import Session

from court_scheduler.models.encounter import Encounter
from tests.factories import (
    T0,
    create_block,
    create_court_group,
    create_courts,
    create_division,
    create_encounters,
    create_event,
)


def test_health(client: TestClient):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_division_court_assignment_endpoints(client: TestClient, session: Session):
    event = create_event(session)
    create_courts(session, event, 2)
    division = create_division(session, event)
    create_encounters(session, division, 3)

    response = client.get(f"/api/divisions/{division.id}/courts")
    assert response.status_code == 200
    assert response.json() == []

    response = client.post(
        f"/api/divisions/{division.id}/court-assignment/auto",
        json={"start_time": T0.isoformat(), "match_duration_minutes": 30},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["assigned_count"] == 3
    assert data["estimated_end_time"] == "2026-05-02T10:00:00"

    response = client.delete(f"/api/divisions/{division.id}/court-assignment")
    assert response.status_code == 200
    assert response.json()["cleared_count"] == 3

    # Soft failure passes through with 200
    response = client.post("/api/divisions/999/court-assignment/auto", json={})
    assert response.status_code == 200
    assert response.json() == {
        "success": False,
        "message": "Division not found",
        "assigned_count": 0,
        "courts_used": 0,
        "start_time": None,
        "estimated_end_time": None,
    }

    assert client.get("/api/divisions/999/courts").status_code == 404


def test_phase_endpoints_report_soft_failures(client: TestClient):
    response = client.post("/api/phases/999/court-assignment/auto")
    assert response.status_code == 200
    assert response.json()["message"] == "Phase not found"

    response = client.post("/api/phases/999/calculate-times")
    assert response.json()["success"] is False


def test_block_crud_endpoints(client: TestClient, session: Session):
    event = create_event(session)
    (court,) = create_courts(session, event, 1)
    division = create_division(session, event, "Mixed")

    response = client.post(
        f"/api/events/{event.id}/master-schedule/blocks",
        json={"division_id": division.id, "court_ids": [court.id], "start_time": T0.isoformat()},
    )
    assert response.status_code == 200
    block = response.json()["block"]
    assert block["block_label"] == "Mixed"
    assert block["end_time"] == "2026-05-02T11:00:00"

    response = client.get(f"/api/events/{event.id}/master-schedule")
    assert [b["id"] for b in response.json()] == [block["id"]]

    response = client.put(f"/api/master-schedule/blocks/{block['id']}", json={"notes": "center courts"})
    assert response.status_code == 200
    assert response.json()["block"]["notes"] == "center courts"

    response = client.put(
        f"/api/master-schedule/blocks/{block['id']}", json={"depends_on_block_id": block["id"]}
    )
    assert response.status_code == 400

    assert client.get(f"/api/master-schedule/blocks/{block['id']}").status_code == 200
    assert client.delete(f"/api/master-schedule/blocks/{block['id']}").status_code == 200
    assert client.get(f"/api/master-schedule/blocks/{block['id']}").status_code == 404
    assert client.put("/api/master-schedule/blocks/999", json={}).status_code == 404


def test_create_block_rejections(client: TestClient, session: Session):
    event = create_event(session)
    other = create_event(session, "Other Open")
    foreign = create_division(session, other)

    response = client.post(
        f"/api/events/{event.id}/master-schedule/blocks",
        json={"division_id": foreign.id, "start_time": T0.isoformat()},
    )
    assert response.status_code == 400

    response = client.post(
        f"/api/events/{event.id}/master-schedule/blocks",
        json={"division_id": foreign.id, "start_time": T0.isoformat(), "end_time": "2026-05-02T08:00:00"},
    )
    assert response.status_code == 422

    response = client.post("/api/events/999/master-schedule/blocks", json={"division_id": 1, "start_time": T0.isoformat()})
    assert response.status_code == 404


def test_auto_schedule_timeline_and_conflicts_endpoints(client: TestClient, session: Session):
    event = create_event(session)
    (court,) = create_courts(session, event, 1)
    division = create_division(session, event)
    create_encounters(session, division, 2)
    create_block(session, event, division, court_ids=[court.id])

    response = client.post(f"/api/events/{event.id}/master-schedule/auto-schedule", json={})
    assert response.status_code == 200
    data = response.json()
    assert data["blocks_processed"] == 1
    assert data["encounters_scheduled"] == 2

    response = client.get(f"/api/events/{event.id}/master-schedule/timeline")
    assert response.status_code == 200
    assert response.json()["courts"][0]["time_slots"][0]["end_time"] == "2026-05-02T09:40:00"

    response = client.get(f"/api/events/{event.id}/master-schedule/conflicts")
    assert response.status_code == 200
    assert response.json() == []

    response = client.get(f"/api/events/{event.id}/schedule/validate")
    assert response.status_code == 200
    assert response.json()["is_valid"] is True

    assert client.get("/api/events/999/master-schedule/timeline").status_code == 404
    assert client.get(f"/api/events/{event.id}/players/999/schedule").status_code == 404

    response = client.post("/api/events/999/master-schedule/auto-schedule")
    assert response.status_code == 200
    assert response.json()["success"] is False


def test_division_court_groups_endpoint(client: TestClient, session: Session):
    event = create_event(session)
    c1, c2 = create_courts(session, event, 2)
    division = create_division(session, event)
    group = create_court_group(session, event.id, [c2])

    response = client.put(f"/api/divisions/{division.id}/court-groups", json={"court_group_ids": [group.id, 999]})
    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Court groups assigned to division",
        "court_group_ids": [group.id],
        "skipped_group_ids": [999],
    }
    assert [c["id"] for c in client.get(f"/api/divisions/{division.id}/courts").json()] == [c2.id]

    assert client.put("/api/divisions/999/court-groups", json={}).status_code == 404


def test_publish_and_unpublish_endpoints(client: TestClient, session: Session):
    event = create_event(session)
    (court,) = create_courts(session, event, 1)
    division = create_division(session, event)
    for number in (1, 2):
        session.add(
            Encounter(
                event_id=event.id,
                division_id=division.id,
                encounter_number=number,
                tournament_court_id=court.id,
                estimated_start_time=T0,
                estimated_duration_minutes=30,
            )
        )
    session.commit()

    response = client.post(f"/api/events/{event.id}/schedule/publish")
    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "Cannot publish: 1 conflicts found"

    response = client.post(f"/api/events/{event.id}/schedule/publish", json={"validate_first": False})
    assert response.status_code == 200
    assert response.json()["published_at"] is not None
    assert client.get(f"/api/events/{event.id}/master-schedule/timeline").json()["is_schedule_published"] is True

    response = client.post(f"/api/events/{event.id}/schedule/unpublish")
    assert response.status_code == 200
    assert client.get(f"/api/events/{event.id}/master-schedule/timeline").json()["is_schedule_published"] is False

    assert client.post("/api/events/999/schedule/publish").status_code == 404
    assert client.post("/api/events/999/schedule/unpublish").status_code == 404
