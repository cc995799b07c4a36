import json
import logging

import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, MagicMock

from api.logging_config import JSONFormatter
from api.main import create_app
from database.exceptions import DatabaseError, DuplicateError, NotFoundError, PersistenceError
from models import Course, HoleData, HoleRecord, InsightRecord, Round
from services.exceptions import NoDataError, UpstreamError

ROUND_ID = "7a1f9a2e-3c4b-4d5e-8f60-718293a4b5c6"
PROFILE_ID = "0b6f3f44-9a1e-4e8e-9b0c-2f1d3c4b5a69"


@pytest.fixture
def pipeline():
    finalizer = MagicMock()
    for name in ("create_round", "complete_round", "abandon_round", "get_round_hole_data"):
        setattr(finalizer, name, AsyncMock())
    generator = MagicMock()
    generator.generate_insights = AsyncMock()
    generator.get_latest_insights = AsyncMock()
    return finalizer, generator


@pytest.fixture
def client(pipeline):
    finalizer, generator = pipeline
    app = create_app()
    # lifespan is not run; services are attached directly
    app.state.round_finalizer = finalizer
    app.state.insight_generator = generator
    app.state.db_manager = MagicMock()
    app.state.db_manager.courses = AsyncMock()
    return TestClient(app)


def _completed(gross=9, score=-63):
    return Round(id=ROUND_ID, profile_id=PROFILE_ID, is_complete=True, gross_shots=gross, score=score)


# ================================================================
# Rounds
# ================================================================

def test_complete_round(client, pipeline):
    finalizer, _ = pipeline
    finalizer.complete_round.return_value = _completed()

    body = {
        "holeData": {
            "1": {"par": 4, "shots": [{"type": "Tee Shot", "result": "On Target"}] * 4},
            "2": {"par": 5, "shots": [{"type": "Putts", "result": "On Target"}] * 5},
        },
        "totalHoles": 18,
    }
    resp = client.post(f"/api/rounds/{ROUND_ID}/complete", json=body)

    assert resp.status_code == 200
    assert resp.json()["score"] == -63
    round_id, hole_data, total_holes = finalizer.complete_round.await_args.args
    assert round_id == ROUND_ID
    assert set(hole_data) == {1, 2}
    assert isinstance(hole_data[1], HoleData)
    assert hole_data[2].shot_count == 5
    assert total_holes == 18


def test_complete_round_rejects_bad_shot(client, pipeline):
    body = {"holeData": {"1": {"shots": [{"type": "Drive", "result": "On Target"}]}}}
    assert client.post(f"/api/rounds/{ROUND_ID}/complete", json=body).status_code == 422


def test_complete_round_not_found(client, pipeline):
    finalizer, _ = pipeline
    finalizer.complete_round.side_effect = NotFoundError("Failed to fetch round information: missing")
    resp = client.post(f"/api/rounds/{ROUND_ID}/complete", json={"holeData": {}})
    assert resp.status_code == 404


def test_complete_round_hole_failure(client, pipeline):
    finalizer, _ = pipeline
    finalizer.complete_round.side_effect = PersistenceError("Failed to save data for hole 2: x", hole_number=2)
    resp = client.post(f"/api/rounds/{ROUND_ID}/complete", json={"holeData": {}})
    assert resp.status_code == 500
    assert "hole 2" in resp.json()["detail"]


def test_create_round(client, pipeline):
    finalizer, _ = pipeline
    finalizer.create_round.return_value = Round(id=ROUND_ID, profile_id=PROFILE_ID, course_id="c1")

    resp = client.post("/api/rounds", json={"profileId": PROFILE_ID, "courseId": "c1", "teeName": "White"})

    assert resp.status_code == 201
    assert resp.json()["is_complete"] is False
    finalizer.create_round.assert_awaited_once_with(PROFILE_ID, "c1", tee_id=None, tee_name="White")


def test_create_round_duplicate(client, pipeline):
    finalizer, _ = pipeline
    finalizer.create_round.side_effect = DuplicateError("exists")
    resp = client.post("/api/rounds", json={"profileId": PROFILE_ID, "courseId": "c1"})
    assert resp.status_code == 409


def test_abandon_round(client, pipeline):
    finalizer, _ = pipeline
    finalizer.abandon_round.return_value = True
    assert client.delete(f"/api/rounds/{ROUND_ID}").status_code == 204

    finalizer.abandon_round.return_value = False
    assert client.delete(f"/api/rounds/{ROUND_ID}").status_code == 404


def test_get_round_holes(client, pipeline):
    finalizer, _ = pipeline
    finalizer.get_round_hole_data.return_value = [
        HoleRecord(round_id=ROUND_ID, hole_number=1,
                   hole_data=HoleData(shots=[{"type": "Chip", "result": "On Target"}])),
    ]
    resp = client.get(f"/api/rounds/{ROUND_ID}/holes")

    assert resp.status_code == 200
    holes = resp.json()["holes"]
    assert holes[0]["hole_number"] == 1
    assert holes[0]["total_score"] == 1


# ================================================================
# Insights function
# ================================================================

FN_PATH = "/functions/v1/analyze-golf-performance"


def test_preflight(client):
    resp = client.options(FN_PATH, headers={
        "Origin": "https://app.example",
        "Access-Control-Request-Method": "POST",
    })
    assert resp.status_code == 204
    assert resp.headers["access-control-allow-origin"] == "*"
    assert "POST" in resp.headers["access-control-allow-methods"]


def test_generate_insights(client, pipeline):
    _, generator = pipeline
    result = MagicMock()
    result.to_wire.return_value = {"message": "Golf insights generated successfully", "insightsId": "i1"}
    generator.generate_insights.return_value = result

    resp = client.post(FN_PATH, json={"profileId": PROFILE_ID, "roundId": ROUND_ID})

    assert resp.status_code == 200
    assert resp.json()["insightsId"] == "i1"
    assert resp.headers["access-control-allow-origin"] == "*"
    generator.generate_insights.assert_awaited_once_with(PROFILE_ID, ROUND_ID)


def test_generate_insights_accepts_legacy_user_id(client, pipeline):
    _, generator = pipeline
    generator.generate_insights.return_value = MagicMock(to_wire=MagicMock(return_value={}))

    client.post(FN_PATH, json={"userId": PROFILE_ID})

    generator.generate_insights.assert_awaited_once_with(PROFILE_ID, None)


def test_generate_insights_without_identity(client, pipeline):
    _, generator = pipeline
    resp = client.post(FN_PATH, content=b"not json", headers={"Content-Type": "application/json"})

    assert resp.status_code == 500
    body = resp.json()
    assert body["error"] == "Unable to determine user ID. Please ensure you're logged in."
    assert "timestamp" in body
    generator.generate_insights.assert_not_awaited()


@pytest.mark.parametrize("error", [
    NoDataError("No completed rounds found. Please complete a round first."),
    UpstreamError("Insight model error: 529"),
])
def test_generate_insights_errors(client, pipeline, error):
    _, generator = pipeline
    generator.generate_insights.side_effect = error

    resp = client.post(FN_PATH, json={"profileId": PROFILE_ID})

    assert resp.status_code == 500
    assert resp.json()["error"] == str(error)
    assert resp.headers["access-control-allow-origin"] == "*"


def test_generate_insights_unexpected_error(client, pipeline):
    _, generator = pipeline
    generator.generate_insights.side_effect = KeyError("boom")

    resp = client.post(FN_PATH, json={"profileId": PROFILE_ID})

    assert resp.status_code == 500
    assert resp.json()["error"] == "Failed to generate insights"


def test_latest_insights(client, pipeline):
    _, generator = pipeline
    generator.get_latest_insights.return_value = InsightRecord(
        id="i1", profile_id=PROFILE_ID, insights={"summary": "s"}
    )
    resp = client.get(f"/api/insights/{PROFILE_ID}/latest")
    assert resp.status_code == 200
    assert resp.json()["insights"] == {"summary": "s"}

    generator.get_latest_insights.return_value = None
    assert client.get(f"/api/insights/{PROFILE_ID}/latest").status_code == 404


# ================================================================
# Logging
# ================================================================

def test_json_formatter_merges_event_fields():
    record = logging.LogRecord("services.round_finalizer", logging.INFO, __file__, 1,
                               "Round %s complete", ("r1",), None)
    record.extra_fields = {"event": "round_completed", "score": -63}

    out = json.loads(JSONFormatter().format(record))

    assert out["message"] == "Round r1 complete"
    assert out["level"] == "INFO"
    assert out["event"] == "round_completed"
    assert out["score"] == -63


def test_health_without_database(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "degraded", "database": False}


# ================================================================
# Courses
# ================================================================

def test_search_courses(client):
    db = client.app.state.db_manager
    db.courses.search_courses.return_value = [
        Course(id="c1", name="Old Course", par=72, holes=[{"number": n} for n in range(1, 19)]),
    ]
    resp = client.get("/api/courses", params={"name": "old"})

    assert resp.status_code == 200
    assert resp.json()[0]["total_holes"] == 18
    db.courses.search_courses.assert_awaited_once_with("old", limit=20)


def test_get_course_not_found(client):
    client.app.state.db_manager.courses.get_course.return_value = None
    assert client.get("/api/courses/c404").status_code == 404


def test_latest_insights_errors(client, pipeline):
    _, generator = pipeline
    generator.get_latest_insights.side_effect = ValueError("badly formed hexadecimal UUID string")
    assert client.get("/api/insights/not-a-uuid/latest").status_code == 404

    generator.get_latest_insights.side_effect = DatabaseError("Could not retrieve stored insights")
    resp = client.get(f"/api/insights/{PROFILE_ID}/latest")
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Could not retrieve stored insights"
