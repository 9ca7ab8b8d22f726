from __future__ import annotations

import random
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from carequest.api.deps import get_generation_orchestrator, get_sessions
from carequest.main import app
from carequest.services.quest_catalog import get_catalog
from carequest.services.session_service import CaregiverSessionService
from conftest import GUIDE_IMAGE, SUBJECT_DATA_URL, image_response, safety_response, text_response


@pytest.fixture()
def api(make_orchestrator):
    service = CaregiverSessionService(rng=random.Random(11))
    state = {}

    def use_outcomes(outcomes):
        orchestrator, transport = make_orchestrator(outcomes)
        state["orchestrator"] = orchestrator
        return transport

    app.dependency_overrides[get_sessions] = lambda: service
    app.dependency_overrides[get_generation_orchestrator] = lambda: state["orchestrator"]
    use_outcomes([])
    with TestClient(app) as test_client:
        yield test_client, use_outcomes
    app.dependency_overrides.clear()


def _create_session(client: TestClient) -> str:
    resp = client.post("/sessions", json={"subject_image": SUBJECT_DATA_URL, "timezone": "Europe/Amsterdam"})
    assert resp.status_code == 201
    return resp.json()["session_id"]


def test_quest_catalog_listing(api) -> None:
    client, _ = api
    resp = client.get("/quests")

    assert resp.status_code == 200
    assert [q["quest_id"] for q in resp.json()["quests"]] == [q.quest_id for q in get_catalog()]
    assert client.get("/quests/nope").status_code == 404


def test_malformed_subject_photo_rejected(api) -> None:
    client, _ = api
    resp = client.post("/sessions", json={"subject_image": "hello"})
    assert resp.status_code == 422

    resp = client.post("/sessions", json={"subject_image": SUBJECT_DATA_URL, "timezone": "Nowhere/City"})
    assert resp.status_code == 422


def test_activity_lifecycle(api) -> None:
    client, use_outcomes = api
    session_id = _create_session(client)
    use_outcomes([image_response()])

    preview = client.get(f"/sessions/{session_id}/next-quest")
    assert preview.status_code == 200
    assert preview.json()["quest"] is not None

    resp = client.post(f"/sessions/{session_id}/activities", json={})
    body = resp.json()
    assert resp.status_code == 200
    assert body["status"] == "done"
    assert body["image_url"] == GUIDE_IMAGE.to_data_url()
    assert body["error"] is None

    done = client.post(f"/sessions/{session_id}/complete")
    assert done.status_code == 200
    assert body["quest"]["quest_id"] in done.json()["completions"]

    reset = client.post(f"/sessions/{session_id}/reset")
    assert reset.json()["completions"] == {}


def test_generation_failure_is_typed_payload(api) -> None:
    client, use_outcomes = api
    session_id = _create_session(client)
    use_outcomes([safety_response()])

    resp = client.post(f"/sessions/{session_id}/activities", json={"quest_id": get_catalog()[0].quest_id})
    body = resp.json()

    assert resp.status_code == 200
    assert body["status"] == "error"
    assert body["error"]["kind"] == "safety_blocked"
    assert "SAFETY" not in body["error"]["message"]


def test_custom_activity_with_fallback(api) -> None:
    client, use_outcomes = api
    session_id = _create_session(client)
    transport = use_outcomes([text_response(), image_response()])

    resp = client.post(f"/sessions/{session_id}/activities/custom", json={"description": "Feed the cat"})
    body = resp.json()

    assert resp.status_code == 200
    assert body["status"] == "done"
    assert body["quest"]["quest_id"].startswith("custom-")
    assert len(transport.calls) == 2


def test_unknown_session_and_quest(api) -> None:
    client, use_outcomes = api
    missing = uuid4()
    assert client.get(f"/sessions/{missing}/next-quest").status_code == 404
    assert client.post(f"/sessions/{missing}/activities", json={}).status_code == 404
    assert client.delete(f"/sessions/{missing}").status_code == 404

    session_id = _create_session(client)
    assert client.post(f"/sessions/{session_id}/activities", json={"quest_id": "missing"}).status_code == 404
    assert client.post(f"/sessions/{session_id}/complete").status_code == 409
    assert client.delete(f"/sessions/{session_id}").status_code == 204


def test_request_id_header_roundtrip(api) -> None:
    client, _ = api
    resp = client.get("/quests", headers={"X-Request-Id": "req-42"})
    assert resp.headers["X-Request-Id"] == "req-42"
    assert resp.json()["request_id"] == "req-42"


def test_failed_or_repeated_completion_is_conflict(api) -> None:
    client, use_outcomes = api
    session_id = _create_session(client)
    use_outcomes([safety_response()])
    client.post(f"/sessions/{session_id}/activities", json={"quest_id": get_catalog()[0].quest_id})

    failed = client.post(f"/sessions/{session_id}/complete")
    assert failed.status_code == 409
    assert client.post(f"/sessions/{session_id}/reset").json()["completions"] == {}

    use_outcomes([image_response()])
    client.post(f"/sessions/{session_id}/activities", json={})
    assert client.post(f"/sessions/{session_id}/complete").status_code == 200
    assert client.post(f"/sessions/{session_id}/complete").status_code == 409
