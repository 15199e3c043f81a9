"""
tests/test_handlers.py
HTTP API tests through FastAPI's TestClient.
"""

import inspect

import pytest
from fastapi.testclient import TestClient

from thoughtlog.app import create_app
from thoughtlog.handlers import get_registered_handlers


@pytest.fixture
def client(global_db):
    return TestClient(create_app())


def analyze(client, **body):
    body.setdefault("transcript", "Finish report")
    body.setdefault(
        "segments", [{"type": "todo", "text": "Finish report", "priority": "high"}]
    )
    return client.post("/api/logs/analyze", json=body).json()


class TestApp:

    def test_root_and_health(self, client):
        assert client.get("/").json()["status"] == "ok"
        assert client.get("/health").json() == {"status": "healthy"}

    def test_routes_registered(self):
        paths = {info["path"] for info in get_registered_handlers().values()}
        assert {
            "/logs/analyze",
            "/logs/extract",
            "/logs/get",
            "/logs/list",
            "/logs/delete",
            "/logs/pending",
            "/logs/reset-retries",
        } <= paths

    def test_log_handlers_are_sync(self):
        # Sync endpoints run in FastAPI's threadpool, off the event loop
        handlers = [
            info["func"] for info in get_registered_handlers().values() if info["module"] == "logs"
        ]
        assert handlers
        assert not any(inspect.iscoroutinefunction(func) for func in handlers)


class TestLogRoutes:

    def test_analyze(self, client):
        response = analyze(client, date="2024-06-01", audioPath="/a.wav")
        assert response["success"] is True
        data = response["data"]
        assert data["date"] == "2024-06-01"
        assert data["audioPath"] == "/a.wav"
        assert data["pendingAnalysis"] is False
        assert data["todos"][0]["priority"] == 1
        assert data["todos"][0]["logId"] == data["id"]

    def test_analyze_validation_failure(self, client, global_db):
        response = analyze(client, transcript="A" * 15000)
        assert response["success"] is False
        assert response["code"] == "VALIDATION_ERROR"
        assert global_db.count_logs() == 0

    def test_analyze_non_numeric_confidence(self, client, global_db):
        response = analyze(
            client, segments=[{"type": "todo", "text": "x", "confidence": "high"}]
        )
        assert response["success"] is False
        assert response["code"] == "VALIDATION_ERROR"
        assert global_db.count_logs() == 0

    def test_get(self, client):
        saved = analyze(client)["data"]
        response = client.post("/api/logs/get", json={"logId": saved["id"]}).json()
        assert response["success"] is True
        assert response["data"] == saved

    def test_get_missing(self, client):
        response = client.post("/api/logs/get", json={"logId": 999}).json()
        assert response["success"] is False
        assert response["code"] == "NOT_FOUND"

    def test_list(self, client):
        analyze(client, date="2024-01-01")
        analyze(client, date="2024-01-02")
        response = client.post("/api/logs/list", json={"limit": 1}).json()
        assert response["data"]["count"] == 1
        assert response["data"]["logs"][0]["date"] == "2024-01-02"

    def test_list_defaults(self, client):
        response = client.post("/api/logs/list", json={}).json()
        assert response["data"]["logs"] == []

    def test_list_rejects_bad_limit(self, client):
        assert client.post("/api/logs/list", json={"limit": 0}).status_code == 422

    def test_delete(self, client, global_db):
        saved = analyze(client)["data"]
        response = client.post("/api/logs/delete", json={"logId": saved["id"]}).json()
        assert response["success"] is True
        assert global_db.get_todos_by_log_id(saved["id"]) == []

        again = client.post("/api/logs/delete", json={"logId": saved["id"]}).json()
        assert again["success"] is False
        assert again["code"] == "NOT_FOUND"

    def test_extract(self, client, global_db):
        payload = {
            "segments": [
                {"type": "task", "text": "Call", "confidence": 85},
                {"type": "bogus", "text": "Skip me"},
            ]
        }
        response = client.post("/api/logs/extract", json={"payload": payload}).json()
        assert response["success"] is True
        data = response["data"]
        assert data["segments"][0]["type"] == "todo"
        assert data["segments"][0]["confidenceLevel"] == "high"
        assert data["stats"]["byType"]["todo"] == 1
        assert data["skipped"] == 1
        assert global_db.count_logs() == 0

    def test_extract_encoded_payload_error(self, client):
        response = client.post("/api/logs/extract", json={"payload": "{not json"}).json()
        assert response["success"] is False

    def test_extract_structure_error(self, client):
        response = client.post("/api/logs/extract", json={"payload": {"items": []}}).json()
        assert response["success"] is False

    def test_pending_and_reset(self, client, global_db):
        log = global_db.create_log("2024-01-01", transcript="t", pending_analysis=True)
        for _ in range(3):
            global_db.mark_log_as_pending(log.id, "offline")

        pending = client.post("/api/logs/pending").json()["data"]
        assert pending["pending"] == []
        assert [item["id"] for item in pending["exhausted"]] == [log.id]

        reset = client.post("/api/logs/reset-retries", json={"logId": log.id}).json()
        assert reset["data"]["retryCount"] == 0

        pending = client.post("/api/logs/pending").json()["data"]
        assert pending["pending"][0]["id"] == log.id
        assert pending["pending"][0]["nextDelay"] == 5.0

    def test_reset_missing(self, client):
        response = client.post("/api/logs/reset-retries", json={"logId": 404}).json()
        assert response["success"] is False
