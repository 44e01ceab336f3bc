"""Integration tests for the task endpoints."""

from unittest.mock import Mock

from fastapi.testclient import TestClient

from mobclaw.platform.agent.exceptions import AgentBusyError


class TestRunTask:
    def test_returns_agent_result(self, client: TestClient, stub_agent: Mock):
        response = client.post("/tasks", json={"task": "turn on wifi"})

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "TASK_COMPLETE: done",
            "iterations_used": 2,
            "elapsed_seconds": 1.5,
        }
        stub_agent.execute.assert_awaited_once_with("turn on wifi")

    def test_busy_agent_returns_409(self, client: TestClient, stub_agent: Mock):
        stub_agent.execute.side_effect = AgentBusyError("another task")

        response = client.post("/tasks", json={"task": "turn on wifi"})

        assert response.status_code == 409
        assert "already running" in response.json()["detail"]

    def test_empty_task_rejected(self, client: TestClient, stub_agent: Mock):
        response = client.post("/tasks", json={"task": ""})

        assert response.status_code == 422
        stub_agent.execute.assert_not_called()

    def test_missing_task_rejected(self, client: TestClient):
        assert client.post("/tasks", json={}).status_code == 422


class TestCancelTask:
    def test_cancel_running_task(self, client: TestClient, stub_agent: Mock):
        stub_agent.is_running = True

        response = client.post("/tasks/cancel")

        assert response.status_code == 200
        assert response.json() == {"cancelled": True}
        stub_agent.cancel.assert_called_once_with()

    def test_cancel_when_idle(self, client: TestClient, stub_agent: Mock):
        response = client.post("/tasks/cancel")

        assert response.json() == {"cancelled": False}
        stub_agent.cancel.assert_not_called()


class TestTaskStatus:
    def test_idle(self, client: TestClient):
        assert client.get("/tasks/status").json() == {"running": False}

    def test_running(self, client: TestClient, stub_agent: Mock):
        stub_agent.is_running = True

        assert client.get("/tasks/status").json() == {"running": True}
