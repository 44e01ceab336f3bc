"""Integration test fixtures.

This module provides shared fixtures for integration tests including:
- Route/handler tests with a stubbed agent (shallow app setup)
- Full application tests through create_app and its lifespan
"""

import logging
from collections.abc import Generator
from datetime import timedelta
from unittest.mock import AsyncMock, Mock

import pytest
import structlog
from fastapi import FastAPI
from fastapi.testclient import TestClient

from mobclaw.agents.device.agent import DeviceAgentBuilder
from mobclaw.agents.device.routes import tasks_router
from mobclaw.platform.agent.messages import AgentResult
from mobclaw.platform.server.health import HealthCheck
from mobclaw.platform.server.routes import root as root_router


@pytest.fixture(autouse=True)
def restore_logging() -> Generator[None]:
    """Undo the logging configuration applied by the app lifespan and the CLI."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
def stub_result() -> AgentResult:
    return AgentResult(
        success=True,
        message="TASK_COMPLETE: done",
        iterations_used=2,
        elapsed=timedelta(seconds=1.5),
    )


@pytest.fixture
def stub_agent(stub_result: AgentResult) -> Mock:
    """Create a stub agent with canned results."""
    agent = Mock()
    agent.execute = AsyncMock(return_value=stub_result)
    agent.is_running = False
    return agent


@pytest.fixture
def test_app(stub_agent: Mock) -> FastAPI:
    """Create a minimal test app without lifespan."""
    app = FastAPI()

    # Register stub agent directly in app.state
    app.state.agents = {DeviceAgentBuilder: stub_agent}

    app.include_router(root_router)
    app.include_router(tasks_router)

    return app


@pytest.fixture
def client(test_app: FastAPI) -> TestClient:
    """Create a test client for the test app.

    No context manager needed since we're not using lifespan.
    """
    return TestClient(test_app)


@pytest.fixture
def client_with_health_enabled(test_app: FastAPI) -> Generator[TestClient]:
    HealthCheck.enable()
    yield TestClient(test_app)
    HealthCheck.disable()


@pytest.fixture
def client_with_health_disabled(test_app: FastAPI) -> Generator[TestClient]:
    HealthCheck.disable()
    yield TestClient(test_app)
