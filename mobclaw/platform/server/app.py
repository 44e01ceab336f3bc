"""FastAPI application factory and server configuration.

This module creates and configures the FastAPI application with all middleware,
routes, and lifecycle management.
"""

import asyncio
import logging
import os
import signal
from contextlib import asynccontextmanager

from fastapi import FastAPI
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from mobclaw.agents.device.agent import DeviceAgentBuilder
from mobclaw.agents.device.routes import tasks_router
from mobclaw.agents.device.session import DeviceSession, SnapshotDeviceSession
from mobclaw.platform.agent.protocol import LlmProvider
from mobclaw.platform.observability.errors import initialize_bugsnag
from mobclaw.platform.observability.logging import configure_logging
from mobclaw.platform.observability.metrics import prometheus_middleware
from mobclaw.platform.server.health import HealthCheck
from mobclaw.platform.server.middlewares import CorrelationIdMiddleware
from mobclaw.platform.server.routes import root as root_router
from mobclaw.platform.settings import Settings

DRAIN_SECONDS = 20


def lifespan_closure(
    settings: Settings,
    session: DeviceSession | None = None,
    provider: LlmProvider | None = None,
):
    @asynccontextmanager
    async def lifespan(app):
        """
        Use this to initialize all of the singleton dependencies and shared
        objects.  i.e. device session, agents, reporters, bugsnag, etc
        """
        configure_logging(settings.app_http.log_level, json_output=settings.json_logs)
        initialize_bugsnag(settings.bugsnag.api_key, settings.bugsnag.release_stage)

        app.state.settings = settings

        device_session = session or SnapshotDeviceSession(
            settings.device.snapshot_path,
            host_package=settings.device.host_package,
        )
        async with device_session:
            agent = DeviceAgentBuilder(
                agent_config=settings.agent.to_config(),
                llm_config=settings.litellm.to_config(settings.agent.temperature),
                session=device_session,
                provider=provider,
            ).build()
            app.state.agents = {DeviceAgentBuilder: agent}

            if settings.bugsnag.release_stage in ["production", "development"]:
                SignalHandler(app).register_signal_handler()

            HealthCheck.enable()
            try:
                yield
            finally:
                HealthCheck.disable()
                agent.cancel()

    return lifespan


def create_app(
    settings: Settings,
    session: DeviceSession | None = None,
    provider: LlmProvider | None = None,
):
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings instance
        session: Optional device session, defaults to a snapshot session from settings
        provider: Optional LLM provider replacing the LiteLLM client

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(lifespan=lifespan_closure(settings, session, provider))
    app.add_middleware(CorrelationIdMiddleware)
    app.middleware("http")(prometheus_middleware)
    if settings.opentelemetry.enabled:
        FastAPIInstrumentor.instrument_app(app, excluded_urls=settings.opentelemetry.excluded_urls)

    # Platform routes (health, info, metrics)
    app.include_router(root_router)

    # Agent routes
    app.include_router(tasks_router)

    return app


class SignalHandler:
    def __init__(self, app: FastAPI):
        self.app = app

    async def handle_exit(self):
        """
        Drain before stopping: fail the health check so the load balancer stops
        routing, cancel the running task, then give in-flight requests time to
        return. Lifespan shutdown runs only after the server stops accepting
        requests, which is too late for draining.
        """
        HealthCheck.disable()
        for agent in getattr(self.app.state, "agents", {}).values():
            agent.cancel()
        for _ in range(DRAIN_SECONDS):
            logging.info("Shutting down...")
            await asyncio.sleep(1)

        os.kill(os.getpid(), signal.SIGUSR1)

    def signal_handler(self):
        asyncio.create_task(self.handle_exit())

    def register_signal_handler(self) -> None:
        """
        Register signal handlers for the server
        """
        loop = asyncio.get_running_loop()
        for sig in [signal.SIGINT, signal.SIGTERM]:
            loop.add_signal_handler(sig, self.signal_handler)
