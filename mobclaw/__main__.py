"""Entry point when the package is executed as a module."""

import asyncio
import dataclasses
import json
import sys

import click
import uvicorn

from .agents.device.agent import DeviceAgentBuilder
from .agents.device.session import SnapshotDeviceSession
from .platform.agent.messages import AgentResult
from .platform.observability.errors import initialize_bugsnag
from .platform.observability.logging import configure_logging
from .platform.settings import Settings


@click.group()
def main():
    """MobClaw task agent."""


@main.command()
@click.option("--reload", is_flag=True)
def serve(reload=False):
    """Run the HTTP service."""
    kwargs = {"reload": reload}

    settings = Settings()

    uvicorn.run(
        "mobclaw:app",
        loop="uvloop",
        factory=True,
        host=settings.app_http.host,
        port=settings.app_http.port,
        log_level=settings.app_http.log_level.lower(),
        **kwargs,
    )


@main.command()
@click.argument("task")
@click.option("--snapshot", type=click.Path(exists=True, dir_okay=False), help="JSON screen snapshot")
@click.option("--max-iterations", type=click.IntRange(min=1), help="Iteration budget for the task")
@click.option("--model", help="LiteLLM model identifier")
def run(task, snapshot=None, max_iterations=None, model=None):
    """Run a single TASK and print its result."""
    settings = Settings()
    configure_logging(settings.app_http.log_level, json_output=settings.json_logs)
    initialize_bugsnag(settings.bugsnag.api_key, settings.bugsnag.release_stage)

    result = asyncio.run(_run_task(settings, task, snapshot, max_iterations, model))

    click.echo(json.dumps(result.as_dict(), indent=2))
    sys.exit(0 if result.success else 1)


async def _run_task(
    settings: Settings,
    task: str,
    snapshot: str | None,
    max_iterations: int | None,
    model: str | None,
) -> AgentResult:
    agent_config = settings.agent.to_config()
    if max_iterations is not None:
        agent_config = dataclasses.replace(agent_config, max_iterations=max_iterations)

    litellm_settings = settings.litellm
    if model is not None:
        litellm_settings = litellm_settings.model_copy(update={"model": model})

    session = SnapshotDeviceSession(
        snapshot or settings.device.snapshot_path,
        host_package=settings.device.host_package,
    )
    async with session:
        agent = DeviceAgentBuilder(
            agent_config=agent_config,
            llm_config=litellm_settings.to_config(agent_config.temperature),
            session=session,
        ).build()
        return await agent.execute(task)


if __name__ == "__main__":
    main()
