"""Device Agent HTTP endpoints.

One task runs at a time. A second submission while a task is running is
rejected with 409 instead of queueing.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from mobclaw.agents.device.agent import DeviceAgentBuilder
from mobclaw.platform.agent.exceptions import AgentBusyError
from mobclaw.platform.agent.protocol import Agent
from mobclaw.platform.server.dependencies.agents import get_agent

tasks_router = APIRouter(prefix="/tasks", tags=["agents"])


class TaskPayload(BaseModel):
    """Request payload for a device task.

    Attributes:
        task: Natural language description of what to do on the device
    """

    task: str = Field(..., min_length=1, max_length=10000, description="Task description")


class TaskResponse(BaseModel):
    success: bool
    message: str
    iterations_used: int
    elapsed_seconds: float


class CancelResponse(BaseModel):
    cancelled: bool


class StatusResponse(BaseModel):
    running: bool


@tasks_router.post("", response_model=TaskResponse)
async def run_task(
    payload: TaskPayload,
    agent: Agent = Depends(get_agent(DeviceAgentBuilder)),
) -> TaskResponse:
    """Run a task to completion and return its terminal result.

    Raises:
        HTTPException: 409 if a task is already running
    """
    try:
        result = await agent.execute(payload.task)
    except AgentBusyError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    return TaskResponse(**result.as_dict())


@tasks_router.post("/cancel", response_model=CancelResponse)
async def cancel_task(agent: Agent = Depends(get_agent(DeviceAgentBuilder))) -> CancelResponse:
    """Request cancellation of the running task.

    Returns cancelled=False when nothing is running.
    """
    if not agent.is_running:
        return CancelResponse(cancelled=False)
    agent.cancel()
    return CancelResponse(cancelled=True)


@tasks_router.get("/status", response_model=StatusResponse)
async def task_status(agent: Agent = Depends(get_agent(DeviceAgentBuilder))) -> StatusResponse:
    return StatusResponse(running=agent.is_running)
