"""Observers for agent lifecycle events.

Observers are injected into the agent as a side channel. The default is the
no-op NullObserver. LoggingObserver writes structured log lines and
MetricsObserver feeds the agent Prometheus metrics; CompositeObserver fans
events out to several observers, and GuardedObserver makes sure an observer
failure never reaches the loop.
"""

from collections.abc import Sequence
from datetime import timedelta

import structlog

from mobclaw.platform.agent.metrics import (
    AgentMetricsLabels,
    AgentRunOutcome,
    ToolMetricsLabels,
    record_agent_run,
    record_tool_call,
)
from mobclaw.platform.agent.protocol import AgentObserver

logger = structlog.get_logger(__name__)


def _ms(duration: timedelta) -> int:
    return int(duration.total_seconds() * 1000)


class NullObserver:
    """Observer that ignores every event."""

    def on_agent_start(self, task: str) -> None:
        pass

    def on_tool_call(self, tool_name: str, duration: timedelta, success: bool) -> None:
        pass

    def on_context_refresh(self, identifier: str, size: int) -> None:
        pass

    def on_agent_end(self, task: str, duration: timedelta, success: bool) -> None:
        pass

    def on_error(self, message: str, error: BaseException | None = None) -> None:
        pass


class LoggingObserver:
    """Observer that logs events through structlog."""

    def __init__(self, agent: str = "mobclaw") -> None:
        self._log = logger.bind(agent=agent)

    def on_agent_start(self, task: str) -> None:
        self._log.info("agent_started", task=task)

    def on_tool_call(self, tool_name: str, duration: timedelta, success: bool) -> None:
        self._log.debug("tool_completed", tool=tool_name, duration_ms=_ms(duration), success=success)

    def on_context_refresh(self, identifier: str, size: int) -> None:
        self._log.debug("context_refreshed", identifier=identifier, size=size)

    def on_agent_end(self, task: str, duration: timedelta, success: bool) -> None:
        self._log.info("agent_ended", task=task, duration_ms=_ms(duration), success=success)

    def on_error(self, message: str, error: BaseException | None = None) -> None:
        self._log.error("agent_error", message=message, error=str(error) if error else None)


class MetricsObserver:
    """Observer that records tool calls and task outcomes as Prometheus metrics."""

    def __init__(self, agent: str) -> None:
        self._agent = agent
        self._errored = False

    def on_agent_start(self, task: str) -> None:
        self._errored = False

    def on_tool_call(self, tool_name: str, duration: timedelta, success: bool) -> None:
        record_tool_call(
            ToolMetricsLabels(self._agent, tool_name),
            duration=duration.total_seconds(),
            error=not success,
        )

    def on_context_refresh(self, identifier: str, size: int) -> None:
        pass

    def on_agent_end(self, task: str, duration: timedelta, success: bool) -> None:
        if success:
            outcome = AgentRunOutcome.SUCCESS
        elif self._errored:
            outcome = AgentRunOutcome.ERROR
        else:
            outcome = AgentRunOutcome.FAILURE
        record_agent_run(AgentMetricsLabels(self._agent), outcome, duration.total_seconds())

    def on_error(self, message: str, error: BaseException | None = None) -> None:
        self._errored = True


class CompositeObserver:
    """Observer that forwards every event to each wrapped observer in order."""

    def __init__(self, observers: Sequence[AgentObserver]) -> None:
        self._observers = list(observers)

    def on_agent_start(self, task: str) -> None:
        for observer in self._observers:
            observer.on_agent_start(task)

    def on_tool_call(self, tool_name: str, duration: timedelta, success: bool) -> None:
        for observer in self._observers:
            observer.on_tool_call(tool_name, duration, success)

    def on_context_refresh(self, identifier: str, size: int) -> None:
        for observer in self._observers:
            observer.on_context_refresh(identifier, size)

    def on_agent_end(self, task: str, duration: timedelta, success: bool) -> None:
        for observer in self._observers:
            observer.on_agent_end(task, duration, success)

    def on_error(self, message: str, error: BaseException | None = None) -> None:
        for observer in self._observers:
            observer.on_error(message, error)


class GuardedObserver:
    """Wraps an observer so that its exceptions are logged instead of raised."""

    def __init__(self, observer: AgentObserver) -> None:
        self._observer = observer

    def _guard(self, event: str, call, *args) -> None:
        try:
            call(*args)
        except Exception:
            logger.exception("observer_failed", observer_event=event)

    def on_agent_start(self, task: str) -> None:
        self._guard("on_agent_start", self._observer.on_agent_start, task)

    def on_tool_call(self, tool_name: str, duration: timedelta, success: bool) -> None:
        self._guard("on_tool_call", self._observer.on_tool_call, tool_name, duration, success)

    def on_context_refresh(self, identifier: str, size: int) -> None:
        self._guard("on_context_refresh", self._observer.on_context_refresh, identifier, size)

    def on_agent_end(self, task: str, duration: timedelta, success: bool) -> None:
        self._guard("on_agent_end", self._observer.on_agent_end, task, duration, success)

    def on_error(self, message: str, error: BaseException | None = None) -> None:
        self._guard("on_error", self._observer.on_error, message, error)
