"""Agent-specific Prometheus metrics.

Tracks task runs, loop iterations, tool calls and LLM token usage, labelled by
agent slug.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from time import monotonic
from typing import NamedTuple

import prometheus_client

from mobclaw.platform.observability.metrics import BUCKETS


class AgentMetricsLabels(NamedTuple):
    agent: str


class ToolMetricsLabels(NamedTuple):
    agent: str
    tool_name: str


class AgentRunOutcome:
    """Outcome label values for agent runs."""

    SUCCESS = "success"
    FAILURE = "failure"
    ERROR = "error"


agent_runs_total = prometheus_client.Counter(
    name="agent_runs_total",
    documentation="Agent task runs by outcome",
    labelnames=("agent", "outcome"),
)
agent_run_duration = prometheus_client.Histogram(
    name="agent_run_duration_seconds",
    documentation="Agent task duration (seconds)",
    labelnames=AgentMetricsLabels._fields,
    buckets=BUCKETS,
)
agent_iterations = prometheus_client.Histogram(
    name="agent_iterations",
    documentation="Loop iterations used per agent task",
    labelnames=AgentMetricsLabels._fields,
    buckets=(1, 2, 5, 10, 20, 50, 100, 200, float("inf")),
)
agent_tool_calls_total = prometheus_client.Counter(
    name="agent_tool_calls_total",
    documentation="Tool calls by tool and status",
    labelnames=(*ToolMetricsLabels._fields, "status"),
)
agent_tool_call_duration = prometheus_client.Histogram(
    name="agent_tool_call_duration_seconds",
    documentation="Tool call duration (seconds)",
    labelnames=ToolMetricsLabels._fields,
    buckets=BUCKETS,
)
agent_llm_tokens_total = prometheus_client.Counter(
    name="agent_llm_tokens_total",
    documentation="LLM tokens by model and direction",
    labelnames=("agent", "model", "direction"),
)


def record_tool_call(labels: ToolMetricsLabels, duration: float, error: bool = False) -> None:
    """Record one tool call.

    Args:
        labels: Agent and tool labels
        duration: Call duration in seconds
        error: Whether the call failed
    """
    status = "error" if error else "success"
    agent_tool_calls_total.labels(*labels, status).inc()
    agent_tool_call_duration.labels(*labels).observe(duration)


def record_agent_run(labels: AgentMetricsLabels, outcome: str, duration: float) -> None:
    """Record one finished agent task.

    Args:
        labels: Agent labels
        outcome: One of AgentRunOutcome values
        duration: Task duration in seconds
    """
    agent_runs_total.labels(labels.agent, outcome).inc()
    agent_run_duration.labels(*labels).observe(duration)


def record_agent_iterations(labels: AgentMetricsLabels, iterations: int) -> None:
    agent_iterations.labels(*labels).observe(iterations)


def record_agent_tokens(agent: str, model: str, input_tokens: int, output_tokens: int) -> None:
    """Record token usage for one LLM call. Zero counts are skipped."""
    if input_tokens > 0:
        agent_llm_tokens_total.labels(agent, model, "input").inc(input_tokens)
    if output_tokens > 0:
        agent_llm_tokens_total.labels(agent, model, "output").inc(output_tokens)


@asynccontextmanager
async def collect_agent_metrics(labels: AgentMetricsLabels) -> AsyncIterator[None]:
    """Time an agent run and count it as an error if it raises.

    Successful and failed outcomes are recorded by the caller through
    record_agent_run, since they depend on the result rather than on raising.
    """
    start_time = monotonic()
    try:
        yield
    except BaseException:
        record_agent_run(labels, AgentRunOutcome.ERROR, monotonic() - start_time)
        raise
