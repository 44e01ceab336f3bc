"""Unit tests for agent metrics collection.

This module tests the metrics NamedTuples, helper functions, and context managers.
"""

import prometheus_client
import pytest

from mobclaw.platform.agent.metrics import (
    AgentMetricsLabels,
    AgentRunOutcome,
    ToolMetricsLabels,
    collect_agent_metrics,
    record_agent_iterations,
    record_agent_run,
    record_agent_tokens,
    record_tool_call,
)


def sample(name: str, **labels) -> float:
    return prometheus_client.REGISTRY.get_sample_value(name, labels) or 0.0


class TestLabels:
    def test_agent_labels(self):
        labels = AgentMetricsLabels(agent="my-agent")
        assert labels._fields == ("agent",)

    def test_tool_labels(self):
        labels = ToolMetricsLabels(agent="my-agent", tool_name="wait")
        assert labels.tool_name == "wait"

    def test_immutable(self):
        labels = AgentMetricsLabels(agent="test")
        with pytest.raises(AttributeError):
            labels.agent = "other"  # type: ignore


class TestRecordToolCall:
    def test_records_success_status(self):
        before = sample("agent_tool_calls_total", agent="m-tool", tool_name="t", status="success")

        record_tool_call(ToolMetricsLabels("m-tool", "t"), duration=0.5)

        after = sample("agent_tool_calls_total", agent="m-tool", tool_name="t", status="success")
        assert after == before + 1

    def test_records_error_status(self):
        before = sample("agent_tool_calls_total", agent="m-tool", tool_name="t", status="error")

        record_tool_call(ToolMetricsLabels("m-tool", "t"), duration=0.5, error=True)

        after = sample("agent_tool_calls_total", agent="m-tool", tool_name="t", status="error")
        assert after == before + 1


class TestRecordAgentRun:
    def test_counts_by_outcome(self):
        labels = AgentMetricsLabels("m-run")
        before = sample("agent_runs_total", agent="m-run", outcome="failure")

        record_agent_run(labels, AgentRunOutcome.FAILURE, 2.0)

        assert sample("agent_runs_total", agent="m-run", outcome="failure") == before + 1

    def test_iterations_histogram(self):
        labels = AgentMetricsLabels("m-iter")
        before = sample("agent_iterations_count", agent="m-iter")

        record_agent_iterations(labels, 7)

        assert sample("agent_iterations_count", agent="m-iter") == before + 1


class TestRecordAgentTokens:
    def test_records_both_directions(self):
        before_in = sample("agent_llm_tokens_total", agent="m-tok", model="m", direction="input")
        before_out = sample("agent_llm_tokens_total", agent="m-tok", model="m", direction="output")

        record_agent_tokens("m-tok", "m", input_tokens=100, output_tokens=20)

        assert sample("agent_llm_tokens_total", agent="m-tok", model="m", direction="input") == before_in + 100
        assert sample("agent_llm_tokens_total", agent="m-tok", model="m", direction="output") == before_out + 20

    def test_zero_counts_are_skipped(self):
        record_agent_tokens("m-zero", "m", input_tokens=0, output_tokens=0)

        assert prometheus_client.REGISTRY.get_sample_value(
            "agent_llm_tokens_total", {"agent": "m-zero", "model": "m", "direction": "input"}
        ) is None


class TestCollectAgentMetrics:
    async def test_success_records_nothing(self):
        labels = AgentMetricsLabels("m-ctx-ok")

        async with collect_agent_metrics(labels):
            pass

        assert sample("agent_runs_total", agent="m-ctx-ok", outcome="error") == 0

    async def test_exception_records_error(self):
        labels = AgentMetricsLabels("m-ctx-err")

        with pytest.raises(ValueError):
            async with collect_agent_metrics(labels):
                raise ValueError("boom")

        assert sample("agent_runs_total", agent="m-ctx-err", outcome="error") == 1
