"""Unit tests for agent configuration dataclasses."""

import dataclasses

import pytest

from mobclaw.platform.agent.config import AgentConfig, AgentIdentity, LlmConfig


class TestAgentConfig:
    def test_defaults(self):
        config = AgentConfig()

        assert config.max_iterations == 120
        assert config.temperature == 0.7
        assert config.model is None
        assert config.action_settle_delay == 0.3
        assert config.auto_context_refresh is True
        assert config.max_history_entries == 40

    def test_is_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            AgentConfig().max_iterations = 5  # type: ignore


class TestLlmConfig:
    def test_defaults(self):
        config = LlmConfig(model="gemini/gemini-2.5-flash")

        assert config.native_tools is True
        assert config.request_timeout == 120.0


class TestAgentIdentity:
    def test_fields(self):
        identity = AgentIdentity(name="Device", description="d", slug="device")

        assert identity.slug == "device"
