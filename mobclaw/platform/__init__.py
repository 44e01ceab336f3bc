"""Platform infrastructure module.

This module provides the core infrastructure for running task agents:
- Agent protocols, the orchestration loop and tool registry
- LiteLLM provider integration
- FastAPI server configuration
- Observability utilities
"""

from mobclaw.platform.agent.config import (
    AgentConfig,
    AgentIdentity,
    LlmConfig,
)
from mobclaw.platform.agent.loop import TaskAgent
from mobclaw.platform.agent.messages import AgentResult, ChatMessage, ChatResponse, ToolCall
from mobclaw.platform.agent.protocol import Agent, LlmProvider
from mobclaw.platform.settings import Settings

__all__ = [
    # Core protocols
    "Agent",
    "LlmProvider",
    # Configuration
    "AgentConfig",
    "AgentIdentity",
    "LlmConfig",
    "Settings",
    # Loop
    "TaskAgent",
    # Message types
    "AgentResult",
    "ChatMessage",
    "ChatResponse",
    "ToolCall",
]
