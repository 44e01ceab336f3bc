"""Agent infrastructure module.

This module provides the core abstractions for running task agents:
- Agent, provider, context and observer protocols
- Configuration dataclasses
- Conversation history and message types
- Action dispatch strategies (native and tag-embedded tool calls)
- Tool base class and registry
- The TaskAgent orchestration loop
- LiteLLM provider and agent-specific metrics
"""

from mobclaw.platform.agent.config import AgentConfig, AgentIdentity, LlmConfig
from mobclaw.platform.agent.dispatch import (
    ActionDispatcher,
    NativeToolCallDispatcher,
    TaggedToolCallDispatcher,
    select_dispatcher,
)
from mobclaw.platform.agent.exceptions import (
    AgentBusyError,
    AgentError,
    DuplicateToolError,
    LlmProviderError,
)
from mobclaw.platform.agent.history import ConversationHistory
from mobclaw.platform.agent.llm_client import LlmClient
from mobclaw.platform.agent.loop import TaskAgent
from mobclaw.platform.agent.messages import (
    AgentResult,
    AssistantToolCalls,
    Chat,
    ChatMessage,
    ChatResponse,
    ConversationEntry,
    ToolCall,
    ToolCallRequest,
    ToolResult,
    ToolResultEntry,
    ToolResults,
    ToolSpec,
)
from mobclaw.platform.agent.observer import (
    CompositeObserver,
    LoggingObserver,
    MetricsObserver,
    NullObserver,
)
from mobclaw.platform.agent.protocol import (
    Agent,
    AgentObserver,
    ContextProvider,
    ContextSnapshot,
    LlmProvider,
)
from mobclaw.platform.agent.tools import FailTool, FinishTool, Tool, ToolRegistry

__all__ = [
    "Agent",
    "AgentObserver",
    "ContextProvider",
    "ContextSnapshot",
    "LlmProvider",
    "AgentConfig",
    "AgentIdentity",
    "LlmConfig",
    "ActionDispatcher",
    "NativeToolCallDispatcher",
    "TaggedToolCallDispatcher",
    "select_dispatcher",
    "AgentBusyError",
    "AgentError",
    "DuplicateToolError",
    "LlmProviderError",
    "ConversationHistory",
    "LlmClient",
    "TaskAgent",
    "AgentResult",
    "AssistantToolCalls",
    "Chat",
    "ChatMessage",
    "ChatResponse",
    "ConversationEntry",
    "ToolCall",
    "ToolCallRequest",
    "ToolResult",
    "ToolResultEntry",
    "ToolResults",
    "ToolSpec",
    "CompositeObserver",
    "LoggingObserver",
    "MetricsObserver",
    "NullObserver",
    "FailTool",
    "FinishTool",
    "Tool",
    "ToolRegistry",
]
