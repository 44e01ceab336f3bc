"""Framework-agnostic message and result types.

These types are used across all implementations and define the common
vocabulary for agent execution: chat messages, tool calls and their results,
the conversation entries that make up a transcript, and the final result of
a task.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any


@dataclass(frozen=True)
class ChatMessage:
    """A single flat message as accepted by an LLM provider.

    Attributes:
        role: Message role ("system", "user", "assistant", "tool")
        content: Message text content
    """

    role: str
    content: str

    @classmethod
    def system(cls, content: str) -> "ChatMessage":
        return cls("system", content)

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls("user", content)

    @classmethod
    def assistant(cls, content: str) -> "ChatMessage":
        return cls("assistant", content)

    @classmethod
    def tool(cls, content: str) -> "ChatMessage":
        return cls("tool", content)


@dataclass(frozen=True)
class ToolCall:
    """Structured tool call as returned by a provider with native tool calling.

    Attributes:
        id: Provider-assigned call identifier
        name: Requested tool name
        arguments: Raw JSON-encoded arguments, exactly as the provider returned them
    """

    id: str
    name: str
    arguments: str


@dataclass(frozen=True)
class ChatResponse:
    """LLM response containing text and/or tool calls."""

    text: str | None = None
    tool_calls: list[ToolCall] = field(default_factory=list)

    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)

    def text_or_empty(self) -> str:
        return self.text or ""


@dataclass(frozen=True)
class ToolSpec:
    """Description of a tool for LLM function calling.

    Attributes:
        name: Unique tool name
        description: Human-readable description shown to the LLM
        parameters: JSON schema object for the tool arguments
    """

    name: str
    description: str
    parameters: dict[str, Any]

    def to_openai(self) -> dict[str, Any]:
        """Render as an OpenAI-style function tool definition."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


@dataclass(frozen=True)
class ToolResult:
    """Result of a single tool execution.

    Ordinary business failures are reported with success=False rather than raised.
    """

    success: bool
    output: str
    error: str | None = None


@dataclass(frozen=True)
class ToolCallRequest:
    """Parsed tool call, ready for execution.

    Attributes:
        name: Tool name to look up in the registry
        arguments: Decoded argument object
        tool_call_id: Originating call id; only set under native tool calling
    """

    name: str
    arguments: dict[str, Any]
    tool_call_id: str | None = None


@dataclass(frozen=True)
class ToolResultEntry:
    """Outcome of one executed action, keyed back to its call when possible."""

    name: str
    output: str
    success: bool
    tool_call_id: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class Chat:
    """A freestanding chat turn."""

    message: ChatMessage

    @property
    def is_system(self) -> bool:
        return self.message.role == "system"


@dataclass(frozen=True)
class AssistantToolCalls:
    """An assistant turn that requested zero or more tool invocations."""

    text: str | None
    tool_calls: list[ToolCall]


@dataclass(frozen=True)
class ToolResults:
    """The outcomes of one batch of tool executions.

    Every entry carries a call id; results without one get a placeholder.
    """

    results: list[ToolResultEntry]


type ConversationEntry = Chat | AssistantToolCalls | ToolResults


@dataclass(frozen=True)
class AgentResult:
    """Result of an agent task execution.

    Attributes:
        success: Whether the task finished through the `finish` terminal action
        message: Outcome text (tool output, error or stop reason)
        iterations_used: Number of loop iterations consumed
        elapsed: Wall-clock duration of the task
    """

    success: bool
    message: str
    iterations_used: int
    elapsed: timedelta

    def as_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "iterations_used": self.iterations_used,
            "elapsed_seconds": round(self.elapsed.total_seconds(), 3),
        }
