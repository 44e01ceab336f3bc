"""Agent protocol definitions.

This module defines the framework-agnostic protocols at the edges of the agent
loop: the agent itself, the LLM provider, the context (screen) provider and
the observer. Implementations are interchangeable behind these interfaces.
"""

from collections.abc import Awaitable, Callable, Sequence
from datetime import timedelta
from typing import Protocol, runtime_checkable

from mobclaw.platform.agent.config import AgentIdentity
from mobclaw.platform.agent.messages import AgentResult, ChatMessage, ChatResponse, ToolSpec

type CompletionHook = Callable[[], Awaitable[None]]


class Agent(Protocol):
    """Protocol for an agent."""

    @property
    def identity(self) -> AgentIdentity:
        """The identity of the agent."""
        ...

    @property
    def is_running(self) -> bool:
        """Whether a task is currently executing."""
        ...

    async def execute(self, task: str) -> AgentResult:
        """Execute a task described in natural language.

        Args:
            task: The user's natural language task description

        Returns:
            Terminal AgentResult for the task
        """
        ...

    def cancel(self) -> None:
        """Request cancellation of the running task. Safe to call from any caller."""
        ...


@runtime_checkable
class LlmProvider(Protocol):
    """LLM provider interface.

    Swap providers without changing agent logic.
    """

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        tools: Sequence[ToolSpec] | None = None,
        model: str | None = None,
        temperature: float = 0.7,
    ) -> ChatResponse:
        """Send a multi-turn conversation with optional tool definitions.

        Raises:
            LlmProviderError: On network, HTTP or empty-response failures
        """
        ...

    def supports_native_tools(self) -> bool:
        """Whether this provider supports native tool/function calling via its API."""
        ...


class ContextSnapshot(Protocol):
    """An observation of the environment the agent acts on."""

    @property
    def identifier(self) -> str:
        """Short identifier of what is observed (e.g. the foreground package)."""
        ...

    @property
    def size(self) -> int:
        """Number of observed elements."""
        ...

    def to_prompt_text(self) -> str:
        """Render the snapshot for the LLM context window."""
        ...


class ContextProvider(Protocol):
    """Best-effort source of context snapshots."""

    async def read(self) -> ContextSnapshot | None:
        """Read the current context, or None when it is unavailable."""
        ...


class AgentObserver(Protocol):
    """Observer for agent lifecycle events.

    Calls are fire-and-forget; the loop never lets an observer failure reach it.
    """

    def on_agent_start(self, task: str) -> None: ...

    def on_tool_call(self, tool_name: str, duration: timedelta, success: bool) -> None: ...

    def on_context_refresh(self, identifier: str, size: int) -> None: ...

    def on_agent_end(self, task: str, duration: timedelta, success: bool) -> None: ...

    def on_error(self, message: str, error: BaseException | None = None) -> None: ...
