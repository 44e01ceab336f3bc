"""Configuration dataclasses for agent components.

This module provides immutable configuration objects for LLM clients and
agent loop behavior.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class LlmConfig:
    """Configuration for language model clients.

    Attributes:
        model: Model identifier (e.g., "gemini/gemini-2.5-flash")
        api_key: API key for the LLM provider
        base_url: Base URL for the API (e.g., LiteLLM proxy URL)
        temperature: Default sampling temperature
        native_tools: Whether the model is driven through native function calling
        request_timeout: Network timeout for a single completion, in seconds
    """

    model: str
    api_key: str | None = None
    base_url: str | None = None
    temperature: float = 0.7
    native_tools: bool = True
    request_timeout: float = 120.0


@dataclass(frozen=True)
class AgentConfig:
    """Configuration for agent loop behavior.

    Attributes:
        max_iterations: Maximum loop iterations per task before stopping
        temperature: Sampling temperature for LLM calls
        model: Model override passed to the provider (None uses the provider default)
        action_settle_delay: Pause in seconds after a tool batch before re-reading context
        auto_context_refresh: Whether to re-read context after each non-terminal batch
        max_history_entries: Transcript size above which old entries are trimmed
    """

    max_iterations: int = 120
    temperature: float = 0.7
    model: str | None = None
    action_settle_delay: float = 0.3
    auto_context_refresh: bool = True
    max_history_entries: int = 40


@dataclass(frozen=True)
class AgentIdentity:
    """Identity information for an agent.

    Attributes:
        name: Human-readable display name for the agent
        description: Brief description of the agent's capabilities
        slug: URL-safe identifier, also used as the metrics label
    """

    name: str
    description: str
    slug: str
