"""LLM provider implementation using LiteLLM."""

import json
import logging
from collections.abc import Sequence
from typing import Any, Self

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_litellm import ChatLiteLLM

from mobclaw.platform.agent.config import LlmConfig
from mobclaw.platform.agent.exceptions import LlmProviderError
from mobclaw.platform.agent.messages import ChatMessage, ChatResponse, ToolCall, ToolSpec
from mobclaw.platform.agent.metrics import record_agent_tokens

logger = logging.getLogger(__name__)


def _field(obj: Any, key: str) -> Any:
    """Read a key from a dict or an attribute from an object."""
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


class LlmClient:
    """LLM provider that drives any LiteLLM-supported model through ChatLiteLLM.

    Provides the provider interface expected by the agent loop with:
    - Conversion between flat chat messages and LangChain messages
    - Native tool binding from ToolSpecs
    - Automatic token metrics recording
    - Provider failures normalized to LlmProviderError
    """

    def __init__(
        self,
        agent_slug: str,
        model_name: str,
        api_key: str | None,
        api_base: str | None,
        temperature: float,
        native_tools: bool = True,
        request_timeout: float = 120.0,
        llm: BaseChatModel | None = None,
    ):
        """Initialize the LLM client.

        Args:
            agent_slug: Agent slug used to label token metrics
            model_name: Default model identifier (e.g., "gemini/gemini-2.5-flash")
            api_key: API key for authentication
            api_base: Base URL for the LLM API or proxy
            temperature: Default sampling temperature
            native_tools: Whether the model is driven with native function calling
            request_timeout: Network timeout per request, in seconds
            llm: Optional pre-configured chat model (for tests)
        """
        self._agent_slug = agent_slug
        self._model_name = model_name
        self._api_key = api_key
        self._api_base = api_base
        self._temperature = temperature
        self._native_tools = native_tools
        self._request_timeout = request_timeout
        self._clients: dict[tuple[str, float], BaseChatModel] = {}
        if llm is not None:
            self._clients[(model_name, temperature)] = llm

    @classmethod
    def from_config(cls, agent_slug: str, config: LlmConfig) -> Self:
        return cls(
            agent_slug=agent_slug,
            model_name=config.model,
            api_key=config.api_key,
            api_base=config.base_url,
            temperature=config.temperature,
            native_tools=config.native_tools,
            request_timeout=config.request_timeout,
        )

    @property
    def model_name(self) -> str:
        """The default model name/identifier."""
        return self._model_name

    def supports_native_tools(self) -> bool:
        return self._native_tools

    def _client_for(self, model: str, temperature: float) -> BaseChatModel:
        key = (model, temperature)
        if key not in self._clients:
            self._clients[key] = ChatLiteLLM(
                model=model,
                api_key=self._api_key,
                api_base=self._api_base,
                temperature=temperature,
                request_timeout=self._request_timeout,
            )
        return self._clients[key]

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        tools: Sequence[ToolSpec] | None = None,
        model: str | None = None,
        temperature: float = 0.7,
    ) -> ChatResponse:
        """Send the conversation to the model and convert its reply.

        Args:
            messages: Flat conversation transcript
            tools: Tool specs to bind for native function calling
            model: Optional model override
            temperature: Sampling temperature

        Returns:
            ChatResponse with text and structured tool calls

        Raises:
            LlmProviderError: If the request fails for any reason
        """
        effective_model = model or self._model_name
        llm: Any = self._client_for(effective_model, temperature)
        if tools:
            llm = llm.bind_tools([spec.to_openai() for spec in tools])

        try:
            response = await llm.ainvoke(self.to_langchain_messages(messages))
        except Exception as e:
            raise LlmProviderError(
                f"LLM request failed: {e}",
                model=effective_model,
                status_code=getattr(e, "status_code", None),
            ) from e

        if not isinstance(response, AIMessage):
            raise LlmProviderError(
                f"Unexpected response type {type(response).__name__}",
                model=effective_model,
            )

        input_tokens, output_tokens = self.extract_tokens(response)
        record_agent_tokens(self._agent_slug, effective_model, input_tokens, output_tokens)
        return self.to_chat_response(response)

    @staticmethod
    def to_langchain_messages(messages: Sequence[ChatMessage]) -> list[BaseMessage]:
        """Convert flat chat messages to LangChain messages.

        Tool-role messages carry no call id at this level, so they are sent as
        user input.
        """
        converted: list[BaseMessage] = []
        for message in messages:
            if message.role == "system":
                converted.append(SystemMessage(content=message.content))
            elif message.role == "assistant":
                converted.append(AIMessage(content=message.content))
            else:
                converted.append(HumanMessage(content=message.content))
        return converted

    @classmethod
    def to_chat_response(cls, message: AIMessage) -> ChatResponse:
        """Convert a LangChain AIMessage into a ChatResponse.

        Prefers the raw provider tool calls, which keep request order and the
        original argument strings. Falls back to LangChain's parsed tool calls,
        re-encoding their arguments, followed by any invalid tool calls with
        their raw argument strings.
        """
        text = cls._extract_content(message) or None
        raw_calls = message.additional_kwargs.get("tool_calls") or []

        tool_calls: list[ToolCall] = []
        if raw_calls:
            for index, raw in enumerate(raw_calls):
                function = _field(raw, "function") or {}
                arguments = _field(function, "arguments")
                if not isinstance(arguments, str):
                    arguments = json.dumps(arguments or {})
                tool_calls.append(
                    ToolCall(
                        id=_field(raw, "id") or f"call_{index}",
                        name=_field(function, "name") or "",
                        arguments=arguments,
                    )
                )
            return ChatResponse(text=text, tool_calls=tool_calls)

        for index, call in enumerate(message.tool_calls):
            tool_calls.append(
                ToolCall(
                    id=call.get("id") or f"call_{index}",
                    name=call["name"],
                    arguments=json.dumps(call.get("args", {})),
                )
            )
        for index, invalid in enumerate(message.invalid_tool_calls, start=len(tool_calls)):
            logger.warning("Model returned an invalid tool call: %s", invalid.get("name"))
            tool_calls.append(
                ToolCall(
                    id=invalid.get("id") or f"call_{index}",
                    name=invalid.get("name") or "",
                    arguments=invalid.get("args") or "",
                )
            )
        return ChatResponse(text=text, tool_calls=tool_calls)

    @staticmethod
    def _extract_content(message: BaseMessage) -> str:
        content = message.content
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            text_parts = [p.get("text", "") if isinstance(p, dict) else str(p) for p in content]
            return "".join(text_parts)
        return str(content)

    @staticmethod
    def extract_tokens(message: AIMessage) -> tuple[int, int]:
        """Extract token counts from an AIMessage's usage metadata.

        Args:
            message: AIMessage from LLM response

        Returns:
            Tuple of (input_tokens, output_tokens), defaults to (0, 0) if unavailable
        """
        usage = getattr(message, "usage_metadata", None)
        if not usage:
            return 0, 0
        return usage.get("input_tokens", 0), usage.get("output_tokens", 0)
