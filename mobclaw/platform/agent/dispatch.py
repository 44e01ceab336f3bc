"""Action dispatch protocols.

A dispatcher bridges LLM responses and the tool registry without either side
knowing the other's wire format. Two strategies share one interface:

- NativeToolCallDispatcher: the provider returns structured tool calls and
  receives tool specs through its API.
- TaggedToolCallDispatcher: tool documentation is rendered into the system
  prompt and tool calls are embedded in the response text as
  <tool_call>{"name": ..., "arguments": {...}}</tool_call> blocks.

The strategy is chosen once, when the agent is built.
"""

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import replace
from typing import Any, assert_never

from mobclaw.platform.agent.messages import (
    AssistantToolCalls,
    Chat,
    ChatMessage,
    ChatResponse,
    ConversationEntry,
    ToolCallRequest,
    ToolResultEntry,
    ToolResults,
    ToolSpec,
)
from mobclaw.platform.agent.protocol import LlmProvider

logger = logging.getLogger(__name__)

TOOL_CALL_OPEN = "<tool_call>"
TOOL_CALL_CLOSE = "</tool_call>"
UNKNOWN_TOOL_CALL_ID = "unknown"
TOOL_RESULTS_HEADER = "[Tool results]"


def decode_arguments(raw: str | None) -> dict[str, Any]:
    """Decode a JSON argument payload, substituting an empty object on failure."""
    if not raw:
        return {}
    try:
        decoded = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        logger.warning("Unparseable tool arguments, using empty object: %.200s", raw)
        return {}
    if not isinstance(decoded, dict):
        return {}
    return decoded


def render_tool_result(result: ToolResultEntry) -> str:
    return f'<tool_result id="{result.tool_call_id}">\n{result.output}\n</tool_result>'


class ActionDispatcher(ABC):
    """Parses LLM responses into actions and formats results back into history."""

    @abstractmethod
    def parse_response(self, response: ChatResponse) -> tuple[str, list[ToolCallRequest]]:
        """Parse an LLM response into free text and a list of requested actions."""
        ...

    @abstractmethod
    def prompt_instructions(self, specs: Sequence[ToolSpec]) -> str:
        """Build the tool documentation appended to the system prompt."""
        ...

    @abstractmethod
    def should_send_tool_specs(self) -> bool:
        """Whether tool specs are passed to the provider API on every call."""
        ...

    @staticmethod
    def parse_structured(response: ChatResponse) -> list[ToolCallRequest]:
        """Map structured tool calls 1:1 into actions, in request order."""
        return [
            ToolCallRequest(
                name=tool_call.name,
                arguments=decode_arguments(tool_call.arguments),
                tool_call_id=tool_call.id,
            )
            for tool_call in response.tool_calls
        ]

    def format_results(self, results: Iterable[ToolResultEntry]) -> ToolResults:
        """Wrap one batch of executed results into a history entry."""
        return ToolResults(
            results=[
                replace(result, tool_call_id=result.tool_call_id or UNKNOWN_TOOL_CALL_ID)
                for result in results
            ]
        )

    def to_provider_messages(self, history: Iterable[ConversationEntry]) -> list[ChatMessage]:
        """Flatten the transcript into the role/content list a provider accepts.

        Tool-call structure is not re-serialized: the provider already received
        and answered it, so assistant tool-call turns degrade to their text and
        each result batch becomes a single user message.
        """
        messages: list[ChatMessage] = []
        for entry in history:
            match entry:
                case Chat():
                    messages.append(entry.message)
                case AssistantToolCalls():
                    messages.append(ChatMessage.assistant(entry.text or ""))
                case ToolResults():
                    content = "\n".join(render_tool_result(r) for r in entry.results)
                    messages.append(ChatMessage.user(f"{TOOL_RESULTS_HEADER}\n{content}"))
                case _:
                    assert_never(entry)
        return messages


class NativeToolCallDispatcher(ActionDispatcher):
    """Dispatcher for providers with native function calling."""

    def parse_response(self, response: ChatResponse) -> tuple[str, list[ToolCallRequest]]:
        return response.text_or_empty(), self.parse_structured(response)

    def prompt_instructions(self, specs: Sequence[ToolSpec]) -> str:
        lines = [
            "## Tool Use Protocol",
            "",
            "Tools are provided through function calling. Call them directly; "
            "you may call several tools in one turn.",
            "",
            "Available tools: " + ", ".join(f"`{spec.name}`" for spec in specs),
        ]
        return "\n".join(lines) + "\n"

    def should_send_tool_specs(self) -> bool:
        return True


class TaggedToolCallDispatcher(ActionDispatcher):
    """Dispatcher for providers without native function calling.

    Malformed tool-call fragments are skipped and scanning continues after
    their close tag. A close tag appearing inside a JSON string argument ends
    the fragment early; that fragment is then malformed and skipped.
    """

    def parse_response(self, response: ChatResponse) -> tuple[str, list[ToolCallRequest]]:
        # Some providers still return structured calls in tag mode; honor them.
        if response.has_tool_calls():
            return response.text_or_empty(), self.parse_structured(response)

        text = response.text_or_empty()
        calls: list[ToolCallRequest] = []
        text_parts: list[str] = []
        remaining = text

        while True:
            start = remaining.find(TOOL_CALL_OPEN)
            if start == -1:
                break

            before = remaining[:start].strip()
            if before:
                text_parts.append(before)

            end = remaining.find(TOOL_CALL_CLOSE, start)
            if end == -1:
                # Unclosed tag: stop scanning and drop the dangling fragment
                remaining = ""
                break

            inner = remaining[start + len(TOOL_CALL_OPEN) : end].strip()
            call = self._parse_fragment(inner)
            if call is not None:
                calls.append(call)

            remaining = remaining[end + len(TOOL_CALL_CLOSE) :]

        after = remaining.strip()
        if after:
            text_parts.append(after)

        return "\n".join(text_parts), calls

    @staticmethod
    def _parse_fragment(inner: str) -> ToolCallRequest | None:
        try:
            parsed = json.loads(inner)
        except json.JSONDecodeError:
            logger.debug("Skipping malformed tool call: %.200s", inner)
            return None
        if not isinstance(parsed, dict):
            return None

        name = parsed.get("name")
        if not isinstance(name, str) or not name:
            return None

        arguments = parsed.get("arguments")
        if not isinstance(arguments, dict):
            arguments = {}
        return ToolCallRequest(name=name, arguments=arguments)

    def prompt_instructions(self, specs: Sequence[ToolSpec]) -> str:
        lines = [
            "## Tool Use Protocol",
            "",
            f"To use a tool, wrap a JSON object in {TOOL_CALL_OPEN}{TOOL_CALL_CLOSE} tags:",
            "",
            TOOL_CALL_OPEN,
            '{"name": "tool_name", "arguments": {"param": "value"}}',
            TOOL_CALL_CLOSE,
            "",
            "You may use multiple tool calls in a single response.",
            "After tool execution, results appear in <tool_result> tags.",
            "Continue reasoning with the results until the task is complete.",
            "",
            "### Available Tools",
            "",
        ]
        for spec in specs:
            lines.append(f"- **{spec.name}**: {spec.description}")
            lines.append(f"  Parameters: `{json.dumps(spec.parameters)}`")
        return "\n".join(lines) + "\n"

    def should_send_tool_specs(self) -> bool:
        return False


def select_dispatcher(provider: LlmProvider) -> ActionDispatcher:
    """Pick the dispatch strategy matching the provider's capabilities."""
    if provider.supports_native_tools():
        return NativeToolCallDispatcher()
    return TaggedToolCallDispatcher()
