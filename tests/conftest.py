"""Shared test fixtures.

This module provides stub collaborators for the agent loop:
- A scripted LLM provider that replays canned responses
- Simple tools (echo, raising)
- A recording observer
- Screen snapshots and a static context provider
"""

import json
from collections.abc import Callable, Sequence
from datetime import timedelta
from pathlib import Path
from typing import Any

import pytest

from mobclaw.agents.device.screen import ScreenState
from mobclaw.platform.agent.config import AgentConfig, AgentIdentity
from mobclaw.platform.agent.messages import ChatMessage, ChatResponse, ToolCall, ToolResult, ToolSpec
from mobclaw.platform.agent.tools import Tool

# =============================================================================
# Provider
# =============================================================================


class ScriptedProvider:
    """LLM provider that returns canned responses in order.

    Each script item is a ChatResponse, an exception to raise, or a callable
    receiving the messages and returning either. The last item repeats once
    the script is exhausted.
    """

    def __init__(self, script: Sequence[Any], native_tools: bool = True) -> None:
        self._script = list(script)
        self._native_tools = native_tools
        self.calls: list[dict[str, Any]] = []

    def supports_native_tools(self) -> bool:
        return self._native_tools

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        tools: Sequence[ToolSpec] | None = None,
        model: str | None = None,
        temperature: float = 0.7,
    ) -> ChatResponse:
        self.calls.append(
            {"messages": list(messages), "tools": tools, "model": model, "temperature": temperature}
        )
        index = min(len(self.calls) - 1, len(self._script) - 1)
        item = self._script[index]
        if callable(item) and not isinstance(item, ChatResponse):
            item = item(messages)
        if isinstance(item, BaseException):
            raise item
        return item


def tool_response(
    name: str,
    arguments: dict[str, Any] | None = None,
    call_id: str = "call_1",
    text: str | None = None,
) -> ChatResponse:
    """Build a native response with a single tool call."""
    return ChatResponse(
        text=text,
        tool_calls=[ToolCall(id=call_id, name=name, arguments=json.dumps(arguments or {}))],
    )


# =============================================================================
# Tools
# =============================================================================


class EchoTool(Tool):
    name = "echo"
    description = "Echo the given text"

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    def parameters_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {"text": {"type": "string"}},
            "required": ["text"],
        }

    async def execute(self, args: dict[str, Any]) -> ToolResult:
        self.calls.append(args)
        return ToolResult(success=True, output=f"echo: {args.get('text', '')}")


class RaisingTool(Tool):
    name = "explode"
    description = "Always raises"

    def parameters_schema(self) -> dict[str, Any]:
        return {"type": "object", "properties": {}}

    async def execute(self, args: dict[str, Any]) -> ToolResult:
        raise RuntimeError("kaboom")


# =============================================================================
# Observer and context
# =============================================================================


class RecordingObserver:
    def __init__(self) -> None:
        self.events: list[tuple] = []

    def on_agent_start(self, task: str) -> None:
        self.events.append(("start", task))

    def on_tool_call(self, tool_name: str, duration: timedelta, success: bool) -> None:
        self.events.append(("tool", tool_name, success))

    def on_context_refresh(self, identifier: str, size: int) -> None:
        self.events.append(("refresh", identifier, size))

    def on_agent_end(self, task: str, duration: timedelta, success: bool) -> None:
        self.events.append(("end", task, success))

    def on_error(self, message: str, error: BaseException | None = None) -> None:
        self.events.append(("error", message))

    def names(self) -> list[str]:
        return [event[0] for event in self.events]


class StaticContextProvider:
    def __init__(self, snapshot: ScreenState | None) -> None:
        self.snapshot = snapshot
        self.reads = 0

    async def read(self) -> ScreenState | None:
        self.reads += 1
        return self.snapshot


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def screen_data() -> dict[str, Any]:
    """Canned screen snapshot in the JSON format read by the snapshot session."""
    return {
        "package_name": "com.android.settings",
        "activity_name": ".Settings",
        "nodes": [
            {
                "id": "n0",
                "class_name": "FrameLayout",
                "bounds": {"left": 0, "top": 0, "right": 1080, "bottom": 2400},
            },
            {
                "id": "n1",
                "class_name": "TextView",
                "resource_id": "com.android.settings:id/title",
                "text": "Network & internet",
                "clickable": True,
                "bounds": [0, 200, 1080, 320],
                "depth": 1,
            },
            {
                "id": "n2",
                "class_name": "Switch",
                "content_description": "Wi-Fi",
                "checkable": True,
                "checked": False,
                "bounds": [900, 200, 1040, 320],
                "depth": 2,
            },
            {
                "id": "n3",
                "class_name": "TextView",
                "text": "Hidden",
                "visible": False,
                "bounds": [0, 0, 0, 0],
            },
        ],
    }


@pytest.fixture
def screen_state(screen_data: dict[str, Any]) -> ScreenState:
    return ScreenState.from_dict(screen_data)


@pytest.fixture
def snapshot_file(tmp_path: Path, screen_data: dict[str, Any]) -> Path:
    path = tmp_path / "screen.json"
    path.write_text(json.dumps(screen_data), encoding="utf-8")
    return path


@pytest.fixture
def stub_identity() -> AgentIdentity:
    return AgentIdentity(name="Test Agent", description="A test agent", slug="test-agent")


@pytest.fixture
def fast_config() -> AgentConfig:
    """Agent config without settle delay."""
    return AgentConfig(max_iterations=10, action_settle_delay=0)


@pytest.fixture
def make_provider() -> Callable[..., ScriptedProvider]:
    return ScriptedProvider


@pytest.fixture
def respond_with_tool() -> Callable[..., ChatResponse]:
    return tool_response


@pytest.fixture
def echo_tool() -> EchoTool:
    return EchoTool()


@pytest.fixture
def raising_tool() -> RaisingTool:
    return RaisingTool()


@pytest.fixture
def recording_observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def context_provider(screen_state: ScreenState) -> StaticContextProvider:
    return StaticContextProvider(screen_state)
