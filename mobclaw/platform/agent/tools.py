"""Tool capability base class, registry, and the mandatory terminal tools.

Every tool is a separate implementation with a declared JSON parameter schema.
The LLM sees the tool specs and decides which to call at each turn.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any, Self

from mobclaw.platform.agent.exceptions import DuplicateToolError
from mobclaw.platform.agent.messages import ToolResult, ToolSpec

logger = logging.getLogger(__name__)

FINISH_TOOL_NAME = "finish"
FAIL_TOOL_NAME = "fail"
TERMINAL_TOOL_NAMES = frozenset({FINISH_TOOL_NAME, FAIL_TOOL_NAME})


class Tool(ABC):
    """Abstract base for all agent tools."""

    name: str
    description: str

    @abstractmethod
    def parameters_schema(self) -> dict[str, Any]:
        """Return the JSON schema object for this tool's arguments."""
        ...

    @abstractmethod
    async def execute(self, args: dict[str, Any]) -> ToolResult:
        """Execute the tool with the given arguments.

        Ordinary failures are reported with ToolResult(success=False). Raised
        exceptions are caught by the agent loop and converted to failed results.
        """
        ...

    def spec(self) -> ToolSpec:
        """Get the full spec for LLM registration."""
        return ToolSpec(
            name=self.name,
            description=self.description,
            parameters=self.parameters_schema(),
        )


def string_arg(args: dict[str, Any], key: str) -> str | None:
    """Read a scalar argument as text; None when missing or structured."""
    value = args.get(key)
    if value is None or isinstance(value, (dict, list)):
        return None
    return str(value)


class FinishTool(Tool):
    """Terminal tool: signals that the agent has completed the user's task."""

    name = FINISH_TOOL_NAME
    description = (
        "Signal that ALL parts of the user's task have been completed successfully. "
        "IMPORTANT: Only call this AFTER you have completed EVERY step the user requested "
        "and verified the results. If the user asked for multiple things (e.g. 'do X and "
        "then Y'), you must have done BOTH X and Y before calling finish."
    )

    def parameters_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "reason": {
                    "type": "string",
                    "description": "Explanation of what was accomplished",
                },
                "result": {
                    "type": "string",
                    "description": "Optional result text to return to the user",
                },
            },
            "required": ["reason"],
        }

    async def execute(self, args: dict[str, Any]) -> ToolResult:
        reason = string_arg(args, "reason") or "Task completed"
        result = string_arg(args, "result")

        output = f"TASK_COMPLETE: {reason}"
        if result is not None:
            output += f"\nResult: {result}"
        return ToolResult(success=True, output=output)


class FailTool(Tool):
    """Terminal tool: signals that the agent cannot complete the task."""

    name = FAIL_TOOL_NAME
    description = "Signal that the task cannot be completed. Provide a reason explaining why."

    def parameters_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "reason": {
                    "type": "string",
                    "description": "Explanation of why the task failed",
                },
            },
            "required": ["reason"],
        }

    async def execute(self, args: dict[str, Any]) -> ToolResult:
        reason = string_arg(args, "reason") or "Unknown failure"
        return ToolResult(success=False, output=f"TASK_FAILED: {reason}", error=reason)


class ToolRegistry:
    """Maps unique tool names to tool implementations.

    Built once per agent and read-only afterwards. The finish and fail terminal
    tools are always present.
    """

    def __init__(self, tools: Iterable[Tool] = ()) -> None:
        self._tools: dict[str, Tool] = {}
        for tool in tools:
            self.register(tool)
        self._ensure_terminal_tools()

    @classmethod
    def with_defaults(
        cls,
        defaults: Iterable[Tool],
        overrides: Iterable[Tool] = (),
    ) -> Self:
        """Build a registry from a default tool set plus caller overrides.

        An override replaces the default tool with the same name.

        Args:
            defaults: Default tool set
            overrides: Caller-supplied tools, added or replacing by name

        Returns:
            Registry containing the merged tool set
        """
        merged: dict[str, Tool] = {tool.name: tool for tool in defaults}
        for tool in overrides:
            if tool.name in merged:
                logger.debug("Overriding default tool: %s", tool.name)
            merged[tool.name] = tool
        return cls(merged.values())

    def _ensure_terminal_tools(self) -> None:
        if FINISH_TOOL_NAME not in self._tools:
            self._tools[FINISH_TOOL_NAME] = FinishTool()
        if FAIL_TOOL_NAME not in self._tools:
            self._tools[FAIL_TOOL_NAME] = FailTool()

    def register(self, tool: Tool) -> None:
        """Register a tool by its name.

        Raises:
            DuplicateToolError: If a tool with the same name is already registered
        """
        if tool.name in self._tools:
            raise DuplicateToolError(tool.name)
        self._tools[tool.name] = tool
        logger.debug("Registered tool: %s", tool.name)

    def find(self, name: str) -> Tool | None:
        """Return the tool registered under name, or None."""
        return self._tools.get(name)

    def all(self) -> list[Tool]:
        return list(self._tools.values())

    def names(self) -> list[str]:
        return list(self._tools.keys())

    def specs(self) -> list[ToolSpec]:
        """Return the specs of all registered tools, in registration order."""
        return [tool.spec() for tool in self._tools.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
