"""Device tools available to the agent.

Every tool acts through the DeviceSession it is constructed with. Argument
errors and rejected actions are reported as failed results for the LLM.
"""

import asyncio
import math
from typing import Any

from mobclaw.agents.device.session import SCROLL_DIRECTIONS, SYSTEM_ACTIONS, DeviceSession
from mobclaw.platform.agent.messages import ToolResult
from mobclaw.platform.agent.tools import Tool, string_arg

MIN_WAIT_MS = 100
MAX_WAIT_MS = 5000

NODE_ID_SCHEMA = {"type": "string", "description": "The node ID (e.g. 'n3') from the screen state"}


def _missing(key: str) -> ToolResult:
    return ToolResult(success=False, output="", error=f"Missing required parameter: {key}")


def _failed(message: str) -> ToolResult:
    return ToolResult(success=False, output="", error=message)


def _coordinate(args: dict[str, Any], key: str) -> float | None:
    raw = args.get(key)
    if isinstance(raw, bool):
        return None
    try:
        value = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


class ScreenReadTool(Tool):
    """Read the current screen from the device session."""

    name = "screen_read"
    description = (
        "Read the current screen state. Returns all visible interactive UI elements "
        "with their IDs, text, and properties. Call this after performing an action "
        "to see the updated screen."
    )

    def __init__(self, session: DeviceSession) -> None:
        self._session = session

    def parameters_schema(self) -> dict[str, Any]:
        return {"type": "object", "properties": {}}

    async def execute(self, args: dict[str, Any]) -> ToolResult:
        state = await self._session.read_screen()
        if state is None:
            return ToolResult(
                success=False,
                output="",
                error="Device session is not connected. Screen cannot be read.",
            )
        return ToolResult(success=True, output=state.to_prompt_text())


class WaitTool(Tool):
    """Pause to let UI transitions settle."""

    name = "wait"
    description = (
        "Wait for a specified number of milliseconds to allow UI transitions, loading, "
        "or animations to complete before reading the screen again."
    )

    def parameters_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "milliseconds": {
                    "type": "integer",
                    "description": f"Duration to wait in milliseconds ({MIN_WAIT_MS}-{MAX_WAIT_MS})",
                },
            },
            "required": ["milliseconds"],
        }

    async def execute(self, args: dict[str, Any]) -> ToolResult:
        raw = args.get("milliseconds")
        try:
            if isinstance(raw, bool):
                raise TypeError("boolean duration")
            ms = int(raw)  # type: ignore[arg-type]
        except (TypeError, ValueError, OverflowError):
            return ToolResult(
                success=False, output="", error="Missing or invalid parameter: milliseconds"
            )

        clamped = max(MIN_WAIT_MS, min(ms, MAX_WAIT_MS))
        await asyncio.sleep(clamped / 1000)
        return ToolResult(success=True, output=f"Waited {clamped}ms")


class ClickTool(Tool):
    name = "click"
    description = "Click on a UI element identified by its node ID from the screen state."

    def __init__(self, session: DeviceSession) -> None:
        self._session = session

    def parameters_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {"node_id": dict(NODE_ID_SCHEMA)},
            "required": ["node_id"],
        }

    async def execute(self, args: dict[str, Any]) -> ToolResult:
        node_id = string_arg(args, "node_id")
        if node_id is None:
            return _missing("node_id")
        if not await self._session.click(node_id):
            return _failed(f"Failed to click node {node_id}")
        return ToolResult(success=True, output=f"Clicked node {node_id} successfully")


class LongClickTool(Tool):
    name = "long_click"
    description = (
        "Long-click (press and hold) on a UI element. Used for context menus, text selection, "
        "drag operations, or edit modes."
    )

    def __init__(self, session: DeviceSession) -> None:
        self._session = session

    def parameters_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {"node_id": dict(NODE_ID_SCHEMA)},
            "required": ["node_id"],
        }

    async def execute(self, args: dict[str, Any]) -> ToolResult:
        node_id = string_arg(args, "node_id")
        if node_id is None:
            return _missing("node_id")
        if not await self._session.long_click(node_id):
            return _failed(f"Failed to long-click node {node_id}")
        return ToolResult(success=True, output=f"Long-clicked node {node_id} successfully")


class TapTool(Tool):
    name = "tap"
    description = (
        "Tap at specific screen coordinates (x, y). Use when you need to interact with "
        "elements not identifiable by node ID."
    )

    def __init__(self, session: DeviceSession) -> None:
        self._session = session

    def parameters_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "x": {"type": "number", "description": "X coordinate in screen pixels"},
                "y": {"type": "number", "description": "Y coordinate in screen pixels"},
            },
            "required": ["x", "y"],
        }

    async def execute(self, args: dict[str, Any]) -> ToolResult:
        x = _coordinate(args, "x")
        if x is None:
            return _failed("Missing or invalid parameter: x")
        y = _coordinate(args, "y")
        if y is None:
            return _failed("Missing or invalid parameter: y")
        if not await self._session.tap(x, y):
            return _failed(f"Failed to tap at ({x}, {y})")
        return ToolResult(success=True, output=f"Tapped at ({x}, {y}) successfully")


class InputTextTool(Tool):
    name = "input_text"
    description = "Type text into an editable field identified by its node ID."

    def __init__(self, session: DeviceSession) -> None:
        self._session = session

    def parameters_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "node_id": {
                    "type": "string",
                    "description": "The node ID of the editable field (e.g. 'n5')",
                },
                "text": {"type": "string", "description": "The text to type"},
            },
            "required": ["node_id", "text"],
        }

    async def execute(self, args: dict[str, Any]) -> ToolResult:
        node_id = string_arg(args, "node_id")
        if node_id is None:
            return _missing("node_id")
        text = string_arg(args, "text")
        if text is None:
            return _missing("text")
        if not await self._session.input_text(node_id, text):
            return _failed(f"Failed to type into node {node_id}")
        return ToolResult(success=True, output=f"Typed '{text}' into node {node_id}")


class ScrollTool(Tool):
    name = "scroll"
    description = "Scroll the screen in a direction: up, down, left, or right."

    def __init__(self, session: DeviceSession) -> None:
        self._session = session

    def parameters_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "direction": {
                    "type": "string",
                    "enum": list(SCROLL_DIRECTIONS),
                    "description": "Direction to scroll",
                },
            },
            "required": ["direction"],
        }

    async def execute(self, args: dict[str, Any]) -> ToolResult:
        direction = string_arg(args, "direction")
        if direction is None:
            return _missing("direction")
        if not await self._session.scroll(direction):
            return _failed(f"Failed to scroll {direction}")
        return ToolResult(success=True, output=f"Scrolled {direction} successfully")


class SystemActionTool(Tool):
    name = "system_action"
    description = (
        "Perform a global system action: back, home, recents, notifications, "
        "quick_settings, power_dialog."
    )

    def __init__(self, session: DeviceSession) -> None:
        self._session = session

    def parameters_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "action": {
                    "type": "string",
                    "enum": list(SYSTEM_ACTIONS),
                    "description": "The system action to perform",
                },
            },
            "required": ["action"],
        }

    async def execute(self, args: dict[str, Any]) -> ToolResult:
        action = string_arg(args, "action")
        if action is None:
            return _missing("action")
        if not await self._session.system_action(action):
            return _failed(f"Failed to perform system action: {action}")
        return ToolResult(success=True, output=f"Performed system action: {action}")


class OpenAppTool(Tool):
    name = "open_app"
    description = (
        "Open an app by its package name (e.g. 'com.android.settings'). Use `list_apps` "
        "first to find the package name if you don't know it."
    )

    def __init__(self, session: DeviceSession) -> None:
        self._session = session

    def parameters_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "package_name": {
                    "type": "string",
                    "description": (
                        "The package name of the app (e.g. 'com.android.settings', 'com.android.chrome')"
                    ),
                },
            },
            "required": ["package_name"],
        }

    async def execute(self, args: dict[str, Any]) -> ToolResult:
        package_name = string_arg(args, "package_name")
        if package_name is None:
            return _missing("package_name")
        if not await self._session.launch_app(package_name):
            return _failed(f"App not found or not launchable: {package_name}")
        return ToolResult(
            success=True,
            output=f"Opened app: {package_name}. Wait for it to load, then read the screen.",
        )


class ListAppsTool(Tool):
    name = "list_apps"
    description = (
        "List all installed apps on the device. Returns app names and their package names. "
        "Use this to find the correct package name before opening an app."
    )

    def __init__(self, session: DeviceSession) -> None:
        self._session = session

    def parameters_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "filter": {
                    "type": "string",
                    "description": (
                        "Optional keyword to filter apps by name (case-insensitive). "
                        "Leave empty to list all apps."
                    ),
                },
            },
        }

    async def execute(self, args: dict[str, Any]) -> ToolResult:
        apps = await self._session.list_apps()
        if apps is None:
            return _failed("Device session is not connected. Apps cannot be listed.")

        keyword = (string_arg(args, "filter") or "").strip().lower()
        if keyword:
            apps = [
                app
                for app in apps
                if keyword in app.label.lower() or keyword in app.package_name.lower()
            ]
        if not apps:
            return ToolResult(success=True, output=f"No apps found matching filter '{keyword}'")

        lines = [f"Found {len(apps)} apps:"]
        lines.extend(f"  {app.label} -> {app.package_name}" for app in apps)
        return ToolResult(success=True, output="\n".join(lines) + "\n")
