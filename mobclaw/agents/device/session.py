"""Device session handles.

A DeviceSession is the agent's connection to a device. The agent reads the
screen through it, acts on UI nodes and global controls, launches apps and,
after a finished task, brings the host app back to the foreground. Sessions
are async context managers: entering opens the connection and exiting always
closes it.

Action methods return False when the device rejects the action or the
session is not connected; they do not raise for ordinary failures.
"""

import asyncio
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import TracebackType
from typing import Any, Self

import structlog

from mobclaw.agents.device.screen import ScreenNode, ScreenState

logger = structlog.get_logger(__name__)

SCROLL_DIRECTIONS = ("up", "down", "left", "right")
SYSTEM_ACTIONS = ("back", "home", "recents", "notifications", "quick_settings", "power_dialog")


class DeviceSessionError(Exception):
    """Raised when a device session cannot be opened."""


@dataclass(frozen=True)
class InstalledApp:
    label: str
    package_name: str


@dataclass(frozen=True)
class DeviceAction:
    """An action a session has performed on the device."""

    name: str
    args: dict[str, Any] = field(default_factory=dict)


class DeviceSession(ABC):
    """Abstract handle to a device."""

    @abstractmethod
    async def open(self) -> None: ...

    @abstractmethod
    async def close(self) -> None: ...

    @abstractmethod
    async def read_screen(self) -> ScreenState | None:
        """Return the current screen, or None when the device cannot be read."""
        ...

    @abstractmethod
    async def return_to_host(self) -> None:
        """Bring the host app back to the foreground."""
        ...

    @abstractmethod
    async def click(self, node_id: str) -> bool: ...

    @abstractmethod
    async def long_click(self, node_id: str) -> bool: ...

    @abstractmethod
    async def tap(self, x: float, y: float) -> bool:
        """Tap at absolute screen coordinates."""
        ...

    @abstractmethod
    async def input_text(self, node_id: str, text: str) -> bool:
        """Replace the text of an editable node."""
        ...

    @abstractmethod
    async def scroll(self, direction: str) -> bool:
        """Scroll the screen; direction is one of SCROLL_DIRECTIONS."""
        ...

    @abstractmethod
    async def system_action(self, action: str) -> bool:
        """Perform a global action; action is one of SYSTEM_ACTIONS."""
        ...

    @abstractmethod
    async def launch_app(self, package_name: str) -> bool: ...

    @abstractmethod
    async def list_apps(self) -> list[InstalledApp] | None:
        """Return launchable apps sorted by label, or None when not connected."""
        ...

    async def __aenter__(self) -> Self:
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()


class SnapshotDeviceSession(DeviceSession):
    """Session backed by a JSON screen snapshot on disk.

    Used for offline runs and tests. Without a path the session is open but
    has no screen, which the agent reports as an unavailable screen read.

    Actions are validated against the current screen and recorded in
    `actions`. Typing updates the target node's text and launching an app
    switches to an empty screen of that package. The snapshot may list
    launchable apps under "installed_apps" as {"label", "package_name"}
    objects.
    """

    def __init__(self, path: str | Path | None = None, host_package: str | None = None) -> None:
        self._path = Path(path) if path is not None else None
        self._host_package = host_package
        self._state: ScreenState | None = None
        self._apps: list[InstalledApp] = []
        self._actions: list[DeviceAction] = []
        self._opened = False

    @property
    def is_open(self) -> bool:
        return self._opened

    @property
    def host_package(self) -> str | None:
        return self._host_package

    @property
    def actions(self) -> tuple[DeviceAction, ...]:
        return tuple(self._actions)

    async def open(self) -> None:
        if self._path is not None:
            try:
                raw = await asyncio.to_thread(self._path.read_text, encoding="utf-8")
                data = json.loads(raw)
                self._state = ScreenState.from_dict(data)
                self._apps = [
                    InstalledApp(label=str(app["label"]), package_name=str(app["package_name"]))
                    for app in data.get("installed_apps", [])
                ]
            except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
                raise DeviceSessionError(f"Cannot load screen snapshot {self._path}: {e}") from e
        self._opened = True
        logger.info(
            "device_session_opened",
            snapshot=str(self._path) if self._path else None,
            package=self._state.package_name if self._state else None,
        )

    async def close(self) -> None:
        self._opened = False
        logger.info("device_session_closed")

    async def read_screen(self) -> ScreenState | None:
        if not self._opened:
            return None
        return self._state

    async def return_to_host(self) -> None:
        if self._host_package is None:
            return
        logger.info("returning_to_host", package=self._host_package)
        if self._state is not None:
            self._state = ScreenState(package_name=self._host_package)

    def _target(self, node_id: str) -> ScreenNode | None:
        if not self._opened or self._state is None:
            return None
        node = self._state.find_node(node_id)
        if node is None:
            logger.info("device_node_not_found", node_id=node_id)
            return None
        if not node.is_enabled:
            logger.info("device_node_disabled", node_id=node_id)
            return None
        return node

    def _record(self, name: str, **args: Any) -> bool:
        self._actions.append(DeviceAction(name, args))
        logger.debug("device_action", action=name, **args)
        return True

    async def click(self, node_id: str) -> bool:
        if self._target(node_id) is None:
            return False
        return self._record("click", node_id=node_id)

    async def long_click(self, node_id: str) -> bool:
        if self._target(node_id) is None:
            return False
        return self._record("long_click", node_id=node_id)

    async def tap(self, x: float, y: float) -> bool:
        if not self._opened or x < 0 or y < 0:
            return False
        return self._record("tap", x=x, y=y)

    async def input_text(self, node_id: str, text: str) -> bool:
        node = self._target(node_id)
        if node is None or not node.is_editable:
            return False
        assert self._state is not None
        self._state = replace(
            self._state,
            nodes=[replace(n, text=text) if n.id == node_id else n for n in self._state.nodes],
        )
        return self._record("input_text", node_id=node_id, text=text)

    async def scroll(self, direction: str) -> bool:
        direction = direction.lower()
        if not self._opened or direction not in SCROLL_DIRECTIONS:
            return False
        return self._record("scroll", direction=direction)

    async def system_action(self, action: str) -> bool:
        action = action.lower()
        if not self._opened or action not in SYSTEM_ACTIONS:
            return False
        return self._record("system_action", action=action)

    async def launch_app(self, package_name: str) -> bool:
        if not self._opened:
            return False
        launchable = {app.package_name for app in self._apps}
        if self._host_package is not None:
            launchable.add(self._host_package)
        if package_name not in launchable:
            logger.info("device_app_not_launchable", package=package_name)
            return False
        self._state = ScreenState(package_name=package_name)
        return self._record("launch_app", package_name=package_name)

    async def list_apps(self) -> list[InstalledApp] | None:
        if not self._opened:
            return None
        unique = {app.package_name: app for app in reversed(self._apps)}
        return sorted(unique.values(), key=lambda app: app.label.lower())


class ScreenContextProvider:
    """Adapts a device session to the agent's context provider interface."""

    def __init__(self, session: DeviceSession) -> None:
        self._session = session

    async def read(self) -> ScreenState | None:
        return await self._session.read_screen()
