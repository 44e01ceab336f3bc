from mobclaw.agents.device.agent import DeviceAgentBuilder
from mobclaw.agents.device.screen import Bounds, ScreenNode, ScreenState
from mobclaw.agents.device.session import (
    DeviceAction,
    DeviceSession,
    DeviceSessionError,
    InstalledApp,
    ScreenContextProvider,
    SnapshotDeviceSession,
)
from mobclaw.agents.device.tools import (
    ClickTool,
    InputTextTool,
    ListAppsTool,
    LongClickTool,
    OpenAppTool,
    ScreenReadTool,
    ScrollTool,
    SystemActionTool,
    TapTool,
    WaitTool,
)

__all__ = [
    "Bounds",
    "ClickTool",
    "DeviceAction",
    "DeviceAgentBuilder",
    "DeviceSession",
    "DeviceSessionError",
    "InputTextTool",
    "InstalledApp",
    "ListAppsTool",
    "LongClickTool",
    "OpenAppTool",
    "ScreenContextProvider",
    "ScreenNode",
    "ScreenReadTool",
    "ScreenState",
    "ScrollTool",
    "SnapshotDeviceSession",
    "SystemActionTool",
    "TapTool",
    "WaitTool",
]
