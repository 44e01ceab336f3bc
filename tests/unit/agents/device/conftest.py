"""Fixtures for device session and tool tests."""

import json
from pathlib import Path
from typing import Any

import pytest

from mobclaw.agents.device.session import SnapshotDeviceSession


@pytest.fixture
def device_data(screen_data: dict[str, Any]) -> dict[str, Any]:
    """Screen snapshot with an input field, a disabled button and installed apps."""
    data = dict(screen_data)
    data["nodes"] = [
        *screen_data["nodes"],
        {
            "id": "n4",
            "class_name": "EditText",
            "hint_text": "Search settings",
            "editable": True,
            "bounds": [0, 400, 1080, 500],
        },
        {
            "id": "n5",
            "class_name": "Button",
            "text": "Apply",
            "clickable": True,
            "enabled": False,
            "bounds": [0, 600, 1080, 700],
        },
    ]
    data["installed_apps"] = [
        {"label": "Settings", "package_name": "com.android.settings"},
        {"label": "chrome", "package_name": "com.android.chrome"},
        {"label": "Camera", "package_name": "com.android.camera2"},
    ]
    return data


@pytest.fixture
def device_snapshot_file(tmp_path: Path, device_data: dict[str, Any]) -> Path:
    path = tmp_path / "device.json"
    path.write_text(json.dumps(device_data), encoding="utf-8")
    return path


@pytest.fixture
async def device_session(device_snapshot_file: Path):
    async with SnapshotDeviceSession(device_snapshot_file, host_package="com.example.host") as session:
        yield session
