"""Unit tests for device sessions."""

import pytest

from mobclaw.agents.device.session import (
    SYSTEM_ACTIONS,
    DeviceAction,
    DeviceSessionError,
    InstalledApp,
    ScreenContextProvider,
    SnapshotDeviceSession,
)


class TestSnapshotDeviceSession:
    async def test_reads_snapshot_when_open(self, snapshot_file):
        async with SnapshotDeviceSession(snapshot_file) as session:
            state = await session.read_screen()

        assert state is not None
        assert state.package_name == "com.android.settings"

    async def test_closed_session_reads_nothing(self, snapshot_file):
        session = SnapshotDeviceSession(snapshot_file)

        assert await session.read_screen() is None

        async with session:
            assert session.is_open is True
        assert session.is_open is False
        assert await session.read_screen() is None

    async def test_without_snapshot(self):
        async with SnapshotDeviceSession() as session:
            assert await session.read_screen() is None

    async def test_missing_file(self, tmp_path):
        with pytest.raises(DeviceSessionError):
            async with SnapshotDeviceSession(tmp_path / "missing.json"):
                pass

    async def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(DeviceSessionError):
            await SnapshotDeviceSession(path).open()

    async def test_return_to_host(self, snapshot_file):
        async with SnapshotDeviceSession(snapshot_file, host_package="com.example.host") as session:
            await session.return_to_host()
            state = await session.read_screen()

        assert state.package_name == "com.example.host"
        assert state.nodes == []

    async def test_return_to_host_without_host_package(self, snapshot_file):
        async with SnapshotDeviceSession(snapshot_file) as session:
            await session.return_to_host()
            state = await session.read_screen()

        assert state.package_name == "com.android.settings"


class TestScreenContextProvider:
    async def test_reads_from_session(self, snapshot_file):
        async with SnapshotDeviceSession(snapshot_file) as session:
            snapshot = await ScreenContextProvider(session).read()

        assert snapshot.identifier == "com.android.settings"
        assert snapshot.size == 3


class TestSnapshotDeviceActions:
    async def test_click_records_action(self, device_session):
        assert await device_session.click("n1") is True

        assert device_session.actions == (DeviceAction("click", {"node_id": "n1"}),)

    @pytest.mark.parametrize("node_id", ["n99", "n5"])
    async def test_click_rejects_unknown_or_disabled_node(self, device_session, node_id):
        assert await device_session.click(node_id) is False
        assert await device_session.long_click(node_id) is False
        assert device_session.actions == ()

    async def test_actions_need_an_open_session(self, device_snapshot_file):
        session = SnapshotDeviceSession(device_snapshot_file)

        assert await session.click("n1") is False
        assert await session.tap(10, 10) is False
        assert await session.scroll("down") is False
        assert await session.system_action("back") is False
        assert await session.list_apps() is None

    async def test_node_actions_need_a_screen(self):
        async with SnapshotDeviceSession() as session:
            assert await session.click("n1") is False
            assert await session.tap(10, 10) is True

    async def test_tap_rejects_negative_coordinates(self, device_session):
        assert await device_session.tap(-1, 5) is False
        assert await device_session.tap(540.5, 960) is True
        assert device_session.actions[-1] == DeviceAction("tap", {"x": 540.5, "y": 960})

    async def test_input_text_updates_node(self, device_session):
        assert await device_session.input_text("n4", "wifi") is True

        state = await device_session.read_screen()
        assert state.find_node("n4").text == "wifi"
        assert 'text: "wifi"' in state.to_prompt_text()

    async def test_input_text_requires_editable_node(self, device_session):
        assert await device_session.input_text("n1", "wifi") is False

        state = await device_session.read_screen()
        assert state.find_node("n1").text == "Network & internet"

    async def test_scroll_directions(self, device_session):
        assert await device_session.scroll("DOWN") is True
        assert await device_session.scroll("diagonal") is False
        assert device_session.actions == (DeviceAction("scroll", {"direction": "down"}),)

    @pytest.mark.parametrize("action", SYSTEM_ACTIONS)
    async def test_system_actions(self, device_session, action):
        assert await device_session.system_action(action) is True

    async def test_unknown_system_action(self, device_session):
        assert await device_session.system_action("reboot") is False

    async def test_launch_app_switches_screen(self, device_session):
        assert await device_session.launch_app("com.android.chrome") is True

        state = await device_session.read_screen()
        assert state.package_name == "com.android.chrome"
        assert state.nodes == []

    async def test_launch_host_app(self, device_session):
        assert await device_session.launch_app("com.example.host") is True

    async def test_launch_unknown_app(self, device_session):
        assert await device_session.launch_app("com.example.missing") is False

        state = await device_session.read_screen()
        assert state.package_name == "com.android.settings"

    async def test_list_apps_sorted_by_label(self, device_session):
        apps = await device_session.list_apps()

        assert [app.label for app in apps] == ["Camera", "chrome", "Settings"]
        assert apps[0] == InstalledApp("Camera", "com.android.camera2")

    async def test_invalid_installed_apps(self, tmp_path):
        path = tmp_path / "apps.json"
        path.write_text('{"package_name": "p", "installed_apps": [{"label": "x"}]}', encoding="utf-8")

        with pytest.raises(DeviceSessionError):
            await SnapshotDeviceSession(path).open()
