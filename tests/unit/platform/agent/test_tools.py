"""Unit tests for the tool registry and terminal tools."""

import pytest

from mobclaw.platform.agent.exceptions import DuplicateToolError
from mobclaw.platform.agent.tools import FailTool, FinishTool, ToolRegistry


class TestFinishTool:
    async def test_output_with_reason(self):
        result = await FinishTool().execute({"reason": "done"})

        assert result.success is True
        assert result.output == "TASK_COMPLETE: done"

    async def test_output_with_result(self):
        result = await FinishTool().execute({"reason": "done", "result": "42"})

        assert result.output == "TASK_COMPLETE: done\nResult: 42"

    async def test_missing_reason_uses_default(self):
        result = await FinishTool().execute({})

        assert result.success is True
        assert result.output.startswith("TASK_COMPLETE: ")

    def test_schema_requires_reason(self):
        schema = FinishTool().parameters_schema()

        assert schema["required"] == ["reason"]
        assert set(schema["properties"]) == {"reason", "result"}


class TestFailTool:
    async def test_reports_failure(self):
        result = await FailTool().execute({"reason": "blocked"})

        assert result.success is False
        assert result.output == "TASK_FAILED: blocked"
        assert result.error == "blocked"

    def test_spec(self):
        spec = FailTool().spec()

        assert spec.name == "fail"
        assert spec.parameters["required"] == ["reason"]


class TestToolRegistry:
    def test_terminal_tools_always_present(self):
        registry = ToolRegistry()

        assert "finish" in registry
        assert "fail" in registry
        assert len(registry) == 2

    def test_register_and_find(self, echo_tool):
        registry = ToolRegistry([echo_tool])

        assert registry.find("echo") is echo_tool
        assert registry.find("missing") is None
        assert sorted(registry.names()) == ["echo", "fail", "finish"]

    def test_duplicate_name_rejected(self, echo_tool):
        registry = ToolRegistry([echo_tool])

        with pytest.raises(DuplicateToolError) as exc_info:
            registry.register(echo_tool)

        assert exc_info.value.name == "echo"

    def test_duplicate_in_constructor_rejected(self, echo_tool):
        with pytest.raises(DuplicateToolError):
            ToolRegistry([echo_tool, echo_tool])

    def test_custom_finish_tool_is_kept(self):
        custom = FinishTool()
        registry = ToolRegistry([custom])

        assert registry.find("finish") is custom
        assert len(registry) == 2

    def test_specs_cover_all_tools(self, echo_tool):
        registry = ToolRegistry([echo_tool])

        assert {spec.name for spec in registry.specs()} == {"echo", "finish", "fail"}

    def test_with_defaults_override_replaces_by_name(self, echo_tool):
        override = type(echo_tool)()
        registry = ToolRegistry.with_defaults(defaults=[echo_tool], overrides=[override])

        assert registry.find("echo") is override
        assert len(registry) == 3

    def test_with_defaults_adds_new_tools(self, echo_tool, raising_tool):
        registry = ToolRegistry.with_defaults(defaults=[echo_tool], overrides=[raising_tool])

        assert "echo" in registry
        assert "explode" in registry
