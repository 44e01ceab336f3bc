"""Integration tests for the command line interface."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from mobclaw.__main__ import main
from mobclaw.platform.agent.llm_client import LlmClient
from mobclaw.platform.agent.messages import ChatResponse


@pytest.fixture(autouse=True)
def quiet_env(monkeypatch):
    monkeypatch.setenv("AGENT__ACTION_SETTLE_DELAY", "0")
    monkeypatch.setenv("APP_HTTP__LOG_LEVEL", "ERROR")


class TestRunCommand:
    def test_successful_task_exits_zero(self, make_provider, respond_with_tool, snapshot_file):
        provider = make_provider([respond_with_tool("finish", {"reason": "done"})])

        with patch.object(LlmClient, "from_config", return_value=provider):
            result = CliRunner().invoke(main, ["run", "open settings", "--snapshot", str(snapshot_file)])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["success"] is True
        assert payload["message"] == "TASK_COMPLETE: done"
        assert "Current screen:" in provider.calls[0]["messages"][1].content

    def test_failed_task_exits_one(self, make_provider, respond_with_tool):
        provider = make_provider([respond_with_tool("fail", {"reason": "blocked"})])

        with patch.object(LlmClient, "from_config", return_value=provider):
            result = CliRunner().invoke(main, ["run", "open settings"])

        assert result.exit_code == 1

    def test_overrides_budget_and_model(self, make_provider):
        provider = make_provider([ChatResponse(text="hmm")])

        with patch.object(LlmClient, "from_config", return_value=provider) as from_config:
            result = CliRunner().invoke(
                main, ["run", "task", "--max-iterations", "2", "--model", "openai/gpt-4o"]
            )

        assert result.exit_code == 1
        assert len(provider.calls) == 2
        assert from_config.call_args.args[1].model == "openai/gpt-4o"

    def test_rejects_invalid_budget(self):
        result = CliRunner().invoke(main, ["run", "task", "--max-iterations", "0"])

        assert result.exit_code == 2


class TestServeCommand:
    def test_starts_uvicorn_factory(self):
        with patch("mobclaw.__main__.uvicorn.run") as run:
            result = CliRunner().invoke(main, ["serve", "--reload"])

        assert result.exit_code == 0
        args, kwargs = run.call_args
        assert args == ("mobclaw:app",)
        assert kwargs["factory"] is True
        assert kwargs["reload"] is True
