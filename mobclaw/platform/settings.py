"""Application settings and configuration.

This module provides Pydantic settings classes for application configuration,
loaded from environment variables with support for nested configuration
(e.g. AGENT__MAX_ITERATIONS=50, LITELLM__MODEL=openai/gpt-4o).
"""

import logging

import pydantic_settings
from pydantic import BaseModel, Field, field_validator

from mobclaw.platform.agent.config import AgentConfig, LlmConfig


class AppHTTPSettings(BaseModel):
    host: str = Field("0.0.0.0")
    port: int = Field(8000)
    log_level: str = Field("INFO")
    log_json: bool | None = Field(
        None, description="Override log format: True=JSON, False=console, None=auto"
    )

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v):
        v_upper = v.upper()
        if v_upper not in logging.getLevelNamesMapping():
            raise ValueError(f'invalid value "{v}"')
        return v_upper


class OpenTelemetrySettings(BaseModel):
    enabled: bool = Field(False)
    excluded_urls: str = Field("metrics,health,info")


class BugsnagSettings(BaseModel):
    api_key: str | None = None
    release_stage: str = Field("local")

    @field_validator("release_stage")
    @classmethod
    def _validate_bugsnag_release_stage(cls, v):
        if v not in ["development", "production", "local"]:
            raise ValueError(f'invalid bugsnag release stage "{v}"')
        return v


class LitellmSettings(BaseModel):
    """LLM provider configuration.

    Attributes:
        model: LiteLLM model identifier
        api_base: Optional API base URL (e.g. a LiteLLM proxy)
        api_key: Optional API key; LiteLLM also reads provider keys from the environment
        native_tools: Use native function calling instead of tag-embedded tool calls
        request_timeout: Per-request network timeout in seconds
    """

    model: str = Field("gemini/gemini-2.5-flash")
    api_base: str | None = None
    api_key: str | None = None
    native_tools: bool = Field(True)
    request_timeout: float = Field(120.0, gt=0)

    def to_config(self, temperature: float) -> LlmConfig:
        return LlmConfig(
            model=self.model,
            api_key=self.api_key,
            base_url=self.api_base,
            temperature=temperature,
            native_tools=self.native_tools,
            request_timeout=self.request_timeout,
        )


class AgentSettings(BaseModel):
    """Agent loop configuration, see AgentConfig."""

    max_iterations: int = Field(120, ge=1)
    temperature: float = Field(0.7, ge=0.0, le=2.0)
    model: str | None = None
    action_settle_delay: float = Field(0.3, ge=0.0, description="Seconds")
    auto_context_refresh: bool = Field(True)
    max_history_entries: int = Field(40, ge=2)

    def to_config(self) -> AgentConfig:
        return AgentConfig(
            max_iterations=self.max_iterations,
            temperature=self.temperature,
            model=self.model,
            action_settle_delay=self.action_settle_delay,
            auto_context_refresh=self.auto_context_refresh,
            max_history_entries=self.max_history_entries,
        )


class DeviceSettings(BaseModel):
    """Device session configuration.

    Attributes:
        snapshot_path: JSON screen snapshot served by the snapshot session
        host_package: Package the session returns to after a finished task
    """

    snapshot_path: str | None = None
    host_package: str | None = None


class Settings(pydantic_settings.BaseSettings):
    model_config = pydantic_settings.SettingsConfigDict(env_nested_delimiter="__")

    app_http: AppHTTPSettings = AppHTTPSettings()
    opentelemetry: OpenTelemetrySettings = OpenTelemetrySettings()
    bugsnag: BugsnagSettings = BugsnagSettings()

    litellm: LitellmSettings = LitellmSettings()
    agent: AgentSettings = AgentSettings()
    device: DeviceSettings = DeviceSettings()

    @property
    def json_logs(self) -> bool:
        """Resolve the log format: explicit override, else JSON outside local runs."""
        if self.app_http.log_json is not None:
            return self.app_http.log_json
        return self.bugsnag.release_stage != "local"
