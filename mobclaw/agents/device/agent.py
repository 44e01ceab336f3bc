"""Device Agent.

This module assembles the task agent that operates a device: the LiteLLM
provider, the device tools, the screen context provider and the observers.
"""

from mobclaw.agents.device.prompt import build_system_prompt
from mobclaw.agents.device.session import DeviceSession, ScreenContextProvider
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
from mobclaw.platform.agent.config import AgentConfig, AgentIdentity, LlmConfig
from mobclaw.platform.agent.llm_client import LlmClient
from mobclaw.platform.agent.loop import TaskAgent
from mobclaw.platform.agent.observer import CompositeObserver, LoggingObserver, MetricsObserver
from mobclaw.platform.agent.protocol import LlmProvider
from mobclaw.platform.agent.tools import Tool, ToolRegistry
from mobclaw.platform.constants import SERVICE_NAME


class DeviceAgentBuilder:
    """Builder for constructing device agents.

    The session is owned by the caller; the builder only wires it into the
    device tools, the context provider and the completion hook.
    """

    SLUG = "device"

    def __init__(
        self,
        agent_config: AgentConfig,
        llm_config: LlmConfig,
        session: DeviceSession,
        identity: AgentIdentity | None = None,
        provider: LlmProvider | None = None,
        extra_tools: list[Tool] | None = None,
        extra_instructions: str | None = None,
    ) -> None:
        """Initialize the device agent builder.

        Args:
            agent_config: Configuration for the agent loop
            llm_config: Configuration for the LLM client
            session: Open device session the agent acts on
            identity: Agent identity, defaults to DeviceAgentBuilder.default_identity()
            provider: Optional LLM provider replacing the LiteLLM client
            extra_tools: Additional tools registered after the device defaults
            extra_instructions: Optional guidance appended to the system prompt
        """
        self.agent_config = agent_config
        self.llm_config = llm_config
        self.session = session
        self.identity = identity or self.default_identity()
        self.provider = provider
        self.extra_tools = extra_tools or []
        self.extra_instructions = extra_instructions

    @classmethod
    def default_identity(cls) -> AgentIdentity:
        return AgentIdentity(
            name="MobClaw Device Agent",
            description="Operates a mobile device through its UI to complete natural-language tasks",
            slug=cls.SLUG,
        )

    def device_tools(self) -> list[Tool]:
        """Device tools bound to the builder's session, in prompt order."""
        session = self.session
        return [
            ScreenReadTool(session),
            ListAppsTool(session),
            OpenAppTool(session),
            ClickTool(session),
            LongClickTool(session),
            TapTool(session),
            InputTextTool(session),
            ScrollTool(session),
            SystemActionTool(session),
            WaitTool(),
        ]

    def build(self) -> TaskAgent:
        """Build and return a configured device agent."""
        provider = self.provider or LlmClient.from_config(self.identity.slug, self.llm_config)

        registry = ToolRegistry.with_defaults(
            defaults=self.device_tools(),
            overrides=self.extra_tools,
        )
        observer = CompositeObserver(
            [
                LoggingObserver(agent=SERVICE_NAME),
                MetricsObserver(agent=self.identity.slug),
            ]
        )

        return TaskAgent(
            provider=provider,
            registry=registry,
            identity=self.identity,
            system_prompt=build_system_prompt(self.extra_instructions),
            config=self.agent_config,
            context_provider=ScreenContextProvider(self.session),
            observer=observer,
            completion_hook=self.session.return_to_host,
        )
