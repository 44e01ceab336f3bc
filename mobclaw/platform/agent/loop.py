"""The agent orchestration loop.

TaskAgent turns a natural-language task into a sequence of tool invocations:

    Read context -> build messages -> LLM chat -> parse actions -> execute tools -> repeat

The loop ends when the LLM calls the `finish` or `fail` terminal tool, when the
provider fails, when the task is cancelled, or when the iteration budget is
exhausted. Tool failures never end the loop; they are fed back to the LLM.
"""

import asyncio
import threading
import uuid
from datetime import timedelta
from time import monotonic

import structlog
from opentelemetry import trace

from mobclaw.platform.agent.config import AgentConfig, AgentIdentity
from mobclaw.platform.agent.dispatch import ActionDispatcher, select_dispatcher
from mobclaw.platform.agent.exceptions import AgentBusyError
from mobclaw.platform.agent.history import ConversationHistory
from mobclaw.platform.agent.messages import (
    AgentResult,
    AssistantToolCalls,
    Chat,
    ChatMessage,
    ConversationEntry,
    ToolCallRequest,
    ToolResult,
    ToolResultEntry,
)
from mobclaw.platform.agent.metrics import (
    AgentMetricsLabels,
    collect_agent_metrics,
    record_agent_iterations,
)
from mobclaw.platform.agent.observer import GuardedObserver, NullObserver
from mobclaw.platform.agent.protocol import (
    Agent,
    AgentObserver,
    CompletionHook,
    ContextProvider,
    ContextSnapshot,
    LlmProvider,
)
from mobclaw.platform.agent.tools import FAIL_TOOL_NAME, FINISH_TOOL_NAME, ToolRegistry

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)

STOPPED_BY_USER_MESSAGE = "Agent stopped by user"
CONTEXT_UNAVAILABLE_NOTE = "(Screen read unavailable: the device session may not be connected)"
CONTINUE_REMINDER = (
    "You must use tools to complete the task. The task is NOT done yet. "
    "Call `finish` when the task is truly complete, or call another action tool to continue. "
    "Read the screen if you need to see what's on screen."
)


def _elapsed(started: float) -> timedelta:
    return timedelta(seconds=monotonic() - started)


class TaskAgent(Agent):
    """Runs one task at a time through the LLM + tool loop.

    The registry, dispatcher and provider are reused across sequential tasks.
    The transcript belongs to the running execute() call and is reset by the
    next one. Concurrent execute() calls on one instance are rejected.
    """

    def __init__(
        self,
        provider: LlmProvider,
        registry: ToolRegistry,
        identity: AgentIdentity,
        system_prompt: str,
        config: AgentConfig | None = None,
        dispatcher: ActionDispatcher | None = None,
        context_provider: ContextProvider | None = None,
        observer: AgentObserver | None = None,
        completion_hook: CompletionHook | None = None,
    ) -> None:
        """Initialize the agent.

        Args:
            provider: LLM provider used for every reasoning step
            registry: Tools available to the agent, including the terminal tools
            identity: Agent identity information
            system_prompt: Behavioral prompt; tool documentation is appended to it
            config: Loop configuration, defaults to AgentConfig()
            dispatcher: Dispatch strategy; selected from the provider when omitted
            context_provider: Optional source of screen/context snapshots
            observer: Optional lifecycle observer, defaults to a no-op observer
            completion_hook: Optional coroutine run after a successful finish
        """
        self._provider = provider
        self._registry = registry
        self._identity = identity
        self._config = config or AgentConfig()
        self._dispatcher = dispatcher or select_dispatcher(provider)
        self._context_provider = context_provider
        self._observer = GuardedObserver(observer or NullObserver())
        self._completion_hook = completion_hook

        self._tool_specs = registry.specs()
        self._system_prompt = (
            f"{system_prompt.rstrip()}\n\n{self._dispatcher.prompt_instructions(self._tool_specs)}"
        )
        self._history = ConversationHistory()
        self._cancelled = threading.Event()
        self._running_task: str | None = None

    @property
    def identity(self) -> AgentIdentity:
        return self._identity

    @property
    def name(self) -> str:
        return self._identity.name

    @property
    def slug(self) -> str:
        return self._identity.slug

    @property
    def config(self) -> AgentConfig:
        return self._config

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    @property
    def history(self) -> tuple[ConversationEntry, ...]:
        """Snapshot of the current (or last) task's transcript."""
        return self._history.entries

    @property
    def is_running(self) -> bool:
        return self._running_task is not None

    def cancel(self) -> None:
        """Cancel the currently running task.

        The flag is checked at the top of each iteration, so an in-flight tool
        call always completes first.
        """
        self._cancelled.set()

    async def execute(self, task: str) -> AgentResult:
        """Execute a task described in natural language.

        Args:
            task: The user's natural language task description

        Returns:
            The terminal AgentResult

        Raises:
            AgentBusyError: If another task is already running on this agent
        """
        if self._running_task is not None:
            raise AgentBusyError(self._running_task)
        self._running_task = task
        self._cancelled.clear()

        labels = AgentMetricsLabels(self.slug)
        try:
            with structlog.contextvars.bound_contextvars(task_id=str(uuid.uuid4()), agent=self.slug):
                with tracer.start_as_current_span(self.name) as span:
                    async with collect_agent_metrics(labels):
                        result = await self._run(task)
                    span.set_attribute("agent.success", result.success)
                    span.set_attribute("agent.iterations", result.iterations_used)
            record_agent_iterations(labels, result.iterations_used)
            return result
        finally:
            self._running_task = None

    async def _run(self, task: str) -> AgentResult:
        started = monotonic()
        self._observer.on_agent_start(task)
        logger.info("agent_task_started", task=task, max_iterations=self._config.max_iterations)

        self._history.reset(self._system_prompt)
        self._history.append(Chat(ChatMessage.user(await self._initial_message(task))))

        send_specs = self._dispatcher.should_send_tool_specs()

        for iteration in range(1, self._config.max_iterations + 1):
            if self._cancelled.is_set():
                logger.info("agent_task_cancelled", iteration=iteration)
                return self._finish(task, started, False, STOPPED_BY_USER_MESSAGE, iteration)

            messages = self._dispatcher.to_provider_messages(self._history)
            try:
                response = await self._provider.chat(
                    messages=messages,
                    tools=self._tool_specs if send_specs else None,
                    model=self._config.model,
                    temperature=self._config.temperature,
                )
            except Exception as e:
                logger.warning("llm_call_failed", iteration=iteration, error=str(e))
                self._observer.on_error(f"LLM call failed at iteration {iteration}", e)
                return self._finish(task, started, False, f"LLM error: {e}", iteration)

            text, actions = self._dispatcher.parse_response(response)

            if not actions:
                # Text without tool calls is never completion; nudge and go on.
                assistant_text = text or response.text_or_empty()
                logger.debug("no_tool_calls", iteration=iteration)
                self._history.append(Chat(ChatMessage.assistant(assistant_text)))
                self._history.append(Chat(ChatMessage.user(CONTINUE_REMINDER)))
                continue

            if text:
                self._history.append(Chat(ChatMessage.assistant(text)))
            self._history.append(
                AssistantToolCalls(text=response.text, tool_calls=list(response.tool_calls))
            )

            results: list[ToolResultEntry] = []
            for action in actions:
                result = await self._execute_action(action)
                results.append(result)

                if action.name == FINISH_TOOL_NAME:
                    self._history.append(self._dispatcher.format_results(results))
                    await self._run_completion_hook()
                    return self._finish(task, started, True, result.output, iteration)
                if action.name == FAIL_TOOL_NAME:
                    self._history.append(self._dispatcher.format_results(results))
                    return self._finish(task, started, False, result.output, iteration)

            self._history.append(self._dispatcher.format_results(results))

            if self._config.auto_context_refresh and self._context_provider is not None:
                await asyncio.sleep(self._config.action_settle_delay)
                await self._refresh_context(task)

            self._history.trim(self._config.max_history_entries)

        return self._finish(
            task,
            started,
            False,
            f"Agent exceeded maximum iterations ({self._config.max_iterations})",
            self._config.max_iterations,
        )

    async def _execute_action(self, action: ToolCallRequest) -> ToolResultEntry:
        tool = self._registry.find(action.name)
        if tool is None:
            logger.warning("unknown_tool", tool=action.name)
            return ToolResultEntry(
                name=action.name,
                output=f"Unknown tool: {action.name}",
                success=False,
                tool_call_id=action.tool_call_id,
            )

        start_time = monotonic()
        with tracer.start_as_current_span(f"tool {action.name}"):
            try:
                tool_result = await tool.execute(action.arguments)
            except Exception as e:
                logger.warning("tool_execution_failed", tool=action.name, error=str(e), exc_info=True)
                tool_result = ToolResult(
                    success=False,
                    output="",
                    error=f"Error executing {action.name}: {e}",
                )

        self._observer.on_tool_call(action.name, _elapsed(start_time), tool_result.success)
        logger.debug("tool_executed", tool=action.name, success=tool_result.success)

        if tool_result.success:
            output = tool_result.output
        else:
            output = f"Error: {tool_result.error or tool_result.output}"
        return ToolResultEntry(
            name=action.name,
            output=output,
            success=tool_result.success,
            tool_call_id=action.tool_call_id,
            error=tool_result.error,
        )

    async def _render_context(self) -> tuple[ContextSnapshot, str] | None:
        """Read and render the current context; None when either step fails."""
        if self._context_provider is None:
            return None
        try:
            snapshot = await self._context_provider.read()
            if snapshot is None:
                return None
            return snapshot, snapshot.to_prompt_text()
        except Exception as e:
            logger.warning("context_read_failed", error=str(e), exc_info=True)
            return None

    async def _initial_message(self, task: str) -> str:
        context = await self._render_context()
        if context is None:
            return f"Task: {task}\n\n{CONTEXT_UNAVAILABLE_NOTE}"
        _, text = context
        return f"Task: {task}\n\nCurrent screen:\n{text}"

    async def _refresh_context(self, task: str) -> None:
        context = await self._render_context()
        if context is None:
            return
        snapshot, text = context
        self._history.append(
            Chat(
                ChatMessage.user(
                    f"[Updated screen]\n{text}\n\n"
                    f'[REMINDER] Original task: "{task}" - '
                    "Make sure you complete ALL parts before calling finish."
                )
            )
        )
        self._observer.on_context_refresh(snapshot.identifier, snapshot.size)

    async def _run_completion_hook(self) -> None:
        if self._completion_hook is None:
            return
        try:
            await self._completion_hook()
        except Exception as e:
            logger.warning("completion_hook_failed", error=str(e))

    def _finish(
        self,
        task: str,
        started: float,
        success: bool,
        message: str,
        iterations: int,
    ) -> AgentResult:
        elapsed = _elapsed(started)
        self._observer.on_agent_end(task, elapsed, success)
        logger.info(
            "agent_task_finished",
            success=success,
            iterations=iterations,
            duration_ms=int(elapsed.total_seconds() * 1000),
        )
        return AgentResult(
            success=success,
            message=message,
            iterations_used=iterations,
            elapsed=elapsed,
        )
