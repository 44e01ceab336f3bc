"""Exception hierarchy for the agent loop.

Only provider communication failures end a task as an error. Everything a tool
does wrong is reported back to the LLM as data instead of raised.
"""


class AgentError(Exception):
    """Base exception for all agent errors."""


class LlmProviderError(AgentError):
    """Raised when the LLM provider cannot produce a response."""

    def __init__(self, message: str, model: str | None = None, status_code: int | None = None):
        self.model = model
        self.status_code = status_code
        status_info = f" (status: {status_code})" if status_code else ""
        super().__init__(f"{message}{status_info}")


class DuplicateToolError(AgentError):
    """Raised when two tools with the same name are registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Tool already registered: {name}")


class AgentBusyError(AgentError):
    """Raised when execute() is called while another task is running on the same agent."""

    def __init__(self, running_task: str | None = None):
        self.running_task = running_task
        task_info = f": {running_task!r}" if running_task else ""
        super().__init__(f"Agent is already running a task{task_info}")
