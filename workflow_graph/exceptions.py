"""Exceptions for configuration and lookup errors.

Rejected graph mutations are not exceptions; see ``MutationResult``.
"""


class WorkflowGraphError(Exception):
    """Base class for workflow graph errors."""
    pass


class SessionNotFoundError(WorkflowGraphError):
    """Raised when a session ID is not in the session store."""

    def __init__(self, session_id: str):
        super().__init__(f"Workflow session {session_id} not found")
        self.session_id = session_id


class UnknownLayoutStrategyError(WorkflowGraphError):
    """Raised when a layout strategy name is not registered."""

    def __init__(self, name: str, available: list[str]):
        super().__init__(
            f"Unknown layout strategy '{name}' (available: {', '.join(available)})"
        )
        self.name = name
        self.available = available
