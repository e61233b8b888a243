"""In-memory registry of workflow sessions."""

import logging
import time
from collections.abc import Callable
from typing import Optional

from workflow_graph.app.models import WorkflowSection, WorkflowTask
from workflow_graph.exceptions import SessionNotFoundError
from workflow_graph.layout import Direction, LayoutOptions, get_layout_strategy
from workflow_graph.orchestrator.workflow_session import DependencyListener, WorkflowSession

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Holds one independent WorkflowSession per open workflow view.

    Sessions not touched for ``idle_timeout`` seconds are evicted the next
    time the store is used, the way a lock or queue entry expires after its
    TTL. Without a timeout, sessions live until deleted.
    """

    def __init__(
        self,
        default_strategy: str = "leveling",
        default_options: Optional[LayoutOptions] = None,
        default_auto_layout: bool = True,
        idle_timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize store.

        Args:
            default_strategy: Layout strategy name for new sessions
            default_options: Layout parameters for new sessions
            default_auto_layout: Auto-layout flag for new sessions
            idle_timeout: Seconds of inactivity before a session is evicted
            clock: Monotonic time source
        """
        self.default_strategy = default_strategy
        self.default_options = default_options or LayoutOptions()
        self.default_auto_layout = default_auto_layout
        self.idle_timeout = idle_timeout
        self._clock = clock
        self._sessions: dict[str, WorkflowSession] = {}
        self._last_used: dict[str, float] = {}

    def create(
        self,
        tasks: list[WorkflowTask],
        sections: Optional[list[WorkflowSection]] = None,
        strategy: Optional[str] = None,
        direction: Optional[str] = None,
        auto_layout: Optional[bool] = None,
        on_dependency_change: Optional[DependencyListener] = None
    ) -> WorkflowSession:
        """
        Create and register a new session.

        Args:
            tasks: Tasks for the workflow
            sections: Sections in display order
            strategy: Layout strategy name (store default when omitted)
            direction: Layout direction (store default when omitted)
            auto_layout: Auto-layout flag (store default when omitted)
            on_dependency_change: Listener for committed edge changes

        Returns:
            New WorkflowSession

        Raises:
            UnknownLayoutStrategyError: If strategy is not registered
        """
        self.evict_idle()
        layout = get_layout_strategy(strategy or self.default_strategy, sections)
        options = self.default_options
        if direction is not None:
            options = options.model_copy(update={"direction": Direction(direction)})

        session = WorkflowSession(
            tasks,
            sections=sections,
            layout=layout,
            options=options,
            auto_layout=self.default_auto_layout if auto_layout is None else auto_layout,
            on_dependency_change=on_dependency_change,
        )
        self._sessions[session.id] = session
        self._last_used[session.id] = self._clock()
        logger.info(
            f"Created workflow session {session.id} with {len(session.nodes)} tasks "
            f"and {len(session.edges)} dependencies"
        )
        return session

    def get(self, session_id: str) -> WorkflowSession:
        """
        Get a session by ID and mark it as used.

        Raises:
            SessionNotFoundError: If no such session exists
        """
        self.evict_idle()
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        self._last_used[session_id] = self._clock()
        return session

    def delete(self, session_id: str) -> None:
        """
        Remove a session.

        Raises:
            SessionNotFoundError: If no such session exists
        """
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFoundError(session_id)
        self._last_used.pop(session_id, None)
        logger.info(f"Deleted workflow session {session_id}")

    def evict_idle(self) -> list[str]:
        """
        Drop sessions idle for longer than idle_timeout.

        Returns:
            IDs of evicted sessions
        """
        if self.idle_timeout is None:
            return []

        now = self._clock()
        expired = [
            session_id for session_id, last_used in self._last_used.items()
            if now - last_used > self.idle_timeout
        ]
        for session_id in expired:
            del self._sessions[session_id]
            del self._last_used[session_id]
            logger.info(f"Evicted idle workflow session {session_id}")
        return expired

    def session_ids(self) -> list[str]:
        return list(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions
