"""Event system for observing workflow runs.

The executor publishes lifecycle events to an :class:`EventEmitter`. Listeners
are async callables; a failing listener is logged and never fails the run.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Lifecycle event types."""

    # Run lifecycle
    EXECUTION_START = "execution-start"
    EXECUTION_COMPLETE = "execution-complete"
    EXECUTION_ERROR = "execution-error"

    # Node lifecycle
    NODE_START = "node-start"
    NODE_COMPLETE = "node-complete"
    NODE_ERROR = "node-error"

    # Context updates
    VARIABLE_SET = "variable-set"


@dataclass
class ExecutionEvent:
    """A single lifecycle event.

    Attributes:
        type: Event type
        run_id: Identifier of the run that produced the event
        node_id: Node the event refers to, if any
        node_name: Display name of that node
        output: Node or run output
        error: Error message for error events
        timestamp: When the event was created
        metadata: Extra data (status, app_id, counts, ...)
    """

    type: EventType
    run_id: Optional[str] = None
    node_id: Optional[str] = None
    node_name: Optional[str] = None
    output: Any = None
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        data: Dict[str, Any] = {
            "type": self.type.value,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.run_id is not None:
            data["run_id"] = self.run_id
        if self.node_id is not None:
            data["node_id"] = self.node_id
        if self.node_name is not None:
            data["node_name"] = self.node_name
        if self.output is not None:
            data["output"] = self.output
        if self.error is not None:
            data["error"] = self.error
        if self.metadata:
            data["metadata"] = self.metadata
        return data


Listener = Callable[[ExecutionEvent], Awaitable[None]]


class EventEmitter:
    """Event emitter for publishing execution events."""

    def __init__(self):
        self._listeners: List[Listener] = []

    def on(self, listener: Listener) -> None:
        """Register an event listener.

        Args:
            listener: Async function that receives ExecutionEvent objects
        """
        self._listeners.append(listener)

    def off(self, listener: Listener) -> None:
        """Remove an event listener."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def emit(self, event: ExecutionEvent) -> None:
        """Emit an event to all listeners, in registration order."""
        for listener in list(self._listeners):
            try:
                await listener(event)
            except Exception:
                logger.warning(
                    "Event listener %r failed on %s", listener, event.type.value, exc_info=True
                )

    def clear(self) -> None:
        """Remove all event listeners."""
        self._listeners.clear()

    def __len__(self) -> int:
        return len(self._listeners)
