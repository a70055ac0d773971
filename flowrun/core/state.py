"""State tracking for a single workflow run.

This module provides the run-scoped execution context and the records that
make up a run's trace.
"""

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass
class ExecutionContext:
    """Mutable state threaded through the driver loop.

    Created once per run and owned by the executor. Interpolation reads it;
    only the executor writes to it.

    Attributes:
        trigger: Trigger payload for this run
        nodes: Outputs of executed nodes keyed by node ID (append-only)
        variables: Workflow variables, accessible via {{variables.*}}
    """

    trigger: Any = field(default_factory=dict)
    nodes: Dict[str, Any] = field(default_factory=dict)
    variables: Dict[str, Any] = field(default_factory=dict)

    TRIGGER_ALIAS = "trigger"

    @classmethod
    def seeded(cls, trigger_id: str, trigger_data: Any) -> "ExecutionContext":
        """Create a context with the trigger payload recorded as node output.

        The payload is stored under the trigger node's ID and under the
        ``"trigger"`` alias.

        Args:
            trigger_id: ID of the trigger node
            trigger_data: Trigger payload (None becomes an empty dict)
        """
        trigger = trigger_data if trigger_data is not None else {}
        context = cls(trigger=trigger)
        context.nodes[trigger_id] = copy.copy(trigger)
        context.nodes[cls.TRIGGER_ALIAS] = copy.copy(trigger)
        return context

    def record_output(self, node_id: str, output: Any) -> None:
        """Store a node's output."""
        self.nodes[node_id] = output

    def get_node_output(self, node_id: str) -> Optional[Any]:
        """Get the output of a previously executed node."""
        return self.nodes.get(node_id)

    def set_variable(self, name: str, value: Any, overwrite: bool = True) -> bool:
        """Upsert a workflow variable.

        Args:
            name: Variable name
            value: Variable value
            overwrite: Replace an existing value when True

        Returns:
            True if the variable was written
        """
        if not overwrite and name in self.variables:
            return False
        self.variables[name] = value
        return True

    def as_dict(self) -> Dict[str, Any]:
        """The ``{trigger, nodes, variables}`` view used for path lookups."""
        return {
            "trigger": self.trigger,
            "nodes": self.nodes,
            "variables": self.variables,
        }


class ExecutionStatus(str, Enum):
    """Outcome of one node in the trace."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    ERROR = "error"


class NodeExecutionRecord(BaseModel):
    """One entry in the run trace. Never mutated after being appended."""

    node_id: str = Field(alias="nodeId")
    node_name: str = Field(alias="nodeName")
    status: ExecutionStatus
    input_data: Any = Field(None, alias="inputData")
    output_data: Any = Field(None, alias="outputData")
    error: Optional[str] = None
    started_at: str = Field(alias="startedAt")
    completed_at: str = Field(alias="completedAt")

    class Config:
        populate_by_name = True
        frozen = True

    def to_dict(self) -> Dict[str, Any]:
        """Serialise with camelCase keys.

        Error entries carry ``error`` and no ``outputData``; other entries
        carry ``outputData`` and no ``error``.
        """
        data = self.model_dump(by_alias=True, mode="json")
        if self.status == ExecutionStatus.ERROR:
            data.pop("outputData", None)
        else:
            data.pop("error", None)
        return data


class RunResult(BaseModel):
    """Final trace and summary of a completed run.

    Attributes:
        node_executions: Ordered trace, trigger first
        output_data: ``{"trigger", "lastNode", "nodes"}`` summary
    """

    node_executions: List[NodeExecutionRecord] = Field(
        default_factory=list, alias="nodeExecutions"
    )
    output_data: Dict[str, Any] = Field(default_factory=dict, alias="outputData")

    class Config:
        populate_by_name = True

    @property
    def last_output(self) -> Any:
        return self.output_data.get("lastNode")

    def statuses(self) -> List[str]:
        """Status of each trace entry, in order."""
        return [record.status.value for record in self.node_executions]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodeExecutions": [record.to_dict() for record in self.node_executions],
            "outputData": self.output_data,
        }
