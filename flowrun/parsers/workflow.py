"""Workflow definition JSON parser.

Parses the editor's workflow JSON (``nodes``, ``connections``,
``triggerData``) into a :class:`~flowrun.core.graph.WorkflowGraph`. Field
names are tolerant: connections may use ``from``/``source``/``sourceId`` and
``to``/``target``/``targetId``, and node fields fall back to values stored
inside ``config``.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from flowrun.core.graph import Edge, NodeKind, WorkflowGraph, WorkflowNode
from flowrun.utils.errors import WorkflowValidationError

logger = logging.getLogger(__name__)


def _first_text(*values: Any) -> str:
    """String form of the first truthy value, or an empty string."""
    for value in values:
        if value:
            return str(value)
    return ""


class WorkflowNodeSchema(BaseModel):
    """Schema for a node in workflow JSON."""

    id: Any = None
    type: Any = None
    app_id: Any = Field(None, alias="appId")
    action_id: Any = Field(None, alias="actionId")
    config: Any = None
    name: Any = None
    credential_id: Any = Field(None, alias="credentialId")

    class Config:
        populate_by_name = True
        extra = "allow"

    def to_node(self) -> Optional[WorkflowNode]:
        """Build the typed node, or None when the entry has no id."""
        node_id = _first_text(self.id)
        if not node_id:
            return None

        config: Dict[str, Any] = self.config if isinstance(self.config, dict) else {}

        credential_id = None
        for candidate in (self.credential_id, config.get("credentialId")):
            if isinstance(candidate, str) and candidate:
                credential_id = candidate
                break

        return WorkflowNode(
            id=node_id,
            kind=NodeKind.from_raw(self.type),
            app_id=_first_text(self.app_id, config.get("appId")),
            action_id=_first_text(
                self.action_id, config.get("actionId"), config.get("selectedActionId")
            ),
            config=config,
            name=_first_text(self.name, config.get("name"), node_id) or "Node",
            credential_id=credential_id,
        )


class ConnectionSchema(BaseModel):
    """Schema for a connection in workflow JSON."""

    from_: Any = Field(None, alias="from")
    source: Any = None
    source_id: Any = Field(None, alias="sourceId")
    to: Any = None
    target: Any = None
    target_id: Any = Field(None, alias="targetId")

    class Config:
        populate_by_name = True
        extra = "allow"

    def endpoints(self) -> Tuple[str, str]:
        return (
            _first_text(self.from_, self.source, self.source_id),
            _first_text(self.to, self.target, self.target_id),
        )

    def to_edge(self) -> Optional[Edge]:
        """Build the edge, or None when either endpoint is missing."""
        source, target = self.endpoints()
        if not source or not target:
            return None
        return Edge(source=source, target=target)


class WorkflowDefinition(BaseModel):
    """Schema for a complete workflow definition."""

    nodes: List[WorkflowNodeSchema] = Field(default_factory=list)
    connections: List[ConnectionSchema] = Field(default_factory=list)
    trigger_data: Optional[Dict[str, Any]] = Field(None, alias="triggerData")

    class Config:
        populate_by_name = True
        extra = "allow"

    @field_validator("nodes", "connections", mode="before")
    @classmethod
    def _drop_non_objects(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [item for item in value if isinstance(item, dict)]
        return value


class WorkflowParser:
    """Parse workflow JSON into a WorkflowGraph.

    Example:
        >>> parser = WorkflowParser()
        >>> graph = parser.parse({
        ...     "nodes": [
        ...         {"id": "t", "type": "trigger", "appId": "manual"},
        ...         {"id": "a", "type": "action", "appId": "slack",
        ...          "actionId": "send_message", "config": {"text": "hi"}},
        ...     ],
        ...     "connections": [{"source": "t", "target": "a"}],
        ... })
        >>> graph.get_execution_order()
        ['t', 'a']
    """

    def parse(
        self, json_data: Union[str, Dict[str, Any], WorkflowDefinition]
    ) -> WorkflowGraph:
        """Parse workflow JSON into a WorkflowGraph.

        Args:
            json_data: Workflow JSON as a string, dict, or parsed definition

        Returns:
            WorkflowGraph

        Raises:
            WorkflowValidationError: If the JSON is malformed or has no trigger
        """
        definition = self.parse_definition(json_data)
        return self.build_graph(definition)

    def parse_definition(
        self, json_data: Union[str, Dict[str, Any], WorkflowDefinition]
    ) -> WorkflowDefinition:
        """Validate raw JSON against the definition schema."""
        if isinstance(json_data, WorkflowDefinition):
            return json_data

        if isinstance(json_data, str):
            try:
                json_data = json.loads(json_data)
            except json.JSONDecodeError as e:
                raise WorkflowValidationError(f"Invalid workflow JSON: {e}") from e

        try:
            return WorkflowDefinition.model_validate(json_data)
        except ValidationError as e:
            raise WorkflowValidationError(f"Invalid workflow definition: {e}") from e

    def build_graph(self, definition: WorkflowDefinition) -> WorkflowGraph:
        nodes = [n for n in (s.to_node() for s in definition.nodes) if n is not None]
        edges = [e for e in (c.to_edge() for c in definition.connections) if e is not None]

        dropped = len(definition.connections) - len(edges)
        if dropped:
            logger.debug("Ignored %d connection(s) without both endpoints", dropped)

        return WorkflowGraph.from_nodes_and_edges(nodes, edges)
