"""Core graph data structures for flowrun.

A workflow is a set of trigger/action nodes plus directed edges. Only the
nodes forward-reachable from the trigger run, in topological order. Cycles
are tolerated: the scheduler falls back to discovery order instead of
rejecting the graph.
"""

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from flowrun.utils.errors import WorkflowValidationError

logger = logging.getLogger(__name__)


class NodeKind(str, Enum):
    """Role of a node in the workflow."""

    TRIGGER = "trigger"
    ACTION = "action"
    UNKNOWN = "unknown"

    @classmethod
    def from_raw(cls, value: Any) -> "NodeKind":
        if value == cls.TRIGGER.value:
            return cls.TRIGGER
        if value == cls.ACTION.value:
            return cls.ACTION
        return cls.UNKNOWN


class Edge(BaseModel):
    """Directed connection between two nodes.

    Edges whose endpoints are missing from the node set are inert: they are
    never traversed and never cause a failure.
    """

    source: str
    target: str

    class Config:
        frozen = True


class WorkflowNode(BaseModel):
    """A single trigger or action node, immutable for the duration of a run."""

    id: str
    kind: NodeKind = NodeKind.UNKNOWN
    app_id: str = ""
    action_id: str = ""
    config: Dict[str, Any] = Field(default_factory=dict)
    name: str = ""
    credential_id: Optional[str] = None

    class Config:
        frozen = True

    @property
    def is_trigger(self) -> bool:
        return self.kind == NodeKind.TRIGGER

    @property
    def is_action(self) -> bool:
        return self.kind == NodeKind.ACTION


def reachable_from(start_ids: Iterable[str], edges: Iterable[Edge]) -> List[str]:
    """Breadth-first traversal over forward edges.

    Args:
        start_ids: Node IDs to start from (always part of the result)
        edges: Directed edges

    Returns:
        Reachable node IDs in discovery order, without duplicates
    """
    adjacency: Dict[str, List[str]] = {}
    for edge in edges:
        adjacency.setdefault(edge.source, []).append(edge.target)

    seen: Dict[str, None] = {}
    for node_id in start_ids:
        seen.setdefault(node_id, None)
    queue = deque(seen)

    while queue:
        current = queue.popleft()
        for child_id in adjacency.get(current, []):
            if child_id in seen:
                continue
            seen[child_id] = None
            queue.append(child_id)

    return list(seen)


def topological_order(node_ids: Iterable[str], edges: Iterable[Edge]) -> List[str]:
    """Order node IDs with Kahn's algorithm.

    Only edges with both endpoints inside ``node_ids`` are considered. The
    zero in-degree queue is FIFO and seeded in ``node_ids`` order, so
    independent branches keep their discovery order.

    If the subgraph contains a cycle, the IDs are returned in their original
    order instead of raising.

    Args:
        node_ids: Node IDs to order
        edges: Directed edges

    Returns:
        List of node IDs
    """
    ids = list(dict.fromkeys(node_ids))
    members = set(ids)
    in_degree: Dict[str, int] = {node_id: 0 for node_id in ids}
    adjacency: Dict[str, List[str]] = {}

    for edge in edges:
        if edge.source not in members or edge.target not in members:
            continue
        in_degree[edge.target] += 1
        adjacency.setdefault(edge.source, []).append(edge.target)

    queue = deque(node_id for node_id in ids if in_degree[node_id] == 0)
    result: List[str] = []

    while queue:
        current = queue.popleft()
        result.append(current)
        for child_id in adjacency.get(current, []):
            in_degree[child_id] -= 1
            if in_degree[child_id] == 0:
                queue.append(child_id)

    if len(result) != len(ids):
        ordered = set(result)
        stuck = [node_id for node_id in ids if node_id not in ordered]
        logger.warning(
            "Workflow graph contains a cycle through %s; running reachable nodes "
            "in discovery order",
            ", ".join(stuck),
        )
        return ids

    return result


@dataclass
class WorkflowGraph:
    """Typed view over a workflow definition.

    Attributes:
        nodes: Mapping of node IDs to nodes
        edges: Edges between nodes (possibly referencing unknown IDs)
        trigger: The trigger node, the traversal root
    """

    nodes: Dict[str, WorkflowNode]
    edges: List[Edge]
    trigger: WorkflowNode

    @classmethod
    def from_nodes_and_edges(
        cls, nodes: Iterable[WorkflowNode], edges: Iterable[Edge]
    ) -> "WorkflowGraph":
        """Build a graph and locate its trigger node.

        Later nodes replace earlier ones with the same ID. If several trigger
        nodes are present the first one wins.

        Raises:
            WorkflowValidationError: If there is no trigger node
        """
        node_list = list(nodes)
        node_map: Dict[str, WorkflowNode] = {}
        for node in node_list:
            node_map[node.id] = node

        triggers = [node for node in node_list if node.is_trigger]
        if not triggers:
            raise WorkflowValidationError("Workflow has no trigger node")
        if len(triggers) > 1:
            logger.warning(
                "Workflow has %d trigger nodes; using '%s'",
                len(triggers),
                triggers[0].id,
            )

        return cls(nodes=node_map, edges=list(edges), trigger=triggers[0])

    @property
    def trigger_id(self) -> str:
        return self.trigger.id

    def reachable(self) -> List[str]:
        """Node IDs reachable from the trigger, trigger first."""
        return reachable_from([self.trigger_id], self.edges)

    def get_execution_order(self) -> List[str]:
        """Topological order of the reachable subset."""
        return topological_order(self.reachable(), self.edges)

    def get_node(self, node_id: str) -> Optional[WorkflowNode]:
        return self.nodes.get(node_id)

    def has_node(self, node_id: str) -> bool:
        """Check if a node exists in the graph."""
        return node_id in self.nodes

    def get_children(self, node_id: str) -> List[str]:
        """Get child node IDs for a given node."""
        return [edge.target for edge in self.edges if edge.source == node_id]
