"""Sequential workflow executor.

This module implements the run loop: locate the trigger, compute the
reachable nodes in topological order, dispatch each action node in turn,
thread outputs and variables through the execution context and record a
trace. The first failure aborts the run.
"""

import logging
import uuid
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, Field

from flowrun.core.dispatcher import CredentialResolver, NodeDispatcher
from flowrun.core.events import EventEmitter, EventType, ExecutionEvent
from flowrun.core.graph import WorkflowGraph, WorkflowNode
from flowrun.core.state import (
    ExecutionContext,
    ExecutionStatus,
    NodeExecutionRecord,
    RunResult,
    now_iso,
)
from flowrun.credentials.base import CredentialStore
from flowrun.parsers.workflow import WorkflowDefinition, WorkflowParser
from flowrun.providers.base import is_skipped
from flowrun.providers.set_variable import SET_VARIABLE_APP_ID
from flowrun.utils.errors import NodeExecutionError
from flowrun.utils.registry import ProviderRegistry

logger = logging.getLogger(__name__)

WorkflowInput = Union[WorkflowGraph, WorkflowDefinition, Dict[str, Any], str]


class WorkflowRunInput(BaseModel):
    """Everything needed to start a run."""

    user_id: str = Field(alias="userId")
    workflow_id: Optional[str] = Field(None, alias="workflowId")
    nodes: List[Any] = Field(default_factory=list)
    connections: List[Any] = Field(default_factory=list)
    trigger_type: Optional[str] = Field(None, alias="triggerType")
    trigger_data: Optional[Dict[str, Any]] = Field(None, alias="triggerData")

    class Config:
        populate_by_name = True

    def definition(self) -> Dict[str, Any]:
        return {"nodes": self.nodes, "connections": self.connections}


class WorkflowExecutor:
    """Run workflows one node at a time.

    Execution is strictly sequential: independent branches never interleave,
    and the only suspension points are awaited provider calls. There is no
    retry and no timeout at this level.

    Example:
        >>> executor = WorkflowExecutor(ProviderRegistry(), MemoryCredentialStore())
        >>> result = await executor.run(workflow_json, user_id="user-1",
        ...                             trigger_data={"email": "a@b.c"})
        >>> result.statuses()
        ['success', 'success']
    """

    def __init__(
        self,
        registry: Optional[ProviderRegistry] = None,
        credential_store: Optional[CredentialStore] = None,
        event_emitter: Optional[EventEmitter] = None,
        dispatcher: Optional[NodeDispatcher] = None,
        parser: Optional[WorkflowParser] = None,
    ):
        """Initialize executor.

        Args:
            registry: Provider registry (defaults to built-in providers)
            credential_store: Credential lookup backend
            event_emitter: Optional event emitter for lifecycle events
            dispatcher: Custom dispatcher; built from registry and store if omitted
            parser: Parser for raw workflow JSON
        """
        self.dispatcher = dispatcher or NodeDispatcher(registry, credential_store)
        self.events = event_emitter or EventEmitter()
        self.parser = parser or WorkflowParser()

    @property
    def registry(self) -> ProviderRegistry:
        return self.dispatcher.registry

    def load_graph(self, workflow: WorkflowInput) -> WorkflowGraph:
        """Accept a graph, a parsed definition, a dict or a JSON string.

        Raises:
            WorkflowValidationError: If there is no trigger node
        """
        if isinstance(workflow, WorkflowGraph):
            return workflow
        return self.parser.parse(workflow)

    async def run(
        self,
        workflow: WorkflowInput,
        user_id: str,
        trigger_data: Optional[Any] = None,
        run_id: Optional[str] = None,
    ) -> RunResult:
        """Execute a workflow to completion or first failure.

        Args:
            workflow: Workflow graph or definition
            user_id: User the run belongs to; credentials must be theirs
            trigger_data: Trigger payload (falls back to the definition's
                ``triggerData``)
            run_id: Identifier used in events; generated when omitted

        Returns:
            RunResult with the ordered trace and output summary

        Raises:
            WorkflowValidationError: If the workflow has no trigger (no trace)
            NodeExecutionError: If a node fails; carries the partial trace
        """
        if not isinstance(workflow, WorkflowGraph):
            workflow = self.parser.parse_definition(workflow)
            if trigger_data is None:
                trigger_data = workflow.trigger_data

        graph = self.load_graph(workflow)
        run_id = run_id or str(uuid.uuid4())

        order = graph.get_execution_order()
        context = ExecutionContext.seeded(graph.trigger_id, trigger_data)
        credentials = self.dispatcher.credential_resolver()
        node_executions: List[NodeExecutionRecord] = []

        logger.info(
            "Starting run %s: %d reachable node(s) from trigger '%s'",
            run_id,
            len(order),
            graph.trigger_id,
        )
        await self.events.emit(
            ExecutionEvent(
                type=EventType.EXECUTION_START,
                run_id=run_id,
                node_id=graph.trigger_id,
                metadata={"order": order},
            )
        )

        timestamp = now_iso()
        node_executions.append(
            NodeExecutionRecord(
                node_id=graph.trigger_id,
                node_name=graph.trigger.name,
                status=ExecutionStatus.SUCCESS,
                input_data=context.trigger,
                output_data=context.trigger,
                started_at=timestamp,
                completed_at=timestamp,
            )
        )

        for node_id in order:
            if node_id == graph.trigger_id:
                continue
            node = graph.get_node(node_id)
            if node is None or not node.is_action:
                continue

            record = await self._execute_node(
                node, user_id, context, credentials, node_executions, run_id
            )
            node_executions.append(record)

        last = node_executions[-1]
        result = RunResult(
            node_executions=node_executions,
            output_data={
                "trigger": context.trigger,
                "lastNode": last.output_data,
                "nodes": context.nodes,
            },
        )

        logger.info("Run %s completed: %d trace entries", run_id, len(node_executions))
        await self.events.emit(
            ExecutionEvent(
                type=EventType.EXECUTION_COMPLETE,
                run_id=run_id,
                output=last.output_data,
                metadata={"statuses": result.statuses()},
            )
        )
        return result

    async def _execute_node(
        self,
        node: WorkflowNode,
        user_id: str,
        context: ExecutionContext,
        credentials: CredentialResolver,
        node_executions: List[NodeExecutionRecord],
        run_id: str,
    ) -> NodeExecutionRecord:
        """Dispatch one node and build its trace record.

        On failure the error record is appended to ``node_executions`` before
        raising, so the caller's trace includes it.
        """
        started_at = now_iso()
        await self.events.emit(
            ExecutionEvent(
                type=EventType.NODE_START,
                run_id=run_id,
                node_id=node.id,
                node_name=node.name,
                metadata={"app_id": node.app_id, "action_id": node.action_id},
            )
        )

        try:
            output = await self.dispatcher.dispatch(node, user_id, context, credentials)
        except Exception as e:
            message = str(e) or "Node execution failed"
            node_executions.append(
                NodeExecutionRecord(
                    node_id=node.id,
                    node_name=node.name,
                    status=ExecutionStatus.ERROR,
                    input_data=node.config,
                    error=message,
                    started_at=started_at,
                    completed_at=now_iso(),
                )
            )
            logger.warning("Node %s (%s) failed, aborting run %s: %s", node.id, node.app_id, run_id, message)
            await self.events.emit(
                ExecutionEvent(
                    type=EventType.NODE_ERROR,
                    run_id=run_id,
                    node_id=node.id,
                    node_name=node.name,
                    error=message,
                )
            )
            await self.events.emit(
                ExecutionEvent(type=EventType.EXECUTION_ERROR, run_id=run_id, node_id=node.id, error=message)
            )
            raise NodeExecutionError(node.id, message, e, node_executions) from e

        completed_at = now_iso()
        context.record_output(node.id, output)

        if node.app_id == SET_VARIABLE_APP_ID:
            await self._apply_variable(output, context, run_id, node)

        status = ExecutionStatus.SKIPPED if is_skipped(output) else ExecutionStatus.SUCCESS
        logger.debug("Node %s finished with status %s", node.id, status.value)

        await self.events.emit(
            ExecutionEvent(
                type=EventType.NODE_COMPLETE,
                run_id=run_id,
                node_id=node.id,
                node_name=node.name,
                output=output,
                metadata={"status": status.value},
            )
        )

        return NodeExecutionRecord(
            node_id=node.id,
            node_name=node.name,
            status=status,
            input_data=node.config,
            output_data=output,
            started_at=started_at,
            completed_at=completed_at,
        )

    async def _apply_variable(
        self,
        output: Any,
        context: ExecutionContext,
        run_id: str,
        node: WorkflowNode,
    ) -> None:
        """Upsert a workflow variable from a set_variable result.

        Results without a usable name, or with a scope other than
        ``"workflow"``, leave the variables untouched.
        """
        if not isinstance(output, Mapping):
            return

        name = output.get("name")
        name = name.strip() if isinstance(name, str) else ""
        scope = output.get("scope")
        scope = scope if isinstance(scope, str) else "workflow"
        overwrite = bool(output["overwrite"]) if "overwrite" in output else True

        if not name or scope != "workflow":
            return

        if context.set_variable(name, output.get("value"), overwrite=overwrite):
            await self.events.emit(
                ExecutionEvent(
                    type=EventType.VARIABLE_SET,
                    run_id=run_id,
                    node_id=node.id,
                    node_name=node.name,
                    output=output.get("value"),
                    metadata={"name": name},
                )
            )
        else:
            logger.debug("Variable '%s' exists and overwrite is false; keeping value", name)


async def run_workflow(
    run_input: Union[WorkflowRunInput, Dict[str, Any]],
    registry: Optional[ProviderRegistry] = None,
    credential_store: Optional[CredentialStore] = None,
    event_emitter: Optional[EventEmitter] = None,
) -> RunResult:
    """Run a workflow described by a ``WorkflowRunInput``.

    Args:
        run_input: Run input model or its camelCase dict form
        registry: Provider registry (defaults to built-in providers)
        credential_store: Credential lookup backend
        event_emitter: Optional event emitter

    Returns:
        RunResult
    """
    if not isinstance(run_input, WorkflowRunInput):
        run_input = WorkflowRunInput.model_validate(run_input)

    executor = WorkflowExecutor(registry, credential_store, event_emitter)
    return await executor.run(
        run_input.definition(),
        user_id=run_input.user_id,
        trigger_data=run_input.trigger_data if run_input.trigger_data is not None else {},
        run_id=run_input.workflow_id and f"{run_input.workflow_id}:{uuid.uuid4()}",
    )
