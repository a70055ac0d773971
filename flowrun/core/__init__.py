"""Core execution engine components."""

from flowrun.core.graph import Edge, NodeKind, WorkflowGraph, WorkflowNode
from flowrun.core.state import (
    ExecutionContext,
    ExecutionStatus,
    NodeExecutionRecord,
    RunResult,
)
from flowrun.core.events import EventEmitter, EventType, ExecutionEvent
from flowrun.core.dispatcher import CredentialResolver, NodeDispatcher
from flowrun.core.executor import WorkflowExecutor, WorkflowRunInput, run_workflow

__all__ = [
    "Edge",
    "NodeKind",
    "WorkflowGraph",
    "WorkflowNode",
    "ExecutionContext",
    "ExecutionStatus",
    "NodeExecutionRecord",
    "RunResult",
    "EventEmitter",
    "EventType",
    "ExecutionEvent",
    "CredentialResolver",
    "NodeDispatcher",
    "WorkflowExecutor",
    "WorkflowRunInput",
    "run_workflow",
]
