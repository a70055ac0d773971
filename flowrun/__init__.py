"""
FlowRun: Python Workflow Automation Runtime

Runs user-authored workflows: a trigger node plus action nodes joined by
directed connections. Reachable nodes execute one at a time in topological
order, with ``{{ }}`` templates in each node's config resolved against the
trigger payload, earlier node outputs and workflow variables.

Example:
    >>> from flowrun import WorkflowExecutor, ProviderRegistry, MemoryCredentialStore
    >>>
    >>> store = MemoryCredentialStore()
    >>> executor = WorkflowExecutor(ProviderRegistry(), store)
    >>> result = await executor.run(
    ...     {
    ...         "nodes": [
    ...             {"id": "t", "type": "trigger", "appId": "manual"},
    ...             {"id": "v", "type": "action", "appId": "set_variable",
    ...              "actionId": "set",
    ...              "config": {"name": "greeting", "value": "Hi {{trigger.name}}"}},
    ...         ],
    ...         "connections": [{"from": "t", "to": "v"}],
    ...     },
    ...     user_id="user-1",
    ...     trigger_data={"name": "Ada"},
    ... )
    >>> result.output_data["lastNode"]["value"]
    'Hi Ada'
"""

__version__ = "0.1.0"

# Core components
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

# Provider registry
from flowrun.utils.registry import ProviderRegistry

# Providers
from flowrun.providers.base import ProviderInput, skipped, is_skipped

# Credentials
from flowrun.credentials.base import Credential, CredentialStore
from flowrun.credentials.memory import MemoryCredentialStore
from flowrun.credentials.sqlite import SQLiteCredentialStore

# Parsers
from flowrun.parsers.workflow import WorkflowParser, WorkflowDefinition

# Errors
from flowrun.utils.errors import (
    FlowRunError,
    ConfigurationError,
    WorkflowValidationError,
    CredentialError,
    CredentialNotFoundError,
    CredentialForbiddenError,
    CredentialInvalidError,
    MissingCredentialError,
    CredentialDecryptionError,
    ProviderError,
    NodeExecutionError,
)

__all__ = [
    # Version
    "__version__",
    # Core
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
    # Registry
    "ProviderRegistry",
    # Providers
    "ProviderInput",
    "skipped",
    "is_skipped",
    # Credentials
    "Credential",
    "CredentialStore",
    "MemoryCredentialStore",
    "SQLiteCredentialStore",
    # Parsers
    "WorkflowParser",
    "WorkflowDefinition",
    # Errors
    "FlowRunError",
    "ConfigurationError",
    "WorkflowValidationError",
    "CredentialError",
    "CredentialNotFoundError",
    "CredentialForbiddenError",
    "CredentialInvalidError",
    "MissingCredentialError",
    "CredentialDecryptionError",
    "ProviderError",
    "NodeExecutionError",
]
