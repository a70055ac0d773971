"""Parsers for converting workflow JSON to flowrun graphs."""

from flowrun.parsers.workflow import (
    ConnectionSchema,
    WorkflowDefinition,
    WorkflowNodeSchema,
    WorkflowParser,
)

__all__ = [
    "ConnectionSchema",
    "WorkflowDefinition",
    "WorkflowNodeSchema",
    "WorkflowParser",
]
