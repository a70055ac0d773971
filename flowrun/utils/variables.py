"""Template interpolation for node configuration.

Node configs may contain ``{{ expression }}`` placeholders. Before a node is
dispatched its config is walked recursively and each placeholder is replaced
with a value looked up in the execution context.

Supported expressions, tried in this order:
- ``{{trigger.x}}`` / ``{{nodes.id.x}}`` / ``{{variables.x}}`` - dotted path
  against the whole context
- ``{{variables.x}}`` - path into workflow variables
- ``{{trigger.x}}`` - path into the trigger payload
- ``{{nodes.id.x}}`` - path into node outputs
- ``{{node_id.x}}`` - path into a single node's output

Anything unresolved becomes an empty string.
"""

import json
import re
from typing import TYPE_CHECKING, Any, Dict, List, Union

if TYPE_CHECKING:
    from flowrun.core.state import ExecutionContext


class _Missing:
    """Marker for a path that does not resolve (distinct from a None value)."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()

PATH_PREFIXES = ("variables", "trigger", "nodes")


def split_path(path: str) -> List[str]:
    """Split a dotted path, dropping empty segments."""
    return [segment for segment in path.split(".") if segment]


def get_path(obj: Any, path: Union[str, List[str]]) -> Any:
    """Get a nested value by dotted path.

    Dict segments are keys; list segments are integer indices.

    Args:
        obj: Object to walk
        path: Dotted path (e.g. "user.emails.0") or list of segments

    Returns:
        Value at path, or MISSING if any segment does not resolve
    """
    segments = split_path(path) if isinstance(path, str) else path
    current = obj

    for segment in segments:
        if isinstance(current, dict):
            if segment not in current:
                return MISSING
            current = current[segment]
        elif isinstance(current, (list, tuple)):
            try:
                index = int(segment)
            except ValueError:
                return MISSING
            if index < 0 or index >= len(current):
                return MISSING
            current = current[index]
        else:
            return MISSING

    return current


def stringify(value: Any) -> str:
    """Render a resolved value for insertion into a template string."""
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


class Interpolator:
    """Resolve ``{{ }}`` placeholders against an execution context.

    Resolution never mutates the context and never raises for unknown
    references.

    Example:
        >>> context = ExecutionContext.seeded("t1", {"user": {"name": "Ada"}})
        >>> Interpolator(context).interpolate({"text": "Hi {{trigger.user.name}}"})
        {'text': 'Hi Ada'}
    """

    PATTERN = re.compile(r"\{\{\s*([^}]+?)\s*\}\}")

    def __init__(self, context: "ExecutionContext"):
        """Initialize with the context to resolve against.

        Args:
            context: ExecutionContext holding trigger, node outputs and variables
        """
        self.context = context

    def interpolate(self, value: Any) -> Any:
        """Recursively resolve placeholders in a JSON-like value.

        Strings are templated, lists/tuples element-wise, dicts value-wise
        (keys untouched). Everything else is returned as is.
        """
        if isinstance(value, str):
            return self.resolve_string(value)
        if isinstance(value, (list, tuple)):
            return [self.interpolate(item) for item in value]
        if isinstance(value, dict):
            return {key: self.interpolate(item) for key, item in value.items()}
        return value

    def resolve_string(self, template: str) -> str:
        """Replace every placeholder in a template string."""
        if "{{" not in template:
            return template

        def replacer(match: "re.Match[str]") -> str:
            value = self.resolve_expression(match.group(1))
            if value is MISSING:
                return ""
            return stringify(value)

        return self.PATTERN.sub(replacer, template)

    def resolve_expression(self, expression: str) -> Any:
        """Resolve a single expression (without the braces).

        Returns:
            The resolved value, or MISSING
        """
        expr = expression.strip()
        if not expr:
            return MISSING

        direct = get_path(self.context.as_dict(), expr)
        if direct is not MISSING:
            return direct

        scopes: Dict[str, Any] = {
            "variables": self.context.variables,
            "trigger": self.context.trigger,
            "nodes": self.context.nodes,
        }
        for prefix in PATH_PREFIXES:
            if expr.startswith(prefix + "."):
                return get_path(scopes[prefix], expr[len(prefix) + 1:])

        node_id, dot, sub_path = expr.partition(".")
        if dot and node_id:
            if node_id not in self.context.nodes:
                return MISSING
            return get_path(self.context.nodes[node_id], sub_path)

        return MISSING


def interpolate(value: Any, context: "ExecutionContext") -> Any:
    """Resolve placeholders in ``value`` against ``context``.

    Args:
        value: JSON-like value (typically a node config)
        context: Execution context

    Returns:
        A new value with placeholders replaced
    """
    return Interpolator(context).interpolate(value)
