"""Internal logic providers: IF condition, switch and loop.

These run in-process and need no credential. They do not steer execution
(every reachable node still runs); they produce structured output that
downstream nodes reference through ``{{node_id.field}}`` placeholders.
"""

import json
import math
from typing import Any, Dict, List, Optional

from jsonpath_ng import parse as jsonpath_parse
from jsonpath_ng.exceptions import JSONPathError
from pydantic import BaseModel, Field

from flowrun.providers.base import ProviderInput, skipped
from flowrun.utils.errors import ProviderError

COMPARISON_OPERATORS = ("gt", "gte", "lt", "lte")


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, separators=(",", ":"), default=str)


def _normalize(value: Any, case_sensitive: bool) -> str:
    text = _to_text(value)
    return text if case_sensitive else text.lower()


def _try_number(value: str) -> Optional[float]:
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _compare(operator: str, left: Any, right: Any) -> bool:
    if operator == "gt":
        return left > right
    if operator == "gte":
        return left >= right
    if operator == "lt":
        return left < right
    return left <= right


class IfConditionConfig(BaseModel):
    left: Any = None
    operator: str = Field(min_length=1)
    right: Any = None
    case_sensitive: Optional[bool] = Field(None, alias="caseSensitive")

    class Config:
        populate_by_name = True


async def execute_if_condition(input: ProviderInput) -> Dict[str, Any]:
    """Evaluate ``left <operator> right``.

    Values are compared as text (lower-cased unless ``caseSensitive``).
    Ordering operators compare numerically when both sides parse as finite
    numbers and fall back to text comparison otherwise; they are False when
    either side is blank.

    Raises:
        ProviderError: On an unknown operator
    """
    if input.action_id != "if":
        return skipped(f"IF action not implemented: {input.action_id}")

    parsed = IfConditionConfig.model_validate(
        {
            "left": input.config.get("left"),
            "operator": input.config.get("operator"),
            "right": input.config.get("right"),
            "caseSensitive": input.config.get("caseSensitive"),
        }
    )

    case_sensitive = bool(parsed.case_sensitive)
    left = _normalize(parsed.left, case_sensitive)
    right = _normalize(parsed.right, case_sensitive)
    left_exists = parsed.left is not None and _to_text(parsed.left).strip() != ""
    right_exists = parsed.right is not None and _to_text(parsed.right).strip() != ""
    operator = parsed.operator

    if operator == "exists":
        result = left_exists
    elif operator == "not_exists":
        result = not left_exists
    elif operator == "equals":
        result = left == right
    elif operator == "not_equals":
        result = left != right
    elif operator == "contains":
        result = right in left
    elif operator == "not_contains":
        result = right not in left
    elif operator in COMPARISON_OPERATORS:
        if not left_exists or not right_exists:
            result = False
        else:
            left_number = _try_number(left)
            right_number = _try_number(right)
            if left_number is None or right_number is None:
                result = _compare(operator, left, right)
            else:
                result = _compare(operator, left_number, right_number)
    else:
        raise ProviderError(f"Unknown IF operator: {operator}")

    return {
        "ok": True,
        "result": result,
        "operator": operator,
        "left": parsed.left,
        "right": parsed.right,
        "caseSensitive": case_sensitive,
    }


def _parse_json_list(raw: Any) -> List[Any]:
    """Accept a list or a JSON-encoded list; anything else is empty."""
    if isinstance(raw, list):
        return raw
    if isinstance(raw, str) and raw.strip():
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            return []
        return parsed if isinstance(parsed, list) else []
    return []


class SwitchConfig(BaseModel):
    value: Any = None
    cases: Any = None
    default_route: Any = Field(None, alias="defaultRoute")
    case_sensitive: Optional[bool] = Field(None, alias="caseSensitive")

    class Config:
        populate_by_name = True


async def execute_switch(input: ProviderInput) -> Dict[str, Any]:
    """Match ``value`` against ``cases`` (``[{"equals": ..., "route": ...}]``)."""
    if input.action_id != "switch":
        return skipped(f"Switch action not implemented: {input.action_id}")

    parsed = SwitchConfig.model_validate(
        {
            "value": input.config.get("value"),
            "cases": input.config.get("cases"),
            "defaultRoute": input.config.get("defaultRoute"),
            "caseSensitive": input.config.get("caseSensitive"),
        }
    )

    case_sensitive = bool(parsed.case_sensitive)
    value = _normalize(parsed.value, case_sensitive)

    for case in _parse_json_list(parsed.cases):
        if not isinstance(case, dict):
            continue
        expected = _normalize(case.get("equals"), case_sensitive)
        if not expected:
            continue
        if value == expected:
            route = case.get("route")
            return {
                "ok": True,
                "matched": True,
                "route": _to_text(route) or None,
                "value": parsed.value,
            }

    default_route = _to_text(parsed.default_route).strip() or None
    return {
        "ok": True,
        "matched": False,
        "route": default_route,
        "value": parsed.value,
    }


class LoopConfig(BaseModel):
    items: Any = None
    items_path: Optional[str] = Field(None, alias="itemsPath")
    item_variable: Optional[str] = Field(None, alias="itemVariable")
    index_variable: Optional[str] = Field(None, alias="indexVariable")
    max_iterations: Optional[int] = Field(None, alias="maxIterations", gt=0)

    class Config:
        populate_by_name = True


def _extract_items(items: Any, items_path: Optional[str]) -> List[Any]:
    """Pull the list to iterate over out of ``items``.

    Dicts are searched with the JSONPath ``itemsPath`` when given, then under
    the common keys ``items``, ``data``, ``results`` and ``array``.

    Raises:
        ProviderError: If ``itemsPath`` is not valid JSONPath
    """
    if not isinstance(items, dict):
        return _parse_json_list(items)

    if items_path and items_path.startswith("$"):
        try:
            matches = jsonpath_parse(items_path).find(items)
        except JSONPathError as e:
            raise ProviderError(f"Invalid itemsPath '{items_path}': {e}") from e
        for match in matches:
            if isinstance(match.value, list):
                return match.value
        return []

    for key in ("items", "data", "results", "array"):
        if isinstance(items.get(key), list):
            return items[key]
    return []


async def execute_loop(input: ProviderInput) -> Dict[str, Any]:
    """Expand a list into per-item iteration records.

    The loop does not re-run downstream nodes; it exposes ``iterations`` and
    ``items`` for them to reference.
    """
    if input.action_id != "loop":
        return skipped(f"Loop action not implemented: {input.action_id}")

    max_iterations = input.config.get("maxIterations")
    parsed = LoopConfig.model_validate(
        {
            "items": input.config.get("items"),
            "itemsPath": input.config.get("itemsPath"),
            "itemVariable": input.config.get("itemVariable"),
            "indexVariable": input.config.get("indexVariable"),
            "maxIterations": None if max_iterations == "" else max_iterations,
        }
    )

    items = _extract_items(parsed.items, parsed.items_path)
    if parsed.max_iterations:
        items = items[: parsed.max_iterations]

    item_variable = parsed.item_variable or "item"
    index_variable = parsed.index_variable or "index"

    iterations = [
        {item_variable: item, index_variable: index, "item": item, "index": index}
        for index, item in enumerate(items)
    ]

    return {
        "ok": True,
        "count": len(items),
        "itemVariable": item_variable,
        "indexVariable": index_variable,
        "iterations": iterations,
        "items": items,
    }
