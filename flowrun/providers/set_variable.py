"""Set Variable provider.

Returns the variable assignment as its result; the executor applies
workflow-scoped assignments to the run's variables.
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

from flowrun.providers.base import ProviderInput, skipped

SET_VARIABLE_APP_ID = "set_variable"


class SetVariableConfig(BaseModel):
    name: str = Field(min_length=1)
    value: Any = None
    scope: Optional[Literal["workflow", "node"]] = None
    overwrite: Optional[bool] = None


async def execute_set_variable(input: ProviderInput) -> Dict[str, Any]:
    if input.action_id != "set":
        return skipped(f"Set Variable action not implemented: {input.action_id}")

    parsed = SetVariableConfig.model_validate(
        {
            "name": input.config.get("name"),
            "value": input.config.get("value"),
            "scope": input.config.get("scope"),
            "overwrite": input.config.get("overwrite"),
        }
    )

    return {
        "ok": True,
        "name": parsed.name,
        "value": parsed.value,
        "scope": parsed.scope or "workflow",
        "overwrite": parsed.overwrite if parsed.overwrite is not None else True,
    }
