"""Trigger-only apps.

``manual`` and ``schedule`` only ever start workflows. If one is wired in as
an action by mistake it is skipped rather than failing the run.
"""

from typing import Any, Dict

from flowrun.providers.base import ProviderInput, skipped


async def execute_manual(input: ProviderInput) -> Dict[str, Any]:
    return skipped(f"Manual trigger has no actions (requested: {input.action_id})")


async def execute_schedule(input: ProviderInput) -> Dict[str, Any]:
    return skipped(f"Schedule has no actions (requested: {input.action_id})")
