"""Action-provider contract.

Every integration implements one capability:
``execute(input: ProviderInput) -> result``. A provider signals that it
recognises but declines an action by returning :func:`skipped`, and signals
failure by raising.
"""

import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from flowrun.utils.errors import MissingCredentialError

SKIPPED_STATUS = "skipped"


@dataclass
class ProviderInput:
    """Input handed to a provider.

    Attributes:
        action_id: Provider-specific operation key (e.g. "send_message")
        config: Node config with placeholders already resolved
        credential: Decrypted credential payload, or None
    """

    action_id: str
    config: Dict[str, Any] = field(default_factory=dict)
    credential: Optional[Dict[str, Any]] = None


Provider = Callable[[ProviderInput], Union[Any, Awaitable[Any]]]


def skipped(reason: str) -> Dict[str, Any]:
    """Result for an action a provider recognises but does not perform."""
    return {"status": SKIPPED_STATUS, "reason": reason}


def is_skipped(result: Any) -> bool:
    """Check whether a provider result is the skip sentinel."""
    return isinstance(result, dict) and result.get("status") == SKIPPED_STATUS


def require_credential(input: ProviderInput, app_name: str) -> Dict[str, Any]:
    """Return the credential or raise if the node has none.

    Raises:
        MissingCredentialError: If no credential was resolved for the node
    """
    if not input.credential:
        raise MissingCredentialError(app_name)
    return input.credential


async def call_provider(provider: Provider, input: ProviderInput) -> Any:
    """Invoke a provider, awaiting the result when it is awaitable.

    Supports coroutine functions, objects with an async ``__call__`` and
    plain functions.
    """
    result = provider(input)
    if inspect.isawaitable(result):
        result = await result
    return result
