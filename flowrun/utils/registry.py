"""Provider registry mapping capability keys to action providers.

The dispatcher routes every action node through this table by the node's
``appId``. Adding an integration means registering one more provider; the
executor does not change.
"""

import logging
from typing import Dict, List, Optional

from flowrun.providers.base import Provider

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Registry of action providers keyed by ``appId``.

    Example:
        >>> registry = ProviderRegistry()
        >>> registry.register("crm", my_crm_provider)
        >>> registry.get("crm") is my_crm_provider
        True
        >>> registry.get("unknown") is None
        True
    """

    def __init__(self, include_builtins: bool = True):
        """Initialize registry.

        Args:
            include_builtins: Register the built-in providers (set_variable,
                if_condition, switch, loop, manual, schedule, webhook, slack)
        """
        self._providers: Dict[str, Provider] = {}

        if include_builtins:
            self._register_builtin_providers()

    def _register_builtin_providers(self):
        """Register built-in providers."""
        from flowrun.providers.logic import (
            execute_if_condition,
            execute_loop,
            execute_switch,
        )
        from flowrun.providers.set_variable import execute_set_variable
        from flowrun.providers.slack import SlackProvider
        from flowrun.providers.triggers import execute_manual, execute_schedule
        from flowrun.providers.webhook import WebhookProvider

        self._providers["set_variable"] = execute_set_variable
        self._providers["if_condition"] = execute_if_condition
        self._providers["switch"] = execute_switch
        self._providers["loop"] = execute_loop
        self._providers["manual"] = execute_manual
        self._providers["schedule"] = execute_schedule
        self._providers["webhook"] = WebhookProvider()
        self._providers["slack"] = SlackProvider()

    def register(self, app_id: str, provider: Provider) -> None:
        """Register (or replace) the provider for a capability key.

        Args:
            app_id: Capability key matched against node ``appId``
            provider: Callable implementing the provider contract
        """
        if app_id in self._providers:
            logger.debug("Replacing provider for '%s'", app_id)
        self._providers[app_id] = provider

    def unregister(self, app_id: str) -> None:
        self._providers.pop(app_id, None)

    def get(self, app_id: str) -> Optional[Provider]:
        """Get the provider for a capability key, or None if unregistered."""
        return self._providers.get(app_id)

    def has(self, app_id: str) -> bool:
        """Check if a provider is registered."""
        return app_id in self._providers

    def list_providers(self) -> List[str]:
        """List all registered capability keys."""
        return list(self._providers.keys())

    def clear(self) -> None:
        """Remove every provider, built-ins included."""
        self._providers.clear()

    def __contains__(self, app_id: str) -> bool:
        return self.has(app_id)

    def __repr__(self) -> str:
        return f"ProviderRegistry(providers={len(self._providers)})"
