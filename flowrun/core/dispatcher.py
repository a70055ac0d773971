"""Node dispatch: config interpolation, credential resolution, provider routing."""

import copy
import logging
from typing import Any, Dict, Optional, Tuple

from flowrun.core.graph import WorkflowNode
from flowrun.core.state import ExecutionContext
from flowrun.credentials.base import CredentialStore, Decryptor
from flowrun.credentials.crypto import decrypt_credential_data
from flowrun.providers.base import ProviderInput, call_provider, skipped
from flowrun.utils.errors import (
    CredentialForbiddenError,
    CredentialInvalidError,
    CredentialNotFoundError,
)
from flowrun.utils.registry import ProviderRegistry
from flowrun.utils.variables import interpolate

logger = logging.getLogger(__name__)


class CredentialResolver:
    """Look up, authorise and decrypt credentials for one run.

    Decrypted payloads are cached for the lifetime of the resolver, so a
    credential shared by several nodes is fetched once per run.
    """

    def __init__(
        self,
        store: Optional[CredentialStore],
        decrypt: Decryptor = decrypt_credential_data,
    ):
        self.store = store
        self.decrypt = decrypt
        self._cache: Dict[Tuple[str, str], Dict[str, Any]] = {}

    async def resolve(self, user_id: str, credential_id: str) -> Dict[str, Any]:
        """Return the decrypted payload of a credential owned by ``user_id``.

        Raises:
            CredentialNotFoundError: If the credential does not exist
            CredentialForbiddenError: If it belongs to another user
            CredentialInvalidError: If it is not marked valid
        """
        key = (user_id, credential_id)
        if key not in self._cache:
            credential = await self.store.get_by_id(credential_id) if self.store else None
            if credential is None:
                raise CredentialNotFoundError(credential_id)
            if credential.user_id != user_id:
                raise CredentialForbiddenError(credential_id)
            if not credential.is_valid:
                raise CredentialInvalidError(credential_id)
            self._cache[key] = self.decrypt(credential.encrypted_data)
        return copy.deepcopy(self._cache[key])


class NodeDispatcher:
    """Route action nodes to their providers.

    Example:
        >>> dispatcher = NodeDispatcher(ProviderRegistry(), MemoryCredentialStore())
        >>> result = await dispatcher.dispatch(node, "user-1", context)
    """

    def __init__(
        self,
        registry: Optional[ProviderRegistry] = None,
        credential_store: Optional[CredentialStore] = None,
        decrypt: Decryptor = decrypt_credential_data,
    ):
        """Initialize dispatcher.

        Args:
            registry: Provider registry (defaults to one with built-ins)
            credential_store: Credential lookup backend
            decrypt: Function turning ``encrypted_data`` into a payload dict
        """
        self.registry = registry if registry is not None else ProviderRegistry()
        self.credential_store = credential_store
        self.decrypt = decrypt

    def credential_resolver(self) -> CredentialResolver:
        """Create a resolver scoped to a single run."""
        return CredentialResolver(self.credential_store, self.decrypt)

    async def dispatch(
        self,
        node: WorkflowNode,
        user_id: str,
        context: ExecutionContext,
        credentials: Optional[CredentialResolver] = None,
    ) -> Any:
        """Execute one action node.

        Args:
            node: Node to execute
            user_id: User the run belongs to (must own any credential used)
            context: Current execution context (read only)
            credentials: Run-scoped resolver; a fresh one is used when omitted

        Returns:
            The provider's result verbatim, or a skip result when no provider
            is registered for ``node.app_id``

        Raises:
            CredentialError: If the node's credential cannot be used
            Exception: Whatever the provider raises
        """
        config = interpolate(node.config, context)

        credential = None
        if node.credential_id:
            resolver = credentials or self.credential_resolver()
            credential = await resolver.resolve(user_id, node.credential_id)

        provider = self.registry.get(node.app_id)
        if provider is None:
            logger.debug("No provider registered for '%s'; skipping node %s", node.app_id, node.id)
            return skipped(f"Executor not implemented for {node.app_id}:{node.action_id}")

        logger.debug("Dispatching node %s to %s:%s", node.id, node.app_id, node.action_id)
        return await call_provider(
            provider,
            ProviderInput(action_id=node.action_id, config=config, credential=credential),
        )
