"""In-memory credential store for testing and development."""

import uuid
from typing import Any, Dict, Optional

from flowrun.credentials.base import Credential
from flowrun.credentials.crypto import encrypt_credential_data


class MemoryCredentialStore:
    """In-memory credential storage.

    Credentials are lost when the process terminates. Useful for tests,
    development and single-request executions where the host application
    hands credentials over directly.
    """

    def __init__(self, key: Optional[bytes] = None):
        """Initialize with empty storage.

        Args:
            key: Encryption key for :meth:`add`; defaults to the configured key
        """
        self._credentials: Dict[str, Credential] = {}
        self._key = key

    async def get_by_id(self, credential_id: str) -> Optional[Credential]:
        return self._credentials.get(credential_id)

    def save(self, credential: Credential) -> None:
        """Store an already-encrypted credential."""
        self._credentials[credential.id] = credential

    def add(
        self,
        user_id: str,
        data: Dict[str, Any],
        is_valid: bool = True,
        credential_id: Optional[str] = None,
        app_id: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Credential:
        """Encrypt and store a credential payload.

        Args:
            user_id: Owning user
            data: Plain credential payload (tokens, keys, ...)
            is_valid: Whether the credential has been verified
            credential_id: Explicit ID; generated when omitted
            app_id: App the credential belongs to
            name: Display name

        Returns:
            The stored Credential
        """
        credential = Credential(
            id=credential_id or str(uuid.uuid4()),
            user_id=user_id,
            is_valid=is_valid,
            encrypted_data=encrypt_credential_data(data, self._key),
            app_id=app_id,
            name=name,
        )
        self.save(credential)
        return credential

    def delete(self, credential_id: str) -> None:
        self._credentials.pop(credential_id, None)

    def clear_all(self) -> None:
        self._credentials.clear()

    def __len__(self) -> int:
        return len(self._credentials)

    def __repr__(self) -> str:
        return f"MemoryCredentialStore(credentials={len(self._credentials)})"
