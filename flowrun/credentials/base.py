"""Credential model and the lookup protocol consumed by the dispatcher."""

from typing import Any, Callable, Dict, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, Field


class Credential(BaseModel):
    """A stored credential.

    The payload is kept encrypted; only the dispatcher decrypts it, right
    before handing it to a provider.
    """

    id: str
    user_id: str = Field(alias="userId")
    is_valid: bool = Field(True, alias="isValid")
    encrypted_data: str = Field(alias="encryptedData")
    app_id: Optional[str] = Field(None, alias="appId")
    name: Optional[str] = None

    class Config:
        populate_by_name = True


Decryptor = Callable[[str], Dict[str, Any]]


@runtime_checkable
class CredentialStore(Protocol):
    """Protocol for credential lookup backends."""

    async def get_by_id(self, credential_id: str) -> Optional[Credential]:
        """Look up a credential.

        Args:
            credential_id: Credential identifier

        Returns:
            Credential or None if not found
        """
        ...
