"""Encryption utilities for stored credential data.

Credential payloads are JSON objects encrypted with AES-256-GCM and stored as
``iv:authTag:ciphertext`` (all hex).
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from flowrun.utils.config import get_encryption_key
from flowrun.utils.errors import CredentialDecryptionError

logger = logging.getLogger(__name__)

IV_LENGTH = 16
AUTH_TAG_LENGTH = 16


def encrypt_credential(plaintext: str, key: Optional[bytes] = None) -> str:
    """Encrypt a string.

    Args:
        plaintext: Text to encrypt
        key: 32-byte key; defaults to the configured encryption key

    Returns:
        ``iv:authTag:ciphertext`` in hex
    """
    iv = os.urandom(IV_LENGTH)
    sealed = AESGCM(key or get_encryption_key()).encrypt(
        iv, plaintext.encode("utf-8"), None
    )
    ciphertext, auth_tag = sealed[:-AUTH_TAG_LENGTH], sealed[-AUTH_TAG_LENGTH:]
    return f"{iv.hex()}:{auth_tag.hex()}:{ciphertext.hex()}"


def decrypt_credential(encrypted_data: str, key: Optional[bytes] = None) -> str:
    """Decrypt a string produced by :func:`encrypt_credential`.

    Raises:
        CredentialDecryptionError: If the format is wrong or the data was
            tampered with or encrypted under another key
    """
    parts = encrypted_data.split(":") if isinstance(encrypted_data, str) else []
    if len(parts) != 3:
        raise CredentialDecryptionError("Invalid encrypted data format")

    try:
        iv, auth_tag, ciphertext = (bytes.fromhex(part) for part in parts)
    except ValueError as e:
        raise CredentialDecryptionError("Invalid encrypted data format") from e

    try:
        plaintext = AESGCM(key or get_encryption_key()).decrypt(
            iv, ciphertext + auth_tag, None
        )
    except InvalidTag as e:
        logger.error("Credential decryption failed: authentication tag mismatch")
        raise CredentialDecryptionError(
            "Credential data could not be decrypted (key mismatch or tampering)"
        ) from e
    except ValueError as e:
        raise CredentialDecryptionError(f"Invalid encrypted data: {e}") from e

    return plaintext.decode("utf-8")


def encrypt_credential_data(data: Dict[str, Any], key: Optional[bytes] = None) -> str:
    """Encrypt a credential object."""
    return encrypt_credential(json.dumps(data), key)


def decrypt_credential_data(encrypted_data: str, key: Optional[bytes] = None) -> Dict[str, Any]:
    """Decrypt a credential object.

    Raises:
        CredentialDecryptionError: If decryption fails or the payload is not
            a JSON object
    """
    decrypted = decrypt_credential(encrypted_data, key)
    try:
        data = json.loads(decrypted)
    except json.JSONDecodeError as e:
        raise CredentialDecryptionError("Decrypted credential is not valid JSON") from e
    if not isinstance(data, dict):
        raise CredentialDecryptionError("Decrypted credential is not a JSON object")
    return data


def mask_credential(value: str) -> str:
    """Mask a secret for display, keeping the last four characters."""
    if not value or len(value) <= 8:
        return "••••••••"
    return "••••••••" + value[-4:]
