"""Credential lookup, storage backends and encryption."""

from flowrun.credentials.base import Credential, CredentialStore
from flowrun.credentials.crypto import (
    decrypt_credential_data,
    encrypt_credential_data,
    mask_credential,
)
from flowrun.credentials.memory import MemoryCredentialStore
from flowrun.credentials.sqlite import SQLiteCredentialStore

__all__ = [
    "Credential",
    "CredentialStore",
    "MemoryCredentialStore",
    "SQLiteCredentialStore",
    "decrypt_credential_data",
    "encrypt_credential_data",
    "mask_credential",
]
