"""SQLite credential store.

Reads (and optionally writes) credentials from an SQLite database with async
support. The database schema:
- id: TEXT PRIMARY KEY
- user_id: TEXT
- is_valid: INTEGER (0/1)
- encrypted_data: TEXT (``iv:authTag:ciphertext``)
- app_id: TEXT
- name: TEXT
- created_at / updated_at: TIMESTAMP
"""

import logging
from pathlib import Path
from typing import Optional

import aiosqlite

from flowrun.credentials.base import Credential
from flowrun.utils.config import get_credentials_db_path

logger = logging.getLogger(__name__)


class SQLiteCredentialStore:
    """SQLite-backed credential store."""

    def __init__(self, db_path: Optional[str] = None):
        """Initialize SQLite store.

        Args:
            db_path: Path to SQLite database file (defaults to
                ``FLOWRUN_CREDENTIALS_DB``)
        """
        self.db_path = db_path or get_credentials_db_path()
        self._initialized = False

    async def _ensure_initialized(self):
        """Ensure database and table exist."""
        if self._initialized:
            return

        db_dir = Path(self.db_path).parent
        if db_dir and not db_dir.exists():
            db_dir.mkdir(parents=True, exist_ok=True)

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                CREATE TABLE IF NOT EXISTS credentials (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    is_valid INTEGER NOT NULL DEFAULT 1,
                    encrypted_data TEXT NOT NULL,
                    app_id TEXT,
                    name TEXT,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            await db.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_credentials_user_id
                ON credentials(user_id)
                """
            )
            await db.commit()

        self._initialized = True

    async def get_by_id(self, credential_id: str) -> Optional[Credential]:
        await self._ensure_initialized()

        async with aiosqlite.connect(self.db_path) as db:
            async with db.execute(
                """
                SELECT id, user_id, is_valid, encrypted_data, app_id, name
                FROM credentials WHERE id = ?
                """,
                (credential_id,),
            ) as cursor:
                row = await cursor.fetchone()

        if row is None:
            logger.debug("Credential %s not found in %s", credential_id, self.db_path)
            return None

        return Credential(
            id=row[0],
            user_id=row[1],
            is_valid=bool(row[2]),
            encrypted_data=row[3],
            app_id=row[4],
            name=row[5],
        )

    async def save(self, credential: Credential) -> None:
        """Insert or update a credential."""
        await self._ensure_initialized()

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO credentials
                    (id, user_id, is_valid, encrypted_data, app_id, name)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(id)
                DO UPDATE SET
                    user_id = excluded.user_id,
                    is_valid = excluded.is_valid,
                    encrypted_data = excluded.encrypted_data,
                    app_id = excluded.app_id,
                    name = excluded.name,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (
                    credential.id,
                    credential.user_id,
                    int(credential.is_valid),
                    credential.encrypted_data,
                    credential.app_id,
                    credential.name,
                ),
            )
            await db.commit()

    async def set_valid(self, credential_id: str, is_valid: bool) -> None:
        """Mark a credential verified or unverified."""
        await self._ensure_initialized()

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                UPDATE credentials
                SET is_valid = ?, updated_at = CURRENT_TIMESTAMP
                WHERE id = ?
                """,
                (int(is_valid), credential_id),
            )
            await db.commit()

    async def delete(self, credential_id: str) -> None:
        await self._ensure_initialized()

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM credentials WHERE id = ?", (credential_id,))
            await db.commit()

    def __repr__(self) -> str:
        return f"SQLiteCredentialStore(db_path='{self.db_path}')"
