from __future__ import annotations

import hashlib
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

import aiosqlite
import structlog

from ..models import CheckResult, MessageRecord, SpamRecord
from .base import StorageGateway

logger = structlog.get_logger(__name__)


CREATE_MESSAGES = """
CREATE TABLE IF NOT EXISTS messages (
    hash TEXT PRIMARY KEY,
    chat_id INTEGER NOT NULL,
    user_id INTEGER NOT NULL,
    username TEXT NOT NULL,
    msg_id INTEGER NOT NULL,
    text TEXT NOT NULL,
    recorded_at TEXT NOT NULL
)
"""

CREATE_MESSAGES_USER_INDEX = """
CREATE INDEX IF NOT EXISTS idx_messages_user ON messages (user_id, recorded_at)
"""


CREATE_SPAM = """
CREATE TABLE IF NOT EXISTS spam (
    user_id INTEGER PRIMARY KEY,
    username TEXT NOT NULL,
    text TEXT NOT NULL,
    checks_json TEXT NOT NULL,
    recorded_at TEXT NOT NULL
)
"""


CREATE_SAMPLES = """
CREATE TABLE IF NOT EXISTS samples (
    hash TEXT PRIMARY KEY,
    kind TEXT NOT NULL CHECK (kind IN ('spam', 'ham')),
    text TEXT NOT NULL,
    recorded_at TEXT NOT NULL
)
"""


CREATE_APPROVED = """
CREATE TABLE IF NOT EXISTS approved_users (
    user_id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    approved_at TEXT NOT NULL
)
"""


def text_hash(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SQLiteStorage(StorageGateway):
    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._conn: Optional[aiosqlite.Connection] = None

    async def connect(self) -> None:
        self._conn = await aiosqlite.connect(self._path)
        self._conn.row_factory = aiosqlite.Row
        await self._conn.execute("PRAGMA journal_mode=WAL")
        for statement in (CREATE_MESSAGES, CREATE_MESSAGES_USER_INDEX, CREATE_SPAM, CREATE_SAMPLES, CREATE_APPROVED):
            await self._conn.execute(statement)
        await self._conn.commit()
        logger.info("sqlite_connected", path=str(self._path))

    async def disconnect(self) -> None:
        if self._conn:
            await self._conn.close()
            self._conn = None

    async def message(self, text: str) -> Optional[MessageRecord]:
        assert self._conn
        cursor = await self._conn.execute(
            "SELECT user_id, username, msg_id, text FROM messages WHERE hash = ?",
            (text_hash(text),),
        )
        row = await cursor.fetchone()
        await cursor.close()
        if row is None:
            return None
        return MessageRecord(
            user_id=row["user_id"],
            username=row["username"],
            msg_id=row["msg_id"],
            text=row["text"],
        )

    async def spam(self, user_id: int) -> Optional[SpamRecord]:
        assert self._conn
        cursor = await self._conn.execute(
            "SELECT user_id, username, text, checks_json FROM spam WHERE user_id = ?",
            (user_id,),
        )
        row = await cursor.fetchone()
        await cursor.close()
        if row is None:
            return None
        checks = [CheckResult(**item) for item in json.loads(row["checks_json"])]
        return SpamRecord(user_id=row["user_id"], username=row["username"], text=row["text"], checks=checks)

    async def user_name_by_id(self, user_id: int) -> str:
        assert self._conn
        cursor = await self._conn.execute(
            "SELECT username FROM messages WHERE user_id = ? ORDER BY recorded_at DESC LIMIT 1",
            (user_id,),
        )
        row = await cursor.fetchone()
        await cursor.close()
        return row["username"] if row else ""

    async def add_message(self, text: str, chat_id: int, user_id: int, username: str, msg_id: int) -> None:
        assert self._conn
        await self._conn.execute(
            """
            INSERT INTO messages (hash, chat_id, user_id, username, msg_id, text, recorded_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(hash) DO UPDATE SET
                chat_id=excluded.chat_id,
                user_id=excluded.user_id,
                username=excluded.username,
                msg_id=excluded.msg_id,
                recorded_at=excluded.recorded_at
            """,
            (text_hash(text), chat_id, user_id, username, msg_id, text, _now()),
        )
        await self._conn.commit()
        logger.debug("sqlite_add_message", user_id=user_id, msg_id=msg_id)

    async def add_spam(self, user_id: int, username: str, text: str, checks: Iterable[CheckResult]) -> None:
        assert self._conn
        checks_json = json.dumps(
            [{"name": check.name, "spam": check.spam, "details": check.details} for check in checks]
        )
        await self._conn.execute(
            """
            INSERT INTO spam (user_id, username, text, checks_json, recorded_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                username=excluded.username,
                text=excluded.text,
                checks_json=excluded.checks_json,
                recorded_at=excluded.recorded_at
            """,
            (user_id, username, text, checks_json, _now()),
        )
        await self._conn.commit()
        logger.info("sqlite_add_spam", user_id=user_id)

    async def add_sample(self, kind: str, text: str) -> None:
        assert self._conn
        await self._conn.execute(
            """
            INSERT INTO samples (hash, kind, text, recorded_at) VALUES (?, ?, ?, ?)
            ON CONFLICT(hash) DO UPDATE SET kind=excluded.kind, recorded_at=excluded.recorded_at
            """,
            (text_hash(text), kind, text, _now()),
        )
        await self._conn.commit()
        logger.info("sqlite_add_sample", kind=kind)

    async def sample_kind(self, text: str) -> Optional[str]:
        assert self._conn
        cursor = await self._conn.execute("SELECT kind FROM samples WHERE hash = ?", (text_hash(text),))
        row = await cursor.fetchone()
        await cursor.close()
        return row["kind"] if row else None

    async def approve_user(self, user_id: int, name: str) -> None:
        assert self._conn
        await self._conn.execute(
            """
            INSERT INTO approved_users (user_id, name, approved_at) VALUES (?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET name=excluded.name
            """,
            (user_id, name, _now()),
        )
        await self._conn.commit()
        logger.info("sqlite_approve_user", user_id=user_id, name=name)

    async def disapprove_user(self, user_id: int) -> None:
        assert self._conn
        await self._conn.execute("DELETE FROM approved_users WHERE user_id = ?", (user_id,))
        await self._conn.commit()
        logger.info("sqlite_disapprove_user", user_id=user_id)

    async def is_approved(self, user_id: int) -> bool:
        assert self._conn
        cursor = await self._conn.execute("SELECT 1 FROM approved_users WHERE user_id = ?", (user_id,))
        row = await cursor.fetchone()
        await cursor.close()
        return row is not None
