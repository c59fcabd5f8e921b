from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

TRUE_SETTING_VALUES = frozenset({"1", "true", "yes", "on"})
FALSE_SETTING_VALUES = frozenset({"0", "false", "no", "off"})


class JournalDatabase:
    """SQLite-backed durable key-value storage for journal documents and settings."""

    def __init__(self, db_file: Path):
        self._db_file = Path(db_file)
        self._db_file.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._init_schema()

    @property
    def path(self) -> Path:
        return self._db_file

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_file, timeout=30)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        return conn

    @contextmanager
    def _connection(self):
        conn = self._connect()
        try:
            yield conn
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._lock, self._connection() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    name TEXT PRIMARY KEY,
                    body TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS app_settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );
                """
            )
            conn.commit()

    def get_document(self, name: str) -> str | None:
        with self._lock, self._connection() as conn:
            row = conn.execute(
                "SELECT body FROM documents WHERE name = ?",
                (name,),
            ).fetchone()
        if row is None:
            return None
        return str(row["body"])

    def set_document(self, name: str, body: str) -> None:
        now = datetime.now().astimezone().isoformat()
        with self._lock, self._connection() as conn:
            conn.execute(
                """
                INSERT INTO documents(name, body, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(name) DO UPDATE SET
                    body = excluded.body,
                    updated_at = excluded.updated_at
                """,
                (name, body, now),
            )
            conn.commit()

    def delete_document(self, name: str) -> None:
        with self._lock, self._connection() as conn:
            conn.execute("DELETE FROM documents WHERE name = ?", (name,))
            conn.commit()

    def document_updated_at(self, name: str) -> str:
        with self._lock, self._connection() as conn:
            row = conn.execute(
                "SELECT updated_at FROM documents WHERE name = ?",
                (name,),
            ).fetchone()
        if row is None:
            return ""
        return str(row["updated_at"])

    def get_setting(self, key: str, default: str | None = None) -> str | None:
        with self._lock, self._connection() as conn:
            row = conn.execute(
                "SELECT value FROM app_settings WHERE key = ?",
                (key,),
            ).fetchone()
        if row is None:
            return default
        return str(row["value"])

    def get_setting_bool(self, key: str, default: bool) -> bool:
        value = self.get_setting(key)
        if value is None:
            return default
        return value.strip().lower() in TRUE_SETTING_VALUES

    def set_setting(self, key: str, value: str) -> None:
        with self._lock, self._connection() as conn:
            conn.execute(
                """
                INSERT INTO app_settings(key, value)
                VALUES(?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, value),
            )
            conn.commit()

    def list_settings(self) -> dict[str, str]:
        with self._lock, self._connection() as conn:
            rows = conn.execute("SELECT key, value FROM app_settings ORDER BY key ASC").fetchall()
        return {str(row["key"]): str(row["value"]) for row in rows}
