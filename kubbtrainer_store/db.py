from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any

from kubbtrainer_core.inkast_blast import InkastBlastSession
from kubbtrainer_core.practice import PracticeSession
from kubbtrainer_core.settings import resolve_db_path

logger = logging.getLogger(__name__)

PRACTICE_TABLE = "practice_sessions"
INKAST_TABLE = "inkast_blast_sessions"

PRACTICE_FIELDS = [
    "id",
    "date",
    "target",
    "total_kubbs",
    "total_batons",
    "start_time",
    "end_time",
    "is_complete",
    "is_paused",
    "rounds",
    "created_at",
    "modified_at",
]

INKAST_FIELDS = [
    "id",
    "date",
    "game_phase",
    "start_time",
    "end_time",
    "is_complete",
    "is_paused",
    "total_rounds",
    "total_inkast_kubbs",
    "total_kubbs_cleared_first_throw",
    "total_batons_used",
    "total_penalty_kubbs",
    "total_neighbor_kubbs",
    "total_misses",
    "rounds",
    "created_at",
    "modified_at",
]

_BOOL_FIELDS = ("is_complete", "is_paused")


def _to_row(payload: dict[str, Any], fields: list[str]) -> tuple[Any, ...]:
    values: list[Any] = []
    for name in fields:
        value = payload[name]
        if name == "rounds":
            value = json.dumps(value, separators=(",", ":"), ensure_ascii=True)
        elif name in _BOOL_FIELDS:
            value = 1 if value else 0
        values.append(value)
    return tuple(values)


def _from_row(row: sqlite3.Row) -> dict[str, Any]:
    data = dict(row)
    data["rounds"] = json.loads(data["rounds"] or "[]")
    for name in _BOOL_FIELDS:
        data[name] = bool(data[name])
    return data


class Database:
    def __init__(self, db_path: str | Path | None = None) -> None:
        self.db_path = Path(db_path) if db_path is not None else resolve_db_path()
        self.conn = sqlite3.connect(str(self.db_path))
        self.conn.row_factory = sqlite3.Row
        self.initialize()
        logger.debug("Opened training database at %s", self.db_path)

    def initialize(self) -> None:
        self.conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS practice_sessions (
                id TEXT PRIMARY KEY,
                date TEXT NOT NULL,
                target INTEGER NOT NULL,
                total_kubbs INTEGER NOT NULL,
                total_batons INTEGER NOT NULL,
                start_time TEXT NOT NULL,
                end_time TEXT,
                is_complete INTEGER NOT NULL,
                is_paused INTEGER NOT NULL,
                rounds TEXT NOT NULL,
                created_at TEXT NOT NULL,
                modified_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS inkast_blast_sessions (
                id TEXT PRIMARY KEY,
                date TEXT NOT NULL,
                game_phase TEXT NOT NULL,
                start_time TEXT NOT NULL,
                end_time TEXT,
                is_complete INTEGER NOT NULL,
                is_paused INTEGER NOT NULL,
                total_rounds INTEGER NOT NULL,
                total_inkast_kubbs INTEGER NOT NULL,
                total_kubbs_cleared_first_throw INTEGER NOT NULL,
                total_batons_used INTEGER NOT NULL,
                total_penalty_kubbs INTEGER NOT NULL,
                total_neighbor_kubbs INTEGER NOT NULL,
                total_misses INTEGER NOT NULL,
                rounds TEXT NOT NULL,
                created_at TEXT NOT NULL,
                modified_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS app_state (
                key TEXT PRIMARY KEY,
                value TEXT
            );
            """
        )
        self._ensure_date_indexes()
        self.conn.commit()

    def _ensure_date_indexes(self) -> None:
        self.conn.execute("CREATE INDEX IF NOT EXISTS idx_practice_sessions_date ON practice_sessions(date)")
        self.conn.execute("CREATE INDEX IF NOT EXISTS idx_inkast_blast_sessions_date ON inkast_blast_sessions(date)")

    def close(self) -> None:
        self.conn.close()

    def execute(self, query: str, params: tuple[Any, ...] = ()) -> sqlite3.Cursor:
        cur = self.conn.execute(query, params)
        self.conn.commit()
        return cur

    def query_all(self, query: str, params: tuple[Any, ...] = ()) -> list[sqlite3.Row]:
        cur = self.conn.execute(query, params)
        return list(cur.fetchall())

    def query_one(self, query: str, params: tuple[Any, ...] = ()) -> sqlite3.Row | None:
        cur = self.conn.execute(query, params)
        return cur.fetchone()

    # Generic row helpers

    def _insert(self, table: str, fields: list[str], payload: dict[str, Any], replace: bool = False) -> None:
        verb = "INSERT OR REPLACE" if replace else "INSERT"
        placeholders = ", ".join("?" for _ in fields)
        self.execute(
            f"{verb} INTO {table} ({', '.join(fields)}) VALUES ({placeholders})",
            _to_row(payload, fields),
        )

    def _update(self, table: str, fields: list[str], payload: dict[str, Any]) -> bool:
        columns = [f for f in fields if f != "id"]
        assignments = ", ".join(f"{f} = ?" for f in columns)
        values = _to_row(payload, columns) + (payload["id"],)
        cur = self.execute(f"UPDATE {table} SET {assignments} WHERE id = ?", values)
        return cur.rowcount > 0

    def _delete(self, table: str, session_id: str) -> bool:
        cur = self.execute(f"DELETE FROM {table} WHERE id = ?", (session_id,))
        return cur.rowcount > 0

    def _by_date_range(self, table: str, start: datetime, end: datetime) -> list[sqlite3.Row]:
        return self.query_all(
            f"SELECT * FROM {table} WHERE date >= ? AND date <= ? ORDER BY date DESC",
            (start.isoformat(), end.isoformat()),
        )

    # Practice sessions

    def create_practice_session(self, session: PracticeSession) -> str:
        self._insert(PRACTICE_TABLE, PRACTICE_FIELDS, session.to_dict())
        logger.debug("Created practice session %s", session.id)
        return session.id

    def read_practice_session(self, session_id: str) -> PracticeSession | None:
        row = self.query_one("SELECT * FROM practice_sessions WHERE id = ?", (session_id,))
        if row is None:
            return None
        return PracticeSession.from_dict(_from_row(row))

    def read_all_practice_sessions(self) -> list[PracticeSession]:
        rows = self.query_all("SELECT * FROM practice_sessions ORDER BY date DESC")
        return [PracticeSession.from_dict(_from_row(r)) for r in rows]

    def update_practice_session(self, session: PracticeSession) -> bool:
        updated = self._update(PRACTICE_TABLE, PRACTICE_FIELDS, session.to_dict())
        logger.debug("Updated practice session %s: %s", session.id, updated)
        return updated

    def save_practice_session(self, session: PracticeSession) -> None:
        self._insert(PRACTICE_TABLE, PRACTICE_FIELDS, session.to_dict(), replace=True)

    def delete_practice_session(self, session_id: str) -> bool:
        return self._delete(PRACTICE_TABLE, session_id)

    def get_practice_sessions_by_date_range(self, start: datetime, end: datetime) -> list[PracticeSession]:
        rows = self._by_date_range(PRACTICE_TABLE, start, end)
        return [PracticeSession.from_dict(_from_row(r)) for r in rows]

    # Inkast & Blast sessions

    def create_inkast_blast_session(self, session: InkastBlastSession) -> str:
        self._insert(INKAST_TABLE, INKAST_FIELDS, session.to_dict())
        logger.debug("Created inkast blast session %s", session.id)
        return session.id

    def read_inkast_blast_session(self, session_id: str) -> InkastBlastSession | None:
        row = self.query_one("SELECT * FROM inkast_blast_sessions WHERE id = ?", (session_id,))
        if row is None:
            return None
        return InkastBlastSession.from_dict(_from_row(row))

    def read_all_inkast_blast_sessions(self) -> list[InkastBlastSession]:
        rows = self.query_all("SELECT * FROM inkast_blast_sessions ORDER BY date DESC")
        return [InkastBlastSession.from_dict(_from_row(r)) for r in rows]

    def update_inkast_blast_session(self, session: InkastBlastSession) -> bool:
        updated = self._update(INKAST_TABLE, INKAST_FIELDS, session.to_dict())
        logger.debug("Updated inkast blast session %s: %s", session.id, updated)
        return updated

    def save_inkast_blast_session(self, session: InkastBlastSession) -> None:
        self._insert(INKAST_TABLE, INKAST_FIELDS, session.to_dict(), replace=True)

    def delete_inkast_blast_session(self, session_id: str) -> bool:
        return self._delete(INKAST_TABLE, session_id)

    def get_inkast_blast_sessions_by_date_range(self, start: datetime, end: datetime) -> list[InkastBlastSession]:
        rows = self._by_date_range(INKAST_TABLE, start, end)
        return [InkastBlastSession.from_dict(_from_row(r)) for r in rows]

    # Housekeeping

    def get_session_counts(self) -> dict[str, int]:
        practice = self.query_one("SELECT COUNT(*) AS n FROM practice_sessions")
        inkast = self.query_one("SELECT COUNT(*) AS n FROM inkast_blast_sessions")
        return {
            "practice": int(practice["n"]) if practice else 0,
            "inkast_blast": int(inkast["n"]) if inkast else 0,
        }

    def delete_all_sessions(self) -> None:
        with self.conn:
            self.conn.execute("DELETE FROM practice_sessions")
            self.conn.execute("DELETE FROM inkast_blast_sessions")
            self.conn.execute("DELETE FROM app_state")
        logger.info("Deleted all stored sessions")

    def get_state(self, key: str) -> str | None:
        row = self.query_one("SELECT value FROM app_state WHERE key = ?", (key,))
        return None if row is None else row["value"]

    def set_state(self, key: str, value: str) -> None:
        self.execute("INSERT OR REPLACE INTO app_state (key, value) VALUES (?, ?)", (key, value))

    def clear_state(self, key: str) -> None:
        self.execute("DELETE FROM app_state WHERE key = ?", (key,))
