# Row-level content store backed by SQLite.
# Read-only from the pipeline's point of view; init_schema() and the insert
# helpers exist for bootstrapping dev/test databases.

from __future__ import annotations

import json
import sqlite3
from contextlib import closing
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

SCHEMA = """
CREATE TABLE IF NOT EXISTS personal_content (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    category TEXT NOT NULL,
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    is_published INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT
);
CREATE INDEX IF NOT EXISTS idx_personal_category ON personal_content(category, is_published);

CREATE TABLE IF NOT EXISTS songs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    artist_name TEXT,
    genre TEXT,
    is_public INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS founder_videos (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    outlet TEXT,
    year INTEGER,
    description TEXT
);

CREATE TABLE IF NOT EXISTS speaker_videos (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    event TEXT,
    location TEXT,
    year INTEGER,
    description TEXT
);

CREATE TABLE IF NOT EXISTS topics (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    route TEXT,
    description TEXT,
    content TEXT,
    ontology TEXT,
    metadata TEXT,
    is_active INTEGER NOT NULL DEFAULT 1
);

CREATE TABLE IF NOT EXISTS drive_chunks (
    id TEXT PRIMARY KEY,
    file_id TEXT,
    file_name TEXT NOT NULL,
    text TEXT NOT NULL
);
"""

_BOOL_COLUMNS = ("is_published", "is_public", "is_active")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row_to_dict(row: sqlite3.Row) -> Dict[str, Any]:
    out = dict(row)
    for col in _BOOL_COLUMNS:
        if col in out:
            out[col] = bool(out[col])
    return out


def _decode_json(value: Optional[str]) -> Any:
    if not value:
        return None
    try:
        return json.loads(value)
    except ValueError:
        return None


class ContentStore:
    """SQLite content store. Opens one connection per call so it can be shared across threads."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    # -------------------------
    # Connections
    # -------------------------
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _select(self, sql: str, params: Iterable[Any] = ()) -> List[Dict[str, Any]]:
        with closing(self._connect()) as conn:
            rows = conn.execute(sql, tuple(params)).fetchall()
        return [_row_to_dict(r) for r in rows]

    def init_schema(self) -> None:
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        with closing(self._connect()) as conn:
            conn.executescript(SCHEMA)
            conn.commit()

    # -------------------------
    # Reads
    # -------------------------
    def personal_content(self, category: Optional[str] = None) -> List[Dict[str, Any]]:
        """Published personal content, newest first, optionally for one category."""
        sql = "SELECT * FROM personal_content WHERE is_published = 1"
        params: List[Any] = []
        if category:
            sql += " AND category = ?"
            params.append(category)
        sql += " ORDER BY created_at DESC, id DESC"
        return self._select(sql, params)

    def public_songs(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        sql = "SELECT * FROM songs WHERE is_public = 1 ORDER BY created_at DESC, id DESC"
        params: List[Any] = []
        if limit is not None:
            sql += " LIMIT ?"
            params.append(int(limit))
        return self._select(sql, params)

    def founder_videos(self) -> List[Dict[str, Any]]:
        return self._select("SELECT * FROM founder_videos ORDER BY year DESC, id ASC")

    def speaker_videos(self) -> List[Dict[str, Any]]:
        return self._select("SELECT * FROM speaker_videos ORDER BY year DESC, id ASC")

    def active_topics(self) -> List[Dict[str, Any]]:
        rows = self._select("SELECT * FROM topics WHERE is_active = 1 ORDER BY title ASC")
        for r in rows:
            r["ontology"] = _decode_json(r.get("ontology"))
            r["metadata"] = _decode_json(r.get("metadata"))
        return rows

    def drive_chunk(self, chunk_id: str) -> Optional[Dict[str, Any]]:
        rows = self._select(
            "SELECT id, file_id, file_name, text FROM drive_chunks WHERE id = ? LIMIT 1;",
            (chunk_id,),
        )
        return rows[0] if rows else None

    # -------------------------
    # Seeding helpers
    # -------------------------
    def add_personal_content(
        self,
        category: str,
        title: str,
        content: str,
        is_published: bool = False,
        created_at: Optional[str] = None,
    ) -> int:
        with closing(self._connect()) as conn:
            cur = conn.execute(
                "INSERT INTO personal_content(category, title, content, is_published, created_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (category, title, content, int(is_published), created_at or _now()),
            )
            conn.commit()
            return int(cur.lastrowid)

    def add_song(
        self,
        title: str,
        artist_name: str,
        genre: Optional[str] = None,
        is_public: bool = True,
        created_at: Optional[str] = None,
    ) -> int:
        with closing(self._connect()) as conn:
            cur = conn.execute(
                "INSERT INTO songs(title, artist_name, genre, is_public, created_at) VALUES (?, ?, ?, ?, ?)",
                (title, artist_name, genre, int(is_public), created_at or _now()),
            )
            conn.commit()
            return int(cur.lastrowid)

    def add_video(self, table: str, **fields: Any) -> int:
        if table not in ("founder_videos", "speaker_videos"):
            raise ValueError(f"Unknown video table: {table}")
        cols = ", ".join(fields)
        marks = ", ".join("?" for _ in fields)
        with closing(self._connect()) as conn:
            cur = conn.execute(f"INSERT INTO {table}({cols}) VALUES ({marks})", tuple(fields.values()))
            conn.commit()
            return int(cur.lastrowid)

    def add_topic(
        self,
        title: str,
        route: str,
        description: str = "",
        content: str = "",
        ontology: Optional[Dict[str, Any]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        is_active: bool = True,
    ) -> int:
        with closing(self._connect()) as conn:
            cur = conn.execute(
                "INSERT INTO topics(title, route, description, content, ontology, metadata, is_active) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    title,
                    route,
                    description,
                    content,
                    json.dumps(ontology) if ontology is not None else None,
                    json.dumps(metadata) if metadata is not None else None,
                    int(is_active),
                ),
            )
            conn.commit()
            return int(cur.lastrowid)

    def add_drive_chunks(self, chunks: Iterable[tuple]) -> None:
        """Insert (id, file_id, file_name, text) rows."""
        with closing(self._connect()) as conn:
            conn.executemany(
                "INSERT OR REPLACE INTO drive_chunks(id, file_id, file_name, text) VALUES (?, ?, ?, ?)",
                list(chunks),
            )
            conn.commit()
