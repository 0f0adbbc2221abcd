from __future__ import annotations

import json
import sqlite3
import threading
import uuid
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from .pipeline_types import ArtworkRecord, ArtworkStatus, Candidate

CANDIDATE_COLUMNS = [
    "id",
    "rank",
    "confidence",
    "artist",
    "title",
    "date_created",
    "location_painted",
    "style",
    "medium",
    "source",
]

_STATUS_VALUES = ", ".join(f"'{s.value}'" for s in ArtworkStatus)


class ArtworkStore:
    """
    sqlite-backed store for artworks, their ranked candidates and API tokens.

    One connection is shared by the event loop and FastAPI's worker threads;
    every use of it goes through `self._lock`.
    """

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON")
        self.ensure_schema()

    def ensure_schema(self) -> None:
        logger.info("Ensuring schema in {}", self.db_path)
        with self._lock:
            cur = self.conn.cursor()
            cur.execute(
                f"""
                CREATE TABLE IF NOT EXISTS artworks (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    museum_name TEXT,
                    museum_city TEXT,
                    museum_country TEXT,
                    status TEXT NOT NULL DEFAULT '{ArtworkStatus.PENDING.value}'
                        CHECK (status IN ({_STATUS_VALUES})),
                    selected_candidate_id TEXT
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS painting_candidates (
                    id TEXT PRIMARY KEY,
                    artwork_id TEXT NOT NULL REFERENCES artworks(id) ON DELETE CASCADE,
                    rank INTEGER NOT NULL,
                    confidence REAL,
                    artist TEXT,
                    title TEXT,
                    date_created TEXT,
                    location_painted TEXT,
                    style TEXT,
                    medium TEXT,
                    source TEXT,
                    raw_json TEXT,
                    UNIQUE (artwork_id, rank)
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS api_tokens (
                    token TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL
                )
                """
            )
            self.conn.commit()

    # ---------------------------
    # Artworks / users
    # ---------------------------

    def add_artwork(self, artwork: ArtworkRecord) -> None:
        row = asdict(artwork)
        cols = ", ".join(row)
        marks = ", ".join("?" for _ in row)
        with self._lock:
            self.conn.execute(f"INSERT INTO artworks ({cols}) VALUES ({marks})", tuple(row.values()))
            self.conn.commit()

    def get_artwork(self, artwork_id: str) -> Optional[ArtworkRecord]:
        with self._lock:
            row = self.conn.execute("SELECT * FROM artworks WHERE id = ?", (artwork_id,)).fetchone()
        if row is None:
            return None
        return ArtworkRecord(**dict(row))

    def add_token(self, token: str, user_id: str) -> None:
        with self._lock:
            self.conn.execute(
                "INSERT OR REPLACE INTO api_tokens (token, user_id) VALUES (?, ?)", (token, user_id)
            )
            self.conn.commit()

    def resolve_user(self, token: str) -> Optional[str]:
        if not token:
            return None
        with self._lock:
            row = self.conn.execute("SELECT user_id FROM api_tokens WHERE token = ?", (token,)).fetchone()
        return row["user_id"] if row else None

    def set_status(self, artwork_id: str, status: ArtworkStatus) -> None:
        with self._lock:
            self.conn.execute(
                "UPDATE artworks SET status = ? WHERE id = ?", (ArtworkStatus(status).value, artwork_id)
            )
            self.conn.commit()

    # ---------------------------
    # Candidates
    # ---------------------------

    def replace_candidates(self, artwork_id: str, ranked: Sequence[Candidate]) -> int:
        """
        Delete the artwork's stored candidates, then insert `ranked`
        with 1-based ranks. Not atomic across the two steps, but no other
        caller of this store sees the gap in between.
        """
        rows = [
            (
                uuid.uuid4().hex,
                artwork_id,
                i + 1,
                c.confidence,
                c.artist,
                c.title,
                c.date_created,
                c.location_painted,
                c.style,
                c.medium,
                c.source,
                json.dumps(c.raw_json, ensure_ascii=False, default=str),
            )
            for i, c in enumerate(ranked)
        ]
        with self._lock:
            self.conn.execute("DELETE FROM painting_candidates WHERE artwork_id = ?", (artwork_id,))
            self.conn.commit()
            if rows:
                self.conn.executemany(
                    """
                    INSERT INTO painting_candidates (
                        id, artwork_id, rank, confidence, artist, title, date_created,
                        location_painted, style, medium, source, raw_json
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    rows,
                )
                self.conn.commit()
        return len(rows)

    def list_candidates(self, artwork_id: str) -> List[Dict[str, Any]]:
        cols = ", ".join(CANDIDATE_COLUMNS)
        with self._lock:
            cur = self.conn.execute(
                f"SELECT {cols} FROM painting_candidates WHERE artwork_id = ? ORDER BY rank ASC",
                (artwork_id,),
            )
            return [dict(r) for r in cur.fetchall()]

    def get_candidate(self, candidate_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            row = self.conn.execute(
                "SELECT id, artwork_id FROM painting_candidates WHERE id = ?", (candidate_id,)
            ).fetchone()
        return dict(row) if row else None

    def select_candidate(self, artwork_id: str, candidate_id: str) -> None:
        with self._lock:
            self.conn.execute(
                "UPDATE artworks SET selected_candidate_id = ?, status = ? WHERE id = ?",
                (candidate_id, ArtworkStatus.CONFIRMED.value, artwork_id),
            )
            self.conn.commit()

    def close(self) -> None:
        with self._lock:
            self.conn.close()
