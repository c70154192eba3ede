"""
SQLite-backed score history.
Every computation is inserted as a new timestamped row; rows are never updated.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..scoring.models import ScoreResult

logger = logging.getLogger("appsec_scoring.history")


class ScoreHistory:
    """
    Persistent score audit trail backed by SQLite.
    Features:
      - Insert-only: one row per computation
      - Latest score and recent trail per application
      - Thread-safe via connection-per-call
    """

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        """Initialize the history database schema."""
        with sqlite3.connect(str(self.db_path)) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS scores (
                    id TEXT PRIMARY KEY,
                    application_id TEXT NOT NULL,
                    knowledge_score INTEGER NOT NULL,
                    tool_score INTEGER NOT NULL,
                    total_score INTEGER NOT NULL,
                    calculated_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_scores_application
                ON scores(application_id, calculated_at)
            """)
            conn.commit()

    def record(
        self,
        application_id: str,
        result: ScoreResult,
        calculated_at: Optional[datetime] = None,
    ) -> str:
        """Insert a new score row and return its id."""
        score_id = uuid.uuid4().hex
        calculated_at = calculated_at or datetime.now(timezone.utc)
        if calculated_at.tzinfo is None:
            calculated_at = calculated_at.replace(tzinfo=timezone.utc)
        # Stored as UTC so text ordering matches time ordering.
        calculated_at = calculated_at.astimezone(timezone.utc)

        with sqlite3.connect(str(self.db_path)) as conn:
            conn.execute(
                """
                INSERT INTO scores (id, application_id, knowledge_score, tool_score, total_score, calculated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    score_id,
                    application_id,
                    result.knowledge_score,
                    result.tool_score,
                    result.total_score,
                    calculated_at.isoformat(),
                ),
            )
            conn.commit()
        logger.info(f"Recorded score {result.total_score} for application {application_id}")
        return score_id

    def history(self, application_id: str, limit: int = 10) -> list[dict]:
        """Most recent scores for an application, newest first."""
        with sqlite3.connect(str(self.db_path)) as conn:
            rows = conn.execute(
                """
                SELECT id, knowledge_score, tool_score, total_score, calculated_at
                FROM scores WHERE application_id = ?
                ORDER BY calculated_at DESC, rowid DESC LIMIT ?
                """,
                (application_id, limit),
            ).fetchall()

        return [
            {
                "id": r[0],
                "application_id": application_id,
                "knowledgeScore": r[1],
                "toolScore": r[2],
                "totalScore": r[3],
                "calculatedAt": r[4],
            }
            for r in rows
        ]

    def latest(self, application_id: str) -> Optional[dict]:
        """The newest score for an application, or None if it was never scored."""
        rows = self.history(application_id, limit=1)
        return rows[0] if rows else None

    def count(self, application_id: Optional[str] = None) -> int:
        with sqlite3.connect(str(self.db_path)) as conn:
            if application_id is None:
                row = conn.execute("SELECT COUNT(*) FROM scores").fetchone()
            else:
                row = conn.execute(
                    "SELECT COUNT(*) FROM scores WHERE application_id = ?",
                    (application_id,),
                ).fetchone()
        return row[0]
