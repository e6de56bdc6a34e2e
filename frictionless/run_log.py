import sqlite3
import json
import time
import logging
from contextlib import closing

logger = logging.getLogger(__name__)

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS recalculation_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp REAL NOT NULL,
    trigger TEXT NOT NULL,
    startup_id TEXT,
    startups_processed INTEGER,
    successes INTEGER,
    failures INTEGER,
    matches_created INTEGER,
    failed_startup_ids TEXT,
    error TEXT,
    total_secs REAL,
    created_at TEXT DEFAULT (datetime('now'))
)
"""


def _connect(db_path: str) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path)
    conn.execute(_CREATE_TABLE)
    return conn


def log_run(
    db_path: str,
    trigger: str,
    startup_id: str | None = None,
    startups_processed: int | None = None,
    successes: int | None = None,
    failures: int | None = None,
    matches_created: int | None = None,
    failed_startup_ids: list[str] | None = None,
    error: str | None = None,
    total_secs: float | None = None,
) -> int | None:
    """Record a recalculation run and return the row ID.

    Logging never breaks a run: a failed write is reported and None returned.
    """
    try:
        with closing(_connect(db_path)) as conn:
            cur = conn.execute(
                """INSERT INTO recalculation_log
                   (timestamp, trigger, startup_id, startups_processed, successes, failures,
                    matches_created, failed_startup_ids, error, total_secs)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    time.time(),
                    trigger,
                    startup_id,
                    startups_processed,
                    successes,
                    failures,
                    matches_created,
                    json.dumps(failed_startup_ids) if failed_startup_ids else None,
                    error,
                    total_secs,
                ),
            )
            row_id = cur.lastrowid
            conn.commit()
    except sqlite3.Error as exc:
        logger.warning("[LOG] Could not record %s run: %s", trigger, exc)
        return None
    logger.info("[LOG] Run logged: id=%d trigger=%s startup=%s", row_id, trigger, startup_id)
    return row_id


def recent_runs(db_path: str, limit: int = 20) -> list[dict]:
    """Return the most recent runs, newest first."""
    with closing(_connect(db_path)) as conn:
        conn.row_factory = sqlite3.Row
        rows = conn.execute(
            "SELECT * FROM recalculation_log ORDER BY timestamp DESC, id DESC LIMIT ?", (limit,)
        ).fetchall()
    result = []
    for row in rows:
        entry = dict(row)
        if entry["failed_startup_ids"]:
            entry["failed_startup_ids"] = json.loads(entry["failed_startup_ids"])
        result.append(entry)
    return result
