import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError as SchemaValidationError

from frictionless.errors import PersistenceError
from frictionless.models import InvestorProfile, Match, MatchStatus, StartupProfile

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS startup_profiles (
    user_id TEXT PRIMARY KEY,
    company_name TEXT,
    industry TEXT,
    stage TEXT,
    headquarters TEXT,
    funding_ask TEXT,
    readiness_score REAL,
    website TEXT,
    pitch_deck_url TEXT,
    description TEXT,
    business_model TEXT,
    value_proposition TEXT,
    target_market TEXT,
    traction TEXT,
    ai_analyzed_at TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS investor_profiles (
    user_id TEXT PRIMARY KEY,
    organization_name TEXT,
    focus_sectors TEXT,
    focus_stages TEXT,
    geography_focus TEXT,
    ticket_size_min REAL,
    ticket_size_max REAL,
    website TEXT,
    investor_deck_url TEXT,
    headquarters TEXT,
    fund_size TEXT,
    average_ticket TEXT,
    investment_thesis TEXT,
    ai_analyzed_at TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS matches (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    startup_id TEXT NOT NULL REFERENCES startup_profiles(user_id) ON DELETE CASCADE,
    investor_id TEXT NOT NULL REFERENCES investor_profiles(user_id) ON DELETE CASCADE,
    match_percentage INTEGER NOT NULL CHECK (match_percentage BETWEEN 0 AND 100),
    status TEXT NOT NULL DEFAULT 'pending' CHECK (status IN ('pending', 'connected', 'rejected')),
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    UNIQUE (startup_id, investor_id)
);

CREATE INDEX IF NOT EXISTS idx_matches_startup ON matches (startup_id);
"""

_LIST_COLUMNS = {"focus_sectors", "focus_stages", "geography_focus"}
_STARTUP_COLUMNS = list(StartupProfile.model_fields)
_INVESTOR_COLUMNS = list(InvestorProfile.model_fields)
_MATCH_COLUMNS = "startup_id, investor_id, match_percentage, status, created_at, updated_at"


def _dict_row(cursor, row):
    return {col[0]: row[i] for i, col in enumerate(cursor.description)}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@contextmanager
def _connect(db_path: str):
    try:
        conn = sqlite3.connect(db_path, timeout=30)
    except sqlite3.Error as exc:
        raise PersistenceError(f"Could not open database: {exc}") from exc
    conn.row_factory = _dict_row
    try:
        conn.execute("PRAGMA foreign_keys = ON")
        yield conn
    except sqlite3.Error as exc:
        raise PersistenceError(str(exc)) from exc
    finally:
        conn.close()


def _encode(row: dict) -> dict:
    return {
        col: json.dumps(val) if col in _LIST_COLUMNS and val is not None else val
        for col, val in row.items()
    }


def _decode(row: dict) -> dict:
    return {
        col: json.loads(val) if col in _LIST_COLUMNS and val is not None else val
        for col, val in row.items()
    }


def _to_model(model, row: dict):
    """Convert a stored row to its model. A corrupt row is a store failure."""
    try:
        return model(**_decode(row))
    except (SchemaValidationError, json.JSONDecodeError) as exc:
        raise PersistenceError(f"Corrupt {model.__name__} row {row.get('user_id')}: {exc}") from exc


class ProfileStore:
    """SQLite-backed store for startup profiles, investor profiles and matches.

    Construct one per process and hand it to whatever needs it. Every call
    opens its own connection, so an instance can be shared across threads.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        with _connect(self.db_path) as conn:
            conn.executescript(_SCHEMA)

    # --- profiles ---

    def _upsert(self, table: str, row: dict):
        now = _now()
        row = _encode(row)
        columns = list(row) + ["created_at", "updated_at"]
        placeholders = ", ".join("?" * len(columns))
        updates = ", ".join(f"{col} = excluded.{col}" for col in row if col != "user_id")
        updates = f"{updates}, updated_at = excluded.updated_at" if updates else "updated_at = excluded.updated_at"
        with _connect(self.db_path) as conn:
            with conn:
                conn.execute(
                    f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders}) "
                    f"ON CONFLICT(user_id) DO UPDATE SET {updates}",
                    [*row.values(), now, now],
                )

    def upsert_startup(self, profile: StartupProfile) -> StartupProfile:
        """Insert or update a startup profile. Only fields that were set are written."""
        row = profile.model_dump(mode="json", exclude_unset=True)
        row["user_id"] = profile.user_id
        self._upsert("startup_profiles", row)
        return self.get_startup(profile.user_id)

    def upsert_investor(self, profile: InvestorProfile) -> InvestorProfile:
        """Insert or update an investor profile. Only fields that were set are written."""
        row = profile.model_dump(mode="json", exclude_unset=True)
        row["user_id"] = profile.user_id
        self._upsert("investor_profiles", row)
        return self.get_investor(profile.user_id)

    def get_startup(self, user_id: str) -> Optional[StartupProfile]:
        with _connect(self.db_path) as conn:
            row = conn.execute(
                f"SELECT {', '.join(_STARTUP_COLUMNS)} FROM startup_profiles WHERE user_id = ?",
                (user_id,),
            ).fetchone()
        return _to_model(StartupProfile, row) if row else None

    def get_investor(self, user_id: str) -> Optional[InvestorProfile]:
        with _connect(self.db_path) as conn:
            row = conn.execute(
                f"SELECT {', '.join(_INVESTOR_COLUMNS)} FROM investor_profiles WHERE user_id = ?",
                (user_id,),
            ).fetchone()
        return _to_model(InvestorProfile, row) if row else None

    def list_startup_ids(self) -> list[str]:
        with _connect(self.db_path) as conn:
            rows = conn.execute("SELECT user_id FROM startup_profiles ORDER BY created_at").fetchall()
        return [row["user_id"] for row in rows]

    def list_investors(self, limit: int | None = None, offset: int = 0) -> list[InvestorProfile]:
        """Return investor profiles, optionally one page at a time."""
        sql = f"SELECT {', '.join(_INVESTOR_COLUMNS)} FROM investor_profiles ORDER BY created_at, user_id"
        params: tuple = ()
        if limit is not None:
            sql += " LIMIT ? OFFSET ?"
            params = (limit, offset)
        with _connect(self.db_path) as conn:
            rows = conn.execute(sql, params).fetchall()
        return [_to_model(InvestorProfile, row) for row in rows]

    def delete_startup(self, user_id: str) -> bool:
        with _connect(self.db_path) as conn:
            with conn:
                cur = conn.execute("DELETE FROM startup_profiles WHERE user_id = ?", (user_id,))
        return cur.rowcount > 0

    def delete_investor(self, user_id: str) -> Optional[int]:
        """Delete an investor and, by cascade, its matches.

        Returns the number of match rows removed, or None if the investor
        did not exist.
        """
        with _connect(self.db_path) as conn:
            with conn:
                removed = conn.execute(
                    "SELECT COUNT(*) AS n FROM matches WHERE investor_id = ?", (user_id,)
                ).fetchone()["n"]
                cur = conn.execute("DELETE FROM investor_profiles WHERE user_id = ?", (user_id,))
        if cur.rowcount == 0:
            return None
        logger.info("[STORE] Deleted investor %s and %d matches", user_id, removed)
        return removed

    # --- matches ---

    def get_matches(self, startup_id: str) -> list[Match]:
        """Return a startup's matches, best first."""
        with _connect(self.db_path) as conn:
            rows = conn.execute(
                f"SELECT {_MATCH_COLUMNS} FROM matches WHERE startup_id = ? "
                "ORDER BY match_percentage DESC, investor_id",
                (startup_id,),
            ).fetchall()
        return [Match(**row) for row in rows]

    def replace_matches(self, startup_id: str, matches: list[Match]) -> list[Match]:
        """Swap a startup's match rows for a new set in one transaction.

        Readers see either the old set or the new one, never a mix, and a
        failed insert leaves the old set in place.
        """
        now = _now()
        try:
            with _connect(self.db_path) as conn:
                with conn:
                    conn.execute("DELETE FROM matches WHERE startup_id = ?", (startup_id,))
                    conn.executemany(
                        f"INSERT INTO matches ({_MATCH_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
                        [
                            (m.startup_id, m.investor_id, m.match_percentage, m.status.value, now, now)
                            for m in matches
                        ],
                    )
        except PersistenceError as exc:
            raise PersistenceError(f"Failed to create matches: {exc.details}") from exc
        return self.get_matches(startup_id)

    def update_match_status(self, startup_id: str, investor_id: str, status: MatchStatus) -> Optional[Match]:
        with _connect(self.db_path) as conn:
            with conn:
                cur = conn.execute(
                    "UPDATE matches SET status = ?, updated_at = ? WHERE startup_id = ? AND investor_id = ?",
                    (status.value, _now(), startup_id, investor_id),
                )
            if cur.rowcount == 0:
                return None
            row = conn.execute(
                f"SELECT {_MATCH_COLUMNS} FROM matches WHERE startup_id = ? AND investor_id = ?",
                (startup_id, investor_id),
            ).fetchone()
        return Match(**row)
