"""Tests for the recalculation run log (temp SQLite files only)."""
import os
import sqlite3

from frictionless.run_log import log_run, recent_runs


def _db(tmp_path):
    return os.path.join(tmp_path, "test_log.db")


def test_log_batch_run(tmp_path):
    db_path = _db(tmp_path)
    rid = log_run(
        db_path, "batch",
        startups_processed=5, successes=4, failures=1, matches_created=40,
        failed_startup_ids=["s-3"], total_secs=2.5,
    )
    assert rid >= 1

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    row = dict(conn.execute("SELECT * FROM recalculation_log WHERE id=?", (rid,)).fetchone())
    conn.close()

    assert row["trigger"] == "batch"
    assert row["startups_processed"] == 5
    assert row["failures"] == 1
    assert "s-3" in row["failed_startup_ids"]
    assert row["total_secs"] == 2.5


def test_log_single_run_failure(tmp_path):
    db_path = _db(tmp_path)
    log_run(db_path, "single", startup_id="s-1", error="No investors found", total_secs=0.1)
    runs = recent_runs(db_path)
    assert len(runs) == 1
    assert runs[0]["startup_id"] == "s-1"
    assert runs[0]["error"] == "No investors found"
    assert runs[0]["failed_startup_ids"] is None


def test_recent_runs_newest_first(tmp_path):
    db_path = _db(tmp_path)
    first = log_run(db_path, "single", startup_id="a")
    second = log_run(db_path, "single", startup_id="b")
    runs = recent_runs(db_path, limit=1)
    assert [r["id"] for r in runs] == [second]
    assert first != second


def test_failed_startup_ids_decoded(tmp_path):
    db_path = _db(tmp_path)
    log_run(db_path, "cron", failed_startup_ids=["x", "y"])
    assert recent_runs(db_path)[0]["failed_startup_ids"] == ["x", "y"]


def test_log_write_failure_does_not_raise(tmp_path):
    bad_path = os.path.join(tmp_path, "missing-dir", "log.db")
    assert log_run(bad_path, "batch") is None
