import json
import sqlite3

from app.core.database_schema import CURRENT_SCHEMA_VERSION, init_database_schema


class _FakeLogger:
    def info(self, _msg):
        return None

    def warning(self, _msg):
        return None


def _get_user_version(db_path):
    conn = sqlite3.connect(db_path)
    cur = conn.cursor()
    cur.execute("PRAGMA user_version")
    row = cur.fetchone()
    conn.close()
    return int(row[0]) if row else 0


def _get_table_columns(db_path, table_name):
    conn = sqlite3.connect(db_path)
    cur = conn.cursor()
    cur.execute(f"PRAGMA table_info({table_name})")
    rows = cur.fetchall()
    conn.close()
    return {str(row[1]) for row in rows}


def test_init_database_schema_sets_user_version_on_new_db(tmp_path):
    db_path = tmp_path / "schema_new.db"
    conn = sqlite3.connect(db_path)

    init_database_schema(conn, _FakeLogger())

    assert _get_user_version(db_path) == CURRENT_SCHEMA_VERSION
    assert {"id", "document", "updated_at"}.issubset(_get_table_columns(db_path, "settings"))
    assert {"taken_at", "data_json", "image", "entry_count"}.issubset(_get_table_columns(db_path, "snapshots"))


def test_init_database_schema_backfills_entry_count_on_legacy_db(tmp_path):
    db_path = tmp_path / "schema_legacy.db"
    conn = sqlite3.connect(db_path)
    cur = conn.cursor()
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS snapshots (
            id TEXT PRIMARY KEY,
            taken_at TEXT NOT NULL,
            period TEXT NOT NULL,
            range_start TEXT NOT NULL,
            range_end TEXT NOT NULL,
            banner_title TEXT,
            page_size INTEGER,
            socials_json TEXT,
            prize_config_json TEXT,
            data_json TEXT,
            image TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """
    )
    rows = [{"username": "a", "wagered": 5, "rank": 1}, {"username": "b", "wagered": 2, "rank": 2}]
    cur.execute(
        "INSERT INTO snapshots (id, taken_at, period, range_start, range_end, data_json) VALUES (?, ?, ?, ?, ?, ?)",
        ("old-1", "2025-12-01T00:00:00.000Z", "weekly", "2025-11-25", "2025-12-01", json.dumps(rows)),
    )
    cur.execute(
        "INSERT INTO snapshots (id, taken_at, period, range_start, range_end, data_json) VALUES (?, ?, ?, ?, ?, ?)",
        ("old-2", "2025-12-08T00:00:00.000Z", "weekly", "2025-12-02", "2025-12-08", "not json"),
    )
    cur.execute("PRAGMA user_version = 1")
    conn.commit()
    conn.close()

    init_database_schema(sqlite3.connect(db_path), _FakeLogger())

    assert _get_user_version(db_path) == CURRENT_SCHEMA_VERSION
    conn = sqlite3.connect(db_path)
    counts = dict(conn.execute("SELECT id, entry_count FROM snapshots").fetchall())
    conn.close()
    assert counts == {"old-1": 2, "old-2": 0}
