"""SQLite schema initialization routines."""
import json

CURRENT_SCHEMA_VERSION = 2


def _table_columns(cursor, table_name: str) -> set:
    cursor.execute(f"PRAGMA table_info({table_name})")
    return {row[1] for row in cursor.fetchall()}


def init_database_schema(conn, logger):
    """初始化数据库表结构"""

    # 开启 WAL 模式以支持更高并发
    conn.execute("PRAGMA journal_mode=WAL;")

    cursor = conn.cursor()
    cursor.execute("PRAGMA user_version")
    user_version_row = cursor.fetchone()
    current_version = int(user_version_row[0]) if user_version_row else 0
    if current_version >= CURRENT_SCHEMA_VERSION:
        conn.close()
        return

    # 设置单例表（整份文档存储，id 固定为 singleton）
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS settings (
            id TEXT PRIMARY KEY CHECK (id = 'singleton'),
            document TEXT NOT NULL,
            updated_at TEXT
        )
    """)

    # 排行榜快照表（只追加，image 仅允许从空写入一次）
    cursor.execute("""
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
    """)
    cursor.execute("""
        CREATE INDEX IF NOT EXISTS idx_snapshots_taken_at ON snapshots(taken_at DESC)
    """)

    # v2: 列表接口需要条目数，避免每次解析 data_json
    if "entry_count" not in _table_columns(cursor, "snapshots"):
        logger.info("正在迁移数据库: 添加 snapshots.entry_count 列...")
        cursor.execute("ALTER TABLE snapshots ADD COLUMN entry_count INTEGER DEFAULT 0")
        cursor.execute("SELECT id, data_json FROM snapshots")
        for row in cursor.fetchall():
            count = _count_json_rows(row[1])
            cursor.execute("UPDATE snapshots SET entry_count = ? WHERE id = ?", (count, row[0]))

    cursor.execute(f"PRAGMA user_version = {CURRENT_SCHEMA_VERSION}")
    conn.commit()
    conn.close()


def _count_json_rows(raw) -> int:
    try:
        rows = json.loads(raw) if raw else []
    except (TypeError, ValueError):
        return 0
    return len(rows) if isinstance(rows, list) else 0
