"""
SQLite 存储 - 排行榜设置单例与快照归档
"""
import os
import sqlite3
import threading
from pathlib import Path

from app.core.database_schema import init_database_schema
from app.logger import logger

DEFAULT_DB_PATH = Path(__file__).parent.parent / "data" / "leaderboard.db"


class Database:
    """每次调用新建连接；建表与迁移每个文件路径只执行一次"""

    _schema_lock = threading.Lock()
    _ready_paths = set()

    def __init__(self, db_path: str = None):
        self.db_path = str(db_path or os.getenv("LEADERBOARD_DB_PATH") or DEFAULT_DB_PATH)
        Path(self.db_path).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    @property
    def identity(self) -> str:
        return str(Path(self.db_path).expanduser().resolve())

    def _ensure_schema(self):
        if self.identity in self._ready_paths:
            return
        with self._schema_lock:
            if self.identity in self._ready_paths:
                return
            logger.info(f"初始化排行榜数据库: {self.identity}")
            init_database_schema(self._get_connection(), logger)
            self._ready_paths.add(self.identity)

    def _get_connection(self):
        conn = sqlite3.connect(self.db_path, timeout=30)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA busy_timeout=5000;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        return conn
