"""
日志模块 - 排行榜服务统一日志
"""
import logging
import os
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import List, Optional

# LOG_DIR 可覆盖，容器部署时挂载到持久卷
LOG_DIR = Path(os.getenv("LOG_DIR") or Path(__file__).parent.parent / "logs")
LOG_DIR.mkdir(parents=True, exist_ok=True)
LOG_FILE = LOG_DIR / "leaderboard.log"

LOG_FORMAT = "%(asctime)s | %(levelname)-5s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_LEVEL = getattr(logging, os.getenv("LOG_LEVEL", "INFO").strip().upper(), logging.INFO)
LOG_BACKUP_COUNT = max(1, int(os.getenv("LOG_BACKUP_COUNT", "7")))

TAIL_CHUNK_SIZE = 4096


def _build_handlers() -> List[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
    rotating = TimedRotatingFileHandler(
        LOG_FILE,
        when="midnight",
        interval=1,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handlers = [rotating, logging.StreamHandler()]
    for handler in handlers:
        handler.setLevel(LOG_LEVEL)
        handler.setFormatter(formatter)
    return handlers


logger = logging.getLogger("wager_leaderboard")
logger.setLevel(LOG_LEVEL)
logger.propagate = False

# uvicorn --reload 会重复导入本模块
if not logger.handlers:
    for _handler in _build_handlers():
        logger.addHandler(_handler)


def _tail_bytes(path: Path, lines: int) -> bytes:
    buffer = b""
    with open(path, "rb") as f:
        f.seek(0, os.SEEK_END)
        pos = f.tell()
        while pos > 0 and buffer.count(b"\n") <= lines:
            step = min(TAIL_CHUNK_SIZE, pos)
            pos -= step
            f.seek(pos)
            buffer = f.read(step) + buffer
    return buffer


def read_logs(lines: int = 200, level: Optional[str] = None) -> list:
    """
    读取最近的日志行（最新的在前）

    Args:
        lines: 返回的最大行数
        level: 仅保留该级别的行，如 ERROR / WARNING
    """
    if not LOG_FILE.exists():
        return []

    lines = max(1, int(lines))
    text = _tail_bytes(LOG_FILE, lines).decode("utf-8", errors="replace")
    recent = text.splitlines(keepends=True)[-lines:]
    if level:
        marker = f"| {level.strip().upper():<5} |"
        recent = [line for line in recent if marker in line]
    return list(reversed(recent))
