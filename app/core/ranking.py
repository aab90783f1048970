import math
from typing import Iterable, List, Mapping, Optional

from app.models import LeaderboardEntry

MIN_LIMIT = 1
MAX_LIMIT = 100
DEFAULT_LIMIT = 15


def clamp_limit(limit, default: int = DEFAULT_LIMIT) -> int:
    try:
        value = int(limit)
    except (TypeError, ValueError):
        value = default
    return max(MIN_LIMIT, min(MAX_LIMIT, value))


def safe_wagered(value) -> float:
    try:
        num = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(num):
        return 0.0
    return num


def _safe_bets(value) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(num) or num < 0 or num != int(num):
        return None
    return int(num)


def rank_affiliates(records: Iterable, limit) -> List[LeaderboardEntry]:
    """过滤、排序、截断并分配名次；同额保持上游原始顺序"""
    rows = []
    for record in records or []:
        if not isinstance(record, Mapping):
            continue
        wagered = safe_wagered(record.get("wagered_amount"))
        if wagered <= 0:
            continue
        rows.append({
            "username": str(record.get("username") or ""),
            "wagered": wagered,
            "bets": _safe_bets(record.get("bets")),
        })

    # sorted 为稳定排序
    rows = sorted(rows, key=lambda row: -row["wagered"])
    top = rows[:clamp_limit(limit)]
    return [
        LeaderboardEntry(rank=idx, **row)
        for idx, row in enumerate(top, start=1)
    ]
