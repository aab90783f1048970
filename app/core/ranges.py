import re
from datetime import date, datetime, timedelta
from typing import Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.models import CustomRange, RangeWindow

PERIOD_DAYS = {
    "weekly": 7,
    "biweekly": 14,
    "monthly": 30,
}
DEFAULT_PERIOD = "weekly"

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# upstream 区间发现接口可能使用的字段名
_HINT_KEY_PAIRS = (
    ("start_at", "end_at"),
    ("start", "end"),
    ("startISO", "endISO"),
    ("start_date", "end_date"),
)


def parse_strict_date(value) -> Optional[date]:
    """严格解析 YYYY-MM-DD，非法返回 None"""
    text = str(value or "").strip()
    if not DATE_PATTERN.match(text):
        return None
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        return None


def today_in(timezone_name: str = "UTC") -> date:
    try:
        tz = ZoneInfo(timezone_name)
    except (ZoneInfoNotFoundError, ValueError):
        tz = ZoneInfo("UTC")
    return datetime.now(tz).date()


def _as_custom_range(custom_range) -> Optional[CustomRange]:
    if custom_range is None:
        return None
    if isinstance(custom_range, CustomRange):
        return custom_range
    if isinstance(custom_range, Mapping):
        return CustomRange(
            enabled=bool(custom_range.get("enabled")),
            start=str(custom_range.get("start") or ""),
            end=str(custom_range.get("end") or ""),
        )
    return None


def computed_window(period: str, today: date) -> RangeWindow:
    days = PERIOD_DAYS.get(period, PERIOD_DAYS[DEFAULT_PERIOD])
    return RangeWindow(start=today - timedelta(days=days - 1), end=today, source="computed")


def _custom_window(custom_range) -> Optional[RangeWindow]:
    custom = _as_custom_range(custom_range)
    if not custom or not custom.enabled:
        return None
    start = parse_strict_date(custom.start)
    end = parse_strict_date(custom.end)
    if start is None or end is None:
        return None
    return RangeWindow(start=start, end=end, source="custom")


def resolve_range(period: str, custom_range=None, today: Optional[date] = None) -> RangeWindow:
    custom = _custom_window(custom_range)
    if custom is not None:
        return custom
    if today is None:
        today = today_in()
    return computed_window(period, today)


def _hint_date(value) -> Optional[date]:
    parsed = parse_strict_date(value)
    if parsed is not None:
        return parsed
    text = str(value or "").strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def _extract_hint_bounds(payload) -> Optional[tuple[date, date]]:
    if not isinstance(payload, Mapping):
        return None
    candidates = [payload]
    nested = payload.get("range")
    if isinstance(nested, Mapping):
        candidates.append(nested)
    for candidate in candidates:
        for start_key, end_key in _HINT_KEY_PAIRS:
            start = _hint_date(candidate.get(start_key))
            end = _hint_date(candidate.get(end_key))
            if start is not None and end is not None:
                return start, end
    return None


def resolve_range_from_hint(
    payload,
    period: str,
    custom_range=None,
    today: Optional[date] = None,
) -> RangeWindow:
    custom = _custom_window(custom_range)
    if custom is not None:
        return custom
    bounds = _extract_hint_bounds(payload)
    if bounds is not None:
        return RangeWindow(start=bounds[0], end=bounds[1], source="api")
    if today is None:
        today = today_in()
    return computed_window(period, today)
