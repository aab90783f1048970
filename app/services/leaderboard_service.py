from datetime import date
from typing import Iterable, List, Optional

from app.core.cache import TTLCache
from app.core.errors import UpstreamError, ValidationError
from app.core.payouts import payout_for
from app.core.ranges import PERIOD_DAYS, resolve_range, resolve_range_from_hint, today_in
from app.core.ranking import clamp_limit
from app.core.time import to_iso_z, utc_now
from app.logger import logger
from app.models import LeaderboardResponse, LeaderboardRow, RangeWindow, Settings

RANGE_HINT_CACHE_KEY = ("range_hint",)


def price_rows(entries: Iterable, prize_config) -> List[LeaderboardRow]:
    rows = []
    for entry in entries:
        data = entry if isinstance(entry, dict) else entry.model_dump()
        rows.append(LeaderboardRow(**data, payout=payout_for(data.get("rank"), prize_config)))
    return rows


class LeaderboardService:
    def __init__(self, settings_service, client, timezone_name: str = "UTC", cache: Optional[TTLCache] = None):
        self.settings_service = settings_service
        self.client = client
        self.timezone_name = timezone_name
        self.cache = cache or TTLCache(0)

    def invalidate_cache(self, *_args):
        self.cache.clear()

    @staticmethod
    def _resolve_period(settings: Settings, period: Optional[str]) -> str:
        if not period:
            return settings.period
        if period not in PERIOD_DAYS:
            raise ValidationError("period", f"must be one of {', '.join(PERIOD_DAYS)}")
        return period

    def resolve_window(self, settings: Settings, period: Optional[str] = None, today: Optional[date] = None) -> RangeWindow:
        period = self._resolve_period(settings, period)
        if today is None:
            today = today_in(self.timezone_name)
        custom = settings.custom_range
        if custom.enabled or not getattr(self.client, "has_range_discovery", False):
            return resolve_range(period, custom, today=today)
        return resolve_range_from_hint(self._range_hint(), period, custom, today=today)

    def _range_hint(self):
        hint = self.cache.get(RANGE_HINT_CACHE_KEY)
        if hint is not None:
            return hint
        try:
            hint = self.client.fetch_range_hint()
        except UpstreamError as exc:
            logger.warning(f"上游区间发现失败，使用本地计算区间: {exc.message}")
            return None
        self.cache.set(RANGE_HINT_CACHE_KEY, hint)
        return hint

    def get_range(self, period: Optional[str] = None) -> RangeWindow:
        settings = self.settings_service.get()
        return self.resolve_window(settings, period)

    def read(self, period: Optional[str] = None, limit: Optional[int] = None) -> LeaderboardResponse:
        settings = self.settings_service.get()
        effective_period = self._resolve_period(settings, period)
        window = self.resolve_window(settings, effective_period)
        effective_limit = clamp_limit(limit if limit is not None else settings.page_size)

        # 键含设置版本
        cache_key = (
            effective_period,
            effective_limit,
            window.start,
            window.end,
            window.source,
            settings.updated_at,
        )
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        entries = self.client.fetch_ranked(window, effective_limit)
        response = LeaderboardResponse(
            data=price_rows(entries, settings.prize_config),
            range=window,
            period=effective_period,
            fetchedAt=to_iso_z(utc_now()),
        )
        self.cache.set(cache_key, response)
        return response
