import math
from copy import deepcopy
from typing import Callable, Dict, List, Optional

from app.core.errors import ValidationError
from app.core.ranges import PERIOD_DAYS, parse_strict_date
from app.core.settings_schema import (
    document_to_settings,
    migrate_document,
    settings_to_document,
    upgrade_countdown,
)
from app.core.time import parse_iso_instant, to_iso_z, utc_now
from app.logger import logger
from app.models import Settings

PAGE_SIZE_MIN = 1
PAGE_SIZE_MAX = 100
BANNER_TITLE_MAX = 80
SOCIALS_MAX = 5
SOCIAL_NAME_MAX = 40
SOCIAL_URL_MAX = 300
PAID_PLACEMENTS_MAX = 100
COUNTDOWN_UNITS = ("minutes", "hours", "days", "weeks")

_NESTED_FIELDS = ("customRange", "prizeConfig", "countdown")


def default_settings() -> Dict:
    return Settings().model_dump(by_alias=True, mode="json")


def _merge_settings(base: Dict, data: Dict) -> Dict:
    merged = deepcopy(base)
    for key, value in (data or {}).items():
        if key not in merged:
            continue
        if key in _NESTED_FIELDS and isinstance(value, dict) and isinstance(merged[key], dict):
            merged[key] = {**merged[key], **deepcopy(value)}
        else:
            merged[key] = deepcopy(value)
    return merged


def _finite_number(value) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    return num if math.isfinite(num) else None


class SettingsNormalizer:
    """strict=True 用于写入（非法值抛 ValidationError）；strict=False 用于读取旧数据（回退默认值）"""

    def __init__(self, strict: bool):
        self.strict = strict
        self.defaults = default_settings()

    def _reject(self, field: str, message: str, fallback):
        if self.strict:
            raise ValidationError(field, message)
        logger.warning(f"设置字段 {field} 非法({message})，读取时使用默认值")
        return deepcopy(fallback)

    def period(self, value) -> str:
        if value in PERIOD_DAYS:
            return value
        return self._reject("period", f"must be one of {', '.join(PERIOD_DAYS)}", self.defaults["period"])

    def countdown(self, value) -> Dict:
        value = upgrade_countdown(value)
        fallback = self.defaults["countdown"]
        if not isinstance(value, dict):
            return self._reject("countdown", "must be an object with value and unit", fallback)
        amount = _finite_number(value.get("value"))
        if amount is None or amount < 0:
            return self._reject("countdown.value", "must be a finite number >= 0", fallback)
        unit = value.get("unit")
        if unit not in COUNTDOWN_UNITS:
            return self._reject("countdown.unit", f"must be one of {', '.join(COUNTDOWN_UNITS)}", fallback)
        if amount == int(amount):
            amount = int(amount)
        return {"value": amount, "unit": unit}

    def countdown_end(self, value) -> str:
        text = str(value or "").strip()
        if not text:
            return ""
        if parse_iso_instant(text) is None:
            return self._reject("countdownEndISO", "must be an ISO-8601 timestamp", "")
        return text

    @staticmethod
    def page_size(value) -> int:
        num = _finite_number(value)
        if num is None:
            return 15
        return max(PAGE_SIZE_MIN, min(PAGE_SIZE_MAX, int(num)))

    def banner_title(self, value) -> str:
        if value is None:
            return self.defaults["bannerTitle"]
        return str(value)[:BANNER_TITLE_MAX]

    @staticmethod
    def socials(value) -> List[Dict]:
        if not isinstance(value, (list, tuple)):
            return []
        cleaned = []
        for item in value:
            if not isinstance(item, dict):
                continue
            name = str(item.get("name") or "").strip()[:SOCIAL_NAME_MAX]
            url = str(item.get("url") or "").strip()[:SOCIAL_URL_MAX]
            if not name or not url:
                continue
            cleaned.append({"name": name, "url": url})
        return cleaned[:SOCIALS_MAX]

    def custom_range(self, value) -> Dict:
        cleared = {"enabled": False, "start": "", "end": ""}
        if not isinstance(value, dict):
            return cleared
        start_text = str(value.get("start") or "").strip()
        end_text = str(value.get("end") or "").strip()
        start = parse_strict_date(start_text)
        end = parse_strict_date(end_text)
        if start is None or end is None:
            if value.get("enabled"):
                logger.warning(f"自定义区间日期非法，已禁用: start={start_text!r}, end={end_text!r}")
            return cleared
        enabled = bool(value.get("enabled"))
        if enabled and start > end and self.strict:
            raise ValidationError("customRange", "start must not be after end")
        return {"enabled": enabled, "start": start_text, "end": end_text}

    @staticmethod
    def prize_config(value) -> Dict:
        if not isinstance(value, dict):
            return {"paidPlacements": 0, "amounts": []}
        paid_num = _finite_number(value.get("paidPlacements"))
        paid = 0 if paid_num is None else max(0, min(PAID_PLACEMENTS_MAX, int(paid_num)))
        raw_amounts = value.get("amounts")
        if not isinstance(raw_amounts, (list, tuple)):
            raw_amounts = []
        amounts = []
        for raw in list(raw_amounts)[:paid]:
            num = _finite_number(raw)
            amounts.append(max(0.0, num) if num is not None else 0.0)
        amounts.extend([0.0] * (paid - len(amounts)))
        return {"paidPlacements": paid, "amounts": amounts}

    def normalize(self, data: Dict) -> Dict:
        return {
            "period": self.period(data.get("period")),
            "customRange": self.custom_range(data.get("customRange")),
            "pageSize": self.page_size(data.get("pageSize")),
            "bannerTitle": self.banner_title(data.get("bannerTitle")),
            "socials": self.socials(data.get("socials")),
            "prizeConfig": self.prize_config(data.get("prizeConfig")),
            "countdown": self.countdown(data.get("countdown")),
            "countdownEndISO": self.countdown_end(data.get("countdownEndISO")),
            "updatedAt": data.get("updatedAt"),
        }


class SettingsService:
    def __init__(self, repo, now_fn: Callable = utc_now):
        self.repo = repo
        self.now_fn = now_fn
        self._listeners: List[Callable[[Settings], None]] = []

    def add_listener(self, callback: Callable[[Settings], None]):
        self._listeners.append(callback)

    def get(self) -> Settings:
        doc = self.repo.load_document()
        if doc is None:
            return Settings()
        loaded = document_to_settings(migrate_document(doc))
        normalized = SettingsNormalizer(strict=False).normalize(_merge_settings(default_settings(), loaded))
        return Settings.model_validate(normalized)

    def set(self, payload) -> Settings:
        if isinstance(payload, Settings):
            payload = payload.model_dump(by_alias=True, mode="json")
        if not isinstance(payload, dict):
            raise ValidationError("settings", "payload must be an object")

        # 部分写入：未提供的字段保留当前已存储的值
        current = self.get().model_dump(by_alias=True, mode="json")
        normalized = SettingsNormalizer(strict=True).normalize(_merge_settings(current, payload))
        normalized["updatedAt"] = to_iso_z(self.now_fn())
        self.repo.save_document(settings_to_document(normalized))
        settings = Settings.model_validate(normalized)
        logger.info(
            "排行榜设置已保存: "
            f"period={settings.period}, "
            f"custom={settings.custom_range.enabled}, "
            f"page_size={settings.page_size}, "
            f"paid={settings.prize_config.paid_placements}"
        )
        for callback in self._listeners:
            callback(settings)
        return settings
