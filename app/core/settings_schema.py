"""Settings persistence mapping: camelCase model <-> snake_case stored document."""
import math
from copy import deepcopy
from typing import Callable, Dict

SETTINGS_SCHEMA_VERSION = 2

SECONDS_PER_DAY = 86400

# (model key, document key)
TOP_LEVEL_FIELDS = (
    ("period", "period"),
    ("customRange", "custom_range"),
    ("pageSize", "page_size"),
    ("bannerTitle", "banner_title"),
    ("socials", "socials"),
    ("prizeConfig", "prize_config"),
    ("countdown", "countdown"),
    ("countdownEndISO", "countdown_end_iso"),
    ("updatedAt", "updated_at"),
)
PRIZE_FIELDS = (
    ("paidPlacements", "paid_placements"),
    ("amounts", "amounts"),
)


def _map_prize(prize, pairs) -> Dict:
    if not isinstance(prize, dict):
        return prize
    mapped = {}
    for src, dst in pairs:
        if src in prize:
            mapped[dst] = deepcopy(prize[src])
    return mapped


def settings_to_document(settings: Dict) -> Dict:
    doc = {"schema_version": SETTINGS_SCHEMA_VERSION}
    for model_key, doc_key in TOP_LEVEL_FIELDS:
        if model_key not in settings:
            continue
        value = deepcopy(settings[model_key])
        if model_key == "prizeConfig":
            value = _map_prize(value, PRIZE_FIELDS)
        doc[doc_key] = value
    return doc


def document_to_settings(doc: Dict) -> Dict:
    reverse_prize = tuple((dst, src) for src, dst in PRIZE_FIELDS)
    settings = {}
    for model_key, doc_key in TOP_LEVEL_FIELDS:
        if doc_key not in doc:
            continue
        value = deepcopy(doc[doc_key])
        if model_key == "prizeConfig":
            value = _map_prize(value, reverse_prize)
        settings[model_key] = value
    return settings


def upgrade_countdown(value):
    """旧版 countdown 为秒数，转换为 {value, unit: days}"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return value
    seconds = float(value)
    if not math.isfinite(seconds):
        return value
    days = math.floor(max(0.0, seconds) / SECONDS_PER_DAY + 0.5)
    return {"value": days, "unit": "days"}


def _migrate_v0_to_v1(doc: Dict) -> Dict:
    # v0: 旧版按 camelCase 整行存储
    migrated = {k: v for k, v in doc.items() if k != "id"}
    for model_key, doc_key in TOP_LEVEL_FIELDS:
        if model_key != doc_key and model_key in migrated:
            value = migrated.pop(model_key)
            migrated.setdefault(doc_key, value)
    prize = migrated.get("prize_config")
    if isinstance(prize, dict) and "paidPlacements" in prize:
        prize = dict(prize)
        prize.setdefault("paid_placements", prize.pop("paidPlacements"))
        migrated["prize_config"] = prize
    return migrated


def _migrate_v1_to_v2(doc: Dict) -> Dict:
    migrated = dict(doc)
    if "countdown" in migrated:
        migrated["countdown"] = upgrade_countdown(migrated["countdown"])
    return migrated


MIGRATIONS: tuple[tuple[int, Callable[[Dict], Dict]], ...] = (
    (1, _migrate_v0_to_v1),
    (2, _migrate_v1_to_v2),
)


def migrate_document(doc: Dict) -> Dict:
    """按 schema_version 依次升级，返回新字典，不修改入参"""
    current = deepcopy(doc or {})
    try:
        version = int(current.get("schema_version") or 0)
    except (TypeError, ValueError):
        version = 0
    for target_version, migrate in MIGRATIONS:
        if version < target_version:
            current = migrate(current)
            version = target_version
    current["schema_version"] = version
    return current
