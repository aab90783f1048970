from dataclasses import dataclass
import os

from dotenv import load_dotenv

from app.logger import logger

load_dotenv()

DEFAULT_RAINBET_API_URL = "https://services.rainbet.com/v1/external/affiliates"
MAX_UPSTREAM_TIMEOUT_SECONDS = 10.0


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int, minimum: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        value = default
    else:
        try:
            value = int(raw)
        except ValueError:
            logger.warning(f"环境变量 {name}={raw} 非法，使用默认值 {default}")
            value = default
    if minimum is not None:
        value = max(minimum, value)
    return value


def _env_float(name: str, default: float, minimum: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        value = default
    else:
        try:
            value = float(raw)
        except ValueError:
            logger.warning(f"环境变量 {name}={raw} 非法，使用默认值 {default}")
            value = default
    if minimum is not None:
        value = max(minimum, value)
    return value


@dataclass(frozen=True)
class AppConfig:
    rainbet_api_url: str
    rainbet_api_key: str
    rainbet_range_url: str
    upstream_timeout_seconds: float
    leaderboard_timezone: str
    leaderboard_cache_ttl_seconds: float
    db_path: str | None
    admin_user: str
    admin_pass: str
    enable_countdown_snapshot: bool
    countdown_check_interval_seconds: int


def load_app_config() -> AppConfig:
    timeout = _env_float("RAINBET_TIMEOUT_SECONDS", MAX_UPSTREAM_TIMEOUT_SECONDS, minimum=1.0)
    if timeout > MAX_UPSTREAM_TIMEOUT_SECONDS:
        logger.warning(
            f"RAINBET_TIMEOUT_SECONDS={timeout} 超过上限，使用 {MAX_UPSTREAM_TIMEOUT_SECONDS}"
        )
        timeout = MAX_UPSTREAM_TIMEOUT_SECONDS

    return AppConfig(
        rainbet_api_url=os.getenv("RAINBET_API_URL") or DEFAULT_RAINBET_API_URL,
        rainbet_api_key=os.getenv("RAINBET_API_KEY", ""),
        rainbet_range_url=os.getenv("RAINBET_RANGE_URL", ""),
        upstream_timeout_seconds=timeout,
        leaderboard_timezone=os.getenv("LEADERBOARD_TIMEZONE", "UTC"),
        leaderboard_cache_ttl_seconds=_env_float("LEADERBOARD_CACHE_TTL_SECONDS", 30.0, minimum=0.0),
        db_path=os.getenv("LEADERBOARD_DB_PATH") or None,
        admin_user=os.getenv("ADMIN_USER", ""),
        admin_pass=os.getenv("ADMIN_PASS", ""),
        enable_countdown_snapshot=_env_bool("ENABLE_COUNTDOWN_SNAPSHOT", True),
        countdown_check_interval_seconds=_env_int("COUNTDOWN_CHECK_INTERVAL_SECONDS", 30, minimum=5),
    )
