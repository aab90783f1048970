from fastapi import Depends

from app.core.cache import TTLCache
from app.core.config import load_app_config
from app.database import Database
from app.rainbet_client import RainbetClient
from app.repositories import SettingsRepository, SnapshotRepository
from app.services import LeaderboardService, SettingsService, SnapshotService

# 进程级排行榜读取缓存，设置变更时清空
leaderboard_cache = TTLCache(load_app_config().leaderboard_cache_ttl_seconds)


def make_settings_service(db) -> SettingsService:
    settings_service = SettingsService(SettingsRepository(db))
    settings_service.add_listener(lambda _settings: leaderboard_cache.clear())
    return settings_service


def make_leaderboard_service(settings_service, client, config) -> LeaderboardService:
    return LeaderboardService(
        settings_service,
        client,
        timezone_name=config.leaderboard_timezone,
        cache=leaderboard_cache,
    )


def build_snapshot_service(db, client, config) -> SnapshotService:
    settings_service = make_settings_service(db)
    leaderboard_service = make_leaderboard_service(settings_service, client, config)
    return SnapshotService(settings_service, leaderboard_service, SnapshotRepository(db))


def get_config():
    return load_app_config()


def get_db(config=Depends(get_config)):
    return Database(config.db_path)


def get_rainbet_client(config=Depends(get_config)):
    return RainbetClient.from_config(config)


def get_settings_service(db=Depends(get_db)):
    return make_settings_service(db)


def get_leaderboard_service(
    settings_service=Depends(get_settings_service),
    client=Depends(get_rainbet_client),
    config=Depends(get_config),
):
    return make_leaderboard_service(settings_service, client, config)


def get_snapshot_service(
    db=Depends(get_db),
    leaderboard_service=Depends(get_leaderboard_service),
):
    return SnapshotService(leaderboard_service.settings_service, leaderboard_service, SnapshotRepository(db))
