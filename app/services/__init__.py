from .leaderboard_service import LeaderboardService, price_rows
from .settings_service import SettingsService, default_settings
from .snapshot_service import SnapshotService, capture_guard

__all__ = [
    "SettingsService",
    "LeaderboardService",
    "SnapshotService",
    "capture_guard",
    "default_settings",
    "price_rows",
]
