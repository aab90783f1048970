from .settings_repository import InMemorySettingsRepository, SettingsRepository
from .snapshot_repository import SnapshotRepository

__all__ = [
    "SettingsRepository",
    "InMemorySettingsRepository",
    "SnapshotRepository",
]
