import base64
import threading

import pytest
from fastapi.testclient import TestClient

from app.core import deps
from app.core.concurrency import SingleFlightGuard
from app.core.ranking import rank_affiliates
from app.database import Database
from app.main import app
from app.repositories import SettingsRepository, SnapshotRepository
from app.services import LeaderboardService, SettingsService, SnapshotService


class FakeRainbetClient:
    has_range_discovery = False

    def __init__(self, affiliates=None, error=None):
        self.affiliates = list(affiliates or [])
        self.error = error
        self.calls = []
        self.entered = threading.Event()
        self.release = None

    def fetch_ranked(self, window, limit):
        self.calls.append((window, limit))
        self.entered.set()
        if self.release is not None:
            self.release.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return rank_affiliates(self.affiliates, limit)


SAMPLE_AFFILIATES = [
    {"username": "alice", "wagered_amount": "1500.50"},
    {"username": "bob", "wagered_amount": 3200},
    {"username": "carol", "wagered_amount": "0"},
    {"username": "dave", "wagered_amount": "abc"},
    {"username": "erin", "wagered_amount": 800, "bets": 12},
]


def basic_auth(user: str = "admin", password: str = "hunter2") -> dict:
    token = base64.b64encode(f"{user}:{password}".encode("utf-8")).decode("ascii")
    return {"Authorization": f"Basic {token}"}


@pytest.fixture
def admin_headers():
    return basic_auth()


@pytest.fixture
def fake_client_cls():
    return FakeRainbetClient


@pytest.fixture
def fake_client():
    return FakeRainbetClient(SAMPLE_AFFILIATES)


@pytest.fixture
def db(tmp_path):
    return Database(db_path=str(tmp_path / "leaderboard.db"))


@pytest.fixture
def services(db, fake_client):
    settings_service = SettingsService(SettingsRepository(db))
    leaderboard_service = LeaderboardService(settings_service, fake_client)
    snapshot_service = SnapshotService(
        settings_service,
        leaderboard_service,
        SnapshotRepository(db),
        guard=SingleFlightGuard("test-capture"),
    )
    return settings_service, leaderboard_service, snapshot_service


@pytest.fixture
def client(tmp_path, monkeypatch, fake_client):
    monkeypatch.setenv("LEADERBOARD_DB_PATH", str(tmp_path / "api.db"))
    monkeypatch.setenv("ADMIN_USER", "admin")
    monkeypatch.setenv("ADMIN_PASS", "hunter2")
    monkeypatch.delenv("RAINBET_API_KEY", raising=False)
    monkeypatch.setattr(deps.leaderboard_cache, "ttl_seconds", 0.0)
    deps.leaderboard_cache.clear()
    app.dependency_overrides[deps.get_rainbet_client] = lambda: fake_client
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
