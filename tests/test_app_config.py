from app.core.config import DEFAULT_RAINBET_API_URL, load_app_config


def test_app_config_defaults(monkeypatch):
    for name in (
        "RAINBET_API_URL",
        "RAINBET_API_KEY",
        "RAINBET_TIMEOUT_SECONDS",
        "LEADERBOARD_TIMEZONE",
        "LEADERBOARD_CACHE_TTL_SECONDS",
        "ENABLE_COUNTDOWN_SNAPSHOT",
        "COUNTDOWN_CHECK_INTERVAL_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)

    config = load_app_config()

    assert config.rainbet_api_url == DEFAULT_RAINBET_API_URL
    assert config.rainbet_api_key == ""
    assert config.upstream_timeout_seconds == 10.0
    assert config.leaderboard_timezone == "UTC"
    assert config.leaderboard_cache_ttl_seconds == 30.0
    assert config.enable_countdown_snapshot is True
    assert config.countdown_check_interval_seconds == 30


def test_app_config_invalid_values_fallback(monkeypatch):
    monkeypatch.setenv("RAINBET_TIMEOUT_SECONDS", "x")
    monkeypatch.setenv("COUNTDOWN_CHECK_INTERVAL_SECONDS", "soon")
    monkeypatch.setenv("LEADERBOARD_CACHE_TTL_SECONDS", "-3")

    config = load_app_config()

    assert config.upstream_timeout_seconds == 10.0
    assert config.countdown_check_interval_seconds == 30
    assert config.leaderboard_cache_ttl_seconds == 0.0


def test_upstream_timeout_is_capped(monkeypatch):
    monkeypatch.setenv("RAINBET_TIMEOUT_SECONDS", "45")
    assert load_app_config().upstream_timeout_seconds == 10.0

    monkeypatch.setenv("RAINBET_TIMEOUT_SECONDS", "4")
    assert load_app_config().upstream_timeout_seconds == 4.0
