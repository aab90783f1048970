from datetime import datetime, timezone

import pytest

from app.core.errors import ValidationError
from app.repositories import InMemorySettingsRepository, SettingsRepository
from app.services import SettingsService, default_settings


def _fixed_now():
    return datetime(2026, 3, 1, 12, 0, 0, 123000, tzinfo=timezone.utc)


def test_get_returns_defaults_when_nothing_stored():
    service = SettingsService(InMemorySettingsRepository())

    settings = service.get()

    assert settings.period == "weekly"
    assert settings.page_size == 15
    assert settings.banner_title == "$500 Monthly Leaderboard"
    assert settings.countdown.value == 7
    assert settings.countdown.unit == "days"
    assert settings.prize_config.paid_placements == 0
    assert settings.updated_at is None


def test_set_clamps_and_truncates_then_round_trips(db):
    service = SettingsService(SettingsRepository(db), now_fn=_fixed_now)

    saved = service.set({"pageSize": 500, "bannerTitle": "x" * 200})
    loaded = SettingsService(SettingsRepository(db)).get()

    assert saved.page_size == 100
    assert len(saved.banner_title) == 80
    assert loaded.page_size == 100
    assert loaded.banner_title == "x" * 80
    assert loaded.updated_at == "2026-03-01T12:00:00.123Z"


def test_partial_set_keeps_stored_fields(db):
    service = SettingsService(SettingsRepository(db))
    service.set({
        "prizeConfig": {"paidPlacements": 3, "amounts": [300, 150, 50]},
        "customRange": {"enabled": True, "start": "2026-03-01", "end": "2026-03-31"},
        "socials": [{"name": "kick", "url": "https://kick.com/example"}],
        "pageSize": 20,
    })

    second = service.set({"period": "monthly"})
    loaded = SettingsService(SettingsRepository(db)).get()

    for settings in (second, loaded):
        assert settings.period == "monthly"
        assert settings.page_size == 20
        assert settings.prize_config.paid_placements == 3
        assert settings.prize_config.amounts == [300, 150, 50]
        assert settings.custom_range.enabled is True
        assert settings.custom_range.start == "2026-03-01"
        assert settings.custom_range.end == "2026-03-31"
        assert [s.name for s in settings.socials] == ["kick"]


def test_partial_nested_set_merges_into_stored_object():
    service = SettingsService(InMemorySettingsRepository())
    service.set({"customRange": {"enabled": False, "start": "2026-03-01", "end": "2026-03-31"}})

    saved = service.set({"customRange": {"enabled": True}})

    assert saved.custom_range.enabled is True
    assert saved.custom_range.start == "2026-03-01"
    assert saved.custom_range.end == "2026-03-31"


def test_invalid_page_size_falls_back_to_default():
    service = SettingsService(InMemorySettingsRepository())

    assert service.set({"pageSize": "lots"}).page_size == 15
    assert service.set({"pageSize": 0}).page_size == 1


def test_malformed_custom_range_is_disabled_and_cleared():
    service = SettingsService(InMemorySettingsRepository())

    saved = service.set({"customRange": {"enabled": True, "start": "2026/01/01", "end": "2026-01-31"}})

    assert saved.custom_range.enabled is False
    assert saved.custom_range.start == ""
    assert saved.custom_range.end == ""


def test_enabled_inverted_custom_range_is_rejected():
    service = SettingsService(InMemorySettingsRepository())

    with pytest.raises(ValidationError) as excinfo:
        service.set({"customRange": {"enabled": True, "start": "2026-02-10", "end": "2026-02-01"}})

    assert excinfo.value.field == "customRange"


def test_invalid_period_is_rejected_on_write():
    service = SettingsService(InMemorySettingsRepository())

    with pytest.raises(ValidationError) as excinfo:
        service.set({"period": "daily"})

    assert excinfo.value.field == "period"
    assert excinfo.value.to_dict()["field"] == "period"


@pytest.mark.parametrize(
    "countdown,field",
    [
        ({"value": -1, "unit": "days"}, "countdown.value"),
        ({"value": 3, "unit": "fortnights"}, "countdown.unit"),
    ],
)
def test_invalid_countdown_is_rejected_on_write(countdown, field):
    service = SettingsService(InMemorySettingsRepository())

    with pytest.raises(ValidationError) as excinfo:
        service.set({"countdown": countdown})

    assert excinfo.value.field == field


def test_prize_amounts_are_padded_and_truncated():
    service = SettingsService(InMemorySettingsRepository())

    padded = service.set({"prizeConfig": {"paidPlacements": 3, "amounts": [300]}})
    truncated = service.set({"prizeConfig": {"paidPlacements": 1, "amounts": [300, 150, 50]}})

    assert padded.prize_config.amounts == [300, 0, 0]
    assert truncated.prize_config.amounts == [300]


def test_socials_are_capped_and_cleaned():
    service = SettingsService(InMemorySettingsRepository())
    socials = [{"name": f"s{i}", "url": f"https://example.com/{i}"} for i in range(8)]
    socials.insert(0, {"name": "", "url": "https://example.com/blank"})

    saved = service.set({"socials": socials})

    assert len(saved.socials) == 5
    assert saved.socials[0].name == "s0"


def test_legacy_numeric_countdown_is_upgraded_on_read_without_write():
    legacy = {"schema_version": 1, "period": "biweekly", "countdown": 604800}
    repo = InMemorySettingsRepository(legacy)
    service = SettingsService(repo)

    settings = service.get()

    assert settings.period == "biweekly"
    assert settings.countdown.value == 7
    assert settings.countdown.unit == "days"
    assert repo.load_document()["countdown"] == 604800


def test_invalid_stored_values_fall_back_on_read():
    repo = InMemorySettingsRepository({"schema_version": 2, "period": "hourly", "page_size": 40})

    settings = SettingsService(repo).get()

    assert settings.period == "weekly"
    assert settings.page_size == 40


def test_listeners_receive_saved_settings():
    service = SettingsService(InMemorySettingsRepository())
    seen = []
    service.add_listener(seen.append)

    service.set({"bannerTitle": "Weekly Race"})

    assert [s.banner_title for s in seen] == ["Weekly Race"]


def test_default_settings_uses_wire_keys():
    defaults = default_settings()
    assert defaults["pageSize"] == 15
    assert defaults["customRange"] == {"enabled": False, "start": "", "end": ""}


def test_countdown_end_must_be_iso_instant():
    service = SettingsService(InMemorySettingsRepository())

    with pytest.raises(ValidationError) as excinfo:
        service.set({"countdownEndISO": "next friday"})

    assert excinfo.value.field == "countdownEndISO"
    assert service.set({"countdownEndISO": "2026-03-31T23:59:59Z"}).countdown_end_iso == "2026-03-31T23:59:59Z"


def test_numeric_countdown_in_payload_is_upgraded():
    service = SettingsService(InMemorySettingsRepository())

    saved = service.set({"countdown": 259200})

    assert saved.countdown.value == 3
    assert saved.countdown.unit == "days"
