from __future__ import annotations

import pytest
from pydantic import ValidationError

from shared.config.settings import (
    DEFAULT_PARTITIONS,
    AppSettings,
    LoggingSettings,
    StorageSettings,
    get_settings,
)


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults() -> None:
    settings = get_settings()

    assert settings.app.service_name == "records"
    assert settings.storage.backend == "file"
    assert settings.storage.counter_partition == 0
    assert settings.storage.partitions == DEFAULT_PARTITIONS
    assert get_settings() is settings


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RECORDS_PORT", "9100")
    monkeypatch.setenv("RECORDS_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("RECORDS_STORAGE_BACKEND", "memory")
    monkeypatch.setenv(
        "RECORDS_STORAGE_PARTITIONS",
        '{"patients": 10, "doctors": 11, "rooms": 12, "auctions": 13}',
    )

    assert AppSettings().port == 9100
    assert LoggingSettings().level == "DEBUG"
    storage = StorageSettings()
    assert storage.backend == "memory"
    assert storage.partitions["auctions"] == 13


def test_partitions_must_cover_every_collection() -> None:
    with pytest.raises(ValidationError):
        StorageSettings(partitions={"patients": 1, "doctors": 2})


def test_unknown_backend_is_rejected() -> None:
    with pytest.raises(ValidationError):
        StorageSettings(backend="s3")
