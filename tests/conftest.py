from __future__ import annotations

from typing import Iterator

import pytest

from adquery.settings import get_settings


@pytest.fixture(autouse=True)
def settings_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("AD_DOMAIN", "example.com")
    monkeypatch.setenv("TZ", "UTC")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
