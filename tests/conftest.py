"""Shared fixtures for cronbits tests."""

from datetime import timezone
from zoneinfo import ZoneInfo

import pytest

from cronbits.config import reset_config


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Give every test the default configuration."""
    for name in ("CRONBITS_MAX_YEAR", "CRONBITS_LOCAL_TIMEZONE", "CRONBITS_INCLUDE_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def utc():
    return timezone.utc


@pytest.fixture
def new_york():
    return ZoneInfo("America/New_York")


@pytest.fixture
def london():
    return ZoneInfo("Europe/London")
