"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from permissions_manager.config import Settings


pytestmark = pytest.mark.unit


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.default_guard == "web"
    assert settings.guard_show_selection is False
    assert settings.protected_roles == ["Admin", "Basic"]
    assert settings.permissions_per_page == 6
    assert settings.roles_per_page is None
    assert "content" in settings.categories


def test_async_database_url():
    settings = Settings(
        _env_file=None, database_url="postgresql://user:pw@db:5432/permissions"
    )

    assert settings.async_database_url.startswith("postgresql+asyncpg://")


def test_default_guard_must_be_available():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, default_guard="admin", available_guards=["web"])


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("GUARD_SHOW_SELECTION", "true")
    monkeypatch.setenv("PROTECTED_ROLES", '["Owner"]')

    settings = Settings(_env_file=None)

    assert settings.guard_show_selection is True
    assert settings.protected_roles == ["Owner"]
