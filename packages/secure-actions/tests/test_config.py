"""Tests for settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from secure_actions import Settings


def test_defaults() -> None:
    settings = Settings()
    assert settings.secret_length == 20
    assert settings.bcrypt_rounds >= 8
    assert settings.strict_limits is True
    assert settings.sweep_interval_seconds == 86400


def test_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SECURE_ACTIONS_BCRYPT_ROUNDS", "9")
    monkeypatch.setenv("SECURE_ACTIONS_STRICT_LIMITS", "false")
    settings = Settings()
    assert settings.bcrypt_rounds == 9
    assert settings.strict_limits is False


@pytest.mark.parametrize("field, value", [("bcrypt_rounds", 4), ("secret_length", 10)])
def test_weak_settings_rejected(field: str, value: int) -> None:
    with pytest.raises(ValidationError):
        Settings(**{field: value})
