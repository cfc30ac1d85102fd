"""Tests for settings loading and environment coercion."""

from __future__ import annotations

import dataclasses

import pytest

from hosted.common import DEFAULT_STOP_TIMEOUT, OverlapBehaviorEnum, ProviderEnum
from hosted.errors import HostedConfigError
from hosted.settings import HostedSettings, HostedSettingsKwargs


def test_defaults() -> None:
    """Without env vars or overrides the canonical defaults apply."""
    settings = HostedSettings.load()
    assert settings.provider is ProviderEnum.InMemoryCallbackProvider
    assert settings.stop_timeout == DEFAULT_STOP_TIMEOUT
    assert settings.overlap_behavior is OverlapBehaviorEnum.Queue
    assert settings.diagnostic is False


def test_stop_timeout_env_coercion(monkeypatch: pytest.MonkeyPatch) -> None:
    """stop_timeout should be coerced from env string to float."""
    monkeypatch.setenv("HOSTED_STOP_TIMEOUT", "0.5")
    assert HostedSettings.load().stop_timeout == 0.5


def test_stop_timeout_env_invalid(monkeypatch: pytest.MonkeyPatch) -> None:
    """Invalid stop_timeout env should raise configuration error."""
    monkeypatch.setenv("HOSTED_STOP_TIMEOUT", "not-a-number")
    with pytest.raises(HostedConfigError, match="is not a valid value for 'stop_timeout'"):
        HostedSettings.load()


def test_negative_stop_timeout_rejected() -> None:
    """A negative stop timeout is a configuration error."""
    with pytest.raises(HostedConfigError, match="stop_timeout"):
        HostedSettings.load(stop_timeout=-1)


def test_overlap_behavior_env_coercion(monkeypatch: pytest.MonkeyPatch) -> None:
    """Overlap behavior env should coerce to enum."""
    monkeypatch.setenv("HOSTED_OVERLAP_BEHAVIOR", "Skip")
    assert HostedSettings.load().overlap_behavior is OverlapBehaviorEnum.Skip


def test_overlap_behavior_env_invalid(monkeypatch: pytest.MonkeyPatch) -> None:
    """Invalid overlap behavior should raise config error."""
    monkeypatch.setenv("HOSTED_OVERLAP_BEHAVIOR", "Parallel")
    with pytest.raises(HostedConfigError):
        HostedSettings.load()


def test_custom_dotted_path_passthrough(monkeypatch: pytest.MonkeyPatch) -> None:
    """Non-enum strings should remain untouched to allow dotted paths."""
    monkeypatch.setenv("HOSTED_PROVIDER", "my_app.custom.CustomProvider")
    assert HostedSettings.load().provider == "my_app.custom.CustomProvider"


def test_known_provider_env_coerced_to_enum(monkeypatch: pytest.MonkeyPatch) -> None:
    """Known provider names resolve to the enum member."""
    monkeypatch.setenv("HOSTED_PROVIDER", "InMemoryCallbackProvider")
    assert HostedSettings.load().provider is ProviderEnum.InMemoryCallbackProvider


@pytest.mark.parametrize("val", ["1", "true", "TRUE", "on", "yes", "YeS"])
def test_diagnostic_truthy(monkeypatch: pytest.MonkeyPatch, val: str) -> None:
    """diagnostic should be True for a set of truthy string values (case-insensitive)."""
    monkeypatch.setenv("HOSTED_DIAGNOSTIC", val)
    assert HostedSettings.load().diagnostic is True


@pytest.mark.parametrize("val", ["0", "false", "FALSE", "off", "no", "No"])
def test_diagnostic_falsy(monkeypatch: pytest.MonkeyPatch, val: str) -> None:
    """diagnostic should be False for a set of falsy string values (case-insensitive)."""
    monkeypatch.setenv("HOSTED_DIAGNOSTIC", val)
    assert HostedSettings.load().diagnostic is False


def test_diagnostic_invalid(monkeypatch: pytest.MonkeyPatch) -> None:
    """Invalid boolean string for diagnostic should raise HostedConfigError."""
    monkeypatch.setenv("HOSTED_DIAGNOSTIC", "maybe")
    with pytest.raises(HostedConfigError):
        HostedSettings.load()


def test_kwargs_beat_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keyword overrides take priority over env vars, env vars over defaults."""
    monkeypatch.setenv("HOSTED_STOP_TIMEOUT", "2")
    monkeypatch.setenv("HOSTED_DIAGNOSTIC", "true")
    settings = HostedSettings.load(diagnostic=False)
    assert settings.stop_timeout == 2.0
    assert settings.diagnostic is False


def test_update_and_as_dict() -> None:
    """update applies known keys; as_dict exposes every field."""
    settings = HostedSettings.load()
    settings.update(overlap_behavior=OverlapBehaviorEnum.Skip)
    data = settings.as_dict()
    assert data["overlap_behavior"] is OverlapBehaviorEnum.Skip
    assert set(data) == {field.name for field in dataclasses.fields(HostedSettings)}


def test_settings_kwargs_matches_settings_fields() -> None:
    """Kwargs TypedDict should stay in sync with HostedSettings fields."""
    settings_fields = {field.name for field in dataclasses.fields(HostedSettings)}
    kwargs_fields = set(HostedSettingsKwargs.__annotations__)
    assert settings_fields == kwargs_fields
