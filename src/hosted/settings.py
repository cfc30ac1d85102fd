"""Settings for hosted services and useful functionality to work with them."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from typing_extensions import NotRequired, TypedDict, Unpack

from hosted.common import DEFAULT_STOP_TIMEOUT, HOSTED_ENV_PREFIX, OverlapBehaviorEnum, ProviderEnum
from hosted.errors import HostedConfigError


class HostedSettingsKwargs(TypedDict):
    """Kwargs accepted by :meth:`HostedSettings.load`."""

    provider: NotRequired[ProviderEnum | str]
    stop_timeout: NotRequired[float]
    overlap_behavior: NotRequired[OverlapBehaviorEnum]
    diagnostic: NotRequired[bool]


@dataclasses.dataclass
class HostedSettings:
    """Strongly typed configuration holder for a host and its services.

    :param provider: Callback provider, as a known enum member or a dotted Python path.
    :param stop_timeout: Seconds a stopping service waits for in-flight work.
    :param overlap_behavior: What timed services do with a tick that overlaps the previous one.
    :param diagnostic: Re-raise scope teardown errors instead of skipping scoped callbacks.
    """

    provider: ProviderEnum | str
    stop_timeout: float
    overlap_behavior: OverlapBehaviorEnum
    diagnostic: bool

    @classmethod
    def from_defaults(cls) -> dict[str, Any]:
        """Return the canonical default values for all settings fields."""
        return {
            "provider": ProviderEnum.InMemoryCallbackProvider,
            "stop_timeout": DEFAULT_STOP_TIMEOUT,
            "overlap_behavior": OverlapBehaviorEnum.Queue,
            "diagnostic": False,
        }

    @classmethod
    def load(cls, **settings: Any) -> HostedSettings:
        """Load settings from keyword overrides, env vars, and defaults (in that order).

        :param settings: Keyword arguments that override both environment variables and defaults.
        :returns: A fully instantiated :class:`HostedSettings` object.
        :raises HostedConfigError: If a value is out of range or an env var cannot be coerced.
        """
        final_settings = cls.from_defaults()
        final_settings.update(cls.from_envs())
        final_settings.update(settings)
        instance = cls(**final_settings)
        instance.validate()
        return instance

    def validate(self) -> None:
        """Check cross-field constraints not expressed by the field types."""
        if self.stop_timeout < 0:
            msg = f"stop_timeout must be a non negative number of seconds, got {self.stop_timeout!r}"
            raise HostedConfigError(msg)

    def update(self, **settings: Unpack[HostedSettingsKwargs]) -> None:
        """Apply keyword overrides directly to the instance."""
        for k, v in settings.items():
            if hasattr(self, k):
                setattr(self, k, v)

    def as_dict(self) -> dict[str, Any]:
        """Return specified settings as a plain dictionary for serialisation."""
        return dataclasses.asdict(self)

    @classmethod
    def from_envs(cls) -> dict[str, Any]:
        """Return settings overridden via ``HOSTED_*`` environment variables."""
        coercers: dict[str, Any] = {
            "provider": lambda v: _enum_or_path(v, ProviderEnum),
            "stop_timeout": _to_float,
            "overlap_behavior": lambda v: OverlapBehaviorEnum(v),
            "diagnostic": _to_bool,
        }

        to_return: dict[str, Any] = {}
        for field in dataclasses.fields(cls):
            env_var = f"{HOSTED_ENV_PREFIX}_{field.name.upper()}"
            if env_var not in os.environ:
                continue
            raw_value = os.environ[env_var]
            if field.name not in coercers:
                to_return[field.name] = raw_value
                continue

            try:
                to_return[field.name] = coercers[field.name](raw_value)
            except ValueError as exc:
                msg = f"{raw_value!r} is not a valid value for {field.name!r}"
                raise HostedConfigError(msg) from exc
        return to_return


def _enum_or_path(value: str, enum_cls: Any) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        return value


def _to_float(value: str) -> float:
    return float(value)


def _to_bool(value: str) -> bool:
    truthy = {"1", "true", "yes", "on"}
    falsy = {"0", "false", "no", "off"}
    lower = value.lower()
    if lower in truthy:
        return True
    if lower in falsy:
        return False
    msg = f"Must be a boolean (one of {sorted(truthy | falsy)}), got {value!r}"
    raise ValueError(msg)
