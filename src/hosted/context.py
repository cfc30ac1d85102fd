"""Resolve :class:`~hosted.settings.HostedSettings` into concrete runtime services."""

from __future__ import annotations

__all__ = ["initialize_provider", "initialize_settings"]

import importlib
from typing import Any, cast

from typing_extensions import assert_never

from hosted.common import ProviderEnum
from hosted.errors import HostedApplicationError, InvalidSpecifiedTypeError
from hosted.hosted_types import TImplementation, TStrEnum
from hosted.provider.provider import KNOWN_PROVIDERS, CallbackProviderProtocol
from hosted.settings import HostedSettings


def initialize_settings(**settings: Any) -> HostedSettings:
    """Load settings from keyword overrides, ``HOSTED_*`` env vars and defaults."""
    return HostedSettings.load(**settings)


def initialize_provider(settings: HostedSettings) -> CallbackProviderProtocol:
    """Instantiate the callback provider selected by *settings*."""
    return _initialize(
        settings.provider,
        KNOWN_PROVIDERS,
        CallbackProviderProtocol,  # type: ignore[type-abstract]
        ProviderEnum,
    )


def _unregistered_known_type(type_: TStrEnum) -> HostedApplicationError:
    """Return an error when a known enum value lacks a registered implementation."""
    msg = (
        f"Found unregistered type: {type_!r}. "
        f"If you are developer, ensure you register it here. "
        f"If you are library user, please issue the error to development team."
    )
    return HostedApplicationError(msg)


def _invalid_specified_type(py_path: str, expected_type: type[Any]) -> InvalidSpecifiedTypeError:
    """Return an error when importing a dotted path yields the wrong type."""
    msg = (
        f"Object specified by {py_path!r} is not an instance of {expected_type!r}. "
        f"Please, ensure correctness of application configuration."
    )
    return InvalidSpecifiedTypeError(msg)


def _initialize(
    settings_value: TStrEnum | str,
    registry: dict[TStrEnum, type[TImplementation]],
    expected_type: type[TImplementation],
    enum_type: type[TStrEnum],
) -> TImplementation:
    """Instantiate either a registered enum implementation or a dotted Python path.

    :param settings_value: Value provided by :class:`HostedSettings`, either an enum member
        or a dotted import path string.
    :param registry: Mapping of enum values to concrete classes.
    :param expected_type: Protocol or abstract base class that the result must satisfy.
    :param enum_type: Enum class associated with *registry*.
    :returns: Instantiated implementation matching *settings_value*.
    :raises HostedApplicationError: If an enum value is not registered.
    :raises InvalidSpecifiedTypeError: If the dotted path resolves to an incompatible type.
    """
    match settings_value:
        case _ if isinstance(settings_value, enum_type):
            if settings_value in registry:
                return registry[settings_value]()
            raise _unregistered_known_type(settings_value)
        case str():
            return _initialize_by_py_path(settings_value, expected_type)
        case _:
            assert_never(settings_value)


def _initialize_by_py_path(py_path: str, expected_type: type[TImplementation]) -> TImplementation:
    """Resolve a dotted Python path into an instantiated object.

    :param py_path: Fully qualified import path in the ``package.module.Class`` format.
    :param expected_type: Protocol or ABC the resulting object must satisfy.
    :raises ImportError: If the module portion cannot be imported.
    :raises AttributeError: If the target attribute is missing.
    :raises InvalidSpecifiedTypeError: If the object does not implement *expected_type*.
    """
    module, klass = py_path.rsplit(".", 1)
    module_obj = importlib.import_module(module)
    result = cast("TImplementation", getattr(module_obj, klass)())
    if not isinstance(result, expected_type):
        raise _invalid_specified_type(py_path, expected_type)
    return result
