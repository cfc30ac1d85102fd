"""Tests for initializing runtime services via context helpers."""

import pytest

from hosted.common import ProviderEnum
from hosted.context import initialize_provider, initialize_settings
from hosted.errors import InvalidSpecifiedTypeError
from hosted.provider import InMemoryCallbackProvider


def test_initialize_defaults() -> None:
    """Default settings build the in-memory provider."""
    settings = initialize_settings()
    provider = initialize_provider(settings)
    assert isinstance(provider, InMemoryCallbackProvider)


def test_initialize_by_enum() -> None:
    """Explicit enum members resolve through the registry."""
    settings = initialize_settings(provider=ProviderEnum.InMemoryCallbackProvider)
    assert isinstance(initialize_provider(settings), InMemoryCallbackProvider)


def test_initialize_by_dotted_path() -> None:
    """A dotted path is imported and instantiated."""
    settings = initialize_settings(provider="hosted.provider.InMemoryCallbackProvider")
    assert isinstance(initialize_provider(settings), InMemoryCallbackProvider)


def test_initialize_by_dotted_path_of_wrong_type() -> None:
    """Objects not implementing the provider protocol are rejected."""
    settings = initialize_settings(provider="collections.OrderedDict")
    with pytest.raises(InvalidSpecifiedTypeError):
        initialize_provider(settings)
