"""Collection of generic types and type aliases for the ``hosted`` package."""

__all__ = ["CallbackKey", "TCallbackFactory", "TImplementation", "TStrEnum", "TTimerCallback"]

from collections.abc import Callable
from typing import Any, TypeAlias, TypeVar

from hosted.py_compatibility import StrEnum

TTimerCallback = Callable[[Any], Any]
TCallbackFactory = Callable[[], Any]
TStrEnum = TypeVar("TStrEnum", bound=StrEnum)
TImplementation = TypeVar("TImplementation")
CallbackKey: TypeAlias = str
