"""Per-type memory of when scoped callbacks last ran."""

from __future__ import annotations

__all__ = ["LastInvokeCache", "callback_key"]

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator
    from datetime import datetime

    from hosted.hosted_types import CallbackKey


def callback_key(callback: Any) -> CallbackKey:
    """Return the stable key of *callback*: the dotted path of its class.

    Scoped callbacks are rebuilt on every run, so instance identity cannot be used. Classes defined
    inside the same function share a qualified name (``f.<locals>.Cls``) and therefore one key;
    define scoped callback classes at module or class level.
    """
    cls = type(callback)
    return f"{cls.__module__}.{cls.__qualname__}"


class LastInvokeCache:
    """Map callback keys to the UTC time the callback last ran.

    Only mutated by the orchestrator of one hosted service, inside a single run.
    """

    def __init__(self) -> None:
        """Initialize an empty cache."""
        self._entries: dict[CallbackKey, datetime] = {}

    def get(self, key: CallbackKey) -> datetime | None:
        """Return the recorded time for *key* or ``None``."""
        return self._entries.get(key)

    def get_or_seed(self, key: CallbackKey, seed: datetime) -> datetime:
        """Return the recorded time for *key*, recording *seed* first when it is unknown."""
        return self._entries.setdefault(key, seed)

    def record(self, key: CallbackKey, invoked_at: datetime) -> None:
        """Store *invoked_at* as the last run of *key*."""
        self._entries[key] = invoked_at

    def clear(self) -> None:
        """Forget every entry."""
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CallbackKey]:
        return iter(self._entries)
