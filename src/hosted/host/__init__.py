"""Host wiring hosted services to a callback provider."""

from .host import Host

__all__ = ["Host"]
