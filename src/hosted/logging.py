"""Logging helpers shared by hosted services, timers and orchestrators."""

from __future__ import annotations

__all__ = ["DEFAULT_LOG_FORMAT", "WithLogger", "configure_logging"]

import logging
from typing import ClassVar, Final

DEFAULT_LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class WithLogger:
    """Mixin giving every instance a logger named after its class."""

    _logger_cache: ClassVar[dict[type, logging.Logger]] = {}

    @classmethod
    def _get_logger(cls) -> logging.Logger:
        if cls not in WithLogger._logger_cache:
            WithLogger._logger_cache[cls] = logging.getLogger(cls.__name__)
        return WithLogger._logger_cache[cls]

    @property
    def _logger(self) -> logging.Logger:
        return self._get_logger()


def configure_logging(level: int | str = logging.INFO, fmt: str = DEFAULT_LOG_FORMAT) -> None:
    """Install a stream handler with *fmt* on the root logger and set its *level*.

    :param level: Numeric level or a level name such as ``"DEBUG"``.
    :param fmt: Format string passed to :class:`logging.Formatter`.
    :raises ValueError: If *level* is a string that is not a logging level name.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            msg = f"{level!r} is not a valid logging level name"
            raise ValueError(msg)
        level = resolved

    root_logger = logging.getLogger()
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
