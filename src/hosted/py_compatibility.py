"""Compatibility objects for the range of Python versions supported by ``hosted``."""

__all__ = ["StrEnum"]

import sys

if sys.version_info >= (3, 11):
    from enum import StrEnum
else:
    from backports.strenum import StrEnum
