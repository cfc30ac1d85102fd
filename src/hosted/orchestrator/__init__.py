"""Orchestration of callback sets for default hosted services."""

from .cache import LastInvokeCache, callback_key
from .orchestrator import CallbackOrchestrator

__all__ = ["CallbackOrchestrator", "LastInvokeCache", "callback_key"]
