"""Callback providers standing in for the host's dependency container."""

from .provider import (
    KNOWN_PROVIDERS,
    AbstractCallbackProvider,
    CallbackProviderProtocol,
    CallbackRegistration,
    CallbackScope,
    InMemoryCallbackProvider,
    ScopeFactoryProtocol,
)

__all__ = [
    "KNOWN_PROVIDERS",
    "AbstractCallbackProvider",
    "CallbackProviderProtocol",
    "CallbackRegistration",
    "CallbackScope",
    "InMemoryCallbackProvider",
    "ScopeFactoryProtocol",
]
