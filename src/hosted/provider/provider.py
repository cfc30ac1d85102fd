"""Providers resolving long-lived and scoped callbacks for hosted services."""

from __future__ import annotations

__all__ = [
    "KNOWN_PROVIDERS",
    "AbstractCallbackProvider",
    "CallbackProviderProtocol",
    "CallbackRegistration",
    "CallbackScope",
    "InMemoryCallbackProvider",
    "ScopeFactoryProtocol",
]

from abc import ABC, abstractmethod
import contextlib
from dataclasses import dataclass
import inspect
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

from typing_extensions import assert_never

from hosted.common import ProviderEnum, ServiceLifetime
from hosted.errors import ScopeUnavailableError
from hosted.logging import WithLogger
from hosted.utils import make_specific_register_func

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from hosted.hosted_types import TCallbackFactory

KNOWN_PROVIDERS: dict[ProviderEnum, type[CallbackProviderProtocol]] = {}
_register = make_specific_register_func(KNOWN_PROVIDERS)

TCallbackClass = TypeVar("TCallbackClass", bound=type)


@dataclass(slots=True)
class CallbackRegistration:
    """Describe how a provider builds a callback.

    :param lifetime: When a new instance is created.
    :param factory: Zero-argument callable producing the instance; ``None`` for pre-built singletons.
    :param callback_type: Class of the produced callback, used to match requested kinds.
    :param instance: Pre-built (or lazily built) singleton instance.
    """

    lifetime: ServiceLifetime
    factory: TCallbackFactory | None
    callback_type: type
    instance: Any = None

    def matches(self, kind: type) -> bool:
        """Return ``True`` when instances of this registration are instances of *kind*."""
        return issubclass(self.callback_type, kind)

    def build(self) -> Any:
        """Return the singleton instance or a freshly created one."""
        if self.lifetime is ServiceLifetime.Singleton:
            if self.instance is None:
                assert self.factory is not None, "Singleton needs either an instance or a factory"
                self.instance = self.factory()
            return self.instance
        assert self.factory is not None, "Only singletons may be registered without a factory"
        return self.factory()


@runtime_checkable
class ScopeFactoryProtocol(Protocol):
    """Source of short-lived callback scopes."""

    def create_scope(self) -> contextlib.AbstractAsyncContextManager[CallbackScope]:
        """Return an async context manager yielding a fresh scope.

        :raises ScopeUnavailableError: If the provider can no longer create scopes.
        """


@runtime_checkable
class CallbackProviderProtocol(ScopeFactoryProtocol, Protocol):
    """Structural contract for callback providers."""

    def register(
        self, lifetime: ServiceLifetime = ServiceLifetime.Singleton
    ) -> Callable[[TCallbackClass], TCallbackClass]:
        """Return a class decorator registering the decorated callback with *lifetime*."""

    def add_singleton(self, callback: Any) -> None:
        """Register a shared instance, or a factory built once on first resolution."""

    def add_transient(self, factory: TCallbackFactory, callback_type: type | None = None) -> None:
        """Register a factory called on every long-lived resolution."""

    def add_scoped(self, factory: TCallbackFactory, callback_type: type | None = None) -> None:
        """Register a factory called once per scope."""

    def get_callbacks(self, kind: type) -> list[Any]:
        """Return long-lived callbacks that are instances of *kind*, in registration order."""

    def dispose(self) -> None:
        """Tear the provider down; scopes can no longer be created afterwards."""


class CallbackScope(WithLogger):
    """Set of scoped callback instances living for one hosted service run."""

    def __init__(self, registrations: list[CallbackRegistration]) -> None:
        """Create a scope over the provider's scoped *registrations*."""
        self._registrations = registrations
        self._instances: dict[int, Any] = {}
        self._closed = False

    def get_services(self, kind: type) -> list[Any]:
        """Return scoped callbacks that are instances of *kind*, built once per scope.

        :raises ScopeUnavailableError: If the scope was already closed.
        """
        if self._closed:
            msg = "Callback scope is already disposed"
            raise ScopeUnavailableError(msg)

        services = []
        for index, registration in enumerate(self._registrations):
            if not registration.matches(kind):
                continue
            if index not in self._instances:
                self._instances[index] = registration.factory()  # type: ignore[misc]
            services.append(self._instances[index])
        return services

    async def aclose(self) -> None:
        """Release every instance created by this scope, in reverse creation order, then close it.

        A failing release is logged and does not prevent the remaining instances from being
        released.

        :raises ScopeUnavailableError: If at least one instance failed to release.
        """
        if self._closed:
            return
        self._closed = True
        instances, self._instances = list(self._instances.values()), {}
        failed = 0
        for instance in reversed(instances):
            try:
                await _release(instance)
            except Exception:
                failed += 1
                self._logger.exception("Failed to release %s", type(instance).__name__)

        if failed:
            msg = f"Failed to release {failed} scoped callback(s)"
            raise ScopeUnavailableError(msg)


async def _release(instance: Any) -> None:
    if hasattr(instance, "aclose"):
        await instance.aclose()
    elif hasattr(instance, "close"):
        result = instance.close()
        if inspect.isawaitable(result):
            await result


class AbstractCallbackProvider(CallbackProviderProtocol, WithLogger, ABC):
    """Abstract base class for callback providers.

    Implements the ``register`` decorator on top of the ``add_*`` methods.
    """

    def register(
        self, lifetime: ServiceLifetime = ServiceLifetime.Singleton
    ) -> Callable[[TCallbackClass], TCallbackClass]:
        """Return a class decorator registering the decorated callback with *lifetime*.

        The class must be constructible without arguments.
        """

        def decorator(cls: TCallbackClass) -> TCallbackClass:
            match lifetime:
                case ServiceLifetime.Singleton:
                    self.add_singleton(cls)
                case ServiceLifetime.Transient:
                    self.add_transient(cls)
                case ServiceLifetime.Scoped:
                    self.add_scoped(cls)
                case _:
                    assert_never(lifetime)
            return cls

        return decorator

    @abstractmethod
    def add_singleton(self, callback: Any) -> None:
        """Register a shared instance, or a factory built once on first resolution."""

    @abstractmethod
    def add_transient(self, factory: TCallbackFactory, callback_type: type | None = None) -> None:
        """Register a factory called on every long-lived resolution."""

    @abstractmethod
    def add_scoped(self, factory: TCallbackFactory, callback_type: type | None = None) -> None:
        """Register a factory called once per scope."""

    @abstractmethod
    def get_callbacks(self, kind: type) -> list[Any]:
        """Return long-lived callbacks that are instances of *kind*."""

    @abstractmethod
    def create_scope(self) -> contextlib.AbstractAsyncContextManager[CallbackScope]:
        """Return an async context manager yielding a fresh scope."""

    @abstractmethod
    def dispose(self) -> None:
        """Tear the provider down."""


@_register(ProviderEnum.InMemoryCallbackProvider)
class InMemoryCallbackProvider(AbstractCallbackProvider):
    """Keep callback registrations in memory for the lifetime of the host."""

    def __init__(self) -> None:
        """Initialize an empty provider."""
        self._registrations: list[CallbackRegistration] = []
        self._disposed = False

    @property
    def is_disposed(self) -> bool:
        """Return ``True`` once :meth:`dispose` has been called."""
        return self._disposed

    def add_singleton(self, callback: Any) -> None:
        """Register *callback*; a class is instantiated once on first resolution."""
        if isinstance(callback, type):
            registration = CallbackRegistration(ServiceLifetime.Singleton, callback, callback)
        else:
            registration = CallbackRegistration(
                ServiceLifetime.Singleton, None, type(callback), instance=callback
            )
        self._registrations.append(registration)

    def add_transient(self, factory: TCallbackFactory, callback_type: type | None = None) -> None:
        """Register *factory*, called each time long-lived callbacks are resolved."""
        self._registrations.append(
            CallbackRegistration(
                ServiceLifetime.Transient, factory, _factory_type(factory, callback_type)
            )
        )

    def add_scoped(self, factory: TCallbackFactory, callback_type: type | None = None) -> None:
        """Register *factory*, called once per scope."""
        self._registrations.append(
            CallbackRegistration(ServiceLifetime.Scoped, factory, _factory_type(factory, callback_type))
        )

    def get_callbacks(self, kind: type) -> list[Any]:
        """Return singleton and transient callbacks that are instances of *kind*."""
        return [
            registration.build()
            for registration in self._registrations
            if registration.lifetime is not ServiceLifetime.Scoped and registration.matches(kind)
        ]

    @contextlib.asynccontextmanager
    async def create_scope(self) -> AsyncIterator[CallbackScope]:
        """Yield a fresh scope and release its instances on every exit path.

        An error raised by the body takes precedence over release failures.

        :raises ScopeUnavailableError: If the provider was disposed or an instance failed to
            release.
        """
        if self._disposed:
            msg = "Cannot create a callback scope from a disposed provider"
            raise ScopeUnavailableError(msg)

        scope = CallbackScope(
            [r for r in self._registrations if r.lifetime is ServiceLifetime.Scoped]
        )
        try:
            yield scope
        except BaseException:
            with contextlib.suppress(ScopeUnavailableError):
                await scope.aclose()
            raise
        await scope.aclose()

    def dispose(self) -> None:
        """Mark the provider as disposed; creating scopes fails from now on."""
        self._disposed = True


def _factory_type(factory: TCallbackFactory, callback_type: type | None) -> type:
    """Return the class produced by *factory*; plain callables must name it via *callback_type*."""
    if callback_type is not None:
        return callback_type
    if isinstance(factory, type):
        return factory
    msg = f"Cannot infer the callback type produced by {factory!r}; pass callback_type"
    raise TypeError(msg)

