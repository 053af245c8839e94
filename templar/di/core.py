"""
Service lookup contract and the container implementing it.

The template layer only needs ``has(token)`` and ``get(token)``; the
container adds registration, scopes and constructor injection on top.
Tokens are strings or types, and a type is keyed by ``module.qualname``.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from functools import lru_cache
from typing import (
    Any,
    Dict,
    Iterator,
    List,
    Optional,
    Protocol,
    Type,
    TypeVar,
    runtime_checkable,
)
import logging

from .errors import (
    DependencyCycleError,
    DuplicateProviderError,
    ProviderNotFoundError,
)


logger = logging.getLogger(__name__)

SCOPES = frozenset(("singleton", "app", "transient"))

# Instances built under these scopes are kept by the container
CACHED_SCOPES = frozenset(("singleton", "app"))

T = TypeVar("T")


@lru_cache(maxsize=None)
def _type_key(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def token_to_key(token: Any) -> str:
    """Registry key of a type or string token."""
    if isinstance(token, str):
        return token
    if isinstance(token, type):
        return _type_key(token)
    return str(token)


@dataclass(frozen=True, slots=True)
class ProviderMeta:
    name: str
    token: str
    scope: str
    tags: tuple[str, ...] = ()


@runtime_checkable
class Provider(Protocol):
    """Knows how to build the object registered under ``meta.token``."""

    @property
    def meta(self) -> ProviderMeta:
        ...

    def instantiate(self, ctx: "ResolveCtx") -> Any:
        ...


@runtime_checkable
class ServiceLookup(Protocol):
    """Anything able to resolve identifiers to objects."""

    def has(self, token: Any) -> bool:
        ...

    def get(self, token: Any) -> Any:
        ...


class ResolveCtx:
    """
    State of one top-level ``resolve`` call.

    ``path`` holds the keys currently being built, outermost first.
    """

    __slots__ = ("container", "path")

    def __init__(self, container: "Container", path: Optional[List[str]] = None):
        self.container = container
        self.path: List[str] = path if path is not None else []

    @contextmanager
    def building(self, key: str) -> Iterator[None]:
        if key in self.path:
            raise DependencyCycleError(self.path + [key])
        self.path.append(key)
        try:
            yield
        finally:
            self.path.pop()

    def resolve(
        self,
        token: Any,
        *,
        tag: Optional[str] = None,
        optional: bool = False,
    ) -> Any:
        """Resolve a dependency of the object being built."""
        return self.container._resolve(token, tag, optional, self)


def _registry_key(token_key: str, tag: Optional[str]) -> str:
    return f"{token_key}#{tag}" if tag else token_key


class Container:
    """
    Synchronous DI container.

    Singleton and app scoped instances are kept after the first build;
    transient providers run on every lookup. Tokens the container does
    not know are looked up in the parent, and the parent builds them with
    its own providers only.

    Example:
        container = Container()
        container.register_instance(ServerUrlHelper, ServerUrlHelper("https://example.com"))
        container.bind(UrlBuilder, RouterUrlBuilder)
        container.get(ServerUrlHelper)
    """

    __slots__ = ("_providers", "_instances", "_parent")

    def __init__(self, parent: Optional["Container"] = None):
        self._providers: Dict[str, Provider] = {}
        self._instances: Dict[str, Any] = {}
        self._parent = parent

    @property
    def parent(self) -> Optional["Container"]:
        return self._parent

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, provider: Provider, tag: Optional[str] = None) -> None:
        """
        Register a provider under its token (and tag).

        Registering the same provider object again is a no-op.

        Raises:
            DuplicateProviderError: If another provider owns the key
        """
        key = _registry_key(provider.meta.token, tag)

        existing = self._providers.get(key)
        if existing is provider:
            return
        if existing is not None:
            raise DuplicateProviderError(provider.meta.token, tag, existing.meta.name)

        self._providers[key] = provider
        logger.debug(f"Registered {provider.meta.name} as {key} ({provider.meta.scope})")

    def bind(self, interface: Type, implementation: Type, scope: str = "app", tag: Optional[str] = None) -> None:
        """Build ``implementation`` whenever ``interface`` is requested."""
        from .providers import ClassProvider
        self.register(ClassProvider(implementation, scope=scope, token=interface), tag=tag)

    def register_instance(self, token: Type[T] | str, instance: T, tag: Optional[str] = None) -> None:
        """Register an already built object."""
        from .providers import ValueProvider
        name = getattr(token, "__name__", token)
        self.register(ValueProvider(instance, token=token, name=f"{name} instance"), tag=tag)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def resolve(
        self,
        token: Type[T] | str,
        *,
        tag: Optional[str] = None,
        optional: bool = False,
    ) -> T:
        """
        Return the object registered for ``token``.

        Raises:
            ProviderNotFoundError: If nothing is registered and the lookup
                is not optional
            DependencyCycleError: If building the object needs itself
        """
        return self._resolve(token, tag, optional, ResolveCtx(self))

    def _resolve(self, token: Any, tag: Optional[str], optional: bool, ctx: ResolveCtx) -> Any:
        token_key = token_to_key(token)
        key = _registry_key(token_key, tag)

        if key in self._instances:
            return self._instances[key]

        provider = self._providers.get(key)
        if provider is None:
            if self._parent is not None and self._parent.is_registered(token_key, tag):
                return self._parent._resolve(token_key, tag, optional, ResolveCtx(self._parent, ctx.path))
            if optional:
                return None
            raise ProviderNotFoundError(token_key, tag, self._similar_keys(token_key))

        with ctx.building(key):
            instance = provider.instantiate(ctx)

        if provider.meta.scope in CACHED_SCOPES:
            self._instances[key] = instance
        return instance

    def is_registered(self, token: Type[T] | str, tag: Optional[str] = None) -> bool:
        key = _registry_key(token_to_key(token), tag)
        if key in self._providers:
            return True
        return self._parent is not None and self._parent.is_registered(token, tag)

    # ServiceLookup

    def has(self, token: Any) -> bool:
        return self.is_registered(token)

    def get(self, token: Any) -> Any:
        return self.resolve(token)

    # ------------------------------------------------------------------

    def providers(self) -> List[ProviderMeta]:
        """Providers registered on this container (not its parent)."""
        return [provider.meta for provider in self._providers.values()]

    def clear_cache(self) -> None:
        """Forget built singleton and app instances."""
        self._instances.clear()

    def _similar_keys(self, token_key: str) -> List[str]:
        short = token_key.rsplit(".", 1)[-1]
        return [key for key in self._providers if short in key]
