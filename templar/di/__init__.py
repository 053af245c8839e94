"""
Templar Dependency Injection

Small synchronous container used to look up template collaborators
(URL helpers, configured extensions, configuration).

Key Features:
- Scopes: singleton, app (cached) and transient (fresh on every lookup)
- Constructor injection from type annotations
- Parent containers for sub-managers
- Cycle detection
- ``has``/``get`` service lookup protocol
"""

from .core import (
    Provider,
    ProviderMeta,
    Container,
    ResolveCtx,
    ServiceLookup,
    token_to_key,
)

from .providers import (
    ClassProvider,
    FactoryProvider,
    ValueProvider,
    AliasProvider,
)

from .errors import (
    DIError,
    ProviderNotFoundError,
    DuplicateProviderError,
    DependencyCycleError,
)

__all__ = [
    # Core types
    "Provider",
    "ProviderMeta",
    "Container",
    "ResolveCtx",
    "ServiceLookup",
    "token_to_key",

    # Providers
    "ClassProvider",
    "FactoryProvider",
    "ValueProvider",
    "AliasProvider",

    # Errors
    "DIError",
    "ProviderNotFoundError",
    "DuplicateProviderError",
    "DependencyCycleError",
]
