"""
Extension registry - explicit name -> factory table.

Configuration refers to extension classes by name. Instead of importing
arbitrary dotted paths, classes are registered up front, usually with
the ``register_extension`` decorator.
"""

from typing import Any, Callable, Dict, List, Optional, TypeVar
import logging


logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[[], Any])


class ExtensionRegistry:
    """Maps names to zero-argument extension factories."""

    def __init__(self):
        self._factories: Dict[str, Callable[[], Any]] = {}

    def register(self, factory: F, name: Optional[str] = None) -> F:
        """
        Register a zero-argument factory.

        Classes are registered under both ``__name__`` and
        ``module.qualname`` unless an explicit name is given.
        """
        if not callable(factory):
            raise TypeError(f"Extension factory must be callable, got {type(factory).__name__}")

        if name is not None:
            names = [name]
        else:
            names = [factory.__name__]
            qualified = f"{factory.__module__}.{factory.__qualname__}"
            if qualified != factory.__name__:
                names.append(qualified)

        for key in names:
            if key in self._factories and self._factories[key] is not factory:
                logger.debug(f"Extension factory '{key}' replaced")
            self._factories[key] = factory

        return factory

    def unregister(self, name: str) -> None:
        factory = self._factories.pop(name)
        for key in [k for k, v in self._factories.items() if v is factory]:
            del self._factories[key]

    def has(self, name: str) -> bool:
        return name in self._factories

    def create(self, name: str) -> Any:
        """Call the factory registered under ``name`` with no arguments."""
        try:
            factory = self._factories[name]
        except KeyError:
            raise KeyError(f"No extension factory registered as '{name}'") from None
        return factory()

    def names(self) -> List[str]:
        return sorted(self._factories)

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def __len__(self) -> int:
        return len(self._factories)


default_registry = ExtensionRegistry()


def register_extension(factory: Optional[F] = None, *, name: Optional[str] = None, registry: Optional[ExtensionRegistry] = None):
    """
    Decorator registering an extension class in a registry.

    Usage:
        @register_extension
        class Greeting(Extension): ...

        @register_extension(name="greeting")
        class Greeting(Extension): ...
    """
    target = registry if registry is not None else default_registry

    def decorator(obj: F) -> F:
        return target.register(obj, name=name)

    if factory is not None:
        return decorator(factory)
    return decorator
