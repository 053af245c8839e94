"""
Extension manager - a sub-container holding only extensions.

Extensions registered here are exposed by name through a mapping
(extension name -> service token). ``bind_mapped_extensions`` turns that
mapping into template functions that fetch the extension from the
manager on every call, so the function always reflects the manager's
current provider for that token.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Type, TYPE_CHECKING
import logging

from templar.di.core import Container, token_to_key
from templar.di.providers import ClassProvider, FactoryProvider
from templar.faults import InvalidExtensionError

from .base import Extension

if TYPE_CHECKING:
    from ..engine import TemplateEngine


logger = logging.getLogger(__name__)


class ExtensionManager(Container):
    """
    Container restricted to Extension instances.

    Dependencies of registered extensions are resolved from the parent
    container when the manager has no provider for them.
    """

    __slots__ = ("_mapping",)

    def __init__(self, parent: Optional[Container] = None):
        super().__init__(parent=parent)
        self._mapping: Dict[str, str] = {}

    def register_extension(
        self,
        extension: Type[Extension] | Callable[[], Extension],
        *,
        name: Optional[str] = None,
        scope: str = "app",
    ) -> str:
        """
        Register an extension class (or factory) and map its name.

        Returns:
            The token the extension is registered under
        """
        if isinstance(extension, type):
            if not issubclass(extension, Extension):
                raise InvalidExtensionError(
                    f"{type(self).__name__} expects extension classes to implement "
                    f"{Extension.__module__}.{Extension.__qualname__}; received {extension.__qualname__}",
                    reason="contract",
                    spec=extension,
                )
            provider = ClassProvider(extension, scope=scope)
            function_name = name or extension.get_name()
        else:
            if name is None:
                raise ValueError("Extension factories need an explicit function name")
            provider = FactoryProvider(extension, scope=scope, name=f"extension.{name}")
            function_name = name

        self.register(provider)
        self._mapping[function_name] = provider.meta.token
        logger.debug(f"Mapped template function '{function_name}' to {provider.meta.token}")
        return provider.meta.token

    def map(self, function_name: str, token: Any) -> None:
        """Map a function name to an already registered token."""
        self._mapping[function_name] = token_to_key(token)

    def get_mapping(self) -> Dict[str, str]:
        return dict(self._mapping)

    def resolve(self, token: Any, *, tag: Optional[str] = None, optional: bool = False) -> Any:
        instance = super().resolve(token, tag=tag, optional=optional)
        if instance is None and optional:
            return None
        if not isinstance(instance, Extension):
            raise InvalidExtensionError(
                f"{type(self).__name__} expects extension services to implement "
                f"{Extension.__module__}.{Extension.__qualname__}; received {type(instance).__name__}",
                reason="contract",
                spec=token_to_key(token),
            )
        return instance


def _delegate(manager: ExtensionManager, token: str) -> Callable[..., Any]:
    def call_extension(*args: Any, **kwargs: Any) -> Any:
        return manager.get(token)(*args, **kwargs)

    call_extension.__name__ = f"call_{token.rsplit('.', 1)[-1]}"
    return call_extension


def bind_mapped_extensions(engine: "TemplateEngine", manager: ExtensionManager) -> None:
    """Register one lazily resolving template function per mapped extension."""
    for function_name, token in manager.get_mapping().items():
        engine.register_function(function_name, _delegate(manager, token))
    logger.debug(f"Bound {len(manager.get_mapping())} mapped template extension(s)")
