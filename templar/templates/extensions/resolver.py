"""
Extension resolver - turns extension specifications into extensions.

Valid specifications:
- Extension instances
- Service names the service lookup can resolve to an extension
- Names of extension classes registered in an ExtensionRegistry

A string naming both a service and a registered class resolves to the
service.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union, TYPE_CHECKING
import logging

from templar.di.core import ServiceLookup
from templar.faults import InvalidExtensionError

from .base import Extension
from .registry import ExtensionRegistry, default_registry

if TYPE_CHECKING:
    from ..engine import TemplateEngine


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstanceSpec:
    """An already-constructed extension."""
    extension: Extension


@dataclass(frozen=True)
class ServiceNameSpec:
    """A service name known to the service lookup."""
    name: str


@dataclass(frozen=True)
class ClassNameSpec:
    """The registry name of a zero-argument extension class."""
    name: str


ExtensionSpec = Union[InstanceSpec, ServiceNameSpec, ClassNameSpec]


def _describe(value: Any) -> str:
    return type(value).__name__


def _has_name(extension: Extension) -> bool:
    return isinstance(getattr(type(extension), "name", None), str)


class ExtensionResolver:
    """
    Resolve extension specifications against a service lookup and a
    class-name registry.

    Services are fetched on every resolution; nothing is cached.
    """

    def __init__(self, lookup: ServiceLookup, registry: Optional[ExtensionRegistry] = None):
        self.lookup = lookup
        self.registry = registry if registry is not None else default_registry

    def classify(self, value: Any) -> ExtensionSpec:
        """
        Decide which kind of specification ``value`` is.

        Raises:
            InvalidExtensionError: If the value is neither an extension nor
                a string, or if the string resolves to nothing
        """
        if isinstance(value, Extension):
            if not _has_name(value):
                raise InvalidExtensionError(
                    f"{type(self).__name__} expects extensions to define a class-level name; "
                    f"{_describe(value)} does not",
                    reason="type",
                    spec=value,
                )
            return InstanceSpec(value)

        if not isinstance(value, str):
            raise InvalidExtensionError(
                f"{type(self).__name__} expects extension instances, service names, "
                f"or class names; received {_describe(value)}",
                reason="type",
                spec=value,
            )

        if self.lookup.has(value):
            return ServiceNameSpec(value)

        if self.registry.has(value):
            return ClassNameSpec(value)

        raise InvalidExtensionError(
            f'{type(self).__name__} expects extension service names or class names; '
            f'"{value}" does not resolve to either',
            reason="unresolved",
            spec=value,
        )

    def materialize(self, spec: ExtensionSpec) -> Extension:
        """
        Produce the extension a classified specification stands for.

        Raises:
            InvalidExtensionError: If a service or class yields something
                that is not a named Extension
        """
        if isinstance(spec, InstanceSpec):
            return spec.extension

        if isinstance(spec, ServiceNameSpec):
            extension = self.lookup.get(spec.name)
            source = f"service '{spec.name}'"
        elif isinstance(spec, ClassNameSpec):
            extension = self.registry.create(spec.name)
            source = f"class '{spec.name}'"
        else:
            raise TypeError(f"Unknown extension specification: {spec!r}")

        if not isinstance(extension, Extension):
            raise InvalidExtensionError(
                f"{type(self).__name__} expects extension services to implement "
                f"{Extension.__module__}.{Extension.__qualname__}; received {_describe(extension)}",
                reason="contract",
                spec=spec.name,
            )

        if not _has_name(extension):
            raise InvalidExtensionError(
                f"{type(self).__name__} expects extensions to define a class-level name; "
                f"{_describe(extension)} from {source} does not",
                reason="contract",
                spec=spec.name,
            )

        logger.debug(f"Resolved extension {_describe(extension)} from {source}")
        return extension

    def resolve(self, value: Any) -> Extension:
        return self.materialize(self.classify(value))

    def load(self, engine: "TemplateEngine", value: Any) -> Extension:
        """Resolve ``value`` and load the result into ``engine``."""
        extension = self.resolve(value)
        engine.load_extension(extension)
        return extension
