"""
Template extensions - named helper functions loaded into the engine.
"""

from .base import Extension
from .registry import ExtensionRegistry, default_registry, register_extension
from .resolver import (
    ExtensionResolver,
    ExtensionSpec,
    InstanceSpec,
    ServiceNameSpec,
    ClassNameSpec,
)
from .escaper import Escaper, EscaperExtension, escaper_extension_factory
from .url import UrlExtension, url_extension_factory
from .manager import ExtensionManager, bind_mapped_extensions

__all__ = [
    "Extension",
    "ExtensionRegistry",
    "default_registry",
    "register_extension",
    "ExtensionResolver",
    "ExtensionSpec",
    "InstanceSpec",
    "ServiceNameSpec",
    "ClassNameSpec",
    "Escaper",
    "EscaperExtension",
    "escaper_extension_factory",
    "UrlExtension",
    "url_extension_factory",
    "ExtensionManager",
    "bind_mapped_extensions",
]
