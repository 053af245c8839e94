"""
Engine builder - creates a configured TemplateEngine.

By default the builder attaches the UrlExtension and the EscaperExtension.
Either can be replaced by registering a service under the extension's
class; the URL extension is only built by default when both UrlHelper and
ServerUrlHelper services exist.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional
import logging

from templar.di.core import ServiceLookup
from templar.helpers import ServerUrlHelper, UrlHelper

from .config import TemplateConfig
from .engine import TemplateEngine
from .extensions.escaper import EscaperExtension, escaper_extension_factory
from .extensions.manager import ExtensionManager, bind_mapped_extensions
from .extensions.registry import ExtensionRegistry
from .extensions.resolver import ExtensionResolver
from .extensions.url import UrlExtension, url_extension_factory


logger = logging.getLogger(__name__)


class EngineBuilder:
    """
    Build template engines from TemplateConfig.

    Args:
        lookup: Service lookup for extension overrides, helpers and
            service-named extensions
        registry: Class-name registry for extensions (default: the
            process-wide registry)

    Example:
        builder = EngineBuilder(container)
        engine = builder.build(TemplateConfig.from_lookup(container))
    """

    def __init__(self, lookup: ServiceLookup, registry: Optional[ExtensionRegistry] = None):
        self.lookup = lookup
        self.resolver = ExtensionResolver(lookup, registry)

    def build(self, config: TemplateConfig) -> TemplateEngine:
        """
        Create a new engine from ``config``.

        Raises:
            InvalidExtensionError: If a configured extension cannot be
                resolved; no engine is returned
        """
        engine = TemplateEngine(
            config.directory,
            file_extension=config.file_extension,
            autoescape=config.autoescape,
            sandbox=config.sandbox,
        )

        for entry in config.directories:
            engine.add_folder(entry.name, entry.directory, fallback=entry.fallback)

        self.inject_url_extension(engine)
        self.inject_escaper_extension(engine, config.encoding)
        self.inject_extensions(engine, config.extensions)

        logger.info(
            f"TemplateEngine built (extension={config.file_extension}, "
            f"folders={len(engine.folders)}, functions={len(engine.functions)})"
        )
        return engine

    def inject_url_extension(self, engine: TemplateEngine) -> bool:
        """
        Load the URL extension.

        Uses a registered UrlExtension service if present; otherwise builds
        one when both helpers are registered, else skips.

        Returns:
            Whether an extension was loaded
        """
        if self.lookup.has(UrlExtension):
            engine.load_extension(self.lookup.get(UrlExtension))
            return True

        if not self.lookup.has(UrlHelper) or not self.lookup.has(ServerUrlHelper):
            logger.debug("UrlHelper/ServerUrlHelper not registered; url functions unavailable")
            return False

        engine.load_extension(url_extension_factory(self.lookup))
        return True

    def inject_escaper_extension(self, engine: TemplateEngine, encoding: Optional[str] = None) -> None:
        """Load a registered EscaperExtension service, or a default one."""
        if self.lookup.has(EscaperExtension):
            engine.load_extension(self.lookup.get(EscaperExtension))
            return

        engine.load_extension(escaper_extension_factory(self.lookup, encoding))

    def inject_extensions(self, engine: TemplateEngine, extensions: Iterable[Any]) -> None:
        """Resolve and load each configured extension, in order."""
        for extension in extensions:
            self.resolver.load(engine, extension)


def build_engine(lookup: ServiceLookup, registry: Optional[ExtensionRegistry] = None) -> TemplateEngine:
    """
    Build the application's template engine from a service lookup.

    Configuration comes from TemplateConfig.from_lookup. When an
    ExtensionManager service is registered, its mapped extensions are
    bound after the configured ones.
    """
    config = TemplateConfig.from_lookup(lookup)
    engine = EngineBuilder(lookup, registry).build(config)

    if lookup.has(ExtensionManager):
        bind_mapped_extensions(engine, lookup.get(ExtensionManager))

    return engine
