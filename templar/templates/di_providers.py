"""
Templar templates - DI providers.

Registers the template engine and the renderer with a container so
controllers and views can depend on them.
"""

from __future__ import annotations

import logging
from typing import Optional

from templar.di.core import Container
from templar.di.providers import AliasProvider, FactoryProvider

from .builder import build_engine
from .engine import TemplateEngine
from .extensions.registry import ExtensionRegistry
from .renderer import Renderer, TemplateRenderer


logger = logging.getLogger(__name__)


def register_template_providers(container: Container, registry: Optional[ExtensionRegistry] = None) -> None:
    """
    Register app-scoped providers for TemplateEngine and Renderer.

    The engine is built on first lookup, so services it depends on (helpers,
    extension overrides, configuration) may be registered afterwards.
    """

    def provide_engine() -> TemplateEngine:
        return build_engine(container, registry)

    def provide_renderer(engine: TemplateEngine) -> Renderer:
        return Renderer(engine)

    container.register(FactoryProvider(provide_engine, scope="app", token=TemplateEngine))
    container.register(FactoryProvider(provide_renderer, scope="app", token=Renderer))
    container.register(AliasProvider(TemplateRenderer, Renderer, name="template_renderer"))

    logger.info("Template providers registered with DI container")
