"""
Templar templates - Jinja2 template engine wired into the DI container.

Example:
    from templar.di import Container
    from templar.templates import TemplateConfig, create_renderer

    container = Container()
    container.register_instance(TemplateConfig, TemplateConfig.from_mapping({
        "file_extension": "tpl",
        "directories": [{"name": "pages", "directory": "templates/pages"}],
    }))

    renderer = create_renderer(container)
    html = renderer.render("pages::home", {"title": "Welcome"})
"""

from .engine import TemplateEngine
from .loader import TemplateLoader, TemplateFolder
from .config import TemplateConfig, TemplateDirectory
from .builder import EngineBuilder, build_engine
from .renderer import Renderer, TemplatePath, TemplateRenderer, create_renderer
from .di_providers import register_template_providers
from .extensions import (
    Extension,
    ExtensionRegistry,
    default_registry,
    register_extension,
    ExtensionResolver,
    ExtensionManager,
    EscaperExtension,
    UrlExtension,
)

__all__ = [
    # Core
    "TemplateEngine",
    "TemplateLoader",
    "TemplateFolder",

    # Config
    "TemplateConfig",
    "TemplateDirectory",

    # Building
    "EngineBuilder",
    "build_engine",

    # Rendering
    "Renderer",
    "TemplatePath",
    "TemplateRenderer",
    "create_renderer",

    # DI Integration
    "register_template_providers",

    # Extensions
    "Extension",
    "ExtensionRegistry",
    "default_registry",
    "register_extension",
    "ExtensionResolver",
    "ExtensionManager",
    "EscaperExtension",
    "UrlExtension",
]
