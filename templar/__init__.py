"""
Templar - Jinja2 templates wired into a dependency-injection container.

Reads the ``templates`` configuration section, builds a template engine,
attaches URL, escaping and user-defined extensions, and returns a
renderer for the view layer.
"""

__version__ = "0.3.0"

from .config import ConfigLoader, ConfigError
from .di import Container
from .faults import Fault, InvalidExtensionError
from .helpers import UrlHelper, ServerUrlHelper
from .templates import (
    Extension,
    EngineBuilder,
    Renderer,
    TemplateConfig,
    TemplateEngine,
    build_engine,
    create_renderer,
    register_extension,
    register_template_providers,
)

__all__ = [
    "__version__",
    "ConfigLoader",
    "ConfigError",
    "Container",
    "Fault",
    "InvalidExtensionError",
    "UrlHelper",
    "ServerUrlHelper",
    "Extension",
    "EngineBuilder",
    "Renderer",
    "TemplateConfig",
    "TemplateEngine",
    "build_engine",
    "create_renderer",
    "register_extension",
    "register_template_providers",
]
