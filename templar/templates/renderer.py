"""
Renderer - the framework-facing render interface.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Protocol, runtime_checkable

from templar.di.core import ServiceLookup

from .builder import build_engine
from .engine import TemplateEngine


@dataclass(frozen=True)
class TemplatePath:
    """A template directory, optionally bound to a namespace."""
    path: str
    namespace: Optional[str] = None


@runtime_checkable
class TemplateRenderer(Protocol):
    """What view layers need from a renderer."""

    def render(self, name: str, params: Optional[Mapping[str, Any]] = None) -> str:
        ...

    def add_path(self, path: str, namespace: Optional[str] = None) -> None:
        ...

    def get_paths(self) -> List[TemplatePath]:
        ...

    def add_default_param(self, template_name: str, param: str, value: Any) -> None:
        ...


class Renderer:
    """
    Render templates through a TemplateEngine.

    Example:
        renderer = create_renderer(container)
        renderer.add_default_param(Renderer.TEMPLATE_ALL, "site", "Example")
        html = renderer.render("pages::home", {"title": "Welcome"})
    """

    TEMPLATE_ALL = "*"

    def __init__(self, engine: TemplateEngine):
        self.engine = engine

    def render(self, name: str, params: Optional[Mapping[str, Any]] = None) -> str:
        return self.engine.render(name, params)

    def add_path(self, path: str, namespace: Optional[str] = None) -> None:
        """Add a folder; without a namespace, set the default directory."""
        if namespace is None:
            self.engine.set_directory(path)
            return
        self.engine.add_folder(namespace, path)

    def get_paths(self) -> List[TemplatePath]:
        paths = []
        if self.engine.directory is not None:
            paths.append(TemplatePath(self.engine.directory))
        for folder in self.engine.folders.values():
            paths.append(TemplatePath(folder.path, folder.name))
        return paths

    def add_default_param(self, template_name: str, param: str, value: Any) -> None:
        """
        Add a parameter for one template, or for all with TEMPLATE_ALL.

        Raises:
            ValueError: If the template name or parameter name is empty
        """
        if not template_name:
            raise ValueError("Template name must be a non-empty string")
        if not param:
            raise ValueError("Parameter name must be a non-empty string")

        templates = None if template_name == self.TEMPLATE_ALL else template_name
        self.engine.add_data({param: value}, templates)


def create_renderer(lookup: ServiceLookup) -> Renderer:
    """Build the engine from ``lookup`` and wrap it in a Renderer."""
    return Renderer(build_engine(lookup))
