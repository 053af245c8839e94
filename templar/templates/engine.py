"""
Template Engine - Jinja2 environment with folders, functions and shared data.

Provides:
- Folder-namespaced template names ("pages::home")
- Configurable file extension
- Named template functions (Jinja2 globals) contributed by extensions
- Shared data for all or specific templates
"""

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, TYPE_CHECKING
import logging
import re

from jinja2 import Environment, Template, TemplateNotFound
from jinja2.sandbox import SandboxedEnvironment

from .loader import TemplateFolder, TemplateLoader

if TYPE_CHECKING:
    from .extensions.base import Extension


logger = logging.getLogger(__name__)

_FUNCTION_NAME = re.compile(r"^[A-Za-z_]\w*$")


class TemplateEngine:
    """
    Jinja2-backed template engine.

    Args:
        directory: Default template directory
        file_extension: Suffix appended to template names (None disables it)
        autoescape: Enable HTML autoescaping
        sandbox: Render inside Jinja2's sandboxed environment

    Example:
        engine = TemplateEngine(file_extension="tpl")
        engine.add_folder("pages", "/srv/templates/pages")
        engine.register_function("upper", str.upper)
        html = engine.render("pages::home", {"title": "Hello"})
    """

    def __init__(
        self,
        directory: Optional[str] = None,
        *,
        file_extension: Optional[str] = "html",
        autoescape: bool = True,
        sandbox: bool = False,
    ):
        self.loader = TemplateLoader(directory=directory, file_extension=None)
        self.sandbox = sandbox

        environment_cls = SandboxedEnvironment if sandbox else Environment
        self.env = environment_cls(
            loader=self.loader,
            # Names carry no suffix until the loader adds it, so the
            # flag applies to every template
            autoescape=autoescape,
        )
        self.set_file_extension(file_extension)

        self._functions: Dict[str, Callable[..., Any]] = {}
        self._shared_data: Dict[str, Any] = {}
        self._template_data: Dict[str, Dict[str, Any]] = {}

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    @property
    def directory(self) -> Optional[str]:
        return self.loader.directory

    def set_directory(self, directory: Optional[str]) -> "TemplateEngine":
        self.loader.set_directory(directory)
        self._clear_template_cache()
        return self

    @property
    def file_extension(self) -> Optional[str]:
        return self.loader.file_extension

    def set_file_extension(self, file_extension: Optional[str]) -> "TemplateEngine":
        """Set the suffix appended to template names; None disables it."""
        if file_extension is not None:
            file_extension = file_extension.lstrip(".") or None
        self.loader.file_extension = file_extension
        self._clear_template_cache()
        return self

    def add_folder(self, name: str, directory: str, fallback: bool = False) -> "TemplateEngine":
        """
        Register a template folder under an alias.

        A later folder with the same alias replaces the earlier one.
        """
        previous = self.loader.get_folder(name)
        self.loader.add_folder(name, directory, fallback=fallback)
        if previous is not None:
            logger.debug(f"Template folder '{name}' replaced: {previous.path} -> {directory}")
        self._clear_template_cache()
        return self

    def remove_folder(self, name: str) -> "TemplateEngine":
        self.loader.remove_folder(name)
        self._clear_template_cache()
        return self

    @property
    def folders(self) -> Dict[str, TemplateFolder]:
        return self.loader.folders

    # ------------------------------------------------------------------
    # Functions
    # ------------------------------------------------------------------

    def register_function(self, name: str, callback: Callable[..., Any]) -> "TemplateEngine":
        """
        Register a template function (available as a Jinja2 global).

        Raises:
            ValueError: If the name is not a valid identifier
            TypeError: If the callback is not callable
        """
        if not _FUNCTION_NAME.match(name):
            raise ValueError(f'Not a valid template function name: "{name}".')
        if not callable(callback):
            raise TypeError(f'Template function "{name}" must be callable, got {type(callback).__name__}.')

        if name in self._functions:
            logger.debug(f"Template function '{name}' replaced")

        self._functions[name] = callback
        self.env.globals[name] = callback
        return self

    def drop_function(self, name: str) -> "TemplateEngine":
        if name not in self._functions:
            raise KeyError(f'The template function "{name}" was not found.')
        del self._functions[name]
        self.env.globals.pop(name, None)
        return self

    def get_function(self, name: str) -> Callable[..., Any]:
        try:
            return self._functions[name]
        except KeyError:
            raise KeyError(f'The template function "{name}" was not found.') from None

    def does_function_exist(self, name: str) -> bool:
        return name in self._functions

    @property
    def functions(self) -> Dict[str, Callable[..., Any]]:
        return dict(self._functions)

    def load_extension(self, extension: "Extension") -> "TemplateEngine":
        """Let an extension register its functions on this engine."""
        extension.register(self)
        logger.debug(f"Loaded template extension {type(extension).__name__} ({extension.name})")
        return self

    def load_extensions(self, extensions: Iterable["Extension"]) -> "TemplateEngine":
        for extension in extensions:
            self.load_extension(extension)
        return self

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------

    def add_data(self, data: Mapping[str, Any], templates: Optional[Iterable[str] | str] = None) -> "TemplateEngine":
        """
        Add data shared with all templates, or only the named ones.
        """
        if templates is None:
            self._shared_data.update(data)
            return self

        if isinstance(templates, str):
            templates = [templates]

        for template in templates:
            self._template_data.setdefault(template, {}).update(data)
        return self

    def get_data(self, template: Optional[str] = None) -> Dict[str, Any]:
        """Shared data, merged with the template's own data when named."""
        if template is None:
            return dict(self._shared_data)
        return {**self._shared_data, **self._template_data.get(template, {})}

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def get_template(self, name: str) -> Template:
        return self.env.get_template(name)

    def exists(self, name: str) -> bool:
        try:
            self.loader.get_source(self.env, name)
        except TemplateNotFound:
            return False
        return True

    def path(self, name: str) -> str:
        """Filesystem path a template name resolves to."""
        return str(self.loader.resolve_path(name))

    def render(self, name: str, data: Optional[Mapping[str, Any]] = None) -> str:
        """
        Render a template.

        Raises:
            TemplateNotFound: If the template doesn't exist
            TemplateSyntaxError: If the template has syntax errors
        """
        context = self.get_data(name)
        if data:
            context.update(data)
        return self.get_template(name).render(context)

    def list_templates(self) -> List[str]:
        return self.loader.list_templates()

    def _clear_template_cache(self) -> None:
        if self.env.cache is not None:
            self.env.cache.clear()
