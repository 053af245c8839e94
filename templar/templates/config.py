"""
Template configuration - the ``templates`` section.

Example (YAML):

    templates:
      file_extension: tpl
      directory: templates
      directories:
        - name: pages
          directory: templates/pages
        - name: emails
          directory: templates/emails
          fallback: true
      extensions:
        - app.greeting          # service name
        - GreetingExtension     # registered class name
      encoding: utf-8
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

from templar.config import ConfigError, ConfigLoader
from templar.di.core import ServiceLookup


SECTION = "templates"


def _check(value: Any, expected: type, where: str, nullable: bool = False) -> Any:
    if value is None and nullable:
        return None
    if not isinstance(value, expected):
        kind = f"a {expected.__name__}" + (" or null" if nullable else "")
        raise ConfigError(f"{where} must be {kind}, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class TemplateDirectory:
    """A named template directory entry."""
    name: str
    directory: str
    fallback: bool = False

    @classmethod
    def from_value(cls, value: Any, index: int) -> "TemplateDirectory":
        if isinstance(value, TemplateDirectory):
            return value

        if not isinstance(value, Mapping):
            raise ConfigError(
                f"templates.directories[{index}] must be a mapping with 'name' and "
                f"'directory', got {type(value).__name__}"
            )

        missing = [key for key in ("name", "directory") if not value.get(key)]
        if missing:
            raise ConfigError(
                f"templates.directories[{index}] is missing {', '.join(missing)}"
            )

        where = f"templates.directories[{index}]"
        return cls(
            name=_check(value["name"], str, f"{where}.name"),
            directory=_check(value["directory"], str, f"{where}.directory"),
            fallback=_check(value.get("fallback", False), bool, f"{where}.fallback"),
        )


@dataclass(frozen=True)
class TemplateConfig:
    """
    Typed view of the ``templates`` configuration section.

    Attributes:
        file_extension: Suffix appended to template names (None disables it)
        directory: Default directory for names without a folder
        directories: Named folders, in order; a repeated name replaces
            the earlier directory
        extensions: Extension specifications (instances, service names or
            registered class names), loaded in order
        encoding: Escaper encoding
        autoescape: HTML autoescaping of template output
        sandbox: Render in Jinja2's sandboxed environment
    """

    file_extension: Optional[str] = "html"
    directory: Optional[str] = None
    directories: Tuple[TemplateDirectory, ...] = ()
    extensions: Tuple[Any, ...] = ()
    encoding: str = "utf-8"
    autoescape: bool = True
    sandbox: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TemplateConfig":
        """
        Parse a raw ``templates`` mapping.

        Raises:
            ConfigError: On unknown keys or malformed values
        """
        known = {"file_extension", "directory", "directories", "extensions", "encoding", "autoescape", "sandbox"}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown templates option(s): {', '.join(unknown)}")

        file_extension = _check(data.get("file_extension", "html"), str, "templates.file_extension", nullable=True)

        directories = data.get("directories") or []
        if not isinstance(directories, (list, tuple)):
            raise ConfigError(
                f"templates.directories must be a list, got {type(directories).__name__}"
            )

        extensions = data.get("extensions") or []
        if not isinstance(extensions, (list, tuple)):
            raise ConfigError(
                f"templates.extensions must be a list, got {type(extensions).__name__}"
            )

        return cls(
            file_extension=file_extension,
            directory=_check(data.get("directory"), str, "templates.directory", nullable=True),
            directories=tuple(
                TemplateDirectory.from_value(entry, index)
                for index, entry in enumerate(directories)
            ),
            extensions=tuple(extensions),
            encoding=_check(data.get("encoding", "utf-8"), str, "templates.encoding"),
            autoescape=_check(data.get("autoescape", True), bool, "templates.autoescape"),
            sandbox=_check(data.get("sandbox", False), bool, "templates.sandbox"),
        )

    @classmethod
    def from_lookup(cls, lookup: ServiceLookup) -> "TemplateConfig":
        """
        Template configuration from a service lookup.

        Uses a registered TemplateConfig, else the ``templates`` section of
        a registered ConfigLoader, else defaults.
        """
        if lookup.has(TemplateConfig):
            return lookup.get(TemplateConfig)
        if lookup.has(ConfigLoader):
            return lookup.get(ConfigLoader).get_section(SECTION, cls)
        return cls()

    def directory_map(self) -> dict[str, str]:
        """Alias -> directory after applying entries in order."""
        return {entry.name: entry.directory for entry in self.directories}

