"""
Template Loader - Folder-aware filesystem template loader.

Template name formats:
    - Default directory: "profile" -> {directory}/profile.{ext}
    - Folder-namespaced: "users::profile" -> {folders[users]}/profile.{ext}
"""

from typing import Any, Callable, Dict, List, Optional, Tuple
from dataclasses import dataclass
from pathlib import Path
import os

from jinja2 import BaseLoader, TemplateNotFound
from jinja2.loaders import FileSystemLoader


NAMESPACE_SEPARATOR = "::"


@dataclass(frozen=True)
class TemplateFolder:
    """A named template directory."""
    name: str
    path: str
    fallback: bool = False


class TemplateLoader(BaseLoader):
    """
    Namespace-aware template loader.

    Args:
        directory: Default directory for names without a folder
        file_extension: Suffix appended to every name (None disables it)
    """

    def __init__(
        self,
        directory: Optional[str] = None,
        file_extension: Optional[str] = "html",
    ):
        self.directory = str(directory) if directory is not None else None
        self.file_extension = file_extension
        self._folders: Dict[str, TemplateFolder] = {}

    def set_directory(self, directory: Optional[str]) -> None:
        self.directory = str(directory) if directory is not None else None

    def add_folder(self, name: str, directory: str, fallback: bool = False) -> TemplateFolder:
        """
        Register a directory under an alias.

        Re-using an alias replaces the previous directory.
        """
        if not name or NAMESPACE_SEPARATOR in name:
            raise ValueError(f"Invalid template folder name: {name!r}")

        folder = TemplateFolder(name=name, path=str(directory), fallback=fallback)
        self._folders[name] = folder
        return folder

    def remove_folder(self, name: str) -> None:
        if name not in self._folders:
            raise KeyError(f'The template folder "{name}" does not exist.')
        del self._folders[name]

    def get_folder(self, name: str) -> Optional[TemplateFolder]:
        return self._folders.get(name)

    @property
    def folders(self) -> Dict[str, TemplateFolder]:
        return dict(self._folders)

    def get_source(
        self,
        environment: Any,
        template: str
    ) -> Tuple[str, Optional[str], Optional[Callable[[], bool]]]:
        """
        Load template source.

        Raises:
            TemplateNotFound: If the name is malformed, names an unknown
                folder, or no file exists
        """
        folder_name, file_name = self.parse_name(template)

        for directory in self._candidate_directories(template, folder_name):
            try:
                return FileSystemLoader(directory).get_source(environment, file_name)
            except TemplateNotFound:
                continue

        raise TemplateNotFound(template)

    def resolve_path(self, template: str) -> Path:
        """Path the template would be loaded from (first candidate)."""
        folder_name, file_name = self.parse_name(template)
        directories = self._candidate_directories(template, folder_name)
        for directory in directories:
            path = Path(directory) / file_name
            if path.is_file():
                return path
        return Path(directories[0]) / file_name

    def parse_name(self, template: str) -> Tuple[Optional[str], str]:
        """
        Split a template name into (folder, file name with extension).

        Examples:
            "home" -> (None, "home.html")
            "pages::home" -> ("pages", "home.html")
        """
        parts = template.split(NAMESPACE_SEPARATOR)

        if len(parts) == 1:
            folder_name, file_name = None, parts[0]
        elif len(parts) == 2:
            folder_name, file_name = parts
            if not folder_name:
                raise TemplateNotFound(
                    template,
                    f'The template name "{template}" is not valid. The folder name is empty.',
                )
        else:
            raise TemplateNotFound(
                template,
                f'The template name "{template}" is not valid. '
                f'Do not use the folder namespace separator "{NAMESPACE_SEPARATOR}" more than once.',
            )

        if not file_name:
            raise TemplateNotFound(
                template,
                f'The template name "{template}" is not valid. The template name cannot be empty.',
            )

        if self.file_extension:
            file_name = f"{file_name}.{self.file_extension}"

        return folder_name, file_name

    def _candidate_directories(self, template: str, folder_name: Optional[str]) -> List[str]:
        if folder_name is None:
            if self.directory is None:
                raise TemplateNotFound(
                    template,
                    f'The default directory has not been defined. Cannot load "{template}".',
                )
            return [self.directory]

        folder = self._folders.get(folder_name)
        if folder is None:
            raise TemplateNotFound(
                template,
                f'The folder "{folder_name}" does not exist.',
            )

        directories = [folder.path]
        if folder.fallback and self.directory is not None:
            directories.append(self.directory)
        return directories

    def list_templates(self) -> List[str]:
        """
        List all available templates.

        Returns:
            Sorted template names without the file extension, folder
            templates prefixed with "folder::"
        """
        templates = set()

        roots: List[Tuple[Optional[str], str]] = []
        if self.directory is not None:
            roots.append((None, self.directory))
        roots.extend((folder.name, folder.path) for folder in self._folders.values())

        for prefix, root in roots:
            root_path = Path(root)
            if not root_path.is_dir():
                continue

            for current, _dirs, files in os.walk(root_path):
                for filename in files:
                    name = self._strip_extension(filename)
                    if name is None:
                        continue
                    relative = (Path(current) / name).relative_to(root_path).as_posix()
                    templates.add(f"{prefix}{NAMESPACE_SEPARATOR}{relative}" if prefix else relative)

        return sorted(templates)

    def _strip_extension(self, filename: str) -> Optional[str]:
        if not self.file_extension:
            return filename
        suffix = f".{self.file_extension}"
        if filename.endswith(suffix) and len(filename) > len(suffix):
            return filename[: -len(suffix)]
        return None
