"""
Layered configuration.

Sources, lowest precedence first:

1. JSON/YAML config files, in the order given (globs allowed)
2. a ``.env`` file
3. environment variables
4. explicit overrides

Environment keys use a prefix and ``__`` for nesting:
``TEMPLAR_TEMPLATES__FILE_EXTENSION=tpl`` sets
``templates.file_extension``.
"""

from dataclasses import MISSING, fields, is_dataclass
from glob import glob
from pathlib import Path
from typing import (
    Any,
    Dict,
    Iterable,
    Mapping,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)
import json
import logging
import os
import types

import yaml


logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ENV_PREFIX = "TEMPLAR_"


class ConfigError(Exception):
    """Configuration could not be read or does not validate."""


def deep_merge(target: Dict[str, Any], source: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge ``source`` into ``target`` in place; nested mappings merge too."""
    for key, value in source.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            deep_merge(current, value)
        elif isinstance(value, Mapping):
            target[key] = deep_merge({}, value)
        else:
            target[key] = value
    return target


def parse_env_value(raw: str) -> Any:
    """Best-effort typing of an environment string."""
    lowered = raw.lower()
    if lowered in ("true", "yes"):
        return True
    if lowered in ("false", "no"):
        return False

    for cast in (int, float):
        try:
            return cast(raw)
        except ValueError:
            pass

    if raw[:1] in ("{", "["):
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            pass
    return raw


def read_config_file(path: Path) -> Dict[str, Any]:
    """
    Parse one JSON or YAML file.

    Raises:
        ConfigError: If the file is missing, has an unknown suffix or does
            not hold a mapping
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    text = path.read_text()
    if path.suffix == ".json":
        data = json.loads(text) if text.strip() else None
    elif path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text)
    else:
        raise ConfigError(f"Unsupported config file type: {path.suffix or path.name}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def read_env_file(path: Path) -> Iterable[Tuple[str, str]]:
    """KEY=value pairs of a .env file; blank lines and comments skipped."""
    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        yield key.strip(), value.strip().strip("\"'")


class ConfigLoader:
    """
    Merged configuration data with dotted access and typed sections.

    Example:
        loader = ConfigLoader.load(paths=["config/templates.yaml"])
        loader.get("templates.file_extension", "html")
        loader.get_section("templates", TemplateConfig)
    """

    def __init__(self, env_prefix: str = DEFAULT_ENV_PREFIX):
        self.env_prefix = env_prefix
        self.data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[Iterable[str]] = None,
        env_prefix: str = DEFAULT_ENV_PREFIX,
        env_file: Optional[str] = None,
        overrides: Optional[Mapping[str, Any]] = None,
        use_environ: bool = True,
    ) -> "ConfigLoader":
        """
        Build a loader from every source.

        Args:
            paths: Config files or glob patterns (.json, .yaml, .yml)
            env_prefix: Prefix selecting environment variables
            env_file: Optional .env file; ignored when missing
            overrides: Values applied last
            use_environ: Read prefixed variables from os.environ
        """
        loader = cls(env_prefix=env_prefix)

        for pattern in paths or ():
            for path in sorted(glob(pattern)) or [pattern]:
                deep_merge(loader.data, read_config_file(Path(path)))
                logger.debug(f"Loaded config file {path}")

        if env_file and Path(env_file).is_file():
            loader.apply_environment(read_env_file(Path(env_file)))

        if use_environ:
            loader.apply_environment(os.environ.items())

        if overrides:
            deep_merge(loader.data, overrides)

        return loader

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], env_prefix: str = DEFAULT_ENV_PREFIX) -> "ConfigLoader":
        loader = cls(env_prefix=env_prefix)
        deep_merge(loader.data, data)
        return loader

    def apply_environment(self, items: Iterable[Tuple[str, str]]) -> None:
        """Apply prefixed KEY=value pairs, nesting on ``__``."""
        for key, raw in items:
            if not key.startswith(self.env_prefix):
                continue

            *parents, leaf = key[len(self.env_prefix):].lower().split("__")
            node = self.data
            for part in parents:
                if not isinstance(node.get(part), dict):
                    node[part] = {}
                node = node[part]
            node[leaf] = parse_env_value(raw)

    def get(self, path: str, default: Any = None) -> Any:
        """Value at a dot-separated path, or ``default``."""
        node: Any = self.data
        for part in path.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def get_section(self, path: str, config_class: Type[T]) -> T:
        """
        The mapping at ``path`` as an instance of ``config_class``.

        A class with a ``from_mapping`` classmethod parses the mapping
        itself; other classes must be dataclasses and are validated
        field by field.

        Raises:
            ConfigError: If the section is not a mapping or fails validation
        """
        section = self.get(path) or {}
        if not isinstance(section, dict):
            raise ConfigError(f"Config section '{path}' must be a mapping, got {type(section).__name__}")

        from_mapping = getattr(config_class, "from_mapping", None)
        if from_mapping is not None:
            return from_mapping(section)
        return _build_dataclass(config_class, section)

    def to_dict(self) -> Dict[str, Any]:
        return deep_merge({}, self.data)


def _build_dataclass(config_class: Type[T], section: Mapping[str, Any]) -> T:
    if not is_dataclass(config_class):
        raise ConfigError(f"{config_class.__name__} is not a dataclass")

    names = {f.name for f in fields(config_class)}
    unknown = sorted(set(section) - names)
    if unknown:
        raise ConfigError(f"Unknown config field(s) for {config_class.__name__}: {', '.join(unknown)}")

    hints = get_type_hints(config_class)
    for f in fields(config_class):
        if f.name in section:
            value = section[f.name]
            expected = hints.get(f.name, Any)
            if not _matches(value, expected):
                raise ConfigError(
                    f"Config field '{f.name}' of {config_class.__name__} expects "
                    f"{getattr(expected, '__name__', expected)}, got {type(value).__name__}"
                )
        elif f.default is MISSING and f.default_factory is MISSING:
            raise ConfigError(f"Required config field '{f.name}' of {config_class.__name__} not provided")

    return config_class(**section)


def _matches(value: Any, expected: Any) -> bool:
    if expected is Any:
        return True

    origin = get_origin(expected)
    if origin is Union or origin is types.UnionType:
        return any(_matches(value, arg) for arg in get_args(expected))
    if expected is type(None):
        return value is None

    # bool is an int subclass; a flag is not a number here
    if expected in (int, float) and isinstance(value, bool):
        return False
    if expected is float:
        return isinstance(value, (int, float))

    try:
        return isinstance(value, origin or expected)
    except TypeError:
        return True
