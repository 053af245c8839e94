"""
Templar CLI - ``templar render``, ``templar functions``, ``templar folders``,
``templar list``.

Every command builds the engine the same way an application does: the
config files are merged into a ConfigLoader, the ``templates`` section is
read, and extensions are resolved against the class-name registry.
Modules passed with ``--import`` are imported first so their
``@register_extension`` classes are available.
"""

from __future__ import annotations

import importlib
import json
import logging
import sys
from typing import Any, Dict, Optional, Tuple

import click
from jinja2 import TemplateError

from . import __version__
from .config import ConfigError, ConfigLoader
from .di import Container, DIError
from .faults import Fault
from .templates import TemplateEngine, build_engine


# Failures reported as a one-line error instead of a traceback
BUILD_ERRORS = (Fault, ConfigError, DIError, ValueError)


def _parse_assignments(assignments: Tuple[str, ...]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for assignment in assignments:
        if "=" not in assignment:
            raise click.BadParameter(f"expected key=value, got {assignment!r}", param_hint="--set")
        key, raw = assignment.split("=", 1)
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            value = raw

        current = overrides
        parts = key.split(".")
        for part in parts[:-1]:
            current = current.setdefault(part, {})
        current[parts[-1]] = value
    return overrides


def _load_engine(
    config_paths: Tuple[str, ...],
    imports: Tuple[str, ...],
    overrides: Tuple[str, ...],
) -> TemplateEngine:
    for module_name in imports:
        try:
            importlib.import_module(module_name)
        except ImportError as exc:
            raise ConfigError(f"Cannot import '{module_name}': {exc}") from exc

    loader = ConfigLoader.load(
        paths=list(config_paths),
        overrides=_parse_assignments(overrides),
    )

    container = Container()
    container.register_instance(ConfigLoader, loader)
    return build_engine(container)


def _fail(message: str) -> None:
    click.secho(f"Error: {message}", fg="red", err=True)
    sys.exit(1)


@click.group()
@click.version_option(__version__, prog_name="templar")
@click.option("--verbose", "-v", is_flag=True, help="Log engine construction")
def cli(verbose: bool):
    """Build and inspect Templar template engines."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def engine_options(func):
    func = click.option(
        "--set", "overrides", multiple=True, metavar="KEY=VALUE",
        help="Override a config value, e.g. templates.file_extension=tpl",
    )(func)
    func = click.option(
        "--import", "-i", "imports", multiple=True, metavar="MODULE",
        help="Import a module that registers extensions",
    )(func)
    func = click.option(
        "--config", "-c", "config_paths", multiple=True, metavar="PATH",
        help="YAML or JSON config file (repeatable)",
    )(func)
    return func


@cli.command("render")
@click.argument("template")
@engine_options
@click.option("--data", "-d", "data", default=None, help="Template data as a JSON object")
def render(
    template: str,
    config_paths: Tuple[str, ...],
    imports: Tuple[str, ...],
    overrides: Tuple[str, ...],
    data: Optional[str],
):
    """
    Render TEMPLATE and print the result.

    Examples:
      templar render pages::home -c config/templates.yaml
      templar render home --set templates.directory=templates -d '{"title": "Hi"}'
    """
    params: Dict[str, Any] = {}
    if data:
        try:
            params = json.loads(data)
        except json.JSONDecodeError as exc:
            raise click.BadParameter(f"invalid JSON: {exc}", param_hint="--data")
        if not isinstance(params, dict):
            raise click.BadParameter("template data must be a JSON object", param_hint="--data")

    try:
        engine = _load_engine(config_paths, imports, overrides)
        click.echo(engine.render(template, params))
    except (*BUILD_ERRORS, TemplateError) as exc:
        _fail(str(exc))


@cli.command("functions")
@engine_options
@click.option("--json-output", "-j", is_flag=True, help="Output as JSON")
def functions(
    config_paths: Tuple[str, ...],
    imports: Tuple[str, ...],
    overrides: Tuple[str, ...],
    json_output: bool,
):
    """List the template functions the configured engine exposes."""
    try:
        engine = _load_engine(config_paths, imports, overrides)
    except BUILD_ERRORS as exc:
        _fail(str(exc))
        return

    names = sorted(engine.functions)
    if json_output:
        click.echo(json.dumps(names, indent=2))
        return

    for name in names:
        click.echo(name)


@cli.command("folders")
@engine_options
def folders(
    config_paths: Tuple[str, ...],
    imports: Tuple[str, ...],
    overrides: Tuple[str, ...],
):
    """Show the default directory and named template folders."""
    try:
        engine = _load_engine(config_paths, imports, overrides)
    except BUILD_ERRORS as exc:
        _fail(str(exc))
        return

    click.echo(f"extension: {engine.file_extension or '-'}")
    click.echo(f"default:   {engine.directory or '-'}")
    for name, folder in engine.folders.items():
        suffix = " (fallback)" if folder.fallback else ""
        click.echo(f"{name}:: {folder.path}{suffix}")


@cli.command("list")
@engine_options
def list_templates(
    config_paths: Tuple[str, ...],
    imports: Tuple[str, ...],
    overrides: Tuple[str, ...],
):
    """List template names found in the configured directories."""
    try:
        engine = _load_engine(config_paths, imports, overrides)
    except BUILD_ERRORS as exc:
        _fail(str(exc))
        return

    for name in engine.list_templates():
        click.echo(name)


def main():
    cli()


if __name__ == "__main__":
    main()
