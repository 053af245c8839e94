"""
Shared test fixtures for the Templar test suite.
"""

import logging
from pathlib import Path

import pytest

from templar.di import Container
from templar.templates.extensions import ExtensionRegistry


@pytest.fixture
def templates_dir(tmp_path: Path) -> Path:
    """
    Template tree:

        default/home.html          default/layout.html
        pages/about.html           pages/nested/team.html
        emails/welcome.html        legacy/home.tpl
    """
    default = tmp_path / "default"
    default.mkdir()
    (default / "home.html").write_text("Home: {{ title }}")
    (default / "layout.html").write_text("<main>{% block body %}{% endblock %}</main>")

    pages = tmp_path / "pages"
    (pages / "nested").mkdir(parents=True)
    (pages / "about.html").write_text("About {{ company }}")
    (pages / "nested" / "team.html").write_text("Team")

    emails = tmp_path / "emails"
    emails.mkdir()
    (emails / "welcome.html").write_text("Welcome {{ user }}")

    legacy = tmp_path / "legacy"
    legacy.mkdir()
    (legacy / "home.tpl").write_text("Legacy {{ title }}")

    return tmp_path


@pytest.fixture
def container() -> Container:
    return Container()


@pytest.fixture
def registry() -> ExtensionRegistry:
    """Isolated class-name registry; the process-wide one stays untouched."""
    return ExtensionRegistry()


@pytest.fixture
def caplog_debug(caplog):
    caplog.set_level(logging.DEBUG, logger="templar")
    return caplog
