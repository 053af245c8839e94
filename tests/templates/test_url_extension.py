"""
Test the URL extension.
"""

import pytest

from templar.helpers import ServerUrlHelper, UrlHelper
from templar.templates import TemplateEngine, UrlExtension
from templar.templates.extensions import url_extension_factory


def url_for(route_name, **params):
    return {"home": "/", "post": "/posts/{slug}"}[route_name].format(**params)


@pytest.fixture
def extension():
    return UrlExtension(UrlHelper(url_for), ServerUrlHelper("https://example.com"))


def test_name():
    assert UrlExtension.get_name() == "url"


def test_call_delegates_to_url_helper(extension):
    assert extension("post", {"slug": "hi"}, {"page": 2}, "comments") == "/posts/hi?page=2#comments"


def test_matched_route(extension):
    extension.url_helper.set_route_result("post", {"slug": "current"})
    assert extension() == "/posts/current"


def test_server_url(extension):
    assert extension.server_url("/feed") == "https://example.com/feed"
    assert extension.server_url() == "https://example.com"


def test_functions(extension):
    functions = extension.functions()

    assert functions["url"] is extension
    assert functions["server_url"]("/x") == "https://example.com/x"


def test_in_template(extension, tmp_path):
    (tmp_path / "nav.html").write_text(
        '<a href="{{ url("home") }}">home</a> <link href="{{ server_url("/rss") }}">'
    )
    engine = TemplateEngine(str(tmp_path)).load_extension(extension)

    assert engine.render("nav") == '<a href="/">home</a> <link href="https://example.com/rss">'


def test_factory(container):
    url_helper = UrlHelper(url_for)
    server_url_helper = ServerUrlHelper()
    container.register_instance(UrlHelper, url_helper)
    container.register_instance(ServerUrlHelper, server_url_helper)

    extension = url_extension_factory(container)

    assert extension.url_helper is url_helper
    assert extension.server_url_helper is server_url_helper
