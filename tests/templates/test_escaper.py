"""
Test context-specific escaping and the escaper extension.
"""

import pytest
from markupsafe import Markup

from templar.config import ConfigLoader
from templar.templates import TemplateEngine
from templar.templates.extensions import Escaper, EscaperExtension, escaper_extension_factory


@pytest.fixture
def escaper():
    return Escaper()


# ============================================================================
# Escaper
# ============================================================================

class TestEscaper:

    def test_unknown_encoding(self):
        with pytest.raises(ValueError, match="does not support encoding"):
            Escaper("no-such-encoding")

    def test_encoding_normalized(self):
        assert Escaper("UTF8").encoding == "utf-8"
        assert Escaper("latin-1").encoding == "iso8859-1"

    def test_bytes_decoded_with_encoding(self):
        assert Escaper("latin-1").escape_js(b"\xfc") == "\\xFC"

    def test_html(self, escaper):
        result = escaper.escape_html("<a href='x'>&")

        assert isinstance(result, Markup)
        assert result == "&lt;a href=&#39;x&#39;&gt;&amp;"

    def test_html_none_and_bytes(self, escaper):
        assert escaper.escape_html(None) == ""
        assert escaper.escape_html(b"<b>") == "&lt;b&gt;"

    def test_html_attr(self, escaper):
        result = escaper.escape_html_attr("faketitle onmouseover=alert(/x!/);")

        assert isinstance(result, Markup)
        assert result == (
            "faketitle&#x20;onmouseover&#x3D;alert&#x28;&#x2F;x&#x21;&#x2F;&#x29;&#x3B;"
        )

    @pytest.mark.parametrize("value,expected", [
        ('"', "&quot;"),
        ("&", "&amp;"),
        ("<", "&lt;"),
        (">", "&gt;"),
        ("\t", "&#x09;"),
        ("\x01", "&#xFFFD;"),
        ("\x85", "&#xFFFD;"),
        ("é", "&#xE9;"),
        ("ā", "&#x0101;"),
        ("a,b.c-d_e", "a,b.c-d_e"),
    ])
    def test_html_attr_characters(self, escaper, value, expected):
        assert escaper.escape_html_attr(value) == expected

    def test_html_attr_passthrough(self, escaper):
        assert escaper.escape_html_attr("") == ""
        assert escaper.escape_html_attr("12345") == "12345"
        assert escaper.escape_html_attr(42) == "42"

    @pytest.mark.parametrize("value,expected", [
        ("a'b", "a\\x27b"),
        ("<", "\\x3C"),
        ("a-b", "a\\x2Db"),
        ("a,b.c_d", "a,b.c_d"),
        ("ā", "\\u0101"),
        ("\U0001F600", "\\uD83D\\uDE00"),
        ("", ""),
        ("2024", "2024"),
    ])
    def test_js(self, escaper, value, expected):
        assert escaper.escape_js(value) == expected

    @pytest.mark.parametrize("value,expected", [
        ("a b", "a\\20 b"),
        ("<", "\\3C "),
        ("a_b", "a\\5F b"),
        ("plain", "plain"),
    ])
    def test_css(self, escaper, value, expected):
        assert escaper.escape_css(value) == expected

    @pytest.mark.parametrize("strategy,value,expected", [
        ("html_attr", "\u00b2", "&#xB2;"),
        ("html_attr", "\u0663", "&#x0663;"),
        ("js", "\u00b2", "\\xB2"),
        ("js", "\u0663", "\\u0663"),
        ("css", "\u00b2", "\\B2 "),
        ("css", "1\u0663", "1\\663 "),
    ])
    def test_non_ascii_digits_are_escaped(self, escaper, strategy, value, expected):
        assert getattr(escaper, f"escape_{strategy}")(value) == expected

    def test_url(self, escaper):
        assert escaper.escape_url("a b&c/d") == "a%20b%26c%2Fd"
        assert escaper.escape_url("ü") == "%C3%BC"
        assert escaper.escape_url("a-b.c_d~e") == "a-b.c_d~e"

    def test_url_with_encoding(self):
        assert Escaper("latin-1").escape_url("ü") == "%FC"


# ============================================================================
# EscaperExtension
# ============================================================================

class TestEscaperExtension:

    def test_name(self):
        assert EscaperExtension.get_name() == "escape"

    def test_default_strategy_is_html(self):
        assert EscaperExtension()("<") == "&lt;"

    @pytest.mark.parametrize("strategy,expected", [
        ("html", "a b"),
        ("html_attr", "a&#x20;b"),
        ("js", "a\\x20b"),
        ("css", "a\\20 b"),
        ("url", "a%20b"),
    ])
    def test_strategies(self, strategy, expected):
        assert EscaperExtension()("a b", strategy) == expected

    def test_unknown_strategy(self):
        with pytest.raises(ValueError, match="Unknown escape strategy 'sql'"):
            EscaperExtension()("x", "sql")

    def test_custom_escaper(self):
        escaper = Escaper("latin-1")
        assert EscaperExtension(escaper=escaper).escaper is escaper

    def test_functions(self):
        extension = EscaperExtension()

        assert set(extension.functions()) == {
            "escape",
            "escape_html",
            "escape_html_attr",
            "escape_js",
            "escape_css",
            "escape_url",
        }

    def test_in_template(self, tmp_path):
        (tmp_path / "page.html").write_text(
            "<div data-x={{ escape_html_attr(v) }}>{{ escape(v, 'url') }}</div>"
        )
        engine = TemplateEngine(str(tmp_path))
        engine.load_extension(EscaperExtension())

        assert engine.render("page", {"v": "<1>"}) == (
            "<div data-x=&lt;1&gt;>%3C1%3E</div>"
        )


class TestEscaperFactory:

    def test_defaults_to_utf8(self, container):
        assert escaper_extension_factory(container).escaper.encoding == "utf-8"

    def test_reads_config_loader(self, container):
        container.register_instance(ConfigLoader, ConfigLoader.from_dict({
            "templates": {"encoding": "latin-1"},
        }))

        assert escaper_extension_factory(container).escaper.encoding == "iso8859-1"

    def test_explicit_encoding_wins(self, container):
        container.register_instance(ConfigLoader, ConfigLoader.from_dict({
            "templates": {"encoding": "latin-1"},
        }))

        extension = escaper_extension_factory(container, "ascii")

        assert extension.escaper.encoding == "ascii"
