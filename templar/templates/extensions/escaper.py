"""
Escaper extension - context-specific output escaping for templates.

Template functions:
- escape(value, strategy="html")
- escape_html(value)
- escape_html_attr(value)
- escape_js(value)
- escape_css(value)
- escape_url(value)

Rules follow the OWASP recommendations: anything outside a small set of
immune characters is encoded for the target context.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional
import codecs
import logging
import re
from urllib.parse import quote

from markupsafe import Markup, escape as markup_escape

from templar.config import ConfigLoader
from templar.di.core import ServiceLookup

from .base import Extension


logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8"

_HTML_ATTR_UNSAFE = re.compile(r"[^a-zA-Z0-9,.\-_]")
_JS_UNSAFE = re.compile(r"[^a-zA-Z0-9,._]")
_CSS_UNSAFE = re.compile(r"[^a-zA-Z0-9]")

_HTML_NAMED_ENTITIES = {
    34: "quot",  # "
    38: "amp",   # &
    60: "lt",    # <
    62: "gt",    # >
}


class Escaper:
    """
    Escape strings for HTML body, HTML attribute, JavaScript, CSS and URL
    contexts.

    Args:
        encoding: Encoding used to decode byte input

    Raises:
        ValueError: If the encoding is unknown
    """

    def __init__(self, encoding: str = DEFAULT_ENCODING):
        try:
            self.encoding = codecs.lookup(encoding).name
        except LookupError:
            raise ValueError(f"Escaper does not support encoding '{encoding}'") from None

    def _to_text(self, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, (bytes, bytearray)):
            return bytes(value).decode(self.encoding)
        return str(value)

    def escape_html(self, value: Any) -> Markup:
        """Escape for HTML body context (&, <, >, ', ")."""
        if isinstance(value, (bytes, bytearray)) or value is None:
            value = self._to_text(value)
        return markup_escape(value)

    def escape_html_attr(self, value: Any) -> Markup:
        """Escape for (possibly unquoted) HTML attribute values."""
        text = self._to_text(value)
        if not text or (text.isascii() and text.isdigit()):
            return Markup(text)
        return Markup(_HTML_ATTR_UNSAFE.sub(self._html_attr_replace, text))

    def escape_js(self, value: Any) -> str:
        """Escape for JavaScript string literals and values."""
        text = self._to_text(value)
        if not text or (text.isascii() and text.isdigit()):
            return text
        return _JS_UNSAFE.sub(self._js_replace, text)

    def escape_css(self, value: Any) -> str:
        """Escape for CSS values and identifiers."""
        text = self._to_text(value)
        if not text or (text.isascii() and text.isdigit()):
            return text
        return _CSS_UNSAFE.sub(self._css_replace, text)

    def escape_url(self, value: Any) -> str:
        """Percent-encode a URL component (RFC 3986 unreserved set kept)."""
        return quote(self._to_text(value), safe="", encoding=self.encoding)

    @staticmethod
    def _html_attr_replace(match: re.Match) -> str:
        char = match.group(0)
        code = ord(char)

        # Control characters other than tab, newline and carriage return
        # have no HTML representation
        if (code <= 0x1F and char not in "\t\n\r") or 0x7F <= code <= 0x9F:
            return "&#xFFFD;"

        named = _HTML_NAMED_ENTITIES.get(code)
        if named is not None:
            return f"&{named};"

        if code > 255:
            return f"&#x{code:04X};"
        return f"&#x{code:02X};"

    @staticmethod
    def _js_replace(match: re.Match) -> str:
        code = ord(match.group(0))
        if code < 256:
            return f"\\x{code:02X}"
        if code > 0xFFFF:
            # Outside the BMP: UTF-16 surrogate pair
            code -= 0x10000
            high = 0xD800 + (code >> 10)
            low = 0xDC00 + (code & 0x3FF)
            return f"\\u{high:04X}\\u{low:04X}"
        return f"\\u{code:04X}"

    @staticmethod
    def _css_replace(match: re.Match) -> str:
        return f"\\{ord(match.group(0)):X} "


class EscaperExtension(Extension):
    """
    Template functions backed by an Escaper.

    Calling the extension itself escapes with the requested strategy.
    """

    name = "escape"

    STRATEGIES = ("html", "html_attr", "js", "css", "url")

    def __init__(self, encoding: str = DEFAULT_ENCODING, escaper: Optional[Escaper] = None):
        self.escaper = escaper if escaper is not None else Escaper(encoding)

    def __call__(self, value: Any, strategy: str = "html") -> Any:
        if strategy not in self.STRATEGIES:
            raise ValueError(
                f"Unknown escape strategy '{strategy}'; expected one of {', '.join(self.STRATEGIES)}"
            )
        return getattr(self.escaper, f"escape_{strategy}")(value)

    def functions(self) -> Dict[str, Callable[..., Any]]:
        return {
            self.name: self,
            "escape_html": self.escaper.escape_html,
            "escape_html_attr": self.escaper.escape_html_attr,
            "escape_js": self.escaper.escape_js,
            "escape_css": self.escaper.escape_css,
            "escape_url": self.escaper.escape_url,
        }


def escaper_extension_factory(lookup: ServiceLookup, encoding: Optional[str] = None) -> EscaperExtension:
    """
    Build the default escaper extension.

    Without an explicit encoding, ``templates.encoding`` is read from a
    ConfigLoader service when one is registered.
    """
    if encoding is None and lookup.has(ConfigLoader):
        encoding = lookup.get(ConfigLoader).get("templates.encoding")

    extension = EscaperExtension(encoding or DEFAULT_ENCODING)
    logger.debug(f"Created default EscaperExtension (encoding={extension.escaper.encoding})")
    return extension
