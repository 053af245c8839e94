"""
URL extension - route and server URL generation in templates.

Template functions:
- url(route_name=None, route_params=None, query_params=None, fragment=None, options=None)
- server_url(path=None)
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional
import logging

from templar.di.core import ServiceLookup
from templar.helpers import ServerUrlHelper, UrlHelper

from .base import Extension


logger = logging.getLogger(__name__)


class UrlExtension(Extension):
    """Expose UrlHelper and ServerUrlHelper as template functions."""

    name = "url"

    def __init__(self, url_helper: UrlHelper, server_url_helper: ServerUrlHelper):
        self.url_helper = url_helper
        self.server_url_helper = server_url_helper

    def __call__(
        self,
        route_name: Optional[str] = None,
        route_params: Optional[Mapping[str, Any]] = None,
        query_params: Optional[Mapping[str, Any]] = None,
        fragment: Optional[str] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> str:
        return self.url_helper(route_name, route_params, query_params, fragment, options)

    def server_url(self, path: Optional[str] = None) -> str:
        return self.server_url_helper(path)

    def functions(self) -> Dict[str, Callable[..., Any]]:
        return {
            self.name: self,
            "server_url": self.server_url,
        }


def url_extension_factory(lookup: ServiceLookup) -> UrlExtension:
    """Build the default URL extension from the registered helpers."""
    return UrlExtension(
        url_helper=lookup.get(UrlHelper),
        server_url_helper=lookup.get(ServerUrlHelper),
    )
