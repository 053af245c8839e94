"""
URL helpers - framework collaborators used by the URL template extension.

``UrlHelper`` wraps a router's reverse lookup (any callable with the
signature ``url_for(route_name, **params) -> str``). ``ServerUrlHelper``
turns paths into absolute URLs for the current server.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional
from urllib.parse import quote, urlencode, urlsplit, urlunsplit, SplitResult


UrlBuilder = Callable[..., str]


class UrlHelper:
    """
    Generate URIs for named routes.

    Args:
        url_builder: Reverse-routing callable, e.g. ``router.url_for``
        base_path: Prefix prepended to every generated path

    Example:
        helper = UrlHelper(router.url_for)
        helper("users.show", {"id": 3}, {"tab": "posts"}, "top")
        # -> "/users/3?tab=posts#top"
    """

    def __init__(self, url_builder: UrlBuilder, base_path: str = ""):
        self._url_builder = url_builder
        self._base_path = base_path.rstrip("/")
        self._route_name: Optional[str] = None
        self._route_params: Dict[str, Any] = {}

    @property
    def base_path(self) -> str:
        return self._base_path

    def set_base_path(self, base_path: str) -> None:
        self._base_path = base_path.rstrip("/")

    def set_route_result(self, route_name: str, params: Optional[Mapping[str, Any]] = None) -> None:
        """Record the route matched for the current request."""
        self._route_name = route_name
        self._route_params = dict(params or {})

    def __call__(
        self,
        route_name: Optional[str] = None,
        route_params: Optional[Mapping[str, Any]] = None,
        query_params: Optional[Mapping[str, Any]] = None,
        fragment: Optional[str] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """
        Generate a URI.

        Without ``route_name`` the matched route is used and its parameters
        are merged under ``route_params``, unless ``options`` contains
        ``reuse_result_params=False``.

        Raises:
            RuntimeError: If no route name is given and no route was matched
            ValueError: If the fragment is empty
        """
        options = dict(options or {})
        params = dict(route_params or {})

        if route_name is None:
            if self._route_name is None:
                raise RuntimeError(
                    "Attempting to use matched result when none was injected; aborting"
                )
            route_name = self._route_name
            if options.get("reuse_result_params", True):
                params = {**self._route_params, **params}

        path = self._url_builder(route_name, **params)
        if self._base_path and path.startswith("/"):
            path = self._base_path + path

        if query_params:
            path += ("&" if "?" in path else "?") + urlencode(query_params, doseq=True)

        if fragment is not None:
            if not fragment:
                raise ValueError("Fragment must be a non-empty string")
            path += "#" + quote(fragment, safe="/?:@!$&'()*+,;=-._~")

        return path


class ServerUrlHelper:
    """
    Build absolute URLs from paths using the current server URI.

    Example:
        helper = ServerUrlHelper("https://example.com/app")
        helper("/login")      # -> "https://example.com/login"
        helper("?page=2")     # -> "https://example.com/app?page=2"
    """

    def __init__(self, uri: Optional[str] = None):
        self._uri: Optional[SplitResult] = None
        if uri is not None:
            self.set_uri(uri)

    def set_uri(self, uri: str) -> None:
        parts = urlsplit(uri)
        if not parts.scheme or not parts.netloc:
            raise ValueError(f"Server URI must be absolute, got {uri!r}")
        self._uri = parts

    def __call__(self, path: Optional[str] = None) -> str:
        if self._uri is None:
            return path or ""

        if path is None:
            return urlunsplit(self._uri)

        parts = urlsplit(path)
        if parts.path:
            new_path = parts.path if parts.path.startswith("/") else "/" + parts.path
        else:
            new_path = self._uri.path

        query = parts.query if (parts.query or path.startswith("?")) else (
            "" if parts.path else self._uri.query
        )

        return urlunsplit((
            self._uri.scheme,
            self._uri.netloc,
            new_path,
            query,
            parts.fragment,
        ))
