"""
Immutable URL value and redirect target resolution.
"""

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any
from urllib.parse import urlencode, urlsplit

from curlkit.exceptions import InvalidUrlError


DEFAULT_PORTS = {
    "http": 80,
    "https": 443,
    "ftp": 21,
}


@dataclass(frozen=True)
class Url:
    """URL split into components. ``port`` is only the explicit port."""
    scheme: str = ""
    user: str = ""
    password: str = ""
    host: str = ""
    port: int | None = None
    path: str = ""
    query: str = ""
    fragment: str = ""

    @classmethod
    def parse(cls, value: "str | Url | None") -> "Url":
        if isinstance(value, Url):
            return value
        if value is None:
            return cls()
        try:
            parts = urlsplit(str(value))
            port = parts.port
        except ValueError as e:
            raise InvalidUrlError(f"Malformed URL '{value}': {e}") from e

        path = parts.path
        if parts.hostname and not path and parts.scheme in ("http", "https"):
            path = "/"

        return cls(
            scheme=parts.scheme.lower(),
            user=parts.username or "",
            password=parts.password or "",
            host=parts.hostname or "",
            port=port,
            path=path,
            query=parts.query,
            fragment=parts.fragment,
        )

    @property
    def effective_port(self) -> int | None:
        """Explicit port, or the scheme's default."""
        return self.port or DEFAULT_PORTS.get(self.scheme)

    @property
    def authority(self) -> str:
        if not self.host:
            return ""
        host = f"[{self.host}]" if ":" in self.host else self.host
        if self.port and self.port != DEFAULT_PORTS.get(self.scheme):
            host = f"{host}:{self.port}"
        if self.user:
            userinfo = f"{self.user}:{self.password}" if self.password else self.user
            host = f"{userinfo}@{host}"
        return host

    @property
    def host_url(self) -> str:
        """Scheme and authority, e.g. ``https://example.com:8443``."""
        if not self.host:
            if self.scheme == "file":
                return "file://"
            return f"{self.scheme}:" if self.scheme else ""
        return f"{self.scheme}://{self.authority}" if self.scheme else f"//{self.authority}"

    @property
    def basename(self) -> str:
        return self.path.rstrip("/").rsplit("/", 1)[-1]

    def with_scheme(self, scheme: str) -> "Url":
        return replace(self, scheme=scheme.lower())

    def with_host(self, host: str) -> "Url":
        return replace(self, host=host)

    def with_port(self, port: int | None) -> "Url":
        return replace(self, port=port)

    def with_path(self, path: str) -> "Url":
        return replace(self, path=path)

    def with_query(self, query: "str | Mapping[str, Any] | None") -> "Url":
        if isinstance(query, Mapping):
            query = urlencode(query, doseq=True)
        return replace(self, query=query or "")

    def __str__(self) -> str:
        url = self.host_url + self.path
        if self.query:
            url += "?" + self.query
        if self.fragment:
            url += "#" + self.fragment
        return url


def fix_url(previous: "str | Url", target: "str | Url") -> Url:
    """Resolve a redirect target against the URL that produced it.

    A target path not starting with ``/`` is taken relative to the previous
    path's directory. Missing scheme, host and port are copied from the
    previous URL; InvalidUrlError is raised when neither side has them.
    """
    last = Url.parse(previous)
    url = Url.parse(target)

    # unlike a plain path, a target with its own host (e.g. "//cdn.a.com")
    # never inherits the previous directory
    if not isinstance(target, Url) and not url.host and not url.path.startswith("/"):
        directory = last.path[: last.path.rfind("/") + 1]
        url = url.with_path(directory + url.path)

    if not url.scheme:
        if not last.scheme:
            raise InvalidUrlError("Missing URL scheme!")
        url = url.with_scheme(last.scheme)

    if not url.host:
        if not last.host:
            raise InvalidUrlError("Missing URL host!")
        # a target without authority keeps the previous site's port too
        url = url.with_host(last.host).with_port(url.port or last.port)

    if not url.effective_port:
        if not last.effective_port:
            raise InvalidUrlError("Missing URL port!")
        url = url.with_port(last.effective_port)

    if not url.path.startswith("/"):
        url = url.with_path("/" + url.path)

    return url
