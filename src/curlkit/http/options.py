"""
libcurl option names and the registry that validates them.

Options are addressed by the lower-cased libcurl name without the
``CURLOPT_`` prefix, e.g. ``postfields`` for ``CURLOPT_POSTFIELDS``.
"""

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any, Iterator

from curlkit.exceptions import InvalidOptionError


# CURL_IPRESOLVE_*
IPRESOLVE_WHATEVER = 0
IPRESOLVE_V4 = 1
IPRESOLVE_V6 = 2

# CURLcode values the wrapper cares about
E_OK = 0
E_COULDNT_RESOLVE_PROXY = 5
E_COULDNT_RESOLVE_HOST = 6


class CurlOption(str, Enum):
    """libcurl configuration knobs that may be set on a transfer."""

    # Connection
    URL = "url"
    PORT = "port"
    INTERFACE = "interface"
    LOCALPORT = "localport"
    IPRESOLVE = "ipresolve"
    DNS_CACHE_TIMEOUT = "dns_cache_timeout"
    TCP_NODELAY = "tcp_nodelay"
    TCP_KEEPALIVE = "tcp_keepalive"
    FRESH_CONNECT = "fresh_connect"
    FORBID_REUSE = "forbid_reuse"

    # Timeouts
    TIMEOUT = "timeout"
    TIMEOUT_MS = "timeout_ms"
    CONNECTTIMEOUT = "connecttimeout"
    CONNECTTIMEOUT_MS = "connecttimeout_ms"
    LOW_SPEED_LIMIT = "low_speed_limit"
    LOW_SPEED_TIME = "low_speed_time"

    # Proxy
    PROXY = "proxy"
    PROXYPORT = "proxyport"
    PROXYTYPE = "proxytype"
    PROXYUSERPWD = "proxyuserpwd"
    NOPROXY = "noproxy"

    # Authentication
    USERPWD = "userpwd"
    HTTPAUTH = "httpauth"
    UNRESTRICTED_AUTH = "unrestricted_auth"
    NETRC = "netrc"

    # HTTP
    HTTPHEADER = "httpheader"
    HTTP_VERSION = "http_version"
    USERAGENT = "useragent"
    REFERER = "referer"
    AUTOREFERER = "autoreferer"
    FOLLOWLOCATION = "followlocation"
    MAXREDIRS = "maxredirs"
    ENCODING = "encoding"
    ACCEPT_ENCODING = "accept_encoding"
    FAILONERROR = "failonerror"
    HEADER = "header"
    RANGE = "range"
    RESUME_FROM = "resume_from"
    MAXFILESIZE = "maxfilesize"

    # Method and body
    HTTPGET = "httpget"
    NOBODY = "nobody"
    POST = "post"
    POSTFIELDS = "postfields"
    HTTPPOST = "httppost"
    CUSTOMREQUEST = "customrequest"
    UPLOAD = "upload"
    INFILESIZE = "infilesize"

    # Cookies
    COOKIE = "cookie"
    COOKIEFILE = "cookiefile"
    COOKIEJAR = "cookiejar"
    COOKIESESSION = "cookiesession"

    # TLS
    SSL_VERIFYPEER = "ssl_verifypeer"
    SSL_VERIFYHOST = "ssl_verifyhost"
    SSLVERSION = "sslversion"
    CAINFO = "cainfo"
    CAPATH = "capath"
    SSLCERT = "sslcert"
    SSLCERTTYPE = "sslcerttype"
    SSLKEY = "sslkey"

    # Misc
    # verbose is not settable, the engine keeps it on to capture outgoing headers
    BUFFERSIZE = "buffersize"
    NOPROGRESS = "noprogress"


VALID_OPTIONS = frozenset(option.value for option in CurlOption)


def normalize_option(name: "str | CurlOption") -> str:
    """Return the canonical option key or raise InvalidOptionError."""
    if isinstance(name, CurlOption):
        return name.value
    key = str(name).lower()
    if key.startswith("curlopt_"):
        key = key[len("curlopt_"):]
    if key not in VALID_OPTIONS:
        raise InvalidOptionError(
            f'There is no option "CURLOPT_{key.upper()}", therefore "{name}" cannot be set.'
        )
    return key


def is_option(name: "str | CurlOption") -> bool:
    """Check whether a name refers to a known libcurl option."""
    try:
        normalize_option(name)
    except InvalidOptionError:
        return False
    return True


class OptionRegistry:
    """Validated mapping of option name to value.

    Setting an option to ``None`` removes it.
    """

    def __init__(self, options: Mapping[str, Any] | None = None):
        self._options: dict[str, Any] = {}
        if options:
            self.set_many(options)

    def set(self, name: "str | CurlOption", value: Any) -> "OptionRegistry":
        key = normalize_option(name)
        if value is not None:
            self._options[key] = value
        else:
            self._options.pop(key, None)
        return self

    def set_many(self, options: Mapping[str, Any]) -> "OptionRegistry":
        for name, value in options.items():
            self.set(name, value)
        return self

    def get(self) -> dict[str, Any]:
        """Return a copy of all options currently set."""
        return dict(self._options)

    def option(self, name: "str | CurlOption", default: Any = None) -> Any:
        """Read a single option."""
        return self._options.get(normalize_option(name), default)

    def clear(self) -> None:
        self._options.clear()

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, (str, CurlOption)) or not is_option(name):
            return False
        return normalize_option(name) in self._options

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._options))

    def __len__(self) -> int:
        return len(self._options)

    def __repr__(self) -> str:
        return f"OptionRegistry({self._options!r})"


class RequestOptions:
    """Fluent option setters shared by requests, transports and senders."""

    def __init__(self):
        self.options = OptionRegistry()

    def get_options(self) -> dict[str, Any]:
        return self.options.get()

    def set_option(self, name: "str | CurlOption", value: Any):
        self.options.set(name, value)
        return self

    def set_options(self, options: Mapping[str, Any]):
        self.options.set_many(options)
        return self

    def option(self, name: "str | CurlOption", default: Any = None) -> Any:
        return self.options.option(name, default)

    def set_timeout(self, seconds: int | None):
        return self.set_option(CurlOption.TIMEOUT, seconds)

    def set_connect_timeout(self, seconds: int | None):
        return self.set_option(CurlOption.CONNECTTIMEOUT, seconds)

    def set_user_agent(self, user_agent: str | None):
        return self.set_option(CurlOption.USERAGENT, user_agent)

    def set_referer(self, referer: str | None):
        return self.set_option(CurlOption.REFERER, referer)

    def set_interface(self, interface: str | None):
        return self.set_option(CurlOption.INTERFACE, interface)

    def set_ip_resolve(self, mode: int | None):
        return self.set_option(CurlOption.IPRESOLVE, mode)

    def set_proxy(
        self,
        proxy: Any,
        port: int = 3128,
        username: str | None = None,
        password: str | None = None,
        timeout: int = 15,
    ):
        """Route the transfer through a proxy, or clear the proxy when falsy.

        ``proxy`` may also be a mapping or sequence holding
        (host, port, username, password, timeout) in that order.
        """
        if not proxy:
            return self.set_options({
                "proxy": None,
                "proxyport": None,
                "timeout": None,
                "proxyuserpwd": None,
            })

        if isinstance(proxy, Mapping):
            proxy = list(proxy.values())
        if isinstance(proxy, Sequence) and not isinstance(proxy, str):
            values = list(proxy) + [None] * 5
            proxy, port, username, password, timeout = values[:5]
            port = port or 3128
            timeout = timeout or 15

        return self.set_options({
            "proxy": f"{proxy}:{port}",
            "proxyport": port,
            "timeout": timeout,
            "proxyuserpwd": f"{username}:{password}" if username and password else None,
        })
