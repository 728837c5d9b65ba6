"""
Declarative HTTP request.

A Request owns a temporary cookie jar shared with every request derived from
it by following redirects; only the original deletes the file, when it is
closed.
"""

import copy
import logging
import os
import tempfile
from collections.abc import Mapping
from enum import Enum
from typing import Any, TYPE_CHECKING

from curlkit.exceptions import InvalidUrlError
from curlkit.http.headers import HeaderTable, header_value
from curlkit.http.options import OptionRegistry, RequestOptions
from curlkit.http.url import Url, fix_url

if TYPE_CHECKING:
    from curlkit.http.response import Response
    from curlkit.http.sender import Sender


logger = logging.getLogger(__name__)


class Method(str, Enum):
    """HTTP request method. DOWNLOAD is a GET whose body is saved to a file."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    HEAD = "HEAD"
    DELETE = "DELETE"
    PATCH = "PATCH"
    DOWNLOAD = "DOWNLOAD"

    def __str__(self) -> str:
        return self.value


class Request(RequestOptions):
    """
    HTTP request description.

    Usage:
        with Request("https://example.com/login") as request:
            response = request.post({"user": "me", "password": "secret"})
            print(response.status_code, response.cookies)
    """

    def __init__(
        self,
        url: "str | Url",
        method: str = Method.GET,
        headers: Mapping[str, Any] | None = None,
        body: Any = None,
        files: Mapping[str, Any] | None = None,
        proxy: Any = None,
        cookie_jar: bool = True,
    ):
        super().__init__()
        self.url = Url.parse(url)
        self.method = str(method).upper()
        self.headers = HeaderTable(headers)
        self.body = body
        self.files: dict[str, Any] = dict(files or {})
        self.sender: "Sender | None" = None
        self.cookie_unlink = True
        self._cookie_file: str | None = None

        if proxy:
            self.set_proxy(proxy)
        if cookie_jar:
            self.update_cookie_file()

    def set_url(self, url: "str | Url") -> "Request":
        self.url = Url.parse(url)
        return self

    def is_method(self, method: str) -> bool:
        return self.method == str(method).upper()

    def set_method(self, method: str) -> "Request":
        self.method = str(method).upper()
        return self

    def set_header(self, name: str, value: Any) -> "Request":
        self.headers.set(name, value)
        return self

    def set_headers(self, headers: Mapping[str, Any]) -> "Request":
        self.headers.update(headers)
        return self

    def set_post(self, body: Any, files: Mapping[str, Any] | None = None) -> "Request":
        self.body = body
        self.files = dict(files or {})
        self.method = Method.POST.value
        return self

    def set_sender(self, sender: "Sender") -> "Request":
        self.sender = sender
        return self

    # Cookie jar

    @property
    def cookie_file(self) -> str | None:
        return self._cookie_file

    @property
    def owns_cookie_file(self) -> bool:
        return self._cookie_file is not None and self.cookie_unlink

    def update_cookie_file(self) -> "Request":
        """Switch to a fresh temporary cookie jar."""
        fd, path = tempfile.mkstemp(prefix="cookie")
        os.close(fd)
        return self.set_cookie_file(path)

    def set_cookie_file(self, cookie_file: str | None) -> "Request":
        """Use ``cookie_file`` as cookie jar; an owned previous jar is deleted."""
        self._release_cookie_file()
        self._cookie_file = cookie_file
        self.set_options({"cookiejar": cookie_file, "cookiefile": cookie_file})
        return self

    def close(self) -> None:
        """Delete the cookie jar if this request owns it."""
        self._release_cookie_file()
        self._cookie_file = None

    def _release_cookie_file(self) -> None:
        if self._cookie_file is not None and self.cookie_unlink:
            try:
                os.unlink(self._cookie_file)
                logger.debug(f"Removed cookie jar {self._cookie_file}")
            except FileNotFoundError:
                pass

    def __enter__(self) -> "Request":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # Sending

    def send(self) -> "Response":
        if self.sender is None:
            from curlkit.http.sender import Sender
            self.sender = Sender()
        return self.sender.send(self)

    def get(self, query: "str | Mapping[str, Any] | None" = None) -> "Response":
        self.method = Method.GET.value
        self.body = None
        self.files = {}
        if query is not None:
            self.url = self.url.with_query(query)
        return self.send()

    def post(self, body: Any = None, files: Mapping[str, Any] | None = None) -> "Response":
        self.method = Method.POST.value
        self.body = body
        self.files = dict(files or {})
        return self.send()

    def put(self, body: Any = None) -> "Response":
        self.method = Method.PUT.value
        self.body = body
        self.files = {}
        return self.send()

    def delete(self) -> "Response":
        self.method = Method.DELETE.value
        self.body = None
        self.files = {}
        return self.send()

    def patch(self, body: Any = None) -> "Response":
        self.method = Method.PATCH.value
        self.body = body
        return self.send()

    def download(self, body: Any = None) -> "Response":
        self.method = Method.DOWNLOAD.value
        self.body = body
        return self.send()

    # Redirects

    def follow_redirect(self, response: "Response") -> "Request":
        """Create the request that follows the response's Location header."""
        location = header_value(response.headers, "Location")
        if not location:
            raise InvalidUrlError("Response has no Location header to follow.")
        return self.redirect_to(location)

    def redirect_to(self, location: "str | Url") -> "Request":
        """Derive a body-less request for ``location``.

        The method becomes GET unless this is a download. The derived request
        shares the cookie jar but never deletes it.
        """
        request = self.clone()
        if not request.is_method(Method.DOWNLOAD):
            request.set_method(Method.GET)
        request.cookie_unlink = False
        request.body = None
        request.files = {}
        request.set_url(fix_url(self.url, location))
        return request

    def clone(self) -> "Request":
        # bypass __getstate__, which drops the sender and jar ownership
        request = Request.__new__(Request)
        request.__dict__.update(self.__dict__)
        request.headers = self.headers.copy()
        request.options = OptionRegistry(self.options.get())
        request.body = copy.deepcopy(self.body)
        request.files = copy.deepcopy(self.files)
        return request

    def __getstate__(self) -> dict[str, Any]:
        return {
            "url": str(self.url),
            "method": self.method,
            "headers": self.headers.copy(),
            "options": self.options.get(),
            "body": self.body,
            "files": self.files,
        }

    def __setstate__(self, state: dict[str, Any]) -> None:
        self.url = Url.parse(state["url"])
        self.method = state["method"]
        self.headers = state["headers"]
        self.options = OptionRegistry(state["options"])
        self.body = state["body"]
        self.files = state["files"]
        self.sender = None
        self._cookie_file = state["options"].get("cookiejar")
        self.cookie_unlink = False

    def __repr__(self) -> str:
        return f"<Request {self.method} {self.url}>"
