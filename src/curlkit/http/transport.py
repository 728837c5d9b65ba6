"""
Single-transfer orchestration over the native engine.

A Transport moves through IDLE -> CONFIGURING -> EXECUTING -> FINALIZED,
exactly once. Configuration errors are raised before any network activity;
engine errors are recorded on the instance and reflected in the value
returned by finalize().
"""

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any

from netaddr import valid_ipv4, valid_ipv6

from curlkit.exceptions import CurlError, InvalidArgumentError, InvalidStateError
from curlkit.http.engine import PycurlEngine, TransferEngine, TransferOutcome
from curlkit.http.headers import HeaderTable, HeaderValue, parse_headers
from curlkit.http.multipart import build_post
from curlkit.http.options import (
    E_COULDNT_RESOLVE_HOST,
    E_COULDNT_RESOLVE_PROXY,
    E_OK,
    IPRESOLVE_V4,
    IPRESOLVE_V6,
    RequestOptions,
)
from curlkit.http.request import Method
from curlkit.http.url import Url


logger = logging.getLogger(__name__)


class TransportState(str, Enum):
    """Lifecycle of a transport."""
    IDLE = "idle"
    CONFIGURING = "configuring"
    EXECUTING = "executing"
    FINALIZED = "finalized"


class Transport(RequestOptions):
    """
    One libcurl transfer.

    Usage:
        transport = Transport("https://example.com/", Method.GET)
        transport.set_header("accept", "text/html")
        ok = transport.perform()
        print(transport.response_headers["Status"], transport.error)
    """

    def __init__(
        self,
        url: "str | Url | None" = None,
        method: str = Method.GET,
        engine: TransferEngine | None = None,
    ):
        super().__init__()
        self.engine = engine or PycurlEngine()
        self.headers = HeaderTable()
        self.state = TransportState.IDLE
        self._url = Url()
        self._method = Method.GET.value
        self._handle: Any = None

        # Results of the last transfer
        self.error: str | None = None
        self.error_number: int | None = None
        self.info: dict[str, Any] | None = None
        self.response: bytes | str | bool | None = None
        self.response_headers: dict[str, HeaderValue] = {}
        self.request_headers: dict[str, HeaderValue] = {}

        self.set_url(url)
        self.set_method(method)

    @property
    def url(self) -> Url:
        return self._url

    def set_url(self, url: "str | Url | None") -> "Transport":
        self._url = Url.parse(url)
        return self

    @property
    def method(self) -> str:
        return self._method

    def set_method(self, method: str) -> "Transport":
        self._method = str(getattr(method, "value", method)).upper()
        return self

    def set_header(self, name: str, value: Any) -> "Transport":
        self.headers.set(name, value)
        return self

    def set_headers(self, headers: Mapping[str, Any]) -> "Transport":
        self.headers.update(headers)
        return self

    def set_post(self, post: Any = None, files: Mapping[str, Any] | None = None) -> "Transport":
        body = build_post(post, files)
        if body.content_type:
            self.set_header("Content-Type", body.content_type)
        return self.set_options(body.options)

    def is_ok(self) -> bool:
        return self.error_number == E_OK

    def is_proxy_fail(self) -> bool:
        return self.error_number in (E_COULDNT_RESOLVE_PROXY, E_COULDNT_RESOLVE_HOST)

    @property
    def http_code(self) -> int:
        if not self.info:
            return 0
        return int(self.info.get("http_code") or 0)

    def configure(self) -> Any:
        """Allocate the native handle and push every option onto it."""
        if self.state is not TransportState.IDLE:
            raise InvalidStateError(f"Transport is already {self.state.value}.")

        self.error = self.error_number = self.info = self.response = None
        self.response_headers = {}
        self.request_headers = {}

        has_body = "postfields" in self.options or "httppost" in self.options
        if self._method in (Method.GET, Method.HEAD) and has_body:
            raise InvalidStateError(f"Method {self._method} cannot send POST data or files.")

        self._check_interface()

        if len(self.headers) > 0:
            self.set_option("httpheader", self.headers.as_list())

        if self._method == Method.HEAD:
            self.set_option("nobody", True)
        elif self._method == Method.GET or (self._method == Method.DOWNLOAD and not has_body):
            self.set_option("httpget", True)
        elif self._method in (Method.POST, Method.DOWNLOAD):
            self.set_option("post", True)
            if not has_body:
                # without postfields libcurl reads the body from stdin
                self.set_option("postfields", "")
        else:
            self.set_option("customrequest", self._method)

        handle = self.engine.init(str(self._url))
        try:
            for name, value in self.options.get().items():
                self.engine.set_option(handle, name, value)
        except Exception:
            self.engine.close(handle)
            raise

        self._handle = handle
        self.state = TransportState.CONFIGURING
        logger.debug(f"Configured {self._method} {self._url} with {len(self.options)} options")
        return handle

    def execute(self) -> TransferOutcome | None:
        """Run the configured transfer; does nothing unless configured."""
        if self.state is not TransportState.CONFIGURING:
            logger.debug(f"execute() ignored in state {self.state.value}")
            return None

        self.state = TransportState.EXECUTING
        logger.debug(f"Executing {self._method} {self._url}")
        return self.engine.execute(self._handle)

    def finalize(self, outcome: TransferOutcome) -> bool:
        """
        Record the outcome and release the native handle.

        Returns:
            False when libcurl reported an error or the status is 300..599
        """
        if self.state is TransportState.FINALIZED:
            raise InvalidStateError("Transfer was already finalized.")
        if self.state is not TransportState.EXECUTING or self._handle is None:
            raise InvalidStateError(
                "Transfer was not executed, call configure() and execute() first."
            )
        try:
            if not isinstance(outcome.body, (bytes, str, bool)):
                raise InvalidArgumentError(
                    f"Response must be bytes, str or False, {type(outcome.body).__name__} given."
                )
            self.response = outcome.body
            self.error_number = outcome.error_code
            if self.error_number:
                self.error = outcome.error_message

            self.info = dict(outcome.info)
            request_header = self.info.pop("request_header", None)
            if request_header:
                self.request_headers = parse_headers(request_header)
            if outcome.response_header:
                self.response_headers = parse_headers(outcome.response_header)
        finally:
            self.engine.close(self._handle)
            self._handle = None
            self.state = TransportState.FINALIZED

        logger.debug(
            f"Finalized {self._method} {self._url}: "
            f"http_code={self.http_code} errno={self.error_number}"
        )

        if 300 <= self.http_code < 600:
            return False

        return self.error_number == E_OK

    def perform(self) -> bool:
        """Configure, execute and finalize in one go."""
        self.configure()
        return self.finalize(self.execute())

    def _check_interface(self) -> None:
        interface = self.option("interface")
        if interface is None:
            return

        ip_resolve = self.option("ipresolve")
        interface = str(interface)
        if valid_ipv4(interface):
            if ip_resolve is None:
                self.set_option("ipresolve", IPRESOLVE_V4)
            elif ip_resolve != IPRESOLVE_V4:
                raise CurlError(
                    "Interface is an IPv4 address but ipresolve is not IPv4; "
                    "change the ipresolve or interface option."
                )
        elif valid_ipv6(interface):
            if ip_resolve is None:
                self.set_option("ipresolve", IPRESOLVE_V6)
            elif ip_resolve != IPRESOLVE_V6:
                raise CurlError(
                    "Interface is an IPv6 address but ipresolve is not IPv6; "
                    "change the ipresolve or interface option."
                )
