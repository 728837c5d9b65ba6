"""
Exception hierarchy for curlkit.

Configuration problems are raised before any network activity. Transfer
failures are captured by the transport and only turned into exceptions by
the sender.
"""

from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from curlkit.http.request import Request
    from curlkit.http.response import Response
    from curlkit.http.transport import Transport


class CurlkitError(Exception):
    """Base exception for curlkit errors."""
    pass


class InvalidArgumentError(CurlkitError, ValueError):
    """An argument has the wrong type or value."""
    pass


class InvalidOptionError(InvalidArgumentError):
    """Option name is not a known libcurl option."""
    pass


class InvalidStateError(CurlkitError, RuntimeError):
    """Operation called out of sequence."""
    pass


class InvalidUrlError(InvalidArgumentError):
    """URL cannot be resolved to an absolute address."""
    pass


class NotSupportedError(CurlkitError):
    """Requested combination is not supported."""
    pass


class CurlError(CurlkitError, RuntimeError):
    """Transfer failed or cannot be started.

    Carries the originating request and, when one was received, the response.
    """

    def __init__(
        self,
        message: str | None = None,
        request: "Request | None" = None,
        response: "Response | None" = None,
    ):
        super().__init__(message or "")
        self.request = request
        self.response = response
        self.code = 0
        if response is not None:
            self.code = response.status_code


class FailedRequestError(CurlError):
    """libcurl reported a non-zero error code."""

    def __init__(self, transport: "Transport", request: "Request | None" = None):
        url = transport.url
        super().__init__(f"{transport.error} {url.authority}", request)
        self.code = transport.error_number
        self.info: dict[str, Any] = dict(transport.info or {})


class BadStatusError(CurlError):
    """Response status is a redirect or an error (300..599)."""
    pass
