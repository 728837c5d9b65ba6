"""
curlkit - declarative HTTP requests over libcurl

Describe a request (URL, method, headers, body, files, proxy, cookies) and
get a normalized response back, without touching libcurl option constants.
"""

__version__ = "0.1.0"
__author__ = "curlkit developers"

from curlkit.exceptions import (
    BadStatusError,
    CurlError,
    CurlkitError,
    FailedRequestError,
    InvalidArgumentError,
    InvalidOptionError,
    InvalidStateError,
    InvalidUrlError,
    NotSupportedError,
)
from curlkit.http import (
    Method,
    Request,
    Response,
    FileResponse,
    Sender,
    Transport,
)

__all__ = [
    "BadStatusError",
    "CurlError",
    "CurlkitError",
    "FailedRequestError",
    "FileResponse",
    "InvalidArgumentError",
    "InvalidOptionError",
    "InvalidStateError",
    "InvalidUrlError",
    "Method",
    "NotSupportedError",
    "Request",
    "Response",
    "Sender",
    "Transport",
]
