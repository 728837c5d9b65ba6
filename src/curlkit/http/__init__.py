"""
HTTP layer over libcurl.

Provides:
- Declarative requests with cookie jar ownership and redirect derivation
- Validated libcurl option registry and header formatting
- Raw header block parsing
- Multipart bodies from nested fields and files
- A sender that follows redirects and raises on failed transfers
"""

from curlkit.http.engine import PycurlEngine, TransferEngine, TransferOutcome
from curlkit.http.headers import HeaderTable, normalize_header_name, parse_headers
from curlkit.http.multipart import FilePart, build_post, flatten_fields, merge_tree
from curlkit.http.options import CurlOption, OptionRegistry, RequestOptions
from curlkit.http.request import Method, Request
from curlkit.http.response import FileResponse, Response
from curlkit.http.sender import Sender
from curlkit.http.transport import Transport, TransportState
from curlkit.http.url import Url, fix_url

__all__ = [
    "CurlOption",
    "FilePart",
    "FileResponse",
    "HeaderTable",
    "Method",
    "OptionRegistry",
    "PycurlEngine",
    "Request",
    "RequestOptions",
    "Response",
    "Sender",
    "TransferEngine",
    "TransferOutcome",
    "Transport",
    "TransportState",
    "Url",
    "build_post",
    "fix_url",
    "flatten_fields",
    "merge_tree",
    "normalize_header_name",
    "parse_headers",
]
