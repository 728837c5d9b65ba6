"""
Sends requests and turns unsuccessful transfers into exceptions.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import fields
from pathlib import Path
from typing import Any
from urllib.parse import unquote

from curlkit.config import CurlkitConfig, get_config
from curlkit.exceptions import BadStatusError, CurlError, FailedRequestError
from curlkit.http.engine import TransferEngine
from curlkit.http.headers import HeaderTable, header_value
from curlkit.http.options import RequestOptions
from curlkit.http.request import Method, Request
from curlkit.http.response import FileResponse, Response
from curlkit.http.transport import Transport
from curlkit.http.url import Url
from curlkit.logging_config import FailureKind, track_error


logger = logging.getLogger(__name__)

DISPOSITION_FILENAME = re.compile(
    r"""filename\*?=(?:[\w-]+'[\w-]*')?"?(?P<name>[^";]+)"?""", re.IGNORECASE
)


class Sender(RequestOptions):
    """
    Sends requests with shared defaults.

    Usage:
        sender = Sender()
        sender.set_header("Accept", "application/json")
        response = sender.send(Request("https://api.example.com/users"))
    """

    def __init__(self, config: CurlkitConfig | None = None, engine: TransferEngine | None = None):
        super().__init__()
        config = config or get_config()
        self.engine = engine
        self.headers = HeaderTable()
        self.follow_redirects = config.follow_redirects
        self.max_redirects = config.max_redirects
        self.download_dir = config.download_dir

        proxy = config.proxy_host_port
        if proxy:
            self.set_proxy(proxy[0], proxy[1], timeout=config.timeout)
        self.set_user_agent(config.user_agent)
        self.set_timeout(config.timeout)
        self.set_connect_timeout(config.connect_timeout)

    def set_header(self, name: str, value: Any) -> "Sender":
        self.headers.set(name, value)
        return self

    def set_headers(self, headers: Mapping[str, Any]) -> "Sender":
        self.headers.update(headers)
        return self

    def create_transport(self, request: Request) -> Transport:
        """Build a transport from the request layered over the defaults."""
        transport = Transport(request.url, request.method, engine=self.engine)
        transport.set_options(self.get_options())
        transport.set_options(request.get_options())

        transport.headers = self.headers.copy()
        for name in request.headers:
            transport.set_header(name, request.headers.get(name))

        if request.body or request.files:
            transport.set_post(request.body, request.files)
        return transport

    def send(self, request: Request) -> Response:
        """
        Send a request, following redirects when enabled.

        Raises:
            FailedRequestError: libcurl reported an error
            BadStatusError: final status is 300..599
            CurlError: more than max_redirects redirects
        """
        return self._send(request, previous=None, redirects=0)

    def _send(self, request: Request, previous: Response | None, redirects: int) -> Response:
        transport = self.create_transport(request)
        ok = transport.perform()
        response = Response.from_transport(transport, request, previous)

        if not ok:
            if transport.error_number:
                track_error(
                    FailureKind.TRANSFER_FAILED,
                    request,
                    f"errno {transport.error_number}: {transport.error}",
                )
                raise FailedRequestError(transport, request)

            if response.is_redirect and self.follow_redirects and response.location:
                if redirects >= self.max_redirects:
                    track_error(FailureKind.TOO_MANY_REDIRECTS, request, f"limit {self.max_redirects}")
                    raise CurlError(
                        f"Too many redirects, stopped after {self.max_redirects}.",
                        request,
                        response,
                    )
                follow = request.follow_redirect(response)
                logger.info(f"Redirect {response.status_code}: {request.url} -> {follow.url}")
                return self._send(follow, response, redirects + 1)

            track_error(FailureKind.BAD_STATUS, request, response.status)
            raise BadStatusError(f"Response status: {response.status}", request, response)

        if request.is_method(Method.DOWNLOAD):
            return self.save_download(response)
        return response

    def save_download(self, response: Response) -> FileResponse:
        """Write the body into the download directory."""
        directory = Path(self.download_dir)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.download_name(response)

        body = response.body
        if isinstance(body, bool):
            body = b""
        elif isinstance(body, str):
            body = body.encode("utf-8")
        path.write_bytes(body)
        logger.info(f"Saved {len(body):,} bytes to {path}")

        values = {f.name: getattr(response, f.name) for f in fields(response)}
        return FileResponse(**values, file=str(path))

    @staticmethod
    def download_name(response: Response) -> str:
        """File name from Content-Disposition, else from the URL."""
        disposition = header_value(response.headers, "Content-Disposition")
        if disposition:
            m = DISPOSITION_FILENAME.search(disposition)
            if m:
                name = Path(unquote(m.group("name").strip())).name
                if name:
                    return name

        url = response.url or (str(response.request.url) if response.request else "")
        return Url.parse(url).basename or "download"
