"""
Native transfer engine binding (libcurl via pycurl).

The transport talks to the engine only through the TransferEngine protocol,
so any object with the same methods can stand in for libcurl.
"""

import io
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

import pycurl

from curlkit.exceptions import InvalidOptionError
from curlkit.http.multipart import FilePart


logger = logging.getLogger(__name__)

# curl_infotype passed to the debug callback for outgoing headers
CURLINFO_HEADER_OUT = 2

INFO_FIELDS = {
    "url": pycurl.EFFECTIVE_URL,
    "http_code": pycurl.RESPONSE_CODE,
    "content_type": pycurl.CONTENT_TYPE,
    "total_time": pycurl.TOTAL_TIME,
    "namelookup_time": pycurl.NAMELOOKUP_TIME,
    "connect_time": pycurl.CONNECT_TIME,
    "pretransfer_time": pycurl.PRETRANSFER_TIME,
    "starttransfer_time": pycurl.STARTTRANSFER_TIME,
    "redirect_count": pycurl.REDIRECT_COUNT,
    "redirect_url": pycurl.REDIRECT_URL,
    "size_download": pycurl.SIZE_DOWNLOAD_T,
    "size_upload": pycurl.SIZE_UPLOAD_T,
    "primary_ip": pycurl.PRIMARY_IP,
    "primary_port": pycurl.PRIMARY_PORT,
    "local_ip": pycurl.LOCAL_IP,
    "local_port": pycurl.LOCAL_PORT,
}


@dataclass
class TransferOutcome:
    """Raw result of one transfer."""
    body: bytes | bool = False
    error_code: int = 0
    error_message: str = ""
    info: dict[str, Any] = field(default_factory=dict)
    response_header: str = ""


class TransferEngine(Protocol):
    """Operations the transport needs from a transfer engine."""

    def init(self, url: str) -> Any: ...

    def set_option(self, handle: Any, name: str, value: Any) -> None: ...

    def execute(self, handle: Any) -> TransferOutcome: ...

    def close(self, handle: Any) -> None: ...


class PycurlHandle:
    """A pycurl.Curl plus the buffers its callbacks fill."""

    def __init__(self, curl: pycurl.Curl):
        self.curl: pycurl.Curl | None = curl
        self.body = io.BytesIO()
        self.response_lines: list[str] = []
        self.request_header_chunks: list[str] = []
        self.error_code = 0
        self.error_message = ""

    def on_header(self, line: bytes) -> None:
        text = line.decode("iso-8859-1")
        # keep only the last response when libcurl follows redirects itself
        if text.startswith("HTTP/") and any(
            not seen.startswith("HTTP/") and seen.strip() for seen in self.response_lines
        ):
            self.response_lines.clear()
        self.response_lines.append(text)

    def on_debug(self, kind: int, data: bytes) -> None:
        if kind == CURLINFO_HEADER_OUT:
            self.request_header_chunks.append(data.decode("iso-8859-1"))


class PycurlEngine:
    """TransferEngine backed by libcurl."""

    def init(self, url: str) -> PycurlHandle:
        curl = pycurl.Curl()
        handle = PycurlHandle(curl)
        curl.setopt(pycurl.URL, url)
        curl.setopt(pycurl.WRITEDATA, handle.body)
        curl.setopt(pycurl.HEADERFUNCTION, handle.on_header)
        curl.setopt(pycurl.VERBOSE, 1)
        curl.setopt(pycurl.DEBUGFUNCTION, handle.on_debug)
        return handle

    def set_option(self, handle: PycurlHandle, name: str, value: Any) -> None:
        constant = getattr(pycurl, name.upper(), None)
        if not isinstance(constant, int):
            raise InvalidOptionError(f"libcurl binding has no option '{name}'.")

        if name == "httppost":
            value = [(key, self._form_value(part)) for key, part in value]
        elif name == "httpheader":
            value = [str(line) for line in value]
        elif isinstance(value, bool):
            value = int(value)

        handle.curl.setopt(constant, value)

    def execute(self, handle: PycurlHandle) -> TransferOutcome:
        curl = handle.curl
        try:
            curl.perform()
            body: bytes | bool = handle.body.getvalue()
        except pycurl.error as e:
            handle.error_code = e.args[0]
            handle.error_message = e.args[1] if len(e.args) > 1 else ""
            body = False
            logger.debug(f"libcurl error {handle.error_code}: {handle.error_message}")

        info = self.get_info(handle)
        if handle.request_header_chunks:
            info["request_header"] = "".join(handle.request_header_chunks)

        return TransferOutcome(
            body=body,
            error_code=self.get_error_code(handle),
            error_message=self.get_error_message(handle),
            info=info,
            response_header="".join(handle.response_lines),
        )

    def get_info(self, handle: PycurlHandle) -> dict[str, Any]:
        info: dict[str, Any] = {}
        for key, constant in INFO_FIELDS.items():
            try:
                info[key] = handle.curl.getinfo(constant)
            except pycurl.error:
                info[key] = None
        return info

    def get_error_code(self, handle: PycurlHandle) -> int:
        return handle.error_code

    def get_error_message(self, handle: PycurlHandle) -> str:
        return handle.error_message

    def close(self, handle: PycurlHandle) -> None:
        if handle.curl is not None:
            handle.curl.close()
            handle.curl = None

    @staticmethod
    def _form_value(part: Any) -> Any:
        if isinstance(part, FilePart):
            return (
                pycurl.FORM_FILE, part.path,
                pycurl.FORM_CONTENTTYPE, part.content_type,
                pycurl.FORM_FILENAME, part.filename,
            )
        return str(part)
