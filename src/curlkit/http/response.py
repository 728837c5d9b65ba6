"""
Normalized result of a transfer.
"""

from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING

from curlkit.http.headers import HeaderValue, header_value, header_values

if TYPE_CHECKING:
    from curlkit.http.request import Request
    from curlkit.http.transport import Transport


@dataclass(frozen=True)
class Response:
    """HTTP response details."""
    status_code: int
    status: str = ""
    headers: dict[str, HeaderValue] = field(default_factory=dict)
    body: bytes | str | bool = b""
    info: dict[str, Any] = field(default_factory=dict)
    request_headers: dict[str, HeaderValue] = field(default_factory=dict)
    error: str | None = None
    error_number: int = 0
    request: "Request | None" = field(default=None, repr=False, compare=False)
    previous: "Response | None" = field(default=None, repr=False, compare=False)

    @classmethod
    def from_transport(
        cls,
        transport: "Transport",
        request: "Request | None" = None,
        previous: "Response | None" = None,
    ) -> "Response":
        headers = dict(transport.response_headers)
        status_code = int(headers.get("Status-Code") or transport.http_code or 0)
        return cls(
            status_code=status_code,
            status=str(headers.get("Status", status_code or "")),
            headers=headers,
            body=transport.response if transport.response is not None else False,
            info=dict(transport.info or {}),
            request_headers=dict(transport.request_headers),
            error=transport.error,
            error_number=transport.error_number or 0,
            request=request,
            previous=previous,
        )

    @property
    def http_version(self) -> str | None:
        return self.headers.get("Http-Version")  # type: ignore[return-value]

    @property
    def content_type(self) -> str | None:
        return header_value(self.headers, "Content-Type")

    @property
    def location(self) -> str | None:
        return header_value(self.headers, "Location")

    @property
    def url(self) -> str | None:
        """Effective URL reported by libcurl."""
        return self.info.get("url")

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status_code < 400

    @property
    def is_ok(self) -> bool:
        """Same rule as the transport: no libcurl error, status below 300."""
        return self.error_number == 0 and not 300 <= self.status_code < 600

    @property
    def cookies(self) -> dict[str, str]:
        """Cookies set by this response, name -> value."""
        cookies = {}
        for line in header_values(self.headers, "Set-Cookie"):
            pair = line.split(";", 1)[0]
            if "=" not in pair:
                continue
            name, value = pair.split("=", 1)
            cookies[name.strip()] = value.strip()
        return cookies

    @property
    def text(self) -> str:
        if isinstance(self.body, bool):
            return ""
        if isinstance(self.body, str):
            return self.body
        try:
            return self.body.decode(self._charset(), errors="replace")
        except LookupError:
            return self.body.decode("utf-8", errors="replace")

    def redirect_chain(self) -> list["Response"]:
        """Earlier responses of a followed redirect chain, oldest first."""
        chain = []
        previous = self.previous
        while previous is not None:
            chain.append(previous)
            previous = previous.previous
        return list(reversed(chain))

    def _charset(self) -> str:
        content_type = self.content_type or ""
        for param in content_type.split(";")[1:]:
            key, _, value = param.strip().partition("=")
            if key.lower() == "charset" and value:
                return value.strip('"')
        return "utf-8"


@dataclass(frozen=True)
class FileResponse(Response):
    """Response of a download; the body was written to ``file``."""
    file: str | None = None
