"""
pytest configuration and fixtures.
"""

from pathlib import Path
from typing import Any

import pytest

from curlkit.config import CurlkitConfig
from curlkit.http.engine import TransferOutcome
from curlkit.http.sender import Sender


class FakeHandle:
    """Records what the transport pushed onto a transfer."""

    def __init__(self, url: str):
        self.url = url
        self.options: dict[str, Any] = {}
        self.closed = False


class FakeEngine:
    """Scripted stand-in for libcurl: returns queued outcomes in order."""

    def __init__(self, *outcomes: TransferOutcome):
        self.outcomes = list(outcomes)
        self.handles: list[FakeHandle] = []

    def queue(self, *outcomes: TransferOutcome) -> "FakeEngine":
        self.outcomes.extend(outcomes)
        return self

    def init(self, url: str) -> FakeHandle:
        handle = FakeHandle(url)
        self.handles.append(handle)
        return handle

    def set_option(self, handle: FakeHandle, name: str, value: Any) -> None:
        handle.options[name] = value

    def execute(self, handle: FakeHandle) -> TransferOutcome:
        outcome = self.outcomes.pop(0) if self.outcomes else make_outcome()
        outcome.info.setdefault("url", handle.url)
        return outcome

    def close(self, handle: FakeHandle) -> None:
        handle.closed = True


def make_outcome(
    status: int = 200,
    reason: str = "OK",
    headers: list[tuple[str, str]] | None = None,
    body: bytes | bool = b"",
    error_code: int = 0,
    error_message: str = "",
    request_header: str | None = "GET / HTTP/1.1\r\nHost: example.com\r\nAccept: */*\r\n\r\n",
) -> TransferOutcome:
    """Build an outcome as libcurl would report it."""
    info: dict[str, Any] = {"http_code": status, "total_time": 0.012}
    if request_header:
        info["request_header"] = request_header

    response_header = ""
    if status:
        lines = [f"HTTP/1.1 {status} {reason}".rstrip()]
        lines += [f"{name}: {value}" for name, value in headers or []]
        response_header = "\r\n".join(lines) + "\r\n\r\n"

    return TransferOutcome(
        body=body,
        error_code=error_code,
        error_message=error_message,
        info=info,
        response_header=response_header,
    )


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def config(tmp_path: Path) -> CurlkitConfig:
    """Configuration that never touches the user's environment."""
    return CurlkitConfig(
        user_agent="curlkit-tests",
        timeout=5,
        connect_timeout=2,
        follow_redirects=True,
        max_redirects=3,
        download_dir=str(tmp_path / "downloads"),
        proxy="",
    )


@pytest.fixture
def sender(config: CurlkitConfig, fake_engine: FakeEngine) -> Sender:
    return Sender(config=config, engine=fake_engine)


@pytest.fixture
def upload_file(tmp_path: Path) -> Path:
    """A small text file to attach to multipart bodies."""
    path = tmp_path / "notes.txt"
    path.write_text("hello upload\n")
    return path


@pytest.fixture
def outcome():
    """Factory for scripted transfer outcomes."""
    return make_outcome
