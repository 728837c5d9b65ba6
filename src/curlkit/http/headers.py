"""
Request header formatting and raw header block parsing.
"""

import re
from collections.abc import Iterable, Mapping
from typing import Any


HEADER_PATTERN = re.compile(r"(?P<header>.*?):\s(?P<value>.*)")
STATUS_LINE_PATTERN = re.compile(
    r"^HTTP/(?P<version>\d(?:\.\d)?)\s(?P<code>\d+)(?:\s(?P<status>.*))?"
)
LINE_SPLIT_PATTERN = re.compile(r"[\n\r]+")

# Keys synthesized from the status line
STATUS_KEYS = ("Http-Version", "Status-Code", "Status")

HeaderValue = str | list[str]


def normalize_header_name(name: str) -> str:
    """Canonicalize a header name: HTTP_ACCEPT_CHARSET -> Accept-Charset."""
    name = re.sub(r"^HTTP_", "", name, flags=re.IGNORECASE)
    name = name.replace("_", "-")
    name = re.sub(
        r"[a-z]+",
        lambda m: m.group(0).lower().capitalize(),
        name,
        flags=re.IGNORECASE,
    )
    if name == "Et":
        name = "ET"
    return name


class HeaderTable:
    """Custom request headers, kept as literal ``Name: value`` lines."""

    def __init__(self, headers: Mapping[str, Any] | None = None):
        self._lines: dict[str, str] = {}
        if headers:
            self.update(headers)

    def set(self, name: str, value: Any) -> "HeaderTable":
        header = normalize_header_name(name)
        if value is not None:
            self._lines[header] = f"{header}: {value}"
        else:
            self._lines.pop(header, None)
        return self

    def update(self, headers: Mapping[str, Any]) -> "HeaderTable":
        for name, value in headers.items():
            self.set(name, value)
        return self

    def remove(self, name: str) -> "HeaderTable":
        return self.set(name, None)

    def get(self, name: str) -> str | None:
        """Return the value of a header, without the name prefix."""
        header = normalize_header_name(name)
        line = self._lines.get(header)
        if line is None:
            return None
        return line[len(header) + 2:]

    def as_list(self) -> list[str]:
        return list(self._lines.values())

    def as_dict(self) -> dict[str, str]:
        return dict(self._lines)

    def copy(self) -> "HeaderTable":
        table = HeaderTable()
        table._lines = dict(self._lines)
        return table

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_header_name(name) in self._lines

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self):
        return iter(list(self._lines))

    def __repr__(self) -> str:
        return f"HeaderTable({self.as_list()!r})"


def parse_headers(raw: str | bytes | Iterable[str]) -> dict[str, HeaderValue]:
    """Parse a raw header block into a mapping.

    Leading status lines (there may be several, e.g. after a proxy CONNECT or
    ``100 Continue``) fill ``Http-Version``, ``Status-Code`` and ``Status``;
    the last one wins. Repeated headers become lists in arrival order.
    Lines that are neither a status line nor ``Name: value`` are ignored.
    """
    if isinstance(raw, bytes):
        raw = raw.decode("iso-8859-1")
    if isinstance(raw, str):
        lines = [line for line in LINE_SPLIT_PATTERN.split(raw) if line]
    else:
        lines = [line.rstrip("\r\n") for line in raw]
        lines = [line for line in lines if line]

    headers: dict[str, HeaderValue] = {}
    while lines:
        m = STATUS_LINE_PATTERN.match(lines[0])
        if not m:
            break
        headers["Http-Version"] = m.group("version")
        headers["Status-Code"] = m.group("code")
        if m.group("status"):
            headers["Status"] = f"{m.group('code')} {m.group('status')}"
        else:
            headers["Status"] = m.group("code")
        lines.pop(0)

    for line in lines:
        m = HEADER_PATTERN.match(line)
        if not m:
            continue
        name, value = m.group("header"), m.group("value")
        if name in STATUS_KEYS:
            continue

        if name not in headers:
            headers[name] = value
        elif isinstance(headers[name], list):
            headers[name].append(value)
        else:
            headers[name] = [headers[name], value]

    return headers


def header_value(headers: Mapping[str, HeaderValue], name: str) -> str | None:
    """Case-insensitive lookup returning the last value of a header."""
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value[-1] if isinstance(value, list) else value
    return None


def header_values(headers: Mapping[str, HeaderValue], name: str) -> list[str]:
    """Case-insensitive lookup returning every value of a header."""
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return list(value) if isinstance(value, list) else [value]
    return []
