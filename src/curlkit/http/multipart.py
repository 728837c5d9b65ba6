"""
POST body construction: nested form fields, file uploads, multipart.
"""

import mimetypes
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlencode

import filetype

from curlkit.exceptions import InvalidArgumentError, NotSupportedError


MULTIPART_CONTENT_TYPE = "multipart/form-data"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class FilePart:
    """A file attached to a multipart body."""
    path: str
    content_type: str = DEFAULT_CONTENT_TYPE
    filename: str = ""

    @classmethod
    def from_path(cls, path: str | Path) -> "FilePart":
        """Resolve a path and sniff its MIME type from the content."""
        try:
            resolved = Path(path).resolve(strict=True)
        except (FileNotFoundError, RuntimeError) as e:
            raise InvalidArgumentError(f"File '{path}' cannot be uploaded: {e}") from e
        if not resolved.is_file():
            raise InvalidArgumentError(f"File '{path}' is not a regular file.")

        content_type = filetype.guess_mime(str(resolved))
        if content_type is None:
            # binary signatures only, plain text formats go by extension
            content_type, _ = mimetypes.guess_type(resolved.name)
        if not content_type or "/" not in content_type:
            content_type = DEFAULT_CONTENT_TYPE
        return cls(path=str(resolved), content_type=content_type, filename=Path(path).name)


@dataclass
class PostBody:
    """Options describing a request body, plus a forced Content-Type if any."""
    options: dict[str, Any] = field(default_factory=dict)
    content_type: str | None = None

    @property
    def is_multipart(self) -> bool:
        return self.content_type == MULTIPART_CONTENT_TYPE


def flatten_fields(data: Mapping[str, Any], prefix: str | None = None) -> dict[str, Any]:
    """Flatten nested fields into bracket keys: {"a": {"b": 1}} -> {"a[b]": 1}."""
    flat: dict[str, Any] = {}
    for key, value in data.items():
        name = f"{prefix}[{key}]" if prefix is not None else str(key)
        if isinstance(value, Mapping):
            flat.update(flatten_fields(value, name))
        elif isinstance(value, (list, tuple)):
            flat.update(flatten_fields(dict(enumerate(value)), name))
        else:
            flat[name] = value
    return flat


def merge_tree(left: Mapping[str, Any], right: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge two trees; on conflicting leaves ``left`` wins."""
    merged = dict(left)
    for key, value in right.items():
        if key not in merged:
            merged[key] = value
        elif isinstance(merged[key], Mapping) and isinstance(value, Mapping):
            merged[key] = merge_tree(merged[key], value)
    return merged


def resolve_files(files: Mapping[str, Any]) -> dict[str, Any]:
    """Replace every leaf path in a (nested) file mapping with a FilePart."""
    resolved: dict[str, Any] = {}
    for key, value in files.items():
        if isinstance(value, Mapping):
            resolved[key] = resolve_files(value)
        elif isinstance(value, (list, tuple)):
            resolved[key] = resolve_files(dict(enumerate(value)))
        elif isinstance(value, FilePart):
            resolved[key] = value
        else:
            resolved[key] = FilePart.from_path(value)
    return resolved


def build_post(post: Any = None, files: Mapping[str, Any] | None = None) -> PostBody:
    """Turn a body and optional files into transfer options.

    Without files a mapping body is url-encoded from its flattened fields and
    a string body is sent verbatim. With files the body becomes multipart and
    Content-Type is forced to multipart/form-data; a string body cannot be
    combined with files.
    """
    if files:
        if post is not None and not isinstance(post, Mapping):
            raise NotSupportedError("Files cannot be combined with a raw string body.")
        parts = flatten_fields(merge_tree(post or {}, resolve_files(files)))
        return PostBody(
            options={
                "post": True,
                "postfields": None,
                "httppost": list(parts.items()),
            },
            content_type=MULTIPART_CONTENT_TYPE,
        )

    if post:
        if isinstance(post, Mapping):
            fields = urlencode(list(flatten_fields(post).items()))
        else:
            fields = post
        return PostBody(options={"post": True, "postfields": fields, "httppost": None})

    return PostBody(options={"post": None, "postfields": None, "httppost": None})
