"""
Unit tests for the pycurl engine, using file:// URLs so no network is needed.
"""

from pathlib import Path

import pycurl
import pytest

from curlkit.exceptions import InvalidOptionError
from curlkit.http.engine import PycurlEngine
from curlkit.http.multipart import FilePart
from curlkit.http.transport import Transport


class TestPycurlEngine:
    """Tests for PycurlEngine."""

    @pytest.mark.filterwarnings("error::DeprecationWarning")
    def test_reads_file_url(self, upload_file: Path):
        engine = PycurlEngine()
        handle = engine.init(upload_file.resolve().as_uri())
        try:
            outcome = engine.execute(handle)
        finally:
            engine.close(handle)

        assert outcome.body == b"hello upload\n"
        assert outcome.error_code == 0
        assert "total_time" in outcome.info
        assert outcome.info["size_download"] == len(b"hello upload\n")
        assert handle.curl is None

    def test_error_is_captured(self, tmp_path: Path):
        engine = PycurlEngine()
        handle = engine.init((tmp_path / "missing.txt").as_uri())
        try:
            outcome = engine.execute(handle)
        finally:
            engine.close(handle)

        assert outcome.body is False
        assert outcome.error_code == pycurl.E_FILE_COULDNT_READ_FILE
        assert outcome.error_message

    def test_close_twice(self, upload_file: Path):
        engine = PycurlEngine()
        handle = engine.init(upload_file.resolve().as_uri())
        engine.close(handle)
        engine.close(handle)

        assert handle.curl is None

    def test_unknown_binding_option(self, upload_file: Path):
        engine = PycurlEngine()
        handle = engine.init(upload_file.resolve().as_uri())
        try:
            with pytest.raises(InvalidOptionError):
                engine.set_option(handle, "no_such_thing", 1)
        finally:
            engine.close(handle)

    def test_form_file_tuple(self):
        part = FilePart(path="/tmp/a.txt", content_type="text/plain", filename="a.txt")

        assert PycurlEngine._form_value(part) == (
            pycurl.FORM_FILE, "/tmp/a.txt",
            pycurl.FORM_CONTENTTYPE, "text/plain",
            pycurl.FORM_FILENAME, "a.txt",
        )
        assert PycurlEngine._form_value(3) == "3"

    def test_transport_over_file_url(self, upload_file: Path):
        """A whole transport lifecycle over libcurl."""
        transport = Transport(upload_file.resolve().as_uri())
        transport.set_timeout(5)

        assert transport.perform() is True
        assert transport.response == b"hello upload\n"
        assert transport.error_number == 0
