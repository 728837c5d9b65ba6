"""
Unit tests for the command line interface.
"""

import pytest
from click.testing import CliRunner

from curlkit.cli import main
from curlkit.http import cli as http_cli
from curlkit.http.cli import parse_form_args, parse_header_args
from curlkit.http.sender import Sender


@pytest.fixture
def runner(monkeypatch, config, fake_engine) -> CliRunner:
    """CLI runner whose senders use the fake engine."""
    monkeypatch.setattr(http_cli, "Sender", lambda: Sender(config=config, engine=fake_engine))
    return CliRunner()


class TestArgumentParsing:
    """Tests for CLI argument helpers."""

    def test_headers(self):
        assert parse_header_args(["Accept: text/html", "bogus", "X-A:  b "]) == {
            "Accept": "text/html",
            "X-A": "b",
        }

    def test_form(self):
        fields, files = parse_form_args(["title=cat", "photo=@/tmp/cat.jpg", "novalue"])

        assert fields == {"title": "cat"}
        assert files == {"photo": "/tmp/cat.jpg"}


class TestHttpCommands:
    """Tests for the http command group."""

    def test_get(self, runner, fake_engine, outcome):
        fake_engine.queue(outcome(200, headers=[("Content-Type", "text/plain")], body=b"hello"))

        result = runner.invoke(main, ["http", "get", "http://example.com/"])

        assert result.exit_code == 0, result.output
        assert "200 OK" in result.output
        assert "hello" in result.output

    def test_post_form(self, runner, fake_engine, outcome, upload_file):
        fake_engine.queue(outcome(201, reason="Created"))

        result = runner.invoke(main, [
            "http", "post", "http://example.com/upload",
            "-F", "title=notes", "-F", f"doc=@{upload_file}",
        ])

        assert result.exit_code == 0, result.output
        handle = fake_engine.handles[0]
        assert "Content-Type: multipart/form-data" in handle.options["httpheader"]
        assert [name for name, _ in handle.options["httppost"]] == ["title", "doc"]

    def test_bad_status_exits_nonzero(self, runner, fake_engine, outcome):
        fake_engine.queue(outcome(404, reason="Not Found"))

        result = runner.invoke(main, ["http", "get", "http://example.com/missing"])

        assert result.exit_code == 1
        assert "404 Not Found" in result.output

    def test_headers_shows_error_status(self, runner, fake_engine, outcome):
        fake_engine.queue(outcome(403, reason="Forbidden", headers=[("Server", "nginx")]))

        result = runner.invoke(main, ["http", "headers", "http://example.com/"])

        assert result.exit_code == 0, result.output
        assert "403 Forbidden" in result.output
        assert "nginx" in result.output
        assert fake_engine.handles[0].options["nobody"] is True

    def test_download(self, runner, fake_engine, outcome, tmp_path):
        fake_engine.queue(outcome(200, body=b"data"))
        target = tmp_path / "out"

        result = runner.invoke(main, [
            "http", "download", "http://example.com/files/data.bin", "-o", str(target),
        ])

        assert result.exit_code == 0, result.output
        assert (target / "data.bin").read_bytes() == b"data"

    def test_interface_sets_ip_resolve(self, runner, fake_engine, outcome):
        fake_engine.queue(outcome(200))

        result = runner.invoke(main, [
            "http", "request", "http://example.com/", "--interface", "192.0.2.1",
        ])

        assert result.exit_code == 0, result.output
        assert fake_engine.handles[0].options["interface"] == "192.0.2.1"
        assert fake_engine.handles[0].options["ipresolve"] == 1
