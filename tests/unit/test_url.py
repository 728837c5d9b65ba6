"""
Unit tests for URL handling and redirect target resolution.
"""

import pytest

from curlkit.exceptions import InvalidUrlError
from curlkit.http.url import Url, fix_url


class TestUrl:
    """Tests for the Url value."""

    def test_parse_and_format(self):
        url = Url.parse("https://user:pw@Example.com:8443/a/b?x=1#top")

        assert url.scheme == "https"
        assert url.host == "example.com"
        assert url.port == 8443
        assert url.path == "/a/b"
        assert url.query == "x=1"
        assert str(url) == "https://user:pw@example.com:8443/a/b?x=1#top"

    def test_default_port_is_implicit(self):
        url = Url.parse("http://a.com:80/x")

        assert url.effective_port == 80
        assert str(url) == "http://a.com/x"
        assert Url.parse("https://a.com").effective_port == 443

    def test_empty_http_path_becomes_root(self):
        assert Url.parse("http://a.com").path == "/"

    def test_with_query(self):
        url = Url.parse("http://a.com/search?old=1")

        assert str(url.with_query({"q": "curl", "page": 2})) == "http://a.com/search?q=curl&page=2"
        assert str(url.with_query(None)) == "http://a.com/search"

    def test_authority_and_basename(self):
        url = Url.parse("http://a.com:8080/files/report.pdf")

        assert url.authority == "a.com:8080"
        assert url.basename == "report.pdf"

    def test_invalid_port(self):
        with pytest.raises(InvalidUrlError):
            Url.parse("http://a.com:notaport/")


class TestFixUrl:
    """Tests for redirect target resolution."""

    def test_absolute_path(self):
        assert str(fix_url("http://a.com/x/y", "/z")) == "http://a.com/z"

    def test_relative_to_directory(self):
        assert str(fix_url("http://a.com/x/y", "z")) == "http://a.com/x/z"

    def test_relative_at_root(self):
        assert str(fix_url("http://a.com/x", "z")) == "http://a.com/z"

    def test_relative_keeps_query(self):
        assert str(fix_url("http://a.com/x/y", "z?page=2")) == "http://a.com/x/z?page=2"

    def test_absolute_target(self):
        assert str(fix_url("http://a.com/x", "https://b.com/p")) == "https://b.com/p"

    def test_scheme_relative_target(self):
        assert str(fix_url("https://a.com/x", "//cdn.a.com/lib.js")) == "https://cdn.a.com/lib.js"

    def test_bare_host_target_gets_root_path(self):
        assert str(fix_url("https://a.com/x/y", "//cdn.a.com")) == "https://cdn.a.com/"

    def test_previous_port_kept(self):
        assert str(fix_url("http://a.com:8080/x/y", "/z")) == "http://a.com:8080/z"

    def test_url_instance_is_not_relative(self):
        """A structured target is used as-is apart from filling gaps."""
        target = Url(path="z")
        assert str(fix_url("http://a.com/x/y", target)) == "http://a.com/z"

    def test_missing_scheme_everywhere(self):
        with pytest.raises(InvalidUrlError):
            fix_url("/x/y", "//nohost/path")

    def test_missing_host_everywhere(self):
        with pytest.raises(InvalidUrlError):
            fix_url(Url(scheme="http", path="/x"), "/z")

    def test_missing_port_everywhere(self):
        with pytest.raises(InvalidUrlError):
            fix_url("gopher://a.com/x", "/z")
