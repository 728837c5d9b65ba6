"""
Unit tests for Request: cookie jar ownership and redirect derivation.
"""

import os
import pickle

import pytest

from curlkit.exceptions import InvalidUrlError
from curlkit.http.request import Method, Request
from curlkit.http.response import Response


class TestCookieJar:
    """Tests for cookie jar ownership."""

    def test_created_on_construction(self):
        with Request("http://a.com/") as request:
            path = request.cookie_file

            assert path is not None
            assert os.path.exists(path)
            assert request.option("cookiejar") == path
            assert request.option("cookiefile") == path
            assert request.owns_cookie_file

        assert not os.path.exists(path)

    def test_opt_out(self):
        request = Request("http://a.com/", cookie_jar=False)

        assert request.cookie_file is None
        assert "cookiejar" not in request.options

    def test_replacing_owned_jar_deletes_it(self, tmp_path):
        request = Request("http://a.com/")
        old = request.cookie_file
        new = tmp_path / "jar.txt"
        new.write_text("")

        request.set_cookie_file(str(new))

        assert not os.path.exists(old)
        assert request.option("cookiejar") == str(new)
        request.close()
        assert not new.exists()

    def test_jar_survives_redirect_clone(self):
        """Only the original deletes the shared jar, exactly once."""
        original = Request("http://a.com/x/y")
        path = original.cookie_file

        follow = original.redirect_to("/z")
        assert follow.cookie_file == path
        assert not follow.owns_cookie_file

        follow.close()
        assert os.path.exists(path)

        original.close()
        assert not os.path.exists(path)

        original.close()
        assert original.cookie_file is None


class TestRedirect:
    """Tests for redirect derivation."""

    def test_absolute_location(self):
        with Request("http://a.com/x/y") as request:
            follow = request.redirect_to("/z")
            assert str(follow.url) == "http://a.com/z"

    def test_relative_location(self):
        with Request("http://a.com/x/y") as request:
            follow = request.redirect_to("z")
            assert str(follow.url) == "http://a.com/x/z"

    @pytest.mark.parametrize("method", ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD"])
    def test_method_becomes_get(self, method: str):
        with Request("http://a.com/x", method) as request:
            assert request.redirect_to("z").method == "GET"

    def test_download_stays_download(self):
        with Request("http://a.com/x", Method.DOWNLOAD) as request:
            follow = request.redirect_to("z")

            assert follow.method == "DOWNLOAD"
            assert str(follow.url) == "http://a.com/z"

    def test_body_and_files_stripped(self, upload_file):
        with Request("http://a.com/form") as request:
            request.set_post({"a": "1"}, {"doc": str(upload_file)})
            follow = request.redirect_to("/done")

            assert follow.body is None
            assert follow.files == {}
            assert request.body == {"a": "1"}
            assert request.method == "POST"

    def test_clone_is_independent(self):
        with Request("http://a.com/x", headers={"Accept": "text/html"}) as request:
            follow = request.redirect_to("/z")
            follow.set_header("Accept", None)
            follow.set_timeout(3)

            assert request.headers.as_list() == ["Accept: text/html"]
            assert "timeout" not in request.options
            assert str(request.url) == "http://a.com/x"

    def test_follow_redirect_reads_location(self):
        with Request("http://a.com/x/y") as request:
            response = Response(status_code=302, headers={"Location": "other"})
            assert str(request.follow_redirect(response).url) == "http://a.com/x/other"

    def test_follow_redirect_without_location(self):
        with Request("http://a.com/x") as request:
            with pytest.raises(InvalidUrlError):
                request.follow_redirect(Response(status_code=302))

    def test_unresolvable_location(self):
        with Request("/relative/only") as request:
            with pytest.raises(InvalidUrlError):
                request.redirect_to("//nohost/path")


class TestRequest:
    """Tests for request construction helpers."""

    def test_construction(self):
        with Request(
            "http://a.com/",
            "post",
            headers={"http_accept": "*/*"},
            body={"a": "1"},
            proxy=("proxy.local", 8080),
        ) as request:
            assert request.method == "POST"
            assert request.is_method(Method.POST)
            assert request.headers.as_list() == ["Accept: */*"]
            assert request.option("proxy") == "proxy.local:8080"

    def test_set_post_switches_method(self):
        with Request("http://a.com/") as request:
            request.set_post("raw")

            assert request.method == "POST"
            assert request.body == "raw"

    def test_pickle_keeps_description(self):
        with Request("http://a.com/x?q=1", "PUT", headers={"Accept": "*/*"}, body="b") as request:
            restored = pickle.loads(pickle.dumps(request))

            assert str(restored.url) == "http://a.com/x?q=1"
            assert restored.method == "PUT"
            assert restored.body == "b"
            assert restored.headers.as_list() == ["Accept: */*"]
            assert not restored.owns_cookie_file
