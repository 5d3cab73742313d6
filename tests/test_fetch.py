import base64
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
import requests

from web_inline.errors import DownloadError, RateLimitExceeded
from web_inline.fetch import Fetcher, apply_auth_to_session, build_session
from web_inline.settings import Settings

URL = "http://example.com/a.png"


class TestDownload:
    def test_success(self, make_fetcher):
        f = make_fetcher({URL: b"body"})
        assert f.download(URL) == b"body"

    def test_retries_after_rate_limit(self, make_fetcher):
        f = make_fetcher({URL: [429, b"eventual"]})
        assert f.download(URL) == b"eventual"
        assert f.session.calls == [URL, URL]
        assert f.sleeps == [1.0]

    def test_keeps_retrying_while_rate_limited(self, make_fetcher):
        f = make_fetcher({URL: [429, 429, 429, 429, b"ok"]}, rate_limit_delay=0.25)
        assert f.download(URL) == b"ok"
        assert f.sleeps == [0.25] * 4

    def test_retry_cap(self, make_fetcher):
        f = make_fetcher({URL: [429]}, max_rate_limit_retries=2)
        with pytest.raises(RateLimitExceeded) as exc:
            f.download(URL)
        assert exc.value.status == 429
        assert len(f.session.calls) == 3

    def test_error_status(self, make_fetcher):
        f = make_fetcher({})
        with pytest.raises(DownloadError) as exc:
            f.download(URL)
        assert exc.value.status == 404
        assert exc.value.url == URL
        assert str(exc.value) == f"get {URL}: 404 Not Found"

    def test_server_error_is_not_retried_by_fetcher(self, make_fetcher):
        f = make_fetcher({URL: [500, b"never"]})
        with pytest.raises(DownloadError):
            f.download(URL)
        assert f.sleeps == []

    def test_transport_error(self, make_fetcher):
        f = make_fetcher({URL: [599]})
        with pytest.raises(DownloadError) as exc:
            f.download(URL)
        assert exc.value.status is None
        assert isinstance(exc.value.__cause__, requests.ConnectionError)

    def test_download_base64(self, make_fetcher):
        f = make_fetcher({URL: b"\x00\xff"})
        assert f.download_base64(URL) == base64.b64encode(b"\x00\xff").decode()


class TestSession:
    def test_rate_limit_not_retried_by_adapter(self):
        s = build_session()
        retry = s.get_adapter("https://example.com").max_retries
        assert 429 not in retry.status_forcelist
        assert 503 in retry.status_forcelist
        assert retry.respect_retry_after_header is False

    def test_auth_and_headers(self):
        s = requests.Session()
        apply_auth_to_session(
            s,
            Settings(
                user_agent="bot/1.0",
                extra_headers=["X-Test: yes", "broken"],
                auth_bearer="tok",
            ),
        )
        assert s.headers["User-Agent"] == "bot/1.0"
        assert s.headers["X-Test"] == "yes"
        assert s.headers["Authorization"] == "Bearer tok"

    def test_basic_auth(self):
        s = requests.Session()
        apply_auth_to_session(s, Settings(auth_basic="user:pa:ss"))
        assert s.auth == ("user", "pa:ss")


class _RateLimitOnce(BaseHTTPRequestHandler):
    hits = 0

    def do_GET(self):
        type(self).hits += 1
        if type(self).hits == 1:
            self.send_response(429)
            self.send_header("Retry-After", "2")
            self.send_header("Content-Length", "0")
            self.end_headers()
            return
        body = b"finally"
        self.send_response(200)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def rate_limited_server():
    handler = type("Handler", (_RateLimitOnce,), {"hits": 0})
    server = ThreadingHTTPServer(("127.0.0.1", 0), handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}/a.png", handler
    finally:
        server.shutdown()
        server.server_close()


def test_retry_after_429_goes_through_fetcher(rate_limited_server):
    url, handler = rate_limited_server
    sleeps = []
    f = Fetcher(settings=Settings(), sleep=sleeps.append)
    try:
        assert f.download(url) == b"finally"
    finally:
        f.close()
    assert sleeps == [1.0]
    assert handler.hits == 2
