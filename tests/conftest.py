import functools
import threading
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from typing import Dict, List, Union

import pytest
import requests

from web_inline.fetch import Fetcher
from web_inline.settings import Settings

Route = Union[bytes, List[Union[int, bytes]]]


class FakeResponse:
    def __init__(self, status_code: int, content: bytes = b"", reason: str = ""):
        self.status_code = status_code
        self.content = content
        self.reason = reason


class FakeSession:
    """Stands in for requests.Session.

    A route is either the body to serve with 200, or a list of steps played
    in order (an int is answered as that status, bytes as a 200 body); the
    last step repeats. Unknown URLs get a 404.
    """

    def __init__(self, routes: Dict[str, Route]):
        self.routes = {k: (list(v) if isinstance(v, list) else v) for k, v in routes.items()}
        self.calls: List[str] = []
        self.closed = False

    def get(self, url: str, timeout=None) -> FakeResponse:
        self.calls.append(url)
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(404, reason="Not Found")
        if isinstance(route, list):
            step = route.pop(0) if len(route) > 1 else route[0]
        else:
            step = route
        if isinstance(step, int):
            if step == 599:
                raise requests.ConnectionError("connection refused")
            return FakeResponse(step, reason="Too Many Requests" if step == 429 else "Error")
        return FakeResponse(200, step, "OK")

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def make_fetcher():
    def _make(routes: Dict[str, Route], **settings) -> Fetcher:
        sleeps: List[float] = []
        f = Fetcher(
            session=FakeSession(routes),
            settings=Settings(**settings),
            sleep=sleeps.append,
        )
        f.sleeps = sleeps
        return f

    return _make


class _QuietHandler(SimpleHTTPRequestHandler):
    def log_message(self, format, *args):
        pass


@pytest.fixture
def site(tmp_path):
    """Serve files from a temporary directory over HTTP; yields (root, base_url)."""
    root = tmp_path / "site"
    root.mkdir()
    handler = functools.partial(_QuietHandler, directory=str(root))
    server = ThreadingHTTPServer(("127.0.0.1", 0), handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield root, f"http://127.0.0.1:{server.server_address[1]}/"
    finally:
        server.shutdown()
        server.server_close()
