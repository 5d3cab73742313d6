import base64
import logging
import time
from http.cookiejar import MozillaCookieJar
from typing import Callable, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .errors import DownloadError, RateLimitExceeded
from .settings import DEFAULT_HEADERS, Settings

log = logging.getLogger(__name__)

TOO_MANY_REQUESTS = 429


# -------------------- Session --------------------


def build_session(settings: Optional[Settings] = None) -> requests.Session:
    settings = settings or Settings()
    s = requests.Session()
    # Fetcher.download owns 429; with Retry-After honoured urllib3 would
    # retry 429 on its own even though it is not in the forcelist
    retry = Retry(
        total=settings.retries,
        backoff_factor=0.5,
        status_forcelist=[500, 502, 503, 504],
        allowed_methods={"GET", "HEAD"},
        raise_on_status=False,
        respect_retry_after_header=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    s.mount("http://", adapter)
    s.mount("https://", adapter)
    s.headers.update(DEFAULT_HEADERS)
    apply_auth_to_session(s, settings)
    return s


def apply_auth_to_session(session: requests.Session, settings: Settings) -> None:
    if settings.user_agent:
        session.headers["User-Agent"] = settings.user_agent
    for h in settings.extra_headers:
        if ":" not in h:
            log.warning("invalid header (no colon): %s", h)
            continue
        k, v = h.split(":", 1)
        session.headers[k.strip()] = v.strip()
    if settings.auth_bearer:
        session.headers["Authorization"] = f"Bearer {settings.auth_bearer}"
    if settings.auth_basic:
        if ":" not in settings.auth_basic:
            log.error("--auth-basic requires user:pass")
        else:
            u, p = settings.auth_basic.split(":", 1)
            session.auth = (u, p)
    if settings.cookies_file:
        try:
            jar = MozillaCookieJar()
            jar.load(settings.cookies_file, ignore_discard=True, ignore_expires=True)
            session.cookies.update(jar)
            log.info("loaded cookies: %s", settings.cookies_file)
        except OSError as e:
            log.error("failed to load cookies: %s", e)


# -------------------- Fetcher --------------------


class Fetcher:
    """GETs resources for the archiver.

    A 429 answer is retried after ``settings.rate_limit_delay`` seconds until
    the server stops rate limiting, or until ``max_rate_limit_retries`` is
    used up when that is set. The session can be shared between archives.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        settings: Optional[Settings] = None,
        logger: Optional[logging.Logger] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings or Settings()
        self.session = session if session is not None else build_session(self.settings)
        self.log = logger or log
        self._sleep = sleep

    def download(self, url: str) -> bytes:
        retried = 0
        while True:
            self.log.debug("downloading %s", url)
            try:
                r = self.session.get(url, timeout=self.settings.timeout)
            except requests.RequestException as e:
                raise DownloadError(url, None, str(e)) from e
            if r.status_code == TOO_MANY_REQUESTS:
                limit = self.settings.max_rate_limit_retries
                if limit is not None and retried >= limit:
                    raise RateLimitExceeded(url, retried)
                retried += 1
                self.log.debug(
                    "too many requests, retrying %s in %.1fs",
                    url,
                    self.settings.rate_limit_delay,
                )
                self._sleep(self.settings.rate_limit_delay)
                continue
            if not 200 <= r.status_code < 300:
                raise DownloadError(url, r.status_code, r.reason or "")
            return r.content

    def download_base64(self, url: str) -> str:
        return base64.b64encode(self.download(url)).decode("ascii")

    def close(self) -> None:
        self.session.close()
