import io
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .dom import Node, parse
from .errors import ArchiveError, MissingElementError, NotFoundError, ParseError
from .fetch import Fetcher
from .filters import is_tag
from .pipeline import Pipeline
from .settings import Settings
from .stages import default_stages
from .urls import is_http_url

log = logging.getLogger(__name__)

INVALID_FILENAME_CHARS_RE = re.compile(r'[<>:"/\\|?*]')

PathLike = Union[str, Path]


@dataclass
class ArchiveResult:
    url: str
    path: Optional[Path] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


# -------------------- Helpers --------------------


def sanitize_filename(name: str) -> str:
    name = INVALID_FILENAME_CHARS_RE.sub("_", name)
    name = name or "page"
    if name.startswith("."):
        name = "_" + name[1:]
    return name[:200]


def output_filename(title: str, safe: bool = False) -> str:
    if safe:
        title = sanitize_filename(title)
    return f"{title}.html"


def download_html(fetcher: Fetcher, url: str, parser: str = "lxml") -> Node:
    return parse(fetcher.download(url), parser)


def get_title(tree: Node) -> str:
    try:
        title = tree.find(is_tag("title"))
    except NotFoundError as e:
        raise MissingElementError("title") from e
    return title.text()


# -------------------- Archive --------------------


def archive(
    output_dir: PathLike,
    page_url: str,
    fetcher: Optional[Fetcher] = None,
    settings: Optional[Settings] = None,
    logger: Optional[logging.Logger] = None,
) -> Path:
    """Write ``page_url`` as one self-contained HTML file into ``output_dir``.

    The file is named after the page's <title>. Nothing is written unless
    every step succeeded.
    """
    logger = logger or log
    if settings is None:
        settings = fetcher.settings if fetcher is not None else Settings()
    own_fetcher = fetcher is None
    if fetcher is None:
        fetcher = Fetcher(settings=settings, logger=logger)
    try:
        logger.info("processing %s", page_url)
        if not is_http_url(page_url):
            raise ParseError(f"not an http(s) URL: {page_url}")
        tree = download_html(fetcher, page_url, settings.parser)
        Pipeline(default_stages(page_url, fetcher), logger).run(tree)
        title = get_title(tree)
        buf = io.BytesIO()
        tree.render(buf)
        path = Path(output_dir) / output_filename(title, settings.safe_filenames)
        logger.info("writing %s", path)
        path.write_bytes(buf.getvalue())
        return path
    finally:
        if own_fetcher:
            fetcher.close()


def archive_all(
    output_dir: PathLike,
    urls: Iterable[str],
    settings: Optional[Settings] = None,
    logger: Optional[logging.Logger] = None,
    fetcher: Optional[Fetcher] = None,
) -> List[ArchiveResult]:
    """Archive each URL in turn; a failure is recorded and the batch goes on."""
    logger = logger or log
    settings = settings or Settings()
    own_fetcher = fetcher is None
    if fetcher is None:
        fetcher = Fetcher(settings=settings, logger=logger)
    results: List[ArchiveResult] = []
    try:
        for url in urls:
            try:
                path = archive(output_dir, url, fetcher, settings, logger)
            except (ArchiveError, OSError) as e:
                logger.warning("error archiving %s: %s", url, e)
                results.append(ArchiveResult(url, error=e))
                continue
            results.append(ArchiveResult(url, path=path))
    finally:
        if own_fetcher:
            fetcher.close()
    return results
