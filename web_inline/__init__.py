"""Save a web page as one HTML file with its stylesheets and images inlined."""

from .archive import ArchiveResult, archive, archive_all
from .dom import Node, new_node, parse
from .errors import (
    ArchiveError,
    DownloadError,
    MissingElementError,
    NotFoundError,
    ParseError,
    RateLimitExceeded,
    StageError,
    UnknownExtensionError,
)
from .fetch import Fetcher, build_session
from .pipeline import Pipeline, TransformContext
from .settings import Settings

__version__ = "0.1.0"

__all__ = [
    "ArchiveError",
    "ArchiveResult",
    "DownloadError",
    "Fetcher",
    "MissingElementError",
    "Node",
    "NotFoundError",
    "ParseError",
    "Pipeline",
    "RateLimitExceeded",
    "Settings",
    "StageError",
    "TransformContext",
    "UnknownExtensionError",
    "archive",
    "archive_all",
    "build_session",
    "new_node",
    "parse",
]
