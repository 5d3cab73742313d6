from typing import Optional


class ArchiveError(Exception):
    """Base class for everything the archiver raises on purpose."""


class DownloadError(ArchiveError):
    def __init__(self, url: str, status: Optional[int] = None, reason: str = ""):
        self.url = url
        self.status = status
        self.reason = reason
        if status is None:
            msg = f"get {url}: {reason}"
        else:
            msg = f"get {url}: {status} {reason}".rstrip()
        super().__init__(msg)


class RateLimitExceeded(DownloadError):
    def __init__(self, url: str, attempts: int):
        self.attempts = attempts
        super().__init__(url, 429, f"still rate limited after {attempts} retries")


class ParseError(ArchiveError):
    pass


class MissingElementError(ArchiveError):
    def __init__(self, tag: str = "", message: Optional[str] = None):
        self.tag = tag
        super().__init__(message or f"no <{tag}> element")


class NotFoundError(MissingElementError):
    def __init__(self) -> None:
        super().__init__(message="no HTML nodes matching filters")


class UnknownExtensionError(ArchiveError):
    def __init__(self, url: str):
        self.url = url
        super().__init__(f"unknown extension: {url}")


class StageError(ArchiveError):
    def __init__(self, stage: str, cause: BaseException):
        self.stage = stage
        self.cause = cause
        super().__init__(f"{stage}: {cause}")
