from urllib.parse import urljoin, urlparse

from .errors import ParseError


def resolve_ref(base_url: str, ref: str) -> str:
    try:
        return urljoin(base_url, ref)
    except ValueError as e:
        raise ParseError(f"parse URL from {ref}: {e}") from e


def is_http_url(u: str) -> bool:
    try:
        p = urlparse(u)
    except ValueError:
        return False
    return p.scheme in {"http", "https"} and bool(p.netloc)


def same_page_fragment(base_url: str, absolute: str) -> str:
    """Return "#frag" when ``absolute`` is the base URL plus a fragment, else ``absolute``."""
    prefix = base_url + "#"
    if absolute.startswith(prefix):
        return absolute[len(base_url) :]
    return absolute
