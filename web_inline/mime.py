import posixpath
from typing import Tuple
from urllib.parse import urlsplit

from .errors import UnknownExtensionError

IMAGE_EXTS = {"png", "jpg", "jpeg", "svg"}
FONT_EXTS = {"otf", "ttf", "woff", "woff2"}

_SUBTYPES = {
    "jpg": "jpeg",
    "svg": "svg+xml",
}


def extension_of(url: str) -> str:
    """Suffix of the last path segment, without the dot; query and fragment ignored."""
    try:
        path = urlsplit(url).path
    except ValueError:
        raise UnknownExtensionError(url)
    ext = posixpath.splitext(path)[1]
    if not ext:
        raise UnknownExtensionError(url)
    return ext[1:]


def data_type_for(ext: str) -> str:
    if ext in IMAGE_EXTS:
        return "image"
    if ext in FONT_EXTS:
        return "font"
    return "text"


def subtype_for(ext: str) -> str:
    return _SUBTYPES.get(ext, ext)


def classify(url: str) -> Tuple[str, str]:
    ext = extension_of(url)
    return data_type_for(ext), subtype_for(ext)


def data_uri(data_type: str, subtype: str, b64: str) -> str:
    return f"data:{data_type}/{subtype};base64,{b64}"
