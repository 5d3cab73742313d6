"""Inline every ``url(...)`` reference of a stylesheet as a data URI.

This is not a CSS parser. The scanner walks the text one character at a
time, counting how much of the literal ``url(`` it has seen. Characters are
copied to the output as they are read, so a partial match that breaks off is
already flushed; scanning then carries on from the breaking character
without trying to restart the match inside the flushed prefix. After a full
``url(`` everything up to the next unescaped ``)`` is the argument.
"""

import logging
from typing import List, Optional

from .fetch import Fetcher
from .mime import classify, data_uri
from .urls import resolve_ref

log = logging.getLogger(__name__)

URL_OPEN = "url("
QUOTES = "'\""


def strip_quotes(arg: str) -> str:
    arg = arg.strip()
    if arg and arg[0] in QUOTES:
        arg = arg[1:]
    if arg and arg[-1] in QUOTES:
        arg = arg[:-1]
    return arg


def rewrite_css_urls(
    css: str,
    base_url: str,
    fetcher: Fetcher,
    logger: Optional[logging.Logger] = None,
) -> str:
    logger = logger or log
    out: List[str] = []
    arg: List[str] = []
    matched = 0
    escaped = False
    for ch in css:
        if matched == len(URL_OPEN):
            if escaped:
                arg.append(ch)
                escaped = False
            elif ch == "\\":
                arg.append(ch)
                escaped = True
            elif ch == ")":
                out.append(_inline_argument("".join(arg), base_url, fetcher, logger))
                arg = []
                matched = 0
            else:
                arg.append(ch)
        elif ch == URL_OPEN[matched]:
            out.append(ch)
            matched += 1
        else:
            matched = 0
            out.append(ch)
    # unterminated url( at end of input
    out.extend(arg)
    return "".join(out)


def _inline_argument(
    raw: str, base_url: str, fetcher: Fetcher, logger: logging.Logger
) -> str:
    link = strip_quotes(raw)
    if link.startswith("data:"):
        return raw + ")"
    url = resolve_ref(base_url, link)
    data_type, subtype = classify(url)
    logger.debug("inline CSS url %s", url)
    return data_uri(data_type, subtype, fetcher.download_base64(url)) + ")"
