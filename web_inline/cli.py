import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .archive import archive_all
from .settings import Settings, load_config_file

LOG_LEVELS = ("debug", "info", "warning", "error")


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="web-inline",
        description="Save web pages as single HTML files with styles and images inlined.",
    )
    p.add_argument("--config", type=str, help="path to config.toml|.yaml", default=None)

    p.add_argument("urls", nargs="+", metavar="URL", help="http(s) URL")
    p.add_argument(
        "-o",
        "--output-dir",
        type=str,
        default=".",
        help="directory the archives are written to",
    )
    p.add_argument(
        "--log-level", choices=LOG_LEVELS, default="info", help="the log level"
    )
    p.add_argument("--verbose", action="store_true", help="debug logging")

    # http
    p.add_argument(
        "--timeout", type=float, default=15.0, help="request timeout seconds"
    )
    p.add_argument(
        "--retries", type=int, default=3, help="retries on connection errors and 5xx"
    )
    p.add_argument(
        "--rate-limit-delay",
        type=float,
        default=1.0,
        help="seconds to wait before retrying a 429 response",
    )
    p.add_argument(
        "--max-rate-limit-retries",
        type=int,
        default=None,
        help="give up after N retries of a 429 response (default: never)",
    )

    # output
    p.add_argument(
        "--parser", type=str, default="lxml", help="BeautifulSoup tree builder"
    )
    p.add_argument(
        "--safe-filenames",
        action="store_true",
        help="replace characters not allowed in file names in the page title",
    )

    # auth / session
    p.add_argument("--user-agent", type=str, default=None, help="User-Agent header")
    p.add_argument(
        "--header",
        action="append",
        default=[],
        help="extra request header 'Name: value'",
    )
    p.add_argument(
        "--cookies",
        type=str,
        default=None,
        help="cookies.txt (Netscape/Mozilla format)",
    )
    p.add_argument("--auth-basic", type=str, default=None, help="basic auth user:pass")
    p.add_argument("--auth-bearer", type=str, default=None, help="bearer token")

    return p


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = build_arg_parser()
    preliminary, _ = parser.parse_known_args(argv)
    if preliminary.config:
        parser.set_defaults(**load_config_file(preliminary.config))
    return parser.parse_args(argv)


def settings_from_args(args: argparse.Namespace) -> Settings:
    return Settings(
        timeout=args.timeout,
        retries=max(0, args.retries),
        rate_limit_delay=max(0.0, args.rate_limit_delay),
        max_rate_limit_retries=args.max_rate_limit_retries,
        parser=args.parser,
        safe_filenames=args.safe_filenames,
        user_agent=args.user_agent,
        extra_headers=args.header or [],
        cookies_file=args.cookies,
        auth_basic=args.auth_basic,
        auth_bearer=args.auth_bearer,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    level = logging.DEBUG if args.verbose else getattr(logging, args.log_level.upper())
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
    logger = logging.getLogger("web_inline")

    out_dir = Path(args.output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    results = archive_all(out_dir, args.urls, settings_from_args(args), logger)
    failed = [r for r in results if not r.ok]
    for r in failed:
        logger.error("%s: %s", r.url, r.error)
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
