# src/gittar/cli.py

import argparse
import sys
from typing import List, Optional

from gittar import __version__, log_utils
from gittar.exceptions import GittarError
from gittar.fetcher import fetch
from gittar.models import Config
from gittar.platforms import get_tarball_url
from gittar.settings import load_settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gittar",
        description="gittar - fetch a git repository snapshot without git",
    )
    parser.add_argument(
        "url",
        help="Repository identifier (owner/repo, git@host:owner/repo.git, https://host/owner/repo[/tree/<ref>/<path>])",
    )
    parser.add_argument(
        "--branch", "-b", help="Branch, tag or commit to fetch (disables main/master fallback)"
    )
    parser.add_argument(
        "--cache-dir", help="Cache directory (default: ~/.cache/hulla/gittar/<owner>/<repo>)"
    )
    parser.add_argument(
        "--out-dir", "-o", help="Copy the files into this directory instead of using the cache directly"
    )
    parser.add_argument(
        "--subpath", "-p", help="Only report/copy files below this path in the repository"
    )
    parser.add_argument(
        "--update",
        "-u",
        action="store_true",
        help="Bypass the cache and download again",
    )
    parser.add_argument(
        "--print-url",
        action="store_true",
        help="Print the resolved tarball URL and exit without downloading",
    )
    parser.add_argument(
        "--log-level",
        help="Log level (DEBUG, INFO, WARNING, ERROR); overrides the settings file",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """
    Entry point for the gittar command-line interface.

    Fetches the repository and prints one absolute file path per line. With
    --print-url only the tarball URL is printed. Exits with status 1 when the
    identifier is unsupported or any gittar error is raised.
    """
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings()
    except GittarError as e:
        log_utils.logger.error(str(e))
        sys.exit(1)

    log_level = args.log_level or settings.log_level
    if log_level:
        log_utils.set_log_level(log_level)

    if args.print_url:
        url = get_tarball_url(args.url, args.branch)
        if url is None:
            log_utils.logger.error(f"Unsupported or unparseable repository: {args.url}")
            sys.exit(1)
        print(url)
        return

    config = Config(
        url=args.url,
        branch=args.branch,
        cache_dir=args.cache_dir,
        out_dir=args.out_dir,
        subpath=args.subpath,
        update=args.update,
    )

    try:
        result = fetch(config, settings=settings)
    except GittarError as e:
        log_utils.logger.error(str(e))
        sys.exit(1)

    source = "cache" if result.from_cache else "download"
    log_utils.logger.info(
        f"{len(result.files)} files in {result.out_dir} (from {source})"
    )
    for path in result.files:
        print(path)


if __name__ == "__main__":
    main()
