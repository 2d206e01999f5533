"""
Fetch orchestration.

Ties together identifier parsing, cache lookup, download, extraction and
copy-to-output. The cache directory always holds the full repository
snapshot; the subpath only filters what is reported or copied to the
output directory.
"""

from typing import List, Optional, Union

import requests

from gittar.download import download_tarball
from gittar.extract import extract_tarball
from gittar.files import check_cache, copy_files
from gittar.log_utils import logger
from gittar.models import Config, GittarResult
from gittar.paths import (
    normalize_subpath,
    parse_repo_info,
    resolve_cache_dir,
    resolve_out_dir,
)
from gittar.settings import Settings


def _materialize(cache_dir: str, out_dir: str, subpath: Optional[str]) -> List[str]:
    """Return the result listing, copying into out_dir when it differs from the cache."""
    if out_dir != cache_dir:
        return copy_files(cache_dir, out_dir, subpath)
    return check_cache(cache_dir, subpath) or []


def fetch(
    config: Union[Config, str],
    session: Optional[requests.Session] = None,
    settings: Optional[Settings] = None,
) -> GittarResult:
    """
    Download and extract a repository tarball, serving from cache when possible.

    Parameters:
        config (Union[Config, str]): Call configuration, or a bare identifier equivalent to `Config(url=identifier)`.
        session (Optional[requests.Session]): HTTP session to reuse for the download.
        settings (Optional[Settings]): Transport settings; loaded from the settings file when omitted.

    Returns:
        GittarResult: Files (filtered by subpath), cache and output directories, and whether the cache was used.

    Raises:
        URLError: If the identifier cannot be parsed or the download fails.
        FileSystemError: If cache inspection, extraction or copying fails.
    """
    if isinstance(config, str):
        config = Config(url=config)

    owner, repo, url_subpath = parse_repo_info(config.url)
    subpath = normalize_subpath(config.subpath or url_subpath)

    cache_dir = resolve_cache_dir(config, owner, repo)
    out_dir = resolve_out_dir(config, cache_dir)

    if config.update is not True:
        cached = check_cache(cache_dir, subpath)
        if cached is not None:
            logger.info(f"Using cached {owner}/{repo} from {cache_dir}")
            files = _materialize(cache_dir, out_dir, subpath)
            return GittarResult(
                files=files,
                cache_dir=cache_dir,
                out_dir=out_dir,
                subpath=subpath,
                from_cache=True,
            )
    else:
        logger.debug(f"Update requested; bypassing cache for {owner}/{repo}")

    tar_data = download_tarball(config, session=session, settings=settings)
    extracted = extract_tarball(tar_data, cache_dir)
    logger.info(f"Extracted {len(extracted)} files to {cache_dir}")

    files = _materialize(cache_dir, out_dir, subpath)
    return GittarResult(
        files=files,
        cache_dir=cache_dir,
        out_dir=out_dir,
        subpath=subpath,
        from_cache=False,
    )


gittar = fetch
