"""Cache and output directory resolution."""

import os
from pathlib import Path
from typing import Optional, Tuple

from gittar.constants import CACHE_ROOT_PARTS
from gittar.exceptions import PathValidationError, URLError
from gittar.models import Config
from gittar.parser import parse_input


def normalize_path(path: str) -> str:
    """
    Expand a leading `~` to the home directory.

    Only `~/...` and a bare `~` are expanded; `~user` and every other path is returned unchanged.
    """
    if path.startswith("~/"):
        return os.path.join(str(Path.home()), path[2:])
    if path == "~":
        return str(Path.home())
    return path


def default_cache_dir(owner: str, repo: str) -> str:
    return os.path.join(str(Path.home()), *CACHE_ROOT_PARTS, owner, repo)


def resolve_cache_dir(config: Config, owner: str, repo: str) -> str:
    """
    Determine the cache directory for a repository.

    An explicit `config.cache_dir` wins; otherwise ~/.cache/hulla/gittar/{owner}/{repo}.
    The cache always holds the full repository, so neither `out_dir` nor `subpath`
    influence its location.

    Parameters:
        config (Config): Call configuration.
        owner (str): Repository owner.
        repo (str): Repository name.

    Returns:
        str: Absolute path to the cache directory.
    """
    if config.cache_dir:
        return os.path.abspath(normalize_path(config.cache_dir))
    return default_cache_dir(owner, repo)


def resolve_out_dir(config: Config, cache_dir: str) -> str:
    if config.out_dir:
        return os.path.abspath(normalize_path(config.out_dir))
    return cache_dir


def parse_repo_info(url: str) -> Tuple[str, str, Optional[str]]:
    """
    Extract (owner, repo, subpath) from a repository identifier.

    Raises:
        URLError: If the identifier cannot be parsed.
    """
    parsed = parse_input(url)
    if parsed is None:
        raise URLError(f"Failed to parse repository URL: {url}", url=url)
    return parsed.owner, parsed.repo, parsed.subpath


def normalize_subpath(subpath: Optional[str]) -> Optional[str]:
    """
    Strip surrounding slashes from a subpath and reject traversal outside its base.

    Returns:
        Optional[str]: The cleaned relative subpath, or None when empty.

    Raises:
        PathValidationError: If the subpath is absolute or climbs above its base directory.
    """
    if not subpath:
        return None

    cleaned = subpath.strip("/")
    if not cleaned or cleaned == ".":
        return None

    normalized = os.path.normpath(cleaned)
    if (
        "\x00" in cleaned
        or os.path.isabs(normalized)
        or normalized == ".."
        or normalized.startswith(f"..{os.sep}")
    ):
        raise PathValidationError(
            f"Subpath escapes the repository root: {subpath}", path=subpath
        )
    return cleaned
