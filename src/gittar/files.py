"""
Cache Listing and Copy Operations

This module lists cached repository trees and materializes (optionally
subpath-filtered) copies of them into an output directory. Listings are
depth-first, contain files only, skip hidden entries and are sorted by full path.
"""

import os
import shutil
from typing import List, Optional

from gittar.exceptions import FileSystemError
from gittar.log_utils import logger


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


def clear_existing(path: str) -> None:
    """Remove a file or symlink at `path` so it can be recreated; directories are left alone."""
    if os.path.islink(path) or os.path.isfile(path):
        os.remove(path)


def _copy_entry(source: str, target: str) -> None:
    clear_existing(target)
    if os.path.islink(source):
        os.symlink(os.readlink(source), target)
    else:
        shutil.copy2(source, target)


def _copy_tree(source_dir: str, dest_dir: str) -> None:
    """
    Copy a directory tree into `dest_dir`, replacing files and symlinks already there.

    Symlinks are recreated as symlinks (never followed), including symlinks to directories.
    """
    for root, dirnames, filenames in os.walk(source_dir):
        relative = os.path.relpath(root, source_dir)
        target_root = dest_dir
        if relative != ".":
            target_root = os.path.join(dest_dir, relative)
            # A file or symlink left where this directory now lives
            clear_existing(target_root)
        os.makedirs(target_root, exist_ok=True)

        linked_dirs = [d for d in dirnames if os.path.islink(os.path.join(root, d))]
        for name in linked_dirs + filenames:
            _copy_entry(os.path.join(root, name), os.path.join(target_root, name))
        dirnames[:] = [d for d in dirnames if d not in linked_dirs]


def list_files(directory: str) -> Optional[List[str]]:
    """
    Recursively list the files under a directory.

    Hidden files and anything below a hidden directory are skipped.

    Parameters:
        directory (str): Directory to walk. A path to a regular file lists just that file.

    Returns:
        Optional[List[str]]: Sorted absolute file paths, or None if `directory` does not exist.
    """
    if os.path.isfile(directory):
        return [os.path.abspath(directory)]
    if not os.path.isdir(directory):
        return None

    files: List[str] = []
    for root, dirnames, filenames in os.walk(directory):
        dirnames[:] = [d for d in dirnames if not _is_hidden(d)]
        for filename in filenames:
            if _is_hidden(filename):
                continue
            files.append(os.path.abspath(os.path.join(root, filename)))
    return sorted(files)


def _search_dir(cache_dir: str, subpath: Optional[str]) -> str:
    return os.path.join(cache_dir, subpath) if subpath else cache_dir


def check_cache(cache_dir: str, subpath: Optional[str] = None) -> Optional[List[str]]:
    """
    Check whether a usable cache exists and list its files.

    A cache directory that exists without the requested subpath counts as a miss.

    Parameters:
        cache_dir (str): Cache directory for the repository.
        subpath (Optional[str]): Relative path whose files should be listed.

    Returns:
        Optional[List[str]]: Sorted absolute paths under `cache_dir/subpath`, or None on a cache miss.

    Raises:
        FileSystemError: If the cache cannot be inspected.
    """
    try:
        if not os.path.isdir(cache_dir):
            logger.debug(f"Cache miss: {cache_dir} does not exist")
            return None

        search_dir = _search_dir(cache_dir, subpath)
        if not os.path.exists(search_dir):
            logger.debug(f"Cache miss: {search_dir} does not exist")
            return None

        return list_files(search_dir)
    except OSError as e:
        raise FileSystemError(
            f"Failed to check cache at {cache_dir}", path=cache_dir, cause=e
        ) from e


def copy_files(
    source_dir: str, dest_dir: str, subpath: Optional[str] = None
) -> List[str]:
    """
    Copy a cached tree (or one subpath of it) into a destination directory.

    The contents of `source_dir/subpath` land directly in `dest_dir`, so
    `src/index.ts` with subpath "src" becomes `dest_dir/index.ts`. A subpath
    naming a single file is copied to `dest_dir/<basename>`.

    Parameters:
        source_dir (str): Cache directory holding the full repository.
        dest_dir (str): Output directory; created if missing.
        subpath (Optional[str]): Relative path to copy instead of the whole tree.

    Returns:
        List[str]: Sorted absolute destination paths of the copied (non-hidden) files.

    Raises:
        FileSystemError: If the source is missing or copying fails.
    """
    copy_source = _search_dir(source_dir, subpath)
    try:
        os.makedirs(dest_dir, exist_ok=True)

        if not os.path.exists(copy_source):
            raise FileSystemError(
                f"Source path does not exist: {copy_source}", path=copy_source
            )

        if os.path.isfile(copy_source):
            target = os.path.join(dest_dir, os.path.basename(copy_source))
            clear_existing(target)
            shutil.copy2(copy_source, target)
            copied = [os.path.abspath(target)]
        else:
            _copy_tree(copy_source, dest_dir)
            real_source = os.path.abspath(copy_source)
            copied = [
                os.path.abspath(
                    os.path.join(dest_dir, os.path.relpath(path, real_source))
                )
                for path in list_files(copy_source) or []
            ]
    except FileSystemError:
        raise
    except (OSError, shutil.Error) as e:
        raise FileSystemError(
            f"Failed to copy files from {source_dir} to {dest_dir}",
            path=copy_source,
            cause=e,
        ) from e

    logger.debug(f"Copied {len(copied)} files from {copy_source} to {dest_dir}")
    return sorted(copied)
