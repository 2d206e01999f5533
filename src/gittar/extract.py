"""
Tarball Extraction

This module stages downloaded tarball bytes in a temporary file and extracts
the full archive into a target directory, stripping the single root folder
(e.g., `repo-main/`) that hosting platforms wrap snapshots in. Members that
would land outside the target directory are skipped.
"""

import os
import shutil
import tarfile
import tempfile
import zlib
from typing import List, Optional

from gittar.constants import TEMP_ARCHIVE_PREFIX, TEMP_ARCHIVE_SUFFIX
from gittar.exceptions import FileSystemError
from gittar.files import clear_existing, list_files
from gittar.log_utils import logger

EXECUTABLE_PERMISSIONS = 0o755


def _is_within_base(real_base_dir: str, candidate: str) -> bool:
    try:
        return os.path.commonpath([real_base_dir, candidate]) == real_base_dir
    except ValueError:
        return False


def safe_extract_path(extract_dir: str, file_path: str) -> str:
    """
    Resolve a safe absolute extraction path and prevent directory traversal.

    Parameters:
        extract_dir (str): Base directory intended for extraction.
        file_path (str): Member path relative to the base directory.

    Returns:
        str: Absolute, normalized path inside extract_dir.

    Raises:
        ValueError: If the resolved path is outside extract_dir.
    """
    real_extract_dir = os.path.realpath(extract_dir)
    prospective_path = os.path.join(real_extract_dir, file_path)
    normalized_path = os.path.realpath(prospective_path)

    if not _is_within_base(real_extract_dir, normalized_path):
        raise ValueError(
            f"Unsafe extraction path '{file_path}' is outside base '{extract_dir}'"
        )

    return normalized_path


def strip_root_component(member_name: str) -> Optional[str]:
    """
    Drop the leading path component of an archive member name.

    Returns:
        Optional[str]: The remaining relative path, or None for the root folder itself.
    """
    parts = [p for p in member_name.replace("\\", "/").split("/") if p and p != "."]
    if len(parts) < 2:
        return None
    return "/".join(parts[1:])


def _is_safe_member_name(name: str) -> bool:
    if not name or name.startswith("/") or "\x00" in name:
        return False
    normalized = os.path.normpath(name)
    if os.path.isabs(normalized):
        return False
    return normalized != ".." and not normalized.startswith(f"..{os.sep}")


def _extract_member(tar: tarfile.TarFile, member: tarfile.TarInfo, target_dir: str) -> bool:
    relative = strip_root_component(member.name)
    if relative is None:
        return False
    if not _is_safe_member_name(relative):
        logger.warning(
            "Skipping unsafe archive member %s (possible traversal)", member.name
        )
        return False

    # Resolve only the parent so an existing symlink at dest is replaced, not followed.
    try:
        parent = safe_extract_path(target_dir, os.path.dirname(relative) or ".")
    except ValueError as e:
        logger.warning(f"Skipping unsafe extraction path: {e}")
        return False
    dest = os.path.join(parent, os.path.basename(relative))

    if member.isdir():
        os.makedirs(dest, exist_ok=True)
        return True

    os.makedirs(os.path.dirname(dest), exist_ok=True)

    if member.issym():
        link_target = os.path.join(os.path.dirname(relative), member.linkname)
        if os.path.isabs(member.linkname) or not _is_safe_member_name(
            os.path.normpath(link_target)
        ):
            logger.warning(
                "Skipping symlink %s pointing outside the archive", member.name
            )
            return False
        clear_existing(dest)
        os.symlink(member.linkname, dest)
        return True

    if member.islnk():
        original = strip_root_component(member.linkname)
        if original is None:
            return False
        try:
            source = safe_extract_path(target_dir, original)
        except ValueError as e:
            logger.warning(f"Skipping unsafe hard link: {e}")
            return False
        if not os.path.isfile(source):
            return False
        clear_existing(dest)
        shutil.copy2(source, dest)
        return True

    if not member.isreg():
        logger.debug(f"Skipping special archive member {member.name}")
        return False

    source_obj = tar.extractfile(member)
    if source_obj is None:
        return False
    clear_existing(dest)
    with source_obj, open(dest, "wb") as target:
        shutil.copyfileobj(source_obj, target)

    if os.name != "nt" and member.mode & 0o111:
        try:
            os.chmod(dest, EXECUTABLE_PERMISSIONS)
        except OSError:
            logger.debug(f"Could not mark {dest} executable")
    return True


def _remove_temp_file(tmp_path: str) -> None:
    try:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
    except OSError as e:
        logger.debug(f"Could not remove temporary archive {tmp_path}: {e}")


def _remove_partial_target(target_dir: str) -> None:
    try:
        if os.path.isdir(target_dir):
            shutil.rmtree(target_dir)
    except OSError as e:
        logger.warning(f"Could not remove partially extracted {target_dir}: {e}")


def extract_tarball(tar_data: bytes, target_dir: str) -> List[str]:
    """
    Extract a gzipped tarball into a directory, stripping its root folder.

    The full archive is always extracted; subpath filtering is left to the
    caller. The payload is staged in a temporary file that is removed on
    success and on failure.

    Parameters:
        tar_data (bytes): The gzipped tar payload.
        target_dir (str): Destination directory; created if missing and removed again if this call created it and extraction fails.

    Returns:
        List[str]: Sorted absolute paths of the (non-hidden) files under `target_dir`.

    Raises:
        FileSystemError: If the archive is corrupt or the files cannot be written.
    """
    temp_fd, tmp_path = tempfile.mkstemp(
        prefix=TEMP_ARCHIVE_PREFIX, suffix=TEMP_ARCHIVE_SUFFIX
    )
    extracted = 0
    created_target = not os.path.isdir(target_dir)
    try:
        with os.fdopen(temp_fd, "wb") as tmp_file:
            tmp_file.write(tar_data)

        with tarfile.open(tmp_path, "r:*") as tar:
            os.makedirs(target_dir, exist_ok=True)
            for member in tar:
                if _extract_member(tar, member, target_dir):
                    extracted += 1
    except (tarfile.TarError, EOFError, zlib.error, OSError) as e:
        # A cache dir created here must not outlive a failed extraction
        if created_target:
            _remove_partial_target(target_dir)
        raise FileSystemError(
            f"Failed to extract tar to {target_dir}",
            path=target_dir,
            details=str(e),
            cause=e,
        ) from e
    finally:
        _remove_temp_file(tmp_path)

    logger.debug(f"Extracted {extracted} archive members to {target_dir}")
    return list_files(target_dir) or []
