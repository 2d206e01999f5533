"""
Repository identifier parsing.

Normalizes the accepted identifier shapes into a RepoDescriptor:

    git@github.com:owner/repo.git          SSH
    owner/repo                             short form (GitHub)
    https://gitlab.com/owner/repo          full URL
    https://github.com/owner/repo/tree/dev/docs
                                           full URL with ref and subpath
"""

import re
from typing import Callable, Dict, List, Optional
from urllib.parse import urlsplit

from gittar.constants import (
    BRANCH_MARKERS,
    DEFAULT_HOSTNAME,
    DEFAULT_REF,
    GIT_SUFFIX,
    SSH_PREFIX,
)
from gittar.models import InputForm, RepoDescriptor

SSH_RX = re.compile(r"^git@([^:]+):(.+)$")


def _segments(path: str) -> List[str]:
    return [part for part in path.split("/") if part]


def classify_input(raw: str) -> InputForm:
    """
    Decide which parser branch an identifier is dispatched to.

    Parameters:
        raw (str): Repository identifier as supplied by the caller.

    Returns:
        InputForm: SSH for `git@` prefixes, SHORT for plain `owner/repo` paths, URL otherwise.
    """
    if raw.startswith(SSH_PREFIX):
        return InputForm.SSH
    if "://" not in raw and not raw.startswith("http") and "@" not in raw:
        return InputForm.SHORT
    return InputForm.URL


def _parse_ssh(raw: str, default_branch: Optional[str]) -> Optional[RepoDescriptor]:
    match = SSH_RX.match(raw)
    if not match:
        return None

    hostname, path = match.groups()
    if path.endswith(GIT_SUFFIX):
        path = path[: -len(GIT_SUFFIX)]

    parts = _segments(path)
    if len(parts) < 2:
        return None

    return RepoDescriptor(
        owner=parts[0],
        repo=parts[1],
        hostname=hostname,
        ref=default_branch or DEFAULT_REF,
    )


def _parse_short(raw: str, default_branch: Optional[str]) -> Optional[RepoDescriptor]:
    parts = _segments(raw)
    if len(parts) < 2:
        return None

    return RepoDescriptor(
        owner=parts[0],
        repo=parts[1],
        hostname=DEFAULT_HOSTNAME,
        ref=default_branch or DEFAULT_REF,
    )


def _parse_url(raw: str, default_branch: Optional[str]) -> Optional[RepoDescriptor]:
    """
    Parse a full URL, falling back to the short form when it is not a valid URL.

    A ref embedded after a tree/blob/raw/src/browse marker wins over `default_branch`;
    every segment after the ref becomes the subpath.
    """
    try:
        split = urlsplit(raw)
        hostname = split.hostname
    except ValueError:
        return _parse_short(raw, default_branch)

    if not split.scheme or not hostname:
        return _parse_short(raw, default_branch)

    parts = _segments(split.path)
    if len(parts) < 2:
        return None

    owner, repo, rest = parts[0], parts[1], parts[2:]
    ref = default_branch or DEFAULT_REF
    subpath = None

    if rest and rest[0] in BRANCH_MARKERS:
        if len(rest) >= 2:
            ref = rest[1]
        if len(rest) > 2:
            subpath = "/".join(rest[2:])

    return RepoDescriptor(
        owner=owner,
        repo=repo,
        hostname=hostname,
        ref=ref,
        subpath=subpath,
    )


_PARSERS: Dict[InputForm, Callable[[str, Optional[str]], Optional[RepoDescriptor]]] = {
    InputForm.SSH: _parse_ssh,
    InputForm.SHORT: _parse_short,
    InputForm.URL: _parse_url,
}


def parse_input(
    raw: str, default_branch: Optional[str] = None
) -> Optional[RepoDescriptor]:
    """
    Parse a repository identifier into a RepoDescriptor.

    Parameters:
        raw (str): Identifier in SSH, short or full URL form.
        default_branch (Optional[str]): Ref to use instead of "main" when the identifier does not embed one.

    Returns:
        Optional[RepoDescriptor]: The parsed descriptor, or None if no owner and repository can be extracted.
    """
    return _PARSERS[classify_input(raw)](raw, default_branch)
