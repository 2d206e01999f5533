"""
Hosting platform detection and tarball URL generation.

Supported platforms and their snapshot endpoints:

- GitHub, Gitea, Codeberg, Forgejo: https://{host}/{owner}/{repo}/archive/{ref}.tar.gz
- GitLab: https://{host}/{owner}/{repo}/-/archive/{ref}/{repo}-{ref}.tar.gz
- Bitbucket: https://{host}/{owner}/{repo}/get/{ref}.tar.gz

Azure DevOps is recognized but has no tarball endpoint, so it resolves to None.
"""

from typing import Optional, Sequence, Tuple

from gittar.constants import (
    ARCHIVE_URL_TEMPLATE,
    BITBUCKET_ARCHIVE_URL_TEMPLATE,
    GITLAB_ARCHIVE_URL_TEMPLATE,
)
from gittar.log_utils import logger
from gittar.models import Platform
from gittar.parser import parse_input

# Checked in order; the first keyword found in the hostname wins.
PLATFORM_KEYWORDS: Tuple[Tuple[Sequence[str], Platform], ...] = (
    (("dev.azure.com", "visualstudio.com"), Platform.AZURE),
    (("codeberg",), Platform.CODEBERG),
    (("forgejo",), Platform.FORGEJO),
    (("gitea",), Platform.GITEA),
    (("github",), Platform.GITHUB),
    (("gitlab",), Platform.GITLAB),
    (("bitbucket",), Platform.BITBUCKET),
)

UNSUPPORTED_PLATFORMS = frozenset({Platform.AZURE})


def detect_platform(hostname: str) -> Optional[Platform]:
    """
    Detect the git hosting platform from a hostname.

    Parameters:
        hostname (str): Hostname to classify; matching is case-insensitive.

    Returns:
        Optional[Platform]: The first matching platform, or None for an unrecognized host.
    """
    normalized = hostname.lower()
    for keywords, platform in PLATFORM_KEYWORDS:
        if any(keyword in normalized for keyword in keywords):
            return platform
    return None


def format_tarball_url(
    platform: Platform, host: str, owner: str, repo: str, ref: str
) -> str:
    if platform is Platform.GITLAB:
        template = GITLAB_ARCHIVE_URL_TEMPLATE
    elif platform is Platform.BITBUCKET:
        template = BITBUCKET_ARCHIVE_URL_TEMPLATE
    else:
        template = ARCHIVE_URL_TEMPLATE
    return template.format(host=host, owner=owner, repo=repo, ref=ref)


def get_tarball_url(raw: str, branch: Optional[str] = None) -> Optional[str]:
    """
    Build the tarball download URL for a repository identifier.

    Never raises: unparseable identifiers, unknown hosts and platforms without a
    tarball endpoint all resolve to None.

    Parameters:
        raw (str): Repository identifier (owner/repo, git@host:owner/repo.git, https://...).
        branch (Optional[str]): Ref to use when the identifier does not embed one (defaults to "main").

    Returns:
        Optional[str]: The tarball URL, or None when the platform does not support tarball downloads.
    """
    try:
        parsed = parse_input(raw, branch)
        if parsed is None:
            return None

        platform = detect_platform(parsed.hostname)
        if platform is None or platform in UNSUPPORTED_PLATFORMS:
            return None

        return format_tarball_url(
            platform, parsed.hostname, parsed.owner, parsed.repo, parsed.ref
        )
    except Exception as e:
        logger.debug(f"Could not resolve tarball URL for {raw!r}: {e}")
        return None
