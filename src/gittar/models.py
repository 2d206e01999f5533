"""
Core data structures for gittar.

This module defines the records passed between the identifier parser, the
platform resolver, the cache path resolver and the fetch entry point. Every
record is created fresh per call and never mutated afterwards.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class Platform(str, Enum):
    """Git hosting platforms recognized from a hostname."""

    GITHUB = "github"
    GITLAB = "gitlab"
    BITBUCKET = "bitbucket"
    GITEA = "gitea"
    CODEBERG = "codeberg"
    FORGEJO = "forgejo"
    AZURE = "azure"


class InputForm(str, Enum):
    """Shapes a repository identifier can take."""

    SSH = "ssh"
    """git@host:owner/repo(.git)"""

    SHORT = "short"
    """owner/repo on the default host"""

    URL = "url"
    """https://host/owner/repo[/tree/<ref>/<subpath>]"""


@dataclass(frozen=True)
class RepoDescriptor:
    """A parsed repository identifier."""

    owner: str
    """Repository owner, user or group (never empty)"""

    repo: str
    """Repository name (never empty)"""

    hostname: str
    """Host serving the repository (e.g., 'github.com')"""

    ref: str
    """Branch, tag or commit to download"""

    subpath: Optional[str] = None
    """Relative path inside the repository, when the identifier names one"""


@dataclass(frozen=True)
class Config:
    """Options for a single fetch call."""

    url: str
    """Repository identifier in any accepted form"""

    branch: Optional[str] = None
    """Pins the ref and disables the main -> master fallback"""

    cache_dir: Optional[str] = None
    """Overrides the default cache location"""

    out_dir: Optional[str] = None
    """Separate materialization directory; defaults to the cache directory"""

    subpath: Optional[str] = None
    """Filter for returned/copied files; overrides a subpath parsed from the URL"""

    update: bool = False
    """Bypass the cache read and always re-download"""


@dataclass(frozen=True)
class GittarResult:
    """Result of a fetch call."""

    files: List[str]
    """Absolute file paths, filtered by subpath when one is set"""

    cache_dir: str
    """Directory holding the full extracted repository"""

    out_dir: str
    """Directory the files were materialized into (may equal cache_dir)"""

    subpath: Optional[str] = None
    """The subpath filter that was applied"""

    from_cache: bool = False
    """Whether the files were served from an existing cache"""
