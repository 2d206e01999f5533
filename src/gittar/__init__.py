"""gittar: fetch git repository snapshots as tarballs into a local cache."""

from gittar.exceptions import (
    ConfigurationError,
    FileSystemError,
    GittarError,
    PathValidationError,
    URLError,
)
from gittar.fetcher import fetch, gittar
from gittar.models import Config, GittarResult, InputForm, Platform, RepoDescriptor
from gittar.parser import parse_input
from gittar.platforms import detect_platform, get_tarball_url

__version__ = "0.1.0"

__all__ = [
    "Config",
    "ConfigurationError",
    "FileSystemError",
    "GittarError",
    "GittarResult",
    "InputForm",
    "PathValidationError",
    "Platform",
    "RepoDescriptor",
    "URLError",
    "__version__",
    "detect_platform",
    "fetch",
    "get_tarball_url",
    "gittar",
    "parse_input",
]
