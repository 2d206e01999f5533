"""
Constants and configuration values for gittar.

This module contains the default locations, URL templates, path markers and
logging settings used throughout the package.
"""

# Default refs tried in order when no branch is pinned
DEFAULT_REF = "main"
FALLBACK_REFS = ("main", "master")

# Short-form identifiers ("owner/repo") resolve to this host
DEFAULT_HOSTNAME = "github.com"

# Path segments that introduce "<ref>/<subpath>" in browse URLs.
# GitHub/GitLab/Gitea/Codeberg/Forgejo use tree/blob/raw, Bitbucket uses src/browse.
BRANCH_MARKERS = frozenset({"tree", "blob", "raw", "src", "browse"})

SSH_PREFIX = "git@"
GIT_SUFFIX = ".git"

# Tarball URL templates
ARCHIVE_URL_TEMPLATE = "https://{host}/{owner}/{repo}/archive/{ref}.tar.gz"
GITLAB_ARCHIVE_URL_TEMPLATE = (
    "https://{host}/{owner}/{repo}/-/archive/{ref}/{repo}-{ref}.tar.gz"
)
BITBUCKET_ARCHIVE_URL_TEMPLATE = "https://{host}/{owner}/{repo}/get/{ref}.tar.gz"

# Default cache layout: ~/.cache/hulla/gittar/{owner}/{repo}
CACHE_ROOT_PARTS = (".cache", "hulla", "gittar")

# Temporary archive staging
TEMP_ARCHIVE_PREFIX = "gittar-"
TEMP_ARCHIVE_SUFFIX = ".tar.gz"

# HTTP
HTTP_NOT_FOUND = 404
DEFAULT_REQUEST_TIMEOUT = None  # no timeout unless configured
DEFAULT_CONNECT_RETRIES = 0
DEFAULT_BACKOFF_FACTOR = 0.3

# Settings file
APP_NAME = "gittar"
CONFIG_FILE_NAME = "gittar.yaml"
CONFIG_FILE_ENV_VAR = "GITTAR_CONFIG_FILE"
REQUEST_TIMEOUT_ENV_VAR = "GITTAR_REQUEST_TIMEOUT"
CONNECT_RETRIES_ENV_VAR = "GITTAR_CONNECT_RETRIES"

# Logging configuration
LOGGER_NAME = "gittar"
LOG_LEVEL_ENV_VAR = "GITTAR_LOG_LEVEL"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
INFO_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEBUG_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s: %(message)s"
