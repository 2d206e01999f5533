import io
import tarfile
from pathlib import Path
from typing import Dict, Optional
from unittest.mock import MagicMock

import platformdirs
import pytest
import requests

_NETWORK_BLOCK_MSG = (
    "Network access is blocked during tests. Mock requests.Session.get."
)


def _block_network(*_args, **_kwargs):
    """
    Prevent network calls in tests by raising a RuntimeError.

    Raises:
        RuntimeError: with `_NETWORK_BLOCK_MSG` indicating that network access is blocked during tests.
    """
    raise RuntimeError(_NETWORK_BLOCK_MSG)


@pytest.fixture(autouse=True)
def _isolate_test_environment(tmp_path_factory, monkeypatch):
    """
    Point HOME and the platformdirs config directory at temporary locations.

    Keeps the default cache (~/.cache/hulla/gittar) and the settings file out of
    the real home directory, and clears any GITTAR_* overrides from the environment.
    """
    base = tmp_path_factory.mktemp("gittar")
    home_dir = base / "home"
    config_dir = base / "config"
    for path in (home_dir, config_dir):
        path.mkdir(parents=True, exist_ok=True)

    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.setattr(
        platformdirs, "user_config_dir", lambda *_args, **_kwargs: str(config_dir)
    )
    for name in (
        "GITTAR_CONFIG_FILE",
        "GITTAR_REQUEST_TIMEOUT",
        "GITTAR_CONNECT_RETRIES",
        "GITTAR_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


def pytest_runtest_setup():
    """Prevent real network requests during tests."""
    requests.get = _block_network
    requests.Session.request = _block_network


@pytest.fixture
def home_dir() -> Path:
    """Return the isolated home directory."""
    return Path.home()


def build_tarball(files: Dict[str, str], root: str = "test-repo-main") -> bytes:
    """
    Build an in-memory .tar.gz wrapping `files` in a single root folder, as hosting platforms do.

    Parameters:
        files: Mapping of relative path to text content.
        root: Name of the wrapping folder.
    """
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        root_info = tarfile.TarInfo(root)
        root_info.type = tarfile.DIRTYPE
        root_info.mode = 0o755
        tar.addfile(root_info)
        for name, content in files.items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(f"{root}/{name}")
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def make_response(
    status_code: int = 200, content: bytes = b"", reason: Optional[str] = None
) -> MagicMock:
    """Create a mock requests.Response."""
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.content = content
    response.reason = reason if reason is not None else (
        "OK" if status_code == 200 else "Not Found" if status_code == 404 else "Error"
    )
    return response


DEFAULT_FILES = {
    "README.md": "# Test Repo",
    "package.json": '{"name":"test"}',
    "src/index.ts": "export {}",
    "src/utils/helpers.ts": "export const x = 1",
    "docs/guide.md": "guide",
    ".gitignore": "node_modules",
    ".github/workflows/ci.yml": "on: push",
}


@pytest.fixture
def tarball() -> bytes:
    """A repository tarball with sources, docs and hidden entries."""
    return build_tarball(DEFAULT_FILES)


@pytest.fixture
def tarball_factory():
    """Return the build_tarball helper."""
    return build_tarball


@pytest.fixture
def response_factory():
    """Return the make_response helper."""
    return make_response
