"""
Integration tests for the fetch entry point.

HTTP is mocked at requests.Session.get; extraction, caching and copying run
against real temporary directories.
"""

import io
import os
import tarfile
from unittest.mock import patch

import pytest
import requests

from gittar import Config, FileSystemError, GittarResult, URLError, fetch
from gittar.settings import Settings


@pytest.fixture
def mock_get(tarball, response_factory):
    with patch.object(
        requests.Session, "get", return_value=response_factory(200, tarball)
    ) as mock:
        yield mock


def _tarball_with_symlink() -> bytes:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        readme = tarfile.TarInfo("repo-main/README.md")
        readme.size = 5
        tar.addfile(readme, io.BytesIO(b"hello"))
        link = tarfile.TarInfo("repo-main/LINK.md")
        link.type = tarfile.SYMTYPE
        link.linkname = "README.md"
        tar.addfile(link)
    return buffer.getvalue()


class TestFetch:
    """Test the fetch orchestration."""

    def test_downloads_and_extracts(self, tmp_path, mock_get):
        cache = tmp_path / "cache"
        result = fetch(Config(url="owner/repo", cache_dir=str(cache)), settings=Settings())

        assert isinstance(result, GittarResult)
        assert result.from_cache is False
        assert result.cache_dir == str(cache)
        assert result.out_dir == str(cache)
        assert result.subpath is None
        assert str(cache / "README.md") in result.files
        assert str(cache / "src" / "index.ts") in result.files
        assert all(f.startswith(str(cache)) for f in result.files)
        mock_get.assert_called_once()

    def test_accepts_bare_identifier(self, home_dir, mock_get):
        result = fetch("owner/repo", settings=Settings())

        expected = os.path.join(str(home_dir), ".cache", "hulla", "gittar", "owner", "repo")
        assert result.cache_dir == expected
        assert result.out_dir == expected
        assert os.path.isfile(os.path.join(expected, "README.md"))

    def test_second_call_uses_cache(self, tmp_path, mock_get):
        config = Config(url="owner/repo", cache_dir=str(tmp_path / "cache"))

        first = fetch(config, settings=Settings())
        second = fetch(config, settings=Settings())

        assert mock_get.call_count == 1
        assert first.from_cache is False
        assert second.from_cache is True
        assert first.files == second.files
        assert first.cache_dir == second.cache_dir
        assert first.out_dir == second.out_dir

    def test_update_bypasses_cache(self, tmp_path, mock_get):
        config = Config(url="owner/repo", cache_dir=str(tmp_path / "cache"))

        fetch(config, settings=Settings())
        result = fetch(
            Config(url="owner/repo", cache_dir=str(tmp_path / "cache"), update=True),
            settings=Settings(),
        )

        assert mock_get.call_count == 2
        assert result.from_cache is False

    def test_out_dir_receives_copy(self, tmp_path, mock_get):
        cache = tmp_path / "cache"
        out = tmp_path / "out"
        result = fetch(
            Config(url="owner/repo", cache_dir=str(cache), out_dir=str(out)),
            settings=Settings(),
        )

        assert result.cache_dir == str(cache)
        assert result.out_dir == str(out)
        assert all(f.startswith(str(out)) for f in result.files)
        assert (out / "README.md").exists()
        assert (cache / "README.md").exists()

    def test_repeated_out_dir_fetch_with_symlinks(self, tmp_path, response_factory):
        cache = str(tmp_path / "cache")
        out = tmp_path / "out"
        with patch.object(
            requests.Session,
            "get",
            return_value=response_factory(200, _tarball_with_symlink()),
        ) as mock_get:
            first = fetch(
                Config(url="owner/repo", cache_dir=cache, out_dir=str(out)),
                settings=Settings(),
            )
            second = fetch(
                Config(url="owner/repo", cache_dir=cache, out_dir=str(out)),
                settings=Settings(),
            )
            updated = fetch(
                Config(url="owner/repo", cache_dir=cache, out_dir=str(out), update=True),
                settings=Settings(),
            )

        assert mock_get.call_count == 2
        assert second.from_cache is True
        assert first.files == second.files == updated.files
        assert str(out / "LINK.md") in first.files
        assert os.readlink(out / "LINK.md") == "README.md"
        assert (out / "LINK.md").read_text() == "hello"

    def test_failed_extraction_does_not_poison_cache(
        self, tmp_path, tarball, response_factory
    ):
        config = Config(url="owner/repo", cache_dir=str(tmp_path / "cache"))
        with patch.object(
            requests.Session,
            "get",
            side_effect=[response_factory(200, b"garbage"), response_factory(200, tarball)],
        ) as mock_get:
            with pytest.raises(FileSystemError):
                fetch(config, settings=Settings())
            result = fetch(config, settings=Settings())

        assert mock_get.call_count == 2
        assert result.from_cache is False
        assert str(tmp_path / "cache" / "README.md") in result.files

    def test_tree_url_subpath_is_relative_to_out_dir(self, tmp_path, mock_get):
        cache = tmp_path / "cache"
        out = tmp_path / "out"
        result = fetch(
            Config(
                url="https://github.com/owner/repo/tree/main/src",
                cache_dir=str(cache),
                out_dir=str(out),
            ),
            settings=Settings(),
        )

        assert result.subpath == "src"
        assert result.files == [
            str(out / "index.ts"),
            str(out / "utils" / "helpers.ts"),
        ]
        assert not (out / "src").exists()
        # The cache still holds the full snapshot.
        assert (cache / "README.md").exists()
        assert (cache / "docs" / "guide.md").exists()

    def test_subpath_without_out_dir_lists_cache(self, tmp_path, mock_get):
        cache = tmp_path / "cache"
        result = fetch(
            Config(url="owner/repo", cache_dir=str(cache), subpath="src"),
            settings=Settings(),
        )

        assert result.files == [
            str(cache / "src" / "index.ts"),
            str(cache / "src" / "utils" / "helpers.ts"),
        ]

    def test_config_subpath_overrides_url_subpath(self, tmp_path, mock_get):
        out = tmp_path / "out"
        result = fetch(
            Config(
                url="https://github.com/owner/repo/tree/main/src",
                cache_dir=str(tmp_path / "cache"),
                out_dir=str(out),
                subpath="docs",
            ),
            settings=Settings(),
        )

        assert result.subpath == "docs"
        assert result.files == [str(out / "guide.md")]

    def test_different_subpath_served_from_cached_tree(self, tmp_path, mock_get):
        cache = str(tmp_path / "cache")
        fetch(
            Config(url="owner/repo", cache_dir=cache, out_dir=str(tmp_path / "a"), subpath="src"),
            settings=Settings(),
        )
        result = fetch(
            Config(url="owner/repo", cache_dir=cache, out_dir=str(tmp_path / "b"), subpath="docs"),
            settings=Settings(),
        )

        assert mock_get.call_count == 1
        assert result.from_cache is True
        assert result.files == [str(tmp_path / "b" / "guide.md")]

    def test_missing_subpath_in_cache_triggers_full_download(
        self, tmp_path, tarball_factory, response_factory
    ):
        cache = tmp_path / "cache"
        cache.mkdir()
        (cache / "README.md").write_text("stale")
        payload = tarball_factory({"README.md": "fresh", "lib/a.py": "a"})

        with patch.object(
            requests.Session, "get", return_value=response_factory(200, payload)
        ) as mock_get:
            result = fetch(
                Config(url="owner/repo", cache_dir=str(cache), subpath="lib"),
                settings=Settings(),
            )

        mock_get.assert_called_once()
        assert result.from_cache is False
        assert result.files == [str(cache / "lib" / "a.py")]
        assert (cache / "README.md").read_text() == "fresh"

    def test_main_to_master_fallback(self, tmp_path, tarball, response_factory):
        with patch.object(
            requests.Session,
            "get",
            side_effect=[response_factory(404), response_factory(200, tarball)],
        ) as mock_get:
            result = fetch(
                Config(url="owner/repo", cache_dir=str(tmp_path / "cache")),
                settings=Settings(),
            )

        assert mock_get.call_count == 2
        assert mock_get.call_args_list[0].args[0].endswith("/main.tar.gz")
        assert mock_get.call_args_list[1].args[0].endswith("/master.tar.gz")
        assert result.files

    def test_pinned_branch_404_raises(self, tmp_path, response_factory):
        with patch.object(
            requests.Session, "get", return_value=response_factory(404)
        ) as mock_get:
            with pytest.raises(URLError):
                fetch(
                    Config(url="owner/repo", branch="dev", cache_dir=str(tmp_path / "c")),
                    settings=Settings(),
                )
        assert mock_get.call_count == 1

    def test_unparseable_identifier(self):
        with pytest.raises(URLError, match="Failed to parse repository URL"):
            fetch(Config(url="invalid"), settings=Settings())

    def test_unsupported_platform(self, tmp_path):
        with pytest.raises(URLError, match="Unsupported platform"):
            fetch(
                Config(
                    url="https://dev.azure.com/o/p/_git/r",
                    cache_dir=str(tmp_path / "cache"),
                ),
                settings=Settings(),
            )

    def test_corrupt_archive_raises_filesystem_error(self, tmp_path, response_factory):
        with patch.object(
            requests.Session, "get", return_value=response_factory(200, b"garbage")
        ):
            with pytest.raises(FileSystemError):
                fetch(
                    Config(url="owner/repo", cache_dir=str(tmp_path / "cache")),
                    settings=Settings(),
                )

    def test_traversal_subpath_rejected(self, tmp_path, mock_get):
        with pytest.raises(FileSystemError, match="escapes"):
            fetch(
                Config(url="owner/repo", cache_dir=str(tmp_path / "cache"), subpath="../x"),
                settings=Settings(),
            )
        mock_get.assert_not_called()
