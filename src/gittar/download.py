"""
Tarball download with main -> master branch fallback.

Each candidate ref is tried in order. Only a 404 advances to the next
candidate; any other HTTP failure, a 404 on the last candidate, or a
transport error stops the sequence with a URLError.
"""

import time
from typing import List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry  # type: ignore

from gittar.constants import FALLBACK_REFS, HTTP_NOT_FOUND
from gittar.exceptions import URLError
from gittar.log_utils import logger
from gittar.models import Config
from gittar.platforms import get_tarball_url
from gittar.settings import Settings, load_settings


def candidate_refs(config: Config) -> List[str]:
    """
    Return the refs to try, in order.

    A pinned `config.branch` disables the fallback; otherwise "main" then "master".
    """
    if config.branch:
        return [config.branch]
    return list(FALLBACK_REFS)


def create_session(settings: Settings) -> requests.Session:
    """
    Create a requests Session with the configured connection-level retry policy.

    Only connection establishment is retried, and only when `connect_retries` is
    above zero; HTTP statuses are never retried here.
    """
    retry_strategy: Retry = Retry(
        total=settings.connect_retries,
        connect=settings.connect_retries,
        read=False,
        status=0,
        backoff_factor=settings.backoff_factor,
        allowed_methods=frozenset({"GET"}),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry_strategy)
    session = requests.Session()
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


def http_get(
    session: requests.Session, url: str, timeout: Optional[float] = None
) -> requests.Response:
    """
    Issue a GET for the tarball URL.

    Raises:
        URLError: On any transport-level failure; the requests exception is attached as the cause.
    """
    try:
        return session.get(url, timeout=timeout, allow_redirects=True)
    except requests.exceptions.RequestException as e:
        raise URLError(
            f"Network error downloading tar from {url}",
            url=url,
            details=str(e),
            cause=e,
        ) from e


def download_tarball(
    config: Config,
    session: Optional[requests.Session] = None,
    settings: Optional[Settings] = None,
) -> bytes:
    """
    Download the repository tarball, falling back from "main" to "master" on 404.

    Parameters:
        config (Config): Call configuration; `url` and `branch` select the tarball.
        session (Optional[requests.Session]): Session to use; a new one is created and closed when omitted.
        settings (Optional[Settings]): Transport settings; loaded from the settings file when omitted.

    Returns:
        bytes: The gzipped tarball payload.

    Raises:
        URLError: If the platform is unsupported, a request fails, or every candidate ref returns 404.
    """
    settings = settings or load_settings()
    owns_session = session is None
    if session is None:
        session = create_session(settings)

    refs = candidate_refs(config)
    try:
        for index, ref in enumerate(refs):
            is_last = index == len(refs) - 1
            url = get_tarball_url(config.url, ref)
            if url is None:
                raise URLError(
                    f"Unsupported platform for URL: {config.url}", url=config.url
                )

            logger.debug(f"Downloading {url} (branch: {ref})")
            start_time = time.time()
            response = http_get(session, url, settings.request_timeout)
            try:
                if _is_success(response.status_code):
                    payload = response.content
                    elapsed = time.time() - start_time
                    logger.info(
                        f"Downloaded {config.url} @ {ref} ({len(payload)} bytes)"
                    )
                    logger.debug("Download elapsed time: %.2fs for %s", elapsed, url)
                    return payload

                if response.status_code == HTTP_NOT_FOUND and not is_last:
                    logger.info(f"Branch '{ref}' not found for {config.url}, trying next")
                    continue

                status = f"{response.status_code} {response.reason or ''}".strip()
                raise URLError(
                    f"Failed to download tar: {status} (branch: {ref})",
                    url=url,
                    branch=ref,
                    status_code=response.status_code,
                )
            finally:
                response.close()
    finally:
        if owns_session:
            session.close()

    # Unreachable: the last candidate always returns or raises.
    raise URLError(f"All branch attempts failed for {config.url}", url=config.url)
