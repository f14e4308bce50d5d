"""
GitHub release listing and asset downloads.

Implements the two network operations the wizard needs using requests.
"""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

import humanize
import requests

from gizmo_installer.core.config import GithubConfig
from gizmo_installer.core.errors import DownloadError, NoStableReleaseError, ReleaseFetchError
from gizmo_installer.core.logging import OperationLogger, get_logger
from gizmo_installer.core.models import Asset, Release

logger = get_logger(__name__)


def parse_releases(payload: Any) -> list[Release]:
    """Build releases from an API payload and mark the latest one.

    The latest release is the first one, in list order, that is neither
    a draft nor a prerelease.
    """
    if not isinstance(payload, list):
        raise ReleaseFetchError("Unexpected response from the release server.")

    try:
        releases = [Release.from_api(item) for item in payload]
    except (KeyError, TypeError, ValueError) as e:
        raise ReleaseFetchError(f"Malformed release information: {e}") from e

    for index, release in enumerate(releases):
        if release.is_stable:
            releases[index] = dataclasses.replace(release, latest=True)
            return releases

    raise NoStableReleaseError("No stable releases found.")


def fetch_releases(
    owner: str,
    repo: str,
    config: GithubConfig | None = None,
    session: requests.Session | None = None,
) -> list[Release]:
    """Fetch all releases of ``owner/repo``.

    A session created here is closed before returning.
    """
    config = config or GithubConfig()
    if session is None:
        with requests.Session() as http:
            return _request_releases(http, owner, repo, config)
    return _request_releases(session, owner, repo, config)


def _request_releases(
    http: requests.Session, owner: str, repo: str, config: GithubConfig
) -> list[Release]:
    url = f"{config.api_url}/repos/{owner}/{repo}/releases"

    with OperationLogger("release fetch", logger, owner=owner, repo=repo):
        try:
            response = http.get(
                url,
                headers={
                    "User-Agent": config.user_agent,
                    "Accept": "application/vnd.github+json",
                },
                timeout=config.request_timeout_seconds,
            )
        except requests.RequestException as e:
            raise ReleaseFetchError(f"Failed to fetch releases: {e}") from e

        if not response.ok:
            raise ReleaseFetchError(
                f"Failed to fetch releases: {response.status_code} {response.reason}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ReleaseFetchError("Failed to fetch releases: response was not JSON.") from e

        releases = parse_releases(payload)

    logger.info("Releases fetched", owner=owner, repo=repo, count=len(releases))
    return releases


def asset_cache_path(
    cache_root: Path,
    owner: str,
    repo: str,
    release: Release,
    asset: Asset,
) -> Path:
    """Deterministic download destination for an asset."""
    return cache_root / owner / repo / release.name / asset.name


def download_asset(
    asset: Asset,
    owner: str,
    repo: str,
    release: Release,
    cache_root: Path,
    config: GithubConfig | None = None,
    session: requests.Session | None = None,
) -> Path:
    """Download ``asset`` into the cache and return its local path.

    A file already present at the destination is reused without any
    network access.
    """
    dest_path = asset_cache_path(cache_root, owner, repo, release, asset)
    if dest_path.is_file():
        logger.info("Asset cache hit", asset=asset.name, path=str(dest_path))
        return dest_path

    config = config or GithubConfig()
    if session is None:
        with requests.Session() as http:
            return _stream_asset(http, asset, release, dest_path, config)
    return _stream_asset(session, asset, release, dest_path, config)


def _stream_asset(
    http: requests.Session,
    asset: Asset,
    release: Release,
    dest_path: Path,
    config: GithubConfig,
) -> Path:
    partial_path = dest_path.with_name(dest_path.name + ".part")

    with OperationLogger("asset download", logger, asset=asset.name, release=release.name) as op:
        try:
            dest_path.parent.mkdir(parents=True, exist_ok=True)
            with http.get(
                asset.download_url,
                headers={"User-Agent": config.user_agent},
                timeout=config.download_timeout_seconds,
                stream=True,
            ) as response:
                if not response.ok:
                    raise DownloadError(
                        f"Failed to download {asset.name}: "
                        f"{response.status_code} {response.reason}"
                    )
                written = 0
                with open(partial_path, "wb") as f:
                    for chunk in response.iter_content(chunk_size=config.chunk_size_bytes):
                        if chunk:
                            f.write(chunk)
                            written += len(chunk)
            os.replace(partial_path, dest_path)
            op.update(size=humanize.naturalsize(written, binary=True), path=str(dest_path))
        except requests.RequestException as e:
            partial_path.unlink(missing_ok=True)
            raise DownloadError(f"Failed to download {asset.name}: {e}") from e
        except OSError as e:
            partial_path.unlink(missing_ok=True)
            raise DownloadError(f"Failed to save {asset.name}: {e}") from e

    return dest_path
