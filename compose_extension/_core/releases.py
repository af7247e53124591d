"""
Compose release source backed by GitHub releases.

Handles:
- Listing the latest stable compose releases
- Resolving the asset for an OS/architecture
- Streaming an asset to disk with an atomic rename
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

import requests

from compose_extension._core.host import normalize_arch, normalize_os
from compose_extension._core.version import get_asset_name
from compose_extension.errors import (
    DownloadError,
    NetworkError,
    ReleaseNotFoundError,
    UnsupportedPlatformError,
)
from compose_extension.types import ReleaseDescriptor

if TYPE_CHECKING:
    from compose_extension.config import ComposeConfig

logger = logging.getLogger(__name__)


CHUNK_SIZE = 8192

# GitHub caps per_page at 100; compose releases carry ~30 assets
ASSETS_PER_PAGE = 100

# Filtering happens client side, so a run of prereleases must not hide stable ones
RELEASES_PER_PAGE = 100


def _entry_id(entry: Any, url: str) -> Union[int, str]:
    if not isinstance(entry, dict) or entry.get("id") is None:
        raise NetworkError(f"Unexpected response from {url}: entry without id")
    return entry["id"]


class ComposeGitHubReleases:
    """
    Release source client for compose binaries.

    Args:
        config: Extension configuration (repository, token, timeouts)
    """

    def __init__(self, config: Optional["ComposeConfig"] = None) -> None:
        if config is None:
            # Imported here to avoid circular imports
            from compose_extension.config import ComposeConfig
            config = ComposeConfig()
        self.config = config

    @property
    def repo_url(self) -> str:
        base = self.config.github_api_url.rstrip("/")
        return f"{base}/repos/{self.config.github_owner}/{self.config.github_repo}"

    def _headers(self, accept: str = "application/vnd.github+json") -> Dict[str, str]:
        headers = {
            "Accept": accept,
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.config.github_token:
            headers["Authorization"] = f"Bearer {self.config.github_token}"
        return headers

    def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET a GitHub API collection and decode it."""
        try:
            response = requests.get(
                url,
                params=params,
                headers=self._headers(),
                timeout=self.config.request_timeout,
            )
        except requests.RequestException as e:
            raise NetworkError(f"Network error requesting {url}: {e}") from e

        if response.status_code == 404:
            raise ReleaseNotFoundError(f"Not found: {url}", status_code=404)
        if response.status_code != 200:
            raise NetworkError(
                f"Request to {url} failed with status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise NetworkError(f"Invalid JSON from {url}: {e}") from e

        if not isinstance(data, list):
            raise NetworkError(f"Unexpected response from {url}: expected a list")
        return data

    # -------------------------------------------------------------------------
    # Sync implementation
    # -------------------------------------------------------------------------

    def list_releases(self) -> List[ReleaseDescriptor]:
        """
        List the latest stable releases, most recent first.

        Drafts and prereleases are skipped. At most
        ``config.max_releases`` entries are returned.

        Raises:
            NetworkError: If the release source is unreachable
            ReleaseNotFoundError: If no stable release exists
        """
        url = f"{self.repo_url}/releases"
        data = self._get_json(url, params={"per_page": RELEASES_PER_PAGE})

        releases = []
        for release in data:
            release_id = _entry_id(release, url)
            if release.get("draft") or release.get("prerelease"):
                continue
            tag = release.get("tag_name") or ""
            releases.append(
                ReleaseDescriptor(
                    id=release_id,
                    label=release.get("name") or tag,
                    tag=tag,
                )
            )
            if len(releases) >= self.config.max_releases:
                break

        if not releases:
            raise ReleaseNotFoundError(
                f"No compose release found in "
                f"{self.config.github_owner}/{self.config.github_repo}"
            )

        logger.debug(f"Found releases: {[r.label for r in releases]}")
        return releases

    def resolve_asset_id(
        self,
        release_id: Union[int, str],
        os_name: str,
        arch_name: str,
    ) -> int:
        """
        Find the asset of a release matching an OS/architecture.

        Args:
            release_id: Release id from list_releases()
            os_name: OS name (Python or Node spelling)
            arch_name: Architecture (Python or Node spelling)

        Returns:
            Asset id

        Raises:
            UnsupportedPlatformError: If no asset matches this platform
            NetworkError: If the release source is unreachable
        """
        os_name = normalize_os(os_name)
        arch_name = normalize_arch(arch_name)
        asset_name = get_asset_name(os_name, arch_name)

        url = f"{self.repo_url}/releases/{release_id}/assets"
        assets = self._get_json(url, params={"per_page": ASSETS_PER_PAGE})
        for asset in assets:
            asset_id = _entry_id(asset, url)
            if asset.get("name") == asset_name:
                logger.debug(f"Resolved {asset_name} to asset {asset_id}")
                return asset_id

        raise UnsupportedPlatformError(
            f"No asset found for {os_name} and {arch_name} (expected {asset_name})",
            os_name=os_name,
            arch_name=arch_name,
        )

    def download_asset(
        self,
        asset_id: Union[int, str],
        destination: Path,
        mode: Optional[int] = None,
    ) -> Path:
        """
        Stream an asset to ``destination``.

        Bytes go to a temporary file in the destination folder which is
        renamed over ``destination`` only once the transfer completed.

        Args:
            asset_id: Asset id from resolve_asset_id()
            destination: Final path of the asset
            mode: Permission bits applied to the temporary file before the
                rename (None keeps the default)

        Raises:
            DownloadError: If the transfer fails; destination is untouched
        """
        destination = Path(destination)
        url = f"{self.repo_url}/releases/assets/{asset_id}"

        logger.info(f"Downloading compose asset {asset_id} to {destination}...")

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{destination.name}.", suffix=".download",
                dir=destination.parent,
            )
        except OSError as e:
            raise DownloadError(f"Unable to prepare {destination}: {e}") from e

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as f, requests.get(
                url,
                headers=self._headers(accept="application/octet-stream"),
                stream=True,
                timeout=self.config.download_timeout,
            ) as response:
                response.raise_for_status()

                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)

            if mode is not None:
                os.chmod(tmp_path, mode)
            os.replace(tmp_path, destination)

        except requests.exceptions.RequestException as e:
            tmp_path.unlink(missing_ok=True)
            raise DownloadError(f"Failed to download asset from {url}: {e}") from e
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise DownloadError(f"Failed to write {destination}: {e}") from e

        logger.info(f"Downloaded compose asset {asset_id}")
        return destination

    # -------------------------------------------------------------------------
    # Async API
    # -------------------------------------------------------------------------

    async def grab_latest_releases_metadata(self) -> List[ReleaseDescriptor]:
        """Async wrapper for list_releases()."""
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self.list_releases)

    async def get_release_asset_id(
        self,
        release_id: Union[int, str],
        os_name: str,
        arch_name: str,
    ) -> int:
        """Async wrapper for resolve_asset_id()."""
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(
            None, self.resolve_asset_id, release_id, os_name, arch_name
        )

    async def download_release_asset(
        self,
        asset_id: Union[int, str],
        destination: Path,
        mode: Optional[int] = None,
    ) -> Path:
        """Async wrapper for download_asset()."""
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(
            None, self.download_asset, asset_id, destination, mode
        )
