"""
Configuration for compose-extension.

Usage:
    from compose_extension import ComposeConfig

    # Defaults (platform data dir, docker/compose on GitHub)
    config = ComposeConfig()

    # From environment variables
    config = ComposeConfig.from_env()

Environment Variables:
    COMPOSE_EXTENSION_STORAGE_PATH: Private storage root (bin/ lives under it)
    COMPOSE_EXTENSION_GITHUB_REPO: Release repository as "owner/repo"
    COMPOSE_EXTENSION_TIMEOUT: HTTP timeout in seconds for API calls
    COMPOSE_EXTENSION_SOCKET_PATH: Default container engine socket override
    GITHUB_TOKEN: Optional token for the GitHub API
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from platformdirs import user_data_dir

from compose_extension._core.version import (
    GITHUB_API_URL,
    GITHUB_OWNER,
    GITHUB_REPO,
    MAX_RELEASES,
)
from compose_extension.errors import ConfigError


def default_storage_path() -> Path:
    """Get the private storage root for this extension."""
    return Path(user_data_dir("compose-extension", "compose-extension"))


@dataclass
class ComposeConfig:
    """
    Configuration for the compose lifecycle manager.

    Attributes:
        storage_path: Private storage root; binaries go in its bin/ folder
        github_owner: Owner of the release repository
        github_repo: Name of the release repository
        github_api_url: Base URL of the GitHub REST API
        github_token: Optional API token (raises rate limits)
        max_releases: Number of releases offered for install
        request_timeout: Timeout in seconds for API calls
        download_timeout: Timeout in seconds for asset downloads
        default_socket_path: Override for the default engine socket
    """
    storage_path: Path = field(default_factory=default_storage_path)
    github_owner: str = GITHUB_OWNER
    github_repo: str = GITHUB_REPO
    github_api_url: str = GITHUB_API_URL
    github_token: Optional[str] = None
    max_releases: int = MAX_RELEASES
    request_timeout: float = 30.0
    download_timeout: float = 300.0
    default_socket_path: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate configuration on creation."""
        self.storage_path = Path(self.storage_path)
        self.validate()

    def validate(self) -> None:
        """Validate configuration values."""
        if self.max_releases < 1:
            raise ConfigError(f"max_releases must be >= 1, got {self.max_releases}")
        if self.request_timeout <= 0:
            raise ConfigError(
                f"request_timeout must be positive, got {self.request_timeout}"
            )
        if self.download_timeout <= 0:
            raise ConfigError(
                f"download_timeout must be positive, got {self.download_timeout}"
            )
        if not self.github_owner or not self.github_repo:
            raise ConfigError("github_owner and github_repo must not be empty")

    @property
    def bin_folder(self) -> Path:
        """Folder holding the compose binary and the wrapper script."""
        return self.storage_path / "bin"

    @classmethod
    def from_env(cls) -> "ComposeConfig":
        """
        Build a configuration from environment variables.

        Unset variables keep their defaults.

        Raises:
            ConfigError: If a variable holds an invalid value
        """
        kwargs: dict = {}

        storage = os.environ.get("COMPOSE_EXTENSION_STORAGE_PATH")
        if storage:
            kwargs["storage_path"] = Path(storage).expanduser()

        repo = os.environ.get("COMPOSE_EXTENSION_GITHUB_REPO")
        if repo:
            owner, sep, name = repo.partition("/")
            if not sep or not owner or not name:
                raise ConfigError(
                    f"COMPOSE_EXTENSION_GITHUB_REPO must be 'owner/repo', got {repo!r}"
                )
            kwargs["github_owner"] = owner
            kwargs["github_repo"] = name

        timeout = os.environ.get("COMPOSE_EXTENSION_TIMEOUT")
        if timeout:
            try:
                kwargs["request_timeout"] = float(timeout)
            except ValueError as e:
                raise ConfigError(
                    f"COMPOSE_EXTENSION_TIMEOUT must be a number, got {timeout!r}"
                ) from e

        socket_path = os.environ.get("COMPOSE_EXTENSION_SOCKET_PATH")
        if socket_path:
            kwargs["default_socket_path"] = socket_path

        token = os.environ.get("GITHUB_TOKEN")
        if token:
            kwargs["github_token"] = token

        return cls(**kwargs)
