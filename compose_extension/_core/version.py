"""
Version and release-source constants for compose-extension.

- EXTENSION_VERSION: User-facing package version
- GITHUB_OWNER / GITHUB_REPO: Where compose releases are published
- Asset and artifact names used in the private bin folder
"""

from __future__ import annotations

# compose-extension version (user-facing, independent semver)
EXTENSION_VERSION = "0.1.0"

# GitHub repository for compose binary downloads
GITHUB_API_URL = "https://api.github.com"
GITHUB_OWNER = "docker"
GITHUB_REPO = "compose"

# Number of releases offered to the user
MAX_RELEASES = 5

# Artifacts written to <storage>/bin
BINARY_NAME = "docker-compose"
WRAPPER_NAME = "compose"


def get_binary_filename(os_name: str) -> str:
    """
    Name of the downloaded compose binary on disk.

    Args:
        os_name: Normalized OS name (linux, darwin, windows)

    Returns:
        "docker-compose.exe" on Windows, "docker-compose" otherwise
    """
    ext = ".exe" if os_name == "windows" else ""
    return f"{BINARY_NAME}{ext}"


def get_wrapper_filename(os_name: str) -> str:
    """Name of the generated wrapper script on disk."""
    ext = ".bat" if os_name == "windows" else ""
    return f"{WRAPPER_NAME}{ext}"


def get_asset_name(os_name: str, arch_name: str) -> str:
    """
    Get the release asset name for a platform.

    Args:
        os_name: OS name (darwin, linux, windows)
        arch_name: Architecture in compose naming (x86_64, aarch64, ...)

    Returns:
        Asset name, e.g. "docker-compose-linux-x86_64"
    """
    ext = ".exe" if os_name == "windows" else ""
    return f"{BINARY_NAME}-{os_name}-{arch_name}{ext}"
