"""
Core building blocks for compose-extension.

This module handles:
- Host OS and architecture detection
- Compose / socket / PATH detection probes
- Release listing and binary download from GitHub
"""

from compose_extension._core.version import (
    EXTENSION_VERSION,
    BINARY_NAME,
    WRAPPER_NAME,
    get_asset_name,
)
from compose_extension._core.host import (
    HostOS,
    get_platform_info,
)
from compose_extension._core.detect import Detect
from compose_extension._core.releases import ComposeGitHubReleases

__all__ = [
    # Version
    "EXTENSION_VERSION",
    "BINARY_NAME",
    "WRAPPER_NAME",
    "get_asset_name",
    # Host
    "HostOS",
    "get_platform_info",
    # Detection
    "Detect",
    # Releases
    "ComposeGitHubReleases",
]
