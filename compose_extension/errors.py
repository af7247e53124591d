"""
Exception types for compose-extension.

Provides typed exceptions for:
- Detection probe faults
- Release source (GitHub) failures
- Platform support
- Filesystem operations during install and wrapper generation
"""

from __future__ import annotations

from typing import Optional


class ComposeExtensionError(Exception):
    """Base exception for all compose-extension errors."""
    pass


class ConfigError(ComposeExtensionError):
    """Raised when ComposeConfig values are invalid."""
    pass


# =============================================================================
# Detection Errors
# =============================================================================


class ProbeError(ComposeExtensionError):
    """
    Raised when a detection probe faults.

    "Not found" is never a ProbeError: a missing binary or a dead socket
    is a valid False answer. This error covers the probe itself failing,
    e.g. permission denied executing a binary found on PATH.
    """
    pass


# =============================================================================
# Release Source Errors
# =============================================================================


class ReleaseSourceError(ComposeExtensionError):
    """
    Raised when the release source cannot serve a request.

    Attributes:
        status_code: HTTP status code, if the server answered
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NetworkError(ReleaseSourceError):
    """Raised on transport failures talking to the release source."""
    pass


class ReleaseNotFoundError(ReleaseSourceError):
    """Raised when the release source has no usable release."""
    pass


class DownloadError(ReleaseSourceError):
    """
    Raised when downloading a release asset fails.

    The destination path is guaranteed not to hold a partial file
    when this is raised.
    """
    pass


# =============================================================================
# Platform / Filesystem Errors
# =============================================================================


class UnsupportedPlatformError(ComposeExtensionError):
    """
    Raised when no compose asset exists for this OS/architecture.

    Attributes:
        os_name: Normalized OS name that was looked up
        arch_name: Normalized architecture name that was looked up
    """

    def __init__(
        self,
        message: str,
        os_name: Optional[str] = None,
        arch_name: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.os_name = os_name
        self.arch_name = arch_name

    def __repr__(self) -> str:
        return (
            f"UnsupportedPlatformError(os_name={self.os_name!r}, "
            f"arch_name={self.arch_name!r})"
        )


class FilesystemError(ComposeExtensionError):
    """
    Raised when a filesystem operation fails.

    This includes:
    - Creating the private bin folder
    - Writing the wrapper script
    - Changing file permissions
    """

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path
