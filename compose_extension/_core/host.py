"""
Host platform detection for compose-extension.

Reports the OS family so callers can choose file extensions and
permission handling, and maps OS/architecture names to the naming
used by compose release assets.
"""

from __future__ import annotations

import platform
from typing import Optional, Tuple

from compose_extension.errors import UnsupportedPlatformError

# Accepts Python (platform.system) and Node (process.platform) spellings
_OS_ALIASES = {
    "darwin": "darwin",
    "macos": "darwin",
    "linux": "linux",
    "windows": "windows",
    "win32": "windows",
}

# Compose publishes assets with uname-style architecture names
_ARCH_ALIASES = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "x64": "x86_64",
    "arm64": "aarch64",
    "aarch64": "aarch64",
    "armv7l": "armv7",
    "armv7": "armv7",
    "arm": "armv7",
    "armv6l": "armv6",
    "armv6": "armv6",
    "ppc64le": "ppc64le",
    "ppc64": "ppc64le",
    "s390x": "s390x",
    "riscv64": "riscv64",
}


def normalize_os(system: str) -> str:
    """
    Normalize an OS name.

    Raises:
        UnsupportedPlatformError: If the OS is not supported
    """
    os_name = _OS_ALIASES.get(system.lower())
    if os_name is None:
        raise UnsupportedPlatformError(
            f"Unsupported operating system: {system}", os_name=system
        )
    return os_name


def normalize_arch(machine: str) -> str:
    """
    Normalize an architecture name to compose asset naming.

    Raises:
        UnsupportedPlatformError: If the architecture is not supported
    """
    arch_name = _ARCH_ALIASES.get(machine.lower())
    if arch_name is None:
        raise UnsupportedPlatformError(
            f"Unsupported architecture: {machine}", arch_name=machine
        )
    return arch_name


def get_platform_info() -> Tuple[str, str]:
    """
    Determine the OS and architecture.

    Returns:
        Tuple of (os_name, arch_name)

    Raises:
        UnsupportedPlatformError: If platform is unsupported
    """
    return HostOS().platform_info()


class HostOS:
    """
    OS capability probe.

    System and machine names are read once, on construction. Pass them
    explicitly to pin a platform (tests, or a host that already knows it).
    """

    def __init__(
        self,
        system: Optional[str] = None,
        machine: Optional[str] = None,
    ) -> None:
        self._system = (system or platform.system()).lower()
        self._machine = (machine or platform.machine()).lower()

    @property
    def name(self) -> str:
        """Normalized OS name (linux, darwin, windows)."""
        return normalize_os(self._system)

    @property
    def arch(self) -> str:
        """Architecture in compose asset naming (x86_64, aarch64, ...)."""
        return normalize_arch(self._machine)

    def platform_info(self) -> Tuple[str, str]:
        return self.name, self.arch

    def is_windows(self) -> bool:
        return self._system in ("windows", "win32")

    def is_linux(self) -> bool:
        return self._system == "linux"

    def is_mac(self) -> bool:
        return self._system in ("darwin", "macos")
