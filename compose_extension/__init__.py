"""
compose-extension: Compose lifecycle manager for container engine hosts.

This package provides:
- Detection of a compose binary and of a reachable default engine socket
- A single reconciled status for the host's status bar
- Install of a versioned docker-compose binary from GitHub releases
- A `compose` wrapper script that sets DOCKER_HOST for a running engine

Installation:
    pip install compose-extension

Quickstart:
    from compose_extension import ComposeExtension, EngineConnection

    class Connections:
        def get_container_connections(self):
            return [
                EngineConnection(
                    name="podman-machine-default",
                    socket_path="/run/user/1000/podman/podman.sock",
                    status="started",
                ),
            ]

    extension = ComposeExtension(connection_provider=Connections())
    commands = await extension.activate()
    await commands["compose.install"]()
"""

from compose_extension.types import (
    COMPOSE_INSTALL_COMMAND,
    COMPOSE_CHECKS_COMMAND,
    InstallationStatus,
    StatusIcon,
    StatusAction,
    StatusPresentation,
    CheckResult,
    ReleaseDescriptor,
    ConnectionStatus,
    EngineConnection,
)
from compose_extension.errors import (
    ComposeExtensionError,
    ConfigError,
    ProbeError,
    ReleaseSourceError,
    NetworkError,
    ReleaseNotFoundError,
    DownloadError,
    UnsupportedPlatformError,
    FilesystemError,
)
from compose_extension.config import ComposeConfig
from compose_extension.wrapper import ComposeWrapperGenerator
from compose_extension.extension import (
    ComposeExtension,
    LoggingStatusBar,
    LoggingMessageSink,
    LatestReleasePicker,
)
from compose_extension._core.version import EXTENSION_VERSION

__version__ = EXTENSION_VERSION

__all__ = [
    # Version
    "__version__",
    "EXTENSION_VERSION",
    # Types
    "COMPOSE_INSTALL_COMMAND",
    "COMPOSE_CHECKS_COMMAND",
    "InstallationStatus",
    "StatusIcon",
    "StatusAction",
    "StatusPresentation",
    "CheckResult",
    "ReleaseDescriptor",
    "ConnectionStatus",
    "EngineConnection",
    # Errors
    "ComposeExtensionError",
    "ConfigError",
    "ProbeError",
    "ReleaseSourceError",
    "NetworkError",
    "ReleaseNotFoundError",
    "DownloadError",
    "UnsupportedPlatformError",
    "FilesystemError",
    # Config
    "ComposeConfig",
    # Wrapper
    "ComposeWrapperGenerator",
    # Coordinator
    "ComposeExtension",
    "LoggingStatusBar",
    "LoggingMessageSink",
    "LatestReleasePicker",
]
