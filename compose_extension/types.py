"""
Type definitions for compose-extension.

Defines enums, dataclasses and host-facing protocols used across the package for:
- Installation status and its status-bar presentation
- Release descriptors from the release source
- Container engine connections supplied by the host
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol, Sequence, Union, runtime_checkable


# Host command identifiers
COMPOSE_INSTALL_COMMAND = "compose.install"
COMPOSE_CHECKS_COMMAND = "compose.checks"


# =============================================================================
# Installation Status
# =============================================================================


class InstallationStatus(str, Enum):
    """
    Reconciled compose installation status.

    Computed fresh on every check cycle, never persisted:
    - NOT_INSTALLED: No compose binary on PATH
    - INSTALLED_AND_REACHABLE: Compose usable, via default socket or wrapper
    - INSTALLED_NEEDS_PATH_SETUP: Wrapper written but its folder is not on PATH
    - INSTALLED_NEEDS_WRAPPER: Wrapper required, PATH not yet probed
    - NO_RUNNING_ENGINE: Wrapper required but no engine is started
    - CHECK_FAILED: A probe faulted during the cycle
    """
    NOT_INSTALLED = "not_installed"
    INSTALLED_AND_REACHABLE = "installed_and_reachable"
    INSTALLED_NEEDS_PATH_SETUP = "installed_needs_path_setup"
    INSTALLED_NEEDS_WRAPPER = "installed_needs_wrapper"
    NO_RUNNING_ENGINE = "no_running_engine"
    CHECK_FAILED = "check_failed"


class StatusIcon(str, Enum):
    """Icon class shown on the status indicator."""
    CHECK = "fa fa-check"
    DOWNLOAD = "fa fa-download"
    WARNING = "fa fa-exclamation-triangle"


class StatusAction(str, Enum):
    """Command dispatched by the host when the status indicator is clicked."""
    INSTALL = COMPOSE_INSTALL_COMMAND
    SHOW_CHECKS = COMPOSE_CHECKS_COMMAND


@dataclass(frozen=True)
class StatusPresentation:
    """
    Externally visible projection of an InstallationStatus.

    Attributes:
        icon: Icon class for the status indicator
        tooltip: Tooltip text
        action: Command run on click
        text: Label of the status indicator
    """
    icon: StatusIcon
    tooltip: str
    action: StatusAction
    text: str = "Compose"

    @property
    def command(self) -> str:
        """Command identifier for the host."""
        return self.action.value


@dataclass
class CheckResult:
    """
    Outcome of one check cycle.

    Attributes:
        status: Reconciled installation status
        presentation: Presentation pushed to the status bar
        information: Advisory message for the user, if any
    """
    status: InstallationStatus
    presentation: StatusPresentation
    information: Optional[str] = None


# =============================================================================
# Releases
# =============================================================================


@dataclass(frozen=True)
class ReleaseDescriptor:
    """
    A downloadable compose version.

    Attributes:
        id: Release id at the release source
        label: Human-readable name (release name or tag)
        tag: Git tag of the release
    """
    id: Union[int, str]
    label: str
    tag: str = ""


# =============================================================================
# Engine Connections
# =============================================================================


class ConnectionStatus(str, Enum):
    """Lifecycle status of a container engine connection."""
    STARTED = "started"
    STARTING = "starting"
    STOPPED = "stopped"
    STOPPING = "stopping"
    UNKNOWN = "unknown"


@dataclass
class EngineConnection:
    """
    A container engine connection supplied by the host.

    The extension only reads connections, it never mutates them.

    Attributes:
        name: Display name of the connection
        socket_path: Endpoint socket or named pipe path
        status: Current lifecycle status
        provider: Owning provider id (e.g. "podman")
    """
    name: str
    socket_path: str
    status: Union[ConnectionStatus, str] = ConnectionStatus.STARTED
    provider: Optional[str] = None

    @property
    def is_started(self) -> bool:
        """Check if the engine behind this connection is running."""
        return self.status == ConnectionStatus.STARTED


# =============================================================================
# Host Protocols
# =============================================================================


@runtime_checkable
class StatusBar(Protocol):
    """Status indicator sink."""

    def update(self, presentation: StatusPresentation) -> None:
        ...


@runtime_checkable
class MessageSink(Protocol):
    """One-shot user notifications. Must not block."""

    def show_information(self, message: str) -> None:
        ...

    def show_error(self, message: str) -> None:
        ...


@runtime_checkable
class ConnectionProvider(Protocol):
    """Source of container engine connections."""

    def get_container_connections(self) -> List[EngineConnection]:
        ...


@runtime_checkable
class VersionPicker(Protocol):
    """Lets the user choose a release. Returns None when nothing was picked."""

    async def pick(
        self,
        releases: Sequence[ReleaseDescriptor],
        placeholder: str,
    ) -> Optional[ReleaseDescriptor]:
        ...
