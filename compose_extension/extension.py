"""
Compose lifecycle coordinator.

Reconciles detection results into one status-bar presentation, writes the
DOCKER_HOST wrapper script when the default socket is not usable, and
drives the install flow.

Usage:
    from compose_extension import ComposeExtension, ComposeConfig

    extension = ComposeExtension(
        config=ComposeConfig.from_env(),
        connection_provider=host.connections,
        status_bar=host.status_bar,
        messages=host.messages,
        version_picker=host.quick_pick,
    )
    commands = await extension.activate()

    # Later, when the user clicks the status bar item
    await extension.execute_command(extension.status_item.command)
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, Sequence

from compose_extension._core.detect import Detect
from compose_extension._core.host import HostOS
from compose_extension._core.releases import ComposeGitHubReleases
from compose_extension._core.version import get_binary_filename, get_wrapper_filename
from compose_extension.config import ComposeConfig
from compose_extension.errors import ComposeExtensionError, FilesystemError, ProbeError
from compose_extension.types import (
    COMPOSE_CHECKS_COMMAND,
    COMPOSE_INSTALL_COMMAND,
    CheckResult,
    ConnectionProvider,
    EngineConnection,
    InstallationStatus,
    MessageSink,
    ReleaseDescriptor,
    StatusAction,
    StatusBar,
    StatusIcon,
    StatusPresentation,
    VersionPicker,
)
from compose_extension.wrapper import ComposeWrapperGenerator

logger = logging.getLogger(__name__)


PICKER_PLACEHOLDER = "Select docker compose version to install"

TOOLTIP_INSTALL = "Install Compose"
TOOLTIP_REACHABLE = "Compose is installed and DOCKER_HOST is reachable"
TOOLTIP_NO_ENGINE = (
    "No running container engine. Unable to write a compose wrapper script "
    "that will set DOCKER_HOST in that case. Please start a container engine first."
)

_ICONS = {
    InstallationStatus.NOT_INSTALLED: StatusIcon.DOWNLOAD,
    InstallationStatus.INSTALLED_AND_REACHABLE: StatusIcon.CHECK,
    InstallationStatus.INSTALLED_NEEDS_PATH_SETUP: StatusIcon.WARNING,
    InstallationStatus.INSTALLED_NEEDS_WRAPPER: StatusIcon.WARNING,
    InstallationStatus.NO_RUNNING_ENGINE: StatusIcon.WARNING,
    InstallationStatus.CHECK_FAILED: StatusIcon.WARNING,
}


def present(status: InstallationStatus, tooltip: str) -> StatusPresentation:
    """Map a status to its status-bar presentation."""
    action = (
        StatusAction.INSTALL
        if status == InstallationStatus.NOT_INSTALLED
        else StatusAction.SHOW_CHECKS
    )
    return StatusPresentation(icon=_ICONS[status], tooltip=tooltip, action=action)


# =============================================================================
# Default host collaborators
# =============================================================================


class LoggingStatusBar:
    """Status bar sink that logs updates. Used when the host has none."""

    def __init__(self) -> None:
        self.current: Optional[StatusPresentation] = None

    def update(self, presentation: StatusPresentation) -> None:
        self.current = presentation
        logger.info(f"[{presentation.text}] {presentation.tooltip}")


class LoggingMessageSink:
    """Message sink that logs notifications."""

    def show_information(self, message: str) -> None:
        logger.info(message)

    def show_error(self, message: str) -> None:
        logger.error(message)


class LatestReleasePicker:
    """Version picker that never prompts, so the latest release is installed."""

    async def pick(
        self,
        releases: Sequence[ReleaseDescriptor],
        placeholder: str,
    ) -> Optional[ReleaseDescriptor]:
        return None


# =============================================================================
# Coordinator
# =============================================================================


class ComposeExtension:
    """
    Lifecycle coordinator for the compose tool.

    The only state carried between calls is ``current_information``, the
    advisory shown to the user while the wrapper folder is missing from
    PATH. Check cycles and installs are serialized on one lock.

    Args:
        config: Extension configuration
        detect: Detection service
        releases: Release source client
        host_os: OS probe
        wrapper_generator: Wrapper script generator
        connection_provider: Source of engine connections
        status_bar: Status indicator sink
        messages: User notification sink
        version_picker: Release chooser for installs
    """

    def __init__(
        self,
        config: Optional[ComposeConfig] = None,
        detect: Optional[Detect] = None,
        releases: Optional[ComposeGitHubReleases] = None,
        host_os: Optional[HostOS] = None,
        wrapper_generator: Optional[ComposeWrapperGenerator] = None,
        connection_provider: Optional[ConnectionProvider] = None,
        status_bar: Optional[StatusBar] = None,
        messages: Optional[MessageSink] = None,
        version_picker: Optional[VersionPicker] = None,
    ) -> None:
        self.config = config or ComposeConfig()
        self.host_os = host_os or HostOS()
        self.detect = detect or Detect(
            self.bin_folder,
            host_os=self.host_os,
            socket_path=self.config.default_socket_path,
        )
        self.releases = releases or ComposeGitHubReleases(self.config)
        self.wrapper_generator = wrapper_generator or ComposeWrapperGenerator(self.host_os)
        self.connection_provider = connection_provider
        self.status_bar = status_bar or LoggingStatusBar()
        self.messages = messages or LoggingMessageSink()
        self.version_picker = version_picker or LatestReleasePicker()

        self.current_information: Optional[str] = None
        self.status_item: Optional[StatusPresentation] = None
        self._lock: Optional[asyncio.Lock] = None

    def _get_lock(self) -> asyncio.Lock:
        # Created lazily inside the running event loop
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    @property
    def bin_folder(self) -> Path:
        return self.config.bin_folder.resolve()

    @property
    def binary_path(self) -> Path:
        return self.bin_folder / get_binary_filename(self.host_os.name)

    @property
    def wrapper_path(self) -> Path:
        return self.bin_folder / get_wrapper_filename(self.host_os.name)

    # -------------------------------------------------------------------------
    # Host integration
    # -------------------------------------------------------------------------

    def commands(self) -> Dict[str, Callable[[], Awaitable[object]]]:
        """Commands exposed to the host, keyed by identifier."""
        return {
            COMPOSE_INSTALL_COMMAND: self.install_compose,
            COMPOSE_CHECKS_COMMAND: lambda: self.run_checks(first_check=False),
        }

    async def execute_command(self, command_id: str) -> object:
        """
        Dispatch a host command.

        Raises:
            KeyError: If the command is unknown
        """
        try:
            command = self.commands()[command_id]
        except KeyError:
            raise KeyError(f"Unknown command: {command_id}") from None
        return await command()

    async def activate(self) -> Dict[str, Callable[[], Awaitable[object]]]:
        """
        Run the initial checks and return the commands.

        The first cycle publishes the status item. Its advisory message,
        if any, is not shown.
        """
        await self.run_checks(first_check=True)
        return self.commands()

    async def deactivate(self) -> None:
        logger.info("stopping compose extension")

    def _apply(self, presentation: StatusPresentation) -> None:
        self.status_item = presentation
        self.status_bar.update(presentation)

    # -------------------------------------------------------------------------
    # Check cycle
    # -------------------------------------------------------------------------

    async def run_checks(self, first_check: bool = False) -> CheckResult:
        """
        Run one check cycle and publish its presentation.

        Faults degrade to a warning presentation; nothing is raised.

        Args:
            first_check: True for the cycle run on activation

        Returns:
            The cycle's CheckResult
        """
        async with self._get_lock():
            self.current_information = None

            try:
                result = await self._reconcile()
            except (ComposeExtensionError, OSError) as e:
                logger.warning(f"Compose checks failed: {e}")
                result = CheckResult(
                    status=InstallationStatus.CHECK_FAILED,
                    presentation=present(
                        InstallationStatus.CHECK_FAILED,
                        f"Unable to check compose installation: {e}",
                    ),
                )

            self.current_information = result.information
            self._apply(result.presentation)
            logger.debug(f"Compose status: {result.status.value}")

            self.notify_on_checks(first_check)
            return result

    async def _reconcile(self) -> CheckResult:
        if not await self.detect.check_for_docker_compose():
            return CheckResult(
                status=InstallationStatus.NOT_INSTALLED,
                presentation=present(InstallationStatus.NOT_INSTALLED, TOOLTIP_INSTALL),
            )

        if await self.detect.check_default_socket_is_alive():
            return CheckResult(
                status=InstallationStatus.INSTALLED_AND_REACHABLE,
                presentation=present(
                    InstallationStatus.INSTALLED_AND_REACHABLE, TOOLTIP_REACHABLE
                ),
            )

        started = [c for c in self.get_connections() if c.is_started]
        if not started:
            return CheckResult(
                status=InstallationStatus.NO_RUNNING_ENGINE,
                presentation=present(InstallationStatus.NO_RUNNING_ENGINE, TOOLTIP_NO_ENGINE),
            )

        # The default socket is not usable: route compose through the wrapper
        logger.debug(
            f"Compose status: {InstallationStatus.INSTALLED_NEEDS_WRAPPER.value}, "
            f"writing wrapper for {started[0].name}"
        )
        wrapper = await self.add_compose_wrapper(started[0])

        if await self.detect.check_storage_path():
            return CheckResult(
                status=InstallationStatus.INSTALLED_AND_REACHABLE,
                presentation=present(
                    InstallationStatus.INSTALLED_AND_REACHABLE,
                    f"Compose is installed and usable with {wrapper}",
                ),
            )

        return CheckResult(
            status=InstallationStatus.INSTALLED_NEEDS_PATH_SETUP,
            presentation=present(
                InstallationStatus.INSTALLED_NEEDS_PATH_SETUP,
                f"{self.detect.get_socket_path()} is not enabled. Need to use wrapper script",
            ),
            information=(
                "Please add the compose wrapper bin folder to your PATH environment "
                f"variable. Value is {self.bin_folder}. The script {wrapper} will "
                "setup for you the DOCKER_HOST environment variable."
            ),
        )

    def get_connections(self) -> List[EngineConnection]:
        """
        Engine connections reported by the host.

        Raises:
            ProbeError: If the host fails to list connections
        """
        if self.connection_provider is None:
            return []
        try:
            return list(self.connection_provider.get_container_connections())
        except Exception as e:
            raise ProbeError(f"Unable to list container connections: {e}") from e

    def notify_on_checks(self, first_check: bool) -> None:
        if self.current_information and not first_check:
            self.show_current_information()

    def show_current_information(self) -> None:
        if self.current_information:
            self.messages.show_information(self.current_information)

    # -------------------------------------------------------------------------
    # Wrapper
    # -------------------------------------------------------------------------

    async def add_compose_wrapper(self, connection: EngineConnection) -> Path:
        """
        Write the wrapper script for a connection and make it executable.

        Raises:
            FilesystemError: If the script cannot be written
        """
        self.ensure_bin_folder()
        wrapper = self.wrapper_path
        try:
            self.wrapper_generator.generate(connection, wrapper)
        except OSError as e:
            raise FilesystemError(
                f"Unable to write compose wrapper {wrapper}: {e}", path=str(wrapper)
            ) from e
        await self.make_executable(wrapper)
        return wrapper

    # -------------------------------------------------------------------------
    # Install flow
    # -------------------------------------------------------------------------

    async def install_compose(self) -> bool:
        """
        Install a compose release chosen by the user.

        Errors are reported through the message sink, never raised.

        Returns:
            True if compose was installed
        """
        async with self._get_lock():
            try:
                release = await self._install()
            except ComposeExtensionError as e:
                logger.warning(f"Compose installation failed: {e}")
                self.messages.show_error(f"Unable to install Docker Compose: {e}")
                return False

        self.messages.show_information(f"Docker Compose {release.label} installed")

        await self.run_checks(first_check=False)
        return True

    async def _install(self) -> ReleaseDescriptor:
        releases = await self.releases.grab_latest_releases_metadata()

        try:
            selected = await self.version_picker.pick(releases, PICKER_PLACEHOLDER)
        except Exception as e:
            raise ComposeExtensionError(f"Unable to select a compose version: {e}") from e
        if selected is None:
            selected = releases[0]

        os_name, arch_name = self.host_os.platform_info()
        asset_id = await self.releases.get_release_asset_id(selected.id, os_name, arch_name)

        self.ensure_bin_folder()
        destination = self.binary_path

        logger.info(f"Installing Docker Compose {selected.label} to {destination}")
        # Permissions are set before the rename so a failure keeps the previous binary
        await self.releases.download_release_asset(
            asset_id, destination, mode=self.executable_mode()
        )
        return selected

    # -------------------------------------------------------------------------
    # Filesystem helpers
    # -------------------------------------------------------------------------

    def ensure_bin_folder(self) -> Path:
        """
        Create the private bin folder if missing.

        Raises:
            FilesystemError: If the folder cannot be created
        """
        folder = self.bin_folder
        try:
            folder.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(
                f"Unable to create {folder}: {e}", path=str(folder)
            ) from e
        return folder

    def executable_mode(self) -> Optional[int]:
        """Mode for executables; None on Windows where the extension decides."""
        if self.host_os.is_linux() or self.host_os.is_mac():
            return 0o755
        return None

    async def make_executable(self, file_path: Path) -> None:
        """
        Mark a file executable on Linux and macOS.

        Windows decides executability by extension, so nothing is done there.

        Raises:
            FilesystemError: If permissions cannot be changed
        """
        mode = self.executable_mode()
        if mode is not None:
            try:
                os.chmod(file_path, mode)
            except OSError as e:
                raise FilesystemError(
                    f"Unable to make {file_path} executable: {e}", path=str(file_path)
                ) from e
