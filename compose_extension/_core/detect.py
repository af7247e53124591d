"""
Detection of compose, the default engine socket and the wrapper PATH entry.

Every probe answers a yes/no question. Absence is a False answer;
only a probe that cannot run raises ProbeError.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional

from compose_extension._core.health import named_pipe_exists, ping_unix_socket
from compose_extension._core.host import HostOS
from compose_extension.errors import ProbeError

logger = logging.getLogger(__name__)


DEFAULT_UNIX_SOCKET = "/var/run/docker.sock"
DEFAULT_WINDOWS_PIPE = r"\\.\pipe\docker_engine"


def _runs_ok(cmd: List[str], timeout: float) -> bool:
    """Run a command and report whether it exited with code 0."""
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError:
        return False
    except subprocess.TimeoutExpired:
        logger.debug(f"{cmd[0]} did not answer within {timeout}s")
        return False
    except OSError as e:
        raise ProbeError(f"Unable to execute {cmd[0]}: {e}") from e

    return result.returncode == 0


class Detect:
    """
    Detection service.

    Args:
        bin_folder: Private bin folder holding the wrapper script
        host_os: OS probe (default: the running system)
        socket_path: Override for the default engine socket
        timeout: Timeout in seconds for each probe
    """

    def __init__(
        self,
        bin_folder: Path,
        host_os: Optional[HostOS] = None,
        socket_path: Optional[str] = None,
        timeout: float = 10.0,
    ) -> None:
        self.bin_folder = Path(bin_folder)
        self.host_os = host_os or HostOS()
        self._socket_path = socket_path
        self.timeout = timeout

    def get_socket_path(self) -> str:
        """Default (unconfigured) container engine endpoint."""
        if self._socket_path:
            return self._socket_path
        if self.host_os.is_windows():
            return DEFAULT_WINDOWS_PIPE
        return DEFAULT_UNIX_SOCKET

    # -------------------------------------------------------------------------
    # Sync probes
    # -------------------------------------------------------------------------

    def has_compose(self) -> bool:
        """
        Check if a compose binary is resolvable on PATH.

        Accepts either a standalone ``docker-compose`` binary or the
        ``docker compose`` CLI plugin.

        Raises:
            ProbeError: If a binary was found but could not be executed
        """
        standalone = shutil.which("docker-compose")
        if standalone and _runs_ok([standalone, "--version"], self.timeout):
            logger.debug(f"Found docker-compose at {standalone}")
            return True

        docker = shutil.which("docker")
        if docker and _runs_ok([docker, "compose", "version"], self.timeout):
            logger.debug(f"Found compose plugin for {docker}")
            return True

        return False

    def has_reachable_default_socket(self) -> bool:
        """Check if the default engine endpoint answers without configuration."""
        socket_path = self.get_socket_path()
        if self.host_os.is_windows():
            return named_pipe_exists(socket_path)
        return ping_unix_socket(socket_path, timeout=min(self.timeout, 2.0))

    def has_wrapper_on_path(self) -> bool:
        """
        Check if the private bin folder is an entry of PATH.

        Raises:
            ProbeError: If PATH entries cannot be resolved
        """
        # realpath on both sides: the storage root may sit behind a symlink
        try:
            target = os.path.normcase(os.path.realpath(self.bin_folder))
            entries = os.environ.get("PATH", "").split(os.pathsep)
            normalized = {
                os.path.normcase(os.path.realpath(entry))
                for entry in entries
                if entry
            }
        except OSError as e:
            raise ProbeError(f"Unable to read PATH: {e}") from e

        return target in normalized

    # -------------------------------------------------------------------------
    # Async API
    # -------------------------------------------------------------------------

    async def check_for_docker_compose(self) -> bool:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self.has_compose)

    async def check_default_socket_is_alive(self) -> bool:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self.has_reachable_default_socket)

    async def check_storage_path(self) -> bool:
        return self.has_wrapper_on_path()
