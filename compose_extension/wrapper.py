"""
Compose wrapper script generation.

The wrapper sets DOCKER_HOST to a running engine connection and hands
over to the downloaded docker-compose binary sitting next to it:

    #!/bin/sh
    export DOCKER_HOST='unix:///run/user/1000/podman/podman.sock'
    exec '/home/me/.local/share/compose-extension/bin/docker-compose' "$@"
"""

from __future__ import annotations

import logging
import re
import shlex
from pathlib import Path
from typing import Optional

from compose_extension._core.host import HostOS
from compose_extension._core.version import get_binary_filename
from compose_extension.types import EngineConnection

logger = logging.getLogger(__name__)


_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)


class ComposeWrapperGenerator:
    """
    Writes the ``compose`` wrapper script for an engine connection.

    Args:
        host_os: OS probe selecting shell or batch output
    """

    def __init__(self, host_os: Optional[HostOS] = None) -> None:
        self.host_os = host_os or HostOS()

    def get_docker_host(self, connection: EngineConnection) -> str:
        """
        DOCKER_HOST value for a connection.

        Socket paths that already carry a scheme are used as is.
        """
        socket_path = connection.socket_path
        if _SCHEME_RE.match(socket_path):
            return socket_path
        if self.host_os.is_windows():
            return f"npipe://{socket_path.replace(chr(92), '/')}"
        return f"unix://{socket_path}"

    def render(self, connection: EngineConnection, binary_path: Path) -> str:
        """Render the script content for a connection."""
        docker_host = self.get_docker_host(connection)
        if self.host_os.is_windows():
            return (
                "@echo off\r\n"
                "setlocal\r\n"
                f"set \"DOCKER_HOST={docker_host}\"\r\n"
                f"\"{binary_path}\" %*\r\n"
                "exit /b %ERRORLEVEL%\r\n"
            )
        return (
            "#!/bin/sh\n"
            f"export DOCKER_HOST={shlex.quote(docker_host)}\n"
            f"exec {shlex.quote(str(binary_path))} \"$@\"\n"
        )

    def generate(self, connection: EngineConnection, destination: Path) -> Path:
        """
        Write the wrapper script, replacing any previous one.

        Args:
            connection: Started engine connection to target
            destination: Path of the wrapper script

        Returns:
            The destination path

        Raises:
            OSError: If the script cannot be written
        """
        destination = Path(destination)
        binary_path = destination.parent / get_binary_filename(self.host_os.name)
        content = self.render(connection, binary_path)

        # newline="" keeps the batch file's CRLF endings as rendered
        with open(destination, "w", encoding="utf-8", newline="") as f:
            f.write(content)

        logger.debug(f"Wrote compose wrapper {destination} for {connection.name}")
        return destination
