"""
Pytest configuration for compose-extension tests.
"""

import os
from pathlib import Path
from typing import List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from compose_extension import (
    ComposeConfig,
    ComposeExtension,
    EngineConnection,
    StatusPresentation,
)
from compose_extension._core.host import HostOS

# Note: With pytest-asyncio in auto mode, no event_loop fixture needed


class RecordingStatusBar:
    """Status bar sink that keeps every update."""

    def __init__(self) -> None:
        self.updates: List[StatusPresentation] = []

    def update(self, presentation: StatusPresentation) -> None:
        self.updates.append(presentation)

    @property
    def current(self) -> Optional[StatusPresentation]:
        return self.updates[-1] if self.updates else None


class RecordingMessages:
    """Message sink that keeps every notification."""

    def __init__(self) -> None:
        self.information: List[str] = []
        self.errors: List[str] = []

    def show_information(self, message: str) -> None:
        self.information.append(message)

    def show_error(self, message: str) -> None:
        self.errors.append(message)


class StaticConnections:
    """Connection provider returning a fixed list."""

    def __init__(self, connections: Optional[List[EngineConnection]] = None) -> None:
        self.connections = connections or []
        self.calls = 0

    def get_container_connections(self) -> List[EngineConnection]:
        self.calls += 1
        return list(self.connections)


@pytest.fixture
def config(tmp_path):
    """Configuration with storage under a temporary directory."""
    return ComposeConfig(storage_path=tmp_path / "storage")


@pytest.fixture
def linux_host():
    return HostOS(system="Linux", machine="x86_64")


@pytest.fixture
def windows_host():
    return HostOS(system="Windows", machine="AMD64")


@pytest.fixture
def podman_connection():
    return EngineConnection(
        name="podman-machine-default",
        socket_path="/run/user/1000/podman/podman.sock",
        status="started",
        provider="podman",
    )


@pytest.fixture
def mock_detect():
    """Detection service with compose installed and no default socket."""
    detect = MagicMock()
    detect.check_for_docker_compose = AsyncMock(return_value=True)
    detect.check_default_socket_is_alive = AsyncMock(return_value=False)
    detect.check_storage_path = AsyncMock(return_value=False)
    detect.get_socket_path = MagicMock(return_value="/var/run/docker.sock")
    return detect


@pytest.fixture
def mock_releases():
    """Release source with two releases; downloads write a small file."""

    async def fake_download(asset_id, destination, mode=None):
        Path(destination).write_bytes(b"#!/bin/sh\necho compose\n")
        if mode is not None:
            os.chmod(destination, mode)
        return Path(destination)

    releases = MagicMock()
    releases.grab_latest_releases_metadata = AsyncMock()
    releases.get_release_asset_id = AsyncMock(return_value=4242)
    releases.download_release_asset = AsyncMock(side_effect=fake_download)
    return releases


@pytest.fixture
def status_bar():
    return RecordingStatusBar()


@pytest.fixture
def messages():
    return RecordingMessages()


@pytest.fixture
def make_extension(config, linux_host, mock_detect, mock_releases, status_bar, messages):
    """Factory for a ComposeExtension wired to test doubles."""

    def _make(connections=None, **overrides) -> ComposeExtension:
        kwargs = dict(
            config=config,
            detect=mock_detect,
            releases=mock_releases,
            host_os=linux_host,
            connection_provider=StaticConnections(connections),
            status_bar=status_bar,
            messages=messages,
        )
        kwargs.update(overrides)
        return ComposeExtension(**kwargs)

    return _make
