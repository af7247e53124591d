"""Tests for compose_extension._core.detect module."""

import os
import subprocess
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from compose_extension._core.detect import (
    DEFAULT_UNIX_SOCKET,
    DEFAULT_WINDOWS_PIPE,
    Detect,
)
from compose_extension.errors import ProbeError


def completed(returncode=0):
    return MagicMock(returncode=returncode, stdout="", stderr="")


@pytest.fixture
def detect(tmp_path, linux_host):
    return Detect(tmp_path / "bin", host_os=linux_host)


def which_map(mapping):
    return lambda name: mapping.get(name)


class TestGetSocketPath:
    """Tests for get_socket_path."""

    def test_linux_default(self, detect):
        assert detect.get_socket_path() == DEFAULT_UNIX_SOCKET

    def test_windows_default(self, tmp_path, windows_host):
        detect = Detect(tmp_path, host_os=windows_host)
        assert detect.get_socket_path() == DEFAULT_WINDOWS_PIPE

    def test_override(self, tmp_path, linux_host):
        detect = Detect(tmp_path, host_os=linux_host, socket_path="/run/docker.sock")
        assert detect.get_socket_path() == "/run/docker.sock"


class TestHasCompose:
    """Tests for has_compose."""

    @patch("compose_extension._core.detect.subprocess.run")
    @patch("compose_extension._core.detect.shutil.which")
    def test_standalone_binary(self, mock_which, mock_run, detect):
        """A standalone docker-compose answering --version counts."""
        mock_which.side_effect = which_map({"docker-compose": "/usr/bin/docker-compose"})
        mock_run.return_value = completed(0)

        assert detect.has_compose() is True
        assert mock_run.call_args[0][0] == ["/usr/bin/docker-compose", "--version"]

    @patch("compose_extension._core.detect.subprocess.run")
    @patch("compose_extension._core.detect.shutil.which")
    def test_docker_plugin(self, mock_which, mock_run, detect):
        """The docker compose CLI plugin counts."""
        mock_which.side_effect = which_map({"docker": "/usr/bin/docker"})
        mock_run.return_value = completed(0)

        assert detect.has_compose() is True
        assert mock_run.call_args[0][0] == ["/usr/bin/docker", "compose", "version"]

    @patch("compose_extension._core.detect.subprocess.run")
    @patch("compose_extension._core.detect.shutil.which")
    def test_docker_without_plugin(self, mock_which, mock_run, detect):
        mock_which.side_effect = which_map({"docker": "/usr/bin/docker"})
        mock_run.return_value = completed(1)

        assert detect.has_compose() is False

    @patch("compose_extension._core.detect.subprocess.run")
    @patch("compose_extension._core.detect.shutil.which")
    def test_falls_back_to_plugin(self, mock_which, mock_run, detect):
        """A broken standalone binary falls back to the plugin."""
        mock_which.side_effect = which_map({
            "docker-compose": "/usr/bin/docker-compose",
            "docker": "/usr/bin/docker",
        })
        mock_run.side_effect = [completed(1), completed(0)]

        assert detect.has_compose() is True
        assert mock_run.call_count == 2

    @patch("compose_extension._core.detect.subprocess.run")
    @patch("compose_extension._core.detect.shutil.which", return_value=None)
    def test_nothing_on_path(self, mock_which, mock_run, detect):
        """Absence is a False answer, not an error."""
        assert detect.has_compose() is False
        mock_run.assert_not_called()

    @patch("compose_extension._core.detect.subprocess.run")
    @patch("compose_extension._core.detect.shutil.which")
    def test_binary_vanished(self, mock_which, mock_run, detect):
        mock_which.side_effect = which_map({"docker-compose": "/usr/bin/docker-compose"})
        mock_run.side_effect = FileNotFoundError("gone")

        assert detect.has_compose() is False

    @patch("compose_extension._core.detect.subprocess.run")
    @patch("compose_extension._core.detect.shutil.which")
    def test_timeout(self, mock_which, mock_run, detect):
        mock_which.side_effect = which_map({"docker-compose": "/usr/bin/docker-compose"})
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="docker-compose", timeout=10)

        assert detect.has_compose() is False

    @patch("compose_extension._core.detect.subprocess.run")
    @patch("compose_extension._core.detect.shutil.which")
    def test_permission_denied(self, mock_which, mock_run, detect):
        """A binary that cannot be executed is a probe fault."""
        mock_which.side_effect = which_map({"docker-compose": "/usr/bin/docker-compose"})
        mock_run.side_effect = PermissionError("permission denied")

        with pytest.raises(ProbeError, match="permission denied"):
            detect.has_compose()

    def test_undecodable_output(self, detect, tmp_path):
        """Output that is not UTF-8 does not break the probe."""
        if sys.platform == "win32":
            pytest.skip("Shell script test not applicable on Windows")
        tools = tmp_path / "tools"
        tools.mkdir()
        script = tools / "docker-compose"
        script.write_bytes(b"#!/bin/sh\nprintf '\\377\\376 compose\\n'\n")
        script.chmod(0o755)

        with patch.dict(os.environ, {"PATH": str(tools)}):
            assert detect.has_compose() is True


class TestHasReachableDefaultSocket:
    """Tests for has_reachable_default_socket."""

    @patch("compose_extension._core.detect.ping_unix_socket", return_value=True)
    def test_linux_pings_socket(self, mock_ping, detect):
        assert detect.has_reachable_default_socket() is True
        assert mock_ping.call_args[0][0] == DEFAULT_UNIX_SOCKET

    @patch("compose_extension._core.detect.ping_unix_socket", return_value=False)
    def test_linux_dead_socket(self, mock_ping, detect):
        assert detect.has_reachable_default_socket() is False

    @patch("compose_extension._core.detect.ping_unix_socket")
    @patch("compose_extension._core.detect.named_pipe_exists", return_value=True)
    def test_windows_checks_pipe(self, mock_pipe, mock_ping, tmp_path, windows_host):
        detect = Detect(tmp_path, host_os=windows_host)

        assert detect.has_reachable_default_socket() is True
        mock_pipe.assert_called_once_with(DEFAULT_WINDOWS_PIPE)
        mock_ping.assert_not_called()


class TestHasWrapperOnPath:
    """Tests for has_wrapper_on_path."""

    def test_on_path(self, detect):
        path = os.pathsep.join(["/usr/bin", str(detect.bin_folder)])
        with patch.dict(os.environ, {"PATH": path}):
            assert detect.has_wrapper_on_path() is True

    def test_not_on_path(self, detect):
        with patch.dict(os.environ, {"PATH": "/usr/bin"}):
            assert detect.has_wrapper_on_path() is False

    def test_trailing_separator(self, detect):
        """Entries are compared after normalization."""
        path = str(detect.bin_folder) + os.sep
        with patch.dict(os.environ, {"PATH": path}):
            assert detect.has_wrapper_on_path() is True

    def test_empty_path(self, detect):
        with patch.dict(os.environ, {"PATH": ""}):
            assert detect.has_wrapper_on_path() is False

    def test_symlinked_bin_folder(self, tmp_path, linux_host):
        """A PATH entry naming the symlink target matches the linked folder."""
        if sys.platform == "win32":
            pytest.skip("Symlink test not applicable on Windows")
        real = tmp_path / "real"
        (real / "bin").mkdir(parents=True)
        link = tmp_path / "link"
        link.symlink_to(real, target_is_directory=True)
        detect = Detect(link / "bin", host_os=linux_host)

        with patch.dict(os.environ, {"PATH": str(real.resolve() / "bin")}):
            assert detect.has_wrapper_on_path() is True

        with patch.dict(os.environ, {"PATH": str(link / "bin")}):
            assert detect.has_wrapper_on_path() is True


class TestAsyncApi:
    """Tests for the async probes."""

    @pytest.mark.asyncio
    async def test_check_for_docker_compose(self, detect):
        with patch.object(detect, "has_compose", return_value=True):
            assert await detect.check_for_docker_compose() is True

    @pytest.mark.asyncio
    async def test_check_default_socket_is_alive(self, detect):
        with patch.object(detect, "has_reachable_default_socket", return_value=False):
            assert await detect.check_default_socket_is_alive() is False

    @pytest.mark.asyncio
    async def test_check_storage_path(self, detect):
        with patch.dict(os.environ, {"PATH": str(detect.bin_folder)}):
            assert await detect.check_storage_path() is True

    @pytest.mark.asyncio
    async def test_probe_error_propagates(self, detect):
        with patch.object(detect, "has_compose", side_effect=ProbeError("denied")):
            with pytest.raises(ProbeError):
                await detect.check_for_docker_compose()
