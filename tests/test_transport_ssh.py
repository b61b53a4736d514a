# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from sjob_lib.core.error import SJError, SJTransportError
from sjob_lib.transport.interface import CommandResult
from sjob_lib.transport.ssh import SSHTransport


def _completed(returncode=0, stdout="", stderr=""):
    return MagicMock(returncode=returncode, stdout=stdout, stderr=stderr)


def test_ssh_transport_run_builds_remote_command():
    with patch(
        "sjob_lib.transport.ssh.subprocess.run", return_value=_completed(stdout="ok")
    ) as mock_run:
        result = SSHTransport("user@login").run(
            ["sbatch", "my job.sh"], cwd=Path("/home/user/work dir")
        )

    assert result.stdout == "ok"
    command = mock_run.call_args.args[0]
    assert command[0] == "ssh"
    assert "PasswordAuthentication=no" in command
    assert command[-2] == "user@login"
    assert command[-1] == "cd '/home/user/work dir' && sbatch 'my job.sh'"


def test_ssh_transport_run_passes_input():
    with patch(
        "sjob_lib.transport.ssh.subprocess.run", return_value=_completed()
    ) as mock_run:
        SSHTransport("login").run(["cat"], input="data")

    assert mock_run.call_args.kwargs["input"] == "data"


def test_ssh_transport_run_connection_failure_raises():
    with (
        patch(
            "sjob_lib.transport.ssh.subprocess.run",
            return_value=_completed(255, stderr="Connection refused"),
        ),
        pytest.raises(SJTransportError, match="Could not connect to 'login'"),
    ):
        SSHTransport("login").run(["squeue"])


def test_ssh_transport_run_remote_failure_is_returned():
    with patch(
        "sjob_lib.transport.ssh.subprocess.run",
        return_value=_completed(1, stderr="Invalid job id specified"),
    ):
        result = SSHTransport("login").run(["scancel", "1"])

    assert result.returncode == 1


def test_ssh_transport_run_timeout_raises():
    with (
        patch(
            "sjob_lib.transport.ssh.subprocess.run",
            side_effect=subprocess.TimeoutExpired("ssh", 5),
        ),
        pytest.raises(SJTransportError, match="timed out"),
    ):
        SSHTransport("login").run(["squeue"])


def test_ssh_transport_upload_creates_directory_and_copies():
    with patch(
        "sjob_lib.transport.ssh.subprocess.run", return_value=_completed()
    ) as mock_run:
        result = SSHTransport("login").upload(
            Path("/tmp/job.sbatch"), Path(".sjob/scripts/job.sbatch")
        )

    assert result == Path(".sjob/scripts/job.sbatch")
    mkdir_command = mock_run.call_args_list[0].args[0]
    scp_command = mock_run.call_args_list[1].args[0]
    assert mkdir_command[-1] == "mkdir -p .sjob/scripts"
    assert scp_command[0] == "scp"
    assert scp_command[-2:] == ["/tmp/job.sbatch", "login:.sjob/scripts/job.sbatch"]


def test_ssh_transport_upload_failure_raises():
    with (
        patch(
            "sjob_lib.transport.ssh.subprocess.run",
            side_effect=[_completed(), _completed(1, stderr="Permission denied")],
        ),
        pytest.raises(SJTransportError, match="Permission denied"),
    ):
        SSHTransport("login").upload(Path("/tmp/a"), Path("dir/a"))


def test_ssh_transport_read_file_uses_tail():
    transport = SSHTransport("login")

    with patch.object(
        transport, "run", return_value=CommandResult(0, "last\n", "")
    ) as mock_run:
        assert transport.readFile(Path("slurm-1.out"), 1) == "last\n"

    mock_run.assert_called_once_with(["tail", "-n", "1", "slurm-1.out"])


def test_ssh_transport_read_file_failure_raises():
    transport = SSHTransport("login")

    with (
        patch.object(
            transport, "run", return_value=CommandResult(1, "", "No such file")
        ),
        pytest.raises(SJError, match="Could not read file 'x.out' on 'login'"),
    ):
        transport.readFile(Path("x.out"))


def test_ssh_transport_get_user_uses_whoami():
    transport = SSHTransport("login")

    with patch.object(transport, "run", return_value=CommandResult(0, "user1\n", "")):
        assert transport.getUser() == "user1"


def test_ssh_transport_is_remote():
    transport = SSHTransport("login")

    assert transport.isRemote()
    assert transport.getHost() == "login"
    assert str(transport) == "login"
