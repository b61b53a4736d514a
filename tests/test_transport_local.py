# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from sjob_lib.core.error import SJError, SJTransportError
from sjob_lib.transport.local import LocalTransport


def test_local_transport_run_returns_result():
    mock_result = MagicMock(returncode=0, stdout="Submitted batch job 1\n", stderr="")

    with patch("sjob_lib.transport.local.subprocess.run", return_value=mock_result) as mock_run:
        result = LocalTransport().run(["sbatch", "job.sh"], cwd=Path("/work"))

    assert result.ok()
    assert result.stdout == "Submitted batch job 1\n"
    args, kwargs = mock_run.call_args
    assert args[0] == ["sbatch", "job.sh"]
    assert kwargs["cwd"] == Path("/work")
    assert kwargs["capture_output"] is True
    assert kwargs["check"] is False


def test_local_transport_run_nonzero_exit_is_not_an_error():
    mock_result = MagicMock(returncode=1, stdout="", stderr="Invalid job id")

    with patch("sjob_lib.transport.local.subprocess.run", return_value=mock_result):
        result = LocalTransport().run(["scancel", "99"])

    assert not result.ok()
    assert result.stderr == "Invalid job id"


def test_local_transport_run_missing_command_raises():
    with (
        patch("sjob_lib.transport.local.subprocess.run", side_effect=FileNotFoundError),
        pytest.raises(SJTransportError, match="'squeue' is not available"),
    ):
        LocalTransport().run(["squeue"])


def test_local_transport_run_timeout_raises():
    with (
        patch(
            "sjob_lib.transport.local.subprocess.run",
            side_effect=subprocess.TimeoutExpired("sacct", 1),
        ),
        pytest.raises(SJTransportError, match="timed out"),
    ):
        LocalTransport().run(["sacct"])


def test_local_transport_upload_copies_file(tmp_path):
    source = tmp_path / "job.sbatch"
    source.write_text("#!/bin/bash\n")
    target = tmp_path / "scripts" / "copy.sbatch"

    result = LocalTransport().upload(source, target)

    assert result == target
    assert target.read_text() == "#!/bin/bash\n"


def test_local_transport_upload_same_file_is_noop(tmp_path):
    source = tmp_path / "job.sbatch"
    source.write_text("")

    assert LocalTransport().upload(source, source) == source


def test_local_transport_read_file_tail(tmp_path):
    file = tmp_path / "slurm-1.out"
    file.write_text("a\nb\nc\n")

    transport = LocalTransport()
    assert transport.readFile(file) == "a\nb\nc\n"
    assert transport.readFile(file, 2) == "b\nc\n"


def test_local_transport_read_missing_file_raises(tmp_path):
    with pytest.raises(SJError, match="Could not read file"):
        LocalTransport().readFile(tmp_path / "missing.out")


def test_local_transport_make_dir(tmp_path):
    directory = tmp_path / "a" / "b"
    LocalTransport().makeDir(directory)

    assert directory.is_dir()


def test_local_transport_is_not_remote():
    transport = LocalTransport()

    assert not transport.isRemote()
    with patch("sjob_lib.transport.local.get_current_user", return_value="user1"):
        assert transport.getUser() == "user1"
