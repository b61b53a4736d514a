# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from unittest.mock import MagicMock, patch

from click.testing import CliRunner

from sjob_lib.core.config import CFG
from sjob_lib.core.error import SJError
from sjob_lib.properties.states import BatchState
from sjob_lib.wait.cli import wait


def _poller(state: BatchState) -> MagicMock:
    poller = MagicMock()
    poller.wait.return_value.getState.return_value = state
    return poller


def test_wait_finished_job_exits_zero():
    batch_system = MagicMock()

    with (
        patch(
            "sjob_lib.wait.cli.get_batch_system", return_value=batch_system
        ) as mock_get,
        patch(
            "sjob_lib.wait.cli.Poller", return_value=_poller(BatchState.FINISHED)
        ) as mock_poller,
    ):
        result = CliRunner().invoke(wait, ["123", "-i", "5", "--timeout", "60"])

    assert result.exit_code == 0
    mock_get.assert_called_once_with(None)
    mock_poller.assert_called_once_with(batch_system, "123", 5.0, 60.0)


def test_wait_cancelled_job_exits_with_job_failed():
    with (
        patch("sjob_lib.wait.cli.get_batch_system"),
        patch("sjob_lib.wait.cli.Poller", return_value=_poller(BatchState.CANCELLED)),
    ):
        result = CliRunner().invoke(wait, ["123", "--host", "login1"])

    assert result.exit_code == CFG.exit_codes.job_failed


def test_wait_uses_host():
    with (
        patch("sjob_lib.wait.cli.get_batch_system") as mock_get,
        patch("sjob_lib.wait.cli.Poller", return_value=_poller(BatchState.FINISHED)),
    ):
        CliRunner().invoke(wait, ["123", "--host", "login1"])

    mock_get.assert_called_once_with("login1")


def test_wait_sj_error_exits_with_default_code():
    poller = MagicMock()
    poller.wait.side_effect = SJError("did not complete")

    with (
        patch("sjob_lib.wait.cli.get_batch_system"),
        patch("sjob_lib.wait.cli.Poller", return_value=poller),
        patch("sjob_lib.wait.cli.logger") as mock_logger,
    ):
        result = CliRunner().invoke(wait, ["123"])

    assert result.exit_code == CFG.exit_codes.default
    mock_logger.error.assert_called_once()


def test_wait_unexpected_error_exits_with_unexpected_code():
    with (
        patch("sjob_lib.wait.cli.get_batch_system", side_effect=RuntimeError("boom")),
        patch("sjob_lib.wait.cli.logger") as mock_logger,
    ):
        result = CliRunner().invoke(wait, ["123"])

    assert result.exit_code == CFG.exit_codes.unexpected_error
    mock_logger.critical.assert_called_once()
