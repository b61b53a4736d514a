# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from unittest.mock import MagicMock, patch

from click.testing import CliRunner

from sjob_lib.core.config import CFG
from sjob_lib.properties.states import BatchState
from sjob_lib.status.cli import status


def _job(job_id: str, empty: bool = False) -> MagicMock:
    job = MagicMock()
    job.isEmpty.return_value = empty
    job.getId.return_value = job_id
    job.getState.return_value = BatchState.RUNNING
    job.toYaml.return_value = f"JobId: '{job_id}'\n"
    return job


def test_status_short_prints_each_job():
    batch_system = MagicMock()
    batch_system.getJob.side_effect = [_job("1"), _job("2")]

    with patch("sjob_lib.status.cli.get_batch_system", return_value=batch_system):
        result = CliRunner().invoke(status, ["1", "2", "--short"])

    assert result.exit_code == 0
    assert "1    running" in result.output
    assert "2    running" in result.output


def test_status_yaml_prints_raw_information():
    batch_system = MagicMock()
    batch_system.getJob.return_value = _job("5")

    with patch("sjob_lib.status.cli.get_batch_system", return_value=batch_system):
        result = CliRunner().invoke(status, ["5", "--yaml"])

    assert result.exit_code == 0
    assert "JobId: '5'" in result.output


def test_status_full_panel_uses_presenter():
    batch_system = MagicMock()
    batch_system.getJob.return_value = _job("5")

    with (
        patch("sjob_lib.status.cli.get_batch_system", return_value=batch_system),
        patch("sjob_lib.status.cli.StatusPresenter") as mock_presenter,
        patch("sjob_lib.status.cli.Console"),
    ):
        result = CliRunner().invoke(status, ["5"])

    assert result.exit_code == 0
    mock_presenter.return_value.createJobStatusPanel.assert_called_once()


def test_status_single_missing_job_fails():
    batch_system = MagicMock()
    batch_system.getJob.return_value = _job("9", empty=True)

    with (
        patch("sjob_lib.status.cli.get_batch_system", return_value=batch_system),
        patch("sjob_lib.core.error_handlers.logger") as mock_logger,
    ):
        result = CliRunner().invoke(status, ["9"])

    assert result.exit_code == CFG.exit_codes.default
    assert "does not exist" in str(mock_logger.error.call_args.args[0])


def test_status_one_missing_job_of_many_succeeds():
    batch_system = MagicMock()
    batch_system.getJob.side_effect = [_job("9", empty=True), _job("10")]

    with (
        patch("sjob_lib.status.cli.get_batch_system", return_value=batch_system),
        patch("sjob_lib.core.error_handlers.logger") as mock_logger,
    ):
        result = CliRunner().invoke(status, ["9", "10", "-s"])

    assert result.exit_code == 0
    mock_logger.error.assert_called_once()
    assert "10    running" in result.output


def test_status_requires_job_id():
    result = CliRunner().invoke(status, [])
    assert result.exit_code != 0


def test_status_unexpected_error():
    with (
        patch("sjob_lib.status.cli.get_batch_system", side_effect=RuntimeError("boom")),
        patch("sjob_lib.status.cli.logger") as mock_logger,
    ):
        result = CliRunner().invoke(status, ["1"])

    assert result.exit_code == CFG.exit_codes.unexpected_error
    mock_logger.critical.assert_called_once()
