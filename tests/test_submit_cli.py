# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from unittest.mock import MagicMock, patch

from click.testing import CliRunner

from sjob_lib.core.config import CFG
from sjob_lib.core.error import SJError
from sjob_lib.properties.states import BatchState
from sjob_lib.submit.cli import submit


def _factory(submitter: MagicMock) -> MagicMock:
    factory = MagicMock()
    factory.makeSubmitter.return_value = submitter
    return factory


def test_submit_successful(tmp_path):
    script = tmp_path / "script.sh"
    script.write_text("#!/bin/bash\necho hi\n")

    submitter_mock = MagicMock()
    submitter_mock.submit.return_value = "job123"

    runner = CliRunner()
    with (
        patch(
            "sjob_lib.submit.cli.SubmitterFactory",
            return_value=_factory(submitter_mock),
        ) as mock_factory_class,
        patch("sjob_lib.submit.cli.logger") as mock_logger,
    ):
        result = runner.invoke(
            submit, ["-p", "short", "--host", "login1", str(script), "x", "y"]
        )

    assert result.exit_code == 0
    assert result.output.strip() == "job123"

    args, kwargs = mock_factory_class.call_args
    assert args[0] == script
    assert args[1] == ["x", "y"]
    assert args[2] == "login1"
    assert kwargs["partition"] == "short"
    submitter_mock.submit.assert_called_once()

    info_messages = [call.args[0] for call in mock_logger.info.call_args_list]
    assert any("job123" in msg for msg in info_messages)


def test_submit_script_does_not_exist(tmp_path):
    runner = CliRunner()

    with patch("sjob_lib.submit.cli.logger") as mock_logger:
        result = runner.invoke(submit, [str(tmp_path / "missing.sh")])

    assert result.exit_code == CFG.exit_codes.default
    error_messages = [str(call.args[0]) for call in mock_logger.error.call_args_list]
    assert any("does not exist" in msg for msg in error_messages)


def test_submit_dry_run_prints_command(tmp_path):
    script = tmp_path / "job.yaml"
    script.write_text("command: echo hi\n")

    submitter_mock = MagicMock()
    submitter_mock.render.return_value = "#!/bin/bash\necho hi\n"
    submitter_mock.dryRun.return_value = "sbatch --parsable job.sbatch"

    runner = CliRunner()
    with patch(
        "sjob_lib.submit.cli.SubmitterFactory", return_value=_factory(submitter_mock)
    ):
        result = runner.invoke(submit, ["--dry-run", str(script)])

    assert result.exit_code == 0
    assert "echo hi" in result.output
    assert "sbatch --parsable job.sbatch" in result.output
    submitter_mock.submit.assert_not_called()


def test_submit_wait_exits_with_job_state(tmp_path):
    script = tmp_path / "script.sh"
    script.write_text("#!/bin/bash\n")

    submitter_mock = MagicMock()
    submitter_mock.submit.return_value = "77"
    poller_mock = MagicMock()
    poller_mock.wait.return_value.getState.return_value = BatchState.FAILED

    runner = CliRunner()
    with (
        patch(
            "sjob_lib.submit.cli.SubmitterFactory",
            return_value=_factory(submitter_mock),
        ),
        patch("sjob_lib.submit.cli.Poller", return_value=poller_mock) as mock_poller,
    ):
        result = runner.invoke(submit, ["--wait", str(script)])

    assert result.exit_code == CFG.exit_codes.job_failed
    mock_poller.assert_called_once_with(submitter_mock.getBatchSystem.return_value, "77")


def test_submit_sj_error_is_reported(tmp_path):
    script = tmp_path / "script.sh"
    script.write_text("#!/bin/bash\n")

    factory_mock = MagicMock()
    factory_mock.makeSubmitter.side_effect = SJError("invalid directive")

    runner = CliRunner()
    with (
        patch("sjob_lib.submit.cli.SubmitterFactory", return_value=factory_mock),
        patch("sjob_lib.submit.cli.logger") as mock_logger,
    ):
        result = runner.invoke(submit, [str(script)])

    assert result.exit_code == CFG.exit_codes.default
    mock_logger.error.assert_called_once()


def test_submit_generic_exception_results_in_critical_log(tmp_path):
    script = tmp_path / "script.sh"
    script.write_text("#!/bin/bash\n")

    factory_mock = MagicMock()
    factory_mock.makeSubmitter.side_effect = RuntimeError("boom")

    runner = CliRunner()
    with (
        patch("sjob_lib.submit.cli.SubmitterFactory", return_value=factory_mock),
        patch("sjob_lib.submit.cli.logger") as mock_logger,
    ):
        result = runner.invoke(submit, [str(script)])

    assert result.exit_code == CFG.exit_codes.unexpected_error
    mock_logger.critical.assert_called_once()
