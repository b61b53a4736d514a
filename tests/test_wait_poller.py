# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from unittest.mock import MagicMock, patch

import pytest

from sjob_lib.core.config import CFG
from sjob_lib.core.error import SJError, SJTransportError
from sjob_lib.properties.states import BatchState
from sjob_lib.wait.poller import Poller, exit_code_for_state


def _job_with_states(*states: BatchState) -> MagicMock:
    job = MagicMock()
    job.getState.side_effect = list(states)
    job.getExitCode.return_value = 0
    return job


def _batch_system(job: MagicMock) -> MagicMock:
    batch_system = MagicMock()
    batch_system.getJob.return_value = job
    return batch_system


def test_poller_init_uses_configured_interval():
    poller = Poller(MagicMock(), "1")
    assert poller._interval == CFG.poller.interval
    assert poller._timeout is None
    assert poller.getState() is None


def test_poller_init_invalid_interval_raises():
    with pytest.raises(SJError, match="must be positive"):
        Poller(MagicMock(), "1", interval=0)


def test_poller_poll_loads_job_then_updates_it():
    job = _job_with_states(BatchState.QUEUED, BatchState.RUNNING)
    batch_system = _batch_system(job)
    poller = Poller(batch_system, "1", interval=1)

    with patch("sjob_lib.wait.poller.logger"):
        assert poller.poll() == BatchState.QUEUED
        assert poller.poll() == BatchState.RUNNING

    batch_system.getJob.assert_called_once_with("1")
    job.update.assert_called_once()
    assert poller.getState() == BatchState.RUNNING


def test_poller_poll_logs_only_transitions():
    job = _job_with_states(BatchState.RUNNING, BatchState.RUNNING, BatchState.FINISHED)
    poller = Poller(_batch_system(job), "7", interval=1)

    with patch("sjob_lib.wait.poller.logger") as mock_logger:
        poller.poll()
        poller.poll()
        poller.poll()

    messages = [call.args[0] for call in mock_logger.info.call_args_list]
    assert messages == ["Job '7' is running.", "Job '7': running -> finished."]


def test_poller_poll_logs_exit_code_of_failed_job():
    job = _job_with_states(BatchState.FAILED)
    job.getExitCode.return_value = 3
    poller = Poller(_batch_system(job), "7", interval=1)

    with patch("sjob_lib.wait.poller.logger") as mock_logger:
        poller.poll()

    mock_logger.info.assert_called_once_with("Job '7' is failed (exit code 3).")


def test_poller_poll_retries_transport_errors():
    job = _job_with_states(BatchState.RUNNING)
    batch_system = MagicMock()
    batch_system.getJob.side_effect = [SJTransportError("connection lost"), job]
    poller = Poller(batch_system, "1", interval=1)

    with (
        patch("sjob_lib.core.retryer.sleep") as mock_sleep,
        patch("sjob_lib.core.retryer.logger"),
        patch("sjob_lib.wait.poller.logger"),
    ):
        assert poller.poll() == BatchState.RUNNING

    assert batch_system.getJob.call_count == 2
    mock_sleep.assert_called_once_with(CFG.poller.retry_wait)


def test_poller_poll_raises_after_repeated_unknown_states():
    job = _job_with_states(*([BatchState.UNKNOWN] * CFG.poller.max_unknown))
    poller = Poller(_batch_system(job), "404", interval=1)

    with patch("sjob_lib.wait.poller.logger"):
        for _ in range(CFG.poller.max_unknown - 1):
            assert poller.poll() == BatchState.UNKNOWN

        with pytest.raises(SJError, match="'404' does not exist"):
            poller.poll()


def test_poller_unknown_counter_resets_on_known_state():
    states = [BatchState.UNKNOWN] * (CFG.poller.max_unknown - 1)
    job = _job_with_states(*states, BatchState.RUNNING, *states)
    poller = Poller(_batch_system(job), "1", interval=1)

    with patch("sjob_lib.wait.poller.logger"):
        for _ in range(2 * len(states) + 1):
            poller.poll()

    assert poller.getState() == BatchState.UNKNOWN


def test_poller_wait_returns_completed_job():
    job = _job_with_states(BatchState.QUEUED, BatchState.RUNNING, BatchState.FINISHED)
    poller = Poller(_batch_system(job), "1", interval=2.5)

    with (
        patch("sjob_lib.wait.poller.sleep") as mock_sleep,
        patch("sjob_lib.wait.poller.logger"),
    ):
        assert poller.wait() is job

    assert mock_sleep.call_count == 2
    mock_sleep.assert_called_with(2.5)


def test_poller_wait_times_out():
    job = MagicMock()
    job.getState.return_value = BatchState.RUNNING
    poller = Poller(_batch_system(job), "1", interval=10, timeout=15)

    with (
        patch("sjob_lib.wait.poller.sleep"),
        patch("sjob_lib.wait.poller.monotonic", side_effect=[0.0, 0.0, 10.0]),
        patch("sjob_lib.wait.poller.logger"),
        pytest.raises(SJError, match="did not complete within 15"),
    ):
        poller.wait()


@pytest.mark.parametrize(
    "state,expected",
    [
        (BatchState.FINISHED, 0),
        (BatchState.FAILED, CFG.exit_codes.job_failed),
        (BatchState.CANCELLED, CFG.exit_codes.job_failed),
    ],
)
def test_exit_code_for_state(state, expected):
    assert exit_code_for_state(state) == expected
