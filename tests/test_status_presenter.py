# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from rich.console import Console, Group
from rich.panel import Panel

from sjob_lib.properties.size import Size
from sjob_lib.properties.states import BatchState
from sjob_lib.status.presenter import StatusPresenter


def _job(state: BatchState = BatchState.RUNNING) -> MagicMock:
    job = MagicMock()
    job.getId.return_value = "12345"
    job.getState.return_value = state
    job.getName.return_value = "simulation"
    job.getUser.return_value = "alice"
    job.getAccount.return_value = "project1"
    job.getPartition.return_value = "cpu"
    job.isArrayTask.return_value = False
    job.getArrayJobId.return_value = None
    job.getArrayTaskId.return_value = None
    job.getWorkDir.return_value = Path("/home/alice/run")
    job.getOutputFile.return_value = Path("/home/alice/run/slurm-12345.out")
    job.getErrorFile.return_value = Path("/home/alice/run/slurm-12345.out")
    job.getNNodes.return_value = 2
    job.getNCPUs.return_value = 64
    job.getNGPUs.return_value = 0
    job.getMem.return_value = Size(16, "gb")
    job.getWalltime.return_value = timedelta(hours=2)
    job.getSubmissionTime.return_value = datetime(2025, 1, 1, 10, 0, 0)
    job.getStartTime.return_value = datetime(2025, 1, 1, 10, 30, 0)
    job.getCompletionTime.return_value = None
    job.getRunTime.return_value = timedelta(minutes=45)
    job.getShortNodes.return_value = ["node[01-02]"]
    job.getEstimated.return_value = None
    job.getComment.return_value = None
    job.getExitCode.return_value = None
    return job


def _render(renderable) -> str:
    console = Console(record=True, width=120)
    console.print(renderable)
    return console.export_text()


def test_status_presenter_create_job_status_panel_structure():
    group = StatusPresenter(_job()).createJobStatusPanel(Console(width=120))

    assert isinstance(group, Group)
    assert isinstance(group.renderables[1], Panel)


def test_status_presenter_panel_contains_job_information():
    output = _render(StatusPresenter(_job()).createJobStatusPanel(Console(width=120)))

    assert "JOB: 12345" in output
    assert "simulation" in output
    assert "alice" in output
    assert "project1" in output
    assert "/home/alice/run/slurm-12345.out" in output
    assert "Error file:" not in output
    assert "16gb" in output
    assert "GPUs:" not in output
    assert "Job is running" in output
    assert "2 nodes (node[01-02])" in output
    assert "was queued for" in output


def test_status_presenter_shows_separate_error_file():
    job = _job()
    job.getErrorFile.return_value = Path("/home/alice/run/err.log")

    output = _render(StatusPresenter(job).createJobStatusPanel(Console(width=120)))

    assert "Error file:" in output
    assert "err.log" in output


def test_status_presenter_unlimited_walltime():
    job = _job()
    job.getWalltime.return_value = None

    output = _render(StatusPresenter(job).createJobStatusPanel(Console(width=120)))

    assert "unlimited" in output


def test_status_presenter_completed_job_history():
    job = _job(BatchState.FAILED)
    job.getCompletionTime.return_value = datetime(2025, 1, 1, 11, 30, 0)
    job.getExitCode.return_value = 2

    output = _render(StatusPresenter(job).createJobStatusPanel(Console(width=120)))

    assert "was running for" in output
    assert "Failed at:" in output
    assert "Failed with exit code 2" in output


def test_status_presenter_queued_job_shows_estimate():
    job = _job(BatchState.QUEUED)
    job.getEstimated.return_value = (datetime.now() + timedelta(hours=1), "node07")
    job.getComment.return_value = "Reason: Priority"

    output = _render(StatusPresenter(job).createJobStatusPanel(Console(width=120)))

    assert "Job is queued" in output
    assert "Started at:" not in output
    assert "Planned start within" in output
    assert "node07" in output
    assert "Reason: Priority" not in output


def test_status_presenter_queued_job_shows_comment_without_estimate():
    job = _job(BatchState.HELD)
    job.getComment.return_value = "Reason: Dependency"

    output = _render(StatusPresenter(job).createJobStatusPanel(Console(width=120)))

    assert "Job is held" in output
    assert "Reason: Dependency" in output


@pytest.mark.parametrize(
    "state,message",
    [
        (BatchState.SUSPENDED, "Job is suspended"),
        (BatchState.EXITING, "Job is exiting"),
        (BatchState.FINISHED, "Job has finished"),
        (BatchState.CANCELLED, "Job has been cancelled"),
        (BatchState.UNKNOWN, "Job is in an unknown state"),
    ],
)
def test_status_presenter_state_messages(state, message):
    assert StatusPresenter(_job(state))._getStateMessages(state)[0] == message


def test_status_presenter_describe_single_node():
    job = _job()
    job.getNNodes.return_value = 1
    job.getShortNodes.return_value = ["node01"]

    assert StatusPresenter(job)._describeNodes() == "'node01'"


def test_status_presenter_describe_unknown_nodes():
    job = _job()
    job.getShortNodes.return_value = None

    assert StatusPresenter(job)._describeNodes() == "unknown node(s)"


def test_status_presenter_get_short_info():
    text = StatusPresenter(_job(BatchState.QUEUED)).getShortInfo()

    assert text.plain == "12345    queued"
    assert any(span.style == BatchState.QUEUED.color for span in text.spans)


def test_status_presenter_shows_array_information_for_array_tasks():
    job = _job()
    job.isArrayTask.return_value = True
    job.getArrayJobId.return_value = "12340"
    job.getArrayTaskId.return_value = "5"

    output = _render(StatusPresenter(job).createJobStatusPanel(Console(width=120)))

    assert "Array job:" in output
    assert "12340" in output
    assert "Array task:" in output


def test_status_presenter_hides_array_information_for_ordinary_jobs():
    output = _render(StatusPresenter(_job()).createJobStatusPanel(Console(width=120)))
    assert "Array job:" not in output
