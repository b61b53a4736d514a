# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import pytest

from sjob_lib.core.config import CFG
from sjob_lib.properties.states import BatchState


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("PENDING", BatchState.QUEUED),
        ("RUNNING", BatchState.RUNNING),
        ("COMPLETING", BatchState.EXITING),
        ("COMPLETED", BatchState.FINISHED),
        ("FAILED", BatchState.FAILED),
        ("TIMEOUT", BatchState.FAILED),
        ("OUT_OF_MEMORY", BatchState.FAILED),
        ("NODE_FAIL", BatchState.FAILED),
        ("CANCELLED by 1234", BatchState.CANCELLED),
        ("SUSPENDED", BatchState.SUSPENDED),
        ("REQUEUED+", BatchState.QUEUED),
        ("PD", BatchState.QUEUED),
        ("R", BatchState.RUNNING),
        ("CD", BatchState.FINISHED),
        ("CA", BatchState.CANCELLED),
        ("running", BatchState.RUNNING),
        ("", BatchState.UNKNOWN),
        ("WHATEVER", BatchState.UNKNOWN),
    ],
)
def test_batch_state_from_slurm(raw, expected):
    assert BatchState.fromSlurm(raw) == expected


@pytest.mark.parametrize(
    "reason",
    ["Dependency", "JobHeldUser", "JobHeldAdmin", "DependencyNeverSatisfied"],
)
def test_batch_state_from_slurm_pending_with_hold_reason_is_held(reason):
    assert BatchState.fromSlurm("PENDING", reason) == BatchState.HELD


@pytest.mark.parametrize("reason", ["Priority", "Resources", "None"])
def test_batch_state_from_slurm_pending_with_other_reason_is_queued(reason):
    assert BatchState.fromSlurm("PENDING", reason) == BatchState.QUEUED


def test_batch_state_hold_reason_ignored_for_running_job():
    assert BatchState.fromSlurm("RUNNING", "Dependency") == BatchState.RUNNING


@pytest.mark.parametrize("state", list(BatchState))
def test_batch_state_code_round_trip(state):
    assert BatchState.fromCode(state.toCode()) == state


def test_batch_state_from_code_invalid_is_unknown():
    assert BatchState.fromCode("Z") == BatchState.UNKNOWN


def test_batch_state_is_completed():
    assert BatchState.FINISHED.isCompleted()
    assert BatchState.FAILED.isCompleted()
    assert BatchState.CANCELLED.isCompleted()
    assert not BatchState.RUNNING.isCompleted()
    assert not BatchState.UNKNOWN.isCompleted()


def test_batch_state_is_active():
    assert BatchState.QUEUED.isActive()
    assert BatchState.EXITING.isActive()
    assert not BatchState.FINISHED.isActive()
    assert not BatchState.UNKNOWN.isActive()


def test_batch_state_str_and_color():
    assert str(BatchState.RUNNING) == "running"
    assert BatchState.RUNNING.color == CFG.state_colors.running
