# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from rich.console import Console

from sjob_lib.batch.interface import BatchInterface, BatchJobInterface
from sjob_lib.core.error import SJError, SJNotSuitableError
from sjob_lib.core.logger import get_logger
from sjob_lib.properties.states import BatchState
from sjob_lib.status.presenter import StatusPresenter

logger = get_logger(__name__)


class Canceller:
    """
    Class to manage the cancellation of a Slurm job.
    """

    def __init__(self, batch_system: BatchInterface, job_id: str):
        """
        Load the job that should be cancelled.

        Args:
            batch_system (BatchInterface): The batch system managing the job.
            job_id (str): Identifier of the job.

        Raises:
            SJError: If the job does not exist.
        """
        self._batch_system = batch_system
        self._job = batch_system.getJob(job_id)
        if self._job.isEmpty():
            raise SJError(f"Job '{job_id}' does not exist.")
        self._state = self._job.getState()

    def getJob(self) -> BatchJobInterface:
        return self._job

    def printInfo(self, console: Console) -> None:
        """Print a one-line summary of the job and its state."""
        console.print(StatusPresenter(self._job).getShortInfo())

    def ensureSuitable(self) -> None:
        """
        Verify that the job is in a state in which it can be cancelled.

        Raises:
            SJNotSuitableError: If the job is already completed or is exiting.
        """
        if self._state.isCompleted():
            raise SJNotSuitableError(
                f"Job '{self._job.getId()}' cannot be cancelled. Job is already {self._state}."
            )

        if self._state == BatchState.EXITING:
            raise SJNotSuitableError(
                f"Job '{self._job.getId()}' cannot be cancelled. Job is in an exiting state."
            )

    def cancel(self, signal: str | None = None) -> str:
        """
        Cancel the job (or send a signal to it) using `scancel`.

        Args:
            signal (str | None): Signal to send instead of cancelling the job.

        Returns:
            str: The identifier of the cancelled job.

        Raises:
            SJError: If `scancel` fails.
        """
        job_id = self._job.getId()
        self._batch_system.cancel(job_id, signal)
        return job_id
