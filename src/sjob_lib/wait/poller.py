# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from time import monotonic, sleep

from sjob_lib.batch.interface import BatchInterface, BatchJobInterface
from sjob_lib.core.config import CFG
from sjob_lib.core.error import SJError, SJTransportError
from sjob_lib.core.logger import get_logger
from sjob_lib.core.retryer import Retryer
from sjob_lib.properties.states import BatchState

logger = get_logger(__name__, show_time=True)


class Poller:
    """
    Periodically queries Slurm for the state of a job until the job completes.
    """

    def __init__(
        self,
        batch_system: BatchInterface,
        job_id: str,
        interval: float | None = None,
        timeout: float | None = None,
    ):
        """
        Initialize the poller.

        Args:
            batch_system (BatchInterface): The batch system to query.
            job_id (str): ID of the job to watch.
            interval (float | None): Time between two queries in seconds.
                Defaults to `CFG.poller.interval`.
            timeout (float | None): Maximal time to wait in seconds. None means no limit.
        """
        self._batch_system = batch_system
        self._job_id = job_id
        self._interval = interval if interval is not None else CFG.poller.interval
        self._timeout = timeout

        self._job: BatchJobInterface | None = None
        self._state: BatchState | None = None
        self._unknown_count = 0

        if self._interval <= 0:
            raise SJError(f"Polling interval must be positive, not {self._interval}.")

    def poll(self) -> BatchState:
        """
        Query the current state of the job once.

        Transport errors are retried. State transitions are logged.

        Returns:
            BatchState: The current state of the job.

        Raises:
            SJError: If the job could not be queried or if it stays in
                an unknown state for too many consecutive queries.
        """
        if self._job is None:
            self._job = Retryer(
                self._batch_system.getJob,
                self._job_id,
                max_tries=CFG.poller.retry_tries,
                wait_seconds=CFG.poller.retry_wait,
                retry_on=(SJTransportError,),
            ).run()
        else:
            Retryer(
                self._job.update,
                max_tries=CFG.poller.retry_tries,
                wait_seconds=CFG.poller.retry_wait,
                retry_on=(SJTransportError,),
            ).run()

        state = self._job.getState()

        if state == BatchState.UNKNOWN:
            self._unknown_count += 1
            if self._unknown_count >= CFG.poller.max_unknown:
                raise SJError(
                    f"Job '{self._job_id}' does not exist or its state could not be determined."
                )
        else:
            self._unknown_count = 0

        if state != self._state:
            self._logTransition(state)
            self._state = state

        return state

    def wait(self) -> BatchJobInterface:
        """
        Block until the job completes.

        Returns:
            BatchJobInterface: The completed job.

        Raises:
            SJError: If the job could not be queried, stays unknown for too long,
                or does not complete within the timeout.
        """
        start = monotonic()

        while not self.poll().isCompleted():
            if self._timeout is not None and monotonic() - start + self._interval > self._timeout:
                raise SJError(
                    f"Job '{self._job_id}' did not complete within {self._timeout} seconds (state: {self._state})."
                )
            sleep(self._interval)

        # the job is always set after a successful poll
        return self._job  # ty: ignore[invalid-return-type]

    def getState(self) -> BatchState | None:
        """Return the last observed state of the job."""
        return self._state

    def _logTransition(self, state: BatchState) -> None:
        """Log the change of the state of the job."""
        if state.isCompleted() and self._job and (exit_code := self._job.getExitCode()):
            logger.info(f"Job '{self._job_id}' is {state} (exit code {exit_code}).")
        elif self._state is None:
            logger.info(f"Job '{self._job_id}' is {state}.")
        else:
            logger.info(f"Job '{self._job_id}': {self._state} -> {state}.")


def exit_code_for_state(state: BatchState) -> int:
    """
    Return the exit code reported to the shell for a completed job.

    Args:
        state (BatchState): The final state of the job.

    Returns:
        int: 0 if the job finished successfully, `CFG.exit_codes.job_failed` otherwise.
    """
    if state == BatchState.FINISHED:
        return 0

    return CFG.exit_codes.job_failed
