# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from pathlib import Path

from sjob_lib.properties.size import Size
from sjob_lib.properties.states import BatchState


class BatchJobInterface(ABC):
    """
    A snapshot of a job as known to the scheduler.

    The snapshot is taken when the job is created by `BatchInterface.getJob`
    (or by a job listing) and refreshed only by `update`. A job that the
    scheduler no longer knows about is represented by an empty snapshot:
    `isEmpty` returns True, `getState` returns `BatchState.UNKNOWN` and the
    optional getters return None.

    Getters returning `None` mean "not reported by the scheduler".
    """

    # identity and lifecycle

    @abstractmethod
    def isEmpty(self) -> bool:
        """True if the scheduler provided no information about the job."""

    @abstractmethod
    def getId(self) -> str:
        """The job ID; for array tasks in the `<array job>_<index>` form."""

    @abstractmethod
    def update(self) -> None:
        """
        Query the scheduler again and replace the stored snapshot.

        Raises:
            SJError: If the scheduler could not be queried.
        """

    @abstractmethod
    def getState(self) -> BatchState:
        pass

    @abstractmethod
    def getComment(self) -> str | None:
        """Scheduler's note on the job, typically the reason a job is pending."""

    @abstractmethod
    def getExitCode(self) -> int | None:
        pass

    # ownership and placement

    @abstractmethod
    def getName(self) -> str | None:
        pass

    @abstractmethod
    def getUser(self) -> str | None:
        pass

    @abstractmethod
    def getAccount(self) -> str | None:
        pass

    @abstractmethod
    def getPartition(self) -> str | None:
        pass

    # resources

    @abstractmethod
    def getNNodes(self) -> int | None:
        pass

    @abstractmethod
    def getNCPUs(self) -> int | None:
        pass

    @abstractmethod
    def getNGPUs(self) -> int | None:
        pass

    @abstractmethod
    def getMem(self) -> Size | None:
        """Total memory of the job, summed over all nodes or CPUs."""

    @abstractmethod
    def getWalltime(self) -> timedelta | None:
        """Time limit of the job. None also for jobs without a limit."""

    @abstractmethod
    def getNodes(self) -> list[str] | None:
        """Hostnames of all allocated nodes, expanded from Slurm's compact notation."""

    @abstractmethod
    def getShortNodes(self) -> list[str] | None:
        """Allocated nodes in Slurm's compact notation, e.g., `node[01-04]`."""

    # times

    @abstractmethod
    def getSubmissionTime(self) -> datetime | None:
        pass

    @abstractmethod
    def getStartTime(self) -> datetime | None:
        pass

    @abstractmethod
    def getCompletionTime(self) -> datetime | None:
        pass

    @abstractmethod
    def getRunTime(self) -> timedelta | None:
        """Time between the start and the completion (or now, for running jobs)."""

    @abstractmethod
    def getEstimated(self) -> tuple[datetime, str] | None:
        """
        Expected start of a pending job.

        Returns:
            tuple[datetime, str] | None: Estimated start time and the nodes the job
            is expected to run on, or None if Slurm provides no estimate.
        """

    # files

    @abstractmethod
    def getWorkDir(self) -> Path | None:
        pass

    @abstractmethod
    def getOutputFile(self) -> Path | None:
        """Standard output file of the job, with filename patterns such as `%j` expanded."""

    @abstractmethod
    def getErrorFile(self) -> Path | None:
        """Standard error file of the job, with filename patterns expanded."""

    # job arrays

    @abstractmethod
    def getArrayJobId(self) -> str | None:
        """ID shared by all tasks of the job array, None for ordinary jobs."""

    @abstractmethod
    def getArrayTaskId(self) -> str | None:
        """Index of the task, or the range of indices still pending, e.g. `3-15%2`."""

    def isArrayTask(self) -> bool:
        return self.getArrayJobId() is not None

    # raw data

    @abstractmethod
    def toDict(self) -> dict[str, str]:
        """All fields reported by the scheduler, unparsed."""

    @abstractmethod
    def toYaml(self) -> str:
        """The fields of `toDict` as a YAML document."""
