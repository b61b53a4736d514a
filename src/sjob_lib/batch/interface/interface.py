# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


from abc import ABC, abstractmethod
from pathlib import Path
from typing import Generic, TypeVar

from sjob_lib.descriptor import JobDescriptor
from sjob_lib.transport import Transport

from .job import BatchJobInterface

TBatchJob = TypeVar("TBatchJob", bound=BatchJobInterface)


class BatchInterface(ABC, Generic[TBatchJob]):
    """
    Client of a batch scheduling system.

    Every command of the batch system is executed through the `Transport`
    the interface is bound to, so the same client works on a login node
    and, over ssh, from a workstation.

    Methods raise `SJError` if the batch system reports an error and
    `SJTransportError` if it cannot be reached at all.
    """

    def __init__(self, transport: Transport):
        self._transport = transport

    def getTransport(self) -> Transport:
        return self._transport

    @staticmethod
    @abstractmethod
    def envName() -> str:
        """Name of the batch system, e.g., 'Slurm'."""

    # submission and cancellation

    @abstractmethod
    def submit(
        self,
        descriptor: JobDescriptor,
        script: Path,
        script_args: list[str] | None = None,
        cwd: Path | None = None,
    ) -> str:
        """
        Submit a script as a new job.

        Args:
            descriptor (JobDescriptor): Options of the job. These override the directives of the script.
            script (Path): The script, as seen from the machine running the batch system.
            script_args (list[str] | None): Arguments passed to the script.
            cwd (Path | None): Directory to submit from.

        Returns:
            str: ID assigned to the job.

        Raises:
            SJError: If the batch system refused the job.
        """

    @abstractmethod
    def translateSubmit(
        self,
        descriptor: JobDescriptor,
        script: Path,
        script_args: list[str] | None = None,
    ) -> list[str]:
        """The command `submit` would execute."""

    @abstractmethod
    def cancel(self, job_id: str, signal: str | None = None) -> None:
        """Cancel the job, or only send it the signal if one is given."""

    @abstractmethod
    def cancelUser(self, user: str, signal: str | None = None) -> None:
        """Cancel all jobs of the user, or only send them the signal if one is given."""

    # queries

    @abstractmethod
    def getJob(self, job_id: str) -> TBatchJob:
        """
        Information about a single job.

        Never fails for an unknown job: an empty job (see `BatchJobInterface.isEmpty`)
        is returned instead.
        """

    @abstractmethod
    def getUnfinishedJobs(self, user: str) -> list[TBatchJob]:
        pass

    @abstractmethod
    def getJobs(self, user: str) -> list[TBatchJob]:
        """Both unfinished and finished jobs of the user."""

    @abstractmethod
    def getAllUnfinishedJobs(self) -> list[TBatchJob]:
        pass

    @abstractmethod
    def getAllJobs(self) -> list[TBatchJob]:
        """Both unfinished and finished jobs of all users."""

    @abstractmethod
    def account(
        self, job_ids: list[str], fields: str, allocations: bool = False
    ) -> list[dict[str, str]]:
        """
        Accounting records of the jobs and, unless `allocations` is set, of their steps.

        Args:
            job_ids (list[str]): Jobs to report.
            fields (str): Comma-separated accounting fields, optionally with display widths (`JobName%20`).
            allocations (bool): Report only whole allocations.

        Returns:
            list[dict[str, str]]: One mapping of field names to values per record.
        """

    def sortJobs(self, jobs: list[TBatchJob]) -> None:
        """Sort jobs in place in the order natural for the batch system. Keeps the order by default."""
