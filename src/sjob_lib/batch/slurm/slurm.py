# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from pathlib import Path

from sjob_lib.batch.interface import BatchInterface
from sjob_lib.core.error import SJError
from sjob_lib.core.logger import get_logger
from sjob_lib.descriptor import JobDescriptor

from .common import parse_format_fields, parse_sbatch_output, sacct_format, squeue_format
from .job import SlurmJob

logger = get_logger(__name__)


class Slurm(BatchInterface[SlurmJob]):
    """
    Implementation of BatchInterface for Slurm.

    All commands are executed through the transport of the instance.
    """

    @staticmethod
    def envName() -> str:
        return "Slurm"

    def submit(
        self,
        descriptor: JobDescriptor,
        script: Path,
        script_args: list[str] | None = None,
        cwd: Path | None = None,
    ) -> str:
        command = self.translateSubmit(descriptor, script, script_args)

        result = self._transport.run(command, cwd=cwd)
        if not result.ok():
            raise SJError(
                f"Failed to submit script '{script}': {result.stderr.strip()}."
            )

        job_id = parse_sbatch_output(result.stdout)
        logger.debug(f"Submitted job '{job_id}'.")
        return job_id

    def translateSubmit(
        self,
        descriptor: JobDescriptor,
        script: Path,
        script_args: list[str] | None = None,
    ) -> list[str]:
        # options not modelled by sjob are part of the script, sbatch reads them from there
        return [
            "sbatch",
            "--parsable",
            *descriptor.toSbatchArgs(include_extra=False),
            str(script),
            *(script_args or []),
        ]

    def cancel(self, job_id: str, signal: str | None = None) -> None:
        command = Slurm._translateCancel(signal) + [job_id]

        result = self._transport.run(command)
        if not result.ok():
            raise SJError(f"Failed to cancel job '{job_id}': {result.stderr.strip()}.")

    def cancelUser(self, user: str, signal: str | None = None) -> None:
        command = Slurm._translateCancel(signal) + ["-u", user]

        result = self._transport.run(command)
        if not result.ok():
            raise SJError(
                f"Failed to cancel jobs of user '{user}': {result.stderr.strip()}."
            )

    def getJob(self, job_id: str) -> SlurmJob:
        return SlurmJob(job_id, self._transport)

    def getUnfinishedJobs(self, user: str) -> list[SlurmJob]:
        return self._getJobsUsingSqueue(["-u", user])

    def getJobs(self, user: str) -> list[SlurmJob]:
        # get all jobs, except pending which are not available from sacct
        sacct_jobs = self._getJobsUsingSacct(["-u", user])

        # get pending jobs using squeue
        squeue_jobs = self._getJobsUsingSqueue(["-u", user, "-t", "PENDING"])

        # filter out duplicate jobs
        merged = {job.getId(): job for job in sacct_jobs + squeue_jobs}
        return list(merged.values())

    def getAllUnfinishedJobs(self) -> list[SlurmJob]:
        return self._getJobsUsingSqueue([])

    def getAllJobs(self) -> list[SlurmJob]:
        # get all jobs, except pending which are not available from sacct
        sacct_jobs = self._getJobsUsingSacct(["--allusers"])

        # get pending jobs using squeue
        squeue_jobs = self._getJobsUsingSqueue(["-t", "PENDING"])

        # filter out duplicate jobs
        merged = {job.getId(): job for job in sacct_jobs + squeue_jobs}
        return list(merged.values())

    def account(
        self, job_ids: list[str], fields: str, allocations: bool = False
    ) -> list[dict[str, str]]:
        if not job_ids:
            raise SJError("No job ID specified.")

        names = parse_format_fields(fields)
        if not names:
            raise SJError(f"Invalid format of accounting fields '{fields}'.")

        command = [
            "sacct",
            "-j",
            ",".join(job_ids),
            f"--format={fields}",
            "--parsable2",
            "--noheader",
        ]
        if allocations:
            command.append("--allocations")

        result = self._transport.run(command)
        if not result.ok():
            raise SJError(
                f"Could not retrieve accounting information: {result.stderr.strip()}."
            )

        records = []
        for line in result.stdout.splitlines():
            if line.strip() == "":
                continue

            values = line.split("|")
            if len(values) != len(names):
                raise SJError(
                    f"Number of items in a sacct string '{line}' ('{len(values)}') does not match the number of requested fields ('{len(names)}')."
                )
            records.append(dict(zip(names, values)))

        return records

    def sortJobs(self, jobs: list[SlurmJob]) -> None:
        jobs.sort(key=lambda job: job.getIdsForSorting())

    @staticmethod
    def _translateCancel(signal: str | None) -> list[str]:
        """
        Generate the beginning of the scancel command.

        Args:
            signal (str | None): Signal to send to the job(s) instead of cancelling them.

        Returns:
            list[str]: `scancel` optionally followed by the signal option.
        """
        if signal:
            return ["scancel", f"--signal={signal}"]

        return ["scancel"]

    def _getJobsUsingSacct(self, options: list[str]) -> list[SlurmJob]:
        """
        Execute `sacct` to retrieve information about Slurm jobs and parse it.

        Args:
            options (list[str]): Options selecting the relevant jobs.

        Returns:
            list[SlurmJob]: A list of `SlurmJob` instances corresponding to the jobs
                            returned by the command.

        Raises:
            SJError: If the command fails or if the output cannot be parsed.
        """
        command = [
            "sacct",
            *options,
            "--allocations",
            "--noheader",
            "--parsable2",
            f"--format={sacct_format()}",
        ]

        result = self._transport.run(command)
        if not result.ok():
            raise SJError(
                f"Could not retrieve information about jobs: {result.stderr.strip()}."
            )

        return [
            SlurmJob.fromSacctString(line, self._transport)
            for line in result.stdout.splitlines()
            if line.strip()
        ]

    def _getJobsUsingSqueue(self, options: list[str]) -> list[SlurmJob]:
        """
        Execute `squeue` to retrieve information about Slurm jobs and parse it.

        Args:
            options (list[str]): Options selecting the relevant jobs.

        Returns:
            list[SlurmJob]: A list of `SlurmJob` instances corresponding to the jobs
                            returned by the command.

        Raises:
            SJError: If the command fails or if the output cannot be parsed.
        """
        command = ["squeue", "-h", "-o", squeue_format(), *options]

        result = self._transport.run(command)
        if not result.ok():
            raise SJError(
                f"Could not retrieve information about jobs: {result.stderr.strip()}."
            )

        return [
            SlurmJob.fromSqueueString(line, self._transport)
            for line in result.stdout.splitlines()
            if line.strip()
        ]
