# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import re
from datetime import datetime, timedelta
from pathlib import Path
from typing import Self

import yaml

from sjob_lib.batch.interface.job import BatchJobInterface
from sjob_lib.core.common import (
    UNLIMITED_TIME,
    load_yaml_dumper,
    slurm_time_to_duration,
)
from sjob_lib.core.config import CFG
from sjob_lib.core.error import SJError
from sjob_lib.core.logger import get_logger
from sjob_lib.properties.size import Size
from sjob_lib.properties.states import BatchState
from sjob_lib.transport import Transport

from .common import (
    SACCT_FIELDS,
    SQUEUE_FIELDS,
    SQUEUE_SEPARATOR,
    expand_filename_pattern,
    parse_slurm_dump_to_dictionary,
    sacct_format,
)

logger = get_logger(__name__)

Dumper: type[yaml.Dumper] = load_yaml_dumper()

# values used by Slurm for missing information
_MISSING = {"", "none", "n/a", "unknown", "(null)", "null"}


class SlurmJob(BatchJobInterface):
    """
    Implementation of BatchJobInterface for Slurm.
    Stores metadata for a single Slurm job.
    """

    def __init__(self, job_id: str, transport: Transport):
        self._job_id = job_id
        self._transport = transport
        self._info: dict[str, str] = {}

        self.update()

    def isEmpty(self) -> bool:
        return not self._info

    def getId(self) -> str:
        return self._job_id

    def update(self) -> None:
        # first try `scontrol`
        result = self._transport.run(["scontrol", "show", "job", self._job_id, "-o"])

        if result.ok() and result.stdout.strip():
            # job arrays are reported as multiple lines, use the first one
            first_line = result.stdout.strip().splitlines()[0]
            self._info = parse_slurm_dump_to_dictionary(first_line)
            return

        # if scontrol fails, try sacct
        logger.debug(
            f"scontrol failed for job '{self._job_id}' ({result.stderr.strip()}); trying sacct"
        )

        result = self._transport.run(
            [
                "sacct",
                "--allocations",
                "--noheader",
                "--parsable2",
                "-j",
                self._job_id,
                f"--format={sacct_format()}",
            ]
        )

        if not result.ok() or not result.stdout.strip():
            # if sacct fails, information is empty
            logger.debug(
                f"both scontrol and sacct failed: no information about job '{self._job_id}' is available: {result.stderr.strip()}"
            )
            self._info = {}
            return

        try:
            job = SlurmJob.fromSacctString(
                result.stdout.strip().splitlines()[0], self._transport
            )
        except SJError as e:
            logger.warning(f"Could not parse sacct record of job '{self._job_id}': {e}")
            self._info = {}
            return

        self._info = job._info

    def getState(self) -> BatchState:
        if not (raw_state := self._info.get("JobState")):
            return BatchState.UNKNOWN

        return BatchState.fromSlurm(raw_state, self._info.get("Reason"))

    def getComment(self) -> str | None:
        if (reason := self._info.get("Reason")) and reason.lower() not in _MISSING:
            return f"Reason: {reason}"

        return None

    def getName(self) -> str | None:
        return self._getStrProperty("JobName")

    def getUser(self) -> str | None:
        if not (user := self._getStrProperty("UserId")):
            return None

        # scontrol reports the user as 'name(uid)'
        return user.split("(")[0]

    def getAccount(self) -> str | None:
        return self._getStrProperty("Account")

    def getPartition(self) -> str | None:
        return self._getStrProperty("Partition")

    def getNNodes(self) -> int | None:
        return self._getIntProperty("NumNodes", "the number of nodes")

    def getNCPUs(self) -> int | None:
        return self._getIntProperty("NumCPUs", "the number of CPUs")

    def getNGPUs(self) -> int | None:
        for item in self._getTres().split(","):
            if item.startswith("gres/gpu=") or item.startswith("gpu="):
                try:
                    return int(item.split("=")[1])
                except ValueError as e:
                    logger.debug(
                        f"Could not parse the number of GPUs from '{item}': {e}."
                    )

        # squeue reports generic resources per node, e.g., 'gres/gpu:2' or 'gpu:a100:2'
        if (tres_per_node := self._getStrProperty("TresPerNode")) and "gpu" in tres_per_node:
            if match := re.search(r"gpu(?::[^:,]+)?:(\d+)", tres_per_node):
                return int(match.group(1)) * (self.getNNodes() or 1)

        return 0

    def getMem(self) -> Size | None:
        for item in self._getTres().split(","):
            if item.startswith("mem="):
                return self._parseSize(item.split("=", 1)[1])

        if raw := self._getStrProperty("MinMemoryNode"):
            if (per_node := self._parseSize(raw)) is not None:
                return per_node * (self.getNNodes() or 1)

        if raw := self._getStrProperty("MinMemoryCPU"):
            if (per_cpu := self._parseSize(raw)) is not None:
                return per_cpu * (self.getNCPUs() or 1)

        if raw := self._getStrProperty("MinMemory"):
            return self._parseSize(raw)

        return None

    def getWalltime(self) -> timedelta | None:
        if not (walltime := self._getStrProperty("TimeLimit")):
            return None

        if walltime.upper() in UNLIMITED_TIME:
            return None

        try:
            return slurm_time_to_duration(walltime)
        except SJError as e:
            logger.warning(f"Could not parse walltime for '{self._job_id}': {e}")
            return None

    def getSubmissionTime(self) -> datetime | None:
        return self._getDatetimeProperty("SubmitTime", "the job submission time")

    def getStartTime(self) -> datetime | None:
        return self._getDatetimeProperty("StartTime", "the job start time")

    def getCompletionTime(self) -> datetime | None:
        # the property EndTime is available for running jobs as well (estimated completion time)
        if not self.getState().isCompleted():
            return None

        return self._getDatetimeProperty("EndTime", "the job completion time")

    def getRunTime(self) -> timedelta | None:
        if (raw := self._getStrProperty("RunTime")) and raw.upper() not in UNLIMITED_TIME:
            try:
                return slurm_time_to_duration(raw)
            except SJError as e:
                logger.debug(f"Could not parse run time '{raw}': {e}")

        if not (start := self.getStartTime()) or self.getState() in {
            BatchState.QUEUED,
            BatchState.HELD,
        }:
            return None

        end = self.getCompletionTime() or datetime.now()
        return max(end - start, timedelta(0))

    def getEstimated(self) -> tuple[datetime, str] | None:
        if self.getState() not in {BatchState.QUEUED, BatchState.HELD}:
            return None

        # use "StartTime" as an estimate
        if not (time := self.getStartTime()):
            return None

        if not (node_list := self._getStrProperty("SchedNodeList")):
            return None

        return (time, node_list)

    def getNodes(self) -> list[str] | None:
        if node_list := self._getStrProperty("NodeList"):
            return self._expandNodeList(node_list)

        return None

    def getShortNodes(self) -> list[str] | None:
        # compact representation without expanding
        if node_list := self._getStrProperty("NodeList"):
            return [node_list]

        return None

    def getExitCode(self) -> int | None:
        if not (raw_exit := self._getStrProperty("ExitCode")):
            return None

        try:
            # Slurm reports two exit codes; the first one is exit code of the script
            # the second one is a signal
            # we return the first non-zero exit code or 0 if both exit codes are 0
            code, signal = map(int, raw_exit.split(":"))
            return code or signal
        except ValueError as e:
            logger.debug(f"Could not parse exit codes '{raw_exit}': {e}.")
            return None

    def getWorkDir(self) -> Path | None:
        if not (raw_dir := self._getStrProperty("WorkDir")):
            return None

        return Path(raw_dir)

    def getOutputFile(self) -> Path | None:
        return self._getFileProperty("StdOut")

    def getErrorFile(self) -> Path | None:
        return self._getFileProperty("StdErr")

    def getArrayJobId(self) -> str | None:
        if not self.getArrayTaskId():
            return None

        return self._getStrProperty("ArrayJobId")

    def getArrayTaskId(self) -> str | None:
        return self._getStrProperty("ArrayTaskId")

    def toYaml(self) -> str:
        return yaml.dump(
            self._info, default_flow_style=False, sort_keys=False, Dumper=Dumper
        )

    def toDict(self) -> dict[str, str]:
        return dict(self._info)

    @classmethod
    def fromDict(cls, job_id: str, info: dict[str, str], transport: Transport) -> Self:
        """
        Construct a new instance of SlurmJob from a job ID and a dictionary of job information.

        This method bypasses the standard initializer and directly sets the `_job_id` and `_info`
        attributes of the new instance.

        Args:
            job_id (str): The unique identifier of the job.
            info (dict[str, str]): A dictionary containing Slurm job metadata as key-value pairs.
            transport (Transport): Transport used for additional queries (e.g., node list expansion).

        Returns:
            Self: A new instance of SlurmJob.

        Note:
            This method does not perform any validation or processing of the provided dictionary.
        """
        job = cls.__new__(cls)
        job._job_id = job_id
        job._transport = transport
        job._info = info

        return job

    @classmethod
    def fromSacctString(cls, string: str, transport: Transport) -> Self:
        """
        Construct a new instance of SlurmJob using a line from `sacct --parsable2`.

        Args:
            string (str): Line describing the job properties obtained using sacct.
            transport (Transport): Transport used for additional queries.

        Returns:
            Self: A new instance of SlurmJob.

        Raises:
            SJError: If the number of items does not match `SACCT_FIELDS`.
        """
        keys = [key for _, key in SACCT_FIELDS]
        split = string.split("|")
        if len(keys) != len(split):
            raise SJError(
                f"Number of items in a sacct string '{string}' ('{len(split)}') does not match the expected number of items ('{len(keys)}')."
            )

        info: dict[str, str] = dict(zip(keys, split))

        SlurmJob._assignIfAllocated(info, "AllocCPUs", "ReqCPUs", "NumCPUs")
        SlurmJob._assignIfAllocated(info, "AllocNodes", "ReqNodes", "NumNodes")

        # sacct reports array tasks as 'arrayid_taskid'
        if match := re.fullmatch(r"(\d+)_(\S+)", info["JobId"]):
            info["ArrayJobId"], info["ArrayTaskId"] = match.groups()

        return cls.fromDict(info["JobId"], info, transport)

    @classmethod
    def fromSqueueString(cls, string: str, transport: Transport) -> Self:
        """
        Construct a new instance of SlurmJob using a line from squeue
        formatted according to `SQUEUE_FIELDS`.

        Args:
            string (str): Line describing the job properties obtained using squeue.
            transport (Transport): Transport used for additional queries.

        Returns:
            Self: A new instance of SlurmJob.

        Raises:
            SJError: If the line does not contain enough items.
        """
        keys = [key for _, key in SQUEUE_FIELDS]
        # job name is the last field and may contain the separator
        split = string.split(SQUEUE_SEPARATOR, maxsplit=len(keys) - 1)
        if len(keys) != len(split):
            raise SJError(
                f"Number of items in a squeue string '{string}' ('{len(split)}') does not match the expected number of items ('{len(keys)}')."
            )

        info: dict[str, str] = dict(zip(keys, (value.strip() for value in split)))
        return cls.fromDict(info["JobId"], info, transport)

    def getIdsForSorting(self) -> list[int]:
        """
        Extract numeric components of the job ID for sorting.

        The method retrieves the leading numeric portion of the job ID, which may
        contain multiple integer groups separated by underscores. Parsing stops
        when a non-digit and non-underscore character is encountered.

        Returns:
            list[int]: A list of integer components extracted from the job ID,
                or [0] if no valid numeric portion is found.
        """
        match = re.match(r"(\d+(?:_\d+)*)", self.getId())
        if not match:
            return [0]

        return [int(g) for g in match.group(1).split("_")]

    def _expandNodeList(self, compact: str) -> list[str]:
        """
        Expand a compact Slurm node list expression into individual hostnames.

        This method uses the Slurm `scontrol show hostnames` command to translate
        a compact node list (e.g., "node[01-03]") into an explicit list of node names.
        If the expansion fails, the original compact string is returned as a single-element list.

        Args:
            compact (str): The compact Slurm node list expression to expand.

        Returns:
            list[str]: A list of fully expanded node hostnames.
        """
        result = self._transport.run(["scontrol", "show", "hostnames", compact])

        if not result.ok():
            logger.warning(
                f"Could not expand '{compact}' into a list of nodes: {result.stderr.strip()}"
            )
            # use unexpanded string
            return [compact]

        return result.stdout.split()

    def _getFileProperty(self, property: str) -> Path | None:
        """
        Return a path from the job information with expanded filename patterns.
        """
        if not (raw := self._getStrProperty(property)):
            return None

        nodes = self.getShortNodes()
        # sacct and squeue report array tasks as 'arrayid_taskid', the raw id is the task's own
        job_id = (
            self._getStrProperty("JobIdRaw")
            or self._info.get("JobId", self._job_id).split("_")[0]
        )
        values = {
            "j": job_id,
            "J": job_id,
            "A": self._getStrProperty("ArrayJobId") or self._job_id,
            "a": self.getArrayTaskId() or "4294967294",
            "u": self.getUser() or "",
            "x": self.getName() or "",
            "N": nodes[0].split("[")[0] if nodes else "",
            "n": "0",
            "s": "batch",
            "t": "0",
        }
        expanded = Path(expand_filename_pattern(raw, values))

        if not expanded.is_absolute() and (work_dir := self.getWorkDir()):
            return work_dir / expanded

        return expanded

    def _getStrProperty(self, property: str) -> str | None:
        """Return a property from the job information or None if it is missing."""
        if (value := self._info.get(property)) is None or value.strip().lower() in _MISSING:
            return None

        return value.strip()

    def _getIntProperty(self, property: str, property_name: str) -> int | None:
        """
        Retrieve an integer property value from the job information.

        If the property contains a range (e.g., "MIN-MAX"), only the minimum value
        is returned.

        Args:
            property (str): The key identifying the property in the job information.
            property_name (str): A human-readable name of the property for logging.

        Returns:
            int | None: The integer value of the property, or None if unavailable or invalid.
        """
        if not (raw := self._getStrProperty(property)):
            return None

        try:
            # pending jobs may have this property shown as MIN-MAX
            return int(raw.split("-")[0])
        except ValueError:
            logger.debug(
                f"Could not get information about {property_name} from the batch system for '{self._job_id}'."
            )
            return None

    def _getDatetimeProperty(
        self, property: str, property_name: str
    ) -> datetime | None:
        """
        Retrieve and parse a datetime property from the job information.

        If the property is missing, empty, or marked as unknown, None is returned.
        A warning is logged if parsing fails.

        Args:
            property (str): The key identifying the property in the job information.
            property_name (str): A human-readable name of the property for logging.

        Returns:
            datetime | None: A datetime object if parsing succeeds, otherwise None.
        """
        if not (raw_datetime := self._getStrProperty(property)):
            return None

        try:
            return datetime.strptime(raw_datetime, CFG.date_formats.slurm)
        except ValueError as e:
            logger.warning(
                f"Could not parse information about {property_name} for '{self._job_id}': {e}."
            )
            return None

    def _getTres(self) -> str:
        """
        Return the allocated trackable resources or the requested ones, depending on which of them is available.
        """
        for key in ("AllocTRES", "TRES", "ReqTRES"):
            if tres := self._getStrProperty(key):
                return tres

        return ""

    def _parseSize(self, raw: str) -> Size | None:
        """Parse a memory size reported by Slurm, e.g., '4000M', '4G', or '1.50G'."""
        # fractional sizes are converted to kilobytes
        if match := re.fullmatch(r"(\d+)\.(\d+)([KMGT])", raw.strip(), re.IGNORECASE):
            whole, fraction, unit = match.groups()
            factor = {"k": 1, "m": 1024, "g": 1024**2, "t": 1024**3}[unit.lower()]
            return Size(round(float(f"{whole}.{fraction}") * factor), "kb")

        try:
            # squeue may append 'n' or 'c' (per node, per CPU)
            return Size.fromSlurm(raw.rstrip("nc"))
        except SJError as e:
            logger.warning(f"Could not parse memory for '{self._job_id}': {e}")
            return None

    @staticmethod
    def _assignIfAllocated(
        info: dict[str, str], alloc_key: str, req_key: str, target_key: str
    ) -> None:
        """
        Assign a value to a target key in the `info` dictionary, preferring an allocated value
        if it exists and is valid; otherwise, falls back to the requested value.

        Args:
            info (dict[str, str]): The dictionary containing allocation and request data.
            alloc_key (str): The key for the allocated resource (e.g., "AllocCPUs").
            req_key (str): The key for the requested resource (e.g., "ReqCPUs").
            target_key (str): The key under which the resolved value should be stored (e.g., "NumCPUs").
        """
        value = info.get(alloc_key)
        info[target_key] = (
            value if value not in (None, "None", "", "0") else info.get(req_key, "0")
        )
