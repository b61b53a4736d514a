# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Structured representation of a Slurm submission.

This module defines the `JobDescriptor` dataclass, which captures the job name,
output files, time limit, requested nodes, CPUs, GPUs and memory, partition,
array specification, dependencies, and environment propagation of a job.
"""

import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, ClassVar, Self

import yaml

from sjob_lib.core.common import load_yaml_dumper, normalize_time_limit, to_snake_case
from sjob_lib.core.error import SJError
from sjob_lib.core.field_coupling import CouplingRules, FieldCoupling
from sjob_lib.core.logger import get_logger
from sjob_lib.properties.array import ArraySpec
from sjob_lib.properties.depend import Depend
from sjob_lib.properties.export import Export
from sjob_lib.properties.size import Size

from .directives import DIRECTIVES

logger = get_logger(__name__)

Dumper: type[yaml.Dumper] = load_yaml_dumper()

# `N` or `MIN-MAX`
_NODES = re.compile(r"\s*(\d+)(?:\s*-\s*(\d+))?\s*")

# `N` or `type:N`
_GPUS = re.compile(r"\s*(?:([A-Za-z0-9_.-]+):)?(\d+)\s*")


@dataclass(init=False)
class JobDescriptor:
    """
    Dataclass describing a job to be submitted to Slurm.

    Fields set to None are not specified and Slurm (or a less specific
    source of options) decides their values.
    """

    # if mem is set, mem_per_cpu is ignored
    COUPLINGS: ClassVar[CouplingRules] = CouplingRules(FieldCoupling("mem", "mem_per_cpu"))

    # Name of the job.
    job_name: str | None = None

    # Partition to submit the job to.
    partition: str | None = None

    # Account charged for the resources used by the job.
    account: str | None = None

    # Quality of service of the job.
    qos: str | None = None

    # Time limit of the job in Slurm format.
    time: str | None = None

    # Number of computing nodes, either `N` or a range `MIN-MAX`.
    nodes: str | None = None

    # Number of tasks.
    ntasks: int | None = None

    # Number of tasks per node.
    ntasks_per_node: int | None = None

    # Number of CPU cores per task.
    cpus_per_task: int | None = None

    # Memory per node (overrides mem_per_cpu).
    mem: Size | None = None

    # Memory per CPU core.
    mem_per_cpu: Size | None = None

    # Total number of GPUs, optionally with their type (`a100:2`).
    gpus: str | None = None

    # Features the nodes must have.
    constraint: str | None = None

    # Indices of the array tasks.
    array: ArraySpec | None = None

    # Jobs this job depends on.
    dependency: list[Depend] | None = None

    # Environment propagated to the job.
    export: Export | None = None

    # Filename pattern for the standard output of the job.
    output: str | None = None

    # Filename pattern for the standard error output of the job.
    error: str | None = None

    # Working directory of the job.
    chdir: str | None = None

    # Events to notify the user about by email.
    mail_type: str | None = None

    # Address to send the notifications to.
    mail_user: str | None = None

    # Options not modelled by sjob, passed to sbatch verbatim.
    extra: list[str] | None = None

    def __init__(
        self,
        job_name: str | None = None,
        partition: str | None = None,
        account: str | None = None,
        qos: str | None = None,
        time: str | int | None = None,
        nodes: int | str | None = None,
        ntasks: int | str | None = None,
        ntasks_per_node: int | str | None = None,
        cpus_per_task: int | str | None = None,
        mem: Size | str | int | dict[str, object] | None = None,
        mem_per_cpu: Size | str | int | dict[str, object] | None = None,
        gpus: int | str | None = None,
        constraint: str | None = None,
        array: ArraySpec | str | int | None = None,
        dependency: list[Depend] | list[str] | str | None = None,
        export: Export | str | dict[str, object] | None = None,
        output: str | None = None,
        error: str | None = None,
        chdir: str | Path | None = None,
        mail_type: str | None = None,
        mail_user: str | None = None,
        extra: list[str] | str | None = None,
    ):
        self.job_name = job_name
        self.partition = partition
        self.account = account
        self.qos = qos
        self.time = normalize_time_limit(str(time)) if time is not None else None
        self.nodes = JobDescriptor._parseNodes(nodes)
        self.ntasks = JobDescriptor._parseCount("ntasks", ntasks)
        self.ntasks_per_node = JobDescriptor._parseCount(
            "ntasks_per_node", ntasks_per_node
        )
        self.cpus_per_task = JobDescriptor._parseCount("cpus_per_task", cpus_per_task)
        self.mem = JobDescriptor._parseSize(mem)
        self.mem_per_cpu = JobDescriptor._parseSize(mem_per_cpu)
        self.gpus = JobDescriptor._parseGpus(gpus)
        self.constraint = constraint
        self.array = JobDescriptor._parseArray(array)
        self.dependency = JobDescriptor._parseDependency(dependency)
        self.export = JobDescriptor._parseExport(export)
        self.output = output
        self.error = error
        self.chdir = str(chdir) if chdir is not None else None
        self.mail_type = mail_type
        self.mail_user = mail_user
        self.extra = [extra] if isinstance(extra, str) else (extra or None)

        JobDescriptor.COUPLINGS.enforce(self)

        logger.debug(f"JobDescriptor: {self}")

    def toDict(self) -> dict[str, object]:
        """
        Return all set fields as a dictionary of plain values
        (strings, integers, and lists), suitable for YAML serialization.
        """
        result: dict[str, object] = {}
        for f in fields(JobDescriptor):
            value = getattr(self, f.name)
            if value is None:
                continue

            match value:
                case Size():
                    result[f.name] = value.toStrSlurm()
                case ArraySpec() | Export():
                    result[f.name] = value.toStr()
                case list() if f.name == "dependency":
                    result[f.name] = [d.toStr() for d in value]
                case _:
                    result[f.name] = value

        return result

    def toYaml(self) -> str:
        """Return the YAML representation of the descriptor."""
        return yaml.dump(
            self.toDict(), default_flow_style=False, sort_keys=False, Dumper=Dumper
        )

    @classmethod
    def fromDict(cls, data: dict[str, Any]) -> Self:
        """
        Create a descriptor from a dictionary, e.g., loaded from a YAML file.

        Keys may be written in snake_case or kebab-case.

        Raises:
            SJError: If the dictionary contains an unknown key or an invalid value.
        """
        field_names = {f.name for f in fields(JobDescriptor)}
        converted = {}
        for key, value in data.items():
            snake_case_key = to_snake_case(str(key))
            if snake_case_key not in field_names:
                raise SJError(
                    f"Unknown job option '{key}'. Known options are '{' '.join(sorted(field_names))}'."
                )
            converted[snake_case_key] = value

        return cls(**converted)

    def toSbatchArgs(self, include_extra: bool = True) -> list[str]:
        """
        Convert the descriptor into a list of `sbatch` options.

        Args:
            include_extra (bool): Whether to also include the options not modelled by sjob.

        Returns:
            list[str]: Options in the form `--name=value`, ordered consistently.
        """
        args = []
        for directive in DIRECTIVES:
            if (value := self._formatValue(directive.field)) is not None:
                args.append(f"--{directive.long}={value}")

        if include_extra and self.extra:
            args.extend(self.extra)

        return args

    def isEmpty(self) -> bool:
        """Return True if no field of the descriptor is set."""
        return all(getattr(self, f.name) is None for f in fields(JobDescriptor))

    @staticmethod
    def merge(*descriptors: "JobDescriptor") -> "JobDescriptor":
        """
        Merge multiple descriptors.

        Earlier descriptors take precedence over later ones.

        If either field in a coupling is set in an earlier descriptor, both fields of
        that coupling are taken from that descriptor and later descriptors are ignored.
        (This means that `mem-per-cpu` set by the user is not overwritten by a default
        `mem` value, even though `mem` is the dominant attribute.)

        Dependencies and extra options are concatenated, dropping duplicates.
        Exported variables are merged.

        Args:
            *descriptors (JobDescriptor): Descriptors in order of precedence.

        Returns:
            JobDescriptor: A new descriptor with merged fields.
        """
        merged_data: dict[str, object] = {}
        processed_couplings: list[FieldCoupling] = []

        for f in fields(JobDescriptor):
            if f.name in ("dependency", "extra"):
                merged_list: list = []
                for d in descriptors:
                    merged_list.extend(
                        x for x in (getattr(d, f.name) or []) if x not in merged_list
                    )
                merged_data[f.name] = merged_list or None
                continue

            if f.name == "export":
                merged_data[f.name] = Export.merge(*(d.export for d in descriptors))
                continue

            if coupling := JobDescriptor.COUPLINGS.forField(f.name):
                if coupling not in processed_couplings:
                    processed_couplings.append(coupling)
                    merged_data.update(coupling.takeFrom(*descriptors))
                continue

            # default: pick the first non-None value for this field
            merged_data[f.name] = next(
                (
                    getattr(d, f.name)
                    for d in descriptors
                    if getattr(d, f.name) is not None
                ),
                None,
            )

        return JobDescriptor(**merged_data)  # ty: ignore[invalid-argument-type]

    def _formatValue(self, field_name: str) -> str | None:
        """Format the value of a field as used on the sbatch command line."""
        value = getattr(self, field_name)
        if value is None:
            return None

        match value:
            case Size():
                return value.toStrSlurm()
            case ArraySpec() | Export():
                return value.toStr() or None
            case list():
                return Depend.multiToSlurm(value)
            case _:
                return str(value)

    @staticmethod
    def _parseCount(name: str, value: object) -> int | None:
        """
        Convert a raw value into a positive integer.

        Raises:
            SJError: If the value is not a positive integer.
        """
        if value is None:
            return None

        try:
            count = int(str(value).strip())
        except ValueError:
            raise SJError(
                f"Invalid value of '{name}': '{value}' is not an integer."
            ) from None

        if count < 1:
            raise SJError(f"Invalid value of '{name}': must be positive, not {count}.")

        return count

    @staticmethod
    def _parseNodes(value: object) -> str | None:
        """
        Validate the number of nodes, given either as `N` or as a range `MIN-MAX`.

        Raises:
            SJError: If the value is not a positive count or a valid range.
        """
        if value is None:
            return None

        if not (match := _NODES.fullmatch(str(value))):
            raise SJError(
                f"Invalid value of 'nodes': '{value}' is neither a count nor a range 'MIN-MAX'."
            )

        low, high = match.groups()
        low_count = JobDescriptor._parseCount("nodes", low)
        if high is None:
            return str(low_count)

        high_count = JobDescriptor._parseCount("nodes", high)
        if high_count < low_count:
            raise SJError(
                f"Invalid value of 'nodes': minimum {low_count} exceeds maximum {high_count}."
            )

        return f"{low_count}-{high_count}"

    @staticmethod
    def _parseGpus(value: object) -> str | None:
        """
        Validate the number of GPUs, optionally prefixed by their type (`a100:2`).

        Raises:
            SJError: If the value is not a positive count with an optional type.
        """
        if value is None:
            return None

        if not (match := _GPUS.fullmatch(str(value))):
            raise SJError(
                f"Invalid value of 'gpus': '{value}' is not in the form '[type:]count'."
            )

        gpu_type, raw_count = match.groups()
        count = JobDescriptor._parseCount("gpus", raw_count)
        return f"{gpu_type}:{count}" if gpu_type else str(count)

    @staticmethod
    def _parseSize(value: object) -> Size | None:
        """
        Convert a raw value into a `Size` instance if possible.

        Bare numbers are interpreted in megabytes, as in Slurm.
        """
        if isinstance(value, Size) or value is None:
            return value
        if isinstance(value, int):
            return Size(value, "mb")
        if isinstance(value, str):
            return Size.fromSlurm(value)
        if isinstance(value, dict):
            return Size(**value)  # ty: ignore[invalid-argument-type]

        raise SJError(f"Invalid size '{value}'.")

    @staticmethod
    def _parseArray(value: object) -> ArraySpec | None:
        """Convert a raw value into an `ArraySpec` instance."""
        if isinstance(value, ArraySpec) or value is None:
            return value

        return ArraySpec.fromStr(str(value))

    @staticmethod
    def _parseDependency(value: object) -> list[Depend] | None:
        """Convert a raw value (a string or a list of strings) into a list of dependencies."""
        if value is None:
            return None
        if isinstance(value, str):
            return Depend.multiFromStr(value) or None
        if isinstance(value, list):
            return [
                d
                for item in value
                for d in ([item] if isinstance(item, Depend) else Depend.multiFromStr(str(item)))
            ] or None

        raise SJError(f"Invalid dependency specification '{value}'.")

    @staticmethod
    def _parseExport(value: object) -> Export | None:
        """Convert a raw value (a string or a mapping) into an `Export` instance."""
        if value is None:
            return None
        if isinstance(value, Export):
            return None if value.isEmpty() else value
        if isinstance(value, str):
            export = Export.fromStr(value)
            return None if export.isEmpty() else export
        if isinstance(value, dict):
            return Export.fromDict(value)

        raise SJError(f"Invalid export specification '{value}'.")
