# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Representation and handling of job dependencies.

This module defines `DependType`, an enumeration of the dependency
conditions supported by Slurm, and the `Depend` dataclass, which stores both
the dependency type and the referenced job IDs.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Self

from sjob_lib.core.common import split_list
from sjob_lib.core.error import SJError
from sjob_lib.core.logger import get_logger

logger = get_logger(__name__)


class DependType(Enum):
    """
    Enumeration of supported job dependency types.
    """

    # Job should start after other job has started.
    AFTER_START = "after"

    # Job should start after other job has finished successfully.
    AFTER_SUCCESS = "afterok"

    # Job should start after other job has failed or been cancelled.
    AFTER_FAILURE = "afternotok"

    # Job should start after other job has finished, failed or been cancelled.
    AFTER_COMPLETION = "afterany"

    # Array task should start after the corresponding task of another array job has finished successfully.
    AFTER_CORRESPONDING = "aftercorr"

    # Job should start after all previous jobs with the same name and user have ended.
    SINGLETON = "singleton"

    @classmethod
    def fromStr(cls, string: str) -> Self:
        """
        Convert a dependency keyword to a `DependType`.

        Args:
            string (str): Dependency type keyword, e.g., "afterok".

        Returns:
            DependType: Corresponding dependency type enum.

        Raises:
            SJError: If the given string does not correspond to any known dependency type.
        """
        try:
            return cls(string.strip().lower())
        except ValueError:
            raise SJError(f"Unknown dependency type '{string}'.") from None

    def toStr(self) -> str:
        """
        Convert the dependency type to its Slurm keyword.

        Returns:
            str: The dependency keyword, e.g., "afterany".
        """
        return self.value


@dataclass
class Depend:
    """
    Representation of a parsed job dependency.

    Attributes:
        type (DependType): The type of dependency, determined by the dependency keyword.
        jobs (list[str]): List of job IDs this dependency refers to. Empty for `singleton`.
    """

    type: DependType
    jobs: list[str] = field(default_factory=list)

    @classmethod
    def fromStr(cls, raw_depend: str) -> Self:
        """
        Parse a single dependency expression.

        Both the sjob format `<type>=<job_id>[:<job_id>...]` and the Slurm format
        `<type>:<job_id>[:<job_id>...]` are accepted. `singleton` takes no job IDs.

        Args:
            raw_depend (str): Raw dependency string to parse.

        Returns:
            Depend: The parsed dependency.

        Raises:
            SJError: If the dependency string is malformed.
        """
        logger.debug(f"Depend string to parse: '{raw_depend}'.")
        try:
            if not (match := re.fullmatch(r"\s*(\w+)\s*(?:[=:](.*))?", raw_depend)):
                raise SJError("Invalid format.")

            raw_type, raw_jobs = match.groups()
            depend_type = DependType.fromStr(raw_type)

            if depend_type == DependType.SINGLETON:
                if raw_jobs and raw_jobs.strip():
                    raise SJError("Singleton dependency takes no job ids.")
                return cls(depend_type, [])

            if raw_jobs is None:
                raise SJError("Missing job id.")

            jobs = raw_jobs.split(":")
            if any(x.strip() == "" for x in jobs):
                raise SJError("Missing job id.")

            return cls(depend_type, [x.strip() for x in jobs])
        except Exception as e:
            raise SJError(
                f"Could not parse dependency specification '{raw_depend}': {e}"
            ) from e

    @classmethod
    def multiFromStr(cls, raw: str) -> list[Self]:
        """
        Parse a combined dependency string into a list of `Depend` objects.

        The input may contain multiple dependency expressions separated by commas,
        spaces, or both.

        Args:
            raw (str): Raw dependency string possibly containing multiple expressions.

        Returns:
            list[Depend]: A list of parsed dependency objects.

        Raises:
            SJError: If any dependency expression within the string is malformed.
        """
        logger.debug(f"Full depend string to parse: '{raw}'.")
        return [cls.fromStr(dep) for dep in split_list(raw)]

    def toStr(self) -> str:
        """
        Convert the dependency to the sjob format `<type>=<job_id1>:<job_id2>`.
        """
        if self.type == DependType.SINGLETON:
            return self.type.toStr()

        return f"{self.type.toStr()}={':'.join(self.jobs)}"

    def toSlurm(self) -> str:
        """
        Convert the dependency to the format used by `sbatch --dependency`,
        i.e., `<type>:<job_id1>:<job_id2>`.
        """
        return ":".join([self.type.toStr(), *self.jobs])

    @staticmethod
    def multiToSlurm(depend: list["Depend"]) -> str | None:
        """
        Convert a list of dependencies into a single `--dependency` value.

        All the dependencies must be satisfied for the job to start.

        Returns:
            str | None: Comma-separated dependencies or None if the list is empty.
        """
        if not depend:
            return None

        return ",".join(d.toSlurm() for d in depend)
