# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Representation of Slurm job arrays.

A job array is specified by the `--array` option of `sbatch` as a list of
index ranges, e.g., `0-15`, `1,3,5-7`, `0-15:4`, optionally followed by
a throttle limiting the number of simultaneously running tasks, e.g., `1-100%10`.
"""

import re
from dataclasses import dataclass, field
from typing import Self

from sjob_lib.core.error import SJError
from sjob_lib.core.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ArrayRange:
    """
    A single range of array indices: `start[-end[:step]]`.
    """

    start: int
    end: int
    step: int = 1

    @classmethod
    def fromStr(cls, raw: str) -> Self:
        """
        Parse a single range of array indices.

        Args:
            raw (str): Range specification, e.g., "5", "0-15", "0-15:4".

        Returns:
            ArrayRange: The parsed range.

        Raises:
            SJError: If the range is malformed or invalid.
        """
        match = re.fullmatch(r"\s*(\d+)(?:\s*-\s*(\d+)(?:\s*:\s*(\d+))?)?\s*", raw)
        if not match:
            raise SJError(f"Invalid array range '{raw}'.")

        start, end, step = match.groups()
        array_range = cls(
            int(start),
            int(end) if end is not None else int(start),
            int(step) if step is not None else 1,
        )

        if array_range.end < array_range.start:
            raise SJError(
                f"Invalid array range '{raw}': end index is smaller than start index."
            )
        if array_range.step < 1:
            raise SJError(f"Invalid array range '{raw}': step must be positive.")

        return array_range

    def indices(self) -> list[int]:
        """Return all indices contained in the range."""
        return list(range(self.start, self.end + 1, self.step))

    def toStr(self) -> str:
        """Convert the range to the format used by Slurm."""
        if self.start == self.end:
            return str(self.start)
        if self.step == 1:
            return f"{self.start}-{self.end}"
        return f"{self.start}-{self.end}:{self.step}"


@dataclass
class ArraySpec:
    """
    Specification of a job array.

    Attributes:
        ranges (list[ArrayRange]): Ranges of indices of the array tasks.
        throttle (int | None): Maximum number of simultaneously running tasks.
    """

    ranges: list[ArrayRange] = field(default_factory=list)
    throttle: int | None = None

    @classmethod
    def fromStr(cls, raw: str) -> Self:
        """
        Parse an array specification.

        Args:
            raw (str): The value of `--array`, e.g., "1,3,5-7%2".

        Returns:
            ArraySpec: The parsed array specification.

        Raises:
            SJError: If the specification is malformed, contains an invalid range,
                an invalid throttle, or an index specified multiple times.
        """
        logger.debug(f"Array specification to parse: '{raw}'.")
        raw_ranges, sep, raw_throttle = raw.strip().partition("%")

        throttle = None
        if sep:
            if not raw_throttle.strip().isdigit() or int(raw_throttle) < 1:
                raise SJError(
                    f"Invalid throttle '{raw_throttle}' in array specification '{raw}'."
                )
            throttle = int(raw_throttle)

        if not raw_ranges.strip():
            raise SJError(f"Array specification '{raw}' contains no indices.")

        spec = cls([ArrayRange.fromStr(r) for r in raw_ranges.split(",")], throttle)

        indices = spec.indices()
        if len(set(indices)) != len(indices):
            raise SJError(
                f"Array specification '{raw}' contains some indices multiple times."
            )

        return spec

    def indices(self) -> list[int]:
        """Return all array indices in the order in which they were specified."""
        return [i for r in self.ranges for i in r.indices()]

    def __len__(self) -> int:
        return sum(len(r.indices()) for r in self.ranges)

    def toStr(self) -> str:
        """Convert the specification to the format used by `sbatch --array`."""
        ranges = ",".join(r.toStr() for r in self.ranges)
        return f"{ranges}%{self.throttle}" if self.throttle else ranges

    def __str__(self) -> str:
        return self.toStr()
