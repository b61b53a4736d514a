# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import re
from dataclasses import dataclass
from typing import Self

from sjob_lib.core.config import CFG
from sjob_lib.core.error import SJError


@dataclass(init=False)
class Size:
    """
    Memory size as requested from or reported by Slurm.

    The value is stored in kilobytes. `str()` gives a human-readable size
    (the largest unit whose rounding error stays within `CFG.size.max_rounding_error`),
    `toStrSlurm()` gives an exact size accepted by `--mem` and `--mem-per-cpu`.
    """

    value: int

    _unit_map = {
        "kb": 1,
        "mb": 1024,
        "gb": 1024**2,
        "tb": 1024**3,
        "pb": 1024**4,
    }

    def __init__(self, value: int, unit: str = "kb"):
        unit = unit.lower()
        if unit not in self._unit_map:
            raise SJError(f"Unsupported unit for size '{unit}'.")

        self.value = value * self._unit_map[unit]

    @classmethod
    def fromString(cls, s: str) -> Self:
        """
        Create a Size from a string with a unit, e.g., "10mb", "10 mb", "10m", "10M".

        Raises:
            SJError: If the string cannot be parsed or contains an invalid unit.
        """
        if not (match := re.fullmatch(r"\s*(\d+)\s*([a-zA-Z]+)\s*", s)):
            raise SJError(f"Invalid size string: '{s}'.")

        value, unit = match.groups()
        if len(unit) == 1:
            unit += "b"

        return cls(int(value), unit)

    @classmethod
    def fromSlurm(cls, s: str) -> Self:
        """
        Create a Size from a memory specification understood by Slurm.

        A bare number is in megabytes, as in Slurm.

        Args:
            s (str): Memory specification, e.g., "4096", "4G", "500M", "16gb".

        Raises:
            SJError: If the string cannot be parsed.
        """
        if s.strip().isdigit():
            return cls(int(s), "mb")

        return cls.fromString(s)

    def __mul__(self, n: int) -> "Size":
        if not isinstance(n, int):
            return NotImplemented

        return Size(self.value * n, "kb")

    __rmul__ = __mul__

    def __str__(self) -> str:
        for unit, factor in reversed(self._unit_map.items()):
            if (value := self.value / factor) < 1:
                continue

            rounded = round(value)
            if (
                unit == "kb"
                or abs(rounded * factor - self.value) / self.value
                <= CFG.size.max_rounding_error
            ):
                return f"{rounded}{unit}"

        return f"{self.value}kb"

    def toStrSlurm(self) -> str:
        """
        Return the size in the largest unit representing it exactly, e.g., '4G', '1536M', '100K'.
        """
        for unit, factor in reversed(self._unit_map.items()):
            # not supported by Slurm
            if unit == "pb":
                continue
            if self.value >= factor and self.value % factor == 0:
                return f"{self.value // factor}{unit[0].upper()}"

        return f"{self.value}K"
