# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Environment propagation to Slurm jobs.

The `Export` dataclass represents the value of the `--export` option of `sbatch`:
an optional propagation mode (`ALL`, `NONE`, or `NIL`) followed by
environment variables either assigned explicitly (`VAR=value`) or
propagated by name from the submission environment (`VAR`).
"""

import re
from dataclasses import dataclass, field
from typing import Self

from sjob_lib.core.error import SJError
from sjob_lib.core.logger import get_logger

logger = get_logger(__name__)


@dataclass
class Export:
    """
    Specification of the environment propagated to a job.

    Attributes:
        mode (str | None): Propagation mode (`ALL`, `NONE`, `NIL`) or None if not specified.
        variables (dict[str, str | None]): Exported variables. A variable mapped to None
            is propagated with its value from the submission environment.
    """

    MODES = ("ALL", "NONE", "NIL")

    mode: str | None = None
    variables: dict[str, str | None] = field(default_factory=dict)

    def __post_init__(self):
        if self.mode is not None:
            self.mode = self.mode.upper()
            if self.mode not in Export.MODES:
                raise SJError(
                    f"Unknown export mode '{self.mode}'. Supported modes are: {', '.join(Export.MODES)}."
                )

        for name, value in self.variables.items():
            if not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", name):
                raise SJError(f"Invalid name of an environment variable '{name}'.")
            if value is not None and "," in value:
                raise SJError(
                    f"Value of the exported variable '{name}' cannot contain a comma."
                )

    @classmethod
    def fromStr(cls, raw: str) -> Self:
        """
        Parse the value of the `--export` option.

        Args:
            raw (str): Export specification, e.g., "ALL,OMP_NUM_THREADS=4,HOME".

        Returns:
            Export: The parsed export specification.

        Raises:
            SJError: If the specification contains an invalid item.
        """
        logger.debug(f"Export string to parse: '{raw}'.")
        mode = None
        variables: dict[str, str | None] = {}

        for i, item in enumerate(x.strip() for x in raw.split(",")):
            if not item:
                continue

            # mode can only be specified as the first item
            if i == 0 and item.upper() in Export.MODES:
                mode = item
                continue

            name, sep, value = item.partition("=")
            variables[name.strip()] = value.strip() if sep else None

        return cls(mode, variables)

    @classmethod
    def fromDict(cls, variables: dict[str, object], mode: str | None = "ALL") -> Self:
        """
        Create an export specification from a dictionary of variables.

        Args:
            variables (dict[str, object]): Variables to export with their values.
                Values of None propagate the variable from the submission environment.
            mode (str | None): Propagation mode. Defaults to "ALL".

        Returns:
            Export: The export specification.
        """
        return cls(
            mode,
            {k: None if v is None else str(v) for k, v in variables.items()},
        )

    def isEmpty(self) -> bool:
        """Return True if neither the mode nor any variables are specified."""
        return self.mode is None and not self.variables

    def toStr(self) -> str:
        """Convert the specification to the value of `sbatch --export`."""
        items = [self.mode] if self.mode else []
        items.extend(
            name if value is None else f"{name}={value}"
            for name, value in self.variables.items()
        )
        return ",".join(items)

    def __str__(self) -> str:
        return self.toStr()

    @staticmethod
    def merge(*exports: "Export | None") -> "Export | None":
        """
        Merge multiple export specifications.

        Earlier specifications take precedence over later ones: the first set mode
        is used and for each variable, its first occurrence wins.

        Returns:
            Export | None: The merged specification or None if nothing is exported.
        """
        mode = None
        variables: dict[str, str | None] = {}

        for export in exports:
            if export is None:
                continue

            mode = mode or export.mode
            variables |= {
                k: v for k, v in export.variables.items() if k not in variables
            }

        merged = Export(mode, variables)
        return None if merged.isEmpty() else merged
