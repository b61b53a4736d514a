# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from dataclasses import asdict, fields
from pathlib import Path

from sjob_lib.core.config import CFG
from sjob_lib.core.logger import get_logger

from .descriptor import JobDescriptor
from .parser import DirectiveParser

logger = get_logger(__name__)


class DescriptorFactory:
    """
    Constructs the final descriptor of a job by combining options from
    the command line, from the submitted script, and from the configuration.

    Priority:
        1. Command-line options
        2. Options specified in the script (`#SBATCH` directives or a YAML job file)
        3. Default options from the configuration
    """

    def __init__(self, **kwargs):
        """
        Initialize the factory.

        Args:
            **kwargs: Keyword arguments from the command line. Arguments which are not
                fields of `JobDescriptor` and arguments set to None are ignored.
        """
        field_names = {f.name for f in fields(JobDescriptor)}
        self._command_line = JobDescriptor(
            **{k: v for k, v in kwargs.items() if k in field_names and v is not None}
        )
        logger.debug(f"Options from the command line: {self._command_line}.")

    def fromScript(self, script: Path) -> JobDescriptor:
        """
        Build the descriptor for a batch script with `#SBATCH` directives.

        Args:
            script (Path): Path to the script.

        Returns:
            JobDescriptor: The merged descriptor.

        Raises:
            SJError: If the script cannot be parsed.
        """
        return self.fromDescriptor(DirectiveParser(script).parse())

    def fromDescriptor(self, descriptor: JobDescriptor) -> JobDescriptor:
        """
        Merge an already loaded descriptor (e.g., from a YAML job file)
        with the command-line options and the configured defaults.

        Args:
            descriptor (JobDescriptor): Options of the job specified in the job file.

        Returns:
            JobDescriptor: The merged descriptor.
        """
        return JobDescriptor.merge(
            self._command_line, descriptor, DescriptorFactory._getDefaults()
        )

    @staticmethod
    def _getDefaults() -> JobDescriptor:
        """Return the default options from the configuration."""
        return JobDescriptor(**asdict(CFG.defaults))
