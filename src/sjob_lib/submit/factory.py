# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from pathlib import Path

from sjob_lib.batch import get_batch_system
from sjob_lib.core.logger import get_logger
from sjob_lib.descriptor import DescriptorFactory, ScriptBuilder

from .submitter import Submitter

logger = get_logger(__name__)

# suffixes of files describing jobs in YAML
YAML_SUFFIXES = {".yaml", ".yml"}


class SubmitterFactory:
    """
    Factory class to construct a Submitter instance based on parameters from
    the command-line and from the submitted file itself.
    """

    def __init__(
        self,
        script: Path,
        script_args: list[str] | None = None,
        host: str | None = None,
        **kwargs,
    ):
        """
        Initialize the factory with the script, its arguments, and the command-line options.

        Args:
            script (Path): Path to the batch script or YAML job file to submit.
            script_args (list[str] | None): Arguments passed to the script.
            host (str | None): Login host on which the job should be submitted.
            **kwargs: Keyword arguments from the command line.
        """
        self._script = script
        self._script_args = script_args or []
        self._host = host
        self._descriptor_factory = DescriptorFactory(**kwargs)

    def makeSubmitter(self) -> Submitter:
        """
        Construct and return a Submitter instance.

        Returns:
            Submitter: A fully initialized submitter object ready to submit a job.

        Raises:
            SJError: If the script or the job file cannot be read or parsed.
        """
        batch_system = get_batch_system(self._host)

        if self._script.suffix.lower() in YAML_SUFFIXES:
            logger.debug(f"Loading job file '{self._script}'.")
            builder = ScriptBuilder.fromYaml(self._script)
            descriptor = self._descriptor_factory.fromDescriptor(
                builder.getDescriptor()
            )
        else:
            builder = None
            descriptor = self._descriptor_factory.fromScript(self._script)

        logger.debug(f"Final job descriptor: {descriptor}.")
        return Submitter(
            batch_system, descriptor, self._script, self._script_args, builder
        )
