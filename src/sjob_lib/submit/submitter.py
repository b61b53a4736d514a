# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import shlex
import tempfile
from datetime import datetime
from pathlib import Path

from sjob_lib.batch.interface import BatchInterface
from sjob_lib.core.config import CFG
from sjob_lib.core.error import SJError
from sjob_lib.core.logger import get_logger
from sjob_lib.descriptor import JobDescriptor, ScriptBuilder

logger = get_logger(__name__)


class Submitter:
    """
    Class to submit jobs to Slurm.

    Responsibilities:
        - Validate that the submitted file exists.
        - Render jobs described by YAML files into batch scripts.
        - Upload the script to the login node when submitting remotely.
        - Call sbatch from the directory of the script.

    Note that Submitter does not read the `#SBATCH` directives of the script.
    To take them into account, build the descriptor using the DescriptorFactory.
    """

    def __init__(
        self,
        batch_system: BatchInterface,
        descriptor: JobDescriptor,
        script: Path,
        script_args: list[str] | None = None,
        builder: ScriptBuilder | None = None,
    ):
        """
        Initialize a Submitter instance.

        Args:
            batch_system (BatchInterface): The batch system used for job submission.
            descriptor (JobDescriptor): Final options of the job.
            script (Path): Path to the batch script or to the YAML job file.
            script_args (list[str] | None): Arguments passed to the script.
            builder (ScriptBuilder | None): Builder of the batch script if the job
                is described by a YAML file.

        Raises:
            SJError: If the script does not exist.
        """
        self._batch_system = batch_system
        self._descriptor = descriptor
        self._script = script
        self._script_args = script_args or []
        self._builder = builder.withDescriptor(descriptor) if builder else None
        self._input_dir = script.resolve().parent

        if not self._script.is_file():
            raise SJError(f"Script '{script}' does not exist or is not a file.")

    def submit(self) -> str:
        """
        Submit the job to Slurm.

        Returns:
            str: The job ID of the submitted job.

        Raises:
            SJError: If the script cannot be rendered or uploaded, or if submission fails.
        """
        if not self._builder:
            return self._submitScript(self._script.resolve())

        # render the job file into a batch script which exists only during submission
        with tempfile.TemporaryDirectory(prefix="sjob-") as tmp_dir:
            script = self._builder.write(Path(tmp_dir) / self._getScriptName())
            return self._submitScript(script)

    def dryRun(self) -> str:
        """
        Return the command that would be used to submit the job, without running it.

        Returns:
            str: The shell-quoted submission command.
        """
        if self._batch_system.getTransport().isRemote():
            script = self._getRemoteScriptPath()
            descriptor = self._getRemoteDescriptor()
        else:
            script = self._script.resolve()
            if self._builder:
                script = script.with_name(self._getScriptName())
            descriptor = self._descriptor

        return shlex.join(
            self._batch_system.translateSubmit(descriptor, script, self._script_args)
        )

    def render(self) -> str | None:
        """
        Return the batch script rendered from the YAML job file
        or None if a batch script is submitted directly.
        """
        return self._builder.render() if self._builder else None

    def getBatchSystem(self) -> BatchInterface:
        return self._batch_system

    def getDescriptor(self) -> JobDescriptor:
        return self._descriptor

    def getScript(self) -> Path:
        return self._script

    def getInputDir(self) -> Path:
        return self._input_dir

    def _submitScript(self, script: Path) -> str:
        """
        Submit a batch script, uploading it first if the transport is remote.
        """
        transport = self._batch_system.getTransport()

        if transport.isRemote():
            remote = transport.upload(script, self._getRemoteScriptPath())
            logger.debug(f"Uploaded '{script}' to '{transport.getHost()}:{remote}'.")
            return self._batch_system.submit(
                self._getRemoteDescriptor(), remote, self._script_args
            )

        # submit from the input directory, so that Slurm uses it as the working directory
        return self._batch_system.submit(
            self._descriptor, script, self._script_args, cwd=self._input_dir
        )

    def _getScriptName(self) -> str:
        """Return the name of the batch script rendered from a job file."""
        return Path(self._script.name).with_suffix(CFG.script.suffix).name

    def _getRemoteScriptPath(self) -> Path:
        """
        Return the path to which the script is uploaded on the login node.
        Relative paths are relative to the home directory of the user.
        """
        name = Path(self._getScriptName() if self._builder else self._script.name)
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S-%f")
        return Path(CFG.transport.remote_script_dir) / f"{name.stem}-{timestamp}{name.suffix}"

    def _getRemoteDescriptor(self) -> JobDescriptor:
        """
        Return the descriptor used for remote submission.

        If the working directory is not set explicitly, the configured
        remote working directory is used.
        """
        if self._descriptor.chdir or not CFG.transport.remote_work_dir:
            return self._descriptor

        return JobDescriptor.merge(
            self._descriptor, JobDescriptor(chdir=CFG.transport.remote_work_dir)
        )
