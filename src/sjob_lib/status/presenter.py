# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from datetime import datetime

from rich.console import Console, Group
from rich.padding import Padding
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from sjob_lib.batch.interface import BatchJobInterface
from sjob_lib.core.common import format_duration_wdhhmmss, get_panel_width
from sjob_lib.core.config import CFG
from sjob_lib.properties.states import BatchState


class StatusPresenter:
    """
    Presentation layer for the status of a single Slurm job.
    """

    def __init__(self, job: BatchJobInterface):
        """
        Initialize the presenter with a job.

        Args:
            job (BatchJobInterface): The job to present.
        """
        self._job = job

    def createJobStatusPanel(self, console: Console | None = None) -> Group:
        """
        Create a status panel for the job.

        Args:
            console (Console | None): Optional Rich console.
                If not provided, a new Console is created.

        Returns:
            Group: A Rich Group containing the status panel.
        """
        console = console or Console()
        state = self._job.getState()
        panel_settings = CFG.presenter.job_status_panel

        content = Group(
            Padding(self._createBasicInfoTable(), (0, 2)),
            Text(""),
            Rule(
                title=Text("RESOURCES", style=panel_settings.title_style),
                style=panel_settings.rule_style,
            ),
            Text(""),
            Padding(self._createResourcesTable(), (0, 2)),
            Text(""),
            Rule(
                title=Text("HISTORY", style=panel_settings.title_style),
                style=panel_settings.rule_style,
            ),
            Text(""),
            Padding(self._createJobHistoryTable(state), (0, 2)),
            Text(""),
            Rule(
                title=Text("STATE", style=panel_settings.title_style),
                style=panel_settings.rule_style,
            ),
            Text(""),
            Padding(self._createJobStatusTable(state), (0, 2)),
        )

        panel = Panel(
            content,
            title=Text(
                f"JOB: {self._job.getId()}",
                style=panel_settings.title_style,
                justify="center",
            ),
            border_style=panel_settings.border_style,
            # no horizontal padding so Rule reaches borders
            padding=(1, 0),
            width=get_panel_width(
                console, 3, panel_settings.min_width, panel_settings.max_width
            ),
        )

        return Group(Text(""), panel, Text(""))

    def getShortInfo(self) -> Text:
        """
        Return a concise, colorized summary of the job's current state.

        Returns:
            Text: A Rich `Text` object containing the job ID followed by the
            current state, colorized according to the `BatchState`.
        """
        state = self._job.getState()
        return Text(self._job.getId()) + "    " + Text(str(state), style=state.color)

    def _createBasicInfoTable(self) -> Table:
        """
        Create a table with basic job information.

        Returns:
            Table: A Rich table with key-value pairs of basic job details.
        """
        table = StatusPresenter._createKeyValueTable()

        rows = [
            ("Job name:", self._job.getName()),
            ("User:", self._job.getUser()),
            ("Account:", self._job.getAccount()),
            ("Partition:", self._job.getPartition()),
        ]
        if self._job.isArrayTask():
            rows += [
                ("Array job:", self._job.getArrayJobId()),
                ("Array task:", self._job.getArrayTaskId()),
            ]
        rows += [
            ("Working directory:", self._job.getWorkDir()),
            ("Output file:", self._job.getOutputFile()),
        ]
        if (error_file := self._job.getErrorFile()) != self._job.getOutputFile():
            rows.append(("Error file:", error_file))

        for key, value in rows:
            if value is not None:
                table.add_row(key, Text(str(value)))

        return table

    def _createResourcesTable(self) -> Table:
        """
        Create a table displaying the resources of the job.

        Returns:
            Table: A Rich table summarizing resource allocations.
        """
        table = StatusPresenter._createKeyValueTable()

        walltime = self._job.getWalltime()
        rows = [
            ("Nodes:", self._job.getNNodes()),
            ("CPUs:", self._job.getNCPUs()),
            ("GPUs:", self._job.getNGPUs() or None),
            ("Memory:", self._job.getMem()),
            (
                "Time limit:",
                format_duration_wdhhmmss(walltime) if walltime else "unlimited",
            ),
        ]

        for key, value in rows:
            if value is not None:
                table.add_row(key, Text(str(value)))

        return table

    def _createJobHistoryTable(self, state: BatchState) -> Table:
        """
        Create a table summarizing the job timeline.

        Args:
            state (BatchState): State of the job.

        Returns:
            Table: A Rich table showing the chronological job history.
        """
        submitted = self._job.getSubmissionTime()
        started = (
            self._job.getStartTime()
            if state not in {BatchState.QUEUED, BatchState.HELD}
            else None
        )
        completed = self._job.getCompletionTime()

        table = StatusPresenter._createKeyValueTable()

        if submitted:
            table.add_row("Submitted at:", Text(f"{submitted}"))
        # job started
        if started:
            if submitted:
                table.add_row(
                    "",
                    Text(
                        f"was queued for {format_duration_wdhhmmss(started - submitted)}",
                        style=CFG.presenter.notes_style,
                    ),
                )
            table.add_row("Started at:", Text(f"{started}"))
        # job is completed
        if started and completed:
            table.add_row(
                "",
                Text(
                    f"was running for {format_duration_wdhhmmss(completed - started)}",
                    style=CFG.presenter.notes_style,
                ),
            )
        if completed:
            table.add_row(f"{str(state).title()} at:", Text(f"{completed}"))

        return table

    def _createJobStatusTable(self, state: BatchState) -> Table:
        """
        Create a table summarizing the current job status.

        Args:
            state (BatchState): The current state of the job.

        Returns:
            Table: A Rich table with job state and details.
        """
        message, details = self._getStateMessages(state)

        table = StatusPresenter._createKeyValueTable()
        table.add_row("Job state:", Text(message, style=f"{state.color} bold"))
        if details:
            table.add_row("", Text(details))

        if estimated := self._job.getEstimated():
            table.add_row(
                "",
                Text(
                    f"Planned start within {format_duration_wdhhmmss(estimated[0] - datetime.now())} on '{estimated[1]}'",
                    style=CFG.presenter.notes_style,
                ),
            )
        # comment is typically only useful if the estimated start time is not defined
        elif comment := self._job.getComment():
            table.add_row("", Text(comment, style=CFG.presenter.notes_style))

        return table

    def _getStateMessages(self, state: BatchState) -> tuple[str, str]:
        """
        Map a BatchState to human-readable messages.

        Args:
            state (BatchState): The current job state.

        Returns:
            tuple[str, str]: A tuple containing:
                - A short status message (e.g., "Job is running").
                - Additional details, such as elapsed time or exit code.
        """
        now = datetime.now()
        queued_for = (
            format_duration_wdhhmmss(now - submitted)
            if (submitted := self._job.getSubmissionTime())
            else "unknown time"
        )
        run_time = self._job.getRunTime()

        match state:
            case BatchState.QUEUED:
                return ("Job is queued", f"In queue for {queued_for}")
            case BatchState.HELD:
                return ("Job is held", f"In queue for {queued_for}")
            case BatchState.SUSPENDED:
                return ("Job is suspended", "")
            case BatchState.RUNNING:
                return (
                    "Job is running",
                    f"Running for {format_duration_wdhhmmss(run_time) if run_time else 'unknown time'} on {self._describeNodes()}",
                )
            case BatchState.EXITING:
                return ("Job is exiting", "Releasing the allocated resources")
            case BatchState.FINISHED:
                return ("Job has finished", "Completed successfully")
            case BatchState.FAILED:
                return (
                    "Job has failed",
                    f"Failed with exit code {self._job.getExitCode()}",
                )
            case BatchState.CANCELLED:
                return ("Job has been cancelled", "")
            case BatchState.UNKNOWN:
                return (
                    "Job is in an unknown state",
                    "Job does not exist or Slurm does not know about it",
                )

        return ("Job is in an unknown state", "")

    def _describeNodes(self) -> str:
        """Return a short description of the nodes the job is running on."""
        if not (nodes := self._job.getShortNodes()):
            return "unknown node(s)"

        if (n_nodes := self._job.getNNodes() or 1) == 1:
            return f"'{nodes[0]}'"

        return f"{n_nodes} nodes ({nodes[0]})"

    @staticmethod
    def _createKeyValueTable() -> Table:
        table = Table(show_header=False, box=None, padding=(0, 1))
        table.add_column(justify="right", style=CFG.presenter.key_style, no_wrap=True)
        table.add_column(
            justify="left", style=CFG.presenter.value_style, overflow="fold"
        )
        return table
