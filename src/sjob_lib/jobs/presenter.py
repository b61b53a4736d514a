# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar

from rich.color import ColorSystem
from rich.console import Console, Group
from rich.panel import Panel
from rich.style import Style
from rich.table import Table
from rich.text import Text
from tabulate import Line, TableFormat, tabulate

from sjob_lib.batch.interface import BatchJobInterface
from sjob_lib.core.common import format_duration_wdhhmmss, get_panel_width
from sjob_lib.core.config import CFG
from sjob_lib.properties.states import BatchState


class JobsPresenter:
    """
    Render a list of Slurm jobs in the style of `squeue`, only more readable.

    The job table is built with `tabulate` as plain text with ANSI escape codes,
    which is considerably faster than a Rich table for thousands of jobs.
    The table is then wrapped, together with the job statistics, into a Rich panel.
    """

    # Borderless table format for `tabulate`.
    _COMPACT_TABLE = TableFormat(
        lineabove=Line("", "", "", ""),
        linebelowheader="",
        linebetweenrows="",
        linebelow=Line("", "", "", ""),
        headerrow=("", " ", ""),
        datarow=("", " ", ""),
        padding=0,
        with_header_hide=["lineabove", "linebelow"],
    )

    _COLUMNS = (
        "S",
        "Job ID",
        "User",
        "Job Name",
        "Partition",
        "CPUs",
        "GPUs",
        "Nodes",
        "Times",
        "Where",
    )

    # column shown when completed jobs are listed
    _EXIT_COLUMN = "Exit"

    def __init__(self, jobs: list[BatchJobInterface], extra: bool, all: bool):
        """
        Args:
            jobs (list[BatchJobInterface]): Jobs to render, already sorted.
            extra (bool): Print the working directory and the comment below each job.
            all (bool): The list contains completed jobs, so show the exit codes.
        """
        self._jobs = jobs
        self._extra = extra
        self._all = all
        self._stats = JobsStatistics()

    def createJobsInfoPanel(self, console: Console | None = None) -> Group:
        """
        Build the panel with the job table and the statistics of the listed jobs.

        Args:
            console (Console | None): Console used to determine the panel width.

        Returns:
            Group: The panel surrounded by empty lines.
        """
        console = console or Console()

        content = Group(
            Text.from_ansi(self._createJobsTable()),
            Text(""),
            self._stats.createStatsPanel(),
        )

        panel = Panel(
            content,
            title=Text(
                "COLLECTED JOBS", style=CFG.jobs_presenter.title_style, justify="center"
            ),
            border_style=CFG.jobs_presenter.border_style,
            padding=(1, 1),
            width=get_panel_width(
                console, 1, CFG.jobs_presenter.min_width, CFG.jobs_presenter.max_width
            ),
            expand=False,
        )

        return Group(Text(""), panel, Text(""))

    def dumpYaml(self) -> None:
        """Print every job as a YAML document."""
        for job in self._jobs:
            print(job.toYaml())

    def getStatistics(self) -> "JobsStatistics":
        return self._stats

    def _getHeaders(self) -> list[str]:
        return [*self._COLUMNS, self._EXIT_COLUMN] if self._all else list(self._COLUMNS)

    def _createJobsTable(self, now: datetime | None = None) -> str:
        """
        Tabulate the jobs, one line per job, and count them into the statistics.

        With `extra` enabled, the lines describing the job follow each job line.
        """
        now = now or datetime.now()
        headers = self._getHeaders()

        rows = []
        for job in self._jobs:
            cells = self._createCells(job, now)
            rows.append([cells[header] for header in headers])

        table = tabulate(
            rows,
            headers=[
                JobsPresenter._style(h, CFG.jobs_presenter.headers_style, bold=True)
                for h in headers
            ],
            tablefmt=JobsPresenter._COMPACT_TABLE,
            stralign="center",
            numalign="center",
        )

        if not self._extra:
            return table

        header, *lines = table.splitlines()
        out = [header]
        for line, job in zip(lines, self._jobs):
            out.append(line)
            out.extend(self._extraLines(job))
            out.append("")

        return "\n".join(out)

    def _createCells(self, job: BatchJobInterface, now: datetime) -> dict[str, str]:
        state = job.getState()
        cpus = job.getNCPUs() or 0
        gpus = job.getNGPUs() or 0
        nodes = job.getNNodes() or 0
        self._stats.addJob(state, cpus, gpus, nodes)

        main = CFG.jobs_presenter.main_style
        return {
            "S": JobsPresenter._style(state.toCode(), state.color),
            "Job ID": JobsPresenter._style(job.getId(), main),
            "User": JobsPresenter._style(job.getUser() or "", main),
            "Job Name": JobsPresenter._style(
                JobsPresenter._truncate(
                    job.getName() or "", CFG.jobs_presenter.max_job_name_length
                ),
                main,
            ),
            "Partition": JobsPresenter._style(job.getPartition() or "", main),
            "CPUs": JobsPresenter._style(str(cpus), main),
            "GPUs": JobsPresenter._style(str(gpus), main),
            "Nodes": JobsPresenter._style(str(nodes), main),
            "Times": JobsPresenter._formatTimes(job, state, now),
            "Where": JobsPresenter._formatWhere(job, state, now),
            "Exit": JobsPresenter._formatExitCode(job, state),
        }

    @staticmethod
    def _extraLines(job: BatchJobInterface) -> list[str]:
        lines = []
        if work_dir := job.getWorkDir():
            lines.append(f" >   Working directory: {work_dir}")
        if comment := job.getComment():
            lines.append(f" >   Comment:           {comment}")

        return [
            JobsPresenter._style(line, CFG.jobs_presenter.extra_info_style)
            for line in lines
        ]

    @staticmethod
    def _formatTimes(job: BatchJobInterface, state: BatchState, now: datetime) -> str:
        """
        Describe the job timing appropriate for its state.

        - waiting jobs: how long they have been waiting in the queue,
        - running jobs: elapsed time and time limit (red once the limit is exceeded),
        - completed jobs: date and time of completion.

        Suspended and unknown jobs, and jobs with missing times, get an empty cell.
        """
        match state:
            case BatchState.QUEUED | BatchState.HELD:
                if (submitted := job.getSubmissionTime()) is None:
                    return ""
                return JobsPresenter._style(
                    format_duration_wdhhmmss(now - submitted), state.color
                )

            case BatchState.RUNNING | BatchState.EXITING:
                if (started := job.getStartTime() or job.getSubmissionTime()) is None:
                    return ""
                elapsed = now - started
                walltime = job.getWalltime()
                exceeded = walltime is not None and elapsed > walltime
                limit = format_duration_wdhhmmss(walltime) if walltime else "unlimited"
                return JobsPresenter._style(
                    format_duration_wdhhmmss(elapsed),
                    CFG.jobs_presenter.strong_warning_style if exceeded else state.color,
                ) + JobsPresenter._style(f" / {limit}", CFG.jobs_presenter.main_style)

            case BatchState.FINISHED | BatchState.FAILED | BatchState.CANCELLED:
                if (completed := job.getCompletionTime()) is None:
                    return ""
                return JobsPresenter._style(
                    completed.strftime(CFG.date_formats.standard), state.color
                )

        return ""

    @staticmethod
    def _formatWhere(job: BatchJobInterface, state: BatchState, now: datetime) -> str:
        """
        Show the nodes the job runs (or ran) on or, for a waiting job,
        the nodes and time Slurm expects it to start on.
        """
        if nodes := job.getShortNodes():
            return JobsPresenter._style(
                JobsPresenter._truncate(
                    " + ".join(nodes), CFG.jobs_presenter.max_nodes_length
                ),
                CFG.jobs_presenter.main_style,
            )

        if state.isCompleted() or not (estimated := job.getEstimated()):
            return ""

        start, where = estimated
        # minutes are precise enough for an estimate
        wait = format_duration_wdhhmmss(start - now).rsplit(":", 1)[0]
        return JobsPresenter._style(
            f"{JobsPresenter._truncate(where, CFG.jobs_presenter.max_nodes_length)} in {wait}",
            state.color,
        )

    @staticmethod
    def _formatExitCode(job: BatchJobInterface, state: BatchState) -> str:
        if not state.isCompleted() or (exit_code := job.getExitCode()) is None:
            return ""

        style = (
            CFG.jobs_presenter.main_style
            if state == BatchState.FINISHED
            else CFG.jobs_presenter.strong_warning_style
        )
        return JobsPresenter._style(str(exit_code), style)

    @staticmethod
    def _truncate(string: str, max_length: int) -> str:
        if len(string) > max_length:
            return f"{string[:max_length]}…"
        return string

    @staticmethod
    def _style(string: str, style: str | None = None, bold: bool = False) -> str:
        """
        Wrap a string into the ANSI codes of a Rich style definition.

        Args:
            string (str): Text to style.
            style (str | None): Rich style definition, e.g., 'bright_red' or 'grey70'.
                None or 'default' keeps the terminal colors.
            bold (bool): Render the text in bold.

        Returns:
            str: The styled string.
        """
        definition = " ".join(
            part for part in (style, "bold" if bold else None) if part and part != "default"
        )
        if not definition:
            return string

        return Style.parse(definition).render(string, color_system=ColorSystem.EIGHT_BIT)


@dataclass
class ResourceCount:
    """CPUs, GPUs and nodes summed over a group of jobs."""

    cpus: int = 0
    gpus: int = 0
    nodes: int = 0

    def add(self, cpus: int, gpus: int, nodes: int) -> None:
        self.cpus += cpus
        self.gpus += gpus
        self.nodes += nodes

    def isEmpty(self) -> bool:
        return not (self.cpus or self.gpus or self.nodes)


@dataclass
class JobsStatistics:
    """
    Job counts per state and the resources requested and allocated by the jobs.

    Resources of waiting jobs are counted as requested, those of running and exiting
    jobs as allocated, and those of jobs in an unknown state as unknown.
    Resources of completed and suspended jobs are not counted.
    """

    n_jobs: dict[BatchState, int] = field(default_factory=dict)
    requested: ResourceCount = field(default_factory=ResourceCount)
    allocated: ResourceCount = field(default_factory=ResourceCount)
    unknown: ResourceCount = field(default_factory=ResourceCount)

    _GROUPS: ClassVar[dict[BatchState, str]] = {
        BatchState.QUEUED: "requested",
        BatchState.HELD: "requested",
        BatchState.RUNNING: "allocated",
        BatchState.EXITING: "allocated",
        BatchState.UNKNOWN: "unknown",
    }

    def addJob(self, state: BatchState, cpus: int, gpus: int, nodes: int) -> None:
        self.n_jobs[state] = self.n_jobs.get(state, 0) + 1

        if group := self._GROUPS.get(state):
            getattr(self, group).add(cpus, gpus, nodes)

    def getTotal(self) -> int:
        return sum(self.n_jobs.values())

    def createStatsPanel(self) -> Group:
        """
        Build the summary shown below the job table: job counts per state on the left,
        resources on the right.
        """
        table = Table.grid(expand=False)
        table.add_column(justify="left")
        # spacer
        table.add_column(justify="center", width=5)
        table.add_column(justify="right")

        table.add_row(self._createJobStatesStats(), "", self._createResourcesStatsTable())

        return Group(table)

    def _createJobStatesStats(self) -> Text:
        spacing = "    "
        secondary = CFG.jobs_presenter.secondary_style

        line = Text(spacing)
        line.append(f"\n\n Jobs{spacing}", style=f"{secondary} bold")

        # states are listed in the order of their definition
        counts = [
            (state.toCode(), state.color, self.n_jobs[state])
            for state in BatchState
            if state in self.n_jobs
        ]
        counts.append(
            (CFG.jobs_presenter.sum_jobs_code, CFG.state_colors.sum, self.getTotal())
        )

        for code, color, count in counts:
            line.append(f"{code} ", style=f"{color} bold")
            line.append(str(count), style=secondary)
            line.append(spacing)

        return line

    def _createResourcesStatsTable(self) -> Table:
        secondary = CFG.jobs_presenter.secondary_style

        table = Table(show_header=True, box=None, padding=(0, 1))
        table.add_column("", justify="left")
        for header in ("CPUs", "GPUs", "Nodes"):
            table.add_column(Text(header, style=secondary), justify="center")

        groups = [("Requested", self.requested), ("Allocated", self.allocated)]
        # unknown resources are only shown if there are any
        if not self.unknown.isEmpty():
            groups.append(("Unknown", self.unknown))

        for label, count in groups:
            table.add_row(
                Text(label, style=f"{secondary} bold"),
                *(Text(str(n), style=secondary) for n in (count.cpus, count.gpus, count.nodes)),
            )

        return table
