# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import yaml
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from sjob_lib.core.common import get_panel_width, load_yaml_dumper
from sjob_lib.core.config import CFG
from sjob_lib.properties.states import BatchState

Dumper: type[yaml.Dumper] = load_yaml_dumper()


class AcctPresenter:
    """
    Present accounting records obtained from `sacct`.
    """

    # Name of the field whose values are colored by the job state.
    STATE_FIELD = "State"

    def __init__(self, records: list[dict[str, str]], fields: list[str]):
        """
        Initialize the presenter.

        Args:
            records (list[dict[str, str]]): Accounting records, one per job (or job step).
            fields (list[str]): Names of the fields in the order in which they should be shown.
        """
        self._records = records
        self._fields = fields

    def createAcctPanel(self, console: Console | None = None) -> Group:
        """
        Create a Rich panel containing the accounting table.

        Args:
            console (Console | None): Optional Rich Console instance.

        Returns:
            Group: Rich Group containing the panel.
        """
        console = console or Console()

        panel = Panel(
            self._createAcctTable(),
            title=Text(
                "ACCOUNTING", style=CFG.acct_presenter.title_style, justify="center"
            ),
            border_style=CFG.acct_presenter.border_style,
            padding=(1, 1),
            width=get_panel_width(console, 1, None, None),
            expand=False,
        )

        return Group(Text(""), panel, Text(""))

    def dumpYaml(self) -> None:
        """Print the accounting records as a YAML list to stdout."""
        print(
            yaml.dump(
                self._records,
                default_flow_style=False,
                sort_keys=False,
                Dumper=Dumper,
            ),
            end="",
        )

    def _createAcctTable(self) -> Table:
        table = Table(show_header=True, box=None, padding=(0, 1))

        for name in self._fields:
            table.add_column(
                Text(name, style=CFG.acct_presenter.headers_style),
                justify="center",
                no_wrap=True,
            )

        for record in self._records:
            table.add_row(
                *(self._formatValue(name, record.get(name, "")) for name in self._fields)
            )

        return table

    def _formatValue(self, name: str, value: str) -> Text:
        if name == AcctPresenter.STATE_FIELD and value:
            return Text(value, style=BatchState.fromSlurm(value).color)

        return Text(value, style=CFG.acct_presenter.main_style)
