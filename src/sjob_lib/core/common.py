# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Helpers shared across sjob.

Most of the module deals with durations. Slurm writes time limits and
elapsed times as `[D-]HH:MM:SS` (and accepts several shorter forms),
while sjob additionally lets users write them as `1d12h` or `90m`.
"""

import getpass
import re
from datetime import timedelta
from functools import lru_cache

import readchar
import yaml
from rich.console import Console
from rich.live import Live
from rich.text import Text

from .error import SJError
from .logger import get_logger

logger = get_logger(__name__)

# Values of a Slurm time limit meaning "no limit".
UNLIMITED_TIME = {"UNLIMITED", "INFINITE"}

_WDHMS = re.compile(r"\s*(?:\d+\s*[wdhms]\s*)+", re.IGNORECASE)
_WDHMS_TOKEN = re.compile(r"(\d+)\s*([wdhms])", re.IGNORECASE)
_WDHMS_UNITS = {"w": "weeks", "d": "days", "h": "hours", "m": "minutes", "s": "seconds"}

# [D-]A[:B[:C]]
_SLURM_TIME = re.compile(r"\s*(?:(\d+)-)?(\d+)(?::([0-5]?\d))?(?::([0-5]?\d))?\s*")


@lru_cache(maxsize=1)
def load_yaml_dumper() -> type[yaml.Dumper]:
    """Return the libyaml-based dumper if PyYAML was built with it, the pure Python one otherwise."""
    try:
        from yaml import CDumper as Dumper  # type: ignore[attr-defined]
    except ImportError:
        from yaml import Dumper

    logger.debug(f"Using YAML dumper '{Dumper.__name__}'.")
    return Dumper


@lru_cache(maxsize=1)
def load_yaml_loader() -> type[yaml.SafeLoader]:
    """Return the libyaml-based safe loader if available, the pure Python one otherwise."""
    try:
        from yaml import CSafeLoader as SafeLoader  # type: ignore[attr-defined]
    except ImportError:
        from yaml import SafeLoader

    logger.debug(f"Using YAML loader '{SafeLoader.__name__}'.")
    return SafeLoader


def yes_or_no_prompt(prompt: str) -> bool:
    """
    Ask a yes/no question and wait for a single key press.

    Only 'y' (or 'Y') confirms. Any other key is a 'no'. The answer is
    highlighted in the prompt once the key is pressed.

    Args:
        prompt (str): The question to ask.

    Returns:
        bool: True if the user confirmed.
    """
    question = Text("PROMPT", style="magenta") + Text(f"   {prompt} ", style="default")

    def options(answer: bool | None) -> Text:
        yes = Text("y", style="bold green" if answer is True else "bold default")
        no = Text("N", style="bold red" if answer is False else "bold default")
        bracket = "bold default"
        return Text("[", style=bracket) + yes + Text("/", style=bracket) + no + Text("]", style=bracket)

    with Live(question + options(None), refresh_per_second=1) as live:
        confirmed = readchar.readkey().lower() == "y"
        live.update(question + options(confirmed))

    return confirmed


def _split_seconds(td: timedelta) -> tuple[int, int, int, int]:
    """Split a duration into days, hours, minutes and seconds. Negative durations are zero."""
    total = max(int(td.total_seconds()), 0)
    days, total = divmod(total, 24 * 3600)
    hours, total = divmod(total, 3600)
    minutes, seconds = divmod(total, 60)
    return days, hours, minutes, seconds


def format_duration_wdhhmmss(td: timedelta) -> str:
    """
    Format a duration for humans as `[Xw ][Yd ]HH:MM:SS`.

    Examples:
        0:00:45          -> "00:00:45"
        1 day, 2:03:04   -> "1d 02:03:04"
        10 days, 5:06:07 -> "1w 3d 05:06:07"
    """
    days, hours, minutes, seconds = _split_seconds(td)
    weeks, days = divmod(days, 7)

    prefix = "".join(f"{n}{unit} " for n, unit in ((weeks, "w"), (days, "d")) if n)
    return f"{prefix}{hours:02}:{minutes:02}:{seconds:02}"


def duration_to_slurm_time(td: timedelta) -> str:
    """
    Format a duration as a Slurm time string, e.g., "1-12:00:00" or "02:30:00".
    """
    days, hours, minutes, seconds = _split_seconds(td)

    hhmmss = f"{hours:02}:{minutes:02}:{seconds:02}"
    return f"{days}-{hhmmss}" if days else hhmmss


def is_wdhms(timestr: str) -> bool:
    """Return True if the string looks like a wdhms duration (e.g., '12h', '1d 6h')."""
    return _WDHMS.fullmatch(timestr) is not None


def wdhms_to_duration(timestr: str) -> timedelta:
    """
    Convert a wdhms duration into a timedelta.

    The string is a sequence of integers, each followed by one of the units
    w (weeks), d (days), h (hours), m (minutes) or s (seconds), with optional
    spaces in between. Units are case-insensitive and may repeat.

    Examples:
        "1w2d3h4m5s" -> 9 days, 3:04:05
        "1d 6h"      -> 1 day, 6:00:00
        "90m"        -> 1:30:00

    Raises:
        SJError: If the string is not a wdhms duration.
    """
    if not is_wdhms(timestr):
        raise SJError(f"Invalid time string '{timestr}'.")

    totals = dict.fromkeys(_WDHMS_UNITS.values(), 0)
    for value, unit in _WDHMS_TOKEN.findall(timestr):
        totals[_WDHMS_UNITS[unit.lower()]] += int(value)

    return timedelta(**totals)


def slurm_time_to_duration(timestr: str) -> timedelta:
    """
    Convert a Slurm time string into a timedelta.

    Slurm interprets the parts of the string differently depending on
    whether a day count is present:

        "30"          -> 30 minutes
        "10:30"       -> 10 minutes, 30 seconds
        "100:00:00"   -> 100 hours
        "2-12"        -> 2 days, 12 hours
        "2-12:34"     -> 2 days, 12 hours, 34 minutes
        "2-12:34:56"  -> 2 days, 12 hours, 34 minutes, 56 seconds

    Args:
        timestr (str): A time in any of the formats above.

    Returns:
        timedelta: The corresponding duration.

    Raises:
        SJError: If the string is not a Slurm time.
    """
    if not (match := _SLURM_TIME.fullmatch(timestr)):
        raise SJError(f"Invalid Slurm time string '{timestr}'.")

    days, *parts = match.groups()
    values = [int(p) for p in parts if p is not None]

    if days is not None:
        # D-HH[:MM[:SS]]
        units = ("hours", "minutes", "seconds")
        return timedelta(days=int(days), **dict(zip(units, values)))

    # MM, MM:SS, HH:MM:SS
    units = ("minutes", "seconds") if len(values) < 3 else ("hours", "minutes", "seconds")
    return timedelta(**dict(zip(units, values)))


def normalize_time_limit(timestr: str) -> str:
    """
    Convert a time limit written in wdhms or in any Slurm format into `[D-]HH:MM:SS`.

    "UNLIMITED" and "INFINITE" (in any case) give "UNLIMITED".

    Raises:
        SJError: If the time limit cannot be parsed.
    """
    if timestr.strip().upper() in UNLIMITED_TIME:
        return "UNLIMITED"

    duration = (
        wdhms_to_duration(timestr) if is_wdhms(timestr) else slurm_time_to_duration(timestr)
    )
    return duration_to_slurm_time(duration)


def split_list(string: str | None) -> list[str]:
    """Split a string of items separated by commas and/or whitespace, dropping empty items."""
    if not string:
        return []

    return [item for item in re.split(r"[,\s]+", string) if item]


def to_snake_case(s: str) -> str:
    """
    Convert a PascalCase or kebab-case key to snake_case,
    e.g., 'CpusPerTask' or 'cpus-per-task' to 'cpus_per_task'.
    """
    s = s.replace("-", "_")
    return re.sub(r"(?<!^)(?<!_)(?=[A-Z])", "_", s).lower()


def get_current_user() -> str:
    return getpass.getuser()


def get_panel_width(
    console: Console, factor: int, min_width: int | None, max_width: int | None
) -> int:
    """
    Width of a panel taking `1/factor` of the terminal, clamped to the optional bounds.
    """
    width = console.size.width // factor
    if min_width is not None:
        width = max(width, min_width)
    if max_width is not None:
        width = min(width, max_width)

    return width
