"""Report rendering for ttywho."""

import pwd
import shutil
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TextIO

from rich.console import Console
from rich.text import Text

from ttywho.monitor import Snapshot

DAY = 24 * 60 * 60
HOUR = 60 * 60
MINUTE = 60

DETACHED_TTY = "none"
HEADER_COLUMNS = ("USER", "TTY", "LOGIN", "INPUT", "OUTPUT", "WHAT")


class LineKind(Enum):
    """Kinds of report lines."""

    SUMMARY = "summary"
    HEADER = "header"
    TERMINAL = "terminal"
    DETACHED = "detached"


@dataclass(slots=True, frozen=True)
class ReportLine:
    """One line of the report, with the uid that keys its colour."""

    kind: LineKind
    text: str
    uid: int | None = None


def format_duration(seconds: float) -> str:
    """Format a duration as a six column age such as ' 3d04h' or '   12s'."""
    diff = max(0, int(seconds))
    days, diff = divmod(diff, DAY)
    hours, diff = divmod(diff, HOUR)
    mins, secs = divmod(diff, MINUTE)

    if days > 99:
        return f"{days:5d}d"
    if days > 0:
        return f"{days:2d}d{hours:02d}h"
    if hours > 0:
        return f"{hours:2d}h{mins:02d}m"
    if mins > 0:
        return f"{mins:2d}m{secs:02d}s"
    return f"{secs:5d}s"


def pretty_time(ts: float, now: float) -> str:
    """Format the age of a timestamp relative to now."""
    return format_duration(now - ts)


def lookup_username(uid: int) -> str:
    """Resolve a uid to a login name, falling back to the number itself."""
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return str(uid)


def terminal_width(fallback: int = 80) -> int:
    """Width of the terminal on standard output, or fallback when unknown."""
    columns = shutil.get_terminal_size((fallback, 24)).columns
    return columns if columns > 0 else fallback


def clip(text: str, width: int) -> str:
    """Cut text to at most width characters."""
    return text[:width] if len(text) > width else text


def summary_line(snapshot: Snapshot) -> str:
    """Uptime, user count and load averages on one line."""
    parts = [
        f" up {format_duration(snapshot.load.uptime_seconds).strip()}",
        f"{snapshot.user_count:2d} users",
    ]
    if snapshot.load.load_avg:
        parts.append("load " + " ".join(snapshot.load.load_avg))
    if snapshot.load.procs:
        parts.append(f"procs {snapshot.load.procs}")
    return "  ".join(parts)


def header_line() -> str:
    user, tty, login, input_, output, what = HEADER_COLUMNS
    return f"{user:<8} {tty:<7} {login:>6} {input_:>6} {output:>6} {what}"


def build_lines(
    snapshot: Snapshot,
    now: float | None = None,
    username: Callable[[int], str] = lookup_username,
) -> list[ReportLine]:
    """
    Lay out the whole report as unclipped lines.

    Args:
        snapshot: Snapshot to render.
        now: Reference time for ages; defaults to when the snapshot was taken.
        username: Resolver from uid to display name.
    """
    now = snapshot.taken_at if now is None else now
    lines = [
        ReportLine(LineKind.SUMMARY, summary_line(snapshot)),
        ReportLine(LineKind.HEADER, header_line()),
    ]

    for occupied in snapshot.association.occupied:
        tty = occupied.terminal
        name = username(tty.uid)
        for command in occupied.commands:
            text = (
                f"{name[:8]:<8} {tty.name:<7} {pretty_time(tty.ctime, now)} "
                f"{pretty_time(tty.atime, now)} {pretty_time(tty.mtime, now)} {command}"
            )
            lines.append(ReportLine(LineKind.TERMINAL, text, tty.uid))

    for uid, count in snapshot.association.no_terminal:
        text = f"{username(uid)[:8]:<8} {DETACHED_TTY:<7} {count} more processes"
        lines.append(ReportLine(LineKind.DETACHED, text, uid))

    return lines


class PlainRenderer:
    """Writes report lines as plain text clipped to a width."""

    def __init__(self, out: TextIO, width: int = 80) -> None:
        self._out = out
        self._width = width

    def render(self, lines: Iterable[ReportLine]) -> None:
        for line in lines:
            self._out.write(clip(line.text, self._width) + "\n")


class ColorRenderer:
    """
    Writes report lines through a rich Console.

    Each user's terminal lines get the next colour of the palette in order of
    first appearance; the header underlines the INPUT column.
    """

    def __init__(self, console: Console, palette: Sequence[str], width: int | None = None) -> None:
        self._console = console
        self._palette = list(palette) or ["default"]
        self._width = width

    @property
    def width(self) -> int:
        return self._width if self._width is not None else self._console.width

    def styled(self, lines: Iterable[ReportLine]) -> list[Text]:
        """Clip and style report lines without printing them."""
        colors: dict[int, str] = {}
        styled: list[Text] = []

        for line in lines:
            text = Text(clip(line.text, self.width))
            if line.kind is LineKind.HEADER:
                start = text.plain.find("INPUT")
                if start != -1:
                    text.stylize("underline", start, start + len("INPUT"))
            elif line.kind is LineKind.TERMINAL and line.uid is not None:
                if line.uid not in colors:
                    colors[line.uid] = self._palette[len(colors) % len(self._palette)]
                text.stylize(colors[line.uid])
            styled.append(text)

        return styled

    def render(self, lines: Iterable[ReportLine]) -> None:
        for text in self.styled(lines):
            self._console.print(text, no_wrap=True, overflow="crop", highlight=False)
