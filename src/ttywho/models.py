"""Data models for ttywho."""

from dataclasses import dataclass

NO_TERMINAL = 0  # tty_nr of a process without a controlling terminal
NO_FOREGROUND_GROUP = -1  # tpgid of a process whose terminal has no foreground group


@dataclass(slots=True, frozen=True)
class TerminalDevice:
    """Immutable snapshot of a terminal device node."""

    rdev: int
    name: str  # 'pts/3', 'tty1', ...
    path: str
    atime: float
    ctime: float
    mtime: float
    uid: int


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """Immutable snapshot of the fields of a process that matter for occupancy."""

    pid: int
    uid: int
    tty_nr: int
    tpgid: int
    cmdline: str  # NUL separated, as read from /proc/<pid>/cmdline

    @property
    def is_detached(self) -> bool:
        """True when the process has no controlling terminal or foreground group."""
        return self.tty_nr == NO_TERMINAL or self.tpgid == NO_FOREGROUND_GROUP

    @property
    def is_foreground_leader(self) -> bool:
        """True when the process leads the foreground group of its terminal."""
        return self.tpgid == self.pid

    @property
    def command(self) -> str:
        """
        Command line with its argument separators turned into spaces.

        Bytes that were not valid UTF-8 show as U+FFFD so the result is
        always printable; prefix matching uses the raw cmdline instead.
        """
        text = self.cmdline.encode("utf-8", "surrogateescape").decode("utf-8", "replace")
        return text.rstrip("\x00").replace("\x00", " ")


@dataclass(slots=True, frozen=True)
class OccupiedTerminal:
    """A terminal together with the foreground commands found on it."""

    terminal: TerminalDevice
    commands: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class SystemLoad:
    """Host uptime and load figures, with empty values when unavailable."""

    uptime_seconds: float = 0.0
    load_avg: tuple[str, ...] = ()
    procs: str = ""
