"""Association engine: join processes against terminals."""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from ttywho.models import OccupiedTerminal, ProcessRecord, TerminalDevice
from ttywho.processes import ProcessScan

SUPERUSER_UID = 0

# Command-line prefixes of processes that host a session rather than being
# the thing running in it. Matched case-sensitively against the raw command line.
DEFAULT_CONTAINER_PREFIXES = (
    "/sbin/getty",
    "/sbin/agetty",
    "tmux",
    "screen",
    "dtach",
    "-zsh",
    "-ksh",
    "-ksh93",
    "-sh",
    "-bash",
    "/sbin/mingetty",
)


@dataclass(slots=True, frozen=True)
class Association:
    """Occupied terminals and the detached-process tally worth showing."""

    occupied: tuple[OccupiedTerminal, ...] = ()
    no_terminal: tuple[tuple[int, int], ...] = ((SUPERUSER_UID, 0),)  # (uid, count), by uid
    raw_no_terminal: tuple[tuple[int, int], ...] = ()  # unfiltered, by uid
    present_uids: frozenset[int] = frozenset()


def is_container(cmdline: str, prefixes: Iterable[str] = DEFAULT_CONTAINER_PREFIXES) -> bool:
    """Check whether a raw command line starts with any container prefix."""
    return any(cmdline.startswith(prefix) for prefix in prefixes)


def foreground_commands(
    terminals: Mapping[int, TerminalDevice],
    records: Iterable[ProcessRecord],
    container_prefixes: Sequence[str] = DEFAULT_CONTAINER_PREFIXES,
) -> dict[int, list[str]]:
    """Map device identifiers to the foreground commands found on them, in record order."""
    commands: dict[int, list[str]] = {}

    for record in records:
        if record.is_detached or is_container(record.cmdline, container_prefixes):
            continue
        if record.tty_nr in terminals and record.is_foreground_leader:
            commands.setdefault(record.tty_nr, []).append(record.command)

    return commands


def filter_tally(tally: Iterable[tuple[int, int]], present_uids: Iterable[int]) -> tuple[tuple[int, int], ...]:
    """
    Keep the superuser and the users present on some terminal.

    The superuser always gets an entry, zero if nothing was counted.
    """
    present = set(present_uids)
    counts = dict(tally)
    counts.setdefault(SUPERUSER_UID, 0)
    return tuple(
        (uid, counts[uid])
        for uid in sorted(counts)
        if uid == SUPERUSER_UID or uid in present
    )


def associate(
    terminals: Mapping[int, TerminalDevice],
    scan: ProcessScan,
    container_prefixes: Sequence[str] = DEFAULT_CONTAINER_PREFIXES,
) -> Association:
    """
    Join a process scan against a terminal inventory.

    Occupied terminals are ordered by last access, oldest first, with ties
    broken by device identifier.
    """
    commands = foreground_commands(terminals, scan.records, container_prefixes)

    occupied = sorted(
        (OccupiedTerminal(terminal=terminals[rdev], commands=tuple(cmds)) for rdev, cmds in commands.items()),
        key=lambda occ: (occ.terminal.atime, occ.terminal.rdev),
    )
    present_uids = frozenset(occ.terminal.uid for occ in occupied)

    return Association(
        occupied=tuple(occupied),
        no_terminal=filter_tally(scan.no_terminal, present_uids),
        raw_no_terminal=scan.no_terminal,
        present_uids=present_uids,
    )
