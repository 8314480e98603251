"""Process inventory: read the process table once and keep what occupancy needs."""

import logging
import os
from collections import Counter
from dataclasses import dataclass

from ttywho.models import ProcessRecord
from ttywho.procstat import StatParseError, parse_stat

log = logging.getLogger(__name__)

DEFAULT_PROC_ROOT = "/proc"


@dataclass(slots=True, frozen=True)
class ProcessScan:
    """Result of one pass over the process table."""

    records: tuple[ProcessRecord, ...] = ()  # processes attached to a terminal
    no_terminal: tuple[tuple[int, int], ...] = ()  # (uid, detached count), by uid
    uids: frozenset[int] = frozenset()  # owners of every readable process


def list_pids(proc_root: str = DEFAULT_PROC_ROOT) -> list[int]:
    """
    List process ids below proc_root in ascending order.

    Entries that are not positive integers are ignored. An unreadable root
    yields an empty list.
    """
    try:
        names = os.listdir(proc_root)
    except OSError as exc:
        log.warning("cannot list process root %s: %s", proc_root, exc)
        return []

    pids = [int(name) for name in names if name.isdigit() and int(name) > 0]
    pids.sort()
    return pids


def _read_raw(pid: int, proc_root: str) -> tuple[int, str, str]:
    """Read the owner uid, status text and raw command line of one process."""
    base = os.path.join(proc_root, str(pid))

    with open(os.path.join(base, "stat"), encoding="utf-8", errors="surrogateescape") as f:
        stat_text = f.read()
    with open(os.path.join(base, "cmdline"), "rb") as f:
        cmdline = f.read().decode("utf-8", errors="surrogateescape")
    uid = os.stat(base).st_uid

    return uid, stat_text, cmdline


def _build_record(pid: int, uid: int, stat_text: str, cmdline: str) -> ProcessRecord:
    fields = parse_stat(stat_text)
    return ProcessRecord(
        pid=pid,
        uid=uid,
        tty_nr=fields.tty_nr,
        tpgid=fields.tpgid,
        cmdline=cmdline,
    )


def read_process(pid: int, proc_root: str = DEFAULT_PROC_ROOT) -> ProcessRecord:
    """
    Read one process from proc_root.

    Raises:
        OSError: the process vanished or is not readable.
        StatParseError: its status record is malformed.
    """
    return _build_record(pid, *_read_raw(pid, proc_root))


def scan_processes(proc_root: str = DEFAULT_PROC_ROOT) -> ProcessScan:
    """
    Collect every readable process below proc_root.

    Processes that exit mid-scan or have an unreadable status are skipped,
    though the owner of a process with a malformed status still counts as
    seen. Detached processes are only counted per owner; the others are kept
    in discovery order (ascending pid).
    """
    records: list[ProcessRecord] = []
    no_terminal: Counter[int] = Counter()
    uids: set[int] = set()

    for pid in list_pids(proc_root):
        try:
            uid, stat_text, cmdline = _read_raw(pid, proc_root)
        except OSError as exc:
            log.debug("skipping pid %d: %s", pid, exc)
            continue

        uids.add(uid)

        try:
            record = _build_record(pid, uid, stat_text, cmdline)
        except StatParseError as exc:
            log.debug("skipping pid %d, bad status record: %s", pid, exc)
            continue

        if record.is_detached:
            no_terminal[record.uid] += 1
            continue

        records.append(record)

    return ProcessScan(
        records=tuple(records),
        no_terminal=tuple(sorted(no_terminal.items())),
        uids=frozenset(uids),
    )
