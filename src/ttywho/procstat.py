"""Parser for the per-process status record (``/proc/<pid>/stat``).

The record starts with ``pid (comm)``. The process name may contain spaces,
parentheses and even newlines, so the name ends at the *last* ``)`` of the
record. The fields after it are whitespace separated and read by position:

====  ===========  ==========================================
idx   field        meaning
====  ===========  ==========================================
0     state        one-letter run state (R, S, D, Z, ...)
1     ppid         parent process id
2     pgrp         process group id
3     session      session id
4     tty_nr       controlling terminal device, 0 for none
5     tpgid        foreground group of that terminal, -1 for none
====  ===========  ==========================================
"""

from dataclasses import dataclass

STATE = 0
PPID = 1
PGRP = 2
SESSION = 3
TTY_NR = 4
TPGID = 5


class StatParseError(ValueError):
    """Raised for a status record that does not have the expected layout."""


@dataclass(slots=True, frozen=True)
class StatFields:
    """The positional fields of a status record up to the foreground group."""

    pid: int
    comm: str
    state: str
    ppid: int
    pgrp: int
    session: int
    tty_nr: int
    tpgid: int


def parse_stat(text: str) -> StatFields:
    """
    Parse a status record.

    Raises:
        StatParseError: when the name is not parenthesised, fewer than six
            fields follow it, or a numeric field is not an integer.
    """
    open_paren = text.find("(")
    close_paren = text.rfind(")")
    if open_paren == -1 or close_paren < open_paren:
        raise StatParseError("status record has no parenthesised name")

    fields = text[close_paren + 1:].split()
    if len(fields) <= TPGID:
        raise StatParseError(f"status record has {len(fields)} fields after the name")

    try:
        return StatFields(
            pid=int(text[:open_paren]),
            comm=text[open_paren + 1:close_paren],
            state=fields[STATE],
            ppid=int(fields[PPID]),
            pgrp=int(fields[PGRP]),
            session=int(fields[SESSION]),
            tty_nr=int(fields[TTY_NR]),
            tpgid=int(fields[TPGID]),
        )
    except ValueError as exc:
        raise StatParseError(str(exc)) from exc
