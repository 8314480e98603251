"""Terminal inventory: device nodes that can act as a controlling terminal."""

import glob
import logging
import os
import stat
from collections.abc import Callable, Iterable

from ttywho.models import TerminalDevice

log = logging.getLogger(__name__)

DEFAULT_DEV_ROOT = "/dev"
DEFAULT_TTY_PATTERNS = ("tty*", "pts/*")


def _display_name(path: str, dev_root: str) -> str:
    prefix = dev_root.rstrip("/") + "/"
    if path.startswith(prefix):
        return path[len(prefix):]
    return path


def expand_patterns(patterns: Iterable[str], dev_root: str = DEFAULT_DEV_ROOT) -> list[str]:
    """
    Expand terminal glob patterns below dev_root.

    Patterns are expanded in the order given and the matches of each pattern
    are sorted, so the resulting order is reproducible. A pattern whose
    directory does not exist contributes nothing.
    """
    paths: list[str] = []
    for pattern in patterns:
        paths.extend(sorted(glob.glob(os.path.join(dev_root, pattern))))
    return paths


def scan_terminals(
    patterns: Iterable[str] = DEFAULT_TTY_PATTERNS,
    dev_root: str = DEFAULT_DEV_ROOT,
    stat_fn: Callable[[str], os.stat_result] = os.stat,
) -> dict[int, TerminalDevice]:
    """
    Map device identifiers to the terminal device nodes matching patterns.

    Nodes that cannot be stat'ed or are not character devices are skipped.
    If two paths share a device identifier the later path wins.
    """
    terminals: dict[int, TerminalDevice] = {}

    for path in expand_patterns(patterns, dev_root):
        try:
            st = stat_fn(path)
        except OSError as exc:
            log.debug("skipping terminal %s: %s", path, exc)
            continue

        if not stat.S_ISCHR(st.st_mode):
            continue

        terminals[st.st_rdev] = TerminalDevice(
            rdev=st.st_rdev,
            name=_display_name(path, dev_root),
            path=path,
            atime=st.st_atime,
            ctime=st.st_ctime,
            mtime=st.st_mtime,
            uid=st.st_uid,
        )

    return terminals
