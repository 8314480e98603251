"""Host uptime and load averages."""

import logging
import os
import time

import psutil

from ttywho.models import SystemLoad
from ttywho.processes import DEFAULT_PROC_ROOT

log = logging.getLogger(__name__)


def read_uptime(proc_root: str = DEFAULT_PROC_ROOT) -> float:
    """
    Read seconds since boot from the first field of the uptime record.

    Raises:
        OSError: the record is missing.
        ValueError: the record is empty or not a number.
    """
    with open(os.path.join(proc_root, "uptime"), encoding="ascii") as f:
        fields = f.read().split()
    if not fields:
        raise ValueError("empty uptime record")
    return float(fields[0])


def read_loadavg(proc_root: str = DEFAULT_PROC_ROOT) -> tuple[tuple[str, str, str], str]:
    """
    Read the 1, 5 and 15 minute load averages and the running/total field.

    Raises:
        OSError: the record is missing.
        ValueError: the record has fewer than three fields.
    """
    with open(os.path.join(proc_root, "loadavg"), encoding="ascii") as f:
        fields = f.read().split()
    if len(fields) < 3:
        raise ValueError(f"load record has {len(fields)} fields")
    procs = fields[3] if len(fields) > 3 else ""
    return (fields[0], fields[1], fields[2]), procs


def _psutil_uptime() -> float:
    return max(0.0, time.time() - psutil.boot_time())


def _psutil_loadavg() -> tuple[str, str, str]:
    one, five, fifteen = psutil.getloadavg()
    return f"{one:.2f}", f"{five:.2f}", f"{fifteen:.2f}"


def read_system_load(proc_root: str = DEFAULT_PROC_ROOT) -> SystemLoad:
    """
    Collect uptime and load figures, never failing.

    On the live process root a missing record falls back to psutil; anywhere
    else it falls back to zero uptime and empty load figures.
    """
    live = os.path.normpath(proc_root) == DEFAULT_PROC_ROOT

    try:
        uptime = read_uptime(proc_root)
    except (OSError, ValueError) as exc:
        log.debug("uptime unavailable from %s: %s", proc_root, exc)
        uptime = 0.0
        if live:
            try:
                uptime = _psutil_uptime()
            except (OSError, RuntimeError, psutil.Error) as err:
                log.debug("uptime unavailable from psutil: %s", err)

    load_avg: tuple[str, ...] = ()
    procs = ""
    try:
        load_avg, procs = read_loadavg(proc_root)
    except (OSError, ValueError) as exc:
        log.debug("load averages unavailable from %s: %s", proc_root, exc)
        if live:
            try:
                load_avg = _psutil_loadavg()
            except (OSError, RuntimeError, psutil.Error) as err:
                log.debug("load averages unavailable from psutil: %s", err)

    return SystemLoad(uptime_seconds=uptime, load_avg=load_avg, procs=procs)
