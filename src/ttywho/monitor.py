"""Snapshot engine for ttywho."""

import logging
import time
from dataclasses import dataclass, field

from ttywho.association import Association, associate
from ttywho.config import TtywhoConfig
from ttywho.models import SystemLoad
from ttywho.processes import scan_processes
from ttywho.system import read_system_load
from ttywho.terminals import scan_terminals

log = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Snapshot:
    """Point-in-time view of who is running what on which terminal."""

    association: Association = field(default_factory=Association)
    load: SystemLoad = field(default_factory=SystemLoad)
    user_count: int = 0
    taken_at: float = 0.0


def collect_snapshot(config: TtywhoConfig | None = None) -> Snapshot:
    """
    Take one snapshot of terminals and processes.

    Terminals and processes are read independently, then joined once. Nothing
    here raises for a vanished terminal or process.
    """
    config = config or TtywhoConfig()

    terminals = scan_terminals(config.tty_patterns, config.dev_root)
    scan = scan_processes(config.proc_root)
    load = read_system_load(config.proc_root)
    association = associate(terminals, scan, config.all_container_prefixes)

    log.debug(
        "snapshot: %d terminals, %d attached processes, %d occupied",
        len(terminals),
        len(scan.records),
        len(association.occupied),
    )

    return Snapshot(
        association=association,
        load=load,
        user_count=len(scan.uids),
        taken_at=time.time(),
    )
