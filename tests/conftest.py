"""Shared fixtures: synthetic process roots and device nodes."""

import stat
from pathlib import Path
from types import SimpleNamespace

import pytest

from ttywho.models import TerminalDevice


class ProcTree:
    """Builds a fake process root on disk."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(exist_ok=True)

    def add(
        self,
        pid: int,
        *,
        tty_nr: int = 0,
        tpgid: int = -1,
        cmdline: bytes = b"",
        comm: str = "proc",
        stat_text: str | None = None,
    ) -> Path:
        """Write stat and cmdline for one process."""
        directory = self.root / str(pid)
        directory.mkdir()
        if stat_text is None:
            stat_text = f"{pid} ({comm}) S 1 {pid} {pid} {tty_nr} {tpgid} 4194560 0 0 0 0 0 0 0 0 20 0 1 0\n"
        (directory / "stat").write_text(stat_text)
        (directory / "cmdline").write_bytes(cmdline)
        return directory

    def write(self, name: str, content: str) -> None:
        (self.root / name).write_text(content)


@pytest.fixture
def proc_tree(tmp_path: Path) -> ProcTree:
    """An empty fake process root."""
    return ProcTree(tmp_path / "proc")


def char_device(rdev: int, atime: float = 0.0, ctime: float = 0.0, mtime: float = 0.0, uid: int = 1000):
    """A stat result that looks like a character device node."""
    return SimpleNamespace(
        st_mode=stat.S_IFCHR | 0o620,
        st_rdev=rdev,
        st_atime=atime,
        st_ctime=ctime,
        st_mtime=mtime,
        st_uid=uid,
    )


def terminal(rdev: int, name: str, atime: float = 0.0, uid: int = 1000) -> TerminalDevice:
    """A TerminalDevice with the given identity and access time."""
    return TerminalDevice(
        rdev=rdev,
        name=name,
        path=f"/dev/{name}",
        atime=atime,
        ctime=atime,
        mtime=atime,
        uid=uid,
    )
