"""Tests for the association engine."""

import pytest
from conftest import terminal

from ttywho.association import (
    DEFAULT_CONTAINER_PREFIXES,
    Association,
    associate,
    filter_tally,
    foreground_commands,
    is_container,
)
from ttywho.models import ProcessRecord
from ttywho.processes import ProcessScan


def proc(pid, tty_nr, tpgid, cmdline, uid=1000):
    return ProcessRecord(pid=pid, uid=uid, tty_nr=tty_nr, tpgid=tpgid, cmdline=cmdline)


class TestIsContainer:
    """Tests for container prefix matching."""

    @pytest.mark.parametrize("prefix", DEFAULT_CONTAINER_PREFIXES)
    def test_exact_prefix(self, prefix):
        assert is_container(prefix)

    @pytest.mark.parametrize(
        "cmdline",
        [
            "-bash\x00",
            "tmux\x00new-session\x00-s\x00work",
            "screen\x00-r",
            "/sbin/agetty\x00-o\x00-p -- \\u\x00--noclear\x00tty1\x00linux",
            "-ksh93",
            "tmuxinator",
        ],
    )
    def test_prefix_match(self, cmdline):
        assert is_container(cmdline)

    @pytest.mark.parametrize(
        "cmdline",
        ["vim\x00file.txt", "bash\x00", "/bin/bash\x00-l", "-fish", "TMUX", " tmux", ""],
    )
    def test_not_container(self, cmdline):
        assert not is_container(cmdline)

    def test_custom_prefixes(self):
        assert is_container("-fish\x00", ["-fish"])
        assert not is_container("-bash\x00", ["-fish"])


class TestForegroundCommands:
    """Tests for foreground occupancy."""

    def test_leader_attached_once(self):
        terminals = {5001: terminal(5001, "pts/3")}
        records = [proc(100, 5001, 100, "vim\x00file.txt")]

        assert foreground_commands(terminals, records) == {5001: ["vim file.txt"]}

    def test_non_leader_ignored(self):
        terminals = {5001: terminal(5001, "pts/3")}
        records = [proc(100, 5001, 100, "make\x00"), proc(101, 5001, 100, "cc\x00")]

        assert foreground_commands(terminals, records) == {5001: ["make"]}

    def test_container_leader_filtered(self):
        terminals = {5001: terminal(5001, "pts/3")}
        records = [proc(100, 5001, 100, "-bash\x00"), proc(110, 5002, 110, "tmux\x00attach")]

        assert foreground_commands(terminals, records) == {}

    def test_unknown_terminal_ignored(self):
        terminals = {5001: terminal(5001, "pts/3")}
        records = [proc(100, 9999, 100, "vim\x00")]

        assert foreground_commands(terminals, records) == {}

    def test_detached_ignored(self):
        terminals = {0: terminal(0, "console")}
        records = [proc(100, 0, 100, "vim\x00"), proc(101, 5001, -1, "top\x00")]

        assert foreground_commands(terminals, records) == {}

    def test_discovery_order_kept(self):
        terminals = {5001: terminal(5001, "pts/3")}
        records = [proc(300, 5001, 300, "second\x00"), proc(100, 5001, 100, "first\x00")]

        assert foreground_commands(terminals, records) == {5001: ["second", "first"]}


def test_filter_tally_keeps_superuser_and_present():
    tally = ((0, 12), (999, 40), (1000, 3))

    assert filter_tally(tally, {1000}) == ((0, 12), (1000, 3))


def test_filter_tally_superuser_always_present():
    assert filter_tally((), set()) == ((0, 0),)
    assert filter_tally(((999, 4),), set()) == ((0, 0),)


class TestAssociate:
    """Tests for the full join."""

    def test_example_session(self):
        """A vim on pts/3 is reported and its login shell is not."""
        terminals = {5001: terminal(5001, "pts/3", atime=100.0)}
        scan = ProcessScan(
            records=(proc(100, 5001, 100, "vim\x00file.txt"), proc(101, 5001, 100, "-bash\x00")),
            no_terminal=(),
            uids=frozenset({1000}),
        )

        result = associate(terminals, scan)

        assert len(result.occupied) == 1
        assert result.occupied[0].terminal.name == "pts/3"
        assert result.occupied[0].commands == ("vim file.txt",)
        assert result.present_uids == frozenset({1000})
        assert result.no_terminal == ((0, 0),)

    def test_superuser_tally_rendered(self):
        scan = ProcessScan(no_terminal=((0, 1),), uids=frozenset({0}))

        result = associate({}, scan)

        assert result.occupied == ()
        assert result.no_terminal == ((0, 1),)

    def test_silent_user_tallied_but_hidden(self):
        scan = ProcessScan(no_terminal=((999, 1),), uids=frozenset({999}))

        result = associate({}, scan)

        assert result.raw_no_terminal == ((999, 1),)
        assert result.no_terminal == ((0, 0),)

    def test_present_user_tally_shown(self):
        terminals = {5001: terminal(5001, "pts/3", uid=1000)}
        scan = ProcessScan(
            records=(proc(100, 5001, 100, "vim\x00"),),
            no_terminal=((999, 2), (1000, 7)),
        )

        result = associate(terminals, scan)

        assert result.no_terminal == ((0, 0), (1000, 7))

    def test_ordering_by_access_time_then_device(self):
        terminals = {
            7: terminal(7, "pts/7", atime=50.0),
            3: terminal(3, "pts/3", atime=200.0),
            9: terminal(9, "pts/9", atime=50.0),
            1: terminal(1, "tty1", atime=10.0),
        }
        records = tuple(proc(100 + rdev, rdev, 100 + rdev, f"cmd{rdev}") for rdev in (3, 9, 1, 7))

        result = associate(terminals, ProcessScan(records=records))

        assert [occ.terminal.name for occ in result.occupied] == ["tty1", "pts/7", "pts/9", "pts/3"]
        atimes = [occ.terminal.atime for occ in result.occupied]
        assert atimes == sorted(atimes)

    def test_idle_terminals_not_listed(self):
        terminals = {5001: terminal(5001, "pts/3"), 5002: terminal(5002, "pts/4")}
        scan = ProcessScan(records=(proc(100, 5002, 100, "htop\x00"),))

        result = associate(terminals, scan)

        assert [occ.terminal.name for occ in result.occupied] == ["pts/4"]

    def test_custom_container_prefixes(self):
        terminals = {5001: terminal(5001, "pts/3")}
        scan = ProcessScan(records=(proc(100, 5001, 100, "-fish\x00"),))

        default = associate(terminals, scan)
        extended = associate(terminals, scan, DEFAULT_CONTAINER_PREFIXES + ("-fish",))

        assert len(default.occupied) == 1
        assert extended.occupied == ()

    def test_idempotent(self):
        terminals = {
            5001: terminal(5001, "pts/3", atime=5.0),
            5002: terminal(5002, "pts/4", atime=5.0, uid=1001),
        }
        scan = ProcessScan(
            records=(proc(100, 5001, 100, "vim\x00"), proc(200, 5002, 200, "top\x00", uid=1001)),
            no_terminal=((0, 3), (50, 9), (1001, 2)),
            uids=frozenset({0, 50, 1000, 1001}),
        )

        assert associate(terminals, scan) == associate(terminals, scan)


def test_empty_association_defaults():
    assert Association().no_terminal == ((0, 0),)


def test_results_are_hashable():
    """Test scans and associations are immutable all the way down."""
    terminals = {5001: terminal(5001, "pts/3")}
    scan = ProcessScan(
        records=(proc(100, 5001, 100, "vim\x00"),),
        no_terminal=((0, 2), (1000, 1)),
        uids=frozenset({0, 1000}),
    )

    result = associate(terminals, scan)

    assert hash(scan) == hash(ProcessScan(records=scan.records, no_terminal=scan.no_terminal, uids=scan.uids))
    assert hash(result) == hash(associate(terminals, scan))
    assert result.raw_no_terminal == ((0, 2), (1000, 1))
