from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Optional

import pytest

HEADER = "  sl  local_address rem_address   st tx_queue rx_queue tr tm->when retrnsmt   uid  timeout inode\n"


def sock_row(
    sl: int,
    local: str = "0100007F:0050",
    remote: str = "00000000:0000",
    st: str = "0A",
    uid: int | str = 1000,
    inode: str = "100",
) -> str:
    return (
        f"{sl:4}: {local} {remote} {st} 00000000:00000000 00:00000000 00000000 "
        f"{uid:>5}        0 {inode} 1 0000000000000000 100 0 0 10 0\n"
    )


class FakeProc:
    """A throwaway procfs tree: <root>/<pid>/{fd/,stat} and <root>/net/{tcp,udp}."""

    def __init__(self, root: Path) -> None:
        self.root = root
        (root / "net").mkdir(parents=True)
        (root / "self").mkdir()
        (root / "sys").mkdir()

    def add_process(
        self,
        pid: int,
        name: Optional[str] = None,
        links: Iterable[str] = (),
        stat_line: Optional[str] = None,
        fd_dir: bool = True,
    ) -> Path:
        d = self.root / str(pid)
        d.mkdir()
        if fd_dir:
            fd = d / "fd"
            fd.mkdir()
            for n, target in enumerate(links, start=3):
                os.symlink(target, fd / str(n))
        if stat_line is None and name is not None:
            stat_line = f"{pid} ({name}) S 1 {pid} {pid} 0 -1 4194560 100 0 0 0\n"
        if stat_line is not None:
            (d / "stat").write_text(stat_line)
        return d

    def write_table(self, kind: str, rows: Iterable[str]) -> Path:
        p = self.root / "net" / kind
        p.write_text(HEADER + "".join(rows))
        return p


@pytest.fixture
def fake_proc(tmp_path: Path) -> FakeProc:
    return FakeProc(tmp_path / "proc")


@pytest.fixture
def row():
    return sock_row
