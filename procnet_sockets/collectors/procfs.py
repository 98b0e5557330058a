"""
Attribute socket table rows to processes by walking /proc/<pid>/fd.

Each descriptor of a socket is a symlink whose target reads ``socket:[<inode>]``,
with the same inode the kernel prints in /proc/net/{tcp,udp}. Processes come and
go while we walk the tree, so every per-process failure is absorbed here and the
affected sockets are simply left without an owner.
"""
from __future__ import annotations
import logging
import os
import re
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from ..errors import ProcessUnavailable
from ..models import Proc, SockEntry
from .enrich import enrich_proc_info

log = logging.getLogger(__name__)

SOCKET_LINK_RE = re.compile(r"socket:\[([^\]]+)\]")
PID_RE = re.compile(r"[0-9]+")


class ScanStatus(Enum):
    UNREADABLE = "unreadable"            # fd/ could not be listed
    NO_MATCH = "no_match"                # contributed nothing
    MATCHED = "matched"
    MATCHED_UNNAMED = "matched_unnamed"  # matched, but stat was unreadable


@dataclass
class ProcScan:
    pid: int
    status: ScanStatus
    proc: Optional[Proc] = None
    inodes: List[str] = field(default_factory=list)


def parse_proc_name(line: str) -> str:
    # comm may itself contain spaces and parentheses: "123 (my)app) S ..."
    i = line.find('(')
    j = line.rfind(')')
    if i < 0 or j <= i:
        return ""
    return line[i + 1:j]


def read_proc_name(pid_dir: Path) -> Optional[str]:
    """Read the command name from ``pid_dir/stat``; None if it cannot be read."""
    try:
        with open(pid_dir / "stat", "r", encoding="utf-8", errors="replace") as f:
            line = f.readline()
    except OSError as e:
        log.debug("cannot read %s/stat: %s", pid_dir, e)
        return None
    return parse_proc_name(line)


class ProcResolver:
    """Per-pass pid -> Proc map. stat is read at most once per pid."""

    def __init__(self, proc_root: Path | str = "/proc", enrich: bool = False):
        self.proc_root = Path(proc_root)
        self.enrich = enrich
        self.reads = 0
        self._procs: Dict[int, Tuple[Proc, bool]] = {}
        self._lock = threading.Lock()  # guards _pid_locks and reads
        self._pid_locks: Dict[int, threading.Lock] = {}

    def resolve(self, pid: int) -> Tuple[Proc, bool]:
        """Return (proc, named); named is False when stat could not be read."""
        hit = self._procs.get(pid)
        if hit is not None:
            return hit
        with self._lock:
            pid_lock = self._pid_locks.setdefault(pid, threading.Lock())
        # only callers of the same pid wait on each other
        with pid_lock:
            hit = self._procs.get(pid)
            if hit is not None:
                return hit
            with self._lock:
                self.reads += 1
            name = read_proc_name(self.proc_root / str(pid))
            proc = Proc(pid=pid, name=name or "")
            if self.enrich:
                proc = enrich_proc_info(proc)
            hit = self._procs[pid] = (proc, name is not None)
            return hit

    def __contains__(self, pid: int) -> bool:
        return pid in self._procs


def iter_pids(proc_root: Path | str) -> List[int]:
    pids: List[int] = []
    with os.scandir(proc_root) as it:
        for e in it:
            if not PID_RE.fullmatch(e.name):
                continue
            pid = int(e.name)
            # "007" is not /proc/7; scan_process builds the path from the pid
            if pid <= 0 or e.name != str(pid):
                continue
            try:
                if not e.is_dir():
                    continue
            except OSError:
                continue
            pids.append(pid)
    pids.sort()
    return pids


def list_fd_links(pid_dir: Path) -> Iterator[str]:
    fd_dir = pid_dir / "fd"
    try:
        names = os.listdir(fd_dir)
    except OSError as e:
        raise ProcessUnavailable(int(pid_dir.name), e) from e
    for name in names:
        try:
            yield os.readlink(fd_dir / name)
        except OSError:
            # descriptor closed while we were looking
            continue


def socket_inode(link: str) -> Optional[str]:
    m = SOCKET_LINK_RE.fullmatch(link)
    return m.group(1) if m else None


def scan_process(pid: int, wanted: Dict[str, List[int]], resolver: ProcResolver) -> ProcScan:
    """Collect the inodes in ``wanted`` that pid holds open."""
    pid_dir = resolver.proc_root / str(pid)
    inodes: List[str] = []
    try:
        for link in list_fd_links(pid_dir):
            ino = socket_inode(link)
            if ino is not None and ino in wanted and ino not in inodes:
                inodes.append(ino)
    except ProcessUnavailable as e:
        log.debug("skipping %s", e)
        return ProcScan(pid=pid, status=ScanStatus.UNREADABLE)
    if not inodes:
        return ProcScan(pid=pid, status=ScanStatus.NO_MATCH)
    proc, named = resolver.resolve(pid)
    status = ScanStatus.MATCHED if named else ScanStatus.MATCHED_UNNAMED
    return ProcScan(pid=pid, status=status, proc=proc, inodes=inodes)


def _index_inodes(entries: Sequence[SockEntry]) -> Dict[str, List[int]]:
    idx: Dict[str, List[int]] = {}
    for i, e in enumerate(entries):
        idx.setdefault(e.inode, []).append(i)
    return idx


def _apply(scan: ProcScan, entries: Sequence[SockEntry], wanted: Dict[str, List[int]]) -> int:
    n = 0
    if scan.proc is None:
        return n
    for ino in scan.inodes:
        for i in wanted[ino]:
            if entries[i].attach(scan.proc):
                n += 1
    return n


def correlate(
    entries: List[SockEntry],
    proc_root: Path | str = "/proc",
    resolver: Optional[ProcResolver] = None,
    workers: int = 1,
    stop: Optional[threading.Event] = None,
) -> List[SockEntry]:
    """Attach the owning Proc to every entry whose inode some process holds open.

    Entries are updated in place and the same list is returned, unchanged in
    length and order. Sockets nobody claims keep ``process=None``. When several
    processes share an inode the lowest pid wins.

    With ``workers > 1`` processes are scanned on a thread pool; results are
    still applied on this thread in pid order. Setting ``stop`` ends the walk
    early and keeps whatever was attached so far.
    """
    if resolver is None:
        resolver = ProcResolver(proc_root)
    wanted = _index_inodes(entries)
    if not wanted:
        return entries

    try:
        pids = iter_pids(resolver.proc_root)
    except OSError as e:
        log.warning("cannot list %s: %s", resolver.proc_root, e)
        return entries

    stats = {s: 0 for s in ScanStatus}
    attached = 0

    def stopped() -> bool:
        return stop is not None and stop.is_set()

    if workers <= 1:
        for pid in pids:
            if stopped():
                break
            scan = scan_process(pid, wanted, resolver)
            stats[scan.status] += 1
            attached += _apply(scan, entries, wanted)
    else:
        def job(pid: int) -> Optional[ProcScan]:
            if stopped():
                return None
            return scan_process(pid, wanted, resolver)

        with ThreadPoolExecutor(max_workers=workers) as ex:
            for scan in ex.map(job, pids):
                if scan is None:
                    continue
                stats[scan.status] += 1
                attached += _apply(scan, entries, wanted)

    if stopped():
        log.info("process scan cancelled; keeping partial results")
    log.info("attributed %d/%d sockets (%s)", attached, len(entries),
             ", ".join(f"{k.value}={v}" for k, v in stats.items()))
    return entries
