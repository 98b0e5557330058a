from __future__ import annotations
import logging
import threading
from typing import List, Literal, Optional

from ..config import CFG
from ..errors import TableReadError
from ..models import SockEntry
from .procfs import ProcResolver, correlate
from .socktab import parse_socktab

log = logging.getLogger(__name__)

SockKind = Literal["tcp", "udp"]

def read_socktab(path, strict_states: bool = False) -> List[SockEntry]:
    try:
        f = open(path, "r", encoding="ascii", errors="replace")
    except OSError as e:
        raise TableReadError(path, e) from e
    with f:
        try:
            return parse_socktab(f, strict_states=strict_states)
        except OSError as e:
            raise TableReadError(path, e) from e

def list_sockets(
    kind: SockKind,
    cfg: Optional[CFG] = None,
    resolver: Optional[ProcResolver] = None,
    stop: Optional[threading.Event] = None,
) -> List[SockEntry]:
    """Read the ``kind`` socket table and attribute each row to its process.

    Raises TableReadError or TableFormatError if the table cannot be used;
    process scanning itself never fails.
    """
    cfg = cfg or CFG()
    path = cfg.table_path(kind)
    tab = read_socktab(path, strict_states=cfg.strict_states)
    log.debug("%s: %d sockets in %s", kind, len(tab), path)
    if resolver is None:
        resolver = ProcResolver(cfg.proc_root, enrich=cfg.enrich)
    return correlate(tab, resolver=resolver, workers=cfg.workers, stop=stop)

def tcp_socks(cfg: Optional[CFG] = None) -> List[SockEntry]:
    return list_sockets("tcp", cfg)

def udp_socks(cfg: Optional[CFG] = None) -> List[SockEntry]:
    return list_sockets("udp", cfg)
