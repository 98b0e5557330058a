from __future__ import annotations
import logging
import re
from typing import Iterable, List

from ..errors import NetstatError, TableFormatError
from ..models import SockEntry
from ..states import state_from_code
from ..utils.net import parse_addr, parse_hex

log = logging.getLogger(__name__)

MIN_FIELDS = 12
UID_RE = re.compile(r"\d+")

# sl  local_address rem_address   st tx_queue:rx_queue tr:tm->when retrnsmt   uid  timeout inode
#  0: 0100007F:0CEA 00000000:0000 0A 00000000:00000000 00:00000000 00000000  1000        0 28990 ...
F_LOCAL, F_REMOTE, F_STATE, F_UID, F_INODE = 1, 2, 3, 7, 9


def _parse_uid(s: str) -> int:
    if not UID_RE.fullmatch(s):
        raise ValueError(f"not a decimal uid: {s!r}")
    v = int(s)
    if v > 0xFFFFFFFF:
        raise ValueError(f"uid {s} out of range for 32 bits")
    return v


def parse_line(fields: List[str], lineno: int, strict_states: bool = False) -> SockEntry:
    def decode(name: str, fn, raw: str):
        try:
            return fn(raw)
        except (ValueError, NetstatError) as e:
            raise TableFormatError(str(e), lineno=lineno, field=name) from e

    local = decode("local_address", parse_addr, fields[F_LOCAL])
    remote = decode("rem_address", parse_addr, fields[F_REMOTE])
    state = decode("st", lambda s: state_from_code(parse_hex(s, 8), strict=strict_states), fields[F_STATE])
    uid = decode("uid", _parse_uid, fields[F_UID])
    return SockEntry(inode=fields[F_INODE], local=local, remote=remote, state=state, uid=uid)


def parse_socktab(stream: Iterable[str], strict_states: bool = False) -> List[SockEntry]:
    """Parse a /proc/net/{tcp,udp} snapshot into SockEntry records.

    The first line is the column header and is dropped without looking at it.
    Anything from a ``#`` onwards is a comment. Lines left with no fields are
    skipped; lines with fewer than 12 fields, or with a field that does not
    decode, abort the whole parse with TableFormatError.
    """
    tab: List[SockEntry] = []
    it = iter(stream)
    next(it, None)  # title

    for lineno, line in enumerate(it, start=2):
        i = line.find('#')
        if i >= 0:
            line = line[:i]
        fields = line.split()
        if not fields:
            continue
        if len(fields) < MIN_FIELDS:
            raise TableFormatError(f"not enough fields: {len(fields)}, {fields}", lineno=lineno)
        tab.append(parse_line(fields, lineno, strict_states))

    log.debug("parsed %d socket table rows", len(tab))
    return tab
