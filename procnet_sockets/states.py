from __future__ import annotations
from enum import Enum

from .errors import InvalidState


class SkState(Enum):
    ESTABLISHED = "ESTABLISHED"
    SYN_SENT = "SYN_SENT"
    SYN_RECV = "SYN_RECV"
    FIN_WAIT1 = "FIN_WAIT1"
    FIN_WAIT2 = "FIN_WAIT2"
    TIME_WAIT = "TIME_WAIT"
    CLOSE = "CLOSE"
    CLOSE_WAIT = "CLOSE_WAIT"
    LAST_ACK = "LAST_ACK"
    LISTEN = "LISTEN"
    CLOSING = "CLOSING"
    UNKNOWN = "UNKNOWN"

    def __str__(self) -> str:
        return self.value


# kernel codes from include/net/tcp_states.h
SK_STATES = {
    0x01: SkState.ESTABLISHED,
    0x02: SkState.SYN_SENT,
    0x03: SkState.SYN_RECV,
    0x04: SkState.FIN_WAIT1,
    0x05: SkState.FIN_WAIT2,
    0x06: SkState.TIME_WAIT,
    0x07: SkState.CLOSE,
    0x08: SkState.CLOSE_WAIT,
    0x09: SkState.LAST_ACK,
    0x0A: SkState.LISTEN,
    0x0B: SkState.CLOSING,
}


def state_from_code(code: int, strict: bool = False) -> SkState:
    st = SK_STATES.get(code)
    if st is None:
        if strict:
            raise InvalidState(code)
        return SkState.UNKNOWN
    return st
