from __future__ import annotations
from typing import Optional


class NetstatError(Exception):
    """Base class for errors raised by procnet_sockets."""


class MalformedAddress(NetstatError, ValueError):
    def __init__(self, token: str, reason: str):
        super().__init__(f"malformed address {token!r}: {reason}")
        self.token = token
        self.reason = reason


class InvalidState(NetstatError, ValueError):
    def __init__(self, code: int):
        super().__init__(f"invalid connection state code: {code:#04x}")
        self.code = code


class TableFormatError(NetstatError):
    """A socket table row is short or one of its fields does not decode.

    The original exception, if any, is chained as ``__cause__``.
    """

    def __init__(self, msg: str, lineno: Optional[int] = None, field: Optional[str] = None):
        where = []
        if lineno is not None:
            where.append(f"line {lineno}")
        if field:
            where.append(f"field {field}")
        super().__init__(f"{', '.join(where)}: {msg}" if where else msg)
        self.lineno = lineno
        self.field = field


class TableReadError(NetstatError):
    def __init__(self, path, cause: OSError):
        super().__init__(f"cannot read socket table {path}: {cause.strerror or cause}")
        self.path = path


class ProcessUnavailable(NetstatError):
    # internal: a process exited or denied access mid-scan
    def __init__(self, pid: int, cause: Optional[OSError] = None):
        super().__init__(f"pid {pid} unavailable: {cause}")
        self.pid = pid
