from __future__ import annotations
from dataclasses import dataclass
from ipaddress import IPv4Address
from typing import Optional

from .states import SkState

@dataclass(frozen=True)
class SockAddr:
    ip: IPv4Address
    port: int

    def __str__(self) -> str:
        return f"{self.ip}:{self.port}"

@dataclass(frozen=True)
class Proc:
    pid: int
    name: str
    user: str = ""
    cmd: str = ""

    def __str__(self) -> str:
        return f"{self.pid}/{self.name}"

@dataclass
class SockEntry:
    inode: str  # opaque join key, never compared numerically
    local: SockAddr
    remote: SockAddr
    state: SkState
    uid: int
    process: Optional[Proc] = None

    def attach(self, proc: Proc) -> bool:
        """Set the owning process unless one is already attached."""
        if self.process is not None:
            return False
        self.process = proc
        return True
