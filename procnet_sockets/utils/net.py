from __future__ import annotations
import re, struct
from ipaddress import IPv4Address

from ..errors import MalformedAddress
from ..models import SockAddr

HEX_RE = re.compile(r"[0-9A-Fa-f]+")

def parse_hex(s: str, bits: int) -> int:
    if not HEX_RE.fullmatch(s):
        raise ValueError(f"not hexadecimal: {s!r}")
    # width counts too: a zero-padded IPv6 word can still fit in 32 bits
    if len(s) > bits // 4:
        raise ValueError(f"{s!r} wider than {bits} bits")
    v = int(s, 16)
    if v >> bits:
        raise ValueError(f"{s!r} out of range for {bits} bits")
    return v

def ipv4_from_dword(dw: int) -> IPv4Address:
    # /proc/net/* prints the address as a host-order (little-endian) word
    return IPv4Address(struct.pack('<I', dw))

def ipv4_to_dword(ip: IPv4Address) -> int:
    return struct.unpack('<I', ip.packed)[0]

def parse_addr(token: str) -> SockAddr:
    """Decode a ``HEXADDR:HEXPORT`` token, e.g. ``0100007F:0050`` -> 127.0.0.1:80."""
    fields = token.split(':')
    if len(fields) < 2:
        raise MalformedAddress(token, "expected HEXADDR:HEXPORT")
    try:
        ip = ipv4_from_dword(parse_hex(fields[0], 32))
    except ValueError as e:
        raise MalformedAddress(token, f"address: {e}") from e
    try:
        port = parse_hex(fields[1], 16)
    except ValueError as e:
        raise MalformedAddress(token, f"port: {e}") from e
    return SockAddr(ip=ip, port=port)

def format_addr(addr: SockAddr) -> str:
    """Inverse of parse_addr, in the kernel's upper-case layout."""
    return f"{ipv4_to_dword(addr.ip):08X}:{addr.port:04X}"
