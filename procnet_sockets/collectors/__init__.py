from .netstat import SockKind, list_sockets, read_socktab, tcp_socks, udp_socks
from .procfs import ProcResolver, ProcScan, ScanStatus, correlate, scan_process
from .socktab import parse_socktab
