from .collectors import list_sockets, tcp_socks, udp_socks
from .config import CFG
from .errors import (InvalidState, MalformedAddress, NetstatError, ProcessUnavailable,
                     TableFormatError, TableReadError)
from .models import Proc, SockAddr, SockEntry
from .states import SkState

__version__ = "0.1.0"
