from __future__ import annotations
import argparse, logging, sys
from typing import List

import orjson

from .config import init_cfg_from_args
from .collectors import list_sockets
from .errors import NetstatError
from .models import SockEntry

def parse_args(argv=None):
    ap = argparse.ArgumentParser(description='List TCP/UDP sockets with their owning process')
    ap.add_argument('--udp', action='store_true', help='read the UDP table instead of TCP')
    ap.add_argument('--config', type=str, default=None, help='YAML or JSON config file')
    ap.add_argument('--proc-root', type=str, default=None, help='procfs mount point (default /proc)')
    ap.add_argument('--workers', type=int, default=None, help='threads used to scan processes')
    ap.add_argument('--enrich', action='store_true', help='add user and command line via psutil')
    ap.add_argument('--strict-states', action='store_true', help='fail on unknown connection state codes')
    ap.add_argument('--json', action='store_true', help='print JSON instead of a table')
    ap.add_argument('-v', '--verbose', action='store_true')
    return ap.parse_args(argv)

def entry_to_dict(e: SockEntry) -> dict:
    p = e.process
    return {
        'inode': e.inode,
        'local': str(e.local),
        'remote': str(e.remote),
        'state': e.state.value,
        'uid': e.uid,
        'pid': p.pid if p else None,
        'name': p.name if p else None,
        'user': p.user if p else None,
        'cmd': p.cmd if p else None,
    }

def render_text(kind: str, tab: List[SockEntry]) -> str:
    lines = []
    for e in tab:
        owner = str(e.process) if e.process else "-"
        lines.append(f"{kind:<4} {str(e.local):<22} {str(e.remote):<22} {e.state.value:<12} {e.uid:>6} {owner}")
    return "\n".join(lines)

def render_json(tab: List[SockEntry]) -> str:
    return orjson.dumps([entry_to_dict(e) for e in tab]).decode()

def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    kind = 'udp' if args.udp else 'tcp'
    try:
        cfg = init_cfg_from_args(args)
        tab = list_sockets(kind, cfg)
    except (NetstatError, ValueError) as e:
        print(f"[error] {e}", file=sys.stderr)
        return 1
    out = render_json(tab) if args.json else render_text(kind, tab)
    if out:
        print(out)
    return 0

if __name__ == '__main__':
    sys.exit(main())
