from __future__ import annotations
import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .utils.path import to_abs_path

log = logging.getLogger(__name__)

SOCK_KINDS = ("tcp", "udp")

@dataclass
class CFG:
    proc_root: Path = Path("/proc")
    tcp_path: Path = Path("/proc/net/tcp")
    udp_path: Path = Path("/proc/net/udp")
    workers: int = 1
    enrich: bool = False
    strict_states: bool = False

    def table_path(self, kind: str) -> Path:
        if kind not in SOCK_KINDS:
            raise ValueError(f"unknown socket kind {kind!r}, expected one of {SOCK_KINDS}")
        return self.tcp_path if kind == "tcp" else self.udp_path

PATH_KEYS = ("proc_root", "tcp_path", "udp_path")
BOOL_KEYS = ("enrich", "strict_states")
TRUE_STRS = {"true", "yes", "on", "1"}
FALSE_STRS = {"false", "no", "off", "0"}

def _to_bool(key: str, v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        s = v.strip().lower()
        if s in TRUE_STRS: return True
        if s in FALSE_STRS: return False
    raise ValueError(f"config key {key!r} expects a boolean, got {v!r}")

def _to_workers(v: Any) -> int:
    if isinstance(v, bool):
        raise ValueError(f"config key 'workers' expects an integer, got {v!r}")
    try:
        return max(1, int(v))
    except (TypeError, ValueError) as e:
        raise ValueError(f"config key 'workers' expects an integer, got {v!r}") from e

def cfg_from_dict(data: Dict[str, Any]) -> CFG:
    known = {f.name for f in fields(CFG)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"unknown config keys: {', '.join(sorted(unknown))}")
    cfg = CFG()
    for k, v in data.items():
        if k in PATH_KEYS:
            if not isinstance(v, (str, os.PathLike)):
                raise ValueError(f"config key {k!r} expects a path, got {v!r}")
            v = to_abs_path(v) or getattr(cfg, k)
        elif k == "workers":
            v = _to_workers(v)
        else:
            v = _to_bool(k, v)
        setattr(cfg, k, v)
    # tables follow proc_root unless given explicitly
    if "proc_root" in data:
        if "tcp_path" not in data:
            cfg.tcp_path = cfg.proc_root / "net" / "tcp"
        if "udp_path" not in data:
            cfg.udp_path = cfg.proc_root / "net" / "udp"
    return cfg

def load_cfg(path: Optional[str]) -> CFG:
    if not path:
        return CFG()
    p = to_abs_path(path)
    if not p or not p.exists():
        log.warning("config not found: %s", p)
        return CFG()
    txt = p.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(txt) if p.suffix in (".yaml", ".yml") else json.loads(txt)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ValueError(f"cannot parse config {p}: {e}") from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"config {p} must be a mapping, got {type(data).__name__}")
    return cfg_from_dict(data)

def init_cfg_from_args(args) -> CFG:
    cfg = load_cfg(getattr(args, "config", None))
    if getattr(args, "proc_root", None):
        root = to_abs_path(args.proc_root)
        cfg.proc_root = root
        cfg.tcp_path = root / "net" / "tcp"
        cfg.udp_path = root / "net" / "udp"
    if getattr(args, "workers", None):
        cfg.workers = max(1, int(args.workers))
    if getattr(args, "enrich", False):
        cfg.enrich = True
    if getattr(args, "strict_states", False):
        cfg.strict_states = True
    return cfg
