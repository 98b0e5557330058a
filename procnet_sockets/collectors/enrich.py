from __future__ import annotations
import logging
from dataclasses import replace

import psutil

from ..models import Proc

log = logging.getLogger(__name__)

def enrich_proc_info(proc: Proc) -> Proc:
    """Return a copy of proc with user and command line filled in via psutil.

    The procfs name is kept as is. Fields psutil cannot provide stay empty.
    """
    user = ""; cmd = ""
    try:
        p = psutil.Process(proc.pid)
        user = p.username()
        try:
            cmdline = p.cmdline()
            if cmdline: cmd = " ".join(cmdline)
        except psutil.Error:
            cmd = ""
        if not cmd:
            try: cmd = p.exe() or proc.name
            except psutil.Error: cmd = proc.name
    except psutil.Error as e:
        log.debug("psutil could not enrich pid %d: %s", proc.pid, e)
    return replace(proc, user=user, cmd=cmd)
