from __future__ import annotations
import os
from pathlib import Path
from typing import Optional, Union

def to_abs_path(p: Optional[Union[str, os.PathLike]]) -> Optional[Path]:
    """Convert p to an absolute path.
    Sequence:
      1) Absolute: expanduser, kept as given (no symlink resolution,
         /proc/self and /proc/net are links)
      2) Relative to CWD
    """
    if not p:
        return None
    pp = Path(p).expanduser()
    if pp.is_absolute():
        return pp
    return Path.cwd() / pp
