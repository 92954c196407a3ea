"""Reporting the process's data and virtual memory size from /proc."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Dict, Optional, TextIO, Union

_KEYS = ("VmData:", "VmSize:")


def _default_status_path() -> Path:
    return Path(f"/proc/{os.getpid()}/status")


def read_mem_usage(status_path: Optional[Union[str, Path]] = None) -> Dict[str, str]:
    """The ``VmData`` and ``VmSize`` entries of a process status file, in file order."""
    path = Path(status_path) if status_path is not None else _default_status_path()
    tokens = iter(path.read_text().split())
    usage: Dict[str, str] = {}
    for token in tokens:
        if token in _KEYS:
            value = next(tokens, None)
            if value is not None:
                usage[token[:-1]] = value
    return usage


def print_mem_usage(
    stream: Optional[TextIO] = None, status_path: Optional[Union[str, Path]] = None
) -> Dict[str, str]:
    """Write the memory usage lines to ``stream`` (standard error by default)."""
    out = stream if stream is not None else sys.stderr
    usage = read_mem_usage(status_path)
    for key, value in usage.items():
        out.write(f"#{key}:\t{value}\n")
    return usage