"""
Reading of target lists.
"""
from __future__ import annotations
from typing import Iterable, List, Optional, TextIO


def clean_targets(lines: Iterable[str]) -> List[str]:
    """Strips whitespace and drops blank lines and '#' comments."""
    targets = []
    for line in lines:
        s = line.strip()
        if not s or s.startswith('#'):
            continue
        targets.append(s)
    return targets


def read_targets(args: List[str], stdin: Optional[TextIO] = None) -> List[str]:
    """
    Returns the targets given on the command line or, if there are none,
    one target per line from `stdin`.
    """
    if args:
        return clean_targets(args)
    if stdin is None:
        return []
    return clean_targets(stdin)
