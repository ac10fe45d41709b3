"""
Protocol hierarchy tree builder for `tshark -q -z io,phs` output.

The report nests protocols purely by indentation:

    eth                                      frames:120 bytes:9800
      ip                                     frames:118 bytes:9700
        tcp                                  frames:90 bytes:8000
          tls                                frames:12 bytes:3100
        udp                                  frames:28 bytes:1700

A row's parent is the nearest preceding row indented strictly less. Equal
indentation means siblings; a dedent closes exactly the levels it crosses.
"""

from __future__ import annotations

import re
from typing import List, Tuple

from ..dto import ProtocolNode

_ROW_RE = re.compile(r"^(\s*)(\S+)\s+frames:(\d+)\s+bytes:(\d+)")


def _rows(text: str) -> List[str]:
    return [ln for ln in text.splitlines() if "frames:" in ln and "bytes:" in ln]


# (protocol, frames, bytes, children) while the tree is still open
_Row = Tuple[str, int, int, List["_Row"]]


def _freeze(row: _Row) -> ProtocolNode:
    protocol, frames, nbytes, children = row
    return ProtocolNode(
        protocol=protocol,
        frames=frames,
        bytes=nbytes,
        children=tuple(_freeze(c) for c in children),
    )


def parse_protocol_hierarchy(text: str) -> List[ProtocolNode]:
    """Return the top-level ProtocolNodes (the sentinel root is not emitted)."""
    root: _Row = ("root", 0, 0, [])
    stack: List[Tuple[int, _Row]] = [(-1, root)]

    for line in _rows(text):
        m = _ROW_RE.match(line)
        if not m:
            continue
        indent = len(m.group(1))
        row: _Row = (m.group(2), int(m.group(3)), int(m.group(4)), [])
        while stack[-1][0] >= indent:
            stack.pop()
        stack[-1][1][3].append(row)
        stack.append((indent, row))

    return [_freeze(r) for r in root[3]]
