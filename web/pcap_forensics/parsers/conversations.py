"""
Parsers for tshark conversation statistics and stream-follow output.

`-z conv,<proto>` prints a table in which every conversation row carries the
`<->` pairing marker; `-z follow,<proto>,ascii,<n>` prints a header naming
both endpoints:

    Node 0: 192.168.1.5:50000
    Node 1: [2001:db8::1]:443
"""

from __future__ import annotations

import re
from typing import List, Tuple

PAIRING_MARKER = "<->"

_NODE_RE = {
    idx: re.compile(rf"Node {idx}:\s+(?:\[([0-9A-Fa-f:.]+)\]|([\d.]+)):(\d+)")
    for idx in (0, 1)
}


def conversation_rows(text: str) -> List[str]:
    """Rows of a `-z conv` table that denote an actual conversation."""
    return [ln for ln in text.splitlines() if PAIRING_MARKER in ln]


def _endpoint(text: str, idx: int) -> Tuple[str, str]:
    m = _NODE_RE[idx].search(text)
    if not m:
        return "", ""
    return m.group(1) or m.group(2), m.group(3)


def parse_follow_endpoints(text: str) -> Tuple[str, str, str, str]:
    """Return (ip_src, sport, ip_dst, dport); unmatched parts are empty strings."""
    ip_src, sport = _endpoint(text, 0)
    ip_dst, dport = _endpoint(text, 1)
    return ip_src, sport, ip_dst, dport
