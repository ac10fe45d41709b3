"""Source MAC / OUI vendor inventory."""

from __future__ import annotations

from typing import List, Set

from ..dto import MacRecord


def parse_mac_pairs(text: str) -> List[MacRecord]:
    """
    Build one MacRecord per distinct `eth.src` from tab-separated
    `eth.src<TAB>eth.src.oui_resolved` lines. First sighting wins.
    """
    seen: Set[str] = set()
    records: List[MacRecord] = []
    for line in text.splitlines():
        if not line.strip():
            continue
        cols = line.split("\t")
        address = cols[0].strip()
        if not address or address in seen:
            continue
        seen.add(address)
        vendor = cols[1].strip() if len(cols) > 1 else ""
        records.append(MacRecord(address=address, manufacturer=vendor or None))
    return records
