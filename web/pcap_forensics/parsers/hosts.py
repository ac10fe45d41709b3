"""
Host/IP inventory: scope classification and best-effort naming.

Input is `tshark -T fields -e ip.src -e dns.qry.name` output, one packet per
line. Each distinct source IP becomes one HostRecord; the first sighting
fixes its identity and later sightings are ignored.

Naming order for a new IP:
  1. the DNS query name carried by that first packet,
  2. the static prefix table below (first match wins),
  3. nothing, for private addresses,
  4. a reverse lookup, for public addresses (failure -> None).
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Tuple

from ..config import AnalyzerConfig
from ..dto import HostRecord, Scope
from ..errors import ExternalToolError
from ..ports import CommandRunnerPort

logger = logging.getLogger(__name__)

# Ordered (prefix, name) pairs; checked top to bottom.
HOST_HINTS: Tuple[Tuple[str, str], ...] = (
    ("173.194.", "google.com"),
    ("74.125.", "google.com"),
    ("157.240.", "facebook.com"),
    ("69.171.", "facebook.com"),
    ("31.13.", "facebook.com"),
    ("52.", "amazonaws.com"),
    ("54.", "amazonaws.com"),
    ("3.", "amazonaws.com"),
    ("104.244.42.", "twitter.com"),
    ("151.101.", "fastly.net"),
    ("8.8.8.", "google-dns"),
    ("8.34.208.", "google-dns"),
    ("8.35.200.", "google-dns"),
)

ReverseLookup = Callable[[str], Optional[str]]


def is_private_ipv4(ip: str) -> bool:
    """RFC1918 membership. Anything that is not four integer octets is not private."""
    parts = ip.strip().split(".")
    if len(parts) != 4:
        return False
    try:
        a, b = int(parts[0]), int(parts[1])
    except ValueError:
        return False
    return a == 10 or (a == 172 and 16 <= b <= 31) or (a == 192 and b == 168)


def classify_scope(ip: str) -> Scope:
    return "private" if is_private_ipv4(ip) else "public"


def hint_for(ip: str, hints: Tuple[Tuple[str, str], ...] = HOST_HINTS) -> Optional[str]:
    for prefix, name in hints:
        if ip.startswith(prefix):
            return name
    return None


class ReverseResolver:
    """
    PTR lookups via `dig -x <ip> +short`, memoized per instance.

    Every failure mode (dig missing, timeout, non-zero exit, empty answer)
    yields None.
    """

    def __init__(self, runner: CommandRunnerPort, cfg: AnalyzerConfig) -> None:
        self._runner = runner
        self._cfg = cfg
        self._cache: Dict[str, Optional[str]] = {}

    def __call__(self, ip: str) -> Optional[str]:
        if ip not in self._cache:
            self._cache[ip] = self._lookup(ip)
        return self._cache[ip]

    def _lookup(self, ip: str) -> Optional[str]:
        try:
            out = self._runner.run(
                self._cfg.dig_cmd,
                ["-x", ip, "+short"],
                timeout=self._cfg.rdns_timeout_seconds,
            )
        except ExternalToolError as e:
            logger.debug("Reverse lookup of %s failed: %s", ip, e)
            return None
        if not out.ok:
            return None
        for line in out.stdout.splitlines():
            name = line.strip().rstrip(".")
            if name:
                return name
        return None


def resolve_host(ip: str, query_name: Optional[str], reverse: Optional[ReverseLookup] = None) -> Optional[str]:
    if query_name:
        return query_name
    hinted = hint_for(ip)
    if hinted:
        return hinted
    if is_private_ipv4(ip):
        return None
    if reverse is None:
        return None
    return reverse(ip)


def parse_host_pairs(text: str, reverse: Optional[ReverseLookup] = None) -> List[HostRecord]:
    """Deduplicate `ip.src<TAB>dns.qry.name` lines into HostRecords, first sighting wins."""
    records: List[HostRecord] = []
    seen = set()
    for line in text.splitlines():
        if not line.strip():
            continue
        # an empty first column (non-IP frame) leaves the row without a key
        cols = line.split("\t")
        ip = cols[0].strip()
        if not ip or ip in seen:
            continue
        seen.add(ip)
        query_name = cols[1].strip() if len(cols) > 1 else ""
        records.append(
            HostRecord(
                ip=ip,
                host=resolve_host(ip, query_name or None, reverse),
                scope=classify_scope(ip),
            )
        )
    return records
