"""
Data Transfer Objects (DTOs) shared by the probes, the orchestrator and the web layer.

These are intentionally small, immutable (where sensible), and independent
of any subprocess or Flask machinery.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Mapping, Optional, Tuple

Scope = Literal["private", "public"]
Transport = Literal["tcp", "udp"]

# field name -> value, as printed by capinfos
CaptureSummary = Dict[str, str]


# === Command capability ===
@dataclass(frozen=True)
class CommandOutput:
    """What a finished external command left behind."""
    stdout: str
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0


# === Inventories ===
@dataclass(frozen=True)
class HostRecord:
    """One distinct source IP seen in the capture."""
    ip: str
    host: Optional[str]
    scope: Scope

    def to_dict(self) -> Dict[str, Any]:
        # "type" is the key consumers of the report already read
        return {"ip": self.ip, "host": self.host, "type": self.scope}


@dataclass(frozen=True)
class MacRecord:
    """One distinct source MAC address and its OUI vendor, if resolved."""
    address: str
    manufacturer: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {"address": self.address, "manufacturer": self.manufacturer}


# === Protocol hierarchy ===
@dataclass(frozen=True)
class ProtocolNode:
    """One protocol row of `tshark -z io,phs` and the rows nested under it."""
    protocol: str
    frames: int
    bytes: int
    children: Tuple["ProtocolNode", ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "protocol": self.protocol,
            "frames": self.frames,
            "bytes": self.bytes,
            "children": [c.to_dict() for c in self.children],
        }


# === Conversations ===
@dataclass(frozen=True)
class StreamRecord:
    """A reconstructed conversation transcript (tshark follow output)."""
    stream_id: int
    text: str
    ip_src: str = ""
    sport: str = ""
    ip_dst: str = ""
    dport: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stream_id": self.stream_id,
            "ip_src": self.ip_src,
            "sport": self.sport,
            "ip_dst": self.ip_dst,
            "dport": self.dport,
            "text": self.text,
        }


# === Rule corpus ===
@dataclass(frozen=True)
class RuleBlock:
    """An ID-tagged run of rule lines. rule_id is None for an untagged preamble."""
    rule_id: Optional[str]
    lines: Tuple[str, ...]

    def render(self) -> str:
        return "\n".join(self.lines)


# === Intrusion detection ===
@dataclass(frozen=True)
class IntrusionLogs:
    """Raw suricata artifacts; each is None when the file was not produced."""
    eve: Optional[str] = None
    fast: Optional[str] = None
    stats: Optional[str] = None
    engine: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "eve": self.eve,
            "fast": self.fast,
            "stats": self.stats,
            "suricata": self.engine,
        }


# === Final immutable aggregate ===
@dataclass(frozen=True)
class AnalysisResult:
    capinfos: Mapping[str, str]      # read-only view of a CaptureSummary
    hosts: Tuple[HostRecord, ...]
    macs: Tuple[MacRecord, ...]
    protocol_tree: Tuple[ProtocolNode, ...]
    intrusion_logs: IntrusionLogs
    tcp_streams: Tuple[StreamRecord, ...]
    udp_streams: Tuple[StreamRecord, ...]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-compatible report document."""
        return {
            "capinfos": dict(self.capinfos),
            "ip_host_pairs": [h.to_dict() for h in self.hosts],
            "mac_addresses": [m.to_dict() for m in self.macs],
            "protocol_hierarchy": [n.to_dict() for n in self.protocol_tree],
            "suricata": self.intrusion_logs.to_dict(),
            "tcp_streams": [s.to_dict() for s in self.tcp_streams],
            "udp_streams": [s.to_dict() for s in self.udp_streams],
        }
