"""
Configuration schema for one capture analysis.

Keep this lean: the knobs here are the external tool names, the per-call
timeouts that keep a hung tool from stalling a request, and the filesystem
locations the intrusion-detection probe reads and writes.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class AnalyzerConfig(BaseModel):
    """
    Centralized, validated configuration shared by every probe of a run.
    Durations are seconds; paths may be relative to the working directory.
    """

    # === External tools ===
    capinfos_cmd: str = Field(default="capinfos", description="capinfos executable.")
    tshark_cmd: str = Field(default="tshark", description="tshark executable.")
    suricata_cmd: str = Field(default="suricata", description="suricata executable.")
    dig_cmd: str = Field(default="dig", description="dig executable used for reverse lookups.")

    capinfos_flags: tuple[str, ...] = Field(
        default=("-M", "-a", "-e", "-c", "-u", "-d", "-i", "-y", "-z", "-q"),
        description="Summary fields requested from capinfos (machine-readable sizes).",
    )

    # === Timeouts ===
    probe_timeout_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Upper bound for any single tshark/capinfos/suricata call.",
    )
    rdns_timeout_seconds: float = Field(
        default=3.0,
        gt=0,
        description="Upper bound for one reverse DNS lookup of a public address.",
    )

    # === Stream reconstruction ===
    stream_workers: int = Field(
        default=4,
        ge=1,
        description="Concurrent `tshark -z follow` calls per transport.",
    )
    follow_udp_streams: bool = Field(
        default=False,
        description="Reconstruct UDP conversations too. Off: udp_streams is always empty.",
    )

    # === Intrusion detection ===
    scratch_dir: str = Field(
        default="tmp/suricata_logs",
        description="Directory suricata writes its logs into; owned by one analysis.",
    )
    suricata_config: str = Field(
        default="/etc/suricata/suricata.yaml",
        description="suricata.yaml passed with -c.",
    )
    eve_log: str = Field(default="eve.json")
    fast_log: str = Field(default="fast.log")
    stats_log: str = Field(default="stats.log")
    engine_log: str = Field(default="suricata.log")

    # === Rule corpus ===
    rules_dir: str = Field(default="rules", description="Directory holding the rule corpus.")
    all_rules_file: str = Field(default="all.rules", description="Full tagged corpus.")
    custom_rules_file: str = Field(
        default="custom.rules",
        description="Filtered corpus; loaded with -S when present.",
    )

    class Config:
        frozen = True  # shared read-only across probe threads
