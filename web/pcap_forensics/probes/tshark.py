"""
capinfos / tshark probes.

Each probe runs one command through the CommandRunnerPort, parses the text,
and degrades to an empty structure when the tool is missing, times out, or
exits non-zero. Nothing here raises for tool failures.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence

from ..config import AnalyzerConfig
from ..dto import CaptureSummary, HostRecord, MacRecord, ProtocolNode
from ..errors import ExternalToolError
from ..parsers.capinfos import parse_capinfos
from ..parsers.hierarchy import parse_protocol_hierarchy
from ..parsers.hosts import ReverseLookup, ReverseResolver, parse_host_pairs
from ..parsers.macs import parse_mac_pairs
from ..ports import CommandRunnerPort

logger = logging.getLogger(__name__)


def run_text(
    runner: CommandRunnerPort,
    command: str,
    args: Sequence[str],
    timeout: Optional[float],
) -> Optional[str]:
    """stdout of a successful run, or None (failure already logged)."""
    try:
        out = runner.run(command, list(args), timeout=timeout)
    except ExternalToolError as e:
        logger.warning("%s", e)
        return None
    if not out.ok:
        logger.warning("%s exited with status %s", command, out.returncode)
        return None
    return out.stdout


def _fields_args(pcap_file: str, fields: Sequence[str]) -> List[str]:
    args = ["-r", pcap_file, "-T", "fields"]
    for f in fields:
        args += ["-e", f]
    return args


# === Probes ===


def probe_capinfos(runner: CommandRunnerPort, cfg: AnalyzerConfig, pcap_file: str) -> CaptureSummary:
    text = run_text(runner, cfg.capinfos_cmd, [*cfg.capinfos_flags, pcap_file], cfg.probe_timeout_seconds)
    if text is None:
        return {}
    summary = parse_capinfos(text)
    logger.info("capinfos ready (%d fields)", len(summary))
    return summary


def probe_hosts(
    runner: CommandRunnerPort,
    cfg: AnalyzerConfig,
    pcap_file: str,
    reverse: Optional[ReverseLookup] = None,
) -> List[HostRecord]:
    text = run_text(
        runner,
        cfg.tshark_cmd,
        _fields_args(pcap_file, ["ip.src", "dns.qry.name"]),
        cfg.probe_timeout_seconds,
    )
    if text is None:
        return []
    if reverse is None:
        reverse = ReverseResolver(runner, cfg)
    hosts = parse_host_pairs(text, reverse)
    logger.info("hosts ready (%d addresses)", len(hosts))
    return hosts


def probe_macs(runner: CommandRunnerPort, cfg: AnalyzerConfig, pcap_file: str) -> List[MacRecord]:
    text = run_text(
        runner,
        cfg.tshark_cmd,
        _fields_args(pcap_file, ["eth.src", "eth.src.oui_resolved"]),
        cfg.probe_timeout_seconds,
    )
    if text is None:
        return []
    macs = parse_mac_pairs(text)
    logger.info("MAC inventory ready (%d addresses)", len(macs))
    return macs


def probe_protocol_hierarchy(runner: CommandRunnerPort, cfg: AnalyzerConfig, pcap_file: str) -> List[ProtocolNode]:
    text = run_text(runner, cfg.tshark_cmd, ["-r", pcap_file, "-q", "-z", "io,phs"], cfg.probe_timeout_seconds)
    if text is None:
        return []
    tree = parse_protocol_hierarchy(text)
    logger.info("protocol hierarchy ready (%d top-level protocols)", len(tree))
    return tree


# === Payload export ===


def printable_ascii(data: bytes) -> str:
    """Keep printable ASCII (space through '~') and newlines."""
    return "".join(chr(b) for b in data if 32 <= b <= 126 or b == 10)


def extract_printable_payload(
    runner: CommandRunnerPort,
    cfg: AnalyzerConfig,
    pcap_file: str,
    out_file: str | os.PathLike = "printable_payload.txt",
) -> Optional[Path]:
    """
    Concatenate every TCP payload in the capture, strip it to printable ASCII,
    and write it to `out_file`.

    Returns the written path, or None if there is no TCP payload or tshark failed.
    """
    text = run_text(
        runner,
        cfg.tshark_cmd,
        ["-r", pcap_file, "-Y", "tcp", "-T", "fields", "-e", "tcp.payload"],
        cfg.probe_timeout_seconds,
    )
    if text is None:
        return None
    # tshark may separate bytes with ':' depending on version
    hex_string = "".join(ln.strip().replace(":", "") for ln in text.splitlines())
    if not hex_string:
        logger.warning("No TCP payloads found in %s", pcap_file)
        return None
    try:
        data = bytes.fromhex(hex_string)
    except ValueError:
        logger.warning("tshark returned non-hex tcp.payload data for %s", pcap_file)
        return None

    out_path = Path(out_file)
    out_path.write_text(printable_ascii(data), encoding="utf-8")
    logger.info("Printable payload written to %s", out_path)
    return out_path
