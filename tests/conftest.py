# tests/conftest.py
import threading
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

import pytest

from pcap_forensics.config import AnalyzerConfig
from pcap_forensics.dto import CommandOutput
from pcap_forensics.errors import ExternalToolError

Response = Union[str, CommandOutput, Exception, Callable[[Sequence[str]], Union[str, CommandOutput]]]


def route_key(command: str, args: Sequence[str]) -> str:
    """
    Name a command the way tests script it:
      capinfos ...                 -> "capinfos"
      tshark ... -z io,phs         -> "io,phs"
      tshark ... -T fields -e X    -> "fields:X" (first field)
      tshark ... -Y tcp ... payload-> "fields:tcp.payload"
      suricata ...                 -> "suricata"
      dig -x IP +short             -> "dig:IP"
    """
    args = list(args)
    if command == "dig":
        return f"dig:{args[args.index('-x') + 1]}"
    if command == "tshark":
        if "-z" in args:
            return args[args.index("-z") + 1]
        if "-e" in args:
            return f"fields:{args[args.index('-e') + 1]}"
    return command


class FakeRunner:
    """Scripted CommandRunnerPort. Unscripted commands fail like a missing binary."""

    def __init__(self, responses: Optional[Dict[str, Response]] = None) -> None:
        self.responses: Dict[str, Response] = dict(responses or {})
        self.calls: List[Tuple[str, List[str], Optional[float]]] = []
        self._lock = threading.Lock()

    def run(self, command, args, timeout=None):
        with self._lock:
            self.calls.append((command, list(args), timeout))
        key = route_key(command, args)
        if key not in self.responses:
            raise ExternalToolError(command, "not found")
        resp = self.responses[key]
        if callable(resp) and not isinstance(resp, (str, CommandOutput)):
            resp = resp(list(args))
        if isinstance(resp, Exception):
            raise resp
        if isinstance(resp, CommandOutput):
            return resp
        return CommandOutput(stdout=resp, returncode=0)

    def keys_called(self) -> List[str]:
        return [route_key(c, a) for c, a, _ in self.calls]


CAPINFOS_OUT = (
    "File name:           capture.pcap\n"
    "File type:           Wireshark/tcpdump/... - pcap\n"
    "Number of packets:   120\n"
    "First packet time:   2024-05-01 10:00:00.000000\n"
)

HOSTS_OUT = (
    "192.168.1.5\twww.example.com\n"
    "192.168.1.5\tother.example.com\n"
    "8.8.8.8\t\n"
    "93.184.216.34\t\n"
    "10.0.0.7\t\n"
)

MACS_OUT = (
    "aa:bb:cc:00:00:01\tVendorX\n"
    "aa:bb:cc:00:00:02\t\n"
    "aa:bb:cc:00:00:01\tVendorY\n"
)

PHS_OUT = (
    "===================================================================\n"
    "Protocol Hierarchy Statistics\n"
    "Filter: \n"
    "\n"
    "eth                                      frames:120 bytes:9800\n"
    "  ip                                     frames:118 bytes:9700\n"
    "    tcp                                  frames:90 bytes:8000\n"
    "      tls                                frames:12 bytes:3100\n"
    "    udp                                  frames:28 bytes:1700\n"
    "      dns                                frames:28 bytes:1700\n"
    "  arp                                    frames:2 bytes:100\n"
    "===================================================================\n"
)

CONV_TCP_OUT = (
    "================================================================================\n"
    "TCP Conversations\n"
    "Filter:<No Filter>\n"
    "                                               |       <-      | |       ->      |\n"
    "                                               | Frames  Bytes | | Frames  Bytes |\n"
    "192.168.1.5:50000          <-> 93.184.216.34:80      5 600 bytes   6 700 bytes\n"
    "192.168.1.5:50001          <-> 93.184.216.34:443     3 300 bytes   4 400 bytes\n"
    "================================================================================\n"
)

CONV_UDP_OUT = (
    "UDP Conversations\n"
    "192.168.1.5:53000          <-> 8.8.8.8:53            1 80 bytes    1 120 bytes\n"
)


def follow_out(proto: str, idx: int, src: str, sport: int, dst: str, dport: int, body: str = "") -> str:
    return (
        "===================================================================\n"
        f"Follow: {proto},ascii\n"
        f"Filter: {proto}.stream eq {idx}\n"
        f"Node 0: {src}:{sport}\n"
        f"Node 1: {dst}:{dport}\n"
        f"{body}"
        "===================================================================\n"
    )


@pytest.fixture
def cfg(tmp_path):
    return AnalyzerConfig(
        scratch_dir=str(tmp_path / "scratch"),
        rules_dir=str(tmp_path / "rules"),
        stream_workers=2,
    )


@pytest.fixture
def pcap_file(tmp_path):
    p = tmp_path / "capture.pcap"
    # pcap LE magic + padding to a plausible header size
    p.write_bytes(bytes.fromhex("d4c3b2a1") + b"\x00" * 40)
    return p


@pytest.fixture
def full_responses(cfg):
    """Every probe scripted to succeed."""
    from pathlib import Path

    def suricata(args):
        log_dir = Path(args[args.index("-l") + 1])
        (log_dir / "eve.json").write_text('{"event_type":"alert"}\n')
        (log_dir / "fast.log").write_text("[**] [1:1000001:1] UNION SELECT [**]\n")
        (log_dir / "stats.log").write_text("uptime: 1s\n")
        (log_dir / "suricata.log").write_text("engine started\n")
        return ""

    return {
        "capinfos": CAPINFOS_OUT,
        "fields:ip.src": HOSTS_OUT,
        "fields:eth.src": MACS_OUT,
        "io,phs": PHS_OUT,
        "conv,tcp": CONV_TCP_OUT,
        "conv,udp": CONV_UDP_OUT,
        "follow,tcp,ascii,0": follow_out("tcp", 0, "192.168.1.5", 50000, "93.184.216.34", 80, "GET / HTTP/1.1\n"),
        "follow,tcp,ascii,1": follow_out("tcp", 1, "192.168.1.5", 50001, "93.184.216.34", 443),
        "follow,udp,ascii,0": follow_out("udp", 0, "192.168.1.5", 53000, "8.8.8.8", 53),
        "suricata": suricata,
        "dig:93.184.216.34": "example.com.\n",
    }
