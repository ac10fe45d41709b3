# tests/test_probes.py
from pathlib import Path

from pcap_forensics.dto import CommandOutput, IntrusionLogs
from pcap_forensics.errors import ExternalToolError
from pcap_forensics.probes.streams import StreamReconstructor
from pcap_forensics.probes.suricata import probe_suricata, suricata_args
from pcap_forensics.probes.tshark import (
    extract_printable_payload,
    printable_ascii,
    probe_capinfos,
    probe_hosts,
    probe_macs,
    probe_protocol_hierarchy,
)

from conftest import CONV_TCP_OUT, FakeRunner, follow_out


# --- tshark / capinfos probes -------------------------------------------------

def test_probes_parse_tool_output(cfg, full_responses):
    runner = FakeRunner(full_responses)
    assert probe_capinfos(runner, cfg, "c.pcap")["Number of packets"] == "120"
    assert [m.manufacturer for m in probe_macs(runner, cfg, "c.pcap")] == ["VendorX", None]
    assert probe_protocol_hierarchy(runner, cfg, "c.pcap")[0].protocol == "eth"
    hosts = probe_hosts(runner, cfg, "c.pcap")
    assert {h.ip: h.host for h in hosts}["93.184.216.34"] == "example.com"


def test_probes_pass_capture_and_timeout(cfg, full_responses):
    runner = FakeRunner(full_responses)
    probe_capinfos(runner, cfg, "c.pcap")
    command, args, timeout = runner.calls[0]
    assert command == "capinfos"
    assert args[-1] == "c.pcap"
    assert "-M" in args
    assert timeout == cfg.probe_timeout_seconds


def test_probes_degrade_to_empty_defaults(cfg):
    runner = FakeRunner({
        "capinfos": CommandOutput(stdout="File name: x\n", returncode=1),
        "io,phs": ExternalToolError("tshark", "timed out after 300.0s"),
    })
    assert probe_capinfos(runner, cfg, "c.pcap") == {}
    assert probe_protocol_hierarchy(runner, cfg, "c.pcap") == []
    assert probe_hosts(runner, cfg, "c.pcap") == []
    assert probe_macs(runner, cfg, "c.pcap") == []


def test_printable_ascii_filter():
    assert printable_ascii(b"GET /\r\n\x00\x01ok~\x7f") == "GET /\nok~"


def test_extract_printable_payload(cfg, tmp_path):
    payload = b"USER bob\r\nPASS \x00secret\n".hex()
    runner = FakeRunner({"fields:tcp.payload": f"{payload[:10]}\n{payload[10:]}\n\n"})
    out = extract_printable_payload(runner, cfg, "c.pcap", tmp_path / "payload.txt")
    assert out == tmp_path / "payload.txt"
    assert out.read_text(encoding="utf-8") == "USER bob\nPASS secret\n"


def test_extract_printable_payload_none_when_empty_or_failed(cfg, tmp_path):
    assert extract_printable_payload(FakeRunner({"fields:tcp.payload": "\n"}), cfg, "c.pcap", tmp_path / "a") is None
    assert extract_printable_payload(FakeRunner(), cfg, "c.pcap", tmp_path / "b") is None
    assert not (tmp_path / "a").exists()


# --- stream reconstruction ----------------------------------------------------

def test_reconstruct_tcp_streams_in_index_order(cfg, full_responses):
    runner = FakeRunner(full_responses)
    streams = StreamReconstructor(runner, cfg, "c.pcap").reconstruct("tcp")
    assert [s.stream_id for s in streams] == [0, 1]
    assert (streams[0].ip_src, streams[0].sport, streams[0].ip_dst, streams[0].dport) == (
        "192.168.1.5", "50000", "93.184.216.34", "80",
    )
    assert "GET / HTTP/1.1" in streams[0].text
    assert streams[1].dport == "443"


def test_one_failing_index_does_not_sink_the_others(cfg):
    runner = FakeRunner({
        "conv,tcp": CONV_TCP_OUT + "10.0.0.1:1 <-> 10.0.0.2:2  1 1 bytes\n",
        "follow,tcp,ascii,0": follow_out("tcp", 0, "10.0.0.1", 1, "10.0.0.2", 2),
        "follow,tcp,ascii,1": CommandOutput(stdout="", returncode=2),
        "follow,tcp,ascii,2": "no endpoint header at all\n",
    })
    streams = StreamReconstructor(runner, cfg, "c.pcap").reconstruct("tcp")
    assert [s.stream_id for s in streams] == [0, 2]
    assert streams[1].ip_src == "" and streams[1].dport == ""
    assert streams[1].text == "no endpoint header at all\n"


def test_follow_is_idempotent_per_index(cfg, full_responses):
    rec = StreamReconstructor(FakeRunner(full_responses), cfg, "c.pcap")
    assert rec.follow("tcp", 1) == rec.follow("tcp", 1)


def test_listing_failure_means_no_streams(cfg):
    assert StreamReconstructor(FakeRunner(), cfg, "c.pcap").reconstruct("tcp") == []


# --- suricata -----------------------------------------------------------------

def test_suricata_reads_all_logs(cfg, full_responses):
    logs = probe_suricata(FakeRunner(full_responses), cfg, "c.pcap")
    assert logs.eve.startswith('{"event_type"')
    assert "UNION SELECT" in logs.fast
    assert logs.stats == "uptime: 1s\n"
    assert logs.engine == "engine started\n"
    assert logs.to_dict()["suricata"] == "engine started\n"


def test_suricata_partial_logs(cfg):
    def only_eve(args):
        Path(args[args.index("-l") + 1], "eve.json").write_text("{}\n")
        return ""

    logs = probe_suricata(FakeRunner({"suricata": only_eve}), cfg, "c.pcap")
    assert logs == IntrusionLogs(eve="{}\n")


def test_suricata_invocation_failure_is_all_absent(cfg):
    assert probe_suricata(FakeRunner(), cfg, "c.pcap") == IntrusionLogs()
    failing = FakeRunner({"suricata": CommandOutput(stdout="", returncode=1)})
    assert probe_suricata(failing, cfg, "c.pcap") == IntrusionLogs()


def test_suricata_uses_custom_rules_when_present(cfg):
    assert "-S" not in suricata_args(cfg, "c.pcap")
    rules = Path(cfg.rules_dir) / cfg.custom_rules_file
    rules.parent.mkdir(parents=True)
    rules.write_text("# ID: a\nalert ip any any -> any any (sid:1;)\n")
    args = suricata_args(cfg, "c.pcap")
    assert args[args.index("-S") + 1] == str(rules)
    assert args[:6] == ["-r", "c.pcap", "-l", cfg.scratch_dir, "-c", cfg.suricata_config]
