"""
Command-line runner:
    python -m pcap_forensics capture.pcap [--rules ID ...] [--payload-out FILE] [--keep]

Steps:
1. Optionally regenerate the custom rule selection.
2. Inflate a .gz/.zst capture if needed.
3. Run every probe on the capture.
4. Print the report JSON to stdout.
5. Delete the capture (and a compressed original) and scratch logs unless
   --keep is given.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from pcap_forensics.config import AnalyzerConfig
from pcap_forensics.errors import AnalysisError
from pcap_forensics.intake.capture import materialize_capture
from pcap_forensics.intake.runner import SubprocessRunner
from pcap_forensics.orchestration.analyzer import PcapAnalyzer
from pcap_forensics.probes.tshark import extract_printable_payload
from pcap_forensics.rules.corpus import generate_custom_rules


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="PCAP forensic report")
    parser.add_argument("pcap_file", help=".pcap or .pcapng file path to analyze")
    parser.add_argument(
        "--rules",
        nargs="*",
        default=None,
        help="Rule IDs to keep in the custom suricata rules (no IDs: full corpus)",
    )
    parser.add_argument("--rules-dir", default="rules", help="Directory with all.rules (default: rules)")
    parser.add_argument("--scratch-dir", default="tmp/suricata_logs", help="suricata log directory")
    parser.add_argument("--suricata-config", default="/etc/suricata/suricata.yaml")
    parser.add_argument("--tshark-path", default="tshark", help="tshark executable")
    parser.add_argument("--timeout", type=float, default=300.0, help="Per-tool timeout in seconds")
    parser.add_argument("--udp", action="store_true", help="Also reconstruct UDP conversations")
    parser.add_argument("--payload-out", default=None, help="Write printable TCP payload to this file")
    parser.add_argument("--keep", action="store_true", help="Do not delete the capture afterwards")
    parser.add_argument("--indent", type=int, default=2, help="JSON indent (default: 2)")
    parser.add_argument("--verbose", action="store_true", help="Debug logging on stderr")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    cfg = AnalyzerConfig(
        tshark_cmd=args.tshark_path,
        rules_dir=args.rules_dir,
        scratch_dir=args.scratch_dir,
        suricata_config=args.suricata_config,
        probe_timeout_seconds=args.timeout,
        follow_udp_streams=args.udp,
    )

    if args.rules is not None:
        all_rules = Path(cfg.rules_dir) / cfg.all_rules_file
        try:
            generate_custom_rules(all_rules, Path(cfg.rules_dir) / cfg.custom_rules_file, args.rules)
        except FileNotFoundError:
            logging.getLogger("pcap_forensics").error("Rule corpus not found: %s", all_rules)
            return 2

    try:
        capture = materialize_capture(args.pcap_file, remove_source=not args.keep)
    except ValueError as e:
        logging.getLogger("pcap_forensics").error("%s", e)
        return 2

    runner = SubprocessRunner(default_timeout=cfg.probe_timeout_seconds)
    analyzer = PcapAnalyzer(capture, cfg, runner=runner)
    try:
        report = analyzer.result().to_dict()
        if args.payload_out:
            extract_printable_payload(runner, cfg, capture, args.payload_out)
    except AnalysisError as e:
        logging.getLogger("pcap_forensics").error("%s", e)
        return 1
    finally:
        if not args.keep:
            analyzer.reclaim()

    json.dump(report, sys.stdout, indent=args.indent, ensure_ascii=False)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
