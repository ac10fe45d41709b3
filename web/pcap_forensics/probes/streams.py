"""
Conversation stream reconstruction.

Two tshark passes per transport:
  1. `-z conv,<proto>` enumerates conversations (rows with `<->`);
  2. `-z follow,<proto>,ascii,<n>` is run once per 0-based index n and its
     output becomes that stream's transcript.

Follow calls run on a bounded worker pool. Every index has its own outcome:
a failing index is logged and left out, the others are still returned in
index order.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Union

from ..config import AnalyzerConfig
from ..dto import StreamRecord, Transport
from ..errors import ExternalToolError
from ..parsers.conversations import conversation_rows, parse_follow_endpoints
from ..ports import CommandRunnerPort
from .tshark import run_text

logger = logging.getLogger(__name__)


class StreamReconstructor:
    """
    Rebuild the conversations of one capture for a given transport.

    Usage:
        rec = StreamReconstructor(runner, cfg, "capture.pcap")
        streams = rec.reconstruct("tcp")
        one = rec.follow("tcp", 3)
    """

    def __init__(self, runner: CommandRunnerPort, cfg: AnalyzerConfig, pcap_file: str) -> None:
        self._runner = runner
        self._cfg = cfg
        self._pcap = pcap_file

    def count(self, proto: Transport) -> int:
        """Number of conversations tshark reports; 0 if the listing failed."""
        text = run_text(
            self._runner,
            self._cfg.tshark_cmd,
            ["-r", self._pcap, "-q", "-z", f"conv,{proto}"],
            self._cfg.probe_timeout_seconds,
        )
        if text is None:
            return 0
        return len(conversation_rows(text))

    def follow(self, proto: Transport, index: int) -> StreamRecord:
        """
        Transcript of stream `index`. Raises ExternalToolError on failure.
        Repeated calls for the same index return equal records.
        """
        out = self._runner.run(
            self._cfg.tshark_cmd,
            ["-r", self._pcap, "-q", "-z", f"follow,{proto},ascii,{index}"],
            timeout=self._cfg.probe_timeout_seconds,
        )
        if not out.ok:
            raise ExternalToolError(self._cfg.tshark_cmd, f"follow {proto} #{index} exited {out.returncode}")
        ip_src, sport, ip_dst, dport = parse_follow_endpoints(out.stdout)
        return StreamRecord(
            stream_id=index,
            text=out.stdout,
            ip_src=ip_src,
            sport=sport,
            ip_dst=ip_dst,
            dport=dport,
        )

    def reconstruct(self, proto: Transport) -> List[StreamRecord]:
        total = self.count(proto)
        if total == 0:
            logger.info("%s streams ready (none)", proto.upper())
            return []

        outcomes: Dict[int, Union[StreamRecord, Exception]] = {}
        workers = min(self._cfg.stream_workers, total)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=f"follow-{proto}") as executor:
            futures = {idx: executor.submit(self.follow, proto, idx) for idx in range(total)}
            for idx, future in futures.items():
                try:
                    outcomes[idx] = future.result()
                except Exception as e:
                    outcomes[idx] = e

        streams: List[StreamRecord] = []
        for idx in range(total):
            outcome = outcomes[idx]
            if isinstance(outcome, Exception):
                logger.warning("%s stream %d skipped: %s", proto.upper(), idx, outcome)
                continue
            streams.append(outcome)

        logger.info("%s streams ready (%d/%d)", proto.upper(), len(streams), total)
        return streams
