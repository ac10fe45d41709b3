"""
Probe orchestration for one capture.

PcapAnalyzer launches every probe concurrently as soon as it is built and
freezes their outputs into one AnalysisResult. The result lives in a
single-assignment cell (a concurrent.futures.Future) with three states:

  pending -> ready    every probe resolved (value or its default)
  pending -> failed   aggregation itself raised; surfaced as AnalysisError

Probe failures never reach the cell: each probe is guarded and falls back to
its documented default ({} / [] / all-None IntrusionLogs).

The capture file and scratch directory belong to one analyzer. They are only
deleted by reclaim(), which the context-manager exit calls on every path.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..config import AnalyzerConfig
from ..dto import AnalysisResult, IntrusionLogs
from ..errors import AnalysisError
from ..intake.runner import SubprocessRunner
from ..parsers.hosts import ReverseLookup
from ..ports import CommandRunnerPort
from ..probes.streams import StreamReconstructor
from ..probes.suricata import probe_suricata
from ..probes.tshark import (
    probe_capinfos,
    probe_hosts,
    probe_macs,
    probe_protocol_hierarchy,
)

# name -> (probe, default factory)
ProbeTable = Dict[str, Tuple[Callable[[], Any], Callable[[], Any]]]


class PcapAnalyzer:
    """
    Run all probes against `pcap_file` and expose the aggregate.

    Usage:
        with PcapAnalyzer("tmp/upload.pcap", cfg) as analyzer:
            report = analyzer.result().to_dict()
        # capture + suricata scratch files are gone here
    """

    def __init__(
        self,
        pcap_file: str | Path,
        cfg: Optional[AnalyzerConfig] = None,
        *,
        runner: Optional[CommandRunnerPort] = None,
        logger: Optional[logging.Logger] = None,
        reverse: Optional[ReverseLookup] = None,
        autostart: bool = True,
    ) -> None:
        self.pcap_file = str(pcap_file)
        self.cfg = cfg or AnalyzerConfig()
        self.logger = logger or logging.getLogger("pcap_forensics")
        self._runner = runner or SubprocessRunner(default_timeout=self.cfg.probe_timeout_seconds)
        self._reverse = reverse

        self._cell: Future = Future()
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

        if autostart:
            self.start()

    # ---------------------------- Control plane ----------------------------

    def start(self) -> None:
        """Launch the probes once; later calls are no-ops."""
        with self._lock:
            if self._thread is not None:
                return
            self._thread = threading.Thread(
                target=self._run,
                name=f"analyze-{Path(self.pcap_file).name}",
                daemon=True,
            )
            self._thread.start()

    def done(self) -> bool:
        return self._cell.done()

    def result(self, timeout: Optional[float] = None) -> AnalysisResult:
        """
        Block until the aggregate is ready and return it (same object every call).

        Raises AnalysisError if aggregation failed or `timeout` elapsed first.
        """
        self.start()
        try:
            return self._cell.result(timeout=timeout)
        except FutureTimeout:
            raise AnalysisError(f"analysis of {self.pcap_file} not ready after {timeout}s") from None

    def reclaim(self) -> None:
        """Delete the capture and suricata scratch files. Never raises."""
        self._unlink(Path(self.pcap_file))

        scratch = Path(self.cfg.scratch_dir)
        try:
            entries = [p for p in scratch.iterdir() if p.is_file()]
        except FileNotFoundError:
            entries = []
        except OSError as e:
            self.logger.warning("Cannot list scratch dir %s: %s", scratch, e)
            entries = []
        for p in entries:
            self._unlink(p)

    def __enter__(self) -> "PcapAnalyzer":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.reclaim()

    # --------------------------- Private helpers ---------------------------

    def _unlink(self, path: Path) -> None:
        try:
            path.unlink()
            self.logger.info("Deleted %s", path)
        except FileNotFoundError:
            self.logger.debug("Already gone: %s", path)
        except OSError as e:
            self.logger.warning("Error deleting %s: %s", path, e)

    def _probes(self) -> ProbeTable:
        runner, cfg, pcap = self._runner, self.cfg, self.pcap_file
        streams = StreamReconstructor(runner, cfg, pcap)

        def udp_streams() -> List[Any]:
            if not cfg.follow_udp_streams:
                return []
            return streams.reconstruct("udp")

        return {
            "capinfos": (lambda: probe_capinfos(runner, cfg, pcap), dict),
            "hosts": (lambda: probe_hosts(runner, cfg, pcap, self._reverse), list),
            "macs": (lambda: probe_macs(runner, cfg, pcap), list),
            "protocol_tree": (lambda: probe_protocol_hierarchy(runner, cfg, pcap), list),
            "intrusion_logs": (lambda: probe_suricata(runner, cfg, pcap), IntrusionLogs),
            "tcp_streams": (lambda: streams.reconstruct("tcp"), list),
            "udp_streams": (udp_streams, list),
        }

    def _guarded(self, name: str, probe: Callable[[], Any], default: Callable[[], Any]) -> Any:
        try:
            return probe()
        except Exception:
            self.logger.exception("Probe %s failed; using default", name)
            return default()

    def _aggregate(self, values: Dict[str, Any]) -> AnalysisResult:
        return AnalysisResult(
            capinfos=MappingProxyType(dict(values["capinfos"])),
            hosts=tuple(values["hosts"]),
            macs=tuple(values["macs"]),
            protocol_tree=tuple(values["protocol_tree"]),
            intrusion_logs=values["intrusion_logs"],
            tcp_streams=tuple(values["tcp_streams"]),
            udp_streams=tuple(values["udp_streams"]),
        )

    def _run(self) -> None:
        try:
            probes = self._probes()
            with ThreadPoolExecutor(max_workers=len(probes), thread_name_prefix="probe") as executor:
                futures = {
                    name: executor.submit(self._guarded, name, fn, default)
                    for name, (fn, default) in probes.items()
                }
                values = {name: f.result() for name, f in futures.items()}
            result = self._aggregate(values)
        except Exception:
            self.logger.exception("Error initializing analysis of %s", self.pcap_file)
            self._cell.set_exception(AnalysisError("analysis failed"))
            return
        self.logger.info("Analysis of %s ready", self.pcap_file)
        self._cell.set_result(result)
