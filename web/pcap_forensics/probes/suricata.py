"""
Intrusion-detection probe (suricata, offline pcap mode).

suricata writes its artifacts into the analysis' scratch directory:
eve.json, fast.log, stats.log and suricata.log. Each file is read
independently, so a run that only produced some of them still reports those.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from ..config import AnalyzerConfig
from ..dto import IntrusionLogs
from ..errors import ExternalToolError
from ..ports import CommandRunnerPort

logger = logging.getLogger(__name__)


def scratch_artifacts(cfg: AnalyzerConfig) -> List[Path]:
    """The log paths suricata is expected to leave behind."""
    scratch = Path(cfg.scratch_dir)
    return [scratch / name for name in (cfg.eve_log, cfg.fast_log, cfg.stats_log, cfg.engine_log)]


def custom_rules_path(cfg: AnalyzerConfig) -> Path:
    return Path(cfg.rules_dir) / cfg.custom_rules_file


def _read_optional(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None


def suricata_args(cfg: AnalyzerConfig, pcap_file: str) -> List[str]:
    args = ["-r", pcap_file, "-l", cfg.scratch_dir, "-c", cfg.suricata_config]
    rules = custom_rules_path(cfg)
    if rules.is_file():
        args += ["-S", str(rules)]
    return args


def probe_suricata(runner: CommandRunnerPort, cfg: AnalyzerConfig, pcap_file: str) -> IntrusionLogs:
    """Run suricata and collect its logs; all fields None if the run itself failed."""
    try:
        Path(cfg.scratch_dir).mkdir(parents=True, exist_ok=True)
        out = runner.run(cfg.suricata_cmd, suricata_args(cfg, pcap_file), timeout=cfg.probe_timeout_seconds)
    except (ExternalToolError, OSError) as e:
        logger.error("Error running suricata analysis: %s", e)
        return IntrusionLogs()
    if not out.ok:
        logger.error("suricata exited with status %s", out.returncode)
        return IntrusionLogs()

    eve, fast, stats, engine = (_read_optional(p) for p in scratch_artifacts(cfg))
    logs = IntrusionLogs(eve=eve, fast=fast, stats=stats, engine=engine)
    missing = [k for k, v in logs.to_dict().items() if v is None]
    if missing:
        logger.warning("suricata ready, missing logs: %s", ", ".join(missing))
    else:
        logger.info("suricata ready")
    return logs
