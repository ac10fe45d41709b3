"""
Analysis manager.

Wires uploaded captures to PcapAnalyzer. Every request gets its own capture
path and its own suricata scratch directory, so concurrent uploads never
share files; both are deleted once the report has been built, whether or not
the analysis succeeded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional
import logging
import uuid

from pcap_forensics import (
    AnalyzerConfig,
    CommandRunnerPort,
    PcapAnalyzer,
    generate_custom_rules,
    list_rule_ids,
    materialize_capture,
)


@dataclass
class AnalysisManager:
    """
    Attributes:
        logger: App logger.
        base_cfg: Analyzer configuration shared by all requests; scratch_dir
                  is treated as the parent of the per-request directories.
        runner: Optional command runner override (tests inject a fake).
        result_timeout: Seconds to wait for one report before giving up.
    """
    logger: logging.Logger
    base_cfg: AnalyzerConfig
    runner: Optional[CommandRunnerPort] = None
    result_timeout: Optional[float] = None

    _scratch_root: Path = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._scratch_root = Path(self.base_cfg.scratch_dir)

    # ---------------------------- Analysis ---------------------------------

    def analyze(self, upload_path: Path) -> Dict[str, object]:
        """
        Analyze one uploaded capture and return the report document.

        Raises ValueError if the upload is not a capture, AnalysisError if the
        report could not be built. The capture is deleted in every case.
        """
        try:
            capture = materialize_capture(upload_path, remove_source=True)
        except ValueError:
            upload_path.unlink(missing_ok=True)
            raise

        scratch = self._scratch_root / uuid.uuid4().hex
        cfg = self.base_cfg.model_copy(update={"scratch_dir": str(scratch)})

        self.logger.info("Analyzing %s (scratch %s)", capture.name, scratch.name)
        try:
            with PcapAnalyzer(capture, cfg, runner=self.runner, logger=self.logger) as analyzer:
                return analyzer.result(timeout=self.result_timeout).to_dict()
        finally:
            self._drop_scratch_dir(scratch)

    def _drop_scratch_dir(self, scratch: Path) -> None:
        try:
            scratch.rmdir()
        except FileNotFoundError:
            pass
        except OSError as e:
            self.logger.warning("Scratch dir %s not removed: %s", scratch, e)

    # ----------------------------- Rules -----------------------------------

    @property
    def all_rules_path(self) -> Path:
        return Path(self.base_cfg.rules_dir) / self.base_cfg.all_rules_file

    @property
    def custom_rules_path(self) -> Path:
        return Path(self.base_cfg.rules_dir) / self.base_cfg.custom_rules_file

    def rule_ids(self) -> List[str]:
        """IDs available in the base corpus (empty if there is none)."""
        try:
            text = self.all_rules_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        return list_rule_ids(text.split("\n"))

    def select_rules(self, ids: List[str]) -> int:
        """Regenerate custom.rules for the next analysis; returns blocks written."""
        return generate_custom_rules(self.all_rules_path, self.custom_rules_path, ids)
