"""
pcap_forensics: one structured forensic report per capture file.

Public API (stable):
- AnalyzerConfig           (configuration)
- PcapAnalyzer             (runs every probe concurrently, exposes the result)
- CommandRunnerPort        (external-tool interface)
- SubprocessRunner         (subprocess-backed runner)
- generate_custom_rules    (rewrites the suricata rule selection)
- materialize_capture      (validates/inflates an uploaded capture)
- DTOs: AnalysisResult, HostRecord, MacRecord, ProtocolNode, StreamRecord,
        IntrusionLogs, RuleBlock, CommandOutput
- Errors: AnalysisError, ExternalToolError
"""

from __future__ import annotations

# Configuration
from .config import AnalyzerConfig

# Orchestration
from .orchestration.analyzer import PcapAnalyzer

# Ports
from .ports import CommandRunnerPort

# Adapters
from .intake.runner import SubprocessRunner
from .intake.capture import materialize_capture, validate_capture

# Rules
from .rules.corpus import filter_corpus, generate_custom_rules, list_rule_ids

# DTOs
from .dto import (
    AnalysisResult,
    CommandOutput,
    HostRecord,
    IntrusionLogs,
    MacRecord,
    ProtocolNode,
    RuleBlock,
    StreamRecord,
)

# Errors
from .errors import AnalysisError, ExternalToolError

__all__ = [
    "AnalyzerConfig",
    "PcapAnalyzer",
    "CommandRunnerPort",
    "SubprocessRunner",
    "materialize_capture",
    "validate_capture",
    "filter_corpus",
    "generate_custom_rules",
    "list_rule_ids",
    "AnalysisResult",
    "CommandOutput",
    "HostRecord",
    "IntrusionLogs",
    "MacRecord",
    "ProtocolNode",
    "RuleBlock",
    "StreamRecord",
    "AnalysisError",
    "ExternalToolError",
]
