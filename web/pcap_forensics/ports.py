"""
Hexagonal interface (Port) for the external analysis binaries.

Every probe reaches capinfos, tshark, suricata and dig through this one
narrow capability, so parsing can be exercised against canned text with a
fake runner instead of real processes.
"""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .dto import CommandOutput


class CommandRunnerPort(Protocol):
    """Runs one external command to completion and returns its text output."""

    def run(
        self,
        command: str,
        args: Sequence[str],
        timeout: Optional[float] = None,
    ) -> CommandOutput:
        """
        Execute `command` with `args` and wait for it.

        A non-zero exit is reported through CommandOutput.returncode, not raised.
        Implementations MUST raise ExternalToolError when the command cannot be
        started or exceeds `timeout`.
        """
        ...
