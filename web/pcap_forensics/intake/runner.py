"""
subprocess-backed CommandRunner adapter.

Commands are executed directly (no shell), so capture paths and rule IDs
never pass through shell quoting. Output is decoded as text with undecodable
bytes replaced: tshark follow output routinely carries binary payload.
"""

from __future__ import annotations

import shutil
import subprocess
from typing import Optional, Sequence

from ..dto import CommandOutput
from ..errors import ExternalToolError
from ..ports import CommandRunnerPort


class SubprocessRunner(CommandRunnerPort):
    """Run commands with subprocess.run and map start/timeout failures to ExternalToolError."""

    def __init__(self, default_timeout: Optional[float] = None) -> None:
        self._default_timeout = default_timeout

    def run(
        self,
        command: str,
        args: Sequence[str],
        timeout: Optional[float] = None,
    ) -> CommandOutput:
        exe = shutil.which(command) or command
        limit = timeout if timeout is not None else self._default_timeout
        try:
            p = subprocess.run(
                [exe, *args],
                capture_output=True,
                text=True,
                errors="replace",
                timeout=limit,
            )
        except FileNotFoundError:
            raise ExternalToolError(command, "not found") from None
        except subprocess.TimeoutExpired:
            raise ExternalToolError(command, f"timed out after {limit}s") from None
        except OSError as e:
            raise ExternalToolError(command, str(e)) from e
        return CommandOutput(stdout=p.stdout or "", returncode=p.returncode)
