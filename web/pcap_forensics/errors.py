"""Exceptions raised at the package seams."""

from __future__ import annotations


class ExternalToolError(RuntimeError):
    """An external binary was missing, could not start, or timed out."""

    def __init__(self, command: str, reason: str) -> None:
        super().__init__(f"{command}: {reason}")
        self.command = command
        self.reason = reason


class AnalysisError(RuntimeError):
    """The aggregate could not be produced. Callers treat it as opaque."""
