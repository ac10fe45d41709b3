"""capinfos `key: value` summary parser."""

from __future__ import annotations

from ..dto import CaptureSummary


def parse_capinfos(text: str) -> CaptureSummary:
    """
    Parse one `key: value` pair per line into a dict.

    Values may contain colons (timestamps, hashes), so only the first colon
    splits. Lines without a key or with an empty value are skipped.
    """
    summary: CaptureSummary = {}
    for line in text.strip().splitlines():
        key, sep, value = line.partition(":")
        key = key.strip()
        value = value.strip()
        if not sep or not key or not value:
            continue
        summary[key] = value
    return summary
