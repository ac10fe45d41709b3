"""
Capture file intake: magic-byte validation and decompression.

Goal: fast checks that an uploaded file *looks* like a PCAP/PCAPNG capture
(optionally gzip- or zstd-compressed) before any external tool touches it,
and a single plain capture file on disk for the probes to read.

We DO NOT parse packet records here; tshark does that.
"""

from __future__ import annotations

import gzip
import os
import shutil
import zlib
from pathlib import Path
from typing import Final, Literal, Optional

import zstandard  # type: ignore

CaptureFormat = Literal["pcap", "pcapng", "gzip", "zstd"]

# --- Magic numbers (byte order as they appear on disk) ---
MAGIC_PCAP_USEC_BE: Final[bytes] = bytes.fromhex("a1b2c3d4")
MAGIC_PCAP_USEC_LE: Final[bytes] = bytes.fromhex("d4c3b2a1")
MAGIC_PCAP_NSEC_BE: Final[bytes] = bytes.fromhex("a1b23c4d")
MAGIC_PCAP_NSEC_LE: Final[bytes] = bytes.fromhex("4d3cb2a1")
MAGIC_PCAPNG: Final[bytes] = bytes.fromhex("0a0d0d0a")
MAGIC_GZIP: Final[bytes] = bytes.fromhex("1f8b")
MAGIC_ZSTD: Final[bytes] = bytes.fromhex("28b52ffd")

# pcap global header is 24 bytes; anything shorter cannot hold a capture
_MIN_SIZE = 24
_COMPRESSED_SUFFIXES = (".gz", ".zst")


def sniff_format(path: str | os.PathLike) -> Optional[CaptureFormat]:
    """Classify a file by its leading bytes, or None when it is not a capture."""
    try:
        if os.stat(path).st_size < _MIN_SIZE:
            return None
        with open(path, "rb") as f:
            head = f.read(4)
    except OSError:
        return None

    if head in (MAGIC_PCAP_USEC_BE, MAGIC_PCAP_USEC_LE, MAGIC_PCAP_NSEC_BE, MAGIC_PCAP_NSEC_LE):
        return "pcap"
    if head == MAGIC_PCAPNG:
        return "pcapng"
    if head[:2] == MAGIC_GZIP:
        return "gzip"
    if head == MAGIC_ZSTD:
        return "zstd"
    return None


def validate_capture(path: str | os.PathLike) -> bool:
    """True if the file is a plain or compressed capture."""
    return sniff_format(path) is not None


def materialize_capture(path: str | os.PathLike, remove_source: bool = True) -> Path:
    """
    Return the path of a plain capture file for `path`.

    - pcap / pcapng: returned unchanged.
    - gzip / zstd: inflated next to the original and the inflated path is
      returned. The compressed file is removed unless `remove_source` is False.

    Raises ValueError if the file (or what it inflates to) is not a capture,
    including corrupt or truncated compressed input. A compressed upload that
    fails here is removed when `remove_source` is set.
    """
    src = Path(path)
    fmt = sniff_format(src)
    if fmt is None:
        raise ValueError(f"{src.name} is not a pcap/pcapng capture")
    if fmt in ("pcap", "pcapng"):
        return src

    dest = _inflated_name(src)
    try:
        with open(src, "rb") as raw, open(dest, "wb") as out:
            if fmt == "gzip":
                with gzip.GzipFile(fileobj=raw, mode="rb") as stream:
                    shutil.copyfileobj(stream, out)
            else:
                dctx = zstandard.ZstdDecompressor()
                with dctx.stream_reader(raw) as stream:
                    shutil.copyfileobj(stream, out)
    except (OSError, EOFError, zlib.error, zstandard.ZstdError) as e:
        _discard(dest, src if remove_source else None)
        raise ValueError(f"{src.name} could not be decompressed: {e}") from e

    if sniff_format(dest) not in ("pcap", "pcapng"):
        _discard(dest, src if remove_source else None)
        raise ValueError(f"{src.name} does not contain a pcap/pcapng capture")
    if remove_source:
        src.unlink()
    return dest


def _discard(*paths: Optional[Path]) -> None:
    for p in paths:
        if p is not None:
            p.unlink(missing_ok=True)


def _inflated_name(src: Path) -> Path:
    name = src.name
    for suffix in _COMPRESSED_SUFFIXES:
        if name.lower().endswith(suffix):
            name = name[: -len(suffix)]
            break
    if not name.lower().endswith((".pcap", ".pcapng", ".cap")):
        name = f"{name}.pcap"
    if name == src.name:
        name = f"inflated_{name}"
    return src.with_name(name)
