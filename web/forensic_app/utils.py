"""
Utility helpers: directory setup, logging config, and upload validation.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from flask import Flask

_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def ensure_dirs(*paths: Path) -> None:
    """Ensure each directory exists."""
    for p in paths:
        p.mkdir(parents=True, exist_ok=True)


def init_logging(app: Flask) -> logging.Logger:
    """
    Configure a console logger + rotating file handler for the app and for
    the pcap_forensics library loggers (probe readiness, tool failures).
    """
    log_level = getattr(logging, app.config["LOG_LEVEL"].upper(), logging.INFO)

    log_file = Path(app.config["LOG_FILE"])
    ensure_dirs(log_file.parent)

    # Console
    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(logging.Formatter(_FORMAT))

    # File (rotating)
    fh = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=5)
    fh.setLevel(log_level)
    fh.setFormatter(logging.Formatter(_FORMAT))

    for name in ("forensic_app", "pcap_forensics"):
        lg = logging.getLogger(name)
        lg.setLevel(log_level)
        lg.propagate = False  # avoid duplicate logs if root has handlers
        lg.handlers.clear()
        lg.addHandler(ch)
        lg.addHandler(fh)

    return logging.getLogger("forensic_app")


def allowed_file(filename: str, allowed: set[str]) -> bool:
    """Return True if the filename has an allowed extension."""
    return "." in filename and filename.rsplit(".", 1)[1].lower() in allowed
