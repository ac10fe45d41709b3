"""
Configuration objects for the Flask application.

Override via environment variables.
"""

from __future__ import annotations
import os


class Config:
    """Base configuration (safe defaults)."""

    # Storage
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "tmp/uploads")
    LOG_FOLDER = os.getenv("LOG_FOLDER", "logs")
    # One sub-directory per request is created under here for suricata logs
    SCRATCH_FOLDER = os.getenv("SCRATCH_FOLDER", "tmp/suricata_logs")

    # Requests / uploads
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(512 * 1024 * 1024)))  # 512 MiB

    # File types
    ALLOWED_EXTENSIONS = set(
        (os.getenv("ALLOWED_EXTENSIONS", "pcap,pcapng,cap,gz,zst")).split(",")
    )

    # Logging
    LOG_FILE = os.getenv("APP_LOG_FILE", "logs/app.log")
    LOG_LEVEL = os.getenv("APP_LOG_LEVEL", "INFO")

    # External tools
    TSHARK_PATH = os.getenv("TSHARK_PATH", "tshark")
    CAPINFOS_PATH = os.getenv("CAPINFOS_PATH", "capinfos")
    SURICATA_PATH = os.getenv("SURICATA_PATH", "suricata")
    SURICATA_CONFIG = os.getenv("SURICATA_CONFIG", "/etc/suricata/suricata.yaml")
    PROBE_TIMEOUT_SECONDS = float(os.getenv("PROBE_TIMEOUT_SECONDS", "300"))
    FOLLOW_UDP_STREAMS = os.getenv("FOLLOW_UDP_STREAMS", "0").lower() in ("1", "true", "yes")

    # Rule corpus (all.rules in, custom.rules out)
    RULES_FOLDER = os.getenv("RULES_FOLDER", "rules")


class ProductionConfig(Config):
    """Production overrides."""
    LOG_LEVEL = os.getenv("APP_LOG_LEVEL", "INFO")


class DevelopmentConfig(Config):
    """Development overrides."""
    LOG_LEVEL = os.getenv("APP_LOG_LEVEL", "DEBUG")
