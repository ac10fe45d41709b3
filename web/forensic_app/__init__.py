"""
Flask app factory: registers config, logging, blueprints, and error handlers.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Type

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from pcap_forensics import AnalyzerConfig, CommandRunnerPort
from forensic_app.config import Config, DevelopmentConfig, ProductionConfig
from forensic_app.utils import ensure_dirs, init_logging
from forensic_app.managers.analysis_manager import AnalysisManager
from forensic_app.routes import analyze as analyze_bp
from forensic_app.routes import rules as rules_bp


def create_app(
    config_class: Type[Config] | None = None,
    runner: Optional[CommandRunnerPort] = None,
) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)

    # Config selection
    cfg: Type[Config]
    env = os.getenv("FLASK_ENV", "production").lower()
    if config_class is not None:
        cfg = config_class
    elif env.startswith("dev"):
        cfg = DevelopmentConfig
    else:
        cfg = ProductionConfig
    app.config.from_object(cfg)

    # Ensure folders
    ensure_dirs(
        Path(app.config["UPLOAD_FOLDER"]),
        Path(app.config["LOG_FOLDER"]),
        Path(app.config["SCRATCH_FOLDER"]),
        Path(app.config["RULES_FOLDER"]),
    )

    # Logging
    logger = init_logging(app)
    app.logger = logger  # align Flask's logger with ours

    analyzer_cfg = AnalyzerConfig(
        tshark_cmd=app.config["TSHARK_PATH"],
        capinfos_cmd=app.config["CAPINFOS_PATH"],
        suricata_cmd=app.config["SURICATA_PATH"],
        suricata_config=app.config["SURICATA_CONFIG"],
        probe_timeout_seconds=app.config["PROBE_TIMEOUT_SECONDS"],
        follow_udp_streams=app.config["FOLLOW_UDP_STREAMS"],
        scratch_dir=app.config["SCRATCH_FOLDER"],
        rules_dir=app.config["RULES_FOLDER"],
    )
    app.extensions["analysis_mgr"] = AnalysisManager(
        logger=logger,
        base_cfg=analyzer_cfg,
        runner=runner,
    )

    # Security-ish headers
    @app.after_request
    def set_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        return resp

    # Error handlers
    @app.errorhandler(RequestEntityTooLarge)
    def handle_file_too_large(_e):
        return jsonify({"success": False, "error": "File too large"}), 413

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        return jsonify({"success": False, "error": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_exception(e: Exception):
        app.logger.exception("Unhandled error")
        return jsonify({"success": False, "error": "Internal server error"}), 500

    # Blueprints
    app.register_blueprint(analyze_bp.bp)
    app.register_blueprint(rules_bp.bp)

    # Health
    @app.route("/healthz")
    def healthz():
        return jsonify({"status": "ok"}), 200

    return app
