"""
Analyze route: upload a capture, get the full forensic report back.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
import uuid

from flask import Blueprint, current_app, jsonify, request
from werkzeug.utils import secure_filename

from pcap_forensics import AnalysisError
from forensic_app.managers.analysis_manager import AnalysisManager
from forensic_app.utils import allowed_file

bp = Blueprint("analyze", __name__, url_prefix="/")


@bp.route("/analyze", methods=["POST"])
def analyze():
    """
    Multipart form with a `file` field (.pcap/.pcapng, optionally .gz/.zst).

    Returns:
      { "success": true, "analysis": { capinfos, ip_host_pairs, mac_addresses,
        protocol_hierarchy, suricata, tcp_streams, udp_streams } }
    """
    if "file" not in request.files:
        return jsonify({"success": False, "error": "No file part"}), 400

    file = request.files["file"]
    if not file or file.filename == "":
        return jsonify({"success": False, "error": "No selected file"}), 400

    if not allowed_file(file.filename, current_app.config["ALLOWED_EXTENSIONS"]):
        return jsonify({"success": False, "error": "Invalid file type"}), 400

    upload_dir = Path(current_app.config["UPLOAD_FOLDER"])
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    # unique per request: the analyzer deletes this file when done
    dest = upload_dir / f"{ts}_{uuid.uuid4().hex[:8]}_{secure_filename(file.filename)}"
    file.save(dest)

    mgr: AnalysisManager = current_app.extensions["analysis_mgr"]
    try:
        report = mgr.analyze(dest)
    except ValueError as e:
        return jsonify({"success": False, "error": str(e)}), 400
    except AnalysisError:
        current_app.logger.exception("Analysis failed for %s", dest.name)
        return jsonify({"success": False, "error": "Analysis failed"}), 500

    return jsonify({"success": True, "filename": file.filename, "analysis": report})
