"""
Rule selection routes: list the tagged rule blocks and choose which ones the
next suricata run loads.
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from forensic_app.managers.analysis_manager import AnalysisManager

bp = Blueprint("rules", __name__, url_prefix="/rules")


@bp.route("", methods=["GET"])
def list_rules():
    """Return the IDs found in all.rules, in corpus order."""
    mgr: AnalysisManager = current_app.extensions["analysis_mgr"]
    return jsonify({"success": True, "ids": mgr.rule_ids()})


@bp.route("/select", methods=["POST"])
def select_rules():
    """
    Regenerate custom.rules.

    Body (JSON):
      { "ids": ["sqli-union", "ssh-bruteforce"] }   # [] or missing: full corpus
    """
    body = request.get_json(silent=True)
    if body is None:
        body = {}
    if not isinstance(body, dict):
        return jsonify({"success": False, "error": "Body must be a JSON object"}), 400
    ids = body.get("ids") or []
    if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
        return jsonify({"success": False, "error": "ids must be a list of strings"}), 400

    mgr: AnalysisManager = current_app.extensions["analysis_mgr"]
    try:
        blocks = mgr.select_rules(ids)
    except FileNotFoundError:
        return jsonify({"success": False, "error": "Rule corpus not found"}), 404

    current_app.logger.info("Custom rules regenerated: %d blocks", blocks)
    return jsonify({"success": True, "blocks": blocks, "full_corpus": not any(i.strip() for i in ids)})
