# gatewheel/api/routes.py
"""
Gate wheel - API routes
- Validation of raw wheel documents
- Angle / inverse-angle queries against a validated configuration
- Mapping docking verification
- Ops: /api/health, /api/wheel/default

Every query accepts an optional "config" object (raw wheel document). When it
is absent the server's default configuration is used; it is never stored.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request
from prometheus_client import Counter
from werkzeug.exceptions import BadRequest

from gatewheel.version import VERSION
from gatewheel.core.angles import addresses_within, nearest_address, wheel_position
from gatewheel.core.docking import verify_mapping
from gatewheel.core.errors import ErrorSet
from gatewheel.core.validators import validate
from gatewheel.core.wheel import ValidatedConfiguration

log = logging.getLogger(__name__)
api = Blueprint("api", __name__)

DEBUG_VERBOSE = os.getenv("WHEEL_DEBUG_VERBOSE", "0").lower() in ("1", "true", "yes", "on")
DEFAULT_WINDOW_DEG = 15.0  # used when config has no server.neighbourhood_window_deg

_VALIDATIONS = Counter("wheel_validations_total", "Wheel configuration validations", ["outcome"])


# ───────────────────────── helpers ─────────────────────────
def _json_error(code: str, details: Any = None, http: int = 400):
    out: Dict[str, Any] = {"ok": False, "error": code}
    if details is not None:
        out["details"] = details
    return jsonify(out), http


def _body_json() -> Dict[str, Any]:
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        raise BadRequest("JSON body must be an object")
    return data


def _validated(raw: Any) -> ValidatedConfiguration:
    result = validate(raw)
    _VALIDATIONS.labels(outcome="rejected" if isinstance(result, ErrorSet) else "validated").inc()
    if isinstance(result, ErrorSet):
        raise result
    return result


def _config_for(body: Dict[str, Any]) -> ValidatedConfiguration:
    raw = body.get("config")
    if raw is None:
        return current_app.config["WHEEL_DEFAULT"]
    return _validated(raw)


def _default_window() -> float:
    server = current_app.cfg.get("server") or {}  # type: ignore[attr-defined]
    return server.get("neighbourhood_window_deg", DEFAULT_WINDOW_DEG)


# ───────────────────────── health / ops ─────────────────────────
@api.get("/api/health")
def health():
    return jsonify({"ok": True, "status": "up", "version": VERSION}), 200


@api.get("/api/wheel/default")
def default_config():
    cfg: ValidatedConfiguration = current_app.config["WHEEL_DEFAULT"]
    return jsonify({"ok": True, "config": cfg.to_document(), "summary": cfg.summary()}), 200


# ───────────────────────── validation ─────────────────────────
@api.post("/api/wheel/validate")
def validate_endpoint():
    body = _body_json()
    try:
        cfg = _validated(body)
    except ErrorSet as e:
        return _json_error("validation_error", e.errors(), 400)
    return jsonify({"ok": True, "config": cfg.to_document(), "summary": cfg.summary()}), 200


# ───────────────────────── queries ─────────────────────────
@api.post("/api/wheel/angle")
def angle_endpoint():
    body = _body_json()
    try:
        cfg = _config_for(body)
        pos = wheel_position(cfg, body.get("gate"), body.get("line", 1))
    except ErrorSet as e:
        return _json_error("validation_error", e.errors(), 400)
    return jsonify({"ok": True, "position": pos.as_dict()}), 200


@api.post("/api/wheel/nearest")
def nearest_endpoint():
    body = _body_json()
    try:
        cfg = _config_for(body)
        hit = nearest_address(cfg, body.get("angle"))
        window = body.get("window", _default_window())
        out: Dict[str, Any] = {
            "ok": True,
            "nearest": hit.as_dict(),
            "window": window,
            "within": [h.as_dict() for h in addresses_within(cfg, body.get("angle"), window)],
        }
    except ErrorSet as e:
        return _json_error("validation_error", e.errors(), 400)
    return jsonify(out), 200


@api.post("/api/wheel/verify")
def verify_endpoint():
    body = _body_json()
    try:
        cfg = _config_for(body)
    except ErrorSet as e:
        return _json_error("validation_error", e.errors(), 400)
    report = verify_mapping(cfg, body.get("mapping"))
    if not report.passed:
        log.info("mapping %r failed docking with %d error(s)", report.system_name, report.failed_tests)
    out = report.as_dict()
    if DEBUG_VERBOSE:
        out["docked"] = report.docked
    return jsonify({"ok": True, "report": out}), 200
