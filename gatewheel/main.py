# gatewheel/main.py
from __future__ import annotations

import logging
import os
import traceback
from time import perf_counter
from typing import Final

from flask import Flask, Response, jsonify, request
from flask_cors import CORS
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, Counter, Gauge, Histogram, generate_latest
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from gatewheel.api.routes import api
from gatewheel.core.errors import ErrorSet
from gatewheel.core.validators import validate_or_raise
from gatewheel.utils.config import load_config, wheel_document

# ───────────────────────── metrics ─────────────────────────
MET_REQUESTS: Final = Counter("wheel_api_requests_total", "API requests", ["route"])
REQ_LATENCY: Final = Histogram("wheel_request_seconds", "API request latency", ["route"])
GAUGE_ROTATION: Final = Gauge("wheel_default_rotation_offset_degrees", "Rotation offset of the default wheel")
GAUGE_APP_UP: Final = Gauge("wheel_app_up", "1 if app is running")

# ───────────────────────── helpers: logging & errors ─────────────────────────
def _configure_logging(app: Flask) -> None:
    gerr = logging.getLogger("gunicorn.error")
    if gerr.handlers:
        app.logger.handlers = gerr.handlers
        app.logger.setLevel(gerr.level)
    else:
        logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))

def _register_errors(app: Flask) -> None:
    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        app.logger.warning("HTTP %s at %s %s: %s", e.code, request.method, request.path, e.description)
        return jsonify(
            ok=False,
            error="http_error",
            code=e.code,
            name=e.name,
            message=e.description,
            path=request.path,
        ), e.code

    @app.errorhandler(ErrorSet)
    def _validation(e: ErrorSet):
        return jsonify(ok=False, error="validation_error", details=e.errors(), path=request.path), 400

    @app.errorhandler(Exception)
    def _any(e: Exception):
        tb = traceback.format_exc()
        app.logger.error("UNHANDLED %s at %s %s\n%s", type(e).__name__, request.method, request.path, tb)
        return jsonify(
            ok=False,
            error="internal_error",
            type=type(e).__name__,
            message=str(e),
            path=request.path,
        ), 500

# ───────────────────────── health & metrics ─────────────────────────
def _register_health(app: Flask) -> None:
    @app.route("/", methods=["GET"])
    def root():
        return jsonify(ok=True, service="gatewheel", health="/health"), 200

    @app.route("/health", methods=["GET"])
    @app.route("/healthz", methods=["GET"])
    def health():
        return jsonify(ok=True, status="ok"), 200

def _metrics_auth_ok() -> bool:
    auth = request.authorization
    user = os.getenv("METRICS_USER", "")
    pw = os.getenv("METRICS_PASS", "")
    return bool(
        auth and auth.type == "basic" and auth.username == user and auth.password == pw and user and pw
    )

# ───────────────────────── app factory ─────────────────────────
def create_app(config_path: str | None = None) -> Flask:
    app = Flask(__name__)
    app.json.sort_keys = False  # type: ignore[attr-defined]
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)  # type: ignore

    _configure_logging(app)

    cfg_path = config_path or os.environ.get("WHEEL_CONFIG")
    app.cfg = load_config(cfg_path)  # type: ignore[attr-defined]
    try:
        default = validate_or_raise(wheel_document(app.cfg))  # type: ignore[attr-defined]
    except ErrorSet as e:
        app.logger.error("default wheel configuration is invalid: %s", e.errors())
        raise
    app.config["WHEEL_DEFAULT"] = default
    GAUGE_ROTATION.set(default.rotation_offset)
    GAUGE_APP_UP.set(1.0)

    @app.before_request
    def _before():
        p = request.path or ""
        if p.startswith("/api/"):
            MET_REQUESTS.labels(route=p).inc()
            request._t0 = perf_counter()  # type: ignore[attr-defined]

    @app.after_request
    def _after(resp):
        p = request.path or ""
        if p.startswith("/api/") and hasattr(request, "_t0"):
            REQ_LATENCY.labels(route=p).observe(perf_counter() - request._t0)  # type: ignore[attr-defined]
        return resp

    _register_health(app)
    _register_errors(app)
    app.register_blueprint(api)

    # /metrics (Basic Auth)
    @app.route("/metrics", methods=["GET"])
    def metrics_endpoint():
        if not _metrics_auth_ok():
            return Response("Unauthorized", 401, {"WWW-Authenticate": 'Basic realm="metrics"'})
        GAUGE_APP_UP.set(1.0)
        return Response(generate_latest(REGISTRY), mimetype=CONTENT_TYPE_LATEST)

    CORS(
        app,
        resources={r"/.*": {"origins": os.environ.get("CORS_ALLOW_ORIGIN") or "*"}},
        supports_credentials=False,
        methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=600,
    )

    app.logger.info(
        "App initialized; default wheel %s north=%s rotation_offset=%.4f°",
        default.convention.value, default.north.canonical(), default.rotation_offset,
    )
    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
