# astrowheel/main.py
from __future__ import annotations

import logging
import os
import traceback
from time import perf_counter

from flask import Flask, Response, jsonify, request
from flask_cors import CORS
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix
import yaml

from astrowheel.api.routes import api as _routes_bp
from astrowheel.core.layout import LayoutSettings
from astrowheel.utils.config import default_config, load_config
from astrowheel.utils.metrics import GAUGE_APP_UP, MET_REQUESTS, REQ_LATENCY, TRACKED_ROUTES, seed
from astrowheel.version import VERSION

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

# ───────────────────────── health ─────────────────────────
def _register_health(app: Flask) -> None:
    @app.route("/", methods=["GET"])
    def root():
        return jsonify(ok=True, service="astrowheel", version=VERSION, health="/health"), 200

    @app.route("/api/health-check", methods=["GET"])
    def api_health():
        return jsonify(ok=True), 200

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

# ───────────────────────── config ─────────────────────────
def _load_settings(app: Flask, config_path: str | None) -> None:
    cfg_path = config_path or os.environ.get("ASTRO_WHEEL_CONFIG", "config/defaults.yaml")
    try:
        cfg = load_config(cfg_path)
    except (OSError, yaml.YAMLError) as e:
        app.logger.warning("config %s unavailable (%s); using built-in defaults", cfg_path, e)
        cfg = default_config()
    app.cfg = cfg  # type: ignore[attr-defined]

    # A bad threshold in config is a deployment error: fail at boot, not per request.
    app.config["LAYOUT_SETTINGS"] = LayoutSettings.from_config(cfg)

    radius = (cfg.get("wheel") or {}).get("radius", 1.0)
    if isinstance(radius, bool) or not isinstance(radius, (int, float)) or radius <= 0:
        raise ValueError(f"wheel.radius must be a positive number, got {radius!r}")
    app.config["WHEEL_RADIUS"] = float(radius)

    allow = (cfg.get("service") or {}).get("allow_request_settings", True)
    env_allow = os.getenv("ASTRO_WHEEL_ALLOW_SETTINGS")
    if env_allow is not None:
        allow = env_allow.lower() in ("1", "true", "yes", "on")
    app.config["ALLOW_REQUEST_SETTINGS"] = bool(allow)

# ───────────────────────── app factory ─────────────────────────
def create_app(config_path: str | None = None) -> Flask:
    app = Flask(__name__)
    app.json.sort_keys = False  # type: ignore[attr-defined]
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)  # type: ignore

    _configure_logging(app)
    _load_settings(app, config_path)
    seed()

    @app.before_request
    def _before():
        p = request.path or ""
        if p in TRACKED_ROUTES:
            MET_REQUESTS.labels(route=p).inc()
            request._t0 = perf_counter()  # type: ignore[attr-defined]

    @app.after_request
    def _after(resp):
        p = request.path or ""
        t0 = getattr(request, "_t0", None)
        if p in TRACKED_ROUTES and t0 is not None:
            REQ_LATENCY.labels(route=p).observe(perf_counter() - t0)
        return resp

    _register_health(app)
    _register_errors(app)
    app.register_blueprint(_routes_bp)

    @app.get("/__debug/routes")
    def __debug_routes():
        rules = []
        for r in app.url_map.iter_rules():
            methods = sorted(m for m in (r.methods or []) if m not in ("HEAD", "OPTIONS"))
            rules.append({"rule": str(r), "endpoint": r.endpoint, "methods": methods})
        rules.sort(key=lambda x: x["rule"])
        return jsonify({"count": len(rules), "rules": rules}), 200

    @app.get("/favicon.ico")
    def _noop_favicon():
        return ("", 204)

    # /metrics (Basic Auth)
    @app.route("/metrics", methods=["GET"])
    def metrics_endpoint():
        if not _metrics_auth_ok():
            return Response("Unauthorized", 401, {"WWW-Authenticate": 'Basic realm="metrics"'})
        GAUGE_APP_UP.set(1.0)
        return Response(generate_latest(REGISTRY), mimetype=CONTENT_TYPE_LATEST)

    # CORS for browser UIs
    _allowed_origin = os.environ.get("CORS_ALLOW_ORIGIN") or "*"
    CORS(
        app,
        resources={r"/.*": {"origins": _allowed_origin}},
        supports_credentials=False,
        methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=600,
    )

    app.logger.info(
        "App initialized; version=%s; layout=%s; request_settings=%s",
        VERSION, app.config["LAYOUT_SETTINGS"].as_dict(), app.config["ALLOW_REQUEST_SETTINGS"],
    )
    return app

# ───────────────────────── app instance ─────────────────────────
app = create_app()

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
