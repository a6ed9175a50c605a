# astrowheel/api/routes.py
"""
Chart wheel API routes
- Layout     (de-collided display longitudes)
- Houses     (cusp table + house membership by original longitude)
- Wheel      (renderer geometry: glyph / label / cusp-line points)
- Config     (active layout thresholds)

Notes:
- Handlers are thin: parse → call the pure engine → serialize.
- House numbers are always computed from ORIGINAL longitudes; display
  longitudes are returned purely as rendering hints.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from flask import Blueprint, current_app, jsonify, request

from astrowheel.version import VERSION
from astrowheel.core.houses import HouseTable
from astrowheel.core.layout import BodyPosition, LayoutSettings, adjust_with_report
from astrowheel.core.validators import LayoutPayload, ValidationError, parse_layout_payload
from astrowheel.core.wheel import WheelChart, layout_wheel
from astrowheel.utils.metrics import MET_VALIDATION, record_layout

log = logging.getLogger(__name__)
api = Blueprint("api", __name__)


# ───────────────────────── helpers ─────────────────────────
def _json_error(code: str, details: Any = None, http: int = 400):
    out: Dict[str, Any] = {"ok": False, "error": code}
    if details is not None:
        out["details"] = details
    return jsonify(out), http


def _base_settings() -> LayoutSettings:
    return current_app.config.get("LAYOUT_SETTINGS") or LayoutSettings()


def _parsed() -> LayoutPayload:
    body = request.get_json(force=True, silent=True)
    if body is None:
        raise ValidationError("request body must be JSON")
    return parse_layout_payload(
        body,
        base=_base_settings(),
        allow_settings=bool(current_app.config.get("ALLOW_REQUEST_SETTINGS", True)),
        default_radius=float(current_app.config.get("WHEEL_RADIUS", 1.0)),
    )


def _bodies(p: LayoutPayload) -> List[BodyPosition]:
    return [BodyPosition(i, lon) for i, lon in enumerate(p["longitudes"])]


@api.errorhandler(ValidationError)
def _validation_failed(e: ValidationError):
    log.info("validation failed at %s: %s", request.path, e)
    MET_VALIDATION.labels(route=request.path).inc()
    return _json_error("validation_error", e.errors(), 400)


# ───────────────────────── layout ─────────────────────────
@api.post("/api/layout")
def layout():
    p = _parsed()
    table = HouseTable.from_longitudes(p["cusps"])
    report = adjust_with_report(_bodies(p), table, p["settings"])
    record_layout(report)

    bodies = [
        {
            "index": pos.index,
            "name": p["names"][pos.index],
            "longitude": pos.original,
            "display_longitude": pos.longitude,
            "house": table.house_of(pos.original),
            "retrograde": p["retrograde"][pos.index],
            "moved": pos.moved,
        }
        for pos in report.positions
    ]
    pairs = [
        {
            "lower": r.pair.lower,
            "upper": r.pair.upper,
            "separation": r.pair.separation,
            "house": r.house,
            "outcome": r.outcome,
        }
        for r in report.resolutions
    ]
    return jsonify({
        "ok": True,
        "adjusted": [pos.longitude for pos in report.positions],
        "bodies": bodies,
        "pairs": pairs,
        "settings": p["settings"].as_dict(),
    }), 200


# ───────────────────────── houses ─────────────────────────
@api.post("/api/houses")
def houses():
    p = _parsed()
    table = HouseTable.from_longitudes(p["cusps"])
    occupants = table.occupants(p["longitudes"])
    return jsonify({
        "ok": True,
        "houses": table.as_dicts(),
        "occupants": {str(n): idx for n, idx in occupants.items()},
        "bodies": [
            {"index": i, "name": p["names"][i], "house": table.house_of(lon)}
            for i, lon in enumerate(p["longitudes"])
        ],
    }), 200


# ───────────────────────── wheel ─────────────────────────
@api.post("/api/wheel")
def wheel():
    p = _parsed()
    chart = WheelChart.from_longitudes(
        p["longitudes"], p["cusps"], retrograde=p["retrograde"], names=p["names"]
    )
    result = layout_wheel(
        chart,
        radius=p["radius"],
        symbol_size=p["symbol_size"],
        settings=p["settings"],
    )
    record_layout(result.report)
    return jsonify({"ok": True, **result.as_dict()}), 200


# ───────────────────────── config ─────────────────────────
@api.get("/api/config")
def config():
    return jsonify({
        "ok": True,
        "version": VERSION,
        "layout": _base_settings().as_dict(),
        "wheel": {"radius": float(current_app.config.get("WHEEL_RADIUS", 1.0))},
        "allow_request_settings": bool(current_app.config.get("ALLOW_REQUEST_SETTINGS", True)),
    }), 200
