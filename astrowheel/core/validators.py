# astrowheel/core/validators.py
from __future__ import annotations

"""
Payload validation for the chart-data boundary.

The layout engine assumes finite, normalized degrees; this module is where
that assumption is enforced. Longitudes are folded into [0, 360) rather than
rejected (360.0 or -1.5 from an upstream provider are legitimate angles).
"""

from typing import Any, Dict, List, Optional, TypedDict, Union
import math

from astrowheel.core.constants import CANONICAL_BODIES, HOUSE_COUNT
from astrowheel.core.layout import LayoutSettings
from astrowheel.core.longitude import norm360

# ───────────────────────── errors ─────────────────────────

class ValidationError(ValueError):
    """Structured validator error (has .errors() → list of {loc, msg, type})."""
    def __init__(self, details: Union[str, Dict[str, Any], List[Dict[str, Any]]]):
        if isinstance(details, str):
            self._details = [{"loc": [], "msg": details, "type": "value_error"}]
            super().__init__(details)
        elif isinstance(details, dict):
            self._details = [details]
            super().__init__(details.get("msg", "validation_error"))
        elif isinstance(details, list) and details:
            self._details = details
            super().__init__(self._details[0]["msg"])
        else:
            self._details = [{"loc": [], "msg": "validation_error", "type": "value_error"}]
            super().__init__("validation_error")

    def errors(self) -> List[Dict[str, Any]]:
        return list(self._details)


# ───────────────────────── helpers ─────────────────────────

def _err(loc: List[Any] | str, msg: str, typ: str = "value_error") -> Dict[str, Any]:
    return {"loc": [loc] if isinstance(loc, str) else loc, "msg": msg, "type": typ}

def _as_float(v: Any) -> Optional[float]:
    if isinstance(v, bool):
        return None
    try:
        if v is None:
            return None
        x = float(v)
        if not math.isfinite(x):
            return None
        return x
    except (TypeError, ValueError):
        return None

def _truthy(val: Any) -> Optional[bool]:
    if isinstance(val, bool):
        return val
    if val is None:
        return None
    s = str(val).strip().lower()
    if s in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if s in {"0", "false", "f", "no", "n", "off"}:
        return False
    return None

def _degrees(v: Any, loc: List[Any]) -> float:
    x = _as_float(v)
    if x is None:
        raise ValidationError(_err(loc, "must be a finite number (degrees)", "type_error.float"))
    return norm360(x)


# ───────────────────────── atomic parsers ─────────────────────────

def parse_bodies(val: Any) -> Dict[str, List[Any]]:
    """
    Accept `[12.5, 40.1, ...]` or `[{"name": "Sun", "longitude": 12.5, "retrograde": false}, ...]`.
    Array order is the canonical body order.
    """
    if not isinstance(val, (list, tuple)) or not val:
        raise ValidationError(_err("bodies", "must be a non-empty array", "type_error.list"))

    names: List[str] = []
    longitudes: List[float] = []
    retro: List[bool] = []
    for i, item in enumerate(val):
        default_name = CANONICAL_BODIES[i] if i < len(CANONICAL_BODIES) else f"Body {i}"
        if isinstance(item, dict):
            raw = item.get("longitude", item.get("lon"))
            longitudes.append(_degrees(raw, ["bodies", i, "longitude"]))
            nm = item.get("name")
            names.append(str(nm).strip() if isinstance(nm, str) and nm.strip() else default_name)
            flag = _truthy(item.get("retrograde"))
            if item.get("retrograde") is not None and flag is None:
                raise ValidationError(_err(["bodies", i, "retrograde"], "must be a boolean", "type_error.bool"))
            retro.append(bool(flag))
        else:
            longitudes.append(_degrees(item, ["bodies", i]))
            names.append(default_name)
            retro.append(False)
    return {"names": names, "longitudes": longitudes, "retrograde": retro}


def parse_cusps(val: Any) -> List[float]:
    """
    Exactly 12 cusps, either numbers in house order or `{"number": n, "longitude": x}`
    objects (any order, numbers 1..12 each once). Returns longitudes by house - 1.
    """
    if not isinstance(val, (list, tuple)):
        raise ValidationError(_err("cusps", "must be an array", "type_error.list"))
    if len(val) != HOUSE_COUNT:
        raise ValidationError(_err("cusps", f"exactly {HOUSE_COUNT} house cusps are required, got {len(val)}"))

    if all(isinstance(c, dict) for c in val):
        by_number: Dict[int, float] = {}
        for i, c in enumerate(val):
            num = c.get("number", c.get("house"))
            if isinstance(num, bool) or not isinstance(num, int) or not (1 <= num <= HOUSE_COUNT):
                raise ValidationError(_err(["cusps", i, "number"], f"must be an integer 1..{HOUSE_COUNT}"))
            if num in by_number:
                raise ValidationError(_err(["cusps", i, "number"], f"duplicate house number {num}"))
            by_number[num] = _degrees(c.get("longitude", c.get("lon")), ["cusps", i, "longitude"])
        return [by_number[n] for n in range(1, HOUSE_COUNT + 1)]

    if any(isinstance(c, dict) for c in val):
        raise ValidationError(_err("cusps", "mix of numbers and objects is not supported", "type_error"))
    return [_degrees(c, ["cusps", i]) for i, c in enumerate(val)]


def parse_settings(val: Any, base: LayoutSettings) -> LayoutSettings:
    """Per-request overrides of the layout thresholds (unknown keys rejected)."""
    if val is None:
        return base
    if not isinstance(val, dict):
        raise ValidationError(_err("settings", "must be an object", "type_error.dict"))
    known = set(base.as_dict())
    overrides: Dict[str, float] = {}
    for key, raw in val.items():
        if key not in known:
            raise ValidationError(_err(["settings", key], f"unknown setting; expected one of {sorted(known)}"))
        x = _as_float(raw)
        if x is None or x <= 0.0:
            raise ValidationError(_err(["settings", key], "must be a positive number", "value_error"))
        overrides[key] = x
    try:
        return base.replace(**overrides)
    except ValueError as e:
        raise ValidationError(_err("settings", str(e))) from e


def _positive(val: Any, key: str, default: Optional[float]) -> Optional[float]:
    if val is None:
        return default
    x = _as_float(val)
    if x is None or x <= 0.0:
        raise ValidationError(_err(key, "must be a positive number", "value_error"))
    return x


# ───────────────────────── layout payload ─────────────────────────

class LayoutPayload(TypedDict):
    names: List[str]
    longitudes: List[float]
    retrograde: List[bool]
    cusps: List[float]
    settings: LayoutSettings
    radius: float
    symbol_size: Optional[float]


def parse_layout_payload(
    body: Any,
    base: Optional[LayoutSettings] = None,
    allow_settings: bool = True,
    default_radius: float = 1.0,
) -> LayoutPayload:
    """Normalize inputs shared by /api/layout, /api/houses and /api/wheel."""
    if not isinstance(body, dict):
        raise ValidationError("payload must be an object")

    base = base or LayoutSettings()
    bodies = parse_bodies(body.get("bodies", body.get("longitudes")))
    cusps = parse_cusps(body.get("cusps"))

    if body.get("settings") is not None and not allow_settings:
        raise ValidationError(_err("settings", "per-request settings are disabled on this server"))
    settings = parse_settings(body.get("settings"), base)

    return {
        "names": bodies["names"],
        "longitudes": bodies["longitudes"],
        "retrograde": bodies["retrograde"],
        "cusps": cusps,
        "settings": settings,
        "radius": _positive(body.get("radius"), "radius", default_radius) or default_radius,
        "symbol_size": _positive(body.get("symbol_size"), "symbol_size", None),
    }


__all__ = [
    "ValidationError",
    "LayoutPayload",
    "parse_bodies",
    "parse_cusps",
    "parse_settings",
    "parse_layout_payload",
]
