# tests/test_validators.py
from __future__ import annotations

import pytest

from astrowheel.core.layout import LayoutSettings
from astrowheel.core.validators import (
    ValidationError,
    parse_bodies,
    parse_cusps,
    parse_layout_payload,
    parse_settings,
)

EQUAL = [30.0 * k for k in range(12)]


def _loc(exc: pytest.ExceptionInfo) -> list:
    return exc.value.errors()[0]["loc"]


# ───────────────────────── bodies ─────────────────────────

def test_bare_numbers_get_canonical_names_and_are_folded() -> None:
    out = parse_bodies([10, 370.0, -1.5])
    assert out["longitudes"] == [10.0, 10.0, 358.5]
    assert out["names"] == ["Sun", "Moon", "Mercury"]
    assert out["retrograde"] == [False, False, False]

def test_object_bodies() -> None:
    out = parse_bodies([
        {"name": "Sun", "longitude": 12.5},
        {"name": "Mercury", "lon": 40.0, "retrograde": "yes"},
        {"longitude": 80.0, "retrograde": False},
    ])
    assert out["names"] == ["Sun", "Mercury", "Mercury"]
    assert out["longitudes"] == [12.5, 40.0, 80.0]
    assert out["retrograde"] == [False, True, False]

def test_names_past_canonical_list() -> None:
    out = parse_bodies([float(k) for k in range(15)])
    assert out["names"][12] == "Chiron"
    assert out["names"][14] == "Body 14"

@pytest.mark.parametrize("bad", [None, [], "10,20", {"a": 1}])
def test_bodies_must_be_non_empty_array(bad) -> None:
    with pytest.raises(ValidationError) as exc:
        parse_bodies(bad)
    assert _loc(exc) == ["bodies"]

@pytest.mark.parametrize("bad", ["abc", None, True, float("nan"), float("inf")])
def test_body_longitude_must_be_finite_number(bad) -> None:
    with pytest.raises(ValidationError) as exc:
        parse_bodies([10.0, bad])
    assert _loc(exc) == ["bodies", 1]

def test_bad_retrograde_flag() -> None:
    with pytest.raises(ValidationError) as exc:
        parse_bodies([{"longitude": 1.0, "retrograde": "maybe"}])
    assert _loc(exc) == ["bodies", 0, "retrograde"]


# ───────────────────────── cusps ─────────────────────────

def test_numeric_cusps_normalized() -> None:
    assert parse_cusps([360.0] + EQUAL[1:]) == [0.0] + EQUAL[1:]

def test_object_cusps_any_order() -> None:
    raw = [{"number": n, "longitude": 30.0 * (n - 1)} for n in range(12, 0, -1)]
    assert parse_cusps(raw) == EQUAL

@pytest.mark.parametrize("count", [0, 11, 13])
def test_wrong_cusp_count(count: int) -> None:
    with pytest.raises(ValidationError) as exc:
        parse_cusps([0.0] * count)
    assert "12" in str(exc.value)

def test_duplicate_cusp_number() -> None:
    raw = [{"number": 1, "longitude": 0.0}] + [{"number": n, "longitude": 30.0 * n} for n in range(1, 12)]
    with pytest.raises(ValidationError) as exc:
        parse_cusps(raw)
    assert _loc(exc) == ["cusps", 1, "number"]

def test_out_of_range_cusp_number() -> None:
    raw = [{"number": n + 1, "longitude": 0.0} for n in range(11)] + [{"number": 13, "longitude": 0.0}]
    with pytest.raises(ValidationError):
        parse_cusps(raw)

def test_mixed_cusps_rejected() -> None:
    with pytest.raises(ValidationError):
        parse_cusps([{"number": 1, "longitude": 0.0}] + EQUAL[1:])

def test_cusps_must_be_array() -> None:
    with pytest.raises(ValidationError):
        parse_cusps("0,30,60")


# ───────────────────────── settings ─────────────────────────

def test_settings_none_returns_base() -> None:
    base = LayoutSettings()
    assert parse_settings(None, base) is base

def test_settings_override() -> None:
    s = parse_settings({"gap": 5, "min_distance": 6}, LayoutSettings())
    assert (s.gap, s.min_distance) == (5.0, 6.0)

def test_unknown_setting_rejected() -> None:
    with pytest.raises(ValidationError) as exc:
        parse_settings({"spacing": 2}, LayoutSettings())
    assert _loc(exc) == ["settings", "spacing"]

@pytest.mark.parametrize("bad", [0, -1, "x", True])
def test_non_positive_setting_rejected(bad) -> None:
    with pytest.raises(ValidationError):
        parse_settings({"gap": bad}, LayoutSettings())

def test_inconsistent_settings_rejected() -> None:
    with pytest.raises(ValidationError) as exc:
        parse_settings({"gap": 5.0}, LayoutSettings())
    assert _loc(exc) == ["settings"]


# ───────────────────────── payload ─────────────────────────

def test_payload_defaults() -> None:
    p = parse_layout_payload({"bodies": [10.0, 12.0], "cusps": EQUAL})
    assert p["longitudes"] == [10.0, 12.0]
    assert p["cusps"] == EQUAL
    assert p["settings"] == LayoutSettings()
    assert p["radius"] == 1.0
    assert p["symbol_size"] is None

def test_payload_longitudes_alias_and_geometry() -> None:
    p = parse_layout_payload(
        {"longitudes": [1.0], "cusps": EQUAL, "radius": 300, "symbol_size": 24},
        default_radius=2.0,
    )
    assert p["longitudes"] == [1.0]
    assert (p["radius"], p["symbol_size"]) == (300.0, 24.0)

def test_payload_default_radius() -> None:
    p = parse_layout_payload({"bodies": [1.0], "cusps": EQUAL}, default_radius=250.0)
    assert p["radius"] == 250.0

def test_payload_must_be_object() -> None:
    with pytest.raises(ValidationError):
        parse_layout_payload([1, 2, 3])

def test_payload_negative_radius() -> None:
    with pytest.raises(ValidationError) as exc:
        parse_layout_payload({"bodies": [1.0], "cusps": EQUAL, "radius": -5})
    assert _loc(exc) == ["radius"]

def test_payload_settings_disabled() -> None:
    body = {"bodies": [1.0], "cusps": EQUAL, "settings": {"gap": 2.0}}
    with pytest.raises(ValidationError) as exc:
        parse_layout_payload(body, allow_settings=False)
    assert _loc(exc) == ["settings"]
    assert parse_layout_payload(body)["settings"].gap == 2.0

def test_validation_error_shapes() -> None:
    assert ValidationError("boom").errors() == [{"loc": [], "msg": "boom", "type": "value_error"}]
    assert str(ValidationError({"loc": ["x"], "msg": "bad", "type": "t"})) == "bad"
    assert isinstance(ValidationError("x"), ValueError)

def test_longitude_just_below_full_circle_is_kept() -> None:
    assert parse_bodies([359.9999999])["longitudes"] == [359.9999999]
