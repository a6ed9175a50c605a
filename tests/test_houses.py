# tests/test_houses.py
from __future__ import annotations

import pytest

from astrowheel.core.houses import CuspBoundary, HouseInterval, HouseTable

# Placidus-like, unequal; house 9 spans the 360/0 seam (332.0 → 2.3)
UNEQUAL = [100.5, 125.2, 152.0, 182.3, 215.9, 250.1, 280.5, 305.2, 332.0, 2.3, 35.9, 70.1]


def _equal(start: float = 0.0) -> HouseTable:
    return HouseTable.from_longitudes([(start + 30.0 * k) % 360.0 for k in range(12)])


def test_equal_houses_from_zero() -> None:
    t = _equal()
    assert t.house_of(0.0) == 1
    assert t.house_of(29.999) == 1
    assert t.house_of(30.0) == 2
    assert t.house_of(359.0) == 12
    assert t.interval(12).wraps
    assert not t.interval(1).wraps

def test_house_one_spanning_seam() -> None:
    t = _equal(355.0)
    h1 = t.interval(1)
    assert (h1.start, h1.end, h1.wraps) == (355.0, 25.0, True)
    assert t.house_of(357.0) == 1
    assert t.house_of(1.0) == 1
    assert t.house_of(25.0) == 2
    assert t.ascendant == 355.0

def test_unequal_cusps_house_order_not_longitude_order() -> None:
    t = HouseTable.from_longitudes(UNEQUAL)
    assert t.house_of(359.0) == 9
    assert t.house_of(1.0) == 9
    assert t.house_of(2.3) == 10
    assert t.house_of(100.5) == 1
    assert t.house_of(99.0) == 12
    assert sum(t.spans()) == pytest.approx(360.0)

def test_cusps_accepted_in_any_order() -> None:
    cusps = [CuspBoundary(n, lon) for n, lon in zip(range(12, 0, -1), reversed(UNEQUAL))]
    t = HouseTable(cusps)
    assert [c.number for c in t.cusps] == list(range(1, 13))
    assert t.interval(1).start == 100.5

def test_interval_contains_and_tail() -> None:
    h = HouseInterval(12, 340.0, 10.0)
    assert h.contains(340.0)
    assert h.contains(359.9)
    assert h.contains(0.0)
    assert not h.contains(10.0)
    assert h.in_tail(345.0)
    assert not h.in_tail(5.0)
    assert h.span == pytest.approx(30.0)
    assert h.midpoint == pytest.approx(355.0)

def test_midpoint_on_seam_is_zero() -> None:
    assert HouseInterval(12, 350.0, 10.0).midpoint == 0.0

def test_non_wrapping_interval_never_in_tail() -> None:
    h = HouseInterval(3, 60.0, 90.0)
    assert not h.in_tail(75.0)
    assert h.contains(60.0) and not h.contains(90.0)

def test_degenerate_cusps_fall_back_to_preceding_cusp() -> None:
    t = HouseTable.from_longitudes([100.0] * 12)
    assert t.house_of(50.0) == 1

def test_occupants_lists_every_house() -> None:
    t = _equal()
    occ = t.occupants([10.0, 12.0, 95.0, 359.0])
    assert occ[1] == [0, 1]
    assert occ[4] == [2]
    assert occ[12] == [3]
    assert occ[7] == []
    assert sorted(occ) == list(range(1, 13))

def test_wrong_cusp_count_rejected() -> None:
    with pytest.raises(ValueError):
        HouseTable.from_longitudes([0.0] * 11)

def test_duplicate_house_numbers_rejected() -> None:
    cusps = [CuspBoundary(1, 0.0)] + [CuspBoundary(n, 30.0 * n) for n in range(1, 12)]
    with pytest.raises(ValueError):
        HouseTable(cusps)

def test_cusp_longitudes_normalized() -> None:
    t = HouseTable.from_longitudes([360.0] + [30.0 * k for k in range(1, 12)])
    assert t.ascendant == 0.0

def test_as_dicts_shape() -> None:
    rows = _equal().as_dicts()
    assert len(rows) == 12
    assert set(rows[0]) == {"number", "start", "end", "wraps", "span"}

def test_longitude_just_below_full_circle_stays_in_last_house() -> None:
    t = _equal()
    assert t.house_of(359.9999999) == 12
    assert t.cusp_of(359.9999999).in_tail(359.9999999)
