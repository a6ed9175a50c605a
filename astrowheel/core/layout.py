# astrowheel/core/layout.py
from __future__ import annotations

"""
Angular de-collision layout for glyphs placed around a chart wheel.

Pipeline (pure, stateless, deterministic):
  1) sort bodies by longitude (ties → canonical index)
  2) detect adjacency along the sorted chain (no last→first wrap)
  3) resolve pairs in detection order; each step sees earlier moves
  4) every offset goes through `rollover`
  5) return adjusted positions in canonical index order

Houses are hard walls: a pair is only moved when both bodies sit in the same
house, and the move is chosen to keep both inside that house.

Known limitations (kept on purpose, callers rely on them being stable):
  • The chain scan never pairs the longitude-maximum body with the minimum one,
    even though they are neighbours on the circle across 360°/0°.
  • Clusters of three or more bodies are resolved pairwise and are not
    guaranteed to end up fully separated. Pairwise clamps can also reorder
    members of such a cluster: 60.5/61/62 in a 60-90 house comes out as
    62.25/63.75/62.75, so the last two bodies swap.
  • A boundary clamp shifts the pair by a and 2a, which leaves it
    (delta + a) apart instead of min_distance.
"""

from dataclasses import dataclass, field, asdict
from functools import reduce
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union
import logging
import math

from astrowheel.core.constants import (
    COLLISION_GAP_DEG,
    MIN_DISTANCE_DEG,
    SEAM_HIGH_OFFSET_DEG,
    SEAM_LOW_OFFSET_DEG,
    SEAM_NUDGE_DEG,
    SEAM_SNAP_RADIUS_DEG,
)
from astrowheel.core.houses import CuspBoundary, HouseInterval, HouseTable
from astrowheel.core.longitude import Longitude, rollover

log = logging.getLogger(__name__)

__all__ = [
    "BodyPosition",
    "AdjustedPosition",
    "AdjacencyPair",
    "LayoutSettings",
    "PairResolution",
    "LayoutReport",
    "sort_by_longitude",
    "detect_adjacency",
    "resolve_pair",
    "adjust",
    "adjust_with_report",
    "adjust_longitudes",
]

# ─────────────────────────────────────────────────────────────────────────────
# Types
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class BodyPosition:
    index: int        # canonical body index 0..N-1
    longitude: float  # degrees [0, 360)


@dataclass(frozen=True)
class AdjustedPosition:
    index: int
    longitude: float  # display longitude (rendering hint only)
    original: float   # untouched input longitude

    @property
    def moved(self) -> bool:
        return self.longitude != self.original


@dataclass(frozen=True)
class AdjacencyPair:
    lower: int         # body index earlier in the longitude-sorted chain
    upper: int         # body index right after it
    separation: float  # |Δlongitude| at detection time


@dataclass(frozen=True)
class LayoutSettings:
    gap: float = COLLISION_GAP_DEG
    min_distance: float = MIN_DISTANCE_DEG
    seam_snap_radius: float = SEAM_SNAP_RADIUS_DEG
    seam_low_offset: float = SEAM_LOW_OFFSET_DEG
    seam_high_offset: float = SEAM_HIGH_OFFSET_DEG
    seam_nudge: float = SEAM_NUDGE_DEG

    def __post_init__(self) -> None:
        for name, value in asdict(self).items():
            ok = isinstance(value, (int, float)) and not isinstance(value, bool)
            if not (ok and math.isfinite(value) and value > 0.0):
                raise ValueError(f"layout setting '{name}' must be a positive finite number, got {value!r}")
            object.__setattr__(self, name, float(value))
        if self.min_distance < self.gap:
            # a smaller target would pull colliding pairs closer together
            raise ValueError(f"min_distance ({self.min_distance}) must be >= gap ({self.gap})")

    @classmethod
    def from_config(cls, cfg: Optional[Mapping[str, Any]]) -> "LayoutSettings":
        """Build from a loaded config; reads the `layout:` section, ignores unknown keys."""
        section = (cfg or {}).get("layout") or {}
        known = {k: section[k] for k in cls.__dataclass_fields__ if k in section}
        return cls(**known)

    def replace(self, **overrides: float) -> "LayoutSettings":
        return LayoutSettings(**{**asdict(self), **overrides})

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class PairResolution:
    pair: AdjacencyPair
    house: Optional[int]  # shared house, None when the bodies straddle a cusp
    outcome: str          # see OUTCOMES
    before: Tuple[float, float]
    after: Tuple[float, float]


OUTCOMES: Tuple[str, ...] = (
    "unchanged", "cross_house", "spread", "shift_back", "shift_forward",
    "best_effort", "seam_snap", "seam_nudge",
)


@dataclass(frozen=True)
class LayoutReport:
    positions: Tuple[AdjustedPosition, ...]
    resolutions: Tuple[PairResolution, ...] = field(default_factory=tuple)

    @property
    def pairs(self) -> Tuple[AdjacencyPair, ...]:
        return tuple(r.pair for r in self.resolutions)

    def outcome_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for r in self.resolutions:
            counts[r.outcome] = counts.get(r.outcome, 0) + 1
        return counts


DEFAULT_SETTINGS = LayoutSettings()

# ─────────────────────────────────────────────────────────────────────────────
# Steps 1–2: ordering & adjacency
# ─────────────────────────────────────────────────────────────────────────────

def sort_by_longitude(bodies: Sequence[BodyPosition]) -> List[Tuple[int, float]]:
    """(index, longitude) ascending by longitude; ties keep canonical index order."""
    return sorted(((b.index, float(b.longitude)) for b in bodies), key=lambda p: (p[1], p[0]))


def detect_adjacency(ordered: Sequence[Tuple[int, float]], gap: float = COLLISION_GAP_DEG) -> List[AdjacencyPair]:
    """Consecutive chain neighbours closer than `gap` (last/first are not compared)."""
    pairs: List[AdjacencyPair] = []
    for (i, lon_i), (j, lon_j) in zip(ordered, ordered[1:]):
        delta = abs(lon_j - lon_i)
        if delta < gap:
            pairs.append(AdjacencyPair(lower=i, upper=j, separation=delta))
    return pairs

# ─────────────────────────────────────────────────────────────────────────────
# Step 3: pair resolution
# ─────────────────────────────────────────────────────────────────────────────

def _house_bounds(house: HouseInterval, lower: float) -> Tuple[float, float]:
    """House interval in unwrapped coordinates around `lower`."""
    if house.wraps:
        # lower is in the head [0, end): pull the start below zero
        return house.start - 360.0, house.end
    return house.start, house.end


def _conventional(lower: float, upper: float, house: HouseInterval, settings: LayoutSettings) -> Tuple[Tuple[float, float], str]:
    delta = abs(upper - lower)
    if delta >= settings.gap:
        return (lower, upper), "unchanged"

    a = (settings.min_distance - delta) / 2.0
    start, end = _house_bounds(house, lower)
    variants = (
        ("spread", -a, a),
        ("shift_back", -2.0 * a, -a),      # whole pair moved back, away from the end cusp
        ("shift_forward", a, 2.0 * a),     # whole pair moved forward, away from the start cusp
    )

    def margin(d_lo: float, d_hi: float) -> float:
        lo, hi = lower + d_lo, upper + d_hi
        return min(min(lo, hi) - start, end - max(lo, hi))

    def fits(d_lo: float, d_hi: float) -> bool:
        lo, hi = lower + d_lo, upper + d_hi
        return start <= min(lo, hi) and max(lo, hi) < end

    chosen = next((v for v in variants if fits(v[1], v[2])), None)
    outcome = chosen[0] if chosen else "best_effort"
    if chosen is None:
        chosen = max(variants, key=lambda v: margin(v[1], v[2]))

    _, d_lo, d_hi = chosen
    return (rollover(lower, d_lo), rollover(upper, d_hi)), outcome


def _seam(lower: float, upper: float, house: HouseInterval, settings: LayoutSettings) -> Tuple[Tuple[float, float], str]:
    start = Longitude(house.start)
    nearest = min(start.forward_distance(lower), start.forward_distance(upper))
    if nearest < settings.seam_snap_radius:
        return (
            rollover(house.start, settings.seam_low_offset),
            rollover(house.start, settings.seam_high_offset),
        ), "seam_snap"
    return (
        rollover(lower, -settings.seam_nudge),
        rollover(upper, settings.seam_nudge),
    ), "seam_nudge"


def _resolve(lower: float, upper: float, house: HouseInterval, settings: LayoutSettings) -> Tuple[Tuple[float, float], str]:
    if house.in_tail(lower):
        return _seam(lower, upper, house, settings)
    return _conventional(lower, upper, house, settings)


def resolve_pair(
    lower: float,
    upper: float,
    house: HouseInterval,
    settings: Optional[LayoutSettings] = None,
) -> Tuple[float, float]:
    """
    New (lower, upper) longitudes for two bodies that share `house`.

    `lower` is the body that came first in the longitude-sorted chain.
    Non-wrapping houses (and the head of a wrapping one) get the symmetric
    MIN_DISTANCE spread; if that crosses the end cusp both bodies move back
    (by 2a and a), if it crosses the start cusp both move forward (a, 2a).
    A lower body in the tail of a wrapping house snaps to fixed offsets from
    the start cusp when either body is close to it, otherwise both are nudged.
    """
    return _resolve(float(lower), float(upper), house, settings or DEFAULT_SETTINGS)[0]

# ─────────────────────────────────────────────────────────────────────────────
# Fold + re-sequencing
# ─────────────────────────────────────────────────────────────────────────────

_State = Tuple[Dict[int, float], Tuple[PairResolution, ...]]


def _as_table(cusps: Union[HouseTable, Sequence[CuspBoundary], Sequence[float]]) -> HouseTable:
    if isinstance(cusps, HouseTable):
        return cusps
    items = list(cusps)
    if items and isinstance(items[0], CuspBoundary):
        return HouseTable(items)  # type: ignore[arg-type]
    return HouseTable.from_longitudes(items)  # type: ignore[arg-type]


def _step(table: HouseTable, settings: LayoutSettings):
    def apply(state: _State, pair: AdjacencyPair) -> _State:
        working, done = state
        lo, hi = working[pair.lower], working[pair.upper]
        h_lo, h_hi = table.cusp_of(lo), table.cusp_of(hi)

        if h_lo.number != h_hi.number:
            log.debug("pair %d/%d straddles houses %d/%d; left as is",
                      pair.lower, pair.upper, h_lo.number, h_hi.number)
            res = PairResolution(pair, None, "cross_house", (lo, hi), (lo, hi))
            return working, done + (res,)

        (new_lo, new_hi), outcome = _resolve(lo, hi, h_lo, settings)
        log.debug("pair %d/%d in house %d: %s (%.4f, %.4f) -> (%.4f, %.4f)",
                  pair.lower, pair.upper, h_lo.number, outcome, lo, hi, new_lo, new_hi)
        res = PairResolution(pair, h_lo.number, outcome, (lo, hi), (new_lo, new_hi))
        return {**working, pair.lower: new_lo, pair.upper: new_hi}, done + (res,)

    return apply


def adjust_with_report(
    bodies: Sequence[BodyPosition],
    cusps: Union[HouseTable, Sequence[CuspBoundary], Sequence[float]],
    settings: Optional[LayoutSettings] = None,
) -> LayoutReport:
    """`adjust` plus the per-pair resolution trail."""
    settings = settings or DEFAULT_SETTINGS
    table = _as_table(cusps)

    if log.isEnabledFor(logging.DEBUG):
        for c in table.cusps:
            log.debug("cusp %d starting at %.3f", c.number, c.longitude)

    ordered = sort_by_longitude(bodies)
    pairs = detect_adjacency(ordered, settings.gap)
    working, resolutions = reduce(_step(table, settings), pairs, (dict(ordered), ()))

    originals = {b.index: float(b.longitude) for b in bodies}
    positions = tuple(
        AdjustedPosition(index=idx, longitude=working[idx], original=originals[idx])
        for idx in sorted(working)
    )
    return LayoutReport(positions=positions, resolutions=resolutions)


def adjust(
    bodies: Sequence[BodyPosition],
    cusps: Union[HouseTable, Sequence[CuspBoundary], Sequence[float]],
    settings: Optional[LayoutSettings] = None,
) -> List[AdjustedPosition]:
    """Display longitudes for `bodies`, returned in canonical index order."""
    return list(adjust_with_report(bodies, cusps, settings).positions)


def adjust_longitudes(
    longitudes: Sequence[float],
    cusp_longitudes: Sequence[float],
    settings: Optional[LayoutSettings] = None,
) -> List[float]:
    """Array contract: N raw longitudes (canonical order) + 12 cusps → N display longitudes."""
    bodies = [BodyPosition(i, float(lon)) for i, lon in enumerate(longitudes)]
    return [p.longitude for p in adjust(bodies, cusp_longitudes, settings)]
