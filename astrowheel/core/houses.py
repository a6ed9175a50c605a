# astrowheel/core/houses.py
from __future__ import annotations

"""
House-cusp table and the "cusp of longitude" lookup.

What this module guarantees:
- Houses are taken in their own sequence (1..12), not sorted by longitude.
- House k spans cusp[k] → cusp[k+1], with house 12 closing on cusp 1.
- A house whose start cusp is numerically greater than its end cusp spans the
  360°/0° seam; `HouseInterval.contains` is the single place that branches on it.
- Lookups on ORIGINAL longitudes give the astrologically meaningful house;
  adjusted display longitudes are only ever looked up by the layout engine.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Sequence, Tuple
import logging

from astrowheel.core.constants import FULL_CIRCLE_DEG, HOUSE_COUNT
from astrowheel.core.longitude import Longitude, norm360

log = logging.getLogger(__name__)

__all__ = ["CuspBoundary", "HouseInterval", "HouseTable"]


@dataclass(frozen=True)
class CuspBoundary:
    number: int       # house number 1..12
    longitude: float  # degrees [0, 360)


@dataclass(frozen=True)
class HouseInterval:
    number: int
    start: float
    end: float

    @property
    def wraps(self) -> bool:
        return self.start > self.end

    def contains(self, longitude: float) -> bool:
        lon = float(longitude)
        if self.wraps:
            return lon >= self.start or lon < self.end
        return self.start <= lon < self.end

    def in_tail(self, longitude: float) -> bool:
        """True when the house wraps and `longitude` sits in [start, 360)."""
        return self.wraps and self.start <= float(longitude) < FULL_CIRCLE_DEG

    @property
    def span(self) -> float:
        return norm360(self.end - self.start)

    @property
    def midpoint(self) -> float:
        return Longitude(self.start).add(self.span / 2.0).degrees

    def as_dict(self) -> Dict[str, object]:
        return {
            "number": self.number,
            "start": self.start,
            "end": self.end,
            "wraps": self.wraps,
            "span": self.span,
        }


class HouseTable:
    """Twelve house intervals built from cusps ordered by house number."""

    def __init__(self, cusps: Iterable[CuspBoundary]) -> None:
        ordered = sorted(cusps, key=lambda c: c.number)
        if len(ordered) != HOUSE_COUNT:
            raise ValueError(f"expected {HOUSE_COUNT} house cusps, got {len(ordered)}")
        numbers = [c.number for c in ordered]
        if numbers != list(range(1, HOUSE_COUNT + 1)):
            raise ValueError(f"cusp numbers must be 1..{HOUSE_COUNT}, got {numbers}")

        self.cusps: Tuple[CuspBoundary, ...] = tuple(
            CuspBoundary(c.number, norm360(c.longitude)) for c in ordered
        )
        self.intervals: Tuple[HouseInterval, ...] = tuple(
            HouseInterval(
                number=c.number,
                start=c.longitude,
                end=self.cusps[i + 1 if i + 1 < HOUSE_COUNT else 0].longitude,
            )
            for i, c in enumerate(self.cusps)
        )

    @classmethod
    def from_longitudes(cls, longitudes: Sequence[float]) -> "HouseTable":
        """Cusp longitudes indexed by house number - 1."""
        return cls(CuspBoundary(i + 1, float(lon)) for i, lon in enumerate(longitudes))

    def __iter__(self) -> Iterator[HouseInterval]:
        return iter(self.intervals)

    def __len__(self) -> int:
        return len(self.intervals)

    @property
    def ascendant(self) -> float:
        return self.cusps[0].longitude

    def interval(self, number: int) -> HouseInterval:
        return self.intervals[number - 1]

    def cusp_of(self, longitude: float) -> HouseInterval:
        """House interval containing `longitude`."""
        lon = norm360(longitude)
        for house in self.intervals:
            if house.contains(lon):
                return house
        # Non-monotonic cusps can leave gaps: fall back to the nearest cusp behind.
        fallback = min(self.intervals, key=lambda h: Longitude(h.start).forward_distance(lon))
        log.debug("no house contains %.6f; using nearest preceding cusp %d", lon, fallback.number)
        return fallback

    def house_of(self, longitude: float) -> int:
        return self.cusp_of(longitude).number

    def spans(self) -> List[float]:
        return [h.span for h in self.intervals]

    def occupants(self, longitudes: Sequence[float]) -> Dict[int, List[int]]:
        """House number → body indices (by ORIGINAL longitude), every house present."""
        out: Dict[int, List[int]] = {h.number: [] for h in self.intervals}
        for index, lon in enumerate(longitudes):
            out[self.house_of(lon)].append(index)
        return out

    def as_dicts(self) -> List[Dict[str, object]]:
        return [h.as_dict() for h in self.intervals]
