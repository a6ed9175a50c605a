# astrowheel/core/wheel.py
from __future__ import annotations

"""
Wheel geometry for the chart renderer.

Turns a chart (body longitudes, retrograde flags, 12 cusps) into plain
coordinates: where each glyph, its degree/sign/minute text and retrograde
marker go, and where each cusp line and house number label go. Nothing is
drawn here.

Conventions (screen coordinates, y grows downwards):
- The ascendant (house-1 cusp) sits at 9 o'clock and the zodiac runs
  counter-clockwise: angle = 2π − rad(lon − asc) + π, folded into [0, 2π).
- Glyph angles use the layout engine's display longitude; all text and the
  house number come from the ORIGINAL longitude.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Sequence, Tuple
import math

from astrowheel.core.constants import (
    CANONICAL_BODIES,
    RING_DEGREE_FACTOR,
    RING_MINUTE_FACTOR,
    RING_RETROGRADE_FACTOR,
    RING_SIGN_FACTOR,
)
from astrowheel.core.houses import HouseTable
from astrowheel.core.layout import BodyPosition, LayoutReport, LayoutSettings, adjust_with_report
from astrowheel.core.longitude import Longitude

__all__ = [
    "ChartBody",
    "WheelChart",
    "GlyphPlacement",
    "HouseMarker",
    "WheelLayout",
    "chart_angle",
    "polar_point",
    "layout_wheel",
]

Point = Tuple[float, float]

HOUSE_LABEL_FACTOR = 0.375   # house numbers sit between the two inner rings
CUSP_TEXT_FACTOR = 1.07      # cusp degree/minute text just outside the rim
DEFAULT_SYMBOL_FACTOR = 0.1  # glyph size relative to the glyph ring radius


# ─────────────────────────────────────────────────────────────────────────────
# Inputs
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ChartBody:
    name: str
    longitude: float
    retrograde: bool = False


@dataclass(frozen=True)
class WheelChart:
    bodies: Tuple[ChartBody, ...]
    cusps: Tuple[float, ...]  # indexed by house number - 1

    @classmethod
    def from_longitudes(
        cls,
        longitudes: Sequence[float],
        cusps: Sequence[float],
        retrograde: Optional[Sequence[bool]] = None,
        names: Optional[Sequence[str]] = None,
    ) -> "WheelChart":
        names = names or CANONICAL_BODIES
        flags = retrograde if retrograde is not None else [False] * len(longitudes)
        if len(flags) != len(longitudes):
            raise ValueError(
                f"retrograde flags ({len(flags)}) must match longitudes ({len(longitudes)})"
            )
        bodies = tuple(
            ChartBody(
                name=names[i] if i < len(names) else f"Body {i}",
                longitude=float(lon),
                retrograde=bool(flags[i]),
            )
            for i, lon in enumerate(longitudes)
        )
        return cls(bodies=bodies, cusps=tuple(float(c) for c in cusps))


# ─────────────────────────────────────────────────────────────────────────────
# Outputs
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class GlyphPlacement:
    index: int
    name: str
    longitude: float
    display_longitude: float
    house: int
    sign: str
    degree: int
    minute: int
    retrograde: bool
    angle: float                 # radians, screen convention
    glyph: Point
    degree_label: Point
    sign_label: Point
    minute_label: Point
    retrograde_label: Optional[Point] = None

    @property
    def degree_text(self) -> str:
        return f"{self.degree}º"

    @property
    def minute_text(self) -> str:
        return f"{self.minute}'"

    def as_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["degree_text"] = self.degree_text
        d["minute_text"] = self.minute_text
        return d


@dataclass(frozen=True)
class HouseMarker:
    number: int
    cusp: float
    span: float
    sign: str
    degree: int
    minute: int
    angle: float        # cusp line
    label_angle: float  # middle of the house
    line_start: Point
    line_end: Point
    label: Point
    cusp_text: Point

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class WheelLayout:
    ascendant: float
    radius: float
    symbol_size: float
    glyphs: Tuple[GlyphPlacement, ...]
    houses: Tuple[HouseMarker, ...]
    report: LayoutReport

    def as_dict(self) -> Dict[str, Any]:
        return {
            "ascendant": self.ascendant,
            "radius": self.radius,
            "symbol_size": self.symbol_size,
            "glyphs": [g.as_dict() for g in self.glyphs],
            "houses": [h.as_dict() for h in self.houses],
        }


# ─────────────────────────────────────────────────────────────────────────────
# Geometry
# ─────────────────────────────────────────────────────────────────────────────

def chart_angle(longitude: float, ascendant: float) -> float:
    """Screen angle (radians) of a longitude on a wheel with the ascendant at 9 o'clock."""
    theta = 2.0 * math.pi - math.radians(float(longitude) - float(ascendant)) + math.pi
    return theta % (2.0 * math.pi)


def polar_point(angle: float, radius: float, center: Point = (0.0, 0.0)) -> Point:
    return center[0] + radius * math.cos(angle), center[1] + radius * math.sin(angle)


def layout_wheel(
    chart: WheelChart,
    *,
    radius: float = 1.0,
    symbol_size: Optional[float] = None,
    center: Point = (0.0, 0.0),
    settings: Optional[LayoutSettings] = None,
) -> WheelLayout:
    """Run the de-collision layout and place every glyph, label and cusp line."""
    table = HouseTable.from_longitudes(chart.cusps)
    asc = table.ascendant
    size = symbol_size if symbol_size is not None else radius * DEFAULT_SYMBOL_FACTOR

    report = adjust_with_report(
        [BodyPosition(i, b.longitude) for i, b in enumerate(chart.bodies)],
        table,
        settings,
    )

    glyphs: List[GlyphPlacement] = []
    for pos, body in zip(report.positions, chart.bodies):
        sign, degree, minute = Longitude(body.longitude).split()
        angle = chart_angle(pos.longitude, asc)

        def ring(factor: float) -> Point:
            return polar_point(angle, radius - size * factor, center)

        glyphs.append(GlyphPlacement(
            index=pos.index,
            name=body.name,
            longitude=body.longitude,
            display_longitude=pos.longitude,
            house=table.house_of(body.longitude),
            sign=sign,
            degree=degree,
            minute=minute,
            retrograde=body.retrograde,
            angle=angle,
            glyph=polar_point(angle, radius, center),
            degree_label=ring(RING_DEGREE_FACTOR),
            sign_label=ring(RING_SIGN_FACTOR),
            minute_label=ring(RING_MINUTE_FACTOR),
            retrograde_label=ring(RING_RETROGRADE_FACTOR) if body.retrograde else None,
        ))

    houses: List[HouseMarker] = []
    for house, span in zip(table, table.spans()):
        sign, degree, minute = Longitude(house.start).split()
        angle = chart_angle(house.start, asc)
        label_angle = chart_angle(house.midpoint, asc)
        houses.append(HouseMarker(
            number=house.number,
            cusp=house.start,
            span=span,
            sign=sign,
            degree=degree,
            minute=minute,
            angle=angle,
            label_angle=label_angle,
            line_start=polar_point(angle, radius * HOUSE_LABEL_FACTOR, center),
            line_end=polar_point(angle, radius, center),
            label=polar_point(label_angle, radius * HOUSE_LABEL_FACTOR, center),
            cusp_text=polar_point(angle, radius * CUSP_TEXT_FACTOR, center),
        ))

    return WheelLayout(
        ascendant=asc,
        radius=float(radius),
        symbol_size=float(size),
        glyphs=tuple(glyphs),
        houses=tuple(houses),
        report=report,
    )
