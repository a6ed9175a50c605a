# astrowheel/core/longitude.py
from __future__ import annotations

"""
Circular coordinate arithmetic for ecliptic longitudes.

Every offset applied to a longitude goes through `rollover` (or `Longitude.add`)
so the 0°/360° seam is handled in exactly one place. Raw float subtraction on
longitudes is reserved for *distances*, never for positions.
"""

from dataclasses import dataclass
from typing import Tuple
import math

from astrowheel.core.constants import FULL_CIRCLE_DEG, SIGN_SPAN_DEG, ZODIAC_SIGNS

__all__ = ["norm360", "rollover", "Longitude"]


def norm360(x: float) -> float:
    """Fold any finite degree value into [0, 360)."""
    v = float(x) % FULL_CIRCLE_DEG
    # absolute tolerance only: 359.9999999 stays a house-12 longitude
    if math.isclose(v, 0.0, rel_tol=0.0, abs_tol=1e-12) or math.isclose(v, FULL_CIRCLE_DEG, rel_tol=0.0, abs_tol=1e-12):
        return 0.0
    return v


def rollover(value: float, delta: float) -> float:
    """
    Add `delta` to `value` with a single full-circle correction.

    Negative results gain 360, results ≥ 360 lose 360. Offsets used by the
    layout engine are a few degrees, so one correction is always enough; larger
    offsets are folded with `norm360`.
    """
    v = float(value) + float(delta)
    if v < 0.0:
        v += FULL_CIRCLE_DEG
        # -1e-17 + 360 rounds to 360.0
        if v >= FULL_CIRCLE_DEG:
            return 0.0
    elif v >= FULL_CIRCLE_DEG:
        v -= FULL_CIRCLE_DEG
    if not (0.0 <= v < FULL_CIRCLE_DEG):
        return norm360(v)
    return v


@dataclass(frozen=True, order=True)
class Longitude:
    """Ecliptic longitude in degrees, always normalized to [0, 360)."""

    degrees: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "degrees", norm360(self.degrees))

    def __float__(self) -> float:
        return self.degrees

    def add(self, delta: float) -> "Longitude":
        return Longitude(rollover(self.degrees, delta))

    def forward_distance(self, other: "Longitude | float") -> float:
        """Arc travelled going forward (increasing longitude) from self to other, [0, 360)."""
        return norm360(float(other) - self.degrees)

    @property
    def sign_index(self) -> int:
        return int(self.degrees // SIGN_SPAN_DEG) % len(ZODIAC_SIGNS)

    @property
    def sign(self) -> str:
        return ZODIAC_SIGNS[self.sign_index]

    @property
    def degree_in_sign(self) -> int:
        return int(self.degrees - self.sign_index * SIGN_SPAN_DEG)

    @property
    def minute(self) -> int:
        # truncated arcminutes, the way the wheel prints them
        frac = self.degrees - self.sign_index * SIGN_SPAN_DEG - self.degree_in_sign
        return min(int(frac * 60.0), 59)

    def split(self) -> Tuple[str, int, int]:
        """(sign, whole degrees within sign, arcminutes)."""
        return self.sign, self.degree_in_sign, self.minute
