# astrowheel/core/constants.py
# -*- coding: utf-8 -*-
"""
Chart wheel core constants

Purpose
-------
Single source of truth for:
- canonical body ordering (input/output array alignment)
- zodiac sign names
- circle / house counts
- layout engine thresholds (collision gap, minimum distance, seam offsets)

Design
------
- Pure-Python, no external dependencies.
- Safe to import from any core module.
- Constants are immutable by convention; per-deployment tuning goes through
  `LayoutSettings` (see layout.py), never by mutating these values.
"""

from __future__ import annotations
from typing import Final, Tuple

__all__ = [
    "FULL_CIRCLE_DEG", "SIGN_SPAN_DEG", "HOUSE_COUNT",
    "CANONICAL_BODIES", "ZODIAC_SIGNS",
    "COLLISION_GAP_DEG", "MIN_DISTANCE_DEG",
    "SEAM_SNAP_RADIUS_DEG", "SEAM_LOW_OFFSET_DEG", "SEAM_HIGH_OFFSET_DEG", "SEAM_NUDGE_DEG",
    "RING_DEGREE_FACTOR", "RING_SIGN_FACTOR", "RING_MINUTE_FACTOR", "RING_RETROGRADE_FACTOR",
]

# ── circle geometry ──────────────────────────────────────────────────────────
FULL_CIRCLE_DEG: Final[float] = 360.0
SIGN_SPAN_DEG: Final[float] = 30.0
HOUSE_COUNT: Final[int] = 12

# ── canonical bodies ─────────────────────────────────────────────────────────
# Index order is the contract with the chart data provider; keep it stable.
CANONICAL_BODIES: Tuple[str, ...] = (
    "Sun", "Moon", "Mercury", "Venus", "Mars",
    "Jupiter", "Saturn", "Uranus", "Neptune", "Pluto",
    "South Node", "North Node", "Chiron",
)

ZODIAC_SIGNS: Tuple[str, ...] = (
    "Aries", "Taurus", "Gemini", "Cancer", "Leo", "Virgo",
    "Libra", "Scorpio", "Sagittarius", "Capricorn", "Aquarius", "Pisces",
)

# ── layout engine ────────────────────────────────────────────────────────────
COLLISION_GAP_DEG: Final[float] = 3.5     # closer than this → glyphs overlap
MIN_DISTANCE_DEG: Final[float] = 4.0      # separation applied when resolving

# Pairs inside a house that spans 360°/0°
SEAM_SNAP_RADIUS_DEG: Final[float] = 4.0  # nearest body this close to the start cusp → snap
SEAM_LOW_OFFSET_DEG: Final[float] = 2.0   # snapped lower body = start + 2°
SEAM_HIGH_OFFSET_DEG: Final[float] = 6.0  # snapped upper body = start + 6°
SEAM_NUDGE_DEG: Final[float] = 2.0        # otherwise ±2°

# ── wheel rings (multiples of the glyph size inward from the glyph radius) ───
RING_DEGREE_FACTOR: Final[float] = 1.0
RING_SIGN_FACTOR: Final[float] = 2.0
RING_MINUTE_FACTOR: Final[float] = 3.0
RING_RETROGRADE_FACTOR: Final[float] = 3.5
