"""Colour parsing, darkening and per-radar colour assignment.

Colours are plain strings: CSS-style 'hsl(h,s%,l%)' or anything
matplotlib understands (hex, named colours). Nothing here mutates a
colour in place; every transform returns a new string.
"""
import re
import colorsys
import logging
from typing import Dict, Optional, Tuple

from matplotlib import colors as mcolors

from ..data_contracts import Radar
from .generator import ColourGenerator

logger = logging.getLogger(__name__)

DEFAULT_RING_BASE = 'hsl(0,0%,85%)'
DEFAULT_RING_STEP = 0.1

_HSL_RE = re.compile(
    r'^\s*hsl\(\s*([-+\d.eE]+)\s*,\s*([\d.]+)%\s*,\s*([\d.]+)%\s*\)\s*$')


def format_hsl(h: float, s: float, l: float) -> str:
    return f"hsl({h:g},{s:g}%,{l:g}%)"


def to_hsl(colour: str) -> Tuple[float, float, float]:
    """Return (hue_deg, saturation_pct, lightness_pct)."""
    m = _HSL_RE.match(colour)
    if m:
        h, s, l = (float(g) for g in m.groups())
        return h % 360.0, s, l
    try:
        r, g, b = mcolors.to_rgb(colour)
    except ValueError as e:
        raise ValueError(f"Unrecognised colour: {colour!r}") from e
    h, l, s = colorsys.rgb_to_hls(r, g, b)
    return h * 360.0, s * 100.0, l * 100.0


def parse_colour(colour: str) -> Tuple[float, float, float]:
    """Return (r, g, b) in 0..1 for an hsl() string or a matplotlib colour."""
    m = _HSL_RE.match(colour)
    if m:
        h, s, l = (float(g) for g in m.groups())
        return colorsys.hls_to_rgb((h % 360.0) / 360.0, l / 100.0, s / 100.0)
    try:
        return mcolors.to_rgb(colour)
    except ValueError as e:
        raise ValueError(f"Unrecognised colour: {colour!r}") from e


def darken(colour: str, amount: float) -> str:
    """Return a new colour with lightness scaled by (1 - amount)."""
    amount = min(max(amount, 0.0), 1.0)
    h, s, l = to_hsl(colour)
    return format_hsl(round(h, 4), round(s, 4), round(l * (1.0 - amount), 4))


def ring_colours(radar: Radar,
                 base: str = DEFAULT_RING_BASE,
                 step: float = DEFAULT_RING_STEP,
                 overrides: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Map ring name -> colour; the innermost ring is the darkest."""
    overrides = overrides or {}
    if not radar.known_rings:
        return {}
    max_order = max(r.order for r in radar.known_rings)
    result = {}
    for ring in radar.known_rings:
        if ring.name in overrides:
            result[ring.name] = overrides[ring.name]
        else:
            result[ring.name] = darken(base, step * (max_order - ring.order))
    return result


def assign_colours(radar: Radar,
                   generator: Optional[ColourGenerator] = None,
                   sector_overrides: Optional[Dict[str, str]] = None,
                   ring_overrides: Optional[Dict[str, str]] = None,
                   ring_base: str = DEFAULT_RING_BASE,
                   ring_step: float = DEFAULT_RING_STEP):
    """Colour every sector and ring of the radar.

    Sector overrides are keyed by sector id; sectors without one take the
    next generated colour, in sector order.
    """
    sector_overrides = sector_overrides or {}
    if generator is None:
        generator = ColourGenerator()

    for sector in radar.sectors:
        if sector.id in sector_overrides:
            sector.colour = sector_overrides[sector.id]
        else:
            sector.colour = generator.next_colour()

    unused = set(sector_overrides) - {s.id for s in radar.sectors}
    if unused:
        logger.warning(f"Colour overrides for unknown sector ids: {sorted(unused)}")

    by_name = ring_colours(radar, ring_base, ring_step, ring_overrides)
    for ring in radar.known_rings:
        ring.colour = by_name[ring.name]
