"""Collision-avoiding blip placement.

Rejection sampling inside each blip's sector/ring cell:
  1. draw angle ~ U(inset sector span), distance ~ U(inset annulus)
  2. convert to x = d*sin(a), y = d*cos(a)
  3. accept if every previously placed blip (any sector) is at least
     separation_factor * blip_radius away, otherwise redraw
After max_attempts failed draws the last candidate is kept and the blip
is flagged as saturated. Placement never raises for density reasons.
"""
import numpy as np
import logging
from typing import Dict, Any, Optional, Tuple

from ..data_contracts import Radar, Coordinates
from .geometry import (
    RingBands, placement_angle_bounds, placement_distance_bounds,
    DEFAULT_ANGLE_MARGIN, DEFAULT_INNER_MARGIN, DEFAULT_OUTER_MARGIN,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 10
DEFAULT_SEPARATION_FACTOR = 2.1


def is_clear(x: float, y: float, placed: np.ndarray, min_separation: float) -> bool:
    """True if (x, y) is at least min_separation from every row of placed [M, 2]."""
    if placed.shape[0] == 0:
        return True
    d = np.hypot(placed[:, 0] - x, placed[:, 1] - y)
    return bool(np.all(d >= min_separation))


def place_point(angle_bounds: Tuple[float, float],
                distance_bounds: Tuple[float, float],
                placed: np.ndarray,
                min_separation: float,
                max_attempts: int = DEFAULT_MAX_ATTEMPTS,
                rng: Optional[np.random.RandomState] = None
                ) -> Tuple[Coordinates, int, bool]:
    """Draw one non-overlapping point inside a cell.

    Args:
        angle_bounds: (lo, hi) angle range [rad], clockwise from vertical.
        distance_bounds: (lo, hi) distance range from the centre.
        placed: [M, 2] x/y of every blip already placed in this pass.
        min_separation: Required centre-to-centre distance.
        max_attempts: Draw budget (>= 1).
        rng: Random source. None = fresh unseeded RandomState.

    Returns:
        (coordinates, attempts_used, saturated)
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
    if rng is None:
        rng = np.random.RandomState()

    a_lo, a_hi = angle_bounds
    d_lo, d_hi = distance_bounds

    for attempt in range(1, max_attempts + 1):
        angle = rng.uniform(a_lo, a_hi)
        distance = rng.uniform(d_lo, d_hi)
        candidate = Coordinates.from_polar(float(angle), float(distance))
        if is_clear(candidate.x, candidate.y, placed, min_separation):
            return candidate, attempt, False

    # Budget exhausted: keep the last draw and accept the overlap.
    return candidate, max_attempts, True


def place_blips(radar: Radar,
                blip_radius: float,
                max_radius: float = 1.0,
                separation_factor: float = DEFAULT_SEPARATION_FACTOR,
                max_attempts: int = DEFAULT_MAX_ATTEMPTS,
                angle_margin: float = DEFAULT_ANGLE_MARGIN,
                inner_margin: float = DEFAULT_INNER_MARGIN,
                outer_margin: float = DEFAULT_OUTER_MARGIN,
                rng: Optional[np.random.RandomState] = None) -> Dict[str, Any]:
    """Assign coordinates to every blip in the radar.

    Sectors are processed in radar order, blips in stored order. Each
    blip sees every earlier blip, from any sector, as an obstacle.
    Sector angles must already be set.

    Returns:
        Dict with placed, saturated, total_attempts, ring_count.
    """
    if rng is None:
        rng = np.random.RandomState()

    blips = radar.blips
    bands = RingBands(ring_count=radar.ring_count, max_radius=max_radius)
    min_separation = separation_factor * blip_radius

    # The accumulator lives for this pass only.
    placed = np.empty((len(blips), 2), dtype=np.float64)
    n_placed = 0
    n_saturated = 0
    total_attempts = 0

    for sector in radar.sectors:
        sector.validate()
        angle_bounds = placement_angle_bounds(
            sector.start_angle, sector.end_angle, angle_margin)

        for blip in sector.blips:
            ring = radar.ring_of(blip)
            inner, outer = bands.bounds(ring.order)
            distance_bounds = placement_distance_bounds(
                inner, outer, inner_margin, outer_margin)

            coords, attempts, saturated = place_point(
                angle_bounds, distance_bounds, placed[:n_placed],
                min_separation, max_attempts, rng)
            blip.assign_coordinates(coords, attempts, saturated)

            placed[n_placed] = (coords.x, coords.y)
            n_placed += 1
            total_attempts += attempts
            if saturated:
                n_saturated += 1
                logger.debug(f"Placement saturated for '{blip.name}' "
                             f"({sector.name}/{ring.name}); accepting overlap")

    logger.info(f"Placed {n_placed} blips in {len(radar.sectors)} sectors, "
                f"{bands.ring_count} rings: {n_saturated} saturated, "
                f"{total_attempts} draws")

    return {
        'placed': n_placed,
        'saturated': n_saturated,
        'total_attempts': total_attempts,
        'ring_count': bands.ring_count,
        'min_separation': min_separation,
    }
