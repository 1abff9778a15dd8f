"""Ring-band and sector-cell geometry.

All functions are pure. Radii are in the same unit as max_radius
(normalized to 1.0 by default).
"""
import math
import logging
from dataclasses import dataclass
from typing import Tuple

logger = logging.getLogger(__name__)

DEFAULT_ANGLE_MARGIN = math.pi / 16
DEFAULT_INNER_MARGIN = 1.1
DEFAULT_OUTER_MARGIN = 0.9


def ring_bounds(order: int, ring_count: int, max_radius: float) -> Tuple[float, float]:
    """Return (inner, outer) radius of the band for a ring.

    inner = R*(order-1)/ring_count, outer = R*order/ring_count.
    All bands have the same width R/ring_count.
    """
    if ring_count < 1:
        raise ValueError(f"ring_count must be >= 1, got {ring_count}")
    if not 1 <= order <= ring_count:
        raise ValueError(f"ring order {order} outside 1..{ring_count}")
    inner = max_radius * (order - 1) / ring_count
    outer = max_radius * order / ring_count
    return inner, outer


@dataclass(frozen=True)
class RingBands:
    """Band table frozen for one layout pass.

    Holding ring_count fixed keeps radii stable even if rings are
    registered while blips are being placed.
    """
    ring_count: int
    max_radius: float = 1.0

    def bounds(self, order: int) -> Tuple[float, float]:
        return ring_bounds(order, self.ring_count, self.max_radius)

    @property
    def band_width(self) -> float:
        return self.max_radius / self.ring_count


def placement_distance_bounds(inner: float, outer: float,
                              inner_margin: float = DEFAULT_INNER_MARGIN,
                              outer_margin: float = DEFAULT_OUTER_MARGIN
                              ) -> Tuple[float, float]:
    """Inset a ring annulus so blips never sit on a ring boundary.

    The innermost ring (inner == 0) uses half the maximum distance as its
    minimum so nothing is plotted at the centre. With the default margins
    the inset band is empty from order 6 outward; those rings keep the
    middle half of the band.
    """
    max_dist = outer * outer_margin
    if inner == 0:
        min_dist = max_dist / 2
    else:
        min_dist = inner * inner_margin
    if min_dist >= max_dist:
        # Margins wider than the band (outer rings of a many-ring radar):
        # inset by a quarter of the band width instead.
        quarter = (outer - inner) / 4
        logger.debug(f"Distance margins collapse band [{inner:.4f}, {outer:.4f}]; "
                     f"insetting by {quarter:.4f}")
        return inner + quarter, outer - quarter
    return min_dist, max_dist


def placement_angle_bounds(start_angle: float, end_angle: float,
                           margin: float = DEFAULT_ANGLE_MARGIN) -> Tuple[float, float]:
    """Inset a sector span so blips never sit on a sector edge.

    With many sectors the span can be narrower than two margins; the
    margin is then limited to a quarter of the span.
    """
    span = end_angle - start_angle
    if span <= 0:
        raise ValueError(f"Invalid sector span [{start_angle}, {end_angle})")
    if 2 * margin >= span:
        margin = span / 4
    return start_angle + margin, end_angle - margin
