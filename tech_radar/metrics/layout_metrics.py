"""Layout quality metrics.

Checks a placed radar against its geometric constraints: pairwise
separation, cell containment and saturation counts.
"""
import numpy as np
import logging
from typing import Dict, Any, List, Tuple

from ..data_contracts import Radar
from ..layout.geometry import (
    RingBands, placement_angle_bounds, placement_distance_bounds,
    DEFAULT_ANGLE_MARGIN, DEFAULT_INNER_MARGIN, DEFAULT_OUTER_MARGIN,
)
from ..layout.placement import DEFAULT_SEPARATION_FACTOR

logger = logging.getLogger(__name__)

_EPS = 1e-9


def blip_positions(radar: Radar) -> np.ndarray:
    """Return [N, 2] x/y of placed blips, in radar order."""
    coords = [(b.coordinates.x, b.coordinates.y) for b in radar.blips if b.is_placed]
    return np.array(coords, dtype=np.float64).reshape(-1, 2)


def distance_matrix(points: np.ndarray) -> np.ndarray:
    """Return the [N, N] Euclidean distance matrix of points [N, 2]."""
    diff = points[:, np.newaxis, :] - points[np.newaxis, :, :]
    return np.sqrt(np.sum(diff ** 2, axis=-1))


def pairwise_distances(points: np.ndarray) -> np.ndarray:
    """Return the condensed upper-triangle distances of points [N, 2]."""
    n = points.shape[0]
    if n < 2:
        return np.empty(0, dtype=np.float64)
    iu = np.triu_indices(n, k=1)
    return distance_matrix(points)[iu]


def overlapping_pairs(radar: Radar, min_separation: float) -> List[Tuple[str, str]]:
    """Names of blip pairs closer than min_separation."""
    placed = [b for b in radar.blips if b.is_placed]
    points = blip_positions(radar)
    pairs = []
    for i in range(len(placed)):
        d = np.hypot(points[i + 1:, 0] - points[i, 0], points[i + 1:, 1] - points[i, 1])
        for j in np.where(d < min_separation)[0]:
            pairs.append((placed[i].name, placed[i + 1 + j].name))
    return pairs


def out_of_cell_blips(radar: Radar,
                      max_radius: float = 1.0,
                      angle_margin: float = DEFAULT_ANGLE_MARGIN,
                      inner_margin: float = DEFAULT_INNER_MARGIN,
                      outer_margin: float = DEFAULT_OUTER_MARGIN) -> List[str]:
    """Names of blips whose angle or distance falls outside their inset cell."""
    bands = RingBands(ring_count=radar.ring_count, max_radius=max_radius)
    result = []
    for sector in radar.sectors:
        a_lo, a_hi = placement_angle_bounds(sector.start_angle, sector.end_angle, angle_margin)
        for blip in sector.blips:
            if not blip.is_placed:
                continue
            inner, outer = bands.bounds(radar.ring_of(blip).order)
            d_lo, d_hi = placement_distance_bounds(inner, outer, inner_margin, outer_margin)
            angle = blip.coordinates.angle
            distance = blip.coordinates.distance
            if not (a_lo - _EPS <= angle <= a_hi + _EPS and d_lo - _EPS <= distance <= d_hi + _EPS):
                result.append(blip.name)
    return result


def compute_layout_metrics(radar: Radar,
                           blip_radius: float,
                           separation_factor: float = DEFAULT_SEPARATION_FACTOR,
                           max_radius: float = 1.0,
                           angle_margin: float = DEFAULT_ANGLE_MARGIN,
                           inner_margin: float = DEFAULT_INNER_MARGIN,
                           outer_margin: float = DEFAULT_OUTER_MARGIN) -> Dict[str, Any]:
    """Compute all layout metrics for a placed radar.

    Returns:
        Dict with counts, min_distance, overlap_pairs (count and names),
        out_of_cell and blips_per_sector.
    """
    blips = radar.blips
    min_separation = separation_factor * blip_radius
    dists = pairwise_distances(blip_positions(radar))

    metrics = {
        'n_blips': len(blips),
        'n_sectors': len(radar.sectors),
        'n_rings': len(radar.rings),
        'n_placed': sum(1 for b in blips if b.is_placed),
        'n_saturated': sum(1 for b in blips if b.saturated),
        'n_new': sum(1 for b in blips if b.is_new),
        'min_separation': float(min_separation),
        'min_distance': float(dists.min()) if dists.size else None,
        'overlap_pairs': int(np.sum(dists < min_separation)),
        'overlapping_names': [list(p) for p in overlapping_pairs(radar, min_separation)],
        'out_of_cell': len(out_of_cell_blips(radar, max_radius, angle_margin,
                                             inner_margin, outer_margin)),
        'mean_attempts': float(np.mean([b.attempts for b in blips])) if blips else 0.0,
        'blips_per_sector': {s.id: len(s.blips) for s in radar.sectors},
    }

    logger.info(f"Layout metrics: {metrics['n_placed']}/{metrics['n_blips']} placed, "
                f"{metrics['n_saturated']} saturated, {metrics['overlap_pairs']} overlaps, "
                f"{metrics['out_of_cell']} out of cell")
    return metrics
