"""Diagnostic plots for visual inspection of a laid-out radar.

These are checks on the layout, not the drawing layer: ring circles,
sector spokes and blip markers at their computed coordinates.
"""
import numpy as np
import os
import json
import logging
from typing import Dict, Any

from ..data_contracts import Radar
from ..colour.palette import parse_colour
from ..layout.geometry import RingBands
from .layout_metrics import blip_positions, distance_matrix

logger = logging.getLogger(__name__)


def _ensure_dir(path):
    os.makedirs(path, exist_ok=True)


def _save_figure(fig, path):
    fig.savefig(path, dpi=150, bbox_inches='tight')
    import matplotlib.pyplot as plt
    plt.close(fig)
    logger.info(f"Saved: {path}")


def generate_radar_preview(radar: Radar, output_path: str,
                           max_radius: float = 1.0,
                           blip_radius: float = 0.02):
    """Plot rings, sector spokes and blips.

    New blips are drawn hollow; saturated blips get a red edge.
    """
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt
    from matplotlib.patches import Circle

    fig, ax = plt.subplots(1, 1, figsize=(8, 8))
    bands = RingBands(ring_count=max(radar.ring_count, 1), max_radius=max_radius)

    # Rings outermost first so inner discs paint over outer ones
    for ring in sorted(radar.rings, key=lambda r: r.order, reverse=True):
        _, outer = bands.bounds(ring.order)
        face = parse_colour(ring.colour) if ring.colour else (0.9, 0.9, 0.9)
        ax.add_patch(Circle((0, 0), outer, facecolor=face, edgecolor='white', lw=1.5))
        ax.text(0, outer - bands.band_width / 2, ring.name,
                ha='center', va='center', fontsize=8, color='dimgray')

    for sector in radar.sectors:
        # Angles are clockwise from vertical: x = r*sin(a), y = r*cos(a)
        ax.plot([0, max_radius * np.sin(sector.start_angle)],
                [0, max_radius * np.cos(sector.start_angle)], color='white', lw=1.5)
        mid = (sector.start_angle + sector.end_angle) / 2
        ax.text(1.08 * max_radius * np.sin(mid), 1.08 * max_radius * np.cos(mid),
                sector.name, ha='center', va='center', fontsize=9)

        colour = parse_colour(sector.colour) if sector.colour else (0.3, 0.3, 0.3)
        for blip in sector.blips:
            if not blip.is_placed:
                continue
            c = blip.coordinates
            ax.add_patch(Circle(
                (c.x, c.y), blip_radius,
                facecolor='white' if blip.is_new else colour,
                edgecolor='red' if blip.saturated else colour, lw=1.0))
            if blip.number is not None:
                ax.text(c.x, c.y, str(blip.number), ha='center', va='center', fontsize=4)

    lim = 1.2 * max_radius
    ax.set_xlim(-lim, lim)
    ax.set_ylim(-lim, lim)
    ax.set_aspect('equal')
    ax.axis('off')
    ax.set_title('Radar layout')
    _save_figure(fig, output_path)


def nearest_neighbour_distances(radar: Radar) -> np.ndarray:
    """Return [N] distance from each blip to its closest other blip."""
    points = blip_positions(radar)
    n = points.shape[0]
    if n < 2:
        return np.empty(0, dtype=np.float64)
    dist = distance_matrix(points)
    np.fill_diagonal(dist, np.inf)
    return dist.min(axis=1)


def generate_spacing_histogram(radar: Radar, output_path: str, min_separation: float):
    """Histogram of nearest-neighbour distances with the separation threshold."""
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt

    nn = nearest_neighbour_distances(radar)
    fig, ax = plt.subplots(1, 1, figsize=(8, 5))
    if nn.size:
        ax.hist(nn, bins=min(50, max(nn.size // 2, 5)), color='steelblue', alpha=0.7)
    ax.axvline(min_separation, color='red', linestyle='--',
               label=f'min separation = {min_separation:.3f}')
    ax.set_xlabel('Nearest-neighbour distance')
    ax.set_ylabel('Count')
    ax.set_title('Blip spacing')
    ax.legend()
    _save_figure(fig, output_path)


def run_visual_verification(radar: Radar, output_dir: str,
                            max_radius: float = 1.0,
                            blip_radius: float = 0.02,
                            min_separation: float = 0.042) -> Dict[str, Any]:
    """Write preview.png, spacing_histogram.png and visual_metrics.json."""
    _ensure_dir(output_dir)

    generate_radar_preview(radar, os.path.join(output_dir, 'preview.png'),
                           max_radius=max_radius, blip_radius=blip_radius)
    generate_spacing_histogram(radar, os.path.join(output_dir, 'spacing_histogram.png'),
                               min_separation)

    nn = nearest_neighbour_distances(radar)
    visual_metrics = {
        'nn_mean': float(nn.mean()) if nn.size else None,
        'nn_min': float(nn.min()) if nn.size else None,
        'nn_below_separation': int(np.sum(nn < min_separation)),
    }
    with open(os.path.join(output_dir, 'visual_metrics.json'), 'w') as f:
        json.dump(visual_metrics, f, indent=2)

    logger.info(f"Visual verification: {visual_metrics}")
    return visual_metrics
