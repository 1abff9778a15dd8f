"""Radar layout pipeline.

Stages: Config → Rows → Grouping → Colours → Angles → Placement →
Metrics → Visual. The whole radar is rebuilt on every run; there is no
incremental layout.
"""
import numpy as np
import os
import json
import time
import logging
import yaml
from typing import Any, Dict, List, Optional

from ..config import load_config, validate_config, _get_nested, _deep_update
from ..data_contracts import Radar, EmptyRadarError
from ..data.rows import RadarRow, load_rows, parse_rows
from ..data.grouping import group_rows
from ..data.export import radar_to_dict
from ..colour.generator import ColourGenerator
from ..colour.palette import assign_colours
from ..layout.placement import place_blips
from ..metrics.layout_metrics import compute_layout_metrics
from ..metrics.visual import run_visual_verification

logger = logging.getLogger(__name__)


def setup_logging(output_dir: str, level: str = 'INFO'):
    """Configure logging to file and console."""
    os.makedirs(output_dir, exist_ok=True)
    log_file = os.path.join(output_dir, 'log.txt')

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Clear existing handlers
    root.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s')

    fh = logging.FileHandler(log_file, mode='w')
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(formatter)
    root.addHandler(fh)

    ch = logging.StreamHandler()
    ch.setLevel(getattr(logging, level.upper(), logging.INFO))
    ch.setFormatter(formatter)
    root.addHandler(ch)


def effective_blip_radius(cfg: dict) -> float:
    return (_get_nested(cfg, 'layout.blip_radius')
            * _get_nested(cfg, 'layout.blip_radius_scale'))


def build_radar(rows: List[RadarRow], cfg: Optional[dict] = None,
                rng: Optional[np.random.RandomState] = None) -> Radar:
    """Group rows and lay out the radar. No file I/O.

    Args:
        rows: Parsed input rows.
        cfg: Validated config (None = defaults).
        rng: Random source. None = RandomState(cfg['seed']).

    Raises:
        EmptyRadarError: if no rows survive grouping.
    """
    if cfg is None:
        cfg = load_config()
        validate_config(cfg)
    if rng is None:
        rng = np.random.RandomState(cfg.get('seed'))

    radar = group_rows(
        rows,
        ring_names=cfg.get('rings') or None,
        unknown_ring_policy=cfg.get('unknown_ring_policy', 'append'),
        id_collision_policy=cfg.get('id_collision_policy', 'suffix'),
    )
    if not radar.sectors:
        raise EmptyRadarError("No valid rows to lay out")

    if _get_nested(cfg, 'layout.sort_blips_by_ring'):
        radar.sort_blips_by_ring()

    colours_cfg = cfg.get('colours', {})
    generator = ColourGenerator(rng,
                                saturation=colours_cfg.get('saturation', 45),
                                lightness=colours_cfg.get('lightness', 50))
    assign_colours(radar, generator,
                   sector_overrides=colours_cfg.get('sectors'),
                   ring_overrides=colours_cfg.get('rings'),
                   ring_base=colours_cfg.get('ring_base', 'hsl(0,0%,85%)'),
                   ring_step=colours_cfg.get('ring_darken_step', 0.1))

    radar.set_sector_angles()

    layout_cfg = cfg['layout']
    place_blips(
        radar,
        blip_radius=effective_blip_radius(cfg),
        max_radius=layout_cfg['max_radius'],
        separation_factor=layout_cfg['separation_factor'],
        max_attempts=layout_cfg['max_attempts'],
        angle_margin=layout_cfg['angle_margin'],
        inner_margin=layout_cfg['inner_margin'],
        outer_margin=layout_cfg['outer_margin'],
        rng=rng,
    )
    radar.validate()
    return radar


def run_pipeline(input_path: str, config_path: str = None,
                 config_override: dict = None) -> Dict[str, Any]:
    """Run the full layout pipeline on a row file.

    Args:
        input_path: Row file (.csv / .json / .yaml).
        config_path: Path to YAML config file.
        config_override: Dict to override config values.

    Returns:
        Dict with radar, metrics, output_dir and timing.
    """
    t_pipeline_start = time.time()

    # --- Stage 0: Config Validation ---
    cfg = load_config(config_path)
    if config_override:
        _deep_update(cfg, config_override)
    validate_config(cfg)

    run_id = _get_nested(cfg, 'output.run_id') or 'run_001'
    root_dir = _get_nested(cfg, 'output.root_dir') or 'results'
    output_dir = os.path.join(root_dir, run_id)
    os.makedirs(output_dir, exist_ok=True)

    log_level = _get_nested(cfg, 'logging.level') or 'INFO'
    setup_logging(output_dir, log_level)
    logger.info(f"=== Pipeline start: {run_id} ===")

    seed = cfg.get('seed')
    logger.info(f"Config: seed={seed}, blip_radius={effective_blip_radius(cfg):.4f}")

    with open(os.path.join(output_dir, 'config.yaml'), 'w') as f:
        yaml.dump(cfg, f, default_flow_style=False)

    meta = {
        'seed': seed,
        'input': os.path.abspath(input_path),
        'timestamp': time.strftime('%Y-%m-%dT%H:%M:%S'),
        'run_id': run_id,
    }
    with open(os.path.join(output_dir, 'meta.json'), 'w') as f:
        json.dump(meta, f, indent=2)

    results = {'run_id': run_id, 'output_dir': output_dir}

    # --- Stage 1: Rows ---
    logger.info("--- Stage 1: Rows ---")
    rows = parse_rows(load_rows(input_path), columns=cfg.get('columns'))

    # --- Stage 2: Layout ---
    logger.info("--- Stage 2: Layout ---")
    t_layout_start = time.time()
    radar = build_radar(rows, cfg, rng=np.random.RandomState(seed))
    results['layout_time_s'] = time.time() - t_layout_start
    results['radar'] = radar

    with open(os.path.join(output_dir, 'layout.json'), 'w') as f:
        json.dump(radar_to_dict(radar), f, indent=2)

    # --- Stage 3: Metrics ---
    logger.info("--- Stage 3: Metrics ---")
    layout_cfg = cfg['layout']
    metrics = compute_layout_metrics(
        radar,
        blip_radius=effective_blip_radius(cfg),
        separation_factor=layout_cfg['separation_factor'],
        max_radius=layout_cfg['max_radius'],
        angle_margin=layout_cfg['angle_margin'],
        inner_margin=layout_cfg['inner_margin'],
        outer_margin=layout_cfg['outer_margin'],
    )
    metrics['layout_time_s'] = results['layout_time_s']
    results['metrics'] = metrics

    with open(os.path.join(output_dir, 'metrics.json'), 'w') as f:
        json.dump(metrics, f, indent=2)

    # --- Stage 4: Visual Verification ---
    if _get_nested(cfg, 'visual.enable'):
        logger.info("--- Stage 4: Visual Verification ---")
        results['visual_metrics'] = run_visual_verification(
            radar, os.path.join(output_dir, 'visual_report'),
            max_radius=layout_cfg['max_radius'],
            blip_radius=effective_blip_radius(cfg),
            min_separation=metrics['min_separation'],
        )

    results['total_time_s'] = time.time() - t_pipeline_start
    logger.info(f"=== Pipeline complete: {results['total_time_s']:.2f}s ===")
    logger.info(f"Results: {output_dir}")

    return results
