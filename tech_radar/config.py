"""Configuration loader and validator for the radar layout pipeline.

YAML values are merged over DEFAULTS (dotted keys); anything the file
does not mention keeps its default.
"""
import copy
import math
import yaml
import os
import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)

REQUIRED_KEYS = {
    'layout.max_radius': (int, float),
    'layout.blip_radius': (int, float),
    'layout.blip_radius_scale': (int, float),
    'layout.max_attempts': int,
    'layout.separation_factor': (int, float),
    'layout.angle_margin': (int, float),
    'layout.inner_margin': (int, float),
    'layout.outer_margin': (int, float),
    'unknown_ring_policy': str,
    'id_collision_policy': str,
}

DEFAULTS = {
    'seed': None,
    'output.run_id': 'run_001',
    'output.root_dir': 'results',

    # Layout (normalized radar radius)
    'layout.max_radius': 1.0,
    'layout.blip_radius': 0.02,
    'layout.blip_radius_scale': 1.0,
    'layout.max_attempts': 10,
    'layout.separation_factor': 2.1,
    'layout.angle_margin': math.pi / 16,
    'layout.inner_margin': 1.1,
    'layout.outer_margin': 0.9,
    'layout.sort_blips_by_ring': False,

    # Data
    'rings': [],
    'unknown_ring_policy': 'append',
    'id_collision_policy': 'suffix',
    'columns.name': 'name',
    'columns.sector': 'sector',
    'columns.ring': 'ring',
    'columns.description': 'description',
    'columns.isNew': 'isNew',

    # Colours
    'colours.sectors': {},
    'colours.rings': {},
    'colours.ring_base': 'hsl(0,0%,85%)',
    'colours.ring_darken_step': 0.1,
    'colours.saturation': 45,
    'colours.lightness': 50,

    # Visual
    'visual.enable': True,

    # Logging
    'logging.level': 'INFO',
}


def _get_nested(d: dict, key: str, default=None):
    """Get nested dict value using dot notation."""
    parts = key.split('.')
    current = d
    for part in parts:
        if isinstance(current, dict) and part in current:
            current = current[part]
        else:
            return default
    return current


def _set_nested(d: dict, key: str, value):
    """Set nested dict value using dot notation."""
    parts = key.split('.')
    current = d
    for part in parts[:-1]:
        if part not in current or not isinstance(current[part], dict):
            current[part] = {}
        current = current[part]
    current[parts[-1]] = value


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base. Override wins on conflict."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _deep_update(d: dict, u: dict):
    """Recursively update dict d with dict u."""
    for k, v in u.items():
        if isinstance(v, dict) and isinstance(d.get(k), dict):
            _deep_update(d[k], v)
        else:
            d[k] = v


def load_config(path: str = None) -> Dict[str, Any]:
    """Load config from a YAML file, filling in defaults.

    If path is None or missing, returns defaults.
    """
    if path and os.path.exists(path):
        with open(path) as f:
            cfg = yaml.safe_load(f) or {}
    else:
        if path:
            logger.warning(f"Config file not found: {path}; using defaults")
        cfg = {}

    defaults_nested = {}
    for key, default_val in DEFAULTS.items():
        _set_nested(defaults_nested, key, copy.deepcopy(default_val))

    return _deep_merge(defaults_nested, cfg)


def _coerce_numerics(cfg: dict):
    """Coerce string values that should be numeric (YAML float parsing issue)."""
    for key, expected_type in REQUIRED_KEYS.items():
        val = _get_nested(cfg, key)
        if not isinstance(val, str):
            continue
        try:
            _set_nested(cfg, key, int(val) if expected_type is int else float(val))
        except ValueError:
            pass


def validate_config(cfg: dict):
    """Validate config schema and ranges. Raises ValueError on failure."""
    _coerce_numerics(cfg)
    errors = []
    for key, expected_type in REQUIRED_KEYS.items():
        val = _get_nested(cfg, key)
        if val is None:
            errors.append(f"Missing required key: {key}")
        elif isinstance(val, bool) or not isinstance(val, expected_type):
            errors.append(f"Key '{key}' has type {type(val).__name__}, expected {expected_type}")
    if errors:
        raise ValueError("Config validation failed:\n" + "\n".join(f"  - {e}" for e in errors))

    for key in ('layout.max_radius', 'layout.blip_radius',
                'layout.blip_radius_scale', 'layout.separation_factor'):
        if _get_nested(cfg, key) <= 0:
            errors.append(f"{key} must be > 0, got {_get_nested(cfg, key)}")

    if _get_nested(cfg, 'layout.max_attempts') < 1:
        errors.append(f"layout.max_attempts must be >= 1, "
                      f"got {_get_nested(cfg, 'layout.max_attempts')}")

    angle_margin = _get_nested(cfg, 'layout.angle_margin')
    if not 0 <= angle_margin < math.pi:
        errors.append(f"layout.angle_margin must be in [0, pi), got {angle_margin}")

    inner_margin = _get_nested(cfg, 'layout.inner_margin')
    if inner_margin < 1:
        errors.append(f"layout.inner_margin must be >= 1, got {inner_margin}")

    outer_margin = _get_nested(cfg, 'layout.outer_margin')
    if not 0 < outer_margin <= 1:
        errors.append(f"layout.outer_margin must be in (0, 1], got {outer_margin}")

    policy = _get_nested(cfg, 'unknown_ring_policy')
    if policy not in ('append', 'drop'):
        errors.append(f"unknown_ring_policy must be append/drop, got '{policy}'")

    policy = _get_nested(cfg, 'id_collision_policy')
    if policy not in ('suffix', 'reject', 'merge'):
        errors.append(f"id_collision_policy must be suffix/reject/merge, got '{policy}'")

    rings = cfg.get('rings') or []
    if not isinstance(rings, list) or not all(isinstance(r, str) for r in rings):
        errors.append("rings must be a list of ring names")

    seed = cfg.get('seed')
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
        errors.append(f"seed must be an int or null, got {seed!r}")

    for key in ('colours.sectors', 'colours.rings', 'columns'):
        if not isinstance(_get_nested(cfg, key), dict):
            errors.append(f"{key} must be a mapping")

    if errors:
        raise ValueError("Config validation failed:\n" + "\n".join(f"  - {e}" for e in errors))

    logger.info("Config validation passed.")
