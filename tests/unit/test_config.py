"""Config loading and validation unit tests."""
import math
import sys, os
import pytest
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from tech_radar.config import load_config, validate_config, _get_nested


def test_defaults():
    cfg = load_config(None)
    validate_config(cfg)
    assert _get_nested(cfg, 'layout.max_attempts') == 10
    assert _get_nested(cfg, 'layout.separation_factor') == 2.1
    assert math.isclose(_get_nested(cfg, 'layout.angle_margin'), math.pi / 16)
    assert cfg['seed'] is None
    assert _get_nested(cfg, 'columns.isNew') == 'isNew'


def test_yaml_overrides_keep_other_defaults(tmp_path):
    path = tmp_path / 'cfg.yaml'
    path.write_text("layout:\n  blip_radius: '0.05'\nrings: [Adopt, Trial]\nseed: 3\n")
    cfg = load_config(str(path))
    validate_config(cfg)
    assert _get_nested(cfg, 'layout.blip_radius') == 0.05
    assert _get_nested(cfg, 'layout.max_radius') == 1.0
    assert cfg['rings'] == ['Adopt', 'Trial']


def test_missing_file_uses_defaults(tmp_path):
    cfg = load_config(str(tmp_path / 'nope.yaml'))
    assert _get_nested(cfg, 'layout.blip_radius') == 0.02


@pytest.mark.parametrize('key,value', [
    ('max_attempts', 0),
    ('blip_radius', -1.0),
    ('outer_margin', 1.5),
    ('inner_margin', 0.5),
])
def test_invalid_layout_values(key, value):
    cfg = load_config(None)
    cfg['layout'][key] = value
    with pytest.raises(ValueError):
        validate_config(cfg)


def test_invalid_policy_and_seed():
    cfg = load_config(None)
    cfg['id_collision_policy'] = 'alias'
    with pytest.raises(ValueError):
        validate_config(cfg)

    cfg = load_config(None)
    cfg['seed'] = 'abc'
    with pytest.raises(ValueError):
        validate_config(cfg)


def test_defaults_not_shared_between_loads():
    a = load_config(None)
    a['colours']['sectors']['tools'] = '#fff'
    b = load_config(None)
    assert b['colours']['sectors'] == {}


if __name__ == '__main__':
    test_defaults()
    print("All config tests passed.")
