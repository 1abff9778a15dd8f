"""Data model unit tests: identifiers, derived views, sector angles."""
import math
import sys, os
import pytest
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from tech_radar.data_contracts import (
    Radar, Blip, Coordinates, EmptyRadarError, derive_id, TWO_PI,
)


def _radar_with_sectors(n):
    radar = Radar()
    ring = radar.add_ring('Adopt')
    for i in range(n):
        idx = radar.add_sector(f"Sector {i}")
        radar.sectors[idx].add_blip(Blip(name=f"b{i}", ring_index=ring, sector_index=idx))
    return radar


def test_derive_id_strips_and_lowercases():
    """Non-word characters are removed, result is lowercased."""
    assert derive_id("Node.js 18!") == "nodejs18"
    assert derive_id("nodejs18") == "nodejs18"
    assert derive_id("Languages & Frameworks") == "languagesframeworks"
    assert derive_id("snake_case") == "snake_case"
    assert derive_id("!!!") == ""
    print("  PASS: derive_id")


def test_sector_angles_partition_full_circle():
    """For N=1..16 sectors spans partition [0, 2*pi) in sector order."""
    for n in range(1, 17):
        radar = _radar_with_sectors(n)
        radar.set_sector_angles()
        sectors = radar.sectors
        assert sectors[0].start_angle == 0.0
        for a, b in zip(sectors, sectors[1:]):
            assert a.end_angle == b.start_angle
        assert math.isclose(sectors[-1].end_angle, TWO_PI)
        for s in sectors:
            assert math.isclose(s.span, TWO_PI / n)
            s.validate()
    print("  PASS: sector angles partition the circle")


def test_sector_angles_empty_radar_fails_fast():
    """Zero sectors raise EmptyRadarError rather than producing NaN angles."""
    with pytest.raises(EmptyRadarError):
        Radar().set_sector_angles()
    assert issubclass(EmptyRadarError, ValueError)


def test_rings_first_encountered_order_not_sorted():
    """radar.rings follows blip traversal order, de-duplicated."""
    radar = Radar()
    adopt = radar.add_ring('Adopt', order=1)
    trial = radar.add_ring('Trial', order=2)
    hold = radar.add_ring('Hold', order=3)   # never referenced

    tools = radar.add_sector('Tools')
    langs = radar.add_sector('Languages')
    radar.sectors[tools].add_blip(Blip('A', ring_index=trial, sector_index=tools))
    radar.sectors[tools].add_blip(Blip('B', ring_index=adopt, sector_index=tools))
    radar.sectors[langs].add_blip(Blip('C', ring_index=trial, sector_index=langs))

    assert [r.name for r in radar.rings] == ['Trial', 'Adopt']
    assert [b.name for b in radar.blips] == ['A', 'B', 'C']
    assert radar.ring_count == 2
    assert radar.known_rings[hold].name == 'Hold'
    print("  PASS: rings in first-seen order")


def test_ring_count_covers_non_contiguous_orders():
    radar = Radar()
    r1 = radar.add_ring('Inner', order=1)
    r3 = radar.add_ring('Outer', order=3)
    s = radar.add_sector('S')
    radar.sectors[s].add_blip(Blip('a', ring_index=r1, sector_index=s))
    radar.sectors[s].add_blip(Blip('b', ring_index=r3, sector_index=s))
    assert radar.ring_count == 3


def test_sort_blips_by_ring_is_stable():
    radar = Radar()
    adopt = radar.add_ring('Adopt')
    trial = radar.add_ring('Trial')
    s = radar.add_sector('S')
    for name, ring in [('t1', trial), ('a1', adopt), ('t2', trial), ('a2', adopt)]:
        radar.sectors[s].add_blip(Blip(name, ring_index=ring, sector_index=s))
    radar.sort_blips_by_ring()
    assert [b.name for b in radar.sectors[s].blips] == ['a1', 'a2', 't1', 't2']


def test_coordinates_clockwise_from_vertical():
    """Angle 0 points up (+y), pi/2 points right (+x)."""
    up = Coordinates.from_polar(0.0, 1.0)
    assert math.isclose(up.x, 0.0, abs_tol=1e-12) and math.isclose(up.y, 1.0)
    right = Coordinates.from_polar(math.pi / 2, 2.0)
    assert math.isclose(right.x, 2.0) and math.isclose(right.y, 0.0, abs_tol=1e-12)
    c = Coordinates.from_polar(4.0, 0.5)
    assert math.isclose(c.angle, 4.0) and math.isclose(c.distance, 0.5)


def test_blip_coordinates_assigned_once():
    blip = Blip('x', ring_index=0, sector_index=0)
    assert not blip.is_placed
    blip.assign_coordinates(Coordinates(0.1, 0.2), attempts=1, saturated=False)
    assert blip.is_placed
    with pytest.raises(ValueError):
        blip.assign_coordinates(Coordinates(0.3, 0.4), attempts=1, saturated=False)


def test_duplicate_registration_rejected():
    radar = Radar()
    radar.add_ring('Adopt')
    radar.add_sector('Tools')
    with pytest.raises(ValueError):
        radar.add_ring('Adopt')
    with pytest.raises(ValueError):
        radar.add_sector('Tools')


if __name__ == '__main__':
    test_derive_id_strips_and_lowercases()
    test_sector_angles_partition_full_circle()
    test_rings_first_encountered_order_not_sorted()
    print("All data model tests passed.")
