"""Serialize a laid-out Radar for the drawing layer."""
from typing import Any, Dict

from ..data_contracts import Radar, Blip


def _blip_to_dict(radar: Radar, blip: Blip) -> Dict[str, Any]:
    c = blip.coordinates
    return {
        'id': blip.id,
        'name': blip.name,
        'number': blip.number,
        'ring': radar.ring_of(blip).name,
        'description': blip.description,
        'is_new': blip.is_new,
        'x': c.x if c else None,
        'y': c.y if c else None,
        'angle': c.angle if c else None,
        'distance': c.distance if c else None,
        'saturated': blip.saturated,
    }


def radar_to_dict(radar: Radar) -> Dict[str, Any]:
    """JSON-ready layout. Rings are listed innermost first."""
    return {
        'rings': [
            {'name': r.name, 'order': r.order, 'colour': r.colour}
            for r in sorted(radar.rings, key=lambda r: r.order)
        ],
        'ring_count': radar.ring_count,
        'sectors': [
            {
                'id': s.id,
                'name': s.name,
                'colour': s.colour,
                'start_angle': s.start_angle,
                'end_angle': s.end_angle,
                'blips': [_blip_to_dict(radar, b) for b in s.blips],
            }
            for s in radar.sectors
        ],
    }
