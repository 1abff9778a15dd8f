"""Group parsed rows into a Radar of sectors, rings and blips."""
import logging
from typing import Iterable, List, Optional, Set

from ..data_contracts import Radar, Blip, IdCollisionError, derive_id
from .rows import RadarRow

logger = logging.getLogger(__name__)

UNKNOWN_RING_POLICIES = ('append', 'drop')
ID_COLLISION_POLICIES = ('suffix', 'reject', 'merge')


def unique_id(base: str, taken: Set[str], fallback: str) -> str:
    """Return base, or base_2, base_3, ... whichever is not taken yet."""
    base = base or fallback
    if base not in taken:
        return base
    n = 2
    while f"{base}_{n}" in taken:
        n += 1
    return f"{base}_{n}"


def group_rows(rows: Iterable[RadarRow],
               ring_names: Optional[List[str]] = None,
               unknown_ring_policy: str = 'append',
               id_collision_policy: str = 'suffix') -> Radar:
    """Build a Radar from rows.

    Args:
        rows: Parsed input rows, in input order.
        ring_names: Known rings, innermost first (order = position + 1).
            None/empty = rings are created in first-seen order.
        unknown_ring_policy: With a ring list, 'append' registers an unknown
            ring as the next-outermost ring; 'drop' discards the row.
        id_collision_policy: What to do when two sector names normalize to
            the same id: 'suffix' (id_2, id_3, ...), 'reject' (raise
            IdCollisionError) or 'merge' (share the earlier sector).

    Returns:
        Radar with sectors in first-seen order. Angles are not set yet.
    """
    if unknown_ring_policy not in UNKNOWN_RING_POLICIES:
        raise ValueError(f"unknown_ring_policy must be one of {UNKNOWN_RING_POLICIES}, "
                         f"got '{unknown_ring_policy}'")
    if id_collision_policy not in ID_COLLISION_POLICIES:
        raise ValueError(f"id_collision_policy must be one of {ID_COLLISION_POLICIES}, "
                         f"got '{id_collision_policy}'")

    radar = Radar()
    for name in ring_names or []:
        if radar.ring_index(name) is None:
            radar.add_ring(name)
        else:
            logger.warning(f"Duplicate ring '{name}' in ring list ignored")
    strict_rings = bool(ring_names)

    sector_ids = {}   # id -> sector index
    blip_ids: Set[str] = set()

    for row in rows:
        ring_idx = radar.ring_index(row.ring)
        if ring_idx is None:
            if strict_rings and unknown_ring_policy == 'drop':
                logger.warning(f"Blip '{row.name}': unknown ring '{row.ring}'; dropped")
                continue
            if strict_rings:
                logger.warning(f"Blip '{row.name}': unknown ring '{row.ring}'; "
                               f"appended as outermost ring")
            ring_idx = radar.add_ring(row.ring)

        sector_idx = radar.sector_index(row.sector)
        if sector_idx is None:
            sector_idx = _add_sector(radar, row.sector, sector_ids, id_collision_policy)

        blip_id = unique_id(derive_id(row.name), blip_ids, 'blip')
        blip_ids.add(blip_id)
        radar.sectors[sector_idx].add_blip(Blip(
            name=row.name,
            ring_index=ring_idx,
            sector_index=sector_idx,
            description=row.description,
            is_new=row.is_new,
            number=row.number,
            id=blip_id,
        ))

    logger.info(f"Grouped {len(radar.blips)} blips into {len(radar.sectors)} sectors, "
                f"{len(radar.rings)} rings")
    return radar


def _add_sector(radar: Radar, name: str, sector_ids: dict, policy: str) -> int:
    base = derive_id(name) or 'sector'
    if base in sector_ids:
        existing = radar.sectors[sector_ids[base]]
        if policy == 'reject':
            raise IdCollisionError(
                f"Sectors '{existing.name}' and '{name}' share id '{base}'")
        if policy == 'merge':
            logger.warning(f"Sector '{name}' merged into '{existing.name}' (id '{base}')")
            radar.alias_sector(name, sector_ids[base])
            return sector_ids[base]

    sector_id = unique_id(base, set(sector_ids), 'sector')
    if sector_id != base:
        logger.warning(f"Sector '{name}' id collides on '{base}'; "
                       f"using '{sector_id}'")
    idx = radar.add_sector(name, sector_id=sector_id)
    sector_ids[sector_id] = idx
    return idx
