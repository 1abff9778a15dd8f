"""Data contracts and validators for the radar layout engine.

Rings and sectors live in arenas owned by the Radar; blips hold integer
indices into those arenas instead of object references.
"""
import math
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

TWO_PI = 2.0 * math.pi


class EmptyRadarError(ValueError):
    """Raised when a layout pass is attempted on a radar with no sectors."""


class IdCollisionError(ValueError):
    """Raised when two distinct names normalize to the same identifier."""


def derive_id(name: str) -> str:
    """Strip every non-word character from `name` and lowercase it.

    ASCII word characters only, so "Café" -> "caf".
    """
    return re.sub(r'\W', '', name, flags=re.ASCII).lower()


@dataclass(frozen=True)
class Coordinates:
    """Blip position relative to the radar centre.

    Angles are measured clockwise from the positive vertical axis:
    x = d*sin(a), y = d*cos(a).
    """
    x: float
    y: float

    @classmethod
    def from_polar(cls, angle: float, distance: float) -> 'Coordinates':
        return cls(x=distance * math.sin(angle), y=distance * math.cos(angle))

    @property
    def distance(self) -> float:
        return math.hypot(self.x, self.y)

    @property
    def angle(self) -> float:
        """Angle in [0, 2*pi)."""
        return math.atan2(self.x, self.y) % TWO_PI

    def distance_to(self, other: 'Coordinates') -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


@dataclass
class Ring:
    """Concentric band. order=1 is the innermost ring."""
    name: str
    order: int
    colour: Optional[str] = None

    def validate(self):
        assert self.name, "ring name must be non-empty"
        assert isinstance(self.order, int) and self.order >= 1, \
            f"ring '{self.name}' order must be an int >= 1, got {self.order}"


@dataclass
class Blip:
    """One radar item.

    ring_index / sector_index point into Radar.known_rings / Radar.sectors.
    """
    name: str
    ring_index: int
    sector_index: int
    description: str = ''
    is_new: bool = False
    number: Optional[int] = None
    id: str = ''
    coordinates: Optional[Coordinates] = None
    attempts: int = 0          # draws used by placement
    saturated: bool = False    # True if placement fell back to an overlapping spot

    def __post_init__(self):
        if not self.id:
            self.id = derive_id(self.name)

    @property
    def is_placed(self) -> bool:
        return self.coordinates is not None

    def assign_coordinates(self, coordinates: Coordinates,
                           attempts: int, saturated: bool):
        """Fix the blip position. A blip is placed exactly once."""
        if self.coordinates is not None:
            raise ValueError(f"Blip '{self.name}' already has coordinates")
        self.coordinates = coordinates
        self.attempts = attempts
        self.saturated = saturated


@dataclass
class Sector:
    """Angular wedge owning an ordered list of blips."""
    name: str
    colour: Optional[str] = None
    id: str = ''
    start_angle: Optional[float] = None  # [rad]
    end_angle: Optional[float] = None    # [rad]
    blips: List[Blip] = field(default_factory=list)

    def __post_init__(self):
        if not self.id:
            self.id = derive_id(self.name)

    def add_blip(self, blip: Blip):
        self.blips.append(blip)

    @property
    def span(self) -> float:
        return self.end_angle - self.start_angle

    def validate(self):
        assert self.start_angle is not None and self.end_angle is not None, \
            f"sector '{self.name}' has no angles; call Radar.set_sector_angles()"
        assert 0.0 <= self.start_angle < self.end_angle, \
            f"sector '{self.name}' angles invalid: [{self.start_angle}, {self.end_angle})"


@dataclass
class Radar:
    """Aggregate root: sector and ring arenas plus name lookups."""
    sectors: List[Sector] = field(default_factory=list)
    known_rings: List[Ring] = field(default_factory=list)
    _sector_lookup: Dict[str, int] = field(default_factory=dict, repr=False)
    _ring_lookup: Dict[str, int] = field(default_factory=dict, repr=False)

    # --- arenas ---

    def add_ring(self, name: str, order: Optional[int] = None,
                 colour: Optional[str] = None) -> int:
        """Register a ring and return its index. Default order is next-outermost."""
        if name in self._ring_lookup:
            raise ValueError(f"Ring '{name}' already registered")
        if order is None:
            order = max((r.order for r in self.known_rings), default=0) + 1
        ring = Ring(name=name, order=order, colour=colour)
        ring.validate()
        self.known_rings.append(ring)
        self._ring_lookup[name] = len(self.known_rings) - 1
        return self._ring_lookup[name]

    def ring_index(self, name: str) -> Optional[int]:
        return self._ring_lookup.get(name)

    def add_sector(self, name: str, colour: Optional[str] = None,
                   sector_id: str = '') -> int:
        if name in self._sector_lookup:
            raise ValueError(f"Sector '{name}' already registered")
        self.sectors.append(Sector(name=name, colour=colour, id=sector_id))
        self._sector_lookup[name] = len(self.sectors) - 1
        return self._sector_lookup[name]

    def sector_index(self, name: str) -> Optional[int]:
        return self._sector_lookup.get(name)

    def alias_sector(self, name: str, index: int):
        """Route rows naming `name` into an existing sector."""
        self._sector_lookup[name] = index

    def ring_of(self, blip: Blip) -> Ring:
        return self.known_rings[blip.ring_index]

    def sector_of(self, blip: Blip) -> Sector:
        return self.sectors[blip.sector_index]

    # --- derived views ---

    @property
    def blips(self) -> List[Blip]:
        """All blips, sector by sector."""
        result = []
        for sector in self.sectors:
            result.extend(sector.blips)
        return result

    @property
    def rings(self) -> List[Ring]:
        """Rings referenced by blips, in first-encountered order (not sorted)."""
        seen = set()
        result = []
        for blip in self.blips:
            if blip.ring_index not in seen:
                seen.add(blip.ring_index)
                result.append(self.known_rings[blip.ring_index])
        return result

    @property
    def ring_count(self) -> int:
        """Number of bands the radius is divided into.

        Non-contiguous orders (e.g. 1 and 3) still get a band for the
        highest order so every ring stays inside the radar.
        """
        rings = self.rings
        if not rings:
            return 0
        return max(len(rings), max(r.order for r in rings))

    # --- layout ---

    def set_sector_angles(self):
        """Give every sector an equal 2*pi/N span, in sector order, from 0."""
        n = len(self.sectors)
        if n == 0:
            raise EmptyRadarError("Radar has no sectors; nothing to lay out")
        span = TWO_PI / n
        for i, sector in enumerate(self.sectors):
            sector.start_angle = i * span
            sector.end_angle = TWO_PI if i == n - 1 else (i + 1) * span

    def sort_blips_by_ring(self):
        """Stable in-place sort of each sector's blips by ring order."""
        for sector in self.sectors:
            sector.blips.sort(key=lambda b: self.known_rings[b.ring_index].order)

    def validate(self):
        for ring in self.known_rings:
            ring.validate()
        for i, sector in enumerate(self.sectors):
            sector.validate()
            for blip in sector.blips:
                assert blip.sector_index == i, \
                    f"blip '{blip.name}' sector_index {blip.sector_index} != {i}"
                assert 0 <= blip.ring_index < len(self.known_rings), \
                    f"blip '{blip.name}' ring_index {blip.ring_index} out of range"
