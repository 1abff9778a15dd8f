"""Sequential sector colours spaced by the golden angle."""
import numpy as np
from typing import Optional

GOLDEN_RATIO = 1.61803399
GOLDEN_ANGLE_DEG = 360.0 * GOLDEN_RATIO ** -2   # ~137.5 deg

DEFAULT_SATURATION = 45
DEFAULT_LIGHTNESS = 50


class ColourGenerator:
    """Golden-angle hue walk from a random starting offset.

    The offset is drawn once per instance, so two radars built in
    separate sessions do not get the same colour sequence.
    """

    def __init__(self, rng: Optional[np.random.RandomState] = None,
                 saturation: float = DEFAULT_SATURATION,
                 lightness: float = DEFAULT_LIGHTNESS):
        if rng is None:
            rng = np.random.RandomState()
        self.offset = float(rng.uniform(0.0, 360.0))
        self.last_hue = self.offset
        self.saturation = saturation
        self.lightness = lightness

    def next_hue(self) -> float:
        self.last_hue = (self.last_hue + GOLDEN_ANGLE_DEG) % 360.0
        return self.last_hue

    def next_colour(self) -> str:
        """Return the next colour as an 'hsl(h,s%,l%)' string."""
        h = self.next_hue()
        return f"hsl({h:g},{self.saturation:g}%,{self.lightness:g}%)"
