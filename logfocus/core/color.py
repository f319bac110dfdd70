"""Filter color allocation.

A filter's colors are derived from one hue: a light "normal" color used for
highlighting and a darker "inverted" color shown while the filter excludes.
Toggling exclude switches between the two without changing the hue.
"""

from __future__ import annotations

import colorsys
import random
import re
from dataclasses import dataclass
from typing import Optional

_HSL_RE = re.compile(r"hsl\((\d+),\s*(\d+)%,\s*(\d+)%\)")


@dataclass(frozen=True)
class ColorPair:
    """Normal and inverted colors derived from one hue.

    ``hue`` is None when the pair was built from a color that is not
    ``hsl(...)``; both colors are then that literal color.
    """

    normal: str
    inverted: str
    hue: Optional[int] = None

    @classmethod
    def from_hue(cls, hue: int) -> "ColorPair":
        hue = hue % 360
        return cls(
            normal=f"hsl({hue}, 40%, 80%)",
            inverted=f"hsl({hue}, 50%, 40%)",
            hue=hue,
        )

    @classmethod
    def from_color(cls, color: str) -> "ColorPair":
        """Derive a pair from a seed color.

        Only the hue of an ``hsl(H, S%, L%)`` color is used; saturation and
        lightness are normalized.
        """
        match = _HSL_RE.search(color)
        if match:
            return cls.from_hue(int(match.group(1)))
        return cls(normal=color, inverted=color)


def hue_distance(a: int, b: int) -> int:
    """Distance between two hues on the color wheel."""
    diff = abs(a - b) % 360
    return min(diff, 360 - diff)


class ColorAllocator:
    """Hands out color pairs whose hues differ from the previous one.

    Args:
        last_hue: Hue of the previously allocated color.
        rng: Random source. Defaults to a new ``random.Random``.
        min_distance: Minimum hue distance from the previous allocation.
    """

    def __init__(
        self,
        last_hue: int = 0,
        rng: Optional[random.Random] = None,
        min_distance: int = 60,
    ):
        if not 0 <= min_distance <= 180:
            raise ValueError(f"min_distance must be between 0 and 180, got {min_distance}")
        self.last_hue = last_hue
        self._rng = rng or random.Random()
        self._min_distance = min_distance

    def next_pair(self) -> ColorPair:
        hue = self._rng.randrange(360)
        while hue_distance(hue, self.last_hue) < self._min_distance:
            hue = self._rng.randrange(360)
        self.last_hue = hue
        return ColorPair.from_hue(hue)


def to_hex(color: str) -> str:
    """Convert an ``hsl(H, S%, L%)`` color to ``#rrggbb``; other colors pass through."""
    match = _HSL_RE.search(color)
    if not match:
        return color
    hue, saturation, lightness = (int(g) for g in match.groups())
    red, green, blue = colorsys.hls_to_rgb(hue / 360, lightness / 100, saturation / 100)
    return "#{:02x}{:02x}{:02x}".format(round(red * 255), round(green * 255), round(blue * 255))
