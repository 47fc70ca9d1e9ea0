# pcb_gerber/geometry/primitives.py

from __future__ import annotations

from dataclasses import dataclass
import math


@dataclass
class Bounds:
    """
    Axis aligned bounding box in mm, grown one point at a time.

    An empty box starts at +inf/-inf so the first point sets all four
    extrema.
    """
    min_x: float = math.inf
    min_y: float = math.inf
    max_x: float = -math.inf
    max_y: float = -math.inf

    def expand(self, x: float, y: float) -> None:
        self.min_x = min(self.min_x, x)
        self.min_y = min(self.min_y, y)
        self.max_x = max(self.max_x, x)
        self.max_y = max(self.max_y, y)

    @property
    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.min_x, self.min_y, self.max_x, self.max_y))

    @property
    def has_area(self) -> bool:
        return self.is_finite and self.max_x > self.min_x and self.max_y > self.min_y

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y
