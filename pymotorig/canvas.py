"""
Drawing surface with a save/restore transform stack.

Canvas wraps a pygame Surface and lets callers draw in world units (meters)
while it keeps track of the current world-to-pixel transform, much like a
2D canvas context: ``save()``, ``translate()``, ``rotate()``, draw, then
``restore()``.
"""

import numpy as np
import pygame
from typing import List, Sequence, Tuple

from .transforms import apply_to_point, compose, identity, linear_scale, rotate, scale, translate


Color = Tuple[int, ...]


class Canvas:
    """
    World-unit drawing on top of a pygame Surface.

    Attributes:
        surface: Target pygame Surface
    """

    def __init__(self, surface: pygame.Surface):
        if surface is None:
            raise ValueError("Canvas needs a pygame Surface")
        self.surface = surface
        self._matrix = identity()
        self._stack: List[np.ndarray] = []

    @property
    def width(self) -> int:
        return self.surface.get_width()

    @property
    def height(self) -> int:
        return self.surface.get_height()

    @property
    def matrix(self) -> np.ndarray:
        """Current world-to-pixel transform (copy)."""
        return self._matrix.copy()

    @property
    def depth(self) -> int:
        """Number of saved transforms not yet restored."""
        return len(self._stack)

    def save(self) -> None:
        self._stack.append(self._matrix.copy())

    def restore(self) -> None:
        if not self._stack:
            raise RuntimeError("restore() called without a matching save()")
        self._matrix = self._stack.pop()

    def reset_transform(self) -> None:
        self._matrix = identity()

    def translate(self, dx: float, dy: float) -> None:
        self._matrix = compose(self._matrix, translate(dx, dy))

    def rotate(self, angle: float) -> None:
        self._matrix = compose(self._matrix, rotate(angle))

    def scale(self, sx: float, sy: float = None) -> None:
        self._matrix = compose(self._matrix, scale(sx, sy))

    def to_pixels(self, point: Sequence[float]) -> Tuple[float, float]:
        x, y = apply_to_point(self._matrix, point)
        return float(x), float(y)

    def _pixel_width(self, width: float) -> int:
        if width <= 0:
            return 0
        return max(1, int(round(width * linear_scale(self._matrix))))

    def clear(self, color: Color = (255, 255, 255)) -> None:
        self.surface.fill(color)

    def polygon(self, points: Sequence, color: Color, width: float = 0.005) -> None:
        """Closed polygon; width 0 fills it."""
        pixels = [self.to_pixels(p) for p in points]
        if len(pixels) < 3:
            return
        pygame.draw.polygon(self.surface, color, pixels, self._pixel_width(width))

    def circle(self, center: Sequence[float], radius: float, color: Color, width: float = 0.005) -> None:
        """Circle outline; width 0 fills it."""
        pixel_radius = radius * linear_scale(self._matrix)
        pygame.draw.circle(self.surface, color, self.to_pixels(center), max(1.0, pixel_radius),
                           self._pixel_width(width))

    def line(self, start: Sequence[float], end: Sequence[float], color: Color, width: float = 0.005) -> None:
        pygame.draw.line(self.surface, color, self.to_pixels(start), self.to_pixels(end),
                         max(1, self._pixel_width(width)))

    def lines(self, points: Sequence, color: Color, width: float = 0.005, closed: bool = False) -> None:
        pixels = [self.to_pixels(p) for p in points]
        if len(pixels) < 2:
            return
        pygame.draw.lines(self.surface, color, closed, pixels, max(1, self._pixel_width(width)))

    def rect(self, x: float, y: float, w: float, h: float, color: Color, width: float = 0.005) -> None:
        """Rectangle with top-left corner (x, y) in the current frame."""
        self.polygon([(x, y), (x + w, y), (x + w, y + h), (x, y + h)], color, width)
