from __future__ import annotations

import math
from typing import Callable

import numpy as np

from luvatrix_legend.errors import MarkerShapeAlreadyRegisteredError, UnknownMarkerShapeError
from luvatrix_legend.raster.canvas import RGBA, draw_hline, fill_rect


class MarkerShape:
    """A legend marker glyph; `paint` fills it centred on `(cx, cy)` inside a `size` square."""

    tag = "square"

    def paint(self, dst: np.ndarray, cx: float, cy: float, size: float, color: RGBA) -> None:
        half = size / 2.0
        fill_rect(dst, int(round(cx - half)), int(round(cy - half)), int(round(cx + half)) - 1, int(round(cy + half)) - 1, color)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class SquareMarker(MarkerShape):
    tag = "square"


class _SpanMarker(MarkerShape):
    """Shapes painted row by row from a half-width profile."""

    def half_width(self, dy: float, half: float) -> float:
        raise NotImplementedError

    def paint(self, dst: np.ndarray, cx: float, cy: float, size: float, color: RGBA) -> None:
        half = size / 2.0
        top = int(math.floor(cy - half))
        bottom = int(math.ceil(cy + half)) - 1
        for y in range(top, bottom + 1):
            dy = (y + 0.5) - cy
            hw = self.half_width(dy, half)
            if hw <= 0:
                continue
            draw_hline(dst, int(round(cx - hw)), int(round(cx + hw)) - 1, y, color)


class CircleMarker(_SpanMarker):
    tag = "circle"

    def half_width(self, dy: float, half: float) -> float:
        if abs(dy) > half:
            return 0.0
        return math.sqrt(half * half - dy * dy)


class DiamondMarker(_SpanMarker):
    tag = "diamond"

    def half_width(self, dy: float, half: float) -> float:
        return max(0.0, half - abs(dy))


class TriangleMarker(_SpanMarker):
    tag = "triangle"

    def half_width(self, dy: float, half: float) -> float:
        if abs(dy) > half:
            return 0.0
        return (dy + half) / 2.0


class PlusMarker(MarkerShape):
    tag = "plus"

    def paint(self, dst: np.ndarray, cx: float, cy: float, size: float, color: RGBA) -> None:
        half = size / 2.0
        arm = max(1.0, size / 6.0)
        fill_rect(dst, int(round(cx - half)), int(round(cy - arm)), int(round(cx + half)) - 1, int(round(cy + arm)) - 1, color)
        fill_rect(dst, int(round(cx - arm)), int(round(cy - half)), int(round(cx + arm)) - 1, int(round(cy - arm)) - 1, color)
        fill_rect(dst, int(round(cx - arm)), int(round(cy + arm)), int(round(cx + arm)) - 1, int(round(cy + half)) - 1, color)


class CrossMarker(MarkerShape):
    tag = "cross"

    def paint(self, dst: np.ndarray, cx: float, cy: float, size: float, color: RGBA) -> None:
        half = size / 2.0
        arm = max(1.0, size / 6.0)
        top = int(math.floor(cy - half))
        bottom = int(math.ceil(cy + half)) - 1
        for y in range(top, bottom + 1):
            dy = (y + 0.5) - cy
            for centre in (cx + dy, cx - dy):
                draw_hline(dst, int(round(centre - arm)), int(round(centre + arm)) - 1, y, color)


MarkerFactory = Callable[[], MarkerShape]


class MarkerRegistry:
    """Maps marker tags to factories."""

    def __init__(self) -> None:
        self._factories: dict[str, MarkerFactory] = {}

    def register(self, tag: str, factory: MarkerFactory, *, replace: bool = False) -> None:
        key = tag.strip().lower()
        if not key:
            raise ValueError("marker tag must be non-empty")
        if key in self._factories and not replace:
            raise MarkerShapeAlreadyRegisteredError(key)
        self._factories[key] = factory

    def create(self, tag: str) -> MarkerShape:
        factory = self._factories.get(tag.strip().lower())
        if factory is None:
            raise UnknownMarkerShapeError(tag)
        return factory()

    def tags(self) -> tuple[str, ...]:
        return tuple(sorted(self._factories))

    def __contains__(self, tag: object) -> bool:
        return isinstance(tag, str) and tag.strip().lower() in self._factories


def default_marker_registry() -> MarkerRegistry:
    registry = MarkerRegistry()
    for cls in (SquareMarker, CircleMarker, DiamondMarker, TriangleMarker, CrossMarker, PlusMarker):
        registry.register(cls.tag, cls)
    return registry
