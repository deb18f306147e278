from __future__ import annotations

from dataclasses import dataclass, replace
import math
from typing import Iterable, Literal


GrowDirection = Literal["horizontal", "vertical"]
Side = Literal["top", "bottom", "left", "right"]


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned rectangle in screen space (y grows downward)."""

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("BoundingBox width/height must be >= 0")

    @classmethod
    def zero(cls) -> "BoundingBox":
        return cls(x=0.0, y=0.0, width=0.0, height=0.0)

    @classmethod
    def merge(cls, boxes: Iterable["BoundingBox"]) -> "BoundingBox":
        left = math.inf
        top = math.inf
        right = -math.inf
        bottom = -math.inf
        for box in boxes:
            left = min(left, box.x)
            top = min(top, box.y)
            right = max(right, box.x + box.width)
            bottom = max(bottom, box.y + box.height)
        if left == math.inf:
            return cls.zero()
        return cls(x=left, y=top, width=right - left, height=bottom - top)

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    def contains_point(self, x: float, y: float) -> bool:
        return self.x <= x <= self.x + self.width and self.y <= y <= self.y + self.height

    def clone(self) -> "BoundingBox":
        return replace(self)

    def grow(self, amount: float, direction: GrowDirection | None = None) -> "BoundingBox":
        """Return a copy enlarged by `amount` on both sides of the given axis (both axes when None)."""

        dx = amount if direction in (None, "horizontal") else 0.0
        dy = amount if direction in (None, "vertical") else 0.0
        return BoundingBox(
            x=self.x - dx,
            y=self.y - dy,
            width=max(0.0, self.width + 2 * dx),
            height=max(0.0, self.height + 2 * dy),
        )

    def shrink(self, amount: float, side: Side) -> "BoundingBox":
        """Return a copy with `amount` removed from one edge."""

        if side == "top":
            taken = min(amount, self.height)
            return BoundingBox(x=self.x, y=self.y + taken, width=self.width, height=self.height - taken)
        if side == "bottom":
            return BoundingBox(x=self.x, y=self.y, width=self.width, height=max(0.0, self.height - amount))
        if side == "left":
            taken = min(amount, self.width)
            return BoundingBox(x=self.x + taken, y=self.y, width=self.width - taken, height=self.height)
        if side == "right":
            return BoundingBox(x=self.x, y=self.y, width=max(0.0, self.width - amount), height=self.height)
        raise ValueError(f"unknown side: {side}")

    def translated(self, dx: float, dy: float) -> "BoundingBox":
        return replace(self, x=self.x + dx, y=self.y + dy)

    def same_size(self, other: "BoundingBox") -> bool:
        return self.width == other.width and self.height == other.height

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)
