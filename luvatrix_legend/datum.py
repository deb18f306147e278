from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class MarkerAppearance:
    shape: str = "square"
    fill: str = "#3E95FF"
    stroke: str = "#1F4A80"
    fill_opacity: float = 1.0
    stroke_opacity: float = 1.0

    def __post_init__(self) -> None:
        if not self.shape.strip():
            raise ValueError("MarkerAppearance `shape` must be non-empty")
        for name in ("fill_opacity", "stroke_opacity"):
            value = getattr(self, name)
            if value < 0.0 or value > 1.0:
                raise ValueError(f"MarkerAppearance `{name}` must be in [0, 1]")


@dataclass(frozen=True)
class LegendDatum:
    """One category entry supplied by the host for a layout pass.

    `id` identifies the owning series; `item_id` optionally narrows it to a
    sub-item (e.g. one pie sector).
    """

    id: str
    series_id: str
    label_text: str
    marker: MarkerAppearance = MarkerAppearance()
    enabled: bool = True
    item_id: str | None = None

    @property
    def identity(self) -> str:
        return self.item_id if self.item_id is not None else self.id


@dataclass(frozen=True)
class LabelFormatterParams:
    value: str
    series_id: str
    item_id: str | None = None


class LabelFormatter(Protocol):
    """Turns a datum's raw label into display text."""

    def __call__(self, params: LabelFormatterParams) -> str:
        ...
