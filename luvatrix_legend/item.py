from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Sequence

from luvatrix_legend.datum import LegendDatum
from luvatrix_legend.geometry import BoundingBox
from luvatrix_legend.markers import MarkerShape, SquareMarker
from luvatrix_legend.text.renderer import FontSpec, TextMeasurer


@dataclass
class LegendItemNode:
    """Marker + label node for one legend datum.

    Local layout: the marker square sits at x=0, the label starts `spacing`
    after it, and both are centred vertically in a row of
    `max(marker_size, text height)`. `translation_*` places the node inside
    the legend; `origin_*` is the legend's own translation on the chart.
    """

    datum: LegendDatum
    marker: MarkerShape = field(default_factory=SquareMarker)
    marker_tag: str = "square"
    marker_size: float = 15.0
    spacing: float = 8.0
    font: FontSpec = field(default_factory=FontSpec)
    text: str = ""
    translation_x: float = 0.0
    translation_y: float = 0.0
    origin_x: float = 0.0
    origin_y: float = 0.0
    visible: bool = True
    opacity: float = 1.0
    marker_fill: str = "#3E95FF"
    marker_stroke: str = "#1F4A80"
    marker_stroke_width: float = 1.0
    marker_fill_opacity: float = 1.0
    marker_stroke_opacity: float = 1.0
    color: str = "#000000"

    def local_bbox(self, measurer: TextMeasurer) -> BoundingBox:
        metrics = measurer.measure_text(self.text, self.font)
        width = self.marker_size + self.spacing + metrics.width_px
        height = max(self.marker_size, metrics.height_px)
        return BoundingBox(x=0.0, y=0.0, width=width, height=height)

    def compute_bbox(self, measurer: TextMeasurer) -> BoundingBox:
        return self.local_bbox(measurer).translated(
            self.origin_x + self.translation_x,
            self.origin_y + self.translation_y,
        )


class ItemSelection:
    """Pool of item nodes matched to data by position."""

    def __init__(self) -> None:
        self._nodes: list[LegendItemNode] = []

    def update(self, data: Sequence[LegendDatum]) -> list[LegendItemNode]:
        if len(self._nodes) > len(data):
            del self._nodes[len(data) :]
        for i, datum in enumerate(data):
            if i < len(self._nodes):
                self._nodes[i].datum = datum
            else:
                self._nodes.append(LegendItemNode(datum=datum))
        return list(self._nodes)

    def clear(self) -> None:
        self._nodes.clear()

    def nodes(self) -> list[LegendItemNode]:
        return list(self._nodes)

    def __iter__(self) -> Iterator[LegendItemNode]:
        return iter(list(self._nodes))

    def __len__(self) -> int:
        return len(self._nodes)
