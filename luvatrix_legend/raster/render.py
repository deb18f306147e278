from __future__ import annotations

import math
from typing import Literal, TYPE_CHECKING

import numpy as np

from luvatrix_legend.geometry import BoundingBox
from luvatrix_legend.raster.canvas import RGBA, draw_hline, parse_hex_color
from luvatrix_legend.raster.draw_text import draw_text, load_font
from luvatrix_legend.text.renderer import FontSpec

if TYPE_CHECKING:
    from luvatrix_legend.item import LegendItemNode
    from luvatrix_legend.layout.pagination import PaginationControl
    from luvatrix_legend.legend import Legend


ArrowDirection = Literal["left", "right", "up", "down"]

BUTTON_COLOR = "#2D2D2D"
BUTTON_DISABLED_COLOR = "#999999"
BUTTON_HOVER_COLOR = "#0062FF"
PAGINATION_LABEL_COLOR = "#000000"


def render_legend(legend: "Legend", canvas: np.ndarray) -> np.ndarray:
    """Paint the legend's current page and pagination control onto an RGBA canvas in place."""

    if not legend.group_visible:
        return canvas
    measurer = legend.measurer
    for node in legend.items():
        if node.visible:
            _render_item(canvas, node, node.compute_bbox(measurer), measurer)
    if legend.pagination.visible:
        _render_pagination(canvas, legend.pagination, measurer)
    return canvas


def _render_item(dst: np.ndarray, node: "LegendItemNode", bbox: BoundingBox, measurer) -> None:
    size = node.marker_size
    cx = bbox.x + size / 2.0
    cy = bbox.y + bbox.height / 2.0
    stroke_width = node.marker_stroke_width
    if stroke_width > 0:
        stroke = parse_hex_color(node.marker_stroke, node.marker_stroke_opacity * node.opacity)
        node.marker.paint(dst, cx, cy, size, stroke)
    fill = parse_hex_color(node.marker_fill, node.marker_fill_opacity * node.opacity)
    node.marker.paint(dst, cx, cy, max(0.0, size - 2 * stroke_width), fill)

    if not node.text:
        return
    metrics = measurer.measure_text(node.text, node.font)
    text_x = bbox.x + size + node.spacing
    text_y = bbox.y + (bbox.height - metrics.height_px) / 2.0
    _render_text(dst, text_x, text_y, node.text, node.font, parse_hex_color(node.color, node.opacity))


def _render_pagination(dst: np.ndarray, control: "PaginationControl", measurer) -> None:
    if control.orientation == "vertical":
        directions: tuple[ArrowDirection, ArrowDirection] = ("up", "down")
    else:
        directions = ("left", "right")
    for which, direction in zip(("previous", "next"), directions):
        model = control.previous_button if which == "previous" else control.next_button
        if model.disabled:
            color = BUTTON_DISABLED_COLOR
        elif model.hovered:
            color = BUTTON_HOVER_COLOR
        else:
            color = BUTTON_COLOR
        _paint_arrow(dst, control.button_bbox(which), direction, parse_hex_color(color))

    label = control.label_bbox()
    _render_text(dst, label.x, label.y, control.label_text(), control.font, parse_hex_color(PAGINATION_LABEL_COLOR))


def _render_text(dst: np.ndarray, x: float, y: float, text: str, font: FontSpec, color: RGBA) -> None:
    pillow_font = load_font(font.family, font.size_px, bold=font.is_bold, italic=font.is_italic)
    draw_text(dst, int(round(x)), int(round(y)), text, color, font=pillow_font)


def _paint_arrow(dst: np.ndarray, box: BoundingBox, direction: ArrowDirection, color: RGBA) -> None:
    # Isosceles triangle filling `box`, apex towards `direction`.
    left = int(math.floor(box.x))
    right = int(math.ceil(box.x + box.width)) - 1
    top = int(math.floor(box.y))
    bottom = int(math.ceil(box.y + box.height)) - 1
    if right < left or bottom < top:
        return
    half_h = box.height / 2.0
    cy = box.y + half_h
    cx = box.x + box.width / 2.0
    for y in range(top, bottom + 1):
        dy = abs((y + 0.5) - cy)
        if direction in ("left", "right"):
            span = box.width * max(0.0, 1.0 - dy / half_h) if half_h > 0 else 0.0
            if span <= 0:
                continue
            if direction == "right":
                draw_hline(dst, left, int(round(box.x + span)) - 1, y, color)
            else:
                draw_hline(dst, int(round(box.x + box.width - span)), right, y, color)
        else:
            progress = ((y + 0.5) - box.y) / box.height if box.height > 0 else 0.0
            fraction = progress if direction == "up" else 1.0 - progress
            half_w = box.width * fraction / 2.0
            if half_w <= 0:
                continue
            draw_hline(dst, int(round(cx - half_w)), int(round(cx + half_w)) - 1, y, color)
