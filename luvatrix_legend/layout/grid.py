from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Callable, Sequence

from luvatrix_legend.geometry import BoundingBox
from luvatrix_legend.options import Orientation


@dataclass(frozen=True)
class Column:
    indices: tuple[int, ...]
    bboxes: tuple[BoundingBox, ...]
    column_width: float
    column_height: float


@dataclass(frozen=True)
class Page:
    """Contiguous run of items `[start_index, end_index]` (inclusive) shown together."""

    start_index: int
    end_index: int
    columns: tuple[Column, ...]

    @property
    def row_count(self) -> int:
        return len(self.columns[0].indices) if self.columns else 0

    @property
    def item_count(self) -> int:
        return self.end_index - self.start_index + 1


@dataclass(frozen=True)
class GridLayout:
    pages: tuple[Page, ...]
    max_page_width: float
    max_page_height: float


@dataclass(frozen=True)
class _Axis:
    max: float
    size: Callable[[BoundingBox], float]
    padding: float


def grid_layout(
    *,
    orientation: Orientation,
    bboxes: Sequence[BoundingBox],
    max_width: float,
    max_height: float,
    item_padding_x: float = 0.0,
    item_padding_y: float = 0.0,
    force_result: bool = False,
) -> GridLayout | None:
    """Pack measured item boxes into pages of columns.

    Horizontal orientation fills rows left to right and wraps downward;
    vertical fills columns top to bottom and wraps rightward. Returns None
    when no layout is possible (unbounded width, or an item that fits nowhere
    and `force_result` is off).
    """

    if not math.isfinite(max_width):
        return None

    width_axis = _Axis(max=max_width, size=lambda b: b.width, padding=item_padding_x)
    height_axis = _Axis(max=max_height, size=lambda b: b.height, padding=item_padding_y)
    if orientation == "horizontal":
        primary, secondary = width_axis, height_axis
    else:
        primary, secondary = height_axis, width_axis

    raw_pages: list[list[list[int]]] = []
    processed = 0
    while processed < len(bboxes):
        result = _solve_page(bboxes[processed:], processed, primary, secondary, force_result)
        if result is None:
            return None
        lines, consumed = result
        processed += consumed
        raw_pages.append(lines)

    return _build_pages(raw_pages, orientation, bboxes, item_padding_x, item_padding_y)


def _solve_page(
    bboxes: Sequence[BoundingBox],
    index_offset: int,
    primary: _Axis,
    secondary: _Axis,
    force_result: bool,
) -> tuple[list[list[int]], int] | None:
    guess = _starting_guess(bboxes, primary)
    if guess < 1:
        if not force_result:
            return None
        guess = 1

    while guess >= 1:
        lines = _fill_page(bboxes, index_offset, guess, primary, secondary, force_result)
        if isinstance(lines, int):
            # First line overflowed after `lines` items; retry with one fewer.
            if lines <= 1:
                return None
            guess = min(guess, lines) - 1
            continue
        if lines is None:
            if guess <= 1:
                return None
            guess -= 1
            continue
        return lines, sum(len(line) for line in lines)
    return None


def _fill_page(
    bboxes: Sequence[BoundingBox],
    index_offset: int,
    per_line: int,
    primary: _Axis,
    secondary: _Axis,
    force_result: bool,
) -> list[list[int]] | int | None:
    lines: list[list[int]] = []
    current: list[int] = []
    line_maxima: list[float] = []
    sum_secondary = 0.0
    current_max_secondary = 0.0

    for i, bbox in enumerate(bboxes):
        slot = i % per_line
        if slot == 0:
            sum_secondary += current_max_secondary
            current_max_secondary = 0.0
            if current:
                lines.append(current)
            current = []

        primary_value = primary.size(bbox) + primary.padding
        if slot < len(line_maxima):
            line_maxima[slot] = max(line_maxima[slot], primary_value)
        else:
            line_maxima.append(primary_value)
        current_max_secondary = max(current_max_secondary, secondary.size(bbox) + secondary.padding)

        if sum_secondary + current_max_secondary > secondary.max and (not force_result or lines):
            # This line would overflow the page; it starts the next one.
            current = []
            break

        if sum(line_maxima) > primary.max and not force_result:
            if len(line_maxima) < per_line:
                return len(line_maxima)
            return None

        current.append(i + index_offset)

    if current:
        lines.append(current)
    return lines or None


def _starting_guess(bboxes: Sequence[BoundingBox], primary: _Axis) -> int:
    n = len(bboxes)
    total = 0.0
    for i, bbox in enumerate(bboxes):
        total += primary.size(bbox) + primary.padding
        if total > primary.max:
            if i == 0:
                return 0
            if n / i < 2:
                return math.ceil(n / 2)
            return i
    return n


def _build_pages(
    raw_pages: list[list[list[int]]],
    orientation: Orientation,
    bboxes: Sequence[BoundingBox],
    item_padding_x: float,
    item_padding_y: float,
) -> GridLayout:
    max_page_width = 0.0
    max_page_height = 0.0
    pages: list[Page] = []
    for lines in raw_pages:
        column_indices = _transpose(lines) if orientation == "horizontal" else lines
        columns: list[Column] = []
        for indices in column_indices:
            col_bboxes = tuple(bboxes[i] for i in indices)
            height = sum(b.height + item_padding_y for b in col_bboxes)
            width = max((b.width + item_padding_x for b in col_bboxes), default=0.0)
            columns.append(
                Column(
                    indices=tuple(indices),
                    bboxes=col_bboxes,
                    column_width=float(math.ceil(width)),
                    column_height=float(math.ceil(height)),
                )
            )
        max_page_width = max(max_page_width, sum(c.column_width for c in columns))
        max_page_height = max(max_page_height, max((c.column_height for c in columns), default=0.0))
        flat = [i for line in lines for i in line]
        pages.append(Page(start_index=min(flat), end_index=max(flat), columns=tuple(columns)))
    return GridLayout(pages=tuple(pages), max_page_width=max_page_width, max_page_height=max_page_height)


def _transpose(rows: list[list[int]]) -> list[list[int]]:
    # Only the last row may be short, so each column is a prefix-complete list.
    columns: list[list[int]] = [[] for _ in rows[0]]
    for row in rows:
        for slot, index in enumerate(row):
            columns[slot].append(index)
    return columns
