from __future__ import annotations

from dataclasses import dataclass, replace
import itertools
import logging
import math
from typing import Callable, Literal, Sequence

from luvatrix_legend.context import Highlight, LegendSeries, ModuleContext, TooltipContent
from luvatrix_legend.controls.interaction import InteractionEvent
from luvatrix_legend.datum import LabelFormatterParams, LegendDatum
from luvatrix_legend.geometry import BoundingBox
from luvatrix_legend.item import ItemSelection, LegendItemNode
from luvatrix_legend.layout.grid import Page
from luvatrix_legend.layout.pagination import (
    PaginationControl,
    PaginationState,
    Reconciliation,
    reconcile_pagination,
    track_page,
    tracking_index_for_page,
)
from luvatrix_legend.markers import MarkerRegistry, SquareMarker, default_marker_registry
from luvatrix_legend.options import LegendOptions, Orientation
from luvatrix_legend.text.renderer import FontSpec, PillowTextMeasurer, TextMeasurer
from luvatrix_legend.text.truncation import LabelTruncator, max_item_width


LOGGER = logging.getLogger(__name__)

UNKNOWN_LABEL = "<unknown>"
PAGINATION_GAP = 8.0
# Share of the chart given to the legend along its thickness axis.
MAX_COEFFICIENT = 0.5
MIN_HEIGHT_COEFFICIENT = 0.2
MIN_WIDTH_COEFFICIENT = 0.25

_LEGEND_IDS = itertools.count(1)


@dataclass(frozen=True)
class LegendItemEvent:
    type: Literal["click", "dblclick"]
    enabled: bool
    series_id: str
    item_id: str | None = None


@dataclass
class LegendListeners:
    legend_item_click: Callable[[LegendItemEvent], None] | None = None
    legend_item_double_click: Callable[[LegendItemEvent], None] | None = None


class Legend:
    """Category legend: lays items out in pages, truncates labels, answers hit tests.

    The legend registers itself for the host's `start-layout` phase, where it
    claims a strip of the chart (see `negotiate_placement`), and for pointer
    events, where it toggles/highlights series and shows full labels for
    truncated items.
    """

    def __init__(
        self,
        ctx: ModuleContext,
        *,
        options: LegendOptions | None = None,
        measurer: TextMeasurer | None = None,
        marker_registry: MarkerRegistry | None = None,
        listeners: LegendListeners | None = None,
    ) -> None:
        self.id = f"legend-{next(_LEGEND_IDS)}"
        self.ctx = ctx
        self.options = options or LegendOptions()
        self.listeners = listeners or LegendListeners()
        self._measurer = measurer or PillowTextMeasurer()
        self._markers = marker_registry or default_marker_registry()
        self._truncator = LabelTruncator(self._measurer)
        self._selection = ItemSelection()
        self._data: tuple[LegendDatum, ...] = ()
        self._enabled = self.options.enabled
        self._visible = True
        self._content_visible = True
        self._marker_shape = self.options.item.marker.shape
        if self._marker_shape is not None:
            self._markers.create(self._marker_shape)
        self._pages: tuple[Page, ...] = ()
        self._max_page_size = (0.0, 0.0)
        self._tracking_index = 0
        self.size: tuple[float, float] = (0.0, 0.0)
        self.previous_size: tuple[float, float] = (0.0, 0.0)
        self.translation_x = 0.0
        self.translation_y = 0.0

        self.pagination = PaginationControl(
            measurer=self._measurer,
            on_page_change=self.update_page_number,
            request_update=lambda update_type: ctx.update_service.update(update_type),
            interaction_manager=ctx.interaction_manager,
            cursor_manager=ctx.cursor_manager,
            owner_id=f"{self.id}-pagination",
        )

        im = ctx.interaction_manager
        interaction_tokens = [
            im.add_listener("click", self._on_click),
            im.add_listener("dblclick", self._on_double_click),
            im.add_listener("hover", self._on_hover),
        ]
        layout_token = ctx.layout_service.add_listener("start-layout", self.negotiate_placement)
        self._destroy_fns: list[Callable[[], None]] = [
            *(lambda t=token: im.remove_listener(t) for token in interaction_tokens),
            lambda: ctx.layout_service.remove_listener(layout_token),
            self.pagination.destroy,
            lambda: ctx.tooltip_manager.update_exclusive_rect(self.id),
        ]

    def destroy(self) -> None:
        for fn in self._destroy_fns:
            fn()
        self._destroy_fns.clear()

    # -- state setters -----------------------------------------------------

    @property
    def data(self) -> tuple[LegendDatum, ...]:
        return self._data

    def set_data(self, data: Sequence[LegendDatum]) -> None:
        self._data = tuple(data)

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = bool(enabled)

    @property
    def visible(self) -> bool:
        return self._visible

    def set_visible(self, visible: bool) -> None:
        self._visible = bool(visible)

    def set_options(self, options: LegendOptions) -> None:
        """Replace the options; a changed forced marker shape invalidates cached nodes."""

        shape_changed = options.item.marker.shape != self._marker_shape
        self.options = options
        self._enabled = options.enabled
        if shape_changed:
            self.set_marker_shape(options.item.marker.shape)

    def set_marker_shape(self, shape: str | None) -> None:
        """Force one marker shape for every item (None restores per-datum shapes).

        Invalidates cached visual nodes; they are rebuilt on the next layout.
        Raises `UnknownMarkerShapeError` for unregistered shapes.
        """

        if shape is not None:
            self._markers.create(shape)
        self._marker_shape = shape
        if self.options.item.marker.shape != shape:
            self.options = replace(
                self.options,
                item=replace(self.options.item, marker=replace(self.options.item.marker, shape=shape)),
            )
        self._selection.clear()
        self.ctx.update_service.update("scene_render")

    @property
    def group_visible(self) -> bool:
        return self._enabled and self._visible and self._content_visible and bool(self._pages) and len(self._data) > 0

    @property
    def pages(self) -> tuple[Page, ...]:
        return self._pages

    @property
    def truncated_items(self) -> frozenset[str]:
        return frozenset(self._truncator.truncated_items)

    def is_truncated(self, datum: LegendDatum) -> bool:
        return datum.identity in self._truncator.truncated_items

    @property
    def measurer(self) -> TextMeasurer:
        return self._measurer

    def items(self) -> list[LegendItemNode]:
        return self._selection.nodes()

    def orientation(self) -> Orientation:
        return self.options.resolved_orientation()

    def pagination_state(self) -> PaginationState:
        return PaginationState(
            current_page=self.pagination.current_page,
            total_pages=self.pagination.total_pages,
            visible=self.pagination.visible,
            translation=(self.pagination.translation_x, self.pagination.translation_y),
            tracking_index=self._tracking_index,
        )

    def size_changed(self) -> bool:
        return self.size != self.previous_size

    # -- sizing and layout -------------------------------------------------

    def compute_dimensions(self, rect: BoundingBox) -> tuple[float, float]:
        """Size hint for the legend inside `rect`.

        Top/bottom legends take the full width and 20-50% of the height
        (more on portrait charts); left/right legends take the full height
        and 25-50% of the width (more on landscape charts). Explicit
        `max_width`/`max_height` override the heuristics.
        """

        width, height = rect.width, rect.height
        aspect_ratio = width / height if height > 0 else math.inf
        opts = self.options
        if opts.position in ("top", "bottom"):
            if aspect_ratio <= 0:
                coefficient = MAX_COEFFICIENT
            elif aspect_ratio < 1:
                coefficient = min(MAX_COEFFICIENT, MIN_HEIGHT_COEFFICIENT * (1 / aspect_ratio))
            else:
                coefficient = MIN_HEIGHT_COEFFICIENT
            legend_width = min(opts.max_width, width) if opts.max_width is not None else width
            legend_height = min(opts.max_height, height) if opts.max_height is not None else _round_half_up(height * coefficient)
        else:
            if aspect_ratio > 1:
                coefficient = min(MAX_COEFFICIENT, MIN_WIDTH_COEFFICIENT * aspect_ratio)
            else:
                coefficient = MIN_WIDTH_COEFFICIENT
            legend_width = min(opts.max_width, width) if opts.max_width is not None else _round_half_up(width * coefficient)
            legend_height = min(opts.max_height, height) if opts.max_height is not None else height
        return (float(legend_width), float(legend_height))

    def perform_layout(self, width: float, height: float) -> tuple[float, float] | None:
        """Lay the legend out inside a `width` x `height` hint.

        Returns the occupied size, or None when the hint is unusable (the
        previous layout is left untouched). The occupied size may exceed the
        hint; compare `size` with `previous_size` to decide whether the host
        needs another layout pass.
        """

        if not math.isfinite(width) or width <= 0:
            LOGGER.debug("skipping legend layout for unusable width %s", width)
            return None
        height = max(1.0, height)

        item = self.options.item
        marker = item.marker
        data = list(self._data)
        if self.options.reverse_order:
            data.reverse()
        nodes = self._selection.update(data)

        font = self._label_font()
        item_width_limit = max_item_width(width, item.max_width)
        padded_marker_width = marker.size + marker.padding + item.padding_x
        bboxes: list[BoundingBox] = []
        for node in nodes:
            self._prepare_node(node, font)
            label = self._item_label(node.datum)
            node.text = self._truncator.truncate(
                label if label is not None else UNKNOWN_LABEL,
                max_length=item.label.max_length,
                max_item_width=item_width_limit,
                padded_marker_width=padded_marker_width,
                font=font,
                identity=node.datum.identity,
            )
            bboxes.append(node.local_bbox(self._measurer))
        self._truncator.truncated_items &= {datum.identity for datum in data}

        reconciliation = self._update_pagination(bboxes, width, height)
        self._pages = reconciliation.pages
        self._max_page_size = (
            reconciliation.max_page_width - item.padding_x,
            reconciliation.max_page_height - item.padding_y,
        )

        page_number = self.pagination.current_page
        if not self._pages or page_number >= len(self._pages):
            self._content_visible = False
            return None
        self._content_visible = True

        self.update_positions(page_number)
        self.update()

        paged = self.compute_paged_bbox()
        self.previous_size = self.size
        self.size = (paged.width, paged.height)
        return self.size

    def _update_pagination(self, bboxes: list[BoundingBox], width: float, height: float) -> Reconciliation:
        item = self.options.item
        orientation = self.orientation()
        vertical_pagination = self.options.position in ("left", "right")
        pagination = self.pagination
        pagination.orientation = orientation
        pagination.translation_x = 0.0
        pagination.translation_y = 0.0

        reconciliation = reconcile_pagination(
            pagination,
            bboxes,
            width=width,
            height=height,
            orientation=orientation,
            vertical_pagination=vertical_pagination,
            item_padding_x=item.padding_x,
            item_padding_y=item.padding_y,
            force_result=self.options.max_width is not None or self.options.max_height is not None,
        )
        pagination.set_current_page(track_page(reconciliation.pages, self._tracking_index, len(bboxes)))

        items_width = reconciliation.max_page_width - item.padding_x
        items_height = reconciliation.max_page_height - item.padding_y
        control_height = pagination.compute_bbox().height
        if vertical_pagination:
            pagination.translation_x = 0.0
            pagination.translation_y = items_height + PAGINATION_GAP
        else:
            pagination.translation_x = items_width + PAGINATION_GAP
            pagination.translation_y = (items_height - control_height) / 2.0
        return reconciliation

    def update_positions(self, page_number: int = 0) -> None:
        """Place the items of `page_number`; items on other pages are hidden, not dropped."""

        pages = self._pages
        if not pages or not 0 <= page_number < len(pages):
            return
        page = pages[page_number]
        columns = page.columns
        column_count = len(columns)
        row_count = page.row_count
        horizontal = self.orientation() == "horizontal"
        item_height = columns[0].bboxes[0].height + self.options.item.padding_y
        row_sum_column_widths: dict[int, float] = {}

        for i, node in enumerate(self._selection):
            if i < page.start_index or i > page.end_index:
                node.visible = False
                continue
            page_index = i - page.start_index
            if horizontal:
                column_index = page_index % column_count
                row_index = page_index // column_count
            else:
                column_index = page_index // row_count
                row_index = page_index % row_count

            node.visible = True
            if column_index >= column_count:
                continue
            column = columns[column_index]
            x = row_sum_column_widths.get(row_index, 0.0)
            y = item_height * row_index
            row_sum_column_widths[row_index] = x + column.column_width
            # Whole pixels keep marker edges crisp.
            node.translation_x = math.floor(x)
            node.translation_y = math.floor(y)

    def update_page_number(self, page_number: int) -> None:
        pages = self._pages
        if not 0 <= page_number < len(pages):
            return
        self._tracking_index = tracking_index_for_page(pages, page_number)
        self.pagination.set_current_page(page_number)
        self.update_positions(page_number)
        self.ctx.update_service.update("scene_render")

    def update(self) -> None:
        """Refresh styling that does not affect layout."""

        stroke_width = self.options.item.marker.stroke_width
        color = self.options.item.label.color
        for node in self._selection:
            marker = node.datum.marker
            node.marker_fill = marker.fill
            node.marker_stroke = marker.stroke
            node.marker_stroke_width = stroke_width
            node.marker_fill_opacity = marker.fill_opacity
            node.marker_stroke_opacity = marker.stroke_opacity
            node.opacity = 1.0 if node.datum.enabled else 0.5
            node.color = color

    def _label_font(self) -> FontSpec:
        label = self.options.item.label
        return FontSpec(
            family=label.font_family,
            size_px=label.font_size,
            style=label.font_style,
            weight=label.font_weight,
        )

    def _prepare_node(self, node: LegendItemNode, font: FontSpec) -> None:
        marker = self.options.item.marker
        tag = self._marker_shape or node.datum.marker.shape
        if node.marker_tag != tag:
            if tag in self._markers:
                node.marker = self._markers.create(tag)
            else:
                LOGGER.debug("unknown marker shape %r, drawing a square", tag)
                node.marker = SquareMarker()
            node.marker_tag = tag
        node.marker_size = marker.size
        node.spacing = marker.padding
        node.font = font

    def _item_label(self, datum: LegendDatum) -> str | None:
        formatter = self.options.item.label.formatter
        if formatter is None:
            return datum.label_text
        params = LabelFormatterParams(value=datum.label_text, series_id=datum.series_id, item_id=datum.item_id)
        result = self.ctx.callback_cache.call(formatter, params)
        return None if result is None else str(result)

    # -- geometry queries --------------------------------------------------

    def _set_translation(self, x: float, y: float) -> None:
        self.translation_x = x
        self.translation_y = y
        for node in self._selection:
            node.origin_x = x
            node.origin_y = y
        self.pagination.origin_x = x
        self.pagination.origin_y = y

    def compute_bbox(self) -> BoundingBox:
        boxes = [node.compute_bbox(self._measurer) for node in self._selection if node.visible]
        if self.pagination.visible:
            boxes.append(self.pagination.compute_bbox())
        if not boxes:
            return BoundingBox(x=self.translation_x, y=self.translation_y, width=0.0, height=0.0)
        return BoundingBox.merge(boxes)

    def compute_paged_bbox(self) -> BoundingBox:
        """Like `compute_bbox`, but as large as the largest page so paging never resizes the legend."""

        actual = self.compute_bbox()
        if len(self._pages) <= 1:
            return actual
        max_page_width, max_page_height = self._max_page_size
        return replace(
            actual,
            width=max(max_page_width, actual.width),
            height=max(max_page_height, actual.height),
        )

    def datum_at(self, x: float, y: float) -> LegendDatum | None:
        """Legend datum under the point, or None outside the current page's items.

        Boxes are grown by half the item padding so gaps belong to the nearer
        item. A point left in a gap resolves to the closest item whose origin
        is above-left of it.
        """

        if not self.group_visible:
            return None
        half_x = self.options.item.padding_x / 2.0
        half_y = self.options.item.padding_y / 2.0
        grown_boxes: list[BoundingBox] = []
        closest_distance = math.inf
        closest: LegendDatum | None = None
        for node in self._selection:
            if not node.visible:
                continue
            box = node.compute_bbox(self._measurer).grow(half_x, "horizontal").grow(half_y, "vertical")
            if box.contains_point(x, y):
                return node.datum

            dist_x = x - box.x - half_x
            dist_y = y - box.y - half_y
            distance = dist_x**2 + dist_y**2
            if dist_x >= 0 and dist_y >= 0 and distance < closest_distance:
                closest_distance = distance
                closest = node.datum
            grown_boxes.append(box)

        if not grown_boxes or not BoundingBox.merge(grown_boxes).contains_point(x, y):
            return None
        return closest

    # -- host layout -------------------------------------------------------

    def negotiate_placement(self, shrink_rect: BoundingBox) -> BoundingBox:
        """Claim a strip of `shrink_rect` for the legend and return what is left."""

        new_rect = shrink_rect.clone()
        if not self._enabled or not self._data:
            return new_rect

        legend_width, legend_height = self.compute_dimensions(shrink_rect)
        self._set_translation(0.0, 0.0)
        self.perform_layout(legend_width, legend_height)
        legend_bbox = self.compute_paged_bbox()
        position = self.options.position

        if not self.group_visible:
            self.ctx.tooltip_manager.update_exclusive_rect(self.id)
            return new_rect

        if position in ("top", "bottom"):
            translate_x = (shrink_rect.width - legend_bbox.width) / 2.0
            translate_y = 0.0 if position == "top" else shrink_rect.height - legend_bbox.height
            new_rect = new_rect.shrink(legend_bbox.height, position)
        else:
            translate_x = 0.0 if position == "left" else shrink_rect.width - legend_bbox.width
            translate_y = (shrink_rect.height - legend_bbox.height) / 2.0
            new_rect = new_rect.shrink(legend_bbox.width, position)

        self._set_translation(
            math.floor(-legend_bbox.x + shrink_rect.x + translate_x),
            math.floor(-legend_bbox.y + shrink_rect.y + translate_y),
        )
        new_rect = new_rect.shrink(self.options.spacing, position)
        positioned = legend_bbox.translated(self.translation_x, self.translation_y)
        self.ctx.tooltip_manager.update_exclusive_rect(self.id, positioned)
        return new_rect

    # -- interaction -------------------------------------------------------

    def _pointer_inside(self, event: InteractionEvent) -> bool:
        return self.group_visible and self.compute_bbox().contains_point(event.offset_x, event.offset_y)

    def _find_series(self, series_id: str) -> LegendSeries | None:
        for series in self.ctx.data_service.get_series():
            if series.id == series_id:
                return series
        return None

    def _on_click(self, event: InteractionEvent) -> None:
        if not self._pointer_inside(event):
            return
        datum = self.datum_at(event.offset_x, event.offset_y)
        if datum is None:
            return
        series = self._find_series(datum.id)
        if series is None:
            return
        event.consume()

        enabled = datum.enabled
        if self.options.item.toggle_series_visible:
            enabled = not datum.enabled
            self.ctx.chart_event_manager.legend_item_click(series, datum.item_id, enabled)

        if enabled:
            self.ctx.highlight_manager.update_highlight(self.id, Highlight(series=series, item_id=datum.item_id))
        else:
            self.ctx.highlight_manager.update_highlight(self.id)

        self.ctx.update_service.update("process_data", force_node_data_refresh=True)

        if self.listeners.legend_item_click is not None:
            self.listeners.legend_item_click(
                LegendItemEvent(type="click", enabled=enabled, series_id=series.id, item_id=datum.item_id)
            )

    def _on_double_click(self, event: InteractionEvent) -> None:
        # Integrated charts create several chart instances; double click is not reliable there.
        if self.ctx.mode == "integrated":
            return
        if not self._pointer_inside(event):
            return
        datum = self.datum_at(event.offset_x, event.offset_y)
        if datum is None:
            return
        series = self._find_series(datum.id)
        if series is None:
            return
        event.consume()

        if self.options.item.toggle_series_visible:
            legend_data = [d for s in self.ctx.data_service.get_series() for d in s.legend_data()]
            num_visible_items: dict[str, int] = {}
            for d in legend_data:
                num_visible_items.setdefault(d.series_id, 0)
                if d.enabled:
                    num_visible_items[d.series_id] += 1
            clicked = next(
                (d for d in legend_data if d.item_id == datum.item_id and d.series_id == datum.series_id),
                None,
            )
            self.ctx.chart_event_manager.legend_item_double_click(
                series,
                datum.item_id,
                clicked.enabled if clicked is not None else False,
                num_visible_items,
            )

        self.ctx.update_service.update("process_data", force_node_data_refresh=True)

        if self.listeners.legend_item_double_click is not None:
            self.listeners.legend_item_double_click(
                LegendItemEvent(type="dblclick", enabled=True, series_id=series.id, item_id=datum.item_id)
            )

    def _on_hover(self, event: InteractionEvent) -> None:
        if not self._enabled:
            return
        ctx = self.ctx
        if not self._pointer_inside(event):
            ctx.cursor_manager.update_cursor(self.id)
            ctx.highlight_manager.update_highlight(self.id)
            ctx.tooltip_manager.remove_tooltip(self.id)
            return

        # Nothing underneath the legend should react to this pointer.
        event.consume()

        datum = self.datum_at(event.offset_x, event.offset_y)
        if datum is None:
            ctx.cursor_manager.update_cursor(self.id)
            ctx.highlight_manager.update_highlight(self.id)
            ctx.tooltip_manager.remove_tooltip(self.id)
            return

        series = self._find_series(datum.id)
        if self.is_truncated(datum):
            label = self._item_label(datum)
            ctx.tooltip_manager.update_tooltip(
                self.id,
                TooltipContent(
                    content=label if label is not None else UNKNOWN_LABEL,
                    page_x=event.page_x,
                    page_y=event.page_y,
                ),
            )
        else:
            ctx.tooltip_manager.remove_tooltip(self.id)

        listeners = self.listeners
        if (
            self.options.item.toggle_series_visible
            or listeners.legend_item_click is not None
            or listeners.legend_item_double_click is not None
        ):
            ctx.cursor_manager.update_cursor(self.id, "pointer")

        if datum.enabled and series is not None:
            ctx.highlight_manager.update_highlight(self.id, Highlight(series=series, item_id=datum.item_id))
        else:
            ctx.highlight_manager.update_highlight(self.id)


def _round_half_up(value: float) -> float:
    return float(math.floor(value + 0.5))
