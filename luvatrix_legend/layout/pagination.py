from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Literal, Sequence

from luvatrix_legend.context import ChartUpdateType, CursorManager, InteractionManager, ListenerToken
from luvatrix_legend.controls.button import ButtonModel
from luvatrix_legend.controls.interaction import InteractionEvent
from luvatrix_legend.geometry import BoundingBox
from luvatrix_legend.layout.grid import GridLayout, Page, grid_layout
from luvatrix_legend.options import Orientation
from luvatrix_legend.text.renderer import FontSpec, TextMeasurer


LOGGER = logging.getLogger(__name__)

MAX_RECONCILE_PASSES = 10

ButtonName = Literal["previous", "next"]


@dataclass(frozen=True)
class PaginationState:
    current_page: int
    total_pages: int
    visible: bool
    translation: tuple[float, float]
    tracking_index: int


class PaginationControl:
    """Previous/next buttons around a `current / total` label.

    The control sizes itself from `total_pages`; it is hidden (zero-sized)
    whenever everything fits on one page.
    """

    def __init__(
        self,
        *,
        measurer: TextMeasurer,
        on_page_change: Callable[[int], None],
        request_update: Callable[[ChartUpdateType], None] | None = None,
        interaction_manager: InteractionManager | None = None,
        cursor_manager: CursorManager | None = None,
        owner_id: str = "pagination",
        marker_size: float = 15.0,
        spacing: float = 8.0,
        font: FontSpec | None = None,
    ) -> None:
        self._measurer = measurer
        self._on_page_change = on_page_change
        self._request_update = request_update
        self._interaction_manager = interaction_manager
        self._cursor_manager = cursor_manager
        self.owner_id = owner_id
        self.marker_size = marker_size
        self.spacing = spacing
        self.font = font or FontSpec(size_px=12.0)
        self.current_page = 0
        self.total_pages = 0
        self.visible = False
        self.orientation: Orientation = "horizontal"
        self.translation_x = 0.0
        self.translation_y = 0.0
        # Translation of the owning legend on the chart.
        self.origin_x = 0.0
        self.origin_y = 0.0
        self.previous_button = ButtonModel()
        self.next_button = ButtonModel()
        self._listener_tokens: list[ListenerToken] = []
        if interaction_manager is not None:
            self._listener_tokens.append(interaction_manager.add_listener("click", self._on_click))
            self._listener_tokens.append(interaction_manager.add_listener("hover", self._on_hover))
        self.update()

    def destroy(self) -> None:
        if self._interaction_manager is not None:
            for token in self._listener_tokens:
                self._interaction_manager.remove_listener(token)
        self._listener_tokens.clear()

    def set_total_pages(self, total_pages: int) -> None:
        self.total_pages = max(0, int(total_pages))
        self.visible = self.total_pages > 1
        self.update()

    def set_current_page(self, page: int) -> None:
        self.current_page = int(page)
        self.update()

    def update(self) -> None:
        last = max(0, self.total_pages - 1)
        self.current_page = max(0, min(self.current_page, last))
        self.previous_button.set_disabled(self.current_page <= 0)
        self.next_button.set_disabled(self.current_page >= last)

    def label_text(self) -> str:
        return f"{self.current_page + 1} / {self.total_pages}"

    def label_bbox(self) -> BoundingBox:
        return self._local_layout()["label"].translated(*self._offset())

    def button_bbox(self, which: ButtonName) -> BoundingBox:
        return self._local_layout()[which].translated(*self._offset())

    def compute_bbox(self) -> BoundingBox:
        if not self.visible:
            return BoundingBox.zero()
        boxes = self._local_layout().values()
        return BoundingBox.merge(boxes).translated(*self._offset())

    def _offset(self) -> tuple[float, float]:
        return (self.origin_x + self.translation_x, self.origin_y + self.translation_y)

    def _local_layout(self) -> dict[str, BoundingBox]:
        metrics = self._measurer.measure_text(self.label_text(), self.font)
        size = self.marker_size
        row_h = max(size, metrics.height_px)
        button_y = (row_h - size) / 2.0
        label_x = size + self.spacing
        next_x = label_x + metrics.width_px + self.spacing
        return {
            "previous": BoundingBox(x=0.0, y=button_y, width=size, height=size),
            "label": BoundingBox(x=label_x, y=(row_h - metrics.height_px) / 2.0, width=metrics.width_px, height=metrics.height_px),
            "next": BoundingBox(x=next_x, y=button_y, width=size, height=size),
        }

    def _button_at(self, x: float, y: float) -> ButtonName | None:
        for which in ("previous", "next"):
            if self.button_bbox(which).contains_point(x, y):
                return which
        return None

    def _model(self, which: ButtonName) -> ButtonModel:
        return self.previous_button if which == "previous" else self.next_button

    def _on_click(self, event: InteractionEvent) -> None:
        if not self.visible:
            return
        which = self._button_at(event.offset_x, event.offset_y)
        if which is None or not self._model(which).press():
            return
        event.consume()
        step = -1 if which == "previous" else 1
        self.set_current_page(self.current_page + step)
        self._on_page_change(self.current_page)

    def _on_hover(self, event: InteractionEvent) -> None:
        if not self.visible:
            return
        which = self._button_at(event.offset_x, event.offset_y)
        before = (self.previous_button.state, self.next_button.state)
        self.previous_button.set_hovered(which == "previous")
        self.next_button.set_hovered(which == "next")
        if self._cursor_manager is not None:
            over_enabled = which is not None and not self._model(which).disabled
            self._cursor_manager.update_cursor(self.owner_id, "pointer" if over_enabled else None)
        if which is not None:
            event.consume()
        if before != (self.previous_button.state, self.next_button.state) and self._request_update is not None:
            self._request_update("scene_render")


@dataclass(frozen=True)
class Reconciliation:
    pages: tuple[Page, ...]
    max_page_width: float
    max_page_height: float
    pagination_bbox: BoundingBox
    iterations: int
    converged: bool


GridSolver = Callable[..., GridLayout | None]


def reconcile_pagination(
    control: PaginationControl,
    bboxes: Sequence[BoundingBox],
    *,
    width: float,
    height: float,
    orientation: Orientation,
    vertical_pagination: bool,
    item_padding_x: float,
    item_padding_y: float,
    force_result: bool,
    solver: GridSolver = grid_layout,
) -> Reconciliation:
    """Lay out items and size the pagination control until both agree.

    The control's footprint is subtracted from the available space along the
    axis it occupies (height when stacked below the items, width when beside
    them). The loop stops once the control's size repeats, once it becomes
    hidden, or after `MAX_RECONCILE_PASSES` solver calls.
    """

    pagination_bbox = control.compute_bbox()
    pages: tuple[Page, ...] = ()
    max_page_width = 0.0
    max_page_height = 0.0
    converged = False
    iterations = 0

    while iterations < MAX_RECONCILE_PASSES:
        iterations += 1
        max_width = width - (0.0 if vertical_pagination else pagination_bbox.width)
        max_height = height - (pagination_bbox.height if vertical_pagination else 0.0)
        layout = solver(
            orientation=orientation,
            bboxes=bboxes,
            max_width=max_width,
            max_height=max_height,
            item_padding_x=item_padding_x,
            item_padding_y=item_padding_y,
            force_result=force_result,
        )
        pages = layout.pages if layout is not None else ()
        max_page_width = layout.max_page_width if layout is not None else 0.0
        max_page_height = layout.max_page_height if layout is not None else 0.0

        control.set_total_pages(len(pages))
        next_bbox = control.compute_bbox()
        if not control.visible:
            converged = True
            pagination_bbox = next_bbox
            break
        if next_bbox.same_size(pagination_bbox):
            converged = True
            break
        pagination_bbox = next_bbox

    if not converged:
        LOGGER.warning("unable to find stable legend layout after %d passes", iterations)

    return Reconciliation(
        pages=pages,
        max_page_width=max_page_width,
        max_page_height=max_page_height,
        pagination_bbox=pagination_bbox,
        iterations=iterations,
        converged=converged,
    )


def track_page(pages: Sequence[Page], tracking_index: int, item_count: int) -> int:
    """Page that should be current after re-pagination to keep `tracking_index` in view."""

    if not pages:
        return 0
    index = min(tracking_index, item_count)
    for page_number, page in enumerate(pages):
        if page.end_index >= index:
            return page_number
    return len(pages) - 1


def tracking_index_for_page(pages: Sequence[Page], page_number: int) -> int:
    page = pages[page_number]
    if page.start_index == 0:
        return 0
    if page_number == len(pages) - 1:
        return page.end_index
    return (page.start_index + page.end_index) // 2
