"""Host-side collaborators the legend talks to.

Each service is a small in-process implementation of the interface the legend
depends on; a host chart can substitute its own objects with the same methods.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
import itertools
import logging
from typing import Any, Callable, Literal, Mapping, Protocol, Sequence

from luvatrix_legend.controls.interaction import InteractionEvent, InteractionType
from luvatrix_legend.datum import LegendDatum
from luvatrix_legend.geometry import BoundingBox


LOGGER = logging.getLogger(__name__)

# Recent requests and toggles kept for inspection.
HISTORY_LIMIT = 64

ChartUpdateType = Literal["scene_render", "process_data"]
ChartMode = Literal["standalone", "integrated"]
ListenerToken = int

_TOKENS = itertools.count(1)


class InteractionManager:
    """Delivers decoded pointer events to listeners until one consumes it."""

    def __init__(self) -> None:
        self._listeners: dict[ListenerToken, tuple[InteractionType, Callable[[InteractionEvent], None]]] = {}

    def add_listener(self, event_type: InteractionType, handler: Callable[[InteractionEvent], None]) -> ListenerToken:
        token = next(_TOKENS)
        self._listeners[token] = (event_type, handler)
        return token

    def remove_listener(self, token: ListenerToken) -> None:
        self._listeners.pop(token, None)

    def listener_count(self) -> int:
        return len(self._listeners)

    def dispatch(self, event: InteractionEvent) -> InteractionEvent:
        for event_type, handler in list(self._listeners.values()):
            if event.consumed:
                break
            if event_type == event.type:
                handler(event)
        return event


@dataclass(frozen=True)
class UpdateRequest:
    update_type: ChartUpdateType
    force_node_data_refresh: bool = False


class UpdateService:
    def __init__(self, on_update: Callable[[UpdateRequest], None] | None = None) -> None:
        self._on_update = on_update
        self.requests: deque[UpdateRequest] = deque(maxlen=HISTORY_LIMIT)

    def update(self, update_type: ChartUpdateType, *, force_node_data_refresh: bool = False) -> None:
        request = UpdateRequest(update_type=update_type, force_node_data_refresh=force_node_data_refresh)
        self.requests.append(request)
        if self._on_update is not None:
            self._on_update(request)


class LayoutService:
    """Runs `start-layout` listeners in registration order, threading the shrink rectangle."""

    def __init__(self) -> None:
        self._listeners: dict[ListenerToken, Callable[[BoundingBox], BoundingBox]] = {}

    def add_listener(self, phase: Literal["start-layout"], handler: Callable[[BoundingBox], BoundingBox]) -> ListenerToken:
        if phase != "start-layout":
            raise ValueError(f"unsupported layout phase: {phase}")
        token = next(_TOKENS)
        self._listeners[token] = handler
        return token

    def remove_listener(self, token: ListenerToken) -> None:
        self._listeners.pop(token, None)

    def listener_count(self) -> int:
        return len(self._listeners)

    def dispatch_start_layout(self, shrink_rect: BoundingBox) -> BoundingBox:
        rect = shrink_rect
        for handler in list(self._listeners.values()):
            rect = handler(rect)
        return rect


@dataclass(frozen=True)
class TooltipContent:
    content: str
    page_x: float
    page_y: float
    show_arrow: bool = False


class TooltipManager:
    def __init__(self) -> None:
        self.exclusive_rects: dict[str, BoundingBox] = {}
        self.tooltips: dict[str, TooltipContent] = {}

    def update_exclusive_rect(self, owner_id: str, rect: BoundingBox | None = None) -> None:
        if rect is None:
            self.exclusive_rects.pop(owner_id, None)
        else:
            self.exclusive_rects[owner_id] = rect

    def update_tooltip(self, owner_id: str, tooltip: TooltipContent) -> None:
        self.tooltips[owner_id] = tooltip

    def remove_tooltip(self, owner_id: str) -> None:
        self.tooltips.pop(owner_id, None)

    def is_excluded(self, x: float, y: float) -> bool:
        return any(rect.contains_point(x, y) for rect in self.exclusive_rects.values())


class CursorManager:
    """Last non-default cursor request wins; `None` withdraws an owner's request."""

    def __init__(self) -> None:
        self._requests: dict[str, str] = {}

    def update_cursor(self, owner_id: str, style: str | None = None) -> None:
        if style is None:
            self._requests.pop(owner_id, None)
        else:
            self._requests.pop(owner_id, None)
            self._requests[owner_id] = style

    @property
    def cursor(self) -> str:
        if not self._requests:
            return "default"
        return next(reversed(self._requests.values()))


class LegendSeries(Protocol):
    id: str

    def legend_data(self) -> Sequence[LegendDatum]:
        ...


@dataclass(frozen=True)
class Highlight:
    series: LegendSeries
    item_id: str | None = None


class HighlightManager:
    def __init__(self) -> None:
        self._highlights: dict[str, Highlight] = {}

    def update_highlight(self, owner_id: str, highlight: Highlight | None = None) -> None:
        if highlight is None:
            self._highlights.pop(owner_id, None)
        else:
            self._highlights[owner_id] = highlight

    def active_highlight(self, owner_id: str) -> Highlight | None:
        return self._highlights.get(owner_id)


class DataService:
    def __init__(self, series: Sequence[LegendSeries] = ()) -> None:
        self._series = list(series)

    def set_series(self, series: Sequence[LegendSeries]) -> None:
        self._series = list(series)

    def get_series(self) -> list[LegendSeries]:
        return list(self._series)


@dataclass(frozen=True)
class LegendToggle:
    kind: Literal["click", "dblclick"]
    series_id: str
    item_id: str | None
    enabled: bool
    num_visible_items: Mapping[str, int] | None = None


class ChartEventManager:
    """Fans legend toggle requests out to the chart's series handlers."""

    def __init__(self) -> None:
        self._handlers: list[Callable[[LegendToggle, LegendSeries], None]] = []
        self.history: deque[LegendToggle] = deque(maxlen=HISTORY_LIMIT)

    def add_handler(self, handler: Callable[[LegendToggle, LegendSeries], None]) -> None:
        self._handlers.append(handler)

    def legend_item_click(self, series: LegendSeries, item_id: str | None, enabled: bool) -> None:
        self._emit(LegendToggle(kind="click", series_id=series.id, item_id=item_id, enabled=enabled), series)

    def legend_item_double_click(
        self,
        series: LegendSeries,
        item_id: str | None,
        enabled: bool,
        num_visible_items: Mapping[str, int],
    ) -> None:
        toggle = LegendToggle(
            kind="dblclick",
            series_id=series.id,
            item_id=item_id,
            enabled=enabled,
            num_visible_items=dict(num_visible_items),
        )
        self._emit(toggle, series)

    def _emit(self, toggle: LegendToggle, series: LegendSeries) -> None:
        self.history.append(toggle)
        for handler in list(self._handlers):
            handler(toggle, series)


class CallbackCache:
    """Memoises host callbacks per parameter set and contains their failures."""

    def __init__(self) -> None:
        self._cache: dict[tuple[int, Any], Any] = {}

    def call(self, fn: Callable[[Any], Any], params: Any) -> Any | None:
        key = (id(fn), params)
        try:
            if key in self._cache:
                return self._cache[key]
        except TypeError:
            key = None
        try:
            result = fn(params)
        except Exception as exc:
            LOGGER.warning("callback %r failed: %s", getattr(fn, "__name__", fn), exc)
            return None
        if key is not None:
            self._cache[key] = result
        return result

    def invalidate(self) -> None:
        self._cache.clear()


@dataclass
class ModuleContext:
    interaction_manager: InteractionManager = field(default_factory=InteractionManager)
    update_service: UpdateService = field(default_factory=UpdateService)
    layout_service: LayoutService = field(default_factory=LayoutService)
    tooltip_manager: TooltipManager = field(default_factory=TooltipManager)
    cursor_manager: CursorManager = field(default_factory=CursorManager)
    highlight_manager: HighlightManager = field(default_factory=HighlightManager)
    data_service: DataService = field(default_factory=DataService)
    chart_event_manager: ChartEventManager = field(default_factory=ChartEventManager)
    callback_cache: CallbackCache = field(default_factory=CallbackCache)
    mode: ChartMode = "standalone"
