"""Category legend engine: paged grid layout, label truncation, placement and hit testing."""

from .context import (
    CallbackCache,
    ChartEventManager,
    CursorManager,
    DataService,
    Highlight,
    HighlightManager,
    InteractionManager,
    LayoutService,
    LegendSeries,
    LegendToggle,
    ModuleContext,
    TooltipContent,
    TooltipManager,
    UpdateRequest,
    UpdateService,
)
from .controls.interaction import InteractionEvent, parse_interaction_event
from .datum import LabelFormatter, LabelFormatterParams, LegendDatum, MarkerAppearance
from .errors import LegendError, MarkerShapeAlreadyRegisteredError, MarkerShapeError, UnknownMarkerShapeError
from .geometry import BoundingBox
from .item import ItemSelection, LegendItemNode
from .layout.grid import Column, GridLayout, Page, grid_layout
from .layout.pagination import PaginationControl, PaginationState, reconcile_pagination
from .legend import Legend, LegendItemEvent, LegendListeners
from .markers import MarkerRegistry, MarkerShape, default_marker_registry
from .options import (
    LegendItemOptions,
    LegendLabelOptions,
    LegendMarkerOptions,
    LegendOptions,
    validate_legend_options,
)
from .text.renderer import FontSpec, PillowTextMeasurer, TextMeasurer, TextMetrics
from .text.truncation import LabelTruncator

__all__ = [
    "BoundingBox",
    "CallbackCache",
    "ChartEventManager",
    "Column",
    "CursorManager",
    "DataService",
    "FontSpec",
    "GridLayout",
    "Highlight",
    "HighlightManager",
    "InteractionEvent",
    "InteractionManager",
    "ItemSelection",
    "LabelFormatter",
    "LabelFormatterParams",
    "LabelTruncator",
    "LayoutService",
    "Legend",
    "LegendDatum",
    "LegendError",
    "LegendItemEvent",
    "LegendItemNode",
    "LegendItemOptions",
    "LegendLabelOptions",
    "LegendListeners",
    "LegendMarkerOptions",
    "LegendOptions",
    "LegendSeries",
    "LegendToggle",
    "MarkerAppearance",
    "MarkerRegistry",
    "MarkerShape",
    "MarkerShapeAlreadyRegisteredError",
    "MarkerShapeError",
    "ModuleContext",
    "Page",
    "PaginationControl",
    "PaginationState",
    "PillowTextMeasurer",
    "TextMeasurer",
    "TextMetrics",
    "TooltipContent",
    "TooltipManager",
    "UnknownMarkerShapeError",
    "UpdateRequest",
    "UpdateService",
    "default_marker_registry",
    "grid_layout",
    "parse_interaction_event",
    "reconcile_pagination",
    "validate_legend_options",
]
