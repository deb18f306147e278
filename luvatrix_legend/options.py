from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
import re
from typing import Any, Literal, Mapping

from luvatrix_legend.datum import LabelFormatter


Position = Literal["top", "bottom", "left", "right"]
Orientation = Literal["horizontal", "vertical"]
FontStyle = Literal["normal", "italic", "oblique"]
FontWeight = Literal["normal", "bold", "bolder", "lighter", 100, 200, 300, 400, 500, 600, 700, 800, 900]

POSITIONS: tuple[str, ...] = ("top", "bottom", "left", "right")
ORIENTATIONS: tuple[str, ...] = ("horizontal", "vertical")
_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}([0-9a-fA-F]{2})?$")


def _require_non_negative(owner: str, name: str, value: float | None) -> None:
    if value is not None and value < 0:
        raise ValueError(f"{owner} `{name}` must be >= 0")


@dataclass(frozen=True)
class LegendMarkerOptions:
    size: float = 15.0
    # Gap between the marker and the label within one item.
    padding: float = 8.0
    stroke_width: float = 1.0
    # When set, every item uses this shape regardless of its datum.
    shape: str | None = None

    def __post_init__(self) -> None:
        for name in ("size", "padding", "stroke_width"):
            _require_non_negative("LegendMarkerOptions", name, getattr(self, name))
        if self.shape is not None and not self.shape.strip():
            raise ValueError("LegendMarkerOptions `shape` must be non-empty when provided")


@dataclass(frozen=True)
class LegendLabelOptions:
    max_length: int | None = None
    color: str = "#000000"
    font_style: FontStyle | None = None
    font_weight: FontWeight | None = None
    font_size: float = 12.0
    font_family: str = "Verdana, sans-serif"
    formatter: LabelFormatter | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        _require_non_negative("LegendLabelOptions", "max_length", self.max_length)
        _require_non_negative("LegendLabelOptions", "font_size", self.font_size)
        if not _HEX_COLOR.match(self.color):
            raise ValueError("LegendLabelOptions `color` must be a hex color (#RRGGBB or #RRGGBBAA)")
        if not self.font_family.strip():
            raise ValueError("LegendLabelOptions `font_family` must be non-empty")


@dataclass(frozen=True)
class LegendItemOptions:
    marker: LegendMarkerOptions = field(default_factory=LegendMarkerOptions)
    label: LegendLabelOptions = field(default_factory=LegendLabelOptions)
    max_width: float | None = None
    padding_x: float = 16.0
    padding_y: float = 8.0
    toggle_series_visible: bool = True

    def __post_init__(self) -> None:
        for name in ("max_width", "padding_x", "padding_y"):
            _require_non_negative("LegendItemOptions", name, getattr(self, name))


@dataclass(frozen=True)
class LegendOptions:
    enabled: bool = True
    position: Position = "bottom"
    orientation: Orientation | None = None
    max_width: float | None = None
    max_height: float | None = None
    reverse_order: bool = False
    # Gap between the legend and the rest of the chart.
    spacing: float = 20.0
    item: LegendItemOptions = field(default_factory=LegendItemOptions)

    def __post_init__(self) -> None:
        if self.position not in POSITIONS:
            raise ValueError(f"LegendOptions `position` must be one of {POSITIONS}")
        if self.orientation is not None and self.orientation not in ORIENTATIONS:
            raise ValueError("expecting an orientation keyword such as 'horizontal' or 'vertical'")
        for name in ("max_width", "max_height", "spacing"):
            _require_non_negative("LegendOptions", name, getattr(self, name))

    def resolved_orientation(self) -> Orientation:
        if self.orientation is not None:
            return self.orientation
        if self.position in ("left", "right"):
            return "vertical"
        return "horizontal"


DEFAULT_OPTIONS = LegendOptions()


def validate_legend_options(overrides: Mapping[str, Any] | None = None) -> LegendOptions:
    """Validate nested option overrides and merge them onto the defaults.

    Nested groups (`item`, `item.marker`, `item.label`) accept mappings. Unknown
    keys raise `ValueError`.
    """

    if not overrides:
        return DEFAULT_OPTIONS
    return _merge(DEFAULT_OPTIONS, overrides, path="legend")


def _merge(base: Any, overrides: Mapping[str, Any], *, path: str) -> Any:
    known = {f.name for f in fields(base)}
    changes: dict[str, Any] = {}
    for key, value in overrides.items():
        if key not in known:
            raise ValueError(f"Unknown legend option: {path}.{key}")
        current = getattr(base, key)
        if isinstance(value, Mapping) and hasattr(current, "__dataclass_fields__"):
            changes[key] = _merge(current, value, path=f"{path}.{key}")
        else:
            changes[key] = value
    return replace(base, **changes)


def options_as_dict(options: LegendOptions) -> dict[str, Any]:
    out = asdict(options)
    out["item"]["label"].pop("formatter", None)
    return out
