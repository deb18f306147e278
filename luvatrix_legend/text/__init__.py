from .renderer import FontSpec, PillowTextMeasurer, TextMeasurer, TextMetrics
from .truncation import ELLIPSIS, LabelTruncator, max_item_width, normalize_label

__all__ = [
    "ELLIPSIS",
    "FontSpec",
    "LabelTruncator",
    "PillowTextMeasurer",
    "TextMeasurer",
    "TextMetrics",
    "max_item_width",
    "normalize_label",
]
