from __future__ import annotations

import math
import re

from luvatrix_legend.text.renderer import FontSpec, TextMeasurer


ELLIPSIS = "..."
_LINE_BREAKS = re.compile(r"\r?\n")


def normalize_label(text: str) -> str:
    return _LINE_BREAKS.sub(" ", text)


class LabelTruncator:
    """Fits legend labels into a character budget and a pixel budget.

    Labels that had to be shortened are remembered by datum identity in
    `truncated_items` so hover can show the full text.
    """

    def __init__(self, measurer: TextMeasurer) -> None:
        self._measurer = measurer
        self._char_widths: dict[str, dict[str, float]] = {}
        self.truncated_items: set[str] = set()

    def truncate(
        self,
        text: str,
        *,
        max_length: int | None,
        max_item_width: float,
        padded_marker_width: float,
        font: FontSpec,
        identity: str,
    ) -> str:
        text = normalize_label(text)
        add_ellipsis = False

        if max_length is not None and len(text) > max_length:
            text = text[:max_length]
            add_ellipsis = True

        label_width = padded_marker_width + self._measurer.measure_text(text, font).width_px
        if label_width > max_item_width:
            widths = self.character_widths(font)
            cumulative = padded_marker_width + widths[ELLIPSIS]
            kept: list[str] = []
            for char in text:
                width = widths.get(char)
                if width is None:
                    width = self._measurer.measure_text(char, font).width_px
                    widths[char] = width
                cumulative += width
                if cumulative > max_item_width:
                    break
                kept.append(char)
            text = "".join(kept)
            add_ellipsis = True

        if add_ellipsis:
            self.truncated_items.add(identity)
            return text + ELLIPSIS
        self.truncated_items.discard(identity)
        return text

    def character_widths(self, font: FontSpec) -> dict[str, float]:
        widths = self._char_widths.get(font.descriptor)
        if widths is None:
            widths = {ELLIPSIS: self._measurer.measure_text(ELLIPSIS, font).width_px}
            self._char_widths[font.descriptor] = widths
        return widths

    def cached_fonts(self) -> tuple[str, ...]:
        return tuple(self._char_widths)


def max_item_width(width: float, item_max_width: float | None, *, ratio: float = 0.8) -> float:
    if item_max_width is not None:
        return item_max_width
    return width * ratio if math.isfinite(width) else math.inf
