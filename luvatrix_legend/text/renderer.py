from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from luvatrix_legend.raster.draw_text import PillowFont, load_font


@dataclass(frozen=True)
class FontSpec:
    """Font descriptor for legend labels.

    `descriptor` renders the CSS shorthand (`"italic bold 12px Verdana, sans-serif"`)
    and doubles as the cache key for per-character widths.
    """

    family: str = "Verdana, sans-serif"
    size_px: float = 12.0
    style: str | None = None
    weight: str | int | None = None

    def __post_init__(self) -> None:
        if not self.family.strip():
            raise ValueError("FontSpec requires a non-empty `family`")
        if self.size_px <= 0:
            raise ValueError("FontSpec `size_px` must be > 0")

    @property
    def descriptor(self) -> str:
        parts: list[str] = []
        if self.style:
            parts.append(str(self.style))
        if self.weight:
            parts.append(str(self.weight))
        parts.append(f"{self.size_px:g}px")
        parts.append(self.family)
        return " ".join(parts)

    @property
    def is_bold(self) -> bool:
        if isinstance(self.weight, int):
            return self.weight >= 600
        return self.weight in ("bold", "bolder")

    @property
    def is_italic(self) -> bool:
        return self.style in ("italic", "oblique")


@dataclass(frozen=True)
class TextMetrics:
    width_px: float
    height_px: float


class TextMeasurer(Protocol):
    """Pixel measurement service; assumed deterministic for a given text and font."""

    def measure_text(self, text: str, font: FontSpec) -> TextMetrics:
        ...


class PillowTextMeasurer:
    """Measures text with Pillow fonts resolved from the system font directories."""

    def measure_text(self, text: str, font: FontSpec) -> TextMetrics:
        pil_font = self.pillow_font(font)
        height = _line_height(pil_font)
        if not text:
            return TextMetrics(width_px=0.0, height_px=height)
        return TextMetrics(width_px=float(pil_font.getlength(text)), height_px=height)

    def pillow_font(self, font: FontSpec) -> PillowFont:
        return load_font(font.family, font.size_px, bold=font.is_bold, italic=font.is_italic)


def _line_height(font: PillowFont) -> float:
    if hasattr(font, "getmetrics"):
        ascent, descent = font.getmetrics()
        return float(max(1, ascent + descent))
    _, top, _, bottom = font.getbbox("Hg")
    return float(max(1, bottom - top))
