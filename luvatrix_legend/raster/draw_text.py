from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from luvatrix_legend.raster.canvas import RGBA, blend


PillowFont = ImageFont.FreeTypeFont | ImageFont.ImageFont

GENERIC_FAMILY_PATTERNS = {
    "sans-serif": ("dejavusans", "arial", "helvetica", "liberationsans"),
    "serif": ("dejavuserif", "times new roman", "times", "liberationserif"),
    "monospace": ("dejavusansmono", "menlo", "courier new", "liberationmono"),
}
FONT_DIRS = (
    Path.home() / "Library" / "Fonts",
    Path("/Library/Fonts"),
    Path("/System/Library/Fonts"),
    Path("/System/Library/Fonts/Supplemental"),
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
    Path("C:/Windows/Fonts"),
)


def draw_text(
    dst: np.ndarray,
    x: int,
    y: int,
    text: str,
    color: RGBA,
    *,
    font: PillowFont,
) -> None:
    if not text:
        return
    mask = _render_mask(text=text, font=font)
    _blend_mask(dst, x, y, mask, color)


def load_font(family: str, size_px: float, *, bold: bool = False, italic: bool = False) -> PillowFont:
    """Resolve a CSS-like family list (`"Verdana, sans-serif"`) to a Pillow font."""

    return _load_font(family.strip().lower(), max(1, int(round(size_px))), bold, italic)


@lru_cache(maxsize=64)
def _load_font(family: str, size: int, bold: bool, italic: bool) -> PillowFont:
    font_path = _resolve_font_path(family, bold=bold, italic=italic)
    if font_path is not None:
        try:
            return ImageFont.truetype(str(font_path), size=size)
        except OSError:
            pass
    return ImageFont.load_default(size=size)


@lru_cache(maxsize=1)
def _font_candidates() -> tuple[Path, ...]:
    candidates: list[Path] = []
    for base in FONT_DIRS:
        if not base.exists():
            continue
        for ext in ("*.ttf", "*.otf", "*.ttc"):
            candidates.extend(base.rglob(ext))
    return tuple(candidates)


def _resolve_font_path(family: str, *, bold: bool, italic: bool) -> Path | None:
    patterns: list[str] = []
    for name in (part.strip().strip("'\"") for part in family.split(",")):
        if not name:
            continue
        patterns.extend(GENERIC_FAMILY_PATTERNS.get(name, (name,)))

    suffix = ("bold" if bold else "") + ("italic" if italic else "")
    candidates = _font_candidates()
    for pattern in patterns:
        p = pattern.replace(" ", "")
        wanted = (p + suffix, p + "-" + suffix) if suffix else (p,)
        for path in candidates:
            stem = path.stem.lower().replace(" ", "")
            if stem in wanted:
                return path
        for path in candidates:
            stem = path.stem.lower().replace(" ", "")
            if p in stem:
                return path
    return None


@lru_cache(maxsize=256)
def _render_mask(text: str, font: PillowFont) -> np.ndarray:
    left, top, right, bottom = font.getbbox(text)
    width = max(1, int(right - left))
    height = max(1, int(bottom - top))
    image = Image.new("L", (width, height), 0)
    draw = ImageDraw.Draw(image)
    draw.text((-left, -top), text, fill=255, font=font)
    return np.asarray(image, dtype=np.uint8)


def _blend_mask(dst: np.ndarray, x: int, y: int, mask: np.ndarray, color: RGBA) -> None:
    h, w = mask.shape
    x0 = max(0, x)
    y0 = max(0, y)
    x1 = min(dst.shape[1], x + w)
    y1 = min(dst.shape[0], y + h)
    if x1 <= x0 or y1 <= y0:
        return

    coverage = mask[y0 - y : y1 - y, x0 - x : x1 - x].astype(np.float32) / 255.0
    blend(dst[y0:y1, x0:x1], color, coverage)
