from __future__ import annotations

import numpy as np


RGBA = tuple[int, int, int, int]


def new_canvas(width: int, height: int, color: RGBA = (0, 0, 0, 0)) -> np.ndarray:
    canvas = np.zeros((height, width, 4), dtype=np.uint8)
    canvas[:, :] = np.asarray(color, dtype=np.uint8)
    return canvas


def parse_hex_color(value: str, opacity: float = 1.0) -> RGBA:
    """Convert `#RRGGBB` / `#RRGGBBAA` to RGBA, scaling alpha by `opacity`."""

    raw = value.strip().lstrip("#")
    if len(raw) not in (6, 8):
        raise ValueError(f"expected #RRGGBB or #RRGGBBAA color, got {value!r}")
    r = int(raw[0:2], 16)
    g = int(raw[2:4], 16)
    b = int(raw[4:6], 16)
    a = int(raw[6:8], 16) if len(raw) == 8 else 255
    a = int(round(a * max(0.0, min(1.0, opacity))))
    return (r, g, b, a)


def draw_pixel(dst: np.ndarray, x: int, y: int, color: RGBA) -> None:
    if y < 0 or y >= dst.shape[0] or x < 0 or x >= dst.shape[1]:
        return
    blend(dst[y : y + 1, x : x + 1], color)


def draw_hline(dst: np.ndarray, x0: int, x1: int, y: int, color: RGBA) -> None:
    if y < 0 or y >= dst.shape[0]:
        return
    xa = max(0, min(x0, x1))
    xb = min(dst.shape[1] - 1, max(x0, x1))
    if xa > xb:
        return
    blend(dst[y : y + 1, xa : xb + 1], color)


def draw_vline(dst: np.ndarray, x: int, y0: int, y1: int, color: RGBA) -> None:
    if x < 0 or x >= dst.shape[1]:
        return
    ya = max(0, min(y0, y1))
    yb = min(dst.shape[0] - 1, max(y0, y1))
    if ya > yb:
        return
    blend(dst[ya : yb + 1, x : x + 1], color)


def fill_rect(dst: np.ndarray, x0: int, y0: int, x1: int, y1: int, color: RGBA) -> None:
    left = max(0, min(x0, x1))
    right = min(dst.shape[1] - 1, max(x0, x1))
    top = max(0, min(y0, y1))
    bottom = min(dst.shape[0] - 1, max(y0, y1))
    if right < left or bottom < top:
        return
    blend(dst[top : bottom + 1, left : right + 1], color)


def blend(patch: np.ndarray, color: RGBA, coverage: np.ndarray | None = None) -> None:
    """Source-over `color` onto `patch` in place; `coverage` scales alpha per pixel (glyph masks)."""

    src_a = np.full(patch.shape[:2], color[3] / 255.0, dtype=np.float32)
    if coverage is not None:
        src_a *= coverage
    if not np.any(src_a > 0.0):
        return
    dst_rgb = patch[:, :, :3].astype(np.float32)
    dst_a = patch[:, :, 3].astype(np.float32) / 255.0
    out_a = src_a + dst_a * (1.0 - src_a)
    src_rgb = np.asarray(color[:3], dtype=np.float32).reshape(1, 1, 3)
    num = src_rgb * src_a[:, :, None] + dst_rgb * (dst_a * (1.0 - src_a))[:, :, None]
    safe_a = np.where(out_a > 1e-6, out_a, 1.0)
    patch[:, :, :3] = np.clip(num / safe_a[:, :, None], 0, 255).astype(np.uint8)
    patch[:, :, 3] = np.clip(out_a * 255.0, 0, 255).astype(np.uint8)
