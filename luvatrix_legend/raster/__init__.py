from .canvas import draw_hline, draw_pixel, draw_vline, fill_rect, new_canvas, parse_hex_color
from .draw_text import draw_text, load_font
from .render import render_legend

__all__ = [
    "draw_hline",
    "draw_pixel",
    "draw_text",
    "draw_vline",
    "fill_rect",
    "load_font",
    "new_canvas",
    "parse_hex_color",
    "render_legend",
]
