from __future__ import annotations

import argparse
from dataclasses import dataclass
import json
import logging
from pathlib import Path
from typing import Sequence

from PIL import Image

from luvatrix_legend import (
    BoundingBox,
    Legend,
    LegendDatum,
    MarkerAppearance,
    ModuleContext,
    validate_legend_options,
)
from luvatrix_legend.options import POSITIONS, options_as_dict
from luvatrix_legend.raster import new_canvas, parse_hex_color, render_legend

PALETTE = ("#5090DC", "#FFA03A", "#459D55", "#34BFE1", "#E1CC00", "#9669CB", "#B5B5B5", "#BD5AA7")


@dataclass
class _StaticSeries:
    id: str
    data: tuple[LegendDatum, ...]

    def legend_data(self) -> Sequence[LegendDatum]:
        return self.data


def main() -> None:
    parser = argparse.ArgumentParser(prog="luvatrix-legend")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    layout = sub.add_parser("layout", help="Lay out a legend and print pages, pagination and item boxes as JSON.")
    _add_legend_arguments(layout)

    render = sub.add_parser("render", help="Lay out a legend and write it as a PNG.")
    _add_legend_arguments(render)
    render.add_argument("--out", type=Path, required=True)
    render.add_argument("--background", default="#FFFFFF")

    args = parser.parse_args()
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    legend, rect = _build_legend(args)
    remaining = legend.ctx.layout_service.dispatch_start_layout(rect)
    if args.page is not None:
        legend.update_page_number(args.page)

    if args.command == "layout":
        print(json.dumps(_layout_report(legend, remaining), indent=2, sort_keys=True))
        return

    if args.command == "render":
        canvas = new_canvas(args.width, args.height, parse_hex_color(args.background))
        render_legend(legend, canvas)
        args.out.parent.mkdir(parents=True, exist_ok=True)
        Image.fromarray(canvas).save(args.out)
        print(f"wrote {args.out} pages={legend.pagination.total_pages} truncated={len(legend.truncated_items)}")
        return

    raise RuntimeError(f"unsupported command: {args.command}")


def _add_legend_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--labels", required=True, help="Comma-separated legend labels.")
    parser.add_argument("--width", type=int, default=480)
    parser.add_argument("--height", type=int, default=320)
    parser.add_argument("--position", choices=POSITIONS, default="bottom")
    parser.add_argument("--orientation", choices=["horizontal", "vertical"], default=None)
    parser.add_argument("--page", type=int, default=None, help="Zero-based page to show after layout.")
    parser.add_argument("--max-length", type=int, default=None, help="Character cap for labels.")
    parser.add_argument("--max-width", type=float, default=None)
    parser.add_argument("--max-height", type=float, default=None)
    parser.add_argument("--marker-shape", default=None)
    parser.add_argument("--disabled", default="", help="Comma-separated labels to show as disabled.")
    parser.add_argument("--reverse", action="store_true")


def _build_legend(args: argparse.Namespace) -> tuple[Legend, BoundingBox]:
    labels = [label.strip() for label in args.labels.split(",") if label.strip()]
    disabled = {label.strip() for label in args.disabled.split(",") if label.strip()}
    options = validate_legend_options(
        {
            "position": args.position,
            "orientation": args.orientation,
            "max_width": args.max_width,
            "max_height": args.max_height,
            "reverse_order": args.reverse,
            "item": {"label": {"max_length": args.max_length}, "marker": {"shape": args.marker_shape}},
        }
    )
    data = tuple(
        LegendDatum(
            id=f"series-{i}",
            series_id=f"series-{i}",
            label_text=label,
            marker=MarkerAppearance(fill=PALETTE[i % len(PALETTE)], stroke=PALETTE[i % len(PALETTE)]),
            enabled=label not in disabled,
        )
        for i, label in enumerate(labels)
    )
    ctx = ModuleContext()
    ctx.data_service.set_series([_StaticSeries(id=datum.id, data=(datum,)) for datum in data])
    legend = Legend(ctx, options=options)
    legend.set_data(data)
    return legend, BoundingBox(x=0.0, y=0.0, width=float(args.width), height=float(args.height))


def _layout_report(legend: Legend, remaining: BoundingBox) -> dict[str, object]:
    state = legend.pagination_state()
    measurer = legend.measurer
    return {
        "options": options_as_dict(legend.options),
        "size": list(legend.size),
        "series_rect": list(remaining.as_tuple()),
        "pagination": {
            "current_page": state.current_page,
            "total_pages": state.total_pages,
            "visible": state.visible,
            "translation": list(state.translation),
            "tracking_index": state.tracking_index,
        },
        "pages": [
            {
                "start_index": page.start_index,
                "end_index": page.end_index,
                "columns": [list(column.indices) for column in page.columns],
            }
            for page in legend.pages
        ],
        "items": [
            {
                "label": node.text,
                "visible": node.visible,
                "truncated": legend.is_truncated(node.datum),
                "bbox": list(node.compute_bbox(measurer).as_tuple()),
            }
            for node in legend.items()
        ],
    }


if __name__ == "__main__":
    main()
