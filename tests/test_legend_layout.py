from __future__ import annotations

from dataclasses import dataclass
import unittest

from luvatrix_legend.context import ModuleContext
from luvatrix_legend.datum import LegendDatum, MarkerAppearance
from luvatrix_legend.errors import UnknownMarkerShapeError
from luvatrix_legend.geometry import BoundingBox
from luvatrix_legend.legend import Legend
from luvatrix_legend.markers import CircleMarker, SquareMarker
from luvatrix_legend.options import validate_legend_options
from luvatrix_legend.text.renderer import FontSpec, TextMetrics


class _FixedAdvanceMeasurer:
    def measure_text(self, text: str, font: FontSpec) -> TextMetrics:
        return TextMetrics(width_px=6.0 * len(text), height_px=font.size_px)


@dataclass
class _Series:
    id: str
    data: tuple[LegendDatum, ...]

    def legend_data(self) -> tuple[LegendDatum, ...]:
        return self.data


def _data(*labels: str) -> list[LegendDatum]:
    return [LegendDatum(id=f"s{i}", series_id=f"s{i}", label_text=label) for i, label in enumerate(labels)]


def _legend(labels: list[str] | tuple[str, ...], **overrides) -> Legend:
    ctx = ModuleContext()
    data = _data(*labels)
    ctx.data_service.set_series([_Series(id=d.id, data=(d,)) for d in data])
    legend = Legend(ctx, options=validate_legend_options(overrides), measurer=_FixedAdvanceMeasurer())
    legend.set_data(data)
    return legend


class ComputeDimensionsTests(unittest.TestCase):
    def test_top_and_bottom_take_a_share_of_height(self) -> None:
        legend = _legend(["A"])
        self.assertEqual(legend.compute_dimensions(BoundingBox(0, 0, 600, 400)), (600, 80))
        self.assertEqual(legend.compute_dimensions(BoundingBox(0, 0, 400, 600)), (400, 180))
        self.assertEqual(legend.compute_dimensions(BoundingBox(0, 0, 100, 1000)), (100, 500))

    def test_left_and_right_take_a_share_of_width(self) -> None:
        legend = _legend(["A"], position="right")
        self.assertEqual(legend.compute_dimensions(BoundingBox(0, 0, 600, 400)), (225, 400))
        self.assertEqual(legend.compute_dimensions(BoundingBox(0, 0, 400, 600)), (100, 600))
        self.assertEqual(legend.compute_dimensions(BoundingBox(0, 0, 2000, 400)), (1000, 400))

    def test_zero_width_rect_uses_largest_share(self) -> None:
        legend = _legend(["A"])
        self.assertEqual(legend.compute_dimensions(BoundingBox(0, 0, 0, 300)), (0, 150))

    def test_half_pixel_sizes_round_up(self) -> None:
        self.assertEqual(_legend(["A"]).compute_dimensions(BoundingBox(0, 0, 600, 102.5)), (600, 21))
        self.assertEqual(_legend(["A"], position="left").compute_dimensions(BoundingBox(0, 0, 10, 400)), (3, 400))

    def test_explicit_maxima_are_capped_to_rect(self) -> None:
        legend = _legend(["A"], position="left", max_width=100, max_height=1000)
        self.assertEqual(legend.compute_dimensions(BoundingBox(0, 0, 600, 400)), (100, 400))


class PerformLayoutTests(unittest.TestCase):
    def test_single_row_positions(self) -> None:
        legend = _legend(["A", "B", "C", "D", "E"])

        size = legend.perform_layout(600, 80)

        self.assertEqual(size, (209, 15))
        self.assertEqual(len(legend.pages), 1)
        self.assertFalse(legend.pagination_state().visible)
        self.assertEqual([n.translation_x for n in legend.items()], [0, 45, 90, 135, 180])
        self.assertEqual({n.translation_y for n in legend.items()}, {0})

    def test_layout_is_idempotent(self) -> None:
        legend = _legend([f"Series {i}" for i in range(12)])
        first = legend.perform_layout(300, 60)
        positions = [(n.translation_x, n.translation_y, n.visible, n.text) for n in legend.items()]
        state = legend.pagination_state()

        second = legend.perform_layout(300, 60)

        self.assertEqual(first, second)
        self.assertEqual(positions, [(n.translation_x, n.translation_y, n.visible, n.text) for n in legend.items()])
        self.assertEqual(state, legend.pagination_state())
        self.assertFalse(legend.size_changed())

    def test_unusable_width_keeps_previous_layout(self) -> None:
        legend = _legend(["A", "B"])
        legend.perform_layout(600, 80)

        with self.assertLogs("luvatrix_legend.legend", level="DEBUG"):
            self.assertIsNone(legend.perform_layout(float("inf"), 80))
        self.assertIsNone(legend.perform_layout(0, 80))

        self.assertEqual(len(legend.pages), 1)
        self.assertTrue(legend.group_visible)

    def test_no_data_is_not_visible(self) -> None:
        legend = _legend([])
        self.assertIsNone(legend.perform_layout(600, 80))
        self.assertFalse(legend.group_visible)

    def test_items_beyond_current_page_are_hidden(self) -> None:
        legend = _legend([f"Item {i:02d}" for i in range(20)])
        legend.perform_layout(400, 46)

        state = legend.pagination_state()
        self.assertTrue(state.visible)
        self.assertEqual(state.total_pages, 3)
        visible = [i for i, n in enumerate(legend.items()) if n.visible]
        self.assertEqual(visible, list(range(8)))
        self.assertEqual(state.translation, (316, 11.5))

    def test_paged_bbox_covers_largest_page(self) -> None:
        legend = _legend([f"Item {i:02d}" for i in range(20)])
        legend.perform_layout(400, 46)
        legend.update_page_number(2)

        actual = legend.compute_bbox()
        paged = legend.compute_paged_bbox()
        self.assertGreaterEqual(paged.width, actual.width)
        self.assertGreaterEqual(paged.height, 38)

    def test_resize_keeps_tracked_item_in_view(self) -> None:
        legend = _legend([f"Item {i:02d}" for i in range(20)])
        legend.perform_layout(400, 46)
        legend.update_page_number(1)
        tracking = legend.pagination_state().tracking_index
        self.assertEqual(tracking, 11)

        legend.perform_layout(400, 23)

        state = legend.pagination_state()
        self.assertEqual(state.total_pages, 5)
        page = legend.pages[state.current_page]
        self.assertTrue(page.start_index <= tracking <= page.end_index)
        self.assertTrue(legend.items()[tracking].visible)

    def test_resize_falls_back_to_last_page_when_item_is_gone(self) -> None:
        legend = _legend([f"Item {i:02d}" for i in range(20)])
        legend.perform_layout(400, 46)
        legend.update_page_number(1)

        legend.set_data(_data(*(f"Item {i:02d}" for i in range(5))))
        legend.perform_layout(400, 23)

        state = legend.pagination_state()
        self.assertEqual(state.total_pages, 2)
        self.assertEqual(state.current_page, 1)

    def test_reverse_order(self) -> None:
        legend = _legend(["A", "B", "C"], reverse_order=True)
        legend.perform_layout(600, 80)
        self.assertEqual([n.text for n in legend.items()], ["C", "B", "A"])

    def test_disabled_items_are_dimmed(self) -> None:
        legend = _legend(["A", "B"])
        data = list(legend.data)
        legend.set_data([data[0], LegendDatum(id="s1", series_id="s1", label_text="B", enabled=False)])
        legend.perform_layout(600, 80)
        self.assertEqual([n.opacity for n in legend.items()], [1.0, 0.5])

    def test_label_formatter_and_failures(self) -> None:
        legend = _legend(["alpha", "beta"], item={"label": {"formatter": lambda p: p.value.upper()}})
        legend.perform_layout(600, 80)
        self.assertEqual([n.text for n in legend.items()], ["ALPHA", "BETA"])

        def broken(params):
            raise RuntimeError("boom")

        failing = _legend(["alpha"], item={"label": {"formatter": broken}})
        with self.assertLogs("luvatrix_legend.context", level="WARNING"):
            failing.perform_layout(600, 80)
        self.assertEqual(failing.items()[0].text, "<unknown>")

    def test_stale_truncated_ids_are_dropped(self) -> None:
        legend = _legend(["A very long label indeed", "B"], item={"label": {"max_length": 5}})
        legend.perform_layout(600, 80)
        self.assertEqual(legend.truncated_items, frozenset({"s0"}))

        legend.set_data([LegendDatum(id="s1", series_id="s1", label_text="B")])
        legend.perform_layout(600, 80)
        self.assertEqual(legend.truncated_items, frozenset())

    def test_set_marker_shape_rebuilds_nodes(self) -> None:
        legend = _legend(["A", "B"])
        legend.perform_layout(600, 80)
        legend.set_marker_shape("circle")
        self.assertEqual(legend.items(), [])

        legend.perform_layout(600, 80)
        self.assertTrue(all(isinstance(n.marker, CircleMarker) for n in legend.items()))
        self.assertEqual(legend.options.item.marker.shape, "circle")
        with self.assertRaises(UnknownMarkerShapeError):
            legend.set_marker_shape("hexagon")


class NegotiatePlacementTests(unittest.TestCase):
    def test_bottom_legend_is_centred_and_shrinks_rect(self) -> None:
        legend = _legend(["A", "B", "C", "D", "E"])

        remaining = legend.ctx.layout_service.dispatch_start_layout(BoundingBox(0, 0, 600, 400))

        self.assertEqual(remaining, BoundingBox(0, 0, 600, 365))
        self.assertEqual((legend.translation_x, legend.translation_y), (195, 385))
        self.assertEqual(legend.ctx.tooltip_manager.exclusive_rects[legend.id], BoundingBox(195, 385, 209, 15))
        self.assertEqual(legend.items()[0].compute_bbox(legend.measurer).x, 195)

    def test_right_legend_shrinks_width(self) -> None:
        legend = _legend(["A", "B", "C", "D", "E"], position="right")

        remaining = legend.negotiate_placement(BoundingBox(0, 0, 600, 400))

        self.assertEqual(remaining, BoundingBox(0, 0, 551, 400))
        self.assertEqual((legend.translation_x, legend.translation_y), (571, 146))

    def test_top_legend_moves_rect_down(self) -> None:
        legend = _legend(["A"], position="top")
        remaining = legend.negotiate_placement(BoundingBox(0, 0, 600, 400))
        self.assertEqual(remaining, BoundingBox(0, 35, 600, 365))
        self.assertEqual(legend.translation_y, 0)

    def test_zero_width_rect_is_left_untouched(self) -> None:
        legend = _legend(["A", "B"])
        rect = BoundingBox(0, 0, 0, 300)

        self.assertEqual(legend.negotiate_placement(rect), rect)
        self.assertFalse(legend.group_visible)
        self.assertNotIn(legend.id, legend.ctx.tooltip_manager.exclusive_rects)

    def test_unregistered_datum_shape_is_drawn_as_square(self) -> None:
        legend = _legend(["A"])
        legend.set_data([LegendDatum(id="s0", series_id="s0", label_text="A", marker=MarkerAppearance(shape="star"))])

        remaining = legend.negotiate_placement(BoundingBox(0, 0, 400, 300))

        self.assertLess(remaining.height, 300)
        self.assertIsInstance(legend.items()[0].marker, SquareMarker)
        self.assertTrue(legend.group_visible)

    def test_disabled_or_hidden_legend_takes_no_space(self) -> None:
        rect = BoundingBox(0, 0, 600, 400)
        disabled = _legend(["A"], enabled=False)
        self.assertEqual(disabled.negotiate_placement(rect), rect)

        hidden = _legend(["A"])
        hidden.negotiate_placement(rect)
        self.assertIn(hidden.id, hidden.ctx.tooltip_manager.exclusive_rects)
        hidden.set_visible(False)
        self.assertEqual(hidden.negotiate_placement(rect), rect)
        self.assertNotIn(hidden.id, hidden.ctx.tooltip_manager.exclusive_rects)

    def test_destroy_unregisters_listeners(self) -> None:
        legend = _legend(["A"])
        legend.destroy()
        self.assertEqual(legend.ctx.interaction_manager.listener_count(), 0)
        self.assertEqual(legend.ctx.layout_service.listener_count(), 0)


if __name__ == "__main__":
    unittest.main()
