from __future__ import annotations

from dataclasses import dataclass
import unittest

from luvatrix_legend.context import LegendToggle, ModuleContext, UpdateRequest
from luvatrix_legend.controls.interaction import InteractionEvent, parse_interaction_event
from luvatrix_legend.datum import LegendDatum
from luvatrix_legend.legend import Legend, LegendItemEvent, LegendListeners
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


class _Harness:
    def __init__(self, labels: list[str], *, mode: str = "standalone", **overrides) -> None:
        self.ctx = ModuleContext(mode=mode)
        self.data = [LegendDatum(id=f"s{i}", series_id=f"s{i}", label_text=label) for i, label in enumerate(labels)]
        self.ctx.data_service.set_series([_Series(id=d.id, data=(d,)) for d in self.data])
        self.clicks: list[LegendItemEvent] = []
        self.double_clicks: list[LegendItemEvent] = []
        self.legend = Legend(
            self.ctx,
            options=validate_legend_options(overrides),
            measurer=_FixedAdvanceMeasurer(),
            listeners=LegendListeners(
                legend_item_click=self.clicks.append,
                legend_item_double_click=self.double_clicks.append,
            ),
        )
        self.legend.set_data(self.data)
        self.legend.perform_layout(600, 80)

    def centre(self, index: int) -> tuple[float, float]:
        node = self.legend.items()[index]
        return node.compute_bbox(self.legend.measurer).center

    def dispatch(self, event_type: str, x: float, y: float) -> InteractionEvent:
        return self.ctx.interaction_manager.dispatch(
            InteractionEvent(type=event_type, offset_x=x, offset_y=y, page_x=x + 10, page_y=y + 20)
        )


class ClickTests(unittest.TestCase):
    def test_click_toggles_series_and_notifies(self) -> None:
        h = _Harness(["A", "B", "C"])

        event = h.dispatch("click", *h.centre(1))

        self.assertTrue(event.consumed)
        self.assertEqual(list(h.ctx.chart_event_manager.history), [LegendToggle(kind="click", series_id="s1", item_id=None, enabled=False)])
        self.assertIsNone(h.ctx.highlight_manager.active_highlight(h.legend.id))
        self.assertIn(UpdateRequest("process_data", force_node_data_refresh=True), h.ctx.update_service.requests)
        self.assertEqual(h.clicks, [LegendItemEvent(type="click", enabled=False, series_id="s1")])

    def test_click_without_toggling_highlights(self) -> None:
        h = _Harness(["A", "B"], item={"toggle_series_visible": False})

        h.dispatch("click", *h.centre(0))

        self.assertEqual(list(h.ctx.chart_event_manager.history), [])
        highlight = h.ctx.highlight_manager.active_highlight(h.legend.id)
        self.assertIsNotNone(highlight)
        self.assertEqual(highlight.series.id, "s0")
        self.assertTrue(h.clicks[0].enabled)

    def test_click_outside_is_not_consumed(self) -> None:
        h = _Harness(["A"])
        event = h.dispatch("click", 500, 70)
        self.assertFalse(event.consumed)
        self.assertEqual(h.clicks, [])

    def test_click_on_datum_without_series_is_ignored(self) -> None:
        h = _Harness(["A"])
        h.ctx.data_service.set_series([])
        event = h.dispatch("click", *h.centre(0))
        self.assertFalse(event.consumed)

    def test_pagination_click_moves_page_before_legend_sees_it(self) -> None:
        h = _Harness([f"Item {i:02d}" for i in range(20)])
        h.legend.perform_layout(400, 46)

        x, y = h.legend.pagination.button_bbox("next").center
        event = h.dispatch("click", x, y)

        self.assertTrue(event.consumed)
        self.assertEqual(h.legend.pagination_state().current_page, 1)
        self.assertTrue(h.legend.items()[8].visible)
        self.assertFalse(h.legend.items()[0].visible)
        self.assertIn(UpdateRequest("scene_render"), h.ctx.update_service.requests)
        self.assertEqual(h.clicks, [])


class DoubleClickTests(unittest.TestCase):
    def test_double_click_reports_visible_counts(self) -> None:
        h = _Harness(["A", "B"])

        event = h.dispatch("dblclick", *h.centre(0))

        self.assertTrue(event.consumed)
        toggle = h.ctx.chart_event_manager.history[0]
        self.assertEqual(toggle.kind, "dblclick")
        self.assertTrue(toggle.enabled)
        self.assertEqual(toggle.num_visible_items, {"s0": 1, "s1": 1})
        self.assertEqual(h.double_clicks, [LegendItemEvent(type="dblclick", enabled=True, series_id="s0")])

    def test_double_click_is_ignored_in_integrated_mode(self) -> None:
        h = _Harness(["A", "B"], mode="integrated")
        event = h.dispatch("dblclick", *h.centre(0))
        self.assertFalse(event.consumed)
        self.assertEqual(list(h.ctx.chart_event_manager.history), [])


class HoverTests(unittest.TestCase):
    def test_hover_on_truncated_label_shows_full_text(self) -> None:
        h = _Harness(["Alpha", "Be"], item={"label": {"max_length": 3}})
        self.assertEqual(h.legend.items()[0].text, "Alp...")

        x, y = h.centre(0)
        event = h.dispatch("hover", x, y)

        self.assertTrue(event.consumed)
        tooltip = h.ctx.tooltip_manager.tooltips[h.legend.id]
        self.assertEqual(tooltip.content, "Alpha")
        self.assertEqual((tooltip.page_x, tooltip.page_y), (x + 10, y + 20))
        self.assertEqual(h.ctx.cursor_manager.cursor, "pointer")
        self.assertEqual(h.ctx.highlight_manager.active_highlight(h.legend.id).series.id, "s0")

    def test_hover_on_full_label_or_outside_clears_state(self) -> None:
        h = _Harness(["Alpha", "Be"], item={"label": {"max_length": 3}})
        h.dispatch("hover", *h.centre(0))

        h.dispatch("hover", *h.centre(1))
        self.assertNotIn(h.legend.id, h.ctx.tooltip_manager.tooltips)

        event = h.dispatch("hover", 500, 70)
        self.assertFalse(event.consumed)
        self.assertEqual(h.ctx.cursor_manager.cursor, "default")
        self.assertIsNone(h.ctx.highlight_manager.active_highlight(h.legend.id))

    def test_disabled_item_is_not_highlighted(self) -> None:
        h = _Harness(["A", "B"])
        h.legend.set_data([h.data[0], LegendDatum(id="s1", series_id="s1", label_text="B", enabled=False)])
        h.legend.perform_layout(600, 80)

        h.dispatch("hover", *h.centre(1))

        self.assertIsNone(h.ctx.highlight_manager.active_highlight(h.legend.id))


class ParseInteractionEventTests(unittest.TestCase):
    def test_parse_payloads(self) -> None:
        event = parse_interaction_event({"type": "click", "x": "10", "y": 4})
        self.assertIsNotNone(event)
        self.assertEqual((event.offset_x, event.offset_y, event.page_x, event.page_y), (10.0, 4.0, 10.0, 4.0))
        self.assertIsNone(parse_interaction_event({"type": "scroll", "x": 1, "y": 1}))
        self.assertIsNone(parse_interaction_event({"type": "hover", "x": None, "y": 1}))
        self.assertIsNone(parse_interaction_event(["click"]))


if __name__ == "__main__":
    unittest.main()
