from __future__ import annotations

import unittest

from luvatrix_legend.context import ModuleContext
from luvatrix_legend.datum import LegendDatum
from luvatrix_legend.legend import Legend
from luvatrix_legend.text.renderer import FontSpec, TextMetrics


class _FixedAdvanceMeasurer:
    def measure_text(self, text: str, font: FontSpec) -> TextMetrics:
        return TextMetrics(width_px=6.0 * len(text), height_px=font.size_px)


def _legend(*labels: str) -> Legend:
    legend = Legend(ModuleContext(), measurer=_FixedAdvanceMeasurer())
    legend.set_data([LegendDatum(id=f"s{i}", series_id=f"s{i}", label_text=label) for i, label in enumerate(labels)])
    return legend


class DatumAtTests(unittest.TestCase):
    def setUp(self) -> None:
        # Two columns: a wide first column (item A) leaves a gap right of item C.
        #   A(0,0,83,15)   B(99,0,29,15)
        #   C(0,23,29,15)  D(99,23,29,15)
        self.legend = _legend("AAAAAAAAAA", "B", "C", "D")
        self.legend.perform_layout(150, 200)

    def test_layout_matches_expected_grid(self) -> None:
        boxes = [n.compute_bbox(self.legend.measurer).as_tuple() for n in self.legend.items()]
        self.assertEqual(boxes, [(0, 0, 83, 15), (99, 0, 29, 15), (0, 23, 29, 15), (99, 23, 29, 15)])

    def test_item_centres_resolve_to_their_datum(self) -> None:
        for node in self.legend.items():
            x, y = node.compute_bbox(self.legend.measurer).center
            self.assertEqual(self.legend.datum_at(x, y), node.datum)

    def test_padding_gap_belongs_to_nearer_item(self) -> None:
        self.assertEqual(self.legend.datum_at(90, 7).label_text, "AAAAAAAAAA")
        self.assertEqual(self.legend.datum_at(92, 7).label_text, "B")

    def test_gap_resolves_to_up_left_candidate(self) -> None:
        # Left of D and right of C.
        self.assertEqual(self.legend.datum_at(60, 30).label_text, "C")
        # C is closer but starts below the pointer; A is up-left.
        self.assertEqual(self.legend.datum_at(60, 20).label_text, "AAAAAAAAAA")

    def test_outside_legend_is_none(self) -> None:
        self.assertIsNone(self.legend.datum_at(500, 500))
        self.assertIsNone(self.legend.datum_at(-20, 5))

    def test_hidden_legend_has_no_hits(self) -> None:
        self.legend.set_enabled(False)
        self.assertIsNone(self.legend.datum_at(5, 5))

    def test_only_current_page_is_hit(self) -> None:
        legend = _legend(*(f"Item {i:02d}" for i in range(20)))
        legend.perform_layout(400, 46)
        first = legend.items()[0]
        x, y = first.compute_bbox(legend.measurer).center
        self.assertEqual(legend.datum_at(x, y), first.datum)

        legend.update_page_number(1)
        self.assertEqual(legend.datum_at(x, y), legend.items()[8].datum)
        self.assertIsNone(legend.datum_at(x, 200))


if __name__ == "__main__":
    unittest.main()
