from __future__ import annotations

import unittest

import numpy as np

from luvatrix_legend.errors import MarkerShapeAlreadyRegisteredError, MarkerShapeError, UnknownMarkerShapeError
from luvatrix_legend.markers import CircleMarker, MarkerRegistry, MarkerShape, SquareMarker, default_marker_registry
from luvatrix_legend.raster.canvas import new_canvas


class _DotMarker(MarkerShape):
    tag = "dot"


class MarkerRegistryTests(unittest.TestCase):
    def test_default_registry_ships_builtin_shapes(self) -> None:
        registry = default_marker_registry()
        self.assertEqual(registry.tags(), ("circle", "cross", "diamond", "plus", "square", "triangle"))
        self.assertIsInstance(registry.create("Circle"), CircleMarker)
        self.assertIn("square", registry)

    def test_unknown_tag_raises(self) -> None:
        with self.assertRaises(UnknownMarkerShapeError) as ctx:
            default_marker_registry().create("hexagon")
        self.assertEqual(ctx.exception.tag, "hexagon")
        self.assertIsInstance(ctx.exception, MarkerShapeError)

    def test_duplicate_registration_requires_replace(self) -> None:
        registry = MarkerRegistry()
        registry.register("dot", _DotMarker)
        with self.assertRaises(MarkerShapeAlreadyRegisteredError):
            registry.register("DOT", SquareMarker)

        registry.register("dot", SquareMarker, replace=True)
        self.assertIsInstance(registry.create("dot"), SquareMarker)

    def test_empty_tag_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            MarkerRegistry().register("  ", SquareMarker)


class MarkerPaintTests(unittest.TestCase):
    def test_every_builtin_shape_paints_its_centre(self) -> None:
        registry = default_marker_registry()
        for tag in registry.tags():
            canvas = new_canvas(20, 20)
            registry.create(tag).paint(canvas, 10.0, 10.0, 15.0, (255, 0, 0, 255))
            painted = canvas[:, :, 3] > 0
            self.assertTrue(painted.any(), tag)
            self.assertTrue(painted[10, 10] or painted[9, 9], tag)
            self.assertFalse(painted[0, 0] and painted[19, 19], tag)

    def test_circle_leaves_corners_empty(self) -> None:
        canvas = new_canvas(16, 16)
        CircleMarker().paint(canvas, 8.0, 8.0, 16.0, (0, 0, 255, 255))
        self.assertEqual(int(canvas[0, 0, 3]), 0)
        self.assertTrue(np.array_equal(canvas[8, 8], np.array([0, 0, 255, 255], dtype=np.uint8)))


if __name__ == "__main__":
    unittest.main()
