import unittest

from floorsketch.core.errors import ValidationCode
from floorsketch.core.model import Polygon, Vertex
from floorsketch.features.editing.drag import move_polygon_vertex, straighten_vertex, undo_last_vertex_move
from floorsketch.features.editing.draw import PathBuilder


def make_builder(points, metadata=None):
    poly = Polygon.from_vertices(1, [Vertex(x, y) for x, y in points], 8.0, metadata)
    return PathBuilder(polygons=[poly])


SQUARE = [(100, 100), (180, 100), (180, 20), (100, 20)]
# p1 sits in the middle of the bottom wall
FIVE = [(0, 0), (80, 0), (160, 0), (160, 80), (0, 80)]


class MoveVertexTests(unittest.TestCase):
    def test_valid_move_replaces_polygon(self):
        builder = make_builder(SQUARE, {"name": "Office"})
        result = move_polygon_vertex(builder, 1, 2, (200, 20))
        self.assertTrue(result.valid)
        poly = builder.get_polygon(1)
        self.assertEqual(poly.vertices[2].xy, (200, 20))
        self.assertEqual(poly.vertices[2].name, "p2")
        self.assertAlmostEqual(poly.area, 112.5)
        self.assertEqual(poly.metadata, {"name": "Office"})

    def test_invalid_move_is_rejected(self):
        builder = make_builder(SQUARE)
        original = builder.get_polygon(1)
        result = move_polygon_vertex(builder, 1, 1, (180, 20))
        self.assertFalse(result.valid)
        self.assertEqual(result.code, ValidationCode.EDGE_TOO_SHORT)
        self.assertIs(builder.get_polygon(1), original)
        self.assertIsNone(undo_last_vertex_move(builder))

    def test_straight_snap(self):
        builder = make_builder(FIVE)
        move_polygon_vertex(builder, 1, 1, (80, 2), straight_snap=True)
        moved = builder.get_polygon(1).vertices[1]
        self.assertAlmostEqual(moved.x, 80)
        self.assertAlmostEqual(moved.y, 0)

    def test_without_straight_snap(self):
        builder = make_builder(FIVE)
        move_polygon_vertex(builder, 1, 1, (80, 2))
        self.assertEqual(builder.get_polygon(1).vertices[1].xy, (80, 2))

    def test_sharp_corner_is_not_straightened(self):
        self.assertIsNone(straighten_vertex((0, 0), (80, 20), (160, 0), 3.0))

    def test_undo_last_move(self):
        builder = make_builder(SQUARE)
        original = builder.get_polygon(1)
        move_polygon_vertex(builder, 1, 2, (200, 20))
        self.assertEqual(undo_last_vertex_move(builder), original)
        self.assertEqual(builder.get_polygon(1), original)
        self.assertIsNone(undo_last_vertex_move(builder))

    def test_nothing_to_undo_on_a_new_builder(self):
        builder = make_builder(SQUARE)
        self.assertIsNone(builder._vertex_move_backup)
        self.assertIsNone(undo_last_vertex_move(builder))
        move_polygon_vertex(builder, 1, 2, (200, 20))
        undo_last_vertex_move(builder)
        self.assertIsNone(builder._vertex_move_backup)

    def test_bad_target(self):
        builder = make_builder(SQUARE)
        with self.assertRaises(KeyError):
            move_polygon_vertex(builder, 7, 0, (0, 0))
        with self.assertRaises(IndexError):
            move_polygon_vertex(builder, 1, 4, (0, 0))


if __name__ == "__main__":
    unittest.main()
