import unittest

from floorsketch.core.model import Polygon, Vertex
from floorsketch.features.editing.helpers import find_nearest_helper, helper_points

PATH = [Vertex(0, 0, "p0"), Vertex(80, 0, "p1"), Vertex(80, 80, "p2")]


class HelperPointTests(unittest.TestCase):
    def test_projections_of_open_path(self):
        helpers = {h.xy: h.kind for h in helper_points(PATH)}
        self.assertEqual(helpers, {
            (0, 80): "projection",
            (80, 0): "projection",
            (0, 0): "special_projection",
        })

    def test_last_vertex_position_is_never_a_helper(self):
        for helper in helper_points(PATH):
            self.assertNotEqual(helper.xy, (80, 80))

    def test_polygon_projections(self):
        room = Polygon.from_vertices(3, [Vertex(200, 200), Vertex(300, 200), Vertex(300, 300)], 8.0)
        helpers = helper_points(PATH, [room])
        from_room = [h for h in helpers if h.kind == "polygon_projection"]
        self.assertIn((200, 80), [h.xy for h in from_room])
        self.assertIn((80, 300), [h.xy for h in from_room])
        self.assertTrue(all(h.polygon_id == 3 for h in from_room))

    def test_empty_path(self):
        self.assertEqual(helper_points([]), [])

    def test_find_nearest(self):
        helpers = helper_points(PATH)
        self.assertEqual(find_nearest_helper(helpers, (2, 78)).xy, (0, 80))
        self.assertIsNone(find_nearest_helper(helpers, (40, 40), radius=10))


if __name__ == "__main__":
    unittest.main()
