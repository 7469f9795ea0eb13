import csv
import json
import os
import tempfile
import unittest

import pymupdf as fitz
from PIL import Image

from floorsketch.app_io.export_mod import export_csv, export_pdf
from floorsketch.core.config import GeometryConfig
from floorsketch.core.history import Snapshot
from floorsketch.core.model import Polygon, Vertex
from floorsketch.visualization.preview import render_preview

ROOM = Polygon.from_vertices(
    1, [Vertex(0, 0), Vertex(80, 0), Vertex(80, 80), Vertex(0, 80)], 8.0, {"name": "Bath"})
OPEN = (Vertex(200, 0, "p0"), Vertex(280, 0, "p1"))


class ExportTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmp.cleanup()

    def test_csv(self):
        path = os.path.join(self.tmp.name, "rooms.csv")
        self.assertEqual(export_csv([ROOM], path, "ft"), 1)
        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        self.assertEqual(rows[0], ["polygon_id", "area_sq_ft", "perimeter_ft", "vertex_count", "metadata"])
        self.assertEqual(rows[1][:4], ["1", "100.0000", "40.0000", "4"])
        self.assertEqual(json.loads(rows[1][4]), {"name": "Bath"})

    def test_csv_without_polygons(self):
        path = os.path.join(self.tmp.name, "empty.csv")
        self.assertEqual(export_csv([], path), 0)

    def test_preview(self):
        img = render_preview(Snapshot(OPEN, (ROOM,)), GeometryConfig())
        self.assertIsInstance(img, Image.Image)
        self.assertGreater(img.size[0], 0)
        self.assertGreater(img.size[1], 0)

    def test_preview_of_empty_drawing(self):
        img = render_preview(Snapshot())
        self.assertGreater(img.size[0], 0)

    def test_pdf(self):
        path = os.path.join(self.tmp.name, "plan.pdf")
        export_pdf(Snapshot(OPEN, (ROOM,)), GeometryConfig(), path)
        doc = fitz.open(path)
        try:
            self.assertEqual(doc.page_count, 1)
            self.assertEqual(len(doc[0].get_images()), 1)
        finally:
            doc.close()


if __name__ == "__main__":
    unittest.main()
