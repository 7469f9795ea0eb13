import unittest

from floorsketch.core.history import Snapshot, SnapshotHistory
from floorsketch.core.model import Polygon, Vertex


def snap(n, description=""):
    return Snapshot(tuple(Vertex(i, 0, f"p{i}") for i in range(n)), (), description)


class SnapshotHistoryTests(unittest.TestCase):
    def test_empty(self):
        history = SnapshotHistory()
        self.assertIsNone(history.current)
        self.assertFalse(history.can_undo)
        self.assertFalse(history.can_redo)
        self.assertIsNone(history.undo())
        self.assertIsNone(history.redo())

    def test_undo_redo(self):
        history = SnapshotHistory()
        for n in range(3):
            history.save(snap(n))
        self.assertEqual(len(history.undo().open_path), 1)
        self.assertEqual(len(history.undo().open_path), 0)
        self.assertIsNone(history.undo())
        self.assertEqual(len(history.redo().open_path), 1)
        self.assertTrue(history.can_redo)

    def test_save_after_undo_drops_redo_branch(self):
        history = SnapshotHistory()
        for n in range(3):
            history.save(snap(n))
        history.undo()
        history.save(snap(5), "branch")
        self.assertFalse(history.can_redo)
        self.assertEqual(len(history), 3)
        self.assertEqual(history.current.description, "branch")

    def test_overflow_drops_oldest(self):
        history = SnapshotHistory(max_size=2)
        for n in range(4):
            history.save(snap(n))
        self.assertEqual(len(history), 2)
        self.assertEqual(len(history.undo().open_path), 2)
        self.assertFalse(history.can_undo)

    def test_clear(self):
        history = SnapshotHistory()
        history.save(snap(1))
        history.clear()
        self.assertEqual(len(history), 0)
        self.assertIsNone(history.current)

    def test_snapshots_are_hashable(self):
        room = Polygon.from_vertices(1, [Vertex(0, 0), Vertex(8, 0), Vertex(8, 8)], 8.0, {"name": "Closet"})
        snapshot = Snapshot((Vertex(0, 0, "p0"),), (room,))
        self.assertEqual(hash(snapshot), hash(Snapshot((Vertex(0, 0, "p0"),), (room,))))

    def test_max_size_must_be_positive(self):
        with self.assertRaises(ValueError):
            SnapshotHistory(max_size=0)


if __name__ == "__main__":
    unittest.main()
