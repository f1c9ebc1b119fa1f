import unittest

from support import GeometryTestCase, drawn_store, p3, room_corners

from panoplan.models import OpeningType
from panoplan.core.errors import (
    InsufficientPointsError, MissingReferenceError, InvalidOpeningError,
)
from panoplan.core.store import AnnotationStore, ClearResult


class PointAndLineTests(unittest.TestCase):
    def setUp(self):
        self.store = AnnotationStore()

    def test_sequential_ids(self):
        ids = [self.store.add_point(0, p3(i, i)).id for i in range(3)]
        self.assertEqual(ids, [0, 1, 2])
        self.assertTrue(all(p.image_index == 0 for p in self.store.image(0).points))

    def test_images_are_independent(self):
        self.store.add_point(0, p3(0, 0))
        self.store.add_point(3, p3(1, 1))
        self.assertEqual(self.store.add_point(3, p3(2, 2)).id, 1)
        self.assertEqual(len(self.store.image(0).points), 1)
        self.assertEqual(self.store.image_indices(), [0, 3])

    def test_ids_are_not_reused_after_delete(self):
        for i in range(3):
            self.store.add_point(0, p3(i, 0))
        self.store.remove_point_cascade(0, 2)
        self.assertEqual(self.store.add_point(0, p3(9, 9)).id, 3)

    def test_auto_connect_registers_connections(self):
        a = self.store.add_point(0, p3(0, 0))
        b = self.store.add_point(0, p3(1, 0))
        line = self.store.auto_connect(0, a.id, b.id)
        self.assertEqual((line.point_id1, line.point_id2), (a.id, b.id))
        self.assertEqual(a.connections, [b.id])
        self.assertEqual(b.connections, [a.id])

    def test_auto_connect_missing_point_is_skipped(self):
        a = self.store.add_point(0, p3(0, 0))
        self.assertIsNone(self.store.auto_connect(0, a.id, 42))
        self.assertEqual(self.store.image(0).lines, [])

    def test_add_line_missing_point_raises(self):
        self.store.add_point(0, p3(0, 0))
        with self.assertRaises(MissingReferenceError):
            self.store.add_line(0, 0, 1)

    def test_move_point_is_seen_through_lines(self):
        store = drawn_store()
        store.move_point(0, 1, p3(500, 0))
        _, end = store.line_endpoints(0, store.image(0).lines[0])
        self.assertEqual(end.x, 500)


class DrawingTests(unittest.TestCase):
    def setUp(self):
        self.store = AnnotationStore()

    def test_place_point_connects_to_previous(self):
        self.store.place_point(0, p3(0, 0))
        result = self.store.place_point(0, p3(100, 0))
        self.assertEqual(result.point.id, 1)
        self.assertIsNotNone(result.line)
        self.assertFalse(result.closed_loop)

    def test_close_loop_within_threshold(self):
        for corner in room_corners():
            self.store.place_point(0, corner)

        result = self.store.place_point(0, p3(49, 0), threshold=50)

        data = self.store.image(0)
        self.assertTrue(result.closed_loop)
        self.assertEqual(len(data.points), 4)
        self.assertEqual(len(data.surfaces), 1)
        self.assertEqual(data.surfaces[0].point_ids, [0, 1, 2, 3])
        closing = data.lines[-1]
        self.assertEqual({closing.point_id1, closing.point_id2}, {3, 0})

    def test_no_close_loop_outside_threshold(self):
        for corner in room_corners():
            self.store.place_point(0, corner)

        result = self.store.place_point(0, p3(51, 0), threshold=50)

        data = self.store.image(0)
        self.assertFalse(result.closed_loop)
        self.assertEqual(len(data.points), 5)
        self.assertEqual(data.surfaces, [])

    def test_close_loop_needs_three_points(self):
        self.store.place_point(0, p3(0, 0))
        self.store.place_point(0, p3(400, 0))
        self.assertFalse(self.store.close_loop_if_near(0, p3(1, 1)))

    def test_calibration_markers_do_not_take_part(self):
        self.store.add_point(0, p3(1000, 1000), is_calibration_marker=True)
        for corner in [p3(0, 0), p3(400, 0), p3(400, 300)]:
            self.store.place_point(0, corner)
        result = self.store.place_point(0, p3(2, 2))
        self.assertTrue(result.closed_loop)
        self.assertEqual(self.store.image(0).surfaces[0].point_ids, [1, 2, 3])


class SurfaceTests(GeometryTestCase):
    def setUp(self):
        self.store = AnnotationStore()

    def test_build_surface_requires_three_points(self):
        self.store.add_point(0, p3(0, 0))
        self.store.add_point(0, p3(1, 0))
        with self.assertRaises(InsufficientPointsError):
            self.store.build_surface_from_all_points(0)
        self.assertEqual(self.store.image(0).surfaces, [])

    def test_build_surface_rejects_unknown_point(self):
        self.store.add_point(0, p3(0, 0))
        with self.assertRaises(MissingReferenceError):
            self.store.build_surface(0, [0, 7, 8])

    def test_remove_point_from_triangle_deletes_surface(self):
        for corner in [p3(0, 0), p3(400, 0), p3(200, 300)]:
            self.store.place_point(0, corner)
        self.store.place_point(0, p3(1, 1))
        self.assertEqual(len(self.store.image(0).surfaces), 1)

        self.store.remove_point_cascade(0, 1)

        data = self.store.image(0)
        self.assertEqual(data.surfaces, [])
        self.assertFalse(any(ln.touches(1) for ln in data.lines))
        self.assertFalse(any(1 in p.connections for p in data.points))

    def test_remove_point_from_quad_keeps_triangle(self):
        store = drawn_store()
        store.remove_point_cascade(0, 2)
        self.assertEqual(store.image(0).surfaces[0].point_ids, [0, 1, 3])

    def test_remove_unknown_point_raises(self):
        with self.assertRaises(MissingReferenceError):
            self.store.remove_point_cascade(0, 5)

    def test_copy_surface_to_floor(self):
        for pt in [p3(200, 100, y=150), p3(-200, 100, y=150), p3(-200, -100, y=150)]:
            self.store.place_point(0, pt)
        self.store.place_point(0, p3(201, 101, y=150))

        floor = self.store.copy_surface_to_floor(0)

        data = self.store.image(0)
        self.assertEqual(floor.color, 0x0088FF)
        self.assertEqual(len(data.surfaces), 2)
        for copy in self.store.resolve_points(0, floor.point_ids):
            self.assertLess(copy.position.y, 0)
            self.assert_close(copy.position.length(), 500.0)
        # 2 outline + 1 closing + 3 floor loop + 3 vertical
        self.assertEqual(len(data.lines), 9)

    def test_copy_without_surface_raises(self):
        with self.assertRaises(InsufficientPointsError):
            self.store.copy_surface_to_floor(0)

    def test_prune_dangling(self):
        for corner in [p3(0, 0), p3(1, 0), p3(1, 1)]:
            self.store.add_point(0, corner)
        self.store.build_surface(0, [0, 1, 2])
        self.store.add_line(0, 0, 1)
        # Stale reference left behind by an external edit
        self.store.image(0).points.pop()

        self.assertEqual(self.store.prune_dangling(0), 1)
        self.assertEqual(self.store.image(0).surfaces, [])
        self.assertEqual(len(self.store.image(0).lines), 1)


class ClearTests(unittest.TestCase):
    def test_nothing_to_clear(self):
        store = AnnotationStore()
        self.assertEqual(store.clear_all(0), ClearResult.NOTHING_TO_CLEAR)
        self.assertEqual(store.clear_lines(0), ClearResult.NOTHING_TO_CLEAR)
        self.assertEqual(store.clear_openings(0), ClearResult.NOTHING_TO_CLEAR)

    def test_clear_lines_resets_connections(self):
        store = drawn_store()
        self.assertEqual(store.clear_lines(0), ClearResult.CLEARED)
        data = store.image(0)
        self.assertEqual(data.lines, [])
        self.assertTrue(all(p.connections == [] for p in data.points))
        self.assertEqual(len(data.surfaces), 1)

    def test_clear_all(self):
        store = drawn_store()
        store.add_opening(0, OpeningType.DOOR, room_corners())
        self.assertEqual(store.clear_all(0), ClearResult.CLEARED)
        self.assertTrue(store.image(0).is_empty)


class OpeningStoreTests(GeometryTestCase):
    def setUp(self):
        self.store = AnnotationStore()

    def test_names_and_dimensions(self):
        corners = [p3(0, 0), p3(90, 0), p3(90, 0, y=200), p3(0, 0, y=200)]
        door = self.store.add_opening(0, OpeningType.DOOR, corners)
        second = self.store.add_opening(0, OpeningType.DOOR, corners)
        window = self.store.add_opening(0, OpeningType.WINDOW, corners)

        self.assertEqual(door.properties.name, "Door 1")
        self.assertEqual(door.properties.material, "wood")
        self.assertEqual(second.properties.name, "Door 2")
        self.assertEqual(window.properties.name, "Window 1")
        self.assertEqual(len(door.dimensions.side_lengths), 4)
        self.assert_close(door.dimensions.width, 90)
        self.assert_close(door.dimensions.height, 200)

    def test_points_are_snapshots(self):
        corners = [p3(0, 0), p3(1, 0), p3(1, 1), p3(0, 1)]
        opening = self.store.add_opening(0, OpeningType.WINDOW, corners)
        corners[0].x = 99
        self.assertEqual(opening.points[0].x, 0)

    def test_requires_four_corners(self):
        for count in (3, 5):
            with self.assertRaises(InvalidOpeningError):
                self.store.add_opening(0, OpeningType.DOOR, [p3(i, i) for i in range(count)])
        self.assertEqual(self.store.image(0).openings, [])

    def test_update_and_remove(self):
        opening = self.store.add_opening(0, OpeningType.OTHER, room_corners())
        self.store.update_opening_properties(0, opening.id, name="Hatch", notes="attic")
        self.assertEqual(opening.properties.name, "Hatch")
        self.assertEqual(opening.properties.notes, "attic")
        self.assertEqual(opening.properties.material, "other")

        self.store.remove_opening(0, opening.id)
        self.assertEqual(self.store.image(0).openings, [])
        with self.assertRaises(MissingReferenceError):
            self.store.remove_opening(0, opening.id)

    def test_peek_does_not_create(self):
        store = AnnotationStore()
        self.assertTrue(store.peek(7).is_empty)
        self.assertEqual(store.statistics(7).point_count, 0)
        self.assertFalse(store.has_image(7))

        point = store.add_point(7, p3(0, 0))
        self.assertEqual(store.peek(7).points, [point])

    def test_statistics(self):
        store = drawn_store()
        store.add_opening(0, OpeningType.WINDOW, room_corners())
        stats = store.statistics(0)
        self.assertEqual(
            (stats.point_count, stats.line_count, stats.surface_count, stats.opening_count),
            (4, 4, 1, 1),
        )
        openings = store.opening_statistics(0)
        self.assertEqual(openings.windows, 1)
        self.assert_close(openings.total_area, 400 * 300)


if __name__ == "__main__":
    unittest.main()
