import unittest

from support import GeometryTestCase, p3

from panoplan.models import CalibrationState
from panoplan.core.calibration import CalibrationEngine
from panoplan.core.errors import InvalidCalibrationValueError, TooManyMarkersError
from panoplan.core.store import AnnotationStore


class CalibrationTests(GeometryTestCase):
    def setUp(self):
        self.store = AnnotationStore()
        self.calibration = CalibrationEngine(self.store)

    def place_markers(self, a=p3(0, 0), b=p3(250, 0)):
        self.calibration.add_marker(0, a)
        self.calibration.add_marker(0, b)

    def test_state_progression(self):
        cal = self.calibration
        self.assertEqual(cal.state(0), CalibrationState.UNCALIBRATED)
        cal.add_marker(0, p3(0, 0))
        self.assertEqual(cal.state(0), CalibrationState.COLLECTING)
        cal.add_marker(0, p3(250, 0))
        self.assertEqual(cal.state(0), CalibrationState.READY_TO_FINISH)
        cal.finish(0, 80)
        self.assertEqual(cal.state(0), CalibrationState.CALIBRATED)

    def test_second_marker_records_reference_line(self):
        self.place_markers()
        self.assert_close(self.calibration.calibration.reference_unit_distance, 250)
        lines = self.store.image(0).lines
        self.assertEqual(len(lines), 1)
        self.assertTrue(lines[0].is_calibration_line)
        self.assertTrue(all(p.is_calibration_marker for p in self.store.image(0).points))

    def test_finish_sets_scale(self):
        self.place_markers()
        cal = self.calibration.finish(0, 80)
        self.assertTrue(cal.is_calibrated)
        self.assert_close(cal.scale, 0.32)
        self.assertEqual(cal.reference_physical_length, 80)
        self.assert_close(self.calibration.to_physical_units(500), 160)
        self.assert_close(self.calibration.to_physical_area(100), 100 * 0.32 ** 2)
        self.assertEqual(self.calibration.unit, "cm")

    def test_third_marker_rejected(self):
        self.place_markers()
        with self.assertRaises(TooManyMarkersError):
            self.calibration.add_marker(0, p3(10, 10))
        self.assertEqual(len(self.store.image(0).points), 2)

    def test_invalid_length_leaves_state_unchanged(self):
        self.place_markers()
        for value in (None, 0, -5, float("nan"), float("inf")):
            with self.assertRaises(InvalidCalibrationValueError):
                self.calibration.finish(0, value)
            self.assertFalse(self.calibration.is_calibrated)
            self.assertEqual(self.calibration.scale, 1.0)
            self.assertEqual(self.calibration.state(0), CalibrationState.READY_TO_FINISH)

    def test_new_markers_keep_finished_span(self):
        self.place_markers()
        self.calibration.finish(0, 80)

        self.calibration.add_marker(1, p3(0, 0))
        self.calibration.add_marker(1, p3(100, 0))

        self.assert_close(self.calibration.calibration.reference_unit_distance, 250)
        self.assert_close(self.calibration.scale, 0.32)

        self.calibration.finish(1, 80)
        self.assert_close(self.calibration.calibration.reference_unit_distance, 100)
        self.assert_close(self.calibration.scale, 0.8)

    def test_reading_state_creates_no_image(self):
        self.assertEqual(self.calibration.state(4), CalibrationState.UNCALIBRATED)
        self.assertFalse(self.store.has_image(4))

    def test_finish_needs_two_markers(self):
        self.calibration.add_marker(0, p3(0, 0))
        with self.assertRaises(InvalidCalibrationValueError):
            self.calibration.finish(0, 80)

    def test_coincident_markers_rejected(self):
        self.place_markers(p3(10, 10), p3(10, 10))
        with self.assertRaises(InvalidCalibrationValueError):
            self.calibration.finish(0, 80)

    def test_cancel_removes_markers_only(self):
        self.place_markers()
        self.store.place_point(0, p3(0, 500))
        self.store.place_point(0, p3(100, 500))
        self.calibration.finish(0, 80)

        self.calibration.cancel(0)

        data = self.store.image(0)
        self.assertFalse(self.calibration.is_calibrated)
        self.assertEqual(self.calibration.scale, 1.0)
        self.assertEqual(data.calibration_markers, [])
        self.assertEqual(len(data.points), 2)
        self.assertEqual(len(data.lines), 1)
        self.assertFalse(data.lines[0].is_calibration_line)

    def test_uncalibrated_passthrough(self):
        self.assertEqual(self.calibration.to_physical_units(123.4), 123.4)
        self.assertEqual(self.calibration.to_physical_area(50), 50)
        self.assertEqual(self.calibration.unit, "u")

    def test_format_distance(self):
        self.place_markers()
        self.assertEqual(self.calibration.format_distance(250), "250")
        self.calibration.finish(0, 80)
        self.assertEqual(self.calibration.format_distance(500), "1.60m")
        self.assertEqual(self.calibration.format_distance(200), "64cm")


if __name__ == "__main__":
    unittest.main()
