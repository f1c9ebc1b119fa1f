import json
import unittest

from support import GeometryTestCase, p3, room_corners

from panoplan.models import OpeningType
from panoplan.core.errors import NoDataToExportError
from panoplan.services import export_service
from panoplan.services.project_service import InteractionMode, ProjectSession

TIMESTAMP = "2024-05-01T12:00:00+00:00"


def annotated_session():
    session = ProjectSession()
    session.add_image("living.jpg")
    session.add_image("kitchen.jpg")

    session.set_mode(InteractionMode.CALIBRATE)
    session.click(0, p3(0, 0, y=-100))
    session.click(0, p3(250, 0, y=-100))
    session.finish_calibration(0, 80)

    for corner in room_corners():
        session.click(0, corner)
    session.click(0, p3(3, 3))

    session.set_mode(InteractionMode.WINDOW)
    for corner in [p3(100, 0, y=100), p3(200, 0, y=100), p3(200, 0, y=180), p3(100, 0, y=180)]:
        session.click(0, corner)

    session.set_mode(InteractionMode.POINT)
    session.click(1, p3(10, 10))
    session.click(1, p3(90, 10))
    return session


class ExportDocumentTests(GeometryTestCase):
    def setUp(self):
        self.session = annotated_session()

    def test_layout(self):
        data = json.loads(self.session.export_json(TIMESTAMP))

        self.assertEqual(data["version"], "2.0")
        self.assertEqual(data["timestamp"], TIMESTAMP)
        self.assertEqual(data["totalImages"], 2)
        self.assertEqual(
            data["images"],
            [{"id": 0, "name": "living.jpg"}, {"id": 1, "name": "kitchen.jpg"}],
        )
        self.assertIs(data["settings"]["isCalibrated"], True)
        self.assert_close(data["settings"]["scale"], 0.32)
        self.assertEqual(data["settings"]["calibrationValue"], 80)

        living = data["imageData"]["0"]
        self.assertEqual(living["imageName"], "living.jpg")
        self.assertEqual(
            living["statistics"],
            {"pointCount": 6, "lineCount": 5, "surfaceCount": 1, "openingCount": 1},
        )
        self.assertEqual(living["openings"][0]["type"], "window")
        self.assert_all_close(living["openings"][0]["dimensions"]["sideLengths"], [100, 80, 100, 80])
        self.assertIs(living["points"][0]["isCalibrationMarker"], True)

        self.assertEqual(data["summary"], {
            "totalPoints": 8, "totalLines": 6, "totalSurfaces": 1,
            "totalOpenings": 1, "imagesWithData": 2,
        })

    def test_reimport_is_idempotent(self):
        first = self.session.export_json(TIMESTAMP)

        restored = ProjectSession.from_export(export_service.parse_export(first))

        self.assertEqual(restored.export_json(TIMESTAMP), first)
        self.assertTrue(restored.calibration.is_calibrated)
        self.assert_close(restored.calibration.scale, 0.32)
        self.assertEqual(restored.images[1].name, "kitchen.jpg")

    def test_reimported_ids_continue(self):
        restored = ProjectSession.from_export(
            export_service.parse_export(self.session.export_json(TIMESTAMP))
        )
        restored.set_mode(InteractionMode.POINT)
        result = restored.click(1, p3(90, 90))
        self.assertEqual(result.placement.point.id, 2)
        self.assertEqual(result.placement.line.id, 1)

    def test_ids_deleted_before_export_stay_retired(self):
        session = ProjectSession()
        for x in (0, 100, 200):
            session.store.add_point(0, p3(x, 0))
        session.store.remove_point_cascade(0, 2)

        data = json.loads(session.export_json(TIMESTAMP))
        self.assertEqual(data["imageData"]["0"]["nextPointId"], 3)

        restored = ProjectSession.from_export(export_service.parse_export(json.dumps(data)))
        self.assertEqual(restored.store.add_point(0, p3(5, 5)).id, 3)

    def test_load_replaces_session(self):
        document = self.session.export_document(TIMESTAMP)
        other = ProjectSession()
        other.store.add_opening(5, OpeningType.DOOR, [p3(0, 0), p3(1, 0), p3(1, 1), p3(0, 1)])

        other.load_export(document)

        self.assertFalse(other.store.has_image(5))
        self.assertEqual(other.store.image_indices(), [0, 1])
        self.assertEqual(other.settings.calibration_value, 80)


class EmptyExportTests(unittest.TestCase):
    def test_unnamed_image_gets_placeholder(self):
        session = ProjectSession()
        session.store.add_point(3, p3(0, 0))
        document = session.export_document(TIMESTAMP)
        self.assertEqual(document.image_data[3].image_name, "Image_3")

    def test_nothing_to_export(self):
        session = ProjectSession()
        with self.assertRaises(NoDataToExportError):
            session.export_json()

        session.add_image("empty.jpg")
        session.store.image(0)
        with self.assertRaises(NoDataToExportError):
            session.export_json()


if __name__ == "__main__":
    unittest.main()
