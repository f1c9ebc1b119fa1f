"""Shared builders for the test modules."""

import os
import sys
import unittest

THIS_DIR = os.path.dirname(__file__)
ROOT_DIR = os.path.dirname(THIS_DIR)
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from panoplan.models import Point3D
from panoplan.core.store import AnnotationStore


def p3(x, z, y=0.0):
    """Point on the floor plane at height y."""
    return Point3D(x=x, y=y, z=z)


def room_corners():
    """A 400 x 300 room on the floor plane, drawn counter-clockwise."""
    return [p3(0, 0), p3(400, 0), p3(400, 300), p3(0, 300)]


def draw_room(store, image_index=0, corners=None):
    """Click the outline and close it near the first corner."""
    corners = corners or room_corners()
    for corner in corners:
        store.place_point(image_index, corner)
    first = corners[0]
    return store.place_point(image_index, p3(first.x + 5, first.z + 5))


def drawn_store():
    store = AnnotationStore()
    draw_room(store)
    return store


class GeometryTestCase(unittest.TestCase):
    def assert_close(self, actual, expected, tol=1e-6):
        self.assertTrue(abs(actual - expected) <= tol, "{} != {}".format(actual, expected))

    def assert_all_close(self, actual, expected, tol=1e-6):
        self.assertEqual(len(actual), len(expected), "{} != {}".format(actual, expected))
        for a, e in zip(actual, expected):
            self.assert_close(a, e, tol)
