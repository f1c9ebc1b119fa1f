"""Room shape analysis — classification, rectangle averaging, polygon area."""

from __future__ import annotations
import logging

from panoplan.models import (
    Point3D, ShapeType, RoomDimensions, ShapeParams,
    edge_lengths, shoelace_area, bounding_box_2d, sort_by_angle,
)

logger = logging.getLogger(__name__)


class ShapeAnalyzer:
    """Classifies a closed point loop and measures it."""

    def __init__(self, params: ShapeParams | None = None) -> None:
        self.params = params or ShapeParams()

    def measure(self, points: list[Point3D]) -> tuple[ShapeType, RoomDimensions]:
        """Classify, then measure with the rectangle or irregular path."""
        shape = self.classify(points)
        if shape == ShapeType.RECTANGLE and len(points) == 4:
            return shape, self.rectangle_dimensions(points)
        return shape, self.irregular_dimensions(points)

    def classify(self, points: list[Point3D]) -> ShapeType:
        n = len(points)
        if n == 3:
            return ShapeType.TRIANGLE
        if n == 4:
            if self.is_approx_rectangle(points):
                return ShapeType.RECTANGLE
            return ShapeType.QUADRILATERAL
        if n > 4:
            return ShapeType.POLYGON
        return ShapeType.UNKNOWN

    def is_approx_rectangle(self, points: list[Point3D], tolerance: float | None = None) -> bool:
        """Opposite sides of the angle-sorted quad agree within the tolerance."""
        if len(points) != 4:
            return False
        if tolerance is None:
            tolerance = self.params.rectangle_tolerance

        sides = edge_lengths(sort_by_angle(points))
        return (
            _relative_difference(sides[0], sides[2]) < tolerance
            and _relative_difference(sides[1], sides[3]) < tolerance
        )

    def rectangle_dimensions(self, points: list[Point3D]) -> RoomDimensions:
        """
        Average opposite walls into width and length.

        Nominally parallel walls never measure exactly the same on a
        panorama; averaging them evens out perspective and click noise.
        """
        if len(points) < 4:
            return RoomDimensions()

        distances = edge_lengths(sort_by_angle(points))
        width = (distances[0] + distances[2]) / 2
        length = (distances[1] + distances[3]) / 2

        logger.debug(
            "Rectangle walls %s -> width %.2f, length %.2f",
            ", ".join(f"{d:.2f}" for d in distances), width, length,
        )

        return RoomDimensions(
            width=width,
            length=length,
            area=width * length,
            perimeter=2 * (width + length),
            side_lengths=distances,
            raw_distances=distances,
        )

    def irregular_dimensions(self, points: list[Point3D]) -> RoomDimensions:
        """Shoelace area, summed perimeter and bounding-box extents."""
        if len(points) < 3:
            return RoomDimensions()

        ordered = sort_by_angle(points)
        sides = edge_lengths(ordered)
        box = bounding_box_2d(ordered, "x", "z")

        return RoomDimensions(
            width=box.width,
            length=box.height,
            area=shoelace_area(ordered),
            perimeter=sum(sides),
            side_lengths=sides,
            bounding_box=box,
        )


def _relative_difference(a: float, b: float) -> float:
    largest = max(a, b)
    if largest <= 0:
        return 0.0
    return abs(a - b) / largest
