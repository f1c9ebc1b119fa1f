"""Geometric primitives used throughout the engine.

Coordinates follow the Three.js convention of the panorama viewer: X and Z
span the floor plane, Y points up.
"""

from __future__ import annotations
import math
from typing import Sequence
from pydantic import BaseModel


class Point3D(BaseModel):
    """Point in 3D space."""
    x: float
    y: float
    z: float

    def distance_to(self, other: Point3D) -> float:
        return math.sqrt(
            (self.x - other.x) ** 2
            + (self.y - other.y) ** 2
            + (self.z - other.z) ** 2
        )

    def lerp(self, other: Point3D, t: float) -> Point3D:
        return Point3D(
            x=self.x + (other.x - self.x) * t,
            y=self.y + (other.y - self.y) * t,
            z=self.z + (other.z - self.z) * t,
        )

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalized(self) -> Point3D:
        ln = self.length()
        if ln < 1e-10:
            return Point3D(x=0.0, y=0.0, z=0.0)
        return Point3D(x=self.x / ln, y=self.y / ln, z=self.z / ln)

    def __mul__(self, scalar: float) -> Point3D:
        return Point3D(x=self.x * scalar, y=self.y * scalar, z=self.z * scalar)


class PixelPoint(BaseModel):
    """Point in image pixel space (x right, y down)."""
    x: float
    y: float


class BoundingBox2D(BaseModel):
    """Axis-aligned extents over two chosen axes."""
    min_a: float = 0.0
    max_a: float = 0.0
    min_b: float = 0.0
    max_b: float = 0.0

    @property
    def width(self) -> float:
        return self.max_a - self.min_a

    @property
    def height(self) -> float:
        return self.max_b - self.min_b


def distance_3d(a: Point3D, b: Point3D) -> float:
    return a.distance_to(b)


def centroid(points: Sequence[Point3D]) -> Point3D:
    """Mean position of a non-empty point set."""
    if not points:
        raise ValueError("centroid of an empty point set")
    n = len(points)
    return Point3D(
        x=sum(p.x for p in points) / n,
        y=sum(p.y for p in points) / n,
        z=sum(p.z for p in points) / n,
    )


def edge_lengths(points: Sequence[Point3D]) -> list[float]:
    """3D lengths of consecutive edges of a closed loop."""
    n = len(points)
    if n < 2:
        return []
    return [points[i].distance_to(points[(i + 1) % n]) for i in range(n)]


def signed_shoelace_area(
    points: Sequence[Point3D], axes: tuple[str, str] = ("x", "z"),
) -> float:
    """Signed area of the loop projected onto two axes (vertical dropped)."""
    n = len(points)
    if n < 3:
        return 0.0
    a_axis, b_axis = axes
    total = 0.0
    for i in range(n):
        cur = points[i]
        nxt = points[(i + 1) % n]
        total += getattr(cur, a_axis) * getattr(nxt, b_axis) \
            - getattr(nxt, a_axis) * getattr(cur, b_axis)
    return total / 2


def shoelace_area(
    points: Sequence[Point3D], axes: tuple[str, str] = ("x", "z"),
) -> float:
    return abs(signed_shoelace_area(points, axes))


def polygon_area_2d(polygon: Sequence[tuple[float, float]]) -> float:
    """Absolute shoelace area of a plain (a, b) tuple loop."""
    n = len(polygon)
    if n < 3:
        return 0.0
    total = 0.0
    for i in range(n):
        a1, b1 = polygon[i]
        a2, b2 = polygon[(i + 1) % n]
        total += a1 * b2 - a2 * b1
    return abs(total) / 2


def bounding_box_2d(
    points: Sequence[Point3D], axis_a: str = "x", axis_b: str = "z",
) -> BoundingBox2D:
    if not points:
        return BoundingBox2D()
    a_vals = [getattr(p, axis_a) for p in points]
    b_vals = [getattr(p, axis_b) for p in points]
    return BoundingBox2D(
        min_a=min(a_vals), max_a=max(a_vals),
        min_b=min(b_vals), max_b=max(b_vals),
    )


def sort_by_angle(
    points: Sequence[Point3D], axis_a: str = "x", axis_b: str = "z",
) -> list[Point3D]:
    """
    Order points by their angle around the centroid.

    Exact for convex loops only. Concave rooms can come out in a different
    order than they were drawn; area and perimeter are defined relative to
    this ordering, so it is kept as-is.
    """
    if not points:
        return []
    c = centroid(points)
    ca, cb = getattr(c, axis_a), getattr(c, axis_b)
    return sorted(
        points,
        key=lambda p: math.atan2(getattr(p, axis_b) - cb, getattr(p, axis_a) - ca),
    )


def point_in_polygon(
    pt: tuple[float, float], polygon: Sequence[tuple[float, float]],
) -> bool:
    """Ray-casting inside test on (x, y) tuples."""
    px, py = pt
    inside = False
    n = len(polygon)
    j = n - 1
    for i in range(n):
        xi, yi = polygon[i]
        xj, yj = polygon[j]
        if (yi > py) != (yj > py):
            dy = (yj - yi) or 1e-9
            if px < (xj - xi) * (py - yi) / dy + xi:
                inside = not inside
        j = i
    return inside
