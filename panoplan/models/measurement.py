"""Room shape classification and measurement results."""

from __future__ import annotations
from enum import Enum
from pydantic import BaseModel

from .geometry import BoundingBox2D


class ShapeType(str, Enum):
    UNKNOWN = "unknown"
    TRIANGLE = "triangle"
    RECTANGLE = "rectangle"
    QUADRILATERAL = "quadrilateral"
    POLYGON = "polygon"


class RoomDimensions(BaseModel):
    """Dimensions of a closed loop, in the units of its input points."""
    width: float = 0.0
    length: float = 0.0
    area: float = 0.0
    perimeter: float = 0.0
    side_lengths: list[float] = []
    raw_distances: list[float] = []     # Rectangle path only
    bounding_box: BoundingBox2D | None = None   # Irregular path only


class RoomMeasurement(BaseModel):
    """A measured room: raw 3D-unit dimensions plus their physical conversion."""
    surface_id: int
    shape: ShapeType
    dimensions: RoomDimensions
    physical: RoomDimensions
    unit: str
    is_calibrated: bool
