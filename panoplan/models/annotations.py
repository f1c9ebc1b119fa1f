"""Annotation models — points, lines, surfaces and openings per image."""

from __future__ import annotations
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .geometry import Point3D


class CamelModel(BaseModel):
    """Serialises with the camelCase keys of the export document."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OpeningType(str, Enum):
    DOOR = "door"
    WINDOW = "window"
    OTHER = "other"


class AnnotationPoint(CamelModel):
    """A clicked point on the panorama sphere."""
    id: int
    position: Point3D
    connections: list[int] = []
    image_index: int
    is_calibration_marker: bool = False

    def connect(self, other_id: int) -> None:
        if other_id not in self.connections:
            self.connections.append(other_id)

    def disconnect(self, other_id: int) -> None:
        if other_id in self.connections:
            self.connections.remove(other_id)


class Line(CamelModel):
    """A segment between two points, referenced by id."""
    id: int
    point_id1: int
    point_id2: int
    image_index: int
    is_calibration_line: bool = False

    def touches(self, point_id: int) -> bool:
        return point_id in (self.point_id1, self.point_id2)


class Surface(CamelModel):
    """A closed polygon; point_ids are in loop order."""
    id: int
    point_ids: list[int]
    color: int = 0x00FF00
    image_index: int


class OpeningDimensions(CamelModel):
    width: float = 0.0
    height: float = 0.0
    area: float = 0.0
    perimeter: float = 0.0
    side_lengths: list[float] = []


class OpeningProperties(CamelModel):
    name: str = ""
    material: str = ""
    notes: str = ""


class Opening(CamelModel):
    """A door, window or other wall penetration marked by four corners."""
    id: int
    type: OpeningType
    points: list[Point3D]   # Snapshots taken at creation, in click order
    dimensions: OpeningDimensions | None = None
    image_index: int
    properties: OpeningProperties = Field(default_factory=OpeningProperties)

    @field_validator("points")
    @classmethod
    def _four_corners(cls, v: list[Point3D]) -> list[Point3D]:
        if len(v) != 4:
            raise ValueError(f"an opening needs exactly 4 corners, got {len(v)}")
        return v


class ImageStatistics(CamelModel):
    point_count: int = 0
    line_count: int = 0
    surface_count: int = 0
    opening_count: int = 0


class OpeningStatistics(CamelModel):
    total: int = 0
    doors: int = 0
    windows: int = 0
    others: int = 0
    total_area: float = 0.0

    @classmethod
    def from_openings(cls, openings: list[Opening]) -> OpeningStatistics:
        return cls(
            total=len(openings),
            doors=sum(1 for o in openings if o.type == OpeningType.DOOR),
            windows=sum(1 for o in openings if o.type == OpeningType.WINDOW),
            others=sum(1 for o in openings if o.type == OpeningType.OTHER),
            total_area=sum(o.dimensions.area for o in openings if o.dimensions),
        )


class ImageAnnotationSet(CamelModel):
    """
    Everything annotated on a single panorama.

    The next_* counters make ids sequential and never reused within the
    image, even after deletes.
    """
    image_index: int
    points: list[AnnotationPoint] = []
    lines: list[Line] = []
    surfaces: list[Surface] = []
    openings: list[Opening] = []

    next_point_id: int = 0
    next_line_id: int = 0
    next_surface_id: int = 0
    next_opening_id: int = 0

    def model_post_init(self, __context: object) -> None:
        # Older exports carry no counters; continue after the highest id
        self.next_point_id = max(self.next_point_id, _after(self.points))
        self.next_line_id = max(self.next_line_id, _after(self.lines))
        self.next_surface_id = max(self.next_surface_id, _after(self.surfaces))
        self.next_opening_id = max(self.next_opening_id, _after(self.openings))

    @property
    def is_empty(self) -> bool:
        return not (self.points or self.lines or self.surfaces or self.openings)

    def get_point(self, point_id: int) -> AnnotationPoint | None:
        for p in self.points:
            if p.id == point_id:
                return p
        return None

    def get_surface(self, surface_id: int) -> Surface | None:
        for s in self.surfaces:
            if s.id == surface_id:
                return s
        return None

    def get_opening(self, opening_id: int) -> Opening | None:
        for o in self.openings:
            if o.id == opening_id:
                return o
        return None

    @property
    def drawing_points(self) -> list[AnnotationPoint]:
        """Room-outline points; calibration markers excluded."""
        return [p for p in self.points if not p.is_calibration_marker]

    @property
    def calibration_markers(self) -> list[AnnotationPoint]:
        return [p for p in self.points if p.is_calibration_marker]

    def statistics(self) -> ImageStatistics:
        return ImageStatistics(
            point_count=len(self.points),
            line_count=len(self.lines),
            surface_count=len(self.surfaces),
            opening_count=len(self.openings),
        )


def _after(items: list) -> int:
    return max((item.id for item in items), default=-1) + 1
