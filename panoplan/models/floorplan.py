"""Vector scene produced by the floor-plan projector."""

from __future__ import annotations
from enum import Enum
from pydantic import BaseModel

from .annotations import OpeningType


class PlanPoint(BaseModel):
    """Canvas coordinates in pixels, y pointing down."""
    x: float
    y: float


class PlanOutline(BaseModel):
    """Closed polygon outline of a surface."""
    surface_id: int
    points: list[PlanPoint]
    stroke: str = "#000000"
    stroke_width: float = 2.0


class PlanFill(BaseModel):
    """Filled polygon of an opening."""
    opening_id: int
    opening_type: OpeningType
    points: list[PlanPoint]
    fill: str


class LabelKind(str, Enum):
    TITLE = "title"
    EDGE = "edge"
    OPENING_NAME = "opening_name"
    OPENING_SIZE = "opening_size"


class PlanLabel(BaseModel):
    text: str
    anchor: PlanPoint
    kind: LabelKind
    color: str = "#000000"
    font_size: int = 12
    bold: bool = False


class SceneStatus(str, Enum):
    OK = "ok"
    NOTHING_TO_DRAW = "nothing_to_draw"


class FloorPlanScene(BaseModel):
    """A drawable top-down plan; rasterisation happens elsewhere."""
    width: int
    height: int
    background: str = "#ffffff"
    status: SceneStatus = SceneStatus.OK
    message: str = ""
    pixels_per_unit: float = 0.0
    unit: str = "u"
    outlines: list[PlanOutline] = []
    fills: list[PlanFill] = []
    labels: list[PlanLabel] = []

    @property
    def is_empty(self) -> bool:
        return self.status == SceneStatus.NOTHING_TO_DRAW
