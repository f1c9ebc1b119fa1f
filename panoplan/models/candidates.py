"""Polygon candidates delivered by an external image-analysis service."""

from __future__ import annotations
from enum import Enum
from pydantic import BaseModel

from .annotations import OpeningType
from .geometry import PixelPoint


class CandidateKind(str, Enum):
    ROOM = "room"
    OPENING = "opening"
    UNKNOWN = "unknown"


class PolygonCandidate(BaseModel):
    """A pixel-space point loop plus a classification hint."""
    points: list[PixelPoint]
    hint: CandidateKind = CandidateKind.UNKNOWN

    def as_tuples(self) -> list[tuple[float, float]]:
        return [(p.x, p.y) for p in self.points]


class DetectedOpening(BaseModel):
    type: OpeningType
    points: list[PixelPoint]
    area: float


class DetectedLayout(BaseModel):
    """Room outline and openings picked out of the candidates."""
    room: list[PixelPoint] | None = None
    room_area: float = 0.0
    openings: list[DetectedOpening] = []
    used_fallback: bool = False
