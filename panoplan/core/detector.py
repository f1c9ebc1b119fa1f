"""Candidate room detector — turns external polygon candidates into annotations.

The image analysis itself (edge detection, contour approximation) lives
behind the CandidateSource protocol. This module only decides which
candidate is the room, which are openings, and imports them through the
annotation store like hand-drawn geometry.
"""

from __future__ import annotations
import logging
from typing import Any, Protocol

from pydantic import BaseModel

from panoplan.models import (
    PolygonCandidate, CandidateKind, DetectedLayout, DetectedOpening,
    DetectionParams, OpeningType, PixelPoint, Point3D, Surface, Opening,
    polygon_area_2d, point_in_polygon,
)
from panoplan.core.store import AnnotationStore

logger = logging.getLogger(__name__)


class CandidateSource(Protocol):
    """Injected image-analysis capability."""

    def detect_candidate_polygons(self, image: Any) -> list[PolygonCandidate]:
        ...


class ImportedLayout(BaseModel):
    surface: Surface | None = None
    openings: list[Opening] = []


class CandidateRoomDetector:
    """Picks a room outline and its openings out of polygon candidates."""

    def __init__(self, params: DetectionParams | None = None) -> None:
        self.params = params or DetectionParams()

    def detect(
        self,
        candidates: list[PolygonCandidate],
        image_size: tuple[float, float] | None = None,
    ) -> DetectedLayout:
        layout = DetectedLayout()

        room = self._pick_room(candidates)
        if room is None and image_size is not None:
            w, h = image_size
            inset = self.params.fallback_inset
            room = [
                PixelPoint(x=inset, y=inset), PixelPoint(x=w - inset, y=inset),
                PixelPoint(x=w - inset, y=h - inset), PixelPoint(x=inset, y=h - inset),
            ]
            layout.used_fallback = True
            logger.info("No room candidate, falling back to the image rectangle")
        if room is None:
            logger.warning("No room outline among %d candidates", len(candidates))
            return layout

        layout.room = room
        layout.room_area = polygon_area_2d([(p.x, p.y) for p in room])
        layout.openings = self._pick_openings(candidates, room, layout.room_area)
        logger.info(
            "Detected room of area %.0f px² with %d opening(s)",
            layout.room_area, len(layout.openings),
        )
        return layout

    def detect_from(
        self,
        source: CandidateSource,
        image: Any,
        image_size: tuple[float, float] | None = None,
    ) -> DetectedLayout:
        return self.detect(source.detect_candidate_polygons(image), image_size)

    def _pick_room(self, candidates: list[PolygonCandidate]) -> list[PixelPoint] | None:
        best: list[PixelPoint] | None = None
        best_area = 0.0
        for candidate in candidates:
            if candidate.hint == CandidateKind.OPENING or len(candidate.points) < 3:
                continue
            area = polygon_area_2d(candidate.as_tuples())
            if area < self.params.min_room_area:
                continue    # noise
            if area > best_area:
                best, best_area = candidate.points, area
        return best

    def _pick_openings(
        self,
        candidates: list[PolygonCandidate],
        room: list[PixelPoint],
        room_area: float,
    ) -> list[DetectedOpening]:
        room_poly = [(p.x, p.y) for p in room]
        max_area = room_area * self.params.max_opening_area_ratio
        openings: list[DetectedOpening] = []

        for candidate in candidates:
            if candidate.hint == CandidateKind.ROOM or len(candidate.points) != 4:
                continue
            area = polygon_area_2d(candidate.as_tuples())
            if area < self.params.min_opening_area or area > max_area:
                continue

            cx = sum(p.x for p in candidate.points) / 4
            cy = sum(p.y for p in candidate.points) / 4
            if not point_in_polygon((cx, cy), room_poly):
                continue

            openings.append(DetectedOpening(
                type=self.classify_opening(candidate.points),
                points=candidate.points,
                area=area,
            ))
        return openings

    def classify_opening(self, points: list[PixelPoint]) -> OpeningType:
        """Tall-narrow or wide-flat reads as a door, anything squarer as a window."""
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        width = max(xs) - min(xs)
        height = max(ys) - min(ys)
        ratio = width / max(height, 1.0)
        if ratio < self.params.door_ratio_low or ratio > self.params.door_ratio_high:
            return OpeningType.DOOR
        return OpeningType.WINDOW

    def import_layout(
        self,
        store: AnnotationStore,
        image_index: int,
        layout: DetectedLayout,
    ) -> ImportedLayout:
        """Add the detected outline and openings as annotations on one image."""
        result = ImportedLayout()
        if layout.room is None:
            return result

        # Pixel (x, y) lands on the floor plane as (x, 0, y)
        ids = [
            store.add_point(image_index, Point3D(x=p.x, y=0.0, z=p.y)).id
            for p in layout.room
        ]
        for i, pid in enumerate(ids):
            store.auto_connect(image_index, pid, ids[(i + 1) % len(ids)])
        result.surface = store.build_surface(image_index, ids)

        for detected in layout.openings:
            corners = [Point3D(x=p.x, y=0.0, z=p.y) for p in detected.points]
            result.openings.append(store.add_opening(image_index, detected.type, corners))

        return result
