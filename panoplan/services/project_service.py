"""Project session — facade over store, calibration, analysis and export."""

from __future__ import annotations
import logging
from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel

from panoplan.models import (
    AnnotationPoint, Calibration, CalibrationState, EngineConfig, ExportDocument,
    FloorPlanScene, ImageInfo, Opening, OpeningType, Point3D, PolygonCandidate,
    RoomDimensions, RoomMeasurement, Surface, ViewerSettings,
)
from panoplan.core.calibration import CalibrationEngine
from panoplan.core.detector import CandidateRoomDetector, CandidateSource, ImportedLayout
from panoplan.core.errors import InsufficientPointsError, MissingReferenceError, NoDataToExportError
from panoplan.core.openings import OpeningDraft
from panoplan.core.projector import FloorPlanProjector
from panoplan.core.shapes import ShapeAnalyzer
from panoplan.core.store import AnnotationStore, PlacementResult
from panoplan.core.svg import render_svg
from panoplan.services import export_service

logger = logging.getLogger(__name__)


class InteractionMode(str, Enum):
    VIEW = "view"
    POINT = "point"
    CALIBRATE = "calibrate"
    DOOR = "door"
    WINDOW = "window"
    OPENING = "opening"


OPENING_MODES = {
    InteractionMode.DOOR: OpeningType.DOOR,
    InteractionMode.WINDOW: OpeningType.WINDOW,
    InteractionMode.OPENING: OpeningType.OTHER,
}


class ClickResult(BaseModel):
    """What a click did in the active mode."""
    mode: InteractionMode
    placement: PlacementResult | None = None
    marker: AnnotationPoint | None = None
    calibration_state: CalibrationState | None = None
    opening: Opening | None = None
    pending_corners: int = 0


class ProjectSession:
    """
    One user's annotation session across all loaded panoramas.

    Owns the annotation store and the calibration; everything else is
    stateless and reads the store. The only transient state is the
    interaction mode and an uncommitted opening draft.
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()
        self.analyzer = ShapeAnalyzer(self.config.shapes)
        self.projector = FloorPlanProjector(self.config.floor_plan)
        self.detector = CandidateRoomDetector(self.config.detection)
        self.reset()

        self._handlers: dict[InteractionMode, Callable[[int, Point3D], ClickResult]] = {
            InteractionMode.VIEW: self._click_view,
            InteractionMode.POINT: self._click_point,
            InteractionMode.CALIBRATE: self._click_calibrate,
            InteractionMode.DOOR: self._click_opening,
            InteractionMode.WINDOW: self._click_opening,
            InteractionMode.OPENING: self._click_opening,
        }

    def reset(self) -> None:
        """Drop every image, annotation and the calibration."""
        self.store = AnnotationStore(self.config.annotation)
        self.calibration = CalibrationEngine(self.store)
        self.images: list[ImageInfo] = []
        self.settings = ViewerSettings()
        self.mode = InteractionMode.VIEW
        self.opening_draft = OpeningDraft()

    # --- Images -----------------------------------------------------------

    def add_image(self, name: str) -> ImageInfo:
        info = ImageInfo(id=len(self.images), name=name)
        self.images.append(info)
        return info

    def image_name(self, image_index: int) -> str | None:
        for img in self.images:
            if img.id == image_index:
                return img.name
        return None

    # --- Modes ------------------------------------------------------------

    def set_mode(self, mode: InteractionMode) -> None:
        self.opening_draft.cancel()
        if mode in OPENING_MODES:
            self.opening_draft.set_type(OPENING_MODES[mode])
        self.mode = mode
        logger.info("Mode: %s", mode.value)

    def click(self, image_index: int, position: Point3D) -> ClickResult:
        """Handle a resolved 3D click according to the active mode."""
        return self._handlers[self.mode](image_index, position)

    def _click_view(self, image_index: int, position: Point3D) -> ClickResult:
        return ClickResult(mode=self.mode)

    def _click_point(self, image_index: int, position: Point3D) -> ClickResult:
        placement = self.store.place_point(image_index, position)
        return ClickResult(mode=self.mode, placement=placement)

    def _click_calibrate(self, image_index: int, position: Point3D) -> ClickResult:
        marker = self.calibration.add_marker(image_index, position)
        return ClickResult(
            mode=self.mode,
            marker=marker,
            calibration_state=self.calibration.state(image_index),
        )

    def _click_opening(self, image_index: int, position: Point3D) -> ClickResult:
        corners = self.opening_draft.add(position)
        if corners is None:
            return ClickResult(mode=self.mode, pending_corners=len(self.opening_draft.corners))
        opening = self.store.add_opening(image_index, self.opening_draft.opening_type, corners)
        return ClickResult(mode=self.mode, opening=opening)

    def cancel_opening(self) -> int:
        return self.opening_draft.cancel()

    # --- Calibration ------------------------------------------------------

    def finish_calibration(self, image_index: int, physical_length: float | None) -> Calibration:
        calibration = self.calibration.finish(image_index, physical_length)
        self.settings.calibration_value = calibration.reference_physical_length
        self.set_mode(InteractionMode.POINT)
        return calibration

    def cancel_calibration(self, image_index: int) -> None:
        self.calibration.cancel(image_index)
        self.set_mode(InteractionMode.VIEW)

    # --- Measurement ------------------------------------------------------

    def measure_room(self, image_index: int, surface_id: int | None = None) -> RoomMeasurement:
        """Shape and dimensions of a surface, converted with the calibration."""
        data = self.store.peek(image_index)
        if not data.surfaces:
            raise InsufficientPointsError(
                "No surface yet; close the outline by clicking near the first point"
            )

        surface: Surface | None
        if surface_id is None:
            surface = data.surfaces[0]
        else:
            surface = data.get_surface(surface_id)
            if surface is None:
                raise MissingReferenceError(
                    f"Surface {surface_id} does not exist on image {image_index}"
                )

        points = [p.position for p in self.store.resolve_points(image_index, surface.point_ids)]
        if len(points) < 3:
            raise InsufficientPointsError("A surface needs at least 3 points to measure")

        shape, dims = self.analyzer.measure(points)
        cal = self.calibration
        physical = RoomDimensions(
            width=cal.to_physical_units(dims.width),
            length=cal.to_physical_units(dims.length),
            area=cal.to_physical_area(dims.area),
            perimeter=cal.to_physical_units(dims.perimeter),
            side_lengths=[cal.to_physical_units(s) for s in dims.side_lengths],
        )
        logger.info(
            "Room on image %d (%s): area %.2f, perimeter %.2f %s",
            image_index, shape.value, physical.area, physical.perimeter, cal.unit,
        )
        return RoomMeasurement(
            surface_id=surface.id,
            shape=shape,
            dimensions=dims,
            physical=physical,
            unit=cal.unit,
            is_calibrated=cal.is_calibrated,
        )

    # --- Floor plan -------------------------------------------------------

    def floor_plan(self, image_index: int) -> FloorPlanScene:
        return self.projector.project(
            self.store.peek(image_index),
            self.calibration,
            title=self.image_name(image_index),
        )

    def floor_plan_svg(self, image_index: int) -> str:
        scene = self.floor_plan(image_index)
        if scene.is_empty:
            raise NoDataToExportError(scene.message)
        return render_svg(scene)

    # --- Auto detection ---------------------------------------------------

    def import_candidates(
        self,
        image_index: int,
        candidates: list[PolygonCandidate],
        image_size: tuple[float, float] | None = None,
    ) -> ImportedLayout:
        layout = self.detector.detect(candidates, image_size)
        return self.detector.import_layout(self.store, image_index, layout)

    def detect_room(
        self,
        image_index: int,
        source: CandidateSource,
        image: Any,
        image_size: tuple[float, float] | None = None,
    ) -> ImportedLayout:
        layout = self.detector.detect_from(source, image, image_size)
        return self.detector.import_layout(self.store, image_index, layout)

    # --- Export -----------------------------------------------------------

    def export_document(self, timestamp: str | None = None) -> ExportDocument:
        return export_service.build_export(
            self.store, self.calibration, self.images, self.settings, timestamp,
        )

    def export_json(self, timestamp: str | None = None) -> str:
        return export_service.to_json(self.export_document(timestamp))

    @classmethod
    def from_export(
        cls, document: ExportDocument, config: EngineConfig | None = None,
    ) -> ProjectSession:
        session = cls(config)
        session.load_export(document)
        return session

    def load_export(self, document: ExportDocument) -> None:
        """Replace the whole session with the contents of an export."""
        self.reset()
        self.images, self.settings = export_service.restore_export(
            document, self.store, self.calibration,
        )
