"""Calibration engine — two markers and a known length give the unit scale."""

from __future__ import annotations
import logging
import math

from panoplan.models import (
    AnnotationPoint, Calibration, CalibrationState, Point3D,
)
from panoplan.core.errors import InvalidCalibrationValueError, TooManyMarkersError
from panoplan.core.store import AnnotationStore

logger = logging.getLogger(__name__)

CALIBRATION_MARKERS = 2
PHYSICAL_UNIT = "cm"
ABSTRACT_UNIT = "u"


class CalibrationEngine:
    """
    Maps abstract 3D distances to centimeters.

    Markers are ordinary points flagged as calibration markers in one
    image's annotation set; the resulting scale applies to every image.
    """

    def __init__(self, store: AnnotationStore) -> None:
        self.store = store
        self.calibration = Calibration()

    @property
    def scale(self) -> float:
        return self.calibration.scale

    @property
    def is_calibrated(self) -> bool:
        return self.calibration.is_calibrated

    @property
    def unit(self) -> str:
        return PHYSICAL_UNIT if self.is_calibrated else ABSTRACT_UNIT

    def markers(self, image_index: int) -> list[AnnotationPoint]:
        return self.store.peek(image_index).calibration_markers

    def state(self, image_index: int) -> CalibrationState:
        if self.calibration.is_calibrated:
            return CalibrationState.CALIBRATED
        count = len(self.markers(image_index))
        if count >= CALIBRATION_MARKERS:
            return CalibrationState.READY_TO_FINISH
        if count > 0:
            return CalibrationState.COLLECTING
        return CalibrationState.UNCALIBRATED

    # --- Transitions ------------------------------------------------------

    def add_marker(self, image_index: int, position: Point3D) -> AnnotationPoint:
        existing = self.markers(image_index)
        if len(existing) >= CALIBRATION_MARKERS:
            raise TooManyMarkersError(
                "Two calibration markers are already placed; cancel to start over"
            )

        marker = self.store.add_point(image_index, position, is_calibration_marker=True)

        if len(existing) == 1:
            first = existing[0]
            distance = first.position.distance_to(marker.position)
            # A finished calibration keeps its span until finish replaces the scale
            if not self.calibration.is_calibrated:
                self.calibration.reference_unit_distance = distance
            self.store.add_line(image_index, first.id, marker.id, is_calibration_line=True)
            logger.info("Calibration reference spans %.2f units", distance)

        logger.info("Calibration marker %d/%d placed", len(existing) + 1, CALIBRATION_MARKERS)
        return marker

    def finish(self, image_index: int, physical_length: float | None) -> Calibration:
        """Fix the scale from the marker distance and a known length in cm."""
        markers = self.markers(image_index)
        if len(markers) != CALIBRATION_MARKERS:
            raise InvalidCalibrationValueError(
                f"Exactly {CALIBRATION_MARKERS} calibration markers are needed, "
                f"found {len(markers)}"
            )
        if physical_length is None or not math.isfinite(physical_length) or physical_length <= 0:
            raise InvalidCalibrationValueError(
                f"Reference length must be positive, got {physical_length!r}"
            )

        distance = markers[0].position.distance_to(markers[1].position)
        if distance <= 0:
            raise InvalidCalibrationValueError("Calibration markers coincide")

        self.calibration = Calibration(
            reference_unit_distance=distance,
            reference_physical_length=physical_length,
            scale=physical_length / distance,
            is_calibrated=True,
        )
        logger.info(
            "Calibration finished: %g cm = %.0f units (scale %.4f cm/unit)",
            physical_length, distance, self.calibration.scale,
        )
        return self.calibration

    def cancel(self, image_index: int) -> None:
        """Forget markers and scale; other annotations stay as they are."""
        removed = self.store.remove_calibration(image_index)
        self.calibration = Calibration()
        logger.info("Calibration cancelled, %d marker(s) removed", removed)

    def restore(self, calibration: Calibration) -> None:
        self.calibration = calibration.model_copy()

    # --- Conversions ------------------------------------------------------

    def to_physical_units(self, raw_distance: float) -> float:
        if not self.calibration.is_calibrated:
            return raw_distance
        return raw_distance * self.calibration.scale

    def to_physical_area(self, raw_area: float) -> float:
        if not self.calibration.is_calibrated:
            return raw_area
        return raw_area * self.calibration.scale ** 2

    def format_distance(self, raw_distance: float) -> str:
        """Label text for a 3D distance: '1.23m' / '80cm' calibrated, '250' otherwise."""
        if not self.calibration.is_calibrated:
            return f"{raw_distance:.0f}"
        cm = raw_distance * self.calibration.scale
        if cm >= 100:
            return f"{cm / 100:.2f}m"
        return f"{cm:.0f}cm"
