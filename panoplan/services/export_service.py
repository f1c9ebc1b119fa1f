"""Export and import of the whole session as a JSON document."""

from __future__ import annotations
import logging
from datetime import datetime, timezone

from panoplan.models import (
    Calibration, ExportDocument, ExportSettings, ExportSummary, ImageExport,
    ImageAnnotationSet, ImageInfo, ViewerSettings,
)
from panoplan.core.calibration import CalibrationEngine
from panoplan.core.errors import NoDataToExportError
from panoplan.core.store import AnnotationStore

logger = logging.getLogger(__name__)

EXPORT_VERSION = "2.0"


def build_export(
    store: AnnotationStore,
    calibration: CalibrationEngine,
    images: list[ImageInfo],
    settings: ViewerSettings,
    timestamp: str | None = None,
) -> ExportDocument:
    """Snapshot every image's annotations; refuses when nothing is annotated."""
    sets = store.images()
    if all(data.is_empty for data in sets):
        raise NoDataToExportError("Nothing has been annotated yet")

    names = {img.id: img.name for img in images}
    image_data: dict[int, ImageExport] = {}
    for data in sets:
        image_data[data.image_index] = ImageExport(
            image_name=names.get(data.image_index, f"Image_{data.image_index}"),
            image_id=data.image_index,
            points=data.points,
            lines=data.lines,
            surfaces=data.surfaces,
            openings=data.openings,
            statistics=data.statistics(),
            next_point_id=data.next_point_id,
            next_line_id=data.next_line_id,
            next_surface_id=data.next_surface_id,
            next_opening_id=data.next_opening_id,
        )

    cal = calibration.calibration
    document = ExportDocument(
        version=EXPORT_VERSION,
        timestamp=timestamp or datetime.now(timezone.utc).isoformat(),
        total_images=len(images),
        images=images,
        settings=ExportSettings(
            show_helpers=settings.show_helpers,
            point_size=settings.point_size,
            line_width=settings.line_width,
            scale=cal.scale,
            is_calibrated=cal.is_calibrated,
            calibration_value=settings.calibration_value,
            reference_unit_distance=cal.reference_unit_distance,
        ),
        image_data=image_data,
        summary=ExportSummary(
            total_points=sum(len(d.points) for d in sets),
            total_lines=sum(len(d.lines) for d in sets),
            total_surfaces=sum(len(d.surfaces) for d in sets),
            total_openings=sum(len(d.openings) for d in sets),
            images_with_data=sum(1 for d in sets if not d.is_empty),
        ),
    )
    logger.info(
        "Exported %d image(s): %d points, %d lines, %d surfaces, %d openings",
        document.summary.images_with_data, document.summary.total_points,
        document.summary.total_lines, document.summary.total_surfaces,
        document.summary.total_openings,
    )
    return document


def to_json(document: ExportDocument) -> str:
    return document.model_dump_json(by_alias=True, indent=2)


def parse_export(text: str | bytes) -> ExportDocument:
    return ExportDocument.model_validate_json(text)


def restore_export(
    document: ExportDocument,
    store: AnnotationStore,
    calibration: CalibrationEngine,
) -> tuple[list[ImageInfo], ViewerSettings]:
    """Load a document into an empty store and calibration engine."""
    for index, entry in document.image_data.items():
        store.load(ImageAnnotationSet(
            image_index=index,
            points=[p.model_copy(deep=True) for p in entry.points],
            lines=[ln.model_copy(deep=True) for ln in entry.lines],
            surfaces=[s.model_copy(deep=True) for s in entry.surfaces],
            openings=[o.model_copy(deep=True) for o in entry.openings],
            next_point_id=entry.next_point_id,
            next_line_id=entry.next_line_id,
            next_surface_id=entry.next_surface_id,
            next_opening_id=entry.next_opening_id,
        ))

    s = document.settings
    calibration.restore(Calibration(
        reference_unit_distance=s.reference_unit_distance,
        reference_physical_length=s.calibration_value if s.is_calibrated else 0.0,
        scale=s.scale,
        is_calibrated=s.is_calibrated,
    ))

    settings = ViewerSettings(
        show_helpers=s.show_helpers,
        point_size=s.point_size,
        line_width=s.line_width,
        calibration_value=s.calibration_value,
    )
    logger.info("Imported %d image(s) from export v%s", len(document.image_data), document.version)
    return list(document.images), settings
