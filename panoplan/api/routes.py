"""FastAPI route definitions."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from panoplan.models import (
    AnnotationPoint, ExportDocument, FloorPlanScene, ImageAnnotationSet,
    ImageInfo, Opening, RoomMeasurement, Surface,
)
from panoplan.services.project_service import ClickResult, ProjectSession
from panoplan.api.schemas import (
    ImageCreate, ModeRequest, ClickRequest, MoveRequest, MarkerRequest,
    FinishCalibrationRequest, CancelCalibrationRequest, CalibrationResponse,
    OpeningCreate, OpeningUpdate, ClearResponse, CopySurfaceRequest,
    DetectionRequest, DetectionResponse, StatisticsResponse, ImportResponse,
)

router = APIRouter()

# Shared session instance
_session = ProjectSession()


def get_session() -> ProjectSession:
    return _session


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


# --- Images ---------------------------------------------------------------

@router.post("/images", response_model=ImageInfo)
async def add_image(body: ImageCreate, session: ProjectSession = Depends(get_session)) -> ImageInfo:
    return session.add_image(body.name)


@router.get("/images", response_model=list[ImageInfo])
async def list_images(session: ProjectSession = Depends(get_session)) -> list[ImageInfo]:
    return session.images


@router.get("/images/{image_index}/annotations", response_model=ImageAnnotationSet)
async def get_annotations(
    image_index: int, session: ProjectSession = Depends(get_session),
) -> ImageAnnotationSet:
    return session.store.peek(image_index)


@router.get("/images/{image_index}/statistics", response_model=StatisticsResponse)
async def get_statistics(
    image_index: int, session: ProjectSession = Depends(get_session),
) -> StatisticsResponse:
    return StatisticsResponse(
        annotations=session.store.statistics(image_index),
        openings=session.store.opening_statistics(image_index),
    )


# --- Interaction ----------------------------------------------------------

@router.put("/mode")
async def set_mode(body: ModeRequest, session: ProjectSession = Depends(get_session)) -> dict[str, str]:
    session.set_mode(body.mode)
    return {"mode": session.mode.value}


@router.post("/images/{image_index}/clicks", response_model=ClickResult)
async def click(
    image_index: int, body: ClickRequest, session: ProjectSession = Depends(get_session),
) -> ClickResult:
    """Apply a sphere click in the current interaction mode."""
    return session.click(image_index, body.position)


@router.post("/openings/cancel")
async def cancel_opening(session: ProjectSession = Depends(get_session)) -> dict[str, int]:
    return {"dropped": session.cancel_opening()}


# --- Points ---------------------------------------------------------------

@router.patch("/images/{image_index}/points/{point_id}", response_model=AnnotationPoint)
async def move_point(
    image_index: int, point_id: int, body: MoveRequest,
    session: ProjectSession = Depends(get_session),
) -> AnnotationPoint:
    return session.store.move_point(image_index, point_id, body.position)


@router.delete("/images/{image_index}/points/{point_id}", response_model=AnnotationPoint)
async def delete_point(
    image_index: int, point_id: int, session: ProjectSession = Depends(get_session),
) -> AnnotationPoint:
    return session.store.remove_point_cascade(image_index, point_id)


@router.delete("/images/{image_index}/annotations", response_model=ClearResponse)
async def clear_all(image_index: int, session: ProjectSession = Depends(get_session)) -> ClearResponse:
    return ClearResponse(result=session.store.clear_all(image_index))


@router.delete("/images/{image_index}/lines", response_model=ClearResponse)
async def clear_lines(image_index: int, session: ProjectSession = Depends(get_session)) -> ClearResponse:
    return ClearResponse(result=session.store.clear_lines(image_index))


@router.post("/images/{image_index}/surfaces/copy-to-floor", response_model=Surface)
async def copy_surface_to_floor(
    image_index: int, body: CopySurfaceRequest, session: ProjectSession = Depends(get_session),
) -> Surface:
    return session.store.copy_surface_to_floor(image_index, body.surface_id)


# --- Calibration ----------------------------------------------------------

def _calibration_response(session: ProjectSession, image_index: int) -> CalibrationResponse:
    engine = session.calibration
    distance = engine.calibration.reference_unit_distance
    return CalibrationResponse(
        calibration=engine.calibration,
        state=engine.state(image_index),
        unit=engine.unit,
        reference_label=engine.format_distance(distance) if distance > 0 else None,
    )


@router.get("/calibration", response_model=CalibrationResponse)
async def get_calibration(
    image_index: int = 0, session: ProjectSession = Depends(get_session),
) -> CalibrationResponse:
    return _calibration_response(session, image_index)


@router.post("/calibration/markers", response_model=CalibrationResponse)
async def add_marker(
    body: MarkerRequest, session: ProjectSession = Depends(get_session),
) -> CalibrationResponse:
    session.calibration.add_marker(body.image_index, body.position)
    return _calibration_response(session, body.image_index)


@router.post("/calibration/finish", response_model=CalibrationResponse)
async def finish_calibration(
    body: FinishCalibrationRequest, session: ProjectSession = Depends(get_session),
) -> CalibrationResponse:
    session.finish_calibration(body.image_index, body.physical_length)
    return _calibration_response(session, body.image_index)


@router.post("/calibration/cancel", response_model=CalibrationResponse)
async def cancel_calibration(
    body: CancelCalibrationRequest, session: ProjectSession = Depends(get_session),
) -> CalibrationResponse:
    session.cancel_calibration(body.image_index)
    return _calibration_response(session, body.image_index)


# --- Openings -------------------------------------------------------------

@router.post("/images/{image_index}/openings", response_model=Opening)
async def create_opening(
    image_index: int, body: OpeningCreate, session: ProjectSession = Depends(get_session),
) -> Opening:
    return session.store.add_opening(image_index, body.type, body.points)


@router.patch("/images/{image_index}/openings/{opening_id}", response_model=Opening)
async def update_opening(
    image_index: int, opening_id: int, body: OpeningUpdate,
    session: ProjectSession = Depends(get_session),
) -> Opening:
    return session.store.update_opening_properties(
        image_index, opening_id, body.name, body.material, body.notes,
    )


@router.delete("/images/{image_index}/openings/{opening_id}", response_model=Opening)
async def delete_opening(
    image_index: int, opening_id: int, session: ProjectSession = Depends(get_session),
) -> Opening:
    return session.store.remove_opening(image_index, opening_id)


@router.delete("/images/{image_index}/openings", response_model=ClearResponse)
async def clear_openings(image_index: int, session: ProjectSession = Depends(get_session)) -> ClearResponse:
    return ClearResponse(result=session.store.clear_openings(image_index))


# --- Analysis -------------------------------------------------------------

@router.get("/images/{image_index}/measurement", response_model=RoomMeasurement)
async def measure_room(
    image_index: int, surface_id: int | None = None,
    session: ProjectSession = Depends(get_session),
) -> RoomMeasurement:
    return session.measure_room(image_index, surface_id)


@router.get("/images/{image_index}/floorplan", response_model=FloorPlanScene)
async def floor_plan(image_index: int, session: ProjectSession = Depends(get_session)) -> FloorPlanScene:
    return session.floor_plan(image_index)


@router.get("/images/{image_index}/floorplan.svg")
async def floor_plan_svg(image_index: int, session: ProjectSession = Depends(get_session)) -> Response:
    return Response(content=session.floor_plan_svg(image_index), media_type="image/svg+xml")


@router.post("/images/{image_index}/detections", response_model=DetectionResponse)
async def import_detections(
    image_index: int, body: DetectionRequest, session: ProjectSession = Depends(get_session),
) -> DetectionResponse:
    """Import room and opening candidates found by an image-analysis service."""
    size = None
    if body.image_width is not None and body.image_height is not None:
        size = (body.image_width, body.image_height)
    imported = session.import_candidates(image_index, body.candidates, size)
    return DetectionResponse(surface=imported.surface, openings=imported.openings)


# --- Export ---------------------------------------------------------------

@router.get("/export")
async def export_data(session: ProjectSession = Depends(get_session)) -> Response:
    return Response(content=session.export_json(), media_type="application/json")


@router.post("/import", response_model=ImportResponse)
async def import_data(
    document: ExportDocument, session: ProjectSession = Depends(get_session),
) -> ImportResponse:
    session.load_export(document)
    return ImportResponse(
        image_count=len(document.image_data),
        is_calibrated=session.calibration.is_calibrated,
    )
