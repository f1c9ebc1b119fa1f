"""FastAPI application factory."""

from __future__ import annotations
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from panoplan.api.routes import router
from panoplan.core.errors import (
    PanoplanError, InsufficientPointsError, InvalidCalibrationValueError,
    TooManyMarkersError, MissingReferenceError, NoDataToExportError,
    InvalidOpeningError,
)

logger = logging.getLogger(__name__)

# Domain error -> (HTTP status, severity shown to the user)
ERROR_STATUS: dict[type[PanoplanError], tuple[int, str]] = {
    InsufficientPointsError: (422, "info"),
    InvalidCalibrationValueError: (422, "warning"),
    InvalidOpeningError: (422, "warning"),
    TooManyMarkersError: (409, "warning"),
    MissingReferenceError: (404, "error"),
    NoDataToExportError: (404, "warning"),
}


async def panoplan_error_handler(request: Request, exc: PanoplanError) -> JSONResponse:
    status, severity = ERROR_STATUS.get(type(exc), (400, "error"))
    logger.info("%s %s -> %s: %s", request.method, request.url.path, type(exc).__name__, exc)
    return JSONResponse(
        status_code=status,
        content={"detail": str(exc), "error": type(exc).__name__, "severity": severity},
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="Panorama Floor Plan",
        description="Room measurement and floor plans from annotated 360° panoramas",
        version="0.1.0",
    )

    # CORS: allow the viewer dev server
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(PanoplanError, panoplan_error_handler)
    app.include_router(router, prefix="/api")

    return app


app = create_app()
