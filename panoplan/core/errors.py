"""Error taxonomy for the measurement engine.

Every failure here is recoverable: the session stays usable and data that
was already committed is left untouched.
"""

from __future__ import annotations


class PanoplanError(Exception):
    """Base class for all engine errors."""


class InsufficientPointsError(PanoplanError):
    """A surface or shape computation needs at least three points."""


class InvalidCalibrationValueError(PanoplanError):
    """Calibration cannot finish with the given length or markers."""


class TooManyMarkersError(PanoplanError):
    """Both calibration markers are already placed."""


class MissingReferenceError(PanoplanError):
    """An entity references a point id that no longer exists."""


class NoDataToExportError(PanoplanError):
    """Export or floor-plan generation was requested with nothing annotated."""


class InvalidOpeningError(PanoplanError):
    """An opening must be built from exactly four corners."""
