from .geometry import (
    Point3D, PixelPoint, BoundingBox2D,
    distance_3d, centroid, edge_lengths, shoelace_area, signed_shoelace_area,
    polygon_area_2d, bounding_box_2d, sort_by_angle, point_in_polygon,
)
from .annotations import (
    AnnotationPoint, Line, Surface, Opening, OpeningType, OpeningDimensions,
    OpeningProperties, ImageAnnotationSet, ImageStatistics, OpeningStatistics,
)
from .calibration import Calibration, CalibrationState
from .measurement import ShapeType, RoomDimensions, RoomMeasurement
from .floorplan import (
    FloorPlanScene, PlanPoint, PlanOutline, PlanFill, PlanLabel, LabelKind,
    SceneStatus,
)
from .candidates import (
    PolygonCandidate, CandidateKind, DetectedLayout, DetectedOpening,
)
from .parameters import (
    ViewerSettings, AnnotationParams, ShapeParams, FloorPlanParams,
    DetectionParams, EngineConfig,
)
from .export import (
    ImageInfo, ExportSettings, ImageExport, ExportSummary, ExportDocument,
)

__all__ = [
    "Point3D", "PixelPoint", "BoundingBox2D",
    "distance_3d", "centroid", "edge_lengths", "shoelace_area",
    "signed_shoelace_area", "polygon_area_2d", "bounding_box_2d",
    "sort_by_angle", "point_in_polygon",
    "AnnotationPoint", "Line", "Surface", "Opening", "OpeningType",
    "OpeningDimensions", "OpeningProperties", "ImageAnnotationSet",
    "ImageStatistics", "OpeningStatistics",
    "Calibration", "CalibrationState",
    "ShapeType", "RoomDimensions", "RoomMeasurement",
    "FloorPlanScene", "PlanPoint", "PlanOutline", "PlanFill", "PlanLabel",
    "LabelKind", "SceneStatus",
    "PolygonCandidate", "CandidateKind", "DetectedLayout", "DetectedOpening",
    "ViewerSettings", "AnnotationParams", "ShapeParams", "FloorPlanParams",
    "DetectionParams", "EngineConfig",
    "ImageInfo", "ExportSettings", "ImageExport", "ExportSummary",
    "ExportDocument",
]
